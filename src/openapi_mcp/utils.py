"""
Name: Utility functions.
Description: Common utility functions for openapi-mcp, including logging setup, environment loading, and
redaction of credentials in logged tool arguments.
"""

import logging
import os
import re
import sys
from typing import Any, Dict, Mapping, Optional

from dotenv import load_dotenv

from .constants import DEFAULT_TIMEOUT, ENV_TIMEOUT, ENV_TOOL_PREFIX

# Configure logging
logger = logging.getLogger(__name__)

_SENSITIVE_KEYS = re.compile(
    r"(auth_|token|secret|api[_-]?key|password|authorization|cookie)", re.IGNORECASE
)

REDACTED = "***REDACTED***"


def configure_logging(debug: bool = False):
    """Configure logging for the application.

    Logs go to stderr, stdout carries the stdio MCP transport.

    Args:
        debug: Whether to enable debug mode
    """
    logging_level = logging.DEBUG if debug else logging.INFO
    root_logger = logging.getLogger()
    root_logger.setLevel(logging_level)

    # Check if handlers are already configured to prevent duplicates
    if root_logger.handlers:
        # Update existing handlers with the current log level
        for handler in root_logger.handlers:
            if isinstance(handler, logging.StreamHandler):
                handler.setLevel(logging_level)
        return

    # Create console handler
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging_level)

    # Create formatter
    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    console_handler.setFormatter(formatter)

    # Add handler to the logger
    root_logger.addHandler(console_handler)


def setup_environment(debug: bool = False):
    """Setup the environment for the application.

    - Configures logging
    - Loads environment variables from .env file
    """
    # Configure logging first
    configure_logging(debug)

    load_dotenv()
    logger.debug("Loaded environment variables from .env file")


def redact_arguments(arguments: Mapping[str, Any]) -> Dict[str, Any]:
    """Copy a tool argument bag with credential values masked.

    Args:
        arguments: Argument values keyed by wire name

    Returns:
        The redacted copy, safe to log
    """
    redacted: Dict[str, Any] = {}
    for key, value in arguments.items():
        if _SENSITIVE_KEYS.search(key):
            redacted[key] = REDACTED
        elif isinstance(value, dict):
            redacted[key] = redact_arguments(value)
        else:
            redacted[key] = value
    return redacted


def get_env_tool_prefix() -> str:
    return os.environ.get(ENV_TOOL_PREFIX, "")


def get_env_timeout(default: Optional[float] = None) -> float:
    """Read the request timeout from the environment.

    Args:
        default: Value used when the variable is unset. Falls back to
            DEFAULT_TIMEOUT.

    Returns:
        Timeout in seconds
    """
    fallback = DEFAULT_TIMEOUT if default is None else default
    value = os.environ.get(ENV_TIMEOUT)
    if not value:
        return fallback
    try:
        return float(value)
    except ValueError:
        logger.warning(f"Ignoring invalid {ENV_TIMEOUT} value: {value}")
        return fallback
