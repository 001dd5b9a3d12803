"""
Name: Core functionality manager.
Description: Contains core functionality for loading OpenAPI documents, generating tools from them, and
starting MCP servers or invoking single tools. Orchestrates the different components of openapi-mcp.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from .constants import DEFAULT_TIMEOUT
from .exceptions import InvocationError
from .mcp.config import MCPServerConfig
from .mcp.server import MCPServer, create_mcp_server
from .openapi.invoker import InvocationResult
from .openapi.models import ConverterOptions
from .openapi.spec import OpenAPIDocument
from .openapi.tools import OpenAPIToolkit

logger = logging.getLogger(__name__)


def load_document(location: str, v2: Optional[bool] = None) -> OpenAPIDocument:
    """Load an OpenAPI document from a file path or URL.

    Args:
        location: File path or http(s) URL
        v2: Force the Swagger 2.0 upgrade. Detected from the document when None.

    Returns:
        The document
    """
    logger.info(f"Loading OpenAPI document from {location}")
    document = OpenAPIDocument.load(location, v2=v2)
    logger.debug(f"Loaded {document.get_title()} {document.get_version()}")
    return document


def create_toolkit(
    location: str,
    v2: Optional[bool] = None,
    options: Optional[ConverterOptions] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> OpenAPIToolkit:
    """Load a document and generate its tools.

    Raises:
        DocumentError: If the document cannot be loaded
        ConversionError: If any operation cannot be converted
    """
    document = load_document(location, v2=v2)
    return OpenAPIToolkit(document, options=options, timeout=timeout)


def list_tools(
    location: str,
    v2: Optional[bool] = None,
    options: Optional[ConverterOptions] = None,
) -> List[Dict[str, Any]]:
    """Get the MCP listing of every tool a document produces."""
    return create_toolkit(location, v2=v2, options=options).get_tool_definitions()


def call_tool(
    location: str,
    tool_name: str,
    arguments: Mapping[str, Any],
    v2: Optional[bool] = None,
    options: Optional[ConverterOptions] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> InvocationResult:
    """Invoke one tool of a document.

    Args:
        location: File path or URL of the document
        tool_name: Name of the tool, including any prefix
        arguments: Argument values keyed by wire name
        v2: Force the Swagger 2.0 upgrade
        options: Converter options
        timeout: Request timeout in seconds

    Returns:
        The invocation result

    Raises:
        InvocationError: If the tool does not exist or the call fails
    """
    toolkit = create_toolkit(location, v2=v2, options=options, timeout=timeout)
    tool = toolkit.get_tool(tool_name)
    if tool is None:
        raise InvocationError(tool_name, "no such tool")
    return tool.execute(arguments)


def start_mcp_server(
    location: str,
    config: MCPServerConfig,
    v2: Optional[bool] = None,
    options: Optional[ConverterOptions] = None,
) -> MCPServer:
    """Start an MCP server for an OpenAPI document.

    Blocks until the server stops.

    Args:
        location: File path or URL of the document
        config: Server configuration
        v2: Force the Swagger 2.0 upgrade
        options: Converter options

    Returns:
        The server, once it has stopped
    """
    document = load_document(location, v2=v2)
    server = create_mcp_server(document, config=config, options=options)
    server.run()
    return server
