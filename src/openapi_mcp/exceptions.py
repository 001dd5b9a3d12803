"""
Name: Exceptions.
Description: Error taxonomy for openapi-mcp. Document errors stop loading, conversion errors abort the
whole tool build, and invocation/configuration errors are scoped to a single tool call.
"""

from typing import Optional


class OpenAPIMCPError(Exception):
    """Base class for all openapi-mcp errors."""


class DocumentError(OpenAPIMCPError, ValueError):
    """The OpenAPI document is missing, unreadable, or structurally unusable."""


class ConversionError(OpenAPIMCPError):
    """Converting one operation into a tool definition failed."""

    def __init__(self, path: str, method: str, cause: Optional[BaseException] = None):
        self.path = path
        self.method = method
        self.cause = cause
        message = f"failed to convert operation {method.upper()} {path}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class InvocationError(OpenAPIMCPError):
    """A single tool call could not be turned into an HTTP exchange."""

    def __init__(self, tool_name: str, message: str, cause: Optional[BaseException] = None):
        self.tool_name = tool_name
        self.cause = cause
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(f"{tool_name}: {message}")


class ConfigurationError(InvocationError):
    """No usable server address could be resolved for a tool call."""

    def __init__(self, tool_name: str, message: str = "no server address provided"):
        super().__init__(tool_name, message)
