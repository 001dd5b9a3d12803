"""OpenAPI handling module for openapi-mcp."""

from .invoker import InvocationResult, RequestInvoker, parse_arguments
from .models import (
    ArgumentDescriptor,
    ArgumentKey,
    ArgumentLocation,
    ConverterOptions,
    OpenAPIOperation,
    ToolDefinition,
)
from .spec import OpenAPIDocument
from .tools import FastMCPOpenAPITool, OpenAPITool, OpenAPIToolkit, build_tool_definition

__all__ = [
    "ArgumentDescriptor",
    "ArgumentKey",
    "ArgumentLocation",
    "ConverterOptions",
    "FastMCPOpenAPITool",
    "InvocationResult",
    "OpenAPIDocument",
    "OpenAPIOperation",
    "OpenAPITool",
    "OpenAPIToolkit",
    "RequestInvoker",
    "ToolDefinition",
    "build_tool_definition",
    "parse_arguments",
]
