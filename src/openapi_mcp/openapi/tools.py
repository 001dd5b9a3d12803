"""
Name: OpenAPI tools.
Description: Implements the tool builder plus the OpenAPITool, OpenAPIToolkit and FastMCPOpenAPITool classes
for turning every operation of an OpenAPI document into an MCP tool. Each tool pairs a generated
definition (name, arguments, description) with a RequestInvoker that performs the HTTP call.
"""

import json
import logging
from typing import Any, Dict, List, Mapping, Optional

import anyio
import httpx
from fastmcp.exceptions import ToolError
from fastmcp.tools.tool import Tool, ToolResult
from mcp.types import TextContent
from pydantic import PrivateAttr

from ..constants import (
    DEFAULT_SERVER_NAME,
    DEFAULT_TIMEOUT,
    DEPRECATION_WARNING,
    RESPONSES_HEADING,
    SERVER_ADDR,
    SERVER_ADDR_DESCRIPTION,
)
from ..exceptions import ConversionError, OpenAPIMCPError
from .auth.auth_helpers import collect_api_keys, map_security
from .invoker import InvocationResult, RequestInvoker
from .models import (
    ArgumentDescriptor,
    ArgumentKey,
    ConverterOptions,
    OpenAPIOperation,
    ToolDefinition,
)
from .parameters import map_parameters, map_request_body
from .schema import walk_schema
from .spec import OpenAPIDocument

logger = logging.getLogger(__name__)


def server_argument(servers: List[str]) -> ArgumentDescriptor:
    """Build the ``openapi|server_addr`` argument.

    No servers: a required free-form string. One server: optional, defaulting
    to and constrained to that URL. Several servers: required, constrained to
    the declared URLs.
    """
    key = ArgumentKey.openapi(SERVER_ADDR)

    if not servers:
        return ArgumentDescriptor(key=key, required=True, description=SERVER_ADDR_DESCRIPTION)
    if len(servers) == 1:
        return ArgumentDescriptor(
            key=key,
            required=False,
            description=SERVER_ADDR_DESCRIPTION,
            default=servers[0],
            enum=[servers[0]],
        )
    return ArgumentDescriptor(
        key=key,
        required=True,
        description=SERVER_ADDR_DESCRIPTION,
        enum=list(servers),
    )


def _dump(descriptor: Dict[str, Any]) -> str:
    return json.dumps(descriptor, sort_keys=True, separators=(",", ":"))


def describe_responses(responses: Dict[str, Any]) -> str:
    """Render a synopsis of an operation's responses.

    Args:
        responses: Responses object, keyed by status code

    Returns:
        One paragraph per response, sorted by status code
    """
    lines = []
    for status in sorted(responses, key=str):
        response = responses[status]
        if not isinstance(response, dict):
            continue

        line = f"- status: {status}, description: {response.get('description') or ''}"

        # Swagger 2.0 responses keep their schema on the response itself
        schema = response.get("schema")
        if isinstance(schema, dict) and schema:
            line += f", schema: {_dump(walk_schema(schema))}"

        content = response.get("content")
        if isinstance(content, dict):
            for content_type in sorted(content):
                media_type = content[content_type]
                if isinstance(media_type, dict) and isinstance(media_type.get("schema"), dict):
                    line += (
                        f", content type: {content_type}, "
                        f"schema: {_dump(walk_schema(media_type['schema']))}"
                    )

        lines.append(line)

    return "\n\n".join(lines)


def describe_operation(operation: OpenAPIOperation) -> str:
    """Build a tool description from an operation's summary, description and responses."""
    parts = [part for part in (operation.summary, operation.description) if part]
    if operation.deprecated:
        parts.append(DEPRECATION_WARNING)
    description = "\n\n".join(parts)

    synopsis = describe_responses(operation.responses)
    if synopsis:
        description += f"\n\n{RESPONSES_HEADING}\n\n{synopsis}"
    return description


def build_tool_definition(
    document: OpenAPIDocument,
    operation: OpenAPIOperation,
    options: Optional[ConverterOptions] = None,
) -> ToolDefinition:
    """Build the tool definition for one operation.

    Arguments are ordered parameters, request body, server address, then
    security. When two arguments share a wire name the first one is kept.

    Args:
        document: Document the operation belongs to
        operation: The operation
        options: Converter options

    Returns:
        The tool definition

    Raises:
        ValueError: If a parameter or security scheme is malformed
    """
    options = options or ConverterOptions()
    name = options.tool_name_prefix + document.get_operation_id(
        operation.path, operation.method, operation.spec
    )

    candidates = [
        *map_parameters(list(operation.parameters)),
        *map_request_body(operation.request_body),
        server_argument(list(operation.servers)),
        *map_security(list(operation.security), document.get_security_schemes()),
    ]

    arguments = []
    seen = set()
    for argument in candidates:
        if argument.name in seen:
            logger.debug(f"{name}: dropping duplicate argument {argument.name}")
            continue
        seen.add(argument.name)
        arguments.append(argument)

    return ToolDefinition(
        name=name,
        description=describe_operation(operation),
        method=operation.method,
        path=operation.path,
        arguments=arguments,
    )


class OpenAPITool:
    """A generated tool: its definition plus the invoker that executes it."""

    def __init__(self, definition: ToolDefinition, invoker: RequestInvoker):
        self.definition = definition
        self.invoker = invoker

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def description(self) -> str:
        return self.definition.description

    def to_schema(self) -> Dict[str, Any]:
        """Convert the tool to its MCP listing.

        Returns:
            A dict with the tool's name, description and input schema
        """
        return {
            "name": self.definition.name,
            "description": self.definition.description,
            "inputSchema": self.definition.input_schema(),
        }

    def execute(self, arguments: Mapping[str, Any]) -> InvocationResult:
        """Execute the API request (synchronous wrapper).

        Args:
            arguments: Argument values keyed by wire name

        Returns:
            The invocation result
        """
        return anyio.run(self.execute_async, arguments)

    async def execute_async(self, arguments: Mapping[str, Any]) -> InvocationResult:
        """Execute the API request asynchronously.

        Args:
            arguments: Argument values keyed by wire name

        Returns:
            The invocation result
        """
        return await self.invoker.invoke(arguments)


class OpenAPIToolkit:
    """Toolkit for creating tools from an OpenAPI document."""

    def __init__(
        self,
        document: OpenAPIDocument,
        options: Optional[ConverterOptions] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """Initialize an OpenAPI toolkit.

        Args:
            document: The OpenAPI document
            options: Converter options
            client: Client shared by all tools. Each call opens its own client
                when None.
            timeout: Request timeout in seconds

        Raises:
            ConversionError: If any operation cannot be converted
        """
        self.document = document
        self.options = options or ConverterOptions()
        self.client = client
        self.timeout = timeout

        # Create tools
        self.tools = self._create_tools()

    @property
    def server_name(self) -> str:
        return self.options.server_name or self.document.get_title() or DEFAULT_SERVER_NAME

    @property
    def version(self) -> str:
        return self.options.version or self.document.get_version()

    def _create_tool(self, operation: OpenAPIOperation) -> OpenAPITool:
        definition = build_tool_definition(self.document, operation, self.options)
        invoker = RequestInvoker(
            tool_name=definition.name,
            method=operation.method,
            path=operation.path,
            servers=operation.servers,
            api_keys=collect_api_keys(
                list(operation.security), self.document.get_security_schemes()
            ),
            client=self.client,
            timeout=self.timeout,
        )
        return OpenAPITool(definition, invoker)

    def _create_tools(self) -> List[OpenAPITool]:
        """Create tools from the OpenAPI document.

        Returns:
            List of tools, in path order

        Raises:
            ConversionError: On the first operation that fails to convert
        """
        tools = []
        names = set()

        for operation in self.document.iter_operations():
            try:
                tool = self._create_tool(operation)
            except Exception as e:
                raise ConversionError(operation.path, operation.method, e) from e

            if tool.name in names:
                raise ConversionError(
                    operation.path,
                    operation.method,
                    ValueError(f"duplicate tool name {tool.name}"),
                )
            names.add(tool.name)
            tools.append(tool)
            logger.debug(f"Created tool {tool.name} for {operation.method.upper()} {operation.path}")

        logger.info(f"Created {len(tools)} tools from {self.server_name}")
        return tools

    def get_tools(self) -> List[OpenAPITool]:
        """Get all tools from the toolkit.

        Returns:
            A list of tools
        """
        return self.tools

    def get_tool(self, name: str) -> Optional[OpenAPITool]:
        """Get a tool by name.

        Args:
            name: Name of the tool

        Returns:
            The tool if found, None otherwise
        """
        for tool in self.tools:
            if tool.name == name:
                return tool
        return None

    def get_tool_definitions(self) -> List[Dict[str, Any]]:
        """Get the MCP listing of every tool."""
        return [tool.to_schema() for tool in self.tools]


class FastMCPOpenAPITool(Tool):
    """Bridges OpenAPITool -> FastMCP Tool object."""

    _openapi_tool: OpenAPITool = PrivateAttr()

    def __init__(self, openapi_tool: OpenAPITool):
        """Initialize a FastMCPOpenAPITool.

        Args:
            openapi_tool: OpenAPITool instance to wrap
        """
        super().__init__(
            name=openapi_tool.name,
            description=openapi_tool.description,
            parameters=openapi_tool.definition.input_schema(),
        )
        self._openapi_tool = openapi_tool

    async def run(self, arguments: Dict[str, Any]) -> ToolResult:
        """Execute the tool asynchronously.

        Args:
            arguments: Parameters for the tool

        Returns:
            The invocation result text as MCP content
        """
        try:
            result = await self._openapi_tool.execute_async(arguments)
        except OpenAPIMCPError as e:
            logger.error(f"Tool {self.name} failed: {e}")
            raise ToolError(str(e)) from e

        return ToolResult(content=[TextContent(type="text", text=result.to_text())])
