"""Common models for OpenAPI tools."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from ..constants import ARGUMENT_SEPARATOR, BODY_ARGUMENT


class ArgumentLocation(str, Enum):
    """Where a tool argument ends up in the HTTP request."""

    path = "path"
    query = "query"
    header = "header"
    cookie = "cookie"
    form_data = "formData"
    body = "body"
    openapi = "openapi"  # server address and credentials


class ArgumentKey(BaseModel):
    """Tagged name of a tool argument.

    The flat wire form (``query|limit``, ``body``, ``openapi|server_addr``) is
    only produced by :attr:`wire_name` and only read back by :meth:`parse`.
    """

    model_config = ConfigDict(frozen=True)

    location: ArgumentLocation
    name: str = ""

    @property
    def wire_name(self) -> str:
        """Get the argument name as exposed to MCP clients."""
        if self.location == ArgumentLocation.body:
            return BODY_ARGUMENT
        return f"{self.location.value}{ARGUMENT_SEPARATOR}{self.name}"

    @classmethod
    def parse(cls, wire_name: str) -> Optional["ArgumentKey"]:
        """Parse a wire name back into a key.

        Args:
            wire_name: Argument name as received from an MCP client

        Returns:
            The key, or None if the name has no known location prefix
        """
        if wire_name == BODY_ARGUMENT:
            return cls(location=ArgumentLocation.body)

        prefix, separator, name = wire_name.partition(ARGUMENT_SEPARATOR)
        if not separator:
            return None
        try:
            location = ArgumentLocation(prefix)
        except ValueError:
            return None
        if location == ArgumentLocation.body:
            return None
        return cls(location=location, name=name)

    @classmethod
    def openapi(cls, name: str) -> "ArgumentKey":
        """Create a key for a synthesized ``openapi|...`` argument."""
        return cls(location=ArgumentLocation.openapi, name=name)


class ArgumentDescriptor(BaseModel):
    """One argument of a generated tool."""

    key: ArgumentKey
    type: str = "string"
    required: bool = False
    description: str = ""
    default: Optional[Any] = None
    enum: Optional[List[str]] = None
    items: Optional[Dict[str, Any]] = None
    properties: Optional[Dict[str, Any]] = None

    @property
    def name(self) -> str:
        return self.key.wire_name

    def to_json_schema(self) -> Dict[str, Any]:
        """Render the argument as a JSON schema property."""
        schema: Dict[str, Any] = {"type": self.type}
        if self.description:
            schema["description"] = self.description
        if self.default is not None:
            schema["default"] = self.default
        if self.enum:
            schema["enum"] = list(self.enum)
        if self.items is not None:
            schema["items"] = self.items
        if self.properties is not None:
            schema["properties"] = self.properties
        return schema


class ToolDefinition(BaseModel):
    """A generated MCP tool: name, description, and ordered arguments."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    method: str
    path: str
    arguments: List[ArgumentDescriptor] = Field(default_factory=list)

    def get_argument(self, wire_name: str) -> Optional[ArgumentDescriptor]:
        for argument in self.arguments:
            if argument.name == wire_name:
                return argument
        return None

    def input_schema(self) -> Dict[str, Any]:
        """Build the JSON schema MCP clients use to call this tool.

        Returns:
            An object schema with one property per argument
        """
        properties = {}
        required = []

        for argument in self.arguments:
            properties[argument.name] = argument.to_json_schema()
            if argument.required:
                required.append(argument.name)

        return {
            "type": "object",
            "properties": properties,
            "required": required,
        }


class ConverterOptions(BaseModel):
    """Options for converting a document into tools.

    Server name and version fall back to the document's ``info`` section.
    """

    server_name: Optional[str] = Field(
        default=None, description="Name announced by the MCP server"
    )
    version: Optional[str] = Field(
        default=None, description="Version announced by the MCP server"
    )
    tool_name_prefix: str = Field(
        default="", description="Prefix prepended to every generated tool name"
    )


@dataclass(frozen=True, eq=False)
class OpenAPIOperation:
    """One (path, method) pair of the document, with its inherited context."""

    path: str
    method: str
    spec: Dict[str, Any]
    parameters: Tuple[Dict[str, Any], ...] = ()
    servers: Tuple[str, ...] = ()
    security: Tuple[Dict[str, List[str]], ...] = ()

    @property
    def operation_id(self) -> Optional[str]:
        return self.spec.get("operationId") or None

    @property
    def request_body(self) -> Optional[Dict[str, Any]]:
        return self.spec.get("requestBody")

    @property
    def responses(self) -> Dict[str, Any]:
        return self.spec.get("responses") or {}

    @property
    def summary(self) -> str:
        return self.spec.get("summary") or ""

    @property
    def description(self) -> str:
        return self.spec.get("description") or ""

    @property
    def deprecated(self) -> bool:
        return bool(self.spec.get("deprecated"))

