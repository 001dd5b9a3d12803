"""
Name: MCP Configuration classes.
Description: Shared configuration types for MCP server implementation to avoid circular imports.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field

from ..constants import DEFAULT_HOST, DEFAULT_PORT, DEFAULT_SERVER_NAME, DEFAULT_TIMEOUT


class MCPServerConfig(BaseModel):
    """Configuration for an MCP server serving one OpenAPI document."""

    name: str = DEFAULT_SERVER_NAME
    version: Optional[str] = None
    instructions: Optional[str] = None
    transport: Literal["stdio", "sse"] = "stdio"
    host: str = DEFAULT_HOST
    port: int = Field(default=DEFAULT_PORT, ge=0, le=65535)
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    debug: bool = False

    @property
    def server_name(self) -> str:
        """Get the standardized server name (lowercase with underscores).

        Returns:
            Standardized server name for use in URLs and logs
        """
        return self.name.lower().replace(" ", "_") if self.name else ""
