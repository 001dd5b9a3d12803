"""
Name: Request invoker.
Description: Executes one generated tool as an HTTP call. Demultiplexes the flat argument bag into path,
query, header, cookie, form and body parts, applies authentication, sends the request with httpx and
returns the status code and raw response body.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple
from urllib.parse import quote

import httpx
from fastapi.openapi.models import APIKey
from pydantic import BaseModel

from ..constants import (
    DEFAULT_TIMEOUT,
    FORM_CONTENT_TYPE,
    JSON_CONTENT_TYPE,
    RESULT_TEMPLATE,
    SERVER_ADDR,
)
from ..exceptions import ConfigurationError, InvocationError
from ..utils import redact_arguments
from .auth.auth_helpers import apply_auth
from .models import ArgumentKey, ArgumentLocation
from .values import expand, stringify

logger = logging.getLogger(__name__)


class InvocationResult(BaseModel):
    """Outcome of one HTTP exchange."""

    status_code: int
    body: str = ""

    def to_text(self) -> str:
        return RESULT_TEMPLATE.format(status_code=self.status_code, body=self.body)


@dataclass
class ParsedArguments:
    """An argument bag split by request location."""

    path: Dict[str, Any] = field(default_factory=dict)
    query: Dict[str, Any] = field(default_factory=dict)
    header: Dict[str, Any] = field(default_factory=dict)
    cookie: Dict[str, Any] = field(default_factory=dict)
    form: Dict[str, Any] = field(default_factory=dict)
    openapi: Dict[str, Any] = field(default_factory=dict)
    body: Any = None
    has_body: bool = False


def parse_arguments(arguments: Mapping[str, Any]) -> ParsedArguments:
    """Split a flat argument bag by location.

    Keys without a known location prefix are ignored.

    Args:
        arguments: Argument values keyed by wire name

    Returns:
        The parsed arguments
    """
    parsed = ParsedArguments()
    targets = {
        ArgumentLocation.path: parsed.path,
        ArgumentLocation.query: parsed.query,
        ArgumentLocation.header: parsed.header,
        ArgumentLocation.cookie: parsed.cookie,
        ArgumentLocation.form_data: parsed.form,
        ArgumentLocation.openapi: parsed.openapi,
    }

    for wire_name, value in arguments.items():
        key = ArgumentKey.parse(wire_name)
        if key is None:
            logger.debug(f"Ignoring argument without a location: {wire_name}")
            continue
        if key.location == ArgumentLocation.body:
            if value is not None:
                parsed.body = value
                parsed.has_body = True
            continue
        targets[key.location][key.name] = value

    return parsed


def join_url(server_url: str, path: str) -> str:
    """Join a server URL and an expanded path template."""
    return server_url.rstrip("/") + "/" + path.lstrip("/")


class RequestInvoker:
    """Rebuilds and sends the HTTP request for one operation.

    Holds read-only state only, so one invoker can serve any number of
    concurrent calls.
    """

    def __init__(
        self,
        tool_name: str,
        method: str,
        path: str,
        servers: Sequence[str] = (),
        api_keys: Optional[Dict[str, APIKey]] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """Initialize the invoker.

        Args:
            tool_name: Name of the tool, used in errors and logs
            method: HTTP method
            path: Path template, e.g. ``/pets/{id}``
            servers: Server URLs declared for the operation
            api_keys: API key schemes of the operation, keyed by scheme name
            client: Shared client to send requests with. A client is created
                per call when None.
            timeout: Request timeout in seconds for per-call clients
        """
        self.tool_name = tool_name
        self.method = method.upper()
        self.path = path
        self.servers = tuple(servers)
        self.api_keys = dict(api_keys or {})
        self.client = client
        self.timeout = timeout

    def resolve_server(self, parsed: ParsedArguments) -> str:
        """Pick the server URL for a call.

        Raises:
            ConfigurationError: If no server address was given and the
                operation does not declare exactly one server
        """
        server_addr = parsed.openapi.get(SERVER_ADDR)
        if server_addr:
            return stringify(server_addr)
        if len(self.servers) == 1:
            return self.servers[0]
        raise ConfigurationError(self.tool_name)

    def build_request(
        self, client: httpx.AsyncClient, arguments: Mapping[str, Any]
    ) -> Tuple[httpx.Request, Optional[httpx.Auth]]:
        """Build the HTTP request for an argument bag.

        Args:
            client: Client the request will be sent with
            arguments: Argument values keyed by wire name

        Returns:
            Tuple: (request, httpx auth or None)

        Raises:
            ConfigurationError: If no server address can be resolved
            InvocationError: If the URL or a value cannot be encoded
        """
        parsed = parse_arguments(arguments)
        server_url = self.resolve_server(parsed)

        try:
            path = self.path
            for name, value in parsed.path.items():
                path = path.replace("{" + name + "}", quote(stringify(value), safe=","))
            url = join_url(server_url, path)

            params: List[Tuple[str, str]] = []
            for name, value in parsed.query.items():
                params.extend((name, item) for item in expand(value))

            headers = httpx.Headers(
                {name: stringify(value) for name, value in parsed.header.items()}
            )
            cookies = {name: stringify(value) for name, value in parsed.cookie.items()}

            auth_headers, auth_params, auth_cookies, auth = apply_auth(
                parsed.openapi, self.api_keys
            )
            headers.update(auth_headers)
            params.extend(auth_params)
            cookies.update(auth_cookies)
            if cookies:
                headers["Cookie"] = "; ".join(f"{name}={value}" for name, value in cookies.items())

            content = None
            data = None
            if parsed.form:
                # Form fields take precedence over a JSON body
                if parsed.has_body:
                    logger.debug(f"{self.tool_name}: form fields present, ignoring body")
                data = {
                    name: expand(value) if isinstance(value, (list, tuple)) else stringify(value)
                    for name, value in parsed.form.items()
                }
                headers["Content-Type"] = FORM_CONTENT_TYPE
            elif parsed.has_body:
                content = json.dumps(parsed.body, separators=(",", ":"))
                headers["Content-Type"] = JSON_CONTENT_TYPE

            request = client.build_request(
                self.method,
                url,
                params=params or None,
                headers=headers,
                content=content,
                data=data,
            )
        except (TypeError, ValueError) as e:
            raise InvocationError(self.tool_name, "failed to encode request", e) from e
        except httpx.InvalidURL as e:
            raise InvocationError(self.tool_name, f"invalid URL {server_url}{self.path}", e) from e

        return request, auth

    async def _send(
        self, client: httpx.AsyncClient, arguments: Mapping[str, Any]
    ) -> InvocationResult:
        request, auth = self.build_request(client, arguments)
        logger.info(f"{self.tool_name}: {request.method} {request.url}")

        try:
            response = await client.send(request, auth=auth)
        except httpx.HTTPError as e:
            raise InvocationError(self.tool_name, "request failed", e) from e

        logger.debug(f"{self.tool_name}: received status {response.status_code}")
        return InvocationResult(status_code=response.status_code, body=response.text)

    async def invoke(self, arguments: Mapping[str, Any]) -> InvocationResult:
        """Execute the operation.

        Non-2xx responses are results, not errors. Cancelling the calling task
        aborts the in-flight request.

        Args:
            arguments: Argument values keyed by wire name

        Returns:
            The status code and raw response body

        Raises:
            ConfigurationError: If no server address can be resolved
            InvocationError: If the request cannot be built, sent, or read
        """
        logger.debug(f"Invoking {self.tool_name} with {redact_arguments(arguments)}")

        if self.client is not None:
            return await self._send(self.client, arguments)

        async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
            return await self._send(client, arguments)
