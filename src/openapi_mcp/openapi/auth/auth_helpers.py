"""Authentication helpers for OpenAPI.

Maps an operation's security requirements to ``openapi|auth_*`` tool arguments,
and turns those arguments back into request credentials at call time.
"""

import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import httpx
from fastapi.openapi.models import APIKey, APIKeyIn, HTTPBase, OAuth2

from ...constants import (
    AUTH_OAUTH2_TOKEN,
    AUTH_PASSWORD,
    AUTH_PREFIX,
    AUTH_TOKEN,
    AUTH_USERNAME,
    SERVER_ADDR,
)
from ..models import ArgumentDescriptor, ArgumentKey
from ..values import stringify

logger = logging.getLogger(__name__)


class AuthSchemeType(str, Enum):
    """Types of authentication schemes."""

    apiKey = "apiKey"
    http = "http"
    oauth2 = "oauth2"


class HttpScheme(str, Enum):
    """HTTP authentication schemes."""

    bearer = "bearer"
    basic = "basic"


def _auth_argument(name: str, description: str) -> ArgumentDescriptor:
    return ArgumentDescriptor(
        key=ArgumentKey.openapi(name),
        type="string",
        required=True,
        description=description,
    )


def parse_security_scheme(scheme: Dict[str, Any]) -> Optional[Any]:
    """Validate a security scheme object.

    Args:
        scheme: Security scheme object from the document

    Returns:
        An APIKey, HTTPBase or OAuth2 model, or None for unsupported types

    Raises:
        ValueError: If a supported scheme is malformed
    """
    scheme_type = scheme.get("type")

    if scheme_type == AuthSchemeType.apiKey.value:
        return APIKey.model_validate(scheme)
    if scheme_type == AuthSchemeType.http.value:
        return HTTPBase.model_validate(
            {**scheme, "scheme": str(scheme.get("scheme", "")).lower()}
        )
    if scheme_type == AuthSchemeType.oauth2.value:
        return OAuth2.model_validate({**scheme, "flows": scheme.get("flows") or {}})
    return None


def map_security(
    requirements: List[Dict[str, List[str]]], schemes: Dict[str, Any]
) -> List[ArgumentDescriptor]:
    """Map security requirements to authentication arguments.

    Args:
        requirements: Security requirement objects that apply to the operation
        schemes: Security schemes defined by the document, keyed by name

    Returns:
        Required string arguments for the credentials each scheme needs

    Raises:
        ValueError: If a referenced scheme is malformed
    """
    if not schemes:
        return []

    arguments = []
    for requirement in requirements:
        for scheme_name, scopes in (requirement or {}).items():
            scheme_object = schemes.get(scheme_name)
            if not isinstance(scheme_object, dict):
                logger.debug(f"Skipping undefined security scheme {scheme_name}")
                continue

            scheme = parse_security_scheme(scheme_object)
            if isinstance(scheme, APIKey):
                arguments.append(
                    _auth_argument(
                        f"{AUTH_PREFIX}{scheme_name}",
                        f"API Key for {scheme_name} authentication "
                        f"(in {scheme.in_.value} named '{scheme.name}')",
                    )
                )
            elif isinstance(scheme, OAuth2):
                if scopes:
                    description = "OAuth2 token with scopes: " + ", ".join(scopes)
                else:
                    description = "OAuth2 token for authentication"
                arguments.append(_auth_argument(AUTH_OAUTH2_TOKEN, description))
            elif isinstance(scheme, HTTPBase):
                if scheme.scheme == HttpScheme.basic.value:
                    arguments.append(
                        _auth_argument(AUTH_USERNAME, "Username for Basic authentication")
                    )
                    arguments.append(
                        _auth_argument(AUTH_PASSWORD, "Password for Basic authentication")
                    )
                elif scheme.scheme == HttpScheme.bearer.value:
                    arguments.append(
                        _auth_argument(AUTH_TOKEN, "Bearer token for authentication")
                    )
            else:
                logger.debug(
                    f"Skipping unsupported security scheme {scheme_name} "
                    f"of type {scheme_object.get('type')}"
                )

    return arguments


def collect_api_keys(
    requirements: List[Dict[str, List[str]]], schemes: Dict[str, Any]
) -> Dict[str, APIKey]:
    """Collect the API key schemes an operation's requirements refer to.

    Returns:
        APIKey models keyed by scheme name
    """
    api_keys = {}
    for requirement in requirements:
        for scheme_name in requirement or {}:
            scheme_object = schemes.get(scheme_name)
            if isinstance(scheme_object, dict) and scheme_object.get("type") == "apiKey":
                api_keys[scheme_name] = APIKey.model_validate(scheme_object)
    return api_keys


def apply_auth(
    openapi_arguments: Dict[str, Any], api_keys: Dict[str, APIKey]
) -> Tuple[Dict[str, str], List[Tuple[str, str]], Dict[str, str], Optional[httpx.Auth]]:
    """Turn ``openapi|auth_*`` argument values into request credentials.

    A bearer token (``auth_token``, then ``auth_oauth2_token``) takes
    precedence over basic credentials; at most one of them is applied. API keys
    are placed in the header, query parameter or cookie their scheme declares.

    Args:
        openapi_arguments: Values of the ``openapi|*`` arguments, keyed by sub-name
        api_keys: API key schemes of the operation, keyed by scheme name

    Returns:
        Tuple: (headers, query params, cookies, httpx auth or None)
    """
    headers: Dict[str, str] = {}
    params: List[Tuple[str, str]] = []
    cookies: Dict[str, str] = {}
    auth: Optional[httpx.Auth] = None

    token = openapi_arguments.get(AUTH_TOKEN) or openapi_arguments.get(AUTH_OAUTH2_TOKEN)
    username = openapi_arguments.get(AUTH_USERNAME)
    password = openapi_arguments.get(AUTH_PASSWORD)

    if token:
        headers["Authorization"] = f"Bearer {stringify(token)}"
    elif username and password:
        auth = httpx.BasicAuth(stringify(username), stringify(password))
    elif username or password:
        logger.warning("Basic authentication needs both auth_username and auth_password")

    known = {SERVER_ADDR, AUTH_TOKEN, AUTH_OAUTH2_TOKEN, AUTH_USERNAME, AUTH_PASSWORD}
    for name, value in openapi_arguments.items():
        if name in known:
            continue

        scheme_name = name[len(AUTH_PREFIX):] if name.startswith(AUTH_PREFIX) else None
        api_key = api_keys.get(scheme_name) if scheme_name else None
        if api_key is None:
            logger.warning(f"Ignoring unknown argument openapi|{name}")
            continue

        value = stringify(value)
        if api_key.in_ == APIKeyIn.header:
            headers[api_key.name] = value
        elif api_key.in_ == APIKeyIn.query:
            params.append((api_key.name, value))
        else:
            cookies[api_key.name] = value

    return headers, params, cookies, auth
