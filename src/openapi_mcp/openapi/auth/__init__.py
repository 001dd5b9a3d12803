from .auth_helpers import (
    AuthSchemeType,
    HttpScheme,
    apply_auth,
    collect_api_keys,
    map_security,
    parse_security_scheme,
)

__all__ = [
    "AuthSchemeType",
    "HttpScheme",
    "apply_auth",
    "collect_api_keys",
    "map_security",
    "parse_security_scheme",
]
