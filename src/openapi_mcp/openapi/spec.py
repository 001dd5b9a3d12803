"""
Name: OpenAPI document model.
Description: Provides the OpenAPIDocument class, a read-only view over a parsed OpenAPI document
(paths, operations, servers, info, security). Also includes the loaders for files, URLs and raw
bytes, local $ref resolution into a shared object graph, and the Swagger 2.0 to OpenAPI 3 upgrade.
"""

import copy
import json
import logging
import os
import re
from typing import Any, Dict, Iterator, List, Optional, Union
from urllib.parse import unquote

import requests
import yaml

from ..constants import HTTP_METHODS, JSON_CONTENT_TYPE
from ..exceptions import DocumentError
from .models import OpenAPIOperation

logger = logging.getLogger(__name__)

_SERVER_VARIABLE = re.compile(r"\{([^{}]+)\}")

# Parameter keywords that move into "schema" when upgrading Swagger 2.0
_V2_SCHEMA_KEYWORDS = (
    "type",
    "format",
    "items",
    "enum",
    "default",
    "example",
    "minimum",
    "maximum",
    "exclusiveMinimum",
    "exclusiveMaximum",
    "minLength",
    "maxLength",
    "pattern",
    "minItems",
    "maxItems",
    "uniqueItems",
    "multipleOf",
)

_V2_OAUTH2_FLOWS = {
    "implicit": "implicit",
    "password": "password",
    "application": "clientCredentials",
    "accessCode": "authorizationCode",
}


def parse_spec(data: Union[bytes, str]) -> Dict[str, Any]:
    """Parse an OpenAPI document from JSON or YAML text.

    Args:
        data: Raw document contents

    Returns:
        Dict containing the OpenAPI spec

    Raises:
        DocumentError: If the contents are neither JSON nor YAML, or not a mapping
    """
    if isinstance(data, bytes):
        data = data.decode("utf-8")

    # Try to parse as JSON first, then fall back to YAML
    try:
        spec = json.loads(data)
    except json.JSONDecodeError:
        try:
            spec = yaml.safe_load(data)
        except yaml.YAMLError as e:
            raise DocumentError(f"Unable to parse document as JSON or YAML: {e}") from e

    if not isinstance(spec, dict):
        raise DocumentError("OpenAPI document must be a mapping")
    return spec


def load_spec_from_file(file_path: str) -> Dict[str, Any]:
    """Load OpenAPI spec from a file.

    Args:
        file_path: Path to the OpenAPI spec file

    Returns:
        Dict containing the OpenAPI spec
    """
    try:
        with open(file_path, "rb") as f:
            return parse_spec(f.read())
    except OSError as e:
        raise DocumentError(f"failed to read OpenAPI file {file_path}: {e}") from e


def load_spec_from_url(url: str) -> Dict[str, Any]:
    """Load OpenAPI spec from a URL.

    Args:
        url: URL to the OpenAPI spec

    Returns:
        Dict containing the OpenAPI spec
    """
    try:
        response = requests.get(url, timeout=30)
        response.raise_for_status()
    except requests.RequestException as e:
        raise DocumentError(f"failed to fetch OpenAPI document from {url}: {e}") from e
    return parse_spec(response.content)


def load_spec(location: str) -> Dict[str, Any]:
    """Load an OpenAPI spec from a URL or a local path."""
    if location.startswith(("http://", "https://")):
        return load_spec_from_url(location)
    return load_spec_from_file(os.path.expanduser(location))


def resolve_references(openapi_spec: Dict[str, Any]) -> Dict[str, Any]:
    """Resolve all local $ref references in an OpenAPI specification.

    Every reference target is resolved once and the same object is returned
    for each reference to it, so recursive schemas become cyclic object graphs
    instead of being expanded forever.

    Args:
        openapi_spec: A dictionary representing the OpenAPI specification.

    Returns:
        A copy of the specification with all resolvable references replaced.

    Raises:
        DocumentError: If the document uses external references.
    """
    openapi_spec = copy.deepcopy(openapi_spec)  # Work on a copy
    resolved_cache: Dict[str, Any] = {}

    def resolve_ref(ref_string: str) -> Any:
        """Look up the raw target of a single $ref string."""
        if not ref_string.startswith("#"):
            raise DocumentError(f"External references not supported: {ref_string}")

        current: Any = openapi_spec
        for part in ref_string[1:].split("/")[1:]:
            part = unquote(part).replace("~1", "/").replace("~0", "~")
            if isinstance(current, dict) and part in current:
                current = current[part]
            elif isinstance(current, list) and part.isdigit() and int(part) < len(current):
                current = current[int(part)]
            else:
                return None  # Reference not found
        return current

    def recursive_resolve(obj: Any) -> Any:
        if isinstance(obj, dict):
            ref_string = obj.get("$ref")
            if isinstance(ref_string, str):
                if ref_string in resolved_cache:
                    return resolved_cache[ref_string]

                target = resolve_ref(ref_string)
                if target is None:
                    logger.warning(f"Unresolvable reference left in place: {ref_string}")
                    return obj

                if not isinstance(target, dict):
                    resolved = recursive_resolve(target)
                    resolved_cache[ref_string] = resolved
                    return resolved

                # Register the target before descending so cycles point back to it
                placeholder: Dict[str, Any] = {}
                resolved_cache[ref_string] = placeholder
                placeholder.update(recursive_resolve(target))
                return placeholder

            return {key: recursive_resolve(value) for key, value in obj.items()}

        if isinstance(obj, list):
            return [recursive_resolve(item) for item in obj]
        return obj

    return recursive_resolve(openapi_spec)


def is_v2_spec(spec: Dict[str, Any]) -> bool:
    """Check whether a spec is a Swagger 2.0 document."""
    return str(spec.get("swagger", "")).startswith("2")


def _rewrite_v2_refs(obj: Any) -> Any:
    if isinstance(obj, dict):
        rewritten = {}
        for key, value in obj.items():
            if key == "$ref" and isinstance(value, str):
                value = (
                    value.replace("#/definitions/", "#/components/schemas/", 1)
                    .replace("#/parameters/", "#/components/parameters/", 1)
                    .replace("#/responses/", "#/components/responses/", 1)
                )
            rewritten[key] = _rewrite_v2_refs(value)
        return rewritten
    if isinstance(obj, list):
        return [_rewrite_v2_refs(item) for item in obj]
    return obj


def _upgrade_v2_parameter(parameter: Dict[str, Any]) -> Dict[str, Any]:
    if "$ref" in parameter or parameter.get("in") == "body":
        return parameter

    upgraded = {k: v for k, v in parameter.items() if k not in _V2_SCHEMA_KEYWORDS}
    if "schema" not in parameter:
        schema = {k: parameter[k] for k in _V2_SCHEMA_KEYWORDS if k in parameter}
        if schema.get("type") == "file":
            schema = {"type": "string", "format": "binary"}
        upgraded["schema"] = schema
    # collectionFormat has no direct 3.0 equivalent
    upgraded.pop("collectionFormat", None)
    return upgraded


def _upgrade_v2_security_scheme(scheme: Dict[str, Any]) -> Dict[str, Any]:
    scheme_type = scheme.get("type")
    description = {"description": scheme["description"]} if scheme.get("description") else {}

    if scheme_type == "basic":
        return {"type": "http", "scheme": "basic", **description}

    if scheme_type == "oauth2":
        flow_name = _V2_OAUTH2_FLOWS.get(scheme.get("flow", ""), "implicit")
        flow: Dict[str, Any] = {"scopes": scheme.get("scopes") or {}}
        if scheme.get("authorizationUrl"):
            flow["authorizationUrl"] = scheme["authorizationUrl"]
        if scheme.get("tokenUrl"):
            flow["tokenUrl"] = scheme["tokenUrl"]
        return {"type": "oauth2", "flows": {flow_name: flow}, **description}

    return dict(scheme)


def _v2_servers(spec: Dict[str, Any]) -> List[Dict[str, Any]]:
    host = spec.get("host")
    base_path = spec.get("basePath") or ""
    if not host:
        return [{"url": base_path}] if base_path else []
    schemes = spec.get("schemes") or ["https"]
    return [{"url": f"{scheme}://{host}{base_path}"} for scheme in schemes]


def upgrade_v2_spec(spec: Dict[str, Any]) -> Dict[str, Any]:
    """Upgrade a Swagger 2.0 document to the OpenAPI 3 shape.

    Body parameters become request bodies. Form data parameters stay
    parameters so their tools keep ``formData|{name}`` arguments, and response
    schemas stay on the response object.

    Args:
        spec: Swagger 2.0 document

    Returns:
        An OpenAPI 3 shaped copy of the document
    """
    spec = _rewrite_v2_refs(spec)
    global_consumes = spec.get("consumes") or [JSON_CONTENT_TYPE]

    upgraded: Dict[str, Any] = {
        "openapi": "3.0.3",
        "info": spec.get("info") or {},
        "servers": _v2_servers(spec),
        "paths": {},
    }
    for key in ("security", "tags", "externalDocs"):
        if key in spec:
            upgraded[key] = spec[key]

    components: Dict[str, Any] = {}
    if spec.get("definitions"):
        components["schemas"] = spec["definitions"]
    if spec.get("parameters"):
        components["parameters"] = {
            name: _upgrade_v2_parameter(parameter)
            for name, parameter in spec["parameters"].items()
        }
    if spec.get("responses"):
        components["responses"] = spec["responses"]
    if spec.get("securityDefinitions"):
        components["securitySchemes"] = {
            name: _upgrade_v2_security_scheme(scheme)
            for name, scheme in spec["securityDefinitions"].items()
        }
    if components:
        upgraded["components"] = components

    for path, path_item in (spec.get("paths") or {}).items():
        new_item: Dict[str, Any] = {}
        for key, value in (path_item or {}).items():
            if key == "parameters":
                new_item[key] = [_upgrade_v2_parameter(p) for p in value or []]
                continue
            if key not in HTTP_METHODS or not isinstance(value, dict):
                new_item[key] = value
                continue

            operation = {k: v for k, v in value.items() if k not in ("consumes", "produces")}
            parameters = []
            for parameter in value.get("parameters") or []:
                if parameter.get("in") == "body":
                    consumes = value.get("consumes") or global_consumes
                    operation["requestBody"] = {
                        "description": parameter.get("description", ""),
                        "required": bool(parameter.get("required")),
                        "content": {
                            content_type: {"schema": parameter.get("schema") or {}}
                            for content_type in consumes
                        },
                    }
                else:
                    parameters.append(_upgrade_v2_parameter(parameter))
            if "parameters" in value:
                operation["parameters"] = parameters
            new_item[key] = operation
        upgraded["paths"][path] = new_item

    return upgraded


class OpenAPIDocument:
    """Read-only view over a resolved OpenAPI 3 document."""

    def __init__(self, spec: Dict[str, Any], dereference: bool = True):
        """Initialize the document.

        Args:
            spec: The OpenAPI spec as a dictionary
            dereference: Whether to resolve local references
        """
        if not isinstance(spec, dict) or not spec:
            raise DocumentError("no OpenAPI document loaded")
        if is_v2_spec(spec):
            spec = upgrade_v2_spec(spec)
        self.spec = resolve_references(spec) if dereference else spec

        if not isinstance(self.spec.get("info"), dict):
            raise DocumentError("no info found in OpenAPI document")
        if not isinstance(self.spec.get("paths"), dict):
            raise DocumentError("no paths found in OpenAPI document")

    @classmethod
    def from_bytes(cls, data: Union[bytes, str], v2: Optional[bool] = None) -> "OpenAPIDocument":
        """Create a document from raw JSON or YAML.

        Args:
            data: Raw document contents
            v2: Force (True) or skip (False) the Swagger 2.0 upgrade. Detected
                from the ``swagger`` field when None.

        Returns:
            The document
        """
        spec = parse_spec(data)
        if v2 is True and not is_v2_spec(spec):
            raise DocumentError("document is not a Swagger 2.0 document")
        if v2 is False and is_v2_spec(spec):
            raise DocumentError("document is a Swagger 2.0 document")
        return cls(spec)

    @classmethod
    def load(cls, location: str, v2: Optional[bool] = None) -> "OpenAPIDocument":
        """Create a document from a file path or URL."""
        spec = load_spec(location)
        if v2 is True and not is_v2_spec(spec):
            raise DocumentError("document is not a Swagger 2.0 document")
        return cls(spec)

    def get_info(self) -> Dict[str, Any]:
        return self.spec["info"]

    def get_title(self) -> str:
        return str(self.get_info().get("title") or "")

    def get_version(self) -> str:
        return str(self.get_info().get("version") or "")

    def get_paths(self) -> Dict[str, Any]:
        return self.spec.get("paths") or {}

    @staticmethod
    def _server_urls(servers: Any) -> List[str]:
        urls = []
        for server in servers or []:
            url = server.get("url", "")
            variables = server.get("variables") or {}

            def substitute(match: "re.Match[str]") -> str:
                variable = variables.get(match.group(1))
                if isinstance(variable, dict) and "default" in variable:
                    return str(variable["default"])
                return match.group(0)

            urls.append(_SERVER_VARIABLE.sub(substitute, url))
        return urls

    def get_servers(self, path: Optional[str] = None, method: Optional[str] = None) -> List[str]:
        """Get the server URLs that apply to a path and method.

        Operation servers override path servers, which override the
        document's servers. Server variables take their default values.

        Args:
            path: Path template, or None for the document's servers
            method: HTTP method, or None for the path's servers

        Returns:
            List of server URLs
        """
        path_item = self.get_paths().get(path) or {} if path else {}
        operation = path_item.get(method) or {} if method else {}

        for servers in (operation.get("servers"), path_item.get("servers")):
            if servers:
                return self._server_urls(servers)
        return self._server_urls(self.spec.get("servers"))

    def get_security_schemes(self) -> Dict[str, Any]:
        """Extract security schemes defined in the specification.

        Returns:
            Dictionary of security schemes keyed by name
        """
        return (self.spec.get("components") or {}).get("securitySchemes") or {}

    def get_security_requirements(self) -> List[Dict[str, List[str]]]:
        """Extract global security requirements defined in the specification.

        Returns:
            List of security requirement objects
        """
        return self.spec.get("security") or []

    @staticmethod
    def get_operation_id(path: str, method: str, operation: Dict[str, Any]) -> str:
        """Get an operation's id, generating one from the method and path if missing.

        Args:
            path: Path template
            method: HTTP method
            operation: Operation object

        Returns:
            The operation id
        """
        if operation.get("operationId"):
            return operation["operationId"]

        segments = [segment for segment in path.strip("/").split("/") if segment]
        path_name = "_".join(segments).replace("{", "").replace("}", "")
        return f"{method.lower()}_{path_name or 'root'}"

    def iter_operations(self) -> Iterator[OpenAPIOperation]:
        """Iterate over all operations in sorted path order.

        Yields:
            Operations with their merged parameters, servers and security
        """
        paths = self.get_paths()
        global_security = self.get_security_requirements()

        for path in sorted(paths):
            path_item = paths[path] or {}
            shared_parameters = path_item.get("parameters") or []

            for method in HTTP_METHODS:
                operation = path_item.get(method)
                if not isinstance(operation, dict):
                    continue

                # Operation parameters override path parameters with the same location and name
                merged: Dict[Any, Dict[str, Any]] = {}
                for parameter in [*shared_parameters, *(operation.get("parameters") or [])]:
                    if not isinstance(parameter, dict):
                        continue
                    merged[(parameter.get("in"), parameter.get("name"))] = parameter

                security = operation.get("security")
                if security is None:
                    security = global_security

                yield OpenAPIOperation(
                    path=path,
                    method=method,
                    spec=operation,
                    parameters=tuple(merged.values()),
                    servers=tuple(self.get_servers(path, method)),
                    security=tuple(security),
                )
