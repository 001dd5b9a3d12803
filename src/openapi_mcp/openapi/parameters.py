"""
Name: Parameter mapping.
Description: Turns the parameters and request body of an OpenAPI operation into tool argument
descriptors. Each parameter becomes one argument keyed by its location and name; request bodies
become the single ``body`` argument.
"""

import logging
from typing import Any, Dict, List, Optional

from .models import ArgumentDescriptor, ArgumentKey, ArgumentLocation
from .schema import is_type, walk_items, walk_schema
from .values import stringify

logger = logging.getLogger(__name__)

_SCALAR_TYPES = ("integer", "number", "boolean")

_PARAMETER_LOCATIONS = {
    location.value for location in ArgumentLocation if location != ArgumentLocation.openapi
}


def _parameter_schema(parameter: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Get a parameter's schema, falling back to its first content entry."""
    schema = parameter.get("schema")
    if isinstance(schema, dict):
        return schema

    content = parameter.get("content")
    if isinstance(content, dict):
        for media_type in content.values():
            if isinstance(media_type, dict) and isinstance(media_type.get("schema"), dict):
                return media_type["schema"]
    return None


def _walked_properties(schema: Dict[str, Any]) -> Dict[str, Any]:
    return walk_schema(schema).get("properties", {})


def map_parameters(parameters: List[Dict[str, Any]]) -> List[ArgumentDescriptor]:
    """Map operation parameters to tool arguments.

    Args:
        parameters: Resolved parameter objects, in declaration order

    Returns:
        One argument descriptor per parameter

    Raises:
        ValueError: If a parameter has no name or an unknown location
    """
    arguments = []

    for parameter in parameters:
        if not isinstance(parameter, dict):
            continue

        name = parameter.get("name")
        location_name = parameter.get("in")
        if location_name not in _PARAMETER_LOCATIONS:
            raise ValueError(f"parameter {name!r} has unsupported location {location_name!r}")
        location = ArgumentLocation(location_name)
        if not name and location != ArgumentLocation.body:
            raise ValueError(f"{location_name} parameter without a name")

        if location == ArgumentLocation.body:
            key = ArgumentKey(location=location)
        else:
            key = ArgumentKey(location=location, name=name)

        argument_type = "string"
        items = None
        properties = None
        enum = None
        default = parameter.get("example")

        schema = _parameter_schema(parameter)
        if schema is not None:
            if is_type(schema, "array") and isinstance(schema.get("items"), dict):
                argument_type = "array"
                items = walk_items(schema["items"])
            elif is_type(schema, "object") and schema.get("properties"):
                argument_type = "object"
                properties = _walked_properties(schema)
            else:
                for scalar in _SCALAR_TYPES:
                    if is_type(schema, scalar):
                        argument_type = scalar
                        break

            if schema.get("enum"):
                # null is not a choice a caller can send
                enum = [stringify(value) for value in schema["enum"] if value is not None] or None

            if schema.get("example") is not None:
                default = schema["example"]

        arguments.append(
            ArgumentDescriptor(
                key=key,
                type=argument_type,
                required=bool(parameter.get("required")),
                description=parameter.get("description") or "",
                default=default,
                enum=enum,
                items=items,
                properties=properties,
            )
        )

    return arguments


def _content_order(content_type: str) -> tuple:
    # JSON media types first, then alphabetical
    return ("json" not in content_type.lower(), content_type)


def map_request_body(request_body: Optional[Dict[str, Any]]) -> List[ArgumentDescriptor]:
    """Map a request body to ``body`` arguments.

    One descriptor is produced per content entry that has a schema. Bodies
    default to type object; object and array bodies carry their walked schema.

    Args:
        request_body: Resolved request body object, or None

    Returns:
        List of body argument descriptors
    """
    if not isinstance(request_body, dict):
        return []

    content = request_body.get("content") or {}
    arguments = []

    for content_type in sorted(content, key=_content_order):
        media_type = content[content_type]
        if not isinstance(media_type, dict) or not isinstance(media_type.get("schema"), dict):
            continue
        schema = media_type["schema"]

        argument_type = "object"
        items = None
        properties = None

        if is_type(schema, "array") and isinstance(schema.get("items"), dict):
            argument_type = "array"
            items = walk_items(schema["items"])
        elif is_type(schema, "object") or schema.get("properties"):
            properties = _walked_properties(schema)
        else:
            for scalar in ("string", *_SCALAR_TYPES):
                if is_type(schema, scalar):
                    argument_type = scalar
                    break

        logger.debug(f"Mapped {content_type} request body as {argument_type}")
        arguments.append(
            ArgumentDescriptor(
                key=ArgumentKey(location=ArgumentLocation.body),
                type=argument_type,
                required=bool(request_body.get("required")),
                description=request_body.get("description") or "",
                items=items,
                properties=properties,
            )
        )

    return arguments
