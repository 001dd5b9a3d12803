"""
Name: Schema walker.
Description: Converts resolved OpenAPI schema objects into plain, JSON-serializable property descriptors.
Handles composition (oneOf/anyOf/allOf/not), nested objects and arrays, and cuts cycles in
self-referential schemas by returning a reference stub at the point where a schema repeats
along the current branch.
"""

from typing import Any, Dict, FrozenSet, Hashable, List, Optional, Tuple

# Copied through when present (not None)
_VALUE_FIELDS = (
    "title",
    "description",
    "default",
    "example",
    "format",
    "minimum",
    "maximum",
    "multipleOf",
    "maxLength",
    "pattern",
    "maxItems",
    "maxProperties",
)

# Copied through when non-zero
_COUNT_FIELDS = ("minLength", "minItems", "minProperties")

# Copied through when non-empty
_LIST_FIELDS = ("enum", "required")

# Included only when true
_FLAG_FIELDS = (
    "nullable",
    "readOnly",
    "writeOnly",
    "deprecated",
    "allowEmptyValue",
    "uniqueItems",
)

_COMPOSITIONS = ("oneOf", "anyOf", "allOf")


def is_type(schema: Dict[str, Any], type_name: str) -> bool:
    """Check a schema's type, which may be a single name or a list (OpenAPI 3.1)."""
    schema_type = schema.get("type")
    if isinstance(schema_type, list):
        return type_name in schema_type
    return schema_type == type_name


def _enter(
    schema: Dict[str, Any], visited: FrozenSet[Hashable]
) -> Tuple[Optional[Dict[str, Any]], FrozenSet[Hashable]]:
    """Record a schema on the current branch.

    Returns a reference stub if the schema is already on the branch, otherwise
    the branch's visited set extended with the schema.
    """
    title = schema.get("title")
    # Untitled schemas are tracked by identity so untitled cycles end too
    key: Hashable = title if title else ("id", id(schema))

    if key in visited:
        if title:
            return {
                "type": "reference",
                "title": title,
                "description": f"Circular reference to {title}",
            }, visited
        return {"type": "reference", "description": "Circular reference"}, visited

    return None, visited | {key}


def _walk_properties(
    properties: Dict[str, Any], visited: FrozenSet[Hashable]
) -> Dict[str, Any]:
    return {
        name: walk_schema(properties[name], visited)
        for name in sorted(properties)
        if isinstance(properties[name], dict)
    }


def walk_items(
    schema: Dict[str, Any], visited: FrozenSet[Hashable] = frozenset()
) -> Dict[str, Any]:
    """Describe the item schema of an array.

    Keeps the item's type, title, description, format and enum, and walks its
    nested properties and items.

    Args:
        schema: Item schema
        visited: Schemas already entered on the current branch

    Returns:
        Property descriptor for the items
    """
    stub, visited = _enter(schema, visited)
    if stub is not None:
        return stub

    item: Dict[str, Any] = {}

    for name in ("type", "title", "description", "format"):
        if schema.get(name) not in (None, ""):
            item[name] = schema[name]
    if schema.get("enum"):
        item["enum"] = list(schema["enum"])

    properties = schema.get("properties")
    if isinstance(properties, dict) and properties:
        item["properties"] = _walk_properties(properties, visited)

    items = schema.get("items")
    if isinstance(items, dict):
        item["items"] = walk_items(items, visited)

    return item


def walk_schema(
    schema: Dict[str, Any], visited: FrozenSet[Hashable] = frozenset()
) -> Dict[str, Any]:
    """Convert a schema into a property descriptor.

    Absent, empty and zero-valued attributes are left out of the result and
    boolean flags only appear when true.

    Args:
        schema: Resolved schema object
        visited: Schemas already entered on the current branch. Each nested
            call receives its own extended copy, so sibling branches never
            affect each other.

    Returns:
        Property descriptor
    """
    stub, visited = _enter(schema, visited)
    if stub is not None:
        return stub

    prop: Dict[str, Any] = {}

    if schema.get("type") is not None:
        prop["type"] = schema["type"]

    for name in _VALUE_FIELDS:
        value = schema.get(name)
        if value is None or (isinstance(value, str) and not value):
            continue
        prop[name] = value

    for name in _COUNT_FIELDS:
        if schema.get(name):
            prop[name] = schema[name]

    for name in _LIST_FIELDS:
        if schema.get(name):
            prop[name] = list(schema[name])

    for name in _FLAG_FIELDS:
        if schema.get(name) is True:
            prop[name] = True

    # Boolean in OpenAPI 3.0, a number in 3.1
    for name in ("exclusiveMinimum", "exclusiveMaximum"):
        value = schema.get(name)
        if value is True or (
            isinstance(value, (int, float)) and not isinstance(value, bool)
        ):
            prop[name] = value

    # Schema composition
    for name in _COMPOSITIONS:
        members: List[Dict[str, Any]] = [
            walk_schema(member, visited)
            for member in schema.get(name) or []
            if isinstance(member, dict)
        ]
        if members:
            prop[name] = members

    if isinstance(schema.get("not"), dict):
        prop["not"] = walk_schema(schema["not"], visited)

    additional = schema.get("additionalProperties")
    if isinstance(additional, bool):
        prop["additionalProperties"] = additional
    elif isinstance(additional, dict):
        prop["additionalProperties"] = walk_schema(additional, visited)

    discriminator = schema.get("discriminator")
    if isinstance(discriminator, dict):
        described = {"propertyName": discriminator.get("propertyName", "")}
        if discriminator.get("mapping"):
            described["mapping"] = dict(discriminator["mapping"])
        prop["discriminator"] = described

    properties = schema.get("properties")
    if isinstance(properties, dict) and properties:
        prop["properties"] = _walk_properties(properties, visited)

    items = schema.get("items")
    if is_type(schema, "array") and isinstance(items, dict):
        prop["items"] = walk_items(items, visited)

    external_docs = schema.get("externalDocs")
    if isinstance(external_docs, dict):
        prop["externalDocs"] = {
            name: external_docs[name]
            for name in ("description", "url")
            if external_docs.get(name)
        }

    xml = schema.get("xml")
    if isinstance(xml, dict):
        described_xml = {
            name: xml[name]
            for name in ("name", "namespace", "prefix")
            if xml.get(name)
        }
        for name in ("attribute", "wrapped"):
            if xml.get(name) is True:
                described_xml[name] = True
        prop["xml"] = described_xml

    return prop
