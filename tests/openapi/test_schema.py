"""Unit tests for the schema walker."""

import copy
import json
import unittest

from openapi_mcp.openapi.schema import is_type, walk_items, walk_schema
from openapi_mcp.openapi.spec import resolve_references


class TestWalkSchema(unittest.TestCase):
    """Tests for walk_schema."""

    def test_scalar_fields_copied(self):
        schema = {
            "type": "string",
            "title": "Name",
            "description": "A name",
            "format": "email",
            "minLength": 1,
            "maxLength": 64,
            "pattern": "^.+$",
            "enum": ["a", "b"],
            "default": "a",
            "example": "b",
            "nullable": True,
        }

        prop = walk_schema(schema)

        self.assertEqual(prop["type"], "string")
        self.assertEqual(prop["title"], "Name")
        self.assertEqual(prop["format"], "email")
        self.assertEqual(prop["minLength"], 1)
        self.assertEqual(prop["maxLength"], 64)
        self.assertEqual(prop["enum"], ["a", "b"])
        self.assertEqual(prop["default"], "a")
        self.assertEqual(prop["example"], "b")
        self.assertTrue(prop["nullable"])

    def test_absent_and_zero_values_omitted(self):
        schema = {
            "type": "integer",
            "description": "",
            "minLength": 0,
            "readOnly": False,
            "enum": [],
            "uniqueItems": False,
        }

        self.assertEqual(walk_schema(schema), {"type": "integer"})

    def test_exclusive_bounds(self):
        self.assertTrue(walk_schema({"minimum": 1, "exclusiveMinimum": True})["exclusiveMinimum"])
        self.assertNotIn("exclusiveMaximum", walk_schema({"exclusiveMaximum": False}))
        self.assertEqual(walk_schema({"exclusiveMaximum": 10})["exclusiveMaximum"], 10)

    def test_properties_sorted(self):
        schema = {
            "type": "object",
            "properties": {"zeta": {"type": "string"}, "alpha": {"type": "integer"}},
            "required": ["zeta"],
        }

        prop = walk_schema(schema)

        self.assertEqual(list(prop["properties"]), ["alpha", "zeta"])
        self.assertEqual(prop["required"], ["zeta"])

    def test_array_items(self):
        schema = {
            "type": "array",
            "minItems": 2,
            "items": {
                "type": "object",
                "description": "An entry",
                "properties": {"tags": {"type": "array", "items": {"type": "string"}}},
            },
        }

        prop = walk_schema(schema)

        self.assertEqual(prop["minItems"], 2)
        self.assertEqual(prop["items"]["type"], "object")
        self.assertEqual(prop["items"]["description"], "An entry")
        self.assertEqual(
            prop["items"]["properties"]["tags"],
            {"type": "array", "items": {"type": "string"}},
        )

    def test_items_ignored_for_non_array(self):
        self.assertNotIn("items", walk_schema({"type": "object", "items": {"type": "string"}}))

    def test_compositions(self):
        schema = {
            "oneOf": [{"type": "string"}, {"type": "integer"}],
            "anyOf": [],
            "allOf": [{"title": "Base", "type": "object"}],
            "not": {"type": "boolean"},
        }

        prop = walk_schema(schema)

        self.assertEqual(prop["oneOf"], [{"type": "string"}, {"type": "integer"}])
        self.assertNotIn("anyOf", prop)
        self.assertEqual(prop["allOf"], [{"title": "Base", "type": "object"}])
        self.assertEqual(prop["not"], {"type": "boolean"})

    def test_additional_properties(self):
        self.assertFalse(walk_schema({"additionalProperties": False})["additionalProperties"])
        self.assertEqual(
            walk_schema({"additionalProperties": {"type": "number"}})["additionalProperties"],
            {"type": "number"},
        )

    def test_metadata_objects(self):
        schema = {
            "discriminator": {"propertyName": "kind", "mapping": {}},
            "externalDocs": {"url": "https://docs.example.com", "description": ""},
            "xml": {"name": "pet", "wrapped": True, "attribute": False},
        }

        prop = walk_schema(schema)

        self.assertEqual(prop["discriminator"], {"propertyName": "kind"})
        self.assertEqual(prop["externalDocs"], {"url": "https://docs.example.com"})
        self.assertEqual(prop["xml"], {"name": "pet", "wrapped": True})

    def test_titled_cycle_becomes_reference(self):
        spec = resolve_references(
            {
                "components": {
                    "schemas": {
                        "Node": {
                            "title": "Node",
                            "type": "object",
                            "properties": {
                                "value": {"type": "string"},
                                "next": {"$ref": "#/components/schemas/Node"},
                            },
                        }
                    }
                }
            }
        )
        node = spec["components"]["schemas"]["Node"]

        prop = walk_schema(node)

        self.assertEqual(
            prop["properties"]["next"],
            {
                "type": "reference",
                "title": "Node",
                "description": "Circular reference to Node",
            },
        )
        # The result must be plain data
        json.dumps(prop)

    def test_cycle_through_items(self):
        spec = resolve_references(
            {
                "definitions": {
                    "Tree": {
                        "title": "Tree",
                        "type": "object",
                        "properties": {
                            "children": {
                                "type": "array",
                                "items": {"$ref": "#/definitions/Tree"},
                            }
                        },
                    }
                }
            }
        )

        prop = walk_schema(spec["definitions"]["Tree"])

        self.assertEqual(prop["properties"]["children"]["items"]["type"], "reference")
        self.assertEqual(prop["properties"]["children"]["items"]["title"], "Tree")

    def test_untitled_cycle_terminates(self):
        node = {"type": "object", "properties": {}}
        node["properties"]["self"] = node

        prop = walk_schema(node)

        self.assertEqual(
            prop["properties"]["self"],
            {"type": "reference", "description": "Circular reference"},
        )

    def test_sibling_branches_expand_fully(self):
        address = {
            "title": "Address",
            "type": "object",
            "properties": {"city": {"type": "string"}},
        }
        schema = {
            "type": "object",
            "properties": {"billing": address, "shipping": address},
        }

        prop = walk_schema(schema)

        expected = {
            "type": "object",
            "title": "Address",
            "properties": {"city": {"type": "string"}},
        }
        self.assertEqual(prop["properties"]["billing"], expected)
        self.assertEqual(prop["properties"]["shipping"], expected)

    def test_input_not_mutated(self):
        schema = {
            "type": "object",
            "properties": {"b": {"type": "string"}, "a": {"type": "integer"}},
        }
        original = copy.deepcopy(schema)

        walk_schema(schema)

        self.assertEqual(schema, original)

    def test_idempotent(self):
        schema = {
            "type": "object",
            "properties": {"x": {"type": "array", "items": {"type": "number"}}},
        }

        self.assertEqual(walk_schema(schema), walk_schema(schema))


class TestWalkItems(unittest.TestCase):
    """Tests for walk_items."""

    def test_copies_item_fields(self):
        item = walk_items(
            {
                "type": "string",
                "title": "Tag",
                "description": "A tag",
                "format": "slug",
                "enum": ["x", "y"],
                "pattern": "ignored",
            }
        )

        self.assertEqual(
            item,
            {
                "type": "string",
                "title": "Tag",
                "description": "A tag",
                "format": "slug",
                "enum": ["x", "y"],
            },
        )

    def test_nested_items(self):
        item = walk_items({"type": "array", "items": {"type": "integer"}})

        self.assertEqual(item, {"type": "array", "items": {"type": "integer"}})


class TestIsType(unittest.TestCase):
    def test_list_types(self):
        self.assertTrue(is_type({"type": ["string", "null"]}, "string"))
        self.assertFalse(is_type({"type": ["string", "null"]}, "integer"))
        self.assertTrue(is_type({"type": "array"}, "array"))
        self.assertFalse(is_type({}, "array"))


if __name__ == "__main__":
    unittest.main()
