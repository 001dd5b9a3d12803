"""Unit tests for the tool builder, toolkit, and FastMCP bridge."""

import unittest
from unittest.mock import AsyncMock, patch

from fastmcp.exceptions import ToolError

from openapi_mcp.exceptions import ConversionError, InvocationError
from openapi_mcp.openapi.invoker import InvocationResult
from openapi_mcp.openapi.models import ConverterOptions
from openapi_mcp.openapi.spec import OpenAPIDocument
from openapi_mcp.openapi.tools import (
    FastMCPOpenAPITool,
    OpenAPIToolkit,
    build_tool_definition,
    describe_responses,
    server_argument,
)
from sample_documents import PETSTORE_SPEC, SWAGGER_SPEC, make_spec


PET_PATHS = {
    "/pets/{id}": {
        "get": {
            "parameters": [
                {"name": "id", "in": "path", "required": True, "schema": {"type": "string"}}
            ],
            "responses": {"200": {"description": "OK"}},
        }
    }
}


def _tool_definition(spec, path, method, options=None):
    document = OpenAPIDocument(spec)
    for operation in document.iter_operations():
        if operation.path == path and operation.method == method:
            return build_tool_definition(document, operation, options)
    raise AssertionError(f"no operation {method} {path}")


class TestServerArgument(unittest.TestCase):
    """Tests for the server address argument policy."""

    def test_no_servers(self):
        definition = _tool_definition(make_spec(PET_PATHS), "/pets/{id}", "get")
        argument = definition.get_argument("openapi|server_addr")

        self.assertTrue(argument.required)
        self.assertIsNone(argument.enum)
        self.assertIsNone(argument.default)
        self.assertEqual(argument.description, "Server address to connect to")

    def test_one_server(self):
        definition = _tool_definition(
            make_spec(PET_PATHS, servers=["https://api.example.com"]), "/pets/{id}", "get"
        )
        argument = definition.get_argument("openapi|server_addr")

        self.assertFalse(argument.required)
        self.assertEqual(argument.default, "https://api.example.com")
        self.assertEqual(argument.enum, ["https://api.example.com"])

    def test_two_servers(self):
        servers = ["https://a.example.com", "https://b.example.com"]
        definition = _tool_definition(make_spec(PET_PATHS, servers=servers), "/pets/{id}", "get")
        argument = definition.get_argument("openapi|server_addr")

        self.assertTrue(argument.required)
        self.assertEqual(argument.enum, servers)
        self.assertIsNone(argument.default)
        self.assertIn("openapi|server_addr", definition.input_schema()["required"])

    def test_server_argument_direct(self):
        self.assertEqual(server_argument([]).name, "openapi|server_addr")


class TestBuildToolDefinition(unittest.TestCase):
    """Tests for build_tool_definition."""

    def test_get_pet(self):
        definition = _tool_definition(PETSTORE_SPEC, "/pets/{id}", "get")

        self.assertEqual(definition.name, "getPet")
        self.assertEqual(definition.method, "get")
        self.assertEqual(definition.path, "/pets/{id}")
        self.assertEqual(
            [argument.name for argument in definition.arguments],
            ["path|id", "openapi|server_addr", "openapi|auth_token"],
        )
        self.assertEqual(
            definition.input_schema()["required"], ["path|id", "openapi|auth_token"]
        )

    def test_argument_order(self):
        spec = make_spec(
            {
                "/items": {
                    "post": {
                        "parameters": [{"name": "dry_run", "in": "query", "schema": {"type": "boolean"}}],
                        "requestBody": {
                            "content": {"application/json": {"schema": {"type": "object"}}}
                        },
                        "security": [{"basic": []}],
                    }
                }
            },
            components={"securitySchemes": {"basic": {"type": "http", "scheme": "basic"}}},
        )

        definition = _tool_definition(spec, "/items", "post")

        self.assertEqual(definition.name, "post_items")
        self.assertEqual(
            [argument.name for argument in definition.arguments],
            [
                "query|dry_run",
                "body",
                "openapi|server_addr",
                "openapi|auth_username",
                "openapi|auth_password",
            ],
        )

    def test_duplicate_arguments_keep_first(self):
        spec = make_spec(
            {
                "/items": {
                    "post": {
                        "requestBody": {
                            "content": {
                                "text/plain": {"schema": {"type": "string"}},
                                "application/json": {"schema": {"type": "object"}},
                            }
                        }
                    }
                }
            }
        )

        definition = _tool_definition(spec, "/items", "post")

        bodies = [argument for argument in definition.arguments if argument.name == "body"]
        self.assertEqual(len(bodies), 1)
        self.assertEqual(bodies[0].type, "object")

    def test_prefix(self):
        definition = _tool_definition(
            PETSTORE_SPEC, "/pets/{id}", "get", ConverterOptions(tool_name_prefix="store_")
        )

        self.assertEqual(definition.name, "store_getPet")

    def test_generated_name_and_deprecation(self):
        definition = _tool_definition(PETSTORE_SPEC, "/pets/{id}", "delete")

        self.assertEqual(definition.name, "delete_pets_id")
        self.assertEqual(
            definition.description,
            "Delete a pet\n\nWARNING: This operation is deprecated."
            "\n\nResponses:\n\n- status: 204, description: Deleted",
        )
        # security: [] opts out of the document's bearer scheme
        self.assertIsNone(definition.get_argument("openapi|auth_token"))

    def test_description_with_response_schema(self):
        definition = _tool_definition(PETSTORE_SPEC, "/pets/{id}", "get")

        self.assertTrue(definition.description.startswith("Get a pet\n\nReturns a single pet.\n\nResponses:\n\n"))
        self.assertIn(
            "- status: 200, description: The pet, content type: application/json, schema: {",
            definition.description,
        )
        self.assertIn(
            '"parent":{"description":"Circular reference to Pet","title":"Pet","type":"reference"}',
            definition.description,
        )
        self.assertTrue(definition.description.endswith("\n\n- status: 404, description: Not found"))

    def test_query_parameters(self):
        definition = _tool_definition(PETSTORE_SPEC, "/pets", "get")

        limit = definition.get_argument("query|limit")
        status = definition.get_argument("query|status")
        self.assertEqual(limit.type, "integer")
        self.assertEqual(limit.default, 10)
        self.assertEqual(status.type, "array")
        self.assertEqual(status.items, {"type": "string", "enum": ["available", "sold"]})

    def test_request_body(self):
        definition = _tool_definition(PETSTORE_SPEC, "/pets", "post")

        body = definition.get_argument("body")
        self.assertTrue(body.required)
        self.assertEqual(body.type, "object")
        self.assertEqual(body.description, "Pet to add")
        self.assertEqual(body.properties, {"name": {"type": "string"}})

    def test_swagger_document(self):
        create_order = _tool_definition(SWAGGER_SPEC, "/orders", "post")
        add_note = _tool_definition(SWAGGER_SPEC, "/orders/{orderId}/notes", "post")

        self.assertEqual(
            [argument.name for argument in create_order.arguments],
            ["body", "openapi|server_addr", "openapi|auth_username", "openapi|auth_password"],
        )
        self.assertEqual(
            create_order.get_argument("body").properties["items"],
            {"type": "array", "items": {"type": "string"}},
        )
        self.assertIn(', schema: {"properties":', create_order.description)
        self.assertEqual(
            [argument.name for argument in add_note.arguments],
            ["path|orderId", "formData|text", "openapi|server_addr", "openapi|auth_apiKey"],
        )
        self.assertEqual(add_note.get_argument("path|orderId").type, "integer")

    def test_idempotent(self):
        first = _tool_definition(PETSTORE_SPEC, "/pets/{id}", "get")
        second = _tool_definition(PETSTORE_SPEC, "/pets/{id}", "get")

        self.assertEqual(first.model_dump(), second.model_dump())


class TestDescribeResponses(unittest.TestCase):
    def test_sorted_and_joined(self):
        text = describe_responses(
            {
                "500": {"description": "Error"},
                "200": {"description": "OK", "content": {"text/plain": {"schema": {"type": "string"}}}},
                "default": {"description": "Other"},
            }
        )

        self.assertEqual(
            text,
            "- status: 200, description: OK, content type: text/plain, "
            'schema: {"type":"string"}\n\n'
            "- status: 500, description: Error\n\n"
            "- status: default, description: Other",
        )

    def test_empty(self):
        self.assertEqual(describe_responses({}), "")


class TestOpenAPIToolkit(unittest.TestCase):
    """Tests for the OpenAPIToolkit class."""

    def setUp(self):
        self.toolkit = OpenAPIToolkit(OpenAPIDocument(PETSTORE_SPEC))

    def test_tools_in_path_order(self):
        self.assertEqual(
            [tool.name for tool in self.toolkit.get_tools()],
            ["listPets", "createPet", "getPet", "delete_pets_id"],
        )

    def test_get_tool(self):
        tool = self.toolkit.get_tool("getPet")

        self.assertEqual(tool.invoker.method, "GET")
        self.assertEqual(tool.invoker.servers, ("https://api.example.com",))
        self.assertIsNone(self.toolkit.get_tool("missing"))

    def test_tool_definitions(self):
        listing = self.toolkit.get_tool_definitions()

        self.assertEqual(listing[2]["name"], "getPet")
        self.assertEqual(listing[2]["inputSchema"]["type"], "object")
        self.assertIn("path|id", listing[2]["inputSchema"]["properties"])

    def test_server_name_and_version(self):
        self.assertEqual(self.toolkit.server_name, "Petstore")
        self.assertEqual(self.toolkit.version, "1.0.0")

        toolkit = OpenAPIToolkit(
            OpenAPIDocument(PETSTORE_SPEC),
            ConverterOptions(server_name="custom", version="9"),
        )
        self.assertEqual(toolkit.server_name, "custom")
        self.assertEqual(toolkit.version, "9")

    def test_conversion_error(self):
        spec = make_spec(
            {
                "/a": {"get": {}},
                "/b": {"get": {"parameters": [{"name": "x", "in": "matrix"}]}},
            }
        )

        with self.assertRaises(ConversionError) as ctx:
            OpenAPIToolkit(OpenAPIDocument(spec))

        self.assertEqual(ctx.exception.path, "/b")
        self.assertEqual(ctx.exception.method, "get")
        self.assertIsInstance(ctx.exception.cause, ValueError)
        self.assertIn("GET /b", str(ctx.exception))

    def test_duplicate_tool_names(self):
        spec = make_spec(
            {
                "/a": {"get": {"operationId": "same"}},
                "/b": {"get": {"operationId": "same"}},
            }
        )

        with self.assertRaises(ConversionError) as ctx:
            OpenAPIToolkit(OpenAPIDocument(spec))

        self.assertEqual(ctx.exception.path, "/b")

    @patch("openapi_mcp.openapi.tools.anyio.run")
    def test_execute_sync_wrapper(self, mock_anyio_run):
        tool = self.toolkit.get_tool("getPet")
        arguments = {"path|id": "1"}

        tool.execute(arguments)

        mock_anyio_run.assert_called_once_with(tool.execute_async, arguments)


class TestFastMCPOpenAPITool(unittest.IsolatedAsyncioTestCase):
    """Tests for the FastMCP bridge."""

    def setUp(self):
        toolkit = OpenAPIToolkit(OpenAPIDocument(PETSTORE_SPEC))
        self.openapi_tool = toolkit.get_tool("getPet")
        self.tool = FastMCPOpenAPITool(self.openapi_tool)

    def test_metadata(self):
        self.assertEqual(self.tool.name, "getPet")
        self.assertEqual(self.tool.description, self.openapi_tool.description)
        self.assertEqual(self.tool.parameters, self.openapi_tool.definition.input_schema())

    async def test_run(self):
        self.openapi_tool.execute_async = AsyncMock(
            return_value=InvocationResult(status_code=200, body='{"id":"1"}')
        )

        result = await self.tool.run({"path|id": "1"})

        self.openapi_tool.execute_async.assert_awaited_once_with({"path|id": "1"})
        self.assertEqual(result.content[0].text, 'status code: 200\nresponse body: {"id":"1"}')

    async def test_run_error(self):
        self.openapi_tool.execute_async = AsyncMock(
            side_effect=InvocationError("getPet", "request failed")
        )

        with self.assertRaises(ToolError):
            await self.tool.run({"path|id": "1"})


if __name__ == "__main__":
    unittest.main()
