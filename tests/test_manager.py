import unittest
from unittest.mock import MagicMock, patch

from openapi_mcp.exceptions import InvocationError
from openapi_mcp.manager import (
    call_tool,
    create_toolkit,
    list_tools,
    load_document,
    start_mcp_server,
)
from openapi_mcp.mcp.config import MCPServerConfig
from openapi_mcp.openapi.invoker import InvocationResult
from openapi_mcp.openapi.models import ConverterOptions
from openapi_mcp.openapi.spec import OpenAPIDocument
from sample_documents import PETSTORE_SPEC


class TestLoadDocument(unittest.TestCase):

    @patch("openapi_mcp.manager.OpenAPIDocument.load")
    def test_load_document(self, mock_load):
        """Test that documents are loaded through OpenAPIDocument.load."""
        mock_load.return_value = OpenAPIDocument(PETSTORE_SPEC)

        document = load_document("openapi.yaml", v2=True)

        self.assertEqual(document.get_title(), "Petstore")
        mock_load.assert_called_once_with("openapi.yaml", v2=True)


@patch("openapi_mcp.manager.OpenAPIDocument.load")
class TestToolFunctions(unittest.TestCase):

    def test_create_toolkit(self, mock_load):
        mock_load.return_value = OpenAPIDocument(PETSTORE_SPEC)

        toolkit = create_toolkit(
            "openapi.yaml", options=ConverterOptions(tool_name_prefix="p_"), timeout=3
        )

        self.assertEqual(toolkit.timeout, 3)
        self.assertEqual(toolkit.get_tools()[0].name, "p_listPets")

    def test_list_tools(self, mock_load):
        mock_load.return_value = OpenAPIDocument(PETSTORE_SPEC)

        tools = list_tools("openapi.yaml")

        self.assertEqual(
            [tool["name"] for tool in tools],
            ["listPets", "createPet", "getPet", "delete_pets_id"],
        )
        self.assertIn("inputSchema", tools[0])

    @patch("openapi_mcp.openapi.tools.OpenAPITool.execute")
    def test_call_tool(self, mock_execute, mock_load):
        mock_load.return_value = OpenAPIDocument(PETSTORE_SPEC)
        mock_execute.return_value = InvocationResult(status_code=200, body="[]")

        result = call_tool("openapi.yaml", "listPets", {"query|limit": 1})

        self.assertEqual(result.status_code, 200)
        mock_execute.assert_called_once_with({"query|limit": 1})

    def test_call_unknown_tool(self, mock_load):
        mock_load.return_value = OpenAPIDocument(PETSTORE_SPEC)

        with self.assertRaises(InvocationError) as ctx:
            call_tool("openapi.yaml", "missing", {})

        self.assertEqual(ctx.exception.tool_name, "missing")


class TestStartMCPServer(unittest.TestCase):

    @patch("openapi_mcp.manager.create_mcp_server")
    @patch("openapi_mcp.manager.OpenAPIDocument.load")
    def test_start_mcp_server(self, mock_load, mock_create_server):
        document = OpenAPIDocument(PETSTORE_SPEC)
        mock_load.return_value = document
        server = MagicMock()
        mock_create_server.return_value = server
        config = MCPServerConfig(transport="sse", port=8000)
        options = ConverterOptions()

        result = start_mcp_server("openapi.yaml", config, options=options)

        mock_create_server.assert_called_once_with(document, config=config, options=options)
        server.run.assert_called_once_with()
        self.assertIs(result, server)


if __name__ == "__main__":
    unittest.main()
