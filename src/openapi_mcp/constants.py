"""
Name: Constants and settings.
Description: Centralized location for constants and settings used throughout openapi-mcp.
This file contains default values, argument names, and other constants to maintain consistency.
"""


# Server settings
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3000
DEFAULT_SERVER_NAME = "openapi-server"

# HTTP settings
DEFAULT_TIMEOUT = 30.0

# Environment variables read by the CLI
ENV_TOOL_PREFIX = "OPENAPI_MCP_TOOL_PREFIX"
ENV_TIMEOUT = "OPENAPI_MCP_TIMEOUT"

# Argument namespace
ARGUMENT_SEPARATOR = "|"
BODY_ARGUMENT = "body"

# Sub-keys of the synthesized "openapi|..." arguments
SERVER_ADDR = "server_addr"
AUTH_TOKEN = "auth_token"
AUTH_USERNAME = "auth_username"
AUTH_PASSWORD = "auth_password"
AUTH_OAUTH2_TOKEN = "auth_oauth2_token"
AUTH_PREFIX = "auth_"

# Operations are emitted in this method order for every path
HTTP_METHODS = ["get", "post", "put", "delete", "options", "head", "patch", "trace"]

# Tool description text
SERVER_ADDR_DESCRIPTION = "Server address to connect to"
DEPRECATION_WARNING = "WARNING: This operation is deprecated."
RESPONSES_HEADING = "Responses:"

# Invocation result text
RESULT_TEMPLATE = "status code: {status_code}\nresponse body: {body}"

JSON_CONTENT_TYPE = "application/json"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
