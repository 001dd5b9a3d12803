"""
Name: openapi-mcp package.
Description: Defines the package version and imports the main CLI function. openapi-mcp turns OpenAPI v2/v3
documents into MCP tools and executes them as HTTP calls against the described API.
"""

__version__ = "0.1.0"

from .main import main as cli_main

__all__ = ["cli_main"]
