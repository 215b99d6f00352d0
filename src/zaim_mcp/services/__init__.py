"""Service helpers shared by the MCP server and the CLI."""
