"""MCP tool server."""
