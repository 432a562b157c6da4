"""genlayer-mcp: MCP server that generates GenLayer Intelligent Contracts."""

__version__ = "1.2.0"
