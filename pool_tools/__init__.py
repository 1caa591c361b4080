"""
Pool Chemistry MCP Server Tools

This package contains the pool water-chemistry calculation engine used by
the MCP tools in server.py.
"""

# Modules are imported directly where needed (server.py, calculator.py)

__all__ = []
