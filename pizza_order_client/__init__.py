"""
Pizza Order Client: chat with an LLM agent that orders pizza through a remote MCP tool server.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
