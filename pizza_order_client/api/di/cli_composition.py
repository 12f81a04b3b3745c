"""
Composition module for CLI DI (edge wiring).
"""

from __future__ import annotations

from typing import Iterable, Optional, Tuple, TYPE_CHECKING

from pizza_order_client.infrastructure.agents.chat_completion_agent import (
    AgentConfig,
    ChatCompletionAgent,
    build_instructions,
)
from pizza_order_client.infrastructure.tools.mcp_function import adapt_all
from pizza_order_client.infrastructure.tools.tool_namespace import ToolNamespace

if TYPE_CHECKING:
    from pizza_order_client.abstractions.dto.tools import AdaptationReport, ToolDescriptor
    from pizza_order_client.infrastructure.config.settings import Settings
    from pizza_order_client.infrastructure.mcp.streamable_http_client import StreamableHttpMcpClient
    from pizza_order_client.interfaces.services.llm import ICompletionBackend
    from pizza_order_client.interfaces.services.tools import IToolCatalog, IToolInvocationAdapter, IToolProvider


def build_tool_provider(settings: "Settings") -> "StreamableHttpMcpClient":
    """
    Construct (but do not connect) the MCP client for the configured endpoint.
    """
    from pizza_order_client.infrastructure.mcp.streamable_http_client import StreamableHttpMcpClient
    return StreamableHttpMcpClient(settings.mcp_endpoint, timeout=settings.mcp_timeout_seconds)


def build_completion_backend(settings: "Settings") -> "ICompletionBackend":
    """
    Construct the chat completion backend. Requires OpenAI:ApiKey.
    """
    from pizza_order_client.infrastructure.llm.openai_compatible import OpenAIChatBackend
    return OpenAIChatBackend(
        api_key=settings.require_api_key(),
        endpoint=settings.openai_endpoint,
        model=settings.chat_model_id,
        api_version=settings.openai_api_version,
    )


def build_namespace(
    settings: "Settings",
    descriptors: Iterable["ToolDescriptor"],
    provider: "IToolProvider",
) -> Tuple[ToolNamespace, "AdaptationReport"]:
    """
    Adapt the discovered descriptors into the configured namespace.
    """
    namespace = ToolNamespace(settings.plugin_name)
    report = adapt_all(descriptors, provider, namespace)
    return namespace, report


def build_agent(
    settings: "Settings",
    namespace: ToolNamespace,
    backend: "ICompletionBackend",
    instructions: Optional[str] = None,
) -> ChatCompletionAgent:
    """
    Construct the conversation agent; `instructions` defaults to the pizza assistant prompt.
    """
    config = AgentConfig(
        instructions=build_instructions(settings.user_id) if instructions is None else instructions,
        name=settings.agent_name,
        namespace=namespace,
        tool_choice=settings.tool_choice,
        temperature=settings.temperature,
        max_tool_rounds=settings.max_tool_rounds,
    )
    return ChatCompletionAgent(config, backend)


def build_tool_catalog(namespace: ToolNamespace) -> "IToolCatalog":
    from pizza_order_client.infrastructure.tools.catalog_adapter import NamespaceCatalogAdapter
    return NamespaceCatalogAdapter(namespace)


def build_tool_invoker(namespace: ToolNamespace) -> "IToolInvocationAdapter":
    from pizza_order_client.infrastructure.tools.invocation_adapter import ToolInvocationAdapter
    return ToolInvocationAdapter(namespace)
