"""
OpenAI / Azure OpenAI chat completion backend.

Supports:
- Azure OpenAI deployments (endpoint host ending in .azure.com); model = deployment name
- Any endpoint exposing an OpenAI Chat Completions-compatible API

Behavior:
- Sends the full history with OpenAI-format tool definitions and tool_choice
- Returns native message.tool_calls as ToolCallRequest objects for the agent to execute
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from openai import AzureOpenAI, OpenAI

from pizza_order_client.interfaces.services.llm import CompletionMessage, ToolChoice

from .base import CompletionBackend

logger = logging.getLogger(__name__)


def is_azure_endpoint(endpoint: Optional[str]) -> bool:
    host = (urlparse(endpoint or "").hostname or "").lower()
    return host.endswith(".azure.com")


class OpenAIChatBackend(CompletionBackend):
    """
    Example usage for Azure OpenAI:
        backend = OpenAIChatBackend(
            api_key=settings.api_key,
            endpoint="https://<resource>.cognitiveservices.azure.com/",
            model="gpt-4o",
            api_version="2024-10-21",
        )
    """

    def __init__(
        self,
        api_key: str,
        endpoint: Optional[str] = None,
        model: str = "gpt-4o",
        api_version: Optional[str] = None,
        client: Any = None,
    ) -> None:
        super().__init__(model)
        self.api_key = api_key
        self.base_url = endpoint or ""
        self.api_version = api_version

        if client is not None:
            self.client = client
        elif is_azure_endpoint(endpoint):
            self.client = AzureOpenAI(api_key=api_key, azure_endpoint=endpoint, api_version=api_version)
        else:
            self.client = OpenAI(api_key=api_key, base_url=endpoint or None)

    def complete(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]] = None,
        tool_choice: ToolChoice = ToolChoice.AUTO,
        temperature: Optional[float] = None,
    ) -> CompletionMessage:
        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
        }
        if tools and tool_choice is not ToolChoice.NONE:
            payload["tools"] = tools
            payload["tool_choice"] = tool_choice.value
        if temperature is not None:
            payload["temperature"] = temperature

        logger.debug(f"Chat completion: model={self.model} messages={len(messages)} tools={len(payload.get('tools', []))}")
        response = self.client.chat.completions.create(**payload)

        message = response.choices[0].message
        tool_calls = self._adapt_tool_calls(getattr(message, "tool_calls", None))
        return CompletionMessage(content=getattr(message, "content", None), tool_calls=tool_calls)


__all__ = ["OpenAIChatBackend", "is_azure_endpoint"]
