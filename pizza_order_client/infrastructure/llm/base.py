"""
Completion backend base class.

Defines a provider-agnostic base for chat completion backends that:
- Accept the full message history plus OpenAI-format function definitions
- Return the assistant message with its (unexecuted) tool calls

Tool execution belongs to the agent, never to the backend.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from pizza_order_client.interfaces.services.llm import CompletionMessage, ToolCallRequest, ToolChoice


class CompletionBackend(ABC):
    """
    Abstract base for chat completion backends.

    Responsibilities:
    - Normalize provider tool calls into ToolCallRequest objects
    - Provider-specific request execution in concrete subclasses
    """

    def __init__(self, model: str) -> None:
        self.model = model

    def _parse_args_safely(self, raw: Any) -> Dict[str, Any]:
        """
        Convert function call arguments to a dict robustly:
        - dict passthrough
        - JSON string (with or without ``` fences)
        - Extract first balanced {...} object from a string if needed
        """
        if isinstance(raw, dict):
            return raw
        if isinstance(raw, str):
            text = raw.strip()
            if not text:
                return {}
            if text.startswith("```"):
                end = text.find("```", 3)
                if end != -1:
                    text = text[3:end].strip()
                    if text.lower().startswith("json"):
                        text = text[4:].strip()
            try:
                obj = json.loads(text)
                return obj if isinstance(obj, dict) else {}
            except ValueError:
                start = text.find("{")
                while start != -1:
                    depth = 0
                    for i in range(start, len(text)):
                        ch = text[i]
                        if ch == "{":
                            depth += 1
                        elif ch == "}":
                            depth -= 1
                            if depth == 0:
                                try:
                                    obj = json.loads(text[start:i + 1])
                                    if isinstance(obj, dict):
                                        return obj
                                except ValueError:
                                    pass
                                break
                    start = text.find("{", start + 1)
        return {}

    def _adapt_tool_calls(self, tool_calls: Any) -> List[ToolCallRequest]:
        """
        Adapt provider message.tool_calls (SDK objects or dicts) into ToolCallRequest objects.
        """
        requests: List[ToolCallRequest] = []
        for index, call in enumerate(tool_calls or []):
            if isinstance(call, dict):
                fn = call.get("function") or {}
                call_id = call.get("id")
            else:
                fn = getattr(call, "function", None)
                call_id = getattr(call, "id", None)
            if isinstance(fn, dict):
                name = str(fn.get("name") or "")
                raw_args = fn.get("arguments")
            else:
                name = str(getattr(fn, "name", "") or "")
                raw_args = getattr(fn, "arguments", None)
            if not name:
                continue
            requests.append(ToolCallRequest(
                id=str(call_id or f"call_{index}"),
                name=name,
                arguments=self._parse_args_safely(raw_args),
            ))
        return requests

    @abstractmethod
    def complete(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]] = None,
        tool_choice: ToolChoice = ToolChoice.AUTO,
        temperature: Optional[float] = None,
    ) -> CompletionMessage:
        """
        Run one chat completion over `messages` and return the assistant message.
        """
        raise NotImplementedError("Subclasses must implement complete()")
