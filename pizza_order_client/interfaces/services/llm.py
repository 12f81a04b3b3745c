"""
Completion backend port. The agent depends on this; infra implements.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol, Any, Dict, List, Optional


class ToolChoice(str, Enum):
    AUTO = "auto"
    NONE = "none"
    REQUIRED = "required"

    @classmethod
    def parse(cls, value: str) -> "ToolChoice":
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            raise ValueError(
                f"Unknown tool choice '{value}'; expected one of: {', '.join(c.value for c in cls)}"
            ) from None


@dataclass(frozen=True)
class ToolCallRequest:
    id: str
    name: str
    arguments: Dict[str, Any] = field(default_factory=dict)


@dataclass
class CompletionMessage:
    content: Optional[str] = None
    tool_calls: List[ToolCallRequest] = field(default_factory=list)


class ICompletionBackend(Protocol):
    @property
    def model(self) -> str:
        ...
    def complete(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]] = None,
        tool_choice: ToolChoice = ToolChoice.AUTO,
        temperature: Optional[float] = None,
    ) -> CompletionMessage:
        """
        Run one chat completion over the full message history.

        Returns the assistant message; tool calls are returned, never executed here.
        """
        ...

__all__ = ["ToolChoice", "ToolCallRequest", "CompletionMessage", "ICompletionBackend"]
