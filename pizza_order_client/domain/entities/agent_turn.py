"""
POCO DTOs for a single agent turn. No framework dependencies.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List

@dataclass(frozen=True)
class ToolInvocation:
    tool: str                 # qualified function name as called by the model
    arguments: Dict[str, Any]
    result: Any

@dataclass
class AgentReply:
    content: str = ""
    tool_invocations: List[ToolInvocation] = field(default_factory=list)

__all__ = ["ToolInvocation", "AgentReply"]
