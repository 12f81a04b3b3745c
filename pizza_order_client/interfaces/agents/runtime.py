"""
Agents runtime port (contract only).
Presentation -> (IAgentRuntime) -> agent implementation in infra.
"""
from __future__ import annotations
from typing import Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from pizza_order_client.domain.entities.agent_turn import AgentReply

class IAgentRuntime(Protocol):
    name: str

    def respond(self, user_text: str) -> "AgentReply":
        ...

__all__ = ["IAgentRuntime"]
