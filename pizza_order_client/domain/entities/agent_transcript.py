"""
POCO DTOs for the in-memory conversation transcript. Nothing here is persisted.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterator, List

@dataclass(frozen=True)
class ConversationTurn:
    user_text: str
    agent_reply: str

@dataclass
class AgentTranscript:
    turns: List[ConversationTurn] = field(default_factory=list)

    def record(self, user_text: str, agent_reply: str) -> ConversationTurn:
        turn = ConversationTurn(user_text=user_text, agent_reply=agent_reply)
        self.turns.append(turn)
        return turn

    def __iter__(self) -> Iterator[ConversationTurn]:
        return iter(self.turns)

    def __len__(self) -> int:
        return len(self.turns)

__all__ = ["ConversationTurn", "AgentTranscript"]
