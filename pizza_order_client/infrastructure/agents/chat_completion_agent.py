"""
Chat completion agent: system prompt + tool namespace + completion backend.

One call to respond() is one conversational turn. The backend may request
tool calls any number of times (up to max_tool_rounds) before it produces the
final assistant message; each requested call is resolved through the
namespace and executed synchronously, in order, and its result is appended to
the history before the backend is asked again.

History is unbounded and in-memory. A failed turn rolls the history back to
its state before the turn.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from pizza_order_client.domain.entities.agent_transcript import AgentTranscript
from pizza_order_client.domain.entities.agent_turn import AgentReply, ToolInvocation
from pizza_order_client.domain.errors import AgentInvocationError
from pizza_order_client.infrastructure.mcp.streamable_http_client import content_text
from pizza_order_client.infrastructure.tools.tool_namespace import ToolNamespace
from pizza_order_client.interfaces.services.llm import CompletionMessage, ICompletionBackend, ToolChoice

logger = logging.getLogger(__name__)

PIZZA_AGENT_INSTRUCTIONS = """You are a helpful pizza ordering assistant.
You can help users browse the menu, view pizzas and toppings, place orders, and track existing orders.
When placing orders, you need a userId (you can use '{user_id}' for testing).
Be conversational and helpful. If users have questions about pizzas or the ordering process, assist them using the available tools.
Format any JSON responses in a user-friendly way."""


def build_instructions(user_id: str) -> str:
    return PIZZA_AGENT_INSTRUCTIONS.format(user_id=user_id)


@dataclass(frozen=True)
class AgentConfig:
    instructions: str
    name: str
    namespace: ToolNamespace
    tool_choice: ToolChoice = ToolChoice.AUTO
    temperature: Optional[float] = 0.0
    max_tool_rounds: int = 128


def serialize_tool_result(result: Any) -> str:
    """Render a tool result as the text content of a `tool` message."""
    if isinstance(result, str):
        return result
    if isinstance(result, list) and result and all(isinstance(item, dict) and "type" in item for item in result):
        return content_text(result)
    try:
        return json.dumps(result, ensure_ascii=False)
    except (TypeError, ValueError):
        return str(result)


class ChatCompletionAgent:
    """
    Conversation orchestrator implementing IAgentRuntime.
    """

    def __init__(self, config: AgentConfig, backend: ICompletionBackend) -> None:
        self.config = config
        self.backend = backend
        self.transcript = AgentTranscript()
        self._messages: List[Dict[str, Any]] = []
        if config.instructions:
            self._messages.append({"role": "system", "content": config.instructions})

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def history(self) -> List[Dict[str, Any]]:
        """Copy of the accumulated message history (system prompt first)."""
        return list(self._messages)

    def respond(self, user_text: str) -> AgentReply:
        """
        Produce the reply to `user_text`, invoking tools as the backend requests.

        Raises:
            AgentInvocationError: the backend, a lookup, or a tool failed; history is unchanged
        """
        checkpoint = len(self._messages)
        self._messages.append({"role": "user", "content": user_text})
        try:
            reply = self._run_turn()
        except Exception as e:
            del self._messages[checkpoint:]
            logger.error(f"{self.name} turn failed: {e}")
            logger.debug("Turn failure details", exc_info=True)
            raise AgentInvocationError(str(e) or type(e).__name__, inner=e.__cause__) from e
        except BaseException:
            # Interrupted turn: drop it, let the caller decide what Ctrl-C means
            del self._messages[checkpoint:]
            raise

        self.transcript.record(user_text, reply.content)
        return reply

    def _run_turn(self) -> AgentReply:
        namespace = self.config.namespace
        tools = namespace.to_openai_tools()
        choice = self.config.tool_choice
        invocations: List[ToolInvocation] = []
        rounds = 0

        while True:
            message = self.backend.complete(
                list(self._messages),
                tools=tools,
                tool_choice=choice,
                temperature=self.config.temperature,
            )
            if not message.tool_calls:
                content = message.content or ""
                self._messages.append({"role": "assistant", "content": content})
                return AgentReply(content=content, tool_invocations=invocations)

            if rounds >= self.config.max_tool_rounds:
                raise RuntimeError(
                    f"No final reply after {self.config.max_tool_rounds} rounds of tool calls"
                )
            rounds += 1

            self._messages.append(self._assistant_tool_call_message(message))
            for call in message.tool_calls:
                tool = namespace.resolve(call.name)
                logger.info(f"{self.name} calls {call.name}")
                result = tool.run(call.arguments)
                invocations.append(ToolInvocation(tool=call.name, arguments=call.arguments, result=result))
                self._messages.append({
                    "role": "tool",
                    "tool_call_id": call.id,
                    "content": serialize_tool_result(result),
                })

            # Required applies to the first request only so the model can finish
            if choice is ToolChoice.REQUIRED:
                choice = ToolChoice.AUTO

    @staticmethod
    def _assistant_tool_call_message(message: CompletionMessage) -> Dict[str, Any]:
        return {
            "role": "assistant",
            "content": message.content,
            "tool_calls": [
                {
                    "id": call.id,
                    "type": "function",
                    "function": {
                        "name": call.name,
                        "arguments": json.dumps(call.arguments, ensure_ascii=False),
                    },
                }
                for call in message.tool_calls
            ],
        }


__all__ = ["AgentConfig", "ChatCompletionAgent", "build_instructions", "serialize_tool_result", "PIZZA_AGENT_INSTRUCTIONS"]
