"""
Interactive chat loop.

States: READING -> DISPATCHING -> READING ... -> TERMINATED.
A failed turn is printed and the loop goes back to READING; it never aborts the session.
Ctrl-C or EOF, at the prompt or while a turn runs, ends the session.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Optional

from rich.console import Console

from pizza_order_client.interfaces.agents.runtime import IAgentRuntime

from .handlers import print_error, show_reply

logger = logging.getLogger(__name__)

CLOSING_MESSAGE = "Thank you for using the Pizza Ordering Assistant!"
PROMPT = "You: "


class LoopState(Enum):
    READING = "reading"
    DISPATCHING = "dispatching"
    TERMINATED = "terminated"


def _prompt_toolkit_reader() -> Callable[[str], str]:
    from prompt_toolkit import PromptSession
    from prompt_toolkit.history import InMemoryHistory
    from prompt_toolkit.patch_stdout import patch_stdout

    session = PromptSession(history=InMemoryHistory())

    def read(prompt: str) -> str:
        with patch_stdout():
            return session.prompt(prompt)

    return read


class ChatLoop:
    """
    Drives conversational turns against an agent.

    Args:
        agent: the conversation orchestrator
        console: output console
        read_line: callable(prompt) -> line; defaults to a prompt_toolkit session
        exit_keyword: matched case-insensitively to end the session
    """

    def __init__(
        self,
        agent: IAgentRuntime,
        console: Console,
        read_line: Optional[Callable[[str], str]] = None,
        exit_keyword: str = "exit",
    ) -> None:
        self.agent = agent
        self.console = console
        self.exit_keyword = exit_keyword.strip().lower()
        self.state = LoopState.READING
        self._read_line = read_line
        self._pending: Optional[str] = None

    def run(self) -> None:
        while self.state is not LoopState.TERMINATED:
            self.step()

    def step(self) -> LoopState:
        """Perform one state transition and return the new state."""
        if self.state is LoopState.READING:
            self._read()
        elif self.state is LoopState.DISPATCHING:
            self._dispatch()
        return self.state

    def _read(self) -> None:
        if self._read_line is None:
            self._read_line = _prompt_toolkit_reader()
        self.console.print()
        try:
            line = self._read_line(PROMPT)
        except (KeyboardInterrupt, EOFError):
            self._terminate()
            return

        text = (line or "").strip()
        if not text:
            return
        if text.lower() == self.exit_keyword:
            self._terminate()
            return
        self._pending = line
        self.state = LoopState.DISPATCHING

    def _dispatch(self) -> None:
        text, self._pending = self._pending or "", None
        self.console.print(f"\n{self.agent.name} is thinking...", style="muted", markup=False)
        try:
            reply = self.agent.respond(text)
        except KeyboardInterrupt:
            self._terminate()
            return
        except Exception as e:
            logger.debug("Turn failed", exc_info=True)
            print_error(self.console, e)
        else:
            show_reply(self.console, self.agent.name, reply)
        self.state = LoopState.READING

    def _terminate(self) -> None:
        self.console.print(CLOSING_MESSAGE, style="accent")
        self.state = LoopState.TERMINATED


__all__ = ["ChatLoop", "LoopState", "CLOSING_MESSAGE"]
