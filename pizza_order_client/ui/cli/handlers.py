"""
Rendering helpers for the CLI.
"""
from __future__ import annotations

from typing import Iterable, Optional

from rich.box import ROUNDED
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from pizza_order_client.abstractions.dto.tools import AdaptationReport, ToolDescriptor, ToolInvocationResult
from pizza_order_client.domain.entities.agent_turn import AgentReply
from pizza_order_client.infrastructure.agents.chat_completion_agent import serialize_tool_result
from pizza_order_client.infrastructure.tools.tool_namespace import ToolNamespace
from pizza_order_client.interfaces.services.tools import IToolCatalog


def show_available_tools(console: Console, descriptors: Iterable[ToolDescriptor]) -> None:
    """Print the tools reported by the MCP server."""
    console.print("\nAvailable Pizza MCP tools:")
    for descriptor in descriptors:
        console.print(f"- {escape(str(descriptor.name))}: {escape(str(descriptor.description))}")


def show_adaptation_report(console: Console, report: AdaptationReport, namespace: ToolNamespace) -> None:
    for function in report.functions:
        console.print(
            f"[success]Successfully registered tool:[/success] {escape(function.remote_name)} "
            f"as function: {escape(namespace.qualified_name(function))}"
        )
    for error in report.errors:
        console.print(f"[error]Error registering tool {escape(error.tool_name)}:[/error] {escape(error.reason)}")


def list_tools(console: Console, catalog: IToolCatalog, label: str) -> None:
    """Render a table of registered functions."""
    table = Table(title=f"Plugin: {label}", box=ROUNDED)
    table.add_column("Name", no_wrap=True)
    table.add_column("Description")
    table.add_column("Required Params")

    for descriptor in catalog.list_tools():
        req = ", ".join((descriptor.raw_schema or {}).get("required", []) or [])
        table.add_row(Text(descriptor.name), Text(descriptor.description), Text(req or "-"))

    console.print()
    console.print(table)


def show_banner(console: Console, exit_keyword: str) -> None:
    console.print(
        Panel(
            "Type your questions or requests about pizzas and ordering. "
            f"Type '{escape(exit_keyword)}' to quit.",
            title="=== Pizza Ordering Assistant ===",
            box=ROUNDED,
        )
    )


def show_invocation_result(console: Console, result: ToolInvocationResult) -> None:
    """Print the outcome of a direct tool invocation."""
    if result.ok:
        console.print(f"Direct tool invocation result of {escape(result.tool_name)} function:")
        console.print(Text(serialize_tool_result(result.value)))
        console.print()
        return
    console.print(Text(f"Error directly invoking tool: {result.error}"), style="error")
    if result.inner_error:
        console.print(Text(f"Inner Exception: {result.inner_error}"), style="error")


def show_reply(console: Console, agent_name: str, reply: AgentReply) -> None:
    console.print(Panel(Text(reply.content), title=escape(agent_name), box=ROUNDED))


def print_error(console: Console, error: BaseException, prefix: str = "Error") -> None:
    """Print an error message and its inner cause, never a traceback."""
    console.print(Text(f"{prefix}: {error}"), style="error")
    # AgentInvocationError already carries the underlying message; its inner is one level deeper
    inner: Optional[BaseException] = error.inner if hasattr(error, "inner") else error.__cause__
    if inner is not None:
        console.print(Text(f"Inner Exception: {inner}"), style="error")
