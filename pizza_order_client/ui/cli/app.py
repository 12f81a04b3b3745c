"""
Interactive CLI for ordering pizza through an LLM agent and the Pizza MCP server.

Startup:
  1. Load settings (appsettings.json, user secrets, .env, environment)
  2. Require OpenAI:ApiKey (exit early with a message on stderr otherwise)
  3. Connect to the Pizza MCP server and list its tools
  4. Register the tools as functions in the PizzaTools namespace
  5. Smoke-test a direct tool invocation (Agent:SmokeTestTool, default get_pizzas)
  6. Optionally run an explicit prompt test (Agent:StartupPromptTest)
  7. Chat until the exit keyword

Run:
  pizza-order-client
  or
  python -m pizza_order_client
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from rich.console import Console

from pizza_order_client.api.di.cli_composition import (
    build_agent,
    build_completion_backend,
    build_namespace,
    build_tool_catalog,
    build_tool_invoker,
    build_tool_provider,
)
from pizza_order_client.domain.errors import ConfigurationError, ToolProviderConnectionError
from pizza_order_client.infrastructure.config.settings import Settings, load_settings
from pizza_order_client.infrastructure.logging_config import configure_logging
from pizza_order_client.infrastructure.tools.tool_namespace import ToolNamespace
from pizza_order_client.interfaces.services.llm import ICompletionBackend

from .console import make_console
from .handlers import (
    list_tools,
    print_error,
    show_adaptation_report,
    show_available_tools,
    show_banner,
    show_invocation_result,
    show_reply,
)
from .loop import ChatLoop

logger = logging.getLogger(__name__)


def run_smoke_test(console: Console, namespace: ToolNamespace, tool_name: str) -> None:
    """Invoke one tool directly, bypassing the model. Failures are printed, never raised."""
    console.print(f"\nAttempting to directly invoke {namespace.label}_{tool_name} tool...", markup=False)
    result = build_tool_invoker(namespace).execute(tool_name, {})
    show_invocation_result(console, result)


def run_prompt_test(console: Console, settings: Settings, namespace: ToolNamespace, backend: ICompletionBackend) -> None:
    """One stateless, instruction-free turn that asks the model to use the menu tool."""
    prompt = f"Use the {namespace.label}_get_pizzas tool to list all available menu items"
    console.print(f"Testing with explicit prompt: {prompt}", markup=False)
    agent = build_agent(settings, namespace, backend, instructions="")
    try:
        reply = agent.respond(prompt)
    except Exception as e:
        print_error(console, e, prefix="Error during prompt test")
        return
    show_reply(console, "Prompt test result", reply)


def run(
    settings: Optional[Settings] = None,
    console: Optional[Console] = None,
    error_console: Optional[Console] = None,
    read_line: Optional[Callable[[str], str]] = None,
    provider_factory=build_tool_provider,
    backend_factory=build_completion_backend,
) -> int:
    """
    Main entry point. Returns the process exit code (0 normal, 1 early exit).
    """
    if settings is None:
        try:
            settings = load_settings()
        except ConfigurationError as e:
            (error_console or make_console(stderr=True)).print(str(e), markup=False, soft_wrap=True)
            return 1

    configure_logging(settings.log_level)
    console = console or make_console(settings.theme)
    error_console = error_console or make_console(settings.theme, stderr=True)

    try:
        backend = backend_factory(settings)
    except ConfigurationError as e:
        error_console.print(str(e), markup=False, soft_wrap=True)
        return 1

    console.print(f"Connecting to Pizza MCP server at: {settings.mcp_endpoint}", markup=False)
    provider = provider_factory(settings)
    try:
        with provider:
            return _run_session(settings, console, provider, backend, read_line)
    except (ToolProviderConnectionError, ConfigurationError) as e:
        logger.debug("Startup failed", exc_info=True)
        print_error(error_console, e)
        return 1


def _run_session(settings: Settings, console: Console, provider, backend: ICompletionBackend, read_line) -> int:
    descriptors = provider.list_tools()
    show_available_tools(console, descriptors)

    namespace, report = build_namespace(settings, descriptors, provider)
    show_adaptation_report(console, report, namespace)
    list_tools(console, build_tool_catalog(namespace), namespace.label)

    if settings.smoke_test_tool:
        run_smoke_test(console, namespace, settings.smoke_test_tool)
    if settings.startup_prompt_test:
        run_prompt_test(console, settings, namespace, backend)

    agent = build_agent(settings, namespace, backend)
    console.print()
    show_banner(console, settings.exit_keyword)
    ChatLoop(agent, console, read_line=read_line, exit_keyword=settings.exit_keyword).run()
    return 0


def main() -> int:
    return run()


if __name__ == "__main__":
    raise SystemExit(main())
