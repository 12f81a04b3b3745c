"""
Configuration module for loading layered settings.

This module handles:
1. Loading appsettings.json from the working directory (optional)
2. Loading user secrets (secrets.json in the user-secrets directory)
3. Loading a .env file into the process environment
4. Reading environment variables, where "__" stands for the ":" key separator

Later sources override earlier ones. Keys are flat, ":"-separated and
case-insensitive, e.g. "OpenAI:ApiKey" or env OPENAI__APIKEY.

Environment variables:
- PIZZA_CLIENT_SECRETS_DIR  (default: ~/.microsoft/usersecrets/pizza-order-client)
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from dotenv import load_dotenv

from pizza_order_client.domain.errors import ConfigurationError
from pizza_order_client.interfaces.services.llm import ToolChoice

logger = logging.getLogger(__name__)

APPSETTINGS_FILE = "appsettings.json"
SECRETS_FILE = "secrets.json"
USER_SECRETS_ID = "pizza-order-client"

DEFAULT_USER_ID = "088e3e04-e29d-41b4-b18d-012b0f13a6ef"
DEFAULT_CHAT_MODEL_ID = "gpt-4o"
DEFAULT_OPENAI_ENDPOINT = "https://openhackpizza.cognitiveservices.azure.com/"
DEFAULT_OPENAI_API_VERSION = "2024-10-21"
DEFAULT_MCP_ENDPOINT = (
    "https://ca-pizza-mcp-vqqlxwmln5lf4.proudglacier-687aa477.eastus2.azurecontainerapps.io/mcp"
)

MISSING_API_KEY_MESSAGE = (
    "Please provide a valid OpenAI:ApiKey in appsettings.json, user secrets, or environment variables."
)

_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off")


def _flatten(data: Any, prefix: str = "") -> Iterable[Tuple[str, str]]:
    """Flatten nested JSON into ("A:B:C", value) pairs; list items use their index."""
    if isinstance(data, dict):
        for key, value in data.items():
            yield from _flatten(value, f"{prefix}:{key}" if prefix else str(key))
    elif isinstance(data, list):
        for index, value in enumerate(data):
            yield from _flatten(value, f"{prefix}:{index}" if prefix else str(index))
    elif isinstance(data, bool):
        yield prefix, "true" if data else "false"
    elif data is None:
        yield prefix, ""
    else:
        yield prefix, str(data)


def _read_json_source(path: Path) -> Dict[str, str]:
    if not path.is_file():
        logger.debug(f"Configuration source not found, skipping: {path}")
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8-sig") or "{}")
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"Failed to read configuration file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file {path} must contain a JSON object")
    logger.debug(f"Loaded configuration source: {path}")
    return dict(_flatten(data))


def default_secrets_dir() -> Path:
    override = os.getenv("PIZZA_CLIENT_SECRETS_DIR")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".microsoft" / "usersecrets" / USER_SECRETS_ID


class Settings:
    """Flat, case-insensitive key/value view over the merged configuration sources."""

    def __init__(self, values: Optional[Mapping[str, str]] = None) -> None:
        self._values: Dict[str, Tuple[str, str]] = {}
        for key, value in (values or {}).items():
            self._set(key, value)

    def _set(self, key: str, value: str) -> None:
        self._values[key.lower()] = (key, value)

    @classmethod
    def load(
        cls,
        base_path: Optional[os.PathLike] = None,
        secrets_dir: Optional[os.PathLike] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "Settings":
        """
        Build settings from appsettings.json, user secrets, .env and the environment.

        Args:
            base_path: directory holding appsettings.json and .env (default: cwd)
            secrets_dir: user-secrets directory (default: default_secrets_dir())
            environ: environment mapping; when given, no .env file is loaded
        """
        base = Path(base_path) if base_path is not None else Path.cwd()
        settings = cls()

        for key, value in _read_json_source(base / APPSETTINGS_FILE).items():
            settings._set(key, value)

        secrets_path = Path(secrets_dir) if secrets_dir is not None else default_secrets_dir()
        for key, value in _read_json_source(secrets_path / SECRETS_FILE).items():
            settings._set(key, value)

        if environ is None:
            # Existing environment variables win over .env entries
            load_dotenv(base / ".env", override=False)
            environ = os.environ
        for name, value in environ.items():
            settings._set(name.replace("__", ":"), value)

        return settings

    # ---------- Raw accessors ----------

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        entry = self._values.get(key.lower())
        return entry[1] if entry is not None else default

    def get_str(self, key: str, default: str = "") -> str:
        value = self.get(key)
        if value is None or not value.strip():
            return default
        return value.strip()

    def get_int(self, key: str, default: int) -> int:
        value = self.get_str(key)
        if not value:
            return default
        try:
            return int(value)
        except ValueError:
            raise ConfigurationError(f"{key} must be an integer, got '{value}'", key=key) from None

    def get_float(self, key: str, default: float) -> float:
        value = self.get_str(key)
        if not value:
            return default
        try:
            return float(value)
        except ValueError:
            raise ConfigurationError(f"{key} must be a number, got '{value}'", key=key) from None

    def get_bool(self, key: str, default: bool) -> bool:
        value = self.get_str(key).lower()
        if not value:
            return default
        if value in _TRUE:
            return True
        if value in _FALSE:
            return False
        raise ConfigurationError(f"{key} must be a boolean, got '{value}'", key=key)

    def as_dict(self) -> Dict[str, str]:
        return {key: value for key, value in self._values.values()}

    # ---------- Typed settings ----------

    @property
    def user_id(self) -> str:
        return self.get_str("UserId", DEFAULT_USER_ID)

    @property
    def api_key(self) -> str:
        return self.get_str("OpenAI:ApiKey")

    @property
    def chat_model_id(self) -> str:
        return self.get_str("OpenAI:ChatModelId", DEFAULT_CHAT_MODEL_ID)

    @property
    def openai_endpoint(self) -> str:
        return self.get_str("OpenAI:Endpoint", DEFAULT_OPENAI_ENDPOINT)

    @property
    def openai_api_version(self) -> str:
        return self.get_str("OpenAI:ApiVersion", DEFAULT_OPENAI_API_VERSION)

    @property
    def mcp_endpoint(self) -> str:
        return self.get_str("PizzaMCP:Endpoint", DEFAULT_MCP_ENDPOINT)

    @property
    def plugin_name(self) -> str:
        return self.get_str("PizzaMCP:PluginName", "PizzaTools")

    @property
    def mcp_timeout_seconds(self) -> float:
        return self.get_float("PizzaMCP:TimeoutSeconds", 30.0)

    @property
    def agent_name(self) -> str:
        return self.get_str("Agent:Name", "PizzaAgent")

    @property
    def tool_choice(self) -> ToolChoice:
        raw = self.get_str("Agent:ToolChoice", ToolChoice.AUTO.value)
        try:
            return ToolChoice.parse(raw)
        except ValueError as e:
            raise ConfigurationError(str(e), key="Agent:ToolChoice") from None

    @property
    def temperature(self) -> float:
        return self.get_float("Agent:Temperature", 0.0)

    @property
    def max_tool_rounds(self) -> int:
        rounds = self.get_int("Agent:MaxToolRounds", 128)
        if rounds < 1:
            raise ConfigurationError("Agent:MaxToolRounds must be at least 1", key="Agent:MaxToolRounds")
        return rounds

    @property
    def smoke_test_tool(self) -> str:
        # An explicitly empty value disables the startup smoke test
        value = self.get("Agent:SmokeTestTool")
        return "get_pizzas" if value is None else value.strip()

    @property
    def startup_prompt_test(self) -> bool:
        return self.get_bool("Agent:StartupPromptTest", False)

    @property
    def log_level(self) -> str:
        return self.get_str("Logging:LogLevel:Default", "Warning")

    @property
    def theme(self) -> str:
        return self.get_str("Cli:Theme", "dark").lower()

    @property
    def exit_keyword(self) -> str:
        return self.get_str("Cli:ExitKeyword", "exit")

    def require_api_key(self) -> str:
        """Return the OpenAI API key or raise ConfigurationError when it is missing."""
        key = self.api_key
        if not key:
            raise ConfigurationError(MISSING_API_KEY_MESSAGE, key="OpenAI:ApiKey")
        return key


def load_settings(base_path: Optional[os.PathLike] = None) -> Settings:
    return Settings.load(base_path=base_path)


__all__ = ["Settings", "load_settings", "default_secrets_dir", "MISSING_API_KEY_MESSAGE"]
