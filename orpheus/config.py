"""Configuration management for Orpheus.

Settings live in a YAML file. ${VAR} references are resolved against the
environment once, here, and the resolved values are handed to the rest of
the program in a Settings object.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .providers.base import ProviderConfig
from .tools.registry import MergePolicy

_log = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "~/.config/orpheus/config.yaml"

DEFAULT_CONFIG: Dict[str, Any] = {
    "providers": {
        "gemini": {
            "api_key": "${GOOGLE}",
            "model": "gemini-2.5-flash",
            "temperature": 0.7,
        },
        "openai": {
            "api_key": "${OPENAI_API_KEY}",
            "model": "gpt-4o",
            "temperature": 0.7,
        },
    },
    "defaults": {
        "provider": "gemini",
    },
    "catalog": {
        "enabled": True,
        "name": "github",
        "url": "https://api.githubcopilot.com/mcp/",
        "token": "${GITHUB}",
        "timeout": 30,
    },
    "session": {
        "config_document": "./config.yml",
        "sentinel": "END",
        "max_tool_rounds": 10,
    },
    "tools": {
        "command_timeout": None,
        "merge_policy": MergePolicy.FIRST_WINS.value,
    },
}


@dataclass(frozen=True)
class CatalogSettings:
    """Connection parameters for the remote tool catalog."""

    name: str
    base_url: str
    token: str = ""
    timeout: float = 30.0


@dataclass(frozen=True)
class Settings:
    """Everything the app needs at startup, fully resolved."""

    provider: str
    provider_config: ProviderConfig
    catalog: Optional[CatalogSettings]
    config_document: str
    sentinel: str = "END"
    command_timeout: Optional[float] = None
    max_tool_rounds: int = 10
    merge_policy: MergePolicy = MergePolicy.FIRST_WINS


class ConfigManager:
    """Manage Orpheus configuration from YAML."""

    def __init__(
        self,
        config_path: Optional[str] = None,
        env: Optional[Mapping[str, str]] = None,
    ):
        self.config_path = Path(config_path or DEFAULT_CONFIG_PATH).expanduser()
        self.env = os.environ if env is None else env
        self.data = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file, creating it when missing."""
        if not self.config_path.exists():
            self._create_default_config()
        return self._read_yaml()

    def _read_yaml(self) -> Dict[str, Any]:
        try:
            with open(self.config_path, "r") as f:
                content = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            _log.error("Error reading config %s: %s", self.config_path, e)
            return {}
        return content if isinstance(content, dict) else {}

    def _create_default_config(self) -> None:
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, "w") as f:
                yaml.safe_dump(DEFAULT_CONFIG, f, default_flow_style=False, sort_keys=False)
        except OSError as e:
            _log.warning("Could not write default config to %s: %s", self.config_path, e)

    def _section(self, name: str) -> Dict[str, Any]:
        defaults = DEFAULT_CONFIG.get(name, {})
        config = self.data.get(name) or {}
        return {**defaults, **config}

    def _resolve_env_var(self, value: Any) -> str:
        """Resolve environment variable references like ${VAR_NAME}."""
        if value is None:
            return ""
        value = str(value)
        if not value.startswith("${") or not value.endswith("}"):
            return value
        return self.env.get(value[2:-1], "")

    def get_default_provider(self) -> str:
        return self._section("defaults").get("provider", "gemini")

    def get_provider_config(self, provider_name: str) -> ProviderConfig:
        """Get configuration for a specific provider. Missing keys resolve to ''."""
        providers = self.data.get("providers") or DEFAULT_CONFIG["providers"]
        provider_data = providers.get(provider_name) or {}

        api_key = self._resolve_env_var(provider_data.get("api_key", ""))
        if not api_key:
            _log.warning("No API key configured for provider %s", provider_name)

        return ProviderConfig(
            api_key=api_key,
            model=provider_data.get("model", ""),
            base_url=provider_data.get("base_url"),
            temperature=provider_data.get("temperature", 0.7),
            max_tokens=provider_data.get("max_tokens"),
            timeout=provider_data.get("timeout", 120.0),
        )

    def get_catalog_settings(self) -> Optional[CatalogSettings]:
        """Remote catalog parameters, or None when the catalog is disabled."""
        catalog = self._section("catalog")
        if not catalog.get("enabled", True) or not catalog.get("url"):
            return None
        token = self._resolve_env_var(catalog.get("token", ""))
        if not token:
            _log.info("No token for catalog %s; connecting without one", catalog.get("name"))
        return CatalogSettings(
            name=catalog.get("name") or "remote",
            base_url=catalog["url"],
            token=token,
            timeout=float(catalog.get("timeout") or 30),
        )

    def get_merge_policy(self) -> MergePolicy:
        value = self._section("tools").get("merge_policy") or MergePolicy.FIRST_WINS.value
        try:
            return MergePolicy(value)
        except ValueError:
            _log.warning("Unknown merge_policy %r, using %s", value, MergePolicy.FIRST_WINS.value)
            return MergePolicy.FIRST_WINS

    def settings(
        self,
        provider: Optional[str] = None,
        config_document: Optional[str] = None,
    ) -> Settings:
        """Resolve the whole configuration into a Settings object."""
        provider_name = provider or self.get_default_provider()
        session = self._section("session")
        tools = self._section("tools")
        timeout = tools.get("command_timeout")

        return Settings(
            provider=provider_name,
            provider_config=self.get_provider_config(provider_name),
            catalog=self.get_catalog_settings(),
            config_document=config_document or session.get("config_document") or "./config.yml",
            sentinel=str(session.get("sentinel") or "END"),
            command_timeout=float(timeout) if timeout else None,
            max_tool_rounds=int(session.get("max_tool_rounds") or 10),
            merge_policy=self.get_merge_policy(),
        )
