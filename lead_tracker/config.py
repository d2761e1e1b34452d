"""Configuration helpers for the lead tracker CLI and session."""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .assistant import DEFAULT_GEMINI_MODEL

LOGGER = logging.getLogger(__name__)

CONFIG_ENV_VAR = "LEAD_TRACKER_CONFIG"


class ConfigurationError(RuntimeError):
    """Raised when configuration files are missing or malformed."""


_SUPPORTED_EXTENSIONS = {".json", ".yaml", ".yml"}


def load_configuration(path: str | Path) -> Dict[str, Any]:
    """Load configuration data from a JSON or YAML file."""

    file_path = Path(path)
    if not file_path.exists():
        raise ConfigurationError(f"Configuration file '{file_path}' was not found")

    if file_path.suffix.lower() not in _SUPPORTED_EXTENSIONS:
        raise ConfigurationError(
            f"Unsupported configuration format '{file_path.suffix}'. Supported extensions: {sorted(_SUPPORTED_EXTENSIONS)}"
        )

    text = file_path.read_text(encoding="utf-8")
    if file_path.suffix.lower() == ".json":
        try:
            data = json.loads(text or "{}")
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"Configuration file '{file_path}' is not valid JSON: {exc}") from exc
    else:
        try:
            import yaml
        except ImportError as exc:  # pragma: no cover - dependency optional
            raise ConfigurationError(
                "YAML configuration requires the 'pyyaml' package to be installed"
            ) from exc

        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Configuration file '{file_path}' is not valid YAML: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file '{file_path}' must contain a mapping")
    return data


@dataclass
class AppConfig:
    """Settings shared by the CLI and :class:`~lead_tracker.session.LeadSession`."""

    user_id: Optional[str] = None
    library_path: Optional[str] = None
    sync_url: Optional[str] = None
    timeout_seconds: Optional[float] = None
    use_fallback: bool = True
    confirm_delivery: bool = False
    log_level: str = "INFO"
    gemini_model: str = DEFAULT_GEMINI_MODEL

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "AppConfig":
        known = {item.name for item in fields(cls)}
        for key in data:
            if key not in known:
                LOGGER.warning("Ignoring unknown configuration key %s", key)
        values = {key: value for key, value in data.items() if key in known}
        timeout = values.get("timeout_seconds")
        if timeout is not None:
            try:
                values["timeout_seconds"] = float(timeout)
            except (TypeError, ValueError) as exc:
                raise ConfigurationError(f"timeout_seconds must be a number, got {timeout!r}") from exc
        return cls(**values)

    def fetch_options(self) -> Dict[str, Any]:
        return {"timeout": self.timeout_seconds, "use_fallback": self.use_fallback}

    def push_options(self) -> Dict[str, Any]:
        return {"timeout": self.timeout_seconds, "confirm_delivery": self.confirm_delivery}


def load_app_config(path: str | Path | None = None) -> AppConfig:
    """Build :class:`AppConfig` from ``path``, ``$LEAD_TRACKER_CONFIG``, or defaults."""

    config_path = path or os.environ.get(CONFIG_ENV_VAR)
    if not config_path:
        return AppConfig()
    return AppConfig.from_mapping(load_configuration(config_path))
