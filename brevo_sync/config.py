"""Configuration helpers for the Brevo sync pipeline."""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from dotenv import load_dotenv

from .errors import ConfigurationError

LOGGER = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.brevo.com/v3"
DEFAULT_CALLS_PER_MINUTE = 300.0
DEFAULT_SUBJECT = "დოკუმენტაციის თარგმნა ნოტარიულად დამოწმებით"

_SUPPORTED_EXTENSIONS = {".json", ".yaml", ".yml"}

# Optional settings and the environment variables that feed them.
_ENV_OVERRIDES = {
    "base_url": "BREVO_BASE_URL",
    "timeout_seconds": "BREVO_TIMEOUT_SECONDS",
    "page_size": "BREVO_PAGE_SIZE",
    "page_delay_seconds": "BREVO_PAGE_DELAY_SECONDS",
    "folder_name": "BREVO_FOLDER_NAME",
    "list_name_prefix": "BREVO_LIST_PREFIX",
    "campaign_name_prefix": "BREVO_CAMPAIGN_PREFIX",
    "campaign_subject": "BREVO_CAMPAIGN_SUBJECT",
    "template_path": "BREVO_TEMPLATE_PATH",
    "input_pattern": "BREVO_INPUT_PATTERN",
    "max_workers": "BREVO_MAX_WORKERS",
    "calls_per_minute": "BREVO_CALLS_PER_MINUTE",
}


@dataclass(frozen=True)
class Settings:
    """Process configuration, built once at start-up and passed to every component."""

    api_key: str
    sender_name: str
    sender_email: str
    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: float = 30.0
    page_size: int = 1000
    page_delay_seconds: float = 0.1
    folder_name: str = "Winners"
    list_name_prefix: str = "Winners List"
    campaign_name_prefix: str = "CSV Import Campaign"
    campaign_subject: str = DEFAULT_SUBJECT
    template_path: str = "static/message_template.html"
    input_pattern: str = "winners/applications_{date}.csv"
    max_workers: Optional[int] = None
    calls_per_minute: float = DEFAULT_CALLS_PER_MINUTE

    def __repr__(self) -> str:
        masked = f"{self.api_key[:4]}..." if self.api_key else ""
        return f"Settings(api_key={masked!r}, sender_email={self.sender_email!r}, base_url={self.base_url!r})"


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
        data = json.loads(text)
    else:
        import yaml

        data = yaml.safe_load(text)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file '{file_path}' must contain a mapping")
    return data


def load_settings(
    env_file: str | Path | None = None,
    config_path: str | Path | None = None,
    overrides: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """Build :class:`Settings` from ``.env``/environment, a config file and overrides.

    Later sources win: environment, then the JSON/YAML file, then ``overrides``.
    ``environ`` replaces :data:`os.environ` and skips ``.env`` loading (tests).
    """

    if environ is None:
        if env_file is not None and not Path(env_file).exists():
            LOGGER.warning("Could not load env file %s; falling back to system environment", env_file)
        elif not load_dotenv(env_file, override=False):
            LOGGER.debug("No .env file loaded; using system environment variables")
        environ = os.environ

    values: Dict[str, Any] = {
        "api_key": environ.get("BREVO_API_KEY", ""),
        "sender_name": environ.get("SENDER_NAME", ""),
        "sender_email": environ.get("SENDER_EMAIL", ""),
    }
    for name, variable in _ENV_OVERRIDES.items():
        raw = environ.get(variable)
        if raw not in (None, ""):
            values[name] = raw

    if config_path is not None:
        values.update(load_configuration(config_path))
    if overrides:
        values.update({key: value for key, value in overrides.items() if value is not None})

    return _build_settings(values)


def _build_settings(values: Mapping[str, Any]) -> Settings:
    known = {item.name: item for item in fields(Settings)}
    unknown = sorted(set(values) - set(known))
    if unknown:
        raise ConfigurationError(f"Unknown configuration keys: {', '.join(unknown)}")

    missing = [
        variable
        for name, variable in (("api_key", "BREVO_API_KEY"), ("sender_name", "SENDER_NAME"), ("sender_email", "SENDER_EMAIL"))
        if not values.get(name)
    ]
    if missing:
        raise ConfigurationError(f"Missing required environment variables: {', '.join(missing)}")

    settings = Settings(
        api_key=str(values["api_key"]),
        sender_name=str(values["sender_name"]),
        sender_email=str(values["sender_email"]),
    )
    coerced: Dict[str, Any] = {}
    try:
        for name in ("timeout_seconds", "page_delay_seconds", "calls_per_minute"):
            if name in values:
                coerced[name] = float(values[name])
        if "page_size" in values:
            coerced["page_size"] = int(values["page_size"])
        if values.get("max_workers") is not None:
            coerced["max_workers"] = int(values["max_workers"])
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid numeric configuration value: {exc}") from exc

    for name in ("base_url", "folder_name", "list_name_prefix", "campaign_name_prefix", "campaign_subject", "template_path", "input_pattern"):
        if name in values:
            coerced[name] = str(values[name])

    if coerced.get("page_size", settings.page_size) <= 0:
        raise ConfigurationError("page_size must be a positive integer")
    if coerced.get("calls_per_minute", settings.calls_per_minute) <= 0:
        raise ConfigurationError("calls_per_minute must be positive")
    return replace(settings, **coerced)


__all__ = ["Settings", "load_configuration", "load_settings"]
