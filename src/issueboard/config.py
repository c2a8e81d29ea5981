from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, cast

import yaml
from dotenv import load_dotenv

from .errors import ConfigError

DEFAULT_API_BASE_URL = "http://localhost:3000"
API_BASE_URL_ENV = "ISSUEBOARD_API_BASE_URL"
CONFIG_DEFAULT = "issueboard.config.yaml"
DEFAULT_MAX_WORKERS = 4


def _load_env_file() -> bool:
    """Load ``.env`` from the working directory without overriding the environment."""
    if os.environ.get("ISSUEBOARD_DISABLE_DOTENV") == "1":
        return False
    env_file = Path.cwd() / ".env"
    if not env_file.exists():
        return False
    return bool(load_dotenv(env_file, override=False))


def resolve_base_url() -> str:
    value = os.environ.get(API_BASE_URL_ENV, "").strip()
    return value or DEFAULT_API_BASE_URL


_load_env_file()

# Read once at import; clients constructed later reuse this value.
API_BASE_URL = resolve_base_url()


@dataclass
class ClientConfig:
    base_url: str = API_BASE_URL
    # Logging configuration
    logging_json_enabled: bool = False
    logging_level: str = "INFO"
    # Worker threads used for blocking HTTP calls
    max_workers: int = DEFAULT_MAX_WORKERS
    source_file: Path | None = None


def _resolve_env_var(value: Any) -> Any:
    """Resolve environment variable if value starts with $."""
    if isinstance(value, str) and value.startswith("$"):
        return os.getenv(value[1:], value)
    return value


def load_config(path: str | Path | None = None) -> ClientConfig:
    """Load a YAML configuration file.

    With no explicit path the default file is optional and defaults are used
    when it is absent; an explicit path that does not exist is an error.
    """
    explicit = path is not None
    p = Path(path) if path is not None else Path(CONFIG_DEFAULT)
    if not p.exists():
        if explicit:
            raise ConfigError(f"Configuration file not found: {p}")
        return ClientConfig()
    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid configuration file {p}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigError(f"Configuration root must be a mapping: {p}")
    api = cast(dict[str, Any], raw.get("api", {}) or {})
    logging_config = cast(dict[str, Any], raw.get("logging", {}) or {})
    concurrency_config = cast(dict[str, Any], raw.get("concurrency", {}) or {})

    base_url = _resolve_env_var(api.get("base_url")) or API_BASE_URL
    try:
        max_workers = int(concurrency_config.get("max_workers", DEFAULT_MAX_WORKERS))
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"concurrency.max_workers must be an integer: {p}") from exc
    if max_workers < 1:
        raise ConfigError(f"concurrency.max_workers must be positive: {p}")

    return ClientConfig(
        base_url=str(base_url),
        logging_json_enabled=bool(logging_config.get("json_enabled", False)),
        logging_level=str(logging_config.get("level", "INFO")),
        max_workers=max_workers,
        source_file=p,
    )


__all__ = [
    "API_BASE_URL",
    "API_BASE_URL_ENV",
    "CONFIG_DEFAULT",
    "DEFAULT_API_BASE_URL",
    "ClientConfig",
    "load_config",
    "resolve_base_url",
]
