from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml
from uvicorn.config import LOG_LEVELS

from .api import API_URL, DEFAULT_TIMEOUT
from .dispatcher import MATCH_FIRST, MATCH_POLICIES
from .errors import ConfigError

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class BotConfig:
    bot_id: str
    group_id: str = ""
    host: str = "0.0.0.0"
    port: str = "8080"
    trackbotmessages: bool = False
    callback_path: str = "/"
    api_url: str = API_URL
    request_timeout: float = DEFAULT_TIMEOUT
    match_policy: str = MATCH_FIRST
    strict_patterns: bool = False
    exit_on_error: bool = False
    message_log: Optional[str] = None
    dump_dir: Optional[str] = None
    log_level: str = "INFO"
    hooks: dict[str, str] = field(default_factory=dict)

    @property
    def server(self) -> str:
        return f"{self.host}:{self.port}"

    @property
    def listen_port(self) -> int:
        return int(self.port)


def load_config(path: str | Path) -> BotConfig:
    config_path = Path(path)
    try:
        text = config_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Error reading bot configuration file {config_path}: {exc}") from exc

    try:
        if config_path.suffix.lower() in {".yaml", ".yml"}:
            data = yaml.safe_load(text) or {}
        else:
            data = json.loads(text) if text.strip() else {}
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Error parsing bot configuration file {config_path}: {exc}") from exc

    config = build_config(data)
    LOGGER.info("Loaded bot configuration from %s (server %s)", config_path, config.server)
    return config


def build_config(data: Any) -> BotConfig:
    if not isinstance(data, dict):
        raise ConfigError(f"Bot configuration must be a mapping, got {type(data).__name__}")

    bot_id = data.get("bot_id")
    if not bot_id:
        raise ConfigError("Bot configuration is missing 'bot_id'")

    match_policy = str(data.get("match_policy") or MATCH_FIRST).lower()
    if match_policy not in MATCH_POLICIES:
        raise ConfigError(f"match_policy must be one of {MATCH_POLICIES}, got {match_policy!r}")

    port = "8080" if data.get("port") is None else str(data.get("port"))
    if not port.isdigit():
        raise ConfigError(f"port must be numeric, got {port!r}")

    hooks = data.get("hooks") or {}
    if not isinstance(hooks, dict):
        raise ConfigError("hooks must be a mapping of pattern to reply text")

    callback_path = str(data.get("callback_path") or "/")
    if not callback_path.startswith("/"):
        callback_path = "/" + callback_path

    raw_timeout = data.get("request_timeout")
    try:
        request_timeout = DEFAULT_TIMEOUT if raw_timeout is None else float(raw_timeout)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"request_timeout must be a number: {exc}") from exc
    if request_timeout <= 0:
        raise ConfigError(f"request_timeout must be positive, got {request_timeout}")

    log_level = validate_log_level(data.get("log_level") or "INFO")

    return BotConfig(
        bot_id=str(bot_id),
        group_id=str(data.get("group_id") or ""),
        host=str(data.get("host") or "0.0.0.0"),
        port=port,
        trackbotmessages=_as_bool(data.get("trackbotmessages", False)),
        callback_path=callback_path,
        api_url=str(data.get("api_url") or API_URL),
        request_timeout=request_timeout,
        match_policy=match_policy,
        strict_patterns=_as_bool(data.get("strict_patterns", False)),
        exit_on_error=_as_bool(data.get("exit_on_error", False)),
        message_log=data.get("message_log") or None,
        dump_dir=data.get("dump_dir") or None,
        log_level=log_level,
        hooks={str(pattern): str(reply) for pattern, reply in hooks.items()},
    )


def validate_log_level(level: Any) -> str:
    name = str(level).strip().lower()
    if name not in LOG_LEVELS:
        raise ConfigError(f"log_level must be one of {sorted(LOG_LEVELS)}, got {level!r}")
    return name.upper()


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)
