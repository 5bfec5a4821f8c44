from __future__ import annotations

import logging
from typing import Callable, Optional

import httpx

from .api import GroupMeAPI
from .config import BotConfig
from .dispatcher import DispatchResult, Dispatcher
from .errors import TriggerPatternError
from .message_log import CSVMessageLogger, LoggingMessageLogger, MessageLogger
from .parse import parse_inbound
from .registry import Responder, TriggerRegistry
from .types import Attachment, InboundMessage

LOGGER = logging.getLogger(__name__)

FatalHandler = Callable[[Exception], None]


class GroupMeBot:
    def __init__(
        self,
        config: BotConfig,
        message_logger: Optional[MessageLogger] = None,
        api: Optional[GroupMeAPI] = None,
        registry: Optional[TriggerRegistry] = None,
        on_fatal: Optional[FatalHandler] = None,
    ) -> None:
        self.config = config
        self.message_logger = message_logger or default_message_logger(config)
        self.api = api or GroupMeAPI(api_url=config.api_url, timeout=config.request_timeout)
        self.registry = registry if registry is not None else TriggerRegistry()
        self.dispatcher = Dispatcher(
            registry=self.registry,
            send=self.send_message,
            match_policy=config.match_policy,
            strict_patterns=config.strict_patterns,
        )
        self.on_fatal = on_fatal
        self.fatal_error: Optional[Exception] = None

        for pattern, reply in config.hooks.items():
            self.add_hook(pattern, static_responder(reply))

    def add_hook(self, trigger: str, responder: Responder) -> None:
        self.registry.register(trigger, responder)

    def hook(self, trigger: str) -> Callable[[Responder], Responder]:
        def decorator(func: Responder) -> Responder:
            self.add_hook(trigger, func)
            return func

        return decorator

    def send_message(self, text: str, attachments: Optional[list[Attachment]] = None) -> httpx.Response:
        return self.api.post_message(self.config.bot_id, text, attachments)

    def should_handle(self, message: InboundMessage) -> bool:
        return not message.is_bot or self.config.trackbotmessages

    def handle_body(self, raw: bytes | str, request_id: Optional[str] = None) -> Optional[DispatchResult]:
        message = parse_inbound(raw, request_id=request_id, dump_dir=self.config.dump_dir)
        if not self.should_handle(message):
            return None
        self.log_message(message)
        return self.handle_message(message)

    def log_message(self, message: InboundMessage) -> None:
        try:
            self.message_logger.log_message(message)
        except Exception:
            LOGGER.exception("Message logger failed for message %s", message.id)

    def handle_message(self, message: InboundMessage) -> DispatchResult:
        try:
            result = self.dispatcher.dispatch(message)
        except TriggerPatternError as exc:
            self._fatal(exc)
            raise
        error = result.send_error or (result.errors[0] if result.errors else None)
        if error is not None and self.config.exit_on_error:
            self._fatal(error)
        return result

    def _fatal(self, error: Exception) -> None:
        LOGGER.critical("Fatal bot error, shutting down: %s", error)
        self.fatal_error = error
        if self.on_fatal:
            self.on_fatal(error)

    def check_patterns(self) -> dict[str, str]:
        invalid = self.registry.invalid_patterns()
        for pattern, reason in invalid.items():
            LOGGER.error("Invalid trigger pattern %r: %s", pattern, reason)
        return invalid

    def close(self) -> None:
        self.api.close()


def default_message_logger(config: BotConfig) -> MessageLogger:
    if config.message_log:
        return CSVMessageLogger(config.message_log)
    return LoggingMessageLogger()


def static_responder(reply: str) -> Responder:
    def respond(message: InboundMessage) -> str:
        return reply.replace("{name}", message.name).replace("{text}", message.text)

    return respond


