from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Optional

from .errors import SendError, TriggerPatternError
from .registry import TriggerRegistry
from .types import Attachment, InboundMessage

LOGGER = logging.getLogger(__name__)

MATCH_FIRST = "first"
MATCH_LAST = "last"
MATCH_POLICIES = (MATCH_FIRST, MATCH_LAST)

SendFn = Callable[[str, Optional[list[Attachment]]], object]


@dataclass
class DispatchResult:
    response: str = ""
    pattern: Optional[str] = None
    sent: bool = False
    errors: list[Exception] = field(default_factory=list)
    send_error: Optional[SendError] = None

    @property
    def ok(self) -> bool:
        return not self.errors and self.send_error is None


class Dispatcher:
    """Runs every registered trigger against a message and sends at most one reply.

    ``first`` stops at the first trigger (in registration order) whose responder
    returns text. ``last`` evaluates all of them and keeps the final match.
    """

    def __init__(
        self,
        registry: TriggerRegistry,
        send: SendFn,
        match_policy: str = MATCH_FIRST,
        strict_patterns: bool = False,
    ) -> None:
        if match_policy not in MATCH_POLICIES:
            raise ValueError(f"match_policy must be one of {MATCH_POLICIES}, got {match_policy!r}")
        self.registry = registry
        self.send = send
        self.match_policy = match_policy
        self.strict_patterns = strict_patterns

    def dispatch(self, message: InboundMessage) -> DispatchResult:
        result = DispatchResult()
        for pattern, responder in self.registry.entries():
            if not self._matches(pattern, message.text, result):
                continue
            try:
                response = responder(message)
            except Exception as exc:
                LOGGER.exception("Responder for %r failed", pattern)
                result.errors.append(exc)
                continue
            if self.match_policy == MATCH_LAST:
                result.response = response or ""
                result.pattern = pattern
            elif response:
                result.response = response
                result.pattern = pattern
                break

        if result.response:
            LOGGER.info("Sending message: %s", result.response)
            try:
                self.send(result.response, None)
            except SendError as exc:
                LOGGER.error("Error when sending: %s", exc)
                result.send_error = exc
            else:
                result.sent = True
        return result

    def _matches(self, pattern: str, text: str, result: DispatchResult) -> bool:
        try:
            regex = re.compile(pattern)
        except re.error as exc:
            error = TriggerPatternError(pattern, str(exc))
            if self.strict_patterns:
                raise error from exc
            LOGGER.error("Skipping trigger: %s", error)
            result.errors.append(error)
            return False
        return regex.search(text) is not None
