from __future__ import annotations


class GroupMeBotError(Exception):
    pass


class ConfigError(GroupMeBotError):
    pass


class InboundDecodeError(GroupMeBotError):
    pass


class TriggerPatternError(GroupMeBotError, ValueError):
    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(f"Invalid trigger pattern {pattern!r}: {reason}")
        self.pattern = pattern
        self.reason = reason


class SendError(GroupMeBotError):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
