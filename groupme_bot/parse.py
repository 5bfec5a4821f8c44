from __future__ import annotations

import json
import logging
import uuid
from typing import Any, Optional

from .errors import InboundDecodeError
from .types import SENDER_BOT, InboundMessage
from .utils import load_body, write_redacted_payload

LOGGER = logging.getLogger(__name__)

_STRING_FIELDS = (
    "id",
    "avatar_url",
    "name",
    "sender_id",
    "sender_type",
    "text",
    "source_guid",
    "user_id",
    "group_id",
)


def decode_inbound(raw: bytes | str | dict[str, Any]) -> InboundMessage:
    if isinstance(raw, dict):
        payload = raw
    else:
        if isinstance(raw, bytes):
            try:
                raw = raw.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise InboundDecodeError(f"Body is not valid UTF-8: {exc}") from exc
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise InboundDecodeError(f"Body is not valid JSON: {exc}") from exc

    if not isinstance(payload, dict):
        raise InboundDecodeError(f"Expected a JSON object, got {type(payload).__name__}")

    values: dict[str, Any] = {}
    for key in _STRING_FIELDS:
        values[key] = _typed(payload, key, str, "")
    values["system"] = _typed(payload, "system", bool, False)
    values["created_at"] = _created_at(payload)
    values["favorited_by"] = _string_list(payload, "favorited_by")
    values["attachments"] = _attachments(payload)
    return InboundMessage(**values)


def parse_inbound(
    raw: bytes | str | dict[str, Any],
    request_id: Optional[str] = None,
    dump_dir: Optional[str] = None,
) -> InboundMessage:
    """Decode a webhook body, degrading to a bot-authored message on failure.

    A degraded message is never logged or dispatched unless the bot tracks its
    own messages, so malformed callbacks cannot trigger replies.
    """
    try:
        return decode_inbound(raw)
    except InboundDecodeError as exc:
        request_id = request_id or str(uuid.uuid4())
        LOGGER.warning("[%s] Couldn't parse the request body: %s", request_id, exc)
        if dump_dir:
            body = raw if isinstance(raw, dict) else load_body(raw)
            try:
                write_redacted_payload(body, request_id, dump_dir)
            except OSError:
                LOGGER.exception("[%s] Failed to dump unparseable body", request_id)
        return InboundMessage(sender_type=SENDER_BOT)


def _typed(payload: dict[str, Any], key: str, expected: type, default: Any) -> Any:
    value = payload.get(key)
    if value is None:
        return default
    # bool is an int subclass; keep the two apart
    if not isinstance(value, expected) or (expected is not bool and isinstance(value, bool)):
        raise InboundDecodeError(
            f"Field {key!r} must be {expected.__name__}, got {type(value).__name__}"
        )
    return value


def _created_at(payload: dict[str, Any]) -> int:
    value = payload.get("created_at")
    if value is None:
        return 0
    if isinstance(value, bool):
        raise InboundDecodeError("Field 'created_at' must be int, got bool")
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if not isinstance(value, int):
        raise InboundDecodeError(f"Field 'created_at' must be int, got {type(value).__name__}")
    return value


def _string_list(payload: dict[str, Any], key: str) -> tuple[str, ...]:
    value = _typed(payload, key, list, [])
    for item in value:
        if not isinstance(item, str):
            raise InboundDecodeError(f"Field {key!r} must contain strings, got {type(item).__name__}")
    return tuple(value)


def _attachments(payload: dict[str, Any]) -> tuple[dict[str, Any], ...]:
    value = _typed(payload, "attachments", list, [])
    attachments: list[dict[str, Any]] = []
    for item in value:
        if item is None:
            continue
        if not isinstance(item, dict):
            raise InboundDecodeError(f"Attachment must be an object, got {type(item).__name__}")
        attachments.append(dict(item))
    return tuple(attachments)
