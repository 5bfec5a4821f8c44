from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

SENDER_USER = "user"
SENDER_BOT = "bot"
SENDER_SYSTEM = "system"

ATTACHMENT_MENTIONS = "mentions"


@dataclass(frozen=True)
class InboundMessage:
    id: str = ""
    avatar_url: str = ""
    name: str = ""
    sender_id: str = ""
    sender_type: str = ""
    system: bool = False
    text: str = ""
    source_guid: str = ""
    created_at: int = 0
    user_id: str = ""
    group_id: str = ""
    favorited_by: tuple[str, ...] = ()
    # attachment records are opaque dicts, so they stay out of the hash
    attachments: tuple[dict[str, Any], ...] = field(default=(), hash=False)

    @property
    def is_bot(self) -> bool:
        return self.sender_type == SENDER_BOT


@dataclass
class Attachment:
    """Outbound attachment. Only the mention kind carries loci/user_ids."""

    type: str
    loci: list[list[int]] = field(default_factory=list)
    user_ids: list[str] = field(default_factory=list)

    @classmethod
    def mentions(cls, loci: list[list[int]], user_ids: list[str]) -> "Attachment":
        return cls(
            type=ATTACHMENT_MENTIONS,
            loci=[[int(start), int(length)] for start, length in loci],
            user_ids=[str(user_id) for user_id in user_ids],
        )

    def validate(self, text: str) -> None:
        if len(self.loci) != len(self.user_ids):
            raise ValueError(
                f"Attachment has {len(self.loci)} loci but {len(self.user_ids)} user_ids"
            )
        for locus in self.loci:
            try:
                start, length = (int(value) for value in locus)
            except (TypeError, ValueError) as exc:
                raise ValueError(f"Locus must be [start, length] integers, got {locus!r}") from exc
            if start < 0 or length < 0 or start + length > len(text):
                raise ValueError(f"Locus {locus!r} is outside text of length {len(text)}")

    def to_payload(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "loci": [[int(value) for value in locus] for locus in self.loci],
            "user_ids": list(self.user_ids),
        }

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "Attachment":
        return cls(
            type=str(payload.get("type") or ""),
            loci=[list(locus) for locus in payload.get("loci") or []],
            user_ids=[str(user_id) for user_id in payload.get("user_ids") or []],
        )


@dataclass
class OutboundMessage:
    bot_id: str
    text: str
    attachments: list[Attachment] = field(default_factory=list)

    def validate(self) -> None:
        for attachment in self.attachments:
            attachment.validate(self.text)

    def to_payload(self) -> dict[str, Any]:
        return {
            "bot_id": self.bot_id,
            "text": self.text,
            "attachments": [item.to_payload() for item in self.attachments],
        }

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "OutboundMessage":
        return cls(
            bot_id=str(payload.get("bot_id") or ""),
            text=str(payload.get("text") or ""),
            attachments=[Attachment.from_payload(item) for item in payload.get("attachments") or []],
        )
