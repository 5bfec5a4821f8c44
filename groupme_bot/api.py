from __future__ import annotations

import logging
from typing import Optional

import httpx

from .errors import SendError
from .types import Attachment, OutboundMessage

LOGGER = logging.getLogger(__name__)

API_URL = "https://api.groupme.com/v3"
BOT_POST_PATH = "/bots/post"
DEFAULT_TIMEOUT = 10.0


class GroupMeAPI:
    def __init__(
        self,
        api_url: str = API_URL,
        bot_post_path: str = BOT_POST_PATH,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.bot_post_path = bot_post_path
        self._client = client or httpx.Client(timeout=timeout)

    def post_message(
        self,
        bot_id: str,
        text: str,
        attachments: Optional[list[Attachment]] = None,
    ) -> httpx.Response:
        message = OutboundMessage(bot_id=bot_id, text=text, attachments=list(attachments or []))
        try:
            message.validate()
        except (TypeError, ValueError) as exc:
            raise SendError(f"Invalid outbound message: {exc}") from exc

        try:
            response = self._client.post(
                self._build_url(self.bot_post_path),
                json=message.to_payload(),
                headers={"Content-Type": "application/json"},
            )
        except httpx.HTTPError as exc:
            raise SendError(f"Bot post failed: {exc}") from exc

        if response.is_error:
            raise SendError(
                f"Bot post returned HTTP {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )
        LOGGER.debug("Bot post accepted with HTTP %s", response.status_code)
        return response

    def _build_url(self, path: str) -> str:
        if not path.startswith("/"):
            path = "/" + path
        return f"{self.api_url}{path}"

    def close(self) -> None:
        self._client.close()
