from __future__ import annotations

import asyncio
import logging
import threading
import uuid
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.routing import Route
from starlette.types import Receive, Scope, Send

from .bot import GroupMeBot

LOGGER = logging.getLogger(__name__)


class CallbackEndpoint:
    """ASGI endpoint for the bot callback.

    Mounted as a plain ASGI app so the route matches every HTTP method; only
    POST is acted on and anything else gets an empty 200.
    """

    def __init__(self, bot: GroupMeBot) -> None:
        self.bot = bot

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        request = Request(scope, receive)
        response = await self.handle(request)
        await response(scope, receive, send)

    async def handle(self, request: Request) -> Response:
        if request.method != "POST":
            return Response()

        request_id = str(uuid.uuid4())
        raw_body = await request.body()
        LOGGER.debug("[%s] GroupMe callback: %s bytes", request_id, len(raw_body))
        try:
            await asyncio.to_thread(self.bot.handle_body, raw_body, request_id)
        except Exception:
            LOGGER.exception("[%s] Failed to handle callback", request_id)
        return JSONResponse({"ok": True})


class GroupMeCallbackServer:
    def __init__(self, bot: GroupMeBot, log_level: Optional[str] = None) -> None:
        self.bot = bot
        self.config = bot.config
        self.log_level = (log_level or self.config.log_level).lower()
        self.app = FastAPI()
        self._server: Optional[uvicorn.Server] = None
        self._thread: Optional[threading.Thread] = None
        if self.bot.on_fatal is None:
            self.bot.on_fatal = self._on_fatal
        self._setup_routes()

    def _setup_routes(self) -> None:
        self.app.router.routes.append(Route(self.config.callback_path, endpoint=CallbackEndpoint(self.bot)))

    def _build_server(self) -> uvicorn.Server:
        config = uvicorn.Config(
            self.app,
            host=self.config.host,
            port=self.config.listen_port,
            log_level=self.log_level,
        )
        self._server = uvicorn.Server(config)
        return self._server

    def serve(self) -> None:
        LOGGER.info("Creating bot at %s%s", self.config.server, self.config.callback_path)
        self._build_server().run()

    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        LOGGER.info("Creating bot at %s%s", self.config.server, self.config.callback_path)
        server = self._build_server()
        self._thread = threading.Thread(target=server.run, daemon=True)
        self._thread.start()

    def request_shutdown(self) -> None:
        if self._server:
            self._server.should_exit = True

    def stop(self) -> None:
        self.request_shutdown()
        if self._thread and self._thread is not threading.current_thread():
            self._thread.join(timeout=5)

    def _on_fatal(self, error: Exception) -> None:
        self.request_shutdown()
