"""Embedded HTTP/WebSocket hub pushing receiver state to UI clients."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from aiohttp import web

from .models import QueueItem, ReceiverSnapshot, RepeatMode

if TYPE_CHECKING:
    from .registry import SessionRegistry
    from .session import DeviceSession

logger = logging.getLogger(__name__)

CommandHandler = Callable[["DeviceSession", dict[str, Any]], Awaitable[None]]


def _item_ids(body: dict[str, Any]) -> list[int]:
    return [int(item_id) for item_id in body["item_ids"]]


def _queue_items(body: dict[str, Any]) -> list[QueueItem]:
    return [QueueItem.model_validate(item) for item in body["items"]]


def _optional_int(value: Any) -> int | None:
    return None if value is None else int(value)


# Body values are converted before the session call, so malformed input
# surfaces as KeyError/TypeError/ValueError.
COMMANDS: dict[str, CommandHandler] = {
    "play": lambda session, body: session.play(),
    "pause": lambda session, body: session.pause(),
    "stop": lambda session, body: session.stop(),
    "next": lambda session, body: session.next(),
    "previous": lambda session, body: session.previous(),
    "seek": lambda session, body: session.seek(float(body["time"])),
    "rate": lambda session, body: session.set_playback_rate(float(body["rate"])),
    "volume": lambda session, body: session.set_volume(float(body["level"])),
    "toggle-mute": lambda session, body: session.toggle_mute(),
    "shuffle": lambda session, body: session.shuffle_queue(),
    "repeat-mode": lambda session, body: session.change_repeat_mode(
        RepeatMode(body["mode"])
    ),
    "current-item": lambda session, body: session.change_current_item(
        int(body["item_id"])
    ),
    "queue-insert": lambda session, body: session.insert_queue(
        _queue_items(body), _optional_int(body.get("insert_before"))
    ),
    "queue-remove": lambda session, body: session.remove_queue(_item_ids(body)),
    "queue-up": lambda session, body: session.up_queue(_item_ids(body)),
    "queue-down": lambda session, body: session.down_queue(_item_ids(body)),
}


def _snapshot_json(snapshot: ReceiverSnapshot) -> dict[str, Any]:
    return snapshot.model_dump(mode="json", by_alias=True)


class ReceiverHub:
    """HTTP server exposing receiver status, control routes and a push socket."""

    def __init__(self, registry: SessionRegistry, port: int) -> None:
        """Initialize the hub."""
        self.registry = registry
        self.port = port
        self.app = web.Application(middlewares=[self._cors_middleware])
        self._runner: web.AppRunner | None = None
        self._ws_clients: set[web.WebSocketResponse] = set()
        self._send_tasks: set[asyncio.Task[None]] = set()
        self._setup_routes()

    def _setup_routes(self) -> None:
        """Register all HTTP routes."""
        self.app.router.add_get("/health", self._handle_health)
        self.app.router.add_get("/ws", self._handle_ws)
        self.app.router.add_get("/api/receivers", self._handle_receivers)
        self.app.router.add_get("/api/receivers/{name}/status", self._handle_status)
        self.app.router.add_post("/api/receivers/{name}/{command}", self._handle_command)

    @web.middleware
    async def _cors_middleware(self, request: web.Request, handler: Any) -> web.StreamResponse:
        """Add CORS headers to all responses."""
        if request.method == "OPTIONS":
            return web.Response(
                headers={
                    "Access-Control-Allow-Origin": "*",
                    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
                    "Access-Control-Allow-Headers": "*",
                }
            )
        response: web.StreamResponse = await handler(request)
        response.headers["Access-Control-Allow-Origin"] = "*"
        return response

    async def start(self) -> None:
        """Start the HTTP server."""
        self._runner = web.AppRunner(self.app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, "0.0.0.0", self.port, reuse_address=True)
        await site.start()
        logger.info("Cast Bridge hub started on port %s", self.port)

    async def stop(self) -> None:
        """Stop the HTTP server and close client sockets."""
        for ws in list(self._ws_clients):
            if not ws.closed:
                await ws.close()
        self._ws_clients.clear()
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
        logger.info("Cast Bridge hub stopped")

    # --- Routes ---

    async def _handle_health(self, request: web.Request) -> web.Response:
        """Health check endpoint."""
        return web.json_response(
            {"status": "ok", "receivers": len(self.registry.sessions)}
        )

    async def _handle_receivers(self, request: web.Request) -> web.Response:
        """List receivers with a live session."""
        return web.json_response({"receivers": sorted(self.registry.sessions)})

    async def _handle_status(self, request: web.Request) -> web.Response:
        """Return the snapshot of one receiver."""
        session = self.registry.get_session(request.match_info["name"])
        if session is None:
            return web.json_response({"error": "Receiver not found"}, status=404)
        return web.json_response(_snapshot_json(session.get_status()))

    async def _handle_command(self, request: web.Request) -> web.Response:
        """Run a session command named in the path."""
        session = self.registry.get_session(request.match_info["name"])
        if session is None:
            return web.json_response({"error": "Receiver not found"}, status=404)
        command = request.match_info["command"]
        handler = COMMANDS.get(command)
        if handler is None:
            return web.json_response({"error": f"Unknown command '{command}'"}, status=400)

        body: Any = {}
        if request.can_read_body:
            try:
                body = await request.json()
            except ValueError:
                return web.json_response({"error": "Invalid JSON body"}, status=400)
        if not isinstance(body, dict):
            return web.json_response({"error": "Body must be a JSON object"}, status=400)

        try:
            call = handler(session, body)
        except (KeyError, TypeError, ValueError) as err:
            return web.json_response({"error": f"Invalid body: {err}"}, status=400)
        logger.debug("Hub command %s for %s", command, session.name)
        await call
        return web.json_response({"status": "ok"})

    async def _handle_ws(self, request: web.Request) -> web.WebSocketResponse:
        """WebSocket receiving status and message pushes for all receivers."""
        ws = web.WebSocketResponse(heartbeat=30)
        await ws.prepare(request)
        self._ws_clients.add(ws)
        logger.info("WebSocket connected: clients=%d", len(self._ws_clients))

        for session in list(self.registry.sessions.values()):
            await self._ws_send(ws, self._status_message(session.name, session.get_status()))

        try:
            async for _msg in ws:
                pass
        finally:
            self._ws_clients.discard(ws)
            logger.debug("WebSocket client disconnected")

        return ws

    # --- Push ---

    def push_status(self, receiver_name: str, snapshot: ReceiverSnapshot) -> None:
        """Broadcast a receiver snapshot to all clients."""
        self._broadcast(self._status_message(receiver_name, snapshot))

    def push_message(self, receiver_name: str, message: str) -> None:
        """Broadcast a human-readable message about a receiver."""
        logger.info("Message for %s: %s", receiver_name, message)
        self._broadcast(
            json.dumps({"type": "message", "receiver": receiver_name, "message": message})
        )

    @staticmethod
    def _status_message(receiver_name: str, snapshot: ReceiverSnapshot) -> str:
        return json.dumps(
            {
                "type": "status",
                "receiver": receiver_name,
                "status": _snapshot_json(snapshot),
            }
        )

    def _broadcast(self, msg: str) -> None:
        for ws in list(self._ws_clients):
            if not ws.closed:
                task = asyncio.create_task(self._ws_send(ws, msg))
                self._send_tasks.add(task)
                task.add_done_callback(self._send_tasks.discard)

    async def _ws_send(self, ws: web.WebSocketResponse, text: str) -> None:
        """Send text to WebSocket, ignore errors."""
        try:
            await ws.send_str(text)
        except Exception as exc:
            logger.debug("WebSocket send failed: %s", exc)
