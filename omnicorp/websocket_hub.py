from __future__ import annotations

import asyncio
import logging

from fastapi import WebSocket

from omnicorp.api.models import GameView


logger = logging.getLogger(__name__)


class GameWebSocketHub:
    """In-process WebSocket fan-out of the UI snapshot.

    There is a single game per process, so every connection receives every
    `game_updated` payload. Payloads should be JSON-serializable dicts.
    """

    def __init__(self) -> None:
        self._conns: set[WebSocket] = set()
        self._lock = asyncio.Lock()
        self._latest: dict[str, object] | None = None
        self._flush_task: asyncio.Task[None] | None = None

    @property
    def connection_count(self) -> int:
        return len(self._conns)

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        async with self._lock:
            self._conns.add(websocket)

    async def disconnect(self, websocket: WebSocket) -> None:
        async with self._lock:
            self._conns.discard(websocket)

    async def broadcast(self, payload: dict[str, object]) -> None:
        async with self._lock:
            conns = list(self._conns)

        if not conns:
            return

        dead: list[WebSocket] = []
        for ws in conns:
            try:
                await ws.send_json(payload)
            except Exception:
                dead.append(ws)

        if dead:
            async with self._lock:
                for ws in dead:
                    self._conns.discard(ws)

    def publish_soon(self, view: GameView) -> None:
        """View listener: schedule a broadcast on the running loop.

        Session listeners are synchronous, so the send happens in a task.
        At most one broadcast task is in flight; views published meanwhile
        collapse into the latest one. Without a running loop (plain sync
        callers) the update is dropped.
        """

        if not self._conns:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running loop; dropping game_updated broadcast")
            return

        self._latest = {"type": "game_updated", "state": view.model_dump(mode="json", by_alias=True)}
        if self._flush_task is None or self._flush_task.done():
            self._flush_task = loop.create_task(self._flush())

    async def _flush(self) -> None:
        while self._latest is not None:
            payload, self._latest = self._latest, None
            await self.broadcast(payload)
