import asyncio
import logging
from typing import Any, Dict

from aiohttp import web

logger = logging.getLogger(__name__)


def publish_nowait(q: asyncio.Queue, event: Dict[str, Any]) -> None:
    # keep only latest events if queue is full
    if q.full():
        try:
            q.get_nowait()
            q.task_done()
        except asyncio.QueueEmpty:
            pass
    q.put_nowait(event)


def publish_error(q: asyncio.Queue, error: str, **extra) -> None:
    event = {"type": "error", "error": error}
    event.update(extra)
    publish_nowait(q, event)


async def pump(ws: web.WebSocketResponse, q: asyncio.Queue) -> None:
    """Forward queued events to one websocket until it closes or the task is cancelled."""
    while True:
        event = await q.get()
        try:
            if ws.closed:
                return
            await ws.send_json(event)
        except ConnectionResetError:
            logger.debug("websocket went away while sending %s", event.get("type"))
            return
        finally:
            q.task_done()
