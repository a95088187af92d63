import asyncio
import json
from typing import AsyncIterator, Dict, Optional

from auggie_mcp.schemas.stream import SSEEvent

SSE_HEADERS: Dict[str, str] = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}

CONNECTED_COMMENT = "ok"
KEEPALIVE_COMMENT = "keepalive"


def format_comment(text: str) -> str:
    return f":{text}\n\n"


def format_event(event: SSEEvent) -> str:
    payload = event.model_dump(exclude={"event"})
    data = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
    return f"event: {event.event}\ndata: {data}\n\n"


class FrameChannel:
    """Ordered queue of encoded frames feeding one streaming response.

    Producers (process pumps, heartbeat) call ``send``/``comment`` without
    awaiting. Once closed every further write is dropped, which is what
    keeps frames from landing after ``end`` or after the peer left.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[Optional[str]] = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, event: SSEEvent) -> bool:
        return self._put(format_event(event))

    def comment(self, text: str) -> bool:
        return self._put(format_comment(text))

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(None)

    def _put(self, frame: str) -> bool:
        if self._closed:
            return False
        self._queue.put_nowait(frame)
        return True

    async def frames(self) -> AsyncIterator[str]:
        while True:
            frame = await self._queue.get()
            if frame is None:
                return
            yield frame
