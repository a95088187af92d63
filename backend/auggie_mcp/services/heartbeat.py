import asyncio
from typing import Callable, Optional

from auggie_mcp.core.config import HEARTBEAT_FLOOR_MS


def heartbeat_interval(heartbeat_ms: int) -> Optional[float]:
    """Seconds between keepalives, or None when heartbeats are off."""
    if heartbeat_ms <= 0:
        return None
    return max(HEARTBEAT_FLOOR_MS, heartbeat_ms) / 1000.0


class Heartbeat:
    """Recurring keepalive bound to a single session.

    ``start`` may be called once; ``cancel`` is idempotent and is invoked
    by the owning session on its terminal transition.
    """

    def __init__(self, interval_sec: float, beat: Callable[[], object]) -> None:
        self.interval_sec = interval_sec
        self._beat = beat
        self._task: Optional[asyncio.Task[None]] = None
        self._cancelled = False
        self.ticks = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._cancelled

    def start(self) -> None:
        if self._task is not None or self._cancelled:
            raise RuntimeError("heartbeat already started")
        self._task = asyncio.create_task(self._run())

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        if self._task is not None:
            self._task.cancel()

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_sec)
            self.ticks += 1
            self._beat()
