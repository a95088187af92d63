import asyncio
import enum
import logging
import uuid
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, FrozenSet, Optional, Set

from auggie_mcp.core.config import Settings
from auggie_mcp.schemas.stream import (
    EndEvent,
    ErrorEvent,
    StderrEvent,
    StdoutEvent,
    StreamRequest,
)
from auggie_mcp.services.heartbeat import Heartbeat, heartbeat_interval
from auggie_mcp.services.process import run_session, terminate_process
from auggie_mcp.services.sse import (
    CONNECTED_COMMENT,
    KEEPALIVE_COMMENT,
    FrameChannel,
    format_comment,
)

logger = logging.getLogger(__name__)

Receive = Callable[[], Awaitable[Dict[str, Any]]]


class SessionState(str, enum.Enum):
    VALIDATING = "validating"
    REJECTED = "rejected"
    SPAWNING = "spawning"
    STREAMING = "streaming"
    ENDED = "ended"


TRANSITIONS: Dict[SessionState, FrozenSet[SessionState]] = {
    SessionState.VALIDATING: frozenset({SessionState.REJECTED, SessionState.SPAWNING}),
    SessionState.SPAWNING: frozenset({SessionState.STREAMING, SessionState.ENDED}),
    SessionState.STREAMING: frozenset({SessionState.ENDED}),
    SessionState.REJECTED: frozenset(),
    SessionState.ENDED: frozenset(),
}
TERMINAL_STATES = frozenset({SessionState.REJECTED, SessionState.ENDED})


class InvalidTransition(RuntimeError):
    pass


active_sessions: Set["StreamSession"] = set()
runner_tasks: Set["asyncio.Task[None]"] = set()


class StreamSession:
    """One streaming exchange: at most one child process, at most one heartbeat."""

    def __init__(
        self, settings: Settings, request: Optional[StreamRequest] = None
    ) -> None:
        self.session_id = f"stream_{uuid.uuid4().hex}"
        self.settings = settings
        self.request = request
        self.state = SessionState.VALIDATING
        self.errored = False
        self.exit_code: Optional[int] = None
        self.process: Optional[asyncio.subprocess.Process] = None
        self.heartbeat: Optional[Heartbeat] = None
        self.channel = FrameChannel()
        self.disconnected = False
        self.runner: Optional["asyncio.Task[None]"] = None

    @property
    def terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    def transition(self, target: SessionState) -> None:
        if target not in TRANSITIONS[self.state]:
            raise InvalidTransition(f"{self.state.value} -> {target.value}")
        self.state = target
        if target is SessionState.STREAMING:
            self._attach_heartbeat()
        if target in TERMINAL_STATES:
            self._on_terminal()

    def reject(self) -> None:
        self.transition(SessionState.REJECTED)

    def begin_spawn(self) -> None:
        active_sessions.add(self)
        self.transition(SessionState.SPAWNING)

    def mark_spawned(self, process: Optional[asyncio.subprocess.Process]) -> None:
        self.process = process
        self.transition(SessionState.STREAMING)

    def emit_stdout(self, chunk: str) -> None:
        self.channel.send(StdoutEvent(chunk=chunk))

    def emit_stderr(self, chunk: str) -> None:
        self.channel.send(StderrEvent(chunk=chunk))

    def emit_error(self, message: str) -> None:
        self.errored = True
        logger.warning("session %s error: %s", self.session_id, message)
        self.channel.send(ErrorEvent(message=message))

    def finish(self, code: Optional[int]) -> None:
        if self.terminal:
            return
        self.exit_code = code
        self.transition(SessionState.ENDED)
        self.channel.send(EndEvent(code=code))
        self.channel.close()

    def _attach_heartbeat(self) -> None:
        interval = heartbeat_interval(self.settings.heartbeat_ms)
        if interval is None or self.heartbeat is not None or self.disconnected:
            return
        self.heartbeat = Heartbeat(
            interval, lambda: self.channel.comment(KEEPALIVE_COMMENT)
        )
        self.heartbeat.start()

    def _on_terminal(self) -> None:
        if self.heartbeat is not None:
            self.heartbeat.cancel()
        self.process = None
        active_sessions.discard(self)

    def start(self) -> "asyncio.Task[None]":
        if self.request is None:
            raise RuntimeError("session has no accepted request")
        if self.runner is not None:
            raise RuntimeError("session already started")
        self.runner = asyncio.create_task(run_session(self))
        runner_tasks.add(self.runner)
        self.runner.add_done_callback(runner_tasks.discard)
        return self.runner

    async def stream(self, receive: Optional[Receive] = None) -> AsyncIterator[str]:
        """Encoded SSE frames for the HTTP response, ending after ``end``.

        When ``receive`` (the ASGI receive callable) is given, a watcher
        task turns ``http.disconnect`` into ``disconnect()`` even while the
        child is silent and nothing is being written.
        """
        yield format_comment(CONNECTED_COMMENT)
        self.start()
        watcher = None
        if receive is not None:
            watcher = asyncio.create_task(self._watch_disconnect(receive))
        try:
            async for frame in self.channel.frames():
                yield frame
        finally:
            if watcher is not None:
                watcher.cancel()
            self.disconnect()

    async def _watch_disconnect(self, receive: Receive) -> None:
        while not self.channel.closed:
            message = await receive()
            if message["type"] == "http.disconnect":
                if not self.terminal:
                    logger.info("session %s client went away", self.session_id)
                self.disconnect()
                return

    def disconnect(self) -> None:
        """Drop the transport side; terminate the child if it is still running.

        Runs synchronously so it is safe inside a cancelled generator. The
        runner task keeps going and reaps the process, but its remaining
        frames are discarded by the closed channel.
        """
        self.channel.close()
        if self.heartbeat is not None:
            self.heartbeat.cancel()
        if self.terminal:
            return
        self.disconnected = True
        process = self.process
        if process is not None and process.returncode is None:
            logger.info(
                "session %s client disconnected, terminating pid %s",
                self.session_id,
                process.pid,
            )
            terminate_process(process)
