import asyncio
import codecs
import logging
import os
import shutil
from typing import TYPE_CHECKING, Callable, Optional

from auggie_mcp.core.config import CLI_NAME, Settings

if TYPE_CHECKING:
    from auggie_mcp.services.sessions import StreamSession

logger = logging.getLogger(__name__)

MOCK_STDOUT = "mock: hello\n"
MOCK_STDERR = "mock: warn\n"

READ_CHUNK_BYTES = 64 * 1024


def resolve_cli_path(settings: Settings) -> Optional[str]:
    if settings.cli_path and os.path.exists(settings.cli_path):
        return settings.cli_path
    return shutil.which(CLI_NAME)


def exit_code_of(returncode: Optional[int]) -> Optional[int]:
    # asyncio reports death-by-signal as a negative return code
    if returncode is None or returncode < 0:
        return None
    return returncode


def terminate_process(process: asyncio.subprocess.Process) -> None:
    if process.returncode is not None:
        return
    try:
        process.terminate()
    except ProcessLookupError:
        pass


async def read_stream_chunks(
    stream: Optional[asyncio.StreamReader],
    emit: Callable[[str], object],
) -> None:
    if stream is None:
        return
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    while True:
        data = await stream.read(READ_CHUNK_BYTES)
        if not data:
            tail = decoder.decode(b"", final=True)
            if tail:
                emit(tail)
            break
        text = decoder.decode(data)
        if text:
            emit(text)


async def write_stdin(
    process: asyncio.subprocess.Process, stdin_text: Optional[str]
) -> None:
    if process.stdin is None:
        return
    try:
        if stdin_text:
            process.stdin.write(stdin_text.encode())
            await process.stdin.drain()
    except (BrokenPipeError, ConnectionResetError):
        logger.info("pid %s closed stdin before reading it", process.pid)
    finally:
        # tools that read stdin block until they see end-of-input
        process.stdin.close()


async def run_mock(session: "StreamSession") -> None:
    session.mark_spawned(None)
    await asyncio.sleep(0.01)
    session.emit_stdout(MOCK_STDOUT)
    await asyncio.sleep(0.01)
    session.emit_stderr(MOCK_STDERR)
    await asyncio.sleep(0.02)
    session.finish(0)


async def run_process(session: "StreamSession") -> None:
    settings = session.settings
    request = session.request
    cli_path = resolve_cli_path(settings)
    if not cli_path:
        session.emit_error(f"{CLI_NAME} cli not found on PATH")
        session.finish(None)
        return

    try:
        process = await asyncio.create_subprocess_exec(
            cli_path,
            *request.args,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=settings.repo_root,
            env=os.environ.copy(),
        )
    except OSError as exc:
        session.emit_error(f"spawn {cli_path} failed: {exc}")
        session.finish(None)
        return

    logger.info("session %s spawned pid %s", session.session_id, process.pid)
    session.mark_spawned(process)
    if session.disconnected:
        terminate_process(process)

    stdout_task = asyncio.create_task(
        read_stream_chunks(process.stdout, session.emit_stdout)
    )
    stderr_task = asyncio.create_task(
        read_stream_chunks(process.stderr, session.emit_stderr)
    )

    await write_stdin(process, request.stdin_text)

    try:
        returncode = await process.wait()
    finally:
        results = await asyncio.gather(stdout_task, stderr_task, return_exceptions=True)
    for result in results:
        if isinstance(result, Exception):
            session.emit_error(f"output read failed: {result}")

    logger.info(
        "session %s pid %s exited with code %s",
        session.session_id,
        process.pid,
        returncode,
    )
    session.finish(exit_code_of(returncode))


async def run_session(session: "StreamSession") -> None:
    session.begin_spawn()
    try:
        if session.settings.mock_stream:
            await run_mock(session)
        else:
            await run_process(session)
    except Exception as exc:  # pragma: no cover - safety net
        logger.exception("session %s failed", session.session_id)
        session.emit_error(str(exc) or exc.__class__.__name__)
    finally:
        if not session.terminal:
            if session.process is not None:
                terminate_process(session.process)
            session.finish(None)
