"""One-shot command helpers used by the MCP tools.

Unlike streaming sessions these buffer all output and enforce a fixed
wall-clock timeout, killing the child when it expires.
"""

import asyncio
import logging
import os
from dataclasses import dataclass
from typing import List, Optional, Sequence

from auggie_mcp.core.config import AUGGIE_TIMEOUT_MS, CLI_NAME, EXEC_TIMEOUT_MS, Settings
from auggie_mcp.core.errors import ExecFailed
from auggie_mcp.core.gate import ExecutionGate
from auggie_mcp.services.process import resolve_cli_path

logger = logging.getLogger(__name__)


@dataclass
class CmdResult:
    returncode: int
    stdout: str
    stderr: str


async def _communicate(
    argv: Sequence[str],
    cwd: str,
    timeout_ms: int,
    stdin_text: Optional[str] = None,
) -> CmdResult:
    try:
        process = await asyncio.create_subprocess_exec(
            *argv,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=cwd,
            env=os.environ.copy(),
        )
    except OSError as exc:
        raise ExecFailed(f"failed to start {argv[0]}: {exc}") from exc

    # an empty payload still closes stdin so the child sees end-of-input
    payload = stdin_text.encode() if stdin_text else b""
    try:
        stdout, stderr = await asyncio.wait_for(
            process.communicate(payload), timeout=timeout_ms / 1000.0
        )
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        logger.warning("%s timed out after %sms", argv[0], timeout_ms)
        raise ExecFailed(f"{os.path.basename(argv[0])} timed out")

    return CmdResult(
        returncode=process.returncode if process.returncode is not None else -1,
        stdout=stdout.decode(errors="replace"),
        stderr=stderr.decode(errors="replace"),
    )


async def run_exec_file(
    cmd: str,
    args: Sequence[str],
    cwd: str,
    timeout_ms: int = EXEC_TIMEOUT_MS,
) -> CmdResult:
    """Run ``cmd`` to completion; raise ``ExecFailed`` unless it exits 0."""
    result = await _communicate([cmd, *args], cwd, timeout_ms)
    if result.returncode != 0:
        raise ExecFailed(
            f"{cmd} exited with code {result.returncode}",
            stdout=result.stdout,
            stderr=result.stderr,
        )
    return result


async def run_cli(
    settings: Settings, args: Sequence[str], timeout_ms: int = EXEC_TIMEOUT_MS
) -> CmdResult:
    cli_path = resolve_cli_path(settings)
    if not cli_path:
        raise ExecFailed(f"{CLI_NAME} cli not found on PATH")
    return await run_exec_file(cli_path, args, settings.repo_root, timeout_ms)


async def run_auggie(
    settings: Settings,
    args: List[str],
    stdin_text: Optional[str] = None,
    timeout_ms: int = AUGGIE_TIMEOUT_MS,
) -> str:
    """Run an instruction through the CLI and return its combined output.

    Returns the disabled notice instead of spawning when the gate is closed.
    Any exit code is accepted; stderr is appended after stdout.
    """
    gate = ExecutionGate.from_settings(settings)
    if not gate.is_allowed():
        return gate.disabled_message("Auggie calls")
    cli_path = resolve_cli_path(settings)
    if not cli_path:
        raise ExecFailed(f"{CLI_NAME} cli not found on PATH")
    result = await _communicate(
        [cli_path, *args], settings.repo_root, timeout_ms, stdin_text
    )
    text = result.stdout + (f"\n{result.stderr}" if result.stderr else "")
    return text.strip() or "(no output)"
