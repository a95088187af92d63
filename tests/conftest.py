"""
Pytest configuration and shared fixtures.

Real-process tests point the CLI path at the running Python interpreter, so
``args`` like ``["-c", "print('hi')"]`` stand in for an Auggie invocation.
"""

import json
import sys
from dataclasses import replace
from typing import Callable, List

import pytest
from fastapi.testclient import TestClient

from auggie_mcp.core.config import Settings
from auggie_mcp.main import create_app

PYTHON = sys.executable


def split_frames(body: str) -> List[str]:
    """Split an SSE body into frames, dropping the trailing terminator."""
    return [frame for frame in body.split("\n\n") if frame]


def stream_text(frames: List[str], event: str) -> str:
    """Join the ``chunk`` payloads of every ``event`` frame.

    Pipe reads are forwarded as-is, so chunk boundaries depend on how the
    child buffers its output; assertions compare the joined text.
    """
    prefix = f"event: {event}\ndata: "
    return "".join(
        json.loads(frame[len(prefix):])["chunk"]
        for frame in frames
        if frame.startswith(prefix)
    )


@pytest.fixture
def repo(tmp_path):
    """A small project tree used as the trusted root."""
    (tmp_path / "README.md").write_text("# Auggie MCP\n\nStreaming bridge docs.\n")
    docs = tmp_path / "docs"
    docs.mkdir()
    (docs / "guide.md").write_text("intro\nAuggie usage here\nend\n")
    (tmp_path / "main.py").write_text("print('auggie')\n")
    skipped = tmp_path / "node_modules"
    skipped.mkdir()
    (skipped / "pkg.md").write_text("Auggie inside node_modules\n")
    return tmp_path


@pytest.fixture
def make_settings(repo) -> Callable[..., Settings]:
    base = Settings(
        allow_exec=True,
        http_port=None,
        heartbeat_ms=0,
        mock_stream=False,
        repo_root=str(repo),
        cli_path=PYTHON,
    )

    def factory(**overrides) -> Settings:
        return replace(base, **overrides)

    return factory


@pytest.fixture
def make_client(make_settings) -> Callable[..., TestClient]:
    def factory(**overrides) -> TestClient:
        return TestClient(create_app(make_settings(**overrides)))

    return factory


@pytest.fixture
def frames() -> Callable[[str], List[str]]:
    return split_frames
