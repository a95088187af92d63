import math
import os
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Mapping, Optional

APP_NAME = "auggie-mcp"
APP_VERSION = "0.1.0"

CLI_NAME = "auggie"
DOCS_URL = "https://docs.augmentcode.com/cli/reference"

HEARTBEAT_FLOOR_MS = 1000
EXEC_TIMEOUT_MS = 5000
AUGGIE_TIMEOUT_MS = 120000

_LEADING_DIGITS = re.compile(r"\s*(\d+)")


def _parse_port(raw: Optional[str]) -> Optional[int]:
    if raw is None or raw == "":
        return None
    # leading digits win ("8080abc" -> 8080); no digits at all means an
    # ephemeral port, HTTP stays enabled
    match = _LEADING_DIGITS.match(raw)
    return int(match.group(1)) if match else 0


def _parse_ms(raw: Optional[str]) -> int:
    if not raw:
        return 0
    try:
        value = float(raw)
    except ValueError:
        return 0
    if not math.isfinite(value):
        return 0
    return int(value)


@dataclass(frozen=True)
class Settings:
    allow_exec: bool = False
    http_port: Optional[int] = None
    http_host: str = "127.0.0.1"
    heartbeat_ms: int = 0
    mock_stream: bool = False
    repo_root: str = ""
    cli_path: Optional[str] = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        repo_root = env.get("AUGGIE_MCP_REPO_ROOT") or os.getcwd()
        return cls(
            allow_exec=env.get("AUGGIE_MCP_ALLOW_EXEC") == "true",
            http_port=_parse_port(env.get("AUGGIE_MCP_HTTP_PORT")),
            http_host=env.get("AUGGIE_MCP_HTTP_HOST", "127.0.0.1"),
            heartbeat_ms=_parse_ms(env.get("AUGGIE_MCP_HEARTBEAT_MS")),
            mock_stream=env.get("AUGGIE_MCP_MOCK_STREAM") == "true",
            repo_root=os.path.realpath(repo_root),
            cli_path=env.get("AUGGIE_CLI_PATH") or None,
            log_level=env.get("AUGGIE_MCP_LOG_LEVEL", "INFO").upper(),
        )

    @property
    def http_enabled(self) -> bool:
        return self.http_port is not None


@lru_cache
def get_settings() -> Settings:
    """Snapshot of the environment taken on first use and never re-read."""
    return Settings.from_env()
