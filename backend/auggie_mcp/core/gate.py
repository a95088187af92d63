from dataclasses import dataclass
from typing import Optional

from auggie_mcp.core.config import Settings
from auggie_mcp.core.errors import ExecutionDisabled


@dataclass(frozen=True)
class ExecutionGate:
    allowed: bool

    @classmethod
    def from_settings(cls, settings: Settings) -> "ExecutionGate":
        return cls(allowed=settings.allow_exec)

    def is_allowed(self) -> bool:
        return self.allowed

    def check(self) -> Optional[ExecutionDisabled]:
        if self.allowed:
            return None
        return ExecutionDisabled()

    def disabled_message(self, action: str) -> str:
        return f"Execution disabled. Set AUGGIE_MCP_ALLOW_EXEC=true to allow {action}."
