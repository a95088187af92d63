from fastapi import Request

from auggie_mcp.core.config import Settings
from auggie_mcp.core.gate import ExecutionGate


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_gate(request: Request) -> ExecutionGate:
    return request.app.state.gate
