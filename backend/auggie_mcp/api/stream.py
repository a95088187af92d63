from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response, StreamingResponse

from auggie_mcp.api.deps import get_gate, get_settings
from auggie_mcp.core.config import Settings
from auggie_mcp.core.errors import MalformedBody, ValidationFailed
from auggie_mcp.core.gate import ExecutionGate
from auggie_mcp.core.logging import logger
from auggie_mcp.services.sessions import StreamSession
from auggie_mcp.services.sse import SSE_HEADERS
from auggie_mcp.services.validation import parse_stream_request

router = APIRouter()


@router.post("/stream")
async def stream(
    request: Request,
    settings: Settings = Depends(get_settings),
    gate: ExecutionGate = Depends(get_gate),
) -> Response:
    session = StreamSession(settings)

    # the gate is checked before the body is even read
    denied = gate.check()
    if denied is not None:
        session.reject()
        logger.info("stream rejected: execution disabled")
        return JSONResponse(status_code=denied.status_code, content=denied.body())

    result = parse_stream_request(await request.body())
    if isinstance(result, (MalformedBody, ValidationFailed)):
        session.reject()
        logger.info("stream rejected: %s", type(result).__name__)
        return JSONResponse(status_code=result.status_code, content=result.body())

    session.request = result
    logger.info(
        "stream %s accepted (%d args, mock=%s)",
        session.session_id,
        len(result.args),
        settings.mock_stream,
    )
    return StreamingResponse(
        session.stream(request.receive),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
