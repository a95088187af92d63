from __future__ import annotations

import asyncio
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from auggie_mcp.api import health, stream
from auggie_mcp.core.config import APP_NAME, APP_VERSION, Settings, get_settings
from auggie_mcp.core.gate import ExecutionGate
from auggie_mcp.core.logging import configure_logging, logger


async def not_found(request: Request, exc: StarletteHTTPException) -> PlainTextResponse:
    # unknown paths and wrong methods on known paths look the same to callers
    if exc.status_code in (404, 405):
        return PlainTextResponse("Not found", status_code=404)
    return PlainTextResponse(str(exc.detail), status_code=exc.status_code)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title="Auggie MCP streaming bridge", version=APP_VERSION)
    app.state.settings = settings
    app.state.gate = ExecutionGate.from_settings(settings)
    app.add_exception_handler(StarletteHTTPException, not_found)
    app.include_router(health.router)
    app.include_router(stream.router)
    return app


async def serve_http(settings: Settings) -> None:
    import uvicorn

    config = uvicorn.Config(
        create_app(settings),
        host=settings.http_host,
        port=settings.http_port or 0,
        # route uvicorn's loggers through ours; stdout belongs to MCP
        log_config=None,
        log_level=settings.log_level.lower(),
    )
    server = uvicorn.Server(config)
    logger.info(
        "[%s] HTTP streaming listening on %s:%s",
        APP_NAME,
        settings.http_host,
        settings.http_port,
    )
    await server.serve()


async def serve(settings: Settings) -> None:
    from auggie_mcp.mcp.server import mcp

    tasks = [mcp.run_stdio_async()]
    if settings.http_enabled:
        tasks.append(serve_http(settings))
    await asyncio.gather(*tasks)


def run() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info(
        "%s %s starting (exec=%s, mock=%s, root=%s)",
        APP_NAME,
        APP_VERSION,
        settings.allow_exec,
        settings.mock_stream,
        settings.repo_root,
    )
    asyncio.run(serve(settings))


if __name__ == "__main__":
    run()
