from fastapi import APIRouter

from auggie_mcp.schemas.stream import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(ok=True)
