import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from wedding_planner.db.async_session import get_async_db, check_async_database_health
from wedding_planner.schemas.base import ApiResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=ApiResponse)
@router.get("", response_model=ApiResponse)
async def health_check(db: AsyncSession = Depends(get_async_db)):
    """
    Database connectivity check.

    Returns:
        ApiResponse: health details; served with 503 when the database is unreachable
    """
    health_status = await check_async_database_health(db)
    if health_status["status"] != "healthy":
        logger.warning(f"Health check reported unhealthy database: {health_status['error']}")
        body = ApiResponse.failure("Service unavailable", health_status["error"])
        body.data = health_status
        return JSONResponse(status_code=503, content=body.model_dump(mode="json"))
    return ApiResponse.ok(health_status)
