from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

from wedding_planner.core.config import settings
from wedding_planner.api.router import api_router
from wedding_planner.db.async_session import startup_async_database, shutdown_async_database
from wedding_planner.schemas.base import ApiResponse
from wedding_planner.utils.logger import configure_logging

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.PROJECT_NAME,
    description=settings.PROJECT_DESCRIPTION,
    version=settings.VERSION,
    redirect_slashes=False,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix=settings.API_PREFIX)


def _envelope(status_code: int, body: ApiResponse) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render HTTP errors as ``{success: false, error, message?}``."""
    error = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return _envelope(exc.status_code, ApiResponse.failure(error, getattr(exc, "message", None)))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed or missing body fields are a 400, listing the offending fields."""
    fields = []
    details = []
    for err in exc.errors():
        location = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        field = ".".join(location) or "body"
        if field not in fields:
            fields.append(field)
        details.append(f"{field}: {err.get('msg')}")

    body = ApiResponse.failure(f"Missing or invalid fields: {', '.join(fields)}", "; ".join(details))
    return _envelope(400, body)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return _envelope(500, ApiResponse.failure("Internal server error", str(exc)))


@app.on_event("startup")
async def startup_event():
    """Initialize services on application startup."""
    try:
        logger.info(f"Starting up {settings.PROJECT_NAME}...")
        await startup_async_database()
        logger.info(f"{settings.PROJECT_NAME} startup completed successfully")
    except Exception as e:
        logger.error(f"Failed to start up application: {e}")
        raise


@app.on_event("shutdown")
async def shutdown_event():
    """Clean up services on application shutdown."""
    try:
        logger.info(f"Shutting down {settings.PROJECT_NAME}...")
        await shutdown_async_database()
        logger.info("Async database connections closed")
    except Exception as e:
        logger.error(f"Error during application shutdown: {e}")


@app.get("/")
async def root():
    """Welcome endpoint."""
    return {"success": True, "message": f"Welcome to {settings.PROJECT_NAME}"}
