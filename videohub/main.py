"""FastAPI application initialization."""

from contextlib import asynccontextmanager
from uuid import uuid4

from dotenv import load_dotenv

# Load environment variables before anything else
load_dotenv()

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from videohub.api.middleware import CorrelationIdMiddleware
from videohub.api.users import router as users_router
from videohub.config import get_settings
from videohub.database import close_database, health_check, init_database, run_migrations
from videohub.services.logging_service import configure_logging, get_logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    settings = get_settings()
    configure_logging(settings.log_level)
    logger = get_logger("main")

    try:
        await init_database()
        await run_migrations()
        logger.info("database_initialized")
    except Exception as e:
        logger.warning(
            "database_initialization_failed",
            error=str(e),
            note="Continuing without database - user endpoints will return 500",
        )

    logger.info("application_started", log_level=settings.log_level)

    yield

    await close_database()
    logger.info("application_shutdown")


app = FastAPI(
    title="VideoHub - Accounts API",
    description="User registration, login and session token lifecycle",
    version="0.1.0",
    lifespan=lifespan,
)


def _error_body(status_code: int, message: str, errors: list) -> dict:
    return {
        "statusCode": status_code,
        "data": None,
        "message": message,
        "success": False,
        "errors": errors,
    }


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Render HTTP errors in the standard response envelope."""
    correlation_id = getattr(request.state, "correlation_id", None) or str(uuid4())
    headers = dict(exc.headers or {})
    headers["X-Correlation-Id"] = correlation_id

    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.status_code, str(exc.detail), []),
        headers=headers,
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors as 400 Bad Request."""
    correlation_id = getattr(request.state, "correlation_id", None) or str(uuid4())
    logger = structlog.get_logger()

    errors = exc.errors()
    if errors:
        first_error = errors[0]
        field = ".".join(str(loc) for loc in first_error.get("loc", ["unknown"]))
        message = first_error.get("msg", "Validation failed")
        detail = f"Field '{field}': {message}"
    else:
        detail = "Request validation failed"

    logger.warning("validation_error", correlation_id=correlation_id, detail=detail)

    return JSONResponse(
        status_code=400,
        content=_error_body(
            400,
            detail,
            [{"loc": list(e.get("loc", [])), "msg": e.get("msg", "")} for e in errors],
        ),
        headers={"X-Correlation-Id": correlation_id},
    )


@app.get("/health")
async def health() -> dict:
    """Liveness plus database connectivity."""
    return {"status": "ok", "database": await health_check()}


app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(CorrelationIdMiddleware)

app.include_router(users_router)
