# Essential imports
import time
from fastapi import FastAPI, Request, status, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from routers import auth, todo, setup, claims
from contextlib import asynccontextmanager

# Import all models for SQLAlchemy relationship resolution
import models  # This triggers the imports in models/__init__.py
from core.database import Base, engine

# Rate limiter imports
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from middleware.rate_limiter import limiter

# Logging imports
from core.logging_config import setup_logging
from core.config import settings
from core.exceptions import TodoApiException, ValidationFailure, PersistenceFailure
from middleware import RequestIDMiddleware, get_request_id
from utils.logger import get_logger, log_request

# CORS imports
from fastapi.middleware.cors import CORSMiddleware

# Initialize logging
setup_logging(
    log_level=settings.LOG_LEVEL,
    log_dir=settings.LOG_DIR
)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    logger.info("Application startup complete", extra={"event": "startup"})
    yield
    logger.info("Application shutting down", extra={"event": "shutdown"})


app = FastAPI(
    title="Todo API",
    description="Task-list API with JWT authentication and refresh-token rotation",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Log every HTTP exchange with its status code and duration.
    """
    start_time = time.time()

    response = await call_next(request)

    log_request(
        logger,
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=(time.time() - start_time) * 1000,
        client_ip=request.client.host if request.client else None
    )

    return response


# Added last so it wraps the logging middleware and the id is set before it logs
app.add_middleware(RequestIDMiddleware)


@app.get("/health")
async def health_check():
    logger.debug("Health check requested")
    return {"status": "Healthy"}


@app.exception_handler(TodoApiException)
async def todo_api_exception_handler(request: Request, exc: TodoApiException):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = ["Invalid payload"]
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())[1:])
        errors.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))

    logger.info(
        "Request validation failed",
        extra={"path": request.url.path, "error_count": len(errors) - 1}
    )

    failure = ValidationFailure("Invalid payload", errors=errors)
    return JSONResponse(status_code=failure.status_code, content=failure.to_dict())


@app.exception_handler(SQLAlchemyError)
async def storage_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.error(
        f"Storage error: {type(exc).__name__}",
        extra={
            "path": request.url.path,
            "method": request.method,
            "request_id": get_request_id(request)
        },
        exc_info=True
    )
    failure = PersistenceFailure("Service temporarily unavailable")
    return JSONResponse(status_code=failure.status_code, content=failure.to_dict())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Log anything unhandled with full context and return an opaque 500.
    """
    if isinstance(exc, (HTTPException, RequestValidationError)):
        raise

    logger.error(
        f"Unhandled exception: {str(exc)}",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error_type": type(exc).__name__,
            "request_id": get_request_id(request)
        },
        exc_info=True
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"}
    )


# Including routers
app.include_router(auth.router)
app.include_router(todo.router)
app.include_router(setup.router)
app.include_router(claims.router)


# Add rate limiter to the app
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
