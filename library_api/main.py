"""
FastAPI main application for the Library Management API.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import PyMongoError

from library_api.config import config
from library_api.database import LibraryDatabase
from library_api.exceptions import LibraryAPIError
from library_api.models import ErrorResponse, HealthResponse
from library_api.routes import authors_router, books_router
from library_api.validation import describe_error
from utilities.logger import setup_logging

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    setup_logging(
        log_level=config.log_level,
        log_format=config.log_format,
        log_file=config.get_log_file_path(),
        debug=config.debug,
    )
    logger.info(
        "Starting Library API",
        host=config.host,
        port=config.port,
        debug=config.debug,
        database=config.mongodb_database,
    )

    client = AsyncIOMotorClient(config.mongodb_url)
    try:
        database = client[config.mongodb_database]

        # Test connection
        await database.command("ping")
        logger.info("Database connection established", database=config.mongodb_database)

        library_db = LibraryDatabase(
            database,
            authors_collection=config.authors_collection,
            books_collection=config.books_collection,
        )
        await library_db.ensure_indexes()
        app.state.database = library_db

    except (PyMongoError, LibraryAPIError) as e:
        logger.error("Failed to connect to database", error=str(e))
        client.close()
        raise

    yield

    # Shutdown
    logger.info("Shutting down Library API")
    app.state.database = None
    client.close()


# Create FastAPI application
app = FastAPI(
    title=config.api_title,
    description=config.api_description,
    version=config.api_version,
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins,
    allow_credentials=config.cors_allow_credentials,
    allow_methods=config.cors_allow_methods,
    allow_headers=config.cors_allow_headers,
)


# Exception handlers
@app.exception_handler(LibraryAPIError)
async def library_exception_handler(request: Request, exc: LibraryAPIError):
    """Translate library errors into {message} responses."""
    if exc.status_code >= 500:
        logger.error("Request failed", path=request.url.path, message=exc.message, context=exc.context)
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(message=exc.message).model_dump(),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Report malformed requests (bad JSON, missing body) as 400."""
    errors = exc.errors()
    reason = describe_error(errors[0]) if errors else "request is invalid"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ErrorResponse(message=f"Invalid request, because {reason}").model_dump(),
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions."""
    logger.error("Unhandled exception", error=str(exc), path=request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(message="Internal server error").model_dump(),
    )


# Health check endpoint
@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check(request: Request):
    """Health check endpoint."""
    db_status = "unavailable"
    library_db = getattr(request.app.state, "database", None)
    if library_db is not None:
        health_info = await library_db.health_check()
        db_status = health_info.get("status", "unknown")

    return HealthResponse(
        status="healthy" if db_status == "healthy" else "degraded",
        timestamp=datetime.now(timezone.utc),
        version=config.api_version,
        database_status=db_status,
    )


app.include_router(authors_router, prefix=config.api_prefix)
app.include_router(books_router, prefix=config.api_prefix)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "library_api.main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level=config.log_level.lower(),
    )
