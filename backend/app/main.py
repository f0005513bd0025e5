"""
Goc Truyen — FastAPI backend entry point.

Serves the story catalog, chapter reader, comments, favorites and reading
history for the single-page client, plus the /api/admin back-office.
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from app.api import (
    admin,
    auth,
    catalog,
    chapters,
    comments,
    favorites,
    health,
    reading_history,
    reports,
    stories,
    users,
)
from app.config import settings
from app.database import SessionLocal, create_tables
from app.repositories.tracking import MemoryTrackingRepository
from app.services import bootstrap
from app.services.errors import DuplicateFavoriteError

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

os.makedirs(settings.UPLOAD_DIR, exist_ok=True)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.TRACKING_BACKEND == "memory":
        logger.warning("TRACKING_BACKEND=memory: favorites and reading history are not persisted")
        app.state.tracking_repository = MemoryTrackingRepository()

    if settings.AUTO_CREATE_TABLES:
        create_tables()

    if settings.ADMIN_PASSWORD or settings.SEED_GENRES:
        db = SessionLocal()
        try:
            bootstrap.run(db)
        except SQLAlchemyError as exc:
            logger.error("Startup seeding skipped: %s", exc)
        finally:
            db.close()
    yield


app = FastAPI(
    title="goctruyen",
    description="Serialized novels and comics: reading, comments, favorites and history",
    version="1.0.0",
    debug=settings.DEBUG,
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------
# allow_origins=["*"] is rejected by browsers together with allow_credentials=True.
# When the wildcard is present (dev), switch to allow_origin_regex=".*".
_cors_origins = [o for o in settings.CORS_ORIGINS if o != "*"]
_cors_regex = ".*" if len(_cors_origins) < len(settings.CORS_ORIGINS) else None

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_origin_regex=_cors_regex,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
app.include_router(health.router)
app.include_router(auth.router, prefix="/api")
app.include_router(users.router, prefix="/api")
app.include_router(catalog.router, prefix="/api")
app.include_router(stories.router, prefix="/api")
app.include_router(chapters.router, prefix="/api")
app.include_router(comments.router, prefix="/api")
app.include_router(reports.router, prefix="/api")
app.include_router(favorites.router, prefix="/api")
app.include_router(reading_history.router, prefix="/api")
app.include_router(admin.router, prefix="/api")

# Serve uploaded covers, comic pages and avatars as static assets
app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")

# ---------------------------------------------------------------------------
# Custom exception handlers
# ---------------------------------------------------------------------------


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Invalid request data", "errors": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(ValidationError)
async def response_validation_handler(request: Request, exc: ValidationError) -> JSONResponse:
    # Raised while building a response model from stored rows, never from
    # client input (that arrives as RequestValidationError).
    logger.exception("Serialization error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


@app.exception_handler(DuplicateFavoriteError)
async def duplicate_favorite_handler(request: Request, exc: DuplicateFavoriteError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal database error"},
    )
