from contextlib import asynccontextmanager

from fastapi import FastAPI, Depends
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from moodlog.db.base import get_db
from moodlog.core.catalog import get_catalog
from moodlog.core.config import settings
from moodlog.core.logging_config import configure_logging
from moodlog.routers import entries as entries_router
from moodlog.routers import analytics as analytics_router
from moodlog.routers import achievements as achievements_router
from moodlog.routers import reviews as reviews_router
from moodlog.routers import notifications as notifications_router
from moodlog.core.errors import (
    MoodLogException,
    moodlog_exception_handler,
    validation_exception_handler,
    unhandled_exception_handler,
)

configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # A malformed catalog raises CatalogError here and aborts startup.
    get_catalog()
    yield


app = FastAPI(
    title="MoodLog API",
    description=(
        "**Mood journaling analytics and achievement engine**\n\n"
        "Stores one mood entry per user per day, computes trends, streaks and "
        "factor impact, unlocks achievements and produces weekly reviews.\n\n"
        "All error responses follow the `{code, message, details}` envelope."
    ),
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# --- CORS ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Exception handlers (most specific first) ---
app.add_exception_handler(MoodLogException, moodlog_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# --- Routers ---
app.include_router(entries_router.router)
app.include_router(analytics_router.router)
app.include_router(achievements_router.router)
app.include_router(reviews_router.router)
app.include_router(notifications_router.router)


@app.get("/health", tags=["health"], summary="Health check")
def health(db: Session = Depends(get_db)):
    """
    Returns `{"status": "ok", "db": "ok"}` when both the API and the database
    are reachable. Returns HTTP 503 if the DB is down.
    """
    try:
        db.execute(text("SELECT 1"))
        db_status = "ok"
    except SQLAlchemyError:
        db_status = "unreachable"

    if db_status != "ok":
        return JSONResponse(
            status_code=503,
            content={"status": "error", "db": db_status},
        )
    return {"status": "ok", "db": "ok", "env": settings.APP_ENV}
