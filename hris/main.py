import logging
import subprocess
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hris.api.attendance import router as attendance_router
from hris.api.auth import router as auth_router
from hris.api.leave import router as leave_router
from hris.api.reports import router as reports_router
from hris.core.config import settings
from hris.core.errors import register_exception_handlers

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

_PROJECT_ROOT = Path(__file__).resolve().parent.parent


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Run Alembic migrations on startup."""
    if settings.RUN_MIGRATIONS_ON_STARTUP:
        logger.info("Running Alembic migrations...")
        try:
            result = subprocess.run(
                ["alembic", "upgrade", "head"],
                capture_output=True,
                text=True,
                cwd=_PROJECT_ROOT,
            )
            if result.returncode != 0:
                logger.error("Alembic migration failed:\n%s", result.stderr)
            else:
                logger.info("Migrations applied successfully:\n%s", result.stdout)
        except OSError as exc:
            logger.exception("Failed to run migrations: %s", exc)

    yield

    logger.info("Shutting down HRIS backend.")


app = FastAPI(
    title="HRIS API",
    description="Attendance clock-in/out and leave workflow for the HR information system.",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(auth_router, prefix="/api/auth", tags=["Auth"])
app.include_router(attendance_router, prefix="/api/attendance", tags=["Attendance"])
app.include_router(leave_router, prefix="/api/leave", tags=["Leave"])
app.include_router(reports_router, prefix="/api/reports", tags=["Reports"])


@app.get("/health", tags=["System"])
async def health_check() -> dict:
    return {"status": "ok"}
