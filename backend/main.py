"""
Timebox Planner - Main Application Entry Point

Half-hour day planner with priorities, brain dump, tracker and AI scheduling.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from timebox.core.config import get_settings
from timebox.core.logger import logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    # Startup
    settings = get_settings()
    logger.info(f"Starting Timebox Planner in {settings.ENVIRONMENT} mode...")

    # Initialize database if one is configured; otherwise plans go to JSON files
    if settings.has_database:
        from timebox.infrastructure.sql.database import init_db

        await init_db()
    else:
        logger.info(f"No DATABASE_URL set, storing plans under {settings.LOCAL_STORE_PATH}")

    yield

    # Shutdown
    logger.info("Shutting down Timebox Planner...")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Timebox Planner",
        description="Daily timebox planner with AI-assisted scheduling",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    from timebox.api import day_plans, slots, weekly_plans

    app.include_router(day_plans.router, prefix="/api/day-plan", tags=["day_plan"])
    app.include_router(weekly_plans.router, prefix="/api/weekly-plan", tags=["weekly_plan"])
    app.include_router(slots.router, prefix="/api", tags=["slots"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "environment": settings.ENVIRONMENT,
            "storage": "sql" if settings.has_database else "json",
            "version": "0.1.0",
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
