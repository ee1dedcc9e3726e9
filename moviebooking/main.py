from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from moviebooking.core.config import settings
from moviebooking.core.exception_handlers import register_exception_handlers
from moviebooking.core.logger_config import logger
from moviebooking.database.database import AsyncSessionLocal, create_db_and_tables, engine
from moviebooking.notification.email import drain_pending
from moviebooking.routers import admin, auth, bookings, movies, showtimes
from moviebooking.services.user_service import ensure_admin


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    logger.info(f"Starting {settings.PROJECT_NAME} {settings.VERSION}")
    await create_db_and_tables()
    async with AsyncSessionLocal() as db:
        await ensure_admin(db)
    yield
    await drain_pending()
    await engine.dispose()
    logger.info("Shutdown complete")


def create_app(use_lifespan: bool = True) -> FastAPI:
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        lifespan=lifespan if use_lifespan else None,
    )

    if settings.BACKEND_CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.BACKEND_CORS_ORIGINS,
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
            allow_headers=["Content-Type", "Authorization"],
        )

    register_exception_handlers(app)

    app.include_router(prefix="/api/auth", router=auth.router, tags=["auth"])
    app.include_router(prefix="/api/movies", router=movies.router, tags=["movies"])
    app.include_router(prefix="/api/showtimes", router=showtimes.router, tags=["showtimes"])
    app.include_router(prefix="/api/bookings", router=bookings.router, tags=["bookings"])
    app.include_router(prefix="/api/admin", router=admin.router, tags=["admin"])

    @app.get("/health", tags=["health"])
    async def health():
        return {"status": "ok"}

    return app


app = create_app()
