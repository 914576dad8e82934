"""
Main FastAPI application for the Community Content API.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from community_api.config import LOG_LEVEL
from community_api.routes.articles import router as articles_router
from community_api.routes.comments import router as comments_router
from community_api.routes.engagement import router as engagement_router
from community_api.routes.events import router as events_router
from community_api.routes.health import API_VERSION, router as health_router
from community_api.routes.posts import router as posts_router
from community_api.routes.stats import router as stats_router
from community_api.routes.videos import router as videos_router

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI app instance
    """
    app = FastAPI(
        title="Community Content API",
        description="Posts, articles, comments, videos and events with anonymous engagement tracking",
        version=API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(SQLAlchemyError)
    async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError):
        """Handle SQLAlchemy database errors."""
        logger.error("Database error on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=500,
            content={
                "error_code": "DATABASE_ERROR",
                "message": "Database operation failed",
                "details": str(exc) if app.debug else "Database connection issue",
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle all other unhandled exceptions."""
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={
                "error_code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
                "details": str(exc) if app.debug else "Internal server error",
            },
        )

    app.include_router(health_router)
    app.include_router(posts_router)
    app.include_router(articles_router)
    app.include_router(comments_router)
    app.include_router(videos_router)
    app.include_router(events_router)
    app.include_router(stats_router)
    app.include_router(engagement_router)

    return app


app = create_app()


@app.get("/")
async def root():
    """Service banner."""
    return {"message": "Community Content API", "status": "healthy", "version": API_VERSION}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("community_api.main:app", host="0.0.0.0", port=8000, reload=True, log_level="info")
