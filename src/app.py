"""
Users Record Service
CRUD API for user records stored in PostgreSQL
"""

import os
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from config.settings import ALLOWED_ORIGINS, STATIC_DIR
from database.connection import init_database, close_database
from api.routes import health, users
from utils.error_handling import setup_error_handling

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager: the pool lives exactly as long as the app"""
    app.state.db_pool = await init_database()
    try:
        yield
    finally:
        await close_database(app.state.db_pool)
        app.state.db_pool = None


def create_app(static_dir: str = STATIC_DIR) -> FastAPI:
    """Build the FastAPI application with middleware, error handling and routes"""
    app = FastAPI(
        title="Users Record Service",
        description="Create, read, update and delete user records",
        version="1.0.0",
        lifespan=lifespan
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials="*" not in ALLOWED_ORIGINS,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    setup_error_handling(app)

    app.include_router(health.router, tags=["Health"])
    app.include_router(users.router, prefix="/users", tags=["Users"])

    # Static front page; mounted last so API routes take precedence
    if os.path.isdir(static_dir):
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")
    else:
        logger.info(f"Static directory not found, skipping: {static_dir}")

    return app


app = create_app()
