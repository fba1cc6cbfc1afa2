"""
Remodel Studio — multi-agent home remodeling assistant.
FastAPI backend: agent collaboration over hosted/local LLMs plus room image analysis.
"""

import logging
from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core import RemodelStudio
from profile_config import get_profile
from routes import register_routes

logger = logging.getLogger(__name__)


def create_app(studio_factory: Optional[Callable[[], RemodelStudio]] = None) -> FastAPI:
    """Build the app. studio_factory defaults to a studio over the loaded profile."""
    profile = get_profile()
    if studio_factory is None:
        def studio_factory():
            return RemodelStudio(profile)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        studio = studio_factory()
        app.state.studio = studio
        try:
            await studio.start()
        except ValueError as e:
            logger.error("Startup error: %s", e)
        yield
        await studio.shutdown()

    app = FastAPI(
        title=profile.system.name,
        description=profile.system.description,
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=profile.web.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_routes(app)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="127.0.0.1", port=8000)
