"""
Route registration — includes all API routers into the FastAPI app.
"""

from fastapi import FastAPI

from routes.health import router as health_router
from routes.agents import router as agents_router
from routes.chat import router as chat_router
from routes.conversations import router as conversations_router
from routes.decisions import router as decisions_router
from routes.intents import router as intents_router
from routes.vision import router as vision_router


def register_routes(app: FastAPI):
    """Mount all API routers onto the app."""
    app.include_router(health_router)
    app.include_router(agents_router)
    app.include_router(chat_router)
    app.include_router(conversations_router)
    app.include_router(decisions_router)
    app.include_router(intents_router)
    app.include_router(vision_router)
