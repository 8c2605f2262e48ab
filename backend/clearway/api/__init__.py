"""
API Routes Package

This module exports the FastAPI routers for the clearway engine.
"""

from .ai_routes import router as ai_router, set_engine

__all__ = [
    "ai_router",
    "set_engine",
]
