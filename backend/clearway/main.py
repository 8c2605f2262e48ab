"""
Clearway Engine
Main FastAPI Application Entry Point

Builds the engine from configuration on startup and serves the
/api/ai endpoints.
"""

import os
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

# Load environment variables (CLEARWAY_CONFIG_DIR, CLEARWAY_LOG_LEVEL, CLEARWAY_CORS_ORIGINS)
load_dotenv()

from clearway.api import ai_router, set_engine
from clearway.config import ConfigManager
from clearway.engine import build_engine
from clearway.logger import setup_logger

logger = setup_logger("clearway", os.getenv("CLEARWAY_LOG_LEVEL", "INFO").upper())

_started_at = time.time()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events - startup and shutdown"""
    logger.info("=" * 60)
    logger.info("[STARTUP] Clearway Engine")
    logger.info("=" * 60)

    engine = build_engine(ConfigManager())
    set_engine(engine)
    logger.info("[OK] AI routes ready")

    yield

    set_engine(None)
    logger.info("[SHUTDOWN] Complete")


# Create FastAPI application
app = FastAPI(
    title="Clearway Engine API",
    description="Emergency routing and intersection clearance decisions",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc"
)

# Dispatch consoles call the engine from the browser
app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("CLEARWAY_CORS_ORIGINS", "*").split(","),
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

app.include_router(ai_router)


# ============================================
# Root Endpoints
# ============================================

@app.get("/", tags=["root"])
async def root():
    """Root endpoint - API information"""
    return {
        "name": "Clearway Engine",
        "version": "1.0.0",
        "status": "operational",
        "documentation": "/docs",
        "endpoints": {
            "optimize_route": "/api/ai/optimize-route",
            "predict_congestion": "/api/ai/predict-congestion",
            "clearance_plan": "/api/ai/clearance-plan",
            "corridor": "/api/ai/corridor",
            "forecast": "/api/ai/forecast/{intersection_id}",
            "statistics": "/api/ai/statistics"
        }
    }


@app.get("/health", tags=["health"])
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "timestamp": time.time(),
        "uptime": time.time() - _started_at
    }


# ============================================
# Entry Point
# ============================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "clearway.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
