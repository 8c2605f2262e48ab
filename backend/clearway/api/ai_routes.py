"""
AI Routes - Route optimization, congestion and clearance endpoints

Endpoints:
- POST /api/ai/optimize-route - Best emergency route between two points
- POST /api/ai/predict-congestion - Congestion prediction at a location
- POST /api/ai/clearance-plan - Clearance plan for an intersection
- POST /api/ai/corridor - Green-wave schedule over intersections
- GET /api/ai/forecast/{intersection_id} - Congestion outlook for a signal
- GET /api/ai/statistics - Engine and route cache statistics
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field

from clearway.engine import TrafficAIEngine
from clearway.exceptions import ComputationError, InvalidInputError

router = APIRouter(prefix="/api/ai", tags=["ai"])


# ============================================
# Request Models
# ============================================

class OptimizeRouteRequest(BaseModel):
    """Request to optimize an emergency route"""
    start: Dict[str, Any] = Field(
        ...,
        description="Origin coordinates {lat, lng}"
    )
    end: Dict[str, Any] = Field(
        ...,
        description="Destination coordinates {lat, lng}"
    )
    emergencyLevel: str = Field(
        default="normal",
        description="Emergency level: normal, medium, high"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "start": {"lat": 23.2156, "lng": 72.6369},
                "end": {"lat": 23.2505, "lng": 72.6650},
                "emergencyLevel": "high"
            }
        }


class PredictCongestionRequest(BaseModel):
    """Request to predict congestion at a location"""
    location: Dict[str, Any] = Field(
        ...,
        description="Coordinates {lat, lng}"
    )
    time: Optional[datetime] = Field(
        default=None,
        description="Prediction time (default: now)"
    )


class ClearancePlanRequest(BaseModel):
    """Request a clearance plan for one intersection"""
    intersection: Dict[str, Any] = Field(
        ...,
        description="Intersection {id, location, lanes, congestionLevel}"
    )
    emergency: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Emergency context {priority, direction}"
    )


class CorridorRequest(BaseModel):
    """Request a green-wave schedule"""
    intersectionIds: List[str] = Field(
        ...,
        description="Intersection IDs in travel order"
    )


# ============================================
# Component References
# ============================================

_engine: Optional[TrafficAIEngine] = None


def set_engine(engine: Optional[TrafficAIEngine]):
    """Set engine reference for API routes"""
    global _engine
    _engine = engine


def _get_engine() -> TrafficAIEngine:
    if _engine is None:
        raise HTTPException(status_code=503, detail="AI engine not initialized")
    return _engine


def _run(operation, *args) -> Dict[str, Any]:
    """Call an engine operation and map engine errors to HTTP errors"""
    try:
        return operation(*args).to_dict()
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ComputationError as e:
        raise HTTPException(status_code=500, detail=str(e))


# ============================================
# Endpoints
# ============================================

@router.post("/optimize-route")
async def optimize_route(request: OptimizeRouteRequest):
    """
    Optimize an emergency route

    Scores five candidate strategies and returns the best route, up to
    three alternatives, congestion samples along the way and operator
    recommendations. Degrades to a direct fallback route instead of
    failing.

    Example:
    ```
    curl -X POST http://localhost:8000/api/ai/optimize-route \\
      -H "Content-Type: application/json" \\
      -d '{"start":{"lat":23.2156,"lng":72.6369},"end":{"lat":23.2505,"lng":72.665},"emergencyLevel":"high"}'
    ```
    """
    engine = _get_engine()
    return _run(engine.optimize_route, request.start, request.end, request.emergencyLevel)


@router.post("/predict-congestion")
async def predict_congestion(request: PredictCongestionRequest):
    """Predict congestion at a location"""
    engine = _get_engine()
    return _run(engine.predict_congestion, request.location, request.time)


@router.post("/clearance-plan")
async def clearance_plan(request: ClearancePlanRequest):
    """
    Generate an intersection clearance plan

    Returns lane states, the activation sequence, efficiency score and
    estimated traffic impact. The caller persists the new lane state.
    """
    engine = _get_engine()
    return _run(engine.plan_clearance, request.intersection, request.emergency)


@router.post("/corridor")
async def coordinate_corridor(request: CorridorRequest):
    """Schedule a green wave over intersections in travel order"""
    engine = _get_engine()
    return _run(engine.coordinate_corridor, request.intersectionIds)


@router.get("/forecast/{intersection_id}")
async def forecast_intersection(
    intersection_id: str,
    lookahead: int = Query(60, ge=1, le=1440, description="Lookahead in minutes")
):
    """Congestion outlook for an intersection"""
    engine = _get_engine()
    return _run(engine.forecast_intersection, intersection_id, lookahead)


@router.get("/statistics")
async def get_statistics():
    """Engine and route cache statistics"""
    return _get_engine().get_statistics()
