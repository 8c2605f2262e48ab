"""
Pydantic Models Package

Validated input models supplied by collaborators.
Import from here for convenience.
"""

from .coordinates import GeoPoint
from .congestion import CongestionLevel
from .intersection import (
    LaneDirection,
    LaneStatus,
    Lane,
    Intersection,
)
from .emergency import (
    EmergencyPriority,
    EmergencyLevel,
    EmergencyContext,
)
from .parsing import coerce_model, coerce_enum


__all__ = [
    "GeoPoint",
    "CongestionLevel",
    "LaneDirection",
    "LaneStatus",
    "Lane",
    "Intersection",
    "EmergencyPriority",
    "EmergencyLevel",
    "EmergencyContext",
    "coerce_model",
    "coerce_enum",
]
