"""
Intersection and Lane Models

Intersection state as supplied by the persistence layer. The engine reads
these and returns new desired state; it never persists them.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from .congestion import CongestionLevel
from .coordinates import GeoPoint


class LaneDirection(str, Enum):
    """Approach direction of a lane"""
    NORTH = "north"
    SOUTH = "south"
    EAST = "east"
    WEST = "west"

    @property
    def opposite(self) -> 'LaneDirection':
        return _OPPOSITES[self]

    @property
    def is_north_south(self) -> bool:
        return self in (LaneDirection.NORTH, LaneDirection.SOUTH)


_OPPOSITES = {
    LaneDirection.NORTH: LaneDirection.SOUTH,
    LaneDirection.SOUTH: LaneDirection.NORTH,
    LaneDirection.EAST: LaneDirection.WEST,
    LaneDirection.WEST: LaneDirection.EAST,
}


class LaneStatus(str, Enum):
    """Persisted lane status"""
    NORMAL = "normal"
    CLEARED = "cleared"
    BLOCKED = "blocked"


class Lane(BaseModel):
    """Single approach lane at an intersection"""
    direction: LaneDirection
    status: LaneStatus = LaneStatus.NORMAL

    class Config:
        frozen = True


class Intersection(BaseModel):
    """
    Signalised intersection

    Lanes are kept in the order supplied; that order drives wave and
    standard sequencing.
    """
    id: str = Field(..., min_length=1)
    location: Optional[GeoPoint] = None
    lanes: List[Lane] = Field(..., min_length=1)
    congestion_level: CongestionLevel = Field(CongestionLevel.LOW, alias="congestionLevel")

    class Config:
        frozen = True
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "id": "TS001",
                "location": {"lat": 23.2156, "lng": 72.6369},
                "lanes": [
                    {"direction": "north", "status": "normal"},
                    {"direction": "south", "status": "normal"},
                    {"direction": "east", "status": "normal"},
                    {"direction": "west", "status": "normal"}
                ],
                "congestionLevel": "medium"
            }
        }
