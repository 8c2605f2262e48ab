"""
Emergency Models

Emergency context supplied with a clearance request, and the urgency
level used when scoring candidate routes.
"""

from enum import Enum

from pydantic import BaseModel

from .intersection import LaneDirection


class EmergencyPriority(str, Enum):
    """Priority of an active emergency"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class EmergencyLevel(str, Enum):
    """Urgency used to weight route scoring"""
    NORMAL = "normal"
    MEDIUM = "medium"
    HIGH = "high"


class EmergencyContext(BaseModel):
    """
    Emergency vehicle approaching an intersection

    Direction is the ambulance's direction of travel.
    """
    priority: EmergencyPriority
    direction: LaneDirection

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {"priority": "high", "direction": "north"}
        }
