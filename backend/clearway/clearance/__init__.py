"""
Intersection Clearance

Components:
- ClearanceScenarioSelector: Scenario and policy per intersection
- ClearancePlanner: Lane states, activation sequence, efficiency and impact
- CorridorCoordinator: Green-wave schedules across intersections
"""

from .scenarios import (
    ClearanceScenario,
    ClearanceScenarioSelector,
    CoordinationMode,
    LanePattern,
    PriorityRule,
    ScenarioPolicy,
    DEFAULT_POLICIES,
)

from .planner import (
    ClearancePlanner,
    ClearancePlan,
    PlannedLane,
    PlannedLaneStatus,
    SequenceStep,
    TrafficImpact,
    WEATHER_IMPACT,
)

from .corridor import (
    CorridorCoordinator,
    CorridorSchedule,
    CorridorSlot,
)


__all__ = [
    # Scenarios
    "ClearanceScenario",
    "ClearanceScenarioSelector",
    "CoordinationMode",
    "LanePattern",
    "PriorityRule",
    "ScenarioPolicy",
    "DEFAULT_POLICIES",

    # Planner
    "ClearancePlanner",
    "ClearancePlan",
    "PlannedLane",
    "PlannedLaneStatus",
    "SequenceStep",
    "TrafficImpact",
    "WEATHER_IMPACT",

    # Corridor
    "CorridorCoordinator",
    "CorridorSchedule",
    "CorridorSlot",
]
