"""
Clearance Planner - Lane States and Activation Sequence

Builds the desired clearance state for one intersection:

- per-lane status and clearance window, from the scenario policy
- the activation sequence, from the policy's coordination mode
- an efficiency score and an additive traffic impact estimate
- operator recommendations

Plans are returned to the caller for persistence; nothing is stored here.
Unlike route optimization there is no fallback: a failure propagates,
because acting on a wrong clearance plan is worse than reporting none.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from clearway.models import (
    CongestionLevel,
    EmergencyContext,
    Intersection,
    Lane,
    LaneDirection,
    coerce_model,
)
from clearway.recommendations import (
    Recommendation,
    RecommendationKind,
    RecommendationPriority,
)
from clearway.runtime import Clock, RandomSource, SystemClock
from clearway.clearance.scenarios import (
    ClearanceScenario,
    ClearanceScenarioSelector,
    CoordinationMode,
    LanePattern,
    PriorityRule,
    ScenarioPolicy,
)

logger = logging.getLogger(__name__)


class PlannedLaneStatus(str, Enum):
    """Desired lane status; adds alternating to the persisted statuses"""
    NORMAL = "normal"
    CLEARED = "cleared"
    BLOCKED = "blocked"
    ALTERNATING = "alternating"


# Mock weather conditions and their impact on clearance
WEATHER_IMPACT: Dict[str, float] = {
    'clear': 0.1,
    'rain': 0.4,
    'fog': 0.6,
    'storm': 0.8,
}


@dataclass(frozen=True)
class PlannedLane:
    direction: LaneDirection
    status: PlannedLaneStatus
    duration_sec: int
    clearance_start: datetime
    clearance_end: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            'direction': self.direction.value,
            'status': self.status.value,
            'duration': self.duration_sec,
            'clearanceStart': self.clearance_start.isoformat(),
            'clearanceEnd': self.clearance_end.isoformat()
        }


@dataclass(frozen=True)
class SequenceStep:
    lane: LaneDirection
    lane_index: int
    start_offset_sec: int
    duration_sec: int
    action: str = 'clear'

    def to_dict(self) -> Dict[str, Any]:
        return {
            'lane': self.lane.value,
            'laneIndex': self.lane_index,
            'startOffset': self.start_offset_sec,
            'duration': self.duration_sec,
            'action': self.action
        }


@dataclass(frozen=True)
class TrafficImpact:
    """Additive impact across lanes (not averaged)"""
    vehicles_affected: float = 0.0
    average_delay_min: float = 0.0
    queue_length_m: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'vehiclesAffected': self.vehicles_affected,
            'averageDelay': self.average_delay_min,
            'queueLength': self.queue_length_m
        }


@dataclass(frozen=True)
class ClearancePlan:
    """
    Desired clearance state for one intersection

    The sequence covers every lane exactly once.
    """
    intersection_id: str
    scenario: ClearanceScenario
    policy: ScenarioPolicy
    lanes: Tuple[PlannedLane, ...]
    sequence: Tuple[SequenceStep, ...]
    recommendations: Tuple[Recommendation, ...]
    total_clearance_time_sec: int
    efficiency_score: float
    estimated_impact: TrafficImpact
    generated_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API response"""
        return {
            'intersectionId': self.intersection_id,
            'scenario': self.scenario.value,
            'pattern': self.policy.to_dict(),
            'lanes': [lane.to_dict() for lane in self.lanes],
            'sequence': [step.to_dict() for step in self.sequence],
            'recommendations': [r.to_dict() for r in self.recommendations],
            'totalClearanceTime': self.total_clearance_time_sec,
            'efficiencyScore': round(self.efficiency_score, 2),
            'estimatedImpact': self.estimated_impact.to_dict(),
            'generatedAt': self.generated_at.isoformat()
        }


class ClearancePlanner:
    """
    Plan intersection clearance

    Usage:
        planner = ClearancePlanner(selector, clock=clock, random_source=RandomSource(7))
        plan = planner.plan(intersection, {'priority': 'high', 'direction': 'north'})
        [lane.status.value for lane in plan.lanes]
        # ['cleared', 'cleared', 'blocked', 'blocked']
    """

    AMBULANCE_LANE_SEC = 180
    OTHER_LANE_SEC = 60
    ALTERNATING_LANE_SEC = 90

    WAVE_GAP_SEC = 5
    ALTERNATING_PHASE_SEC = 45
    STANDARD_SLOT_SEC = 30

    IMBALANCE_PENALTY = 40
    AMBULANCE_BONUS = 20
    LONG_TOTAL_SEC = 300
    LONG_TOTAL_PENALTY = 30
    MODERATE_TOTAL_SEC = 180
    MODERATE_TOTAL_PENALTY = 15

    BASE_VEHICLES = 100
    WEATHER_WARNING_THRESHOLD = 0.3
    HISTORICAL_ALERT_THRESHOLD = 0.7
    HISTORICAL_FLOOR = 0.5          # sampled performance spans 50-100%
    HISTORICAL_SPREAD = 0.5

    def __init__(
        self,
        selector: Optional[ClearanceScenarioSelector] = None,
        clock: Optional[Clock] = None,
        random_source: Optional[RandomSource] = None,
        config: dict = None
    ):
        """
        Initialize clearance planner

        Args:
            selector: ClearanceScenarioSelector (built from config if omitted)
            clock: Time source
            random_source: Source for mock weather and historical performance
            config: Clearance configuration (passed to the selector)
        """
        self.clock = clock if clock is not None else SystemClock()
        self.random_source = random_source if random_source is not None else RandomSource()
        if selector is None:
            selector = ClearanceScenarioSelector(self.clock, config)
        self.selector = selector

        # Statistics
        self.plans_generated = 0

        logger.info("[OK] Clearance Planner initialized")

    def plan(self, intersection: Any, emergency: Any = None) -> ClearancePlan:
        """
        Generate a clearance plan

        Args:
            intersection: Intersection (model or mapping)
            emergency: Optional EmergencyContext (model or mapping)

        Returns:
            ClearancePlan
        """
        intersection = coerce_model(Intersection, intersection, 'intersection')
        if emergency is not None:
            emergency = coerce_model(EmergencyContext, emergency, 'emergency')

        scenario = self.selector.select(intersection, emergency)
        policy = self.selector.policy_for(scenario)
        now = self.clock.now()

        lanes = [self.plan_lane(lane, policy, emergency, now) for lane in intersection.lanes]
        sequence = self.build_sequence(lanes, policy.coordination_mode)

        plan = ClearancePlan(
            intersection_id=intersection.id,
            scenario=scenario,
            policy=policy,
            lanes=tuple(lanes),
            sequence=tuple(sequence),
            recommendations=tuple(self.build_recommendations(intersection, scenario, emergency, now)),
            total_clearance_time_sec=self.total_clearance_time(lanes),
            efficiency_score=self.efficiency_score(lanes, policy),
            estimated_impact=self.estimate_impact(lanes),
            generated_at=now
        )

        self.plans_generated += 1
        logger.info(
            f"Clearance plan for {intersection.id}: {scenario.value}, "
            f"{plan.total_clearance_time_sec}s, efficiency {plan.efficiency_score:.1f}"
        )
        return plan

    def plan_lane(
        self,
        lane: Lane,
        policy: ScenarioPolicy,
        emergency: Optional[EmergencyContext],
        now: datetime
    ) -> PlannedLane:
        """Clearance window and desired status for one lane"""
        duration = policy.base_duration_sec
        status = PlannedLaneStatus.NORMAL

        if policy.priority_rule == PriorityRule.AMBULANCE_DIRECTION and emergency is not None:
            if self.is_ambulance_aligned(lane.direction, emergency.direction):
                duration = self.AMBULANCE_LANE_SEC
                status = PlannedLaneStatus.CLEARED
            else:
                duration = self.OTHER_LANE_SEC
                status = PlannedLaneStatus.BLOCKED

        if policy.lane_pattern == LanePattern.ALTERNATING:
            duration = self.ALTERNATING_LANE_SEC
            status = PlannedLaneStatus.ALTERNATING

        return PlannedLane(
            direction=lane.direction,
            status=status,
            duration_sec=duration,
            clearance_start=now,
            clearance_end=now + timedelta(seconds=duration)
        )

    @staticmethod
    def is_ambulance_aligned(lane_direction: LaneDirection, ambulance_direction: LaneDirection) -> bool:
        """Same axis as the ambulance: its direction or the reverse"""
        return lane_direction in (ambulance_direction, ambulance_direction.opposite)

    def build_sequence(
        self,
        lanes: Sequence[PlannedLane],
        mode: CoordinationMode
    ) -> List[SequenceStep]:
        """
        Order lane activations

        wave:         input order, each lane 5s after the previous
        simultaneous: every lane at offset 0
        alternating:  north/south at 0 for 45s, then east/west at 45s for 45s
        standard:     lane i at i*30s for 30s
        """
        if mode == CoordinationMode.WAVE:
            return [
                SequenceStep(lane.direction, i, i * self.WAVE_GAP_SEC, lane.duration_sec)
                for i, lane in enumerate(lanes)
            ]

        if mode == CoordinationMode.SIMULTANEOUS:
            return [
                SequenceStep(lane.direction, i, 0, lane.duration_sec)
                for i, lane in enumerate(lanes)
            ]

        if mode == CoordinationMode.ALTERNATING:
            main = [
                SequenceStep(lane.direction, i, 0, self.ALTERNATING_PHASE_SEC)
                for i, lane in enumerate(lanes) if lane.direction.is_north_south
            ]
            side = [
                SequenceStep(lane.direction, i, self.ALTERNATING_PHASE_SEC, self.ALTERNATING_PHASE_SEC)
                for i, lane in enumerate(lanes) if not lane.direction.is_north_south
            ]
            return main + side

        return [
            SequenceStep(lane.direction, i, i * self.STANDARD_SLOT_SEC, self.STANDARD_SLOT_SEC)
            for i, lane in enumerate(lanes)
        ]

    @staticmethod
    def total_clearance_time(lanes: Sequence[PlannedLane]) -> int:
        return sum(lane.duration_sec for lane in lanes)

    def efficiency_score(self, lanes: Sequence[PlannedLane], policy: ScenarioPolicy) -> float:
        """
        Score the plan 0-100

        Penalises uneven lane windows and long total clearance,
        rewards ambulance-direction plans.
        """
        score = 100.0

        durations = [lane.duration_sec for lane in lanes]
        longest = max(durations)
        if longest > 0:
            score -= (longest - min(durations)) / longest * self.IMBALANCE_PENALTY

        if policy.priority_rule == PriorityRule.AMBULANCE_DIRECTION:
            score += self.AMBULANCE_BONUS

        total = self.total_clearance_time(lanes)
        if total > self.LONG_TOTAL_SEC:
            score -= self.LONG_TOTAL_PENALTY
        elif total > self.MODERATE_TOTAL_SEC:
            score -= self.MODERATE_TOTAL_PENALTY

        return max(0.0, min(100.0, score))

    def estimate_impact(self, lanes: Sequence[PlannedLane]) -> TrafficImpact:
        vehicles = 0.0
        delay = 0.0
        queue = 0.0

        for lane in lanes:
            if lane.status == PlannedLaneStatus.CLEARED:
                vehicles += self.BASE_VEHICLES * 0.8
                delay -= 2
            elif lane.status == PlannedLaneStatus.BLOCKED:
                vehicles += self.BASE_VEHICLES * 1.2
                delay += 5
                queue += 50

        return TrafficImpact(vehicles_affected=vehicles, average_delay_min=delay, queue_length_m=queue)

    def build_recommendations(
        self,
        intersection: Intersection,
        scenario: ClearanceScenario,
        emergency: Optional[EmergencyContext],
        now: datetime
    ) -> List[Recommendation]:
        """Operator advice for the plan"""
        recommendations = []

        if now.hour >= 22 or now.hour <= 5:
            recommendations.append(Recommendation(
                kind=RecommendationKind.INFO,
                message='Night hours - minimal traffic expected',
                priority=RecommendationPriority.LOW
            ))

        if intersection.congestion_level == CongestionLevel.HIGH:
            recommendations.append(Recommendation(
                kind=RecommendationKind.WARNING,
                message='High congestion - consider extended clearance time',
                priority=RecommendationPriority.HIGH,
                actions=('Extend clearance duration by 30 seconds',)
            ))

        if scenario == ClearanceScenario.EMERGENCY and emergency is not None:
            recommendations.append(Recommendation(
                kind=RecommendationKind.CRITICAL,
                message='EMERGENCY VEHICLE APPROACHING',
                priority=RecommendationPriority.CRITICAL,
                actions=(
                    'Clear all lanes in ambulance direction',
                    'Block perpendicular traffic',
                    'Maintain clearance until ambulance passes'
                )
            ))

        weather_impact = WEATHER_IMPACT[self.random_source.choice(list(WEATHER_IMPACT))]
        if weather_impact > self.WEATHER_WARNING_THRESHOLD:
            recommendations.append(Recommendation(
                kind=RecommendationKind.WARNING,
                message=f"Weather conditions may affect clearance (Impact: {round(weather_impact * 100)}%)",
                priority=RecommendationPriority.MEDIUM,
                actions=('Add 15 seconds safety buffer',)
            ))

        performance = self.HISTORICAL_FLOOR + self.random_source.uniform_below(self.HISTORICAL_SPREAD)
        if performance < self.HISTORICAL_ALERT_THRESHOLD:
            recommendations.append(Recommendation(
                kind=RecommendationKind.ALERT,
                message=f"Below average historical performance ({round(performance * 100)}%)",
                priority=RecommendationPriority.MEDIUM,
                actions=('Monitor closely and adjust as needed',)
            ))

        return recommendations

    def get_statistics(self) -> Dict[str, Any]:
        return {'plansGenerated': self.plans_generated}
