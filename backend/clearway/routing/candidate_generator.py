"""
Route Candidate Generator

Produces the five fixed route strategies between an origin and a
destination: highway, city, balanced, emergency and alternative.

Each strategy distorts the straight-line (haversine) distance by a fixed
factor, travels at its own speed class, and classifies expected traffic by
weighting the congestion samples taken along the straight line.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from clearway.models import CongestionLevel, GeoPoint, coerce_model
from clearway.prediction import CongestionSample
from clearway.routing.geo import curved_waypoints, haversine_km

logger = logging.getLogger(__name__)


class StrategyType(str, Enum):
    """Named route strategies"""
    HIGHWAY = "highway"
    CITY = "city"
    BALANCED = "balanced"
    EMERGENCY = "emergency"
    ALTERNATIVE = "alternative"
    DIRECT = "direct"             # fallback only; never generated or scored


@dataclass(frozen=True)
class StrategyProfile:
    """
    Fixed parameters of one route strategy

    traffic_weights holds the strategy's exposure to each sampled congestion
    level; None means traffic is forced to forced_traffic instead.
    """
    route_id: str
    name: str
    distance_factor: float
    speed_kmh: float
    eta_factor: float
    curvature: float
    signal_count: int
    turn_count: int
    priority_class: str
    requires_clearance: bool = False
    traffic_weights: Optional[Dict[CongestionLevel, float]] = None
    forced_traffic: Optional[CongestionLevel] = None


STRATEGY_PROFILES: Dict[StrategyType, StrategyProfile] = {
    StrategyType.HIGHWAY: StrategyProfile(
        route_id='route-1',
        name='Express Highway Route',
        distance_factor=1.1,
        speed_kmh=60,
        eta_factor=1.0,
        curvature=0.3,
        signal_count=4,
        turn_count=6,
        priority_class='speed',
        traffic_weights={CongestionLevel.HIGH: 0.3, CongestionLevel.MEDIUM: 0.5, CongestionLevel.LOW: 0.2}
    ),
    StrategyType.CITY: StrategyProfile(
        route_id='route-2',
        name='City Shortcut Route',
        distance_factor=0.9,
        speed_kmh=30,
        eta_factor=1.0,
        curvature=0.5,
        signal_count=12,
        turn_count=18,
        priority_class='distance',
        traffic_weights={CongestionLevel.HIGH: 0.5, CongestionLevel.MEDIUM: 0.3, CongestionLevel.LOW: 0.2}
    ),
    StrategyType.BALANCED: StrategyProfile(
        route_id='route-3',
        name='Balanced Optimal Route',
        distance_factor=1.0,
        speed_kmh=45,
        eta_factor=1.0,
        curvature=0.4,
        signal_count=8,
        turn_count=10,
        priority_class='balanced',
        traffic_weights={CongestionLevel.HIGH: 0.4, CongestionLevel.MEDIUM: 0.4, CongestionLevel.LOW: 0.2}
    ),
    StrategyType.EMERGENCY: StrategyProfile(
        route_id='route-4',
        name='Emergency Priority Route',
        distance_factor=1.2,
        speed_kmh=70,
        eta_factor=0.7,                   # priority clearance
        curvature=0.2,
        signal_count=6,
        turn_count=8,
        priority_class='emergency',
        requires_clearance=True,
        forced_traffic=CongestionLevel.LOW
    ),
    StrategyType.ALTERNATIVE: StrategyProfile(
        route_id='route-5',
        name='Alternative Scenic Route',
        distance_factor=1.3,
        speed_kmh=40,
        eta_factor=1.0,
        curvature=0.6,
        signal_count=3,
        turn_count=5,
        priority_class='reliability',
        traffic_weights={CongestionLevel.HIGH: 0.2, CongestionLevel.MEDIUM: 0.3, CongestionLevel.LOW: 0.5}
    ),
}

# Generation order; also the tie-break order when scores are equal
STRATEGY_ORDER: Tuple[StrategyType, ...] = (
    StrategyType.HIGHWAY,
    StrategyType.CITY,
    StrategyType.BALANCED,
    StrategyType.EMERGENCY,
    StrategyType.ALTERNATIVE,
)

LEVEL_SEVERITY = {
    CongestionLevel.LOW: 0.0,
    CongestionLevel.MEDIUM: 0.5,
    CongestionLevel.HIGH: 1.0,
}


@dataclass(frozen=True)
class RouteCandidate:
    """
    One candidate route

    Immutable once generated; scoring wraps it in a ScoredRoute.
    """
    id: str
    name: str
    strategy_type: StrategyType
    geometry: Tuple[GeoPoint, ...]
    distance_km: float
    eta_minutes: float
    signal_count: int
    turn_count: int
    traffic_level: CongestionLevel
    priority_class: str
    requires_clearance: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API response"""
        return {
            'id': self.id,
            'name': self.name,
            'type': self.strategy_type.value,
            'coordinates': [p.to_dict() for p in self.geometry],
            'distance': round(self.distance_km, 4),
            'estimatedTime': round(self.eta_minutes, 2),
            'signals': self.signal_count,
            'turns': self.turn_count,
            'trafficLevel': self.traffic_level.value,
            'priority': self.priority_class,
            'clearanceRequired': self.requires_clearance
        }


class RouteCandidateGenerator:
    """
    Generate the fixed set of candidate routes

    Usage:
        generator = RouteCandidateGenerator()
        candidates = generator.generate(start, end, samples)
        [c.strategy_type.value for c in candidates]
        # ['highway', 'city', 'balanced', 'emergency', 'alternative']
    """

    HIGH_TRAFFIC_THRESHOLD = 0.6
    MEDIUM_TRAFFIC_THRESHOLD = 0.3
    WAYPOINT_STEPS = 10

    def __init__(self, profiles: Optional[Dict[StrategyType, StrategyProfile]] = None):
        self.profiles = profiles or STRATEGY_PROFILES

        missing = [s.value for s in STRATEGY_ORDER if s not in self.profiles]
        if missing:
            raise ValueError(f"Missing strategy profiles: {missing}")

    def generate(
        self,
        start: Any,
        end: Any,
        samples: Sequence[CongestionSample]
    ) -> List[RouteCandidate]:
        """
        Generate candidate routes

        Args:
            start: Origin (GeoPoint or mapping)
            end: Destination (GeoPoint or mapping)
            samples: Congestion samples along the straight line

        Returns:
            Five RouteCandidate objects in fixed strategy order
        """
        start = coerce_model(GeoPoint, start, 'start')
        end = coerce_model(GeoPoint, end, 'end')

        straight_km = haversine_km(start, end)

        return [
            self._build_candidate(strategy, start, end, straight_km, samples)
            for strategy in STRATEGY_ORDER
        ]

    def _build_candidate(
        self,
        strategy: StrategyType,
        start: GeoPoint,
        end: GeoPoint,
        straight_km: float,
        samples: Sequence[CongestionSample]
    ) -> RouteCandidate:
        profile = self.profiles[strategy]

        return RouteCandidate(
            id=profile.route_id,
            name=profile.name,
            strategy_type=strategy,
            geometry=tuple(curved_waypoints(start, end, profile.curvature, self.WAYPOINT_STEPS)),
            distance_km=straight_km * profile.distance_factor,
            eta_minutes=self.travel_minutes(straight_km, profile),
            signal_count=profile.signal_count,
            turn_count=profile.turn_count,
            traffic_level=self.classify_traffic(samples, profile),
            priority_class=profile.priority_class,
            requires_clearance=profile.requires_clearance
        )

    @staticmethod
    def travel_minutes(distance_km: float, profile: StrategyProfile) -> float:
        """Travel time at the strategy's speed class, in minutes"""
        return distance_km / profile.speed_kmh * 60 * profile.eta_factor

    def classify_traffic(
        self,
        samples: Sequence[CongestionSample],
        profile: StrategyProfile
    ) -> CongestionLevel:
        """
        Classify expected traffic for a strategy

        Each sampled level's share is scaled by the strategy's exposure
        weight; the resulting weighted mean severity is thresholded.
        """
        if profile.forced_traffic is not None:
            return profile.forced_traffic
        if not samples:
            return CongestionLevel.LOW

        weights = profile.traffic_weights
        total = len(samples)

        weighted = 0.0
        exposure = 0.0
        for level in CongestionLevel:
            share = sum(1 for s in samples if s.level == level) / total
            weighted += share * weights[level] * LEVEL_SEVERITY[level]
            exposure += share * weights[level]

        score = weighted / exposure if exposure else 0.0

        if score > self.HIGH_TRAFFIC_THRESHOLD:
            return CongestionLevel.HIGH
        if score > self.MEDIUM_TRAFFIC_THRESHOLD:
            return CongestionLevel.MEDIUM
        return CongestionLevel.LOW
