"""
Route Scorer - Multi-Criteria Route Desirability

Scores each candidate 0-100 from five weighted factors. The weights shift
toward time, signals and traffic (and away from distance and reliability)
as the emergency level rises:

    level    time  distance  signals  traffic  reliability
    normal    40      20        15       15         10
    medium    45      10        18       18          9
    high      50       5        20       20          5
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from clearway.models import CongestionLevel, EmergencyLevel, coerce_enum
from clearway.prediction import CongestionSample
from clearway.routing.candidate_generator import RouteCandidate, StrategyType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoringWeights:
    time: float
    distance: float
    signals: float
    traffic: float
    reliability: float


WEIGHTS_BY_LEVEL: Dict[EmergencyLevel, ScoringWeights] = {
    EmergencyLevel.NORMAL: ScoringWeights(time=40, distance=20, signals=15, traffic=15, reliability=10),
    EmergencyLevel.MEDIUM: ScoringWeights(time=45, distance=10, signals=18, traffic=18, reliability=9),
    EmergencyLevel.HIGH: ScoringWeights(time=50, distance=5, signals=20, traffic=20, reliability=5),
}

TRAFFIC_FACTORS: Dict[CongestionLevel, float] = {
    CongestionLevel.LOW: 1.0,
    CongestionLevel.MEDIUM: 0.7,
    CongestionLevel.HIGH: 0.4,
}

RELIABILITY_FACTORS: Dict[StrategyType, float] = {
    StrategyType.HIGHWAY: 0.9,
    StrategyType.CITY: 0.6,
    StrategyType.BALANCED: 0.8,
    StrategyType.EMERGENCY: 1.0,
    StrategyType.ALTERNATIVE: 0.7,
}

# Whole-score multipliers for congested routes
TRAFFIC_PENALTIES: Dict[CongestionLevel, float] = {
    CongestionLevel.LOW: 1.0,
    CongestionLevel.MEDIUM: 0.85,
    CongestionLevel.HIGH: 0.7,
}


@dataclass(frozen=True)
class AIFactors:
    """Context attached to a scored route for operators"""
    congestion_prediction: CongestionSample
    historical_performance: float         # 0.7-1.0
    weather_impact: float                 # 0-0.2
    time_of_day_factor: float
    day_of_week_factor: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            'congestionPrediction': self.congestion_prediction.to_dict(),
            'historicalPerformance': round(self.historical_performance, 4),
            'weatherImpact': round(self.weather_impact, 4),
            'timeOfDayFactor': self.time_of_day_factor,
            'dayOfWeekFactor': self.day_of_week_factor
        }


@dataclass(frozen=True)
class ScoredRoute:
    """A candidate route augmented with its score"""
    candidate: RouteCandidate
    score: float
    ai_factors: Optional[AIFactors] = None

    @property
    def strategy_type(self) -> StrategyType:
        return self.candidate.strategy_type

    @property
    def signal_count(self) -> int:
        return self.candidate.signal_count

    @property
    def eta_minutes(self) -> float:
        return self.candidate.eta_minutes

    @property
    def distance_km(self) -> float:
        return self.candidate.distance_km

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API response"""
        data = self.candidate.to_dict()
        data['score'] = round(self.score, 2)
        data['aiFactors'] = self.ai_factors.to_dict() if self.ai_factors else None
        return data


class RouteScorer:
    """
    Score and rank candidate routes

    Usage:
        scorer = RouteScorer()
        score = scorer.score(candidate, 'high')
        ranked = scorer.rank(scored_routes)
    """

    MAX_TIME_MINUTES = 60
    MAX_DISTANCE_KM = 50
    MAX_SIGNALS = 20

    EMERGENCY_BONUS = 1.3
    MAX_ALTERNATIVES = 3

    BASE_CONFIDENCE = 0.8
    MIN_CONFIDENCE = 0.6
    MAX_CONFIDENCE = 0.95
    ACCURATE_SAMPLE_CONFIDENCE = 0.7

    def score(self, candidate: RouteCandidate, emergency_level: Any = EmergencyLevel.NORMAL) -> float:
        """
        Score a candidate route

        Args:
            candidate: Route to score
            emergency_level: 'normal', 'medium' or 'high'

        Returns:
            Score in [0, 100]
        """
        level = coerce_enum(EmergencyLevel, emergency_level, 'emergency level')
        weights = WEIGHTS_BY_LEVEL[level]

        time_score = self._capped(candidate.eta_minutes, self.MAX_TIME_MINUTES) * weights.time
        distance_score = self._capped(candidate.distance_km, self.MAX_DISTANCE_KM) * weights.distance
        signals_score = self._capped(candidate.signal_count, self.MAX_SIGNALS) * weights.signals
        traffic_score = TRAFFIC_FACTORS[candidate.traffic_level] * weights.traffic
        reliability_score = RELIABILITY_FACTORS[candidate.strategy_type] * weights.reliability

        total = time_score + distance_score + signals_score + traffic_score + reliability_score

        if level == EmergencyLevel.HIGH and candidate.strategy_type == StrategyType.EMERGENCY:
            total *= self.EMERGENCY_BONUS

        total *= TRAFFIC_PENALTIES[candidate.traffic_level]

        return min(100.0, max(0.0, total))

    @staticmethod
    def _capped(value: float, cap: float) -> float:
        """Lower-is-better factor: 1 at zero, 0 at or beyond the cap"""
        return max(0.0, (cap - value) / cap)

    @staticmethod
    def rank(scored: Sequence[ScoredRoute]) -> List[ScoredRoute]:
        """Sort by descending score; equal scores keep generation order"""
        return sorted(scored, key=lambda route: -route.score)

    def select(self, scored: Sequence[ScoredRoute]) -> Tuple[ScoredRoute, List[ScoredRoute]]:
        """
        Pick the best route and up to three alternatives

        Returns:
            (best, alternatives)
        """
        if not scored:
            raise ValueError("No scored routes to select from")
        ranked = self.rank(scored)
        return ranked[0], ranked[1:1 + self.MAX_ALTERNATIVES]

    def confidence(
        self,
        best: ScoredRoute,
        samples: Sequence[CongestionSample],
        at: datetime
    ) -> float:
        """Confidence in the chosen route, clamped to [0.6, 0.95]"""
        confidence = self.BASE_CONFIDENCE

        if samples:
            accurate = sum(1 for s in samples if s.confidence > self.ACCURATE_SAMPLE_CONFIDENCE)
            confidence += accurate / len(samples) * 0.1

        if best.strategy_type == StrategyType.EMERGENCY:
            confidence += 0.05

        confidence += self.time_of_day_factor(at) * 0.05

        return min(self.MAX_CONFIDENCE, max(self.MIN_CONFIDENCE, confidence))

    @staticmethod
    def time_of_day_factor(at: datetime) -> float:
        """Predictability of traffic at this hour"""
        hour = at.hour

        if hour >= 22 or hour <= 5:
            return 0.9   # night
        if 12 <= hour <= 14:
            return 0.7   # midday
        if 7 <= hour <= 10 or 17 <= hour <= 20:
            return 0.5   # peak
        return 0.8

    @staticmethod
    def day_of_week_factor(at: datetime) -> float:
        return 0.6 if at.weekday() >= 5 else 0.8
