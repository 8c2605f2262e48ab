"""
Intersection Forecast - Congestion Outlook for a Signal

Projects the congestion level at one intersection over the next hour in
fixed steps, using time-of-day bands and per-intersection historical
patterns, then summarises the series as a trend and a peak.

Trend is a coarse heuristic: only the first and last points of the series
are compared (ordinal low=1, medium=2, high=3).
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from clearway.exceptions import InvalidInputError
from clearway.models import CongestionLevel
from clearway.recommendations import (
    Recommendation,
    RecommendationKind,
    RecommendationPriority,
)
from clearway.runtime import Clock, SystemClock

logger = logging.getLogger(__name__)


DEFAULT_HISTORICAL_PATTERNS = {
    'TS001': {'peak': [8, 9, 18, 19], 'medium': [10, 11, 16, 17]},
    'TS002': {'peak': [7, 8, 17, 18], 'medium': [9, 10, 15, 16]},
    'TS003': {'peak': [9, 10, 19, 20], 'medium': [11, 12, 14, 15]},
}


@dataclass(frozen=True)
class ForecastPoint:
    time: datetime
    level: CongestionLevel
    confidence: float
    factors: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'time': self.time.isoformat(),
            'level': self.level.value,
            'confidence': self.confidence,
            'factors': list(self.factors)
        }


@dataclass(frozen=True)
class IntersectionForecast:
    intersection_id: str
    points: Tuple[ForecastPoint, ...]
    overall_trend: str                    # increasing / decreasing / stable
    peak: ForecastPoint
    recommendations: Tuple[Recommendation, ...]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API responses"""
        return {
            'intersectionId': self.intersection_id,
            'predictions': [p.to_dict() for p in self.points],
            'overallTrend': self.overall_trend,
            'peakTime': {
                'time': self.peak.time.isoformat(),
                'level': self.peak.level.value,
                'confidence': self.peak.confidence
            },
            'recommendations': [r.to_dict() for r in self.recommendations]
        }


class IntersectionForecaster:
    """
    Forecast congestion at an intersection

    Usage:
        forecaster = IntersectionForecaster(clock=FixedClock(...))
        forecast = forecaster.forecast('TS002', lookahead_minutes=60)
        forecast.overall_trend  # 'decreasing'
    """

    PEAK_BANDS = ((7, 10), (17, 20))
    MEDIUM_BANDS = ((11, 12), (14, 16))

    TREND_THRESHOLD = 0.5
    FACTORS = ('time_of_day', 'historical_patterns', 'day_of_week')

    def __init__(self, clock: Optional[Clock] = None, config: dict = None):
        """
        Initialize forecaster

        Args:
            clock: Time source
            config: Configuration with options:
                - stepMinutes: Minutes between forecast points (default: 15)
                - defaultProfile: Pattern used for unknown intersections
                - historicalPatterns: {id: {'peak': [hours], 'medium': [hours]}}
        """
        self.clock = clock if clock is not None else SystemClock()
        self.config = config or {}

        self.step_minutes = self.config.get('stepMinutes', 15)
        self.historical_patterns = self.config.get('historicalPatterns', DEFAULT_HISTORICAL_PATTERNS)
        self.default_profile = self.config.get('defaultProfile', 'TS001')

        if self.default_profile not in self.historical_patterns:
            raise InvalidInputError(f"Default forecast profile not defined: {self.default_profile}")

    def forecast(self, intersection_id: str, lookahead_minutes: int = 60) -> IntersectionForecast:
        """
        Forecast congestion for an intersection

        Args:
            intersection_id: Intersection / signal ID
            lookahead_minutes: Horizon in minutes (one point per step)

        Returns:
            IntersectionForecast
        """
        if not intersection_id or not str(intersection_id).strip():
            raise InvalidInputError("intersection_id is required")
        if lookahead_minutes <= 0:
            raise InvalidInputError("lookahead_minutes must be positive")

        now = self.clock.now()
        points = [
            self._predict_point(intersection_id, now + timedelta(minutes=offset))
            for offset in range(0, lookahead_minutes, self.step_minutes)
        ]

        return IntersectionForecast(
            intersection_id=intersection_id,
            points=tuple(points),
            overall_trend=self.determine_trend(points),
            peak=self.find_peak(points),
            recommendations=tuple(self._recommendations(points))
        )

    def _predict_point(self, intersection_id: str, at: datetime) -> ForecastPoint:
        hour = at.hour
        level = CongestionLevel.LOW
        confidence = 0.7

        if self._in_bands(hour, self.PEAK_BANDS):
            level, confidence = CongestionLevel.HIGH, 0.9
        elif self._in_bands(hour, self.MEDIUM_BANDS):
            level, confidence = CongestionLevel.MEDIUM, 0.8

        historical = self.historical_congestion(intersection_id, hour)
        if historical > 0.7:
            level, confidence = CongestionLevel.HIGH, 0.95
        elif historical > 0.4:
            level, confidence = CongestionLevel.MEDIUM, 0.85

        return ForecastPoint(time=at, level=level, confidence=confidence, factors=self.FACTORS)

    def historical_congestion(self, intersection_id: str, hour: int) -> float:
        """Historical congestion factor for an hour (0.8 peak, 0.5 medium, 0.2 otherwise)"""
        pattern = self.historical_patterns.get(intersection_id,
                                               self.historical_patterns[self.default_profile])
        if hour in pattern.get('peak', []):
            return 0.8
        if hour in pattern.get('medium', []):
            return 0.5
        return 0.2

    @staticmethod
    def _in_bands(hour: int, bands) -> bool:
        return any(start <= hour <= end for start, end in bands)

    def determine_trend(self, points: List[ForecastPoint]) -> str:
        # TODO: replace first-vs-last comparison with a slope over the whole series
        delta = points[-1].level.ordinal - points[0].level.ordinal
        if delta > self.TREND_THRESHOLD:
            return 'increasing'
        if delta < -self.TREND_THRESHOLD:
            return 'decreasing'
        return 'stable'

    @staticmethod
    def find_peak(points: List[ForecastPoint]) -> ForecastPoint:
        peak = points[0]
        for point in points[1:]:
            if point.level.ordinal > peak.level.ordinal:
                peak = point
        return peak

    def _recommendations(self, points: List[ForecastPoint]) -> List[Recommendation]:
        high_periods = [p for p in points if p.level == CongestionLevel.HIGH]

        if high_periods:
            return [Recommendation(
                kind=RecommendationKind.WARNING,
                message=f"{len(high_periods)} periods of high congestion predicted",
                priority=RecommendationPriority.HIGH,
                actions=('Schedule additional patrols', 'Prepare diversion plans',
                         'Alert traffic management center')
            )]

        return [Recommendation(
            kind=RecommendationKind.INFO,
            message='Normal traffic conditions predicted',
            priority=RecommendationPriority.LOW,
            actions=('Maintain regular operations', 'Monitor for changes')
        )]
