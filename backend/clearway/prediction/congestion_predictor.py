"""
Congestion Predictor - Time-of-Day Congestion Estimate

Estimates congestion at a location for a given moment from hour-of-day
and day-of-week patterns plus a bounded local-variation term.

Score composition:
- Baseline 0.3
- +0.4 during morning peak hours, +0.5 during evening peak hours
- +0.3 on weekend leisure hours
- +[0, 0.2) location variation (from the injected RandomSource)
- Capped at 0.95
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, Optional, Tuple

from clearway.exceptions import InvalidInputError
from clearway.models import CongestionLevel, GeoPoint, coerce_model
from clearway.runtime import RandomSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CongestionSample:
    """
    Predicted congestion at one location

    Produced fresh per prediction call.
    """
    location: GeoPoint
    level: CongestionLevel
    score: float                      # 0-0.95
    confidence: float                 # 0.85-0.95
    predicted_clear_time: datetime
    factors: Tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API responses"""
        return {
            'location': self.location.to_dict(),
            'level': self.level.value,
            'score': round(self.score, 4),
            'confidence': round(self.confidence, 4),
            'predictedClearTime': self.predicted_clear_time.isoformat(),
            'factors': list(self.factors)
        }


class CongestionPredictor:
    """
    Predict congestion level for a time and location

    Usage:
        predictor = CongestionPredictor(random_source=RandomSource(seed=7))
        sample = predictor.predict(datetime(2024, 1, 15, 8, 0), GeoPoint(lat=23.2, lng=72.6))
        sample.level  # CongestionLevel.HIGH
    """

    MORNING_HOURS = (7, 8, 9)
    EVENING_HOURS = (17, 18, 19)
    WEEKEND_HOURS = (11, 12, 20, 21)

    BASE_CONGESTION = 0.3
    MORNING_BONUS = 0.4
    EVENING_BONUS = 0.5
    WEEKEND_BONUS = 0.3
    LOCATION_VARIATION = 0.2
    MAX_CONGESTION = 0.95

    HIGH_THRESHOLD = 0.7
    MEDIUM_THRESHOLD = 0.4

    CONFIDENCE_FLOOR = 0.85
    CONFIDENCE_SPREAD = 0.1

    CLEAR_MINUTES_AT_FULL = 30

    FACTORS = ('time_of_day', 'day_of_week', 'historical_patterns')

    def __init__(self, random_source: Optional[RandomSource] = None):
        self.random_source = random_source if random_source is not None else RandomSource()

    def base_congestion(self, at: datetime) -> float:
        """Deterministic component of the congestion score"""
        hour = at.hour
        score = self.BASE_CONGESTION

        if hour in self.MORNING_HOURS:
            score += self.MORNING_BONUS
        elif hour in self.EVENING_HOURS:
            score += self.EVENING_BONUS

        # Saturday / Sunday
        if at.weekday() >= 5 and hour in self.WEEKEND_HOURS:
            score += self.WEEKEND_BONUS

        return score

    def classify(self, score: float) -> CongestionLevel:
        if score > self.HIGH_THRESHOLD:
            return CongestionLevel.HIGH
        if score > self.MEDIUM_THRESHOLD:
            return CongestionLevel.MEDIUM
        return CongestionLevel.LOW

    def predict(self, at: datetime, location: Any) -> CongestionSample:
        """
        Predict congestion at a location

        Args:
            at: Moment to predict for
            location: GeoPoint or {'lat', 'lng'} mapping

        Returns:
            CongestionSample

        Raises:
            InvalidInputError: if the time or location is malformed
        """
        if not isinstance(at, datetime):
            raise InvalidInputError(f"time must be a datetime, got {type(at).__name__}")
        point = coerce_model(GeoPoint, location, 'location')

        variation = self.random_source.uniform_below(self.LOCATION_VARIATION)
        score = min(self.base_congestion(at) + variation, self.MAX_CONGESTION)

        confidence = self.CONFIDENCE_FLOOR + self.random_source.uniform_below(self.CONFIDENCE_SPREAD)
        clear_minutes = math.ceil(score * self.CLEAR_MINUTES_AT_FULL)

        return CongestionSample(
            location=point,
            level=self.classify(score),
            score=score,
            confidence=confidence,
            predicted_clear_time=at + timedelta(minutes=clear_minutes),
            factors=self.FACTORS
        )
