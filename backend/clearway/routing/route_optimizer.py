"""
Route Optimizer - Emergency Route Selection

Runs the full optimization pipeline for an origin/destination pair:

1. Sample predicted congestion along the straight line
2. Generate the five candidate strategies
3. Score and rank every candidate for the emergency level
4. Attach recommendations and a confidence value

Results are memoised in a caller-owned RouteCache. Route guidance must
degrade rather than fail: any internal failure yields a fixed fallback
result instead of an exception. Only malformed input is raised.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence, Tuple

from clearway.logger import log_execution_time
from clearway.models import (
    CongestionLevel,
    EmergencyLevel,
    GeoPoint,
    coerce_enum,
    coerce_model,
)
from clearway.prediction import CongestionPredictor, CongestionSample
from clearway.recommendations import (
    Recommendation,
    RecommendationKind,
    RecommendationPriority,
)
from clearway.routing.candidate_generator import (
    STRATEGY_PROFILES,
    RouteCandidate,
    RouteCandidateGenerator,
    StrategyType,
)
from clearway.routing.geo import haversine_km, interpolate
from clearway.routing.route_cache import RouteCache, cache_key
from clearway.routing.route_scorer import AIFactors, RouteScorer, ScoredRoute
from clearway.runtime import Clock, RandomSource, SystemClock

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OptimizationResult:
    """
    Outcome of one route optimization

    degraded is True only for the fallback result.
    """
    best_route: ScoredRoute
    alternatives: Tuple[ScoredRoute, ...]
    recommendations: Tuple[Recommendation, ...]
    congestion_samples: Tuple[CongestionSample, ...]
    confidence: float
    computed_at: datetime
    degraded: bool = False

    @property
    def estimated_time(self) -> float:
        return self.best_route.eta_minutes

    @property
    def distance(self) -> float:
        return self.best_route.distance_km

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API response"""
        return {
            'bestRoute': self.best_route.to_dict(),
            'alternativeRoutes': [r.to_dict() for r in self.alternatives],
            'recommendations': [r.to_dict() for r in self.recommendations],
            'trafficPredictions': [s.to_dict() for s in self.congestion_samples],
            'estimatedTime': round(self.estimated_time, 2),
            'distance': round(self.distance, 4),
            'confidence': round(self.confidence, 4),
            'timestamp': self.computed_at.isoformat(),
            'degraded': self.degraded
        }


class RouteOptimizer:
    """
    Optimize emergency routes with time-windowed caching

    Usage:
        optimizer = RouteOptimizer(cache=RouteCache(), clock=clock)
        result = optimizer.optimize({'lat': 23.21, 'lng': 72.63},
                                    {'lat': 23.25, 'lng': 72.66},
                                    emergency_level='high')
        result.best_route.strategy_type  # StrategyType.EMERGENCY
    """

    FALLBACK_CONFIDENCE = 0.5
    FALLBACK_SCORE = 50.0
    SIGNAL_COORDINATION_THRESHOLD = 10

    MORNING_PEAK = (7, 10)
    EVENING_PEAK = (17, 20)

    def __init__(
        self,
        cache: Optional[RouteCache] = None,
        predictor: Optional[CongestionPredictor] = None,
        generator: Optional[RouteCandidateGenerator] = None,
        scorer: Optional[RouteScorer] = None,
        clock: Optional[Clock] = None,
        random_source: Optional[RandomSource] = None,
        config: dict = None
    ):
        """
        Initialize route optimizer

        Args:
            cache: Shared result cache (a private one is created if omitted)
            predictor: CongestionPredictor for route sampling
            generator: RouteCandidateGenerator
            scorer: RouteScorer
            clock: Time source
            random_source: Source for AI factor sampling
            config: Routing configuration with options:
                - cache.ttlSeconds: Result freshness window (default: 300)
                - sampling.sampleCount: Samples along the line (default: 10)
                - sampling.sampleSpacingMinutes: Arrival offset step (default: 3)
        """
        self.config = config or {}
        sampling = self.config.get('sampling', {})

        self.sample_count = sampling.get('sampleCount', 10)
        self.sample_spacing_minutes = sampling.get('sampleSpacingMinutes', 3)

        self.random_source = random_source if random_source is not None else RandomSource()
        if cache is None:
            cache = RouteCache(self.config.get('cache', {}).get('ttlSeconds', 300))
        self.cache = cache
        self.predictor = predictor if predictor is not None else CongestionPredictor(self.random_source)
        self.generator = generator if generator is not None else RouteCandidateGenerator()
        self.scorer = scorer if scorer is not None else RouteScorer()
        self.clock = clock if clock is not None else SystemClock()

        # Statistics
        self.total_optimizations = 0
        self.fallbacks = 0

        logger.info("[OK] Route Optimizer initialized")
        logger.info(f"   Cache TTL: {self.cache.ttl_seconds}s, samples: {self.sample_count}")

    def optimize(
        self,
        start: Any,
        end: Any,
        emergency_level: Any = EmergencyLevel.NORMAL
    ) -> OptimizationResult:
        """
        Find the best route between two points

        Args:
            start: Origin (GeoPoint or {'lat', 'lng'})
            end: Destination (GeoPoint or {'lat', 'lng'})
            emergency_level: 'normal', 'medium' or 'high' (not part of the cache key)

        Returns:
            OptimizationResult (cached, freshly computed, or the fallback)

        Raises:
            InvalidInputError: for malformed coordinates or emergency level
        """
        start = coerce_model(GeoPoint, start, 'start')
        end = coerce_model(GeoPoint, end, 'end')
        level = coerce_enum(EmergencyLevel, emergency_level, 'emergency level')

        now = self.clock.now()
        key = cache_key(start, end)

        cached = self.cache.get(key, now)
        if cached is not None:
            logger.debug(f"Route cache hit: {key}")
            return cached

        self.total_optimizations += 1

        try:
            result = self._compute(start, end, level, now)
        except Exception as e:
            self.fallbacks += 1
            logger.error(f"Route optimization failed, using fallback: {e}", exc_info=True)
            return self.fallback_result(start, end, now)

        self.cache.put(key, result, computed_at=result.computed_at)
        return result

    @log_execution_time(logger)
    def _compute(
        self,
        start: GeoPoint,
        end: GeoPoint,
        level: EmergencyLevel,
        now: datetime
    ) -> OptimizationResult:
        samples = self.sample_congestion(start, end, now)
        candidates = self.generator.generate(start, end, samples)

        scored = [
            ScoredRoute(
                candidate=candidate,
                score=self.scorer.score(candidate, level),
                ai_factors=self._ai_factors(candidate, now)
            )
            for candidate in candidates
        ]

        best, alternatives = self.scorer.select(scored)

        return OptimizationResult(
            best_route=best,
            alternatives=tuple(alternatives),
            recommendations=tuple(self.build_recommendations(best, samples, now)),
            congestion_samples=tuple(samples),
            confidence=self.scorer.confidence(best, samples, now),
            computed_at=now
        )

    def sample_congestion(
        self,
        start: GeoPoint,
        end: GeoPoint,
        now: datetime
    ) -> List[CongestionSample]:
        """
        Predict congestion at evenly spaced points on the straight line

        Each point is predicted for its projected arrival time.
        """
        return [
            self.predictor.predict(
                now + timedelta(minutes=i * self.sample_spacing_minutes),
                interpolate(start, end, i / self.sample_count)
            )
            for i in range(self.sample_count)
        ]

    def _ai_factors(self, candidate: RouteCandidate, now: datetime) -> AIFactors:
        midpoint = candidate.geometry[len(candidate.geometry) // 2]

        return AIFactors(
            congestion_prediction=self.predictor.predict(now, midpoint),
            historical_performance=0.7 + self.random_source.uniform_below(0.3),
            weather_impact=self.random_source.uniform_below(0.2),
            time_of_day_factor=self.scorer.time_of_day_factor(now),
            day_of_week_factor=self.scorer.day_of_week_factor(now)
        )

    def build_recommendations(
        self,
        best: ScoredRoute,
        samples: Sequence[CongestionSample],
        now: datetime
    ) -> List[Recommendation]:
        """Operator advice for the chosen route"""
        recommendations = []
        hour = now.hour

        if self.MORNING_PEAK[0] <= hour <= self.MORNING_PEAK[1]:
            recommendations.append(Recommendation(
                kind=RecommendationKind.WARNING,
                message='Morning peak hours - expect delays',
                priority=RecommendationPriority.MEDIUM
            ))

        if self.EVENING_PEAK[0] <= hour <= self.EVENING_PEAK[1]:
            recommendations.append(Recommendation(
                kind=RecommendationKind.WARNING,
                message='Evening rush hour - alternative route suggested',
                priority=RecommendationPriority.HIGH
            ))

        high_points = [s for s in samples if s.level == CongestionLevel.HIGH]
        if high_points:
            recommendations.append(Recommendation(
                kind=RecommendationKind.ALERT,
                message=f"{len(high_points)} high congestion points detected",
                priority=RecommendationPriority.HIGH,
                actions=('Consider alternative route', 'Request signal priority')
            ))

        if best.signal_count > self.SIGNAL_COORDINATION_THRESHOLD:
            recommendations.append(Recommendation(
                kind=RecommendationKind.SUGGESTION,
                message='Many traffic signals on route - coordinate with police',
                priority=RecommendationPriority.MEDIUM
            ))

        if best.strategy_type == StrategyType.EMERGENCY:
            recommendations.append(Recommendation(
                kind=RecommendationKind.ACTION,
                message='Emergency route activated - all signals will be cleared',
                priority=RecommendationPriority.CRITICAL,
                actions=('Alert traffic police', 'Clear all signals', 'Divert civilian traffic')
            ))

        return recommendations

    def fallback_result(self, start: GeoPoint, end: GeoPoint, now: datetime) -> OptimizationResult:
        """Direct two-point route used when optimization is unavailable"""
        distance_km = haversine_km(start, end)
        balanced = STRATEGY_PROFILES[StrategyType.BALANCED]

        direct = RouteCandidate(
            id='fallback-route',
            name='Direct Route',
            strategy_type=StrategyType.DIRECT,
            geometry=(start, end),
            distance_km=distance_km,
            eta_minutes=RouteCandidateGenerator.travel_minutes(distance_km, balanced),
            signal_count=0,
            turn_count=0,
            traffic_level=CongestionLevel.MEDIUM,
            priority_class='direct'
        )

        return OptimizationResult(
            best_route=ScoredRoute(candidate=direct, score=self.FALLBACK_SCORE),
            alternatives=(),
            recommendations=(Recommendation(
                kind=RecommendationKind.WARNING,
                message='Using fallback route - AI optimization unavailable',
                priority=RecommendationPriority.MEDIUM
            ),),
            congestion_samples=(),
            confidence=self.FALLBACK_CONFIDENCE,
            computed_at=now,
            degraded=True
        )

    def get_statistics(self) -> Dict[str, Any]:
        """Get optimizer statistics"""
        return {
            'totalOptimizations': self.total_optimizations,
            'fallbacks': self.fallbacks,
            'cache': self.cache.get_statistics()
        }
