"""
Traffic AI Engine - Component Wiring

Builds every engine component from configuration and exposes the
top-level operations used by the HTTP layer:

- optimize_route       -> OptimizationResult (never fails on computation)
- predict_congestion   -> CongestionSample
- plan_clearance       -> ClearancePlan
- coordinate_corridor  -> CorridorSchedule
- forecast_intersection -> IntersectionForecast

Outside route optimization, unexpected failures surface as
ComputationError; malformed input surfaces as InvalidInputError.
"""

import logging
from datetime import datetime
from functools import wraps
from typing import Any, Callable, Dict, Optional, Sequence

from clearway.clearance import (
    ClearancePlan,
    ClearancePlanner,
    ClearanceScenarioSelector,
    CorridorCoordinator,
    CorridorSchedule,
)
from clearway.config import ConfigManager
from clearway.exceptions import ClearwayError, ComputationError
from clearway.models import EmergencyLevel
from clearway.prediction import (
    CongestionPredictor,
    CongestionSample,
    IntersectionForecast,
    IntersectionForecaster,
)
from clearway.routing import (
    OptimizationResult,
    RouteCache,
    RouteCandidateGenerator,
    RouteOptimizer,
    RouteScorer,
)
from clearway.runtime import Clock, RandomSource, SystemClock

logger = logging.getLogger(__name__)


def _surface_failures(operation: str) -> Callable:
    """Re-raise unexpected exceptions as ComputationError"""
    def decorator(func: Callable):
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except ClearwayError:
                raise
            except Exception as e:
                logger.error(f"{operation} failed: {e}", exc_info=True)
                raise ComputationError(f"{operation} failed: {e}") from e
        return wrapper
    return decorator


class TrafficAIEngine:
    """
    Facade over the routing, prediction and clearance components

    Usage:
        engine = build_engine(clock=FixedClock(datetime(2024, 1, 15, 8, 0)))
        result = engine.optimize_route(start, end, 'high')
        plan = engine.plan_clearance(intersection, {'priority': 'high', 'direction': 'north'})
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        clock: Clock,
        random_source: RandomSource
    ):
        self.config_manager = config_manager
        self.clock = clock
        self.random_source = random_source

        routing_config = config_manager.get_routing_config()
        clearance_config = config_manager.get_clearance_config()

        # Caller-owned cache shared by every optimize call on this engine
        self.route_cache = RouteCache(config_manager.get('routing.cache.ttlSeconds', 300))

        self.predictor = CongestionPredictor(random_source)
        self.optimizer = RouteOptimizer(
            cache=self.route_cache,
            predictor=self.predictor,
            generator=RouteCandidateGenerator(),
            scorer=RouteScorer(),
            clock=clock,
            random_source=random_source,
            config=routing_config
        )
        self.forecaster = IntersectionForecaster(clock, config_manager.get_forecast_config())

        self.scenario_selector = ClearanceScenarioSelector(clock, clearance_config)
        self.planner = ClearancePlanner(self.scenario_selector, clock, random_source)
        self.coordinator = CorridorCoordinator(clock, clearance_config.get('corridor', {}))

        logger.info("[OK] Traffic AI Engine initialized")

    def optimize_route(
        self,
        start: Any,
        end: Any,
        emergency_level: Any = EmergencyLevel.NORMAL
    ) -> OptimizationResult:
        return self.optimizer.optimize(start, end, emergency_level)

    @_surface_failures("Congestion prediction")
    def predict_congestion(self, location: Any, at: Optional[datetime] = None) -> CongestionSample:
        """Predict congestion at a location (default: now)"""
        return self.predictor.predict(at or self.clock.now(), location)

    @_surface_failures("Clearance planning")
    def plan_clearance(self, intersection: Any, emergency: Any = None) -> ClearancePlan:
        return self.planner.plan(intersection, emergency)

    @_surface_failures("Corridor coordination")
    def coordinate_corridor(self, intersection_ids: Sequence[str]) -> CorridorSchedule:
        return self.coordinator.coordinate(intersection_ids)

    @_surface_failures("Intersection forecast")
    def forecast_intersection(self, intersection_id: str, lookahead_minutes: int = 60) -> IntersectionForecast:
        return self.forecaster.forecast(intersection_id, lookahead_minutes)

    def get_statistics(self) -> Dict[str, Any]:
        """Get engine statistics"""
        return {
            'routing': self.optimizer.get_statistics(),
            'clearance': self.planner.get_statistics(),
            'corridors': self.coordinator.corridors_coordinated
        }


def build_engine(
    config_manager: Optional[ConfigManager] = None,
    clock: Optional[Clock] = None,
    random_source: Optional[RandomSource] = None
) -> TrafficAIEngine:
    """
    Build an engine with defaults for anything not supplied

    Args:
        config_manager: Loaded configuration (default: backend/config)
        clock: Time source (default: SystemClock)
        random_source: Random source (default: unseeded)
    """
    return TrafficAIEngine(
        config_manager=config_manager if config_manager is not None else ConfigManager(),
        clock=clock if clock is not None else SystemClock(),
        random_source=random_source if random_source is not None else RandomSource()
    )
