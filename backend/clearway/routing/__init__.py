"""
Emergency Route Optimization

Components:
- RouteCandidateGenerator: Five fixed route strategies per request
- RouteScorer: Weighted 0-100 scoring under an emergency level
- RouteCache: Caller-owned TTL cache of optimization results
- RouteOptimizer: Cached pipeline with graceful fallback
"""

from .geo import (
    haversine_km,
    interpolate,
    curved_waypoints,
)

from .candidate_generator import (
    RouteCandidateGenerator,
    RouteCandidate,
    StrategyType,
    StrategyProfile,
    STRATEGY_PROFILES,
    STRATEGY_ORDER,
)

from .route_scorer import (
    RouteScorer,
    ScoredRoute,
    AIFactors,
    ScoringWeights,
    WEIGHTS_BY_LEVEL,
)

from .route_cache import (
    RouteCache,
    cache_key,
)

from .route_optimizer import (
    RouteOptimizer,
    OptimizationResult,
)


__all__ = [
    # Geometry
    "haversine_km",
    "interpolate",
    "curved_waypoints",

    # Candidates
    "RouteCandidateGenerator",
    "RouteCandidate",
    "StrategyType",
    "StrategyProfile",
    "STRATEGY_PROFILES",
    "STRATEGY_ORDER",

    # Scoring
    "RouteScorer",
    "ScoredRoute",
    "AIFactors",
    "ScoringWeights",
    "WEIGHTS_BY_LEVEL",

    # Cache
    "RouteCache",
    "cache_key",

    # Optimizer
    "RouteOptimizer",
    "OptimizationResult",
]
