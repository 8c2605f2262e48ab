"""
Operator Recommendations

Advisory notes attached to optimization results, clearance plans,
corridor schedules and forecasts. Generated per call, never persisted.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class RecommendationKind(str, Enum):
    """What kind of advice a recommendation carries"""
    WARNING = "warning"
    ALERT = "alert"
    SUGGESTION = "suggestion"
    ACTION = "action"
    INFO = "info"
    CRITICAL = "critical"
    OPTIMIZATION = "optimization"
    MONITORING = "monitoring"


class RecommendationPriority(str, Enum):
    """Urgency of a recommendation"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass(frozen=True)
class Recommendation:
    kind: RecommendationKind
    message: str
    priority: RecommendationPriority
    actions: Optional[Tuple[str, ...]] = None
    metrics: Optional[Tuple[str, ...]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API response"""
        data: Dict[str, Any] = {
            'type': self.kind.value,
            'message': self.message,
            'priority': self.priority.value,
        }
        if self.actions is not None:
            data['actions'] = list(self.actions)
        if self.metrics is not None:
            data['metrics'] = list(self.metrics)
        return data
