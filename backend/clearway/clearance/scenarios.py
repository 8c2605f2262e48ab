"""
Clearance Scenarios - Situational Policy Selection

Every clearance request falls into one scenario, chosen in priority order:

1. emergency   - a high-priority emergency context is present
2. congestion  - the intersection is currently highly congested
3. peak-hour   - the current hour is inside a morning or evening peak window
4. normal      - everything else

Each scenario carries a fixed ScenarioPolicy, which configuration may
override field by field.
"""

import dataclasses
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from clearway.exceptions import ConfigurationError, InvalidInputError
from clearway.models import (
    EmergencyContext,
    EmergencyPriority,
    CongestionLevel,
    Intersection,
    coerce_enum,
    coerce_model,
)
from clearway.runtime import Clock, SystemClock

logger = logging.getLogger(__name__)


class ClearanceScenario(str, Enum):
    EMERGENCY = "emergency"
    CONGESTION = "congestion"
    PEAK_HOUR = "peak-hour"
    NORMAL = "normal"


class CoordinationMode(str, Enum):
    """Timing pattern for lane activations within one plan"""
    WAVE = "wave"
    SIMULTANEOUS = "simultaneous"
    ALTERNATING = "alternating"
    STANDARD = "standard"


class LanePattern(str, Enum):
    ALL_GREEN = "all-green"
    ALTERNATING = "alternating"
    EXTENDED_GREEN = "extended-green"
    STANDARD_CYCLE = "standard-cycle"


class PriorityRule(str, Enum):
    AMBULANCE_DIRECTION = "ambulance-direction"
    MAIN_ROAD = "main-road"
    ARTERIAL_ROADS = "arterial-roads"
    BALANCED = "balanced"


@dataclass(frozen=True)
class ScenarioPolicy:
    """Fixed parameters of a clearance scenario"""
    base_duration_sec: int
    lane_pattern: LanePattern
    priority_rule: PriorityRule
    coordination_mode: CoordinationMode
    pre_clearance_lead_sec: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            'duration': self.base_duration_sec,
            'pattern': self.lane_pattern.value,
            'priority': self.priority_rule.value,
            'coordination': self.coordination_mode.value,
            'preClearance': self.pre_clearance_lead_sec
        }


DEFAULT_POLICIES: Dict[ClearanceScenario, ScenarioPolicy] = {
    ClearanceScenario.EMERGENCY: ScenarioPolicy(
        base_duration_sec=180,
        lane_pattern=LanePattern.ALL_GREEN,
        priority_rule=PriorityRule.AMBULANCE_DIRECTION,
        coordination_mode=CoordinationMode.WAVE,
        pre_clearance_lead_sec=60
    ),
    ClearanceScenario.CONGESTION: ScenarioPolicy(
        base_duration_sec=120,
        lane_pattern=LanePattern.ALTERNATING,
        priority_rule=PriorityRule.MAIN_ROAD,
        coordination_mode=CoordinationMode.ALTERNATING,
        pre_clearance_lead_sec=30
    ),
    ClearanceScenario.PEAK_HOUR: ScenarioPolicy(
        base_duration_sec=150,
        lane_pattern=LanePattern.EXTENDED_GREEN,
        priority_rule=PriorityRule.ARTERIAL_ROADS,
        coordination_mode=CoordinationMode.STANDARD,
        pre_clearance_lead_sec=45
    ),
    ClearanceScenario.NORMAL: ScenarioPolicy(
        base_duration_sec=90,
        lane_pattern=LanePattern.STANDARD_CYCLE,
        priority_rule=PriorityRule.BALANCED,
        coordination_mode=CoordinationMode.STANDARD,
        pre_clearance_lead_sec=0
    ),
}

# camelCase config key -> (policy field, enum type or None for integers)
_OVERRIDE_FIELDS = {
    'baseDurationSec': ('base_duration_sec', None),
    'lanePattern': ('lane_pattern', LanePattern),
    'priorityRule': ('priority_rule', PriorityRule),
    'coordinationMode': ('coordination_mode', CoordinationMode),
    'preClearanceLeadSec': ('pre_clearance_lead_sec', None),
}


class ClearanceScenarioSelector:
    """
    Choose the clearance scenario and its policy

    Usage:
        selector = ClearanceScenarioSelector(clock=FixedClock(...))
        scenario = selector.select(intersection, emergency)
        policy = selector.policy_for(scenario)
    """

    def __init__(self, clock: Optional[Clock] = None, config: dict = None):
        """
        Initialize scenario selector

        Args:
            clock: Time source for peak-hour detection
            config: Clearance configuration with options:
                - peakHours.morning / peakHours.evening: inclusive [start, end] hours
                - scenarios.<name>: per-scenario policy overrides (camelCase fields)

        Raises:
            ConfigurationError: for unknown scenarios, fields or values
        """
        self.clock = clock if clock is not None else SystemClock()
        self.config = config or {}

        peak_hours = self.config.get('peakHours', {})
        self.peak_windows: Tuple[Tuple[int, int], ...] = (
            tuple(peak_hours.get('morning', (7, 10))),
            tuple(peak_hours.get('evening', (17, 20))),
        )

        self.policies = self._build_policies(self.config.get('scenarios') or {})

        logger.info("[OK] Clearance Scenario Selector initialized")

    def _build_policies(self, overrides: Dict[str, Any]) -> Dict[ClearanceScenario, ScenarioPolicy]:
        policies = dict(DEFAULT_POLICIES)

        for name, fields in overrides.items():
            try:
                scenario = coerce_enum(ClearanceScenario, name, 'clearance scenario')
            except InvalidInputError as e:
                raise ConfigurationError(str(e)) from e

            changes = {}
            for key, value in (fields or {}).items():
                if key not in _OVERRIDE_FIELDS:
                    raise ConfigurationError(f"Unknown policy field for {name}: {key}")

                attr, enum_cls = _OVERRIDE_FIELDS[key]
                if enum_cls is None:
                    changes[attr] = int(value)
                    continue

                try:
                    changes[attr] = coerce_enum(enum_cls, value, key)
                except InvalidInputError as e:
                    raise ConfigurationError(str(e)) from e

            policies[scenario] = dataclasses.replace(policies[scenario], **changes)
            logger.info(f"Scenario policy overridden: {scenario.value} {sorted(fields or {})}")

        return policies

    def select(self, intersection: Any, emergency: Any = None) -> ClearanceScenario:
        """
        Determine the scenario for an intersection

        Args:
            intersection: Intersection (model or mapping)
            emergency: Optional EmergencyContext (model or mapping)

        Returns:
            ClearanceScenario
        """
        intersection = coerce_model(Intersection, intersection, 'intersection')
        if emergency is not None:
            emergency = coerce_model(EmergencyContext, emergency, 'emergency')

        if emergency is not None and emergency.priority == EmergencyPriority.HIGH:
            return ClearanceScenario.EMERGENCY

        if intersection.congestion_level == CongestionLevel.HIGH:
            return ClearanceScenario.CONGESTION

        if self.is_peak_hour(self.clock.now().hour):
            return ClearanceScenario.PEAK_HOUR

        return ClearanceScenario.NORMAL

    def is_peak_hour(self, hour: int) -> bool:
        return any(start <= hour <= end for start, end in self.peak_windows)

    def policy_for(self, scenario: Any) -> ScenarioPolicy:
        scenario = coerce_enum(ClearanceScenario, scenario, 'clearance scenario')
        return self.policies[scenario]
