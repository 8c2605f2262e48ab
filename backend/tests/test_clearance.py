"""
Intersection Clearance Tests

Tests for scenario selection and clearance planning:
- Scenario priority order and peak windows
- Policy overrides from configuration
- Lane states, sequencing per coordination mode
- Efficiency score, traffic impact and recommendations
"""

import pytest
import sys
import os
from datetime import datetime

# Add backend to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from clearway.clearance import (
    ClearancePlanner,
    ClearanceScenario,
    ClearanceScenarioSelector,
    CoordinationMode,
    PlannedLaneStatus,
)
from clearway.exceptions import ConfigurationError, InvalidInputError
from clearway.models import Intersection, LaneDirection
from clearway.runtime import FixedClock, RandomSource


NOON = datetime(2024, 1, 15, 12, 0)

NORTH_EMERGENCY = {'priority': 'high', 'direction': 'north'}


def make_intersection(directions=('north', 'south', 'east', 'west'), congestion='low', intersection_id='TS001'):
    return {
        'id': intersection_id,
        'location': {'lat': 23.2156, 'lng': 72.6369},
        'lanes': [{'direction': d, 'status': 'normal'} for d in directions],
        'congestionLevel': congestion,
    }


class ScriptedRandom:
    """Random source with a fixed weather condition and historical offset"""

    def __init__(self, condition: str = 'clear', offset: float = 0.35):
        self.condition = condition
        self.offset = offset

    def random(self):
        return 0.5

    def uniform_below(self, upper):
        return self.offset

    def choice(self, options):
        return self.condition


def make_planner(now: datetime = NOON, random_source=None, config=None):
    clock = FixedClock(now)
    selector = ClearanceScenarioSelector(clock, config)
    return ClearancePlanner(selector, clock, random_source or ScriptedRandom())


# ============================================
# ClearanceScenarioSelector Tests
# ============================================

class TestClearanceScenarioSelector:
    """Tests for ClearanceScenarioSelector"""

    def test_high_priority_emergency(self):
        """Test a high-priority emergency wins over everything else"""
        selector = ClearanceScenarioSelector(FixedClock(datetime(2024, 1, 15, 8, 0)))

        scenario = selector.select(make_intersection(congestion='high'), NORTH_EMERGENCY)

        assert scenario == ClearanceScenario.EMERGENCY

    def test_lower_priority_emergency_falls_through(self):
        """Test medium-priority emergencies do not trigger the emergency scenario"""
        selector = ClearanceScenarioSelector(FixedClock(NOON))

        scenario = selector.select(make_intersection(congestion='high'),
                                   {'priority': 'medium', 'direction': 'east'})

        assert scenario == ClearanceScenario.CONGESTION

    @pytest.mark.parametrize("hour,expected", [
        (6, ClearanceScenario.NORMAL),
        (7, ClearanceScenario.PEAK_HOUR),
        (10, ClearanceScenario.PEAK_HOUR),
        (11, ClearanceScenario.NORMAL),
        (16, ClearanceScenario.NORMAL),
        (17, ClearanceScenario.PEAK_HOUR),
        (20, ClearanceScenario.PEAK_HOUR),
        (21, ClearanceScenario.NORMAL),
    ])
    def test_peak_windows(self, hour, expected):
        """Test peak windows are 7-10 and 17-20 inclusive"""
        selector = ClearanceScenarioSelector(FixedClock(NOON.replace(hour=hour)))

        assert selector.select(make_intersection()) == expected

    def test_configured_peak_windows(self):
        """Test peak windows come from configuration"""
        config = {'peakHours': {'morning': [6, 6], 'evening': [16, 16]}}
        selector = ClearanceScenarioSelector(FixedClock(NOON.replace(hour=6)), config)

        assert selector.select(make_intersection()) == ClearanceScenario.PEAK_HOUR
        assert not selector.is_peak_hour(8)

    def test_default_policies(self):
        """Test the built-in policy table"""
        selector = ClearanceScenarioSelector(FixedClock(NOON))

        emergency = selector.policy_for('emergency')
        congestion = selector.policy_for(ClearanceScenario.CONGESTION)
        peak = selector.policy_for('peak-hour')
        normal = selector.policy_for('normal')

        assert (emergency.base_duration_sec, emergency.coordination_mode) == (180, CoordinationMode.WAVE)
        assert (congestion.base_duration_sec, congestion.coordination_mode) == (120, CoordinationMode.ALTERNATING)
        assert (peak.base_duration_sec, peak.coordination_mode) == (150, CoordinationMode.STANDARD)
        assert (normal.base_duration_sec, normal.coordination_mode) == (90, CoordinationMode.STANDARD)
        assert emergency.pre_clearance_lead_sec == 60

    def test_policy_override(self):
        """Test configuration overrides individual policy fields"""
        config = {'scenarios': {'peak-hour': {'coordinationMode': 'simultaneous', 'baseDurationSec': 100}}}
        selector = ClearanceScenarioSelector(FixedClock(NOON), config)

        policy = selector.policy_for('peak-hour')

        assert policy.coordination_mode == CoordinationMode.SIMULTANEOUS
        assert policy.base_duration_sec == 100
        assert policy.lane_pattern.value == 'extended-green'

    def test_unknown_scenario_override(self):
        """Test overrides for unknown scenarios are rejected"""
        with pytest.raises(ConfigurationError):
            ClearanceScenarioSelector(FixedClock(NOON), {'scenarios': {'rush': {}}})

    def test_unknown_override_field(self):
        """Test unknown policy fields are rejected"""
        with pytest.raises(ConfigurationError):
            ClearanceScenarioSelector(FixedClock(NOON), {'scenarios': {'normal': {'speed': 1}}})

    def test_unknown_override_value(self):
        """Test unknown coordination modes are rejected"""
        with pytest.raises(ConfigurationError):
            ClearanceScenarioSelector(FixedClock(NOON), {'scenarios': {'normal': {'coordinationMode': 'linked'}}})

    def test_unknown_scenario_lookup(self):
        """Test looking up an unknown scenario is an input error"""
        selector = ClearanceScenarioSelector(FixedClock(NOON))

        with pytest.raises(InvalidInputError):
            selector.policy_for('rush')


# ============================================
# ClearancePlanner Tests
# ============================================

class TestClearancePlanner:
    """Tests for ClearancePlanner"""

    def test_north_emergency_plan(self):
        """Test the ambulance axis is cleared and cross traffic blocked"""
        planner = make_planner()

        plan = planner.plan(make_intersection(), NORTH_EMERGENCY)

        assert plan.scenario == ClearanceScenario.EMERGENCY
        assert [l.status for l in plan.lanes] == [
            PlannedLaneStatus.CLEARED, PlannedLaneStatus.CLEARED,
            PlannedLaneStatus.BLOCKED, PlannedLaneStatus.BLOCKED
        ]
        assert [l.duration_sec for l in plan.lanes] == [180, 180, 60, 60]
        assert plan.total_clearance_time_sec == 480

    def test_north_emergency_efficiency(self):
        """Test imbalance, ambulance bonus and long-total penalty"""
        planner = make_planner()

        plan = planner.plan(make_intersection(), NORTH_EMERGENCY)

        # 100 - (120/180)*40 + 20 - 30
        assert plan.efficiency_score == pytest.approx(63.333, abs=0.01)

    def test_north_emergency_impact(self):
        """Test impact accumulates across lanes"""
        planner = make_planner()

        impact = planner.plan(make_intersection(), NORTH_EMERGENCY).estimated_impact

        assert impact.vehicles_affected == pytest.approx(400)
        assert impact.average_delay_min == pytest.approx(6)
        assert impact.queue_length_m == pytest.approx(100)

    def test_wave_sequence(self):
        """Test wave activation follows lane order 5 seconds apart"""
        planner = make_planner()

        plan = planner.plan(make_intersection(), NORTH_EMERGENCY)

        assert [s.lane for s in plan.sequence] == [
            LaneDirection.NORTH, LaneDirection.SOUTH, LaneDirection.EAST, LaneDirection.WEST
        ]
        assert [s.start_offset_sec for s in plan.sequence] == [0, 5, 10, 15]
        assert [s.duration_sec for s in plan.sequence] == [180, 180, 60, 60]
        assert all(s.action == 'clear' for s in plan.sequence)

    def test_east_ambulance_clears_east_west(self):
        """Test alignment includes the reverse direction"""
        planner = make_planner()

        plan = planner.plan(make_intersection(), {'priority': 'high', 'direction': 'west'})

        statuses = {l.direction.value: l.status.value for l in plan.lanes}
        assert statuses == {'north': 'blocked', 'south': 'blocked', 'east': 'cleared', 'west': 'cleared'}

    def test_clearance_windows(self):
        """Test each lane window starts now and lasts its duration"""
        planner = make_planner()

        plan = planner.plan(make_intersection(), NORTH_EMERGENCY)

        for lane in plan.lanes:
            assert lane.clearance_start == NOON
            assert (lane.clearance_end - lane.clearance_start).total_seconds() == lane.duration_sec

    def test_congestion_alternating(self):
        """Test congested intersections alternate north/south and east/west"""
        planner = make_planner()

        plan = planner.plan(make_intersection(('east', 'north', 'west', 'south'), congestion='high'))

        assert plan.scenario == ClearanceScenario.CONGESTION
        assert all(l.status == PlannedLaneStatus.ALTERNATING for l in plan.lanes)
        assert all(l.duration_sec == 90 for l in plan.lanes)

        steps = [(s.lane.value, s.lane_index, s.start_offset_sec, s.duration_sec) for s in plan.sequence]
        assert steps == [
            ('north', 1, 0, 45),
            ('south', 3, 0, 45),
            ('east', 0, 45, 45),
            ('west', 2, 45, 45),
        ]

    def test_congestion_efficiency_and_impact(self):
        """Test balanced alternating windows only pay the long-total penalty"""
        planner = make_planner()

        plan = planner.plan(make_intersection(congestion='high'))

        assert plan.total_clearance_time_sec == 360
        assert plan.efficiency_score == pytest.approx(70.0)
        assert plan.estimated_impact.vehicles_affected == 0

    @pytest.mark.parametrize("lanes,expected", [
        (('north', 'south'), 100.0),
        (('north', 'south', 'east'), 85.0),
        (('north', 'south', 'east', 'west'), 70.0),
    ])
    def test_normal_efficiency_thresholds(self, lanes, expected):
        """Test the score drops as total time crosses 180s and 300s"""
        planner = make_planner()

        plan = planner.plan(make_intersection(lanes))

        assert plan.scenario == ClearanceScenario.NORMAL
        assert plan.total_clearance_time_sec == 90 * len(lanes)
        assert plan.efficiency_score == pytest.approx(expected)

    def test_standard_sequence(self):
        """Test standard sequencing staggers lanes by 30 seconds"""
        planner = make_planner()

        plan = planner.plan(make_intersection(('north', 'east', 'south')))

        assert [s.start_offset_sec for s in plan.sequence] == [0, 30, 60]
        assert all(s.duration_sec == 30 for s in plan.sequence)

    def test_peak_hour_plan(self):
        """Test peak-hour plans use extended windows"""
        planner = make_planner(now=NOON.replace(hour=8))

        plan = planner.plan(make_intersection(('north', 'south')))

        assert plan.scenario == ClearanceScenario.PEAK_HOUR
        assert [l.duration_sec for l in plan.lanes] == [150, 150]
        assert plan.efficiency_score == pytest.approx(85.0)

    def test_simultaneous_override(self):
        """Test a configured simultaneous mode starts every lane at once"""
        config = {'scenarios': {'normal': {'coordinationMode': 'simultaneous'}}}
        planner = make_planner(config=config)

        plan = planner.plan(make_intersection())

        assert [s.start_offset_sec for s in plan.sequence] == [0, 0, 0, 0]
        assert [s.duration_sec for s in plan.sequence] == [90, 90, 90, 90]

    def test_medium_emergency_is_not_prioritised(self):
        """Test lower-priority emergencies get an ordinary plan"""
        planner = make_planner()

        plan = planner.plan(make_intersection(), {'priority': 'medium', 'direction': 'north'})

        assert plan.scenario == ClearanceScenario.NORMAL
        assert all(l.status == PlannedLaneStatus.NORMAL for l in plan.lanes)

    @pytest.mark.parametrize("congestion,emergency", [
        ('low', None),
        ('high', None),
        ('low', NORTH_EMERGENCY),
        ('high', {'priority': 'low', 'direction': 'east'}),
    ])
    def test_sequence_covers_every_lane_once(self, congestion, emergency):
        """Test each lane appears exactly once in the sequence"""
        planner = make_planner()

        plan = planner.plan(make_intersection(congestion=congestion), emergency)

        assert sorted(s.lane_index for s in plan.sequence) == [0, 1, 2, 3]
        assert plan.total_clearance_time_sec == sum(l.duration_sec for l in plan.lanes)
        assert 0.0 <= plan.efficiency_score <= 100.0

    def test_accepts_models(self):
        """Test validated models are accepted directly"""
        planner = make_planner()
        intersection = Intersection.model_validate(make_intersection())

        plan = planner.plan(intersection)

        assert plan.intersection_id == 'TS001'

    def test_missing_lanes_rejected(self):
        """Test intersections without lanes are rejected"""
        planner = make_planner()

        with pytest.raises(InvalidInputError):
            planner.plan(make_intersection(directions=()))

    def test_unknown_direction_rejected(self):
        """Test unknown lane directions are rejected"""
        planner = make_planner()

        with pytest.raises(InvalidInputError):
            planner.plan(make_intersection(('north', 'up')))

    def test_unknown_priority_rejected(self):
        """Test unknown emergency priorities are rejected"""
        planner = make_planner()

        with pytest.raises(InvalidInputError):
            planner.plan(make_intersection(), {'priority': 'urgent', 'direction': 'north'})

    def test_emergency_recommendations(self):
        """Test the critical emergency recommendation"""
        planner = make_planner()

        plan = planner.plan(make_intersection(), NORTH_EMERGENCY)

        critical = [r for r in plan.recommendations if r.kind.value == 'critical']
        assert len(critical) == 1
        assert critical[0].message == 'EMERGENCY VEHICLE APPROACHING'
        assert len(critical[0].actions) == 3

    def test_night_and_congestion_recommendations(self):
        """Test night info and high congestion warning"""
        planner = make_planner(now=NOON.replace(hour=23))

        plan = planner.plan(make_intersection(congestion='high'))

        kinds = [(r.kind.value, r.priority.value) for r in plan.recommendations]
        assert ('info', 'low') in kinds
        assert ('warning', 'high') in kinds

    def test_clear_weather_no_warning(self):
        """Test clear weather and normal history add nothing"""
        planner = make_planner(random_source=ScriptedRandom('clear', 0.35))

        plan = planner.plan(make_intersection())

        assert plan.recommendations == ()

    def test_weather_warning(self):
        """Test bad weather adds a safety buffer warning"""
        planner = make_planner(random_source=ScriptedRandom('storm', 0.35))

        plan = planner.plan(make_intersection())

        assert len(plan.recommendations) == 1
        warning = plan.recommendations[0]
        assert warning.message == 'Weather conditions may affect clearance (Impact: 80%)'
        assert warning.actions == ('Add 15 seconds safety buffer',)

    def test_historical_performance_alert(self):
        """Test below-average history raises an alert"""
        planner = make_planner(random_source=ScriptedRandom('clear', 0.1))

        plan = planner.plan(make_intersection())

        assert len(plan.recommendations) == 1
        assert plan.recommendations[0].message == 'Below average historical performance (60%)'

    def test_historical_alert_reachable_with_random_source(self):
        """Test sampled history falls below the alert threshold for some plans"""
        planner = make_planner(random_source=RandomSource(seed=3))

        messages = [
            r.message
            for _ in range(50)
            for r in planner.plan(make_intersection()).recommendations
        ]

        assert any(m.startswith('Below average historical performance') for m in messages)

    def test_to_dict(self):
        """Test plan serialization"""
        planner = make_planner()

        data = planner.plan(make_intersection(), NORTH_EMERGENCY).to_dict()

        assert data['intersectionId'] == 'TS001'
        assert data['scenario'] == 'emergency'
        assert data['pattern']['coordination'] == 'wave'
        assert data['totalClearanceTime'] == 480
        assert data['efficiencyScore'] == 63.33
        assert data['lanes'][0]['status'] == 'cleared'
        assert data['sequence'][1] == {
            'lane': 'south', 'laneIndex': 1, 'startOffset': 5, 'duration': 180, 'action': 'clear'
        }
        assert data['estimatedImpact'] == {'vehiclesAffected': 400.0, 'averageDelay': 6.0, 'queueLength': 100.0}
