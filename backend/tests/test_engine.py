"""
Engine Facade Tests

Tests for component wiring through build_engine and the error policy of
the top-level operations.
"""

import pytest
import sys
import os
from datetime import datetime
from unittest.mock import MagicMock

# Add backend to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from clearway.clearance import ClearanceScenario, CoordinationMode
from clearway.config import ConfigManager
from clearway.engine import TrafficAIEngine, build_engine
from clearway.exceptions import ComputationError, InvalidInputError
from clearway.models import CongestionLevel
from clearway.runtime import FixedClock, RandomSource


MORNING = datetime(2024, 1, 15, 8, 0)

INTERSECTION = {
    'id': 'TS001',
    'lanes': [{'direction': d} for d in ('north', 'south', 'east', 'west')],
    'congestionLevel': 'medium',
}


@pytest.fixture
def engine():
    return build_engine(clock=FixedClock(MORNING), random_source=RandomSource(seed=5))


class TestTrafficAIEngine:
    """Tests for TrafficAIEngine"""

    def test_build_engine_defaults(self):
        """Test an engine builds with no arguments"""
        engine = build_engine()

        assert isinstance(engine, TrafficAIEngine)
        assert engine.route_cache.ttl_seconds == 300
        assert engine.optimizer.cache is engine.route_cache

    def test_optimize_route_uses_shared_cache(self, engine):
        """Test repeated optimization is served from the engine cache"""
        start = {'lat': 23.2156, 'lng': 72.6369}
        end = {'lat': 23.2505, 'lng': 72.6650}

        first = engine.optimize_route(start, end, 'high')
        second = engine.optimize_route(start, end, 'high')

        assert second is first
        assert len(engine.route_cache) == 1

    def test_predict_congestion_defaults_to_now(self, engine):
        """Test predictions default to the engine clock"""
        sample = engine.predict_congestion({'lat': 23.2, 'lng': 72.6})

        assert sample.level == CongestionLevel.HIGH
        assert sample.predicted_clear_time > MORNING

    def test_plan_clearance(self, engine):
        """Test clearance planning through the engine"""
        plan = engine.plan_clearance(INTERSECTION, {'priority': 'high', 'direction': 'north'})

        assert plan.scenario == ClearanceScenario.EMERGENCY
        assert plan.total_clearance_time_sec == 480

    def test_plan_clearance_peak_hour(self, engine):
        """Test the engine clock drives peak-hour selection"""
        plan = engine.plan_clearance(INTERSECTION)

        assert plan.scenario == ClearanceScenario.PEAK_HOUR

    def test_coordinate_corridor(self, engine):
        """Test corridor settings come from clearance config"""
        schedule = engine.coordinate_corridor(['TS001', 'TS002', 'TS003'])

        assert [s.wave_position for s in schedule.slots] == [1, 2, 3]
        assert schedule.slots[0].clearance_time == MORNING

    def test_forecast_intersection(self, engine):
        """Test forecasting through the engine"""
        forecast = engine.forecast_intersection('TS001', 60)

        assert len(forecast.points) == 4
        assert forecast.points[0].level == CongestionLevel.HIGH

    def test_invalid_input_propagates(self, engine):
        """Test input errors are not wrapped"""
        with pytest.raises(InvalidInputError):
            engine.plan_clearance({'id': 'TS001', 'lanes': []})

        with pytest.raises(InvalidInputError):
            engine.coordinate_corridor([])

    def test_internal_failure_surfaces(self, engine):
        """Test unexpected planner failures become ComputationError"""
        engine.planner = MagicMock()
        engine.planner.plan.side_effect = RuntimeError("lane table corrupted")

        with pytest.raises(ComputationError) as excinfo:
            engine.plan_clearance(INTERSECTION)

        assert "Clearance planning failed" in str(excinfo.value)

    def test_optimize_route_never_raises_on_failure(self, engine):
        """Test optimization degrades instead of failing"""
        engine.optimizer.generator = MagicMock()
        engine.optimizer.generator.generate.side_effect = RuntimeError("no candidates")

        result = engine.optimize_route({'lat': 23.2, 'lng': 72.6}, {'lat': 23.3, 'lng': 72.7})

        assert result.degraded

    def test_scenario_override_from_config(self, tmp_path):
        """Test clearance overrides flow from configuration into the planner"""
        (tmp_path / "clearance.yaml").write_text(
            "scenarios:\n  peak-hour:\n    coordinationMode: simultaneous\n"
        )
        engine = build_engine(ConfigManager(str(tmp_path)), clock=FixedClock(MORNING))

        plan = engine.plan_clearance(INTERSECTION)

        assert plan.policy.coordination_mode == CoordinationMode.SIMULTANEOUS
        assert {s.start_offset_sec for s in plan.sequence} == {0}

    def test_statistics(self, engine):
        """Test engine statistics aggregate component counters"""
        engine.plan_clearance(INTERSECTION)
        engine.coordinate_corridor(['TS001'])

        stats = engine.get_statistics()

        assert stats['clearance']['plansGenerated'] == 1
        assert stats['corridors'] == 1
        assert stats['routing']['cache']['size'] == 0
