import math
import pickle
from concurrent.futures import ThreadPoolExecutor

import pytest

from py_golfflight import (BallProperties, BallState, Environment, InvalidInputError, InvalidStateError,
                           LaunchConditions, NumericalInstabilityError, RK4IntegrationEngine, SpinState, Vector)
from py_golfflight.engines import create_base_engine_config, DEFAULT_BASE_ENGINE_CONFIG


def _fly(engine, conditions, environment=None, properties=None):
    properties = properties or BallProperties()
    return engine.simulate_flight(conditions.initial_state(properties), environment or Environment(), properties)


class TestEngineConfig:

    def test_defaults(self):
        config = create_base_engine_config()
        assert config == DEFAULT_BASE_ENGINE_CONFIG
        assert config.cMaxFlightTime == 10.0
        assert config.cRefineImpact is True
        assert config.cTurbulence is False

    def test_overrides_and_none(self):
        config = create_base_engine_config({'cStepMultiplier': 2.0, 'cMaxFlightTime': None})
        assert config.cStepMultiplier == 2.0
        assert config.cMaxFlightTime == 10.0

    @pytest.mark.parametrize("bad", [
        {'cUnknown': 1},
        {'cStepMultiplier': 0.0},
        {'cMaxFlightTime': -1.0},
        {'cImpactTolerance': 0.0},
        {'cMaxImpactIterations': 0},
    ])
    def test_invalid(self, bad):
        with pytest.raises(InvalidInputError):
            create_base_engine_config(bad)

    def test_calc_step(self, loaded_engine_instance):
        assert loaded_engine_instance({}).get_calc_step() == pytest.approx(0.0005)
        assert RK4IntegrationEngine({'cStepMultiplier': 2.0}).get_calc_step() == pytest.approx(0.001)


class TestSimulateFlight:

    def test_points_non_empty_and_time_ascending(self, fast_engine, drive):
        result = _fly(fast_engine, drive)
        assert len(result) > 2
        times = [p.time for p in result]
        assert times[0] == 0.0
        assert all(b > a for a, b in zip(times, times[1:]))
        assert result.points[-1].height <= 0
        assert result.impacted

    def test_first_point_is_launch(self, fast_engine, drive):
        result = _fly(fast_engine, drive)
        first = result[0]
        assert first.position == Vector(0, 0, 0)
        assert first.velocity == drive.velocity
        assert first.forces.gravity.y < 0

    def test_initial_state_not_modified(self, fast_engine, drive):
        properties = BallProperties()
        state = drive.initial_state(properties)
        fast_engine.simulate_flight(state, Environment(), properties)
        assert state.position == Vector(0, 0, 0)
        assert state.velocity == drive.velocity
        assert state.spin.rate == drive.spin_rate

    def test_time_limit_hit_exactly(self):
        engine = RK4IntegrationEngine({'cStepMultiplier': 10.0, 'cMaxFlightTime': 1.0})
        result = _fly(engine, LaunchConditions(70.0, 30.0))
        assert not result.impacted
        assert result.points[-1].time == pytest.approx(1.0, abs=1e-12)
        assert result.points[-1].height > 0
        assert result.metrics.time_of_flight == pytest.approx(1.0, abs=1e-12)

    def test_time_limit_not_a_step_multiple(self):
        engine = RK4IntegrationEngine({'cStepMultiplier': 10.0, 'cMaxFlightTime': 0.0123})
        result = _fly(engine, LaunchConditions(70.0, 30.0))
        times = [p.time for p in result]
        assert times[-1] == pytest.approx(0.0123, abs=1e-12)
        assert all(b > a for a, b in zip(times, times[1:]))

    def test_impact_refinement(self, drive):
        refined = _fly(RK4IntegrationEngine({'cStepMultiplier': 10.0}), drive)
        coarse = _fly(RK4IntegrationEngine({'cStepMultiplier': 10.0, 'cRefineImpact': False}), drive)
        assert -1e-3 < refined.points[-1].height <= 0
        assert coarse.points[-1].height <= refined.points[-1].height
        assert refined.points[-1].time <= coarse.points[-1].time

    def test_spin_decays_and_axis_stays_unit(self, fast_engine):
        conditions = LaunchConditions(65.0, 14.0, spin_rate=3000.0, spin_axis=Vector(0, 0.3, 1))
        result = _fly(fast_engine, conditions)
        last = result.points[-1]
        assert last.spin.rate == pytest.approx(3000.0 * math.exp(-0.05 * last.time), rel=1e-9)
        assert all(p.spin.axis.magnitude() == pytest.approx(1.0) for p in result)

    def test_tilted_axis_curves_left(self, fast_engine):
        # axis tilted toward +y curves a downrange ball toward -z
        result = _fly(fast_engine, LaunchConditions(65.0, 14.0, spin_rate=3000.0, spin_axis=Vector(0, 0.3, 1)))
        assert result.landing_point.z < -1.0

    def test_counters(self, drive):
        engine = RK4IntegrationEngine({'cStepMultiplier': 10.0})
        result = _fly(engine, drive)
        assert engine.trajectory_count == 1
        assert engine.integration_step_count == len(result) - 1
        _fly(engine, drive)
        assert engine.trajectory_count == 2

    def test_counters_under_concurrency(self, drive):
        engine = RK4IntegrationEngine({'cStepMultiplier': 10.0})
        steps = len(_fly(RK4IntegrationEngine({'cStepMultiplier': 10.0}), drive)) - 1
        with ThreadPoolExecutor(max_workers=4) as executor:
            list(executor.map(lambda _: _fly(engine, drive), range(12)))
        assert engine.trajectory_count == 12
        assert engine.integration_step_count == 12 * steps

    def test_engine_pickles(self, drive):
        engine = RK4IntegrationEngine({'cStepMultiplier': 10.0})
        _fly(engine, drive)
        clone = pickle.loads(pickle.dumps(engine))
        assert clone.trajectory_count == 1
        assert _fly(clone, drive).landing_point == _fly(engine, drive).landing_point
        assert clone.trajectory_count == 2

    def test_final_state(self, fast_engine, drive):
        result = _fly(fast_engine, drive)
        last = result.points[-1]
        assert result.final_state.position == last.position
        assert result.final_state.time == last.time
        assert result.final_state.mass == BallProperties().mass

    def test_ball_at_rest_on_ground_lands_immediately(self, fast_engine):
        state = BallState.from_vectors((0, 0, 0), (0, 0, 0), 0.0)
        result = fast_engine.simulate_flight(state, Environment(), BallProperties())
        assert result.impacted
        assert len(result) == 2


class TestLaunchValidation:

    def test_below_ground(self, fast_engine):
        state = BallState.from_vectors((0, -0.1, 0), (50, 10, 0), 2500)
        with pytest.raises(InvalidStateError) as exc_info:
            fast_engine.simulate_flight(state, Environment(), BallProperties())
        assert exc_info.value.reason == InvalidStateError.BELOW_GROUND

    def test_non_finite(self, fast_engine):
        state = BallState.from_vectors((0, 0, 0), (math.nan, 10, 0), 2500)
        with pytest.raises(NumericalInstabilityError):
            fast_engine.simulate_flight(state, Environment(), BallProperties())

    def test_non_positive_mass(self, fast_engine):
        state = BallState(Vector(0, 0, 0), Vector(50, 10, 0), SpinState(2500), mass=0.0)
        with pytest.raises(InvalidInputError):
            fast_engine.simulate_flight(state, Environment(), BallProperties())


class TestTurbulence:

    def test_seeded_turbulence_is_repeatable(self, drive):
        config = {'cStepMultiplier': 10.0, 'cTurbulence': True, 'cTurbulenceSeed': 5}
        a = _fly(RK4IntegrationEngine(config), drive, Environment(wind=Vector(4, 0, 2)))
        b = _fly(RK4IntegrationEngine(config), drive, Environment(wind=Vector(4, 0, 2)))
        assert a.landing_point == b.landing_point
        assert all(p.forces.turbulence is not None for p in a)

    def test_repeated_flights_on_one_engine_match(self, drive):
        engine = RK4IntegrationEngine({'cStepMultiplier': 10.0, 'cTurbulence': True, 'cTurbulenceSeed': 5})
        env = Environment(wind=Vector(4, 0, 2))
        first = _fly(engine, drive, env)
        second = _fly(engine, drive, env)
        assert first.landing_point == second.landing_point
        assert [p.forces.turbulence for p in first] == [p.forces.turbulence for p in second]

    def test_concurrent_flights_on_one_engine_match(self, drive):
        config = {'cStepMultiplier': 10.0, 'cTurbulence': True, 'cTurbulenceSeed': 5}
        engine = RK4IntegrationEngine(config)
        env = Environment(wind=Vector(4, 0, 2))
        expected = _fly(RK4IntegrationEngine(config), drive, env).landing_point
        with ThreadPoolExecutor(max_workers=4) as executor:
            landings = list(executor.map(lambda _: _fly(engine, drive, env).landing_point, range(8)))
        assert all(landing == expected for landing in landings)
        assert engine.trajectory_count == 8

    def test_turbulence_changes_flight(self, drive):
        env = Environment(wind=Vector(4, 0, 2))
        calm = _fly(RK4IntegrationEngine({'cStepMultiplier': 10.0}), drive, env)
        gusty = _fly(RK4IntegrationEngine({'cStepMultiplier': 10.0, 'cTurbulence': True, 'cTurbulenceSeed': 5}),
                     drive, env)
        assert calm.points[0].forces.turbulence is None
        assert gusty.landing_point != calm.landing_point


@pytest.mark.extended
class TestScenarios:

    def test_reference_drive(self, loaded_engine_instance, drive):
        result = _fly(loaded_engine_instance({}), drive, Environment(wind=Vector(0, 0, 0)))
        metrics = result.metrics
        assert 150 <= metrics.carry_distance <= 250
        assert metrics.max_height > 0
        assert metrics.time_of_flight > 0
        assert metrics.launch_angle == pytest.approx(15.0)
        assert metrics.ball_speed == pytest.approx(70.0)
        assert metrics.spin_rate == 2500.0
        assert metrics.landing_angle > 15.0
        assert abs(result.landing_point.z) < 1e-9

    def test_step_multiplier_converges(self, drive):
        fine = _fly(RK4IntegrationEngine({}), drive).metrics.carry_distance
        coarse = _fly(RK4IntegrationEngine({'cStepMultiplier': 10.0}), drive).metrics.carry_distance
        assert coarse == pytest.approx(fine, abs=0.5)

    def test_tailwind_carries_further(self, fast_engine, drive):
        tail = _fly(fast_engine, drive, Environment(wind=Vector(5, 0, 0)))
        head = _fly(fast_engine, drive, Environment(wind=Vector(-5, 0, 0)))
        assert tail.metrics.carry_distance > head.metrics.carry_distance

    def test_altitude_carries_further(self, fast_engine, drive):
        sea_level = _fly(fast_engine, drive, Environment())
        mountain = _fly(fast_engine, drive, Environment(altitude=1600))
        assert mountain.metrics.carry_distance > sea_level.metrics.carry_distance

    def test_crosswind_drifts(self, fast_engine, drive):
        result = _fly(fast_engine, drive, Environment(wind=Vector(0, 0, 5)))
        assert result.landing_point.z > 1.0
