import math
import random

import pytest

from py_golfflight import BallProperties, Environment, ForceModel, SpinState, Vector, air_properties


@pytest.fixture
def model():
    return ForceModel(rng=random.Random(42))


class TestForceModel:

    @pytest.mark.parametrize("env", [
        Environment(),
        Environment(temperature=35, humidity=0.9, altitude=2000),
        Environment(wind=Vector(5, 0, -2)),
    ])
    def test_zero_velocity_gravity_only(self, model, env):
        ball = BallProperties()
        forces = model.compute_forces(Vector(0, 0, 0), SpinState(3000), ball, env)
        zero = Vector(0, 0, 0)
        assert forces.drag == zero
        assert forces.lift == zero
        assert forces.magnus == zero
        assert forces.gravity == Vector(0.0, -9.81 * ball.mass, 0.0)
        assert forces.total() == forces.gravity

    def test_custom_gravity(self):
        ball = BallProperties()
        forces = ForceModel(gravity=1.62).compute_forces(Vector(0, 0, 0), SpinState(0), ball, Environment())
        assert forces.gravity == Vector(0.0, -1.62 * ball.mass, 0.0)

    def test_doubling_speed_quadruples_drag(self, model):
        ball, env, spin = BallProperties(), Environment(), SpinState(0)
        slow = model.compute_forces(Vector(40, 0, 0), spin, ball, env).drag.magnitude()
        fast = model.compute_forces(Vector(80, 0, 0), spin, ball, env).drag.magnitude()
        assert fast == pytest.approx(4 * slow, rel=1e-9)

    def test_drag_opposes_relative_velocity(self, model):
        ball, spin = BallProperties(), SpinState(2500)
        calm = model.compute_forces(Vector(50, 0, 0), spin, ball, Environment())
        headwind = model.compute_forces(Vector(50, 0, 0), spin, ball, Environment(wind=Vector(-5, 0, 0)))
        assert calm.drag.x < 0
        assert calm.drag.y == pytest.approx(0.0, abs=1e-12)
        assert headwind.drag.magnitude() > calm.drag.magnitude()

    def test_backspin_lifts(self, model):
        forces = model.compute_forces(Vector(60, 5, 0), SpinState(3000), BallProperties(), Environment())
        assert forces.lift.y > 0
        assert forces.magnus.y > 0
        # lift and Magnus are perpendicular to the flow
        assert forces.lift.mul_by_vector(Vector(60, 5, 0)) == pytest.approx(0.0, abs=1e-9)

    def test_sidespin_curves(self, model):
        # axis tilted right: ball travelling downrange curves to -z
        forces = model.compute_forces(Vector(60, 0, 0), SpinState(3000, Vector(0, 1, 0)),
                                      BallProperties(), Environment())
        assert forces.lift.z < 0
        assert forces.lift.y == pytest.approx(0.0, abs=1e-12)

    def test_axis_parallel_to_flow(self, model):
        forces = model.compute_forces(Vector(50, 0, 0), SpinState(3000, Vector(1, 0, 0)),
                                      BallProperties(), Environment())
        assert forces.lift == Vector(0, 0, 0)
        assert forces.magnus == Vector(0, 0, 0)
        assert forces.drag.magnitude() > 0

    def test_zero_relative_speed(self, model):
        wind = Vector(4, 0, 1)
        forces = model.compute_forces(wind, SpinState(2500), BallProperties(), Environment(wind=wind))
        assert forces.drag == Vector(0, 0, 0)
        assert forces.total() == forces.gravity

    def test_coefficients(self):
        ball, env = BallProperties(), Environment()
        speed, spin = 70.0, SpinState(2500)
        coeffs = ForceModel.coefficients(speed, spin, ball, env)
        nu = air_properties(env).kinematic_viscosity
        assert coeffs.reynolds == pytest.approx(speed * ball.diameter / nu)
        assert coeffs.reynolds > 150_000
        s = ball.radius * spin.angular_velocity / speed
        assert coeffs.spin_parameter == pytest.approx(s)
        assert coeffs.drag == pytest.approx(0.225 * (1 + s))
        assert coeffs.lift == pytest.approx(0.13 * 0.23 / 0.21 * min(s / 0.08, 1.25))
        humidity_factor = 1 - 0.035 * 0.5 - 0.035 * 0.25
        ratio = math.pi * ball.radius * 2500 / (60 * speed)
        assert coeffs.magnus == pytest.approx(0.12 * ratio * 1.1 * humidity_factor)

    def test_low_reynolds_drag(self):
        ball, env = BallProperties(), Environment()
        coeffs = ForceModel.coefficients(5.0, SpinState(0), ball, env)
        assert coeffs.reynolds < 40_000
        assert coeffs.drag == pytest.approx(0.232)


class TestTurbulence:

    def test_first_value_within_intensity(self):
        model = ForceModel(rng=random.Random(1))
        for _ in range(50):
            t = model.turbulence(Environment(), 0.001, Vector(0, 0, 0))
            assert all(abs(c) <= 0.05 for c in t)

    def test_intensity_grows_with_wind(self):
        model = ForceModel(rng=random.Random(1))
        env = Environment(wind=Vector(10, 0, 0))
        sigma = 0.1 * 10 * (1 + 0.001 * 100) + 0.05
        values = [model.turbulence(env, 0.001, Vector(0, 100, 0)) for _ in range(200)]
        assert all(abs(c) <= sigma for t in values for c in t)
        assert max(abs(c) for t in values for c in t) > 0.05

    def test_chain_drifts_at_most_five_percent(self):
        model = ForceModel(rng=random.Random(3))
        prev = Vector(0.4, -0.2, 0.1)
        nxt = model.turbulence(Environment(), 0.02, Vector(0, 10, 0), prev)
        for p, n in zip(prev, nxt):
            assert abs(n - p) <= 0.05 * abs(p) + 1e-15

    def test_seeded_sequences_repeat(self):
        args = (Vector(55, 10, 0), SpinState(2500), BallProperties(), Environment(wind=Vector(3, 0, 0)))
        a, b = ForceModel(rng=random.Random(7)), ForceModel(rng=random.Random(7))
        ta = a.compute_forces(*args, dt=0.001, position=Vector(0, 5, 0))
        tb = b.compute_forces(*args, dt=0.001, position=Vector(0, 5, 0))
        assert ta.turbulence is not None
        assert ta == tb

    def test_explicit_turbulence_does_not_consume_rng(self):
        rng = random.Random(11)
        model = ForceModel(rng=rng)
        state = rng.getstate()
        forces = model.compute_forces(Vector(50, 0, 0), SpinState(2500), BallProperties(), Environment(),
                                      turbulence=Vector(1, 0, 0))
        assert rng.getstate() == state
        assert forces.turbulence == Vector(1, 0, 0)

    def test_no_turbulence_without_dt_and_position(self, model):
        forces = model.compute_forces(Vector(50, 0, 0), SpinState(2500), BallProperties(), Environment(), dt=0.001)
        assert forces.turbulence is None
