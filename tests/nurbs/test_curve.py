import logging
import math

import pytest
import numpy as np

import bnurbs
from bnurbs import curve as cv
from bnurbs.basis import SplineBasis
from bnurbs.config import EvalSettings
from bnurbs.errors import (ParamError, ConstructionError, InvalidKnotRelation,
                           DegenerateTangent, DomainPolicy, DomainPolicyWarning)


bezier_knots = [0, 0, 0, 0, 1, 1, 1, 1]
line_poles = [[0, 0], [1, 0], [2, 0], [3, 0]]


def make_uniform_curve(degree=3, n_poles=7, weights=None, settings=None):
    rng = np.random.default_rng(7)
    basis = SplineBasis.make_uniform(degree, n_poles)
    poles = rng.uniform(-1, 1, size=(n_poles, 3))
    return cv.NurbsCurve3d(degree, basis.knots, poles, weights=weights, settings=settings)


class TestConstruction:

    def test_knot_relation(self):
        curve = cv.NurbsCurve(3, bezier_knots, line_poles)
        assert curve.num_control_points() == 4
        assert curve.degree == 3
        assert curve.dim == 2
        assert not curve.rational

        with pytest.raises(InvalidKnotRelation) as e:
            cv.NurbsCurve(3, bezier_knots, line_poles + [[4, 0]])
        assert "9" in str(e.value) or "8" in str(e.value)
        with pytest.raises(ConstructionError):
            cv.NurbsCurve(3, bezier_knots[:-1], line_poles)

    def test_bad_input(self):
        with pytest.raises(ParamError):
            cv.NurbsCurve(3, bezier_knots, [])
        with pytest.raises(ParamError):
            cv.NurbsCurve(3, bezier_knots, [[0, 0], [1, 0, 1], [2, 0], [3, 0]])
        with pytest.raises(ParamError):
            cv.NurbsCurve2d(3, bezier_knots, [[0, 0, 0], [1, 0, 0], [2, 0, 0], [3, 0, 0]])
        with pytest.raises(ParamError):
            cv.NurbsCurve(3, bezier_knots, line_poles, weights=[1, 1, 1])
        with pytest.raises(ParamError):
            cv.NurbsCurve(3, bezier_knots, line_poles, weights=[1, 0, 1, 1])

    def test_typed_curves(self):
        for cls, dim, dtype in [(cv.NurbsCurve2f, 2, np.float32), (cv.NurbsCurve2d, 2, np.float64)]:
            curve = cls(3, bezier_knots, line_poles)
            assert curve.dim == dim
            assert curve.point(0.5).dtype == dtype
        poles3 = [[x, y, 1.0] for x, y in line_poles]
        for cls, dtype in [(cv.NurbsCurve3f, np.float32), (cv.NurbsCurve3d, np.float64)]:
            curve = cls(3, bezier_knots, poles3)
            pt = curve.point(0.25)
            assert pt.dtype == dtype
            assert np.allclose(pt, [0.75, 0.0, 1.0], atol=1e-6)
        curve = cv.NurbsCurve(3, bezier_knots, np.array(line_poles, dtype=np.float32))
        assert curve.dtype == np.float32

    def test_make_raw(self):
        s2 = math.sqrt(2) / 2
        poles = [[1, 0, 1], [1, 1, s2], [0, 1, 1]]
        curve = cv.NurbsCurve.make_raw(poles, [(0, 3), (1, 3)], rational=True, degree=2)
        assert curve.rational
        assert curve.dim == 2
        for u in np.linspace(0, 1, 9):
            assert abs(np.linalg.norm(curve.point(u)) - 1.0) < 1e-14

        curve = cv.NurbsCurve.make_raw(line_poles, [(0, 4), (1, 4)], degree=3)
        assert np.allclose(curve.point(0.5), [1.5, 0.0])
        assert np.allclose(curve.knots, bezier_knots)
        with pytest.raises(InvalidKnotRelation):
            cv.NurbsCurve.make_raw(line_poles, [(0, 3), (1, 3)], degree=3)

    def test_integral_float_degree(self):
        curve = cv.NurbsCurve2d(3.0, bezier_knots, line_poles)
        assert curve.degree == 3
        assert isinstance(curve.degree, int)
        assert np.allclose(curve.point(0.5), [1.5, 0.0])
        assert np.allclose(curve.derivatives(0.5, 1)[1], [3.0, 0.0])
        curve.clamp_start()
        curve.unclamp_start()
        assert np.allclose(curve.knots, bezier_knots)
        with pytest.raises(ParamError):
            cv.NurbsCurve2d(2.5, bezier_knots, line_poles)
        with pytest.raises(ParamError):
            cv.NurbsCurve2d("3", bezier_knots, line_poles)

    def test_construction_log(self, caplog):
        caplog.set_level(logging.DEBUG, logger="bnurbs.curve")
        curve = cv.NurbsCurve2d(3, bezier_knots, line_poles)
        curve.set_rational(False)
        messages = [r.getMessage() for r in caplog.records if r.name == "bnurbs.curve"]
        assert messages[0] == "NurbsCurve: degree 3, 4 poles of {}, rational: False".format(cv.VEC2D)
        assert messages[-1] == "NurbsCurve: rational: False"


class TestCurve:

    def test_line(self):
        curve = cv.NurbsCurve2d(3, bezier_knots, line_poles)
        for u in np.linspace(0, 1, 21):
            assert np.allclose(curve.point(u), [3 * u, 0.0], atol=1e-14)
            assert np.allclose(curve.tangent(u), [1.0, 0.0])
            ders = curve.derivatives(u, 2)
            assert ders.shape == (3, 2)
            assert np.allclose(ders[1], [3.0, 0.0], atol=1e-13)
        points = curve.eval_array(np.linspace(0, 1, 5))
        assert points.shape == (5, 2)
        assert np.allclose(points[:, 0], [0, 0.75, 1.5, 2.25, 3.0])
        with pytest.raises(ParamError):
            curve.derivatives(0.5, -1)

    def test_control_points(self):
        curve = make_uniform_curve()
        u = curve.domain[0] + 0.1 * (curve.domain[1] - curve.domain[0])
        pt = curve.point(u)

        far = curve.num_control_points() - 1
        orig = curve.get_control_point(far)
        curve.set_control_point(far, orig + 5.0)
        assert np.allclose(curve.get_control_point(far), orig + 5.0)
        assert np.array_equal(curve.point(u), pt)

        curve.set_control_point(0, [10.0, 10.0, 10.0])
        assert not np.allclose(curve.point(u), pt)
        assert np.array_equal(curve.control_points()[0], [10.0, 10.0, 10.0])

        with pytest.raises(ParamError):
            curve.set_control_point(0, [1.0, 2.0])

    def test_degenerate_tangent(self):
        curve = cv.NurbsCurve2d(3, bezier_knots, [[0, 0], [0, 0], [1, 0], [2, 0]])
        with pytest.raises(DegenerateTangent):
            curve.tangent(0.0)
        assert np.allclose(curve.tangent(1.0), [1.0, 0.0])

    def test_rational_switch(self):
        curve = make_uniform_curve()
        with pytest.raises(ParamError):
            curve.set_rational(True)
        t_points = np.linspace(*curve.domain, 11)
        ref = curve.eval_array(t_points)
        ref_ders = [curve.derivatives(t, 3) for t in t_points]

        curve.set_weights(np.ones(curve.num_control_points()))
        curve.set_rational(True)
        assert curve.rational
        assert np.allclose(curve.eval_array(t_points), ref, atol=1e-14)
        for t, ders in zip(t_points, ref_ders):
            assert np.allclose(curve.derivatives(t, 3), ders, atol=1e-10)

        curve.set_weights(np.linspace(1, 3, curve.num_control_points()))
        assert not np.allclose(curve.eval_array(t_points), ref)
        curve.set_rational(False)
        assert np.allclose(curve.eval_array(t_points), ref, atol=1e-14)

    def test_unit_weights_construction(self):
        weights = np.ones(7)
        rational = make_uniform_curve(weights=weights)
        plain = make_uniform_curve()
        assert rational.rational
        for t in np.linspace(*plain.domain, 13):
            assert np.allclose(rational.point(t), plain.point(t), atol=1e-14)
            assert np.allclose(rational.tangent(t), plain.tangent(t), atol=1e-12)


class TestDomainPolicy:

    def test_extrapolate(self):
        curve = cv.NurbsCurve2d(3, bezier_knots, line_poles)
        with pytest.warns(DomainPolicyWarning):
            pt = curve.point(1.5)
        assert np.allclose(pt, [4.5, 0.0])

    def test_clamp(self):
        curve = cv.NurbsCurve2d(3, bezier_knots, line_poles, settings=EvalSettings(domain_policy='clamp'))
        with pytest.warns(DomainPolicyWarning):
            pt = curve.point(1.5)
        assert np.allclose(pt, [3.0, 0.0])
        with pytest.warns(DomainPolicyWarning):
            pt = curve.point(-2.0)
        assert np.allclose(pt, [0.0, 0.0])

    def test_strict(self):
        curve = cv.NurbsCurve2d(3, bezier_knots, line_poles, settings=EvalSettings(domain_policy='strict'))
        assert np.allclose(curve.point(1.0), [3.0, 0.0])
        with pytest.raises(DomainPolicy):
            curve.point(1.0 + 1e-9)
        with pytest.raises(DomainPolicy):
            curve.tangent(-0.1)


class TestClamp:

    def test_clamp_unclamp_inverse(self):
        curve = make_uniform_curve(weights=np.linspace(1, 2, 7))
        knots = curve.knots
        poles = curve.control_points()
        weights = curve.weights

        curve.clamp_start()
        assert curve.clamp_state == cv.ClampState.START
        assert len(curve.knots) == len(knots) + 3
        curve.clamp_start()
        assert len(curve.knots) == len(knots) + 3
        curve.unclamp_start()
        assert curve.clamp_state == cv.ClampState.UNCLAMPED
        assert np.array_equal(curve.knots, knots)
        assert np.array_equal(curve.control_points(), poles)
        assert np.array_equal(curve.weights, weights)
        curve.unclamp_start()
        assert np.array_equal(curve.knots, knots)

        curve.clamp_end()
        curve.clamp_start()
        assert curve.clamp_state == cv.ClampState.BOTH
        curve.unclamp_end()
        assert curve.clamp_state == cv.ClampState.START
        curve.unclamp_start()
        assert np.array_equal(curve.knots, knots)
        assert np.array_equal(curve.control_points(), poles)

    def test_clamp_geometry(self):
        curve = make_uniform_curve()
        domain = curve.domain.copy()
        t_points = np.linspace(*domain, 17)
        ref = curve.eval_array(t_points)

        curve.clamp_start()
        curve.clamp_end()
        assert len(curve.knots) == curve.degree + curve.num_control_points() + 1
        # unchanged on the previous domain
        assert np.allclose(curve.eval_array(t_points), ref, atol=1e-14)
        # extended domain with interpolated end points
        new_domain = curve.domain
        assert new_domain[0] == curve.knots[0]
        assert new_domain[1] == curve.knots[-1]
        assert np.allclose(curve.point(new_domain[0]), curve.get_control_point(0), atol=1e-14)
        assert np.allclose(curve.point(new_domain[1]), curve.get_control_point(-1), atol=1e-14)

    def test_closed_curve_can_not_clamp(self):
        curve = make_uniform_curve()
        curve.set_closed(True)
        with pytest.raises(ParamError):
            curve.clamp_start()
        with pytest.raises(ParamError):
            curve.clamp_end()


class TestClosed:

    def test_close_open(self):
        curve = make_uniform_curve(weights=np.linspace(1, 2, 7))
        knots = curve.knots
        poles = curve.control_points()
        curve.set_closed(True)
        assert curve.closed
        assert curve.num_control_points() == 10
        assert len(curve.knots) == 14
        a, b = curve.domain
        start = curve.derivatives(a, 2)
        end = curve.derivatives(b, 2)
        assert np.allclose(start, end, atol=1e-10)
        curve.set_closed(True)
        assert curve.num_control_points() == 10

        curve.set_closed(False)
        assert not curve.closed
        assert np.array_equal(curve.knots, knots)
        assert np.array_equal(curve.control_points(), poles)

    def test_closed_set_control_point(self):
        curve = make_uniform_curve()
        curve.set_closed(True)
        curve.set_control_point(1, [5.0, 5.0, 5.0])
        assert np.array_equal(curve.get_control_point(8), [5.0, 5.0, 5.0])
        curve.set_control_point(9, [1.0, 2.0, 3.0])
        assert np.array_equal(curve.get_control_point(2), [1.0, 2.0, 3.0])
        a, b = curve.domain
        assert np.allclose(curve.point(a), curve.point(b), atol=1e-12)

    def test_closed_linear(self):
        poles = [[0, 0], [1, 0], [1, 1], [0, 1]]
        curve = cv.NurbsCurve2d(1, [0, 1, 2, 3, 4, 5], poles)
        curve.set_closed(True)
        a, b = curve.domain
        assert (a, b) == (1.0, 5.0)
        assert np.allclose(curve.point(a), [0, 0])
        assert np.allclose(curve.point(b), [0, 0])
        assert np.allclose(curve.point(4.5), [0, 0.5])

    def test_close_errors(self):
        curve = make_uniform_curve()
        curve.clamp_start()
        with pytest.raises(ParamError):
            curve.set_closed(True)

        curve = cv.NurbsCurve2d(3, bezier_knots, line_poles)
        with pytest.raises(ParamError):
            curve.set_closed(True)

        # spacing not periodic at the seam
        curve = cv.NurbsCurve2d(2, [0, 1, 2, 3, 4, 5, 6, 7.5], [[0, 0], [1, 0], [2, 1], [1, 2], [0, 1]])
        with pytest.raises(ParamError):
            curve.set_closed(True)
        assert not curve.closed


def test_package_exports():
    assert bnurbs.NurbsCurve is cv.NurbsCurve
    assert issubclass(bnurbs.InvalidKnotRelation, bnurbs.ConstructionError)
    assert issubclass(bnurbs.DegenerateTangent, bnurbs.DegenerateGeometry)
    assert issubclass(bnurbs.DomainPolicyWarning, Warning)
