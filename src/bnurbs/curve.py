"""
NURBS curve: storage of the degree, knots, control points (poles) and weights
with clamp and closed curve bookkeeping. All evaluation is delegated to the
functions of the 'evaluate' module.

Typed variants NurbsCurve2f, NurbsCurve2d, NurbsCurve3f, NurbsCurve3d fix the
dimension and precision of the poles; the base class NurbsCurve takes them
from the given poles (float64 unless a float32 array is given).
"""
import enum
import logging

import numpy as np

from . import evaluate as ev
from .basis import SplineBasis, check_degree, check_knots
from .config import EvalSettings
from .errors import ParamError, DomainPolicy, warn_domain
from .vec import VecType, VEC2F, VEC2D, VEC3F, VEC3D, check_matrix, scalar_types


logger = logging.getLogger(__name__)


class ClampState(enum.Flag):
    """
    Which curve ends were clamped by 'clamp_start' / 'clamp_end'.
    """
    UNCLAMPED = 0
    START = 1
    END = 2
    BOTH = START | END


class NurbsCurve:
    vec_type = None
    # VecType of the poles, fixed by the typed subclasses

    @classmethod
    def make_raw(cls, poles, knots, rational=False, degree=2, settings=None):
        """
        Construct a B-spline curve.
        :param poles: List of poles (control points) ( X, Y, Z ) or weighted points (X,Y,Z, w). X,Y,Z,w are floats.
                   Weighted points are used only for rational B-splines (i.e. nurbs)
        :param knots: List of tuples (knot, multiplicity), where knot is float, t-parameter on the curve of the knot
                   and multiplicity is positive int. Total number of knots, i.e. sum of their multiplicities, must be
                   degree + N + 1, where N is number of poles.
        :param rational: True for rational B-spline, i.e. NURB. Use weighted poles.
        :param degree: Non-negative int
        """
        check_matrix(poles, [None, None], scalar_types)
        poles = np.array(poles, dtype=float)
        full_knots = SplineBasis.make_from_packed_knots(degree, knots).knots
        if rational:
            return cls(degree, full_knots, poles[:, :-1], poles[:, -1], settings=settings)
        return cls(degree, full_knots, poles, settings=settings)

    def __init__(self, degree, knots, control_points, weights=None, settings=None):
        """
        :param degree: non-negative int
        :param knots: non-decreasing sequence, len(knots) == degree + len(control_points) + 1
        :param control_points: sequence of 2d or 3d points
        :param weights: positive weights, one per control point; the curve is rational if given
        :param settings: EvalSettings, default settings if None
        :raises InvalidKnotRelation: knots not matching the degree and the number of control points
        :raises ParamError: other malformed input
        """
        vec_type = self.vec_type
        if vec_type is None:
            vec_type = self._infer_vec_type(control_points)
        self._vec_type = vec_type
        poles = vec_type.make_points(control_points)
        if len(poles) == 0:
            raise ParamError("No control points.")
        self._degree = check_degree(degree)
        self._knots = check_knots(self._degree, knots, len(poles))
        self._poles = poles
        self._weights = None
        self._rational = False
        if weights is not None:
            self._weights = self._check_weights(weights, len(poles))
            self._rational = True
        self._clamp = ClampState.UNCLAMPED
        self._closed = False
        self.settings = EvalSettings() if settings is None else settings
        logger.debug("NurbsCurve: degree %s, %s poles of %s, rational: %s",
                     self._degree, len(poles), vec_type, self._rational)

    @staticmethod
    def _infer_vec_type(control_points):
        if isinstance(control_points, np.ndarray) and control_points.ndim == 2:
            dim = control_points.shape[1]
            dtype = np.float32 if control_points.dtype == np.float32 else np.float64
        else:
            try:
                dim = len(control_points[0])
            except (TypeError, IndexError) as e:
                raise ParamError("Can not determine dimension of control points: {}".format(e))
            dtype = np.float64
        return VecType(dim, dtype)

    def _check_weights(self, weights, n_poles):
        weights = np.array(weights, dtype=self._vec_type.dtype)
        if weights.shape != (n_poles,):
            raise ParamError("Wrong shape {} of weights, expected ({},).".format(weights.shape, n_poles))
        if not np.all(weights > 0):
            raise ParamError("Weights must be positive: {}".format(weights))
        return weights

    @property
    def degree(self):
        return self._degree

    @property
    def knots(self):
        return self._knots.copy()

    @property
    def domain(self):
        return self._knots[[self._degree, len(self._poles)]]

    @property
    def dim(self):
        return self._vec_type.dim

    @property
    def dtype(self):
        return self._vec_type.dtype

    @property
    def rational(self):
        return self._rational

    @property
    def weights(self):
        return None if self._weights is None else self._weights.copy()

    @property
    def clamp_state(self):
        return self._clamp

    @property
    def closed(self):
        return self._closed

    def _param(self, u):
        """
        Apply the domain policy to the parameter.
        """
        lo, hi = self.domain
        if lo <= u <= hi:
            return u
        policy = self.settings.domain_policy
        if policy == 'strict':
            raise DomainPolicy("Parameter {} out of the curve domain [{}, {}].".format(u, lo, hi))
        if self.settings.warn_out_of_domain:
            warn_domain(u, (lo, hi))
        if policy == 'clamp':
            return min(max(u, lo), hi)
        return u

    # Evaluation

    def point(self, u):
        u = self._param(u)
        if self._rational:
            return ev.rational_curve_point(u, self._degree, self._knots, self._poles, self._weights)
        return ev.curve_point(u, self._degree, self._knots, self._poles)

    def derivatives(self, u, order):
        """
        Point and derivatives up to given order.
        :return: array (order + 1, dim), [C(u), C'(u), ...]
        """
        if order < 0:
            raise ParamError("Derivative order must be non-negative, got {}.".format(order))
        u = self._param(u)
        if self._rational:
            return ev.rational_curve_derivatives(u, self._degree, self._knots, self._poles, self._weights, order)
        return ev.curve_derivatives(u, self._degree, self._knots, self._poles, order)

    def tangent(self, u):
        """
        Unit tangent vector.
        :raises DegenerateTangent: zero derivative in 'u'
        """
        u = self._param(u)
        weights = self._weights if self._rational else None
        return ev.curve_tangent(u, self._degree, self._knots, self._poles, weights, tol=self.settings.tangent_tol)

    def eval_array(self, t_points):
        """
        Evaluate curve points for a 1D array of parameters.
        :return: array (len(t_points), dim)
        """
        t_points = np.atleast_1d(np.asarray(t_points, dtype=float))
        result = np.empty((len(t_points), self.dim), dtype=self.dtype)
        for i, t in enumerate(t_points):
            result[i] = self.point(t)
        return result

    # Control points and weights

    def num_control_points(self):
        return len(self._poles)

    def control_points(self):
        return self._poles.copy()

    def get_control_point(self, i):
        return self._poles[i].copy()

    def set_control_point(self, i, pt):
        """
        Change a control point in place. For a closed curve the
        wrapped copy of the point is changed as well.
        """
        self._poles[i] = self._vec_type.make_vector(pt)
        if self._closed:
            i_wrap = self._wrapped_index(i)
            if i_wrap is not None:
                self._poles[i_wrap] = self._poles[i]

    def _wrapped_index(self, i):
        n = len(self._poles)
        i = i % n
        n_unique = n - self._degree
        if i < self._degree:
            return i + n_unique
        if i >= n_unique:
            return i - n_unique
        return None

    def set_weights(self, weights):
        """
        Set weights of the control points, the rational flag is not changed.
        """
        weights = self._check_weights(weights, len(self._poles))
        if self._closed:
            p = self._degree
            if p > 0 and not np.array_equal(weights[:p], weights[-p:]):
                raise ParamError("Weights of a closed curve must repeat the first {} weights at the end.".format(p))
        self._weights = weights

    def set_rational(self, is_rational):
        """
        Switch between rational and non-rational evaluation.
        Weights must be set before switching to the rational evaluation.
        """
        if is_rational and self._weights is None:
            raise ParamError("Can not make the curve rational, no weights given.")
        self._rational = bool(is_rational)
        logger.debug("NurbsCurve: rational: %s", self._rational)

    # Clamping

    def _check_not_closed(self):
        if self._closed:
            raise ParamError("Can not change clamping of a closed curve.")

    def clamp_start(self):
        """
        Prepend 'degree' copies of the first knot together with copies of the first
        control point (and weight). The curve on the previous domain is unchanged,
        the domain is extended to start at the first knot, where the curve passes
        through the first control point.
        """
        if ClampState.START in self._clamp:
            return
        self._check_not_closed()
        p = self._degree
        self._knots = np.concatenate((np.full(p, self._knots[0]), self._knots))
        self._poles = np.concatenate((np.repeat(self._poles[:1], p, axis=0), self._poles))
        if self._weights is not None:
            self._weights = np.concatenate((np.repeat(self._weights[:1], p), self._weights))
        self._clamp |= ClampState.START
        logger.debug("NurbsCurve: clamp start, domain %s", self.domain)

    def unclamp_start(self):
        """
        Inverse of 'clamp_start'.
        """
        if ClampState.START not in self._clamp:
            return
        self._check_not_closed()
        p = self._degree
        self._knots = self._knots[p:]
        self._poles = self._poles[p:]
        if self._weights is not None:
            self._weights = self._weights[p:]
        self._clamp &= ~ClampState.START
        logger.debug("NurbsCurve: unclamp start, domain %s", self.domain)

    def clamp_end(self):
        """
        Append 'degree' copies of the last knot and of the last control point (and weight).
        """
        if ClampState.END in self._clamp:
            return
        self._check_not_closed()
        p = self._degree
        self._knots = np.concatenate((self._knots, np.full(p, self._knots[-1])))
        self._poles = np.concatenate((self._poles, np.repeat(self._poles[-1:], p, axis=0)))
        if self._weights is not None:
            self._weights = np.concatenate((self._weights, np.repeat(self._weights[-1:], p)))
        self._clamp |= ClampState.END
        logger.debug("NurbsCurve: clamp end, domain %s", self.domain)

    def unclamp_end(self):
        """
        Inverse of 'clamp_end'.
        """
        if ClampState.END not in self._clamp:
            return
        self._check_not_closed()
        p = self._degree
        n_knots = len(self._knots) - p
        n_poles = len(self._poles) - p
        self._knots = self._knots[:n_knots]
        self._poles = self._poles[:n_poles]
        if self._weights is not None:
            self._weights = self._weights[:n_poles]
        self._clamp &= ~ClampState.END
        logger.debug("NurbsCurve: unclamp end, domain %s", self.domain)

    # Closed curve

    def set_closed(self, flag):
        """
        Make the curve closed (periodic) or open it again.

        Closing appends 'degree' knots continuing the knot spacing of the domain start
        and wraps the first 'degree' control points (and weights) to the end.
        The knots knots[1], ..., knots[2 * degree] must be simple and the knot spacing
        must be already periodic at the seam, i.e.
        knots[n + i + 1] - knots[n + i] == knots[i + 1] - knots[i] for i = 1, ..., degree - 1,
        where n is the number of control points. This holds e.g. for the uniform knots.
        The closed curve is C^(degree - 1) continuous at the seam.
        Opening removes the appended knots and control points.
        """
        if flag and not self._closed:
            self._close()
        elif not flag and self._closed:
            self._open()

    def _close(self):
        if self._clamp != ClampState.UNCLAMPED:
            raise ParamError("Can not close a clamped curve, clamp state: {}".format(self._clamp))
        p = self._degree
        n = len(self._poles)
        if n < p:
            raise ParamError("Can not close curve with {} control points of degree {}.".format(n, p))
        delta = np.diff(self._knots)
        if np.any(delta[1: 2 * p] <= 0):
            raise ParamError("Knots knots[1:{}] at the seam must be simple: {}".format(2 * p + 1, self._knots[1: 2 * p + 1]))
        seam = np.abs(delta[n + 1: n + p] - delta[1: p])
        if np.any(seam > self.settings.periodic_tol):
            raise ParamError("Knot spacing is not periodic at the seam: {} != {}".format(
                delta[n + 1: n + p], delta[1: p]))
        self._knots = np.concatenate((self._knots, self._knots[-1] + np.cumsum(delta[p: 2 * p])))
        self._poles = np.concatenate((self._poles, self._poles[:p]))
        if self._weights is not None:
            self._weights = np.concatenate((self._weights, self._weights[:p]))
        self._closed = True
        logger.debug("NurbsCurve: closed, domain %s", self.domain)

    def _open(self):
        p = self._degree
        n_knots = len(self._knots) - p
        n_poles = len(self._poles) - p
        self._knots = self._knots[:n_knots]
        self._poles = self._poles[:n_poles]
        if self._weights is not None:
            self._weights = self._weights[:n_poles]
        self._closed = False
        logger.debug("NurbsCurve: opened, domain %s", self.domain)


class NurbsCurve2f(NurbsCurve):
    vec_type = VEC2F


class NurbsCurve2d(NurbsCurve):
    vec_type = VEC2D


class NurbsCurve3f(NurbsCurve):
    vec_type = VEC3F


class NurbsCurve3d(NurbsCurve):
    vec_type = VEC3D
