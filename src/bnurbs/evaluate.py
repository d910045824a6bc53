"""
Evaluation of B-spline and NURBS curves.

All functions take the curve data explicitly:
:param u: parameter, float
:param degree: degree of the curve
:param knots: float64 numpy array of knots, len(knots) == degree + len(poles) + 1
:param poles: numpy array (N, dim) of control points, its dtype determines the dtype of the results
:param weights: numpy array (N,) of positive weights (rational curves only)

Only the degree + 1 control points of the knot span containing 'u' are used.
Parameters out of the domain [knots[degree], knots[N]] are extrapolated by the first or last span polynomial.
Knot, basis and weight arithmetic is done in float64.
"""
import numpy as np
from scipy.special import comb

from .basis import find_span, basis_functions, basis_function_derivatives
from .errors import NonPositiveWeight
from .vec import normalize


def _homogeneous(poles, weights):
    """
    Lift poles to the homogeneous space: (x*w, y*w, [z*w], w).
    """
    weights = np.asarray(weights, dtype=float)
    return np.column_stack((poles * weights[:, None], weights))


def _check_weight(w, u):
    if not w > 0.0:
        raise NonPositiveWeight("Weight function {} <= 0 at parameter {}.".format(w, u))


def _derivatives(u, degree, knots, poles, n_ders):
    # float64 result (n_ders + 1, dim)
    span = find_span(u, degree, knots)
    du = min(n_ders, degree)
    nders = basis_function_derivatives(u, degree, knots, du, span=span)
    local = np.asarray(poles[span - degree: span + 1], dtype=float)
    ders = np.zeros((n_ders + 1, local.shape[1]))
    ders[:du + 1] = nders @ local
    return ders


def _rational_derivatives(u, degree, knots, poles, weights, n_ders):
    span = find_span(u, degree, knots)
    du = min(n_ders, degree)
    nders = basis_function_derivatives(u, degree, knots, du, span=span)
    loc = slice(span - degree, span + 1)
    pw = _homogeneous(np.asarray(poles[loc], dtype=float), weights[loc])
    homog = np.zeros((n_ders + 1, pw.shape[1]))
    homog[:du + 1] = nders @ pw
    a_ders, w_ders = homog[:, :-1], homog[:, -1]
    _check_weight(w_ders[0], u)

    # generalized quotient rule: A^(k) = sum_i C(k,i) w^(i) C^(k-i)
    ders = np.empty_like(a_ders)
    for k in range(n_ders + 1):
        v = a_ders[k].copy()
        for i in range(1, k + 1):
            v -= comb(k, i, exact=True) * w_ders[i] * ders[k - i]
        ders[k] = v / w_ders[0]
    return ders


def curve_point(u, degree, knots, poles):
    """
    Point of the B-spline curve, de Boor weighted sum over the local poles.
    :return: numpy array (dim,)
    """
    span = find_span(u, degree, knots)
    N = basis_functions(u, degree, knots, span=span)
    local = np.asarray(poles[span - degree: span + 1], dtype=float)
    return (N @ local).astype(poles.dtype)


def rational_curve_point(u, degree, knots, poles, weights):
    """
    Point of the NURBS curve. The weighted sum is evaluated in homogeneous
    coordinates and projected back by the division by the weight.
    :raises NonPositiveWeight: if the weight function is not positive in 'u'
    """
    span = find_span(u, degree, knots)
    N = basis_functions(u, degree, knots, span=span)
    loc = slice(span - degree, span + 1)
    cw = N @ _homogeneous(np.asarray(poles[loc], dtype=float), weights[loc])
    _check_weight(cw[-1], u)
    return (cw[:-1] / cw[-1]).astype(poles.dtype)


def curve_derivatives(u, degree, knots, poles, n_ders):
    """
    Point and derivatives of the B-spline curve.
    :param n_ders: highest derivative order
    :return: numpy array (n_ders + 1, dim): [C, C', C'', ...], rows of order > degree are zero
    """
    return _derivatives(u, degree, knots, poles, n_ders).astype(poles.dtype)


def rational_curve_derivatives(u, degree, knots, poles, weights, n_ders):
    """
    Point and derivatives of the NURBS curve C = A / w, where A is the
    homogeneous point curve and w the weight curve. Derivatives follow from
    A^(k) = sum_{i=0}^{k} binom(k, i) w^(i) C^(k-i), e.g. C' = (A' - w' C) / w.
    :return: numpy array (n_ders + 1, dim)
    """
    return _rational_derivatives(u, degree, knots, poles, weights, n_ders).astype(poles.dtype)


def curve_tangent(u, degree, knots, poles, weights=None, tol=0.0):
    """
    Unit tangent vector, i.e. normalized first derivative.
    :param weights: None for a non-rational curve
    :param tol: derivatives with norm <= tol are considered zero
    :raises DegenerateTangent: zero first derivative, e.g. for duplicate consecutive poles
    """
    if weights is None:
        ders = _derivatives(u, degree, knots, poles, 1)
    else:
        ders = _rational_derivatives(u, degree, knots, poles, weights, 1)
    return normalize(ders[1], tol).astype(poles.dtype)
