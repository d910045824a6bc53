"""
B-spline basis functions.

Functions find_span, basis_functions and basis_function_derivatives are the
evaluation core used by the curve evaluation. They compute only the degree + 1
basis functions nonzero on the knot span containing the parameter (local support),
using the triangular Cox - de Boor scheme.

SplineBasis wraps a fixed knot vector and degree and provides the canonical
(recursive) evaluation of a single basis function, knot vector construction and lookup.
"""
import numpy as np

from .errors import ParamError, InvalidKnotRelation


def _div(top, bottom):
    # 0/0 := 0 convention for repeated knots
    if bottom == 0.0:
        return 0.0
    return top / bottom


def check_degree(degree):
    """
    Return the degree as int.
    :raises ParamError: negative or non-integral degree
    """
    try:
        int_degree = int(degree)
    except (TypeError, ValueError):
        raise ParamError("Degree must be non-negative int, got {!r}.".format(degree))
    if int_degree != degree or int_degree < 0:
        raise ParamError("Degree must be non-negative int, got {!r}.".format(degree))
    return int_degree


def check_knots(degree, knots, n_poles=None):
    """
    Check the knot vector and return it as a float64 numpy array.
    :param degree: non-negative int
    :param knots: non-decreasing sequence of floats
    :param n_poles: expected number of control points or None
    :raises InvalidKnotRelation: decreasing knots, wrong number of knots, empty domain
    """
    degree = check_degree(degree)
    knots = np.array(knots, dtype=float)
    if knots.ndim != 1:
        raise ParamError("Knot vector must be 1D, got shape {}.".format(knots.shape))
    if n_poles is not None and len(knots) != degree + n_poles + 1:
        raise InvalidKnotRelation(
            "nKnots != degree + nCtrlPts + 1: {} != {} + {} + 1".format(len(knots), degree, n_poles))
    if len(knots) < degree + 2:
        raise InvalidKnotRelation(
            "At least {} knots needed for degree {}, got {}.".format(degree + 2, degree, len(knots)))
    if np.any(np.diff(knots) < 0):
        raise InvalidKnotRelation("Knot vector must be non-decreasing: {}".format(knots))
    n = len(knots) - degree - 2
    if not knots[degree] < knots[n + 1]:
        raise InvalidKnotRelation(
            "Empty parameter domain [{}, {}].".format(knots[degree], knots[n + 1]))
    return knots


def find_span(u, degree, knots):
    """
    Find the knot span index 'i' such that knots[i] <= u < knots[i+1] and knots[i] < knots[i+1].
    The result is limited to the valid range [degree, n], n = len(knots) - degree - 2 is the index
    of the last control point. Consequently:
    - u equal to the domain end gives the last nonempty span,
    - u out of the domain gives the first or the last span (polynomial extrapolation).

    :param u: parameter, float
    :param degree: degree of the B-spline
    :param knots: float64 numpy array of knots
    :return: span index
    """
    n = len(knots) - degree - 2
    span = int(np.searchsorted(knots, u, side='right')) - 1
    if span < degree:
        span = degree
        while span < n and knots[span] == knots[span + 1]:
            span += 1
    elif span > n:
        span = n
        while span > degree and knots[span] == knots[span + 1]:
            span -= 1
    return span


def basis_functions(u, degree, knots, span=None):
    """
    Values of the degree + 1 basis functions nonzero in 'u',
    i.e. N[span - degree], ..., N[span].
    :param u: parameter
    :param degree: degree of the B-spline
    :param knots: float64 numpy array of knots
    :param span: knot span of 'u', computed if not given
    :return: numpy array of (degree + 1) values
    """
    if span is None:
        span = find_span(u, degree, knots)
    N = np.empty(degree + 1)
    left = np.empty(degree + 1)
    right = np.empty(degree + 1)
    N[0] = 1.0
    for j in range(1, degree + 1):
        left[j] = u - knots[span + 1 - j]
        right[j] = knots[span + j] - u
        saved = 0.0
        for r in range(j):
            temp = _div(N[r], right[r + 1] + left[j - r])
            N[r] = saved + right[r + 1] * temp
            saved = left[j - r] * temp
        N[j] = saved
    return N


def basis_function_derivatives(u, degree, knots, order, span=None):
    """
    Values and derivatives of the nonzero basis functions.
    Derivatives of order higher than the degree are identically zero,
    the corresponding rows are zero.

    :param u: parameter
    :param degree: degree of the B-spline
    :param knots: float64 numpy array of knots
    :param order: highest derivative order, non-negative int
    :param span: knot span of 'u', computed if not given
    :return: array (order + 1, degree + 1), ders[k, j] is the k-th derivative of N[span - degree + j]
    """
    if order < 0:
        raise ParamError("Derivative order must be non-negative, got {}.".format(order))
    if span is None:
        span = find_span(u, degree, knots)
    p = degree
    ders = np.zeros((order + 1, p + 1))

    # ndu: upper triangle basis functions, lower triangle knot differences
    ndu = np.empty((p + 1, p + 1))
    left = np.empty(p + 1)
    right = np.empty(p + 1)
    ndu[0, 0] = 1.0
    for j in range(1, p + 1):
        left[j] = u - knots[span + 1 - j]
        right[j] = knots[span + j] - u
        saved = 0.0
        for r in range(j):
            ndu[j, r] = right[r + 1] + left[j - r]
            temp = _div(ndu[r, j - 1], ndu[j, r])
            ndu[r, j] = saved + right[r + 1] * temp
            saved = left[j - r] * temp
        ndu[j, j] = saved
    ders[0, :] = ndu[:, p]

    n_ders = min(order, p)
    a = np.empty((2, p + 1))
    for r in range(p + 1):
        s1, s2 = 0, 1
        a[0, 0] = 1.0
        for k in range(1, n_ders + 1):
            d = 0.0
            rk = r - k
            pk = p - k
            if r >= k:
                a[s2, 0] = _div(a[s1, 0], ndu[pk + 1, rk])
                d = a[s2, 0] * ndu[rk, pk]
            j1 = 1 if rk >= -1 else -rk
            j2 = k - 1 if r - 1 <= pk else p - r
            for j in range(j1, j2 + 1):
                a[s2, j] = _div(a[s1, j] - a[s1, j - 1], ndu[pk + 1, rk + j])
                d += a[s2, j] * ndu[rk + j, pk]
            if r <= pk:
                a[s2, k] = _div(-a[s1, k - 1], ndu[pk + 1, r])
                d += a[s2, k] * ndu[r, pk]
            ders[k, r] = d
            s1, s2 = s2, s1

    # multiply by p! / (p - k)!
    factor = p
    for k in range(1, n_ders + 1):
        ders[k, :] *= factor
        factor *= p - k
    return ders


class SplineBasis:
    """
    Represents a spline basis for a given knot vector and degree.
    Provides canonical evaluation for the bases functions and their derivatives, knot vector lookup etc.
    """

    @classmethod
    def make_equidistant(cls, degree, n_intervals, knot_range=(0.0, 1.0)):
        """
        Returns clamped spline basis for an eqidistant knot vector
        having 'n_intervals' subintervals.
        :param degree: degree of the spline basis
        :param n_intervals: number of the knot spans in the domain
        :param knot_range: support of the spline, min and max valid 't'
        :return: SplineBasis
        """
        n = n_intervals + 2 * degree + 1
        knots = np.full(n, float(knot_range[0]))
        diff = (knot_range[1] - knot_range[0]) / n_intervals
        for i in range(degree + 1, n - degree):
            knots[i] = (i - degree) * diff + knot_range[0]
        knots[-degree - 1:] = knot_range[1]
        return cls(degree, knots)

    @classmethod
    def make_uniform(cls, degree, n_poles, knot_range=(0.0, 1.0)):
        """
        Returns unclamped spline basis with uniform knots; the domain
        [knots[degree], knots[n_poles]] is 'knot_range'.
        """
        n_intervals = n_poles - degree
        if n_intervals < 1:
            raise ParamError("Need more than {} poles for degree {}.".format(degree, degree))
        h = (knot_range[1] - knot_range[0]) / n_intervals
        knots = knot_range[0] + h * (np.arange(n_poles + degree + 1) - degree)
        return cls(degree, knots)

    @classmethod
    def make_from_packed_knots(cls, degree, knots):
        """
        :param knots: list of tuples (knot, multiplicity)
        """
        full_knots = [ q for q, mult in knots for i in range(mult) ]
        return cls(degree, full_knots)

    def __init__(self, degree, knots):
        """
        Constructor of the basis.
        :param degree: Degree of the basis functions >= 0.
        :param knots: Numpy array of the knots including multiplicities.
        """
        self.degree = check_degree(degree)
        self.knots = check_knots(self.degree, knots)

        # Number of basis functions.
        self.size = len(self.knots) - self.degree - 1
        self.knots_idx_range = [self.degree, self.size]
        self.domain = self.knots[self.knots_idx_range]
        self.domain_size = self.domain[1] - self.domain[0]
        # Last nonempty span, closed from the right.
        self._last_span = find_span(self.domain[1], self.degree, self.knots)

    def find_span(self, t):
        return find_span(t, self.degree, self.knots)

    def find_knot_interval(self, t):
        """
        Find the nonempty knot interval containing the value 't'.
        i.e. knots[i] <= t < knots[i+1], where  knots[i] < knots[i+1]
        Returns I = i  - degree, which is the index of the first basis function
        nonzero in 't'.

        :param t:  float, within the domain
        :return: I
        """
        return self.find_span(t) - self.degree

    def _basis(self, deg, idx, t):
        """
        Recursive evaluation of basis function of given degree and index.

        :param deg: Degree of the basis function
        :param idx: Index of the basis function to evaluate.
        :param t: Point of evaluation.
        :return Value of the basis function.
        """

        if deg == 0:
            if t == self.domain[1]:
                return 1.0 if idx == self._last_span else 0.0
            t_0 = self.knots[idx]
            t_1 = self.knots[idx + 1]
            return 1.0 if t_0 <= t < t_1 else 0.0
        else:
            t_i = self.knots[idx]
            t_ik = self.knots[idx + deg]
            value = _div(t - t_i, t_ik - t_i) * self._basis(deg-1, idx, t)

            t_ik1 = self.knots[idx + deg + 1]
            t_i1 = self.knots[idx + 1]
            value += _div(t_ik1 - t, t_ik1 - t_i1) * self._basis(deg-1, idx+1, t)
            return value

    def eval(self, i_base, t):
        """
        Full recursive evaluation of a single basis function,
        slow, used as a reference.
        :param i_base: Index of base function to evaluate.
        :param t: point in which evaluate, within the domain
        :return: b_i(t)
        """
        assert 0 <= i_base < self.size
        return self._basis(self.degree, i_base, t)

    def eval_base_vector(self, i_base, t):
        """
        Values of basis functions i_base, ..., i_base + degree in 't'.
        :param i_base: result of find_knot_interval(t)
        """
        return basis_functions(t, self.degree, self.knots, span=i_base + self.degree)

    def eval_derivatives(self, i_base, t, order):
        """
        Derivatives up to 'order' of the basis functions i_base, ..., i_base + degree in 't'.
        :return: array (order + 1, degree + 1)
        """
        return basis_function_derivatives(t, self.degree, self.knots, order, span=i_base + self.degree)

    def eval_diff_base_vector(self, i_base, t):
        """
        First derivatives of basis functions i_base, ..., i_base + degree in 't'.
        """
        return self.eval_derivatives(i_base, t, 1)[1]

    def make_linear_poles(self):
        """
        Return poles of basis functions to get a f(x) = x.
        These are the Greville abscissae: averages of 'degree' consecutive knots.
        :return: list of floats
        """
        if self.degree == 0:
            raise ParamError("Linear function can not be represented by degree 0 basis.")
        return [ float(np.mean(self.knots[i + 1: i + self.degree + 1])) for i in range(self.size) ]
