"""
Exceptions of the NURBS evaluation kernel.
"""
import warnings


def make_warning(cls):
    """
    Takes 'class_name' of an object and creates new type 'class_nameWarning'
    as an descendant of Warning class.
    Used for retyping error classes to warnings.
    """
    return type(cls.__name__ + "Warning", (Warning,), {})


class NurbsError(Exception):
    pass


class ParamError(NurbsError):
    """
    Malformed input data: wrong shapes, types, negative degree, bad weights.
    """
    pass


class ConstructionError(ParamError):
    pass


class InvalidKnotRelation(ConstructionError):
    """
    Knot vector does not match the degree and the number of control points,
    i.e. len(knots) != degree + n_poles + 1, or the knots are decreasing.
    """
    pass


class DegenerateGeometry(NurbsError):
    pass


class DegenerateTangent(DegenerateGeometry):
    pass


class NonPositiveWeight(DegenerateGeometry):
    pass


class DomainPolicy(NurbsError):
    """
    Parameter out of the curve domain, raised only for the 'strict' policy.
    """
    pass


DomainPolicyWarning = make_warning(DomainPolicy)


def warn_domain(u, domain):
    warnings.warn("Parameter {} out of the curve domain {}.".format(u, tuple(domain)),
                  DomainPolicyWarning, stacklevel=4)
