"""
Evaluation of points, tangents and derivatives of B-spline and NURBS curves.
"""
from .errors import (NurbsError, ParamError, ConstructionError, InvalidKnotRelation,
                     DegenerateGeometry, DegenerateTangent, NonPositiveWeight,
                     DomainPolicy, DomainPolicyWarning)
from .config import EvalSettings, load_config
from .vec import VecType, VEC2F, VEC2D, VEC3F, VEC3D
from .basis import SplineBasis, find_span, basis_functions, basis_function_derivatives
from .evaluate import (curve_point, rational_curve_point, curve_derivatives,
                       rational_curve_derivatives, curve_tangent)
from .curve import ClampState, NurbsCurve, NurbsCurve2f, NurbsCurve2d, NurbsCurve3f, NurbsCurve3d

__version__ = '0.1.0'
