"""
Small vector algebra used by the curve evaluation.

Points and vectors are numpy arrays. A VecType fixes the dimension (2 or 3)
and the scalar precision (float32 or float64) of the control points and of the
evaluation results. Knot and parameter arithmetic is always done in float64.
"""
import attrs
import numpy as np

from .errors import ParamError, DegenerateTangent


scalar_types = (int, float, np.integer, np.floating)


def check_matrix(mat, shape, values, idx=()):
    '''
    Check shape and type of scalar, vector or matrix.
    :param mat: Scalar, vector, or vector of vectors (i.e. matrix). Vector may be list or other iterable.
    :param shape: List of dimensions: [] for scalar, [ n ] for vector, [n_rows, n_cols] for matrix.
    If a value in this list is None, the dimension can be arbitrary. The shape list is set fo actual dimensions
    of the matrix.
    :param values: Type or tuple of  allowed types of elements of the matrix. E.g. ( int, float )
    :param idx: Internal. Used to pass actual index in the matrix for possible error messages.
    :return: the shape list with resolved dimensions
    '''
    try:
        if len(shape) == 0:
            if not isinstance(mat, values):
                raise ParamError("Element at index {} of type {}, expected instance of {}.".format(idx, type(mat), values))
        else:
            if shape[0] is None:
                shape[0] = len(mat)
            l = None
            if not hasattr(mat, '__len__'):
                l = 0
            elif len(mat) != shape[0]:
                l = len(mat)
            if l is not None:
                raise ParamError("Wrong len {} of element {}, should be  {}.".format(l, idx, shape[0]))
            for i, item in enumerate(mat):
                sub_shape = shape[1:]
                check_matrix(item, sub_shape, values, idx=(i, *idx))
                shape[1:] = sub_shape
        return shape
    except ParamError:
        raise
    except Exception as e:
        raise ParamError(e)


def _check_dim(instance, attribute, value):
    if value not in (2, 3):
        raise ParamError("Vector dimension must be 2 or 3, got {}.".format(value))


def _check_dtype(instance, attribute, value):
    if value not in (np.dtype(np.float32), np.dtype(np.float64)):
        raise ParamError("Scalar type must be float32 or float64, got {}.".format(value))


@attrs.define(frozen=True)
class VecType:
    """
    Fixed size real vector type: dimension and scalar precision.
    """
    dim: int = attrs.field(validator=_check_dim)
    dtype: np.dtype = attrs.field(converter=np.dtype, validator=_check_dtype)

    def make_points(self, points):
        """
        Convert a sequence of vectors into (N, dim) array of the vector type.
        """
        if isinstance(points, np.ndarray):
            if points.ndim != 2 or points.shape[1] != self.dim:
                raise ParamError("Wrong shape {} of points, expected (N, {}).".format(points.shape, self.dim))
        else:
            check_matrix(points, [None, self.dim], scalar_types)
        return np.array(points, dtype=self.dtype).reshape(-1, self.dim)

    def make_vector(self, vec):
        vec = np.asarray(vec, dtype=self.dtype)
        if vec.shape != (self.dim,):
            raise ParamError("Wrong shape {} of vector, expected ({},).".format(vec.shape, self.dim))
        return vec


VEC2F = VecType(2, np.float32)
VEC2D = VecType(2, np.float64)
VEC3F = VecType(3, np.float32)
VEC3D = VecType(3, np.float64)


def norm(vec):
    return float(np.linalg.norm(vec))


def normalize(vec, tol=0.0):
    """
    Unit vector in the direction of 'vec'.
    :raises DegenerateTangent: for |vec| <= tol.
    """
    length = norm(vec)
    if not length > tol:
        raise DegenerateTangent("Can not normalize vector {} of length {} <= {}.".format(vec, length, tol))
    return vec / length
