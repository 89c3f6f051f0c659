# geometry.py
#
# Kernels over the (4, 3) float64 space buffer whose rows are xv, yv, zv, origin.
# Every axis and the origin are expressed in the parent's coordinates.

import math
import warnings

import numpy as np
from numpy import cross as np_cross
from numpy import dot as np_dot
from numpy import float64 as np_float64
from numpy import ndarray
from numba import njit
from numba.core.errors import NumbaPerformanceWarning

from threespace.errors import DegenerateAxisError

warnings.filterwarnings("ignore", category=NumbaPerformanceWarning)

TWO_PI = 2.0 * math.pi

_X_UNIT = np.array([1.0, 0.0, 0.0], dtype=np_float64)
_Y_UNIT = np.array([0.0, 1.0, 0.0], dtype=np_float64)


@njit(cache=True)
def project_vector(m: ndarray, v: ndarray) -> ndarray:
    """Parent-space direction to local coordinates: (v.xv, v.yv, v.zv)."""
    out = np.empty(3, dtype=np_float64)
    for i in range(3):
        out[i] = v[0] * m[i, 0] + v[1] * m[i, 1] + v[2] * m[i, 2]
    return out


@njit(cache=True)
def project_point(m: ndarray, p: ndarray) -> ndarray:
    """Parent-space point to local coordinates."""
    d0 = p[0] - m[3, 0]
    d1 = p[1] - m[3, 1]
    d2 = p[2] - m[3, 2]
    out = np.empty(3, dtype=np_float64)
    for i in range(3):
        out[i] = d0 * m[i, 0] + d1 * m[i, 1] + d2 * m[i, 2]
    return out


@njit(cache=True)
def unproject_vector(m: ndarray, v: ndarray) -> ndarray:
    """Local direction to parent space: v.x*xv + v.y*yv + v.z*zv."""
    out = np.empty(3, dtype=np_float64)
    for k in range(3):
        out[k] = v[0] * m[0, k] + v[1] * m[1, k] + v[2] * m[2, k]
    return out


@njit(cache=True)
def unproject_point(m: ndarray, p: ndarray) -> ndarray:
    """Local point to parent space."""
    out = np.empty(3, dtype=np_float64)
    for k in range(3):
        out[k] = p[0] * m[0, k] + p[1] * m[1, k] + p[2] * m[2, k] + m[3, k]
    return out


def project_points(m: ndarray, points: ndarray, with_origin: bool = True) -> ndarray:
    """Batch version of project_point / project_vector for an (N, 3) array."""
    if with_origin:
        points = points - m[3]
    return points @ m[:3].T


def unproject_points(m: ndarray, points: ndarray, with_origin: bool = True) -> ndarray:
    """Batch version of unproject_point / unproject_vector for an (N, 3) array."""
    out = points @ m[:3]
    if with_origin:
        out += m[3]
    return out


@njit(cache=True)
def project_space(parent: ndarray, m: ndarray) -> None:
    """
    Re-express every row of ``m`` in the local coordinates of ``parent``, in place.

    ``m`` must currently be described in the same coordinates as ``parent``
    (i.e. they are siblings).
    """
    for k in range(3):
        m[3, k] -= parent[3, k]
    for i in range(4):
        a = m[i, 0]
        b = m[i, 1]
        c = m[i, 2]
        for k in range(3):
            m[i, k] = a * parent[k, 0] + b * parent[k, 1] + c * parent[k, 2]


@njit(cache=True)
def unproject_space(parent: ndarray, m: ndarray) -> None:
    """
    Re-express every row of ``m`` out of ``parent`` into the parent's parent, in place.
    """
    for i in range(4):
        a = m[i, 0]
        b = m[i, 1]
        c = m[i, 2]
        for k in range(3):
            m[i, k] = a * parent[0, k] + b * parent[1, k] + c * parent[2, k]
    for k in range(3):
        m[3, k] += parent[3, k]


@njit(cache=True)
def is_normal_basis(m: ndarray, tol: float) -> bool:
    """
    True if every axis has unit length and the consecutive pairs (zv, yv) and
    (yv, xv) are orthogonal, each within ``tol``.
    """
    for i in range(3):
        if abs(m[i, 0] * m[i, 0] + m[i, 1] * m[i, 1] + m[i, 2] * m[i, 2] - 1.0) > tol:
            return False
    for i in range(2, 0, -1):
        d = m[i, 0] * m[i - 1, 0] + m[i, 1] * m[i - 1, 1] + m[i, 2] * m[i - 1, 2]
        if abs(d) > tol:
            return False
    return True


@njit(cache=True)
def _unit_row(m: ndarray, i: int) -> bool:
    length = math.sqrt(m[i, 0] * m[i, 0] + m[i, 1] * m[i, 1] + m[i, 2] * m[i, 2])
    if length == 0.0:
        return False
    for k in range(3):
        m[i, k] /= length
    return True


@njit(cache=True)
def normalize_basis(m: ndarray) -> bool:
    """
    Make the basis orthonormal in place.

    zv becomes unit length, xv = yv x zv (using the old yv), then yv = zv x xv.
    Returns False if some axis collapsed to zero length along the way.
    """
    ok = _unit_row(m, 2)
    x0 = m[1, 1] * m[2, 2] - m[1, 2] * m[2, 1]
    x1 = m[1, 2] * m[2, 0] - m[1, 0] * m[2, 2]
    x2 = m[1, 0] * m[2, 1] - m[1, 1] * m[2, 0]
    m[0, 0] = x0
    m[0, 1] = x1
    m[0, 2] = x2
    ok = _unit_row(m, 0) and ok
    y0 = m[2, 1] * m[0, 2] - m[2, 2] * m[0, 1]
    y1 = m[2, 2] * m[0, 0] - m[2, 0] * m[0, 2]
    y2 = m[2, 0] * m[0, 1] - m[2, 1] * m[0, 0]
    m[1, 0] = y0
    m[1, 1] = y1
    m[1, 2] = y2
    ok = _unit_row(m, 1) and ok
    return ok


@njit(cache=True)
def rotate_parent_axis(m: ndarray, ofs1: int, ofs2: int, s: float, c: float) -> None:
    """Rotate each axis of ``m`` within the (ofs1, ofs2) plane of the parent."""
    for i in range(3):
        a = m[i, ofs1]
        b = m[i, ofs2]
        m[i, ofs1] = c * a - s * b
        m[i, ofs2] = s * a + c * b


@njit(cache=True)
def rotate_own_axis(m: ndarray, ofs1: int, ofs2: int, s: float, c: float) -> None:
    """
    Rotate axes ``ofs1`` and ``ofs2`` of an orthonormal basis around the third one.

    The rotated axes are the local vectors (c, s) and (-s, c) in the (ofs1, ofs2)
    plane unprojected back to the parent.
    """
    for k in range(3):
        a = m[ofs1, k]
        b = m[ofs2, k]
        m[ofs1, k] = c * a + s * b
        m[ofs2, k] = c * b - s * a


@njit(cache=True)
def rotate_in_frame(m: ndarray, r: ndarray, s: float, c: float) -> None:
    """
    Rotate the basis of ``m`` around ``r``'s z axis.

    Each axis is projected into the orthonormal frame ``r`` (rows xv, yv, zv),
    rotated in its xy plane, and unprojected back.
    """
    for i in range(3):
        p0 = m[i, 0] * r[0, 0] + m[i, 1] * r[0, 1] + m[i, 2] * r[0, 2]
        p1 = m[i, 0] * r[1, 0] + m[i, 1] * r[1, 1] + m[i, 2] * r[1, 2]
        p2 = m[i, 0] * r[2, 0] + m[i, 1] * r[2, 1] + m[i, 2] * r[2, 2]
        q0 = c * p0 - s * p1
        q1 = s * p0 + c * p1
        for k in range(3):
            m[i, k] = q0 * r[0, k] + q1 * r[1, k] + p2 * r[2, k]


def rotation_frame(axis: ndarray, degenerate_tolerance: float) -> ndarray:
    """
    Build an orthonormal 3x3 frame (rows xv, yv, zv) whose zv is ``axis`` normalized.

    Raises:
        DegenerateAxisError: if ``axis`` has zero magnitude, or neither seed
            vector yields a usable perpendicular.
    """
    mag2 = float(np_dot(axis, axis))
    if mag2 == 0.0:
        raise DegenerateAxisError("Can't rotate around vector with 0 magnitude")
    zv = axis / math.sqrt(mag2)
    for seed in (_X_UNIT, _Y_UNIT):
        xv = np_cross(seed, zv)
        xlen2 = float(np_dot(xv, xv))
        if xlen2 >= degenerate_tolerance:
            break
    else:
        raise DegenerateAxisError(
            f"No perpendicular seed vector found for axis {axis.tolist()}")
    xv /= math.sqrt(xlen2)
    return np.array((xv, np_cross(zv, xv), zv), dtype=np_float64)


@njit(cache=True)
def to_unprojection_matrix(m: ndarray) -> ndarray:
    """4x4 matrix mapping local coordinates to the parent (columns xv, yv, zv, origin)."""
    out = np.zeros((4, 4), dtype=np_float64)
    for i in range(4):
        for k in range(3):
            out[k, i] = m[i, k]
    out[3, 3] = 1.0
    return out


@njit(cache=True)
def to_projection_matrix(m: ndarray) -> ndarray:
    """4x4 matrix mapping parent coordinates to local ones, using the basis transpose."""
    out = np.zeros((4, 4), dtype=np_float64)
    for i in range(3):
        t = 0.0
        for k in range(3):
            out[i, k] = m[i, k]
            t += m[i, k] * m[3, k]
        out[i, 3] = -t
    out[3, 3] = 1.0
    return out
