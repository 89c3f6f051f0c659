# projection.py
#
# A space can describe any 3D affine transform, but not the perspective divide
# that a renderer applies last. This wraps that final 4x4 step.

import math
from typing import List, Optional, Tuple

import numpy as np
from numpy import float32 as np_float32
from numpy import float64 as np_float64
from numpy import ndarray

from threespace import geometry
from threespace.base_space import BaseSpace
from threespace.errors import InvalidProjectionError


class Projection:
    """
    A perspective frustum, equivalent to OpenGL's ``glFrustum``.

    The frustum is described by the edges of its near face (``left``, ``right``,
    ``bottom``, ``top`` at distance ``near``) and extends out to ``far``.

    The edges can also be given as sizes: ``width`` and ``height`` fill in a
    missing edge (or center the range when both edges are missing), ``fov`` is
    a vertical field of view in revolutions that sets the height, and
    ``aspect`` derives the width from the height. Anything still unspecified
    defaults to the OpenGL range of [-1, 1].

    Raises:
        InvalidProjectionError: for zero width, height or depth, a non-positive
            ``near``, a ``fov`` outside (0, 1/2), or edges that disagree with
            the given size.
    """
    __slots__ = ("left", "right", "bottom", "top", "near", "far", "matrix")

    def __init__(self, left: Optional[float] = None, right: Optional[float] = None,
                 bottom: Optional[float] = None, top: Optional[float] = None,
                 near: float = 1.0, far: float = 10000.0, *,
                 width: Optional[float] = None, height: Optional[float] = None,
                 aspect: Optional[float] = None, fov: Optional[float] = None):
        if near <= 0:
            raise InvalidProjectionError(f"near must be positive, got {near}")
        if fov is not None:
            if not 0 < fov < 0.5:
                raise InvalidProjectionError(
                    f"fov must be between 0 and 1/2 revolution, got {fov}")
            if height is None:
                height = 2 * near * math.tan(fov * math.pi)
        bottom, top = _edges("bottom", "top", bottom, top, height)
        if width is None and aspect is not None:
            width = (top - bottom) * aspect
        left, right = _edges("left", "right", left, right, width)
        if right == left or top == bottom or far == near:
            raise InvalidProjectionError(
                f"Frustum has zero width, height or depth: "
                f"l={left} r={right} b={bottom} t={top} n={near} f={far}")
        self.left = float(left)
        self.right = float(right)
        self.bottom = float(bottom)
        self.top = float(top)
        self.near = float(near)
        self.far = float(far)
        self.matrix = self._build()

    def _build(self) -> ndarray:
        l, r, b, t, n, f = self.left, self.right, self.bottom, self.top, self.near, self.far
        m = np.zeros((4, 4), dtype=np_float64)
        m[0, 0] = 2 * n / (r - l)
        m[0, 2] = (r + l) / (r - l)
        m[1, 1] = 2 * n / (t - b)
        m[1, 2] = (t + b) / (t - b)
        m[2, 2] = -(f + n) / (f - n)
        m[2, 3] = -2 * f * n / (f - n)
        m[3, 2] = -1.0
        return m

    @property
    def is_centered(self) -> bool:
        return self.left == -self.right and self.bottom == -self.top

    def combined_matrix(self, space: Optional[BaseSpace] = None) -> ndarray:
        """
        The 4x4 matrix of this projection, optionally applied after mapping
        parent coordinates into ``space`` (the space's ``project`` direction).
        """
        if space is None:
            return self.matrix.copy()
        return self.matrix @ geometry.to_projection_matrix(space._mat)

    def gl_matrix(self, space: Optional[BaseSpace] = None) -> List[float]:
        """The 16 values of :meth:`combined_matrix` in column-major order."""
        return self.combined_matrix(space).ravel(order="F").tolist()

    def gl_matrix_packed_float(self, space: Optional[BaseSpace] = None) -> bytes:
        """Same as :meth:`gl_matrix`, packed as 32-bit floats."""
        return self.combined_matrix(space).ravel(order="F").astype(np_float32).tobytes()

    def gl_matrix_packed_double(self, space: Optional[BaseSpace] = None) -> bytes:
        """Same as :meth:`gl_matrix`, packed as 64-bit floats."""
        return self.combined_matrix(space).ravel(order="F").astype(np_float64).tobytes()

    def __repr__(self) -> str:
        return (f"{self.__class__.__name__}(left={self.left}, right={self.right}, "
                f"bottom={self.bottom}, top={self.top}, near={self.near}, far={self.far})")


def frustum(left: float, right: float, bottom: float, top: float,
            near: float, far: float) -> Projection:
    """Same as ``glFrustum``."""
    return Projection(left, right, bottom, top, near, far)


def perspective(vertical_fov: float, aspect: float, near: float, far: float) -> Projection:
    """
    A centered frustum from a vertical field of view.

    Args:
        vertical_fov: field of view in revolutions (``1/4`` is 90 degrees).
        aspect: width over height, e.g. ``16/9``.
        near: distance to the near plane.
        far: distance to the far plane.
    """
    return Projection(near=near, far=far, fov=vertical_fov, aspect=aspect)


def _edges(lo_name: str, hi_name: str, lo: Optional[float], hi: Optional[float],
           size: Optional[float]) -> Tuple[float, float]:
    if size is None:
        return (-1.0 if lo is None else lo), (1.0 if hi is None else hi)
    if lo is None and hi is None:
        return -size / 2, size / 2
    if lo is None:
        return hi - size, hi
    if hi is None:
        return lo, lo + size
    if not math.isclose(hi - lo, size):
        raise InvalidProjectionError(
            f"{lo_name}={lo} and {hi_name}={hi} disagree with a size of {size}")
    return lo, hi


__all__ = ["Projection", "frustum", "perspective"]
