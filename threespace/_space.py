# _space.py

import logging
import math
import warnings
from numbers import Real
from typing import Any, List, Literal, Optional, Union

import numpy as np
from numpy import float32 as np_float32
from numpy import float64 as np_float64
from numpy import ndarray
from numpy.linalg import norm as np_norm

from threespace import geometry, hierarchy
from threespace.base_space import BaseSpace, NormalState
from threespace.config import config
from threespace.errors import InvalidVectorInputError, ZeroLengthWarning
from threespace.vector import echo_shape, parse_vector_args, to_vector3, write_back

logger = logging.getLogger(__name__)


def _scale_factors(vals: tuple) -> ndarray:
    # bare numbers repeat the first one for missing factors, (2, 3) -> (2, 3, 2);
    # a short vector-like value keeps the missing axes at 1
    if vals and isinstance(vals[0], Real):
        if len(vals) == 1:
            return np.full(3, vals[0], dtype=np_float64)
        if len(vals) == 2:
            vals = (vals[0], vals[1], vals[0])
    return parse_vector_args(vals, fill=1.0)


def _is_batch(value: Any) -> bool:
    return isinstance(value, ndarray) and value.ndim == 2


def _as_batch(value: ndarray) -> ndarray:
    if value.shape[1] != 3 or value.dtype.kind not in "biuf":
        raise InvalidVectorInputError(
            f"Batches must be numeric arrays of shape (N, 3), got {value.shape} {value.dtype}")
    return np.asarray(value, dtype=np_float64)


class Space(BaseSpace):
    """
    A 3D coordinate space described by axis vectors ``xv``, ``yv``, ``zv`` and an
    ``origin``, relative to an optional parent space.

    Compared to 4x4 matrices this needs far fewer operations to move points in
    and out of the space, and the axis vectors say directly which way the space
    is facing. Every mutator works in place and returns the space for chaining.

    Example::

        boat = space()
        sailor = boat.space().translate(10, 0, 0)
        boat.rot_z(.25)
        sailor.reparent(None)  # same place in the world, no parent
    """
    __slots__ = ()

    def space(self) -> "Space":
        """A new identity space whose parent is this one."""
        return self.__class__(self)

    @property
    def parent_count(self) -> int:
        """Number of ancestors above this space (recomputed on every access)."""
        return hierarchy.recompute_depths(self)

    depth = parent_count

    #########
    # Translation
    #

    def translate(self, *vals) -> "Space":
        """
        Move the origin, in terms of parent coordinates.

        Accepts ``(x, y)``, ``(x, y, z)`` or a single vector-like value.
        """
        self._mat[3] += parse_vector_args(vals)
        return self

    tr = translate
    move = translate

    def travel(self, *vals) -> "Space":
        """
        Move the origin along this space's own axes.

        If ``zv`` is used as "forward", ``space.travel(0, 0, 1)`` moves one unit
        forward.
        """
        self._mat[3] += geometry.unproject_vector(self._mat, parse_vector_args(vals))
        return self

    go = travel

    #########
    # Scale and normalization
    #

    def scale(self, *vals) -> "Space":
        """
        Multiply the axis vectors by a factor relative to their current scale.

        ``scale(2)`` is uniform; ``scale(1, 2, 3)`` or ``scale([1, 2, 3])`` scale
        each axis separately. ``scale(2, 3)`` reuses the first factor for zv,
        giving (2, 3, 2), while ``scale([2, 3])`` leaves zv alone.
        """
        self._mat[:3] *= _scale_factors(vals)[:, None]
        self._normal = NormalState.UNKNOWN
        return self

    def set_scale(self, *vals) -> "Space":
        """
        Set the length of each axis vector. ``set_scale(1)`` makes every axis unit
        length while keeping its direction.

        A zero-length axis can't be rescaled; it emits a ``ZeroLengthWarning`` and
        is left as it is.
        """
        factors = _scale_factors(vals)
        lengths = np_norm(self._mat[:3], axis=1)
        for i, name in enumerate(("xv", "yv", "zv")):
            if lengths[i] == 0.0:
                logger.warning("set_scale: %s has zero length and can't be scaled", name)
                warnings.warn(f"Can't set the scale of zero-length axis {name}",
                              ZeroLengthWarning, stacklevel=2)
                continue
            self._mat[i] *= factors[i] / lengths[i]
        self._normal = NormalState.UNKNOWN
        return self

    def normalize(self) -> "Space":
        """
        Make the axis vectors unit length and orthogonal to each other:

          * make zv a unit vector
          * xv = yv cross zv, made unit length
          * yv = zv cross xv, made unit length

        Note the last step is zv cross xv, not xv cross zv. The reversed order
        flips yv, turning an identity space into one with ``yv = (0, -1, 0)``.
        """
        if geometry.normalize_basis(self._mat):
            self._normal = NormalState.TRUE
        else:
            self._normal = NormalState.UNKNOWN
            logger.warning("normalize: basis collapsed to zero length")
            warnings.warn("Can't normalize a space whose axes are degenerate",
                          ZeroLengthWarning, stacklevel=2)
        return self

    #########
    # Rotation
    #

    def rotate(self, revolutions: float, *axis) -> "Space":
        """
        Rotate ``xv``, ``yv`` and ``zv`` around a vector given in parent
        coordinates.

        The angle is in revolutions, so ``.25`` is a quarter turn and ``1`` is
        back to the start. To rotate around a vector given in local
        coordinates, unproject it with :meth:`unproject_vector` first.

        Raises:
            DegenerateAxisError: if the axis has zero magnitude.
        """
        frame = geometry.rotation_frame(parse_vector_args(axis), config.degenerate_tolerance)
        angle = revolutions * geometry.TWO_PI
        geometry.rotate_in_frame(self._mat, frame, math.sin(angle), math.cos(angle))
        return self

    rot = rotate

    def _rotate_parent_axis(self, revolutions: float, ix: int) -> "Space":
        angle = revolutions * geometry.TWO_PI
        geometry.rotate_parent_axis(self._mat, (ix + 1) % 3, (ix + 2) % 3,
                                    math.sin(angle), math.cos(angle))
        return self

    def rot_x(self, revolutions: float) -> "Space":
        """Rotate around the parent's X axis."""
        return self._rotate_parent_axis(revolutions, 0)

    def rot_y(self, revolutions: float) -> "Space":
        """Rotate around the parent's Y axis."""
        return self._rotate_parent_axis(revolutions, 1)

    def rot_z(self, revolutions: float) -> "Space":
        """Rotate around the parent's Z axis."""
        return self._rotate_parent_axis(revolutions, 2)

    def _rotate_own_axis(self, revolutions: float, ix: int) -> "Space":
        # the closed form needs an orthonormal basis
        if not self.is_normal():
            return self.rotate(revolutions, self._mat[ix].copy())
        angle = revolutions * geometry.TWO_PI
        geometry.rotate_own_axis(self._mat, (ix + 1) % 3, (ix + 2) % 3,
                                 math.sin(angle), math.cos(angle))
        return self

    def rot_xv(self, revolutions: float) -> "Space":
        """Rotate ``yv`` and ``zv`` around this space's own ``xv``."""
        return self._rotate_own_axis(revolutions, 0)

    def rot_yv(self, revolutions: float) -> "Space":
        """Rotate ``zv`` and ``xv`` around this space's own ``yv``."""
        return self._rotate_own_axis(revolutions, 1)

    def rot_zv(self, revolutions: float) -> "Space":
        """Rotate ``xv`` and ``yv`` around this space's own ``zv``."""
        return self._rotate_own_axis(revolutions, 2)

    rotate_x = rot_x
    rotate_y = rot_y
    rotate_z = rot_z
    rotate_xv = rot_xv
    rotate_yv = rot_yv
    rotate_zv = rot_zv

    #########
    # Projection of points and vectors
    #

    def _map(self, vals: tuple, single, batch, with_origin: bool) -> Union[Any, List[Any]]:
        out = []
        for val in vals:
            if _is_batch(val):
                out.append(batch(self._mat, _as_batch(val), with_origin))
            else:
                out.append(echo_shape(val, single(self._mat, to_vector3(val))))
        if len(out) == 1:
            return out[0]
        return out

    def _map_inplace(self, vals: tuple, single, batch, with_origin: bool) -> "Space":
        for val in vals:
            if _is_batch(val):
                val[...] = batch(self._mat, _as_batch(val), with_origin)
            else:
                write_back(val, single(self._mat, to_vector3(val)))
        return self

    def project(self, *points):
        """
        Map points from parent coordinates into this space.

        Each argument is a separate point; one argument gives one result, several
        give a list. Results come back in the caller's container type (list,
        tuple, ndarray, dict or ``Vec3``). An (N, 3) ndarray is mapped as a batch.

        The mapping uses the transpose of the axis matrix, so it is the exact
        inverse of :meth:`unproject` only while :meth:`is_normal` is true.
        """
        return self._map(points, geometry.project_point, geometry.project_points, True)

    def project_vector(self, *vectors):
        """Like :meth:`project`, but directions ignore the origin."""
        return self._map(vectors, geometry.project_vector, geometry.project_points, False)

    def unproject(self, *points):
        """Map points from this space's coordinates out to the parent's."""
        return self._map(points, geometry.unproject_point, geometry.unproject_points, True)

    def unproject_vector(self, *vectors):
        """Like :meth:`unproject`, but directions ignore the origin."""
        return self._map(vectors, geometry.unproject_vector, geometry.unproject_points, False)

    def project_inplace(self, *points) -> "Space":
        """Overwrite each point with its projection; returns the space."""
        return self._map_inplace(points, geometry.project_point, geometry.project_points, True)

    def project_vector_inplace(self, *vectors) -> "Space":
        return self._map_inplace(vectors, geometry.project_vector, geometry.project_points, False)

    def unproject_inplace(self, *points) -> "Space":
        return self._map_inplace(points, geometry.unproject_point, geometry.unproject_points, True)

    def unproject_vector_inplace(self, *vectors) -> "Space":
        return self._map_inplace(vectors, geometry.unproject_vector, geometry.unproject_points, False)

    #########
    # Hierarchy
    #

    def reparent(self, parent: Optional["BaseSpace"]) -> "Space":
        """
        Describe this space in terms of a different parent while keeping the
        same global position and orientation.

        For example, if a player rides in a vehicle that drives on the ground,
        ``player.reparent(ground)`` lets the player jump off without moving.
        ``None`` means global coordinates.

        Raises:
            CycleDetectedError: if ``parent`` is this space or a descendant of it.
        """
        return hierarchy.reparent(self, parent)

    #########
    # 4x4 export
    #

    def get_4x4_unprojection(self, *, packed: Optional[Literal["f", "d"]] = None):
        """
        Column-major 16-value matrix equivalent to :meth:`unproject`.

        Args:
            packed: ``"f"`` for bytes of float32, ``"d"`` for bytes of float64,
                or None for a list of floats.
        """
        return _export(geometry.to_unprojection_matrix(self._mat), packed)

    get_gl_matrix = get_4x4_unprojection

    def get_4x4_projection(self, *, packed: Optional[Literal["f", "d"]] = None):
        """Column-major 16-value matrix equivalent to :meth:`project`."""
        return _export(geometry.to_projection_matrix(self._mat), packed)


def _export(matrix: ndarray, packed: Optional[str]):
    flat = matrix.ravel(order="F")
    if packed is None:
        return flat.tolist()
    if packed == "f":
        return flat.astype(np_float32).tobytes()
    if packed == "d":
        return flat.astype(np_float64).tobytes()
    raise ValueError(f"packed must be 'f', 'd' or None, got {packed!r}")


def space(parent: Optional[BaseSpace] = None) -> Space:
    """
    Create an identity space, optionally inside ``parent``::

        origin = [0, 0, 0]
        xv     = [1, 0, 0]
        yv     = [0, 1, 0]
        zv     = [0, 0, 1]
    """
    return Space(parent)


__all__ = ["Space", "space"]
