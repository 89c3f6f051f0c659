# base_space.py

from enum import Enum
from typing import List, Optional, Sequence, Union

import numpy as np
from numpy import array2string as np_array2string
from numpy import float64 as np_float64
from numpy import ndarray

from threespace.config import config
from threespace.errors import CorruptFrameError, InvalidParentError, InvalidVectorInputError
from threespace.geometry import is_normal_basis
from threespace.vector import parse_vector_args, to_vector3

# rows: xv, yv, zv, origin
_IDENTITY = np.array(
    [[1.0, 0.0, 0.0],
     [0.0, 1.0, 0.0],
     [0.0, 0.0, 1.0],
     [0.0, 0.0, 0.0]],
    dtype=np_float64,
)
_ROWS = {"xv": 0, "yv": 1, "zv": 2, "origin": 3}


class NormalState(Enum):
    """Cached answer to "is the basis orthonormal?"."""
    UNKNOWN = -1
    FALSE = 0
    TRUE = 1


def _check_parent(parent: object) -> None:
    if parent is not None and not isinstance(parent, BaseSpace):
        raise InvalidParentError(
            f"'parent' must be a Space or None, got {type(parent).__name__}")


class BaseSpace:
    """
    An affine coordinate space: three axis vectors and an origin, all described
    in the coordinates of an optional parent space.

    The four vectors live in a single (4, 3) float64 buffer (rows ``xv``, ``yv``,
    ``zv``, ``origin``), which is also the flat 12-number serialization. A parent
    of ``None`` means global coordinates.
    """
    __slots__ = ("_mat", "_parent", "_depth", "_normal")

    def __init__(self, parent: Optional["BaseSpace"] = None):
        _check_parent(parent)
        self._mat = _IDENTITY.copy()
        self._parent = parent
        self._depth = 0 if parent is None else parent._depth + 1
        self._normal = NormalState.TRUE

    @classmethod
    def from_unchecked_values(cls, mat: ndarray, parent: Optional["BaseSpace"], depth: int,
                              normal: NormalState = NormalState.UNKNOWN) -> "BaseSpace":
        """Create a space around ``mat`` without copying or validating anything."""
        instance = object.__new__(cls)
        instance._mat = mat
        instance._parent = parent
        instance._depth = depth
        instance._normal = normal
        return instance

    @classmethod
    def from_values(
        cls,
        xv=None,
        yv=None,
        zv=None,
        origin=None,
        parent: Optional["BaseSpace"] = None,
    ) -> "BaseSpace":
        """
        Create a space from raw attributes. Any attribute left out keeps its
        identity value.

        Args:
            xv: X axis in parent coordinates.
            yv: Y axis in parent coordinates.
            zv: Z axis in parent coordinates.
            origin: origin point in parent coordinates.
            parent: the parent space, or None for global coordinates.

        Returns:
            A new space.
        """
        instance = cls(parent)
        for name, value in (("xv", xv), ("yv", yv), ("zv", zv), ("origin", origin)):
            if value is not None:
                instance._mat[_ROWS[name]] = to_vector3(value)
        if xv is not None or yv is not None or zv is not None:
            instance._normal = NormalState.UNKNOWN
        return instance

    @classmethod
    def from_flat_array(cls, values: Union[ndarray, Sequence[float]],
                        parent: Optional["BaseSpace"] = None) -> "BaseSpace":
        """
        Create a space from 12 numbers ordered ``xv, yv, zv, origin``.
        """
        try:
            flat = np.asarray(values, dtype=np_float64)
        except (TypeError, ValueError):
            raise InvalidVectorInputError(
                f"Can't interpret {values!r} as 12 numbers") from None
        if flat.shape != (12,):
            raise InvalidVectorInputError(
                f"Expected 12 numbers, got shape {flat.shape}")
        instance = cls(parent)
        instance._mat[:] = flat.reshape((4, 3))
        instance._normal = NormalState.UNKNOWN
        return instance

    #########
    # Attributes
    #

    @property
    def parent(self) -> Optional["BaseSpace"]:
        """The space this one is described in, or None for global coordinates."""
        return self._parent

    @property
    def xv(self) -> ndarray:
        """Copy of the X axis vector, in parent coordinates."""
        return self._mat[0].copy()

    @xv.setter
    def xv(self, value) -> None:
        self._mat[0] = to_vector3(value)
        self._normal = NormalState.UNKNOWN

    @property
    def yv(self) -> ndarray:
        """Copy of the Y axis vector, in parent coordinates."""
        return self._mat[1].copy()

    @yv.setter
    def yv(self, value) -> None:
        self._mat[1] = to_vector3(value)
        self._normal = NormalState.UNKNOWN

    @property
    def zv(self) -> ndarray:
        """Copy of the Z axis vector, in parent coordinates."""
        return self._mat[2].copy()

    @zv.setter
    def zv(self, value) -> None:
        self._mat[2] = to_vector3(value)
        self._normal = NormalState.UNKNOWN

    @property
    def origin(self) -> ndarray:
        """Copy of the origin point, in parent coordinates."""
        return self._mat[3].copy()

    @origin.setter
    def origin(self, value) -> None:
        self._mat[3] = to_vector3(value)

    def get_axis(self, which: str) -> ndarray:
        """Copy of ``"xv"``, ``"yv"``, ``"zv"`` or ``"origin"``."""
        return self._mat[self._row(which)].copy()

    def set_axis(self, which: str, *vals) -> "BaseSpace":
        """Replace ``"xv"``, ``"yv"``, ``"zv"`` or ``"origin"``; returns self."""
        row = self._row(which)
        self._mat[row] = parse_vector_args(vals)
        if row < 3:
            self._normal = NormalState.UNKNOWN
        return self

    @staticmethod
    def _row(which: str) -> int:
        try:
            return _ROWS[which]
        except KeyError:
            raise ValueError(
                f"axis must be one of {sorted(_ROWS)}, got {which!r}") from None

    def orient(self, xv, yv, zv) -> "BaseSpace":
        """Replace all three axis vectors at once."""
        self._mat[0] = to_vector3(xv)
        self._mat[1] = to_vector3(yv)
        self._mat[2] = to_vector3(zv)
        self._normal = NormalState.UNKNOWN
        return self

    def reset(self) -> "BaseSpace":
        """Return to an identity in the same parent."""
        self._mat[:] = _IDENTITY
        self._normal = NormalState.TRUE
        return self

    def is_normal(self) -> bool:
        """
        True if all axis vectors are unit length and orthogonal to each other.

        The answer is cached until the next change to an axis vector.
        """
        if self._normal is NormalState.UNKNOWN:
            normal = is_normal_basis(self._mat, config.normal_tolerance)
            self._normal = NormalState.TRUE if normal else NormalState.FALSE
        return self._normal is NormalState.TRUE

    @property
    def normal_state(self) -> NormalState:
        """The cached normality flag, without computing it."""
        return self._normal

    def validate(self) -> "BaseSpace":
        """
        Check the structure of the backing buffer.

        Raises:
            CorruptFrameError: if the buffer is not a (4, 3) float64 ndarray or the
                parent is not a space.
        """
        mat = getattr(self, "_mat", None)
        if not isinstance(mat, ndarray) or mat.shape != (4, 3) or mat.dtype != np_float64:
            raise CorruptFrameError(f"{type(self).__name__} has a malformed buffer")
        parent = getattr(self, "_parent", None)
        if parent is not None and not isinstance(parent, BaseSpace):
            raise CorruptFrameError(
                f"'parent' is not a Space: {type(parent).__name__}")
        return self

    #########
    # Copies and serialization
    #

    def clone(self) -> "BaseSpace":
        """A new space with the same values and the same parent."""
        return self.__class__.from_unchecked_values(
            self._mat.copy(), self._parent, self._depth, self._normal)

    def to_flat_array(self) -> ndarray:
        """The 12 numbers ``xv, yv, zv, origin`` as a new array."""
        return self._mat.ravel().copy()

    def to_list(self) -> List[float]:
        """The 12 numbers ``xv, yv, zv, origin`` as Python floats."""
        return self._mat.ravel().tolist()

    def __copy__(self) -> "BaseSpace":
        return self.clone()

    def __repr__(self) -> str:
        cls = self.__class__.__name__
        mat = np_array2string(self._mat, precision=6, separator=', ')
        return f"{cls}(depth={self._depth}, xv/yv/zv/origin=\n{mat}\n)"

    def __str__(self) -> str:
        return self.__repr__()
