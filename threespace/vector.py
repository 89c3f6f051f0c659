# vector.py

import logging
import math
import warnings
from collections.abc import Mapping, Sequence
from numbers import Real
from typing import Any, Iterable, List, Tuple, Union

import numpy as np
from numpy import asarray as np_asarray
from numpy import cross as np_cross
from numpy import dot as np_dot
from numpy import float64 as np_float64
from numpy import ndarray

from threespace.errors import InvalidVectorInputError, ZeroLengthWarning

logger = logging.getLogger(__name__)

# three native doubles, e.g. the output of struct.pack("ddd", x, y, z)
_PACKED_SIZE = 3 * np.dtype(np_float64).itemsize
_NUMERIC_KINDS = "biuf"


def _bad_input(value: Any) -> InvalidVectorInputError:
    return InvalidVectorInputError(f"Can't interpret {value!r} as a 3D vector")


def _from_numbers(values: Sequence, fill: float, original: Any) -> ndarray:
    if len(values) not in (2, 3):
        raise InvalidVectorInputError(
            f"Expected 2 or 3 components, got {len(values)} in {original!r}")
    out = np.full(3, fill, dtype=np_float64)
    for i, v in enumerate(values):
        if not isinstance(v, Real):
            raise _bad_input(original)
        out[i] = v
    return out


def to_vector3(value: Any, fill: float = 0.0) -> ndarray:
    """
    Convert any supported vector-like value into a new length-3 float64 array.

    Accepted inputs are a ``Vec3``, a length-2 or length-3 sequence or ndarray of
    numbers, a mapping with ``x``/``y``/``z`` keys, any object exposing ``x``,
    ``y`` and ``z`` attributes, or a 24-byte buffer of three packed doubles.
    A missing trailing component is replaced by ``fill``.

    Args:
        value: the value to convert.
        fill: value used for components the input does not supply.

    Returns:
        A fresh ndarray of shape (3,).

    Raises:
        InvalidVectorInputError: if the value has the wrong number of elements
            or contains something that is not a number.
    """
    if isinstance(value, Vec3):
        return value._v.copy()
    if isinstance(value, ndarray):
        if value.ndim != 1 or value.dtype.kind not in _NUMERIC_KINDS:
            raise _bad_input(value)
        if value.shape[0] not in (2, 3):
            raise InvalidVectorInputError(
                f"Expected 2 or 3 components, got shape {value.shape}")
        out = np.full(3, fill, dtype=np_float64)
        out[:value.shape[0]] = value
        return out
    if isinstance(value, (bytes, bytearray, memoryview)):
        if len(value) != _PACKED_SIZE:
            raise InvalidVectorInputError(
                f"Packed vectors must be {_PACKED_SIZE} bytes, got {len(value)}")
        return np.frombuffer(bytes(value), dtype=np_float64).copy()
    if isinstance(value, str):
        raise _bad_input(value)
    if isinstance(value, Mapping):
        if not any(key in value for key in "xyz"):
            raise _bad_input(value)
        out = np.full(3, fill, dtype=np_float64)
        for i, key in enumerate("xyz"):
            if key in value:
                if not isinstance(value[key], Real):
                    raise _bad_input(value)
                out[i] = value[key]
        return out
    if isinstance(value, Sequence):
        return _from_numbers(value, fill, value)
    if all(hasattr(value, attr) for attr in ("x", "y", "z")):
        return _from_numbers((value.x, value.y, value.z), fill, value)
    raise _bad_input(value)


def parse_vector_args(vals: Tuple, fill: float = 0.0) -> ndarray:
    """
    Interpret a method's positional arguments as one vector.

    ``(x, y)``, ``(x, y, z)`` and ``(vector_like,)`` are all accepted.
    """
    if len(vals) == 1:
        return to_vector3(vals[0], fill)
    if len(vals) in (2, 3):
        return _from_numbers(vals, fill, vals)
    raise InvalidVectorInputError(
        f"Expected (x, y[, z]) or a single vector, got {len(vals)} arguments")


def echo_shape(original: Any, result: ndarray) -> Any:
    """Return ``result`` in the same container type as ``original``."""
    if isinstance(original, list):
        return result.tolist()
    if isinstance(original, tuple):
        return tuple(result.tolist())
    if isinstance(original, ndarray):
        return result
    if isinstance(original, Mapping):
        return {"x": float(result[0]), "y": float(result[1]), "z": float(result[2])}
    return Vec3.from_unchecked(result)


def write_back(original: Any, result: ndarray) -> None:
    """Store ``result`` into the mutable vector-like ``original``."""
    if isinstance(original, Vec3):
        original._v[:] = result
    elif isinstance(original, list):
        original[:] = result.tolist()[:len(original)]
    elif isinstance(original, ndarray):
        original[...] = result[:original.shape[0]]
    elif isinstance(original, Mapping):
        try:
            original.update(x=float(result[0]), y=float(result[1]), z=float(result[2]))
        except AttributeError:
            raise InvalidVectorInputError(
                f"Can't modify {type(original).__name__} in place") from None
    else:
        raise InvalidVectorInputError(
            f"Can't modify {type(original).__name__} in place")


class Vec3:
    """
    A mutable 3D vector backed by a float64 ndarray.

    This is the value type spaces hand back when the caller supplied something
    that has no natural container of its own.
    """
    __slots__ = ("_v",)

    def __init__(self, x: float = 0.0, y: float = 0.0, z: float = 0.0):
        self._v = _from_numbers((x, y, z), 0.0, (x, y, z))

    @classmethod
    def from_unchecked(cls, values: ndarray) -> "Vec3":
        """Wrap a float64 array of shape (3,) without copying or validating it."""
        instance = object.__new__(cls)
        instance._v = values
        return instance

    @property
    def x(self) -> float:
        return float(self._v[0])

    @x.setter
    def x(self, value: float) -> None:
        self._v[0] = value

    @property
    def y(self) -> float:
        return float(self._v[1])

    @y.setter
    def y(self, value: float) -> None:
        self._v[1] = value

    @property
    def z(self) -> float:
        return float(self._v[2])

    @z.setter
    def z(self, value: float) -> None:
        self._v[2] = value

    @property
    def xyz(self) -> Tuple[float, float, float]:
        """The components as a tuple of Python floats."""
        return (float(self._v[0]), float(self._v[1]), float(self._v[2]))

    @xyz.setter
    def xyz(self, value: Iterable[float]) -> None:
        self._v[:] = to_vector3(value)

    @property
    def magnitude(self) -> float:
        """
        Length of the vector.

        Assigning a new magnitude rescales the vector. A zero-length vector has no
        direction to keep, so it emits a ``ZeroLengthWarning`` and stays unchanged.
        """
        return math.sqrt(float(np_dot(self._v, self._v)))

    @magnitude.setter
    def magnitude(self, value: float) -> None:
        length = self.magnitude
        if not length:
            logger.warning("Attempting to set the magnitude of a zero-length vector")
            warnings.warn("Attempting to set the magnitude of a zero-length vector",
                          ZeroLengthWarning, stacklevel=2)
            return
        self._v *= value / length

    def set(self, *vals) -> "Vec3":
        self._v[:] = parse_vector_args(vals)
        return self

    def add(self, *vals) -> "Vec3":
        self._v += parse_vector_args(vals)
        return self

    def sub(self, *vals) -> "Vec3":
        self._v -= parse_vector_args(vals)
        return self

    def scale(self, *vals) -> "Vec3":
        """
        Multiply each component in place.

        A single number scales uniformly; otherwise missing factors default to 1.
        """
        if len(vals) == 1 and isinstance(vals[0], Real):
            self._v *= vals[0]
        else:
            self._v *= parse_vector_args(vals, fill=1.0)
        return self

    def dot(self, *vals) -> float:
        return float(np_dot(self._v, parse_vector_args(vals)))

    def cos(self, *vals) -> float:
        """
        Cosine of the angle to another vector.

        Raises:
            ZeroDivisionError: if either vector has zero length.
        """
        other = parse_vector_args(vals)
        denom = math.sqrt(float(np_dot(self._v, self._v)) * float(np_dot(other, other)))
        return float(np_dot(self._v, other)) / denom

    def cross(self, *vals) -> "Vec3":
        """
        ``a.cross(b)`` returns a new vector ``a x b``.

        ``c.cross(a, b)`` stores ``a x b`` into ``c`` and returns ``c``.
        """
        if len(vals) == 2 and not isinstance(vals[0], Real) and not isinstance(vals[1], Real):
            self._v[:] = np_cross(to_vector3(vals[0]), to_vector3(vals[1]))
            return self
        return Vec3.from_unchecked(np_cross(self._v, parse_vector_args(vals)))

    def to_array(self) -> ndarray:
        return self._v.copy()

    def to_list(self) -> List[float]:
        return self._v.tolist()

    def __array__(self, dtype=None, copy=None) -> ndarray:
        return np_asarray(self._v, dtype=dtype).copy()

    def __iter__(self):
        return iter(self.xyz)

    def __len__(self) -> int:
        return 3

    def __getitem__(self, index):
        return self._v.tolist()[index]

    def __add__(self, other: Any) -> "Vec3":
        return Vec3.from_unchecked(self._v + to_vector3(other))

    def __sub__(self, other: Any) -> "Vec3":
        return Vec3.from_unchecked(self._v - to_vector3(other))

    def __neg__(self) -> "Vec3":
        return Vec3.from_unchecked(-self._v)

    def __mul__(self, other: Any) -> "Vec3":
        if not isinstance(other, Real):
            return NotImplemented
        return Vec3.from_unchecked(self._v * other)

    __rmul__ = __mul__

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vec3):
            return NotImplemented
        return bool(np.array_equal(self._v, other._v))

    __hash__ = None

    def __repr__(self) -> str:
        x, y, z = self.xyz
        return f"Vec3({x!r}, {y!r}, {z!r})"

    def __str__(self) -> str:
        x, y, z = self.xyz
        return f"[{x} {y} {z}]"

    def __copy__(self) -> "Vec3":
        return Vec3.from_unchecked(self._v.copy())

    def __deepcopy__(self, memo) -> "Vec3":
        # the buffer is numeric, so shallow vs deep is the same here
        return self.__copy__()

    def __reduce__(self):
        return (self.__class__, self.xyz)


def vec3(*args) -> Vec3:
    """
    Build a ``Vec3`` from numbers or any vector-like value.

    >>> vec3(1, 2, 3)
    Vec3(1.0, 2.0, 3.0)
    >>> vec3([1, 2])
    Vec3(1.0, 2.0, 0.0)
    """
    if not args:
        return Vec3()
    return Vec3.from_unchecked(parse_vector_args(args))


VectorLike = Union[Vec3, ndarray, Sequence, Mapping, bytes]

__all__ = [
    "Vec3",
    "vec3",
    "to_vector3",
    "parse_vector_args",
    "echo_shape",
    "write_back",
    "VectorLike",
]
