"""Exception and warning types raised by threespace."""


class ThreeSpaceError(Exception):
    """Base class for all threespace errors."""


class InvalidParentError(ThreeSpaceError, TypeError):
    """A parent was supplied that is not a Space."""


class InvalidVectorInputError(ThreeSpaceError, ValueError):
    """A vector argument had the wrong number of elements or a non-numeric value."""


class DegenerateAxisError(ThreeSpaceError, ValueError):
    """A rotation axis has zero magnitude, or no perpendicular seed could be found."""


class CycleDetectedError(ThreeSpaceError, ValueError):
    """The parent graph contains, or would contain, a cycle."""


class CorruptFrameError(ThreeSpaceError, TypeError):
    """A value in a parent chain failed structural validation."""


class InvalidProjectionError(ThreeSpaceError, ValueError):
    """Frustum extents that cannot produce a projection matrix."""


class ZeroLengthWarning(UserWarning):
    """An operation tried to rescale a zero-length vector and left it unchanged."""


__all__ = [
    "ThreeSpaceError",
    "InvalidParentError",
    "InvalidVectorInputError",
    "DegenerateAxisError",
    "CycleDetectedError",
    "CorruptFrameError",
    "InvalidProjectionError",
    "ZeroLengthWarning",
]
