"""
threespace: 3D coordinate spaces described by axis vectors and an origin instead of
4x4 matrices, arranged in a parent/child hierarchy that points, vectors and whole
spaces can be moved through.
"""

import logging

__version__ = version = "0.1.0"

# exposing the public API of the package
from threespace._space import Space, space
from threespace.base_space import BaseSpace, NormalState
from threespace.config import SpaceConfig, config
from threespace.errors import (
    ThreeSpaceError,
    InvalidParentError,
    InvalidVectorInputError,
    DegenerateAxisError,
    CycleDetectedError,
    CorruptFrameError,
    InvalidProjectionError,
    ZeroLengthWarning,
)
from threespace.hierarchy import (
    ancestors,
    project_space,
    recompute_depths,
    reparent,
    unproject_space,
)
from threespace.projection import Projection, frustum, perspective
from threespace.vector import Vec3, vec3, to_vector3

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Space",
    "space",
    "BaseSpace",
    "NormalState",
    "SpaceConfig",
    "config",
    "Vec3",
    "vec3",
    "to_vector3",
    "Projection",
    "frustum",
    "perspective",
    "ancestors",
    "project_space",
    "recompute_depths",
    "reparent",
    "unproject_space",
    "ThreeSpaceError",
    "InvalidParentError",
    "InvalidVectorInputError",
    "DegenerateAxisError",
    "CycleDetectedError",
    "CorruptFrameError",
    "InvalidProjectionError",
    "ZeroLengthWarning",
]
