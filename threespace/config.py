# config.py

from dataclasses import dataclass


@dataclass(slots=True)
class SpaceConfig:
    """
    Numeric thresholds shared by the space kernels and the hierarchy walks.

    Attributes:
        normal_tolerance: allowed deviation of squared axis lengths from 1 and of
            axis dot products from 0 before a basis stops being "normal".
        degenerate_tolerance: squared length under which a seed cross product is
            considered degenerate when building a rotation frame.
        cycle_check_depth: number of parent links walked before a visited set is
            used to detect cycles.
    """
    normal_tolerance: float = 1e-14
    degenerate_tolerance: float = 1e-50
    cycle_check_depth: int = 964


# read at call time, so callers may tweak the values in place
config = SpaceConfig()
