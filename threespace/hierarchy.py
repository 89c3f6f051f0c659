# hierarchy.py
#
# Depth caching, cycle detection and reparenting across chains of spaces.

import logging
from typing import List, Optional

from threespace import geometry
from threespace.base_space import BaseSpace, _check_parent
from threespace.config import config
from threespace.errors import CorruptFrameError, CycleDetectedError

logger = logging.getLogger(__name__)


def _walk(space: BaseSpace) -> List[BaseSpace]:
    """
    Return ``space`` followed by all of its ancestors, nearest first.

    Short chains are walked with no bookkeeping; past ``config.cycle_check_depth``
    links every further node is remembered so that a cycle is reported instead of
    looping forever.
    """
    chain = []
    seen = None
    cur = space
    while cur is not None:
        if not isinstance(cur, BaseSpace):
            raise CorruptFrameError(f"'parent' is not a Space: {cur!r}")
        cur.validate()
        if len(chain) > config.cycle_check_depth:
            if seen is None:
                logger.debug("parent chain deeper than %d, tracking visited spaces",
                             config.cycle_check_depth)
                seen = set()
            if id(cur) in seen:
                raise CycleDetectedError("Cycle detected in space->parent graph")
            seen.add(id(cur))
        chain.append(cur)
        cur = cur._parent
    return chain


def _cache_depths(chain: List[BaseSpace]) -> None:
    depth = len(chain) - 1
    for node in chain:
        node._depth = depth
        depth -= 1


def recompute_depths(space: BaseSpace) -> int:
    """
    Refresh the cached depth of ``space`` and of every ancestor above it.

    Args:
        space: the space to start walking from.

    Returns:
        The number of ancestors of ``space``.

    Raises:
        CycleDetectedError: if the parent chain loops back on itself.
        CorruptFrameError: if something in the chain is not a valid space.
    """
    _cache_depths(_walk(space))
    return space._depth


def ancestors(space: BaseSpace) -> List[BaseSpace]:
    """All ancestors of ``space``, nearest first."""
    return _walk(space)[1:]


def project_space(into: BaseSpace, space: BaseSpace) -> BaseSpace:
    """
    Re-describe ``space`` in the local coordinates of its sibling ``into``,
    making ``into`` its parent.
    """
    geometry.project_space(into._mat, space._mat)
    space._parent = into
    space._depth = into._depth + 1
    return space


def unproject_space(out_of: BaseSpace, space: BaseSpace) -> BaseSpace:
    """
    Re-describe ``space`` (a child of ``out_of``) in the coordinates of
    ``out_of``'s parent, making it a sibling of ``out_of``.
    """
    geometry.unproject_space(out_of._mat, space._mat)
    space._parent = out_of._parent
    space._depth = out_of._depth
    return space


def reparent(space: BaseSpace, parent: Optional[BaseSpace]) -> BaseSpace:
    """
    Describe ``space`` relative to ``parent`` while keeping its global position
    and orientation.

    The lowest common ancestor of the two chains is located by walking both up
    to equal depth. ``space`` is unprojected up to that ancestor; then a scratch
    copy of ``parent`` is unprojected to the same level and ``space`` is
    projected into it. All of the arithmetic happens on a scratch clone, which is
    committed once the new description is complete.

    Any space that has ``space`` as an ancestor is left with a stale depth
    cache; call :func:`recompute_depths` on it before relying on its depth.
    The cached ``is_normal`` answer of ``space`` is kept as it was.

    Args:
        space: the space to move.
        parent: the new parent, or None for global coordinates.

    Returns:
        ``space``.

    Raises:
        InvalidParentError: if ``parent`` is neither None nor a space.
        CycleDetectedError: if ``parent`` is ``space`` or one of its descendants,
            or if either chain already contains a cycle.
    """
    _check_parent(parent)
    if parent is not None:
        chain = _walk(parent)
        for cur in chain:
            if cur is space:
                raise CycleDetectedError(
                    "Attempt to create a cycle: new 'parent' is a child of this space")
        _cache_depths(chain)
    recompute_depths(space)

    if space._parent is parent:
        logger.debug("reparent: %r already has the requested parent", space)
        return space

    work = space.clone()

    # walk the new parent's chain up until it is shallower than 'space'
    common = parent
    while common is not None and common._depth >= work._depth:
        common = common._parent

    # unproject 'work' one level at a time until its parent is the common ancestor
    while work._depth and work._parent is not common:
        unproject_space(work._parent, work)
        # a candidate as deep as 'work' sits on a different branch
        while common is not None and common._depth >= work._depth:
            common = common._parent

    if common is not parent:
        # an equivalent of 'parent' described relative to the common ancestor
        scratch = parent.clone()
        while scratch._parent is not common:
            unproject_space(scratch._parent, scratch)
        logger.debug("reparent: common ancestor %r differs from the new parent", common)
        project_space(scratch, work)
        work._parent = parent
        work._depth = parent._depth + 1

    space._mat[:] = work._mat
    space._parent = work._parent
    space._depth = work._depth
    return space


__all__ = [
    "recompute_depths",
    "ancestors",
    "project_space",
    "unproject_space",
    "reparent",
]
