"""Ordering policies for batch operations over the two-level index.

Batch removal has to touch leaves before their group disappears as a
side effect, and callers may mix whole-group markers ``(row, -1)`` with
individually chosen leaves. ``sort_coordinates`` resolves both cases
deterministically.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

from grove.src.models import Coordinate, SortPolicy


def sort_coordinates(
    policy: SortPolicy,
    coordinates: Iterable[Coordinate],
    leaf_count: Callable[[int], int],
) -> list[Coordinate]:
    """Order or resolve *coordinates* according to *policy*.

    Args:
        policy: Ordering policy to apply.
        coordinates: Input coordinates, possibly containing group markers.
        leaf_count: Returns the current number of leaves in a group row,
            or zero when the row does not exist.

    Returns:
        New list of coordinates. The input is never modified.
    """
    items = list(coordinates)

    if policy is SortPolicy.ASCENDING:
        return sorted(items)
    if policy is SortPolicy.DESCENDING:
        return sorted(items, reverse=True)
    if policy is SortPolicy.PARENT_FIRST:
        return _expand_group_markers(items, leaf_count)
    if policy is SortPolicy.CHILD_FIRST:
        return [c for c in items if not c.is_group_marker]
    raise ValueError(f"Unknown sort policy: {policy!r}")


def _expand_group_markers(
    items: list[Coordinate],
    leaf_count: Callable[[int], int],
) -> list[Coordinate]:
    """Expand group markers into their leaves, dropping leaves they cover.

    Input order is kept; each marker is replaced in place by its leaves.
    Markers for rows that no longer exist expand to nothing.
    """
    marked_rows = {c.row for c in items if c.is_group_marker}
    result: list[Coordinate] = []
    for coord in items:
        if not coord.is_group_marker:
            if coord.row not in marked_rows:
                result.append(coord)
            continue
        for col in range(max(leaf_count(coord.row), 0)):
            result.append(Coordinate(coord.row, col))
    return result
