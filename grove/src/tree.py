"""Two-level hierarchical item index with cascading check and selection.

The forest is an ordered list of groups, each owning an ordered list of
leaves. Nodes are addressed by positional ``Coordinate(row, col)``
values; any insertion or removal shifts the coordinates of later
siblings, so callers re-derive coordinates after every mutation.

Every public operation is total. Invalid coordinates make mutators a
no-op and queries return empty results. Only the strict accessors
``group_at`` and ``leaf_at`` raise ``OutOfRangeCoordinateError``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from grove.src.models import (
    CheckState,
    Coordinate,
    Group,
    Leaf,
    NodeKind,
    NodeRef,
    OutOfRangeCoordinateError,
    SelectionMode,
    SortPolicy,
    TreeConfig,
)
from grove.src.ordering import sort_coordinates

logger = logging.getLogger(__name__)


class HierarchicalIndexTree:
    """Forest of groups and leaves driven by a presentation layer.

    Args:
        config: Icon defaults and insertion behavior. Uses defaults when None.
    """

    def __init__(self, config: TreeConfig | None = None) -> None:
        self.config = config or TreeConfig()
        self._groups: list[Group] = []
        self._current: Leaf | None = None

    # ------------------------------------------------------------------
    # Shape and lookup
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._groups)

    @property
    def group_count(self) -> int:
        return len(self._groups)

    def leaf_count(self, row: int) -> int:
        """Number of leaves in group *row*, or 0 when the row does not exist."""
        if 0 <= row < len(self._groups):
            return len(self._groups[row].leaves)
        return 0

    def is_valid(self, coordinate: Coordinate) -> bool:
        """Return True when *coordinate* addresses an existing leaf."""
        return (
            0 <= coordinate.row < len(self._groups)
            and 0 <= coordinate.col < len(self._groups[coordinate.row].leaves)
        )

    def group_at(self, row: int) -> Group:
        """Return the group at *row*.

        Raises:
            OutOfRangeCoordinateError: If no group exists at *row*.
        """
        if not 0 <= row < len(self._groups):
            raise OutOfRangeCoordinateError(row)
        return self._groups[row]

    def leaf_at(self, coordinate: Coordinate) -> Leaf:
        """Return the leaf at *coordinate*.

        Raises:
            OutOfRangeCoordinateError: If *coordinate* is not valid.
        """
        if not self.is_valid(coordinate):
            raise OutOfRangeCoordinateError(coordinate.row, coordinate.col)
        return self._groups[coordinate.row].leaves[coordinate.col]

    def _node_exists(self, node: NodeRef) -> bool:
        if node.kind is NodeKind.GROUP:
            return 0 <= node.row < len(self._groups)
        return self.is_valid(node.coordinate)

    def _locate(self, leaf: Leaf) -> Coordinate | None:
        # Identity, not equality: two leaves may carry identical fields.
        for row, group in enumerate(self._groups):
            for col, candidate in enumerate(group.leaves):
                if candidate is leaf:
                    return Coordinate(row, col)
        return None

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def selected_coordinates(self) -> set[Coordinate]:
        """Coordinates of every selected leaf.

        A selected group is represented by its selected leaves.
        """
        return {
            Coordinate(row, col)
            for row, group in enumerate(self._groups)
            for col, leaf in enumerate(group.leaves)
            if leaf.selected
        }

    def checked_coordinates(self) -> list[Coordinate]:
        """Coordinates of every checked leaf, row-major."""
        return [
            Coordinate(row, col)
            for row, group in enumerate(self._groups)
            for col, leaf in enumerate(group.leaves)
            if leaf.checked
        ]

    def all_coordinates(self) -> list[Coordinate]:
        """Coordinates of every leaf, row-major."""
        return [
            Coordinate(row, col)
            for row, group in enumerate(self._groups)
            for col in range(len(group.leaves))
        ]

    def coordinates_under(self, node: NodeRef) -> list[Coordinate]:
        """Coordinates a click on *node* acts upon.

        A group yields all of its leaf slots; a leaf yields its own slot.
        """
        if not self._node_exists(node):
            return []
        if node.kind is NodeKind.GROUP:
            return [Coordinate(node.row, col) for col in range(self.leaf_count(node.row))]
        return [node.coordinate]

    def current_coordinate(self) -> Coordinate | None:
        """Coordinate of the current leaf, if any."""
        if self._current is None:
            return None
        return self._locate(self._current)

    def sort_coordinates(
        self,
        policy: SortPolicy,
        coordinates: Iterable[Coordinate],
    ) -> list[Coordinate]:
        """Order *coordinates* for a batch operation against this forest."""
        return sort_coordinates(policy, coordinates, self.leaf_count)

    def to_dict(self) -> dict[str, Any]:
        """Snapshot of the forest for API responses."""
        current = self.current_coordinate()
        return {
            "group_count": len(self._groups),
            "groups": [group.to_dict() for group in self._groups],
            "current": current.to_dict() if current else None,
        }

    # ------------------------------------------------------------------
    # Shape mutations
    # ------------------------------------------------------------------

    def insert(
        self,
        coordinate: Coordinate,
        group_label: str,
        leaf_label: str,
        select: bool = False,
        *,
        group_icon: str | None = None,
        leaf_icon: str | None = None,
    ) -> Coordinate:
        """Insert a leaf, creating a new group when the row is out of range.

        A row outside ``[0, group_count)`` appends a new checked group
        holding one checked leaf. Otherwise the leaf joins the group at
        ``coordinate.row``: at the front when ``coordinate.col`` is a
        valid position, at the end otherwise.

        Args:
            coordinate: Target position.
            group_label: Label of the new group (ignored for existing groups).
            leaf_label: Label of the new leaf.
            select: Make the new leaf the current item and sole selection.
            group_icon: Icon for a new group; falls back to the configured default.
            leaf_icon: Icon for the new leaf; falls back to the configured default.

        Returns:
            Coordinate of the inserted leaf.
        """
        leaf = Leaf(
            label=leaf_label,
            checked=True,
            icon=leaf_icon if leaf_icon is not None else self.config.leaf_icon,
        )

        if not 0 <= coordinate.row < len(self._groups):
            group = Group(
                label=group_label,
                leaves=[leaf],
                checked=True,
                icon=group_icon if group_icon is not None else self.config.group_icon,
            )
            self._groups.append(group)
            result = Coordinate(len(self._groups) - 1, 0)
            logger.debug("Created group %r at row %d", group_label, result.row)
        else:
            group = self._groups[coordinate.row]
            if 0 <= coordinate.col < len(group.leaves):
                group.leaves.insert(0, leaf)
                result = Coordinate(coordinate.row, 0)
            else:
                group.leaves.append(leaf)
                result = Coordinate(coordinate.row, len(group.leaves) - 1)
            group.checked = group.check_state is CheckState.CHECKED
            # An unselected newcomer means the group is no longer fully selected.
            group.selected = group.fully_selected
            logger.debug("Inserted leaf %r at %r", leaf_label, result)

        if self.config.expand_on_insert:
            group.expanded = True
        if select:
            self._make_current(leaf)
        else:
            self.on_selection_changed()
        return result

    def remove(self, coordinate: Coordinate) -> bool:
        """Remove the leaf at *coordinate*, and its group if it was the last leaf.

        Returns:
            True when something was removed, False for an ignored request.
        """
        if not self.is_valid(coordinate):
            logger.debug("Ignoring removal of invalid coordinate %r", coordinate)
            return False

        group = self._groups[coordinate.row]
        if len(group.leaves) == 1:
            removed = self._groups.pop(coordinate.row).leaves
            logger.debug("Removed group %r at row %d", group.label, coordinate.row)
        else:
            removed = [group.leaves.pop(coordinate.col)]
            group.checked = group.check_state is CheckState.CHECKED
            logger.debug("Removed leaf at %r", coordinate)

        if any(leaf is self._current for leaf in removed):
            self._current = None
        self.on_selection_changed()
        return True

    def remove_many(self, coordinates: Iterable[Coordinate]) -> int:
        """Remove a batch of leaves and whole-group markers.

        Group markers ``(row, -1)`` are expanded to all of their leaves,
        then removal proceeds from the highest coordinate down so that
        positions still to be visited do not shift.

        Returns:
            Number of leaves removed.
        """
        resolved = self.sort_coordinates(SortPolicy.PARENT_FIRST, coordinates)
        ordered = self.sort_coordinates(SortPolicy.DESCENDING, set(resolved))
        removed = sum(1 for coordinate in ordered if self.remove(coordinate))
        logger.debug("Batch removal removed %d of %d leaves", removed, len(ordered))
        return removed

    def clear(self) -> None:
        """Remove every group."""
        self._groups.clear()
        self._current = None

    # ------------------------------------------------------------------
    # Display state
    # ------------------------------------------------------------------

    def set_expanded(self, row: int, expanded: bool) -> bool:
        if not 0 <= row < len(self._groups):
            return False
        self._groups[row].expanded = expanded
        return True

    def set_default_icons(
        self,
        group_icon: str | None = None,
        leaf_icon: str | None = None,
    ) -> None:
        """Replace the icons attached to nodes created from now on."""
        self.config.group_icon = group_icon
        self.config.leaf_icon = leaf_icon

    # ------------------------------------------------------------------
    # Check state
    # ------------------------------------------------------------------

    def set_checked(self, coordinate: Coordinate, checked: bool) -> bool:
        """Set a leaf's check flag and refresh its group as if clicked.

        Returns:
            True when applied, False for an invalid coordinate.
        """
        if not self.is_valid(coordinate):
            logger.debug("Ignoring check change for invalid coordinate %r", coordinate)
            return False
        self._groups[coordinate.row].leaves[coordinate.col].checked = checked
        self.on_item_clicked(NodeRef.leaf(coordinate.row, coordinate.col))
        return True

    def click_check(self, node: NodeRef, checked: bool | None = None) -> bool:
        """Set or toggle the check box of *node*, then propagate.

        Toggling a partially checked group checks it.

        Returns:
            True when applied, False when *node* does not exist.
        """
        if not self._node_exists(node):
            return False
        if node.kind is NodeKind.GROUP:
            group = self._groups[node.row]
            if checked is None:
                checked = group.check_state is not CheckState.CHECKED
            group.checked = checked
        else:
            leaf = self._groups[node.row].leaves[node.col]
            leaf.checked = (not leaf.checked) if checked is None else checked
        self.on_item_clicked(node)
        return True

    def on_item_clicked(self, node: NodeRef) -> CheckState | None:
        """Propagate a check change on *node* through its family.

        A group pushes its binary flag down to every leaf. A leaf
        refreshes its group by scanning the siblings for the opposite
        state.

        Returns:
            The group's resulting tri-state, or None if *node* does not exist.
        """
        if not self._node_exists(node):
            return None
        group = self._groups[node.row]

        if node.kind is NodeKind.GROUP:
            for leaf in group.leaves:
                leaf.checked = group.checked
            return group.check_state

        leaf = group.leaves[node.col]
        if leaf.checked:
            mixed = any(not sibling.checked for sibling in group.leaves)
            state = CheckState.PARTIALLY_CHECKED if mixed else CheckState.CHECKED
        else:
            mixed = any(sibling.checked for sibling in group.leaves)
            state = CheckState.PARTIALLY_CHECKED if mixed else CheckState.UNCHECKED
        group.checked = state is CheckState.CHECKED
        return state

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def select(
        self,
        nodes: Iterable[NodeRef],
        mode: SelectionMode = SelectionMode.REPLACE,
    ) -> None:
        """Select *nodes*, replacing or extending the current selection."""
        if mode is SelectionMode.REPLACE:
            self._reset_selection()
        for node in nodes:
            if not self._node_exists(node):
                logger.debug("Ignoring selection of missing node %r", node)
                continue
            if node.kind is NodeKind.GROUP:
                self._groups[node.row].selected = True
            else:
                self._groups[node.row].leaves[node.col].selected = True
        self.on_selection_changed()

    def deselect(self, nodes: Iterable[NodeRef]) -> None:
        """Deselect *nodes*.

        A deselected group releases its leaves; a deselected leaf
        releases its group, which is no longer fully selected.
        """
        for node in nodes:
            if not self._node_exists(node):
                continue
            group = self._groups[node.row]
            group.selected = False
            if node.kind is NodeKind.GROUP:
                for leaf in group.leaves:
                    leaf.selected = False
            else:
                group.leaves[node.col].selected = False
        self.on_selection_changed()

    def clear_selection(self) -> None:
        self._reset_selection()
        self.on_selection_changed()

    def on_selection_changed(self) -> None:
        """Bring group and leaf selection back into agreement.

        Selected groups select all of their leaves; a group whose leaves
        are all selected becomes selected. Passes repeat until nothing
        changes.
        """
        passes = 0
        changed = True
        while changed:
            changed = False
            passes += 1
            for group in self._groups:
                if group.selected:
                    for leaf in group.leaves:
                        if not leaf.selected:
                            leaf.selected = True
                            changed = True
                elif group.fully_selected:
                    group.selected = True
                    changed = True
        logger.debug("Selection settled after %d pass(es)", passes)

    def _reset_selection(self) -> None:
        for group in self._groups:
            group.selected = False
            for leaf in group.leaves:
                leaf.selected = False

    def _make_current(self, leaf: Leaf) -> None:
        self._reset_selection()
        leaf.selected = True
        self._current = leaf
        self.on_selection_changed()
