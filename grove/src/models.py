"""Grove data models for the two-level item index.

Defines positional coordinates, node references, check and selection
state, and the Group/Leaf nodes owned by a HierarchicalIndexTree. All
models are plain dataclasses with ``to_dict`` helpers for API responses.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class CheckState(str, Enum):
    """Displayed check value of a node."""

    CHECKED = "checked"
    UNCHECKED = "unchecked"
    PARTIALLY_CHECKED = "partially_checked"


class NodeKind(str, Enum):
    """Which level of the forest a node reference points at."""

    GROUP = "group"
    LEAF = "leaf"


class SortPolicy(str, Enum):
    """Ordering applied to coordinates before a batch operation."""

    ASCENDING = "ascending"
    DESCENDING = "descending"
    PARENT_FIRST = "parent_first"
    CHILD_FIRST = "child_first"


class SelectionMode(str, Enum):
    """How a selection request combines with the current selection."""

    REPLACE = "replace"
    EXTEND = "extend"


class OutOfRangeCoordinateError(LookupError):
    """Raised by strict accessors when a coordinate addresses no node."""

    def __init__(self, row: int, col: int | None = None) -> None:
        self.row = row
        self.col = col
        where = f"({row}, {col})" if col is not None else f"row {row}"
        super().__init__(f"No node at {where}")


@dataclass(frozen=True, order=True)
class Coordinate:
    """Positional address of a leaf, or of a whole group when col is -1.

    Attributes:
        row: Position of the group in the forest.
        col: Position of the leaf in its group, or -1 for the group itself.
    """

    row: int
    col: int = -1

    @classmethod
    def group(cls, row: int) -> Coordinate:
        """Build the whole-group marker for *row*."""
        return cls(row, -1)

    @property
    def is_group_marker(self) -> bool:
        return self.col == -1

    def to_dict(self) -> dict[str, int]:
        """Serialize to dictionary."""
        return {"row": self.row, "col": self.col}

    def __repr__(self) -> str:
        return f"Coordinate({self.row}, {self.col})"


@dataclass(frozen=True)
class NodeRef:
    """A node reference tagged with its kind.

    Presentation layers pass these instead of widget items so that the
    tree can branch on ``kind`` rather than inspecting node types.
    For groups ``col`` is ignored.
    """

    kind: NodeKind
    row: int
    col: int = -1

    @classmethod
    def group(cls, row: int) -> NodeRef:
        return cls(NodeKind.GROUP, row, -1)

    @classmethod
    def leaf(cls, row: int, col: int) -> NodeRef:
        return cls(NodeKind.LEAF, row, col)

    @property
    def coordinate(self) -> Coordinate:
        if self.kind is NodeKind.GROUP:
            return Coordinate.group(self.row)
        return Coordinate(self.row, self.col)


def derive_check_state(flags: Iterable[bool]) -> CheckState:
    """Collapse leaf check flags into the group's tri-state value.

    An empty iterable counts as checked; groups are never empty while
    exposed to callers.
    """
    seen_checked = False
    seen_unchecked = False
    for flag in flags:
        if flag:
            seen_checked = True
        else:
            seen_unchecked = True
    if seen_checked and seen_unchecked:
        return CheckState.PARTIALLY_CHECKED
    if seen_unchecked:
        return CheckState.UNCHECKED
    return CheckState.CHECKED


@dataclass
class Leaf:
    """Second-level node carrying its own check and selection flags.

    Attributes:
        label: Display label.
        checked: Check flag.
        selected: Selection flag.
        icon: Opaque icon handle supplied by the presentation layer.
    """

    label: str
    checked: bool = True
    selected: bool = False
    icon: str | None = None

    @property
    def check_state(self) -> CheckState:
        return CheckState.CHECKED if self.checked else CheckState.UNCHECKED

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "label": self.label,
            "checked": self.checked,
            "check_state": self.check_state.value,
            "selected": self.selected,
            "icon": self.icon,
        }


@dataclass
class Group:
    """Top-level node owning an ordered sequence of leaves.

    ``checked`` is the binary flag behind the group's own check box;
    ``check_state`` is always derived from the leaves and never stored.

    Attributes:
        label: Display label.
        leaves: Owned leaves, in display order.
        checked: Binary check flag of the group box.
        selected: Selection flag of the group row.
        expanded: Whether the presentation layer shows the leaves.
        icon: Opaque icon handle supplied by the presentation layer.
    """

    label: str
    leaves: list[Leaf] = field(default_factory=list)
    checked: bool = True
    selected: bool = False
    expanded: bool = True
    icon: str | None = None

    @property
    def check_state(self) -> CheckState:
        return derive_check_state(leaf.checked for leaf in self.leaves)

    @property
    def fully_selected(self) -> bool:
        return bool(self.leaves) and all(leaf.selected for leaf in self.leaves)

    def __len__(self) -> int:
        return len(self.leaves)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary, leaves included."""
        return {
            "label": self.label,
            "checked": self.checked,
            "check_state": self.check_state.value,
            "selected": self.selected,
            "expanded": self.expanded,
            "icon": self.icon,
            "leaves": [leaf.to_dict() for leaf in self.leaves],
        }


@dataclass
class TreeConfig:
    """Configuration for a HierarchicalIndexTree.

    Attributes:
        group_icon: Default icon attached to newly created groups.
        leaf_icon: Default icon attached to newly created leaves.
        expand_on_insert: Expand a group whenever a leaf is added to it.
        max_label_length: Labels are truncated to this length at the API boundary.
    """

    group_icon: str | None = None
    leaf_icon: str | None = None
    expand_on_insert: bool = True
    max_label_length: int = 256
