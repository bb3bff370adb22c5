"""Tests for Grove data models."""

from __future__ import annotations

import pytest

from grove.src.models import (
    CheckState,
    Coordinate,
    Group,
    Leaf,
    NodeKind,
    NodeRef,
    OutOfRangeCoordinateError,
    TreeConfig,
    derive_check_state,
)


class TestCoordinate:
    """Tests for the positional Coordinate value."""

    def test_orders_row_then_col(self) -> None:
        coords = [Coordinate(1, 0), Coordinate(0, 2), Coordinate(0, -1), Coordinate(0, 1)]
        assert sorted(coords) == [
            Coordinate(0, -1),
            Coordinate(0, 1),
            Coordinate(0, 2),
            Coordinate(1, 0),
        ]

    def test_hashable_and_equal_by_value(self) -> None:
        assert {Coordinate(0, 1), Coordinate(0, 1)} == {Coordinate(0, 1)}

    def test_group_marker(self) -> None:
        marker = Coordinate.group(3)
        assert marker == Coordinate(3, -1)
        assert marker.is_group_marker
        assert not Coordinate(3, 0).is_group_marker

    def test_to_dict(self) -> None:
        assert Coordinate(2, 5).to_dict() == {"row": 2, "col": 5}

    def test_immutable(self) -> None:
        coord = Coordinate(0, 0)
        with pytest.raises(AttributeError):
            coord.row = 1  # type: ignore[misc]


class TestNodeRef:
    """Tests for tagged node references."""

    def test_group_ref_coordinate_is_marker(self) -> None:
        ref = NodeRef.group(2)
        assert ref.kind is NodeKind.GROUP
        assert ref.coordinate == Coordinate(2, -1)

    def test_group_ref_ignores_col(self) -> None:
        ref = NodeRef(NodeKind.GROUP, 1, 7)
        assert ref.coordinate == Coordinate(1, -1)

    def test_leaf_ref_coordinate(self) -> None:
        ref = NodeRef.leaf(1, 4)
        assert ref.kind is NodeKind.LEAF
        assert ref.coordinate == Coordinate(1, 4)


class TestDeriveCheckState:
    """Tests for the tri-state derivation."""

    @pytest.mark.parametrize(
        "flags, expected",
        [
            ([True], CheckState.CHECKED),
            ([True, True, True], CheckState.CHECKED),
            ([False], CheckState.UNCHECKED),
            ([False, False], CheckState.UNCHECKED),
            ([True, False], CheckState.PARTIALLY_CHECKED),
            ([False, True, True], CheckState.PARTIALLY_CHECKED),
        ],
    )
    def test_states(self, flags: list[bool], expected: CheckState) -> None:
        assert derive_check_state(flags) is expected

    def test_accepts_generator(self) -> None:
        assert derive_check_state(f for f in (True, False)) is CheckState.PARTIALLY_CHECKED


class TestLeafAndGroup:
    """Tests for Leaf and Group nodes."""

    def test_leaf_defaults(self) -> None:
        leaf = Leaf(label="cloud_0")
        assert leaf.checked is True
        assert leaf.selected is False
        assert leaf.icon is None
        assert leaf.check_state is CheckState.CHECKED

    def test_leaf_to_dict(self) -> None:
        data = Leaf(label="cloud_0", checked=False, icon="cloud.png").to_dict()
        assert data == {
            "label": "cloud_0",
            "checked": False,
            "check_state": "unchecked",
            "selected": False,
            "icon": "cloud.png",
        }

    def test_group_check_state_is_derived(self) -> None:
        group = Group(label="scan", leaves=[Leaf("a"), Leaf("b", checked=False)])
        assert group.check_state is CheckState.PARTIALLY_CHECKED
        group.leaves[1].checked = True
        assert group.check_state is CheckState.CHECKED

    def test_fully_selected(self) -> None:
        group = Group(label="scan", leaves=[Leaf("a", selected=True), Leaf("b")])
        assert not group.fully_selected
        group.leaves[1].selected = True
        assert group.fully_selected

    def test_empty_group_not_fully_selected(self) -> None:
        assert not Group(label="scan").fully_selected

    def test_group_to_dict_includes_leaves(self) -> None:
        group = Group(label="scan", leaves=[Leaf("a"), Leaf("b", checked=False)])
        data = group.to_dict()
        assert data["label"] == "scan"
        assert data["check_state"] == "partially_checked"
        assert data["expanded"] is True
        assert [leaf["label"] for leaf in data["leaves"]] == ["a", "b"]

    def test_group_len(self) -> None:
        assert len(Group(label="scan", leaves=[Leaf("a"), Leaf("b")])) == 2


class TestTreeConfig:
    """Tests for TreeConfig defaults."""

    def test_defaults(self) -> None:
        cfg = TreeConfig()
        assert cfg.group_icon is None
        assert cfg.leaf_icon is None
        assert cfg.expand_on_insert is True
        assert cfg.max_label_length == 256


class TestOutOfRangeCoordinateError:
    """Tests for the lookup error."""

    def test_is_lookup_error(self) -> None:
        assert issubclass(OutOfRangeCoordinateError, LookupError)

    def test_message_with_col(self) -> None:
        err = OutOfRangeCoordinateError(1, 2)
        assert "(1, 2)" in str(err)
        assert err.row == 1
        assert err.col == 2

    def test_message_row_only(self) -> None:
        assert "row 4" in str(OutOfRangeCoordinateError(4))
