"""Shared fixtures for Grove tests."""

from __future__ import annotations

import pytest

from grove.src.models import Coordinate, TreeConfig
from grove.src.tree import HierarchicalIndexTree


@pytest.fixture
def empty_tree() -> HierarchicalIndexTree:
    """A tree with no groups."""
    return HierarchicalIndexTree()


@pytest.fixture
def tree() -> HierarchicalIndexTree:
    """Two groups: 'scan_a' with three leaves, 'scan_b' with one.

    Layout (all leaves checked, nothing selected)::

        (0, 0) scan_a / cloud_0
        (0, 1) scan_a / cloud_1
        (0, 2) scan_a / cloud_2
        (1, 0) scan_b / cloud_3
    """
    t = HierarchicalIndexTree()
    t.insert(Coordinate(-1, -1), "scan_a", "cloud_0")
    t.insert(Coordinate(0, -1), "scan_a", "cloud_1")
    t.insert(Coordinate(0, -1), "scan_a", "cloud_2")
    t.insert(Coordinate(-1, -1), "scan_b", "cloud_3")
    return t


@pytest.fixture
def icon_config() -> TreeConfig:
    """Config with default icons set."""
    return TreeConfig(group_icon="folder.png", leaf_icon="cloud.png")
