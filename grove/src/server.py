"""FastAPI router for the Grove item index.

Exposes the index tree to a presentation layer: insertion and removal,
check-box clicks, selection changes, coordinate queries, and batch
ordering. Designed to be mounted at /api/grove/ by the parent
application.

The router adds no tree semantics of its own. Requests the tree
silently ignores (invalid coordinates) are answered with
``{"applied": false}`` rather than an error.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from grove.src.models import (
    Coordinate,
    NodeKind,
    NodeRef,
    OutOfRangeCoordinateError,
    SelectionMode,
    SortPolicy,
    TreeConfig,
)
from grove.src.tree import HierarchicalIndexTree
from shared.hardening import ErrorFormatter, InputValidator, ValidationError

logger = logging.getLogger(__name__)

router = APIRouter()

# ---------------------------------------------------------------------------
# Module-level tree instance (initialized by init_grove_tree)
# ---------------------------------------------------------------------------

_tree: HierarchicalIndexTree | None = None
_validator = InputValidator()
_formatter = ErrorFormatter()


def init_grove_tree(config: TreeConfig | None = None) -> HierarchicalIndexTree:
    """Create the tree served by this router, replacing any previous one.

    Call this once at application startup before any requests are served.

    Args:
        config: Tree configuration. Uses defaults when None.

    Returns:
        The new HierarchicalIndexTree.
    """
    global _tree

    _tree = HierarchicalIndexTree(config)
    logger.info("Grove tree initialized")
    return _tree


def get_tree() -> HierarchicalIndexTree:
    """Return the initialized tree or raise.

    Raises:
        HTTPException: If the tree has not been initialized.
    """
    if _tree is None:
        raise HTTPException(status_code=503, detail="Grove tree not initialized")
    return _tree


def _bad_request(exc: Exception) -> HTTPException:
    return HTTPException(status_code=400, detail=_formatter.format_validation_error(exc).to_dict())


def _coordinate(row: int, col: int) -> Coordinate:
    try:
        return Coordinate(*_validator.validate_coordinate(row, col))
    except ValidationError as exc:
        raise _bad_request(exc) from exc


# ---------------------------------------------------------------------------
# Pydantic request models
# ---------------------------------------------------------------------------


class CoordinateBody(BaseModel):
    """A ``(row, col)`` pair; col -1 marks a whole group."""

    row: int
    col: int = -1


class NodeBody(BaseModel):
    """A tagged node reference."""

    kind: NodeKind
    row: int
    col: int = -1

    def to_ref(self) -> NodeRef:
        return NodeRef(self.kind, self.row, self.col)


class InsertRequest(BaseModel):
    """Request body for inserting a leaf."""

    row: int = -1
    col: int = -1
    group_label: str = Field(..., max_length=1000)
    leaf_label: str = Field(..., max_length=1000)
    select: bool = False
    group_icon: str | None = None
    leaf_icon: str | None = None


class CheckedRequest(BaseModel):
    """Request body for setting a leaf's check flag."""

    checked: bool


class ClickRequest(BaseModel):
    """A click on a node's check box; omit ``checked`` to toggle."""

    node: NodeBody
    checked: bool | None = None


class SelectionRequest(BaseModel):
    """Request body for changing the selection."""

    nodes: list[NodeBody] = Field(default_factory=list)
    mode: SelectionMode = SelectionMode.REPLACE
    deselect: bool = False


class BatchRemoveRequest(BaseModel):
    """Request body for removing several leaves and groups at once."""

    coordinates: list[CoordinateBody] = Field(default_factory=list)


class SortRequest(BaseModel):
    """Request body for ordering coordinates."""

    policy: SortPolicy
    coordinates: list[CoordinateBody] = Field(default_factory=list)


def _coordinates(items: list[Coordinate] | set[Coordinate]) -> list[dict[str, int]]:
    return [c.to_dict() for c in items]


# ---------------------------------------------------------------------------
# Health and snapshot
# ---------------------------------------------------------------------------


@router.get("/health")
def health() -> dict[str, Any]:
    """Report router status."""
    return {
        "status": "ok",
        "service": "grove",
        "version": "0.1.0",
        "tree_initialized": _tree is not None,
    }


@router.get("/tree")
def get_snapshot() -> dict[str, Any]:
    """Return the whole forest."""
    return get_tree().to_dict()


@router.delete("/tree")
def clear_tree() -> dict[str, Any]:
    """Remove every group."""
    tree = get_tree()
    tree.clear()
    return tree.to_dict()


# ---------------------------------------------------------------------------
# Items
# ---------------------------------------------------------------------------


@router.get("/items/{row}/{col}")
def get_item(row: int, col: int) -> dict[str, Any]:
    """Get a single leaf, or a whole group when col is -1.

    Returns:
        Leaf or group dict.
    """
    tree = get_tree()
    coordinate = _coordinate(row, col)
    try:
        if coordinate.is_group_marker:
            return tree.group_at(coordinate.row).to_dict()
        return tree.leaf_at(coordinate).to_dict()
    except OutOfRangeCoordinateError as exc:
        raise HTTPException(
            status_code=404,
            detail=_formatter.format_tree_error(exc).to_dict(),
        ) from exc


@router.post("/items", status_code=201)
def insert_item(body: InsertRequest) -> dict[str, Any]:
    """Insert a leaf, creating a group when the row is out of range.

    Returns:
        Coordinate of the new leaf and the updated snapshot.
    """
    tree = get_tree()
    max_length = tree.config.max_label_length
    try:
        group_label = _validator.validate_label(body.group_label, max_length=max_length)
        leaf_label = _validator.validate_label(body.leaf_label, max_length=max_length)
    except ValidationError as exc:
        raise _bad_request(exc) from exc

    coordinate = tree.insert(
        Coordinate(body.row, body.col),
        group_label,
        leaf_label,
        body.select,
        group_icon=body.group_icon,
        leaf_icon=body.leaf_icon,
    )
    return {"coordinate": coordinate.to_dict(), "tree": tree.to_dict()}


@router.delete("/items/{row}/{col}")
def remove_item(row: int, col: int) -> dict[str, Any]:
    """Remove a leaf; removing the last leaf removes its group."""
    tree = get_tree()
    applied = tree.remove(Coordinate(row, col))
    return {"applied": applied, "tree": tree.to_dict()}


@router.post("/items/remove-batch")
def remove_batch(body: BatchRemoveRequest) -> dict[str, Any]:
    """Remove leaves and whole-group markers in one request."""
    tree = get_tree()
    removed = tree.remove_many(Coordinate(c.row, c.col) for c in body.coordinates)
    return {"removed": removed, "tree": tree.to_dict()}


@router.put("/items/{row}/{col}/checked")
def set_item_checked(row: int, col: int, body: CheckedRequest) -> dict[str, Any]:
    """Set a leaf's check flag and refresh its group."""
    tree = get_tree()
    coordinate = Coordinate(row, col)
    applied = tree.set_checked(coordinate, body.checked)
    result: dict[str, Any] = {"applied": applied}
    if applied:
        result["group_check_state"] = tree.group_at(coordinate.row).check_state.value
    return result


@router.post("/clicks")
def click_item(body: ClickRequest) -> dict[str, Any]:
    """Apply a check-box click on a group or leaf."""
    tree = get_tree()
    node = body.node.to_ref()
    applied = tree.click_check(node, body.checked)
    result: dict[str, Any] = {"applied": applied}
    if applied:
        result["group_check_state"] = tree.group_at(node.row).check_state.value
        result["checked"] = _coordinates(tree.checked_coordinates())
    return result


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------


@router.post("/selection")
def change_selection(body: SelectionRequest) -> dict[str, Any]:
    """Select or deselect nodes, then propagate."""
    tree = get_tree()
    nodes = [n.to_ref() for n in body.nodes]
    if body.deselect:
        tree.deselect(nodes)
    else:
        tree.select(nodes, body.mode)
    return {"selected": _coordinates(sorted(tree.selected_coordinates()))}


@router.delete("/selection")
def clear_selection() -> dict[str, Any]:
    """Deselect everything."""
    tree = get_tree()
    tree.clear_selection()
    return {"selected": []}


# ---------------------------------------------------------------------------
# Coordinates
# ---------------------------------------------------------------------------


@router.get("/coordinates/selected")
def selected_coordinates() -> dict[str, Any]:
    return {"coordinates": _coordinates(sorted(get_tree().selected_coordinates()))}


@router.get("/coordinates/checked")
def checked_coordinates() -> dict[str, Any]:
    return {"coordinates": _coordinates(get_tree().checked_coordinates())}


@router.get("/coordinates/all")
def all_coordinates() -> dict[str, Any]:
    return {"coordinates": _coordinates(get_tree().all_coordinates())}


@router.get("/coordinates/under")
def coordinates_under(kind: NodeKind, row: int, col: int = -1) -> dict[str, Any]:
    """Coordinates a click on the given node acts upon."""
    return {"coordinates": _coordinates(get_tree().coordinates_under(NodeRef(kind, row, col)))}


@router.post("/coordinates/sort")
def sort_coordinates(body: SortRequest) -> dict[str, Any]:
    """Order coordinates for a batch operation."""
    tree = get_tree()
    ordered = tree.sort_coordinates(
        body.policy,
        [Coordinate(c.row, c.col) for c in body.coordinates],
    )
    return {"policy": body.policy.value, "coordinates": _coordinates(ordered)}
