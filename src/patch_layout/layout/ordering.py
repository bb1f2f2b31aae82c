"""Row ordering: the total order that fixes vertical position within a column."""

from __future__ import annotations

from dataclasses import dataclass

from patch_layout.config import LayoutConfig
from patch_layout.types import Role


@dataclass(frozen=True, order=True)
class RowOrderTuple:
    """Sort key for one block.

    Field order is the comparison order. ``block_id`` is unique, so two
    distinct blocks never compare equal.
    """

    column: int
    cluster_key: str
    depth: int
    role_priority: int
    block_id: str


def compute_row_order_tuple(
    block_id: str,
    column: int,
    cluster_key: str,
    depth: int,
    role: Role,
    config: LayoutConfig,
) -> RowOrderTuple:
    return RowOrderTuple(
        column=column,
        cluster_key=cluster_key,
        depth=depth,
        role_priority=config.role_priority[role],
        block_id=block_id,
    )


def compare_row_order(a: RowOrderTuple, b: RowOrderTuple) -> int:
    """Three-way comparison: -1, 0 or 1."""
    if a < b:
        return -1
    if b < a:
        return 1
    return 0


def sort_by_row_order(tuples: list[RowOrderTuple]) -> list[RowOrderTuple]:
    return sorted(tuples)


def tuple_to_row_key(t: RowOrderTuple) -> str:
    return f"col:{t.column}|cluster:{t.cluster_key}|depth:{t.depth}|rolePri:{t.role_priority}|id:{t.block_id}"
