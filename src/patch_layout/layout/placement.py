"""Grid placement: stack ordered blocks top-to-bottom inside fixed columns."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace

from patch_layout.config import LayoutConfig
from patch_layout.layout.columns import column_to_roles
from patch_layout.layout.types import BlockPlacement, ColumnLayoutMeta
from patch_layout.types import DensityMode, Rect


@dataclass(frozen=True)
class OrderedBlock:
    """A block ready for placement, already in row order."""

    block_id: str
    column: int
    cluster_key: str
    w: float
    h: float


def compute_column_positions(columns: list[int], density: DensityMode, config: LayoutConfig) -> list[ColumnLayoutMeta]:
    """Lay used columns out left to right with a fixed gap."""
    block_width = config.block_sizes[density].w
    metas: list[ColumnLayoutMeta] = []
    x = 0
    for column in sorted(set(columns)):
        metas.append(
            ColumnLayoutMeta(column_index=column, x=x, width=block_width, roles=column_to_roles(column, config))
        )
        x += block_width + config.col_gap
    return metas


def stack_column(
    blocks: list[BlockPlacement],
    cluster_of: Callable[[BlockPlacement], str],
    config: LayoutConfig,
) -> list[BlockPlacement]:
    """Assign y coordinates to one column's blocks in the given order.

    Adds ``v_gap`` after every block and ``cluster_gap`` wherever the cluster
    key (as returned by ``cluster_of``) changes.
    """
    stacked: list[BlockPlacement] = []
    y: float = 0
    last_cluster: str | None = None
    for placement in blocks:
        cluster = cluster_of(placement)
        if last_cluster is not None and cluster != last_cluster:
            y += config.cluster_gap
        stacked.append(replace(placement, y=y))
        y += placement.h + config.v_gap
        last_cluster = cluster
    return stacked


def place_blocks_in_grid(
    ordered_blocks: list[OrderedBlock],
    density: DensityMode,
    config: LayoutConfig,
) -> tuple[dict[str, BlockPlacement], list[ColumnLayoutMeta]]:
    """Place row-ordered blocks into their columns.

    The input order is preserved as the top-to-bottom order in each column.

    Returns:
        (placements keyed by block id in input order, column metadata)
    """
    columns = compute_column_positions([b.column for b in ordered_blocks], density, config)
    column_x: dict[int, float] = {meta.column_index: meta.x for meta in columns}

    per_column: dict[int, list[BlockPlacement]] = {meta.column_index: [] for meta in columns}
    for block in ordered_blocks:
        per_column[block.column].append(
            BlockPlacement(
                block_id=block.block_id,
                x=column_x[block.column],
                y=0,
                w=block.w,
                h=block.h,
                column=block.column,
                cluster_key=block.cluster_key,
            )
        )

    stacked: dict[str, BlockPlacement] = {}
    for column_blocks in per_column.values():
        for placement in stack_column(column_blocks, lambda p: p.cluster_key, config):
            stacked[placement.block_id] = placement

    placements = {block.block_id: stacked[block.block_id] for block in ordered_blocks}
    return placements, columns


def compute_bounds(placements: dict[str, BlockPlacement]) -> Rect:
    """World-space bounding box of all placements (zero rect when empty)."""
    if not placements:
        return Rect(x=0, y=0, width=0, height=0)
    min_x = min(p.x for p in placements.values())
    min_y = min(p.y for p in placements.values())
    max_x = max(p.x + p.w for p in placements.values())
    max_y = max(p.y + p.h for p in placements.values())
    return Rect(x=min_x, y=min_y, width=max_x - min_x, height=max_y - min_y)
