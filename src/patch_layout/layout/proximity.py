"""Proximity enforcement: pull consumers toward their producers.

Reorders blocks inside their own column and cluster so that bound blocks sit
closer together. Moves never cross cluster boundaries, never cross a block
whose depth would be inverted by the move, and are only kept when they
shorten the total edge length. A global move budget and an iteration cap
bound the work; an iteration that moves nothing or improves the total length
by less than ``min_improvement_epsilon`` ends the loop.
"""

from __future__ import annotations

import logging
import math

from patch_layout.config import LayoutConfig
from patch_layout.ir.graph import BlockId, DirectBinding
from patch_layout.layout.clustering import cluster_key_of
from patch_layout.layout.placement import stack_column
from patch_layout.layout.types import BlockPlacement, ProximityStats

logger = logging.getLogger(__name__)

FOCUSED_CONSUMER_PRIORITY = 1_000_000
FOCUSED_PRODUCER_PRIORITY = 999_999
BASE_PRIORITY = 1000


# ─── Edge Priority ───────────────────────────────────────────────────────────


def compute_edge_priority(edge: DirectBinding, focused_block_id: BlockId | None, depths: dict[BlockId, int]) -> int:
    """Higher is processed first; shallow consumers before deep ones."""
    if focused_block_id is not None:
        if edge.to.block_id == focused_block_id:
            return FOCUSED_CONSUMER_PRIORITY
        if edge.from_.block_id == focused_block_id:
            return FOCUSED_PRODUCER_PRIORITY
    return BASE_PRIORITY - depths.get(edge.to.block_id, 0)


def sort_edges_by_priority(
    edges: list[DirectBinding],
    focused_block_id: BlockId | None,
    depths: dict[BlockId, int],
) -> list[DirectBinding]:
    return sorted(
        edges,
        key=lambda e: (
            -compute_edge_priority(e, focused_block_id, depths),
            e.to.block_id,
            e.from_.block_id,
            e.to.port_id,
            e.from_.port_id,
            e.id,
        ),
    )


# ─── Edge Length ─────────────────────────────────────────────────────────────


def total_edge_length(edges: list[DirectBinding], placements: dict[BlockId, BlockPlacement]) -> float:
    """Sum of center-to-center distances over edges with both ends placed."""
    total = 0.0
    for edge in edges:
        src = placements.get(edge.from_.block_id)
        dst = placements.get(edge.to.block_id)
        if src is None or dst is None:
            continue
        total += math.hypot(dst.x - src.x, dst.center_y - src.center_y)
    return total


# ─── Relocation ──────────────────────────────────────────────────────────────


def _column_blocks(placements: dict[BlockId, BlockPlacement], column: int) -> list[BlockPlacement]:
    return sorted((p for p in placements.values() if p.column == column), key=lambda p: (p.y, p.block_id))


def _crosses_depth(
    cluster_blocks: list[BlockPlacement],
    current: int,
    target: int,
    depth: int,
    depths: dict[BlockId, int],
) -> bool:
    lo, hi = min(current, target), max(current, target)
    for i in range(lo, hi + 1):
        if i == current:
            continue
        other = depths.get(cluster_blocks[i].block_id, 0)
        if target < current and other > depth:
            return True
        if target > current and other < depth:
            return True
    return False


def attempt_reorder(
    block_id: BlockId,
    target_y: float,
    placements: dict[BlockId, BlockPlacement],
    cluster_keys: dict[BlockId, str],
    depths: dict[BlockId, int],
    edges: list[DirectBinding],
    config: LayoutConfig,
) -> bool:
    """Move ``block_id`` to the slot in its cluster nearest ``target_y``.

    The whole column is restacked after the move. The move is rolled back
    unless it strictly shortens the total edge length.

    Returns:
        True if the move was kept.
    """
    placement = placements.get(block_id)
    if placement is None:
        return False

    cluster = cluster_key_of(cluster_keys, block_id)
    depth = depths.get(block_id, 0)
    column_blocks = _column_blocks(placements, placement.column)
    cluster_blocks = [p for p in column_blocks if cluster_key_of(cluster_keys, p.block_id) == cluster]

    current = next(i for i, p in enumerate(cluster_blocks) if p.block_id == block_id)
    target = current
    best = abs(cluster_blocks[current].y - target_y)
    for i, p in enumerate(cluster_blocks):
        distance = abs(p.y - target_y)
        if distance < best:
            best = distance
            target = i

    if target == current:
        return False
    if _crosses_depth(cluster_blocks, current, target, depth, depths):
        return False

    moved = cluster_blocks.pop(current)
    cluster_blocks.insert(target, moved)
    rank: dict[BlockId, int] = {p.block_id: i for i, p in enumerate(column_blocks)}
    rank.update({p.block_id: i for i, p in enumerate(cluster_blocks)})
    new_order = sorted(column_blocks, key=lambda p: (cluster_key_of(cluster_keys, p.block_id), rank[p.block_id]))

    length_before = total_edge_length(edges, placements)
    previous = {p.block_id: p for p in column_blocks}
    for p in stack_column(new_order, lambda q: cluster_key_of(cluster_keys, q.block_id), config):
        placements[p.block_id] = p

    if total_edge_length(edges, placements) < length_before:
        return True

    placements.update(previous)
    return False


# ─── Main Loop ───────────────────────────────────────────────────────────────


def enforce_proximity(
    edges: list[DirectBinding],
    placements: dict[BlockId, BlockPlacement],
    cluster_keys: dict[BlockId, str],
    depths: dict[BlockId, int],
    focused_block_id: BlockId | None = None,
    config: LayoutConfig | None = None,
) -> ProximityStats:
    """Reorder blocks within columns to shorten edges.

    ``placements`` is the caller's working copy and is updated in place.
    """
    config = config or LayoutConfig()
    initial_length = total_edge_length(edges, placements)
    sorted_edges = sort_edges_by_priority(edges, focused_block_id, depths)
    moves_made = 0
    iterations = 0

    for _ in range(config.max_proximity_iterations):
        if moves_made >= config.move_budget_per_pass:
            break
        iterations += 1
        moves_this_iteration = 0
        length_before = total_edge_length(edges, placements)

        for edge in sorted_edges:
            if moves_made >= config.move_budget_per_pass:
                break
            src = placements.get(edge.from_.block_id)
            dst = placements.get(edge.to.block_id)
            if src is None or dst is None:
                continue
            if abs(dst.center_y - src.center_y) <= config.y_snap:
                continue

            if src.column == dst.column:
                target_y = src.y + src.h + config.v_gap
            else:
                target_y = src.center_y - dst.h / 2

            if attempt_reorder(edge.to.block_id, target_y, placements, cluster_keys, depths, edges, config):
                moves_made += 1
                moves_this_iteration += 1

        improvement = length_before - total_edge_length(edges, placements)
        logger.debug("proximity iteration %d: %d moves, improvement %.2f", iterations, moves_this_iteration, improvement)
        if moves_this_iteration == 0 or improvement < config.min_improvement_epsilon:
            break

    return ProximityStats(
        iterations=iterations,
        moves_made=moves_made,
        initial_length=initial_length,
        final_length=total_edge_length(edges, placements),
    )
