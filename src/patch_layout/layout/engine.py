"""Column layout engine: the full pipeline from graph snapshot to LayoutResult.

Phases:
  1. Validation
  2. Dependency graph, SCCs, meta-DAG, depth
  3. Cluster keys and row ordering
  4. Measuring and grid placement
  5. Proximity enforcement
  6. Connectors and overflow links
  7. Node views, bounds, debug counters
"""

from __future__ import annotations

import logging

from patch_layout.config import LayoutConfig
from patch_layout.ir.graph import GraphData, UILayoutState, validate_graph
from patch_layout.layout.clustering import cluster_key_of, compute_cluster_keys
from patch_layout.layout.columns import role_to_column
from patch_layout.layout.connectors import derive_connectors
from patch_layout.layout.depgraph import (
    build_adjacency_graph,
    build_meta_dag,
    build_scc_map,
    compute_block_depths,
    compute_depths,
    process_sccs,
    tarjan_scc,
)
from patch_layout.layout.ordering import compute_row_order_tuple, sort_by_row_order, tuple_to_row_key
from patch_layout.layout.placement import OrderedBlock, compute_bounds, place_blocks_in_grid
from patch_layout.layout.proximity import enforce_proximity
from patch_layout.layout.sizing import measure_block
from patch_layout.layout.types import LayoutDebugInfo, LayoutNodeView, LayoutResult

logger = logging.getLogger(__name__)


class ColumnLayout:
    """Deterministic role-column layout engine.

    Holds only configuration; every call to :meth:`layout` builds its own
    working state, so one engine can serve any number of callers.
    """

    def __init__(self, config: LayoutConfig | None = None) -> None:
        self.config = config or LayoutConfig()

    def layout(self, graph: GraphData, ui_state: UILayoutState) -> LayoutResult:
        config = self.config
        validate_graph(graph)
        blocks = graph.block_map()

        adj = build_adjacency_graph(graph)
        sccs = process_sccs(tarjan_scc(adj))
        scc_map = build_scc_map(sccs)
        meta = build_meta_dag(adj, sccs)
        depths = compute_block_depths(compute_depths(meta), scc_map)

        cluster_keys = compute_cluster_keys(graph.blocks, graph.bus_bindings, ui_state.focused_bus_id)

        tuples = sort_by_row_order(
            [
                compute_row_order_tuple(
                    block.id,
                    role_to_column(block.role, config),
                    cluster_key_of(cluster_keys, block.id),
                    depths.get(block.id, 0),
                    block.role,
                    config,
                )
                for block in graph.blocks
            ]
        )

        ordered: list[OrderedBlock] = []
        for t in tuples:
            size = measure_block(blocks[t.block_id], ui_state.density, config)
            ordered.append(OrderedBlock(block_id=t.block_id, column=t.column, cluster_key=t.cluster_key, w=size.w, h=size.h))

        placements, columns = place_blocks_in_grid(ordered, ui_state.density, config)
        stats = enforce_proximity(
            graph.direct_bindings,
            placements,
            cluster_keys,
            depths,
            ui_state.focused_block_id,
            config,
        )

        connectors, overflow_links = derive_connectors(
            graph.direct_bindings,
            placements,
            blocks,
            ui_state.density,
            ui_state.viewport_rect_world,
            config,
        )

        nodes: dict[str, LayoutNodeView] = {}
        for t in tuples:
            placement = placements[t.block_id]
            scc = scc_map.get(t.block_id)
            in_cycle = scc is not None and scc.is_cycle
            nodes[t.block_id] = LayoutNodeView(
                block_id=t.block_id,
                x=placement.x,
                y=placement.y,
                w=placement.w,
                h=placement.h,
                column=t.column,
                row_key=tuple_to_row_key(t),
                role=blocks[t.block_id].role,
                depth=t.depth,
                cluster_key=t.cluster_key,
                scc_id=scc.id if in_cycle else None,
                is_cycle_group_leader=in_cycle and scc.leader == t.block_id,
            )

        debug = LayoutDebugInfo(
            total_blocks=len(graph.blocks),
            total_connectors=len(connectors),
            total_overflow_links=len(overflow_links),
            column_count=len(columns),
            scc_count=sum(1 for scc in sccs if scc.is_cycle),
            max_depth=max(depths.values(), default=0),
            cluster_count=len(set(cluster_keys.values())),
            proximity=stats,
        )
        logger.debug(
            "layout: %d blocks, %d connectors, %d overflow links, %d proximity moves",
            debug.total_blocks,
            debug.total_connectors,
            debug.total_overflow_links,
            stats.moves_made,
        )

        return LayoutResult(
            nodes=nodes,
            connectors=connectors,
            overflow_links=overflow_links,
            bounds_world=compute_bounds(placements),
            columns=columns,
            debug=debug,
        )


def compute_layout(graph: GraphData, ui_state: UILayoutState, config: LayoutConfig | None = None) -> LayoutResult:
    """Lay out ``graph`` for ``ui_state``.

    Pure: identical inputs always produce an equal result, and nothing is
    retained between calls.

    Raises:
        ValidationError: On duplicate block ids or bindings to undeclared ports.
    """
    return ColumnLayout(config).layout(graph, ui_state)
