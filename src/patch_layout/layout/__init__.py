"""Layout engine public API."""

from __future__ import annotations

from patch_layout.layout.clustering import UNKNOWN_CLUSTER, bus_signature, compute_cluster_keys
from patch_layout.layout.columns import column_to_roles, role_to_column
from patch_layout.layout.connectors import compute_port_anchor, derive_connectors
from patch_layout.layout.depgraph import (
    SCC,
    AdjacencyGraph,
    MetaDAG,
    MetaNode,
    build_adjacency_graph,
    build_meta_dag,
    build_scc_map,
    compute_block_depths,
    compute_depths,
    meta_key_of,
    meta_node_key,
    process_sccs,
    scc_id,
    tarjan_scc,
)
from patch_layout.layout.engine import ColumnLayout, compute_layout
from patch_layout.layout.ordering import (
    RowOrderTuple,
    compare_row_order,
    compute_row_order_tuple,
    sort_by_row_order,
    tuple_to_row_key,
)
from patch_layout.layout.placement import OrderedBlock, compute_bounds, place_blocks_in_grid
from patch_layout.layout.proximity import enforce_proximity, sort_edges_by_priority
from patch_layout.layout.sizing import measure_block
from patch_layout.layout.types import (
    BlockPlacement,
    ColumnLayoutMeta,
    LayoutConnector,
    LayoutDebugInfo,
    LayoutNodeView,
    LayoutResult,
    OverflowLink,
    OverflowSource,
    PortAnchor,
    ProximityStats,
)

__all__ = [
    "SCC",
    "UNKNOWN_CLUSTER",
    "AdjacencyGraph",
    "BlockPlacement",
    "ColumnLayout",
    "ColumnLayoutMeta",
    "LayoutConnector",
    "LayoutDebugInfo",
    "LayoutNodeView",
    "LayoutResult",
    "MetaDAG",
    "MetaNode",
    "OrderedBlock",
    "OverflowLink",
    "OverflowSource",
    "PortAnchor",
    "ProximityStats",
    "RowOrderTuple",
    "build_adjacency_graph",
    "build_meta_dag",
    "build_scc_map",
    "bus_signature",
    "column_to_roles",
    "compare_row_order",
    "compute_block_depths",
    "compute_bounds",
    "compute_cluster_keys",
    "compute_depths",
    "compute_layout",
    "compute_port_anchor",
    "compute_row_order_tuple",
    "derive_connectors",
    "enforce_proximity",
    "measure_block",
    "meta_key_of",
    "meta_node_key",
    "place_blocks_in_grid",
    "process_sccs",
    "role_to_column",
    "scc_id",
    "sort_by_row_order",
    "sort_edges_by_priority",
    "tarjan_scc",
    "tuple_to_row_key",
]
