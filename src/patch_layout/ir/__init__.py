"""Input model: graph snapshot and UI state."""

from patch_layout.ir.graph import (
    BlockId,
    BusBinding,
    DirectBinding,
    GraphData,
    LayoutBlockData,
    PortInfo,
    PortRef,
    UILayoutState,
    validate_graph,
)

__all__ = [
    "BlockId",
    "BusBinding",
    "DirectBinding",
    "GraphData",
    "LayoutBlockData",
    "PortInfo",
    "PortRef",
    "UILayoutState",
    "validate_graph",
]
