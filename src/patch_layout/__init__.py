"""patch-layout: deterministic column layout for node-and-wire dataflow patches."""

from typing import Any

from patch_layout.config import BlockSize, LayoutConfig
from patch_layout.errors import ValidationError
from patch_layout.ir.graph import GraphData, UILayoutState
from patch_layout.layout import LayoutResult, compute_layout
from patch_layout.types import DensityMode, Role


def layout_document(doc: dict[str, Any], ui: dict[str, Any] | None = None, config: LayoutConfig | None = None) -> dict[str, Any]:
    """Lay out a JSON-shaped graph document and return the JSON-shaped result.

    Args:
        doc: GraphData document (``blocks``, ``directBindings``, ``busBindings``).
        ui: UILayoutState document; None means normal density with no focus.
        config: Layout constants and tables; None uses the defaults.

    Returns:
        ``LayoutResult.to_dict()`` of the computed layout.

    Raises:
        ValidationError: If either document is malformed or the graph is invalid.
    """
    graph = GraphData.from_dict(doc)
    ui_state = UILayoutState.from_dict(ui or {})
    return compute_layout(graph, ui_state, config).to_dict()


__all__ = [
    "BlockSize",
    "DensityMode",
    "GraphData",
    "LayoutConfig",
    "LayoutResult",
    "Role",
    "UILayoutState",
    "ValidationError",
    "compute_layout",
    "layout_document",
]
