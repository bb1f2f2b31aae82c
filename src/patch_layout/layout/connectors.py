"""Connector derivation: drawable connectors vs. overflow chips.

A binding is drawn as a connector only when both anchors are in view, the
density shows wires at all, and the anchors are at most ``lmax`` apart.
Otherwise it becomes an overflow link on the consumer's input port.
"""

from __future__ import annotations

import math

from patch_layout.config import LayoutConfig
from patch_layout.ir.graph import BlockId, DirectBinding, LayoutBlockData
from patch_layout.layout.types import (
    BlockPlacement,
    LayoutConnector,
    OverflowLink,
    OverflowSource,
    PortAnchor,
)
from patch_layout.types import ConnectorStyle, DensityMode, OverflowReason, PortDirection, Rect

STRAIGHT_TOLERANCE = 10
ELBOW_MIN_DX = 50


def compute_port_anchor(
    placement: BlockPlacement,
    port_id: str,
    direction: PortDirection,
    block: LayoutBlockData,
    config: LayoutConfig,
) -> PortAnchor:
    """Anchor of a port on the block's left (input) or right (output) rail."""
    if direction is PortDirection.Input:
        index = block.input_index(port_id)
        x = placement.x - config.port_rail_offset
    else:
        index = block.output_index(port_id)
        x = placement.x + placement.w + config.port_rail_offset
    y = placement.y + config.top_padding + max(index, 0) * config.port_row_height
    return PortAnchor(block_id=placement.block_id, port_id=port_id, x=x, y=y)


def compute_distance(a: PortAnchor, b: PortAnchor) -> float:
    return math.hypot(b.x - a.x, b.y - a.y)


def determine_connector_style(a: PortAnchor, b: PortAnchor) -> ConnectorStyle:
    dx = abs(b.x - a.x)
    dy = abs(b.y - a.y)
    if dx < STRAIGHT_TOLERANCE or dy < STRAIGHT_TOLERANCE:
        return ConnectorStyle.Straight
    if dx > ELBOW_MIN_DX:
        return ConnectorStyle.Elbow
    return ConnectorStyle.Curve


def classify_binding(
    from_anchor: PortAnchor,
    to_anchor: PortAnchor,
    density: DensityMode,
    viewport: Rect | None,
    config: LayoutConfig,
) -> OverflowReason | None:
    """Overflow reason for a binding, or None when it can be drawn."""
    if viewport is not None:
        visible = viewport.contains(from_anchor.x, from_anchor.y, config.cull_margin) and viewport.contains(
            to_anchor.x, to_anchor.y, config.cull_margin
        )
        if not visible:
            return OverflowReason.Culled
    if density is DensityMode.Overview:
        return OverflowReason.DensityCollapsed
    if compute_distance(from_anchor, to_anchor) > config.lmax:
        return OverflowReason.TooLong
    return None


def derive_connectors(
    edges: list[DirectBinding],
    placements: dict[BlockId, BlockPlacement],
    blocks: dict[BlockId, LayoutBlockData],
    density: DensityMode,
    viewport: Rect | None,
    config: LayoutConfig,
) -> tuple[list[LayoutConnector], list[OverflowLink]]:
    """Split bindings into connectors and overflow links, in input order.

    Bindings with an unplaced or unknown endpoint are skipped.
    """
    connectors: list[LayoutConnector] = []
    overflow_links: list[OverflowLink] = []

    for edge in edges:
        src = placements.get(edge.from_.block_id)
        dst = placements.get(edge.to.block_id)
        src_block = blocks.get(edge.from_.block_id)
        dst_block = blocks.get(edge.to.block_id)
        if src is None or dst is None or src_block is None or dst_block is None:
            continue

        from_anchor = compute_port_anchor(src, edge.from_.port_id, PortDirection.Output, src_block, config)
        to_anchor = compute_port_anchor(dst, edge.to.port_id, PortDirection.Input, dst_block, config)

        reason = classify_binding(from_anchor, to_anchor, density, viewport, config)
        if reason is None:
            connectors.append(
                LayoutConnector(
                    id=edge.id,
                    from_=from_anchor,
                    to=to_anchor,
                    style=determine_connector_style(from_anchor, to_anchor),
                )
            )
        else:
            overflow_links.append(
                OverflowLink(
                    id=edge.id,
                    to=to_anchor,
                    from_=OverflowSource(
                        block_id=edge.from_.block_id,
                        port_id=edge.from_.port_id,
                        block_name=src_block.label,
                    ),
                    reason=reason,
                )
            )

    return connectors, overflow_links
