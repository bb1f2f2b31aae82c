"""Layout types shared across the pipeline and its output."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from patch_layout.types import ConnectorStyle, OverflowReason, Rect, Role


@dataclass(frozen=True)
class BlockPlacement:
    """A block's position inside one layout computation."""

    block_id: str
    x: float
    y: float
    w: float
    h: float
    column: int
    cluster_key: str

    @property
    def center_y(self) -> float:
        return self.y + self.h / 2


@dataclass(frozen=True)
class LayoutNodeView:
    """A positioned block with its layout metadata."""

    block_id: str
    x: float
    y: float
    w: float
    h: float
    column: int
    row_key: str
    role: Role
    depth: int
    cluster_key: str
    scc_id: str | None = None
    is_cycle_group_leader: bool = False

    def to_dict(self) -> dict[str, Any]:
        doc: dict[str, Any] = {
            "blockId": self.block_id,
            "x": self.x,
            "y": self.y,
            "w": self.w,
            "h": self.h,
            "column": self.column,
            "rowKey": self.row_key,
            "role": self.role.value,
            "depth": self.depth,
            "clusterKey": self.cluster_key,
        }
        if self.scc_id is not None:
            doc["sccId"] = self.scc_id
            doc["isCycleGroupLeader"] = self.is_cycle_group_leader
        return doc


@dataclass(frozen=True)
class PortAnchor:
    block_id: str
    port_id: str
    x: float
    y: float

    def to_dict(self) -> dict[str, Any]:
        return {"blockId": self.block_id, "portId": self.port_id, "x": self.x, "y": self.y}


@dataclass(frozen=True)
class LayoutConnector:
    """A short binding drawn directly between two port anchors."""

    id: str
    from_: PortAnchor
    to: PortAnchor
    style: ConnectorStyle

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "from": self.from_.to_dict(), "to": self.to.to_dict(), "style": self.style.value}


@dataclass(frozen=True)
class OverflowSource:
    block_id: str
    port_id: str
    block_name: str

    def to_dict(self) -> dict[str, Any]:
        return {"blockId": self.block_id, "portId": self.port_id, "blockName": self.block_name}


@dataclass(frozen=True)
class OverflowLink:
    """A binding rendered as a chip on the consumer's input port."""

    id: str
    to: PortAnchor
    from_: OverflowSource
    reason: OverflowReason

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "to": self.to.to_dict(), "from": self.from_.to_dict(), "reason": self.reason.value}


@dataclass(frozen=True)
class ColumnLayoutMeta:
    column_index: int
    x: float
    width: float
    roles: list[Role] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "columnIndex": self.column_index,
            "x": self.x,
            "width": self.width,
            "roles": [role.value for role in self.roles],
        }


@dataclass(frozen=True)
class ProximityStats:
    iterations: int
    moves_made: int
    initial_length: float
    final_length: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "iterations": self.iterations,
            "movesMade": self.moves_made,
            "initialLength": self.initial_length,
            "finalLength": self.final_length,
        }


@dataclass(frozen=True)
class LayoutDebugInfo:
    total_blocks: int
    total_connectors: int
    total_overflow_links: int
    column_count: int
    scc_count: int
    max_depth: int
    cluster_count: int
    proximity: ProximityStats | None = None

    def to_dict(self) -> dict[str, Any]:
        doc: dict[str, Any] = {
            "totalBlocks": self.total_blocks,
            "totalConnectors": self.total_connectors,
            "totalOverflowLinks": self.total_overflow_links,
            "columnCount": self.column_count,
            "sccCount": self.scc_count,
            "maxDepth": self.max_depth,
            "clusterCount": self.cluster_count,
        }
        if self.proximity is not None:
            doc["proximity"] = self.proximity.to_dict()
        return doc


@dataclass(frozen=True)
class LayoutResult:
    """Self-contained layout output: everything a renderer needs."""

    nodes: dict[str, LayoutNodeView]
    connectors: list[LayoutConnector]
    overflow_links: list[OverflowLink]
    bounds_world: Rect
    columns: list[ColumnLayoutMeta]
    debug: LayoutDebugInfo | None = None

    def to_dict(self) -> dict[str, Any]:
        doc: dict[str, Any] = {
            "nodes": {block_id: node.to_dict() for block_id, node in self.nodes.items()},
            "connectors": [c.to_dict() for c in self.connectors],
            "overflowLinks": [o.to_dict() for o in self.overflow_links],
            "boundsWorld": self.bounds_world.to_dict(),
            "columns": [c.to_dict() for c in self.columns],
        }
        if self.debug is not None:
            doc["debug"] = self.debug.to_dict()
        return doc
