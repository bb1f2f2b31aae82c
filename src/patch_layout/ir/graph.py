"""Graph input model: blocks, direct bindings, bus bindings, and UI state.

This module owns the snapshot handed to the layout engine on every call.
Documents arrive as JSON-shaped dicts (camelCase keys, the editor's wire
format) and are converted into frozen dataclasses; nothing here is mutated
by the pipeline.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TypeVar

from patch_layout.errors import ValidationError
from patch_layout.types import BusDirection, DensityMode, PortDirection, Rect, Role

BlockId = str

_E = TypeVar("_E", bound=Enum)


@dataclass(frozen=True)
class PortInfo:
    id: str
    label: str
    direction: PortDirection

    @classmethod
    def from_dict(cls, doc: Mapping[str, Any], where: str) -> PortInfo:
        return cls(
            id=str(_require(doc, "id", where)),
            label=str(doc.get("label", doc.get("id", ""))),
            direction=_enum(PortDirection, _require(doc, "direction", where), f"{where}.direction"),
        )


@dataclass(frozen=True)
class LayoutBlockData:
    id: BlockId
    type: str
    label: str
    role: Role
    inputs: list[PortInfo] = field(default_factory=list)
    outputs: list[PortInfo] = field(default_factory=list)

    @classmethod
    def from_dict(cls, doc: Mapping[str, Any], where: str) -> LayoutBlockData:
        block_id = str(_require(doc, "id", where))
        return cls(
            id=block_id,
            type=str(doc.get("type", "")),
            label=str(doc.get("label", block_id)),
            role=_enum(Role, _require(doc, "role", where), f"{where}.role"),
            inputs=[PortInfo.from_dict(p, f"{where}.inputs[{i}]") for i, p in enumerate(_list(doc, "inputs", where))],
            outputs=[PortInfo.from_dict(p, f"{where}.outputs[{i}]") for i, p in enumerate(_list(doc, "outputs", where))],
        )

    def input_index(self, port_id: str) -> int:
        """Index of an input port, or -1 if undeclared."""
        return _port_index(self.inputs, port_id)

    def output_index(self, port_id: str) -> int:
        """Index of an output port, or -1 if undeclared."""
        return _port_index(self.outputs, port_id)


@dataclass(frozen=True)
class PortRef:
    block_id: BlockId
    port_id: str

    @classmethod
    def from_dict(cls, doc: Mapping[str, Any], where: str) -> PortRef:
        return cls(
            block_id=str(_require(doc, "blockId", where)),
            port_id=str(_require(doc, "portId", where)),
        )


@dataclass(frozen=True)
class DirectBinding:
    """A wire from a producer's output port to a consumer's input port."""

    id: str
    from_: PortRef
    to: PortRef

    @classmethod
    def from_dict(cls, doc: Mapping[str, Any], where: str) -> DirectBinding:
        return cls(
            id=str(_require(doc, "id", where)),
            from_=PortRef.from_dict(_require(doc, "from", where), f"{where}.from"),
            to=PortRef.from_dict(_require(doc, "to", where), f"{where}.to"),
        )


@dataclass(frozen=True)
class BusBinding:
    block_id: BlockId
    port_id: str
    bus_id: str
    direction: BusDirection

    @classmethod
    def from_dict(cls, doc: Mapping[str, Any], where: str) -> BusBinding:
        return cls(
            block_id=str(_require(doc, "blockId", where)),
            port_id=str(_require(doc, "portId", where)),
            bus_id=str(_require(doc, "busId", where)),
            direction=_enum(BusDirection, _require(doc, "direction", where), f"{where}.direction"),
        )


@dataclass(frozen=True)
class GraphData:
    """Full snapshot of the patch graph, as far as layout is concerned."""

    blocks: list[LayoutBlockData] = field(default_factory=list)
    direct_bindings: list[DirectBinding] = field(default_factory=list)
    bus_bindings: list[BusBinding] = field(default_factory=list)

    @classmethod
    def from_dict(cls, doc: Mapping[str, Any]) -> GraphData:
        """Build GraphData from a JSON-shaped document.

        Raises:
            ValidationError: If a required key is missing or an enum value is unknown.
        """
        if not isinstance(doc, Mapping):
            raise ValidationError(["graph document must be an object"])
        return cls(
            blocks=[LayoutBlockData.from_dict(b, f"blocks[{i}]") for i, b in enumerate(_list(doc, "blocks"))],
            direct_bindings=[
                DirectBinding.from_dict(b, f"directBindings[{i}]") for i, b in enumerate(_list(doc, "directBindings"))
            ],
            bus_bindings=[BusBinding.from_dict(b, f"busBindings[{i}]") for i, b in enumerate(_list(doc, "busBindings"))],
        )

    def block_map(self) -> dict[BlockId, LayoutBlockData]:
        return {block.id: block for block in self.blocks}


@dataclass(frozen=True)
class UILayoutState:
    """UI state that affects layout."""

    density: DensityMode = DensityMode.Normal
    focused_block_id: BlockId | None = None
    focused_bus_id: str | None = None
    hovered_block_id: BlockId | None = None
    viewport_rect_world: Rect | None = None

    @classmethod
    def from_dict(cls, doc: Mapping[str, Any]) -> UILayoutState:
        if not isinstance(doc, Mapping):
            raise ValidationError(["ui state document must be an object"])
        viewport = doc.get("viewportRectWorld")
        return cls(
            density=_enum(DensityMode, doc.get("density", DensityMode.default().value), "density"),
            focused_block_id=doc.get("focusedBlockId"),
            focused_bus_id=doc.get("focusedBusId"),
            hovered_block_id=doc.get("hoveredBlockId"),
            viewport_rect_world=_rect(viewport) if viewport is not None else None,
        )


# ─── Validation ───────────────────────────────────────────────────────────────


def validate_graph(graph: GraphData) -> None:
    """Reject snapshots that indicate an upstream data-integrity bug.

    Bindings to blocks that are not (yet) in the snapshot are tolerated;
    bindings that name an undeclared port on a block that *is* present are not.

    Raises:
        ValidationError: On duplicate block ids or undeclared binding ports.
    """
    issues: list[str] = []
    blocks: dict[BlockId, LayoutBlockData] = {}
    for block in graph.blocks:
        if block.id in blocks:
            issues.append(f"duplicate block id '{block.id}'")
            continue
        blocks[block.id] = block

    for binding in graph.direct_bindings:
        producer = blocks.get(binding.from_.block_id)
        if producer is not None and producer.output_index(binding.from_.port_id) < 0:
            issues.append(
                f"binding '{binding.id}' references undeclared output port "
                f"'{binding.from_.port_id}' on block '{producer.id}'"
            )
        consumer = blocks.get(binding.to.block_id)
        if consumer is not None and consumer.input_index(binding.to.port_id) < 0:
            issues.append(
                f"binding '{binding.id}' references undeclared input port "
                f"'{binding.to.port_id}' on block '{consumer.id}'"
            )

    if issues:
        raise ValidationError(issues)


# ─── Helpers ──────────────────────────────────────────────────────────────────


def _port_index(ports: list[PortInfo], port_id: str) -> int:
    for i, port in enumerate(ports):
        if port.id == port_id:
            return i
    return -1


def _require(doc: Mapping[str, Any], key: str, where: str) -> Any:
    if not isinstance(doc, Mapping):
        raise ValidationError([f"{where}: expected an object"])
    if key not in doc:
        raise ValidationError([f"{where}: missing '{key}'"])
    return doc[key]


def _enum(enum_cls: type[_E], value: Any, where: str) -> _E:
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError([f"{where}: unknown value '{value}' (expected one of {allowed})"]) from None


def _list(doc: Mapping[str, Any], key: str, where: str | None = None) -> list[Any]:
    value = doc.get(key, [])
    if not isinstance(value, list):
        path = f"{where}.{key}" if where else key
        raise ValidationError([f"{path}: expected a list"])
    return value


def _number(doc: Mapping[str, Any], key: str, where: str) -> float:
    value = _require(doc, key, where)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError([f"{where}.{key}: expected a number, got {value!r}"])
    return float(value)


def _rect(doc: Mapping[str, Any]) -> Rect:
    where = "viewportRectWorld"
    return Rect(
        x=_number(doc, "x", where),
        y=_number(doc, "y", where),
        width=_number(doc, "width", where),
        height=_number(doc, "height", where),
    )
