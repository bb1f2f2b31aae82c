"""Tests for ir/graph.py — document parsing and validation."""

from __future__ import annotations

import pytest

from patch_layout.errors import ValidationError
from patch_layout.ir.graph import (
    DirectBinding,
    GraphData,
    LayoutBlockData,
    PortInfo,
    PortRef,
    UILayoutState,
    validate_graph,
)
from patch_layout.types import BusDirection, DensityMode, PortDirection, Rect, Role

# ─── Helpers ──────────────────────────────────────────────────────────────────

DOC = {
    "blocks": [
        {
            "id": "osc",
            "type": "operator:sine",
            "label": "Sine",
            "role": "operator",
            "inputs": [{"id": "phase", "label": "Phase", "direction": "input"}],
            "outputs": [{"id": "out", "label": "Out", "direction": "output"}],
        },
        {"id": "clock", "type": "time:root", "role": "time", "outputs": [{"id": "t", "direction": "output"}]},
    ],
    "directBindings": [
        {"id": "w1", "from": {"blockId": "clock", "portId": "t"}, "to": {"blockId": "osc", "portId": "phase"}},
    ],
    "busBindings": [{"blockId": "osc", "portId": "out", "busId": "color", "direction": "publish"}],
}


def make_block(block_id: str) -> LayoutBlockData:
    return LayoutBlockData(
        id=block_id,
        type="t",
        label=block_id,
        role=Role.Operator,
        inputs=[PortInfo(id="in", label="In", direction=PortDirection.Input)],
        outputs=[PortInfo(id="out", label="Out", direction=PortDirection.Output)],
    )


def wire(src: str, dst: str, src_port: str = "out", dst_port: str = "in") -> DirectBinding:
    return DirectBinding(id=f"{src}->{dst}", from_=PortRef(src, src_port), to=PortRef(dst, dst_port))


# ─── Parsing Tests ────────────────────────────────────────────────────────────


class TestGraphFromDict:
    def test_full_document(self):
        graph = GraphData.from_dict(DOC)
        assert [b.id for b in graph.blocks] == ["osc", "clock"]
        osc = graph.blocks[0]
        assert osc.role is Role.Operator
        assert osc.input_index("phase") == 0
        assert osc.output_index("missing") == -1
        assert graph.direct_bindings[0].from_ == PortRef("clock", "t")
        assert graph.bus_bindings[0].direction is BusDirection.Publish

    def test_label_defaults(self):
        clock = GraphData.from_dict(DOC).blocks[1]
        assert clock.label == "clock"
        assert clock.outputs[0].label == "t"
        assert clock.inputs == []

    def test_empty_document(self):
        assert GraphData.from_dict({}) == GraphData()

    def test_unknown_role(self):
        with pytest.raises(ValidationError, match=r"blocks\[0\]\.role"):
            GraphData.from_dict({"blocks": [{"id": "a", "role": "mystery"}]})

    def test_missing_key(self):
        with pytest.raises(ValidationError, match="missing 'to'"):
            GraphData.from_dict({"directBindings": [{"id": "w", "from": {"blockId": "a", "portId": "o"}}]})

    def test_not_an_object(self):
        with pytest.raises(ValidationError):
            GraphData.from_dict(["not", "a", "graph"])

    @pytest.mark.parametrize("key", ["blocks", "directBindings", "busBindings"])
    def test_null_list_field(self, key):
        with pytest.raises(ValidationError, match=f"{key}: expected a list"):
            GraphData.from_dict({key: None})

    def test_ports_must_be_a_list(self):
        with pytest.raises(ValidationError, match=r"blocks\[0\]\.inputs: expected a list"):
            GraphData.from_dict({"blocks": [{"id": "a", "role": "time", "inputs": "in"}]})

    def test_block_map(self):
        graph = GraphData.from_dict(DOC)
        assert set(graph.block_map()) == {"osc", "clock"}


class TestUIStateFromDict:
    def test_defaults(self):
        ui = UILayoutState.from_dict({})
        assert ui.density is DensityMode.Normal
        assert ui.focused_block_id is None
        assert ui.viewport_rect_world is None

    def test_all_fields(self):
        ui = UILayoutState.from_dict(
            {
                "density": "overview",
                "focusedBlockId": "osc",
                "focusedBusId": "color",
                "hoveredBlockId": "clock",
                "viewportRectWorld": {"x": 0, "y": 10, "width": 800, "height": 600},
            }
        )
        assert ui.density is DensityMode.Overview
        assert ui.focused_bus_id == "color"
        assert ui.viewport_rect_world == Rect(0, 10, 800, 600)

    def test_unknown_density(self):
        with pytest.raises(ValidationError, match="density"):
            UILayoutState.from_dict({"density": "cozy"})

    def test_viewport_field_must_be_numeric(self):
        doc = {"viewportRectWorld": {"x": 0, "y": 0, "width": "wide", "height": 600}}
        with pytest.raises(ValidationError, match=r"viewportRectWorld\.width"):
            UILayoutState.from_dict(doc)

    def test_viewport_missing_field(self):
        with pytest.raises(ValidationError, match="missing 'height'"):
            UILayoutState.from_dict({"viewportRectWorld": {"x": 0, "y": 0, "width": 1}})

    def test_not_an_object(self):
        with pytest.raises(ValidationError):
            UILayoutState.from_dict("overview")


# ─── Validation Tests ─────────────────────────────────────────────────────────


class TestValidateGraph:
    def test_valid_graph_passes(self):
        validate_graph(GraphData.from_dict(DOC))

    def test_duplicate_block_id(self):
        graph = GraphData(blocks=[make_block("a"), make_block("a")])
        with pytest.raises(ValidationError) as exc:
            validate_graph(graph)
        assert exc.value.issues == ["duplicate block id 'a'"]

    def test_undeclared_ports(self):
        graph = GraphData(
            blocks=[make_block("a"), make_block("b")],
            direct_bindings=[wire("a", "b", src_port="nope", dst_port="also-nope")],
        )
        with pytest.raises(ValidationError) as exc:
            validate_graph(graph)
        assert len(exc.value.issues) == 2
        assert "output port 'nope'" in exc.value.issues[0]
        assert "input port 'also-nope'" in exc.value.issues[1]

    def test_port_direction_checked(self):
        """An input port id used as a binding source is rejected."""
        graph = GraphData(blocks=[make_block("a"), make_block("b")], direct_bindings=[wire("a", "b", src_port="in")])
        with pytest.raises(ValidationError):
            validate_graph(graph)

    def test_binding_to_absent_block_tolerated(self):
        graph = GraphData(blocks=[make_block("a")], direct_bindings=[wire("a", "ghost")])
        validate_graph(graph)

    def test_is_a_value_error(self):
        with pytest.raises(ValueError):
            validate_graph(GraphData(blocks=[make_block("a"), make_block("a")]))
