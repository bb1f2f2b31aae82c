"""Tests for row ordering and the fixed tables it reads.

Covers:
  - RowOrderTuple / compare_row_order / sort_by_row_order / tuple_to_row_key
  - role_to_column / column_to_roles
  - compute_cluster_keys / bus_signature
  - measure_block
"""

from __future__ import annotations

import itertools

import pytest

from patch_layout.config import LayoutConfig
from patch_layout.ir.graph import BusBinding, LayoutBlockData
from patch_layout.layout.clustering import UNKNOWN_CLUSTER, bus_signature, cluster_key_of, compute_cluster_keys
from patch_layout.layout.columns import column_to_roles, role_to_column
from patch_layout.layout.ordering import (
    RowOrderTuple,
    compare_row_order,
    compute_row_order_tuple,
    sort_by_row_order,
    tuple_to_row_key,
)
from patch_layout.layout.sizing import measure_block
from patch_layout.types import BusDirection, DensityMode, Role

# ─── Helpers ──────────────────────────────────────────────────────────────────


def make_block(block_id: str, role: Role = Role.Operator) -> LayoutBlockData:
    return LayoutBlockData(id=block_id, type="t", label=block_id, role=role)


def pub(block_id: str, bus_id: str) -> BusBinding:
    return BusBinding(block_id=block_id, port_id="out", bus_id=bus_id, direction=BusDirection.Publish)


def sub(block_id: str, bus_id: str) -> BusBinding:
    return BusBinding(block_id=block_id, port_id="in", bus_id=bus_id, direction=BusDirection.Subscribe)


# ─── Row Order Tests ──────────────────────────────────────────────────────────


class TestRowOrder:
    def test_column_dominates(self):
        a = RowOrderTuple(0, "z", 9, 9, "z")
        b = RowOrderTuple(1, "a", 0, 0, "a")
        assert compare_row_order(a, b) == -1
        assert compare_row_order(b, a) == 1

    def test_cluster_before_depth(self):
        a = RowOrderTuple(1, "a", 5, 0, "x")
        b = RowOrderTuple(1, "b", 0, 0, "x")
        assert sort_by_row_order([b, a]) == [a, b]

    def test_depth_before_role_priority(self):
        a = RowOrderTuple(1, "k", 0, 5, "x")
        b = RowOrderTuple(1, "k", 1, 0, "a")
        assert sort_by_row_order([b, a]) == [a, b]

    def test_block_id_breaks_ties(self):
        a = RowOrderTuple(1, "k", 0, 0, "a")
        b = RowOrderTuple(1, "k", 0, 0, "b")
        assert compare_row_order(a, b) == -1

    def test_cluster_compares_as_string(self):
        """'operator(P:b10)' sorts before 'operator(P:b9)' by code point."""
        a = RowOrderTuple(1, "operator(P:b10)", 0, 0, "x")
        b = RowOrderTuple(1, "operator(P:b9)", 0, 0, "x")
        assert compare_row_order(a, b) == -1

    def test_same_tuple_compares_equal(self):
        a = RowOrderTuple(1, "k", 0, 0, "a")
        assert compare_row_order(a, RowOrderTuple(1, "k", 0, 0, "a")) == 0

    def test_distinct_blocks_never_equal(self):
        config = LayoutConfig()
        tuples = [
            compute_row_order_tuple(f"b{i}", 1, "k", 0, role, config)
            for i, role in enumerate([Role.Operator, Role.State, Role.Operator, Role.State])
        ]
        for a, b in itertools.combinations(tuples, 2):
            assert compare_row_order(a, b) != 0

    def test_role_priority_from_config(self):
        config = LayoutConfig()
        order = sorted(Role, key=lambda r: config.role_priority[r])
        assert order == [Role.Time, Role.Identity, Role.Io, Role.State, Role.Operator, Role.Render]
        t = compute_row_order_tuple("b", 1, "k", 2, Role.State, config)
        assert t.role_priority == 3

    def test_row_key_format(self):
        t = RowOrderTuple(column=1, cluster_key="operator()", depth=2, role_priority=4, block_id="mul")
        assert tuple_to_row_key(t) == "col:1|cluster:operator()|depth:2|rolePri:4|id:mul"


# ─── Column Tests ─────────────────────────────────────────────────────────────


class TestColumns:
    def test_default_columns(self):
        config = LayoutConfig()
        assert role_to_column(Role.Time, config) == 0
        assert role_to_column(Role.Operator, config) == 1
        assert role_to_column(Role.Render, config) == 2

    def test_column_to_roles_in_priority_order(self):
        config = LayoutConfig()
        assert column_to_roles(0, config) == [Role.Time, Role.Identity, Role.Io]
        assert column_to_roles(1, config) == [Role.State, Role.Operator]
        assert column_to_roles(7, config) == []

    def test_custom_table(self):
        config = LayoutConfig(role_columns={**LayoutConfig().role_columns, Role.Io: 3})
        assert role_to_column(Role.Io, config) == 3
        assert column_to_roles(3, config) == [Role.Io]


# ─── Cluster Key Tests ────────────────────────────────────────────────────────


class TestClusterKeys:
    def test_no_buses(self):
        keys = compute_cluster_keys([make_block("a")], [])
        assert keys == {"a": "operator()"}

    def test_signature_sorted_and_deduplicated(self):
        bindings = [sub("a", "phase"), pub("a", "color"), pub("a", "color")]
        assert bus_signature(bindings) == "P:color,S:phase"

    def test_same_signature_same_cluster(self):
        blocks = [make_block("a"), make_block("b"), make_block("c")]
        keys = compute_cluster_keys(blocks, [pub("a", "x"), pub("b", "x"), sub("c", "x")])
        assert keys["a"] == keys["b"] == "operator(P:x)"
        assert keys["c"] == "operator(S:x)"

    def test_role_splits_clusters(self):
        blocks = [make_block("a", Role.State), make_block("b", Role.Operator)]
        keys = compute_cluster_keys(blocks, [])
        assert keys["a"] != keys["b"]

    def test_focused_bus_sorts_first(self):
        blocks = [make_block("a"), make_block("b")]
        keys = compute_cluster_keys(blocks, [pub("b", "focus-me")], focused_bus_id="focus-me")
        assert keys["b"] == "!focus:operator(P:focus-me)"
        assert keys["b"] < keys["a"]

    def test_unknown_block_bindings_ignored(self):
        keys = compute_cluster_keys([make_block("a")], [pub("ghost", "x")])
        assert keys == {"a": "operator()"}

    def test_default_for_missing_block(self):
        assert cluster_key_of({}, "nope") == UNKNOWN_CLUSTER == "unknown"


# ─── Sizing Tests ─────────────────────────────────────────────────────────────


class TestSizing:
    @pytest.mark.parametrize(
        ("density", "expected"),
        [(DensityMode.Overview, (260, 36)), (DensityMode.Normal, (300, 56)), (DensityMode.Detail, (340, 96))],
    )
    def test_sizes_per_density(self, density, expected):
        size = measure_block(make_block("a"), density, LayoutConfig())
        assert (size.w, size.h) == expected

    def test_ports_hidden_in_overview(self):
        config = LayoutConfig()
        assert not measure_block(make_block("a"), DensityMode.Overview, config).ports_visible
        assert measure_block(make_block("a"), DensityMode.Detail, config).ports_visible
