"""Cluster keys: group blocks that share a role and a bus signature.

A block's bus signature is the sorted set of ``P:{bus}`` (publish) and
``S:{bus}`` (subscribe) items over all of its bus bindings, and its key is
``{role}({signature})``. Blocks with the same role and signature land in the
same cluster, and clusters are stacked in key order inside each column.
Blocks touching the focused bus get a ``!focus:`` prefix so their cluster
sorts ahead of the rest.
"""

from __future__ import annotations

from collections.abc import Iterable

from patch_layout.ir.graph import BlockId, BusBinding, LayoutBlockData
from patch_layout.types import BusDirection

UNKNOWN_CLUSTER = "unknown"
FOCUS_PREFIX = "!focus:"

_DIRECTION_CODE = {
    BusDirection.Publish: "P",
    BusDirection.Subscribe: "S",
}


def bus_signature(bindings: Iterable[BusBinding]) -> str:
    items = sorted({f"{_DIRECTION_CODE[b.direction]}:{b.bus_id}" for b in bindings})
    return ",".join(items)


def compute_cluster_keys(
    blocks: list[LayoutBlockData],
    bus_bindings: list[BusBinding],
    focused_bus_id: str | None = None,
) -> dict[BlockId, str]:
    per_block: dict[BlockId, list[BusBinding]] = {block.id: [] for block in blocks}
    for binding in bus_bindings:
        if binding.block_id in per_block:
            per_block[binding.block_id].append(binding)

    keys: dict[BlockId, str] = {}
    for block in blocks:
        bindings = per_block[block.id]
        key = f"{block.role.value}({bus_signature(bindings)})"
        if focused_bus_id is not None and any(b.bus_id == focused_bus_id for b in bindings):
            key = FOCUS_PREFIX + key
        keys[block.id] = key
    return keys


def cluster_key_of(keys: dict[BlockId, str], block_id: BlockId) -> str:
    return keys.get(block_id, UNKNOWN_CLUSTER)
