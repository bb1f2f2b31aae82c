"""Dependency graph, cycle detection, and depth.

Phases:
  1. Adjacency graph (consumer -> producer) from direct bindings
  2. Strongly connected components (Tarjan, lexicographic visiting order)
  3. Meta-DAG: every multi-block SCC collapsed into one meta-node
  4. Depth: longest path from a root meta-node

Every iteration over nodes or neighbours that can influence the result is
done in sorted order, so the same snapshot always yields the same SCC ids,
meta-keys and depths.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass

import networkx as nx

from patch_layout.ir.graph import BlockId, GraphData
from patch_layout.types import MetaNodeKind

logger = logging.getLogger(__name__)

SCC_PREFIX = "scc:"

MetaKey = tuple[str, str]


# ─── Adjacency Graph ─────────────────────────────────────────────────────────


class AdjacencyGraph:
    """Blocks and their dependencies.

    Wraps a networkx MultiDiGraph whose edges point from a consumer to each
    producer it reads from. Parallel bindings between the same pair of blocks
    are kept as parallel edges.
    """

    def __init__(self, digraph: nx.MultiDiGraph) -> None:
        self.digraph = digraph

    @property
    def nodes(self) -> set[BlockId]:
        return set(self.digraph.nodes)

    @property
    def edges(self) -> dict[BlockId, list[BlockId]]:
        """Block id -> blocks it depends on (duplicates preserved)."""
        return {node: self.dependencies(node) for node in self.digraph.nodes}

    def dependencies(self, block_id: BlockId) -> list[BlockId]:
        if block_id not in self.digraph:
            return []
        return [producer for _, producer in self.digraph.out_edges(block_id)]

    def node_count(self) -> int:
        return self.digraph.number_of_nodes()

    def edge_count(self) -> int:
        return self.digraph.number_of_edges()


def build_adjacency_graph(graph: GraphData) -> AdjacencyGraph:
    """Build the dependency graph from direct bindings.

    Bus bindings are ignored; they only feed cluster keys.
    """
    digraph: nx.MultiDiGraph = nx.MultiDiGraph()
    for block in graph.blocks:
        digraph.add_node(block.id)

    for binding in graph.direct_bindings:
        # consumer depends on producer
        digraph.add_edge(binding.to.block_id, binding.from_.block_id)

    return AdjacencyGraph(digraph)


# ─── Tarjan SCC ──────────────────────────────────────────────────────────────


def tarjan_scc(adj: AdjacencyGraph) -> list[list[BlockId]]:
    """Find strongly connected components with Tarjan's algorithm.

    Runs the index/low-link DFS iteratively so long dependency chains do not
    hit the interpreter's recursion limit. Both the outer loop over unvisited
    nodes and each node's successor list are walked in lexicographic order.

    Returns:
        Components in the order they close (dependencies first), each one
        sorted lexicographically.
    """
    index_of: dict[BlockId, int] = {}
    lowlink: dict[BlockId, int] = {}
    on_stack: set[BlockId] = set()
    stack: list[BlockId] = []
    sccs: list[list[BlockId]] = []
    counter = 0

    def visit(node: BlockId) -> None:
        nonlocal counter
        index_of[node] = counter
        lowlink[node] = counter
        counter += 1
        stack.append(node)
        on_stack.add(node)

    for root in sorted(adj.nodes):
        if root in index_of:
            continue

        visit(root)
        work: list[tuple[BlockId, Iterable[BlockId]]] = [(root, iter(sorted(adj.dependencies(root))))]

        while work:
            node, successors = work[-1]
            descended = False
            for succ in successors:
                if succ not in index_of:
                    visit(succ)
                    work.append((succ, iter(sorted(adj.dependencies(succ)))))
                    descended = True
                    break
                if succ in on_stack:
                    lowlink[node] = min(lowlink[node], index_of[succ])
            if descended:
                continue

            work.pop()
            if work:
                parent = work[-1][0]
                lowlink[parent] = min(lowlink[parent], lowlink[node])

            if lowlink[node] == index_of[node]:
                component: list[BlockId] = []
                while True:
                    member = stack.pop()
                    on_stack.discard(member)
                    component.append(member)
                    if member == node:
                        break
                component.sort()
                sccs.append(component)

    return sccs


@dataclass(frozen=True)
class SCC:
    """A strongly connected component; ``blocks`` is sorted."""

    id: str
    blocks: tuple[BlockId, ...]
    leader: BlockId

    @property
    def is_cycle(self) -> bool:
        return len(self.blocks) > 1


def scc_id(members: Iterable[BlockId]) -> str:
    """``scc:`` followed by the members joined with ``,``.

    Backslashes and commas inside a member are escaped, so distinct member
    sets never share an id.
    """
    return SCC_PREFIX + ",".join(m.replace("\\", "\\\\").replace(",", "\\,") for m in members)


def process_sccs(raw: list[list[BlockId]]) -> list[SCC]:
    """Attach deterministic ids and leaders to raw components."""
    result: list[SCC] = []
    for blocks in raw:
        members = tuple(sorted(blocks))
        result.append(SCC(id=scc_id(members), blocks=members, leader=members[0]))
    return result


def build_scc_map(sccs: list[SCC]) -> dict[BlockId, SCC]:
    scc_map: dict[BlockId, SCC] = {}
    for scc in sccs:
        for block_id in scc.blocks:
            scc_map[block_id] = scc
    return scc_map


# ─── Meta-DAG ────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class MetaNode:
    """Either a single block or a collapsed cycle."""

    kind: MetaNodeKind
    block_id: BlockId | None = None
    scc: SCC | None = None

    @classmethod
    def single(cls, block_id: BlockId) -> MetaNode:
        return cls(kind=MetaNodeKind.Single, block_id=block_id)

    @classmethod
    def cycle(cls, scc: SCC) -> MetaNode:
        return cls(kind=MetaNodeKind.Scc, scc=scc)

    @property
    def key(self) -> MetaKey:
        """``(kind, id)``; the kind tag keeps block ids and SCC ids apart."""
        if self.kind is MetaNodeKind.Scc:
            return (MetaNodeKind.Scc.value, self.scc.id)
        return (MetaNodeKind.Single.value, self.block_id)

    @property
    def blocks(self) -> tuple[BlockId, ...]:
        if self.kind is MetaNodeKind.Scc:
            return self.scc.blocks
        return (self.block_id,)


def meta_node_key(node: MetaNode) -> MetaKey:
    return node.key


def meta_key_of(block_id: BlockId, scc_map: dict[BlockId, SCC]) -> MetaKey:
    """Key of the meta-node a block collapses into."""
    scc = scc_map.get(block_id)
    if scc is not None and scc.is_cycle:
        return MetaNode.cycle(scc).key
    return MetaNode.single(block_id).key


class MetaDAG:
    """Acyclic graph of meta-nodes; edges point from a key to its dependencies."""

    def __init__(self, digraph: nx.DiGraph) -> None:
        self.digraph = digraph

    @property
    def nodes(self) -> dict[MetaKey, MetaNode]:
        return {key: self.digraph.nodes[key]["meta"] for key in self.digraph.nodes}

    @property
    def edges(self) -> dict[MetaKey, set[MetaKey]]:
        return {key: set(self.digraph.successors(key)) for key in self.digraph.nodes}

    def dependencies(self, key: MetaKey) -> set[MetaKey]:
        return set(self.digraph.successors(key))

    def dependents(self, key: MetaKey) -> set[MetaKey]:
        return set(self.digraph.predecessors(key))


def build_meta_dag(adj: AdjacencyGraph, sccs: list[SCC]) -> MetaDAG:
    """Collapse multi-block SCCs into meta-nodes.

    Intra-SCC edges are dropped; parallel edges between two meta-nodes merge.
    """
    scc_map = build_scc_map(sccs)
    digraph: nx.DiGraph = nx.DiGraph()

    for scc in sccs:
        if scc.is_cycle:
            node = MetaNode.cycle(scc)
            digraph.add_node(node.key, meta=node)

    for block_id in sorted(adj.nodes):
        scc = scc_map.get(block_id)
        if scc is None or not scc.is_cycle:
            node = MetaNode.single(block_id)
            digraph.add_node(node.key, meta=node)

    for block_id in sorted(adj.nodes):
        from_key = meta_key_of(block_id, scc_map)
        for dep_id in adj.dependencies(block_id):
            to_key = meta_key_of(dep_id, scc_map)
            if from_key != to_key:
                digraph.add_edge(from_key, to_key)

    logger.debug(
        "meta-dag: %d meta-nodes, %d meta-edges from %d blocks",
        digraph.number_of_nodes(),
        digraph.number_of_edges(),
        adj.node_count(),
    )
    return MetaDAG(digraph)


# ─── Depth ───────────────────────────────────────────────────────────────────


def compute_depths(meta: MetaDAG) -> dict[MetaKey, int]:
    """Longest-path depth of every meta-node.

    Strict Kahn ordering: a node is relaxed by each of its dependencies and
    enqueued exactly once, after the last of them has been dequeued, so its
    depth is final before it propagates to its own dependents. Dependents
    are visited in sorted key order.
    """
    remaining: dict[MetaKey, int] = {key: len(meta.dependencies(key)) for key in meta.digraph.nodes}
    roots = sorted(key for key, degree in remaining.items() if degree == 0)
    depths: dict[MetaKey, int] = {key: 0 for key in roots}
    queue: deque[MetaKey] = deque(roots)

    while queue:
        current = queue.popleft()
        current_depth = depths[current]
        for dependent in sorted(meta.dependents(current)):
            depths[dependent] = max(depths.get(dependent, 0), current_depth + 1)
            remaining[dependent] -= 1
            if remaining[dependent] == 0:
                queue.append(dependent)

    return depths


def compute_block_depths(meta_depths: dict[MetaKey, int], scc_map: dict[BlockId, SCC]) -> dict[BlockId, int]:
    """Expand meta-node depths to blocks; SCC members share their SCC's depth."""
    return {block_id: meta_depths.get(meta_key_of(block_id, scc_map), 0) for block_id in sorted(scc_map)}
