"""
Primitive cycle (ring) enumeration for undirected family graphs.

All simple cycles up to a maximum length are enumerated with a bounded
search and deduplicated by their edge set. Cycles are then visited in order
of increasing length, and a cycle is kept as *primitive* unless its edge set
is the symmetric difference of two strictly shorter cycles. In a pentagonal
prism, for instance, only the two pentagons and the five squares survive:
the 6-cycle around two neighbouring squares is the sum of those squares,
and the 8-cycle around three squares is one square plus that 6-cycle.

Edge sets are stored as integer bitmasks over the edges of the graph, so the
composite test is a dictionary lookup of ``a ^ c`` for every shorter cycle
``a`` that shares an edge with the candidate ``c``.
"""

from collections import defaultdict
from itertools import groupby
from typing import Dict, Hashable, List, NamedTuple, Tuple

import networkx as nx

DEFAULT_MIN_SIZE = 3
DEFAULT_MAX_SIZE = 10


class Ring(NamedTuple):
    """A simple cycle of the family graph."""
    size: int
    nodes: Tuple[Hashable, ...]
    mask: int


def _edge_bits(graph: nx.Graph) -> Dict[frozenset, int]:
    return {frozenset(edge): bit for bit, edge in enumerate(graph.edges())}


def _canonical_nodes(cycle: List[Hashable]) -> Tuple[Hashable, ...]:
    """Rotate to the smallest node and pick the direction with the smaller neighbour."""
    start = cycle.index(min(cycle))
    rotated = cycle[start:] + cycle[:start]
    if len(rotated) > 2 and rotated[-1] < rotated[1]:
        rotated = [rotated[0]] + rotated[:0:-1]
    return tuple(rotated)


def _cycle_mask(cycle: Tuple[Hashable, ...], edge_bits: Dict[frozenset, int]) -> int:
    mask = 0
    for position, node in enumerate(cycle):
        neighbour = cycle[(position + 1) % len(cycle)]
        mask |= 1 << edge_bits[frozenset((node, neighbour))]
    return mask


def _check_bounds(min_size: int, max_size: int) -> None:
    if min_size < 3:
        raise ValueError(f"Ring sizes start at 3, got min_size={min_size}")
    if max_size < min_size:
        raise ValueError(f"max_size ({max_size}) must not be smaller than min_size ({min_size})")


def enumerate_cycles(graph: nx.Graph, max_size: int = DEFAULT_MAX_SIZE) -> List[Ring]:
    """
    Enumerate all simple cycles of length 3..max_size.

    Cycles that differ only by starting node or traversal direction are
    reported once.

    Args:
        graph: Undirected simple graph
        max_size: Longest cycle to search for

    Returns:
        List[Ring]: Rings sorted by size, then by canonical node sequence
    """
    _check_bounds(DEFAULT_MIN_SIZE, max_size)
    if graph.is_directed():
        raise ValueError("Cycle enumeration expects an undirected family graph")

    edge_bits = _edge_bits(graph)
    rings = {}
    for cycle in nx.simple_cycles(graph, length_bound=max_size):
        if len(cycle) < 3:
            continue
        nodes = _canonical_nodes(list(cycle))
        mask = _cycle_mask(nodes, edge_bits)
        if mask not in rings:
            rings[mask] = Ring(len(nodes), nodes, mask)

    return sorted(rings.values(), key=lambda ring: (ring.size, ring.nodes))


def primitive_cycles(graph: nx.Graph, max_size: int = DEFAULT_MAX_SIZE) -> List[Ring]:
    """
    Primitive rings of length 3..max_size.

    A ring is composite when it is the edge-XOR of two simple cycles that are
    both strictly shorter than it. Shorter cycles are taken from the full
    enumeration, composite or not, so a ring made of three fused squares is
    rejected as one square plus the 6-cycle of the other two.
    """
    shorter = set()
    rings_by_edge = defaultdict(set)
    primitives = []

    for _, same_size in groupby(enumerate_cycles(graph, max_size), key=lambda ring: ring.size):
        same_size = list(same_size)

        for ring in same_size:
            if not _is_composite(ring.mask, shorter, rings_by_edge):
                primitives.append(ring)

        # cycles of equal length never decompose each other
        for ring in same_size:
            shorter.add(ring.mask)
            for bit in _bits(ring.mask):
                rings_by_edge[bit].add(ring.mask)

    return primitives


def _bits(mask: int):
    bit = 0
    while mask:
        if mask & 1:
            yield bit
        mask >>= 1
        bit += 1


def _is_composite(mask: int, shorter: set, rings_by_edge: Dict[int, set]) -> bool:
    candidates = set()
    for bit in _bits(mask):
        candidates.update(rings_by_edge.get(bit, ()))

    return any((candidate ^ mask) in shorter for candidate in candidates)


def count_primitive_cycles(graph: nx.Graph, min_size: int = DEFAULT_MIN_SIZE,
                           max_size: int = DEFAULT_MAX_SIZE) -> Dict[int, int]:
    """
    Count primitive rings per size.

    Args:
        graph: Undirected family graph
        min_size: Smallest ring size reported
        max_size: Largest ring size reported

    Returns:
        Dict[int, int]: Ring size -> count, one entry for every size in range
    """
    _check_bounds(min_size, max_size)

    counts = {size: 0 for size in range(min_size, max_size + 1)}
    for ring in primitive_cycles(graph, max_size):
        if ring.size >= min_size:
            counts[ring.size] += 1
    return counts
