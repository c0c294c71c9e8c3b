"""
Acceptor/donor classification of water molecules.

A molecule that accepts ``i`` hydrogen bonds and donates ``o`` is labelled
with ``i`` "A" characters followed by ``o`` "D" characters, so a
tetrahedrally coordinated molecule is ``AADD`` and a molecule with in-degree
3 and out-degree 2 is ``AAADD``.
"""

import re
from collections import Counter
from numbers import Integral
from typing import Dict, Tuple

import networkx as nx

from water_graphs.errors import InvalidDegreeError

_LABEL_PATTERN = re.compile(r"^(A*)(D*)$")


def _check_degree(value, name: str) -> int:
    # bool is an Integral but never a meaningful degree
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise InvalidDegreeError(f"{name} must be an integer, got {value!r}")
    if value < 0:
        raise InvalidDegreeError(f"{name} must be non-negative, got {value}")
    return int(value)


def type_label(in_degree: int, out_degree: int) -> str:
    """
    Map an (in-degree, out-degree) pair to its canonical type label.

    Args:
        in_degree: Number of accepted hydrogen bonds
        out_degree: Number of donated hydrogen bonds

    Returns:
        str: "A" repeated in_degree times followed by "D" repeated out_degree times

    Raises:
        InvalidDegreeError: If either degree is negative or not an integer
    """
    accepted = _check_degree(in_degree, "in_degree")
    donated = _check_degree(out_degree, "out_degree")
    return "A" * accepted + "D" * donated


def parse_label(label: str) -> Tuple[int, int]:
    """
    Recover the (in-degree, out-degree) pair from a canonical label.

    Raises:
        InvalidDegreeError: If the label is not of the form A...AD...D
    """
    match = _LABEL_PATTERN.match(label) if isinstance(label, str) else None
    if match is None:
        raise InvalidDegreeError(f"Not a canonical type label: {label!r}")
    return len(match.group(1)), len(match.group(2))


def classify_nodes(directed: nx.DiGraph) -> Dict[int, str]:
    """Type label of every node of a directed cluster graph."""
    return {
        node: type_label(directed.in_degree(node), directed.out_degree(node))
        for node in directed.nodes
    }


def count_node_types(directed: nx.DiGraph) -> Counter:
    """Number of nodes carrying each type label."""
    return Counter(classify_nodes(directed).values())
