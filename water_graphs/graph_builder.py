"""
Graph construction for water clusters.

Converts normalized cluster records into :class:`Cluster` objects and
produces the two graph views used by the analysis: the directed graph
(one edge per hydrogen bond, pointing from the hydrogen side to the oxygen
side) and the undirected "family" graph.
"""

import math
from numbers import Integral, Real
from typing import Callable, Iterable, Tuple

import networkx as nx
import numpy as np

from water_graphs.errors import DataIntegrityError
from water_graphs.models import Cluster, ClusterRecord, HydrogenBond, Molecule

MAX_MOLECULES = 1_000_000

# (oxygens, hydrogens) -> iterable of (donor, acceptor) molecule indices
BondRule = Callable[[np.ndarray, np.ndarray], Iterable[Tuple[int, int]]]


def _as_index(value, cluster_id: str, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise DataIntegrityError(f"{what} must be an integer, got {value!r}", cluster_id)
    return int(value)


def build_cluster(record: ClusterRecord, index_base: int = 0) -> Cluster:
    """
    Validate a cluster record and build the corresponding Cluster.

    Args:
        record: Normalized cluster record
        index_base: 0 if molecule indices in the record start at 0, 1 if at 1

    Returns:
        Cluster: Immutable cluster with molecule degrees filled in

    Raises:
        DataIntegrityError: If the record references non-existent molecules,
            contains self-bonds or duplicate bonds, or has an invalid
            molecule count or energy
    """
    cluster_id = record.cluster_id
    n_molecules = _as_index(record.n_molecules, cluster_id, "Molecule count")
    if n_molecules < 0:
        raise DataIntegrityError(f"Molecule count must be non-negative, got {n_molecules}", cluster_id)
    if n_molecules > MAX_MOLECULES:
        raise DataIntegrityError(
            f"Molecule count exceeds the supported maximum of {MAX_MOLECULES}", cluster_id
        )

    if isinstance(record.energy, bool) or not isinstance(record.energy, Real):
        raise DataIntegrityError(f"Energy must be a real number, got {record.energy!r}", cluster_id)
    try:
        energy = float(record.energy)
    except OverflowError:
        raise DataIntegrityError("Energy must be finite, got an integer too large for a float", cluster_id)
    if not math.isfinite(energy):
        raise DataIntegrityError(f"Energy must be finite, got {energy}", cluster_id)

    in_degree = [0] * n_molecules
    out_degree = [0] * n_molecules
    hbonds = []
    seen = set()

    for raw_donor, raw_acceptor in record.hbonds:
        donor = _as_index(raw_donor, cluster_id, "Donor index") - index_base
        acceptor = _as_index(raw_acceptor, cluster_id, "Acceptor index") - index_base

        for index, raw in ((donor, raw_donor), (acceptor, raw_acceptor)):
            if not 0 <= index < n_molecules:
                raise DataIntegrityError(
                    f"Hydrogen bond references molecule {raw} but the cluster has "
                    f"{n_molecules} molecules", cluster_id
                )

        if donor == acceptor:
            raise DataIntegrityError(f"Molecule {raw_donor} is bonded to itself", cluster_id)

        if (donor, acceptor) in seen:
            raise DataIntegrityError(
                f"Duplicate hydrogen bond {raw_donor} -> {raw_acceptor}", cluster_id
            )
        seen.add((donor, acceptor))

        out_degree[donor] += 1
        in_degree[acceptor] += 1
        hbonds.append(HydrogenBond(donor, acceptor))

    molecules = tuple(
        Molecule(index, in_degree[index], out_degree[index]) for index in range(n_molecules)
    )

    return Cluster(
        cluster_id=cluster_id,
        n_molecules=n_molecules,
        energy=energy,
        molecules=molecules,
        hbonds=tuple(hbonds)
    )


def directed_graph(cluster: Cluster) -> nx.DiGraph:
    """Directed graph with one node per molecule and one edge per hydrogen bond."""
    graph = nx.DiGraph(cluster_id=cluster.cluster_id, energy=cluster.energy)
    graph.add_nodes_from(molecule.index for molecule in cluster.molecules)
    graph.add_edges_from((bond.donor, bond.acceptor) for bond in cluster.hbonds)
    return graph


def family_graph(directed: nx.DiGraph) -> nx.Graph:
    """
    Undirected simple graph obtained by dropping edge direction.

    Opposite bonds between the same two molecules collapse into one edge.
    Applying this to an undirected graph returns an equal copy.
    """
    graph = nx.Graph(**directed.graph)
    graph.add_nodes_from(directed.nodes)
    graph.add_edges_from(directed.edges)
    return graph


def build_from_geometry(cluster_id, energy: float, oxygens: np.ndarray,
                        hydrogens: np.ndarray, rule: BondRule) -> Cluster:
    """
    Build a cluster from parsed atomic positions and a bond detection rule.

    Bond detection itself is delegated to ``rule``, which receives the oxygen
    positions with shape (n, 3) and hydrogen positions with shape (n, 2, 3)
    and returns (donor, acceptor) molecule index pairs.

    Raises:
        DataIntegrityError: If the coordinate arrays are inconsistent or the
            rule reports bonds to non-existent molecules
    """
    oxygens = np.asarray(oxygens, dtype=float)
    hydrogens = np.asarray(hydrogens, dtype=float)

    if oxygens.ndim != 2 or oxygens.shape[1] != 3:
        raise DataIntegrityError(f"Oxygen positions must have shape (n, 3), got {oxygens.shape}", str(cluster_id))
    if hydrogens.shape != (oxygens.shape[0], 2, 3):
        raise DataIntegrityError(
            f"Hydrogen positions must have shape ({oxygens.shape[0]}, 2, 3), got {hydrogens.shape}",
            str(cluster_id)
        )

    bonds = [tuple(bond) for bond in rule(oxygens, hydrogens)]
    record = ClusterRecord(
        cluster_id=str(cluster_id),
        n_molecules=oxygens.shape[0],
        energy=energy,
        hbonds=bonds
    )
    return build_cluster(record)
