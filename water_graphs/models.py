"""
Data models for water-cluster graph analysis.

This module defines the data structures used throughout the analysis:
the normalized input record, hydrogen bonds, molecules and clusters.
Clusters are immutable once built; their derived graphs and cycle counts
are computed on first use and cached on the instance.
"""

import math
from collections import Counter
from dataclasses import dataclass, field
from functools import cached_property
from typing import Any, Dict, List, Mapping, Tuple

import networkx as nx

from water_graphs.classifier import type_label
from water_graphs.cycles import count_primitive_cycles
from water_graphs.errors import DataIntegrityError


@dataclass(frozen=True)
class HydrogenBond:
    """Directed hydrogen bond from a donor (H side) to an acceptor (O side)."""
    donor: int
    acceptor: int


@dataclass(frozen=True)
class Molecule:
    """
    A single water molecule, i.e. one node of the cluster graph.

    Attributes:
        index: Position of the molecule within its cluster (0-based)
        in_degree: Number of hydrogen bonds accepted
        out_degree: Number of hydrogen bonds donated
    """
    index: int
    in_degree: int
    out_degree: int

    @property
    def label(self) -> str:
        """Acceptor/donor type label, e.g. ``AADD``."""
        return type_label(self.in_degree, self.out_degree)


@dataclass(frozen=True)
class ClusterRecord:
    """
    Normalized cluster record as supplied by the dataset provider.

    Attributes:
        cluster_id: Unique identifier of the cluster
        n_molecules: Number of water molecules
        energy: Total energy of the cluster
        hbonds: List of (donor, acceptor) molecule index pairs
    """
    cluster_id: str
    n_molecules: Any
    energy: Any
    hbonds: List[Tuple[Any, Any]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ClusterRecord":
        """
        Create a record from a plain mapping.

        Accepts ``cluster_id`` or ``id``, ``n_molecules`` or ``n``, ``energy``
        and ``hbonds`` given either as ``[donor, acceptor]`` pairs or as
        ``{"donor": ..., "acceptor": ...}`` objects.

        Raises:
            DataIntegrityError: If a required field is missing or malformed
        """
        if not isinstance(data, Mapping):
            raise DataIntegrityError(f"Cluster record must be a mapping, got {type(data).__name__}")

        cluster_id = data.get('cluster_id', data.get('id'))
        if cluster_id is None:
            raise DataIntegrityError("Cluster record has no 'cluster_id'")
        cluster_id = str(cluster_id)

        n_molecules = data.get('n_molecules', data.get('n'))
        if n_molecules is None:
            raise DataIntegrityError("Cluster record has no molecule count", cluster_id)

        if 'energy' not in data:
            raise DataIntegrityError("Cluster record has no energy", cluster_id)

        raw_bonds = data.get('hbonds')
        if raw_bonds is None:
            raise DataIntegrityError("Cluster record has no hydrogen bond list", cluster_id)
        if not isinstance(raw_bonds, (list, tuple)):
            raise DataIntegrityError(
                f"Hydrogen bond list must be a list, got {type(raw_bonds).__name__}", cluster_id
            )

        hbonds = []
        for position, bond in enumerate(raw_bonds):
            if isinstance(bond, Mapping):
                if 'donor' not in bond or 'acceptor' not in bond:
                    raise DataIntegrityError(
                        f"Hydrogen bond {position} needs 'donor' and 'acceptor'", cluster_id
                    )
                hbonds.append((bond['donor'], bond['acceptor']))
            elif isinstance(bond, (list, tuple)) and len(bond) == 2:
                hbonds.append((bond[0], bond[1]))
            else:
                raise DataIntegrityError(
                    f"Hydrogen bond {position} is not a (donor, acceptor) pair: {bond!r}", cluster_id
                )

        return cls(
            cluster_id=cluster_id,
            n_molecules=n_molecules,
            energy=data['energy'],
            hbonds=hbonds
        )


@dataclass(frozen=True)
class Cluster:
    """
    A water cluster with its molecules and hydrogen bonds.

    Instances are produced by :func:`water_graphs.graph_builder.build_cluster`
    and are never mutated afterwards.
    """
    cluster_id: str
    n_molecules: int
    energy: float
    molecules: Tuple[Molecule, ...]
    hbonds: Tuple[HydrogenBond, ...]

    def __post_init__(self):
        """Check the invariants the builder is expected to guarantee."""
        if len(self.molecules) != self.n_molecules:
            raise DataIntegrityError(
                f"Cluster declares {self.n_molecules} molecules but has {len(self.molecules)}",
                self.cluster_id
            )
        if not math.isfinite(self.energy):
            raise DataIntegrityError(f"Energy must be finite, got {self.energy}", self.cluster_id)

    @property
    def num_hbonds(self) -> int:
        """Total number of hydrogen bonds (sum of out-degrees)."""
        return sum(molecule.out_degree for molecule in self.molecules)

    @cached_property
    def directed(self) -> nx.DiGraph:
        """Directed graph with edges pointing hydrogen -> oxygen."""
        from water_graphs.graph_builder import directed_graph
        return directed_graph(self)

    @cached_property
    def family(self) -> nx.Graph:
        """Undirected family graph."""
        from water_graphs.graph_builder import family_graph
        return family_graph(self.directed)

    @cached_property
    def type_counts(self) -> Counter:
        """Number of molecules of each acceptor/donor type."""
        return Counter(molecule.label for molecule in self.molecules)

    @cached_property
    def _cycle_cache(self) -> Dict[Tuple[int, int], Dict[int, int]]:
        return {}

    def primitive_cycle_counts(self, min_size: int = 3, max_size: int = 10) -> Dict[int, int]:
        """
        Primitive cycle counts of the family graph for sizes ``min_size..max_size``.

        Results are cached per size range.
        """
        key = (min_size, max_size)
        if key not in self._cycle_cache:
            self._cycle_cache[key] = count_primitive_cycles(self.family, min_size, max_size)
        return dict(self._cycle_cache[key])

    def get_summary(self) -> dict:
        """
        Get a summary of the cluster.

        Returns:
            dict: Summary information about the cluster
        """
        return {
            'cluster_id': self.cluster_id,
            'n_molecules': self.n_molecules,
            'energy': self.energy,
            'num_hbonds': self.num_hbonds,
            'type_counts': dict(self.type_counts)
        }
