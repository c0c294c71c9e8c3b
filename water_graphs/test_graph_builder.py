"""Tests for cluster and graph construction."""

import math

import numpy as np
import pytest

from water_graphs.errors import DataIntegrityError
from water_graphs.graph_builder import build_cluster, build_from_geometry, directed_graph, family_graph
from water_graphs.hbond_rules import DistanceAngleRule
from water_graphs.models import ClusterRecord


def make_record(hbonds, n_molecules=3, energy=-15.0, cluster_id="w3"):
    return ClusterRecord(cluster_id=cluster_id, n_molecules=n_molecules, energy=energy, hbonds=hbonds)


def test_directed_triangle():
    cluster = build_cluster(make_record([(0, 1), (1, 2), (2, 0)]))

    assert cluster.n_molecules == 3
    assert [m.label for m in cluster.molecules] == ["AD", "AD", "AD"]
    assert all(m.in_degree == 1 and m.out_degree == 1 for m in cluster.molecules)
    assert cluster.primitive_cycle_counts(3, 10)[3] == 1
    assert cluster.num_hbonds == 3


def test_one_based_triangle():
    cluster = build_cluster(make_record([(1, 2), (2, 3), (3, 1)]), index_base=1)
    assert sorted(cluster.directed.edges) == [(0, 1), (1, 2), (2, 0)]
    assert cluster.primitive_cycle_counts() == {3: 1, 4: 0, 5: 0, 6: 0, 7: 0, 8: 0, 9: 0, 10: 0}


def test_degree_sums_match_edge_count():
    bonds = [(0, 1), (1, 2), (2, 3), (3, 0), (0, 2), (4, 0), (4, 3)]
    cluster = build_cluster(make_record(bonds, n_molecules=5))
    graph = cluster.directed

    total_in = sum(m.in_degree for m in cluster.molecules)
    total_out = sum(m.out_degree for m in cluster.molecules)
    assert total_in == total_out == graph.number_of_edges() == len(bonds)
    assert sum(d for _, d in graph.in_degree()) == total_in


def test_family_graph_merges_opposite_bonds():
    cluster = build_cluster(make_record([(0, 1), (1, 0), (1, 2)]))
    assert cluster.directed.number_of_edges() == 3
    assert cluster.family.number_of_edges() == 2
    assert not cluster.family.is_directed()


def test_family_graph_is_idempotent():
    cluster = build_cluster(make_record([(0, 1), (1, 2), (2, 0), (1, 0)]))
    once = family_graph(directed_graph(cluster))
    twice = family_graph(directed_graph(cluster))
    again = family_graph(once)

    edges = lambda g: {frozenset(e) for e in g.edges}
    assert edges(once) == edges(twice) == edges(again)


def test_derived_graphs_are_cached():
    cluster = build_cluster(make_record([(0, 1), (1, 2)]))
    assert cluster.family is cluster.family
    assert cluster.directed is cluster.directed


def test_isolated_molecules_are_nodes():
    cluster = build_cluster(make_record([(0, 1)], n_molecules=4))
    assert cluster.directed.number_of_nodes() == 4
    assert cluster.type_counts == {"D": 1, "A": 1, "": 2}


@pytest.mark.parametrize("hbonds", [
    [(0, 3)],
    [(-1, 0)],
    [(0, 0)],
    [(0, 1), (0, 1)],
    [(0.5, 1)],
])
def test_bad_bonds(hbonds):
    with pytest.raises(DataIntegrityError) as excinfo:
        build_cluster(make_record(hbonds))
    assert excinfo.value.cluster_id == "w3"


def test_one_based_index_zero_is_out_of_range():
    with pytest.raises(DataIntegrityError):
        build_cluster(make_record([(0, 1)]), index_base=1)


@pytest.mark.parametrize("energy", [math.nan, math.inf, "-1.0", None, True, 10**400])
def test_bad_energy(energy):
    with pytest.raises(DataIntegrityError):
        build_cluster(make_record([], energy=energy))


@pytest.mark.parametrize("n_molecules", [-1, 2.5, "3", 10**18])
def test_bad_molecule_count(n_molecules):
    with pytest.raises(DataIntegrityError):
        build_cluster(make_record([], n_molecules=n_molecules))


def test_record_from_dict_forms():
    record = ClusterRecord.from_dict({
        "id": 7, "n": 2, "energy": -5,
        "hbonds": [{"donor": 0, "acceptor": 1}]
    })
    assert record.cluster_id == "7"
    assert record.hbonds == [(0, 1)]

    cluster = build_cluster(record)
    assert cluster.energy == -5.0


@pytest.mark.parametrize("data", [
    {"n_molecules": 2, "energy": -1.0, "hbonds": []},
    {"cluster_id": "a", "energy": -1.0, "hbonds": []},
    {"cluster_id": "a", "n_molecules": 2, "hbonds": []},
    {"cluster_id": "a", "n_molecules": 2, "energy": -1.0},
    {"cluster_id": "a", "n_molecules": 2, "energy": -1.0, "hbonds": [[0, 1, 2]]},
    {"cluster_id": "a", "n_molecules": 2, "energy": -1.0, "hbonds": [{"donor": 0}]},
    {"cluster_id": "a", "n_molecules": 2, "energy": -1.0, "hbonds": 5},
    {"cluster_id": "a", "n_molecules": 2, "energy": -1.0, "hbonds": True},
    {"cluster_id": "a", "n_molecules": 2, "energy": -1.0, "hbonds": {"0": 1}},
    ["not", "a", "mapping"],
])
def test_record_from_dict_rejects_incomplete_records(data):
    with pytest.raises(DataIntegrityError):
        ClusterRecord.from_dict(data)


def water_dimer():
    oxygens = np.array([[0.0, 0.0, 0.0], [2.9, 0.0, 0.0]])
    hydrogens = np.array([
        [[0.96, 0.0, 0.0], [-0.24, 0.93, 0.0]],
        [[3.14, 0.93, 0.0], [3.14, -0.93, 0.0]],
    ])
    return oxygens, hydrogens


def test_geometry_uses_supplied_rule():
    oxygens, hydrogens = water_dimer()
    calls = []

    def rule(o, h):
        calls.append((o.shape, h.shape))
        return [(1, 0)]

    cluster = build_from_geometry("dimer", -5.0, oxygens, hydrogens, rule)
    assert calls == [((2, 3), (2, 2, 3))]
    assert [(b.donor, b.acceptor) for b in cluster.hbonds] == [(1, 0)]


def test_geometry_with_distance_angle_rule():
    oxygens, hydrogens = water_dimer()
    cluster = build_from_geometry("dimer", -5.0, oxygens, hydrogens, DistanceAngleRule())
    assert [m.label for m in cluster.molecules] == ["D", "A"]


def test_distance_cutoff_breaks_bond():
    oxygens, hydrogens = water_dimer()
    assert DistanceAngleRule(max_oo_distance=2.5)(oxygens, hydrogens) == []


def test_geometry_rule_reporting_unknown_molecule():
    oxygens, hydrogens = water_dimer()
    with pytest.raises(DataIntegrityError):
        build_from_geometry("dimer", -5.0, oxygens, hydrogens, lambda o, h: [(0, 2)])


def test_geometry_shape_mismatch():
    oxygens, hydrogens = water_dimer()
    with pytest.raises(DataIntegrityError):
        build_from_geometry("dimer", -5.0, oxygens, hydrogens[:1], DistanceAngleRule())
