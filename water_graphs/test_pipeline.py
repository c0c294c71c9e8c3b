"""Tests for the cluster analysis pipeline."""

import pytest

from water_graphs.config import AnalysisConfig
from water_graphs.pipeline import ClusterAnalyzer, process_cluster_worker

TRIANGLE = {"cluster_id": "w3", "n_molecules": 3, "energy": -15.0, "hbonds": [[0, 1], [1, 2], [2, 0]]}
SQUARE = {"cluster_id": "w4", "n_molecules": 4, "energy": -27.0,
          "hbonds": [[0, 1], [1, 2], [2, 3], [3, 0]]}


def records():
    return [
        TRIANGLE,
        {"cluster_id": "bad_index", "n_molecules": 2, "energy": -1.0, "hbonds": [[0, 5]]},
        SQUARE,
        {"cluster_id": "empty", "n_molecules": 0, "energy": 0.0, "hbonds": []},
        {"n_molecules": 2, "energy": -1.0, "hbonds": []},
    ]


def test_worker_success():
    result = process_cluster_worker((0, TRIANGLE, 3, 10, 0))
    assert not result.skipped
    assert result.row["ring_3"] == 1
    assert result.row["type_AD"] == 3


def test_worker_reports_error_kind():
    result = process_cluster_worker((3, records()[3], 3, 10, 0))
    assert result.skipped
    assert result.skip_entry() == {
        "cluster_id": "empty",
        "error": "InvalidClusterError",
        "message": "Cannot normalize by molecule count of an empty cluster",
    }


def test_bad_clusters_are_skipped_and_reported():
    result = ClusterAnalyzer().run(records())

    assert list(result.table.index) == ["w3", "w4"]
    assert result.num_skipped == 3

    summary = result.get_summary()
    assert summary["num_clusters"] == 2
    assert summary["skipped_by_error"] == {"DataIntegrityError": 2, "InvalidClusterError": 1}
    assert [entry["cluster_id"] for entry in summary["skipped"]] == ["bad_index", "empty", "record_4"]


def test_duplicate_ids_keep_first():
    duplicate = dict(SQUARE, cluster_id="w3")
    result = ClusterAnalyzer().run([TRIANGLE, duplicate])

    assert list(result.table.index) == ["w3"]
    assert result.table.loc["w3", "n_molecules"] == 3
    assert result.skipped[0]["error"] == "DataIntegrityError"


def test_ring_size_range_from_config():
    config = AnalysisConfig(min_ring_size=4, max_ring_size=6)
    result = ClusterAnalyzer(config).run([TRIANGLE, SQUARE])
    assert [c for c in result.table.columns if c.startswith("ring_")] == ["ring_4", "ring_5", "ring_6"]
    assert result.table.loc["w4", "ring_4"] == 1


def test_index_base_from_config():
    one_based = dict(TRIANGLE, hbonds=[[1, 2], [2, 3], [3, 1]])
    assert ClusterAnalyzer().run([one_based]).num_skipped == 1
    assert ClusterAnalyzer(AnalysisConfig(index_base=1)).run([one_based]).num_analysed == 1


def test_process_pool_matches_serial():
    data = records() * 3
    data = [dict(record, cluster_id=f"{record.get('cluster_id', 'x')}_{i}") for i, record in enumerate(data)]

    serial = ClusterAnalyzer(AnalysisConfig(n_proc=1)).run(data)
    parallel = ClusterAnalyzer(AnalysisConfig(n_proc=2)).run(data)

    assert parallel.table.equals(serial.table)
    assert parallel.skipped == serial.skipped


@pytest.mark.parametrize("malformed", [
    {"cluster_id": "x", "n_molecules": 2, "energy": -1.0, "hbonds": 5},
    {"cluster_id": "x", "n_molecules": 2, "energy": 10**400, "hbonds": []},
    {"cluster_id": "x", "n_molecules": 10**18, "energy": -1.0, "hbonds": []},
])
def test_malformed_record_does_not_stop_the_run(malformed):
    result = ClusterAnalyzer().run([TRIANGLE, malformed, SQUARE])

    assert list(result.table.index) == ["w3", "w4"]
    assert [(e["cluster_id"], e["error"]) for e in result.skipped] == [("x", "DataIntegrityError")]


def test_empty_input():
    result = ClusterAnalyzer().run([])
    assert result.table.empty
    assert result.get_summary()["num_skipped"] == 0


def test_verbose_output(capsys):
    ClusterAnalyzer(verbose=True).run(records())
    out = capsys.readouterr().out
    assert "Skipped bad_index: DataIntegrityError" in out
    assert "Analysed 2 clusters, skipped 3" in out


@pytest.mark.parametrize("record", [None, 42, "w3"])
def test_non_mapping_records_are_skipped(record):
    result = ClusterAnalyzer().run([record])
    assert result.num_skipped == 1
    assert result.skipped[0]["cluster_id"] == "record_0"
