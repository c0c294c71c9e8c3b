"""End-to-end tests for the command-line interface and report."""

import json

import matplotlib
matplotlib.use("Agg")

import pandas as pd
import networkx as nx
import pytest

from water_graphs.config import AnalysisConfig
from water_graphs.main import main
from water_graphs.pipeline import ClusterAnalyzer
from water_graphs.report import generate_report


def prism_record(cluster_id, energy):
    bonds = [list(edge) for edge in nx.circular_ladder_graph(5).edges]
    return {"cluster_id": cluster_id, "n_molecules": 10, "energy": energy, "hbonds": bonds}


def dataset():
    records = [
        {"cluster_id": "w3", "n_molecules": 3, "energy": -15.0, "hbonds": [[0, 1], [1, 2], [2, 0]]},
        {"cluster_id": "w4", "n_molecules": 4, "energy": -27.0, "hbonds": [[0, 1], [1, 2], [2, 3], [3, 0]]},
        {"cluster_id": "w4b", "n_molecules": 4, "energy": -26.0,
         "hbonds": [[0, 1], [1, 2], [2, 3], [3, 0], [0, 2]]},
        prism_record("w10a", -95.0),
        prism_record("w10b", -94.0),
        {"cluster_id": "broken", "n_molecules": 2, "energy": -1.0, "hbonds": [[0, 2]]},
    ]
    return records


@pytest.fixture
def cluster_file(tmp_path):
    path = tmp_path / "clusters.json"
    path.write_text(json.dumps(dataset()))
    return path


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.json"
    AnalysisConfig(energy_window=[3, 10]).save_to_file(str(path))
    return path


def test_cli_writes_results(tmp_path, cluster_file, config_file, capsys):
    output_dir = tmp_path / "out"
    main(["--clusters", str(cluster_file), "--config", str(config_file),
          "--output-dir", str(output_dir), "--no-report"])

    table = pd.read_csv(output_dir / "clusters.csv", index_col="cluster_id")
    assert len(table) == 5
    assert table.loc["w10a", "ring_4"] == 5
    assert table.loc["w10a", "ring_5"] == 2
    assert table.loc["w10a", "ring_8"] == 0

    with open(output_dir / "summary.json") as f:
        summary = json.load(f)
    assert summary["num_skipped"] == 1
    assert summary["skipped"][0]["cluster_id"] == "broken"

    stats = pd.read_csv(output_dir / "ring_stats.csv")
    row = stats[(stats.n_molecules == 4) & (stats.ring_size == 3)].iloc[0]
    assert row["mean"] == pytest.approx(1.0)

    assert not (output_dir / "cluster_report.pdf").exists()
    assert "Clusters skipped: 1" in capsys.readouterr().out


def test_cli_overrides(tmp_path, cluster_file, config_file):
    output_dir = tmp_path / "out"
    main(["--clusters", str(cluster_file), "--config", str(config_file),
          "--output-dir", str(output_dir), "--no-report", "--max-ring", "6", "--n-proc", "2"])

    table = pd.read_csv(output_dir / "clusters.csv", index_col="cluster_id")
    assert "ring_6" in table.columns
    assert "ring_7" not in table.columns


def test_cli_missing_file(tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        main(["--clusters", str(tmp_path / "missing.json")])
    assert excinfo.value.code == 1


def test_cli_invalid_override(tmp_path, cluster_file, config_file):
    with pytest.raises(SystemExit) as excinfo:
        main(["--clusters", str(cluster_file), "--config", str(config_file),
              "--output-dir", str(tmp_path / "out"), "--min-ring", "8", "--max-ring", "5"])
    assert excinfo.value.code == 1


def test_report(tmp_path):
    result = ClusterAnalyzer().run(dataset())
    generate_report(result.table, str(tmp_path), energy_window=(3, 10))
    report = tmp_path / "cluster_report.pdf"
    assert report.exists()
    assert report.stat().st_size > 0


def test_report_skipped_for_tiny_table(tmp_path, capsys):
    result = ClusterAnalyzer().run(dataset()[:1])
    generate_report(result.table, str(tmp_path))
    assert not (tmp_path / "cluster_report.pdf").exists()
    assert "Skipping report generation" in capsys.readouterr().out
