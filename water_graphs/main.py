"""
Main script for water-cluster graph analysis.

This script provides a simple command-line interface for analysing a
dataset of water clusters: ring statistics, molecule types and energies.
"""

import argparse
import json
import os
import sys
import time
from pathlib import Path
from typing import Optional

from water_graphs.config import AnalysisConfig, load_or_create_config
from water_graphs.database import ClusterDatabase
from water_graphs.pipeline import AnalysisResult, ClusterAnalyzer
from water_graphs.report import generate_report
from water_graphs.statistics import ring_stats


def save_results(result: AnalysisResult, output_dir: str = "results", ddof: int = 1) -> None:
    """
    Save analysis results.

    Writes:
    - clusters.csv: one row per analysed cluster
    - ring_stats.csv: mean and standard deviation of ring counts per cluster size
    - summary.json: counts of analysed and skipped clusters with skip reasons

    Args:
        result: Output of the analysis pipeline
        output_dir: Directory to save results
        ddof: Delta degrees of freedom for the standard deviations
    """
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    table_file = output_path / "clusters.csv"
    result.table.to_csv(table_file)
    print(f"Saved {result.num_analysed} clusters to {table_file}")

    stats_file = output_path / "ring_stats.csv"
    ring_stats(result.table, ddof=ddof).to_csv(stats_file, index=False)
    print(f"Saved ring statistics to {stats_file}")

    summary_file = output_path / "summary.json"
    with open(summary_file, 'w') as f:
        json.dump(result.get_summary(), f, indent=2)

    print(f"Saved summary to {summary_file}")


def setup_config(config_path: Optional[str] = None) -> AnalysisConfig:
    """
    Set up configuration for the analysis.

    Args:
        config_path: Path to configuration file (optional)

    Returns:
        AnalysisConfig: Configuration object
    """
    if config_path:
        config = AnalysisConfig.load_from_file(config_path)
        print(f"Loaded configuration from {config_path}")
    else:
        config = load_or_create_config()

    return config


def print_config(config: AnalysisConfig) -> None:
    summary = config.get_summary()
    print("\nConfiguration Summary:")
    print(f"  Ring sizes: {summary['ring_sizes'][0]}-{summary['ring_sizes'][-1]}")
    print(f"  Molecule index base: {summary['index_base']}")
    print(f"  Std ddof: {summary['std_ddof']}")
    print(f"  Energy window: {summary['energy_window'][0]}-{summary['energy_window'][1]} molecules")
    print(f"  Processes: {summary['n_proc']}")


def main(argv=None):
    """Main execution function."""
    parser = argparse.ArgumentParser(
        description="Analyse water clusters as graphs. "
                    "Outputs a CSV table with primitive ring counts, molecule "
                    "type counts, hydrogen bonds and energies per cluster.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    parser.add_argument(
        "--clusters",
        required=True,
        help="Cluster dataset (.json or .jsonl)"
    )
    parser.add_argument(
        "--config",
        help="Path to configuration file (JSON format)"
    )
    parser.add_argument(
        "--output-dir",
        default="results",
        help="Directory to save results"
    )
    parser.add_argument(
        "--n-proc",
        type=int,
        help="Number of parallel processes (overrides config)"
    )
    parser.add_argument(
        "--min-ring",
        type=int,
        help="Smallest ring size to count (overrides config)"
    )
    parser.add_argument(
        "--max-ring",
        type=int,
        help="Largest ring size to count (overrides config)"
    )
    parser.add_argument(
        "--index-base",
        type=int,
        choices=[0, 1],
        help="First molecule index used in the dataset (overrides config)"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose output"
    )
    parser.add_argument(
        "--no-report",
        action="store_true",
        help="Disable generation of the figure report (PDF)"
    )

    args = parser.parse_args(argv)

    if not os.path.exists(args.clusters):
        print(f"Error: Cluster file not found: {args.clusters}")
        sys.exit(1)

    start_time = time.time()
    print("Setting up configuration...")

    try:
        config = setup_config(args.config)

        overrides = {
            'n_proc': args.n_proc,
            'min_ring_size': args.min_ring,
            'max_ring_size': args.max_ring,
            'index_base': args.index_base
        }
        for key, value in overrides.items():
            if value is not None:
                setattr(config, key, value)
        config.validate()

        if args.verbose:
            print_config(config)

        database = ClusterDatabase(args.clusters)
        print(f"\nLoaded {len(database)} cluster records from {args.clusters}")

        analyzer = ClusterAnalyzer(config, verbose=args.verbose)
        result = analyzer.run(database)

        summary = result.get_summary()
        print("\nAnalysis Complete!")
        print(f"  Clusters analysed: {summary['num_clusters']}")
        print(f"  Clusters skipped: {summary['num_skipped']}")
        for error, count in sorted(summary['skipped_by_error'].items()):
            print(f"    {error}: {count}")

        print(f"\nSaving results to {args.output_dir}...")
        save_results(result, args.output_dir, ddof=config.std_ddof)

        if not args.no_report:
            if args.verbose:
                print("Generating figure report...")
            generate_report(result.table, args.output_dir, ddof=config.std_ddof,
                            energy_window=config.energy_window)

        if args.verbose:
            print(f"Done! ({time.time() - start_time:.2f}s)")
        else:
            print("Done!")

    except Exception as e:
        print(f"Error: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
