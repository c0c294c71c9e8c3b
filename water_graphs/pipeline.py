"""
Cluster analysis pipeline.

Every cluster is built, classified and ring-counted independently, so the
dataset is mapped over a process pool with a simple, pickleable worker.
Workers return plain rows or skip entries; the analyzer collects them into
the final table and a summary of the clusters that had to be excluded.
"""

import time
from collections import Counter
from dataclasses import dataclass, field
from multiprocessing import Pool
from typing import Any, Dict, Iterable, List, Optional, Tuple

import pandas as pd

from water_graphs.config import AnalysisConfig
from water_graphs.errors import AnalysisError, DataIntegrityError
from water_graphs.graph_builder import build_cluster
from water_graphs.models import ClusterRecord
from water_graphs.statistics import build_table, cluster_row


class ClusterResult:
    """Outcome of analysing a single cluster."""

    def __init__(self, position: int, cluster_id: str):
        self.position = position
        self.cluster_id = cluster_id
        self.row = None
        self.error = None
        self.message = None

    @property
    def skipped(self) -> bool:
        return self.row is None

    def skip_entry(self) -> Dict[str, Any]:
        return {'cluster_id': self.cluster_id, 'error': self.error, 'message': self.message}


def _record_id(raw: Any, position: int) -> str:
    if isinstance(raw, dict):
        cluster_id = raw.get('cluster_id', raw.get('id'))
        if cluster_id is not None:
            return str(cluster_id)
    return f"record_{position}"


def process_cluster_worker(args: Tuple) -> ClusterResult:
    """
    Analyse one raw cluster record.

    Args:
        args: Tuple of (position, raw_record, min_size, max_size, index_base)

    Returns:
        ClusterResult: With ``row`` set on success, or ``error`` and
        ``message`` set when the cluster has to be skipped
    """
    position, raw, min_size, max_size, index_base = args
    result = ClusterResult(position, _record_id(raw, position))

    try:
        record = ClusterRecord.from_dict(raw)
        cluster = build_cluster(record, index_base=index_base)
        result.row = cluster_row(cluster, min_size, max_size)
    except AnalysisError as e:
        result.error = type(e).__name__
        result.message = str(e)

    return result


@dataclass
class AnalysisResult:
    """
    Aggregated output of a pipeline run.

    Attributes:
        table: One row per successfully analysed cluster, indexed by cluster id
        skipped: Skip entries for excluded clusters, in input order
        processing_time: Wall time of the run in seconds
    """
    table: pd.DataFrame
    skipped: List[Dict[str, Any]] = field(default_factory=list)
    processing_time: float = 0.0

    @property
    def num_analysed(self) -> int:
        return len(self.table)

    @property
    def num_skipped(self) -> int:
        return len(self.skipped)

    def get_summary(self) -> Dict[str, Any]:
        """
        Get a summary of the run, including excluded clusters.

        Returns:
            Dict[str, Any]: Summary statistics
        """
        return {
            'num_clusters': self.num_analysed,
            'num_skipped': self.num_skipped,
            'skipped_by_error': dict(Counter(entry['error'] for entry in self.skipped)),
            'skipped': list(self.skipped),
            'processing_time': self.processing_time
        }


class ClusterAnalyzer:
    """
    Runs the per-cluster analysis over a whole dataset.

    This class maps the worker over the records, either in-process or with a
    process pool, and assembles the aggregated table.
    """

    def __init__(self, config: Optional[AnalysisConfig] = None, verbose: bool = False):
        """
        Initialize the analyzer.

        Args:
            config: Analysis configuration, defaults to AnalysisConfig()
            verbose: Enable verbose output with timing information
        """
        self.config = config or AnalysisConfig.default_config()
        self.verbose = verbose

    def _arguments(self, records: Iterable[Any]) -> List[Tuple]:
        return [
            (position, raw, self.config.min_ring_size, self.config.max_ring_size, self.config.index_base)
            for position, raw in enumerate(records)
        ]

    def run(self, records: Iterable[Any]) -> AnalysisResult:
        """
        Analyse all records.

        Args:
            records: Raw cluster records (mappings)

        Returns:
            AnalysisResult: Table of analysed clusters plus skipped clusters
        """
        start_time = time.time()
        args_list = self._arguments(records)

        if self.verbose:
            print(f"Analysing {len(args_list)} clusters "
                  f"(rings {self.config.min_ring_size}-{self.config.max_ring_size}, "
                  f"{self.config.n_proc} processes)")

        if self.config.n_proc > 1 and len(args_list) > 1:
            chunksize = max(1, len(args_list) // (self.config.n_proc * 4))
            with Pool(self.config.n_proc) as pool:
                results = pool.map(process_cluster_worker, args_list, chunksize=chunksize)
        else:
            results = [process_cluster_worker(args) for args in args_list]

        seen_ids = set()
        for result in results:
            if result.skipped:
                continue
            if result.cluster_id in seen_ids:
                result.row = None
                result.error = DataIntegrityError.__name__
                result.message = f"Duplicate cluster id {result.cluster_id}"
            seen_ids.add(result.cluster_id)

        rows = [result.row for result in results if not result.skipped]
        skipped = [result.skip_entry() for result in results if result.skipped]

        if self.verbose:
            for entry in skipped:
                print(f"  Skipped {entry['cluster_id']}: {entry['error']}: {entry['message']}")

        table = build_table(rows)
        processing_time = time.time() - start_time

        if self.verbose:
            print(f"Analysed {len(rows)} clusters, skipped {len(skipped)} ({processing_time:.2f}s)")
        elif skipped:
            print(f"Skipped {len(skipped)} clusters")

        return AnalysisResult(table=table, skipped=skipped, processing_time=processing_time)
