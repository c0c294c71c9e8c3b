"""
Water Cluster Graphs Package

A package for analysing water clusters as hydrogen-bond graphs.

This package provides tools for:
- Building directed and undirected (family) graphs from cluster records
- Counting primitive rings of size 3 to 10
- Classifying molecules by acceptor/donor configuration (AAD, ADD, AADD, ...)
- Aggregating per-cluster results and computing grouped statistics

Main modules:
- config: Configuration management
- database: Cluster dataset loading
- graph_builder: Cluster and graph construction
- cycles: Primitive ring enumeration
- classifier: Acceptor/donor type labels
- statistics: Aggregated table and statistics
- pipeline: Parallel analysis over a dataset
- report: PDF figures
- main: Command-line interface
"""

from water_graphs.errors import (
    AnalysisError, DataIntegrityError, InvalidDegreeError, InvalidClusterError
)
from water_graphs.config import AnalysisConfig, load_or_create_config
from water_graphs.classifier import type_label, classify_nodes, count_node_types
from water_graphs.cycles import count_primitive_cycles, primitive_cycles
from water_graphs.models import Cluster, ClusterRecord, HydrogenBond, Molecule
from water_graphs.graph_builder import build_cluster, directed_graph, family_graph
from water_graphs.database import ClusterDatabase
from water_graphs.pipeline import AnalysisResult, ClusterAnalyzer

__version__ = "1.0.0"

__all__ = [
    "AnalysisError",
    "DataIntegrityError",
    "InvalidDegreeError",
    "InvalidClusterError",
    "AnalysisConfig",
    "load_or_create_config",
    "type_label",
    "classify_nodes",
    "count_node_types",
    "count_primitive_cycles",
    "primitive_cycles",
    "Cluster",
    "ClusterRecord",
    "HydrogenBond",
    "Molecule",
    "build_cluster",
    "directed_graph",
    "family_graph",
    "ClusterDatabase",
    "AnalysisResult",
    "ClusterAnalyzer"
]
