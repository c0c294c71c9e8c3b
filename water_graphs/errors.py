"""
Exceptions raised while analysing water clusters.

Each of these is fatal for the cluster being processed only: the pipeline
records the cluster as skipped and carries on with the rest of the dataset.
"""


class AnalysisError(ValueError):
    """Base class for per-cluster analysis failures."""

    def __init__(self, message: str, cluster_id=None):
        super().__init__(message)
        self.cluster_id = cluster_id


class DataIntegrityError(AnalysisError):
    """Malformed or incomplete cluster record."""


class InvalidDegreeError(AnalysisError):
    """Negative or malformed degree during node classification."""


class InvalidClusterError(AnalysisError):
    """Degenerate cluster, e.g. zero molecules used as a divisor."""
