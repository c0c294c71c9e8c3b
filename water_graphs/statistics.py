"""
Aggregation and statistics over analysed clusters.

One row per cluster is combined into a pandas DataFrame indexed by cluster
id. Columns:

- ``n_molecules``, ``energy``
- ``ring_<k>``: primitive ring counts for each size k
- ``n_hbonds``: total hydrogen bonds (sum of out-degrees)
- ``type_<label>``: number of molecules of each acceptor/donor type
- ``energy_per_molecule``, ``hbonds_per_molecule``

Grouped statistics are computed per cluster size (``n_molecules``). A group
with a single member reports a standard deviation of 0.0 regardless of the
``ddof`` used.
"""

from typing import Dict, Iterable, List, Optional

import numpy as np
import pandas as pd
from scipy import stats

from water_graphs.errors import InvalidClusterError
from water_graphs.models import Cluster

RING_PREFIX = "ring_"
TYPE_PREFIX = "type_"
GROUP_COLUMN = "n_molecules"
NORMALIZERS = ("n_molecules", "n_hbonds")


def ring_column(size: int) -> str:
    return f"{RING_PREFIX}{size}"


def type_column(label: str) -> str:
    return f"{TYPE_PREFIX}{label}"


def ring_columns(table: pd.DataFrame) -> List[str]:
    """Ring count columns of a table, ordered by ring size."""
    columns = [c for c in table.columns if c.startswith(RING_PREFIX)]
    return sorted(columns, key=lambda c: int(c[len(RING_PREFIX):]))


def type_columns(table: pd.DataFrame) -> List[str]:
    """Molecule type columns, ordered by total degree then label."""
    columns = [c for c in table.columns if c.startswith(TYPE_PREFIX)]
    return sorted(columns, key=lambda c: (len(c), c))


def energy_per_molecule(n_molecules: int, energy: float) -> float:
    """
    Energy divided by the number of molecules.

    Raises:
        InvalidClusterError: If the cluster has no molecules
    """
    if n_molecules == 0:
        raise InvalidClusterError("Cannot normalize by molecule count of an empty cluster")
    return energy / n_molecules


def cluster_row(cluster: Cluster, min_size: int = 3, max_size: int = 10) -> Dict[str, object]:
    """
    Build the table row for one cluster.

    Raises:
        InvalidClusterError: If the cluster has no molecules
    """
    try:
        per_molecule = energy_per_molecule(cluster.n_molecules, cluster.energy)
    except InvalidClusterError as e:
        raise InvalidClusterError(str(e), cluster.cluster_id)

    row = {
        'cluster_id': cluster.cluster_id,
        'n_molecules': cluster.n_molecules,
        'energy': cluster.energy,
    }
    for size, count in cluster.primitive_cycle_counts(min_size, max_size).items():
        row[ring_column(size)] = count

    row['n_hbonds'] = cluster.num_hbonds
    for label, count in sorted(cluster.type_counts.items(), key=lambda item: (len(item[0]), item[0])):
        row[type_column(label)] = count

    row['energy_per_molecule'] = per_molecule
    row['hbonds_per_molecule'] = cluster.num_hbonds / cluster.n_molecules
    return row


def build_table(rows: Iterable[Dict[str, object]]) -> pd.DataFrame:
    """
    Combine per-cluster rows into one table indexed by cluster id.

    Type columns absent from a cluster are filled with 0. Rows are ordered by
    cluster size, then id.
    """
    rows = list(rows)
    if not rows:
        return pd.DataFrame(
            columns=['n_molecules', 'energy', 'n_hbonds', 'energy_per_molecule', 'hbonds_per_molecule'],
            index=pd.Index([], name='cluster_id')
        )

    table = pd.DataFrame(rows).set_index('cluster_id')
    if table.index.has_duplicates:
        duplicated = sorted(set(table.index[table.index.duplicated()]))
        raise ValueError(f"Duplicate cluster ids: {', '.join(duplicated)}")

    counts = ring_columns(table) + type_columns(table)
    table[counts] = table[counts].fillna(0).astype(int)

    ordered = (['n_molecules', 'energy'] + ring_columns(table) + ['n_hbonds'] + type_columns(table)
               + ['energy_per_molecule', 'hbonds_per_molecule'])
    ordered = [c for c in ordered if c in table.columns]
    table = table[ordered + [c for c in table.columns if c not in ordered]]
    return table.sort_values(['n_molecules', 'cluster_id'], kind='mergesort')


def group_stats(table: pd.DataFrame, column: str, ddof: int = 1) -> pd.DataFrame:
    """
    Mean and standard deviation of a column grouped by cluster size.

    Args:
        table: Cluster table
        column: Numeric column to reduce
        ddof: Delta degrees of freedom for the standard deviation

    Returns:
        pd.DataFrame: Indexed by ``n_molecules`` with ``mean``, ``std`` and
        ``count`` columns
    """
    if column not in table.columns:
        raise KeyError(f"Unknown column: {column}")

    grouped = table.groupby(GROUP_COLUMN, sort=True)[column]
    result = pd.DataFrame({
        'mean': grouped.mean(),
        'std': grouped.std(ddof=ddof),
        'count': grouped.count()
    })
    result.loc[result['count'] == 1, 'std'] = 0.0
    return result


def ring_stats(table: pd.DataFrame, ddof: int = 1) -> pd.DataFrame:
    """
    Mean and standard deviation of every ring column per cluster size.

    Returns:
        pd.DataFrame: Long format with ``n_molecules``, ``ring_size``,
        ``mean``, ``std`` and ``count`` columns
    """
    frames = []
    for column in ring_columns(table):
        frame = group_stats(table, column, ddof=ddof).reset_index()
        frame.insert(1, 'ring_size', int(column[len(RING_PREFIX):]))
        frames.append(frame)

    if not frames:
        return pd.DataFrame(columns=[GROUP_COLUMN, 'ring_size', 'mean', 'std', 'count'])
    return pd.concat(frames, ignore_index=True)


def pearson(a, b) -> float:
    """
    Pearson correlation coefficient of two equally long sequences.

    Returns NaN when either sequence is constant.
    """
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    if a.shape != b.shape:
        raise ValueError(f"Sequences differ in length: {a.shape[0]} != {b.shape[0]}")
    if a.size < 2:
        raise ValueError("Correlation needs at least two values")

    if np.all(a == a[0]) or np.all(b == b[0]):
        return float('nan')
    return float(stats.pearsonr(a, b)[0])


def ring_correlations(table: pd.DataFrame, columns: Optional[List[str]] = None) -> pd.DataFrame:
    """Pairwise Pearson correlation between ring count columns across all clusters."""
    columns = columns or ring_columns(table)
    matrix = pd.DataFrame(index=columns, columns=columns, dtype=float)
    for i, first in enumerate(columns):
        for second in columns[i:]:
            value = pearson(table[first], table[second])
            matrix.loc[first, second] = value
            matrix.loc[second, first] = value
    return matrix


def type_energy_correlations(table: pd.DataFrame) -> pd.Series:
    """Pearson correlation of each molecule type count with cluster energy."""
    return pd.Series(
        {column: pearson(table[column], table['energy']) for column in type_columns(table)},
        dtype=float
    )


def normalize(table: pd.DataFrame, column: str, by: str) -> pd.Series:
    """
    Divide a column by the molecule count or hydrogen bond count of each row.

    Raises:
        InvalidClusterError: If any row has a zero divisor
    """
    if by not in NORMALIZERS:
        raise ValueError(f"Can only normalize by one of {NORMALIZERS}, got {by!r}")

    divisor = table[by]
    zero = divisor == 0
    if zero.any():
        ids = ', '.join(str(cluster_id) for cluster_id in table.index[zero])
        raise InvalidClusterError(f"Cannot normalize {column} by {by}: zero for {ids}",
                                  cluster_id=table.index[zero][0])

    return (table[column] / divisor).rename(f"{column}_per_{by}")


def type_populations(table: pd.DataFrame) -> pd.DataFrame:
    """Total number of molecules of each type per cluster size."""
    return table.groupby(GROUP_COLUMN, sort=True)[type_columns(table)].sum()


def select_size_range(table: pd.DataFrame, low: int, high: int) -> pd.DataFrame:
    """Rows with ``low <= n_molecules <= high``."""
    return table[(table[GROUP_COLUMN] >= low) & (table[GROUP_COLUMN] <= high)]
