"""
Loader for normalized water-cluster datasets.

Clusters are read from a ``.json`` file (a list of records, or an object
with a ``clusters`` list) or a ``.jsonl`` file with one record per line.
Records are passed on as plain dictionaries; validation happens when each
cluster is built, so one bad record only costs that cluster.
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterator, List


class ClusterDatabase:
    """
    Read access to a cluster dataset on disk.

    Attributes:
        path: Location of the dataset file
    """

    SUPPORTED_SUFFIXES = ('.json', '.jsonl')

    def __init__(self, path: str):
        """
        Initialize the database handler.

        Args:
            path: Path to a .json or .jsonl cluster file

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the file type is not supported
        """
        self.path = Path(path)
        if not self.path.exists():
            raise FileNotFoundError(f"Cluster file not found: {path}")
        if self.path.suffix.lower() not in self.SUPPORTED_SUFFIXES:
            raise ValueError(
                f"Unsupported cluster file type '{self.path.suffix}', "
                f"expected one of {', '.join(self.SUPPORTED_SUFFIXES)}"
            )
        self._records = None

    def _load_json(self) -> List[Dict[str, Any]]:
        try:
            with open(self.path, "r") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in cluster file: {e}")

        if isinstance(data, dict):
            data = data.get('clusters')
        if not isinstance(data, list):
            raise ValueError(
                f"Cluster file must contain a list of clusters or an object with a 'clusters' list: {self.path}"
            )
        return data

    def _load_jsonl(self) -> List[Dict[str, Any]]:
        records = []
        with open(self.path, "r") as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()
                if not line or line.startswith('#'):
                    continue
                try:
                    records.append(json.loads(line))
                except json.JSONDecodeError as e:
                    raise ValueError(f"Invalid JSON on line {line_num} of {self.path}: {e}")
        return records

    @property
    def records(self) -> List[Dict[str, Any]]:
        """All raw cluster records, loaded on first access."""
        if self._records is None:
            if self.path.suffix.lower() == '.jsonl':
                self._records = self._load_jsonl()
            else:
                self._records = self._load_json()
        return self._records

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[Dict[str, Any]]:
        return iter(self.records)

    def get_summary(self) -> Dict[str, Any]:
        """Number of records and their molecule-count range, where readable."""
        sizes = [
            record.get('n_molecules', record.get('n'))
            for record in self.records if isinstance(record, dict)
        ]
        sizes = [size for size in sizes if isinstance(size, int) and not isinstance(size, bool)]
        return {
            'path': str(self.path),
            'num_records': len(self.records),
            'min_molecules': min(sizes) if sizes else None,
            'max_molecules': max(sizes) if sizes else None
        }
