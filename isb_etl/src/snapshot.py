"""
Snapshot Storage Module
Decides where a fetched dataset is stored and writes it as a JSON snapshot.

Snapshots are partitioned as ``{data_root}/{region}/{dataset_type}/{year}/``
and are replaced in full on every run.
"""

import json
import logging
import os
import tempfile
from datetime import date
from pathlib import Path
from typing import Any, List, NamedTuple

logger = logging.getLogger(__name__)

DEFAULT_FILENAME = "data.json"
CHECKPOINT_FILENAME = "data31.json"

# Announcement datasets archived once a year, at the end of the first quarter
CHECKPOINT_DATASET_TYPES = frozenset({
    "RUP-PaketPenyedia-Terumumkan",
    "RUP-PaketSwakelola-Terumumkan",
})


class FetchTask(NamedTuple):
    """One (region, dataset type, year) unit of work."""
    region: str
    dataset_type: str
    year: int

    def __str__(self) -> str:
        return f"{self.region}/{self.dataset_type}/{self.year}"


def is_checkpoint_date(run_date: date) -> bool:
    return run_date.month == 3 and run_date.day == 31


def snapshot_filename(run_date: date, dataset_type: str) -> str:
    """
    Choose the snapshot filename for a dataset on a given date.

    On March 31 the announcement datasets go to the checkpoint file so the
    year's first-quarter state is kept next to the regular snapshot.
    """
    if is_checkpoint_date(run_date) and dataset_type in CHECKPOINT_DATASET_TYPES:
        return CHECKPOINT_FILENAME
    return DEFAULT_FILENAME


def snapshot_dir(data_root: Path, task: FetchTask) -> Path:
    return Path(data_root) / task.region / task.dataset_type / str(task.year)


def snapshot_path(data_root: Path, task: FetchTask, run_date: date) -> Path:
    """Full path of the snapshot file for a task on a given date."""
    return snapshot_dir(data_root, task) / snapshot_filename(run_date, task.dataset_type)


def write_snapshot(path: Path, records: List[Any]) -> Path:
    """
    Write records as pretty-printed UTF-8 JSON, replacing any existing file.

    The records go to a temporary file in the same directory which is then
    renamed onto ``path``, so a failed write leaves the previous snapshot.

    Args:
        path: Destination file
        records: Record array to store

    Returns:
        Path to the saved file
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            json.dump(records, f, ensure_ascii=False, indent=2)
        os.replace(tmp_name, path)
    except BaseException:
        os.unlink(tmp_name)
        raise

    logger.debug(f"Wrote {len(records)} records to {path}")
    return path
