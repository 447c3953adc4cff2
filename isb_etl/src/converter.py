"""
Parquet Converter Module
Converts every JSON snapshot under a data root into a sibling Parquet file
using DuckDB's JSON reader with automatic schema detection.
"""

import logging
import os
from pathlib import Path
from typing import List, Optional

import duckdb

from .errors import ConversionFailed
from .report import RunReport

logger = logging.getLogger(__name__)

JSON_SUFFIX = ".json"
PARQUET_SUFFIX = ".parquet"


def find_json_files(root: Path) -> List[Path]:
    """
    Recursively collect every ``*.json`` file under ``root``, depth first.
    """
    results: List[Path] = []
    with os.scandir(root) as entries:
        for entry in entries:
            if entry.is_dir():
                results.extend(find_json_files(Path(entry.path)))
            elif entry.name.endswith(JSON_SUFFIX):
                results.append(Path(entry.path))
    return results


def parquet_path_for(json_path: Path) -> Path:
    """Sibling Parquet path: only the extension changes."""
    return Path(json_path).with_suffix(PARQUET_SUFFIX)


def _sql_literal(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


class ParquetConverter:
    """
    Converts JSON snapshots to Parquet through one DuckDB connection.
    """

    def __init__(self, database: str = ":memory:"):
        """
        Initialize the converter.

        Args:
            database: DuckDB database to open for each run (in-memory by default)
        """
        self.database = database

    def convert_file(self, conn: duckdb.DuckDBPyConnection, json_path: Path) -> Path:
        """
        Convert one JSON file, overwriting any existing Parquet file.

        Args:
            conn: Open DuckDB connection
            json_path: JSON snapshot to convert

        Returns:
            Path to the written Parquet file

        Raises:
            ConversionFailed: If the file cannot be read or written for any reason
        """
        json_path = Path(json_path)
        parquet_path = parquet_path_for(json_path)

        try:
            parquet_path.parent.mkdir(parents=True, exist_ok=True)
            conn.execute(f"""
                COPY (SELECT * FROM read_json({_sql_literal(str(json_path))}, auto_detect=true))
                TO {_sql_literal(str(parquet_path))} (FORMAT PARQUET)
            """)
        except Exception as e:
            raise ConversionFailed(json_path, e) from e

        return parquet_path

    def convert_all(self, root: Path, family: Optional[str] = None) -> RunReport:
        """
        Convert every JSON file under ``root``.

        A missing root is not an error: a warning is logged and an empty
        report returned, and the root is not created.

        Args:
            root: Data root to scan
            family: Family name recorded in the report (defaults to the root's name)

        Returns:
            Report with one outcome per discovered file
        """
        root = Path(root)
        report = RunReport(phase="convert", family=family or root.name)

        logger.info(f"Starting JSON to Parquet conversion under {root}")

        if not root.is_dir():
            logger.warning(f"Data directory not found: {root}")
            return report

        json_files = find_json_files(root)
        logger.info(f"Found {len(json_files)} JSON files to convert")

        if not json_files:
            return report

        conn = duckdb.connect(self.database)
        try:
            for json_file in json_files:
                try:
                    parquet_file = self.convert_file(conn, json_file)
                except ConversionFailed as e:
                    logger.error(f"Failed to convert {json_file}: {e.cause}")
                    report.failed(str(json_file), e)
                    continue

                logger.info(f"Converted {json_file} -> {parquet_file}")
                report.succeeded(str(json_file), path=str(parquet_file))
        finally:
            conn.close()

        logger.info(
            f"Conversion complete: {report.succeeded_count} converted, "
            f"{report.failed_count} failed"
        )
        return report
