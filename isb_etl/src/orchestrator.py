"""
ETL Orchestrator Module
Coordinates the pipeline flow: fetch every dataset of a family, then convert
the family's snapshot tree to Parquet.
"""

import logging
import os
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from dotenv import load_dotenv

from .api_client import APIConfig
from .catalog import FAMILIES, DatasetFamily, get_family
from .converter import ParquetConverter
from .fetcher import DataFetcher
from .report import RunReport

logger = logging.getLogger(__name__)


class PipelineStatus(Enum):
    """Pipeline execution status."""
    IDLE = "idle"
    FETCHING = "fetching"
    CONVERTING = "converting"
    COMPLETED = "completed"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass
class PipelineConfig:
    """Configuration for where snapshots are stored."""
    data_dir: Path = Path("data")

    @classmethod
    def from_env(cls) -> "PipelineConfig":
        """Read ISB_DATA_DIR from the environment (or a .env file)."""
        load_dotenv()
        return cls(data_dir=Path(os.getenv('ISB_DATA_DIR', 'data')))

    def family_root(self, family: DatasetFamily) -> Path:
        return Path(self.data_dir) / family.name


@dataclass
class PipelineMetrics:
    """Track pipeline execution for one family."""
    family: str
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    status: PipelineStatus = PipelineStatus.IDLE
    reports: List[RunReport] = field(default_factory=list)

    def start(self, skip_fetch: bool = False):
        """Mark pipeline start."""
        self.start_time = datetime.now()
        self.status = PipelineStatus.CONVERTING if skip_fetch else PipelineStatus.FETCHING

    def complete(self):
        """Mark pipeline completion and derive the final status."""
        self.end_time = datetime.now()
        failed = sum(report.failed_count for report in self.reports)
        succeeded = sum(report.succeeded_count for report in self.reports)
        if failed == 0:
            self.status = PipelineStatus.COMPLETED
        elif succeeded:
            self.status = PipelineStatus.PARTIAL
        else:
            self.status = PipelineStatus.FAILED

    @property
    def duration(self) -> Optional[timedelta]:
        """Calculate pipeline duration."""
        if self.start_time and self.end_time:
            return self.end_time - self.start_time
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert metrics to dictionary."""
        return {
            'family': self.family,
            'start_time': self.start_time.isoformat() if self.start_time else None,
            'end_time': self.end_time.isoformat() if self.end_time else None,
            'duration_seconds': self.duration.total_seconds() if self.duration else None,
            'status': self.status.value,
            'phases': {report.phase: report.to_dict() for report in self.reports},
            'total_failed': sum(report.failed_count for report in self.reports),
        }


class ETLOrchestrator:
    """
    Main orchestrator for the ETL pipeline.
    Runs the fetch loop to completion, then the Parquet conversion, per family.
    """

    def __init__(
        self,
        api_config: Optional[APIConfig] = None,
        config: Optional[PipelineConfig] = None,
        converter: Optional[ParquetConverter] = None,
        run_date: Optional[date] = None
    ):
        """
        Initialize the ETL Orchestrator.

        Args:
            api_config: API configuration (read from the environment if omitted)
            config: Pipeline configuration (read from the environment if omitted)
            converter: Parquet converter to use
            run_date: Date for the snapshot filename policy (defaults to today)
        """
        self.api_config = api_config or APIConfig.from_env()
        self.config = config or PipelineConfig.from_env()
        self.converter = converter or ParquetConverter()
        self.run_date = run_date

    def _resolve(self, families: Optional[Iterable[str]]) -> List[DatasetFamily]:
        names = list(families) if families else list(FAMILIES)
        return [get_family(name) for name in names]

    async def run_family(self, family: DatasetFamily, skip_fetch: bool = False) -> Dict[str, Any]:
        """
        Run the pipeline for one family.

        Args:
            family: Family to process
            skip_fetch: Only convert the existing snapshot tree

        Returns:
            Pipeline execution results
        """
        root = self.config.family_root(family)
        metrics = PipelineMetrics(family=family.name)
        metrics.start(skip_fetch)

        logger.info(f"Starting ETL pipeline for {family.name} in {root}")

        if not skip_fetch:
            fetcher = DataFetcher(family, output_dir=root, api_config=self.api_config)
            metrics.reports.append(
                await fetcher.fetch_all(run_date=self.run_date or date.today())
            )

        metrics.status = PipelineStatus.CONVERTING
        metrics.reports.append(self.converter.convert_all(root, family=family.name))

        metrics.complete()
        logger.info(f"Pipeline for {family.name} finished with status: {metrics.status.value}")
        logger.info(f"Duration: {metrics.duration}")

        return metrics.to_dict()

    async def run(self, families: Optional[Iterable[str]] = None) -> List[Dict[str, Any]]:
        """
        Fetch and convert each requested family (all families by default).
        """
        return [await self.run_family(family) for family in self._resolve(families)]

    async def convert_only(self, families: Optional[Iterable[str]] = None) -> List[Dict[str, Any]]:
        """
        Convert the existing snapshot trees without fetching.
        """
        return [
            await self.run_family(family, skip_fetch=True)
            for family in self._resolve(families)
        ]
