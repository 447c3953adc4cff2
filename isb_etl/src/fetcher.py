"""
Data Fetcher Module
Responsible for fetching datasets from the LKPP ISB API and storing them
as partitioned JSON snapshots.
"""

import logging
from datetime import date
from pathlib import Path
from typing import Iterable, Iterator, Optional

from .api_client import APIConfig, ISBAPIClient
from .catalog import DatasetFamily
from .report import RunReport
from .snapshot import FetchTask, snapshot_path, write_snapshot

logger = logging.getLogger(__name__)


def iter_fetch_tasks(
    regions: Iterable[str],
    dataset_types: Iterable[str],
    years: Iterable[int]
) -> Iterator[FetchTask]:
    """
    Enumerate fetch tasks: region outermost, then dataset type, then year.
    """
    dataset_types = list(dataset_types)
    years = list(years)
    for region in regions:
        for dataset_type in dataset_types:
            for year in years:
                yield FetchTask(region, dataset_type, year)


class DataFetcher:
    """
    Fetches every dataset of a family and stores it as JSON snapshots.
    """

    def __init__(
        self,
        family: DatasetFamily,
        output_dir: Optional[Path] = None,
        api_config: Optional[APIConfig] = None
    ):
        """
        Initialize the DataFetcher.

        Args:
            family: Data family to fetch
            output_dir: Root of the family's snapshot tree (default data/{family})
            api_config: API configuration object
        """
        self.family = family
        self.output_dir = Path(output_dir) if output_dir is not None else Path("data") / family.name
        self.api_config = api_config or APIConfig()

    async def fetch_task(
        self,
        client: ISBAPIClient,
        task: FetchTask,
        run_date: date,
        report: RunReport
    ) -> None:
        """
        Fetch one dataset and write its snapshot.

        Every failure is logged with the task identity and recorded in the
        report; nothing is raised to the caller.
        """
        logger.info(f"Fetching {task.dataset_type} {task.year} for {task.region} ...")

        try:
            url = client.url_for(self.family, task.region, task.dataset_type, task.year)
            records = await client.get_records(url)

            if not records:
                logger.warning(f"No data for {task}")
                report.skipped(str(task))
                return

            path = write_snapshot(snapshot_path(self.output_dir, task, run_date), records)
        except Exception as e:
            logger.error(f"Failed: {task} => {e}")
            report.failed(str(task), e)
            return

        logger.info(f"Saved {len(records)} records to {path}")
        report.succeeded(str(task), records=len(records), path=str(path))

    async def fetch_all(
        self,
        regions: Optional[Iterable[str]] = None,
        dataset_types: Optional[Iterable[str]] = None,
        years: Optional[Iterable[int]] = None,
        run_date: Optional[date] = None
    ) -> RunReport:
        """
        Fetch every (region, dataset type, year) combination, one at a time.

        Args:
            regions: Regions to fetch (defaults to the family's regions)
            dataset_types: Dataset types to fetch (defaults to the family's types)
            years: Years to fetch (defaults to the family's years)
            run_date: Date used for the snapshot filename policy (defaults to today)

        Returns:
            Report with one outcome per task
        """
        regions = self.family.regions if regions is None else regions
        dataset_types = self.family.dataset_types if dataset_types is None else dataset_types
        years = self.family.years if years is None else years
        run_date = run_date or date.today()

        report = RunReport(phase="fetch", family=self.family.name)

        async with ISBAPIClient(self.api_config) as client:
            for task in iter_fetch_tasks(regions, dataset_types, years):
                await self.fetch_task(client, task, run_date, report)

            stats = client.get_statistics()

        logger.info(
            f"Fetch complete for {self.family.name}: "
            f"{report.succeeded_count} saved, {report.skipped_count} empty, "
            f"{report.failed_count} failed ({stats['total_requests']} requests)"
        )
        return report
