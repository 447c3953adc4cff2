"""
Error Types
Exceptions raised while building requests, fetching snapshots and converting
them to Parquet. Every one of them is caught at the smallest unit of work
(one fetch task or one file conversion) and turned into a logged outcome.
"""

from pathlib import Path
from typing import Optional


class ISBError(Exception):
    """Base exception for all ETL failures."""


class CatalogError(ISBError):
    """Raised when a (region, dataset type) pair has no catalog entry."""


class UnknownRegion(CatalogError):
    """Raised when the region has no catalog at all."""

    def __init__(self, region: str):
        self.region = region
        super().__init__(f"Unknown region: {region}")


class UnknownDatasetType(CatalogError):
    """Raised when the dataset type is not catalogued under the region."""

    def __init__(self, region: str, dataset_type: str):
        self.region = region
        self.dataset_type = dataset_type
        super().__init__(f"Unknown dataset type for region {region}: {dataset_type}")


class FetchFailed(ISBError):
    """Raised for a non-2xx HTTP response."""

    def __init__(self, status: int, url: Optional[str] = None):
        self.status = status
        self.url = url
        super().__init__(f"Fetch failed with status {status}")


class ParseFailed(ISBError):
    """Raised when the response body is not valid JSON."""


class ConversionFailed(ISBError):
    """Raised when a JSON snapshot cannot be written as Parquet."""

    def __init__(self, path: Path, cause: Exception):
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"Failed to convert {path}: {cause}")
