"""
API Client for the LKPP ISB Open-Data API
=========================================

This module provides the async client used to download procurement
datasets from the LKPP Integrated Service Bus (isb.lkpp.go.id).

Features:
- Async HTTP requests with aiohttp
- Rate limiting with asyncio-throttle
- Transport timeout taken from the configuration
- Normalization of the two response shapes (bare array or ``{"data": [...]}``)

Requests are issued one at a time and are never retried; a failed request
is reported to the caller as a typed error.
"""

import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import aiohttp
from asyncio_throttle import Throttler
from dotenv import load_dotenv

from .catalog import DatasetFamily
from .errors import FetchFailed, ParseFailed

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://isb.lkpp.go.id/isb-2/api"

URL_TEMPLATE = (
    "{base_url}/{api_key}/json/{code}/{dataset_type}"
    "/tipe/{type_segment}/parameter/{year}:{region}"
)


@dataclass
class APIConfig:
    """Configuration for the API client"""
    base_url: str = DEFAULT_BASE_URL
    rate_limit: int = 5  # requests per second
    timeout: int = 300  # seconds, enforced by the transport

    @classmethod
    def from_env(cls) -> "APIConfig":
        """
        Build a configuration from environment variables (and a .env file).

        Recognised variables: ISB_BASE_URL, ISB_RATE_LIMIT, ISB_TIMEOUT.
        Unset variables keep their defaults.
        """
        load_dotenv()
        defaults = cls()
        return cls(
            base_url=os.getenv('ISB_BASE_URL', defaults.base_url),
            rate_limit=int(os.getenv('ISB_RATE_LIMIT', defaults.rate_limit)),
            timeout=int(os.getenv('ISB_TIMEOUT', defaults.timeout)),
        )


def _segment(value: Any) -> str:
    return quote(str(value), safe=":-")


def build_url(
    family: DatasetFamily,
    region: str,
    dataset_type: str,
    year: int,
    base_url: str = DEFAULT_BASE_URL
) -> str:
    """
    Build the request URL for one (region, dataset type, year).

    Args:
        family: Data family providing the catalog and route segment
        region: Region code (e.g. "D197")
        dataset_type: Dataset type name (e.g. "RUP-MasterSatker")
        year: Budget year
        base_url: API base URL

    Returns:
        Fully-qualified request URL

    Raises:
        UnknownRegion: If the region is not in the family's catalog
        UnknownDatasetType: If the dataset type is not catalogued for the region
    """
    entry = family.catalog.lookup(region, dataset_type)

    return URL_TEMPLATE.format(
        base_url=base_url.rstrip("/"),
        api_key=_segment(entry.api_key),
        code=_segment(entry.code),
        dataset_type=_segment(dataset_type),
        type_segment=_segment(family.type_segment),
        year=_segment(year),
        region=_segment(region),
    )


def normalize_records(payload: Any) -> List[Any]:
    """
    Extract the record array from a parsed response.

    A bare array is returned as is, an object carrying a ``data`` array is
    unwrapped, and anything else is treated as empty.
    """
    if isinstance(payload, list):
        return payload
    elif isinstance(payload, dict) and isinstance(payload.get("data"), list):
        return payload["data"]
    else:
        logger.debug(f"Unexpected response format: {type(payload).__name__}")
        return []


class ISBAPIClient:
    """
    Async API client for the LKPP ISB open-data API.

    One client holds one aiohttp session for the whole run. Use it as an
    async context manager.
    """

    def __init__(self, config: Optional[APIConfig] = None):
        """
        Initialize the API client.

        Args:
            config: Optional API configuration. Uses defaults if not provided.
        """
        self.config = config or APIConfig()
        self.throttler = Throttler(rate_limit=self.config.rate_limit)
        self.session: Optional[aiohttp.ClientSession] = None
        self.request_count = 0
        self.error_count = 0

    async def __aenter__(self):
        """Async context manager entry"""
        timeout = aiohttp.ClientTimeout(total=self.config.timeout)
        self.session = aiohttp.ClientSession(timeout=timeout)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit"""
        if self.session:
            await self.session.close()
            self.session = None

    def url_for(self, family: DatasetFamily, region: str, dataset_type: str, year: int) -> str:
        """Build a request URL against the configured base URL."""
        return build_url(family, region, dataset_type, year, base_url=self.config.base_url)

    async def get_json(self, url: str) -> Any:
        """
        Issue one GET request and parse the body as JSON.

        Args:
            url: Fully-qualified request URL

        Returns:
            Parsed JSON value

        Raises:
            FetchFailed: If the response status is not 2xx
            ParseFailed: If the body is not valid JSON
        """
        if self.session is None:
            raise RuntimeError("ISBAPIClient must be used as an async context manager")

        async with self.throttler:
            async with self.session.get(url) as response:
                self.request_count += 1

                if not 200 <= response.status < 300:
                    self.error_count += 1
                    raise FetchFailed(response.status, url)

                # The API does not always send an application/json content type
                text = await response.text()

        try:
            return json.loads(text)
        except (json.JSONDecodeError, RecursionError) as e:
            self.error_count += 1
            logger.debug(f"Failed to parse JSON from response: {text[:200]}")
            raise ParseFailed(f"Invalid JSON response: {e}") from e

    async def get_records(self, url: str) -> List[Any]:
        """
        Fetch a dataset and return its record array.

        Returns:
            List of records, possibly empty
        """
        payload = await self.get_json(url)
        return normalize_records(payload)

    def get_statistics(self) -> Dict[str, float]:
        """
        Get client statistics.

        Returns:
            Dictionary with request and error counts
        """
        return {
            "total_requests": self.request_count,
            "total_errors": self.error_count,
            "success_rate": (
                (self.request_count - self.error_count) / self.request_count * 100
                if self.request_count > 0 else 0
            )
        }
