"""
ISB Procurement ETL
===================

Downloads public procurement datasets from the LKPP ISB open-data API,
stores them as JSON snapshots partitioned by region, dataset type and year,
and converts the snapshot trees to Parquet.

Main components:
- catalog: Static (region, dataset type) credential tables per data family
- api_client: Async API client and URL builder
- snapshot: Snapshot paths, filename policy and JSON writer
- fetcher: Sequential fetch-and-persist loop
- converter: JSON to Parquet conversion with DuckDB
- orchestrator: Runs fetch then convert for each family
"""

__version__ = "0.1.0"
__author__ = "ISB ETL Development Team"
