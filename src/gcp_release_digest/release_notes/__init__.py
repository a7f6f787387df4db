"""
Release Notes Package

Reads Google Cloud release notes from the BigQuery public dataset.
"""

from .interfaces import (
    IReleaseNoteSource,
    Product,
    ReleaseNote,
    ReleaseNoteQuery,
    ReleaseNoteSourceError,
    ReleaseNoteType,
    validate_cadence,
)
from .bigquery_source import (
    BigQueryReleaseNoteSource,
    DEFAULT_QUERY_LOCATION,
    DEFAULT_RELEASE_NOTES_TABLE,
    MAX_RELEASE_NOTES,
)

__all__ = [
    "IReleaseNoteSource",
    "Product",
    "ReleaseNote",
    "ReleaseNoteQuery",
    "ReleaseNoteSourceError",
    "ReleaseNoteType",
    "validate_cadence",
    "BigQueryReleaseNoteSource",
    "DEFAULT_QUERY_LOCATION",
    "DEFAULT_RELEASE_NOTES_TABLE",
    "MAX_RELEASE_NOTES",
]
