import logging
import re
import threading
from typing import Any, Dict, List, Optional, Tuple

from google.cloud import bigquery

from .interfaces import (
    IReleaseNoteSource,
    Product,
    ReleaseNote,
    ReleaseNoteQuery,
    ReleaseNoteSourceError,
    validate_cadence,
)

DEFAULT_RELEASE_NOTES_TABLE = "bigquery-public-data.google_cloud_release_notes.release_notes"
DEFAULT_QUERY_LOCATION = "US"
MAX_RELEASE_NOTES = 1000

_TABLE_RE = re.compile(r"^[A-Za-z0-9_\-]+\.[A-Za-z0-9_]+\.[A-Za-z0-9_]+$")

_PRODUCTS_SQL = """
SELECT
    DISTINCT product_name AS product
FROM `{table}`
WHERE
    published_at >= DATE_SUB(CURRENT_DATE(), INTERVAL {cadence} DAY)
    AND {type_filter}
ORDER BY product ASC
"""

_RELEASE_NOTES_SQL = """
SELECT
    release_note_type,
    description
FROM `{table}`
WHERE
    published_at >= DATE_SUB(CURRENT_DATE(), INTERVAL {cadence} DAY)
    AND product_name = @product
    AND {type_filter}
GROUP BY release_note_type, description
ORDER BY release_note_type ASC, description ASC
LIMIT {limit}
"""


def _string_value(value: Any) -> str:
    if value is None:
        return "NULL"
    return str(value)


class BigQueryReleaseNoteSource(IReleaseNoteSource):
    """
    Release note lookups against the Google Cloud release notes public table.

    Every user-supplied value travels as a query parameter. The lookback
    window is the only value rendered into the SQL text and it is validated
    as a non-negative integer first.
    """

    def __init__(
        self,
        project_id: str,
        *,
        table: str = DEFAULT_RELEASE_NOTES_TABLE,
        location: str = DEFAULT_QUERY_LOCATION,
        client: Optional[bigquery.Client] = None,
        logger: Optional[logging.Logger] = None,
    ):
        if not _TABLE_RE.match(table):
            raise ValueError(f"Invalid BigQuery table reference: {table!r}")

        self.project_id = project_id
        self.table = table
        self.location = location
        self.logger = logger or logging.getLogger(__name__)
        self._client = client
        self._client_lock = threading.Lock()

    def _get_client(self) -> bigquery.Client:
        with self._client_lock:
            if self._client is None:
                try:
                    self._client = bigquery.Client(project=self.project_id)
                except Exception as e:
                    raise ReleaseNoteSourceError(f"Error creating BigQuery client: {e}") from e
                self.logger.info(f"BigQuery client initialized for project {self.project_id}")
            return self._client

    # -----------------------------
    # query construction
    # -----------------------------
    @staticmethod
    def _type_filter(query: ReleaseNoteQuery) -> Tuple[str, List[Any]]:
        if query.single_type:
            return (
                "release_note_type = @release_note_type",
                [bigquery.ScalarQueryParameter("release_note_type", "STRING", query.release_note_type)],
            )
        return (
            "release_note_type IN UNNEST(@release_note_types)",
            [bigquery.ArrayQueryParameter("release_note_types", "STRING", list(query.release_note_types))],
        )

    def build_products_query(self, query: ReleaseNoteQuery) -> Tuple[str, List[Any]]:
        """Return the SQL text and query parameters for a product lookup."""
        type_filter, params = self._type_filter(query)
        sql = _PRODUCTS_SQL.format(
            table=self.table,
            cadence=validate_cadence(query.cadence_days),
            type_filter=type_filter,
        )
        return sql, params

    def build_release_notes_query(self, product: str, query: ReleaseNoteQuery) -> Tuple[str, List[Any]]:
        """Return the SQL text and query parameters for a release note lookup."""
        type_filter, params = self._type_filter(query)
        sql = _RELEASE_NOTES_SQL.format(
            table=self.table,
            cadence=validate_cadence(query.cadence_days),
            type_filter=type_filter,
            limit=MAX_RELEASE_NOTES,
        )
        params = [bigquery.ScalarQueryParameter("product", "STRING", product)] + params
        return sql, params

    def _run(self, sql: str, params: List[Any]) -> List[Dict[str, Any]]:
        client = self._get_client()
        job_config = bigquery.QueryJobConfig(query_parameters=params)
        try:
            job = client.query(sql, job_config=job_config, location=self.location)
            # materialize so a mid-iteration failure never yields partial results
            return [row for row in job.result()]
        except Exception as e:
            raise ReleaseNoteSourceError(f"Error running query: {e}") from e

    # -----------------------------
    # IReleaseNoteSource
    # -----------------------------
    def get_products(self, query: ReleaseNoteQuery) -> List[Product]:
        if query.is_empty():
            self.logger.info("No release note types to query; skipping product lookup")
            return []

        self.logger.info(
            f"Asking for products with release notes of {query.describe()} "
            f"for the last {query.cadence_days} days"
        )
        sql, params = self.build_products_query(query)
        rows = self._run(sql, params)

        try:
            products = [Product(name=_string_value(row["product"])) for row in rows]
        except Exception as e:
            raise ReleaseNoteSourceError(f"Error reading row: {e}") from e

        if not products:
            self.logger.info("No release notes found.")
        elif len(products) == 1:
            self.logger.info("Found release notes for 1 product.")
        else:
            self.logger.info(f"Found release notes for {len(products)} products.")
        for product in products:
            self.logger.debug(f" - {product.name}")

        return products

    def get_release_notes(self, product: str, query: ReleaseNoteQuery) -> List[ReleaseNote]:
        if query.is_empty():
            return []

        sql, params = self.build_release_notes_query(product, query)
        rows = self._run(sql, params)

        try:
            notes = [
                ReleaseNote(
                    release_note_type=_string_value(row["release_note_type"]),
                    description=_string_value(row["description"]),
                )
                for row in rows
            ]
        except Exception as e:
            raise ReleaseNoteSourceError(f"Error reading row: {e}") from e

        self.logger.info(f"Found {len(notes)} release note(s) for {product} ({query.describe()})")
        return notes

    def cleanup(self) -> None:
        with self._client_lock:
            if self._client is not None:
                try:
                    self._client.close()
                except Exception as e:
                    self.logger.warning(f"Error closing BigQuery client: {e}")
                self._client = None
