from __future__ import annotations

import unittest
from unittest import mock

from google.cloud import bigquery

from gcp_release_digest.release_notes import (
    BigQueryReleaseNoteSource,
    MAX_RELEASE_NOTES,
    Product,
    ReleaseNote,
    ReleaseNoteQuery,
    ReleaseNoteSourceError,
    ReleaseNoteType,
    validate_cadence,
)


def _client_returning(rows):
    client = mock.MagicMock()
    client.query.return_value.result.return_value = rows
    return client


class TestReleaseNoteQuery(unittest.TestCase):
    def test_cadence_must_be_a_non_negative_integer(self) -> None:
        self.assertEqual(validate_cadence(0), 0)
        self.assertEqual(validate_cadence(30), 30)
        for bad in (-1, 1.5, "7", True, None):
            with self.subTest(bad=bad):
                with self.assertRaises(ValueError):
                    validate_cadence(bad)

    def test_single_type_query(self) -> None:
        q = ReleaseNoteQuery.for_type(7, "FEATURE")
        self.assertTrue(q.single_type)
        self.assertEqual(q.release_note_type, "FEATURE")
        self.assertEqual(q.describe(), "FEATURE")
        self.assertFalse(q.is_empty())

    def test_set_query(self) -> None:
        q = ReleaseNoteQuery.for_types(7, ["FIX", "ISSUE"])
        self.assertFalse(q.single_type)
        self.assertIsNone(q.release_note_type)
        self.assertEqual(q.release_note_types, ("FIX", "ISSUE"))
        self.assertTrue(ReleaseNoteQuery.for_types(7, []).is_empty())

    def test_single_type_query_needs_exactly_one_type(self) -> None:
        with self.assertRaises(ValueError):
            ReleaseNoteQuery(cadence_days=7, release_note_types=("FIX", "ISSUE"), single_type=True)

    def test_negative_cadence_rejected_at_construction(self) -> None:
        with self.assertRaises(ValueError):
            ReleaseNoteQuery.for_type(-3, "FIX")

    def test_labels_cover_every_category(self) -> None:
        self.assertEqual(len(ReleaseNoteType.labels()), 9)
        self.assertIn("SECURITY_BULLETIN", ReleaseNoteType.labels())


class TestBigQueryQueries(unittest.TestCase):
    def setUp(self) -> None:
        self.source = BigQueryReleaseNoteSource("test-project", client=mock.MagicMock())

    def test_products_query_single_type(self) -> None:
        sql, params = self.source.build_products_query(ReleaseNoteQuery.for_type(7, "BREAKING_CHANGE"))

        self.assertIn("DISTINCT product_name AS product", sql)
        self.assertIn("published_at >= DATE_SUB(CURRENT_DATE(), INTERVAL 7 DAY)", sql)
        self.assertIn("release_note_type = @release_note_type", sql)
        self.assertIn("ORDER BY product ASC", sql)
        self.assertIn("`bigquery-public-data.google_cloud_release_notes.release_notes`", sql)
        self.assertNotIn("BREAKING_CHANGE", sql)

        self.assertEqual(len(params), 1)
        self.assertIsInstance(params[0], bigquery.ScalarQueryParameter)
        self.assertEqual(params[0].name, "release_note_type")
        self.assertEqual(params[0].value, "BREAKING_CHANGE")

    def test_products_query_type_set(self) -> None:
        sql, params = self.source.build_products_query(ReleaseNoteQuery.for_types(3, ["FIX", "ISSUE"]))

        self.assertIn("release_note_type IN UNNEST(@release_note_types)", sql)
        self.assertIn("INTERVAL 3 DAY", sql)
        self.assertIsInstance(params[0], bigquery.ArrayQueryParameter)
        self.assertEqual(params[0].name, "release_note_types")
        self.assertEqual(list(params[0].values), ["FIX", "ISSUE"])

    def test_release_notes_query_dedups_orders_and_limits(self) -> None:
        sql, params = self.source.build_release_notes_query(
            "Cloud Run'; DROP TABLE x; --", ReleaseNoteQuery.for_type(7, "FEATURE")
        )

        self.assertIn("product_name = @product", sql)
        self.assertIn("GROUP BY release_note_type, description", sql)
        self.assertIn("ORDER BY release_note_type ASC", sql)
        self.assertIn(f"LIMIT {MAX_RELEASE_NOTES}", sql)
        self.assertNotIn("DROP TABLE", sql)

        by_name = {p.name: p for p in params}
        self.assertEqual(by_name["product"].value, "Cloud Run'; DROP TABLE x; --")
        self.assertEqual(by_name["release_note_type"].value, "FEATURE")

    def test_zero_day_window_is_today_only(self) -> None:
        sql, _ = self.source.build_products_query(ReleaseNoteQuery.for_type(0, "FIX"))
        self.assertIn("INTERVAL 0 DAY", sql)

    def test_identical_queries_build_identical_sql(self) -> None:
        q = ReleaseNoteQuery.for_types(7, ["FIX", "ISSUE"])
        first_sql, first_params = self.source.build_release_notes_query("BigQuery", q)
        second_sql, second_params = self.source.build_release_notes_query("BigQuery", q)
        self.assertEqual(first_sql, second_sql)
        self.assertEqual([p.to_api_repr() for p in first_params], [p.to_api_repr() for p in second_params])

    def test_invalid_table_reference_rejected(self) -> None:
        with self.assertRaises(ValueError):
            BigQueryReleaseNoteSource("p", table="dataset.table` WHERE 1=1 --")


class TestBigQueryReleaseNoteSource(unittest.TestCase):
    def test_get_products_decodes_rows(self) -> None:
        client = _client_returning([{"product": "App Engine"}, {"product": "Cloud Run"}])
        source = BigQueryReleaseNoteSource("test-project", location="EU", client=client)

        products = source.get_products(ReleaseNoteQuery.for_type(7, "FEATURE"))

        self.assertEqual(products, [Product("App Engine"), Product("Cloud Run")])
        _, kwargs = client.query.call_args
        self.assertEqual(kwargs["location"], "EU")
        self.assertIsInstance(kwargs["job_config"], bigquery.QueryJobConfig)
        self.assertEqual(kwargs["job_config"].query_parameters[0].value, "FEATURE")

    def test_get_release_notes_decodes_rows_and_nulls(self) -> None:
        client = _client_returning([
            {"release_note_type": "FEATURE", "description": "Added GPUs."},
            {"release_note_type": "FIX", "description": None},
        ])
        source = BigQueryReleaseNoteSource("test-project", client=client)

        notes = source.get_release_notes("Cloud Run", ReleaseNoteQuery.for_types(7, ["FEATURE", "FIX"]))

        self.assertEqual(
            notes,
            [
                ReleaseNote("FEATURE", "Added GPUs."),
                ReleaseNote("FIX", "NULL"),
            ],
        )

    def test_no_rows_is_an_empty_list(self) -> None:
        source = BigQueryReleaseNoteSource("test-project", client=_client_returning([]))
        self.assertEqual(source.get_products(ReleaseNoteQuery.for_type(7, "ISSUE")), [])

    def test_empty_type_set_skips_the_query(self) -> None:
        client = _client_returning([{"product": "unexpected"}])
        source = BigQueryReleaseNoteSource("test-project", client=client)

        self.assertEqual(source.get_products(ReleaseNoteQuery.for_types(7, [])), [])
        self.assertEqual(source.get_release_notes("Cloud Run", ReleaseNoteQuery.for_types(7, [])), [])
        client.query.assert_not_called()

    def test_query_failure_is_wrapped(self) -> None:
        client = mock.MagicMock()
        client.query.side_effect = RuntimeError("403 Access Denied")
        source = BigQueryReleaseNoteSource("test-project", client=client)

        with self.assertRaises(ReleaseNoteSourceError) as ctx:
            source.get_products(ReleaseNoteQuery.for_type(7, "FIX"))
        self.assertIn("403 Access Denied", str(ctx.exception))

    def test_failure_while_reading_results_gives_no_partial_list(self) -> None:
        def rows():
            yield {"product": "Cloud Run"}
            raise RuntimeError("stream reset")

        client = mock.MagicMock()
        client.query.return_value.result.return_value = rows()
        source = BigQueryReleaseNoteSource("test-project", client=client)

        with self.assertRaises(ReleaseNoteSourceError):
            source.get_products(ReleaseNoteQuery.for_type(7, "FIX"))

    def test_malformed_row_is_wrapped(self) -> None:
        source = BigQueryReleaseNoteSource("test-project", client=_client_returning([{"name": "Cloud Run"}]))
        with self.assertRaises(ReleaseNoteSourceError):
            source.get_products(ReleaseNoteQuery.for_type(7, "FIX"))

    def test_client_is_created_lazily(self) -> None:
        with mock.patch("gcp_release_digest.release_notes.bigquery_source.bigquery.Client") as client_cls:
            client_cls.return_value.query.return_value.result.return_value = []
            source = BigQueryReleaseNoteSource("test-project")
            client_cls.assert_not_called()

            source.get_products(ReleaseNoteQuery.for_type(7, "FIX"))
            source.get_products(ReleaseNoteQuery.for_type(7, "ISSUE"))
            client_cls.assert_called_once_with(project="test-project")

            source.cleanup()
            client_cls.return_value.close.assert_called_once()

    def test_client_creation_failure_is_wrapped(self) -> None:
        with mock.patch(
            "gcp_release_digest.release_notes.bigquery_source.bigquery.Client",
            side_effect=RuntimeError("no credentials"),
        ):
            source = BigQueryReleaseNoteSource("test-project")
            with self.assertRaises(ReleaseNoteSourceError):
                source.get_products(ReleaseNoteQuery.for_type(7, "FIX"))


if __name__ == "__main__":
    unittest.main()
