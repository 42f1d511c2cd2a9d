from __future__ import annotations

from typing import List

from google.cloud import bigquery

# Nested RECORD fields, see
# https://cloud.google.com/bigquery/docs/samples/bigquery-nested-repeated-schema
SCHEMA: List[bigquery.SchemaField] = [
    bigquery.SchemaField(
        "jsonPayload",
        "RECORD",
        mode="NULLABLE",
        fields=[bigquery.SchemaField("message", "STRING", mode="NULLABLE")],
    ),
    bigquery.SchemaField(
        "labels",
        "RECORD",
        mode="NULLABLE",
        fields=[bigquery.SchemaField("event_id", "STRING", mode="NULLABLE")],
    ),
]
