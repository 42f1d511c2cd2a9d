from __future__ import annotations

from typing import Any, Dict, Iterable, Iterator, List, Sequence

from google.cloud import bigquery
from loguru import logger

from ..app_model import Labels, Record
from ..config import RunSettings
from ..deadline import Deadline
from ..errors import StepError

QUERY_TEMPLATE = 'SELECT labels.event_id FROM `{table}` WHERE labels.event_id="{event_id}"'


def insert_records(
    client: bigquery.Client,
    table_ref: str,
    records: Sequence[Record],
    timeout: float,
) -> int:
    rows: List[Dict[str, Any]] = [record.to_row() for record in records]
    errors = client.insert_rows_json(table_ref, rows, retry=None, timeout=timeout)
    if errors:
        raise StepError("insert records", RuntimeError(f"row errors: {errors}"))
    logger.debug(f"inserted {len(rows)} records")
    return len(rows)


def build_query(settings: RunSettings, event_id: str = "article_created") -> str:
    return QUERY_TEMPLATE.format(table=settings.table_ref, event_id=event_id)


def run_query(
    client: bigquery.Client,
    sql: str,
    job_config: bigquery.QueryJobConfig,
    deadline: Deadline,
) -> Iterable[Any]:
    job = client.query(sql, job_config=job_config, retry=None, job_retry=None, timeout=deadline.remaining())
    # Result polling only gets the budget left after the job insert.
    return job.result(retry=None, timeout=deadline.remaining())


def iter_labels(rows: Iterable[Any]) -> Iterator[Labels]:
    for row in rows:
        record = Labels(event_id=row.get("event_id"))
        logger.info(f"got record: {record}")
        yield record
