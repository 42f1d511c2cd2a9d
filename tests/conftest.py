import re
from typing import Any, Dict, Iterable, List, Optional

import pytest
from google.cloud import bigquery
from loguru import logger

from bq_emulator_demo.bq.schema import SCHEMA
from bq_emulator_demo.config import RunSettings


class FakeJob:
    def __init__(self, client: "FakeClient", rows: Iterable[Any]) -> None:
        self._client = client
        self._rows = rows

    def result(self, **kwargs):
        self._client.result_kwargs = kwargs
        return self._rows


class FakeClient:
    def __init__(self) -> None:
        self.calls: List[str] = []
        self.failures: Dict[str, BaseException] = {}
        self.hooks: Dict[str, Any] = {}
        self.rows: List[Dict[str, Any]] = []
        self.insert_errors: List[Dict[str, Any]] = []
        self.result_rows: Optional[Iterable[Any]] = None
        self.timeouts: Dict[str, float] = {}
        self.last_sql: Optional[str] = None
        self.result_kwargs: Optional[Dict[str, Any]] = None

    def _record(self, name: str, timeout=None) -> None:
        self.calls.append(name)
        self.timeouts[name] = timeout
        hook = self.hooks.get(name)
        if hook is not None:
            hook()
        exc = self.failures.get(name)
        if exc is not None:
            raise exc

    def create_dataset(self, dataset, retry=None, timeout=None):
        self._record("create_dataset", timeout)
        return dataset

    def get_dataset(self, dataset_ref, retry=None, timeout=None):
        self._record("get_dataset", timeout)
        return bigquery.Dataset(dataset_ref)

    def create_table(self, table, retry=None, timeout=None):
        self._record("create_table", timeout)
        return table

    def get_table(self, table_ref, retry=None, timeout=None):
        self._record("get_table", timeout)
        return bigquery.Table(table_ref, schema=SCHEMA)

    def insert_rows_json(self, table, json_rows, retry=None, timeout=None):
        self._record("insert_rows_json", timeout)
        self.rows.extend(json_rows)
        return list(self.insert_errors)

    def query(self, sql, job_config=None, retry=None, job_retry=None, timeout=None):
        self._record("query", timeout)
        self.last_sql = sql
        if self.result_rows is not None:
            return FakeJob(self, self.result_rows)
        wanted = re.search(r'labels\.event_id="([^"]*)"', sql).group(1)
        matched = [
            {"event_id": row["labels"]["event_id"]}
            for row in self.rows
            if row.get("labels", {}).get("event_id") == wanted
        ]
        return FakeJob(self, matched)

    def delete_dataset(self, dataset_ref, delete_contents=False, retry=None, timeout=None):
        self._record("delete_dataset", timeout)
        assert delete_contents is True


@pytest.fixture
def fake_client():
    return FakeClient()


@pytest.fixture
def client_factory(fake_client):
    def factory(settings):
        fake_client.calls.append("new_client")
        return fake_client

    return factory


@pytest.fixture
def settings():
    return RunSettings(emulator_host="localhost:9050", labels={"app": "bq-emulator-demo"})


@pytest.fixture
def log_records():
    records = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(handler_id)
