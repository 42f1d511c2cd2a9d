from __future__ import annotations

import concurrent.futures
from contextlib import ExitStack, contextmanager
from typing import Callable, Iterator, List, Mapping, Optional

import requests
from google.api_core import exceptions as api_exceptions
from google.cloud import bigquery
from loguru import logger

from .app_model import Labels, RunResult, Variant, sample_records
from .bq.client import build_job_config, get_client
from .bq.jobs import build_query, insert_records, iter_labels, run_query
from .bq.provision import create_dataset, create_table, delete_dataset, fetch_dataset, fetch_table
from .config import ConfigLoader, RunSettings, load_settings
from .deadline import Deadline
from .errors import DeadlineExceeded, EmulatorDemoError, RunCancelled, StepError

ClientFactory = Callable[[RunSettings], bigquery.Client]

TIMEOUT_ERRORS = (
    TimeoutError,
    concurrent.futures.TimeoutError,
    requests.exceptions.Timeout,
    api_exceptions.RetryError,
)


@contextmanager
def step(name: str) -> Iterator[None]:
    try:
        yield
    except EmulatorDemoError:
        raise
    except KeyboardInterrupt as exc:
        raise RunCancelled(name, exc) from exc
    except TIMEOUT_ERRORS as exc:
        raise DeadlineExceeded(name, exc) from exc
    except Exception as exc:
        raise StepError(name, exc) from exc


class EmulatorWorkflow:
    def __init__(
        self,
        settings: RunSettings,
        client_factory: ClientFactory = get_client,
        deadline: Optional[Deadline] = None,
    ) -> None:
        self.settings = settings
        self.client_factory = client_factory
        self.deadline = deadline

    def run(self, variant: Variant) -> List[Labels]:
        settings = self.settings
        deadline = self.deadline or Deadline(settings.timeout_seconds)

        with step("new client"):
            deadline.remaining()
            client = self.client_factory(settings)
        logger.debug(f"client created: project={settings.project_id} endpoint={settings.endpoint}")

        with ExitStack() as stack:
            stack.callback(self._teardown, client)
            with step("create dataset"):
                create_dataset(client, settings, deadline.remaining())
            with step("dataset metadata"):
                fetch_dataset(client, settings, deadline.remaining())
            if not variant.creates_table:
                return []

            with step("create table"):
                create_table(client, settings, deadline.remaining())
            with step("table metadata"):
                fetch_table(client, settings, deadline.remaining())
            if not variant.loads_data:
                return []

            with step("insert records"):
                insert_records(client, settings.table_ref, sample_records(), deadline.remaining())
            job_config = build_job_config(settings.use_query_cache, settings.labels)
            with step("read query"):
                rows = run_query(client, build_query(settings), job_config, deadline)
            with step("iterate rows"):
                return list(iter_labels(rows))

    def _teardown(self, client: bigquery.Client) -> None:
        # Own timeout: teardown still has to run once the run deadline is spent.
        delete_dataset(client, self.settings, self.settings.cleanup_timeout_seconds)


def execute(
    variant: Variant,
    settings: Optional[RunSettings] = None,
    loader: Optional[ConfigLoader] = None,
    environ: Optional[Mapping[str, str]] = None,
    client_factory: Optional[ClientFactory] = None,
) -> RunResult:
    result = RunResult(variant=variant)
    try:
        if settings is None:
            settings = load_settings(loader, environ)
        result.rows = EmulatorWorkflow(settings, client_factory or get_client).run(variant)
    except EmulatorDemoError as exc:
        result.error = exc
    except KeyboardInterrupt as exc:
        result.error = RunCancelled("run", exc)
    return result


def report(result: RunResult) -> int:
    if result.ok:
        logger.info(f"process successfully finished: variant={result.variant.value} rows={len(result.rows)}")
    elif isinstance(result.error, RunCancelled):
        logger.warning(f"run cancelled: {result.error}")
    else:
        logger.error(str(result.error))
    return result.exit_code
