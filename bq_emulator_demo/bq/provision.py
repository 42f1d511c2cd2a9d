from __future__ import annotations

from google.cloud import bigquery
from loguru import logger

from ..config import RunSettings
from .schema import SCHEMA


def create_dataset(client: bigquery.Client, settings: RunSettings, timeout: float) -> bigquery.Dataset:
    dataset = bigquery.Dataset(settings.dataset_ref)
    return client.create_dataset(dataset, retry=None, timeout=timeout)


def fetch_dataset(client: bigquery.Client, settings: RunSettings, timeout: float) -> bigquery.Dataset:
    dataset = client.get_dataset(settings.dataset_ref, retry=None, timeout=timeout)
    logger.debug(f"dataset created: {dataset.reference} created={dataset.created} location={dataset.location}")
    return dataset


def create_table(client: bigquery.Client, settings: RunSettings, timeout: float) -> bigquery.Table:
    table = bigquery.Table(settings.table_ref, schema=SCHEMA)
    return client.create_table(table, retry=None, timeout=timeout)


def fetch_table(client: bigquery.Client, settings: RunSettings, timeout: float) -> bigquery.Table:
    table = client.get_table(settings.table_ref, retry=None, timeout=timeout)
    fields = [field.to_api_repr() for field in table.schema or []]
    logger.debug(f"table created: {table.reference} schema={fields}")
    return table


def delete_dataset(client: bigquery.Client, settings: RunSettings, timeout: float) -> bool:
    try:
        client.delete_dataset(settings.dataset_ref, delete_contents=True, retry=None, timeout=timeout)
    except Exception as exc:
        logger.error(f"error delete dataset {settings.dataset_ref}: {exc}")
        return False
    logger.debug("dataset is deleted")
    return True
