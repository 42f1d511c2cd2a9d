from __future__ import annotations

from typing import Any, Dict

from google.api_core.client_options import ClientOptions
from google.auth.credentials import AnonymousCredentials
from google.cloud import bigquery

from ..config import RunSettings


def get_client(settings: RunSettings) -> bigquery.Client:
    # Plain http endpoint and anonymous credentials: the emulator has no TLS and no auth.
    return bigquery.Client(
        project=settings.project_id,
        client_options=ClientOptions(api_endpoint=settings.endpoint),
        credentials=AnonymousCredentials(),
    )


def build_job_config(use_query_cache: bool, labels: Dict[str, Any]) -> bigquery.QueryJobConfig:
    config = bigquery.QueryJobConfig()
    config.use_query_cache = use_query_cache
    config.labels = labels
    return config
