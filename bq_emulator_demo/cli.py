from __future__ import annotations

import os
import signal
from typing import Optional

import click

from .app_model import Variant
from .config import LOG_LEVELS, ConfigLoader
from .errors import ConfigurationError
from .logging_setup import configure_logging
from .workflow import execute, report


def _raise_interrupt(signum, frame) -> None:
    raise KeyboardInterrupt(f"signal {signum}")


def _configured_log_level(loader: ConfigLoader) -> str:
    # A missing file is not written here; the host check runs first in execute().
    if not os.path.exists(loader.config_path):
        return "DEBUG"
    try:
        return loader.load()["app"]["log_level"]
    except ConfigurationError:
        # execute() raises the same error again and reports it.
        return "DEBUG"


@click.command()
@click.option(
    "--variant",
    type=click.Choice([v.value for v in Variant]),
    default=Variant.FULL.value,
    show_default=True,
    help="dataset: dataset only; table: dataset and table; full: also insert rows and query.",
)
@click.option("--config", "config_path", type=click.Path(dir_okay=False), default=None, help="YAML config file.")
@click.option(
    "--log-level",
    envvar="LOG_LEVEL",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Overrides app.log_level from the config file (default DEBUG).",
)
@click.option("--json-logs", is_flag=True, default=False, help="Serialize log records as JSON.")
def main(variant: str, config_path: Optional[str], log_level: Optional[str], json_logs: bool) -> None:
    """Run the BigQuery emulator workflow against BIGQUERY_EMULATOR_HOST."""
    loader = ConfigLoader(config_path)
    configure_logging(log_level or _configured_log_level(loader), enable_json=json_logs or None)
    previous = signal.signal(signal.SIGTERM, _raise_interrupt)
    try:
        result = execute(Variant(variant), loader=loader)
    finally:
        signal.signal(signal.SIGTERM, previous)
    raise SystemExit(report(result))


if __name__ == "__main__":
    main()
