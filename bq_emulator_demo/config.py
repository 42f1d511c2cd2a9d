from __future__ import annotations

import copy
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

import yaml
from platformdirs import user_config_dir

from .errors import ConfigurationError

EMULATOR_HOST_ENV = "BIGQUERY_EMULATOR_HOST"
LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")

DEFAULT_CONFIG: Dict[str, Any] = {
    "app": {
        "project_id": "test-project",
        "dataset_id": "test_dataset",
        "table_id": "test_table",
        "timeout_seconds": 300,
        "cleanup_timeout_seconds": 60,
        "log_level": "DEBUG",
        "bq": {
            "use_query_cache": False,
            "labels": {
                "app": "bq-emulator-demo",
            },
        },
    }
}


@dataclass
class RunSettings:
    emulator_host: str
    project_id: str = "test-project"
    dataset_id: str = "test_dataset"
    table_id: str = "test_table"
    timeout_seconds: int = 300
    cleanup_timeout_seconds: int = 60
    use_query_cache: bool = False
    labels: Dict[str, str] = field(default_factory=dict)

    @property
    def endpoint(self) -> str:
        if "://" in self.emulator_host:
            return self.emulator_host
        return f"http://{self.emulator_host}"

    @property
    def dataset_ref(self) -> str:
        return f"{self.project_id}.{self.dataset_id}"

    @property
    def table_ref(self) -> str:
        return f"{self.project_id}.{self.dataset_id}.{self.table_id}"


class ConfigLoader:
    def __init__(self, config_path: Optional[str] = None) -> None:
        if config_path:
            self.config_dir = os.path.dirname(os.path.abspath(config_path))
            self.config_path = config_path
        else:
            self.config_dir = user_config_dir("bq_emulator_demo")
            self.config_path = f"{self.config_dir}/config.yaml"
        self._config = None

    def load(self) -> Dict[str, Any]:
        if self._config is not None:
            return self._config
        data = copy.deepcopy(DEFAULT_CONFIG)
        try:
            with open(self.config_path, "r", encoding="utf-8") as handle:
                loaded = yaml.safe_load(handle) or {}
        except FileNotFoundError:
            self._ensure_default_written(data)
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"invalid config file {self.config_path}: {exc}") from exc
        else:
            if not isinstance(loaded, dict):
                raise ConfigurationError(f"config file {self.config_path} must contain a mapping")
            data = self._merge(data, loaded)
        self._config = self._validate(data)
        return self._config

    def _ensure_default_written(self, data: Dict[str, Any]) -> None:
        try:
            os.makedirs(self.config_dir, exist_ok=True)
            with open(self.config_path, "w", encoding="utf-8") as handle:
                yaml.safe_dump(data, handle, sort_keys=False)
        except OSError:
            return

    def _merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        for key, value in override.items():
            if isinstance(value, dict) and isinstance(base.get(key), dict):
                base[key] = self._merge(base[key], value)
            else:
                base[key] = value
        return base

    def _validate(self, data: Dict[str, Any]) -> Dict[str, Any]:
        def safe_int(path: str, default: int) -> int:
            try:
                current = data
                for part in path.split("."):
                    current = current[part]
            except (KeyError, TypeError):
                return default
            if isinstance(current, int) and not isinstance(current, bool) and current > 0:
                return current
            return default

        def safe_str(path: str, default: str) -> str:
            try:
                current = data
                for part in path.split("."):
                    current = current[part]
            except (KeyError, TypeError):
                return default
            if isinstance(current, str) and current.strip():
                return current.strip()
            return default

        app = data.get("app")
        if not isinstance(app, dict):
            raise ConfigurationError(f"config file {self.config_path}: app must be a mapping")
        for key in ("project_id", "dataset_id", "table_id"):
            app[key] = safe_str(f"app.{key}", DEFAULT_CONFIG["app"][key])
        log_level = safe_str("app.log_level", "DEBUG").upper()
        app["log_level"] = log_level if log_level in LOG_LEVELS else "DEBUG"
        app["timeout_seconds"] = safe_int("app.timeout_seconds", 300)
        app["cleanup_timeout_seconds"] = safe_int("app.cleanup_timeout_seconds", 60)
        if not isinstance(app.get("bq"), dict):
            app["bq"] = copy.deepcopy(DEFAULT_CONFIG["app"]["bq"])
        use_query_cache = app["bq"].get("use_query_cache", False)
        app["bq"]["use_query_cache"] = use_query_cache if isinstance(use_query_cache, bool) else False
        if not isinstance(app["bq"].get("labels"), dict):
            app["bq"]["labels"] = dict(DEFAULT_CONFIG["app"]["bq"]["labels"])
        return data


def resolve_emulator_host(environ: Optional[Mapping[str, str]] = None) -> str:
    if environ is None:
        environ = os.environ
    addr = (environ.get(EMULATOR_HOST_ENV) or "").strip()
    if not addr:
        raise ConfigurationError(f"error {EMULATOR_HOST_ENV} must not be empty")
    return addr


def load_settings(
    loader: Optional[ConfigLoader] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> RunSettings:
    emulator_host = resolve_emulator_host(environ)
    app = (loader or ConfigLoader()).load()["app"]
    return RunSettings(
        emulator_host=emulator_host,
        project_id=app["project_id"],
        dataset_id=app["dataset_id"],
        table_id=app["table_id"],
        timeout_seconds=app["timeout_seconds"],
        cleanup_timeout_seconds=app["cleanup_timeout_seconds"],
        use_query_cache=app["bq"]["use_query_cache"],
        labels={str(k): str(v) for k, v in app["bq"]["labels"].items()},
    )
