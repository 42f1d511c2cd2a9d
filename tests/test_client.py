from google.auth.credentials import AnonymousCredentials

from bq_emulator_demo.bq import client as client_module
from bq_emulator_demo.config import RunSettings


def test_client_targets_emulator_without_auth(monkeypatch):
    captured = {}

    def fake_client(**kwargs):
        captured.update(kwargs)
        return "client"

    monkeypatch.setattr(client_module.bigquery, "Client", fake_client)
    result = client_module.get_client(RunSettings(emulator_host="localhost:9050", project_id="p"))

    assert result == "client"
    assert captured["project"] == "p"
    assert captured["client_options"].api_endpoint == "http://localhost:9050"
    assert isinstance(captured["credentials"], AnonymousCredentials)


def test_job_config():
    config = client_module.build_job_config(use_query_cache=False, labels={"app": "demo"})
    assert config.use_query_cache is False
    assert config.labels == {"app": "demo"}
