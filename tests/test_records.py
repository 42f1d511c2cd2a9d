from bq_emulator_demo.app_model import JSONPayload, Labels, Record, sample_records
from bq_emulator_demo.bq.jobs import build_query
from bq_emulator_demo.bq.schema import SCHEMA
from bq_emulator_demo.config import RunSettings


def test_schema_is_nested():
    assert [field.name for field in SCHEMA] == ["jsonPayload", "labels"]
    assert all(field.field_type == "RECORD" and field.mode == "NULLABLE" for field in SCHEMA)
    assert SCHEMA[0].fields[0].name == "message"
    assert SCHEMA[1].fields[0].name == "event_id"


def test_record_row_mirrors_schema():
    row = Record(JSONPayload("hello"), Labels("greeting")).to_row()
    assert row == {"jsonPayload": {"message": "hello"}, "labels": {"event_id": "greeting"}}


def test_null_fields_are_omitted():
    assert Record().to_row() == {}
    assert Record(JSONPayload(None), None).to_row() == {"jsonPayload": {}}


def test_sample_records():
    event_ids = [record.labels.event_id for record in sample_records()]
    assert event_ids == ["user_created", "article_created", "article_updated"]


def test_query_filters_on_nested_label():
    sql = build_query(RunSettings(emulator_host="localhost:9050"))
    assert sql == (
        "SELECT labels.event_id FROM `test-project.test_dataset.test_table` "
        'WHERE labels.event_id="article_created"'
    )
