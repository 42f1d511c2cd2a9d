from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .errors import EmulatorDemoError


class Variant(str, Enum):
    DATASET = "dataset"
    TABLE = "table"
    FULL = "full"

    @property
    def creates_table(self) -> bool:
        return self in (Variant.TABLE, Variant.FULL)

    @property
    def loads_data(self) -> bool:
        return self is Variant.FULL


@dataclass
class JSONPayload:
    message: Optional[str] = None


@dataclass
class Labels:
    event_id: Optional[str] = None


@dataclass
class Record:
    json_payload: Optional[JSONPayload] = None
    labels: Optional[Labels] = None

    def to_row(self) -> Dict[str, Any]:
        # NULL leaves and records are left out of the JSON row.
        row: Dict[str, Any] = {}
        if self.json_payload is not None:
            payload = {}
            if self.json_payload.message is not None:
                payload["message"] = self.json_payload.message
            row["jsonPayload"] = payload
        if self.labels is not None:
            labels = {}
            if self.labels.event_id is not None:
                labels["event_id"] = self.labels.event_id
            row["labels"] = labels
        return row


def sample_records() -> List[Record]:
    return [
        Record(JSONPayload("new user created!"), Labels("user_created")),
        Record(JSONPayload("new article created!"), Labels("article_created")),
        Record(JSONPayload("article updated!"), Labels("article_updated")),
    ]


@dataclass
class RunResult:
    variant: Variant
    rows: List[Labels] = field(default_factory=list)
    error: Optional[EmulatorDemoError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def failed_step(self) -> Optional[str]:
        return getattr(self.error, "step", None)

    @property
    def exit_code(self) -> int:
        if self.error is None:
            return 0
        return self.error.exit_code
