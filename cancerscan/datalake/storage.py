from __future__ import annotations

import json
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Protocol

from ..errors import PersistenceFailure


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PredictionRecord:
    record_id: str
    result: str
    suggestion: str
    created_at: datetime

    @classmethod
    def create(
        cls,
        result: str,
        suggestion: str,
        *,
        record_id: str | None = None,
        created_at: datetime | None = None,
    ) -> "PredictionRecord":
        return cls(
            record_id=record_id or str(uuid.uuid4()),
            result=result,
            suggestion=suggestion,
            created_at=(created_at or datetime.now(timezone.utc)).astimezone(
                timezone.utc
            ),
        )

    @property
    def created_at_iso(self) -> str:
        return format_timestamp(self.created_at)

    def to_document(self) -> Dict[str, Any]:
        return {
            "id": self.record_id,
            "result": self.result,
            "suggestion": self.suggestion,
            "createdAt": self.created_at_iso,
        }

    @classmethod
    def from_document(cls, data: Dict[str, Any]) -> "PredictionRecord":
        return cls(
            record_id=str(data["id"]),
            result=str(data["result"]),
            suggestion=str(data["suggestion"]),
            created_at=parse_timestamp(str(data["createdAt"])),
        )


class PredictionStore(Protocol):
    def save(self, record: PredictionRecord) -> None: ...

    def list_records(self) -> List[PredictionRecord]: ...


class FileSystemPredictionStore:
    """Store prediction records as JSON documents on the local filesystem."""

    def __init__(self, root: Path) -> None:
        self._root = root
        self._root.mkdir(parents=True, exist_ok=True)

    @property
    def root(self) -> Path:
        return self._root

    def save(self, record: PredictionRecord) -> None:
        date_dir = self._root / record.created_at.strftime("%Y/%m/%d")
        path = date_dir / f"{record.record_id}.json"
        try:
            date_dir.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(record.to_document(), indent=2), encoding="utf-8")
        except OSError as exc:
            raise PersistenceFailure(
                f"Failed to write prediction {record.record_id}"
            ) from exc
        logger.debug("Stored prediction record_id=%s path=%s", record.record_id, path)

    def list_records(self) -> List[PredictionRecord]:
        records: List[PredictionRecord] = []
        try:
            paths = sorted(self._root.glob("*/*/*/*.json"))
            for path in paths:
                data = json.loads(path.read_text(encoding="utf-8"))
                records.append(PredictionRecord.from_document(data))
        except (OSError, json.JSONDecodeError, KeyError, ValueError) as exc:
            raise PersistenceFailure("Failed to read prediction records") from exc
        records.sort(key=lambda item: item.created_at)
        return records


def format_timestamp(value: datetime) -> str:
    utc = value.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


__all__ = [
    "FileSystemPredictionStore",
    "PredictionRecord",
    "PredictionStore",
    "format_timestamp",
    "parse_timestamp",
]
