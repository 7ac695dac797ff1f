from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

import pytest
from google.api_core import exceptions as google_exceptions
from google.auth import exceptions as auth_exceptions

import cancerscan.datalake.firestore as firestore_store
from cancerscan.datalake.firestore import FirestorePredictionStore
from cancerscan.datalake.storage import FileSystemPredictionStore, PredictionRecord
from cancerscan.errors import PersistenceFailure


def _record(record_id: str, minutes: int = 0) -> PredictionRecord:
    return PredictionRecord.create(
        "Cancer",
        "Segera periksa ke dokter!",
        record_id=record_id,
        created_at=datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        + timedelta(minutes=minutes),
    )


def test_filesystem_store_writes_dated_documents(tmp_path) -> None:
    store = FileSystemPredictionStore(tmp_path)
    record = _record("abc")

    store.save(record)

    path = tmp_path / "2024" / "01" / "02" / "abc.json"
    assert path.exists()
    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload == {
        "id": "abc",
        "result": "Cancer",
        "suggestion": "Segera periksa ke dokter!",
        "createdAt": "2024-01-02T03:04:05.000Z",
    }


def test_filesystem_store_lists_records_oldest_first(tmp_path) -> None:
    store = FileSystemPredictionStore(tmp_path)
    store.save(_record("later", minutes=5))
    store.save(_record("earlier"))

    records = store.list_records()

    assert [r.record_id for r in records] == ["earlier", "later"]
    assert records[0] == _record("earlier")


def test_filesystem_store_reports_corrupt_documents(tmp_path) -> None:
    store = FileSystemPredictionStore(tmp_path)
    bad = tmp_path / "2024" / "01" / "02"
    bad.mkdir(parents=True)
    (bad / "broken.json").write_text("{not json", encoding="utf-8")

    with pytest.raises(PersistenceFailure):
        store.list_records()


class _FakeSnapshot:
    def __init__(self, doc_id: str, data: dict) -> None:
        self.id = doc_id
        self._data = data

    def to_dict(self) -> dict:
        return dict(self._data)


class _FakeDocument:
    def __init__(self, collection: "_FakeCollection", doc_id: str) -> None:
        self._collection = collection
        self._doc_id = doc_id

    def set(self, data: dict) -> None:
        if self._collection.fail:
            raise google_exceptions.ServiceUnavailable("firestore down")
        self._collection.docs[self._doc_id] = dict(data)


class _FakeCollection:
    def __init__(self) -> None:
        self.docs: dict[str, dict] = {}
        self.fail = False

    def document(self, doc_id: str) -> _FakeDocument:
        return _FakeDocument(self, doc_id)

    def stream(self):
        if self.fail:
            raise google_exceptions.ServiceUnavailable("firestore down")
        return [_FakeSnapshot(doc_id, data) for doc_id, data in self.docs.items()]


class _FakeFirestoreClient:
    def __init__(self) -> None:
        self.collections: dict[str, _FakeCollection] = {}

    def collection(self, name: str) -> _FakeCollection:
        return self.collections.setdefault(name, _FakeCollection())


def test_firestore_store_keys_documents_by_id() -> None:
    client = _FakeFirestoreClient()
    store = FirestorePredictionStore(client=client)
    record = _record("doc-1")

    store.save(record)

    assert client.collections["predictions"].docs["doc-1"] == record.to_document()
    assert store.list_records() == [record]


def test_firestore_store_wraps_api_errors() -> None:
    client = _FakeFirestoreClient()
    store = FirestorePredictionStore(collection="history", client=client)
    client.collection("history").fail = True

    with pytest.raises(PersistenceFailure):
        store.save(_record("doc-2"))
    with pytest.raises(PersistenceFailure):
        store.list_records()


class _NoCredentialsClient:
    def collection(self, name: str):
        raise auth_exceptions.DefaultCredentialsError(
            "Could not automatically determine credentials"
        )


def test_firestore_store_wraps_credential_errors() -> None:
    store = FirestorePredictionStore(client=_NoCredentialsClient())

    with pytest.raises(PersistenceFailure) as excinfo:
        store.save(_record("doc-3"))
    assert isinstance(excinfo.value.__cause__, auth_exceptions.DefaultCredentialsError)
    with pytest.raises(PersistenceFailure):
        store.list_records()


def test_firestore_store_wraps_lazy_client_errors(monkeypatch) -> None:
    def _no_credentials(*args, **kwargs):
        raise auth_exceptions.DefaultCredentialsError("no credentials")

    monkeypatch.setattr(firestore_store.firestore, "Client", _no_credentials)
    store = FirestorePredictionStore()

    with pytest.raises(PersistenceFailure):
        store.save(_record("doc-4"))
