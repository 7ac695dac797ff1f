from __future__ import annotations

import logging
from typing import List

from google.api_core import exceptions as google_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import firestore

from ..errors import PersistenceFailure
from .storage import PredictionRecord


logger = logging.getLogger(__name__)

# Client construction raises auth errors; calls raise API errors.
_BACKEND_ERRORS = (google_exceptions.GoogleAPIError, auth_exceptions.GoogleAuthError)


class FirestorePredictionStore:
    """Keep prediction records in a Firestore collection keyed by record id."""

    def __init__(
        self,
        collection: str = "predictions",
        client: firestore.Client | None = None,
    ) -> None:
        self._collection_name = collection
        self._client = client

    @property
    def collection_name(self) -> str:
        return self._collection_name

    def save(self, record: PredictionRecord) -> None:
        try:
            self._collection().document(record.record_id).set(record.to_document())
        except _BACKEND_ERRORS as exc:
            raise PersistenceFailure(
                f"Failed to write prediction {record.record_id}"
            ) from exc
        logger.debug(
            "Stored prediction record_id=%s collection=%s",
            record.record_id,
            self._collection_name,
        )

    def list_records(self) -> List[PredictionRecord]:
        records: List[PredictionRecord] = []
        try:
            for doc in self._collection().stream():
                data = doc.to_dict() or {}
                data.setdefault("id", doc.id)
                records.append(PredictionRecord.from_document(data))
        except _BACKEND_ERRORS as exc:
            raise PersistenceFailure("Failed to read prediction records") from exc
        except (KeyError, ValueError) as exc:
            raise PersistenceFailure("Malformed prediction document") from exc
        return records

    def _collection(self) -> firestore.CollectionReference:
        if self._client is None:
            self._client = firestore.Client()
        return self._client.collection(self._collection_name)


__all__ = ["FirestorePredictionStore"]
