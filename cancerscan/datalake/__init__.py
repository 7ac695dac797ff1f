from __future__ import annotations

from .storage import FileSystemPredictionStore, PredictionRecord, PredictionStore

__all__ = [
    "FileSystemPredictionStore",
    "FirestorePredictionStore",
    "PredictionRecord",
    "PredictionStore",
]


def __getattr__(name: str):
    if name == "FirestorePredictionStore":
        from .firestore import FirestorePredictionStore

        return FirestorePredictionStore
    raise AttributeError(f"module 'cancerscan.datalake' has no attribute {name!r}")
