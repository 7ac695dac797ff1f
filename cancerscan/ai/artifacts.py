from __future__ import annotations

import logging
from pathlib import Path

from google.cloud import storage


logger = logging.getLogger(__name__)


class GcsArtifactStore:
    """Read model artifacts from a Google Cloud Storage bucket."""

    def __init__(
        self,
        bucket_name: str,
        cache_dir: Path,
        client: storage.Client | None = None,
    ) -> None:
        self._bucket_name = bucket_name
        self._cache_dir = cache_dir
        self._client = client

    @property
    def bucket_name(self) -> str:
        return self._bucket_name

    def exists(self, name: str) -> bool:
        return bool(self._bucket().blob(name).exists())

    def fetch(self, name: str) -> Path:
        self._cache_dir.mkdir(parents=True, exist_ok=True)
        target = self._cache_dir / Path(name).name
        blob = self._bucket().blob(name)
        logger.info(
            "Downloading model artifact gs://%s/%s to %s",
            self._bucket_name,
            name,
            target,
        )
        blob.download_to_filename(str(target))
        return target

    def _bucket(self) -> storage.Bucket:
        if self._client is None:
            self._client = storage.Client()
        return self._client.bucket(self._bucket_name)


class LocalArtifactStore:
    """Serve model artifacts from a directory on disk."""

    def __init__(self, root: Path) -> None:
        self._root = root

    @property
    def root(self) -> Path:
        return self._root

    def exists(self, name: str) -> bool:
        return (self._root / name).is_file()

    def fetch(self, name: str) -> Path:
        path = self._root / name
        if not path.is_file():
            raise FileNotFoundError(f"Artifact {name} not found under {self._root}")
        return path


__all__ = ["GcsArtifactStore", "LocalArtifactStore"]
