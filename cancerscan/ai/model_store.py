"""Process-wide lazily loaded classification model.

The provider owns a single cache slot. Reads after the first successful load
take no lock. Loads are serialized by a lock and the handle is published with
one assignment only after it is fully parsed, so callers never observe a
partially-built model. A failed load leaves the slot empty and the next
request retries.
"""

from __future__ import annotations

import logging
import threading
import time
from pathlib import Path
from typing import Callable

from ..errors import ModelUnavailable
from .types import ArtifactStore, ModelHandle


logger = logging.getLogger(__name__)

ModelLoader = Callable[[Path], ModelHandle]


def load_keras_model(path: Path) -> ModelHandle:
    import tensorflow as tf

    return tf.keras.models.load_model(str(path), compile=False)


class ModelProvider:
    def __init__(
        self,
        store: ArtifactStore,
        artifact_name: str = "model.h5",
        loader: ModelLoader = load_keras_model,
    ) -> None:
        self._store = store
        self._artifact_name = artifact_name
        self._loader = loader
        self._lock = threading.Lock()
        self._model: ModelHandle | None = None

    @property
    def artifact_name(self) -> str:
        return self._artifact_name

    @property
    def is_loaded(self) -> bool:
        return self._model is not None

    def get_model(self) -> ModelHandle:
        model = self._model
        if model is not None:
            return model
        with self._lock:
            if self._model is None:
                self._model = self._load()
            return self._model

    def _load(self) -> ModelHandle:
        name = self._artifact_name
        started = time.monotonic()
        try:
            if not self._store.exists(name):
                raise ModelUnavailable(f"Model artifact {name} not found in store")
            path = self._store.fetch(name)
            model = self._loader(path)
        except ModelUnavailable:
            logger.error("Model artifact missing artifact=%s", name)
            raise
        except Exception as exc:
            logger.exception("Failed to load model artifact=%s", name)
            raise ModelUnavailable(f"Failed to load model artifact {name}") from exc
        if model is None:
            raise ModelUnavailable(f"Loader returned no model for {name}")
        logger.info(
            "Model loaded artifact=%s type=%s elapsed=%.2fs",
            name,
            model.__class__.__name__,
            time.monotonic() - started,
        )
        return model


__all__ = ["ModelLoader", "ModelProvider", "load_keras_model"]
