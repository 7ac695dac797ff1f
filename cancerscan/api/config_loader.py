"""JSON configuration for the prediction server.

Settings come from ``config/cancerscan.json`` (see ``cancerscan.example.json``)
and a handful of environment variables that deployment platforms set:

- ``PORT``: server port
- ``BUCKET_NAME``: Cloud Storage bucket holding the model artifact
- ``MODEL_ARTIFACT``: object name of the model artifact inside the bucket
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

logger = logging.getLogger(__name__)

_MODEL_SOURCES = {"gcs", "local"}
_STORAGE_BACKENDS = {"firestore", "filesystem"}


@dataclass
class ServerSettings:
    host: str = "0.0.0.0"
    port: int = 8080


@dataclass
class ModelSettings:
    source: str = "gcs"
    bucket_name: str = "cancer-prediction-model"
    artifact_name: str = "model.h5"
    local_dir: str = "models"
    cache_dir: str = "/tmp/cancerscan/models"


@dataclass
class StorageSettings:
    backend: str = "firestore"
    collection: str = "predictions"
    root: str = "/tmp/cancerscan/predictions"


@dataclass
class UploadSettings:
    max_bytes: int = 1_000_000


@dataclass
class AppConfig:
    server: ServerSettings = field(default_factory=ServerSettings)
    model: ModelSettings = field(default_factory=ModelSettings)
    storage: StorageSettings = field(default_factory=StorageSettings)
    upload: UploadSettings = field(default_factory=UploadSettings)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> AppConfig:
        server = _section(data, "server")
        model = _section(data, "model")
        storage = _section(data, "storage")
        upload = _section(data, "upload")

        defaults = cls()
        cfg = cls(
            server=ServerSettings(
                host=str(server.get("host", defaults.server.host)),
                port=int(server.get("port", defaults.server.port)),
            ),
            model=ModelSettings(
                source=str(model.get("source", defaults.model.source)).lower(),
                bucket_name=str(model.get("bucket_name", defaults.model.bucket_name)),
                artifact_name=str(
                    model.get("artifact_name", defaults.model.artifact_name)
                ),
                local_dir=str(model.get("local_dir", defaults.model.local_dir)),
                cache_dir=str(model.get("cache_dir", defaults.model.cache_dir)),
            ),
            storage=StorageSettings(
                backend=str(storage.get("backend", defaults.storage.backend)).lower(),
                collection=str(
                    storage.get("collection", defaults.storage.collection)
                ),
                root=str(storage.get("root", defaults.storage.root)),
            ),
            upload=UploadSettings(
                max_bytes=max(1, int(upload.get("max_bytes", defaults.upload.max_bytes))),
            ),
        )
        cfg.validate()
        return cfg

    def validate(self) -> None:
        if self.model.source not in _MODEL_SOURCES:
            raise ValueError(
                f"Unsupported model source '{self.model.source}'; "
                f"expected one of {sorted(_MODEL_SOURCES)}"
            )
        if self.storage.backend not in _STORAGE_BACKENDS:
            raise ValueError(
                f"Unsupported storage backend '{self.storage.backend}'; "
                f"expected one of {sorted(_STORAGE_BACKENDS)}"
            )


def _section(data: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = data.get(name, {})
    return value if isinstance(value, Mapping) else {}


def apply_env_overrides(cfg: AppConfig, env: Mapping[str, str] | None = None) -> AppConfig:
    env = os.environ if env is None else env
    port = env.get("PORT")
    if port:
        try:
            cfg.server.port = int(port)
        except ValueError:
            logger.warning("Ignoring non-numeric PORT=%r", port)
    bucket = env.get("BUCKET_NAME")
    if bucket:
        cfg.model.bucket_name = bucket
    artifact = env.get("MODEL_ARTIFACT")
    if artifact:
        cfg.model.artifact_name = artifact
    return cfg


def load_config(
    path: str | Path | None = None, env: Mapping[str, str] | None = None
) -> AppConfig:
    """Load configuration from ``path``, or defaults when ``path`` is None.

    Raises:
        FileNotFoundError: ``path`` was given but does not exist.
        ValueError: the file holds invalid JSON or unsupported values.
    """
    if path is None:
        cfg = AppConfig()
    else:
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(config_path)
        try:
            data = json.loads(config_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON in {config_path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ValueError(f"Configuration root in {config_path} must be an object")
        cfg = AppConfig.from_dict(data)
        logger.info("Loaded configuration from %s", config_path)
    return apply_env_overrides(cfg, env)


__all__ = [
    "AppConfig",
    "ModelSettings",
    "ServerSettings",
    "StorageSettings",
    "UploadSettings",
    "apply_env_overrides",
    "load_config",
]
