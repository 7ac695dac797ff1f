from __future__ import annotations

from .inference import InferenceEngine
from .interpret import interpret
from .model_store import ModelProvider
from .preprocess import ImagePreprocessor
from .tensors import TensorScope
from .types import Label, ModelHandle, Verdict

__all__ = [
    "GcsArtifactStore",
    "ImagePreprocessor",
    "InferenceEngine",
    "Label",
    "LocalArtifactStore",
    "ModelHandle",
    "ModelProvider",
    "TensorScope",
    "Verdict",
    "interpret",
]


def __getattr__(name: str):
    if name == "GcsArtifactStore":
        from .artifacts import GcsArtifactStore

        return GcsArtifactStore
    if name == "LocalArtifactStore":
        from .artifacts import LocalArtifactStore

        return LocalArtifactStore
    raise AttributeError(f"module 'cancerscan.ai' has no attribute {name!r}")
