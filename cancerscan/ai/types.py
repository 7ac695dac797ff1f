from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Protocol

# Scores strictly above this percentage are reported as cancer.
CANCER_THRESHOLD: float = 50.0

INPUT_SIZE: tuple[int, int] = (224, 224)


class ModelHandle(Protocol):
    def predict(self, batch: Any, verbose: int = 0) -> Any: ...


class ArtifactStore(Protocol):
    def exists(self, name: str) -> bool: ...

    def fetch(self, name: str) -> Path: ...


class Label(str, Enum):
    CANCER = "Cancer"
    NON_CANCER = "Non-cancer"


@dataclass(frozen=True)
class Verdict:
    label: Label
    suggestion: str
    score: float


__all__ = [
    "ArtifactStore",
    "CANCER_THRESHOLD",
    "INPUT_SIZE",
    "Label",
    "ModelHandle",
    "Verdict",
]
