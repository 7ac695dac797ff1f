from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any

import numpy as np

from ..errors import InferenceFailure
from .tensors import TensorScope
from .types import ModelHandle


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InferenceEngine:
    """Run the model forward pass and reduce it to a percentage score."""

    def infer(
        self,
        model: ModelHandle,
        tensor: np.ndarray,
        scope: TensorScope | None = None,
    ) -> float:
        try:
            output = model.predict(tensor, verbose=0)
        except Exception as exc:
            logger.error(
                "Model rejected input shape=%s dtype=%s error=%s",
                getattr(tensor, "shape", None),
                getattr(tensor, "dtype", None),
                exc,
            )
            raise InferenceFailure("Model rejected the prepared tensor") from exc

        # Multi-output models return a list; only the first output is read.
        if isinstance(output, (list, tuple)):
            if not output:
                raise InferenceFailure("Model returned no outputs")
            output = output[0]
        if scope is not None:
            scope.track(output)

        probability = _first_scalar(output)
        if not math.isfinite(probability) or not 0.0 <= probability <= 1.0:
            raise InferenceFailure(
                f"Model output {probability!r} is not a probability in [0, 1]"
            )
        return round(probability * 100, 2)


def _first_scalar(output: Any) -> float:
    try:
        values = np.asarray(output).reshape(-1)
    except (TypeError, ValueError) as exc:
        raise InferenceFailure("Model output is not numeric") from exc
    if values.size == 0:
        raise InferenceFailure("Model output is empty")
    try:
        return float(values[0])
    except (TypeError, ValueError) as exc:
        raise InferenceFailure("Model output is not numeric") from exc


__all__ = ["InferenceEngine"]
