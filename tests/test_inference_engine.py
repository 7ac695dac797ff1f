from __future__ import annotations

import numpy as np
import pytest

from cancerscan.ai.inference import InferenceEngine
from cancerscan.ai.tensors import CountingTracker, TensorScope
from cancerscan.errors import InferenceFailure


class _StubModel:
    def __init__(self, output) -> None:
        self._output = output
        self.last_batch = None

    def predict(self, batch, verbose: int = 0):
        self.last_batch = batch
        return self._output


class _ShapeCheckingModel:
    def predict(self, batch, verbose: int = 0):
        if batch.shape != (1, 224, 224, 3):
            raise ValueError(f"expected (1, 224, 224, 3), got {batch.shape}")
        return np.array([[0.42]], dtype=np.float32)


def _batch() -> np.ndarray:
    return np.zeros((1, 224, 224, 3), dtype=np.float32)


@pytest.mark.parametrize(
    "raw,expected",
    [(0.8, 80.0), (0.3, 30.0), (0.123456, 12.35), (0.0, 0.0), (1.0, 100.0)],
)
def test_infer_scales_first_scalar_to_percentage(raw: float, expected: float) -> None:
    model = _StubModel(np.array([[raw]], dtype=np.float32))
    assert InferenceEngine().infer(model, _batch()) == expected


def test_infer_reads_first_output_of_multi_output_model() -> None:
    model = _StubModel([np.array([[0.9, 0.1]]), np.array([[0.2]])])
    assert InferenceEngine().infer(model, _batch()) == 90.0


def test_shape_mismatch_raises_inference_failure() -> None:
    wrong = np.zeros((1, 128, 128, 3), dtype=np.float32)
    with pytest.raises(InferenceFailure) as excinfo:
        InferenceEngine().infer(_ShapeCheckingModel(), wrong)
    assert isinstance(excinfo.value.__cause__, ValueError)


@pytest.mark.parametrize("output", [[], np.array([]), np.array([[np.nan]]), np.array([[3.5]])])
def test_unusable_output_raises_inference_failure(output) -> None:
    with pytest.raises(InferenceFailure):
        InferenceEngine().infer(_StubModel(output), _batch())


def test_output_buffer_is_released_with_scope() -> None:
    tracker = CountingTracker()
    output = np.array([[0.8]], dtype=np.float32)

    with TensorScope(tracker) as scope:
        InferenceEngine().infer(_StubModel(output), _batch(), scope=scope)
        assert tracker.live_bytes == output.nbytes

    assert tracker.live_bytes == 0
