from __future__ import annotations


class PredictionError(Exception):
    """Base class for failures raised by a pipeline stage."""


class ModelUnavailable(PredictionError):
    """The model artifact is missing or could not be loaded."""


class InvalidImage(PredictionError):
    """The uploaded bytes are not a decodable image."""


class InferenceFailure(PredictionError):
    """The model rejected the prepared tensor or returned unusable output."""


class PersistenceFailure(PredictionError):
    """The prediction store could not write or read records."""


class PredictionFailed(Exception):
    """Uniform failure surfaced to callers of the prediction pipeline.

    ``stage`` names the last stage the invocation reached; the stage error is
    chained as ``__cause__``.
    """

    def __init__(self, stage: str, message: str = "Prediction failed") -> None:
        super().__init__(f"{message} (stage={stage})")
        self.stage = stage


__all__ = [
    "PredictionError",
    "ModelUnavailable",
    "InvalidImage",
    "InferenceFailure",
    "PersistenceFailure",
    "PredictionFailed",
]
