from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable

from ..ai.inference import InferenceEngine
from ..ai.interpret import build_verdict
from ..ai.model_store import ModelProvider
from ..ai.preprocess import ImagePreprocessor
from ..ai.tensors import AllocationTracker, TensorScope
from ..datalake.storage import PredictionRecord, PredictionStore
from ..errors import PredictionError, PredictionFailed


logger = logging.getLogger(__name__)


class Stage(str, Enum):
    START = "start"
    MODEL_READY = "model_ready"
    PREPROCESSED = "preprocessed"
    INFERRED = "inferred"
    INTERPRETED = "interpreted"
    RECORD_BUILT = "record_built"
    DONE = "done"
    FAILED = "failed"


def _new_record_id() -> str:
    return str(uuid.uuid4())


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class PredictionPipeline:
    model_provider: ModelProvider
    store: PredictionStore
    preprocessor: ImagePreprocessor = field(default_factory=ImagePreprocessor)
    engine: InferenceEngine = field(default_factory=InferenceEngine)
    tracker: AllocationTracker | None = None
    id_factory: Callable[[], str] = _new_record_id
    clock: Callable[[], datetime] = _utc_now

    def run_prediction(self, image_bytes: bytes) -> PredictionRecord:
        stage = Stage.START
        logger.info("Running prediction image_bytes=%d", len(image_bytes or b""))
        try:
            # Tensors are released when the scope exits, before a failure is
            # surfaced and before the record is built.
            with TensorScope(self.tracker) as scope:
                model = self.model_provider.get_model()
                stage = Stage.MODEL_READY
                tensor = self.preprocessor.prepare(image_bytes, scope=scope)
                stage = Stage.PREPROCESSED
                score = self.engine.infer(model, tensor, scope=scope)
                stage = Stage.INFERRED
                del tensor

            verdict = build_verdict(score)
            stage = Stage.INTERPRETED

            record = PredictionRecord.create(
                verdict.label.value,
                verdict.suggestion,
                record_id=self.id_factory(),
                created_at=self.clock(),
            )
            stage = Stage.RECORD_BUILT

            self.store.save(record)
            stage = Stage.DONE
        except PredictionError as exc:
            logger.warning(
                "Prediction failed after=%s error=%s: %s",
                stage.value,
                exc.__class__.__name__,
                exc,
            )
            raise PredictionFailed(stage.value) from exc
        except Exception as exc:
            logger.exception(
                "Unexpected prediction error after=%s error=%s",
                stage.value,
                exc.__class__.__name__,
            )
            raise PredictionFailed(stage.value) from exc

        logger.info(
            "Prediction complete record_id=%s result=%s score=%.2f",
            record.record_id,
            record.result,
            verdict.score,
        )
        return record


__all__ = ["PredictionPipeline", "Stage"]
