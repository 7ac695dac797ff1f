from __future__ import annotations

import logging

from fastapi import FastAPI, File, UploadFile
from fastapi.responses import JSONResponse

from ..ai.model_store import ModelProvider
from ..datalake.storage import PredictionStore
from ..errors import PredictionFailed
from .pipeline import PredictionPipeline
from .schemas import (
    FailureResponse,
    HealthResponse,
    HistoriesResponse,
    HistoryEntry,
    PredictionData,
    PredictionResponse,
)


logger = logging.getLogger(__name__)

DEFAULT_MAX_UPLOAD_BYTES = 1_000_000

PREDICTION_FAILED_MESSAGE = "Terjadi kesalahan dalam melakukan prediksi"
HISTORY_FAILED_MESSAGE = "Error fetching prediction histories"


def _fail(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=FailureResponse(message=message).model_dump(),
    )


def create_app(
    pipeline: PredictionPipeline,
    store: PredictionStore | None = None,
    model_provider: ModelProvider | None = None,
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
) -> FastAPI:
    history_store = store or pipeline.store
    provider = model_provider or pipeline.model_provider

    app = FastAPI(title="Cancer Screening API", version="0.1.0")
    app.state.pipeline = pipeline
    app.state.store = history_store
    app.state.model_provider = provider
    app.state.max_upload_bytes = max_upload_bytes

    logger.info(
        "API server initialised store=%s artifact=%s max_upload_bytes=%d",
        history_store.__class__.__name__,
        provider.artifact_name,
        max_upload_bytes,
    )

    @app.get("/health", response_model=HealthResponse)
    def healthcheck() -> HealthResponse:
        return HealthResponse(model_loaded=provider.is_loaded)

    @app.post(
        "/predict",
        response_model=PredictionResponse,
        responses={
            400: {"model": FailureResponse},
            413: {"model": FailureResponse},
        },
    )
    def predict(image: UploadFile | None = File(None)):
        if image is None:
            return _fail(400, "No image uploaded")
        content_type = (image.content_type or "").lower()
        if not content_type.startswith("image/"):
            logger.info("Rejected upload content_type=%s", content_type or "unknown")
            return _fail(400, "Invalid file type. Only images are allowed.")

        # Read one byte past the limit to detect oversized uploads.
        image_bytes = image.file.read(max_upload_bytes + 1)
        if len(image_bytes) > max_upload_bytes:
            logger.info("Rejected upload exceeding limit=%d", max_upload_bytes)
            return _fail(
                413,
                f"Payload content length greater than maximum allowed: {max_upload_bytes}",
            )

        try:
            record = pipeline.run_prediction(image_bytes)
        except PredictionFailed as exc:
            logger.warning("Prediction request failed stage=%s", exc.stage)
            return _fail(400, PREDICTION_FAILED_MESSAGE)
        except Exception:
            logger.exception("Unexpected prediction error")
            return _fail(400, PREDICTION_FAILED_MESSAGE)
        return PredictionResponse(data=PredictionData.from_record(record))

    @app.get(
        "/predict/histories",
        response_model=HistoriesResponse,
        responses={500: {"model": FailureResponse}},
    )
    def histories():
        try:
            records = history_store.list_records()
        except Exception:
            logger.exception("Fetching histories failed")
            return _fail(500, HISTORY_FAILED_MESSAGE)
        return HistoriesResponse(
            data=[
                HistoryEntry(id=record.record_id, history=PredictionData.from_record(record))
                for record in records
            ]
        )

    return app


__all__ = ["create_app", "DEFAULT_MAX_UPLOAD_BYTES"]
