from __future__ import annotations

from typing import List, Literal

from pydantic import BaseModel, Field

from ..datalake.storage import PredictionRecord


class PredictionData(BaseModel):
    id: str = Field(..., description="Unique prediction identifier")
    result: Literal["Cancer", "Non-cancer"]
    suggestion: str
    createdAt: str = Field(..., description="UTC ISO-8601 creation timestamp")

    @classmethod
    def from_record(cls, record: PredictionRecord) -> "PredictionData":
        return cls(**record.to_document())


class PredictionResponse(BaseModel):
    status: Literal["success"] = "success"
    message: str = "Model is predicted successfully"
    data: PredictionData


class HistoryEntry(BaseModel):
    id: str
    history: PredictionData


class HistoriesResponse(BaseModel):
    status: Literal["success"] = "success"
    data: List[HistoryEntry] = Field(default_factory=list)


class FailureResponse(BaseModel):
    status: Literal["fail"] = "fail"
    message: str


class HealthResponse(BaseModel):
    status: str = "ok"
    model_loaded: bool = False


__all__ = [
    "FailureResponse",
    "HealthResponse",
    "HistoriesResponse",
    "HistoryEntry",
    "PredictionData",
    "PredictionResponse",
]
