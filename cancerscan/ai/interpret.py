from __future__ import annotations

from .types import CANCER_THRESHOLD, Label, Verdict

REFERRAL_SUGGESTION = "Segera periksa ke dokter!"
NO_DETECTION_SUGGESTION = "Penyakit kanker tidak terdeteksi."


def interpret(score: float) -> tuple[Label, str]:
    """Map a confidence percentage to a label and advisory message."""
    if score > CANCER_THRESHOLD:
        return Label.CANCER, REFERRAL_SUGGESTION
    return Label.NON_CANCER, NO_DETECTION_SUGGESTION


def build_verdict(score: float) -> Verdict:
    label, suggestion = interpret(score)
    return Verdict(label=label, suggestion=suggestion, score=score)


__all__ = [
    "NO_DETECTION_SUGGESTION",
    "REFERRAL_SUGGESTION",
    "build_verdict",
    "interpret",
]
