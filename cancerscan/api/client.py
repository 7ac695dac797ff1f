from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

import requests


@dataclass
class PredictionHttpClient:
    base_url: str
    timeout: float = 30.0
    session: requests.Session = field(default_factory=requests.Session)

    def predict(
        self,
        image_bytes: bytes,
        filename: str = "image.jpg",
        content_type: str = "image/jpeg",
    ) -> Dict[str, Any]:
        files = {"image": (filename, image_bytes, content_type)}
        data = self._request("post", "/predict", files=files)
        return data["data"]

    def predict_file(self, path: Path, content_type: str = "image/jpeg") -> Dict[str, Any]:
        return self.predict(path.read_bytes(), filename=path.name, content_type=content_type)

    def histories(self) -> List[Dict[str, Any]]:
        data = self._request("get", "/predict/histories")
        return list(data.get("data", []))

    def _request(self, method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
        url = f"{self.base_url.rstrip('/')}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.Timeout as exc:  # pragma: no cover - network conditions
            raise RuntimeError(f"Timed out calling {url}") from exc
        except requests.RequestException as exc:  # pragma: no cover - network conditions
            raise RuntimeError(f"Failed to call prediction API: {exc}") from exc
        try:
            payload = response.json()
        except ValueError:
            payload = {}
        if response.status_code >= 400 or payload.get("status") != "success":
            message = payload.get("message") or f"HTTP {response.status_code}"
            raise RuntimeError(f"Prediction API error: {message}")
        return payload


__all__ = ["PredictionHttpClient"]
