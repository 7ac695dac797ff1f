from __future__ import annotations

import io
import logging
from dataclasses import dataclass

import numpy as np
from PIL import Image, UnidentifiedImageError

from ..errors import InvalidImage
from .tensors import TensorScope
from .types import INPUT_SIZE


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImagePreprocessor:
    """Turn uploaded image bytes into a normalized ``(1, H, W, 3)`` batch."""

    size: tuple[int, int] = INPUT_SIZE

    def prepare(self, image_bytes: bytes, scope: TensorScope | None = None) -> np.ndarray:
        if not image_bytes:
            raise InvalidImage("Empty image payload")
        try:
            with Image.open(io.BytesIO(image_bytes)) as img:
                img.load()
                rgb = img.convert("RGB")
        except (
            UnidentifiedImageError,
            Image.DecompressionBombError,
            OSError,
            ValueError,
        ) as exc:
            logger.debug("Failed to decode image bytes=%d", len(image_bytes), exc_info=True)
            raise InvalidImage("Unable to decode image payload") from exc

        pixels = np.asarray(rgb, dtype=np.uint8)
        if scope is not None:
            scope.track(pixels)

        # Resize each channel as a float ("F") image so nothing is quantized
        # before normalizing. PIL takes (width, height); a direct stretch.
        height, width = self.size
        resized = np.stack(
            [
                np.asarray(
                    Image.fromarray(
                        np.ascontiguousarray(pixels[:, :, channel], dtype=np.float32)
                    ).resize((width, height), Image.Resampling.BILINEAR),
                    dtype=np.float32,
                )
                for channel in range(3)
            ],
            axis=-1,
        )
        if scope is not None:
            scope.track(resized)

        normalized = np.clip(resized / np.float32(255.0), 0.0, 1.0)
        batch = np.expand_dims(normalized.astype(np.float32), axis=0)
        if scope is not None:
            scope.track(batch)

        logger.debug(
            "Prepared tensor source=%dx%d shape=%s",
            pixels.shape[1],
            pixels.shape[0],
            batch.shape,
        )
        return batch


__all__ = ["ImagePreprocessor"]
