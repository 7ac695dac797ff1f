from __future__ import annotations

import logging
import threading
from typing import Any, List, Protocol, TypeVar

import numpy as np


logger = logging.getLogger(__name__)

T = TypeVar("T")


class AllocationTracker(Protocol):
    def allocated(self, nbytes: int) -> None: ...

    def released(self, nbytes: int) -> None: ...


class CountingTracker:
    """Thread-safe tally of bytes held by open tensor scopes."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._live_bytes = 0
        self._peak_bytes = 0
        self._total_allocated = 0

    @property
    def live_bytes(self) -> int:
        with self._lock:
            return self._live_bytes

    @property
    def peak_bytes(self) -> int:
        with self._lock:
            return self._peak_bytes

    @property
    def total_allocated(self) -> int:
        with self._lock:
            return self._total_allocated

    def allocated(self, nbytes: int) -> None:
        with self._lock:
            self._live_bytes += nbytes
            self._total_allocated += nbytes
            self._peak_bytes = max(self._peak_bytes, self._live_bytes)

    def released(self, nbytes: int) -> None:
        with self._lock:
            self._live_bytes -= nbytes


class TensorScope:
    """Own the numeric buffers of one pipeline invocation.

    Buffers registered with :meth:`track` are dropped when the scope exits,
    whether the block finished normally or raised. Objects exposing a
    ``dispose()`` method have it called on release.
    """

    def __init__(self, tracker: AllocationTracker | None = None) -> None:
        self._tracker = tracker
        self._buffers: List[tuple[Any, int]] = []
        self._closed = False

    def __enter__(self) -> "TensorScope":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release_all()

    @property
    def held_bytes(self) -> int:
        return sum(nbytes for _, nbytes in self._buffers)

    def track(self, tensor: T) -> T:
        if self._closed:
            raise RuntimeError("TensorScope is already closed")
        nbytes = _nbytes(tensor)
        self._buffers.append((tensor, nbytes))
        if self._tracker is not None:
            self._tracker.allocated(nbytes)
        return tensor

    def release_all(self) -> None:
        released = 0
        try:
            while self._buffers:
                tensor, nbytes = self._buffers.pop()
                try:
                    dispose = getattr(tensor, "dispose", None)
                    if callable(dispose):
                        dispose()
                except Exception:
                    # Keep releasing; an error here must not mask the caller's.
                    logger.exception(
                        "Failed to dispose tensor type=%s bytes=%d",
                        tensor.__class__.__name__,
                        nbytes,
                    )
                finally:
                    if self._tracker is not None:
                        self._tracker.released(nbytes)
                    released += nbytes
        finally:
            self._closed = True
        if released:
            logger.debug("Released tensor buffers bytes=%d", released)


def _nbytes(tensor: Any) -> int:
    nbytes = getattr(tensor, "nbytes", None)
    if nbytes is not None:
        return int(nbytes)
    shape = getattr(tensor, "shape", None)
    dtype = getattr(tensor, "dtype", None)
    if shape is not None and dtype is not None:
        # tf.Tensor exposes shape and a DType with ``size`` but no nbytes.
        itemsize = getattr(dtype, "itemsize", None) or getattr(dtype, "size", 0)
        return int(np.prod(tuple(shape))) * int(itemsize)
    return 0


__all__ = ["AllocationTracker", "CountingTracker", "TensorScope"]
