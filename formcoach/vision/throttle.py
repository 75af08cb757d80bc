"""Frame throttling: process only one of every ``stride`` pose frames."""
from __future__ import annotations

from formcoach.core.errors import ConfigurationError

_COUNTER_MODULUS = 2**32


def _check_stride(stride: int) -> int:
    stride = int(stride)
    if stride < 1:
        raise ConfigurationError(f"frame stride must be >= 1, got {stride}")
    return stride


def should_process(frame_index: int, stride: int) -> bool:
    """Return True when ``frame_index`` falls on the stride."""
    return frame_index % _check_stride(stride) == 0


class FrameThrottle:
    """Counts incoming frames and lets one of every ``stride`` through.

    The counter advances on every call, processed or not, and wraps at
    2**32. With stride 3 the 3rd, 6th, 9th... calls are processed.
    """

    def __init__(self, stride: int = 3) -> None:
        self.stride = _check_stride(stride)
        self._counter = 0

    @property
    def counter(self) -> int:
        return self._counter

    def next(self) -> bool:
        self._counter = (self._counter + 1) % _COUNTER_MODULUS
        return should_process(self._counter, self.stride)

    def reset(self) -> None:
        self._counter = 0
