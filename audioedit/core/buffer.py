"""
Sample buffer model for audioedit.
A SampleBuffer is an immutable block of float32 frames; transforms build new ones.
"""
from __future__ import annotations
import math
from typing import Sequence
import numpy as np

from .config import EDIT_CONFIG
from .errors import InvalidBuffer
from .types import AudioArray, MonoArray


class SampleBuffer:
    """
    Multi-channel float sample container.

    Samples are stored as a read-only array of shape (frames, channels).
    Values nominally lie in [-1.0, 1.0] but may exceed it until encode time.
    """
    __slots__ = ('_data', '_sample_rate')

    def __init__(self, data: np.ndarray, sample_rate: int) -> None:
        """
        Create a buffer.

        Args:
            data: 1-D (mono) or 2-D (frames, channels) sample array
            sample_rate: Sample rate in Hz
        """
        arr = np.array(data, dtype=np.float32)
        if arr.ndim == 1:
            arr = arr[:, np.newaxis]
        if arr.ndim != 2:
            raise InvalidBuffer(f"Expected 1-D or 2-D samples, got {arr.ndim}-D")
        if arr.shape[1] == 0:
            raise InvalidBuffer("Buffer must have at least one channel")
        if int(sample_rate) != sample_rate or sample_rate <= 0:
            raise InvalidBuffer(f"Invalid sample rate: {sample_rate}")

        arr.setflags(write=False)
        self._data = arr
        self._sample_rate = int(sample_rate)

    @classmethod
    def from_channels(cls, channels: Sequence[Sequence[float]], sample_rate: int) -> "SampleBuffer":
        """Build a buffer from a list of per-channel sample sequences."""
        if len(channels) == 0:
            raise InvalidBuffer("Buffer must have at least one channel")
        lengths = {len(ch) for ch in channels}
        if len(lengths) != 1:
            raise InvalidBuffer(f"Channel lengths differ: {sorted(lengths)}")
        return cls(np.column_stack([np.asarray(ch, dtype=np.float32) for ch in channels]), sample_rate)

    @classmethod
    def silence(cls, frame_count: int, channel_count: int, sample_rate: int) -> "SampleBuffer":
        """Generate an all-zero buffer."""
        if channel_count <= 0:
            raise InvalidBuffer("Buffer must have at least one channel")
        return cls(np.zeros((frame_count, channel_count), dtype=np.float32), sample_rate)

    @property
    def data(self) -> AudioArray:
        """Read-only (frames, channels) array."""
        return self._data

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    @property
    def channel_count(self) -> int:
        return self._data.shape[1]

    @property
    def frame_count(self) -> int:
        return self._data.shape[0]

    @property
    def duration_seconds(self) -> float:
        return self.frame_count / self._sample_rate

    @property
    def is_empty(self) -> bool:
        return self.frame_count == 0

    def channel(self, index: int) -> MonoArray:
        """Read-only view of a single channel."""
        return self._data[:, index]

    def frames_at(self, seconds: float) -> int:
        """
        Convert a time in seconds to a frame index (floor).

        Products within a tiny tolerance of an integer snap to it so that
        round-tripping ``frame_count / sample_rate`` lands on ``frame_count``.
        """
        exact = seconds * self._sample_rate
        nearest = round(exact)
        if abs(exact - nearest) < EDIT_CONFIG.frame_snap_tolerance:
            return int(nearest)
        return int(math.floor(exact))

    def same_samples(self, other: "SampleBuffer") -> bool:
        """True if both buffers hold identical samples at the same rate."""
        return (
            self._sample_rate == other.sample_rate
            and self._data.shape == other.data.shape
            and bool(np.array_equal(self._data, other.data))
        )

    def __repr__(self) -> str:
        return (
            f"SampleBuffer(channels={self.channel_count}, sample_rate={self._sample_rate}, "
            f"frames={self.frame_count})"
        )
