"""
Type definitions for the audioedit core module.
Provides type aliases and protocols for the collaborators the session talks to.
"""
from __future__ import annotations
from typing import TYPE_CHECKING, Callable, Protocol
import numpy as np
from numpy.typing import NDArray

if TYPE_CHECKING:
    from .buffer import SampleBuffer

# Audio data types
AudioArray = NDArray[np.float32]  # Shape: (frames, channels)
MonoArray = NDArray[np.float32]   # Shape: (frames,)

# Callback types
ChangeCallback = Callable[[str], None]          # event name
ExportSink = Callable[[str, bytes], None]       # (filename, data)


class Decoder(Protocol):
    """Turns raw file bytes into a SampleBuffer or raises DecodeError."""
    def __call__(self, raw: bytes, name: str = "") -> "SampleBuffer": ...


class PlaybackHandle(Protocol):
    """A running playback started by a Playback adapter."""
    gain: float

    @property
    def elapsed(self) -> float: ...

    @property
    def active(self) -> bool: ...


class Playback(Protocol):
    """Plays a window of a buffer on some output device."""
    def play(
        self,
        buffer: "SampleBuffer",
        offset_seconds: float,
        duration_seconds: float,
        gain: float
    ) -> PlaybackHandle: ...

    def stop(self, handle: PlaybackHandle) -> None: ...
