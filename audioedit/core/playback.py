"""
Playback adapter for audioedit.
Streams a window of a SampleBuffer to the default output device via sounddevice.
"""
from __future__ import annotations
import logging
from typing import Any, Optional
import numpy as np

from .buffer import SampleBuffer
from .config import AUDIO_CONFIG
from .errors import PlaybackUnavailable

logger = logging.getLogger("audioedit")


class SoundDeviceHandle:
    """
    One running playback of a buffer segment.
    The render callback reads only the immutable segment and its own frame counter.
    """
    __slots__ = ('_segment', '_sample_rate', '_frame', '_finished', '_stream', 'gain')

    def __init__(self, segment: np.ndarray, sample_rate: int, gain: float) -> None:
        self._segment = segment
        self._sample_rate = sample_rate
        self._frame: int = 0
        self._finished: bool = False
        self._stream: Optional[Any] = None
        self.gain = gain

    @property
    def elapsed(self) -> float:
        """Seconds rendered so far."""
        return self._frame / self._sample_rate

    @property
    def active(self) -> bool:
        return not self._finished

    def render(self, outdata: np.ndarray, frames: int) -> bool:
        """
        Fill one output block.

        Args:
            outdata: Device buffer of shape (frames, device_channels)
            frames: Number of frames requested

        Returns:
            True once the segment is exhausted
        """
        outdata.fill(0)
        n = min(frames, len(self._segment) - self._frame)
        if n > 0:
            chunk = self._segment[self._frame:self._frame + n] * self.gain
            out_channels = outdata.shape[1]
            if chunk.shape[1] == 1:
                # Mono: apply to every device channel
                outdata[:n] += chunk
            elif chunk.shape[1] >= out_channels:
                outdata[:n] += chunk[:, :out_channels]
            else:
                outdata[:n, :chunk.shape[1]] += chunk
            self._frame += n

        # Prevent digital clipping
        np.clip(outdata, -1.0, 1.0, out=outdata)
        return self._frame >= len(self._segment)

    def attach(self, stream: Any) -> None:
        self._stream = stream

    def mark_finished(self) -> None:
        self._finished = True

    def close(self) -> None:
        """Stop and release the output stream."""
        if self._stream is not None:
            try:
                self._stream.stop()
                self._stream.close()
            except Exception as e:
                logger.warning("Error stopping stream: %s", e)
            self._stream = None
        self._finished = True


class SoundDevicePlayback:
    """
    Plays buffer windows through sounddevice.
    sounddevice is imported on first use so headless hosts can run the core.
    """

    def __init__(
        self,
        blocksize: int = AUDIO_CONFIG.playback_blocksize,
        channels: int = AUDIO_CONFIG.playback_channels
    ) -> None:
        self.blocksize = blocksize
        self.channels = channels

    @staticmethod
    def segment(buffer: SampleBuffer, offset_seconds: float, duration_seconds: float) -> np.ndarray:
        """Frames of ``buffer`` covered by [offset, offset + duration)."""
        start = min(max(0, buffer.frames_at(offset_seconds)), buffer.frame_count)
        length = max(0, buffer.frames_at(duration_seconds))
        return buffer.data[start:min(buffer.frame_count, start + length)]

    def play(
        self,
        buffer: SampleBuffer,
        offset_seconds: float,
        duration_seconds: float,
        gain: float
    ) -> SoundDeviceHandle:
        """
        Start streaming a window of ``buffer``.

        Raises:
            PlaybackUnavailable: No usable audio backend or device
        """
        handle = SoundDeviceHandle(
            self.segment(buffer, offset_seconds, duration_seconds),
            buffer.sample_rate,
            gain
        )
        try:
            import sounddevice as sd
        except (ImportError, OSError) as e:
            logger.error("sounddevice unavailable: %s", e)
            raise PlaybackUnavailable(f"Audio output unavailable: {e}") from e

        def playback_callback(outdata: np.ndarray, frames: int, time: object, status: Any) -> None:
            """Real-time audio callback."""
            try:
                done = handle.render(outdata, frames)
            except Exception as e:
                logger.error("Playback callback error: %s", e, exc_info=True)
                done = True
            if done:
                raise sd.CallbackStop()

        try:
            stream = sd.OutputStream(
                samplerate=buffer.sample_rate,
                channels=self.channels,
                blocksize=self.blocksize,
                callback=playback_callback,
                finished_callback=handle.mark_finished
            )
            stream.start()
        except Exception as e:
            logger.error("Failed to start playback: %s", e, exc_info=True)
            raise PlaybackUnavailable(f"Failed to start playback: {e}") from e

        handle.attach(stream)
        logger.info(
            "Playback started at %.3fs for %.3fs (gain %.2f)",
            offset_seconds, duration_seconds, gain
        )
        return handle

    def stop(self, handle: SoundDeviceHandle) -> None:
        """Stop a running playback."""
        handle.close()
        logger.info("Playback stopped at %.3fs", handle.elapsed)
