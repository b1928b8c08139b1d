"""
Buffer transforms for audioedit.
All functions are pure (no side effects): they take SampleBuffers and return new ones.
Optimized with numpy vectorization for performance.
"""
from __future__ import annotations
import math
from typing import Optional, Sequence
import numpy as np

from .buffer import SampleBuffer
from .config import EFFECTS_CONFIG
from .errors import InvalidBuffer, InvalidRange, SampleRateMismatch, SilentAudio


def apply_reverse(buffer: SampleBuffer) -> SampleBuffer:
    """
    Reverse every channel independently.

    Args:
        buffer: Source samples

    Returns:
        Reversed buffer with the same shape
    """
    return SampleBuffer(np.flip(buffer.data, axis=0), buffer.sample_rate)


def apply_trim(buffer: SampleBuffer, start: float, end: float) -> SampleBuffer:
    """
    Keep only the samples between two times.

    Args:
        buffer: Source samples
        start: Range start in seconds
        end: Range end in seconds

    Returns:
        Buffer holding frames [floor(start*sr), floor(end*sr))

    Raises:
        InvalidRange: Range is empty or outside the buffer
    """
    if start < 0:
        raise InvalidRange(f"Trim start {start:.3f}s is before the beginning")
    start_sample = buffer.frames_at(start)
    end_sample = buffer.frames_at(end)
    if end_sample > buffer.frame_count:
        raise InvalidRange(
            f"Trim end {end:.3f}s is past the end ({buffer.duration_seconds:.3f}s)"
        )
    if end_sample - start_sample <= 0:
        raise InvalidRange(f"Trim range {start:.3f}s-{end:.3f}s is empty")

    return SampleBuffer(buffer.data[start_sample:end_sample], buffer.sample_rate)


def apply_split(buffer: SampleBuffer, at: float) -> tuple[SampleBuffer, SampleBuffer]:
    """
    Cut a buffer in two at a point in time.

    Args:
        buffer: Source samples
        at: Split point in seconds

    Returns:
        (head, tail) covering [0, split) and [split, end)

    Raises:
        InvalidRange: Split point is not strictly inside the buffer
    """
    if at <= 0 or at >= buffer.duration_seconds:
        raise InvalidRange(
            f"Split point {at:.3f}s must lie inside (0, {buffer.duration_seconds:.3f}s)"
        )
    split_sample = buffer.frames_at(at)
    if split_sample <= 0 or split_sample >= buffer.frame_count:
        raise InvalidRange(f"Split point {at:.3f}s leaves an empty part")

    sr = buffer.sample_rate
    return (
        SampleBuffer(buffer.data[:split_sample], sr),
        SampleBuffer(buffer.data[split_sample:], sr),
    )


def fade_length(buffer: SampleBuffer) -> int:
    """Number of frames covered by a fade: min(2s, duration/4), floored."""
    fade_seconds = min(
        EFFECTS_CONFIG.fade_max_seconds,
        buffer.duration_seconds * EFFECTS_CONFIG.fade_fraction
    )
    return int(math.floor(fade_seconds * buffer.sample_rate))


def apply_fade_in(buffer: SampleBuffer) -> SampleBuffer:
    """
    Apply a linear 0 -> 1 ramp over the start of the buffer.

    Sample i (i < n) is multiplied by i/n.

    Raises:
        InvalidBuffer: Buffer has no frames
    """
    if buffer.is_empty:
        raise InvalidBuffer("Cannot fade an empty buffer")

    fade_len = fade_length(buffer)
    data = np.array(buffer.data)
    if fade_len > 0:
        ramp = np.arange(fade_len, dtype=np.float64) / fade_len
        data[:fade_len] = data[:fade_len] * ramp[:, np.newaxis]
    return SampleBuffer(data, buffer.sample_rate)


def apply_fade_out(buffer: SampleBuffer) -> SampleBuffer:
    """
    Apply a linear 1 -> 0 ramp over the end of the buffer.

    Sample i (i >= L - n) is multiplied by 1 - (i - (L - n))/n.

    Raises:
        InvalidBuffer: Buffer has no frames
    """
    if buffer.is_empty:
        raise InvalidBuffer("Cannot fade an empty buffer")

    fade_len = fade_length(buffer)
    data = np.array(buffer.data)
    if fade_len > 0:
        ramp = 1.0 - np.arange(fade_len, dtype=np.float64) / fade_len
        data[-fade_len:] = data[-fade_len:] * ramp[:, np.newaxis]
    return SampleBuffer(data, buffer.sample_rate)


def apply_normalize(buffer: SampleBuffer) -> SampleBuffer:
    """
    Scale so the loudest sample across all channels reaches 0.95.

    Raises:
        SilentAudio: Every sample is zero
    """
    peak = float(np.max(np.abs(buffer.data))) if not buffer.is_empty else 0.0
    if peak == 0.0:
        raise SilentAudio("Cannot normalize silent audio")
    return apply_gain(buffer, EFFECTS_CONFIG.normalize_target_peak / peak)


def apply_gain(buffer: SampleBuffer, factor: float) -> SampleBuffer:
    """
    Multiply every sample by a gain factor.

    Args:
        buffer: Source samples
        factor: Gain multiplier (1.0 = no change)

    Returns:
        Scaled buffer
    """
    return SampleBuffer(buffer.data * np.float32(factor), buffer.sample_rate)


def apply_combine(
    buffers: Sequence[SampleBuffer],
    names: Optional[Sequence[str]] = None
) -> SampleBuffer:
    """
    Concatenate buffers end to end.

    The output has as many channels as the widest input; narrower inputs
    have their first channel copied into the missing ones.

    Args:
        buffers: Two or more buffers sharing one sample rate
        names: Display names used to report a mismatching input

    Raises:
        InvalidBuffer: Fewer than two buffers
        SampleRateMismatch: An input differs from the first buffer's rate
    """
    if len(buffers) < 2:
        raise InvalidBuffer("Combine needs at least two buffers")

    sample_rate = buffers[0].sample_rate
    for i, buf in enumerate(buffers):
        if buf.sample_rate != sample_rate:
            name = names[i] if names is not None else f"#{i}"
            raise SampleRateMismatch(name, buf.sample_rate, sample_rate)

    channels = max(buf.channel_count for buf in buffers)
    total = sum(buf.frame_count for buf in buffers)
    output = np.zeros((total, channels), dtype=np.float32)

    offset = 0
    for buf in buffers:
        end = offset + buf.frame_count
        output[offset:end, :buf.channel_count] = buf.data
        if buf.channel_count < channels:
            # Upmix by duplicating channel 0
            output[offset:end, buf.channel_count:] = buf.data[:, :1]
        offset = end

    return SampleBuffer(output, sample_rate)
