"""
WAV codec for audioedit.
Encodes sample buffers to 16-bit PCM RIFF/WAVE bytes and decodes source files via soundfile.
"""
from __future__ import annotations
import io
import os
import struct
import numpy as np
import soundfile as sf

from .buffer import SampleBuffer
from .config import CODEC_CONFIG
from .errors import DecodeError, InvalidBuffer
from audioedit.utils.logger import logger

# RIFF header, fmt chunk and data chunk header, all little-endian
_HEADER = struct.Struct('<4sI4s4sIHHIIHH4sI')


def _quantize(data: np.ndarray) -> np.ndarray:
    """
    Convert float samples to int16 with the asymmetric PCM scaling.

    Negative values scale by 32768, non-negative by 32767, then truncate toward zero.
    """
    clamped = np.clip(data.astype(np.float64), -1.0, 1.0)
    scaled = np.where(
        clamped < 0,
        clamped * CODEC_CONFIG.negative_scale,
        clamped * CODEC_CONFIG.positive_scale
    )
    return np.trunc(scaled).astype('<i2')


def encode(buffer: SampleBuffer) -> bytes:
    """
    Encode a buffer as a canonical 44-byte-header PCM16 WAV file.

    Args:
        buffer: Source samples

    Returns:
        Complete WAV file bytes

    Raises:
        InvalidBuffer: No channels, or sizes overflow the 32-bit header fields
    """
    channels = buffer.channel_count
    if channels == 0 or channels > CODEC_CONFIG.max_uint16:
        raise InvalidBuffer(f"Cannot encode {channels} channels")

    bytes_per_sample = CODEC_CONFIG.bits_per_sample // 8
    block_align = channels * bytes_per_sample
    data_len = buffer.frame_count * block_align
    byte_rate = buffer.sample_rate * block_align

    header_extra = CODEC_CONFIG.header_size - 8
    if data_len + header_extra > CODEC_CONFIG.max_uint32:
        raise InvalidBuffer(f"{buffer.frame_count} frames do not fit a 32-bit WAV chunk")
    if byte_rate > CODEC_CONFIG.max_uint32 or block_align > CODEC_CONFIG.max_uint16:
        raise InvalidBuffer(f"Byte rate {byte_rate} does not fit a 32-bit WAV field")

    header = _HEADER.pack(
        b'RIFF',
        header_extra + data_len,
        b'WAVE',
        b'fmt ',
        CODEC_CONFIG.fmt_chunk_size,
        CODEC_CONFIG.pcm_format_tag,
        channels,
        buffer.sample_rate,
        byte_rate,
        block_align,
        CODEC_CONFIG.bits_per_sample,
        b'data',
        data_len
    )
    # Row-major (frames, channels) order is already interleaved
    payload = _quantize(buffer.data).tobytes()
    return header + payload


def write_wav(buffer: SampleBuffer, path: str) -> str:
    """Encode a buffer and write it to disk. Returns the path."""
    with open(path, 'wb') as f:
        f.write(encode(buffer))
    logger.info(f"Wrote {path} ({buffer.frame_count} frames)")
    return path


def decode(raw: bytes, name: str = "") -> SampleBuffer:
    """
    Decode any container libsndfile understands into a SampleBuffer.

    Args:
        raw: Encoded file bytes
        name: File name used in error messages

    Raises:
        DecodeError: The bytes are not a readable audio file
    """
    try:
        data, samplerate = sf.read(io.BytesIO(raw), dtype='float32', always_2d=True)
    except (sf.SoundFileError, RuntimeError, ValueError, TypeError) as e:
        raise DecodeError(name, str(e)) from e

    if data.ndim != 2 or data.shape[1] == 0:
        raise DecodeError(name, "no audio channels")
    try:
        return SampleBuffer(data, samplerate)
    except InvalidBuffer as e:
        raise DecodeError(name, str(e)) from e


def load_file(path: str) -> SampleBuffer:
    """Read a file from disk and decode it."""
    name = os.path.basename(path)
    logger.info(f"Loading file: {path}")
    with open(path, 'rb') as f:
        raw = f.read()
    return decode(raw, name)

