"""
Centralized configuration for audioedit.
All magic numbers and default settings in one place.
"""
from dataclasses import dataclass
from enum import Enum, auto


class PlaybackState(Enum):
    """Playback state enumeration."""
    STOPPED = auto()
    PLAYING = auto()
    PAUSED = auto()


@dataclass(frozen=True, slots=True)
class AudioConfig:
    """Playback and gain settings."""
    playback_blocksize: int = 4096
    playback_channels: int = 2
    max_gain: float = 2.0
    default_gain: float = 1.0


@dataclass(frozen=True, slots=True)
class EffectsConfig:
    """Fixed transform parameters."""
    # Fades
    fade_max_seconds: float = 2.0
    fade_fraction: float = 0.25  # of total duration

    # Normalize
    normalize_target_peak: float = 0.95


@dataclass(frozen=True, slots=True)
class EditConfig:
    """Trim range and cursor rules."""
    min_trim_separation: float = 0.1  # seconds
    frame_snap_tolerance: float = 1e-6  # frames


@dataclass(frozen=True, slots=True)
class CodecConfig:
    """RIFF/WAVE PCM layout."""
    bits_per_sample: int = 16
    pcm_format_tag: int = 1
    fmt_chunk_size: int = 16
    header_size: int = 44
    negative_scale: float = 32768.0  # 0x8000
    positive_scale: float = 32767.0  # 0x7FFF
    max_uint16: int = 0xFFFF
    max_uint32: int = 0xFFFFFFFF


@dataclass(frozen=True, slots=True)
class ExportConfig:
    """Output naming and batch pacing."""
    edited_suffix: str = "_edited"
    extension: str = ".wav"
    combined_name: str = "COMBINED_AUDIO.wav"
    batch_delay_seconds: float = 0.5


# Global config instances (immutable singletons)
AUDIO_CONFIG = AudioConfig()
EFFECTS_CONFIG = EffectsConfig()
EDIT_CONFIG = EditConfig()
CODEC_CONFIG = CodecConfig()
EXPORT_CONFIG = ExportConfig()
