"""
audioedit Core Module

This module contains the sample-buffer processing core:
- SampleBuffer: Immutable multi-channel sample container
- codec: PCM16 WAV encoding and soundfile decoding
- effects: Pure buffer transforms
- naming: Export file names
- Catalog / CatalogItem / EditRange: In-memory item collection and trim state
- Session: Selection, transforms, playback and export orchestration

The sounddevice playback adapter lives in ``audioedit.core.playback`` and is
imported explicitly, since it needs an audio backend.
"""
from .buffer import SampleBuffer
from .catalog import Catalog, CatalogItem, EditRange
from .session import Session, ExportedFile, LoadReport
from .errors import (
    AudioEditError,
    DecodeError,
    InvalidBuffer,
    InvalidRange,
    NoSelection,
    PlaybackUnavailable,
    SampleRateMismatch,
    SilentAudio,
)
from .config import (
    AUDIO_CONFIG,
    EFFECTS_CONFIG,
    EDIT_CONFIG,
    CODEC_CONFIG,
    EXPORT_CONFIG,
    PlaybackState
)
from . import codec
from . import effects
from . import naming

__all__ = [
    # Main classes
    'SampleBuffer',
    'Catalog',
    'CatalogItem',
    'EditRange',
    'Session',
    'ExportedFile',
    'LoadReport',
    # Errors
    'AudioEditError',
    'DecodeError',
    'InvalidBuffer',
    'InvalidRange',
    'NoSelection',
    'PlaybackUnavailable',
    'SampleRateMismatch',
    'SilentAudio',
    # Config
    'AUDIO_CONFIG',
    'EFFECTS_CONFIG',
    'EDIT_CONFIG',
    'CODEC_CONFIG',
    'EXPORT_CONFIG',
    'PlaybackState',
    # Submodules
    'codec',
    'effects',
    'naming',
]
