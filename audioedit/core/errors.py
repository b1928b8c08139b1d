"""
Error kinds raised by the audioedit core.
Every transform failure is local: the caller's buffer and catalog stay as they were.
"""


class AudioEditError(Exception):
    """Base class for all audioedit errors."""


class DecodeError(AudioEditError):
    """A source file could not be decoded into a sample buffer."""

    def __init__(self, name: str, reason: str):
        self.name = name
        self.reason = reason
        super().__init__(f"Cannot decode {name or '<bytes>'}: {reason}")


class InvalidRange(AudioEditError, ValueError):
    """Trim/split bounds fall outside the buffer or produce an empty result."""


class SampleRateMismatch(AudioEditError):
    """Buffers with different sample rates cannot be combined."""

    def __init__(self, name: str, sample_rate: int, expected: int):
        self.name = name
        self.sample_rate = sample_rate
        self.expected = expected
        super().__init__(
            f"Cannot combine files with different sample rates. "
            f"File \"{name}\" has {sample_rate}Hz while others have {expected}Hz."
        )


class SilentAudio(AudioEditError):
    """Normalize was asked to scale an all-zero buffer."""


class InvalidBuffer(AudioEditError, ValueError):
    """Buffer shape is unusable (no channels, empty, or too large to encode)."""


class NoSelection(AudioEditError, LookupError):
    """An operation needs a selected item and none is selected."""


class PlaybackUnavailable(AudioEditError):
    """The session was built without a playback adapter."""
