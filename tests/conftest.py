"""
Pytest configuration and fixtures for audioedit tests.
"""
import pytest
import numpy as np

from audioedit.core.buffer import SampleBuffer
from audioedit.core.codec import encode
from audioedit.core.session import Session

SAMPLE_RATE = 44100


class FakeHandle:
    """Playback handle whose elapsed time is set by the test."""

    def __init__(self, buffer, offset, duration, gain):
        self.buffer = buffer
        self.offset = offset
        self.duration = duration
        self.gain = gain
        self.elapsed = 0.0
        self.active = True


class FakePlayback:
    """Records play/stop calls instead of touching an audio device."""

    def __init__(self):
        self.started = []
        self.stopped = []

    def play(self, buffer, offset_seconds, duration_seconds, gain):
        handle = FakeHandle(buffer, offset_seconds, duration_seconds, gain)
        self.started.append(handle)
        return handle

    def stop(self, handle):
        handle.active = False
        self.stopped.append(handle)


@pytest.fixture
def sample_mono_buffer() -> SampleBuffer:
    """Generate 1 second of mono sine wave audio."""
    t = np.linspace(0, 1, SAMPLE_RATE, dtype=np.float32)
    return SampleBuffer(np.sin(2 * np.pi * 440 * t).astype(np.float32), SAMPLE_RATE)


@pytest.fixture
def sample_stereo_buffer() -> SampleBuffer:
    """Generate 1 second of stereo sine wave audio."""
    t = np.linspace(0, 1, SAMPLE_RATE, dtype=np.float32)
    left = np.sin(2 * np.pi * 440 * t).astype(np.float32)
    right = np.sin(2 * np.pi * 880 * t).astype(np.float32) * 0.5
    return SampleBuffer(np.column_stack((left, right)), SAMPLE_RATE)


@pytest.fixture
def constant_buffer() -> SampleBuffer:
    """Mono 8000 Hz, 1 second of constant 0.5."""
    return SampleBuffer(np.full(8000, 0.5, dtype=np.float32), 8000)


@pytest.fixture
def ramp_buffer() -> SampleBuffer:
    """Mono 10 Hz buffer whose samples equal their index / 100."""
    return SampleBuffer(np.arange(20, dtype=np.float32) / 100, 10)


@pytest.fixture
def fake_playback() -> FakePlayback:
    return FakePlayback()


@pytest.fixture
def session(fake_playback) -> Session:
    """Empty session wired to a fake playback adapter."""
    return Session(playback=fake_playback)


@pytest.fixture
def loaded_session(session, constant_buffer, sample_stereo_buffer) -> Session:
    """Session holding two items, the first one selected."""
    session.load_bytes(encode(constant_buffer), "voice.mp3")
    session.add_buffer(sample_stereo_buffer, "music.wav")
    session.select(0)
    return session


@pytest.fixture
def wav_file(tmp_path, constant_buffer) -> str:
    """Path to an encoded copy of the constant buffer."""
    path = tmp_path / "voice.wav"
    path.write_bytes(encode(constant_buffer))
    return str(path)
