"""
Tests for Session: selection, transforms, playback and export.
"""
import pytest
import numpy as np

from audioedit.core import codec
from audioedit.core.buffer import SampleBuffer
from audioedit.core.catalog import CatalogItem
from audioedit.core.config import PlaybackState
from audioedit.core.errors import (
    InvalidRange, NoSelection, PlaybackUnavailable, SampleRateMismatch, SilentAudio
)
from audioedit.core.session import Session


class TestLoading:
    """Tests for loading items into the catalog."""

    def test_load_bytes(self, session, constant_buffer):
        item = session.load_bytes(codec.encode(constant_buffer), "voice.mp3")
        assert len(session.catalog) == 1
        assert item.name == "voice.mp3"
        assert item.buffer.frame_count == 8000
        assert item.source is not None

    def test_load_does_not_select(self, session, constant_buffer):
        session.load_bytes(codec.encode(constant_buffer), "voice.mp3")
        assert session.selected is None
        assert session.current_buffer is None

    def test_load_files_skips_bad_file(self, session, tmp_path, wav_file):
        bad = tmp_path / "broken.mp3"
        bad.write_bytes(b"not audio at all")
        missing = str(tmp_path / "missing.wav")

        report = session.load_files([str(bad), wav_file, missing])

        assert [item.name for item in report.loaded] == ["voice.wav"]
        assert [path for path, _ in report.failures] == [str(bad), missing]
        assert len(session.catalog) == 1

    def test_insert_keeps_selection(self, loaded_session, constant_buffer):
        selected = loaded_session.selected
        loaded_session.insert(0, CatalogItem(name="intro.wav", buffer=constant_buffer))
        assert loaded_session.selected is selected
        assert loaded_session.selected_index == 1


class TestSelection:
    """Tests for select/remove transitions."""

    def test_select_resets_range(self, loaded_session):
        loaded_session.set_trim_start(0.3)
        loaded_session.set_cursor(0.6)
        loaded_session.select(1)
        edit = loaded_session.edit
        assert (edit.trim_start, edit.trim_end, edit.cursor) == (0.0, 1.0, 0.0)
        assert loaded_session.selected.name == "music.wav"

    def test_current_buffer_follows_selected_item(self, loaded_session):
        assert loaded_session.current_buffer is loaded_session.selected.buffer
        loaded_session.reverse()
        assert loaded_session.current_buffer is loaded_session.selected.buffer

    def test_select_invalid_index(self, loaded_session):
        with pytest.raises(IndexError):
            loaded_session.select(7)

    def test_select_stops_playback(self, loaded_session, fake_playback):
        loaded_session.play()
        loaded_session.select(1)
        assert not loaded_session.is_playing
        assert fake_playback.stopped

    def test_remove_selected_clears_selection(self, loaded_session, fake_playback):
        loaded_session.play()
        loaded_session.remove(0)
        assert loaded_session.selected is None
        assert not loaded_session.is_playing
        assert len(fake_playback.stopped) == 1
        assert len(loaded_session.catalog) == 1

    def test_remove_other_item_keeps_selection(self, loaded_session, fake_playback):
        loaded_session.select(1)
        loaded_session.play()
        loaded_session.remove(0)
        assert loaded_session.selected.name == "music.wav"
        assert loaded_session.selected_index == 0
        assert loaded_session.is_playing
        assert not fake_playback.stopped

    def test_remove_invalid_index(self, loaded_session):
        with pytest.raises(IndexError):
            loaded_session.remove(5)

    def test_range_ops_need_selection(self, session):
        with pytest.raises(NoSelection):
            session.set_trim_start(0.1)
        with pytest.raises(NoSelection):
            session.reverse()

    def test_clear(self, loaded_session):
        loaded_session.clear()
        assert len(loaded_session.catalog) == 0
        assert loaded_session.selected is None


class TestTransforms:
    """Tests for buffer-replacing operations on the selected item."""

    def test_reverse_replaces_buffer(self, loaded_session):
        loaded_session.select(1)
        before = loaded_session.current_buffer
        loaded_session.reverse()
        after = loaded_session.current_buffer
        assert after is not before
        assert np.array_equal(after.data, np.flip(before.data, axis=0))

    def test_apply_trim_resets_range(self, loaded_session):
        loaded_session.set_trim_end(0.75)
        loaded_session.set_trim_start(0.25)
        item = loaded_session.apply_trim()
        assert item.buffer.frame_count == 4000
        assert item.duration == 0.5
        edit = loaded_session.edit
        assert (edit.trim_start, edit.trim_end, edit.cursor) == (0.0, 0.5, 0.0)

    def test_failed_trim_changes_nothing(self, session):
        session.add_buffer(SampleBuffer(np.ones(10, dtype=np.float32), 1), "slow.wav")
        session.select(0)
        session.set_trim_start(0.05)
        session.set_trim_end(0.15)
        before = session.current_buffer
        with pytest.raises(InvalidRange):
            session.apply_trim()
        assert session.current_buffer is before
        assert session.edit.trim_start == 0.05

    def test_fade_keeps_range(self, loaded_session):
        loaded_session.set_trim_start(0.2)
        loaded_session.set_cursor(0.4)
        loaded_session.fade_in()
        assert loaded_session.edit.trim_start == 0.2
        assert loaded_session.edit.cursor == 0.4

    def test_fade_out(self, loaded_session):
        loaded_session.fade_out()
        assert loaded_session.current_buffer.channel(0)[-1] < 0.01

    def test_normalize(self, loaded_session):
        loaded_session.normalize()
        assert np.isclose(np.max(np.abs(loaded_session.current_buffer.data)), 0.95, atol=1e-6)

    def test_normalize_silence_changes_nothing(self, session):
        session.add_buffer(SampleBuffer.silence(800, 1, 8000), "silence.wav")
        session.select(0)
        before = session.current_buffer
        with pytest.raises(SilentAudio):
            session.normalize()
        assert session.current_buffer is before

    def test_apply_volume(self, loaded_session):
        before = loaded_session.current_buffer.data.copy()
        loaded_session.apply_volume(0.5)
        assert np.allclose(loaded_session.current_buffer.data, before * 0.5)

    def test_transform_stops_playback(self, loaded_session, fake_playback):
        loaded_session.play()
        loaded_session.reverse()
        assert not loaded_session.is_playing
        assert fake_playback.started[0] in fake_playback.stopped

    def test_split_appends_parts(self, loaded_session):
        loaded_session.set_cursor(0.25)
        first, second = loaded_session.split()
        catalog = loaded_session.catalog
        assert (first, second) == (2, 3)
        assert catalog.get_item(first).name == "voice_part1.wav"
        assert catalog.get_item(second).name == "voice_part2.wav"
        assert catalog.get_item(first).buffer.frame_count == 2000
        assert catalog.get_item(second).buffer.frame_count == 6000
        assert loaded_session.selected.name == "voice.mp3"
        assert len(catalog) == 4

    def test_split_at_zero_rejected(self, loaded_session):
        with pytest.raises(InvalidRange):
            loaded_session.split()
        assert len(loaded_session.catalog) == 2

    def test_split_at_live_position(self, loaded_session, fake_playback):
        loaded_session.play()
        fake_playback.started[-1].elapsed = 0.5
        first, _ = loaded_session.split()
        assert loaded_session.catalog.get_item(first).buffer.frame_count == 4000


class TestCombine:
    """Tests for combining catalog items."""

    def test_combine_all(self, session, constant_buffer):
        session.add_buffer(constant_buffer, "a.wav")
        session.add_buffer(SampleBuffer.silence(400, 2, 8000), "b.wav")
        item = session.combine()
        assert item.name == "COMBINED_AUDIO.wav"
        assert item.buffer.frame_count == 8400
        assert item.buffer.channel_count == 2
        assert session.selected is item
        assert session.selected_index == 2
        assert session.edit.trim_end == item.duration

    def test_combine_indices(self, session, constant_buffer):
        for name in ("a.wav", "b.wav", "c.wav"):
            session.add_buffer(constant_buffer, name)
        item = session.combine([2, 0])
        assert item.buffer.frame_count == 16000

    def test_mismatch_leaves_catalog_unchanged(self, loaded_session):
        loaded_session.select(1)
        selected = loaded_session.selected
        with pytest.raises(SampleRateMismatch) as excinfo:
            loaded_session.combine()
        assert excinfo.value.name == "music.wav"
        assert len(loaded_session.catalog) == 2
        assert loaded_session.selected is selected

    def test_combine_needs_two_items(self, session, constant_buffer):
        session.add_buffer(constant_buffer, "a.wav")
        with pytest.raises(ValueError):
            session.combine()


class TestPlayback:
    """Tests for play/pause/stop against a fake adapter."""

    def test_play_requires_adapter(self, constant_buffer):
        session = Session()
        session.add_buffer(constant_buffer, "a.wav")
        session.select(0)
        with pytest.raises(PlaybackUnavailable):
            session.play()

    def test_play_requires_selection(self, session):
        with pytest.raises(NoSelection):
            session.play()

    def test_play_uses_trim_range_and_volume(self, loaded_session, fake_playback):
        loaded_session.set_trim_end(0.8)
        loaded_session.set_trim_start(0.2)
        loaded_session.set_volume(0.7)
        loaded_session.play()
        handle = fake_playback.started[-1]
        assert handle.offset == 0.2
        assert handle.duration == pytest.approx(0.6)
        assert handle.gain == 0.7
        assert loaded_session.playback_state is PlaybackState.PLAYING

    def test_pause_and_resume(self, loaded_session, fake_playback):
        loaded_session.play()
        fake_playback.started[-1].elapsed = 0.4
        loaded_session.pause()
        assert loaded_session.edit.cursor == pytest.approx(0.4)
        assert loaded_session.playback_state is PlaybackState.PAUSED

        loaded_session.play()
        assert fake_playback.started[-1].offset == pytest.approx(0.4)

    def test_resume_from_zero_cursor(self, loaded_session, fake_playback):
        loaded_session.play()
        loaded_session.pause()
        assert loaded_session.edit.cursor == 0.0
        loaded_session.play()
        assert fake_playback.started[-1].offset == 0.0

    def test_pause_clamps_to_trim_end(self, loaded_session, fake_playback):
        loaded_session.set_trim_end(0.5)
        loaded_session.play()
        fake_playback.started[-1].elapsed = 3.0
        assert loaded_session.position == 0.5

    def test_cursor_outside_range_starts_at_trim_start(self, loaded_session, fake_playback):
        loaded_session.set_cursor(0.1)
        loaded_session.set_trim_start(0.3)
        loaded_session.play()
        assert fake_playback.started[-1].offset == 0.3

    def test_stop_rewinds_to_trim_start(self, loaded_session, fake_playback):
        loaded_session.set_trim_start(0.2)
        loaded_session.set_cursor(0.5)
        loaded_session.play()
        loaded_session.stop()
        assert loaded_session.edit.cursor == 0.2
        assert loaded_session.playback_state is PlaybackState.STOPPED

    def test_natural_end_reports_stopped(self, loaded_session, fake_playback):
        loaded_session.play()
        fake_playback.started[-1].active = False
        assert not loaded_session.is_playing
        assert loaded_session.playback_state is PlaybackState.STOPPED

    def test_natural_end_rewinds_to_trim_start(self, loaded_session, fake_playback):
        loaded_session.set_cursor(0.4)
        loaded_session.play()
        handle = fake_playback.started[-1]
        handle.elapsed = 0.6
        handle.active = False

        assert loaded_session.position == 0.0
        assert loaded_session.edit.cursor == 0.0
        loaded_session.play()
        assert fake_playback.started[-1].offset == 0.0

    def test_pause_after_natural_end_stays_stopped(self, loaded_session, fake_playback):
        loaded_session.set_trim_start(0.3)
        loaded_session.play()
        fake_playback.started[-1].active = False
        loaded_session.pause()
        assert loaded_session.playback_state is PlaybackState.STOPPED
        assert loaded_session.edit.cursor == 0.3

    def test_split_after_natural_end_uses_trim_start(self, loaded_session, fake_playback):
        loaded_session.set_trim_start(0.2)
        loaded_session.set_cursor(0.5)
        loaded_session.play()
        handle = fake_playback.started[-1]
        handle.elapsed = 0.8
        handle.active = False

        first, second = loaded_session.split()
        assert loaded_session.catalog.get_item(first).buffer.frame_count == 1600
        assert loaded_session.catalog.get_item(second).buffer.frame_count == 6400

    def test_set_volume_updates_live_handle(self, loaded_session, fake_playback):
        loaded_session.play()
        loaded_session.set_volume(5.0)
        assert loaded_session.volume == 2.0
        assert fake_playback.started[-1].gain == 2.0

    def test_play_while_playing_restarts(self, loaded_session, fake_playback):
        loaded_session.play()
        loaded_session.play()
        assert len(fake_playback.started) == 2
        assert fake_playback.started[0] in fake_playback.stopped


class TestExport:
    """Tests for single and batch export."""

    def test_export_selected_name(self, loaded_session):
        exported = loaded_session.export_selected()
        assert exported.filename == "voice_edited.wav"
        assert exported.data[:4] == b"RIFF"

    def test_export_bakes_volume(self, session, constant_buffer):
        session.add_buffer(constant_buffer, "a.wav")
        session.select(0)
        session.set_volume(0.5)
        samples = np.frombuffer(session.export_selected().data[44:], dtype='<i2')
        assert np.all(samples == 8191)

    def test_export_does_not_modify_item(self, loaded_session):
        before = loaded_session.current_buffer
        loaded_session.set_volume(0.5)
        loaded_session.export_selected()
        assert loaded_session.current_buffer is before

    def test_export_all(self, loaded_session):
        received = []
        names = loaded_session.export_all(lambda name, data: received.append((name, data)), delay=0)
        assert names == ["voice_edited.wav", "music_edited.wav"]
        assert [name for name, _ in received] == names
        assert all(data[:4] == b"RIFF" for _, data in received)

    def test_export_all_ignores_volume(self, session, constant_buffer):
        session.add_buffer(constant_buffer, "a.wav")
        session.select(0)
        session.set_volume(0.5)
        received = []
        session.export_all(lambda name, data: received.append(data), delay=0)
        assert np.all(np.frombuffer(received[0][44:], dtype='<i2') == 16383)

    def test_export_all_waits_between_items(self, loaded_session, monkeypatch):
        sleeps = []
        monkeypatch.setattr("audioedit.core.session.time.sleep", sleeps.append)
        loaded_session.export_all(lambda name, data: None, delay=0.5)
        assert sleeps == [0.5]

    def test_save_selected_and_all(self, loaded_session, tmp_path):
        path = loaded_session.save_selected(str(tmp_path / "out"))
        assert path.endswith("voice_edited.wav")
        paths = loaded_session.save_all(str(tmp_path / "batch"))
        assert len(paths) == 2
        assert codec.load_file(paths[1]).channel_count == 2

    def test_export_needs_selection(self, session):
        with pytest.raises(NoSelection):
            session.export_selected()


class TestNotifications:
    """Tests for the on_changed callback."""

    def test_events_emitted(self, constant_buffer):
        events = []
        session = Session(on_changed=events.append)
        session.add_buffer(constant_buffer, "a.wav")
        session.select(0)
        session.set_trim_start(0.1)
        session.reverse()
        assert events == ["catalog", "selection", "range", "buffer"]
