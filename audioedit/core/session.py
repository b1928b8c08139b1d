"""
Editing session for audioedit.
Owns the catalog, the selected item, its edit range, the volume and playback.
"""
from __future__ import annotations
import os
import time
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional, Sequence

from . import effects
from .buffer import SampleBuffer
from .catalog import Catalog, CatalogItem, EditRange
from .codec import decode, encode
from .naming import COMBINED_NAME, edited_filename, split_filenames
from .config import AUDIO_CONFIG, EXPORT_CONFIG, PlaybackState
from .errors import AudioEditError, DecodeError, NoSelection, PlaybackUnavailable
from .types import ChangeCallback, Decoder, ExportSink, Playback, PlaybackHandle
from audioedit.utils.logger import logger


@dataclass(frozen=True, slots=True)
class ExportedFile:
    """Encoded output ready to be written or downloaded."""
    filename: str
    data: bytes


@dataclass
class LoadReport:
    """Outcome of a batch load; failures never abort the batch."""
    loaded: list[CatalogItem] = field(default_factory=list)
    failures: list[tuple[str, str]] = field(default_factory=list)


class Session:
    """
    An explicitly constructed editing session.

    The selected item's buffer is the current buffer; there is no second
    reference to keep in sync. Every transform stops playback first, computes
    the new buffer, and only then swaps it in, so failures change nothing.
    """

    def __init__(
        self,
        playback: Optional[Playback] = None,
        on_changed: Optional[ChangeCallback] = None,
        decoder: Decoder = decode
    ) -> None:
        self.catalog = Catalog()
        self.edit = EditRange()
        self.volume: float = AUDIO_CONFIG.default_gain
        self._selected: Optional[CatalogItem] = None
        self._playback = playback
        self._handle: Optional[PlaybackHandle] = None
        self._play_offset: Optional[float] = None
        self._state = PlaybackState.STOPPED
        self._decoder = decoder
        self._on_changed = on_changed

    # --- State ---

    @property
    def selected(self) -> Optional[CatalogItem]:
        return self._selected

    @property
    def selected_index(self) -> Optional[int]:
        if self._selected is None:
            return None
        return self.catalog.index_of(self._selected)

    @property
    def current_buffer(self) -> Optional[SampleBuffer]:
        return self._selected.buffer if self._selected is not None else None

    @property
    def is_playing(self) -> bool:
        return self._handle is not None and self._handle.active

    @property
    def playback_state(self) -> PlaybackState:
        self._sync()
        return self._state

    @property
    def position(self) -> float:
        """Live playhead while playing, otherwise the cursor."""
        self._sync()
        if self._handle is not None and self._play_offset is not None:
            return min(self._play_offset + self._handle.elapsed, self.edit.trim_end)
        return self.edit.cursor

    def _notify(self, event: str) -> None:
        if self._on_changed is not None:
            self._on_changed(event)

    def _require_selected(self) -> CatalogItem:
        if self._selected is None:
            raise NoSelection("No item is selected")
        return self._selected

    # --- Loading ---

    def load_bytes(self, raw: bytes, name: str) -> CatalogItem:
        """Decode bytes and append them as a new item."""
        buffer = self._decoder(raw, name)
        item = CatalogItem(name=name, buffer=buffer, source=raw)
        self.catalog.add_item(item)
        logger.info(f"Loaded {name}: {buffer!r}")
        self._notify("catalog")
        return item

    def load_files(self, paths: Iterable[str]) -> LoadReport:
        """Load several files; a bad file is reported and skipped."""
        report = LoadReport()
        for path in paths:
            name = os.path.basename(path)
            try:
                with open(path, 'rb') as f:
                    raw = f.read()
                report.loaded.append(self.load_bytes(raw, name))
            except (DecodeError, OSError) as e:
                logger.error(f"Failed to load {path}: {e}")
                report.failures.append((path, str(e)))
        return report

    def add_buffer(self, buffer: SampleBuffer, name: str) -> CatalogItem:
        """Append an already decoded buffer as a new item."""
        item = CatalogItem(name=name, buffer=buffer)
        self.catalog.add_item(item)
        self._notify("catalog")
        return item

    def insert(self, index: int, item: CatalogItem) -> int:
        """Insert an item at a position; the selection keeps pointing at its item."""
        index = self.catalog.insert_item(index, item)
        self._notify("catalog")
        return index

    # --- Selection ---

    def select(self, index: int) -> CatalogItem:
        """Make an item the editing target and reset its edit range."""
        item = self.catalog.get_item(index)
        if item is None:
            raise IndexError(f"No item at index {index}")
        self.stop()
        self._selected = item
        self.edit.reset(item.duration)
        logger.debug(f"Selected {item.name} ({item.duration:.3f}s)")
        self._notify("selection")
        return item

    def remove(self, index: int) -> CatalogItem:
        """Remove an item; deselects (and stops playback) if it was selected."""
        item = self.catalog.get_item(index)
        if item is None:
            raise IndexError(f"No item at index {index}")
        if item is self._selected:
            self.stop()
            self._selected = None
            self.edit.reset(0.0)
            self._notify("selection")
        self.catalog.remove_item(index)
        logger.info(f"Removed {item.name}")
        self._notify("catalog")
        return item

    def clear(self) -> None:
        """Reset the session to a clean state."""
        self.stop()
        self._selected = None
        self.catalog.clear()
        self.edit.reset(0.0)
        self._notify("catalog")
        logger.info("Session cleared")

    # --- Edit range ---

    def set_trim_start(self, seconds: float) -> float:
        self._require_selected()
        value = self.edit.set_trim_start(seconds)
        self._notify("range")
        return value

    def set_trim_end(self, seconds: float) -> float:
        self._require_selected()
        value = self.edit.set_trim_end(seconds)
        self._notify("range")
        return value

    def set_cursor(self, seconds: float) -> float:
        self._require_selected()
        value = self.edit.set_cursor(seconds)
        self._notify("range")
        return value

    # --- Transforms ---

    def _replace(
        self,
        label: str,
        transform: Callable[[SampleBuffer], SampleBuffer],
        reset_range: bool
    ) -> CatalogItem:
        item = self._require_selected()
        self.stop()
        try:
            new_buffer = transform(item.buffer)
        except AudioEditError as e:
            logger.warning(f"{label} rejected for {item.name}: {e}")
            raise

        item.replace_buffer(new_buffer)
        if reset_range:
            self.edit.reset(item.duration)
        else:
            self.edit.revalidate(item.duration)
        logger.info(f"{label}: {item.name} -> {new_buffer!r}")
        self._notify("buffer")
        return item

    def reverse(self) -> CatalogItem:
        return self._replace("Reverse", effects.apply_reverse, reset_range=True)

    def apply_trim(self) -> CatalogItem:
        start, end = self.edit.trim_start, self.edit.trim_end
        return self._replace(
            "Trim",
            lambda buf: effects.apply_trim(buf, start, end),
            reset_range=True
        )

    def fade_in(self) -> CatalogItem:
        return self._replace("Fade in", effects.apply_fade_in, reset_range=False)

    def fade_out(self) -> CatalogItem:
        return self._replace("Fade out", effects.apply_fade_out, reset_range=False)

    def normalize(self) -> CatalogItem:
        return self._replace("Normalize", effects.apply_normalize, reset_range=False)

    def apply_volume(self, factor: float) -> CatalogItem:
        return self._replace(
            "Volume",
            lambda buf: effects.apply_gain(buf, factor),
            reset_range=False
        )

    def split(self) -> tuple[int, int]:
        """
        Split the selected item at the playhead into two new items.
        The source item stays in the catalog and stays selected.
        """
        item = self._require_selected()
        at = self.position
        self.stop()
        try:
            head, tail = effects.apply_split(item.buffer, at)
        except AudioEditError as e:
            logger.warning(f"Split rejected for {item.name}: {e}")
            raise

        head_name, tail_name = split_filenames(item.name)
        first = self.catalog.add_item(CatalogItem(name=head_name, buffer=head))
        second = self.catalog.add_item(CatalogItem(name=tail_name, buffer=tail))
        self.edit.reset(item.duration)
        logger.info(f"Split {item.name} at {at:.3f}s")
        self._notify("catalog")
        return first, second

    def combine(self, indices: Optional[Sequence[int]] = None) -> CatalogItem:
        """Concatenate items (all, or the given indices in catalog order) into a new selected item."""
        if indices is None:
            items = list(self.catalog)
        else:
            items = []
            for index in sorted(set(indices)):
                item = self.catalog.get_item(index)
                if item is None:
                    raise IndexError(f"No item at index {index}")
                items.append(item)

        self.stop()
        try:
            combined = effects.apply_combine(
                [item.buffer for item in items],
                names=[item.name for item in items]
            )
        except AudioEditError as e:
            logger.warning(f"Combine rejected: {e}")
            raise

        index = self.catalog.add_item(CatalogItem(name=COMBINED_NAME, buffer=combined))
        logger.info(f"Combined {len(items)} items -> {combined!r}")
        self._notify("catalog")
        return self.select(index)

    # --- Volume & playback ---

    def set_volume(self, volume: float) -> float:
        self.volume = min(max(0.0, volume), AUDIO_CONFIG.max_gain)
        if self.is_playing:
            self._handle.gain = self.volume
        self._notify("volume")
        return self.volume

    def play(self) -> None:
        """Play the trim range of the selected item, resuming from the cursor."""
        if self._playback is None:
            raise PlaybackUnavailable("No playback adapter configured")
        item = self._require_selected()
        self._sync()
        if self._handle is not None:
            self._halt()

        cursor = self.edit.cursor
        offset = cursor if self.edit.contains(cursor) else self.edit.trim_start
        duration = self.edit.trim_end - offset

        self._handle = self._playback.play(item.buffer, offset, duration, self.volume)
        self._play_offset = offset
        self._state = PlaybackState.PLAYING
        self._notify("playback")

    def pause(self) -> None:
        """Stop playing and remember the exact position as the cursor."""
        self._sync()
        if not self.is_playing:
            return
        position = self.position
        self._halt()
        self.edit.set_cursor(position)
        self._state = PlaybackState.PAUSED
        self._notify("playback")

    def stop(self) -> None:
        """Stop playing and rewind the cursor to the trim start."""
        was_playing = self._handle is not None
        self._halt()
        self._state = PlaybackState.STOPPED
        if was_playing:
            self.edit.set_cursor(self.edit.trim_start)
            self._notify("playback")

    def _sync(self) -> None:
        # A playback that ran to the end of its range counts as a stop
        if self._handle is not None and not self._handle.active:
            logger.debug("Playback reached the end of the range")
            self.stop()

    def _halt(self) -> None:
        if self._handle is not None:
            self._playback.stop(self._handle)
        self._handle = None
        self._play_offset = None

    # --- Export ---

    def export_selected(self) -> ExportedFile:
        """Encode the selected item with the session volume baked in."""
        item = self._require_selected()
        baked = effects.apply_gain(item.buffer, self.volume)
        return ExportedFile(edited_filename(item.name), encode(baked))

    def export_all(
        self,
        sink: ExportSink,
        delay: float = EXPORT_CONFIG.batch_delay_seconds
    ) -> list[str]:
        """
        Encode every item in order and hand each file to ``sink``.

        Args:
            sink: Receives (filename, data) per item
            delay: Seconds to wait between items

        Returns:
            Filenames in the order they were emitted
        """
        names = []
        for i, item in enumerate(list(self.catalog)):
            if i > 0 and delay > 0:
                time.sleep(delay)
            filename = edited_filename(item.name)
            sink(filename, encode(item.buffer))
            names.append(filename)
            logger.debug(f"Exported {filename}")
        logger.info(f"Batch export finished ({len(names)} files)")
        return names

    def save_selected(self, directory: str) -> str:
        """Write the selected item's export into a directory. Returns the path."""
        exported = self.export_selected()
        return _write(directory, exported.filename, exported.data)

    def save_all(self, directory: str, delay: float = 0.0) -> list[str]:
        """Write every item's export into a directory. Returns the paths."""
        paths: list[str] = []
        self.export_all(lambda name, data: paths.append(_write(directory, name, data)), delay=delay)
        return paths


def _write(directory: str, filename: str, data: bytes) -> str:
    os.makedirs(directory, exist_ok=True)
    path = os.path.join(directory, filename)
    with open(path, 'wb') as f:
        f.write(data)
    logger.info(f"Wrote {path}")
    return path
