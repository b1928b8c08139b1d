"""
Catalog abstraction for audioedit.
Holds the loaded audio items in insertion order, plus the per-item edit range.
"""
from __future__ import annotations
import math
from dataclasses import dataclass, field
from typing import Iterator, Optional

from .buffer import SampleBuffer
from .naming import base_name
from .config import EDIT_CONFIG


@dataclass(eq=False)
class CatalogItem:
    """
    A named audio item and the buffer currently representing it.
    Items compare by identity; two loads of the same file are two items.
    """
    name: str
    buffer: SampleBuffer
    source: Optional[bytes] = field(default=None, repr=False)
    duration: float = 0.0

    def __post_init__(self) -> None:
        self.duration = self.buffer.duration_seconds

    @property
    def base_name(self) -> str:
        return base_name(self.name)

    def replace_buffer(self, buffer: SampleBuffer) -> None:
        """Swap in a new buffer and refresh the cached duration."""
        self.buffer = buffer
        self.duration = buffer.duration_seconds


@dataclass
class EditRange:
    """
    Trim range and cursor for the selected item, in seconds.
    Keeps 0 <= trim_start < trim_end <= duration with a minimum separation.
    """
    duration: float = 0.0
    trim_start: float = 0.0
    trim_end: float = 0.0
    cursor: float = 0.0

    @classmethod
    def full(cls, duration: float) -> "EditRange":
        return cls(duration=duration, trim_start=0.0, trim_end=duration, cursor=0.0)

    def reset(self, duration: float) -> None:
        """Cover the whole buffer and rewind the cursor."""
        self.duration = duration
        self.trim_start = 0.0
        self.trim_end = duration
        self.cursor = 0.0

    def set_trim_start(self, value: float) -> float:
        sep = EDIT_CONFIG.min_trim_separation
        self.trim_start = max(0.0, min(value, self.trim_end - sep))
        return self.trim_start

    def set_trim_end(self, value: float) -> float:
        sep = EDIT_CONFIG.min_trim_separation
        self.trim_end = min(self.duration, max(value, self.trim_start + sep))
        return self.trim_end

    def set_cursor(self, value: float) -> float:
        # Cursor lives in [0, duration)
        if self.duration <= 0:
            self.cursor = 0.0
        else:
            self.cursor = min(max(0.0, value), self._last_position())
        return self.cursor

    def revalidate(self, duration: float) -> None:
        """Clamp existing values into a (possibly new) duration."""
        self.duration = duration
        self.trim_end = min(max(self.trim_end, 0.0), duration)
        self.trim_start = max(0.0, min(self.trim_start, self.trim_end))
        if self.trim_start >= self.trim_end:
            self.trim_start, self.trim_end = 0.0, duration
        self.set_cursor(self.cursor)

    def contains(self, seconds: float) -> bool:
        return self.trim_start <= seconds < self.trim_end

    def _last_position(self) -> float:
        # Largest float strictly below duration
        return math.nextafter(self.duration, 0.0)


@dataclass
class Catalog:
    """
    Ordered, in-memory collection of audio items.
    Indices shift after removal; re-resolve them after every mutation.
    """
    items: list[CatalogItem] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[CatalogItem]:
        return iter(self.items)

    @property
    def total_duration(self) -> float:
        """Sum of all item durations in seconds."""
        return sum(item.duration for item in self.items)

    def add_item(self, item: CatalogItem) -> int:
        """Add an item and return its index."""
        self.items.append(item)
        return len(self.items) - 1

    def insert_item(self, index: int, item: CatalogItem) -> int:
        """Insert an item before ``index`` (clamped) and return where it landed."""
        index = max(0, min(index, len(self.items)))
        self.items.insert(index, item)
        return index

    def remove_item(self, index: int) -> Optional[CatalogItem]:
        """Remove item at index and return it."""
        if 0 <= index < len(self.items):
            return self.items.pop(index)
        return None

    def get_item(self, index: int) -> Optional[CatalogItem]:
        """Get item by index safely."""
        if 0 <= index < len(self.items):
            return self.items[index]
        return None

    def index_of(self, item: CatalogItem) -> Optional[int]:
        """Position of an item by identity, or None."""
        for i, candidate in enumerate(self.items):
            if candidate is item:
                return i
        return None

    def clear(self) -> None:
        self.items.clear()
