"""
Export file naming for audioedit.
"""
from __future__ import annotations
import os

from .config import EXPORT_CONFIG

COMBINED_NAME = EXPORT_CONFIG.combined_name


def base_name(name: str) -> str:
    """Strip the last extension from a file name."""
    root, ext = os.path.splitext(name)
    return root if root else name


def edited_filename(name: str) -> str:
    """``song.mp3`` -> ``song_edited.wav``."""
    return f"{base_name(name)}{EXPORT_CONFIG.edited_suffix}{EXPORT_CONFIG.extension}"


def split_filenames(name: str) -> tuple[str, str]:
    """``song.mp3`` -> (``song_part1.wav``, ``song_part2.wav``)."""
    base = base_name(name)
    ext = EXPORT_CONFIG.extension
    return f"{base}_part1{ext}", f"{base}_part2{ext}"
