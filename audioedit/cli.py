"""Command-line front end for audioedit.

Usage:
    audioedit edit song.mp3 --trim 1.0 4.5 --fade-in --normalize -o out
    audioedit split song.wav 2.5 -o out
    audioedit combine a.wav b.wav -o out
    audioedit batch a.wav b.flac -o out
    audioedit info a.wav
    audioedit play song.wav --start 1.0 --end 3.0 --volume 0.8
"""
from __future__ import annotations
import argparse
import os
import sys
import time

from audioedit import __version__
from audioedit.core import AUDIO_CONFIG, AudioEditError, Session, codec
from audioedit.utils.logger import logger, set_verbose


def _format_time(seconds: float) -> str:
    mins, secs = divmod(int(seconds), 60)
    return f"{mins:02d}:{secs:02d}"


def _load_one(session: Session, path: str) -> None:
    with open(path, 'rb') as f:
        raw = f.read()
    session.load_bytes(raw, os.path.basename(path))
    session.select(len(session.catalog) - 1)


def _save_item(session: Session, index: int, directory: str) -> str:
    """Write an item under its own name (split parts, combined result)."""
    item = session.catalog.get_item(index)
    os.makedirs(directory, exist_ok=True)
    return codec.write_wav(item.buffer, os.path.join(directory, item.name))


def cmd_edit(session: Session, args: argparse.Namespace) -> int:
    _load_one(session, args.file)
    if args.trim:
        start, end = args.trim
        session.set_trim_end(end)
        session.set_trim_start(start)
        session.apply_trim()
    if args.reverse:
        session.reverse()
    if args.fade_in:
        session.fade_in()
    if args.fade_out:
        session.fade_out()
    if args.normalize:
        session.normalize()
    session.set_volume(args.volume)
    print(session.save_selected(args.output))
    return 0


def cmd_split(session: Session, args: argparse.Namespace) -> int:
    _load_one(session, args.file)
    session.set_cursor(args.at)
    for index in session.split():
        print(_save_item(session, index, args.output))
    return 0


def cmd_combine(session: Session, args: argparse.Namespace) -> int:
    report = session.load_files(args.files)
    if report.failures:
        return 1
    session.combine()
    print(_save_item(session, session.selected_index, args.output))
    return 0


def cmd_batch(session: Session, args: argparse.Namespace) -> int:
    session.load_files(args.files)
    for path in session.save_all(args.output):
        print(path)
    return 0


def cmd_info(session: Session, args: argparse.Namespace) -> int:
    session.load_files(args.files)
    for item in session.catalog:
        buf = item.buffer
        print(
            f"{item.name}\t[{_format_time(item.duration)}]\t{buf.sample_rate}Hz\t"
            f"{buf.channel_count}ch\t{buf.frame_count} frames"
        )
    return 0


def cmd_play(session: Session, args: argparse.Namespace) -> int:
    _load_one(session, args.file)
    if args.end is not None:
        session.set_trim_end(args.end)
    if args.start is not None:
        session.set_trim_start(args.start)
        session.set_cursor(args.start)
    session.set_volume(args.volume)
    session.play()
    try:
        while session.is_playing:
            time.sleep(0.05)
    except KeyboardInterrupt:
        session.pause()
        print(f"paused at {session.position:.2f}s")
    finally:
        session.stop()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="audioedit",
        description="Trim, split, reverse, fade, normalize and combine audio files into PCM WAV.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    edit = subparsers.add_parser("edit", help="apply edits to one file and export it")
    edit.add_argument("file")
    edit.add_argument("--trim", nargs=2, type=float, metavar=("START", "END"))
    edit.add_argument("--reverse", action="store_true")
    edit.add_argument("--fade-in", action="store_true")
    edit.add_argument("--fade-out", action="store_true")
    edit.add_argument("--normalize", action="store_true")
    edit.add_argument("--volume", type=float, default=AUDIO_CONFIG.default_gain)
    edit.add_argument("-o", "--output", default=".")
    edit.set_defaults(func=cmd_edit)

    split = subparsers.add_parser("split", help="split one file in two at a time")
    split.add_argument("file")
    split.add_argument("at", type=float, help="split point in seconds")
    split.add_argument("-o", "--output", default=".")
    split.set_defaults(func=cmd_split)

    combine = subparsers.add_parser("combine", help="concatenate files")
    combine.add_argument("files", nargs="+")
    combine.add_argument("-o", "--output", default=".")
    combine.set_defaults(func=cmd_combine)

    batch = subparsers.add_parser("batch", help="re-encode files as PCM WAV")
    batch.add_argument("files", nargs="+")
    batch.add_argument("-o", "--output", default=".")
    batch.set_defaults(func=cmd_batch)

    info = subparsers.add_parser("info", help="show duration, rate and channels")
    info.add_argument("files", nargs="+")
    info.set_defaults(func=cmd_info)

    play = subparsers.add_parser("play", help="play a file on the default output device")
    play.add_argument("file")
    play.add_argument("--start", type=float)
    play.add_argument("--end", type=float)
    play.add_argument("--volume", type=float, default=AUDIO_CONFIG.default_gain)
    play.set_defaults(func=cmd_play)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    set_verbose(args.verbose)

    playback = None
    if args.command == "play":
        from audioedit.core.playback import SoundDevicePlayback
        playback = SoundDevicePlayback()

    session = Session(playback=playback)
    try:
        return args.func(session, args)
    except (AudioEditError, OSError) as e:
        logger.error(str(e))
        print(f"error: {e}", file=sys.stderr)
        return 1
