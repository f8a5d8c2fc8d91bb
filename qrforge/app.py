"""Command-line front end: generate, save, open and display QR Codes."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Iterator, Sequence
from pathlib import Path
from typing import NamedTuple

from .ecc import Ecc
from .qrcode import DataTooLongError, Mask, QrCode, encode_text
from .segment import VERSION_MAX, VERSION_MIN

__all__ = [
    "DEFAULT_FOLDER",
    "DISPLAY_WIDTH",
    "DISPLAY_HEIGHT",
    "MAX_TEXT_LENGTH",
    "README",
    "Box",
    "write_text_to_file",
    "read_text_from_file",
    "generate_qrcode",
    "qrcode_boxes",
    "render_text",
    "main",
]

DEFAULT_FOLDER = Path.home() / "apps_data" / "qrcode_generator"
SAVED_SUFFIX = ".txt"

DISPLAY_WIDTH = 128
DISPLAY_HEIGHT = 64

# The text entry holds 128 bytes including its terminator.
MAX_TEXT_LENGTH = 127

README = (
    "Generates and displays QR Codes.\n"
    "You can also open saved QR Codes: plain .txt files whose content is encoded."
)

_DARK = "\u2588\u2588"
_LIGHT = "  "
_QUIET_ZONE = 2


class Box(NamedTuple):
    """A filled rectangle on the display, in pixels."""

    x: int
    y: int
    width: int
    height: int


def write_text_to_file(file_path: str | Path, text: str) -> None:
    """Write ``text`` as UTF-8 to ``file_path``, replacing any existing content."""
    Path(file_path).write_bytes(text.encode("utf-8"))


def read_text_from_file(file_path: str | Path) -> str:
    """Return the text stored in ``file_path``, up to its first NUL byte."""
    raw = Path(file_path).read_bytes()
    return raw.split(b"\0", 1)[0].decode("utf-8", errors="replace")


def generate_qrcode(text: str) -> QrCode:
    """Encode ``text`` at low ECC (boosted when it fits) with automatic mask."""
    return encode_text(text, Ecc.LOW, VERSION_MIN, VERSION_MAX, Mask.AUTO, True)


def qrcode_boxes(qrcode: QrCode, scale: int = 2) -> Iterator[Box]:
    """Yield the boxes that draw each dark module, centred on the display."""
    if scale < 1:
        raise ValueError(f"scale must be positive: {scale}")
    size = qrcode.size
    offset_x = DISPLAY_WIDTH // 2 - (size * scale) // 2
    offset_y = DISPLAY_HEIGHT // 2 - (size * scale) // 2
    for y, row in enumerate(qrcode.modules):
        for x, dark in enumerate(row):
            if dark:
                yield Box(offset_x + x * scale, offset_y + y * scale, scale, scale)


def render_text(qrcode: QrCode) -> str:
    """Return the symbol drawn with block characters, framed by a light quiet zone."""
    width = qrcode.size + 2 * _QUIET_ZONE
    blank = _LIGHT * width
    margin = _LIGHT * _QUIET_ZONE
    lines = [blank] * _QUIET_ZONE
    lines.extend(
        margin + "".join(_DARK if dark else _LIGHT for dark in row) + margin
        for row in qrcode.modules
    )
    lines.extend([blank] * _QUIET_ZONE)
    return "\n".join(lines)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="qrforge", description="Generate and display QR Codes."
    )
    commands = parser.add_subparsers(dest="command")

    generate = commands.add_parser("generate", help="encode entered text")
    generate.add_argument("text", nargs="?", help="text to encode; prompted for if omitted")
    generate.add_argument("--save", metavar="PATH", help="also store the text in PATH")

    saved = commands.add_parser("saved", help="open a saved text file")
    saved.add_argument("path", nargs="?", help="file to open; lists saved files if omitted")
    saved.add_argument(
        "--folder", type=Path, default=DEFAULT_FOLDER, help="folder of saved files"
    )

    commands.add_parser("readme", help="show information about this program")
    return parser


def _resolve_saved(path: str, folder: Path) -> Path:
    candidate = Path(path)
    if not candidate.is_absolute() and not candidate.exists():
        return folder / candidate
    return candidate


def _show(text: str) -> int:
    try:
        qrcode = generate_qrcode(text)
    except DataTooLongError as exc:
        print(f"Cannot encode text: {exc}", file=sys.stderr)
        return 1
    print(render_text(qrcode))
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Run the program and return its exit status."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "readme":
        print(README)
        return 0

    if args.command == "generate":
        text = args.text if args.text is not None else input("Enter text: ")
        if len(text.encode("utf-8")) > MAX_TEXT_LENGTH:
            parser.error(f"text longer than {MAX_TEXT_LENGTH} bytes")
        if args.save:
            try:
                write_text_to_file(args.save, text)
            except OSError as exc:
                print(f"Failed to open file for writing: {exc}", file=sys.stderr)
                return 1
        return _show(text)

    # saved
    if args.path is None:
        try:
            names = sorted(p.name for p in args.folder.iterdir() if p.suffix == SAVED_SUFFIX)
        except OSError as exc:
            print(f"Failed to open folder: {exc}", file=sys.stderr)
            return 1
        for name in names:
            print(name)
        return 0
    try:
        text = read_text_from_file(_resolve_saved(args.path, args.folder))
    except OSError as exc:
        print(f"Failed to open file for reading: {exc}", file=sys.stderr)
        return 1
    return _show(text)


if __name__ == "__main__":
    sys.exit(main())