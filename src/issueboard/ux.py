"""Terminal styling helpers for issueboard output."""

from __future__ import annotations

import os
import re
import sys
from collections.abc import Sequence
from typing import TextIO


class Colors:
    """ANSI codes used by the views."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    CYAN = "\033[36m"
    BRIGHT_BLACK = "\033[90m"


_ANSI = re.compile(r"\033\[[0-9;]*m")

# Badge variant -> color for issue status badges
VARIANT_COLORS = {
    "default": Colors.BLUE,
    "secondary": Colors.BRIGHT_BLACK,
    "outline": Colors.YELLOW,
}


def _supports_color(stream: TextIO | None = None) -> bool:
    stream = stream or sys.stdout
    if os.environ.get("NO_COLOR"):
        return False
    if not hasattr(stream, "isatty") or not stream.isatty():
        return False
    return os.environ.get("TERM") != "dumb"


def colorize(text: str, color: str, bold: bool = False, stream: TextIO | None = None) -> str:
    """Apply color to text if the stream supports it."""
    if not _supports_color(stream):
        return text
    prefix = (Colors.BOLD if bold else "") + color
    return f"{prefix}{text}{Colors.RESET}"


def _emit(icon: str, color: str, message: str, stream: TextIO) -> None:
    print(colorize(icon, color, bold=True, stream=stream) + " " + message, file=stream)


def print_success(message: str, stream: TextIO | None = None) -> None:
    _emit("✓", Colors.GREEN, message, stream or sys.stdout)


def print_error(message: str, stream: TextIO | None = None) -> None:
    _emit("✗", Colors.RED, message, stream or sys.stderr)


def print_info(message: str, stream: TextIO | None = None) -> None:
    _emit("ℹ", Colors.BLUE, message, stream or sys.stdout)


def print_header(message: str, stream: TextIO | None = None) -> None:
    stream = stream or sys.stdout
    print(colorize(message, Colors.CYAN, bold=True, stream=stream), file=stream)


def badge(label: str, variant: str, stream: TextIO | None = None) -> str:
    return colorize(f"[{label}]", VARIANT_COLORS.get(variant, Colors.BLUE), stream=stream)


def _visible_len(text: str) -> int:
    return len(_ANSI.sub("", text))


def _pad(text: str, width: int) -> str:
    return text + " " * (width - _visible_len(text))


def print_table(
    headers: Sequence[str], rows: Sequence[Sequence[str]], stream: TextIO | None = None
) -> None:
    """Left-aligned columns sized to the widest plain-text cell."""
    stream = stream or sys.stdout
    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], _visible_len(cell))
    header_line = "  ".join(h.ljust(widths[i]) for i, h in enumerate(headers))
    print(colorize(header_line, Colors.BOLD, stream=stream), file=stream)
    print(colorize("─" * len(header_line), Colors.DIM, stream=stream), file=stream)
    for row in rows:
        print("  ".join(_pad(cell, widths[i]) for i, cell in enumerate(row)).rstrip(), file=stream)


def print_summary_box(
    title: str, items: Sequence[tuple[str, str]], stream: TextIO | None = None
) -> None:
    """Print a key/value box, e.g. the fields of a form being edited."""
    stream = stream or sys.stdout
    max_key_len = max((len(k) for k, _ in items), default=0)
    print(colorize(f"\n{title}", Colors.CYAN, bold=True, stream=stream), file=stream)
    print(colorize("─" * 60, Colors.DIM, stream=stream), file=stream)
    for key, value in items:
        print(f"  {key.ljust(max_key_len)}  {value}", file=stream)
    print(colorize("─" * 60, Colors.DIM, stream=stream), file=stream)
