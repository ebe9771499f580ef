"""Console presentation helpers for the demo runner."""
from __future__ import annotations

import os
import shutil
import sys
from typing import Optional

import colorama
import pyfiglet
from colorama import Fore, Style

__all__ = [
    "init",
    "banner",
    "step_header",
    "section",
    "kv",
    "bullet",
    "success",
    "warning",
    "error",
    "elapsed",
    "rule",
    "line",
]

_width = 100
_plain_mode = False
_color_prefix = {
    "success": "",
    "warning": "",
    "error": "",
    "step": "",
}

_symbol_success = "✓"
_symbol_warning = "!"
_symbol_error = "✗"
_symbol_bullet = "•"


def init(plain: bool = False) -> None:
    """Initialise console helpers; colour is off for ``plain``, NO_COLOR or non-TTY output."""

    global _width, _plain_mode, _color_prefix
    global _symbol_success, _symbol_warning, _symbol_error, _symbol_bullet

    _width = shutil.get_terminal_size(fallback=(100, 24)).columns or 100

    is_tty = bool(getattr(sys.stdout, "isatty", lambda: False)())
    _plain_mode = plain or bool(os.environ.get("NO_COLOR")) or not is_tty

    if _plain_mode:
        _symbol_success = "[OK]"
        _symbol_warning = "[!]"
        _symbol_error = "[X]"
        _symbol_bullet = "-"
        _color_prefix = {key: "" for key in _color_prefix}
        return

    colorama.init(autoreset=True)
    _symbol_success = "✓"
    _symbol_warning = "!"
    _symbol_error = "✗"
    _symbol_bullet = "•"
    _color_prefix = {
        "success": Fore.GREEN + Style.BRIGHT,
        "warning": Fore.YELLOW + Style.BRIGHT,
        "error": Fore.RED + Style.BRIGHT,
        "step": Fore.CYAN + Style.BRIGHT,
    }


def _apply(kind: str, message: str) -> str:
    prefix = _color_prefix[kind]
    if not prefix:
        return message
    return f"{prefix}{message}{Style.RESET_ALL}"


def rule(char: str = "=", width: Optional[int] = None) -> None:
    """Print a horizontal rule spanning the console width."""

    count = width if width is not None else _width
    print(char * max(1, count))


def banner(title: str) -> None:
    """Display a banner heading; figlet art unless in plain mode."""

    if _plain_mode:
        print(f"=== {title} ===".center(_width))
        return
    print(pyfiglet.figlet_format(title, width=_width))


def step_header(i: int, n: int, title: str) -> None:
    """Print a numbered step header before running a demo."""

    print(_apply("step", f"[{i}/{n}] Running: {title}"))


def section(title: str) -> None:
    """Display a section divider with the given title."""

    rule("=")
    print(f" {title.upper()}")
    rule("=")


def kv(key: str, value: object) -> None:
    print(f"{key}: {value}")


def bullet(msg: str) -> None:
    print(f"{_symbol_bullet} {msg}")


def success(msg: str) -> None:
    print(_apply("success", f"{_symbol_success} {msg}"))


def warning(msg: str) -> None:
    print(_apply("warning", f"{_symbol_warning} {msg}"))


def error(msg: str) -> None:
    print(_apply("error", f"{_symbol_error} {msg}"))


def elapsed(prefix: str, seconds: float) -> None:
    """Print a formatted elapsed time entry."""

    print(f"{prefix} {seconds:.2f}s")


def line() -> None:
    """Print a thin separator line."""

    rule("-")
