# File: zodgen/utils.py
"""
zodgen - Utility Functions & Helpers
====================================
String transformation, hashing, file I/O and timing helpers shared by the
generation pipeline.

- Case converters are ``@lru_cache``-decorated: the same model and enum
  names are converted over and over while resolving file names and
  export symbols.
- ``write_file`` writes through a temporary file and renames, so a crash
  never leaves a half-written schema module behind.
"""

from __future__ import annotations

import functools
import hashlib
import json
import logging
import os
import re
import shutil
import tempfile
import time
from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("zodgen.utils")

# ---------------------------------------------------------------------------
# Pre-compiled regex patterns
# ---------------------------------------------------------------------------

_NON_ALPHANUM_RE: re.Pattern[str] = re.compile(r"[^a-zA-Z0-9]")
_SPLIT_WORDS_RE: re.Pattern[str] = re.compile(
    r"[A-Z]?[a-z]+|[A-Z]+(?=[A-Z][a-z]|\d|\b)|[A-Z]|\d+"
)


# ---------------------------------------------------------------------------
# Cached string transformation functions
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=None)
def _extract_words(name: str) -> Tuple[str, ...]:
    """Split any casing style into a tuple of lowercase words."""
    cleaned: str = _NON_ALPHANUM_RE.sub(" ", name)
    words: List[str] = _SPLIT_WORDS_RE.findall(cleaned)
    return tuple(w.lower() for w in words if w)


@functools.lru_cache(maxsize=None)
def to_camel_case(name: str) -> str:
    """
    Convert any string to camelCase.

    Examples:
        >>> to_camel_case("UserProfile")
        'userProfile'
        >>> to_camel_case("HTTPResponse")
        'httpResponse'
    """
    words: Tuple[str, ...] = _extract_words(name) if name else ()
    if not words:
        return ""
    return words[0] + "".join(w.capitalize() for w in words[1:])


@functools.lru_cache(maxsize=None)
def to_kebab_case(name: str) -> str:
    """
    Convert any string to kebab-case (used in file names).

        >>> to_kebab_case("UserProfile")
        'user-profile'
    """
    if not name:
        return ""
    return "-".join(_extract_words(name))


@functools.lru_cache(maxsize=None)
def upper_first(name: str) -> str:
    return name[:1].upper() + name[1:]


@functools.lru_cache(maxsize=None)
def word_pattern(symbol: str) -> re.Pattern[str]:
    """Compiled whole-word matcher for an identifier (``$`` aware)."""
    return re.compile(rf"(?<![\w$]){re.escape(symbol)}(?![\w$])")


def indent_lines(lines: Sequence[str], prefix: str = "  ") -> List[str]:
    """Prefix every non-empty line."""
    return [f"{prefix}{line}" if line else line for line in lines]


# ---------------------------------------------------------------------------
# File I/O helpers
# ---------------------------------------------------------------------------


def ensure_directory(path: Path) -> None:
    """Create directory (and parents) if it doesn't exist."""
    path.mkdir(parents=True, exist_ok=True)
    logger.debug("Ensured directory exists: %s", path)


def write_file(path: Path, content: str, atomic: bool = True) -> int:
    """
    Write *content* to *path*.

    When *atomic* is True, writes to a temporary file in the same directory
    first, then renames it over the target.

    Returns the number of bytes written.
    """
    ensure_directory(path.parent)

    encoded: bytes = content.encode("utf-8")
    byte_count: int = len(encoded)

    if atomic:
        fd, tmp_path = tempfile.mkstemp(
            dir=str(path.parent),
            prefix=f".{path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(encoded)
            os.replace(tmp_path, str(path))
        except OSError:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
    else:
        path.write_bytes(encoded)

    logger.debug("Wrote %d bytes to %s", byte_count, path)
    return byte_count


def clean_directory(path: Path) -> None:
    """Remove all contents of a directory without removing the directory itself."""
    if not path.exists():
        return

    for item in path.iterdir():
        if item.is_dir():
            shutil.rmtree(item)
        else:
            item.unlink()

    logger.debug("Cleaned directory: %s", path)


# ---------------------------------------------------------------------------
# Checksum & metrics
# ---------------------------------------------------------------------------


def sha256_hex(content: str) -> str:
    """Return SHA-256 hex digest of a string."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def stable_hash(payload: Any, length: int = 16) -> str:
    """Order-independent digest of a JSON-serialisable payload."""
    canonical: str = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)
    return sha256_hex(canonical)[:length]


def count_lines(content: str) -> int:
    """Count the number of lines in a string."""
    if not content:
        return 0
    return content.count("\n") + (1 if not content.endswith("\n") else 0)


def format_file_size(size_bytes: int) -> str:
    """
    Human readable size, one decimal above bytes.

        >>> format_file_size(16 * 1024 * 1024)
        '16.0MB'
        >>> format_file_size(512)
        '512B'
    """
    units: Tuple[str, ...] = ("B", "KB", "MB", "GB")
    size: float = float(size_bytes)
    unit_index: int = 0
    while size >= 1024 and unit_index < len(units) - 1:
        size /= 1024
        unit_index += 1
    if unit_index == 0:
        return f"{int(size)}{units[0]}"
    return f"{size:.1f}{units[unit_index]}"


# ---------------------------------------------------------------------------
# Timer context manager
# ---------------------------------------------------------------------------


class Timer:
    """
    Simple context-manager timer for profiling generation steps.

    Usage:
        with Timer("compose schemas") as t:
            ...
        print(t.elapsed)
    """

    __slots__ = ("label", "start_time", "end_time", "elapsed")

    def __init__(self, label: str = "operation") -> None:
        self.label: str = label
        self.start_time: float = 0.0
        self.end_time: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[object],
    ) -> None:
        self.end_time = time.perf_counter()
        self.elapsed = self.end_time - self.start_time
        logger.debug("Timer [%s]: %.4f seconds", self.label, self.elapsed)

    def __repr__(self) -> str:
        return f"<Timer {self.label}: {self.elapsed:.4f}s>"


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "Timer",
    "clean_directory",
    "count_lines",
    "ensure_directory",
    "format_file_size",
    "indent_lines",
    "sha256_hex",
    "stable_hash",
    "to_camel_case",
    "to_kebab_case",
    "upper_first",
    "word_pattern",
    "write_file",
]

logger.debug("zodgen.utils loaded.")
