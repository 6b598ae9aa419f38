"""General helpers: file naming, formatting, validation, progress and batching."""

from __future__ import annotations

import inspect
import logging
import math
import os
import time
from pathlib import Path
from typing import Any, Awaitable, Callable, Generic, Iterable, Iterator, Sequence, TypeVar, Union

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

PathLike = Union[str, "os.PathLike[str]"]

_SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")
_SIZE_THRESHOLD = 1024.0

VIDEO_EXTENSIONS = frozenset({"mp4", "avi", "mov", "mkv", "webm"})
INDEX_EXTENSIONS = frozenset({"json", "metadata"})


class MemvidError(Exception):
    """Base class for errors raised by this package."""


class ConfigError(MemvidError):
    """Raised when configuration or environment is invalid."""


class UnsupportedFormatError(MemvidError):
    """Raised when a file has an unsupported format or extension."""


def generate_unique_filename(base_name: str, extension: str) -> str:
    """Return ``<base_name>_<unix seconds>.<extension>``."""
    return f"{base_name}_{int(time.time())}.{extension}"


def ensure_directory_exists(path: PathLike) -> None:
    """Create the directory (and parents) if it does not exist yet."""
    Path(path).mkdir(parents=True, exist_ok=True)


def get_file_extension(path: PathLike) -> str | None:
    """Return the lower-cased extension of ``path``, or None if it has none.

    A trailing dot yields an empty extension; a leading dot alone (as in
    ``.hidden``) does not count as an extension.
    """
    name = Path(path).name
    if name in ("", ".", ".."):
        return None
    dot = name.rfind(".")
    if dot <= 0:
        return None
    return name[dot + 1:].lower()


def has_extension(path: PathLike, extension: str) -> bool:
    """Tell whether ``path`` has the given extension, ignoring case."""
    ext = get_file_extension(path)
    return ext is not None and ext == extension.lower()


def format_file_size(num_bytes: int) -> str:
    """Format a byte count using binary units (B, KB, MB, GB, TB)."""
    if num_bytes == 0:
        return "0 B"
    size = float(num_bytes)
    unit_index = 0
    while size >= _SIZE_THRESHOLD and unit_index < len(_SIZE_UNITS) - 1:
        size /= _SIZE_THRESHOLD
        unit_index += 1
    if unit_index == 0:
        return f"{num_bytes} {_SIZE_UNITS[0]}"
    return f"{size:.1f} {_SIZE_UNITS[unit_index]}"


def format_duration(seconds: float) -> str:
    """Format a duration in seconds as ``Xs``, ``Xm Ys`` or ``Xh Ym Zs``."""
    if seconds < 60.0:
        return f"{seconds:.1f}s"
    if seconds < 3600.0:
        minutes = int(math.floor(seconds / 60.0))
        return f"{minutes}m {math.fmod(seconds, 60.0):.1f}s"
    hours = int(math.floor(seconds / 3600.0))
    minutes = int(math.floor(math.fmod(seconds, 3600.0) / 60.0))
    return f"{hours}h {minutes}m {math.fmod(seconds, 60.0):.1f}s"


def calculate_compression_ratio(original_size: int, compressed_size: int) -> float:
    """Return compressed/original, or 0.0 when the original size is zero."""
    if original_size == 0:
        return 0.0
    return compressed_size / original_size


def _validate_extension(path: PathLike, allowed: frozenset[str], kind: str) -> None:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"File not found: {p}")
    ext = get_file_extension(p)
    if ext is None:
        raise UnsupportedFormatError("No file extension")
    if ext not in allowed:
        raise UnsupportedFormatError(f"{kind} format: {ext}")


def validate_video_path(path: PathLike) -> None:
    """Check that ``path`` exists and has a known video extension."""
    _validate_extension(path, VIDEO_EXTENSIONS, "Video")


def validate_index_path(path: PathLike) -> None:
    """Check that ``path`` exists and has a known index extension."""
    _validate_extension(path, INDEX_EXTENSIONS, "Index")


def validate_env_vars(required_vars: Iterable[str]) -> None:
    """Raise ConfigError naming every required environment variable that is unset."""
    missing = [name for name in required_vars if name not in os.environ]
    if missing:
        raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")


def validate_paths(paths: Iterable[PathLike]) -> None:
    """Raise FileNotFoundError for the first path that does not exist."""
    for path in paths:
        if not Path(path).exists():
            raise FileNotFoundError(f"File not found: {path}")


class ProgressReporter:
    """Tracks progress of a long operation and logs roughly every 1%."""

    def __init__(self, total: int) -> None:
        self.total = total
        self.current = 0
        self._last_reported = 0
        self._report_interval = max(1, total // 100)

    def update(self, current: int) -> None:
        """Set the current position, logging when enough progress was made."""
        self.current = current
        if current - self._last_reported >= self._report_interval or current == self.total:
            self._report()
            self._last_reported = current

    def increment(self) -> None:
        """Advance progress by one."""
        self.update(self.current + 1)

    def _report(self) -> None:
        logger.info("Progress: %d/%d (%.1f%%)", self.current, self.total, self.percentage())

    def percentage(self) -> float:
        """Return progress as a percentage of the total."""
        if self.total > 0:
            return self.current / self.total * 100.0
        return 0.0

    def is_complete(self) -> bool:
        """Tell whether the current position has reached the total."""
        return self.current >= self.total


class Timer:
    """Measures elapsed wall-clock time."""

    def __init__(self) -> None:
        self._start = time.perf_counter()

    @classmethod
    def start(cls) -> "Timer":
        """Create a timer that starts now."""
        return cls()

    def elapsed_seconds(self) -> float:
        """Seconds since the timer started."""
        return time.perf_counter() - self._start

    def elapsed_formatted(self) -> str:
        """Elapsed time formatted with :func:`format_duration`."""
        return format_duration(self.elapsed_seconds())


class BatchProcessor(Generic[T]):
    """Splits a collection into fixed-size batches and processes them in order."""

    def __init__(self, items: Sequence[T], batch_size: int) -> None:
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")
        self._items = list(items)
        self.batch_size = batch_size

    def _batches(self) -> Iterator[list[T]]:
        for start in range(0, len(self._items), self.batch_size):
            yield self._items[start:start + self.batch_size]

    async def process(
        self,
        processor: Callable[[list[T]], Union[Iterable[R], Awaitable[Iterable[R]]]],
    ) -> list[R]:
        """Run ``processor`` on each batch and concatenate the results.

        ``processor`` may return an iterable directly or an awaitable of one.
        """
        results: list[Any] = []
        for batch in self._batches():
            outcome = processor(batch)
            if inspect.isawaitable(outcome):
                outcome = await outcome
            results.extend(outcome)
        return results

    def batch_count(self) -> int:
        """Number of batches the items split into."""
        return -(-len(self._items) // self.batch_size)

    def total_items(self) -> int:
        """Total number of items."""
        return len(self._items)