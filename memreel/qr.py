"""QR payload preparation: compression, size limits and error-correction levels.

Text is stored in QR codes either verbatim or, when longer than 100 bytes,
gzip-compressed, base64-encoded and prefixed with ``GZ:``.
"""

from __future__ import annotations

import base64
import binascii
import gzip
import zlib
from dataclasses import dataclass

from .utils import ConfigError, MemvidError

COMPRESSION_PREFIX = "GZ:"
COMPRESSION_THRESHOLD = 100

_ERROR_CORRECTION_LEVELS = ("L", "M", "Q", "H")

# Approximate capacities, in bytes, of the largest QR code version.
_MAX_CAPACITY = {
    "L": 4296,
    "M": 3391,
    "Q": 2420,
    "H": 1852,
}
_DEFAULT_CAPACITY = 2000


class QrCodeError(MemvidError):
    """Raised when data cannot be stored in or recovered from a QR code."""


@dataclass(frozen=True)
class QrConfig:
    """QR code settings; ``error_correction`` is one of L, M, Q or H."""

    error_correction: str = "M"


def compress_data(data: str) -> str:
    """Gzip the UTF-8 bytes of ``data`` and return them base64-encoded."""
    compressed = gzip.compress(data.encode("utf-8"), mtime=0)
    return base64.b64encode(compressed).decode("ascii")


def decompress_data(compressed: str) -> str:
    """Reverse :func:`compress_data`."""
    try:
        raw = base64.b64decode(compressed, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise QrCodeError(f"Base64 decode error: {exc}") from exc
    try:
        return gzip.decompress(raw).decode("utf-8")
    except (OSError, EOFError, zlib.error) as exc:
        raise QrCodeError(f"Gzip decode error: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise QrCodeError(f"Decompressed data is not valid UTF-8: {exc}") from exc


def _too_large(size: int, capacity: int) -> QrCodeError:
    return QrCodeError(
        f"Data too large for QR code: {size} bytes (max: {capacity} bytes). "
        "Consider reducing chunk size."
    )


class QrPayloadCodec:
    """Turns text into QR payload strings and back, honouring capacity limits."""

    def __init__(self, config: QrConfig | None = None) -> None:
        self.config = config if config is not None else QrConfig()

    def encode_payload(self, data: str) -> str:
        """Return the string to store in a QR code for ``data``.

        Raises QrCodeError when the payload exceeds the capacity of the
        configured error-correction level, and ConfigError when that level
        is not valid.
        """
        capacity = self.max_capacity()
        size = len(data.encode("utf-8"))

        if size > COMPRESSION_THRESHOLD:
            payload = COMPRESSION_PREFIX + compress_data(data)
            if len(payload) > capacity:
                raise _too_large(len(payload), capacity)
        else:
            if size > capacity:
                raise _too_large(size, capacity)
            payload = data

        self.error_correction_level()
        return payload

    def decode_payload(self, payload: str) -> str:
        """Recover the original text from a QR payload string."""
        if payload.startswith(COMPRESSION_PREFIX):
            return decompress_data(payload[len(COMPRESSION_PREFIX):])
        return payload

    def error_correction_level(self) -> str:
        """Return the configured level, raising ConfigError if it is unknown."""
        level = self.config.error_correction
        if level not in _ERROR_CORRECTION_LEVELS:
            raise ConfigError(f"Invalid error correction level: {level}")
        return level

    def max_capacity(self) -> int:
        """Maximum payload size in bytes for the configured level."""
        return _MAX_CAPACITY.get(self.config.error_correction, _DEFAULT_CAPACITY)

    def recommended_chunk_size(self) -> int:
        """Chunk size that leaves room for overhead: 70% of the capacity."""
        return int(self.max_capacity() * 0.7)