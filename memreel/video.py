"""Frame-sequence "video" storage for QR code images.

A video is stored as a JSON metadata file plus a directory of PNG frames
named ``frame_NNNNNN.png``.
"""

from __future__ import annotations

import json
import logging
import os
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Mapping, Sequence

from PIL import Image

from .utils import MemvidError

logger = logging.getLogger(__name__)


class CodecError(MemvidError):
    """Raised for unknown or unconfigured codecs."""


class VideoError(MemvidError):
    """Raised when frames cannot be written or read."""


class Codec(Enum):
    """Supported video codecs."""

    MP4V = "mp4v"
    H264 = "h264"
    H265 = "h265"
    AV1 = "av1"
    VP9 = "vp9"

    @classmethod
    def from_name(cls, name: str) -> "Codec":
        """Parse a codec name, accepting ``avc`` and ``hevc`` as aliases."""
        key = name.lower()
        aliases = {"avc": cls.H264, "hevc": cls.H265}
        if key in aliases:
            return aliases[key]
        try:
            return cls(key)
        except ValueError:
            raise CodecError(f"Unsupported codec: {name}") from None

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class CodecSettings:
    """Frame rate and frame dimensions used when encoding with a codec."""

    fps: float = 30.0
    width: int = 512
    height: int = 512


def _default_settings() -> dict[Codec, CodecSettings]:
    return {codec: CodecSettings() for codec in Codec}


@dataclass(frozen=True)
class VideoStats:
    """Statistics about an encoding run."""

    frame_count: int
    duration_seconds: float
    file_size_bytes: int
    encoding_time_seconds: float
    codec: str
    fps: float
    width: int
    height: int


@dataclass(frozen=True)
class VideoInfo:
    """Information read back from a stored video."""

    width: int
    height: int
    fps: float
    duration_seconds: float
    total_frames: int
    codec: str
    pixel_format: str


@dataclass(frozen=True)
class _VideoMetadata:
    frame_count: int
    fps: float
    width: int
    height: int
    codec: str
    frames_dir: str

    def to_json(self) -> str:
        return json.dumps(
            {
                "frame_count": self.frame_count,
                "fps": float(self.fps),
                "width": self.width,
                "height": self.height,
                "codec": self.codec,
                "frames_dir": self.frames_dir,
            },
            indent=2,
        )

    @classmethod
    def read(cls, video_path: str | os.PathLike[str]) -> "_VideoMetadata":
        text = Path(video_path).read_text(encoding="utf-8")
        try:
            raw = json.loads(text)
            return cls(
                frame_count=int(raw["frame_count"]),
                fps=float(raw["fps"]),
                width=int(raw["width"]),
                height=int(raw["height"]),
                codec=str(raw["codec"]),
                frames_dir=str(raw["frames_dir"]),
            )
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as exc:
            raise VideoError(f"Invalid video metadata in {video_path}: {exc}") from exc


def _frame_path(frames_dir: str, index: int) -> str:
    return f"{frames_dir}/frame_{index:06d}.png"


class VideoEncoder:
    """Writes QR code images as a frame-sequence video."""

    def __init__(self, codec_settings: Mapping[Codec, CodecSettings] | None = None) -> None:
        self.codec_settings = dict(_default_settings() if codec_settings is None else codec_settings)

    def _settings_for(self, codec: Codec) -> CodecSettings:
        try:
            return self.codec_settings[codec]
        except KeyError:
            raise CodecError(f"No configuration for codec: {codec.value}") from None

    def encode_qr_video(
        self,
        qr_images: Sequence[Image.Image],
        output_path: str | os.PathLike[str],
        codec: Codec | str,
    ) -> VideoStats:
        """Save the images as frames and write the metadata file at ``output_path``."""
        if isinstance(codec, str):
            codec = Codec.from_name(codec)
        logger.info("Encoding %d frames to %s using %s", len(qr_images), output_path, codec.value)

        settings = self._settings_for(codec)
        started = time.perf_counter()

        output = Path(output_path)
        output.parent.mkdir(parents=True, exist_ok=True)

        frames_dir = f"{output.with_suffix('')}_frames"
        Path(frames_dir).mkdir(parents=True, exist_ok=True)

        self._save_frames(qr_images, frames_dir)

        metadata = _VideoMetadata(
            frame_count=len(qr_images),
            fps=settings.fps,
            width=settings.width,
            height=settings.height,
            codec=codec.value,
            frames_dir=frames_dir,
        )
        output.write_text(metadata.to_json(), encoding="utf-8")

        return VideoStats(
            frame_count=len(qr_images),
            duration_seconds=len(qr_images) / settings.fps,
            file_size_bytes=output.stat().st_size,
            encoding_time_seconds=time.perf_counter() - started,
            codec=codec.value,
            fps=settings.fps,
            width=settings.width,
            height=settings.height,
        )

    def _save_frames(self, qr_images: Sequence[Image.Image], frames_dir: str) -> None:
        total = len(qr_images)
        if total == 0:
            logger.info("Successfully saved all 0 frames")
            return
        batch_size = min(100, max(10, total // 20))
        logger.info("Saving %d frames in batches of %d", total, batch_size)

        completed = 0
        lock = threading.Lock()

        def save_batch(start: int) -> None:
            nonlocal completed
            for offset, image in enumerate(qr_images[start:start + batch_size]):
                index = start + offset
                try:
                    image.save(_frame_path(frames_dir, index), format="PNG")
                except (OSError, ValueError) as exc:
                    raise VideoError(f"Failed to save frame {index}: {exc}") from exc
                with lock:
                    completed += 1
                    done = completed
                if done % 100 == 0 or done == total:
                    logger.info("Saved %d/%d frames (%.1f%%)", done, total, done / total * 100.0)

        with ThreadPoolExecutor() as pool:
            for future in [pool.submit(save_batch, s) for s in range(0, total, batch_size)]:
                future.result()

        logger.info("Successfully saved all %d frames", total)


class VideoDecoder:
    """Reads frames and information back from a frame-sequence video."""

    def extract_frame(self, video_path: str | os.PathLike[str], frame_number: int) -> Image.Image:
        """Load the image stored for ``frame_number``."""
        metadata = _VideoMetadata.read(video_path)
        if frame_number < 0 or frame_number >= metadata.frame_count:
            raise VideoError(
                f"Frame {frame_number} not found (total frames: {metadata.frame_count})"
            )
        path = _frame_path(metadata.frames_dir, frame_number)
        try:
            with Image.open(path) as image:
                image.load()
                return image.copy()
        except OSError as exc:
            raise VideoError(f"Failed to load frame {frame_number}: {exc}") from exc

    def get_video_info(self, video_path: str | os.PathLike[str]) -> VideoInfo:
        """Return dimensions, frame rate, duration and codec of a stored video."""
        metadata = _VideoMetadata.read(video_path)
        return VideoInfo(
            width=metadata.width,
            height=metadata.height,
            fps=metadata.fps,
            duration_seconds=metadata.frame_count / metadata.fps,
            total_frames=metadata.frame_count,
            codec=metadata.codec,
            pixel_format="rgb24",
        )