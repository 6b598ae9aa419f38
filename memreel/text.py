"""Text chunking, plain-text file loading and chunk statistics."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Iterable, Iterator, Sequence

from .utils import UnsupportedFormatError

logger = logging.getLogger(__name__)

_SENTENCE_ENDINGS = frozenset(".!?")
_TEXT_EXTENSIONS = frozenset({"txt", "md", "rst"})


@dataclass(frozen=True)
class TextConfig:
    """Chunking parameters, measured in characters."""

    chunk_size: int = 1000
    overlap: int = 100
    min_chunk_size: int = 50

    def __post_init__(self) -> None:
        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if self.overlap < 0 or self.min_chunk_size < 0:
            raise ValueError("overlap and min_chunk_size must not be negative")


@dataclass
class ChunkMetadata:
    """Where a chunk came from and where it is stored."""

    id: int
    source: str | None = None
    page: int | None = None
    char_offset: int = 0
    length: int = 0
    frame: int = 0
    extra: dict[str, str] = field(default_factory=dict)


@dataclass
class TextChunk:
    """A piece of text together with its metadata."""

    content: str
    metadata: ChunkMetadata


@dataclass(frozen=True)
class ChunkStats:
    """Summary statistics over a list of chunks."""

    total_chunks: int = 0
    total_characters: int = 0
    avg_chunk_length: float = 0.0
    median_chunk_length: int = 0
    min_chunk_length: int = 0
    max_chunk_length: int = 0
    sources: int = 0


def _words(text: str) -> set[str]:
    return set(text.split())


class TextProcessor:
    """Splits text into overlapping chunks and loads text from files."""

    def __init__(self, config: TextConfig | None = None) -> None:
        self.config = config if config is not None else TextConfig()

    def chunk_text(self, text: str, source: str | None = None) -> list[TextChunk]:
        """Split ``text`` into overlapping chunks, preferring sentence boundaries."""
        cfg = self.config
        chunks: list[TextChunk] = []
        length = len(text)
        start = 0

        while start < length:
            end = min(start + cfg.chunk_size, length)
            chunk_end = end

            if end < length:
                boundary = self.find_sentence_boundary(text[start:end])
                if boundary is not None and boundary >= cfg.min_chunk_size:
                    chunk_end = start + boundary

            content = text[start:chunk_end].strip()
            if content and len(content) >= cfg.min_chunk_size:
                chunk_id = len(chunks)
                chunks.append(
                    TextChunk(
                        content=content,
                        metadata=ChunkMetadata(
                            id=chunk_id,
                            source=source,
                            char_offset=start,
                            length=len(content),
                            frame=chunk_id,
                        ),
                    )
                )

            if chunk_end >= length:
                start = length
            else:
                start = max(max(chunk_end - cfg.overlap, 0), start + 1)

        return chunks

    def find_sentence_boundary(self, text: str) -> int | None:
        """Return the position just after the last sentence end, else a word boundary."""
        for i in range(len(text) - 1, -1, -1):
            if text[i] not in _SENTENCE_ENDINGS:
                continue
            if i + 1 < len(text):
                following = text[i + 1:i + 4]
                if following.startswith((" ", "\n")):
                    return i + 1
            else:
                return i + 1
        return self.find_word_boundary(text)

    def find_word_boundary(self, text: str) -> int | None:
        """Return the index of the last whitespace character, or None."""
        for i in range(len(text) - 1, -1, -1):
            if text[i].isspace():
                return i
        return None

    def process_pdf(self, pdf_path: str | os.PathLike[str]) -> list[TextChunk]:
        """PDF input is not supported; raises after checking the file exists."""
        if not Path(pdf_path).exists():
            raise FileNotFoundError(f"File not found: {pdf_path}")
        raise UnsupportedFormatError("PDF processing is not supported. Use text files instead.")

    def process_epub(self, epub_path: str | os.PathLike[str]) -> list[TextChunk]:
        """EPUB input is not supported; raises after checking the file exists."""
        if not Path(epub_path).exists():
            raise FileNotFoundError(f"File not found: {epub_path}")
        raise UnsupportedFormatError("EPUB processing is not supported. Use text files instead.")

    def process_text_file(self, file_path: str | os.PathLike[str]) -> list[TextChunk]:
        """Read a UTF-8 text file and chunk it, using its file name as the source."""
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")
        text = path.read_text(encoding="utf-8")
        return self.chunk_text(text, path.name)

    def process_directory(self, dir_path: str | os.PathLike[str]) -> list[TextChunk]:
        """Chunk every supported file below ``dir_path`` and number chunks sequentially."""
        all_chunks: list[TextChunk] = []
        for path in self._walk_files(Path(dir_path)):
            ext = path.suffix[1:].lower() if path.suffix else ""
            if ext == "pdf":
                all_chunks.extend(self.process_pdf(path))
            elif ext == "epub":
                all_chunks.extend(self.process_epub(path))
            elif ext in _TEXT_EXTENSIONS:
                all_chunks.extend(self.process_text_file(path))

        for index, chunk in enumerate(all_chunks):
            chunk.metadata.id = index
            chunk.metadata.frame = index
        return all_chunks

    def _walk_files(self, root: Path) -> Iterator[Path]:
        try:
            entries = sorted(root.iterdir())
        except OSError:
            return
        for entry in entries:
            if entry.is_symlink():
                continue
            if entry.is_dir():
                yield from self._walk_files(entry)
            elif entry.is_file():
                yield entry

    def deduplicate_chunks(self, chunks: Sequence[TextChunk]) -> list[TextChunk]:
        """Merge each chunk with its successor when their word overlap exceeds 0.8."""
        items = list(chunks)
        if len(items) <= 1:
            return items

        result: list[TextChunk] = []
        i = 0
        while i < len(items):
            current = items[i]
            if i + 1 < len(items):
                following = items[i + 1]
                if self.overlap_ratio(current.content, following.content) > 0.8:
                    merged = (
                        current.content
                        if len(current.content) >= len(following.content)
                        else following.content
                    )
                    metadata = replace(current.metadata, extra=dict(current.metadata.extra))
                    metadata.length = len(merged)
                    result.append(TextChunk(content=merged, metadata=metadata))
                    i += 2
                    continue
            result.append(current)
            i += 1
        return result

    def overlap_ratio(self, text1: str, text2: str) -> float:
        """Jaccard similarity of the whitespace-separated word sets."""
        words1, words2 = _words(text1), _words(text2)
        union = words1 | words2
        if not union:
            return 0.0
        return len(words1 & words2) / len(union)

    def get_chunk_stats(self, chunks: Iterable[TextChunk]) -> ChunkStats:
        """Compute count, length statistics and number of distinct sources."""
        items = list(chunks)
        if not items:
            return ChunkStats()

        lengths = sorted(len(c.content) for c in items)
        total = sum(lengths)
        n = len(lengths)
        mid = n // 2
        median = (lengths[mid - 1] + lengths[mid]) // 2 if n % 2 == 0 else lengths[mid]

        return ChunkStats(
            total_chunks=n,
            total_characters=total,
            avg_chunk_length=total / n,
            median_chunk_length=median,
            min_chunk_length=lengths[0],
            max_chunk_length=lengths[-1],
            sources=len({c.metadata.source for c in items if c.metadata.source is not None}),
        )