import pytest

from memreel.text import ChunkMetadata, ChunkStats, TextChunk, TextConfig, TextProcessor
from memreel.utils import UnsupportedFormatError


def make_chunk(content, chunk_id=0, source=None):
    return TextChunk(
        content=content,
        metadata=ChunkMetadata(id=chunk_id, source=source, length=len(content), frame=chunk_id),
    )


def test_text_chunking():
    processor = TextProcessor()
    text = (
        "This is the first sentence with enough content to meet the minimum chunk size requirements. "
        "This is the second sentence that also has sufficient length to be processed correctly. "
        "This is the third sentence that continues the pattern of having adequate length for proper chunking. "
        "This is the fourth sentence that ensures we have enough content for multiple chunks. "
        "This is the fifth sentence that completes our test text with sufficient length."
    )
    chunks = processor.chunk_text(text, None)
    assert chunks
    for chunk in chunks:
        assert chunk.content
        assert len(chunk.content) >= processor.config.min_chunk_size


def test_sentence_boundary():
    processor = TextProcessor()
    assert processor.find_sentence_boundary("First sentence. Second sentence") == 15


def test_sentence_boundary_falls_back_to_word():
    processor = TextProcessor()
    assert processor.find_sentence_boundary("no sentence end here") == 11
    assert processor.find_word_boundary("nowhitespace") is None


def test_sentence_boundary_at_end_of_text():
    processor = TextProcessor()
    assert processor.find_sentence_boundary("Done!") == 5


def test_overlap_calculation():
    processor = TextProcessor()
    ratio = processor.overlap_ratio("the quick brown fox", "brown fox jumps over")
    assert 0.0 < ratio < 1.0
    assert ratio == pytest.approx(2 / 6)


def test_overlap_of_empty_texts_is_zero():
    assert TextProcessor().overlap_ratio("", "   ") == 0.0


def test_chunk_stats():
    processor = TextProcessor()
    chunks = [make_chunk("Short", 0), make_chunk("This is a longer chunk", 1)]
    stats = processor.get_chunk_stats(chunks)
    assert stats.total_chunks == 2
    assert stats.min_chunk_length == 5
    assert stats.max_chunk_length == 22
    assert stats.total_characters == 27
    assert stats.median_chunk_length == 13
    assert stats.avg_chunk_length == pytest.approx(13.5)
    assert stats.sources == 0


def test_chunk_stats_empty_and_sources():
    processor = TextProcessor()
    assert processor.get_chunk_stats([]) == ChunkStats()
    chunks = [make_chunk("abc", 0, "a.txt"), make_chunk("de", 1, "a.txt"), make_chunk("f", 2, "b.txt")]
    stats = processor.get_chunk_stats(chunks)
    assert stats.sources == 2
    assert stats.median_chunk_length == 2


def test_empty_text_gives_no_chunks():
    assert TextProcessor().chunk_text("") == []


def test_short_text_is_stripped_single_chunk():
    processor = TextProcessor(TextConfig(chunk_size=100, overlap=10, min_chunk_size=5))
    chunks = processor.chunk_text("  short text here  ", "doc.txt")
    assert [c.content for c in chunks] == ["short text here"]
    assert chunks[0].metadata.char_offset == 0
    assert chunks[0].metadata.source == "doc.txt"
    assert chunks[0].metadata.length == 15


def test_chunking_breaks_at_word_boundary():
    processor = TextProcessor(TextConfig(chunk_size=20, overlap=0, min_chunk_size=1))
    chunks = processor.chunk_text("aaaa bbbb cccc dddd eeee")
    assert [c.content for c in chunks] == ["aaaa bbbb cccc dddd", "eeee"]
    assert [c.metadata.char_offset for c in chunks] == [0, 19]
    assert [c.metadata.id for c in chunks] == [0, 1]
    assert [c.metadata.frame for c in chunks] == [0, 1]


def test_chunks_too_small_are_dropped():
    processor = TextProcessor(TextConfig(chunk_size=100, overlap=0, min_chunk_size=10))
    assert processor.chunk_text("tiny") == []


def test_deduplicate_merges_similar_neighbours():
    processor = TextProcessor()
    chunks = [
        make_chunk("a b c d e", 0),
        make_chunk("a b c d e f", 1),
        make_chunk("completely different words", 2),
    ]
    result = processor.deduplicate_chunks(chunks)
    assert [c.content for c in result] == ["a b c d e f", "completely different words"]
    assert result[0].metadata.id == 0
    assert result[0].metadata.length == len("a b c d e f")


def test_deduplicate_keeps_distinct_chunks():
    processor = TextProcessor()
    chunks = [make_chunk("one two", 0), make_chunk("three four", 1)]
    assert [c.content for c in processor.deduplicate_chunks(chunks)] == ["one two", "three four"]


def test_process_text_file(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("Some notes with enough words in them.", encoding="utf-8")
    processor = TextProcessor(TextConfig(chunk_size=100, overlap=0, min_chunk_size=5))
    chunks = processor.process_text_file(path)
    assert len(chunks) == 1
    assert chunks[0].metadata.source == "notes.txt"
    assert chunks[0].content == "Some notes with enough words in them."


def test_process_text_file_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        TextProcessor().process_text_file(tmp_path / "missing.txt")


def test_pdf_and_epub_unsupported(tmp_path):
    processor = TextProcessor()
    with pytest.raises(FileNotFoundError):
        processor.process_pdf(tmp_path / "missing.pdf")
    pdf = tmp_path / "doc.pdf"
    pdf.write_bytes(b"%PDF")
    with pytest.raises(UnsupportedFormatError):
        processor.process_pdf(pdf)
    epub = tmp_path / "book.epub"
    epub.write_bytes(b"PK")
    with pytest.raises(UnsupportedFormatError):
        processor.process_epub(epub)


def test_process_directory_numbers_chunks_sequentially(tmp_path):
    (tmp_path / "a.txt").write_text("alpha text content", encoding="utf-8")
    sub = tmp_path / "sub"
    sub.mkdir()
    (sub / "b.md").write_text("beta markdown content", encoding="utf-8")
    (tmp_path / "c.py").write_text("print('ignored')", encoding="utf-8")
    processor = TextProcessor(TextConfig(chunk_size=100, overlap=0, min_chunk_size=5))
    chunks = processor.process_directory(tmp_path)
    assert sorted(c.content for c in chunks) == ["alpha text content", "beta markdown content"]
    assert [c.metadata.id for c in chunks] == [0, 1]
    assert [c.metadata.frame for c in chunks] == [0, 1]


def test_process_directory_with_pdf_raises(tmp_path):
    (tmp_path / "doc.pdf").write_bytes(b"%PDF")
    with pytest.raises(UnsupportedFormatError):
        TextProcessor().process_directory(tmp_path)


def test_invalid_config():
    with pytest.raises(ValueError):
        TextConfig(chunk_size=0)