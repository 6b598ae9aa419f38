# memreel

memreel splits documents into overlapping text chunks. It turns each chunk
into a QR payload string, compressing the long ones. It stores image frames
as a "video": numbered PNG files next to a small JSON description. It can
also propose relationships between concepts that are mentioned in the
chunks.

## Installation

```
pip install memreel
```

For development, with the test dependencies:

```
pip install -e ".[test]"
pytest
```

## Modules

### `memreel.text`

- `TextConfig(chunk_size=1000, overlap=100, min_chunk_size=50)` sets the
  chunking parameters, measured in characters.
- `TextProcessor.chunk_text(text, source=None)` returns a list of
  `TextChunk` objects. Each holds `content` and a `ChunkMetadata` with `id`,
  `source`, `char_offset`, `length`, `frame` and `extra`. Where it can, a
  chunk ends just after the last sentence end (`.`, `!` or `?` followed by a
  space or newline). Failing that, it ends at the last whitespace. Chunks
  overlap by `overlap` characters. Chunks shorter than `min_chunk_size`
  after trimming are dropped.
- `process_text_file(path)` reads a UTF-8 file and chunks it, with the file
  name as the source.
- `process_directory(path)` walks a directory tree in sorted order and skips
  symbolic links. It chunks `.txt`, `.md` and `.rst` files, then numbers all
  chunks (`id` and `frame`) from 0.
- `process_pdf` and `process_epub` raise `UnsupportedFormatError` for a file
  that exists, and `FileNotFoundError` for one that does not.
- `deduplicate_chunks(chunks)` merges a chunk with the next one when their
  word-set overlap (`overlap_ratio`, a Jaccard similarity) is above 0.8. The
  merged chunk keeps the longer of the two texts.
- `get_chunk_stats(chunks)` returns a `ChunkStats` with the count, total,
  average, median, minimum and maximum lengths, and the number of distinct
  sources.

### `memreel.qr`

- `QrConfig(error_correction="M")` takes one of the levels `L`, `M`, `Q`
  or `H`.
- `QrPayloadCodec.encode_payload(text)` returns the string to put in a QR
  code. Text whose UTF-8 encoding is longer than 100 bytes is
  gzip-compressed, base64-encoded and prefixed with `GZ:`. If the payload is
  larger than the level's capacity, it raises `QrCodeError`. The
  capacities are 4296, 3391, 2420 and 1852 bytes for L, M, Q and H. An
  unknown level raises `ConfigError`.
- `decode_payload(payload)` reverses `encode_payload`.
- `error_correction_level()`, `max_capacity()` and `recommended_chunk_size()`
  report on the configured level. The recommended size is 70% of the
  capacity.
- `compress_data` and `decompress_data` do the gzip and base64 step on its
  own.

### `memreel.video`

- `Codec` lists `mp4v`, `h264`, `h265`, `av1` and `vp9`.
  `Codec.from_name` also accepts `avc` and `hevc`, and raises `CodecError`
  for any other name.
- `CodecSettings(fps=30.0, width=512, height=512)` holds the settings for
  one codec. You can pass `VideoEncoder` a mapping of codec to settings.
- `VideoEncoder.encode_qr_video(images, output_path, codec)` does three
  things:
  - it saves Pillow images as `frame_000000.png`, `frame_000001.png`, … in
    `<output_path without suffix>_frames`;
  - it writes the JSON description to `output_path`;
  - it returns `VideoStats`.
- `VideoDecoder.extract_frame(video_path, n)` returns frame `n` as a Pillow
  image. A frame number out of range raises `VideoError`.
  `get_video_info(video_path)` returns a `VideoInfo` summary.

### `memreel.relationships`

Each analyser has an `analyze_relationships(concepts, chunks)` method. It
takes `ConceptNode(id, name)` objects and `TextChunk`s and returns
`RelationshipCandidate`s. A candidate has a `RelationshipType`, a
confidence, evidence text and chunk ids.

- `CooccurrenceAnalyzer` matches phrase patterns such as "X is a Y",
  "X causes Y" and "X and Y". It also counts concepts that appear within 50
  words of each other, and reports pairs seen at least twice.
- `SemanticSimilarityAnalyzer` links concepts whose names have a Jaccard
  word similarity above 0.7. It keeps at most 10 links per concept.
- `TemporalRelationshipAnalyzer` links consecutive concepts that are both
  mentioned in the chunks. All chunks currently fall into one time period.
- `HierarchicalAnalyzer` finds IS_A and PART_OF links from phrases such as
  "X is a kind of Y", "X extends Y", "X belongs to Y" and "X contains Y".
- `jaccard_similarity(text1, text2)` is the word-set similarity used above.

### `memreel.utils`

- Formatting: `format_file_size`, `format_duration` and
  `calculate_compression_ratio`.
- Paths: `get_file_extension`, `has_extension`, `ensure_directory_exists`
  and `generate_unique_filename`.
- Checks: `validate_video_path` and `validate_index_path` check that a file
  exists and has a known extension. `validate_paths` and
  `validate_env_vars` check files and environment variables.
- `ProgressReporter` tracks progress and logs about every 1%.
- `Timer` measures elapsed time.
- `BatchProcessor` hands items to a function in fixed-size batches. Its
  `process` method is a coroutine.

## Example

```python
from memreel.qr import QrPayloadCodec
from memreel.text import TextProcessor

processor = TextProcessor()
chunks = processor.chunk_text("First sentence. Second sentence. " * 40, source="notes.txt")

codec = QrPayloadCodec()
payloads = [codec.encode_payload(chunk.content) for chunk in chunks]
assert [codec.decode_payload(p) for p in payloads] == [c.content for c in chunks]

stats = processor.get_chunk_stats(chunks)
print(stats.total_chunks, stats.avg_chunk_length)
```

## Errors

All of the package's own errors derive from `memreel.utils.MemvidError`:

- `ConfigError`
- `UnsupportedFormatError`
- `QrCodeError`
- `CodecError`
- `VideoError`

A missing file raises the built-in `FileNotFoundError`.

## What memreel does not do

- It does not draw or scan QR codes. `QrPayloadCodec` works on payload
  strings only. You supply the images that `VideoEncoder` saves.
- It does not produce real video files. A "video" is a JSON description plus
  a directory of PNG frames.
- It does not read PDF or EPUB documents.
- It has no embedding model, no search index and no retrieval over stored
  memories.
- It has no command-line tool and no web server.