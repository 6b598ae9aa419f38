"""Relationship discovery between concepts for knowledge-graph building.

Each analyzer looks at a list of concepts and a list of text chunks and
proposes candidate relationships with a confidence score and evidence.
"""

from __future__ import annotations

import re
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from itertools import combinations
from typing import Iterator, Protocol, Sequence

from .text import TextChunk


class RelationshipType(Enum):
    """Kinds of relationship between two concepts."""

    IS_A = "is_a"
    PART_OF = "part_of"
    CAUSES = "causes"
    ENABLES = "enables"
    CONFLICTS = "conflicts"
    RELATED_TO = "related_to"
    TEMPORAL = "temporal"


@dataclass(frozen=True)
class ConceptNode:
    """A named concept identified by ``id``."""

    id: str
    name: str


@dataclass
class RelationshipCandidate:
    """A proposed relationship between two concepts."""

    source_concept: str
    target_concept: str
    relationship_type: RelationshipType
    confidence: float
    evidence: str
    chunk_ids: list[str] = field(default_factory=list)


class RelationshipAnalyzer(Protocol):
    """Anything that proposes relationships from concepts and chunks."""

    name: str

    def analyze_relationships(
        self, concepts: Sequence[ConceptNode], chunks: Sequence[TextChunk]
    ) -> list[RelationshipCandidate]:
        ...


def jaccard_similarity(text1: str, text2: str) -> float:
    """Jaccard similarity of the whitespace-separated word sets of two strings."""
    words1, words2 = set(text1.split()), set(text2.split())
    union = words1 | words2
    if not union:
        return 0.0
    return len(words1 & words2) / len(union)


def _concept_ids_by_name(concepts: Sequence[ConceptNode]) -> dict[str, str]:
    return {concept.name.lower(): concept.id for concept in concepts}


def _trim_non_alnum(word: str) -> str:
    start, end = 0, len(word)
    while start < end and not word[start].isalnum():
        start += 1
    while end > start and not word[end - 1].isalnum():
        end -= 1
    return word[start:end]


def _windows(items: Sequence[str], size: int) -> Iterator[Sequence[str]]:
    for start in range(len(items) - size + 1):
        yield items[start:start + size]


@dataclass
class _Cooccurrence:
    count: int = 0
    chunks: list[str] = field(default_factory=list)
    contexts: list[str] = field(default_factory=list)


_COOCCURRENCE_PATTERNS: tuple[tuple[str, RelationshipType, float], ...] = (
    (r"\b(\w+)\s+is\s+a\s+(\w+)\b", RelationshipType.IS_A, 0.9),
    (r"\b(\w+)\s+part\s+of\s+(\w+)\b", RelationshipType.PART_OF, 0.85),
    (r"\b(\w+)\s+causes?\s+(\w+)\b", RelationshipType.CAUSES, 0.8),
    (r"\b(\w+)\s+enables?\s+(\w+)\b", RelationshipType.ENABLES, 0.75),
    (r"\b(\w+)\s+conflicts?\s+with\s+(\w+)\b", RelationshipType.CONFLICTS, 0.8),
    (r"\b(\w+)\s+related\s+to\s+(\w+)\b", RelationshipType.RELATED_TO, 0.6),
    (r"\b(\w+)\s+and\s+(\w+)\b", RelationshipType.RELATED_TO, 0.5),
)


class CooccurrenceAnalyzer:
    """Finds relationships from explicit phrasing and from concepts appearing close together."""

    name = "CooccurrenceAnalyzer"

    def __init__(self, window_size: int = 50, min_cooccurrence: int = 2) -> None:
        self.window_size = window_size
        self.min_cooccurrence = min_cooccurrence
        self._patterns = [
            (re.compile(pattern), rel_type, confidence)
            for pattern, rel_type, confidence in _COOCCURRENCE_PATTERNS
        ]

    def _concept_positions(
        self, words: list[str], concepts: Sequence[ConceptNode], ids_by_name: dict[str, str]
    ) -> list[tuple[int, str]]:
        positions: list[tuple[int, str]] = []
        for pos, word in enumerate(words):
            concept_id = ids_by_name.get(_trim_non_alnum(word.lower()))
            if concept_id is not None:
                positions.append((pos, concept_id))

        for concept in concepts:
            size = len(concept.name.split())
            if size <= 1:
                continue
            target = concept.name.lower()
            for window in _windows(words, size):
                if " ".join(window).lower() == target:
                    positions.append((words.index(window[0]), concept.id))
        return positions

    def analyze_relationships(
        self, concepts: Sequence[ConceptNode], chunks: Sequence[TextChunk]
    ) -> list[RelationshipCandidate]:
        """Propose relationships from patterns and co-occurrences in the chunks."""
        candidates: list[RelationshipCandidate] = []
        cooccurrences: dict[tuple[str, str], _Cooccurrence] = defaultdict(_Cooccurrence)
        ids_by_name = _concept_ids_by_name(concepts)

        for chunk in chunks:
            chunk_id = str(chunk.metadata.id)
            words = chunk.content.split()
            positions = self._concept_positions(words, concepts, ids_by_name)

            for (pos1, id1), (pos2, id2) in combinations(positions, 2):
                if abs(pos1 - pos2) > self.window_size:
                    continue
                key = (id1, id2) if id1 < id2 else (id2, id1)
                entry = cooccurrences[key]
                entry.count += 1
                entry.chunks.append(chunk_id)
                context_start = max(min(pos1, pos2) - 10, 0)
                context_end = min(max(pos1, pos2) + 10, len(words))
                entry.contexts.append(" ".join(words[context_start:context_end]))

            lowered = chunk.content.lower()
            for pattern, rel_type, confidence in self._patterns:
                for match in pattern.finditer(lowered):
                    id1 = ids_by_name.get(match.group(1))
                    id2 = ids_by_name.get(match.group(2))
                    if id1 is not None and id2 is not None:
                        candidates.append(
                            RelationshipCandidate(
                                source_concept=id1,
                                target_concept=id2,
                                relationship_type=rel_type,
                                confidence=confidence,
                                evidence=match.group(0),
                                chunk_ids=[chunk_id],
                            )
                        )

        for (id1, id2), data in cooccurrences.items():
            if data.count < self.min_cooccurrence:
                continue
            confidence = min(data.count / len(chunks), 1.0)
            candidates.append(
                RelationshipCandidate(
                    source_concept=id1,
                    target_concept=id2,
                    relationship_type=RelationshipType.RELATED_TO,
                    confidence=confidence * 0.7,
                    evidence=f"Co-occurred {data.count} times",
                    chunk_ids=data.chunks,
                )
            )

        return candidates


class SemanticSimilarityAnalyzer:
    """Relates concepts whose names share most of their words."""

    name = "SemanticSimilarityAnalyzer"

    def __init__(
        self, similarity_threshold: float = 0.7, max_relationships_per_concept: int = 10
    ) -> None:
        self.similarity_threshold = similarity_threshold
        self.max_relationships_per_concept = max_relationships_per_concept

    def analyze_relationships(
        self, concepts: Sequence[ConceptNode], chunks: Sequence[TextChunk] = ()
    ) -> list[RelationshipCandidate]:
        """Propose RELATED_TO links between concepts with similar names."""
        candidates: list[RelationshipCandidate] = []
        for i, concept in enumerate(concepts):
            similar = [
                (other, score)
                for other in concepts[i + 1:]
                if (score := jaccard_similarity(concept.name, other.name))
                > self.similarity_threshold
            ]
            similar.sort(key=lambda pair: pair[1], reverse=True)
            for other, score in similar[: self.max_relationships_per_concept]:
                candidates.append(
                    RelationshipCandidate(
                        source_concept=concept.id,
                        target_concept=other.id,
                        relationship_type=RelationshipType.RELATED_TO,
                        confidence=score,
                        evidence=f"Semantic similarity: {score:.2f}",
                    )
                )
        return candidates


class TemporalRelationshipAnalyzer:
    """Relates neighbouring concepts that are mentioned in the same time period."""

    name = "TemporalRelationshipAnalyzer"

    def __init__(self, time_window_days: int = 30) -> None:
        self.time_window_days = time_window_days

    @staticmethod
    def _period_of(chunk: TextChunk) -> str:
        return "2024-01"

    def analyze_relationships(
        self, concepts: Sequence[ConceptNode], chunks: Sequence[TextChunk]
    ) -> list[RelationshipCandidate]:
        """Propose TEMPORAL links between consecutive concepts sharing a period."""
        periods: dict[str, list[str]] = defaultdict(list)
        for chunk in chunks:
            periods[self._period_of(chunk)].append(chunk.content.lower())

        candidates: list[RelationshipCandidate] = []
        for first, second in zip(concepts, concepts[1:]):
            name1, name2 = first.name.lower(), second.name.lower()
            evidence = [
                f"Both concepts mentioned in {period}"
                for period, texts in periods.items()
                if any(name1 in text for text in texts) and any(name2 in text for text in texts)
            ]
            if evidence:
                candidates.append(
                    RelationshipCandidate(
                        source_concept=first.id,
                        target_concept=second.id,
                        relationship_type=RelationshipType.TEMPORAL,
                        confidence=0.6,
                        evidence="; ".join(evidence),
                    )
                )
        return candidates


_HIERARCHY_PATTERNS: tuple[tuple[str, RelationshipType], ...] = (
    (r"\b(\w+)\s+is\s+a\s+(type|kind|form|example)\s+of\s+(\w+)\b", RelationshipType.IS_A),
    (r"\b(\w+)\s+inherits?\s+from\s+(\w+)\b", RelationshipType.IS_A),
    (r"\b(\w+)\s+extends?\s+(\w+)\b", RelationshipType.IS_A),
    (r"\b(\w+)\s+is\s+part\s+of\s+(\w+)\b", RelationshipType.PART_OF),
    (r"\b(\w+)\s+belongs\s+to\s+(\w+)\b", RelationshipType.PART_OF),
    (r"\b(\w+)\s+contains?\s+(\w+)\b", RelationshipType.PART_OF),
    (r"\b(\w+)\s+includes?\s+(\w+)\b", RelationshipType.PART_OF),
)


class HierarchicalAnalyzer:
    """Detects is-a and part-of relationships from characteristic phrasing."""

    name = "HierarchicalAnalyzer"

    def __init__(self) -> None:
        self._patterns = [(re.compile(p), rel_type) for p, rel_type in _HIERARCHY_PATTERNS]

    def analyze_relationships(
        self, concepts: Sequence[ConceptNode], chunks: Sequence[TextChunk]
    ) -> list[RelationshipCandidate]:
        """Propose IS_A and PART_OF links found in the chunk texts."""
        ids_by_name = _concept_ids_by_name(concepts)
        candidates: list[RelationshipCandidate] = []
        for chunk in chunks:
            text = chunk.content.lower()
            for pattern, rel_type in self._patterns:
                for match in pattern.finditer(text):
                    id1 = ids_by_name.get(match.group(1))
                    id2 = ids_by_name.get(match.group(pattern.groups))
                    if id1 is not None and id2 is not None:
                        candidates.append(
                            RelationshipCandidate(
                                source_concept=id1,
                                target_concept=id2,
                                relationship_type=rel_type,
                                confidence=0.85,
                                evidence=match.group(0),
                                chunk_ids=[str(chunk.metadata.id)],
                            )
                        )
        return candidates