import pytest

from memreel.relationships import (
    ConceptNode,
    CooccurrenceAnalyzer,
    HierarchicalAnalyzer,
    RelationshipType,
    SemanticSimilarityAnalyzer,
    TemporalRelationshipAnalyzer,
    jaccard_similarity,
)
from memreel.text import ChunkMetadata, TextChunk


def make_chunks(*texts):
    return [TextChunk(content=t, metadata=ChunkMetadata(id=i)) for i, t in enumerate(texts)]


def test_jaccard_identical_and_disjoint():
    assert jaccard_similarity("a b c", "c b a") == 1.0
    assert jaccard_similarity("a b", "c d") == 0.0
    assert jaccard_similarity("", "") == 0.0


def test_jaccard_partial_and_symmetric():
    first, second = "the quick brown fox", "brown fox jumps over"
    value = jaccard_similarity(first, second)
    assert 0.0 < value < 1.0
    assert value == jaccard_similarity(second, first)


def test_cooccurrence_explicit_is_a_pattern():
    concepts = [ConceptNode("c1", "Rust"), ConceptNode("c2", "language")]
    candidates = CooccurrenceAnalyzer().analyze_relationships(
        concepts, make_chunks("Rust is a language")
    )
    assert len(candidates) == 1
    cand = candidates[0]
    assert cand.source_concept == "c1"
    assert cand.target_concept == "c2"
    assert cand.relationship_type is RelationshipType.IS_A
    assert cand.confidence == pytest.approx(0.9)
    assert cand.evidence == "rust is a language"
    assert cand.chunk_ids == ["0"]


def test_cooccurrence_counts_across_chunks():
    concepts = [ConceptNode("b", "beta"), ConceptNode("a", "alpha")]
    chunks = make_chunks("alpha beta gamma", "Alpha, beta.")
    candidates = CooccurrenceAnalyzer().analyze_relationships(concepts, chunks)
    assert len(candidates) == 1
    cand = candidates[0]
    assert (cand.source_concept, cand.target_concept) == ("a", "b")
    assert cand.relationship_type is RelationshipType.RELATED_TO
    assert cand.confidence == pytest.approx(0.7)
    assert cand.evidence == "Co-occurred 2 times"
    assert cand.chunk_ids == ["0", "1"]


def test_cooccurrence_below_minimum_is_dropped():
    concepts = [ConceptNode("a", "alpha"), ConceptNode("b", "beta")]
    candidates = CooccurrenceAnalyzer().analyze_relationships(
        concepts, make_chunks("alpha beta gamma", "nothing here")
    )
    assert candidates == []


def test_cooccurrence_outside_window_is_ignored():
    text = "alpha " + "x " * 60 + "beta"
    concepts = [ConceptNode("a", "alpha"), ConceptNode("b", "beta")]
    candidates = CooccurrenceAnalyzer().analyze_relationships(concepts, make_chunks(text, text))
    assert candidates == []


def test_cooccurrence_multi_word_concept():
    concepts = [ConceptNode("ml", "machine learning"), ConceptNode("d", "data")]
    chunks = make_chunks("machine learning uses data", "Machine learning needs data")
    candidates = CooccurrenceAnalyzer().analyze_relationships(concepts, chunks)
    related = [c for c in candidates if c.relationship_type is RelationshipType.RELATED_TO]
    assert len(related) == 1
    assert {related[0].source_concept, related[0].target_concept} == {"ml", "d"}


def test_semantic_similarity_above_threshold():
    concepts = [
        ConceptNode("1", "deep neural network model"),
        ConceptNode("2", "deep neural network"),
        ConceptNode("3", "banana"),
    ]
    candidates = SemanticSimilarityAnalyzer().analyze_relationships(concepts, [])
    assert len(candidates) == 1
    cand = candidates[0]
    assert (cand.source_concept, cand.target_concept) == ("1", "2")
    assert cand.confidence == jaccard_similarity(concepts[0].name, concepts[1].name)
    assert cand.evidence.startswith("Semantic similarity: ")
    assert cand.chunk_ids == []


def test_semantic_similarity_limits_per_concept():
    concepts = [ConceptNode(str(i), "same name") for i in range(12)]
    candidates = SemanticSimilarityAnalyzer().analyze_relationships(concepts, [])
    from_first = [c for c in candidates if c.source_concept == "0"]
    assert len(from_first) == 10
    assert all(c.confidence == 1.0 for c in candidates)


def test_temporal_links_consecutive_mentioned_concepts():
    concepts = [ConceptNode("a", "alpha"), ConceptNode("b", "beta"), ConceptNode("g", "gamma")]
    candidates = TemporalRelationshipAnalyzer().analyze_relationships(
        concepts, make_chunks("Alpha met beta")
    )
    assert len(candidates) == 1
    cand = candidates[0]
    assert (cand.source_concept, cand.target_concept) == ("a", "b")
    assert cand.relationship_type is RelationshipType.TEMPORAL
    assert cand.confidence == pytest.approx(0.6)
    assert cand.evidence == "Both concepts mentioned in 2024-01"


def test_temporal_without_chunks_is_empty():
    concepts = [ConceptNode("a", "alpha"), ConceptNode("b", "beta")]
    assert TemporalRelationshipAnalyzer().analyze_relationships(concepts, []) == []


@pytest.mark.parametrize(
    "text, expected_type",
    [
        ("A dog is a kind of animal", RelationshipType.IS_A),
        ("The dog inherits from animal", RelationshipType.IS_A),
        ("Dog belongs to animal", RelationshipType.PART_OF),
    ],
)
def test_hierarchical_patterns(text, expected_type):
    concepts = [ConceptNode("d", "dog"), ConceptNode("an", "animal")]
    candidates = HierarchicalAnalyzer().analyze_relationships(concepts, make_chunks(text))
    assert len(candidates) == 1
    cand = candidates[0]
    assert (cand.source_concept, cand.target_concept) == ("d", "an")
    assert cand.relationship_type is expected_type
    assert cand.confidence == pytest.approx(0.85)
    assert cand.chunk_ids == ["0"]


def test_hierarchical_ignores_unknown_concepts():
    concepts = [ConceptNode("d", "dog")]
    candidates = HierarchicalAnalyzer().analyze_relationships(
        concepts, make_chunks("Dog is part of family")
    )
    assert candidates == []


def test_analyzer_names():
    assert CooccurrenceAnalyzer().name == "CooccurrenceAnalyzer"
    assert SemanticSimilarityAnalyzer().name == "SemanticSimilarityAnalyzer"
    assert TemporalRelationshipAnalyzer().name == "TemporalRelationshipAnalyzer"
    assert HierarchicalAnalyzer().name == "HierarchicalAnalyzer"