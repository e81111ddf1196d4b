"""Shared test fixtures for the paper map test suite."""

import json
from pathlib import Path

import pytest

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def corpus_path():
    return FIXTURES_DIR / "corpus.json"


@pytest.fixture
def raw_corpus(corpus_path):
    return json.loads(corpus_path.read_text())


@pytest.fixture
def sample_papers():
    """A small CSI feedback corpus with mixed familiarity."""
    return [
        {"id": "csinet", "title": "Deep Learning for Massive MIMO CSI Feedback",
         "authors": ["Chao-Kai Wen", "Wan-Ting Shih", "Shi Jin"], "year": 2018,
         "category": "csi_compression", "tags": ["csi", "autoencoder", "massive mimo"],
         "familiarity_level": "familiar", "importance_rating": 5, "is_favorite": True},
        {"id": "crnet", "title": "Multi-resolution CSI Feedback with Deep Learning",
         "authors": ["Zhilin Lu", "Jintao Wang", "Jian Song"], "year": 2020,
         "category": "csi_compression", "tags": ["csi", "multi-resolution"],
         "familiarity_level": "moderate", "importance_rating": 4},
        {"id": "transnet", "title": "TransNet: Full Attention Network for CSI Feedback",
         "authors": ["Yaodong Cui", "Aihuang Guo", "Chunlin Song"], "year": 2022,
         "category": "transformer", "tags": ["csi", "transformer"],
         "familiarity_level": "not_started", "importance_rating": 5},
        {"id": "attention", "title": "Attention Is All You Need",
         "authors": ["Ashish Vaswani"], "year": 2017,
         "category": "transformer", "tags": ["transformer", "attention"],
         "familiarity_level": "expert", "importance_rating": 5},
        {"id": "vqvae", "title": "Neural Discrete Representation Learning",
         "authors": ["Aaron van den Oord"], "year": 2017,
         "category": "autoencoder", "tags": ["vector quantization", "autoencoder"],
         "familiarity_level": "difficult", "importance_rating": 3},
        {"id": "csiquant", "title": "Quantized CSI Feedback for Massive MIMO",
         "authors": ["Tong Chen"], "year": 2020,
         "category": "quantization", "tags": ["csi", "quantization"]},
    ]


@pytest.fixture
def sample_relationships():
    """Stored (canonical) relationships between sample_papers, plus one dangling edge."""
    return [
        {"id": "r1", "from_paper_id": "crnet", "to_paper_id": "csinet",
         "relationship_type": "builds_on", "strength": 9},
        {"id": "r2", "from_paper_id": "transnet", "to_paper_id": "csinet",
         "relationship_type": "builds_on", "strength": 7},
        {"id": "r3", "from_paper_id": "transnet", "to_paper_id": "attention",
         "relationship_type": "inspired_by", "strength": 8,
         "description": "Applies full attention to CSI"},
        {"id": "r4", "from_paper_id": "csiquant", "to_paper_id": "csinet",
         "relationship_type": "extends", "strength": 6},
        {"id": "r5", "from_paper_id": "csiquant", "to_paper_id": "vqvae",
         "relationship_type": "inspired_by", "strength": 5},
        {"id": "r6", "from_paper_id": "crnet", "to_paper_id": "csiquant",
         "relationship_type": "compares_with", "strength": 4},
        {"id": "r7", "from_paper_id": "transnet", "to_paper_id": "ghost",
         "relationship_type": "related", "strength": 2},
    ]


@pytest.fixture
def triangle_papers():
    """A (2018), B (2020) builds on A, C (2020) related to A."""
    return [
        {"id": "A", "title": "Paper A", "authors": ["X"], "year": 2018,
         "category": "cnn", "tags": []},
        {"id": "B", "title": "Paper B", "authors": ["Y"], "year": 2020,
         "category": "transformer", "tags": []},
        {"id": "C", "title": "Paper C", "authors": ["Z"], "year": 2020,
         "category": "quantization", "tags": []},
    ]


@pytest.fixture
def triangle_relationships():
    return [
        {"id": "ab", "from_paper_id": "B", "to_paper_id": "A",
         "relationship_type": "builds_on", "strength": 9},
        {"id": "ca", "from_paper_id": "C", "to_paper_id": "A",
         "relationship_type": "related", "strength": 4},
    ]
