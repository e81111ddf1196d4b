"""papermap — Relationship graph and recommendations for a personal paper corpus."""

from .adjacency import build_adjacency, build_strength_map, get_strength, pair_key
from .bridges import build_bridge_recommendations, score_candidate
from .config import BRIDGE_WEIGHTS, RELATIONSHIP_TYPES, RelationshipType
from .connections import (
    build_paper_connections,
    connection_preview,
    strongest_relationship_label,
)
from .filtering import filter_papers
from .graph import build_graph, to_paper_nodes, to_relationship_edges
from .ingest import CorpusError, load_corpus, merge_relationships, parse_corpus
from .insights import paper_core_snapshot, summarize_corpus
from .layout import apply_layered_layout
from .relationships import (
    canonicalize_relationship,
    display_edge,
    edge_width,
    summarize_relationship,
)
from .review import build_review_queue
from .sync import MapSelectionSync
from .visualize import generate_html

__all__ = [
    "BRIDGE_WEIGHTS",
    "RELATIONSHIP_TYPES",
    "RelationshipType",
    "build_adjacency",
    "build_strength_map",
    "get_strength",
    "pair_key",
    "build_bridge_recommendations",
    "score_candidate",
    "build_paper_connections",
    "connection_preview",
    "strongest_relationship_label",
    "filter_papers",
    "build_graph",
    "to_paper_nodes",
    "to_relationship_edges",
    "CorpusError",
    "load_corpus",
    "merge_relationships",
    "parse_corpus",
    "paper_core_snapshot",
    "summarize_corpus",
    "apply_layered_layout",
    "canonicalize_relationship",
    "display_edge",
    "edge_width",
    "summarize_relationship",
    "build_review_queue",
    "MapSelectionSync",
    "generate_html",
]
