"""Build the layout-ready paper graph: one node per paper, one edge per
relationship, positioned by the layered layout."""

from .config import (
    CATEGORY_COLORS,
    DEFAULT_DIRECTION,
    LAYOUT_DIRECTIONS,
    NODE_HEIGHT,
    NODE_WIDTH,
)
from .layout import apply_layered_layout
from .relationships import display_edge, edge_width, type_info


def to_paper_nodes(papers):
    """One node per paper, at the origin, carrying the paper and its note state."""
    nodes = []
    for paper in papers:
        nodes.append({
            "id": paper["id"],
            "type": "paperNode",
            "size": {"width": NODE_WIDTH, "height": NODE_HEIGHT},
            "position": {"x": 0, "y": 0},
            "data": {
                "paper": paper,
                "familiarity_level": paper.get("familiarity_level"),
                "is_favorite": bool(paper.get("is_favorite", False)),
                "note_content": paper.get("note_content"),
                "color": CATEGORY_COLORS.get(paper.get("category"), CATEGORY_COLORS["other"]),
            },
        })
    return nodes


def to_relationship_edges(relationships):
    """One display edge per relationship, oriented old -> new."""
    edges = []
    for r in relationships:
        info = type_info(r["relationship_type"])
        source, target = display_edge(r)
        strength = r.get("strength") or 0
        edges.append({
            "id": r["id"],
            "source": source,
            "target": target,
            "type": r["relationship_type"],
            "strength": strength,
            "description": r.get("description"),
            "width": edge_width(strength),
            "label": info["label"],
            "color": info["color"],
            "dash": info["dash"],
        })
    return edges


def build_graph(papers, relationships, direction=DEFAULT_DIRECTION, **layout_options):
    """Build the positioned graph for a corpus.

    Args:
        papers: list of paper dicts
        relationships: list of relationship dicts
        direction: "TB" or "LR"
        **layout_options: node_spacing, rank_spacing, margin

    Returns a dict with "metadata", "nodes", and "edges" keys.
    """
    if direction not in LAYOUT_DIRECTIONS:
        raise ValueError(f"Unknown layout direction: {direction!r}")
    metadata = {
        "total_papers": len(papers),
        "total_relationships": len(relationships),
        "direction": direction,
    }
    if not papers:
        return {"metadata": metadata, "nodes": [], "edges": []}

    nodes = to_paper_nodes(papers)
    edges = to_relationship_edges(relationships)
    positioned = apply_layered_layout(nodes, edges, direction=direction, **layout_options)

    return {"metadata": metadata, "nodes": positioned, "edges": edges}
