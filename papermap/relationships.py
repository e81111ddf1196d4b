"""Relationship vocabulary helpers: direction rules, edge weight, labels."""

from .config import (
    EDGE_WIDTH_DIVISOR,
    EDGE_WIDTH_MAX,
    EDGE_WIDTH_MIN,
    INPUT_ONLY_TYPES,
    RELATIONSHIP_TYPES,
    RelationshipType,
)

OUTGOING = "outgoing"
INCOMING = "incoming"

_OUTGOING_SUMMARIES = {
    RelationshipType.EXTENDS: "extends",
    RelationshipType.BUILDS_ON: "builds on",
    RelationshipType.INSPIRES: "inspires",
}

_INCOMING_SUMMARIES = {
    RelationshipType.INSPIRED_BY: "inspired by",
    RelationshipType.EXTENDS: "extended by",
    RelationshipType.BUILDS_ON: "built on by",
}


def relationship_type(relationship):
    """Return the RelationshipType of a relationship record.

    Raises ValueError for a type outside the vocabulary.
    """
    return RelationshipType(relationship["relationship_type"])


def type_info(rel_type):
    """Look up label/color/dash/direction info for a relationship type."""
    return RELATIONSHIP_TYPES[RelationshipType(rel_type)]


def display_edge(relationship):
    """Map a relationship to the (source, target) pair drawn in the graph.

    Most records are authored "newer work -> cited work"; the layered
    layout reads old -> new, so those are flipped. Types flagged
    authored_old_to_new keep the authored direction.
    """
    info = type_info(relationship["relationship_type"])
    if info["authored_old_to_new"]:
        return relationship["from_paper_id"], relationship["to_paper_id"]
    return relationship["to_paper_id"], relationship["from_paper_id"]


def canonicalize_relationship(relationship):
    """Return the storage form of a relationship.

    Input-only types ("inspires") are rewritten to their inverse with the
    endpoints swapped. The input dict is never modified.
    """
    rel_type = relationship_type(relationship)
    stored_type = INPUT_ONLY_TYPES.get(rel_type)
    if stored_type is None:
        return dict(relationship)
    return {
        **relationship,
        "from_paper_id": relationship["to_paper_id"],
        "to_paper_id": relationship["from_paper_id"],
        "relationship_type": stored_type.value,
    }


def relationship_key(relationship):
    """Uniqueness key of a stored relationship."""
    return (
        relationship["from_paper_id"],
        relationship["to_paper_id"],
        RelationshipType(relationship["relationship_type"]).value,
    )


def edge_width(strength):
    """Stroke width hint for an edge of the given strength."""
    return max(EDGE_WIDTH_MIN, min(EDGE_WIDTH_MAX, (strength or 0) / EDGE_WIDTH_DIVISOR))


def summarize_relationship(rel_type, direction):
    """Short label for a relationship seen from one of its endpoints."""
    rel_type = RelationshipType(rel_type)
    if direction == OUTGOING:
        return _OUTGOING_SUMMARIES.get(rel_type, "connected")
    return _INCOMING_SUMMARIES.get(rel_type, "connected from")


def relationship_type_counts(relationships):
    """Count relationships per type. Every type is present in the result."""
    counts = {t.value: 0 for t in RelationshipType}
    for r in relationships:
        counts[RelationshipType(r["relationship_type"]).value] += 1
    return counts
