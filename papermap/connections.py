"""Per-paper connection lists."""

from .config import DEFAULT_PREVIEW_LIMIT
from .relationships import INCOMING, OUTGOING


def build_paper_connections(paper_id, papers, relationships):
    """List every relationship touching paper_id, with the paper on the other end.

    Each entry is {"relationship", "other_paper", "direction"}, where
    direction is "outgoing" when paper_id is the from-endpoint. Entries whose
    other endpoint is not a known paper are dropped. Sorted by strength,
    then the other paper's year, both descending.
    """
    paper_map = {p["id"]: p for p in papers}

    connections = []
    for r in relationships:
        if r["from_paper_id"] == paper_id:
            direction = OUTGOING
            other_id = r["to_paper_id"]
        elif r["to_paper_id"] == paper_id:
            direction = INCOMING
            other_id = r["from_paper_id"]
        else:
            continue

        other = paper_map.get(other_id)
        if other is None:
            continue
        connections.append({
            "relationship": r,
            "other_paper": other,
            "direction": direction,
        })

    connections.sort(key=lambda c: (
        -(c["relationship"].get("strength") or 0),
        -(c["other_paper"].get("year") or 0),
    ))
    return connections


def connection_preview(paper_id, papers, relationships, limit=DEFAULT_PREVIEW_LIMIT):
    return build_paper_connections(paper_id, papers, relationships)[:limit]


def strongest_relationship_label(connections):
    """Label for the first (strongest) connection, e.g. "builds_on (9/10)"."""
    if not connections:
        return "No connections"
    strongest = connections[0]["relationship"]
    return f"{strongest['relationship_type']} ({strongest.get('strength') or 0}/10)"
