"""Undirected neighbor sets and strongest-strength lookup between papers."""

from collections import defaultdict


def pair_key(a, b):
    """Order-independent key for a pair of paper ids."""
    return (a, b) if a <= b else (b, a)


def build_adjacency(relationships):
    """Map paper id -> set of directly connected paper ids.

    Direction and type are ignored: every relationship adds each endpoint
    to the other's neighbor set. Endpoints are recorded even when they do
    not resolve to a known paper.
    """
    adjacency = defaultdict(set)
    for r in relationships:
        src = r["from_paper_id"]
        tgt = r["to_paper_id"]
        adjacency[src].add(tgt)
        adjacency[tgt].add(src)
    return dict(adjacency)


def build_strength_map(relationships):
    """Map unordered pair key -> max strength over every relationship
    connecting the pair, in either direction and of any type.
    """
    strengths = {}
    for r in relationships:
        key = pair_key(r["from_paper_id"], r["to_paper_id"])
        strength = r.get("strength") or 0
        if strength > strengths.get(key, float("-inf")):
            strengths[key] = strength
    return strengths


def get_strength(strengths, a, b):
    """Strongest relationship strength between a and b, 0 if unconnected."""
    return strengths.get(pair_key(a, b), 0)
