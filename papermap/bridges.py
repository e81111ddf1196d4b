"""Bridge recommendations: papers not yet linked to a target paper but
structurally or topically close to it.

Each candidate outside the target's neighbor set is scored by:

- shared neighbors (count x "neighbor")
- shared path strength: for each shared neighbor N,
  min(strength(target, N), strength(candidate, N)), summed, x "path"
- same category ("category")
- shared tags, capped at BRIDGE_TAG_CAP (x "tag")
- publication year gap ("recency_close" / "recency_medium")
- low or moderate familiarity with the candidate (unset counts as not started)
- the candidate's importance rating (x "importance")

Weights come from config.BRIDGE_WEIGHTS and can be overridden per call.
"""

from .adjacency import build_adjacency, build_strength_map, get_strength
from .config import (
    BRIDGE_TAG_CAP,
    BRIDGE_WEIGHTS,
    DEFAULT_BRIDGE_LIMIT,
    DEFAULT_FAMILIARITY,
    LOW_FAMILIARITY_LEVELS,
    RECENCY_CLOSE_YEARS,
    RECENCY_MEDIUM_YEARS,
)


def clean_tags(tags):
    """Trimmed, non-empty tags in their original order, without repeats."""
    seen = []
    for tag in tags or []:
        tag = tag.strip()
        if tag and tag not in seen:
            seen.append(tag)
    return seen


def score_candidate(target, candidate, adjacency, strengths, weights=None):
    """Score one candidate against the target.

    Returns (score, reasons). The score is unrounded.
    """
    w = {**BRIDGE_WEIGHTS, **(weights or {})}
    target_neighbors = adjacency.get(target["id"], set())
    candidate_neighbors = adjacency.get(candidate["id"], set())

    score = 0.0
    reasons = []

    shared = sorted(target_neighbors & candidate_neighbors)
    if shared:
        score += len(shared) * w["neighbor"]
        noun = "neighbor" if len(shared) == 1 else "neighbors"
        reasons.append(f"{len(shared)} shared {noun}")

        path_strength = sum(
            min(get_strength(strengths, target["id"], n),
                get_strength(strengths, candidate["id"], n))
            for n in shared
        )
        if path_strength > 0:
            score += path_strength * w["path"]
            reasons.append(f"shared path strength {path_strength}")

    if candidate.get("category") is not None and candidate.get("category") == target.get("category"):
        score += w["category"]
        reasons.append("same category")

    target_tags = set(clean_tags(target.get("tags")))
    shared_tags = [t for t in clean_tags(candidate.get("tags")) if t in target_tags]
    if shared_tags:
        score += min(BRIDGE_TAG_CAP, len(shared_tags)) * w["tag"]
        reasons.append("shared tags: " + ", ".join(shared_tags[:2]))

    year_gap = abs((candidate.get("year") or 0) - (target.get("year") or 0))
    if year_gap <= RECENCY_CLOSE_YEARS:
        score += w["recency_close"]
        reasons.append(f"published within {RECENCY_CLOSE_YEARS} years")
    elif year_gap <= RECENCY_MEDIUM_YEARS:
        score += w["recency_medium"]
        reasons.append(f"published within {RECENCY_MEDIUM_YEARS} years")

    familiarity = candidate.get("familiarity_level") or DEFAULT_FAMILIARITY
    if familiarity in LOW_FAMILIARITY_LEVELS:
        score += w["low_familiarity"]
        reasons.append("low familiarity")
    elif familiarity == "moderate":
        score += w["moderate_familiarity"]
        reasons.append("moderate familiarity")

    rating = candidate.get("importance_rating") or 0
    if rating > 0:
        score += rating * w["importance"]
        reasons.append(f"importance {rating}/5")

    return score, reasons


def build_bridge_recommendations(paper_id, papers, relationships,
                                 limit=DEFAULT_BRIDGE_LIMIT, weights=None):
    """Rank papers worth linking to paper_id.

    Returns a list of {"paper", "score", "reasons"} sorted by score, then
    year, both descending; scores are rounded to 2 decimals. Direct
    neighbors of paper_id are never returned, nor are candidates whose
    score is not positive.
    """
    target = next((p for p in papers if p["id"] == paper_id), None)
    if target is None:
        return []

    adjacency = build_adjacency(relationships)
    strengths = build_strength_map(relationships)
    direct = adjacency.get(paper_id, set())

    scored = []
    for candidate in papers:
        if candidate["id"] == paper_id or candidate["id"] in direct:
            continue
        score, reasons = score_candidate(target, candidate, adjacency, strengths, weights)
        if score <= 0:
            continue
        scored.append((score, candidate, reasons))

    scored.sort(key=lambda item: (-item[0], -(item[1].get("year") or 0)))
    return [
        {"paper": candidate, "score": round(score, 2), "reasons": reasons}
        for score, candidate, reasons in scored[:limit]
    ]
