"""Review queue: which papers to revisit first."""

from .config import (
    DEFAULT_FAMILIARITY,
    DEFAULT_REVIEW_LIMIT,
    FAMILIARITY_LABELS,
    FAMILIARITY_PRIORITY,
)


def familiarity_rank(paper):
    """0 for not_started ... 4 for expert; unset or unknown counts as not_started."""
    level = paper.get("familiarity_level") or DEFAULT_FAMILIARITY
    return FAMILIARITY_PRIORITY.get(level, 0)


def review_sort_key(paper):
    """Least familiar first, then most important, then newest."""
    return (
        familiarity_rank(paper),
        -(paper.get("importance_rating") or 0),
        -(paper.get("year") or 0),
    )


def review_reason(paper):
    level = paper.get("familiarity_level") or DEFAULT_FAMILIARITY
    reason = FAMILIARITY_LABELS.get(level, FAMILIARITY_LABELS[DEFAULT_FAMILIARITY])
    rating = paper.get("importance_rating") or 0
    if rating > 0:
        reason += f", importance {rating}/5"
    return reason


def build_review_queue(papers, limit=DEFAULT_REVIEW_LIMIT):
    """Order papers for review and keep the first `limit`.

    Returns a list of {"paper", "reason"}.
    """
    ordered = sorted(papers, key=review_sort_key)[:limit]
    return [{"paper": p, "reason": review_reason(p)} for p in ordered]
