"""Corpus-level summaries for dashboards and the CLI."""

import re
from collections import defaultdict
from datetime import date

from .config import LOW_FAMILIARITY_LEVELS, RECENT_PAPER_YEARS
from .relationships import relationship_type_counts

DEFAULT_ONE_LINER = "Add an abstract or key contributions to summarize this paper."


def count_recent_papers(papers, years=RECENT_PAPER_YEARS, current_year=None):
    if current_year is None:
        current_year = date.today().year
    return sum(1 for p in papers if (p.get("year") or 0) >= current_year - years)


def count_papers_needing_review(papers):
    """Papers not started yet or marked difficult (unset counts as not started)."""
    return sum(
        1 for p in papers
        if (p.get("familiarity_level") or "not_started") in LOW_FAMILIARITY_LEVELS
    )


def most_connected_paper(papers, relationships):
    """Paper with the most incident relationships; first in list order on ties."""
    if not papers:
        return None

    degree = defaultdict(int)
    for r in relationships:
        degree[r["from_paper_id"]] += 1
        degree[r["to_paper_id"]] += 1

    best, best_degree = None, -1
    for p in papers:
        if degree[p["id"]] > best_degree:
            best, best_degree = p, degree[p["id"]]
    return best


def first_sentence(text):
    """First sentence of text, or a 180-character excerpt if there is no break."""
    if not text:
        return None
    compact = re.sub(r"\s+", " ", text).strip()
    if not compact:
        return None
    match = re.search(r"[.!?]\s", compact)
    if match:
        return compact[:match.start() + 1]
    return compact if len(compact) <= 180 else compact[:177] + "..."


def _clean(values):
    return [v.strip() for v in values or [] if isinstance(v, str) and v.strip()]


def paper_core_snapshot(paper):
    """One-liner, up to 4 methods, and up to 3 points worth remembering."""
    contributions = _clean(paper.get("key_contributions"))
    algorithms = _clean(paper.get("algorithms"))
    equation_names = _clean(
        eq.get("name") for eq in paper.get("key_equations") or [] if isinstance(eq, dict)
    )

    one_liner = (
        (contributions[0] if contributions else None)
        or first_sentence(paper.get("abstract"))
        or DEFAULT_ONE_LINER
    )
    methods = (algorithms + equation_names)[:4]
    remember = (contributions[:3] + equation_names[:max(0, 3 - len(contributions))])[:3]

    return {"one_liner": one_liner, "methods": methods, "remember_points": remember}


def summarize_corpus(papers, relationships, current_year=None):
    most_connected = most_connected_paper(papers, relationships)
    return {
        "total_papers": len(papers),
        "total_relationships": len(relationships),
        "recent_papers": count_recent_papers(papers, current_year=current_year),
        "needing_review": count_papers_needing_review(papers),
        "relationship_types": relationship_type_counts(relationships),
        "most_connected": most_connected["id"] if most_connected else None,
    }
