"""Search and facet filters over the paper list."""


def _familiarity_bucket(level):
    # expert is a legacy level, shown alongside familiar
    if level == "expert":
        return "familiar"
    return level or "not_started"


def matches_text(paper, query):
    query = query.lower().strip()
    if not query:
        return True
    if query in (paper.get("title") or "").lower():
        return True
    if any(query in author.lower() for author in paper.get("authors") or []):
        return True
    return any(query in tag.lower() for tag in paper.get("tags") or [])


def filter_papers(papers, search_text="", categories=(), year_range=None,
                  familiarity_levels=(), importance_ratings=()):
    """Return the papers matching every active filter, in input order.

    Empty filters are inactive. year_range is an inclusive (min, max) pair;
    either bound may be None. Unset importance counts as 0.
    """
    result = []
    for paper in papers:
        if not matches_text(paper, search_text or ""):
            continue
        if categories and paper.get("category") not in categories:
            continue
        if year_range is not None:
            low, high = year_range
            year = paper.get("year") or 0
            if low is not None and year < low:
                continue
            if high is not None and year > high:
                continue
        if familiarity_levels and _familiarity_bucket(paper.get("familiarity_level")) not in familiarity_levels:
            continue
        if importance_ratings and (paper.get("importance_rating") or 0) not in importance_ratings:
            continue
        result.append(paper)
    return result
