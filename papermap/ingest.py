"""Load a corpus of papers and relationships and apply the storage rules.

A corpus file is JSON with "papers" and "relationships" lists. Records that
fail validation are skipped with a warning rather than failing the load.
"""

import json
import logging
from pathlib import Path

from .config import (
    CATEGORIES,
    DEFAULT_STRENGTH,
    FAMILIARITY_LEVELS,
    MAX_STRENGTH,
    MIN_STRENGTH,
    RelationshipType,
)
from .relationships import canonicalize_relationship, relationship_key

logger = logging.getLogger(__name__)


class CorpusError(ValueError):
    """The corpus file could not be read or has the wrong shape."""


def _string_list(value, field, paper_id):
    """Coerce a list-of-strings field: a bare string becomes a one-item list,
    other shapes are dropped with a warning."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list):
        logger.warning("Paper %s has invalid %s %r, ignoring", paper_id, field, value)
        return []
    return value


def normalize_tags(tags):
    """Strip tags, drop empties and repeats, keep order."""
    if isinstance(tags, str):
        tags = [tags]
    elif not isinstance(tags, list):
        tags = []
    cleaned = []
    for tag in tags:
        if not isinstance(tag, str):
            continue
        tag = tag.strip()
        if tag and tag not in cleaned:
            cleaned.append(tag)
    return cleaned


def normalize_paper(raw):
    """Validate a paper record and fill defaults.

    Returns the normalized dict, or None if the record is unusable.
    """
    paper_id = raw.get("id")
    title = raw.get("title")
    title = title.strip() if isinstance(title, str) else ""
    if not paper_id or not title:
        logger.warning("Skipping paper without id/title: %r", raw.get("id"))
        return None

    try:
        year = int(raw.get("year") or 0)
    except (TypeError, ValueError):
        logger.warning("Paper %s has a non-numeric year %r", paper_id, raw.get("year"))
        year = 0

    category = raw.get("category") or "other"
    if category not in CATEGORIES:
        logger.warning("Paper %s has unknown category %r, using 'other'", paper_id, category)
        category = "other"

    paper = {
        **raw,
        "id": str(paper_id),
        "title": title,
        "authors": [a.strip() for a in _string_list(raw.get("authors"), "authors", paper_id)
                    if isinstance(a, str) and a.strip()],
        "year": max(0, year),
        "category": category,
        "tags": normalize_tags(raw.get("tags")),
    }

    level = raw.get("familiarity_level")
    if level is not None and level not in FAMILIARITY_LEVELS:
        logger.warning("Paper %s has unknown familiarity %r, ignoring", paper_id, level)
        paper.pop("familiarity_level")

    rating = raw.get("importance_rating")
    if rating is not None:
        try:
            paper["importance_rating"] = min(5, max(1, int(rating)))
        except (TypeError, ValueError):
            logger.warning("Paper %s has invalid importance %r, ignoring", paper_id, rating)
            paper.pop("importance_rating")

    if "is_favorite" in raw:
        paper["is_favorite"] = bool(raw["is_favorite"])
    return paper


def normalize_relationship(raw):
    """Validate a relationship record and convert it to its storage form.

    Returns the canonical dict, or None if the record is unusable.
    """
    src = raw.get("from_paper_id")
    tgt = raw.get("to_paper_id")
    if not raw.get("id") or not src or not tgt:
        logger.warning("Skipping relationship with missing id/endpoints: %r", raw.get("id"))
        return None
    if src == tgt:
        logger.warning("Skipping self-referencing relationship %s", raw["id"])
        return None

    try:
        RelationshipType(raw.get("relationship_type"))
    except ValueError:
        logger.warning("Skipping relationship %s with unknown type %r",
                       raw["id"], raw.get("relationship_type"))
        return None

    strength = raw.get("strength", DEFAULT_STRENGTH)
    try:
        strength = int(strength)
    except (TypeError, ValueError):
        logger.warning("Relationship %s has invalid strength %r", raw["id"], strength)
        return None
    if not MIN_STRENGTH <= strength <= MAX_STRENGTH:
        logger.warning("Relationship %s strength %d out of range", raw["id"], strength)
        return None

    rel = {**raw, "id": str(raw["id"]), "from_paper_id": str(src),
           "to_paper_id": str(tgt), "strength": strength}
    return canonicalize_relationship(rel)


def merge_relationships(existing, incoming):
    """Append canonical relationships, skipping (from, to, type) duplicates.

    Returns (merged, added) where added lists the relationships that were new.
    """
    seen = {relationship_key(r) for r in existing}
    merged = list(existing)
    added = []
    for raw in incoming:
        rel = normalize_relationship(raw)
        if rel is None:
            continue
        key = relationship_key(rel)
        if key in seen:
            logger.debug("Duplicate relationship %s -> %s (%s), skipping", *key)
            continue
        seen.add(key)
        merged.append(rel)
        added.append(rel)
    return merged, added


def parse_corpus(data):
    """Normalize a decoded corpus dict into (papers, relationships)."""
    if not isinstance(data, dict):
        raise CorpusError("Corpus must be a JSON object with 'papers' and 'relationships'")
    raw_papers = data.get("papers") or []
    raw_relationships = data.get("relationships") or []
    if not isinstance(raw_papers, list) or not isinstance(raw_relationships, list):
        raise CorpusError("'papers' and 'relationships' must be lists")

    papers = []
    seen_ids = set()
    for raw in raw_papers:
        if not isinstance(raw, dict):
            continue
        paper = normalize_paper(raw)
        if paper is None:
            continue
        if paper["id"] in seen_ids:
            logger.warning("Duplicate paper id %s, keeping the first", paper["id"])
            continue
        seen_ids.add(paper["id"])
        papers.append(paper)

    relationships, _ = merge_relationships(
        [], [r for r in raw_relationships if isinstance(r, dict)]
    )

    dangling = sum(1 for r in relationships
                   if r["from_paper_id"] not in seen_ids or r["to_paper_id"] not in seen_ids)
    if dangling:
        logger.info("%d relationships reference unknown papers", dangling)

    logger.info("Loaded %d papers, %d relationships", len(papers), len(relationships))
    return papers, relationships


def load_corpus(path):
    """Read a corpus JSON file. Raises CorpusError if it cannot be read."""
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise CorpusError(f"Could not read {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise CorpusError(f"Invalid JSON in {path}: {e}") from e
    return parse_corpus(data)
