"""FastAPI web application for browsing a paper map.

A corpus JSON file is uploaded into an in-memory session; the endpoints
serve the positioned graph, per-paper connections and bridge
recommendations, the review queue, and corpus statistics.
"""

import asyncio
import json
import logging
import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, File, HTTPException, Query, UploadFile
from fastapi.responses import HTMLResponse, Response
from pydantic import BaseModel, Field

from papermap.bridges import build_bridge_recommendations
from papermap.config import (
    DEFAULT_BRIDGE_LIMIT,
    DEFAULT_DIRECTION,
    DEFAULT_REVIEW_LIMIT,
    MAX_STRENGTH,
    MIN_STRENGTH,
    RelationshipType,
)
from papermap.connections import build_paper_connections
from papermap.filtering import filter_papers
from papermap.graph import build_graph
from papermap.ingest import CorpusError, merge_relationships, parse_corpus
from papermap.insights import paper_core_snapshot, summarize_corpus
from papermap.review import build_review_queue
from papermap.sync import MapSelectionSync
from papermap.visualize import generate_html

logger = logging.getLogger(__name__)

# In-memory session store
sessions: dict[str, dict] = {}

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10 MB corpus file
SESSION_MAX_AGE_HOURS = 24
MAX_SESSIONS = 100


class RelationshipIn(BaseModel):
    from_paper_id: str
    to_paper_id: str
    relationship_type: RelationshipType
    strength: int = Field(5, ge=MIN_STRENGTH, le=MAX_STRENGTH)
    description: str | None = None


class MapSelectionIn(BaseModel):
    included: list[str]


def cleanup_old_sessions():
    """Remove sessions older than SESSION_MAX_AGE_HOURS and enforce MAX_SESSIONS."""
    now = time.time()
    max_age_secs = SESSION_MAX_AGE_HOURS * 3600

    expired = [
        sid for sid, s in sessions.items()
        if now - s.get("created_at", now) > max_age_secs
    ]
    for sid in expired:
        sessions.pop(sid, None)

    # Evict oldest first
    if len(sessions) > MAX_SESSIONS:
        by_age = sorted(sessions.items(), key=lambda x: x[1].get("created_at", 0))
        for sid, _ in by_age[: len(sessions) - MAX_SESSIONS]:
            sessions.pop(sid, None)


def make_tag_writer(session_id):
    """Tag writer for MapSelectionSync that stores tags on the session's papers.

    The paper list is replaced, never modified in place.
    """
    async def write_tags(updates):
        session = sessions.get(session_id)
        if session is None:
            raise KeyError(f"Session {session_id} no longer exists")
        tags_by_id = {u["paper_id"]: u["personal_tags"] for u in updates}
        session["papers"] = [
            {**p, "personal_tags": tags_by_id[p["id"]]} if p["id"] in tags_by_id else p
            for p in session["papers"]
        ]
        session["revision"] += 1
    return write_tags


def create_session(papers, relationships):
    session_id = str(uuid.uuid4())
    selection = MapSelectionSync(make_tag_writer(session_id))
    selection.hydrate(papers)
    sessions[session_id] = {
        "session_id": session_id,
        "papers": papers,
        "relationships": relationships,
        "selection": selection,
        "created_at": time.time(),
        "revision": 0,
    }
    return sessions[session_id]


def session_etag(session):
    return f'W/"{session["session_id"]}-{session["revision"]}"'


def get_session_or_404(session_id):
    if session_id not in sessions:
        raise HTTPException(status_code=404, detail="Session not found")
    return sessions[session_id]


def get_paper_or_404(session, paper_id):
    for p in session["papers"]:
        if p["id"] == paper_id:
            return p
    raise HTTPException(status_code=404, detail="Paper not found")


def visible_corpus(session):
    """Papers on the map and the relationships between them."""
    included = session["selection"].included
    papers = [p for p in session["papers"] if p["id"] in included]
    relationships = [
        r for r in session["relationships"]
        if r["from_paper_id"] in included and r["to_paper_id"] in included
    ]
    return papers, relationships


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Start periodic session cleanup on server startup."""
        async def _cleanup_loop():
            while True:
                await asyncio.sleep(3600)  # Run every hour
                try:
                    cleanup_old_sessions()
                except Exception as e:
                    logger.warning("Cleanup error: %s", e)
        task = asyncio.create_task(_cleanup_loop())
        yield
        task.cancel()

    app = FastAPI(title="Paper Map", lifespan=lifespan)

    @app.middleware("http")
    async def revalidate_reads(request, call_next):
        """Tag session reads with the session revision so clients refetch
        as soon as a relationship or the map selection changes."""
        # /api/<resource>/<session_id>/...
        parts = request.url.path.split("/")
        session = sessions.get(parts[3]) if len(parts) > 3 and parts[1] == "api" else None
        if request.method != "GET" or session is None:
            return await call_next(request)

        etag = session_etag(session)
        headers = {"ETag": etag, "Cache-Control": "no-cache"}
        if request.headers.get("if-none-match") == etag:
            return Response(status_code=304, headers=headers)

        response = await call_next(request)
        if response.status_code == 200:
            response.headers.update(headers)
        return response

    @app.post("/api/corpus")
    async def upload_corpus(file: UploadFile = File(...)):
        content = await file.read()
        if len(content) > MAX_FILE_SIZE:
            raise HTTPException(
                status_code=400,
                detail=f"Corpus file exceeds {MAX_FILE_SIZE // (1024*1024)}MB limit"
            )
        try:
            papers, relationships = parse_corpus(json.loads(content))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise HTTPException(status_code=400, detail=f"Invalid JSON: {e}")
        except CorpusError as e:
            raise HTTPException(status_code=400, detail=str(e))

        cleanup_old_sessions()
        session = create_session(papers, relationships)
        return {
            "session_id": session["session_id"],
            "paper_count": len(papers),
            "relationship_count": len(relationships),
        }

    @app.get("/api/sessions/{session_id}")
    async def get_session(session_id: str):
        session = get_session_or_404(session_id)
        return {
            "session_id": session["session_id"],
            "paper_count": len(session["papers"]),
            "relationship_count": len(session["relationships"]),
            "hidden_count": len(session["papers"]) - len(session["selection"].included),
            "created_at": session["created_at"],
        }

    @app.get("/api/graph/{session_id}")
    async def get_graph(session_id: str, direction: str = DEFAULT_DIRECTION):
        session = get_session_or_404(session_id)
        papers, relationships = visible_corpus(session)
        try:
            return build_graph(papers, relationships, direction=direction)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

    @app.get("/api/view/{session_id}", response_class=HTMLResponse)
    async def view_graph(session_id: str, direction: str = DEFAULT_DIRECTION):
        session = get_session_or_404(session_id)
        papers, relationships = visible_corpus(session)
        try:
            graph = build_graph(papers, relationships, direction=direction)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        page, _, _ = generate_html(graph, title=f"Paper Map ({len(papers)} papers)")
        return HTMLResponse(content=page)

    @app.get("/api/papers/{session_id}")
    async def list_papers(session_id: str, q: str = "",
                          category: list[str] = Query(default=[]),
                          familiarity: list[str] = Query(default=[]),
                          year_min: int | None = None, year_max: int | None = None):
        session = get_session_or_404(session_id)
        year_range = None
        if year_min is not None or year_max is not None:
            year_range = (year_min, year_max)
        return filter_papers(session["papers"], search_text=q, categories=category,
                             year_range=year_range, familiarity_levels=familiarity)

    @app.get("/api/papers/{session_id}/{paper_id}")
    async def get_paper(session_id: str, paper_id: str):
        session = get_session_or_404(session_id)
        paper = get_paper_or_404(session, paper_id)
        return {"paper": paper, "snapshot": paper_core_snapshot(paper)}

    @app.get("/api/papers/{session_id}/{paper_id}/connections")
    async def get_connections(session_id: str, paper_id: str,
                              limit: int | None = Query(default=None, ge=1)):
        session = get_session_or_404(session_id)
        get_paper_or_404(session, paper_id)
        connections = build_paper_connections(
            paper_id, session["papers"], session["relationships"]
        )
        return connections[:limit] if limit is not None else connections

    @app.get("/api/papers/{session_id}/{paper_id}/bridges")
    async def get_bridges(session_id: str, paper_id: str,
                          limit: int = Query(default=DEFAULT_BRIDGE_LIMIT, ge=1)):
        session = get_session_or_404(session_id)
        get_paper_or_404(session, paper_id)
        return build_bridge_recommendations(
            paper_id, session["papers"], session["relationships"], limit=limit
        )

    @app.get("/api/review/{session_id}")
    async def get_review_queue(session_id: str,
                               limit: int = Query(default=DEFAULT_REVIEW_LIMIT, ge=1)):
        session = get_session_or_404(session_id)
        return build_review_queue(session["papers"], limit=limit)

    @app.get("/api/stats/{session_id}")
    async def get_stats(session_id: str):
        session = get_session_or_404(session_id)
        return summarize_corpus(session["papers"], session["relationships"])

    @app.post("/api/relationships/{session_id}")
    async def add_relationship(session_id: str, body: RelationshipIn):
        session = get_session_or_404(session_id)
        known = {p["id"] for p in session["papers"]}
        if body.from_paper_id not in known or body.to_paper_id not in known:
            raise HTTPException(status_code=400, detail="Both endpoints must be known papers")
        if body.from_paper_id == body.to_paper_id:
            raise HTTPException(status_code=400, detail="A paper cannot relate to itself")

        raw = {
            "id": str(uuid.uuid4()),
            "from_paper_id": body.from_paper_id,
            "to_paper_id": body.to_paper_id,
            "relationship_type": body.relationship_type.value,
            "strength": body.strength,
            "description": body.description,
        }
        merged, added = merge_relationships(session["relationships"], [raw])
        if not added:
            return {"created": False, "relationship": None}
        session["relationships"] = merged
        session["revision"] += 1
        return {"created": True, "relationship": added[0]}

    @app.delete("/api/relationships/{session_id}/{relationship_id}")
    async def delete_relationship(session_id: str, relationship_id: str):
        session = get_session_or_404(session_id)
        remaining = [r for r in session["relationships"] if r["id"] != relationship_id]
        if len(remaining) == len(session["relationships"]):
            raise HTTPException(status_code=404, detail="Relationship not found")
        session["relationships"] = remaining
        session["revision"] += 1
        return {"deleted": relationship_id}

    @app.put("/api/map-selection/{session_id}")
    async def put_map_selection(session_id: str, body: MapSelectionIn):
        session = get_session_or_404(session_id)
        selection = session["selection"]
        before = set(selection.included)
        selection.set_included(body.included)
        if selection.included != before:
            session["revision"] += 1
        return {
            "included": sorted(selection.included),
            "pending": selection.pending_changes(),
        }

    return app


# Create the app instance for uvicorn
app = create_app()
