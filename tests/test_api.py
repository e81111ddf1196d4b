"""Tests for web.app — FastAPI endpoints."""

import json
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient
from starlette.testclient import TestClient

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def app():
    """Create a fresh FastAPI app for each test."""
    from web.app import create_app

    return create_app()


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def session_id(client):
    """Upload the fixture corpus and return the new session id."""
    with open(FIXTURES_DIR / "corpus.json", "rb") as f:
        response = await client.post(
            "/api/corpus", files={"file": ("corpus.json", f, "application/json")}
        )
    assert response.status_code == 200
    return response.json()["session_id"]


@pytest.mark.asyncio
async def test_upload_creates_session(client):
    with open(FIXTURES_DIR / "corpus.json", "rb") as f:
        response = await client.post(
            "/api/corpus", files={"file": ("corpus.json", f, "application/json")}
        )
    assert response.status_code == 200
    data = response.json()
    assert "session_id" in data
    assert data["paper_count"] == 6
    assert data["relationship_count"] == 7


@pytest.mark.asyncio
async def test_upload_rejects_invalid_json(client):
    response = await client.post(
        "/api/corpus", files={"file": ("corpus.json", b"{not json", "application/json")}
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_upload_rejects_wrong_shape(client):
    response = await client.post(
        "/api/corpus", files={"file": ("corpus.json", b"[1, 2]", "application/json")}
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_upload_requires_file(client):
    response = await client.post("/api/corpus")
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_session_info(client, session_id):
    response = await client.get(f"/api/sessions/{session_id}")
    assert response.status_code == 200
    data = response.json()
    assert data["paper_count"] == 6
    # vqvae carries the map:hidden tag in the fixture
    assert data["hidden_count"] == 1


@pytest.mark.asyncio
async def test_unknown_session_returns_404(client):
    for path in ("/api/sessions/nope", "/api/graph/nope", "/api/review/nope", "/api/stats/nope"):
        response = await client.get(path)
        assert response.status_code == 404


@pytest.mark.asyncio
async def test_graph_hides_tagged_papers(client, session_id):
    response = await client.get(f"/api/graph/{session_id}")
    assert response.status_code == 200
    graph = response.json()
    assert {n["id"] for n in graph["nodes"]} == {
        "csinet", "crnet", "transnet", "attention", "csiquant",
    }
    assert {e["id"] for e in graph["edges"]} == {"r1", "r2", "r3", "r4", "r6"}
    assert graph["metadata"]["direction"] == "TB"
    assert all("position" in n for n in graph["nodes"])


@pytest.mark.asyncio
async def test_graph_direction(client, session_id):
    response = await client.get(f"/api/graph/{session_id}", params={"direction": "LR"})
    assert response.status_code == 200
    assert response.json()["metadata"]["direction"] == "LR"

    response = await client.get(f"/api/graph/{session_id}", params={"direction": "sideways"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_reads_revalidate_by_etag(client, session_id):
    response = await client.get(f"/api/graph/{session_id}")
    assert response.headers["cache-control"] == "no-cache"
    etag = response.headers["etag"]

    response = await client.get(f"/api/graph/{session_id}", headers={"If-None-Match": etag})
    assert response.status_code == 304


@pytest.mark.asyncio
async def test_relationship_edit_invalidates_cached_graph(client, session_id):
    etag = (await client.get(f"/api/graph/{session_id}")).headers["etag"]

    body = {"from_paper_id": "crnet", "to_paper_id": "attention", "relationship_type": "related"}
    await client.post(f"/api/relationships/{session_id}", json=body)

    response = await client.get(f"/api/graph/{session_id}", headers={"If-None-Match": etag})
    assert response.status_code == 200
    assert response.headers["etag"] != etag
    assert len(response.json()["edges"]) == 6

    etag = response.headers["etag"]
    await client.delete(f"/api/relationships/{session_id}/r1")
    response = await client.get(f"/api/graph/{session_id}", headers={"If-None-Match": etag})
    assert response.status_code == 200
    assert len(response.json()["edges"]) == 5


@pytest.mark.asyncio
async def test_duplicate_relationship_keeps_etag(client, session_id):
    etag = (await client.get(f"/api/stats/{session_id}")).headers["etag"]
    body = {"from_paper_id": "crnet", "to_paper_id": "csinet", "relationship_type": "builds_on"}
    await client.post(f"/api/relationships/{session_id}", json=body)

    response = await client.get(f"/api/stats/{session_id}", headers={"If-None-Match": etag})
    assert response.status_code == 304


@pytest.mark.asyncio
async def test_upload_skips_malformed_authors_and_title(client):
    corpus = {
        "papers": [
            {"id": "a", "title": "A", "authors": [123, " Ada ", None]},
            {"id": "b", "title": "B", "authors": "Alice Smith"},
            {"id": "c", "title": 42},
        ],
        "relationships": [],
    }
    response = await client.post(
        "/api/corpus",
        files={"file": ("corpus.json", json.dumps(corpus).encode(), "application/json")},
    )
    assert response.status_code == 200
    session_id = response.json()["session_id"]
    assert response.json()["paper_count"] == 2

    papers = (await client.get(f"/api/papers/{session_id}")).json()
    assert [p["authors"] for p in papers] == [["Ada"], ["Alice Smith"]]


@pytest.mark.asyncio
async def test_view_serves_html(client, session_id):
    response = await client.get(f"/api/view/{session_id}")
    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]
    assert "Paper Map (5 papers)" in response.text


@pytest.mark.asyncio
async def test_list_papers_with_filters(client, session_id):
    response = await client.get(f"/api/papers/{session_id}", params={"q": "attention"})
    assert [p["id"] for p in response.json()] == ["transnet", "attention"]

    response = await client.get(
        f"/api/papers/{session_id}",
        params=[("category", "transformer"), ("category", "quantization")],
    )
    assert [p["id"] for p in response.json()] == ["transnet", "attention", "csiquant"]

    response = await client.get(f"/api/papers/{session_id}",
                                params={"familiarity": "familiar", "year_max": 2017})
    assert [p["id"] for p in response.json()] == ["attention"]


@pytest.mark.asyncio
async def test_get_paper_with_snapshot(client, session_id):
    response = await client.get(f"/api/papers/{session_id}/csinet")
    assert response.status_code == 200
    data = response.json()
    assert data["paper"]["tags"] == ["csi", "autoencoder", "massive mimo"]
    assert data["snapshot"]["one_liner"] == "First deep-learning CSI feedback autoencoder"

    response = await client.get(f"/api/papers/{session_id}/missing")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_connections(client, session_id):
    response = await client.get(f"/api/papers/{session_id}/csinet/connections")
    assert response.status_code == 200
    data = response.json()
    assert [c["relationship"]["id"] for c in data] == ["r1", "r2", "r4"]
    assert all(c["direction"] == "incoming" for c in data)

    response = await client.get(f"/api/papers/{session_id}/csinet/connections",
                                params={"limit": 1})
    assert len(response.json()) == 1


@pytest.mark.asyncio
async def test_bridges(client, session_id):
    response = await client.get(f"/api/papers/{session_id}/crnet/bridges")
    assert response.status_code == 200
    data = response.json()
    assert [b["paper"]["id"] for b in data] == ["transnet", "vqvae", "attention"]
    assert data[0]["score"] == pytest.approx(14.35)
    assert "shared path strength 7" in data[0]["reasons"]


@pytest.mark.asyncio
async def test_review_queue(client, session_id):
    response = await client.get(f"/api/review/{session_id}", params={"limit": 2})
    assert response.status_code == 200
    data = response.json()
    assert [e["paper"]["id"] for e in data] == ["transnet", "csiquant"]
    assert data[0]["reason"] == "not started, importance 5/5"


@pytest.mark.asyncio
async def test_stats(client, session_id):
    response = await client.get(f"/api/stats/{session_id}")
    assert response.status_code == 200
    data = response.json()
    assert data["total_papers"] == 6
    assert data["total_relationships"] == 7
    assert data["most_connected"] == "csinet"
    assert data["relationship_types"]["inspired_by"] == 2


@pytest.mark.asyncio
async def test_add_relationship(client, session_id):
    body = {"from_paper_id": "vqvae", "to_paper_id": "attention",
            "relationship_type": "related", "strength": 3}
    response = await client.post(f"/api/relationships/{session_id}", json=body)
    assert response.status_code == 200
    data = response.json()
    assert data["created"] is True
    assert data["relationship"]["strength"] == 3

    stats = (await client.get(f"/api/stats/{session_id}")).json()
    assert stats["total_relationships"] == 8


@pytest.mark.asyncio
async def test_add_inspires_is_canonicalized(client, session_id):
    body = {"from_paper_id": "vqvae", "to_paper_id": "crnet",
            "relationship_type": "inspires", "strength": 4}
    response = await client.post(f"/api/relationships/{session_id}", json=body)
    rel = response.json()["relationship"]
    assert rel["relationship_type"] == "inspired_by"
    assert (rel["from_paper_id"], rel["to_paper_id"]) == ("crnet", "vqvae")


@pytest.mark.asyncio
async def test_duplicate_relationship_is_noop(client, session_id):
    for body in (
        {"from_paper_id": "crnet", "to_paper_id": "csinet", "relationship_type": "builds_on"},
        {"from_paper_id": "attention", "to_paper_id": "transnet", "relationship_type": "inspires"},
    ):
        response = await client.post(f"/api/relationships/{session_id}", json=body)
        assert response.status_code == 200
        assert response.json() == {"created": False, "relationship": None}

    stats = (await client.get(f"/api/stats/{session_id}")).json()
    assert stats["total_relationships"] == 7


@pytest.mark.asyncio
async def test_add_relationship_validation(client, session_id):
    url = f"/api/relationships/{session_id}"
    base = {"from_paper_id": "crnet", "to_paper_id": "attention", "relationship_type": "related"}

    assert (await client.post(url, json={**base, "to_paper_id": "ghost"})).status_code == 400
    assert (await client.post(url, json={**base, "to_paper_id": "crnet"})).status_code == 400
    assert (await client.post(url, json={**base, "strength": 11})).status_code == 422
    assert (await client.post(url, json={**base, "strength": 0})).status_code == 422
    assert (await client.post(url, json={**base, "relationship_type": "cites"})).status_code == 422


@pytest.mark.asyncio
async def test_delete_relationship(client, session_id):
    response = await client.delete(f"/api/relationships/{session_id}/r7")
    assert response.status_code == 200
    assert response.json() == {"deleted": "r7"}

    response = await client.delete(f"/api/relationships/{session_id}/r7")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_map_selection_sync(client, session_id):
    from web.app import sessions

    all_ids = ["csinet", "crnet", "transnet", "attention", "vqvae", "csiquant"]
    response = await client.put(f"/api/map-selection/{session_id}",
                                json={"included": all_ids + ["ghost"]})
    assert response.status_code == 200
    data = response.json()
    assert data["included"] == sorted(all_ids)
    assert data["pending"] == ["vqvae"]

    # Included immediately, before the debounced write lands
    graph = (await client.get(f"/api/graph/{session_id}")).json()
    assert len(graph["nodes"]) == 6

    await sessions[session_id]["selection"].flush()
    vqvae = next(p for p in sessions[session_id]["papers"] if p["id"] == "vqvae")
    assert vqvae["personal_tags"] == []

    info = (await client.get(f"/api/sessions/{session_id}")).json()
    assert info["hidden_count"] == 0


def test_sync_client_roundtrip(app):
    """The app also works through starlette's synchronous TestClient."""
    with TestClient(app) as sync_client:
        with open(FIXTURES_DIR / "corpus.json", "rb") as f:
            response = sync_client.post(
                "/api/corpus", files={"file": ("corpus.json", f, "application/json")}
            )
        session_id = response.json()["session_id"]
        response = sync_client.get(f"/api/review/{session_id}")
        assert response.status_code == 200
        assert len(response.json()) == 6
