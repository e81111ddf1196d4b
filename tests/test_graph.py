"""Tests for papermap.graph — building nodes and edges, positioned graph."""

import pytest


class TestToPaperNodes:
    def test_one_node_per_paper(self, sample_papers):
        from papermap.graph import to_paper_nodes

        nodes = to_paper_nodes(sample_papers)
        assert [n["id"] for n in nodes] == [p["id"] for p in sample_papers]

    def test_node_carries_paper_and_note_state(self, sample_papers):
        from papermap.graph import to_paper_nodes

        node = to_paper_nodes(sample_papers)[0]
        assert node["data"]["paper"] is sample_papers[0]
        assert node["data"]["familiarity_level"] == "familiar"
        assert node["data"]["is_favorite"] is True
        assert node["size"] == {"width": 260, "height": 120}
        assert node["position"] == {"x": 0, "y": 0}

    def test_unknown_category_uses_other_color(self):
        from papermap.config import CATEGORY_COLORS
        from papermap.graph import to_paper_nodes

        node = to_paper_nodes([{"id": "p", "title": "T", "category": "astronomy"}])[0]
        assert node["data"]["color"] == CATEGORY_COLORS["other"]
        assert node["data"]["is_favorite"] is False


class TestToRelationshipEdges:
    def test_edge_fields(self, sample_relationships):
        from papermap.graph import to_relationship_edges

        edges = {e["id"]: e for e in to_relationship_edges(sample_relationships)}
        r3 = edges["r3"]
        # transnet inspired_by attention is drawn attention -> transnet
        assert (r3["source"], r3["target"]) == ("attention", "transnet")
        assert r3["type"] == "inspired_by"
        assert r3["strength"] == 8
        assert r3["width"] == pytest.approx(8 / 3)
        assert r3["description"] == "Applies full attention to CSI"
        assert r3["label"] == "inspired by"

    def test_builds_on_drawn_old_to_new(self, sample_relationships):
        from papermap.graph import to_relationship_edges

        edges = {e["id"]: e for e in to_relationship_edges(sample_relationships)}
        assert (edges["r1"]["source"], edges["r1"]["target"]) == ("csinet", "crnet")

    def test_one_edge_per_relationship(self, sample_relationships):
        from papermap.graph import to_relationship_edges

        assert len(to_relationship_edges(sample_relationships)) == len(sample_relationships)


class TestBuildGraph:
    def test_builds_graph_structure(self, sample_papers, sample_relationships):
        from papermap.graph import build_graph

        graph = build_graph(sample_papers, sample_relationships)
        assert set(graph) == {"metadata", "nodes", "edges"}
        assert graph["metadata"]["total_papers"] == 6
        assert graph["metadata"]["total_relationships"] == 7
        assert len(graph["nodes"]) == 6
        assert len(graph["edges"]) == 7

    def test_positions_follow_edge_direction(self, sample_papers, sample_relationships):
        from papermap.graph import build_graph

        graph = build_graph(sample_papers, sample_relationships)
        y = {n["id"]: n["position"]["y"] for n in graph["nodes"]}
        for e in graph["edges"]:
            if e["source"] in y and e["target"] in y:
                assert y[e["source"]] < y[e["target"]]

    def test_left_to_right(self, triangle_papers, triangle_relationships):
        from papermap.graph import build_graph

        graph = build_graph(triangle_papers, triangle_relationships, direction="LR")
        x = {n["id"]: n["position"]["x"] for n in graph["nodes"]}
        assert x["A"] < x["B"]
        assert x["A"] < x["C"]
        assert graph["metadata"]["direction"] == "LR"

    def test_idempotent(self, sample_papers, sample_relationships):
        from papermap.graph import build_graph

        first = build_graph(sample_papers, sample_relationships)
        second = build_graph(sample_papers, sample_relationships)
        assert first == second

    def test_empty_corpus(self):
        from papermap.graph import build_graph

        graph = build_graph([], [])
        assert graph["nodes"] == []
        assert graph["edges"] == []

    def test_invalid_direction(self, sample_papers):
        from papermap.graph import build_graph

        with pytest.raises(ValueError):
            build_graph(sample_papers, [], direction="BT")

    def test_layout_options_pass_through(self, triangle_papers, triangle_relationships):
        from papermap.graph import build_graph

        graph = build_graph(triangle_papers, triangle_relationships, margin=0)
        positions = [n["position"] for n in graph["nodes"]]
        assert min(p["x"] for p in positions) == 0
        assert min(p["y"] for p in positions) == 0
