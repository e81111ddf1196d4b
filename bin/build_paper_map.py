#!/usr/bin/env python3
"""
build_paper_map.py — Build the paper relationship map from a corpus file.

Given a corpus JSON file ({"papers": [...], "relationships": [...]}), this script:
1. Loads and normalizes the corpus (inspires -> inspired_by, duplicates dropped)
2. Lays out the relationship graph
3. Writes paper_map.json and an interactive paper_map.html
4. Prints the review queue, and connections/bridges for one paper if asked

Usage:
    python3 build_paper_map.py --corpus <file.json>                 # Build map
    python3 build_paper_map.py --corpus <file.json> --out <dir>     # Choose output dir
    python3 build_paper_map.py --corpus <file.json> --direction LR  # Left-to-right layout
    python3 build_paper_map.py --corpus <file.json> --paper <id>    # Inspect one paper
    python3 build_paper_map.py --corpus <file.json> --no-browser    # Don't open the page
"""

import json
import logging
import sys
from pathlib import Path

from papermap.bridges import build_bridge_recommendations
from papermap.config import DEFAULT_DIRECTION
from papermap.connections import build_paper_connections
from papermap.graph import build_graph
from papermap.ingest import CorpusError, load_corpus
from papermap.insights import most_connected_paper, summarize_corpus
from papermap.relationships import summarize_relationship
from papermap.review import build_review_queue
from papermap.visualize import generate_html


def print_paper_report(paper_id, papers, relationships):
    titles = {p["id"]: p["title"] for p in papers}
    if paper_id not in titles:
        print(f"Error: no paper with id {paper_id}")
        sys.exit(1)

    print(f"\n{'='*60}")
    print(f"CONNECTIONS OF {titles[paper_id][:45]}")
    print(f"{'='*60}")
    connections = build_paper_connections(paper_id, papers, relationships)
    if not connections:
        print("  (none)")
    for c in connections:
        rel = c["relationship"]
        label = summarize_relationship(rel["relationship_type"], c["direction"])
        print(f"  {label:15s} {c['other_paper']['title'][:45]:45s} ({rel['strength']}/10)")

    print(f"\n{'='*60}")
    print("BRIDGE RECOMMENDATIONS")
    print(f"{'='*60}")
    bridges = build_bridge_recommendations(paper_id, papers, relationships)
    if not bridges:
        print("  (none)")
    for b in bridges:
        print(f"  {b['score']:6.2f}  {b['paper']['title'][:50]}")
        print(f"          {'; '.join(b['reasons'])}")


def main():
    args = sys.argv[1:]

    corpus_path = None
    out_dir = None
    direction = DEFAULT_DIRECTION
    paper_id = None
    open_browser = True

    i = 0
    while i < len(args):
        if args[i] == '--corpus' and i + 1 < len(args):
            corpus_path = Path(args[i + 1])
            i += 2
        elif args[i] == '--out' and i + 1 < len(args):
            out_dir = Path(args[i + 1])
            i += 2
        elif args[i] == '--direction' and i + 1 < len(args):
            direction = args[i + 1].upper()
            i += 2
        elif args[i] == '--paper' and i + 1 < len(args):
            paper_id = args[i + 1]
            i += 2
        elif args[i] == '--no-browser':
            open_browser = False
            i += 1
        else:
            i += 1

    if corpus_path is None:
        print("Error: --corpus <file.json> is required")
        print(__doc__)
        sys.exit(1)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    try:
        papers, relationships = load_corpus(corpus_path)
    except CorpusError as e:
        print(f"Error: {e}")
        sys.exit(1)

    if out_dir is None:
        out_dir = corpus_path.parent
    out_dir.mkdir(parents=True, exist_ok=True)
    graph_file = out_dir / "paper_map.json"
    html_file = out_dir / "paper_map.html"

    try:
        graph = build_graph(papers, relationships, direction=direction)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    with open(graph_file, 'w') as f:
        json.dump(graph, f, indent=2)

    title = f"Paper Map ({len(papers)} papers, {len(relationships)} relationships)"
    html, n_nodes, n_links = generate_html(graph, title)
    with open(html_file, 'w') as f:
        f.write(html)

    summary = summarize_corpus(papers, relationships)
    print(f"\nPaper map saved to {graph_file}")
    print(f"  {summary['total_papers']} papers")
    print(f"  {summary['total_relationships']} relationships")
    print(f"  {summary['needing_review']} papers needing review")
    print(f"\nVisualization: {n_nodes} nodes, {n_links} edges -> {html_file}")

    hub = most_connected_paper(papers, relationships)
    if hub is not None:
        print(f"Most connected: {hub['title']}")

    print(f"\n{'='*60}")
    print("REVIEW QUEUE")
    print(f"{'='*60}")
    for entry in build_review_queue(papers):
        p = entry["paper"]
        print(f"  {p['title'][:45]:45s}  {p.get('year', ''):>4}  {entry['reason']}")

    if paper_id is not None:
        print_paper_report(paper_id, papers, relationships)

    if open_browser:
        import webbrowser
        webbrowser.open(f"file://{html_file.resolve()}")


if __name__ == "__main__":
    main()
