"""Layered (hierarchical) layout for the paper graph, built on networkx.

Nodes are assigned to ranks along edge direction, ordered within each rank
to reduce crossings, then given fixed-size boxes. Returned positions are
the top-left corner of each box (center minus half the size).
"""

import logging

import networkx as nx

from .config import (
    LAYOUT_DIRECTIONS,
    LAYOUT_MARGIN,
    NODE_HEIGHT,
    NODE_SPACING,
    NODE_WIDTH,
    ORDER_SWEEPS,
    RANK_SPACING,
)

logger = logging.getLogger(__name__)


def build_layout_graph(nodes, edges):
    """Directed graph of the drawable edges between known nodes."""
    graph = nx.DiGraph()
    graph.add_nodes_from(n["id"] for n in nodes)
    for e in edges:
        src, tgt = e["source"], e["target"]
        if src == tgt:
            continue
        if src not in graph or tgt not in graph:
            logger.debug("Edge %s references a node outside the layout", e.get("id"))
            continue
        graph.add_edge(src, tgt)
    return graph


def break_cycles(graph):
    """Return an acyclic copy of graph and the list of removed edges.

    Repeatedly finds a cycle and drops the edge that closes it.
    """
    acyclic = graph.copy()
    removed = []
    while True:
        try:
            cycle = nx.find_cycle(acyclic)
        except nx.NetworkXNoCycle:
            return acyclic, removed
        u, v = cycle[-1][:2]
        acyclic.remove_edge(u, v)
        removed.append((u, v))
        logger.debug("Broke cycle at edge %s -> %s", u, v)


def assign_ranks(acyclic):
    """Rank = topological generation (longest path from any source)."""
    ranks = {}
    for rank, generation in enumerate(nx.topological_generations(acyclic)):
        for node in generation:
            ranks[node] = rank
    return ranks


def count_crossings(layers, graph):
    """Number of crossing edge pairs between adjacent layers."""
    total = 0
    for upper, lower in zip(layers, layers[1:]):
        upper_pos = {n: i for i, n in enumerate(upper)}
        lower_pos = {n: i for i, n in enumerate(lower)}
        segments = []
        for u in upper:
            for v in set(graph.successors(u)) | set(graph.predecessors(u)):
                if v in lower_pos:
                    segments.append((upper_pos[u], lower_pos[v]))
        for i, (a1, b1) in enumerate(segments):
            for a2, b2 in segments[i + 1:]:
                if (a1 - a2) * (b1 - b2) < 0:
                    total += 1
    return total


def _centered_offsets(layers):
    offsets = {}
    for layer in layers:
        middle = (len(layer) - 1) / 2
        for i, node in enumerate(layer):
            offsets[node] = i - middle
    return offsets


def _sweep(layers, graph, ranks, downward):
    """Reorder each layer by the barycenter of its neighbors on the
    already-placed side."""
    order = range(1, len(layers)) if downward else range(len(layers) - 2, -1, -1)
    for r in order:
        offsets = _centered_offsets(layers)
        layer = layers[r]

        def barycenter(node):
            neighbors = set(graph.successors(node)) | set(graph.predecessors(node))
            placed = [offsets[n] for n in neighbors
                      if (ranks[n] < r if downward else ranks[n] > r)]
            if not placed:
                return offsets[node]
            return sum(placed) / len(placed)

        layers[r] = sorted(layer, key=barycenter)


def order_layers(graph, ranks, input_order):
    """Group nodes by rank and reduce crossings with barycenter sweeps.

    The best ordering seen (fewest crossings) is kept; ties keep the
    earlier ordering, which starts from input order.
    """
    depth = max(ranks.values()) + 1 if ranks else 0
    layers = [[] for _ in range(depth)]
    for node in sorted(ranks, key=input_order.__getitem__):
        layers[ranks[node]].append(node)

    best = [list(layer) for layer in layers]
    best_crossings = count_crossings(best, graph)
    for _ in range(ORDER_SWEEPS):
        if best_crossings == 0:
            break
        _sweep(layers, graph, ranks, downward=True)
        _sweep(layers, graph, ranks, downward=False)
        crossings = count_crossings(layers, graph)
        if crossings < best_crossings:
            best = [list(layer) for layer in layers]
            best_crossings = crossings
    return best


def apply_layered_layout(nodes, edges, direction="TB", node_spacing=NODE_SPACING,
                         rank_spacing=RANK_SPACING, margin=LAYOUT_MARGIN):
    """Return copies of nodes with a "position" computed by layered layout.

    Args:
        nodes: node dicts with "id" (and optionally "size")
        edges: edge dicts with "source" and "target"
        direction: "TB" (ranks top to bottom) or "LR" (left to right)
        node_spacing: gap between neighbouring nodes in a rank
        rank_spacing: gap between ranks
        margin: outer margin on every side
    """
    if direction not in LAYOUT_DIRECTIONS:
        raise ValueError(f"Unknown layout direction: {direction!r}")
    if not nodes:
        return []

    graph = build_layout_graph(nodes, edges)
    acyclic, removed = break_cycles(graph)
    if removed:
        logger.debug("Removed %d edges to break cycles", len(removed))
    ranks = assign_ranks(acyclic)
    input_order = {n["id"]: i for i, n in enumerate(nodes)}
    layers = order_layers(graph, ranks, input_order)

    if direction == "TB":
        along, across = NODE_HEIGHT, NODE_WIDTH
    else:
        along, across = NODE_WIDTH, NODE_HEIGHT

    widest = max(len(layer) for layer in layers)
    span = widest * across + (widest - 1) * node_spacing

    centers = {}
    for rank, layer in enumerate(layers):
        layer_span = len(layer) * across + (len(layer) - 1) * node_spacing
        start = margin + (span - layer_span) / 2
        rank_center = margin + rank * (along + rank_spacing) + along / 2
        for i, node in enumerate(layer):
            across_center = start + i * (across + node_spacing) + across / 2
            if direction == "TB":
                centers[node] = (across_center, rank_center)
            else:
                centers[node] = (rank_center, across_center)

    positioned = []
    for node in nodes:
        size = node.get("size") or {"width": NODE_WIDTH, "height": NODE_HEIGHT}
        cx, cy = centers[node["id"]]
        positioned.append({
            **node,
            "position": {
                "x": cx - size["width"] / 2,
                "y": cy - size["height"] / 2,
            },
        })
    return positioned
