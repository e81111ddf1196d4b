"""Generate a standalone HTML page for a positioned paper graph."""

import html as html_lib
import json

from .config import CATEGORY_COLORS, CATEGORY_LABELS, RELATIONSHIP_TYPES


def prepare_viz_data(graph):
    """Flatten a build_graph() result into what the page script draws.

    Node positions are top-left corners; the page draws boxes from them.
    """
    nodes = []
    for n in graph["nodes"]:
        paper = n["data"]["paper"]
        nodes.append({
            "id": n["id"],
            "x": n["position"]["x"],
            "y": n["position"]["y"],
            "width": n["size"]["width"],
            "height": n["size"]["height"],
            "title": paper.get("title", n["id"]),
            "authors": ", ".join(paper.get("authors") or []),
            "year": paper.get("year"),
            "category": paper.get("category", "other"),
            "color": n["data"]["color"],
            "familiarity": n["data"].get("familiarity_level") or "not_started",
            "favorite": n["data"].get("is_favorite", False),
        })

    node_ids = {n["id"] for n in nodes}
    links = []
    for e in graph["edges"]:
        if e["source"] not in node_ids or e["target"] not in node_ids:
            continue
        links.append({
            "id": e["id"],
            "source": e["source"],
            "target": e["target"],
            "label": e["label"],
            "color": e["color"],
            "dash": e["dash"],
            "width": e["width"],
            "description": e.get("description") or "",
        })
    return {"nodes": nodes, "links": links}


def generate_html(graph, title="Paper Map"):
    """Render a build_graph() result as a standalone interactive page.

    Returns:
        (html_string, node_count, link_count)
    """
    viz = prepare_viz_data(graph)
    nodes = viz["nodes"]
    links = viz["links"]
    data = json.dumps({"nodes": nodes, "links": links}).replace("</", "<\\/")
    title = html_lib.escape(title)

    legend_html = "".join(
        f'<div class="legend-item"><span class="legend-dot" style="background:{color}"></span>'
        f'{CATEGORY_LABELS.get(cat, cat)}</div>'
        for cat, color in CATEGORY_COLORS.items()
    ) + "".join(
        f'<div class="legend-item"><span class="legend-line" style="border-color:{info["color"]}"></span>'
        f'{info["label"]}</div>'
        for info in RELATIONSHIP_TYPES.values()
    )

    page = f"""<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{title}</title>
<style>
  body {{ margin: 0; overflow: hidden; background: #f8fafc; font-family: -apple-system, sans-serif; }}
  svg {{ width: 100vw; height: 100vh; }}
  .node rect {{ fill: #fff; stroke-width: 2px; rx: 8; cursor: pointer; }}
  .node text {{ fill: #1e293b; font-size: 13px; pointer-events: none; }}
  .node .meta {{ fill: #64748b; font-size: 11px; }}
  .edge-label {{ font-size: 11px; font-weight: 600; }}
  #tooltip {{
    position: absolute; background: rgba(15,23,42,0.9); color: #eee;
    padding: 10px 14px; border-radius: 6px; font-size: 13px;
    pointer-events: none; display: none; max-width: 350px;
  }}
  #controls {{
    position: absolute; top: 12px; left: 12px; color: #334155;
    font-size: 12px; background: rgba(255,255,255,0.9); padding: 10px;
    border-radius: 6px; border: 1px solid #e2e8f0;
  }}
  #controls input {{ width: 200px; padding: 4px; border: 1px solid #cbd5e1; border-radius: 3px; }}
  #legend {{
    position: absolute; bottom: 12px; left: 12px; color: #334155;
    font-size: 11px; background: rgba(255,255,255,0.9); padding: 10px;
    border-radius: 6px; border: 1px solid #e2e8f0;
  }}
  .legend-item {{ display: flex; align-items: center; margin: 3px 0; }}
  .legend-dot {{ width: 10px; height: 10px; border-radius: 50%;
    margin-right: 6px; display: inline-block; }}
  .legend-line {{ width: 16px; border-top: 2px solid; margin-right: 6px; display: inline-block; }}
  #search-results {{ color: #64748b; margin-top: 4px; font-size: 11px; }}
</style>
</head>
<body>
<div id="tooltip"></div>
<div id="controls">
  <div><strong>{title}</strong></div>
  <div style="margin-top:6px">
    <input type="text" id="search" placeholder="Search papers..."
           oninput="searchNodes(this.value)">
    <div id="search-results"></div>
  </div>
  <div style="margin-top:6px;color:#94a3b8">
    Drag to pan · Scroll to zoom · Click to highlight · Dbl-click to reset
  </div>
</div>
<div id="legend">{legend_html}</div>
<svg>
  <defs>
    <marker id="arrow" viewBox="0 0 10 10" refX="10" refY="5"
            markerWidth="8" markerHeight="8" orient="auto-start-reverse">
      <path d="M 0 0 L 10 5 L 0 10 z" fill="#64748b"></path>
    </marker>
  </defs>
</svg>
<script src="https://d3js.org/d3.v7.min.js"></script>
<script>
const data = {data};
const byId = new Map(data.nodes.map(n => [n.id, n]));
const svg = d3.select("svg");
const g = svg.append("g");
svg.call(d3.zoom().scaleExtent([0.1, 4]).on("zoom", (e) => g.attr("transform", e.transform)));
function cx(n) {{ return n.x + n.width / 2; }}
function cy(n) {{ return n.y + n.height / 2; }}
const link = g.append("g").selectAll("line").data(data.links).join("line")
  .attr("x1", l => cx(byId.get(l.source))).attr("y1", l => cy(byId.get(l.source)))
  .attr("x2", l => cx(byId.get(l.target))).attr("y2", l => cy(byId.get(l.target)))
  .attr("stroke", l => l.color).attr("stroke-width", l => l.width)
  .attr("stroke-dasharray", l => l.dash).attr("marker-end", "url(#arrow)");
const label = g.append("g").selectAll("text").data(data.links).join("text")
  .attr("class", "edge-label").attr("fill", l => l.color).attr("text-anchor", "middle")
  .attr("x", l => (cx(byId.get(l.source)) + cx(byId.get(l.target))) / 2)
  .attr("y", l => (cy(byId.get(l.source)) + cy(byId.get(l.target))) / 2)
  .text(l => l.label);
const node = g.append("g").selectAll("g").data(data.nodes).join("g")
  .attr("class", "node").attr("transform", d => `translate(${{d.x}},${{d.y}})`);
node.append("rect").attr("width", d => d.width).attr("height", d => d.height)
  .attr("stroke", d => d.color);
node.append("text").attr("x", 12).attr("y", 24)
  .text(d => (d.favorite ? "★ " : "") + (d.title.length > 34 ? d.title.slice(0, 33) + "…" : d.title));
node.append("text").attr("class", "meta").attr("x", 12).attr("y", 46)
  .text(d => `${{d.year ?? ""}} · ${{d.category}}`);
node.append("text").attr("class", "meta").attr("x", 12).attr("y", 66)
  .text(d => d.familiarity.replace("_", " "));
const tooltip = d3.select("#tooltip");
node.on("mouseover", (e, d) => {{
  tooltip.style("display", "block").text(`${{d.title}} — ${{d.authors}} (${{d.year ?? "?"}})`);
}}).on("mousemove", (e) => {{
  tooltip.style("left", (e.pageX + 15) + "px").style("top", (e.pageY - 10) + "px");
}}).on("mouseout", () => tooltip.style("display", "none"));
node.on("click", (e, d) => {{
  const nb = new Set([d.id]);
  data.links.forEach(l => {{ if (l.source === d.id) nb.add(l.target); if (l.target === d.id) nb.add(l.source); }});
  node.attr("opacity", n => nb.has(n.id) ? 1 : 0.15);
  link.attr("stroke-opacity", l => l.source === d.id || l.target === d.id ? 1 : 0.08);
  label.attr("opacity", l => l.source === d.id || l.target === d.id ? 1 : 0.08);
}});
svg.on("dblclick", () => {{
  node.attr("opacity", 1); link.attr("stroke-opacity", 1); label.attr("opacity", 1);
}});
function searchNodes(q) {{
  const r = document.getElementById("search-results");
  if (!q) {{ node.attr("opacity", 1); r.textContent = ""; return; }}
  const m = data.nodes.filter(n => n.title.toLowerCase().includes(q.toLowerCase())
    || n.authors.toLowerCase().includes(q.toLowerCase()));
  const ids = new Set(m.map(x => x.id));
  node.attr("opacity", n => ids.has(n.id) ? 1 : 0.15);
  r.textContent = `${{m.length}} matches`;
}}
</script>
</body>
</html>"""
    return page, len(nodes), len(links)
