"""Graphviz visualization of VM control-flow graphs.

Provides `render_vm_cfg_dot(cfg)` which returns a `graphviz.Digraph` object
(not rendered) for a CFG built by `vm_cfg.build_vm_cfg`. `write_and_render`
writes and renders it to disk, which needs the Graphviz binaries; building
the DOT source does not.

Each basic block is an HTML-like table node with the block label as header
and one row per VM command. Blocks are grouped into one cluster per VM
function.
"""

from typing import Any, Dict, List
import html
import re
from graphviz import Digraph


def _block_html(label: str, statements: List[str]) -> str:
    header = f'<TR><TD><B>{html.escape(label)}</B></TD></TR>'
    rows = "".join(
        f'<TR><TD ALIGN="LEFT"><FONT POINT-SIZE="10">{html.escape(s)}</FONT></TD></TR>'
        for s in statements
    )
    return f'<<TABLE BORDER="0" CELLBORDER="1" CELLSPACING="0">{header}{rows}</TABLE>>'


def _node_id(label: str) -> str:
    # ':' is a port separator in DOT node ids
    return re.sub(r"[^0-9A-Za-z_.$#]", "_", label)


def render_vm_cfg_dot(cfg: Dict[str, Any], fmt: str = "svg") -> Digraph:
    """Return a graphviz.Digraph for the given VM CFG.

    The caller may call `dot.source` to inspect the dot text, or call
    `dot.render(filename, format=...)` to write files (requires Graphviz installed).
    """
    dot = Digraph(format=fmt)
    dot.attr("graph", rankdir="TB")

    groups: Dict[Any, List[Dict[str, Any]]] = {}
    for b in cfg.get("blocks", []):
        groups.setdefault(b.get("function"), []).append(b)

    for func, blocks in groups.items():
        cluster_name = (
            f"cluster_{re.sub(r'[^0-9A-Za-z_]', '_', func) if func else 'global'}"
        )
        with dot.subgraph(name=cluster_name) as c:
            c.attr(label=f"function: {func}" if func else "")
            c.attr(style="rounded")
            for b in blocks:
                c.node(
                    _node_id(b["label"]),
                    label=_block_html(b["label"], b["statements"]),
                    shape="plaintext",
                )

    for b in cfg.get("blocks", []):
        for succ in b.get("out_edges", []):
            dot.edge(_node_id(b["label"]), _node_id(succ))

    return dot


def write_and_render(cfg: Dict[str, Any], out_path: str, fmt: str = "svg") -> None:
    """Write and render the CFG to the given path (without extension).

    Example: write_and_render(cfg, 'out/cfg', fmt='png') will create out/cfg.png
    (requires Graphviz)."""
    dot = render_vm_cfg_dot(cfg, fmt=fmt)
    # render appends the extension
    dot.render(out_path, cleanup=True)
