"""Render sinks that materialize a rendered set as visual elements."""

import html
import json
import logging
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Protocol

from .cull import RenderedItem
from .grouping import Contact
from .rings import RingDefinition

logger = logging.getLogger(__name__)

CONTACT_PALETTE = (
    "#8b5cf6",
    "#3b82f6",
    "#10b981",
    "#f59e0b",
    "#ef4444",
    "#ec4899",
    "#6366f1",
    "#14b8a6",
    "#f97316",
    "#84cc16",
)
DEFAULT_CONTACT_COLOR = "#9ca3af"


class RenderSink(Protocol):
    """Draws a rendered set. Owns no layout logic."""

    def is_ready(self) -> bool:
        """Whether the drawing surface exists and can be written to."""
        ...

    def draw(
        self,
        items: Sequence[RenderedItem],
        rings: Sequence[RingDefinition],
        center: tuple[float, float],
        groups: Mapping[str, str],
    ) -> None:
        """Replace whatever was drawn before with items."""
        ...


def initials(name: str | None) -> str:
    """Two-letter label for a contact dot.

    Single-word names use their first two letters; longer names use the first
    letter of the first and last words. Missing names give "?".
    """
    if not name or not name.strip():
        return "?"
    parts = name.split()
    if len(parts) == 1:
        return parts[0][:2].upper()
    return (parts[0][0] + parts[-1][0]).upper()


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value >= 0x80000000 else value


def contact_color(contact: Contact) -> str:
    """Explicit contact colour, else a palette colour stable for the name."""
    if contact.color:
        return contact.color
    if not contact.name:
        return DEFAULT_CONTACT_COLOR

    # h = c + (h << 5) - h over UTF-16 code units, only the shift wraps to 32 bits
    data = contact.name.encode("utf-16-le")
    h = 0
    for i in range(0, len(data), 2):
        unit = int.from_bytes(data[i : i + 2], "little")
        h = unit + _to_int32(_to_int32(h) << 5) - h
    return CONTACT_PALETTE[abs(h) % len(CONTACT_PALETTE)]


def _tooltip(
    item: RenderedItem,
    rings: Mapping[str, RingDefinition],
    groups: Mapping[str, str],
) -> str:
    contact = item.contact
    lines = [html.escape(contact.name or contact.id)]
    ring = rings.get(item.ring_id) if item.ring_id else None
    if ring:
        lines.append(ring.name)
    if contact.groups:
        names = [html.escape(groups.get(g, g)) for g in contact.groups]
        lines.append("Groups: " + ", ".join(names))
    return "\n".join(lines)


class HtmlRenderSink:
    """Writes the diagram as an interactive pyvis HTML page.

    Nodes are fixed at their computed positions with physics disabled; ring
    circles are painted on the canvas behind them.
    """

    def __init__(self, output_path: Path, dot_size: int = 20) -> None:
        self.output_path = Path(output_path)
        self.dot_size = dot_size
        self.draw_count = 0

    def is_ready(self) -> bool:
        # pyvis only writes .html files
        return self.output_path.suffix == ".html" and self.output_path.parent.is_dir()

    def draw(
        self,
        items: Sequence[RenderedItem],
        rings: Sequence[RingDefinition],
        center: tuple[float, float],
        groups: Mapping[str, str],
    ) -> None:
        from pyvis.network import Network

        ring_lookup = {ring.id: ring for ring in rings}

        net = Network(
            height="100vh",
            width="100%",
            bgcolor="#ffffff",
            cdn_resources="remote",
        )
        net.toggle_physics(False)

        for item in items:
            contact = item.contact
            net.add_node(
                contact.id,
                label=initials(contact.name),
                title=_tooltip(item, ring_lookup, groups),
                x=item.x,
                y=item.y,
                fixed=True,
                shape="circle",
                color={"background": contact_color(contact), "border": "#ffffff"},
                borderWidth=3,
                size=self.dot_size,
                font={"color": "#ffffff", "size": 14, "face": "sans-serif"},
            )

        net.set_options("""
        {
            "physics": {"enabled": false},
            "interaction": {
                "navigationButtons": true,
                "zoomView": true,
                "dragView": true,
                "dragNodes": false,
                "hover": true,
                "tooltipDelay": 100
            },
            "nodes": {
                "borderWidth": 3,
                "borderWidthSelected": 4,
                "shadow": {"enabled": true, "size": 6, "y": 2}
            }
        }
        """)

        net.save_graph(str(self.output_path))
        _inject_ring_script(self.output_path, rings, center)
        self.draw_count += 1
        logger.debug("Wrote %d contact(s) to %s", len(items), self.output_path)


def _inject_ring_script(
    output_file: Path,
    rings: Sequence[RingDefinition],
    center: tuple[float, float],
) -> None:
    """Paint ring circles and labels behind the nodes.

    Args:
        output_file: Path to the HTML file to modify.
        rings: Rings to draw, any order.
        center: (x, y) of the layout center in network coordinates.
    """
    with open(output_file, "r") as f:
        page = f.read()

    ring_data = [
        {"id": r.id, "name": r.name, "radius": r.radius, "color": r.color}
        for r in sorted(rings, key=lambda r: -r.radius)  # Outermost first
    ]
    ring_json = json.dumps(ring_data)
    center_json = json.dumps(list(center))

    custom_script = f"""
    <script type="text/javascript">
    var ringData = {ring_json};
    var ringCenter = {center_json};

    document.addEventListener('DOMContentLoaded', function() {{
        setTimeout(function() {{
            if (typeof network === 'undefined') return;

            network.on('beforeDrawing', function(ctx) {{
                ringData.forEach(function(ring) {{
                    ctx.save();
                    ctx.globalAlpha = 0.3;
                    ctx.strokeStyle = ring.color;
                    ctx.lineWidth = 2;
                    ctx.beginPath();
                    ctx.arc(ringCenter[0], ringCenter[1], ring.radius, 0, 2 * Math.PI);
                    ctx.stroke();
                    ctx.globalAlpha = 0.8;
                    ctx.fillStyle = ring.color;
                    ctx.font = '600 12px sans-serif';
                    ctx.textAlign = 'center';
                    ctx.fillText(ring.name, ringCenter[0], ringCenter[1] - ring.radius - 15);
                    ctx.restore();
                }});
            }});
            network.redraw();
        }}, 500);
    }});
    </script>
    """

    page = page.replace("</body>", custom_script + "</body>")

    with open(output_file, "w") as f:
        f.write(page)
