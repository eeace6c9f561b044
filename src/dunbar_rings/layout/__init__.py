"""Circular ring layout and viewport culling for contact diagrams.

Contacts are placed evenly around fixed concentric rings; large contact sets
are culled to the viewport under a render budget.
"""

from .cull import RenderBudget, RenderedItem, ViewportState, cull_positions
from .grouping import (
    Contact,
    GroupingResult,
    contact_from_mapping,
    filter_by_group,
    group_by_ring,
    normalize_contacts,
)
from .mode import RenderMode, select_render_mode
from .positions import Position, compute_ring_positions, layout_rings
from .render import HtmlRenderSink, RenderSink, contact_color, initials
from .rings import (
    DEFAULT_RINGS,
    RING_ORDER,
    RingCapacity,
    RingDefinition,
    capacity_status,
    ring_at_distance,
    ring_at_position,
    rings_by_id,
)

__all__ = [
    "DEFAULT_RINGS",
    "RING_ORDER",
    "RingDefinition",
    "RingCapacity",
    "rings_by_id",
    "capacity_status",
    "ring_at_distance",
    "ring_at_position",
    "Contact",
    "GroupingResult",
    "contact_from_mapping",
    "normalize_contacts",
    "group_by_ring",
    "filter_by_group",
    "Position",
    "compute_ring_positions",
    "layout_rings",
    "ViewportState",
    "RenderBudget",
    "RenderedItem",
    "cull_positions",
    "RenderMode",
    "select_render_mode",
    "RenderSink",
    "HtmlRenderSink",
    "initials",
    "contact_color",
]
