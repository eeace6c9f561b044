"""Circular contact visualizer: ring layout, render-mode choice and culling."""

import logging
import time
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from .layout import (
    DEFAULT_RINGS,
    Contact,
    GroupingResult,
    RenderBudget,
    RenderedItem,
    RenderMode,
    RenderSink,
    RingCapacity,
    RingDefinition,
    ViewportState,
    capacity_status,
    cull_positions,
    filter_by_group,
    group_by_ring,
    layout_rings,
    normalize_contacts,
    ring_at_position,
    rings_by_id,
    select_render_mode,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PerformanceMetrics:
    """Diagnostics for the most recent render pass."""

    total_contacts: int
    rendered_contacts: int
    last_render_time_ms: float
    render_count: int
    virtualization_active: bool
    dropped_contacts: int = 0


def _group_names(groups: Iterable | None) -> dict[str, str]:
    """Map group id -> display name from raw group records or plain ids."""
    names: dict[str, str] = {}
    for group in groups or ():
        if isinstance(group, Mapping):
            group_id = str(group.get("id", ""))
            names[group_id] = str(group.get("name") or group_id)
        else:
            names[str(group)] = str(group)
    return names


class CircularVisualizer:
    """Places contacts on concentric rings and draws them through a sink.

    The instance is handed explicitly to whatever needs it; it keeps no
    module-level state. Calls are expected to be serialized by the caller.

    Args:
        sink: Drawing target. May be None until attach_sink() is called.
        budget: Render budget; constant for the instance.
        viewport: Initial viewport.
        rings: Ring table, innermost first.
        layout_center: Logical center the rings are drawn around.
        virtualization_enabled: False always uses the full path.
        group_filter: Only lay out members of this group id.
    """

    def __init__(
        self,
        sink: RenderSink | None = None,
        budget: RenderBudget | None = None,
        viewport: ViewportState | None = None,
        rings: tuple[RingDefinition, ...] = DEFAULT_RINGS,
        layout_center: tuple[float, float] = (450, 450),
        virtualization_enabled: bool = True,
        group_filter: str | None = None,
    ) -> None:
        self.sink = sink
        self.budget = budget or RenderBudget()
        self.viewport = viewport or ViewportState()
        self.rings = rings
        self.layout_center = layout_center
        self.virtualization_enabled = virtualization_enabled

        self._ring_lookup = rings_by_id(rings)
        self._contacts: list[Contact] = []
        self._group_names: dict[str, str] = {}
        self._grouping = GroupingResult(by_ring={ring.id: [] for ring in rings})
        self._laid_out: list = []
        self._group_filter = group_filter

        self._rendered: dict[str, RenderedItem] = {}
        self._last_drawn = 0
        self._render_count = 0
        self._last_render_time_ms = 0.0

    def attach_sink(self, sink: RenderSink) -> None:
        self.sink = sink

    @property
    def mode(self) -> RenderMode:
        return select_render_mode(
            len(self._contacts), self.budget, self.virtualization_enabled
        )

    @property
    def rendered_items(self) -> list[RenderedItem]:
        """Items drawn by the last virtualized pass (empty after a full pass)."""
        return list(self._rendered.values())

    def render(
        self,
        contacts: Iterable[Contact | Mapping] | None,
        groups: Iterable | None = None,
    ) -> list[RenderedItem]:
        """Rebuild grouping and layout, pick a render path and draw.

        Args:
            contacts: Contact objects or raw mappings, in display order.
            groups: Optional group records ({"id", "name"}) or ids, passed
                through to the sink for labels.

        Returns:
            The items handed to the sink; empty if the sink is not ready.
        """
        if not self._sink_ready():
            return []

        start = time.perf_counter()
        self._contacts = normalize_contacts(contacts)
        self._group_names = _group_names(groups)
        self._grouping = group_by_ring(self._contacts, self._ring_lookup)
        self._relayout()
        return self._draw(start)

    def update_viewport(
        self,
        center_x: float,
        center_y: float,
        visible_radius: float,
        scale: float = 1,
    ) -> list[RenderedItem]:
        """Move the viewport and redraw when the culled path applies.

        Ring grouping and layout are reused; only culling reruns. On the full
        path nothing depends on the viewport, so nothing is redrawn. A negative
        visible_radius is clamped to 0 and a non-positive scale keeps the
        previous scale.

        Returns:
            The items drawn, or an empty list when no redraw happened.
        """
        if visible_radius < 0:
            logger.warning("Negative visible radius %s clamped to 0", visible_radius)
            visible_radius = 0
        if scale <= 0:
            logger.warning("Ignoring scale %s, keeping %s", scale, self.viewport.scale)
            scale = self.viewport.scale
        self.viewport = ViewportState(center_x, center_y, visible_radius, scale)
        if self.mode is not RenderMode.VIRTUALIZED:
            return []
        if not self._sink_ready():
            return []
        return self._draw(time.perf_counter())

    def show_group_filter(self, group_id: str) -> list[RenderedItem]:
        """Lay out only members of group_id and redraw.

        Nothing changes when the sink is not ready.
        """
        return self._redraw_filtered(group_id)

    def clear_group_filter(self) -> list[RenderedItem]:
        """Lay out every contact again and redraw."""
        return self._redraw_filtered(None)

    def get_ring_distribution(self) -> dict[str, int]:
        """Contacts per ring after grouping, before any filter or cull."""
        return self._grouping.distribution()

    def get_group_distribution(self, group_id: str) -> dict[str, dict[str, float]]:
        """Per-ring count and rounded percentage for members of a group."""
        members = filter_by_group(self._grouping, group_id).distribution()
        total = sum(members.values())
        return {
            ring_id: {
                "count": count,
                "percentage": round(count / total * 100) if total else 0,
            }
            for ring_id, count in members.items()
        }

    def get_ring_capacity(self, ring_id: str) -> RingCapacity:
        """Capacity status of one ring. Raises KeyError for unknown rings."""
        ring = self._ring_lookup[ring_id]
        return capacity_status(ring, len(self._grouping.by_ring.get(ring_id, ())))

    def ring_at_position(self, x: float, y: float) -> str | None:
        return ring_at_position(x, y, self.layout_center, self.rings)

    def get_performance_metrics(self) -> PerformanceMetrics:
        return PerformanceMetrics(
            total_contacts=len(self._contacts),
            rendered_contacts=self._last_drawn,
            last_render_time_ms=self._last_render_time_ms,
            render_count=self._render_count,
            virtualization_active=self.mode is RenderMode.VIRTUALIZED,
            dropped_contacts=len(self._grouping.dropped),
        )

    def _sink_ready(self) -> bool:
        if self.sink is None:
            logger.error("No render target attached; skipping render")
            return False
        if not self.sink.is_ready():
            logger.error("Render target %r is not ready; skipping render", self.sink)
            return False
        return True

    def _relayout(self) -> None:
        grouping = self._grouping
        if self._group_filter is not None:
            grouping = filter_by_group(grouping, self._group_filter)
        self._laid_out = layout_rings(grouping.by_ring, self._ring_lookup, self.layout_center)

    def _redraw_filtered(self, group_filter: str | None) -> list[RenderedItem]:
        if not self._sink_ready():
            return []
        self._group_filter = group_filter
        self._relayout()
        return self._draw(time.perf_counter())

    def _draw(self, start: float) -> list[RenderedItem]:
        mode = self.mode
        if mode is RenderMode.VIRTUALIZED:
            items = cull_positions(
                self._laid_out,
                self.viewport,
                self.budget,
                previous_ids=self._rendered.keys(),
            )
            # Keyed by id: duplicate ids share one cache slot
            self._rendered = {item.contact.id: item for item in items}
        else:
            items = [
                RenderedItem(contact, pos.x, pos.y, pos.angle, ring_id)
                for contact, pos, ring_id in self._laid_out
            ]
            self._rendered = {}

        self.sink.draw(items, self.rings, self.layout_center, self._group_names)

        self._last_drawn = len(items)
        self._last_render_time_ms = (time.perf_counter() - start) * 1000
        self._render_count += 1
        logger.debug(
            "Rendered %d of %d contact(s) (%s) in %.2f ms",
            len(items),
            len(self._contacts),
            mode.value,
            self._last_render_time_ms,
        )
        return items
