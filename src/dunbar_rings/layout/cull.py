"""Viewport culling under a hard render budget."""

import math
from collections.abc import Iterable, Set
from dataclasses import dataclass

from .grouping import Contact
from .positions import Position


@dataclass(frozen=True)
class ViewportState:
    """The caller's visible window. Snapshotted per call, never mutated."""

    center_x: float = 450
    center_y: float = 450
    visible_radius: float = 500
    scale: float = 1

    def __post_init__(self) -> None:
        if self.visible_radius < 0:
            raise ValueError(f"visible_radius must be >= 0, got {self.visible_radius}")
        if self.scale <= 0:
            raise ValueError(f"scale must be > 0, got {self.scale}")

    def distance_to(self, x: float, y: float) -> float:
        return math.hypot(x - self.center_x, y - self.center_y)


@dataclass(frozen=True)
class RenderBudget:
    """Limits that decide when and how hard to cull."""

    threshold: int = 100  # Contacts at or above this count use the virtualized path
    fringe_buffer: float = 20
    max_rendered_items: int = 200
    hysteresis: bool = False  # Keep previously rendered items out to 2x fringe

    def __post_init__(self) -> None:
        if self.threshold < 0:
            raise ValueError(f"threshold must be >= 0, got {self.threshold}")
        if self.fringe_buffer < 0:
            raise ValueError(f"fringe_buffer must be >= 0, got {self.fringe_buffer}")
        if self.max_rendered_items < 0:
            raise ValueError(
                f"max_rendered_items must be >= 0, got {self.max_rendered_items}"
            )


@dataclass(frozen=True)
class RenderedItem:
    """A contact slated for drawing."""

    contact: Contact
    x: float
    y: float
    angle: float = 0.0
    ring_id: str | None = None


def cull_positions(
    laid_out: Iterable[tuple[Contact, Position, str]],
    viewport: ViewportState,
    budget: RenderBudget,
    previous_ids: Set[str] | None = None,
) -> list[RenderedItem]:
    """Select the positions to draw for a viewport.

    A point is a candidate when its distance from the viewport center is at
    most visible_radius + fringe_buffer. With budget.hysteresis set, points in
    previous_ids stay candidates out to visible_radius + 2 * fringe_buffer.
    When candidates exceed max_rendered_items, the closest ones are kept
    (stable sort, so equal distances keep layout order).

    Args:
        laid_out: (contact, position, ring_id) triples across all rings.
        viewport: Snapshot of the viewport.
        budget: Render budget.
        previous_ids: Contact ids drawn by the previous virtualized pass.

    Returns:
        Surviving items; at most max_rendered_items long.
    """
    limit = viewport.visible_radius + budget.fringe_buffer
    sticky_limit = viewport.visible_radius + 2 * budget.fringe_buffer
    sticky = previous_ids if budget.hysteresis and previous_ids else frozenset()

    candidates: list[tuple[float, RenderedItem]] = []
    for contact, pos, ring_id in laid_out:
        distance = viewport.distance_to(pos.x, pos.y)
        if distance <= limit or (contact.id in sticky and distance <= sticky_limit):
            item = RenderedItem(contact, pos.x, pos.y, pos.angle, ring_id)
            candidates.append((distance, item))

    if len(candidates) > budget.max_rendered_items:
        candidates.sort(key=lambda c: c[0])
        candidates = candidates[: budget.max_rendered_items]

    return [item for _, item in candidates]
