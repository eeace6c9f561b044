"""Concentric closeness rings (Dunbar circles) and their display radii."""

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class RingDefinition:
    """One closeness tier drawn as a circle around the layout center."""

    id: str
    name: str
    radius: float
    color: str
    recommended_size: int
    max_size: int


# Innermost to outermost
DEFAULT_RINGS: tuple[RingDefinition, ...] = (
    RingDefinition("inner", "Inner Circle", 80, "#8b5cf6", 5, 5),
    RingDefinition("close", "Close Friends", 160, "#3b82f6", 15, 15),
    RingDefinition("active", "Active Friends", 240, "#10b981", 50, 50),
    RingDefinition("casual", "Casual Network", 320, "#f59e0b", 150, 150),
    RingDefinition("acquaintance", "Acquaintances", 400, "#6b7280", 500, 1000),
)

RING_ORDER: tuple[str, ...] = tuple(ring.id for ring in DEFAULT_RINGS)


@dataclass(frozen=True)
class RingCapacity:
    """How full a ring is compared to its recommended and maximum size."""

    ring_id: str
    current_size: int
    recommended_size: int
    max_size: int
    status: str  # "over", "above" or "optimal"


def rings_by_id(
    rings: tuple[RingDefinition, ...] = DEFAULT_RINGS,
) -> dict[str, RingDefinition]:
    """Index ring definitions by id, keeping innermost-first order."""
    return {ring.id: ring for ring in rings}


def capacity_status(ring: RingDefinition, current_size: int) -> RingCapacity:
    """Classify a ring's size against its limits.

    Args:
        ring: The ring definition.
        current_size: Number of contacts currently assigned to the ring.

    Returns:
        RingCapacity with status "over" above max_size, "above" above
        recommended_size, otherwise "optimal".
    """
    if current_size > ring.max_size:
        status = "over"
    elif current_size > ring.recommended_size:
        status = "above"
    else:
        status = "optimal"
    return RingCapacity(
        ring_id=ring.id,
        current_size=current_size,
        recommended_size=ring.recommended_size,
        max_size=ring.max_size,
        status=status,
    )


def ring_at_distance(
    distance: float,
    rings: tuple[RingDefinition, ...] = DEFAULT_RINGS,
) -> str | None:
    """Find the ring whose band contains a distance from the center.

    Each ring owns the band between the previous ring's radius and its own
    radius (the innermost ring starts at 0). Boundaries belong to the inner
    ring.

    Args:
        distance: Distance from the layout center.
        rings: Ring table ordered innermost first.

    Returns:
        The ring id, or None when outside the outermost ring.
    """
    inner_radius = 0.0
    for ring in rings:
        if inner_radius <= distance <= ring.radius:
            return ring.id
        inner_radius = ring.radius
    return None


def ring_at_position(
    x: float,
    y: float,
    center: tuple[float, float],
    rings: tuple[RingDefinition, ...] = DEFAULT_RINGS,
) -> str | None:
    """Find the ring under a point, measured from the layout center."""
    return ring_at_distance(math.hypot(x - center[0], y - center[1]), rings)
