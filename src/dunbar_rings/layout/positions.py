"""Even angular placement of contacts around their ring."""

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from .grouping import Contact
from .rings import RingDefinition

# Index 0 sits at the top of the ring
START_ANGLE = -math.pi / 2


@dataclass(frozen=True)
class Position:
    """Where a contact sits on the diagram. Replaced on every layout pass."""

    contact_id: str
    x: float
    y: float
    angle: float


def compute_ring_positions(
    contacts: Sequence[Contact],
    radius: float,
    center: tuple[float, float],
) -> list[Position]:
    """Spread contacts evenly around a circle, starting from the top.

    Placement follows input order; contacts are never re-sorted, so the same
    input order always yields the same layout.

    Args:
        contacts: Contacts assigned to one ring, in display order.
        radius: Ring radius.
        center: (x, y) of the layout center.

    Returns:
        One Position per contact, parallel to the input.
    """
    count = len(contacts)
    if count == 0:
        return []

    center_x, center_y = center
    angle_step = 2 * math.pi / count

    positions: list[Position] = []
    for i, contact in enumerate(contacts):
        angle = START_ANGLE + i * angle_step
        positions.append(
            Position(
                contact_id=contact.id,
                x=center_x + radius * math.cos(angle),
                y=center_y + radius * math.sin(angle),
                angle=angle,
            )
        )
    return positions


def layout_rings(
    by_ring: Mapping[str, Sequence[Contact]],
    rings: Mapping[str, RingDefinition],
    center: tuple[float, float],
) -> list[tuple[Contact, Position, str]]:
    """Lay out every ring bucket.

    Args:
        by_ring: Ring id -> contacts, as produced by group_by_ring.
        rings: Ring id -> definition. Buckets for unknown rings are skipped.
        center: (x, y) of the layout center.

    Returns:
        (contact, position, ring_id) triples, ring by ring in bucket order.
    """
    laid_out: list[tuple[Contact, Position, str]] = []
    for ring_id, contacts in by_ring.items():
        ring = rings.get(ring_id)
        if ring is None:
            continue
        positions = compute_ring_positions(contacts, ring.radius, center)
        laid_out.extend(
            (contact, pos, ring_id) for contact, pos in zip(contacts, positions)
        )
    return laid_out
