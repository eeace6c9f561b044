"""Contact normalization and bucketing of contacts into rings."""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from .rings import RING_ORDER

logger = logging.getLogger(__name__)

# Keys a raw contact may use for its ring assignment, first present wins
RING_KEYS = ("ringId", "ring_id", "circle", "dunbarCircle")


@dataclass(frozen=True)
class Contact:
    """A person placed on the diagram. Read-only input to the layout."""

    id: str
    name: str | None = None
    ring_id: str | None = None
    groups: tuple[str, ...] = ()
    color: str | None = None


@dataclass
class GroupingResult:
    """Contacts bucketed by ring, in input order within each ring."""

    by_ring: dict[str, list[Contact]] = field(default_factory=dict)
    dropped: list[Contact] = field(default_factory=list)  # Missing or unknown ring id

    def distribution(self) -> dict[str, int]:
        """Number of contacts per ring id."""
        return {ring_id: len(contacts) for ring_id, contacts in self.by_ring.items()}

    @property
    def placed_count(self) -> int:
        return sum(len(contacts) for contacts in self.by_ring.values())


def contact_from_mapping(raw: Mapping) -> Contact:
    """Build a Contact from a deserialized record.

    Missing fields are tolerated: absent names and ring ids stay None so that
    the contact degrades gracefully instead of failing the caller.
    """
    ring_id = None
    for key in RING_KEYS:
        if raw.get(key):
            ring_id = raw[key]
            break

    groups = raw.get("groups") or ()
    return Contact(
        id=str(raw.get("id", "")),
        name=raw.get("name"),
        ring_id=ring_id,
        groups=tuple(str(g) for g in groups),
        color=raw.get("color"),
    )


def normalize_contacts(contacts: Iterable[Contact | Mapping] | None) -> list[Contact]:
    """Accept Contact objects or raw mappings and return Contacts."""
    if not contacts:
        return []
    return [c if isinstance(c, Contact) else contact_from_mapping(c) for c in contacts]


def group_by_ring(
    contacts: Iterable[Contact],
    ring_ids: Iterable[str] = RING_ORDER,
) -> GroupingResult:
    """Bucket contacts into a fixed, ordered set of rings.

    Contacts without a ring id, or with one not in ring_ids, are omitted from
    every bucket and reported in GroupingResult.dropped. This is not an error.

    Args:
        contacts: Contacts in caller order.
        ring_ids: Known ring ids, innermost first.

    Returns:
        GroupingResult with one (possibly empty) bucket per known ring.
    """
    result = GroupingResult(by_ring={ring_id: [] for ring_id in ring_ids})

    for contact in contacts:
        bucket = result.by_ring.get(contact.ring_id) if contact.ring_id else None
        if bucket is None:
            result.dropped.append(contact)
            continue
        bucket.append(contact)

    if result.dropped:
        logger.debug(
            "Dropped %d contact(s) without a known ring: %s",
            len(result.dropped),
            ", ".join(c.id for c in result.dropped[:10]),
        )

    return result


def filter_by_group(grouping: GroupingResult, group_id: str) -> GroupingResult:
    """Keep only contacts that belong to group_id, preserving ring order."""
    return GroupingResult(
        by_ring={
            ring_id: [c for c in contacts if group_id in c.groups]
            for ring_id, contacts in grouping.by_ring.items()
        },
        dropped=list(grouping.dropped),
    )
