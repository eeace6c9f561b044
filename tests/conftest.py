"""Pytest fixtures for ring layout tests."""

import pytest

from dunbar_rings.layout import RING_ORDER, Contact


class RecordingSink:
    """Render sink that keeps every drawn set in memory."""

    def __init__(self, ready: bool = True) -> None:
        self.ready = ready
        self.draws: list[list] = []
        self.last_groups: dict[str, str] = {}

    def is_ready(self) -> bool:
        return self.ready

    def draw(self, items, rings, center, groups) -> None:
        self.draws.append(list(items))
        self.last_groups = dict(groups)

    @property
    def last(self) -> list:
        return self.draws[-1]


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


def make_contacts(count: int, ring_id: str | None = "inner", prefix: str = "c") -> list[Contact]:
    """count contacts on one ring, ids prefix0..prefixN."""
    return [Contact(id=f"{prefix}{i}", name=f"Person {i}", ring_id=ring_id) for i in range(count)]


@pytest.fixture
def five_inner() -> list[Contact]:
    """Five contacts on the inner ring."""
    return make_contacts(5, "inner")


@pytest.fixture
def spread_contacts() -> list[Contact]:
    """120 contacts spread round-robin across all five rings."""
    return [
        Contact(id=f"c{i}", name=f"Person {i}", ring_id=RING_ORDER[i % len(RING_ORDER)])
        for i in range(120)
    ]


@pytest.fixture
def raw_contacts() -> list[dict]:
    """Deserialized contacts using the different ring keys."""
    return [
        {"id": "a", "name": "Ada Lovelace", "ringId": "inner", "groups": ["family"]},
        {"id": "b", "name": "Babbage", "circle": "close"},
        {"id": "c", "name": "Grace Hopper", "dunbarCircle": "active", "groups": ["work"]},
        {"id": "d", "name": "Unknown Ring", "ringId": "unknown-ring"},
        {"id": "e", "name": "No Ring"},
        {"id": "f", "ring_id": "casual", "groups": ["work", "family"]},
    ]
