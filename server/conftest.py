"""
Shared pytest fixtures for the card game server tests.

The default catalog has two packs:
    pack 0 "Base"  - 40 white cards (ids 0-39), 6 black pick-1 cards (ids 40-45)
    pack 1 "Extra" - 20 white cards (ids 46-65), 3 black pick-2 cards (ids 66-68)
"""

import random

import pytest

from catalog import CardCatalog
from players import PlayerRegistry
from session import SessionManager


def pack_data(name: str, white: int, black: int, pick: int = 1, official: bool = True) -> dict:
    """Build one raw pack entry as it would appear in the cards file."""
    return {
        "name": name,
        "official": official,
        "white": [{"text": f"{name} white {i}"} for i in range(white)],
        "black": [{"text": f"{name} black {i}", "pick": pick} for i in range(black)],
    }


@pytest.fixture
def catalog() -> CardCatalog:
    catalog = CardCatalog()
    catalog.load_packs([
        pack_data("Base", white=40, black=6),
        pack_data("Extra", white=20, black=3, pick=2, official=False),
    ])
    return catalog


@pytest.fixture
def registry() -> PlayerRegistry:
    return PlayerRegistry()


@pytest.fixture
def manager(catalog, registry) -> SessionManager:
    return SessionManager(catalog, registry, rng=random.Random(1234))


@pytest.fixture
def make_players(registry):
    """Factory registering n players named Player 0..n-1."""

    def _make(n: int):
        return [registry.create(f"Player {i}") for i in range(n)]

    return _make
