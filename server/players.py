"""
Player registry.

Players are created and deleted by the transport layer; the game engine only
resolves them by id. Ids are assigned monotonically and never reused.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Player:
    """
    A registered player.

    Attributes:
        id: Unique, monotonically assigned identifier.
        name: Display name.
    """

    id: int
    name: str


class PlayerRegistry:
    """In-memory id -> Player map."""

    def __init__(self) -> None:
        self.players: dict[int, Player] = {}
        self._next_id = 0

    def create(self, name: str) -> Player:
        """
        Register a new player.

        Args:
            name: Display name.

        Returns:
            The created Player.
        """
        player = Player(id=self._next_id, name=name)
        self._next_id += 1
        self.players[player.id] = player
        return player

    def get(self, player_id: int) -> Optional[Player]:
        """Get a player by id, or None if not found."""
        return self.players.get(player_id)

    def get_all(self) -> list[Player]:
        """Get all registered players in id order."""
        return list(self.players.values())

    def delete(self, player_id: int) -> Optional[Player]:
        """
        Remove a player from the registry.

        Returns:
            The removed Player, or None if not found.
        """
        return self.players.pop(player_id, None)
