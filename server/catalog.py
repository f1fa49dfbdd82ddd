"""
Card catalog: loads content packs and indexes their cards.

The cards file is a JSON array of packs:

    [
        {
            "name": "Base Set",
            "official": true,
            "black": [{"text": "Why can't I sleep at night?", "pick": 1}],
            "white": [{"text": "A windmill full of corpses."}]
        }
    ]

Loading is best-effort. Each pack is validated on its own; a pack that fails
validation is dropped and logged while the rest of the file still loads.
Pack ids are dense in load order over the accepted packs. Card ids are dense
across the whole catalog (white and black cards share one id space), assigned
pack by pack with the pack's white cards first, then its black cards.

Packs and cards are immutable once loaded.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import pydantic
from pydantic import BaseModel, Field

from constants import DEFAULT_PICK

logger = logging.getLogger(__name__)


# =============================================================================
# Domain types
# =============================================================================

@dataclass(frozen=True)
class Card:
    """
    A prompt (black) or response (white) card.

    Attributes:
        id: Catalog-wide unique id.
        text: Card text.
        pack: Id of the pack the card belongs to.
        pick: Number of response cards a prompt card asks for (None on
            response cards).
    """

    id: int
    text: str
    pack: int
    pick: Optional[int] = None


@dataclass(frozen=True)
class Pack:
    """A named bundle of prompt and response cards."""

    id: int
    name: str
    black: tuple[Card, ...]
    white: tuple[Card, ...]
    official: bool = False


# =============================================================================
# Input schema
# =============================================================================

class CardSchema(BaseModel):
    """
    Shape of one card entry in the cards file.

    Other keys (such as a per-card pack id) are ignored; a card always
    belongs to the pack it is listed in.
    """
    text: str = Field(min_length=1)
    pick: Optional[int] = Field(default=None, ge=1)


class PackSchema(BaseModel):
    """Shape of one pack entry in the cards file."""
    name: str = Field(min_length=1)
    black: list[CardSchema] = Field(default_factory=list)
    white: list[CardSchema] = Field(default_factory=list)
    official: bool


# =============================================================================
# Catalog
# =============================================================================

class CardCatalog:
    """
    Read-only index of packs and cards.

    Lookups for unknown ids return None rather than raising.
    """

    def __init__(self, cards_file: Optional[str] = None) -> None:
        self.cards_file = cards_file
        self._packs: list[Pack] = []
        self._cards: dict[int, Card] = {}

    def load(self) -> int:
        """
        Load packs from the configured cards file.

        Returns:
            Number of cards indexed (0 if the file is missing or unreadable).
        """
        if not self.cards_file:
            logger.error("No cards file configured")
            return 0

        path = Path(self.cards_file)
        try:
            with path.open(encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error reading {path}: {e}")
            return 0

        return self.load_packs(raw)

    def load_packs(self, raw: Any) -> int:
        """
        Validate and index already-parsed pack data.

        Replaces any previously loaded content.

        Args:
            raw: Parsed JSON, expected to be a list of pack objects.

        Returns:
            Number of cards indexed.
        """
        self._packs = []
        self._cards = {}

        if not isinstance(raw, list):
            logger.error(f"Cards data must be a list of packs, got {type(raw).__name__}")
            return 0

        next_id = 0
        for position, entry in enumerate(raw):
            try:
                schema = PackSchema.model_validate(entry)
            except pydantic.ValidationError as e:
                logger.warning(
                    f"Dropping pack at position {position}: "
                    f"{e.error_count()} validation error(s)\n{e}"
                )
                continue

            pack_id = len(self._packs)

            white = []
            for card in schema.white:
                white.append(Card(id=next_id, text=card.text, pack=pack_id))
                next_id += 1

            black = []
            for card in schema.black:
                black.append(Card(
                    id=next_id,
                    text=card.text,
                    pack=pack_id,
                    pick=card.pick if card.pick is not None else DEFAULT_PICK,
                ))
                next_id += 1

            pack = Pack(
                id=pack_id,
                name=schema.name,
                black=tuple(black),
                white=tuple(white),
                official=schema.official,
            )
            self._packs.append(pack)
            for card in (*pack.white, *pack.black):
                self._cards[card.id] = card

        logger.info(f"Loaded {next_id} cards in {len(self._packs)} packs")
        return next_id

    def get_all_packs(self) -> list[Pack]:
        """Get every loaded pack in id order."""
        return list(self._packs)

    def get_pack(self, pack_id: int) -> Optional[Pack]:
        """Get a pack by id, or None if not found."""
        if 0 <= pack_id < len(self._packs):
            return self._packs[pack_id]
        return None

    def get_card(self, card_id: int) -> Optional[Card]:
        """Get a card by id, or None if not found."""
        return self._cards.get(card_id)

    def card_count(self) -> int:
        """Return the number of indexed cards."""
        return len(self._cards)
