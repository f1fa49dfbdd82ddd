"""
Draw piles for a running session.

Each session owns two independent piles: prompt (black) cards and response
(white) cards. A pile is a stack; cards are drawn from the end.

Reshuffle rules:
    - The prompt pile is rebuilt from every prompt card of the session's packs
      when it is empty at the start of a round.
    - The response pile is rebuilt when it is empty or holds fewer cards than
      the total shortfall across all hands. The rebuild uses every response
      card of the session's packs minus every card currently held in a hand,
      so no card is ever in two places at once.

Shuffles use random.Random.shuffle (Fisher-Yates). Pass a seeded Random to
get a reproducible game.
"""

import logging
import random
from typing import Iterable, Optional

from catalog import Card, Pack
from constants import HAND_SIZE

logger = logging.getLogger(__name__)


class Deck:
    """
    A pile of cards that can be rebuilt, shuffled and drawn from.
    """

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.cards: list[Card] = []
        self.rng = rng or random.Random()

    def rebuild(self, cards: Iterable[Card], exclude: Iterable[Card] = ()) -> None:
        """
        Replace the pile with the given cards, minus any excluded ones, shuffled.

        Args:
            cards: Full set of cards to build the pile from.
            exclude: Cards that must not end up in the pile (matched by id).
        """
        excluded_ids = {card.id for card in exclude}
        self.cards = [card for card in cards if card.id not in excluded_ids]
        self.shuffle()

    def shuffle(self) -> None:
        """Randomize the order of cards in the pile."""
        self.rng.shuffle(self.cards)

    def draw(self) -> Optional[Card]:
        """
        Draw the top card from the pile.

        Returns:
            The drawn Card, or None if the pile is empty.
        """
        if self.cards:
            return self.cards.pop()
        return None

    def cards_remaining(self) -> int:
        """Return the number of cards left in the pile."""
        return len(self.cards)

    def is_empty(self) -> bool:
        return not self.cards


class DeckManager:
    """
    Prompt and response piles for one session.

    Attributes:
        packs: The session's selected packs (the reshuffle source).
        black: Prompt card pile.
        white: Response card pile.
    """

    def __init__(self, packs: list[Pack], rng: Optional[random.Random] = None) -> None:
        self.packs = list(packs)
        rng = rng or random.Random()
        self.black = Deck(rng)
        self.white = Deck(rng)

    def all_black_cards(self) -> list[Card]:
        return [card for pack in self.packs for card in pack.black]

    def all_white_cards(self) -> list[Card]:
        return [card for pack in self.packs for card in pack.white]

    def draw_black(self) -> Optional[Card]:
        """
        Draw the next prompt card, rebuilding the pile first if it is empty.

        Returns:
            The drawn prompt card, or None if the packs hold no prompt cards.
        """
        if self.black.is_empty():
            self.black.rebuild(self.all_black_cards())
            logger.debug(f"Prompt pile reshuffled ({self.black.cards_remaining()} cards)")
        return self.black.draw()

    def refill_hands(self, hands: list[list[Card]], hand_size: int = HAND_SIZE) -> None:
        """
        Bring every hand up to hand_size cards.

        Rebuilds the response pile when it cannot cover the total shortfall.
        Stops filling early only if the packs run out of cards entirely.

        Args:
            hands: One list of cards per player, modified in place.
            hand_size: Target number of cards per hand.
        """
        shortfall = sum(max(0, hand_size - len(hand)) for hand in hands)
        if shortfall == 0:
            return

        if self.white.is_empty() or self.white.cards_remaining() < shortfall:
            in_play = [card for hand in hands for card in hand]
            self.white.rebuild(self.all_white_cards(), exclude=in_play)
            logger.debug(
                f"Response pile reshuffled ({self.white.cards_remaining()} cards, "
                f"{len(in_play)} held in hands)"
            )

        for hand in hands:
            while len(hand) < hand_size:
                card = self.white.draw()
                if card is None:
                    logger.warning("Response cards exhausted while refilling hands")
                    return
                hand.append(card)
