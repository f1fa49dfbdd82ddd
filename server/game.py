"""
Turn engine for the card-matching game.

A running session moves through rounds. Each round one member is the czar:
the czar reads the current prompt card aloud, every other member offers
response cards from their hand, and the czar accepts one offer. The author
of the accepted offer scores a point and the next round begins. The first
member whose points reach the session goal wins and the session stops.

Flow:
    WAITING -> (start) -> OFFERING -> JUDGING -> (accept) -> OFFERING ...
                                                          -> FINISHED

The czar order is a random permutation of the members fixed at start and
served round-robin, so in every block of N rounds each of the N members is
czar exactly once.

Per-player data (hands, points, offers) lives in lists indexed by the
player's position in the session's member list. Membership cannot change
while a session runs (join is refused and leave ends the game first), so
positions are stable for the lifetime of a TurnState.
"""

import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Optional

from catalog import Card
from constants import HAND_SIZE
from deck import DeckManager
from errors import (
    AlreadyOfferedError,
    AlreadyRunningError,
    CardNotInHandError,
    CzarCannotOfferError,
    NotCzarError,
    NotInSessionError,
    NotRunningError,
    OfferNotFoundError,
    WrongCardCountError,
)
from players import Player

if TYPE_CHECKING:
    from session import Session

logger = logging.getLogger(__name__)


class GamePhase(Enum):
    """
    Observable phases of a session.

    WAITING:  not running, members may join
    OFFERING: running, some non-czar members have not offered yet
    JUDGING:  running, every offer is in and the czar must pick one
    FINISHED: not running, a winner was recorded
    """

    WAITING = "waiting"
    OFFERING = "offering"
    JUDGING = "judging"
    FINISHED = "finished"


@dataclass
class TurnState:
    """
    State of a running session.

    Attributes:
        rotation: Czar queue; the head is the next czar, served czars move
            to the tail.
        deck: The session's prompt and response piles.
        hands: Response cards held by each player position.
        points: Points scored by each player position.
        offers: Cards offered this round by each player position (empty
            until submitted).
        czar: Current czar.
        current_black_card: Prompt card of the current round.
        pending: Non-czar members who have not offered this round.
        round: Current round number (1-indexed).
    """

    rotation: list[Player]
    deck: DeckManager
    hands: list[list[Card]]
    points: list[int]
    offers: list[list[Card]] = field(default_factory=list)
    czar: Optional[Player] = None
    current_black_card: Optional[Card] = None
    pending: int = 0
    round: int = 0


class TurnEngine:
    """
    Game rules for a single session at a time.

    The engine holds no per-session data of its own; everything lives on the
    Session and its TurnState. Callers serialize mutations per session (see
    Session.lock).
    """

    def __init__(self, rng: Optional[random.Random] = None, hand_size: int = HAND_SIZE) -> None:
        self.rng = rng or random.Random()
        self.hand_size = hand_size

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def start(self, session: "Session") -> None:
        """
        Start a session: fix the czar order, reset points and deal.

        Raises:
            AlreadyRunningError: If the session is already running.
        """
        if session.running:
            raise AlreadyRunningError(f"session {session.id} is already running")

        members = list(session.players)
        session.state = TurnState(
            rotation=self.rng.sample(members, len(members)),
            deck=DeckManager(session.packs, self.rng),
            hands=[[] for _ in members],
            points=[0 for _ in members],
        )
        session.running = True
        session.winner = None

        logger.info(
            f"Session started with {len(members)} players, goal {session.goal}",
            extra={"session_id": session.id},
        )
        self.next_turn(session)

    def end(self, session: "Session", winner: Optional[Player] = None) -> None:
        """Stop a session, discarding its turn state."""
        session.running = False
        session.state = None
        if winner is not None:
            session.winner = winner

    def next_turn(self, session: "Session") -> None:
        """
        Advance to the next round, or finish the session if someone won.

        Picks the next czar, clears offers, draws a prompt card and refills
        every hand.
        """
        state = session.state

        for index, points in enumerate(state.points):
            if points == session.goal:
                winner = session.players[index]
                self.end(session, winner)
                logger.info(
                    f"Player {winner.name} won after {state.round} rounds",
                    extra={"session_id": session.id, "player_id": winner.id},
                )
                return

        czar = state.rotation.pop(0)
        state.rotation.append(czar)
        state.czar = czar
        state.pending = len(session.players) - 1
        state.offers = [[] for _ in session.players]
        state.current_black_card = state.deck.draw_black()
        state.round += 1

        self.refill_hands(session)

        logger.debug(
            f"Round {state.round}: czar={czar.id}, prompt={state.current_black_card.id}",
            extra={"session_id": session.id, "round": state.round},
        )

    def refill_hands(self, session: "Session") -> None:
        """Bring every member's hand back up to the hand size."""
        state = session.state
        state.deck.refill_hands(state.hands, self.hand_size)

    # -------------------------------------------------------------------------
    # Player actions
    # -------------------------------------------------------------------------

    def _running_position(self, session: "Session", player: Player) -> int:
        """
        Resolve a member's position in a running session.

        Raises:
            NotInSessionError: If the player is not a member.
            NotRunningError: If the session is not running.
        """
        index = session.index_of(player)
        if index is None:
            raise NotInSessionError(f"player {player.id} is not part of session {session.id}")
        if not session.running:
            raise NotRunningError("the session must be running in order to do this")
        return index

    def get_white_cards(self, session: "Session", player: Player) -> list[Card]:
        """
        Get a copy of a member's hand.

        Raises:
            NotInSessionError: If the player is not a member.
            NotRunningError: If the session is not running.
        """
        index = self._running_position(session, player)
        return list(session.state.hands[index])

    def offer(self, session: "Session", player: Player, cards: list[Card]) -> None:
        """
        Submit response cards for the current prompt.

        The offer is stored sorted by card id and the cards leave the hand.
        Every check runs before anything is changed.

        Raises:
            NotInSessionError: If the player is not a member.
            NotRunningError: If the session is not running.
            AlreadyOfferedError: If the player already offered this round.
            CzarCannotOfferError: If the player is the czar.
            WrongCardCountError: If the number of cards differs from the
                prompt's pick count.
            CardNotInHandError: If a card is not in the player's hand or is
                listed twice.
        """
        index = self._running_position(session, player)
        state = session.state

        if state.offers[index]:
            raise AlreadyOfferedError("this player already sent an offer")

        if state.czar.id == player.id:
            raise CzarCannotOfferError("the czar cannot send an offer")

        pick = state.current_black_card.pick
        if len(cards) != pick:
            raise WrongCardCountError(f"{pick} card(s) need to be offered")

        offered_ids = [card.id for card in cards]
        hand = state.hands[index]
        hand_ids = {card.id for card in hand}
        if len(set(offered_ids)) != len(offered_ids) or not hand_ids.issuperset(offered_ids):
            raise CardNotInHandError("offered cards must be distinct cards from your hand")

        state.offers[index] = sorted(cards, key=lambda card: card.id)
        hand[:] = [card for card in hand if card.id not in offered_ids]
        state.pending -= 1

        logger.debug(
            f"Offer received, waiting for {state.pending} more",
            extra={"session_id": session.id, "player_id": player.id, "round": state.round},
        )

    def get_offers(self, session: "Session", player: Player) -> list[list[Card]]:
        """
        Get the offers visible to a member.

        While offers are still outstanding, a member only sees their own slot
        (empty if they have not offered). Once every offer is in, everybody
        sees all non-czar offers in a new random order on every call, so
        position never reveals authorship.

        Raises:
            NotRunningError: If the session is not running.
        """
        index = session.index_of(player)
        if index is None:
            return []
        if not session.running:
            raise NotRunningError("the session must be running in order to do this")

        state = session.state
        if state.pending > 0:
            return [list(state.offers[index])]

        czar_index = session.index_of(state.czar)
        offers = [list(offer) for i, offer in enumerate(state.offers) if i != czar_index]
        self.rng.shuffle(offers)
        return offers

    def accept_offer(self, session: "Session", player: Player, cards: list[Card]) -> None:
        """
        Award the round to the member whose offer matches the given cards.

        Matching compares card ids as a multiset, so order does not matter.

        Raises:
            NotInSessionError: If the player is not a member.
            NotRunningError: If the session is not running.
            NotCzarError: If the player is not the czar.
            OfferNotFoundError: If no stored offer matches.
        """
        self._running_position(session, player)
        state = session.state

        if state.czar.id != player.id:
            raise NotCzarError("only the czar can accept an offer")

        wanted = sorted(card.id for card in cards)
        winner_index = None
        for i, offer in enumerate(state.offers):
            if offer and [card.id for card in offer] == wanted:
                winner_index = i
                break

        if winner_index is None:
            raise OfferNotFoundError("a player with those cards could not be found")

        state.points[winner_index] += 1
        logger.info(
            f"Round {state.round} won by player {session.players[winner_index].id}",
            extra={"session_id": session.id, "player_id": session.players[winner_index].id},
        )

        self.next_turn(session)
