"""
Session management for multiplayer card games.

This module owns the id -> session map and the membership lifecycle. Once a
session is running, round behavior is delegated to the TurnEngine.

A Session contains:
    - A monotonically assigned integer id
    - An owner and an ordered member list (join order)
    - The packs the session plays with and the points goal
    - The TurnState while running
    - An asyncio.Lock used by the transport layer to serialize mutations
"""

import asyncio
import logging
import random
from dataclasses import dataclass, field
from typing import Optional

from catalog import Card, CardCatalog, Pack
from constants import DEFAULT_GOAL, required_white_cards
from errors import (
    AlreadyMemberError,
    InsufficientCardsError,
    NoPromptCardsError,
    NotMemberError,
    NotOwnerError,
    PlayerInGameError,
    PlayerNotFoundError,
    SessionNotFoundError,
    SessionRunningError,
)
from game import GamePhase, TurnEngine, TurnState
from logging_config import get_logger
from players import Player, PlayerRegistry

logger = get_logger(__name__)


@dataclass
class Session:
    """
    A game session.

    Attributes:
        id: Unique session id.
        owner: Member allowed to start and end the game.
        packs: Packs selected for this session.
        goal: Points needed to win.
        players: Members in join order.
        running: Whether a game is in progress.
        winner: Winner of the last finished game, if any.
        state: Turn state, present only while running.
        lock: Serializes mutations on this session.
    """

    id: int
    owner: Player
    packs: list[Pack]
    goal: int = DEFAULT_GOAL
    players: list[Player] = field(default_factory=list)
    running: bool = False
    winner: Optional[Player] = None
    state: Optional[TurnState] = None
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False, compare=False)

    def index_of(self, player: Player) -> Optional[int]:
        """Get a member's position in the member list, or None."""
        for i, member in enumerate(self.players):
            if member.id == player.id:
                return i
        return None

    def is_member(self, player: Player) -> bool:
        return self.index_of(player) is not None

    def black_card_count(self) -> int:
        return sum(len(pack.black) for pack in self.packs)

    def white_card_count(self) -> int:
        return sum(len(pack.white) for pack in self.packs)

    @property
    def phase(self) -> GamePhase:
        """Observable phase derived from the running flag and turn state."""
        if not self.running:
            return GamePhase.FINISHED if self.winner is not None else GamePhase.WAITING
        if self.state.pending > 0:
            return GamePhase.OFFERING
        return GamePhase.JUDGING


class SessionManager:
    """
    Manages all sessions.

    Receives the card catalog and player registry at construction. A single
    SessionManager instance is used by the server.
    """

    def __init__(
        self,
        catalog: CardCatalog,
        registry: PlayerRegistry,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.catalog = catalog
        self.registry = registry
        self.engine = TurnEngine(rng)
        self.sessions: dict[int, Session] = {}
        self._next_id = 0

    # -------------------------------------------------------------------------
    # Session lifecycle
    # -------------------------------------------------------------------------

    def create(
        self,
        owner: Player,
        packs: Optional[list[Pack]] = None,
        goal: Optional[int] = None,
    ) -> Session:
        """
        Create a session owned by the given player and join them to it.

        Args:
            owner: Player creating the session.
            packs: Packs to play with (default: the whole catalog).
            goal: Points needed to win (default: DEFAULT_GOAL).

        Returns:
            The newly created Session.

        Raises:
            NoPromptCardsError: If the packs hold no prompt cards.
            InsufficientCardsError: If the packs cannot deal the owner a hand.
        """
        session = Session(
            id=self._next_id,
            owner=owner,
            packs=list(packs) if packs is not None else self.catalog.get_all_packs(),
            goal=goal if goal is not None else DEFAULT_GOAL,
        )

        if session.black_card_count() == 0:
            raise NoPromptCardsError("there are no black cards within the selected pack(s)")

        self.join(session, owner)

        self._next_id += 1
        self.sessions[session.id] = session

        logger.with_context(session_id=session.id, player_id=owner.id).info(
            f"Session created with {len(session.packs)} pack(s), goal {session.goal}"
        )
        return session

    def delete(self, session_id: int) -> None:
        """
        Delete a session that is not running.

        Raises:
            SessionNotFoundError: If no session has this id.
            SessionRunningError: If the session is still running.
        """
        session = self.sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(f"session with id {session_id} not found")
        if session.running:
            raise SessionRunningError(f"session {session_id} is still running")

        del self.sessions[session_id]
        logger.with_context(session_id=session_id).info("Session deleted")

    def get(self, session_id: int) -> Optional[Session]:
        """Get a session by id, or None if not found."""
        return self.sessions.get(session_id)

    def get_all(self) -> list[Session]:
        """Get all sessions in creation order."""
        return list(self.sessions.values())

    def require(self, session_id: int) -> Session:
        """
        Get a session by id.

        Raises:
            SessionNotFoundError: If no session has this id.
        """
        session = self.sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(f"session with id {session_id} not found")
        return session

    # -------------------------------------------------------------------------
    # Membership
    # -------------------------------------------------------------------------

    def join(self, session: Session, player: Player) -> None:
        """
        Add a player to a session that is not running.

        Raises:
            SessionRunningError: If the session is running.
            AlreadyMemberError: If the player is already a member.
            InsufficientCardsError: If the packs cannot deal one more hand.
        """
        if session.running:
            raise SessionRunningError(f"session {session.id} is already running")

        if session.is_member(player):
            raise AlreadyMemberError(
                f"player {player.id} is already part of session {session.id}"
            )

        white_cards = session.white_card_count()
        needed_players = len(session.players) + 1
        if white_cards < required_white_cards(needed_players):
            raise InsufficientCardsError(
                f"the selected pack(s) don't provide enough white cards ({white_cards}) "
                f"for so many players ({needed_players})"
            )

        session.players.append(player)
        logger.with_context(session_id=session.id, player_id=player.id).info(
            f"Player {player.name} joined"
        )

    def leave(self, session: Session, player: Player) -> None:
        """
        Remove a player from a session.

        Leaving always ends the game in progress for everybody. The session
        is deleted when its last member leaves; otherwise ownership passes
        to the first remaining member if the owner left.

        Raises:
            NotMemberError: If the player is not a member.
        """
        index = session.index_of(player)
        if index is None:
            raise NotMemberError(f"player {player.id} is not part of session {session.id}")

        log = logger.with_context(session_id=session.id, player_id=player.id)
        if session.running:
            log.info("Game ended because a player left")
        self.end(session)

        session.players.pop(index)
        log.info(f"Player {player.name} left")

        if not session.players:
            self.delete(session.id)
        elif session.owner.id == player.id:
            session.owner = session.players[0]
            log.info(f"Ownership passed to player {session.owner.id}")

    def require_owner(self, session: Session, player: Player) -> None:
        """
        Raises:
            NotOwnerError: If the player does not own the session.
        """
        if session.owner.id != player.id:
            raise NotOwnerError(f"only the owner can do this in session {session.id}")

    def is_player_in_game(self, player: Player, session: Optional[Session] = None) -> bool:
        """Check whether a player is a member of a running session."""
        sessions = [session] if session is not None else self.sessions.values()
        return any(s.running and s.is_member(player) for s in sessions)

    # -------------------------------------------------------------------------
    # Players
    # -------------------------------------------------------------------------

    def resolve_player(self, player_id: int) -> Player:
        """
        Look up a player in the registry.

        Raises:
            PlayerNotFoundError: If the player is not registered.
        """
        player = self.registry.get(player_id)
        if player is None:
            raise PlayerNotFoundError(f"player {player_id} not found")
        return player

    def delete_player(self, player_id: int) -> None:
        """
        Remove a player from the registry.

        The player first leaves every session they are a member of, so
        ownership passes on and emptied sessions are deleted.

        Raises:
            PlayerNotFoundError: If the player is not registered.
            PlayerInGameError: If the player is in a running session.
        """
        player = self.resolve_player(player_id)
        if self.is_player_in_game(player):
            raise PlayerInGameError("player is still part of a running game")

        for session in [s for s in self.sessions.values() if s.is_member(player)]:
            self.leave(session, player)
        self.registry.delete(player_id)

    # -------------------------------------------------------------------------
    # Game flow (delegated to the turn engine)
    # -------------------------------------------------------------------------

    def start(self, session: Session) -> None:
        self.engine.start(session)

    def end(self, session: Session, winner: Optional[Player] = None) -> None:
        self.engine.end(session, winner)

    def get_white_cards(self, session: Session, player: Player) -> list[Card]:
        return self.engine.get_white_cards(session, player)

    def offer(self, session: Session, player: Player, cards: list[Card]) -> None:
        self.engine.offer(session, player, cards)

    def get_offers(self, session: Session, player: Player) -> list[list[Card]]:
        return self.engine.get_offers(session, player)

    def accept_offer(self, session: Session, player: Player, cards: list[Card]) -> None:
        self.engine.accept_offer(session, player, cards)
