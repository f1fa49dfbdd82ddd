"""
Game session API router.

Endpoints:
    GET    /games                             List sessions
    POST   /games                             Create a session
    DELETE /games/{id}                        Delete a stopped session
    PATCH  /games/{id}/{player_id}            join | leave | start | end
    GET    /games/{id}                        Public turn state (running only)
    GET    /games/{id}/cards/{player_id}      A member's hand
    PUT    /games/{id}/cards/{player_id}      Offer cards for the current prompt
    GET    /games/{id}/offers/{player_id}     Offers visible to a member
    PUT    /games/{id}/offers/{player_id}     Czar accepts an offer

Every mutation runs under the session's lock. Engine errors propagate as
GameError and are rendered by the handler registered in main.py.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from catalog import Card, CardCatalog, Pack
from dependencies import get_catalog, get_sessions
from errors import NotRunningError, UnknownActionError, UnknownCardError, UnknownPackError
from session import SessionManager
from views import cards_to_list, session_to_dict, state_to_dict

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/games", tags=["games"])


# =============================================================================
# Request Models
# =============================================================================


class CreateGameRequest(BaseModel):
    """Create a session; packs default to the whole catalog."""
    owner: int
    packs: Optional[list[int]] = None
    goal: Optional[int] = Field(default=None, ge=1)


class ActionRequest(BaseModel):
    """Membership or lifecycle action."""
    action: str


class CardsRequest(BaseModel):
    """Card ids for an offer or an acceptance."""
    cards: list[int]


# =============================================================================
# Helpers
# =============================================================================


def resolve_cards(catalog: CardCatalog, card_ids: list[int]) -> list[Card]:
    """Map card ids to catalog cards, rejecting unknown ids."""
    cards = []
    for card_id in card_ids:
        card = catalog.get_card(card_id)
        if card is None:
            raise UnknownCardError(f"card {card_id} not found")
        cards.append(card)
    return cards


def resolve_packs(catalog: CardCatalog, pack_ids: list[int]) -> list[Pack]:
    """Map pack ids to catalog packs, rejecting unknown ids."""
    packs = []
    for pack_id in pack_ids:
        pack = catalog.get_pack(pack_id)
        if pack is None:
            raise UnknownPackError(f"pack {pack_id} not found")
        packs.append(pack)
    return packs


# =============================================================================
# Sessions
# =============================================================================


@router.get("")
async def list_games(sessions: SessionManager = Depends(get_sessions)):
    return {"games": [session_to_dict(s) for s in sessions.get_all()]}


@router.post("", status_code=201)
async def create_game(
    request: CreateGameRequest,
    catalog: CardCatalog = Depends(get_catalog),
    sessions: SessionManager = Depends(get_sessions),
):
    owner = sessions.resolve_player(request.owner)
    packs = resolve_packs(catalog, request.packs) if request.packs is not None else None
    session = sessions.create(owner, packs, request.goal)
    return session_to_dict(session)


@router.delete("/{game_id}")
async def delete_game(game_id: int, sessions: SessionManager = Depends(get_sessions)):
    session = sessions.require(game_id)
    async with session.lock:
        sessions.delete(game_id)
    return {}


@router.patch("/{game_id}/{player_id}")
async def join_or_leave(
    game_id: int,
    player_id: int,
    request: ActionRequest,
    sessions: SessionManager = Depends(get_sessions),
):
    """
    Apply a membership or lifecycle action.

    Returns the session, or {} if the action deleted it (last member left).
    """
    player = sessions.resolve_player(player_id)
    session = sessions.require(game_id)

    async with session.lock:
        if request.action == "join":
            sessions.join(session, player)
        elif request.action == "leave":
            sessions.leave(session, player)
        elif request.action == "start":
            sessions.require_owner(session, player)
            sessions.start(session)
        elif request.action == "end":
            sessions.require_owner(session, player)
            sessions.end(session)
        else:
            raise UnknownActionError(f"unknown action {request.action}")

    logger.info(
        f"Action '{request.action}' by {player.name}",
        extra={"session_id": game_id, "player_id": player.id},
    )

    if sessions.get(game_id) is None:
        return {}
    return session_to_dict(session)


@router.get("/{game_id}")
async def get_state(game_id: int, sessions: SessionManager = Depends(get_sessions)):
    session = sessions.require(game_id)
    if not session.running:
        raise NotRunningError(f"session {game_id} is not running")
    return state_to_dict(session.state)


# =============================================================================
# Cards and offers
# =============================================================================


@router.get("/{game_id}/cards/{player_id}")
async def get_white_cards(
    game_id: int,
    player_id: int,
    sessions: SessionManager = Depends(get_sessions),
):
    player = sessions.resolve_player(player_id)
    session = sessions.require(game_id)
    return {"cards": cards_to_list(sessions.get_white_cards(session, player))}


@router.put("/{game_id}/cards/{player_id}")
async def set_offer(
    game_id: int,
    player_id: int,
    request: CardsRequest,
    catalog: CardCatalog = Depends(get_catalog),
    sessions: SessionManager = Depends(get_sessions),
):
    player = sessions.resolve_player(player_id)
    session = sessions.require(game_id)
    cards = resolve_cards(catalog, request.cards)

    async with session.lock:
        sessions.offer(session, player, cards)
    return {}


@router.get("/{game_id}/offers/{player_id}")
async def get_offers(
    game_id: int,
    player_id: int,
    sessions: SessionManager = Depends(get_sessions),
):
    player = sessions.resolve_player(player_id)
    session = sessions.require(game_id)
    offers = sessions.get_offers(session, player)
    return {"offers": [cards_to_list(offer) for offer in offers]}


@router.put("/{game_id}/offers/{player_id}")
async def accept_offer(
    game_id: int,
    player_id: int,
    request: CardsRequest,
    catalog: CardCatalog = Depends(get_catalog),
    sessions: SessionManager = Depends(get_sessions),
):
    player = sessions.resolve_player(player_id)
    session = sessions.require(game_id)
    cards = resolve_cards(catalog, request.cards)

    async with session.lock:
        sessions.accept_offer(session, player, cards)
    return {}
