"""
Public views of engine objects for the HTTP API.

The engine never serializes itself; routers call these functions to build
JSON-safe dicts. Hidden data (draw piles, other players' hands, offers before
everyone has offered) never appears in these views.
"""

from typing import Optional

from catalog import Card, Pack
from game import TurnState
from players import Player
from session import Session


def card_to_dict(card: Card) -> dict:
    data = {"id": card.id, "text": card.text, "pack": card.pack}
    if card.pick is not None:
        data["pick"] = card.pick
    return data


def cards_to_list(cards: list[Card]) -> list[dict]:
    return [card_to_dict(card) for card in cards]


def player_to_dict(player: Optional[Player]) -> Optional[dict]:
    if player is None:
        return None
    return {"id": player.id, "name": player.name}


def pack_summary(pack: Pack) -> dict:
    """Pack listing entry with card counts instead of cards."""
    return {
        "id": pack.id,
        "name": pack.name,
        "official": pack.official,
        "blackCardCount": len(pack.black),
        "whiteCardCount": len(pack.white),
    }


def pack_to_dict(pack: Pack) -> dict:
    return {
        "id": pack.id,
        "name": pack.name,
        "official": pack.official,
        "black": cards_to_list(list(pack.black)),
        "white": cards_to_list(list(pack.white)),
    }


def session_to_dict(session: Session) -> dict:
    """
    Session summary for listings and membership responses.

    Packs are listed by id only.
    """
    return {
        "id": session.id,
        "owner": player_to_dict(session.owner),
        "players": [player_to_dict(p) for p in session.players],
        "running": session.running,
        "phase": session.phase.value,
        "winner": player_to_dict(session.winner),
        "packs": [pack.id for pack in session.packs],
        "goal": session.goal,
    }


def state_to_dict(state: TurnState) -> dict:
    """Turn state as every member may see it."""
    return {
        "round": state.round,
        "czar": player_to_dict(state.czar),
        "currentBlackCard": card_to_dict(state.current_black_card),
        "points": list(state.points),
        "waitingForPlayers": state.pending,
    }
