"""
Player registry API router.
"""

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from dependencies import get_registry, get_sessions
from players import PlayerRegistry
from session import SessionManager
from views import player_to_dict

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/players", tags=["players"])


class CreatePlayerRequest(BaseModel):
    """Register a new player."""
    name: str = Field(min_length=1, max_length=64)


@router.get("")
async def list_players(registry: PlayerRegistry = Depends(get_registry)):
    return {"players": [player_to_dict(p) for p in registry.get_all()]}


@router.post("", status_code=201)
async def create_player(
    request: CreatePlayerRequest,
    registry: PlayerRegistry = Depends(get_registry),
):
    player = registry.create(request.name)
    logger.info(f"Player registered: {player.name}", extra={"player_id": player.id})
    return player_to_dict(player)


@router.delete("/{player_id}")
async def delete_player(player_id: int, sessions: SessionManager = Depends(get_sessions)):
    """Unregister a player who is not in a running game."""
    sessions.delete_player(player_id)
    return {}
