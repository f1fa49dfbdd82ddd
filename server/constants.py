"""
Game constants for the card-matching game.

HAND_SIZE is a rule of the game and is not configurable; every member holds
exactly this many response cards while a session is running. DEFAULT_GOAL
comes from config.py so deployments can change the default points-to-win.
"""

from config import config


# =============================================================================
# Game Constants
# =============================================================================

HAND_SIZE: int = 10

DEFAULT_GOAL: int = config.DEFAULT_GOAL

# Prompt cards that do not state a pick count ask for a single response card.
DEFAULT_PICK: int = 1


# =============================================================================
# Helper Functions
# =============================================================================

def required_white_cards(member_count: int) -> int:
    """
    Number of response cards needed to deal a full hand to every member.

    Args:
        member_count: Number of members the session would have.

    Returns:
        Minimum total of response cards across the selected packs.
    """
    return member_count * HAND_SIZE
