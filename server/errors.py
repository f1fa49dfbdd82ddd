"""
Error taxonomy for the card game server.

Every error raised by the engine derives from GameError and carries the HTTP
status the transport layer answers with. Three branches:

    ValidationError - malformed caller input (unknown action, unknown ids,
                      wrong number of cards)
    StateError      - the operation would violate a session invariant
    NotFoundError   - a referenced session or player does not exist

Engine operations raise before mutating anything, so a caught GameError
always means the session is unchanged.
"""


class GameError(Exception):
    """Base class for all errors surfaced at the engine boundary."""

    status_code: int = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


# =============================================================================
# Validation errors
# =============================================================================

class ValidationError(GameError):
    """Caller input is malformed."""


class WrongCardCountError(ValidationError):
    pass


class UnknownActionError(ValidationError):
    pass


class UnknownCardError(ValidationError):
    pass


class UnknownPackError(ValidationError):
    pass


class CardNotInHandError(ValidationError):
    pass


# =============================================================================
# State errors
# =============================================================================

class StateError(GameError):
    """The operation is not allowed in the session's current state."""


class NoPromptCardsError(StateError):
    pass


class SessionRunningError(StateError):
    pass


class AlreadyMemberError(StateError):
    pass


class InsufficientCardsError(StateError):
    pass


class NotMemberError(StateError):
    pass


class AlreadyRunningError(StateError):
    pass


class NotInSessionError(StateError):
    pass


class NotRunningError(StateError):
    pass


class AlreadyOfferedError(StateError):
    pass


class CzarCannotOfferError(StateError):
    pass


class NotCzarError(StateError):
    pass


class OfferNotFoundError(StateError):
    pass


class NotOwnerError(StateError):
    pass


class PlayerInGameError(StateError):
    pass


# =============================================================================
# Lookup errors
# =============================================================================

class NotFoundError(GameError):
    """A referenced resource does not exist."""

    status_code = 404


class SessionNotFoundError(NotFoundError):
    pass


class PlayerNotFoundError(NotFoundError):
    pass


class PackNotFoundError(NotFoundError):
    pass
