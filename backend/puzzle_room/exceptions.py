"""Exception types raised at the edges of the puzzle server.

The room operations themselves never raise: acting on an unknown room is a
silent no-op. These exist so the socket boundary can reject bad payloads on
an explicit, loggable path.
"""


class PuzzleRoomError(Exception):
    """Base class for puzzle server errors."""
    pass


class InvalidEventPayload(PuzzleRoomError):
    """An inbound socket event did not match its schema."""
    def __init__(self, event, errors):
        self.event = event
        self.errors = errors
        super().__init__(f"Invalid payload for '{event}': {errors}")
