"""Pydantic schemas for inbound Socket.IO events.

Each client event has exactly one model. Payloads are validated here before
anything touches room state; a payload that does not fit is rejected with
``InvalidEventPayload`` and the dispatcher drops the event.
"""
from typing import Any, Dict, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .exceptions import InvalidEventPayload


class EventPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    game_id: str = Field(alias='gameId', min_length=1)


class JoinGame(EventPayload):
    username: Optional[str] = None


class LeaveGame(EventPayload):
    pass


class MovePiece(EventPayload):
    piece_id: str = Field(alias='pieceId')
    new_position: int = Field(alias='newPosition')


class SendMessage(EventPayload):
    message: str


class ResetGame(EventPayload):
    pass


class SetPuzzleImage(EventPayload):
    image_url: str = Field(alias='imageUrl')


class UpdateDifficulty(EventPayload):
    difficulty: str


EVENT_SCHEMAS: Dict[str, Type[EventPayload]] = {
    'join_game': JoinGame,
    'leave_game': LeaveGame,
    'move_piece': MovePiece,
    'send_message': SendMessage,
    'reset_game': ResetGame,
    'set_puzzle_image': SetPuzzleImage,
    'update_difficulty': UpdateDifficulty,
}


def parse_event(event: str, data: Any) -> EventPayload:
    schema = EVENT_SCHEMAS[event]
    try:
        return schema.model_validate(data if data is not None else {})
    except ValidationError as exc:
        raise InvalidEventPayload(event, exc.errors()) from exc
