from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional


class Difficulty(str, Enum):
    EASY = 'easy'
    MEDIUM = 'medium'
    HARD = 'hard'

    @classmethod
    def parse(cls, value) -> 'Difficulty':
        """Return the matching difficulty, falling back to medium for anything unknown."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value))
        except ValueError:
            return cls.MEDIUM


@dataclass
class Piece:
    id: str
    position: int
    correct_position: int
    content: str

    @property
    def in_place(self) -> bool:
        return self.position == self.correct_position

    def to_dict(self):
        return {
            'id': self.id,
            'position': self.position,
            'correctPosition': self.correct_position,
            'content': self.content,
        }


@dataclass
class Player:
    connection_id: str
    display_name: str

    def to_dict(self):
        return {
            'id': self.connection_id,
            'username': self.display_name,
        }


@dataclass
class RoomConfig:
    difficulty: Difficulty = Difficulty.MEDIUM

    def to_dict(self):
        return {'difficulty': self.difficulty.value}


@dataclass
class Room:
    id: str
    pieces: List[Piece]
    start_time: datetime
    players: List[Player] = field(default_factory=list)
    completed: bool = False
    puzzle_image_url: Optional[str] = None
    config: RoomConfig = field(default_factory=RoomConfig)

    @property
    def status(self) -> str:
        return 'solved' if self.completed else 'active'

    @property
    def is_empty(self) -> bool:
        return not self.players

    def has_player(self, connection_id: str) -> bool:
        return any(p.connection_id == connection_id for p in self.players)

    def to_dict(self):
        return {
            'id': self.id,
            'players': [p.to_dict() for p in self.players],
            'puzzle': [piece.to_dict() for piece in self.pieces],
            'startTime': isoformat(self.start_time),
            'completed': self.completed,
            'puzzleImage': self.puzzle_image_url,
            'difficulty': self.config.difficulty.value,
        }


@dataclass
class ChatMessage:
    sender: str
    message: str
    timestamp: int

    def to_dict(self):
        return {
            'sender': self.sender,
            'message': self.message,
            'timestamp': self.timestamp,
        }


SYSTEM_SENDER = 'System'


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def epoch_ms(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def isoformat(moment: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a trailing Z, as browsers emit it."""
    return moment.astimezone(timezone.utc).strftime('%Y-%m-%dT%H:%M:%S.') + f"{moment.microsecond // 1000:03d}Z"
