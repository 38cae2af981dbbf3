from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from puzzle_room.models import Difficulty, Piece, Room
from .generator import generate_pieces


@dataclass
class MoveResult:
    moved: bool = False
    solved_now: bool = False
    elapsed_ms: Optional[int] = None


def is_solved(pieces: Iterable[Piece]) -> bool:
    return all(p.in_place for p in pieces)


def move_piece(room: Room, piece_id: str, new_position: int, now: datetime) -> MoveResult:
    """Swap the piece with whatever occupies ``new_position``.

    The board never has an empty slot, so every successful move is a
    transposition of two positions. Solving is edge-triggered: only the
    move that takes the room from unsolved to solved reports ``solved_now``.
    """
    piece = next((p for p in room.pieces if p.id == piece_id), None)
    if piece is None or piece.position == new_position:
        return MoveResult()
    occupant = next((p for p in room.pieces if p.position == new_position), None)
    if occupant is None:
        return MoveResult()

    piece.position, occupant.position = occupant.position, piece.position
    result = MoveResult(moved=True)
    if not room.completed and is_solved(room.pieces):
        room.completed = True
        result.solved_now = True
        result.elapsed_ms = int((now - room.start_time).total_seconds() * 1000)
    return result


def reset_puzzle(room: Room, now: datetime, generator=generate_pieces) -> None:
    # puzzle_image_url survives resets
    room.pieces = generator(room.config.difficulty)
    room.start_time = now
    room.completed = False


def set_puzzle_image(room: Room, image_url: str, now: datetime, generator=generate_pieces) -> None:
    room.puzzle_image_url = image_url
    reset_puzzle(room, now, generator)


def set_difficulty(room: Room, difficulty, now: datetime, generator=generate_pieces) -> Difficulty:
    room.config.difficulty = Difficulty.parse(difficulty)
    reset_puzzle(room, now, generator)
    return room.config.difficulty
