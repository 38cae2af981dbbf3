import random
from typing import List

from puzzle_room.models import Difficulty, Piece


_GRID_SIZES = {
    Difficulty.EASY: 4,
    Difficulty.MEDIUM: 6,
    Difficulty.HARD: 8,
}


def grid_size(difficulty) -> int:
    return _GRID_SIZES[Difficulty.parse(difficulty)]


def generate_pieces(difficulty=Difficulty.MEDIUM, rng=random) -> List[Piece]:
    """Build a shuffled piece set for the given difficulty.

    Pieces are created in solved order (piece i belongs at slot i), then
    their positions are permuted with a Fisher-Yates pass. Only ``position``
    is swapped; ``correct_position`` is fixed for the life of the piece.
    """
    size = grid_size(difficulty)
    total = size * size
    pieces = [
        Piece(id=f"piece{i}", position=i, correct_position=i, content=str(i))
        for i in range(total)
    ]
    for i in range(total - 1, 0, -1):
        j = rng.randint(0, i)
        pieces[i].position, pieces[j].position = pieces[j].position, pieces[i].position
    return pieces
