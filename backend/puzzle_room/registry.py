import threading
from typing import Dict, List, Optional, Tuple

from puzzle_room.models import Difficulty, Player, Room, RoomConfig, utcnow
from puzzle_room.services.puzzle.generator import generate_pieces


class RoomRegistry:
    """In-memory table of live rooms and connection display names.

    One registry is built per application by ``create_app`` and handed to
    the socket handlers, the HTTP API and the cleanup scheduler. Callers hold
    ``lock`` for the whole of an event so reads and writes never interleave.
    """

    def __init__(self, generator=generate_pieces, clock=utcnow):
        self.generator = generator
        self.clock = clock
        self.lock = threading.RLock()
        self._rooms: Dict[str, Room] = {}
        self._usernames: Dict[str, str] = {}

    # ---- rooms ----

    def get_room(self, room_id: str) -> Optional[Room]:
        return self._rooms.get(room_id)

    def ensure_room(self, room_id: str, difficulty=Difficulty.MEDIUM) -> Tuple[Room, bool]:
        room = self._rooms.get(room_id)
        if room is not None:
            return room, False
        config = RoomConfig(difficulty=Difficulty.parse(difficulty))
        room = Room(
            id=room_id,
            pieces=self.generator(config.difficulty),
            start_time=self.clock(),
            config=config,
        )
        self._rooms[room_id] = room
        return room, True

    def add_player(self, room_id: str, connection_id: str, display_name: str) -> Optional[Player]:
        room = self._rooms.get(room_id)
        if room is None:
            return None
        player = Player(connection_id=connection_id, display_name=display_name)
        room.players.append(player)
        return player

    def remove_player(self, room_id: str, connection_id: str, every: bool = False) -> bool:
        """Drop the first entry for ``connection_id`` (all of them with ``every``).

        Returns True if the room is now empty.
        """
        room = self._rooms.get(room_id)
        if room is None:
            return False
        if every:
            room.players = [p for p in room.players if p.connection_id != connection_id]
            return room.is_empty
        for idx, player in enumerate(room.players):
            if player.connection_id == connection_id:
                del room.players[idx]
                break
        return room.is_empty

    def delete_room(self, room_id: str) -> bool:
        return self._rooms.pop(room_id, None) is not None

    def delete_if_empty(self, room_id: str) -> bool:
        room = self._rooms.get(room_id)
        if room is None or not room.is_empty:
            return False
        return self.delete_room(room_id)

    def rooms_for_connection(self, connection_id: str) -> List[Room]:
        return [room for room in self._rooms.values() if room.has_player(connection_id)]

    def room_ids(self) -> List[str]:
        return list(self._rooms)

    # ---- display names ----

    def set_username(self, connection_id: str, name: str) -> None:
        self._usernames[connection_id] = name

    def get_username(self, connection_id: str) -> Optional[str]:
        return self._usernames.get(connection_id)

    def forget_username(self, connection_id: str) -> None:
        self._usernames.pop(connection_id, None)

    def clear(self) -> None:
        with self.lock:
            self._rooms.clear()
            self._usernames.clear()
