import random

from flask import current_app, request
from flask_socketio import emit, join_room, leave_room

from puzzle_room import socketio
from puzzle_room.exceptions import InvalidEventPayload
from puzzle_room.models import SYSTEM_SENDER, ChatMessage, epoch_ms
from puzzle_room.schemas import parse_event
from puzzle_room.services.puzzle import session


UNKNOWN_PLAYER = 'Unknown player'
SOMEONE = 'Someone'


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def channel_for(room_id: str) -> str:
    return f"puzzle:{room_id}"


class RoomEventHandlers:
    """Socket.IO handlers for one application's room registry.

    Every event is parsed against its schema, then handled as a single unit
    under the registry lock, broadcasts included, so concurrent sockets never
    observe a half-applied move.
    """

    def __init__(self, registry, cleanup, namespace='/', default_difficulty='medium', rng=random):
        self.registry = registry
        self.cleanup = cleanup
        self.namespace = namespace
        self.default_difficulty = default_difficulty
        self.rng = rng

    # ---- plumbing ----

    def _broadcast(self, event, payload, room_id, skip_sid=None):
        socketio.emit(event, payload, to=channel_for(room_id), namespace=self.namespace, skip_sid=skip_sid)

    def _announce(self, room_id, text, skip_sid=None):
        msg = ChatMessage(sender=SYSTEM_SENDER, message=text, timestamp=epoch_ms(self.registry.clock()))
        self._broadcast('new_message', msg.to_dict(), room_id, skip_sid=skip_sid)

    def _broadcast_state(self, room, skip_sid=None):
        self._broadcast('game_state', room.to_dict(), room.id, skip_sid=skip_sid)

    def _name(self, sid, fallback=UNKNOWN_PLAYER):
        return self.registry.get_username(sid) or fallback

    def _room_or_drop(self, event, room_id):
        room = self.registry.get_room(room_id)
        if room is None:
            current_app.logger.debug(f"[drop] event={event} room={room_id} unknown room")
        return room

    def bind(self, event, method):
        """Wrap ``method(sid, payload)`` as a Socket.IO handler for ``event``."""
        def handler(data=None):
            sid = _get_sid()
            try:
                payload = parse_event(event, data)
            except InvalidEventPayload as exc:
                current_app.logger.warning(f"[drop] event={event} sid={sid} {exc}")
                return
            try:
                with self.registry.lock:
                    method(sid, payload)
            except Exception:
                current_app.logger.exception(f"[error] event={event} sid={sid}")
        handler.__name__ = f"handle_{event}"
        return handler

    # ---- connection lifecycle ----

    def handle_connect(self, auth=None):
        emit('connected', {'message': 'Connected', 'id': _get_sid()})

    def handle_disconnect(self, reason=None):
        sid = _get_sid()
        try:
            with self.registry.lock:
                name = self._name(sid)
                for room in self.registry.rooms_for_connection(sid):
                    self._depart(room, sid, name, skip_sid=sid, every=True)
                self.registry.forget_username(sid)
        except Exception:
            current_app.logger.exception(f"[error] event=disconnect sid={sid}")
        current_app.logger.info(f"[disconnect] sid={sid} reason={reason}")

    def handle_ping(self, data=None):
        emit('pong', data or {})

    def _depart(self, room, sid, name, skip_sid=None, every=False):
        if self.registry.remove_player(room.id, sid, every=every):
            # Last one out: deletion is deferred, no one is left to notify
            self.cleanup.schedule(room.id)
            return
        self._broadcast('player_left', {'playerId': sid, 'username': name}, room.id, skip_sid=skip_sid)
        self._announce(room.id, f"{name} has left the game", skip_sid=skip_sid)
        self._broadcast_state(room, skip_sid=skip_sid)

    # ---- room membership ----

    def on_join_game(self, sid, payload):
        name = payload.username or f"Player{self.rng.randrange(1000)}"
        room_id = payload.game_id
        self.registry.set_username(sid, name)
        self.cleanup.cancel(room_id)
        join_room(channel_for(room_id), sid=sid, namespace=self.namespace)
        room, created = self.registry.ensure_room(room_id, self.default_difficulty)
        self.registry.add_player(room_id, sid, name)
        current_app.logger.info(
            f"[join] room={room_id} sid={sid} name={name} created={created} players={len(room.players)}"
        )
        self._broadcast_state(room)
        self._broadcast('player_joined', {'playerId': sid, 'username': name}, room_id)
        self._announce(room_id, f"{name} has joined the game")

    def on_leave_game(self, sid, payload):
        room_id = payload.game_id
        leave_room(channel_for(room_id), sid=sid, namespace=self.namespace)
        room = self._room_or_drop('leave_game', room_id)
        if room is None or not room.has_player(sid):
            return
        current_app.logger.info(f"[leave] room={room_id} sid={sid}")
        self._depart(room, sid, self._name(sid))

    # ---- chat ----

    def on_send_message(self, sid, payload):
        msg = ChatMessage(
            sender=self._name(sid),
            message=payload.message,
            timestamp=epoch_ms(self.registry.clock()),
        )
        self._broadcast('new_message', msg.to_dict(), payload.game_id)

    # ---- puzzle ----

    def on_move_piece(self, sid, payload):
        room = self._room_or_drop('move_piece', payload.game_id)
        if room is None:
            return
        now = self.registry.clock()
        result = session.move_piece(room, payload.piece_id, payload.new_position, now)
        if not result.moved:
            return
        self._broadcast_state(room)
        if result.solved_now:
            solver = self._name(sid)
            current_app.logger.info(f"[solved] room={room.id} by={solver} elapsed_ms={result.elapsed_ms}")
            self._broadcast('puzzle_solved', {
                'gameId': room.id,
                'solvedBy': solver,
                'timeElapsed': result.elapsed_ms,
            }, room.id)
            self._announce(room.id, f"🎉 Puzzle solved by {solver}!")

    def on_reset_game(self, sid, payload):
        room = self._room_or_drop('reset_game', payload.game_id)
        if room is None:
            return
        session.reset_puzzle(room, self.registry.clock(), self.registry.generator)
        self._broadcast_state(room)
        self._announce(room.id, f"{self._name(sid, SOMEONE)} reset the puzzle. New puzzle ready!")

    def on_set_puzzle_image(self, sid, payload):
        room = self._room_or_drop('set_puzzle_image', payload.game_id)
        if room is None:
            return
        session.set_puzzle_image(room, payload.image_url, self.registry.clock(), self.registry.generator)
        current_app.logger.info(f"[image] room={room.id} set by sid={sid}")
        self._broadcast_state(room)
        self._broadcast('puzzle_image_updated', {'gameId': room.id, 'imageUrl': payload.image_url}, room.id)
        self._announce(room.id, f"{self._name(sid, SOMEONE)} set a new puzzle image. Puzzle ready!")

    def on_update_difficulty(self, sid, payload):
        room = self._room_or_drop('update_difficulty', payload.game_id)
        if room is None:
            return
        difficulty = session.set_difficulty(room, payload.difficulty, self.registry.clock(), self.registry.generator)
        self._broadcast_state(room)
        self._announce(room.id, f"{self._name(sid, SOMEONE)} changed the difficulty to {difficulty.value}")


def register_socketio_handlers(registry, cleanup, namespace='/', default_difficulty='medium'):
    """Register Socket.IO event handlers bound to ``registry`` on ``namespace``."""
    handlers = RoomEventHandlers(registry, cleanup, namespace=namespace, default_difficulty=default_difficulty)

    socketio.on_event('connect', handlers.handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handlers.handle_disconnect, namespace=namespace)
    socketio.on_event('ping', handlers.handle_ping, namespace=namespace)
    socketio.on_event('join_game', handlers.bind('join_game', handlers.on_join_game), namespace=namespace)
    socketio.on_event('leave_game', handlers.bind('leave_game', handlers.on_leave_game), namespace=namespace)
    socketio.on_event('send_message', handlers.bind('send_message', handlers.on_send_message), namespace=namespace)
    socketio.on_event('move_piece', handlers.bind('move_piece', handlers.on_move_piece), namespace=namespace)
    socketio.on_event('reset_game', handlers.bind('reset_game', handlers.on_reset_game), namespace=namespace)
    socketio.on_event('set_puzzle_image', handlers.bind('set_puzzle_image', handlers.on_set_puzzle_image), namespace=namespace)
    socketio.on_event('update_difficulty', handlers.bind('update_difficulty', handlers.on_update_difficulty), namespace=namespace)

    return handlers
