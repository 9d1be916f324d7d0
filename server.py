"""
Bridge Game Server

Authoritative backend for a four-seat trick card game. Clients connect over
Socket.IO and send ``join_room`` and ``play_card``; the server
answers with ``room_state`` (public), ``game_state`` (one per player, only that
player's hand), ``new_trick``, ``room_full`` and ``error_message``.

- Seats fill N, E, S, W; the fourth join deals and starts play
- Any player leaving abandons the deal and puts the room back to waiting
- Every room has its own lock; all changes and broadcasts for a room happen
  under it, so clients see a room's events in the order they were applied
- Rooms are dropped once their last seat is freed
"""
import logging
import os
import random
import secrets
import time
from typing import Optional

from flask import Flask, request, jsonify
from flask_cors import CORS
from flask_socketio import SocketIO, emit, join_room, leave_room

import game
from game import GameError, RoomFull
from models import Room
from registry import RoomRegistry

logger = logging.getLogger(__name__)

DEFAULT_HOST = '0.0.0.0'
DEFAULT_PORT = 4000
LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s %(message)s'


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.environ.get(name, default))
    except ValueError:
        logger.warning(f"Ignoring invalid {name}={os.environ.get(name)!r}, using {default}")
        return default


def _env_flag(name: str) -> bool:
    return os.environ.get(name, '').strip().lower() in ('1', 'true', 'yes')


def load_config(overrides: Optional[dict] = None) -> dict:
    origins = os.environ.get('CORS_ORIGINS', '*')
    config = {
        'SECRET_KEY': os.environ.get('SECRET_KEY', secrets.token_hex(32)),
        'HOST': os.environ.get('HOST', DEFAULT_HOST),
        'PORT': _env_int('PORT', DEFAULT_PORT),
        'CORS_ORIGINS': [o.strip() for o in origins.split(',') if o.strip()] or ['*'],
        'LOG_LEVEL': os.environ.get('LOG_LEVEL', 'INFO').upper(),
        'SOCKETIO_ASYNC_HANDLERS': True,
        'ALLOW_UNSAFE_WERKZEUG': _env_flag('ALLOW_UNSAFE_WERKZEUG'),
    }
    if overrides:
        config.update(overrides)
    return config


def configure_logging(level: str = 'INFO') -> None:
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format=LOG_FORMAT)


# Broadcasts

def broadcast_room_state(socketio: SocketIO, room: Room) -> None:
    socketio.emit('room_state', room.public_state(), to=room.room_id)


def broadcast_game_state(socketio: SocketIO, room: Room) -> None:
    """Send each seated player the room state with their own hand only."""
    for sid in list(room.players):
        socketio.emit('game_state', room.private_state(sid), to=sid)


def broadcast_new_trick(socketio: SocketIO, room: Room, lead_seat: str) -> None:
    socketio.emit('new_trick', {'leadSeat': lead_seat}, to=room.room_id)


def _room_id(data) -> Optional[str]:
    if not isinstance(data, dict):
        return None
    room_id = data.get('roomId')
    if room_id is None or not str(room_id).strip():
        return None
    return str(room_id)


def register_handlers(socketio: SocketIO, registry: RoomRegistry, rng: Optional[random.Random] = None) -> None:

    def vacate(room: Room, sid: str) -> None:
        seat = room.remove_player(sid)
        leave_room(room.room_id, sid=sid)
        logger.info(f"{sid} left seat {seat} in room {room.room_id}, room reset to waiting")
        broadcast_room_state(socketio, room)
        registry.reap(room)

    @socketio.on('connect')
    def on_connect(auth=None):
        logger.info(f"New client connected {request.sid}")

    @socketio.on('join_room')
    def on_join_room(data):
        room_id = _room_id(data)
        if room_id is None:
            logger.warning(f"join_room without roomId from {request.sid}: {data!r}")
            return
        name = str(data.get('name') or 'Player')
        sid = request.sid
        logger.info(f"{name} joining room {room_id}")

        with registry.session(room_id) as room:
            try:
                game.assign_seat(room, sid, name)
            except RoomFull:
                logger.info(f"Room {room_id} is full, turned away {sid}")
                emit('room_full')
                return
            except GameError as e:
                emit('error_message', e.message)
                return

            join_room(room_id)
            broadcast_room_state(socketio, room)

            if game.should_start(room):
                game.start_game(room, rng)
                broadcast_game_state(socketio, room)

    @socketio.on('play_card')
    def on_play_card(data):
        room_id = _room_id(data)
        if room_id is None:
            logger.warning(f"play_card without roomId from {request.sid}: {data!r}")
            return
        sid = request.sid

        with registry.session(room_id, create=False) as room:
            try:
                card = game.play_card(room, sid, data.get('card'))
            except GameError as e:
                logger.warning(f"Rejected play from {sid} in room {room_id}: {e.message}")
                emit('error_message', e.message)
                return
            if card is None:
                return

            broadcast_game_state(socketio, room)

            if room.trick.is_complete():
                lead_seat = game.rotate_trick(room)
                broadcast_new_trick(socketio, room, lead_seat)
                broadcast_game_state(socketio, room)

    @socketio.on('disconnect')
    def on_disconnect(reason=None):
        sid = request.sid
        logger.info(f"Client disconnected {sid}")
        for candidate in registry.rooms_with(sid):
            with registry.session(candidate.room_id, create=False) as room:
                if room is None or sid not in room.players:
                    continue
                vacate(room, sid)

    @socketio.on_error_default
    def on_error(e):
        event = getattr(request, 'event', None) or {}
        logger.error(f"Error handling {event.get('message')} from {request.sid}: {e}", exc_info=e)


def register_routes(app: Flask) -> None:

    @app.route('/')
    def index():
        return 'Bridge backend running'

    @app.route('/health')
    def health():
        return jsonify({'status': 'healthy', 'timestamp': time.time()}), 200


def create_app(registry: Optional[RoomRegistry] = None, config: Optional[dict] = None,
               rng: Optional[random.Random] = None):
    """Build the Flask app and its SocketIO server around ``registry``."""
    config = load_config(config)
    configure_logging(config['LOG_LEVEL'])

    app = Flask(__name__)
    app.config.update(config)
    origins = config['CORS_ORIGINS']
    CORS(app, supports_credentials=True, origins=origins)

    socketio = SocketIO(
        app,
        cors_allowed_origins='*' if origins == ['*'] else origins,
        async_mode='threading',
        async_handlers=config['SOCKETIO_ASYNC_HANDLERS'],
    )

    registry = registry if registry is not None else RoomRegistry()
    app.extensions['room_registry'] = registry
    register_handlers(socketio, registry, rng)
    register_routes(app)
    return app, socketio


app, socketio = create_app()


def main():
    host, port = app.config['HOST'], app.config['PORT']
    logger.info(f"Server listening on {host}:{port}")
    socketio.run(app, host=host, port=port, allow_unsafe_werkzeug=app.config['ALLOW_UNSAFE_WERKZEUG'])


if __name__ == '__main__':
    main()
