"""
Pytest configuration and shared fixtures for the bridge server.
"""

import random

import pytest

import game
from models import Room
from registry import RoomRegistry
from server import create_app

SIDS = ("sid-a", "sid-b", "sid-c", "sid-d")


@pytest.fixture
def registry():
    """A fresh, isolated room registry."""
    return RoomRegistry()


@pytest.fixture
def full_room():
    """A room with four seated players and a deal in progress."""
    room = Room("R1")
    for i, sid in enumerate(SIDS):
        game.assign_seat(room, sid, f"Player{i + 1}")
    game.start_game(room, random.Random(1))
    return room


@pytest.fixture
def server(registry):
    """Flask app and SocketIO server bound to the isolated registry."""
    app, socketio = create_app(
        registry,
        config={"SECRET_KEY": "test", "SOCKETIO_ASYNC_HANDLERS": False},
        rng=random.Random(7),
    )
    app.config["TESTING"] = True
    return app, socketio


@pytest.fixture
def connect(server):
    """Factory for Socket.IO test clients; disconnects leftovers on teardown."""
    app, socketio = server
    clients = []

    def _connect():
        client = socketio.test_client(app)
        clients.append(client)
        return client

    yield _connect
    for client in clients:
        if client.is_connected():
            client.disconnect()


def received(client, name=None):
    """Drain the client's queue, optionally keeping only one event name."""
    msgs = client.get_received()
    if name is None:
        return msgs
    return [m["args"][0] if m["args"] else None for m in msgs if m["name"] == name]
