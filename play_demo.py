#!/usr/bin/env python3
"""
Automated demo for the bridge server.

Usage:
  python play_demo.py [--url BASE_URL] [--room ROOM_ID] [--tricks N]

Defaults:
  BASE_URL = http://localhost:4000
  ROOM_ID = demo-room
  N = 13

This script will:
- Check the server is up via /health
- Connect 4 bots and join them to the same room (seats N, E, S, W)
- Whenever it is a bot's turn, play the first card of its hand
- Stop after N tricks and disconnect everyone
"""
import argparse
import sys
import time
from threading import Lock

import requests
import socketio


def choose_card(state):
    """First card in hand when the state says it is our turn, else None."""
    if not state or state.get('phase') != 'playing':
        return None
    trick = state.get('trick')
    if not trick or trick['currentIndex'] >= len(trick['order']):
        return None
    if trick['order'][trick['currentIndex']] != state['yourSeat']:
        return None
    hand = state.get('yourHand') or []
    return hand[0] if hand else None


class Bot:
    def __init__(self, base, room, name):
        self.room = room
        self.name = name
        self.state = None
        self.played = None
        self.lock = Lock()
        self.sio = socketio.Client()
        self.sio.on('game_state', self._on_game_state)
        self.sio.on('error_message', self._on_error)
        self.sio.on('room_full', lambda *a: print(f"[{name}] room is full"))
        self.sio.connect(base)

    def _on_game_state(self, data):
        with self.lock:
            self.state = data

    def _on_error(self, text):
        print(f"[{self.name}] rejected: {text}")

    def join(self):
        self.sio.emit('join_room', {'roomId': self.room, 'name': self.name})

    def step(self):
        with self.lock:
            card = choose_card(self.state)
            # wait for the server to confirm the previous play
            if card is None or card == self.played:
                return False
            self.played = card
        self.sio.emit('play_card', {'roomId': self.room, 'card': card})
        print(f"[play] {self.name} ({self.state['yourSeat']}) played {card}")
        return True

    def close(self):
        self.sio.disconnect()


def demo_run(base, room, tricks):
    r = requests.get(base.rstrip('/') + '/health', timeout=10)
    r.raise_for_status()
    print(f"[demo] server healthy: {r.json()}")

    bots = [Bot(base, room, f"Bot{i + 1}") for i in range(4)]
    tricks_done = []
    bots[0].sio.on('new_trick', lambda data: tricks_done.append(data['leadSeat']))
    try:
        for bot in bots:
            bot.join()
            time.sleep(0.1)

        deadline = time.time() + 60
        while len(tricks_done) < tricks and time.time() < deadline:
            if not any(bot.step() for bot in bots):
                time.sleep(0.05)
        print(f"[demo] finished {len(tricks_done)} tricks, leads: {' '.join(tricks_done)}")
    finally:
        for bot in bots:
            bot.close()


if __name__ == '__main__':
    parser = argparse.ArgumentParser()
    parser.add_argument('--url', default='http://localhost:4000', help='Base URL for server (default http://localhost:4000)')
    parser.add_argument('--room', default='demo-room', help='Room id to use (default demo-room)')
    parser.add_argument('--tricks', type=int, default=13, help='Number of tricks to play (default 13)')
    args = parser.parse_args()
    try:
        demo_run(args.url, args.room, args.tricks)
    except KeyboardInterrupt:
        print("Interrupted by user", file=sys.stderr)
        sys.exit(0)
    except Exception as e:
        print("Demo failed:", e, file=sys.stderr)
        sys.exit(1)
