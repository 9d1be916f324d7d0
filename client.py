# client.py
# Simple CLI client; for a deployed server set SERVER_URL to its URL.
import os

import socketio

# Locally: http://127.0.0.1:4000
SERVER = os.environ.get("SERVER_URL", "http://127.0.0.1:4000")

EVENTS = ("room_state", "game_state", "new_trick", "room_full", "error_message")

HELP = """
Commands:
  /join <room> <name>     - join or create a room (play starts at 4 players)
  /play <AS|TD|2C|...>    - play a card from your hand, e.g. /play QH
  /help                   - show this help
  /quit                   - disconnect
"""


def format_event(event, data=None):
    if event == "room_state":
        seated = ", ".join(f"{p['seat']}={p['name']}" for p in data["players"].values())
        return f"Room ({data['phase']}): {seated or 'empty'}"
    if event == "game_state":
        lines = [f"Your seat: {data['yourSeat']} | Phase: {data['phase']}"]
        trick = data.get("trick")
        if trick:
            board = " ".join(f"{s}:{c or '--'}" for s, c in trick["cards"].items())
            turn = trick["order"][trick["currentIndex"]] if trick["currentIndex"] < len(trick["order"]) else "-"
            lines.append(f"Trick (lead {trick['leadSeat']}): {board} | Turn: {turn}")
        lines.append("Your hand: " + (" ".join(data["yourHand"]) or "(empty)"))
        return "\n".join(lines)
    if event == "new_trick":
        return f"New trick. Lead: {data['leadSeat']}"
    if event == "room_full":
        return "Room is full."
    if event == "error_message":
        return f"ERROR: {data}"
    return f"EVENT {event}: {data}"


def parse_command(line, room=None):
    """Turn an input line into (event, payload). None for local commands."""
    parts = line.split()
    if not parts:
        return None
    cmd = parts[0]
    if cmd == "/join":
        if len(parts) < 3:
            raise ValueError("Usage: /join <room> <name>")
        return "join_room", {"roomId": parts[1], "name": " ".join(parts[2:])}
    if cmd == "/play":
        if len(parts) != 2:
            raise ValueError("Usage: /play <card>")
        if room is None:
            raise ValueError("Join a room first.")
        return "play_card", {"roomId": room, "card": parts[1].upper()}
    return None


def main():
    sio = socketio.Client()
    room = None

    def printer(event):
        def handler(data=None):
            print("\n" + format_event(event, data))
        return handler

    for event in EVENTS:
        sio.on(event, printer(event))

    sio.connect(SERVER)
    print(HELP)
    try:
        while True:
            try:
                line = input("> ")
            except EOFError:
                break
            if line.startswith("/quit"):
                break
            if line.startswith("/help"):
                print(HELP)
                continue
            try:
                command = parse_command(line, room)
            except ValueError as e:
                print(e)
                continue
            if command is None:
                if line.strip():
                    print("Unknown command. Type /help.")
                continue
            event, payload = command
            if event == "join_room":
                room = payload["roomId"]
            sio.emit(event, payload)
    finally:
        sio.disconnect()


if __name__ == "__main__":
    main()
