import logging
import random
from typing import Dict, List, Optional

from models import SEATS, RANKS, SUITS, Card, Phase, Room, Trick, next_seat

logger = logging.getLogger(__name__)

HAND_SIZE = 13


class GameError(Exception):
    """A rejected operation. ``message`` is sent back to the requester only."""

    message = 'Invalid move'

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class RoomFull(GameError):
    message = 'Room is full'


class AlreadySeated(GameError):
    message = 'You are already in this room'


class OutOfTurn(GameError):
    message = 'Not your turn!'


class CardNotHeld(GameError):
    message = 'You do not have this card.'


def create_deck() -> List[Card]:
    return [Card(r, s) for s in SUITS for r in RANKS]


def shuffle_deck(rng: Optional[random.Random] = None) -> List[Card]:
    # random.shuffle is an unbiased Fisher-Yates
    deck = create_deck()
    (rng or random).shuffle(deck)
    return deck


def sort_hand(cards) -> List[Card]:
    return sorted(cards, key=Card.sort_key)


def deal_cards(deck: List[Card]) -> Dict[str, List[Card]]:
    if len(deck) != HAND_SIZE * len(SEATS):
        raise ValueError(f"Expected {HAND_SIZE * len(SEATS)} cards, got {len(deck)}")
    return {seat: deck[i * HAND_SIZE:(i + 1) * HAND_SIZE] for i, seat in enumerate(SEATS)}


def assign_seat(room: Room, sid: str, name: str) -> str:
    if sid in room.players:
        raise AlreadySeated()
    seat = room.add_player(sid, name)
    if seat is None:
        raise RoomFull()
    logger.info(f"{name} ({sid}) took seat {seat} in room {room.room_id}")
    return seat


def should_start(room: Room) -> bool:
    return room.is_full() and room.phase == Phase.WAITING


def start_game(room: Room, rng: Optional[random.Random] = None) -> None:
    """Deal a fresh deck to the four seated players and open the first trick."""
    hands = deal_cards(shuffle_deck(rng))
    for seat, cards in hands.items():
        player = room.player_at(seat)
        if player:
            player.hand = sort_hand(cards)

    room.phase = Phase.PLAYING
    room.trick = Trick(lead_seat='N')
    room.completed = []
    logger.info(f"Game started in room {room.room_id}")


def play_card(room: Optional[Room], sid: str, code) -> Optional[Card]:
    """Apply one play to the room's current trick.

    Returns the card played, or None when the play does not apply to this room
    at all (no room, no deal in progress, or ``sid`` is not seated). Raises
    OutOfTurn / CardNotHeld without touching the room.
    """
    if room is None or room.phase != Phase.PLAYING or room.trick is None:
        return None
    player = room.players.get(sid)
    if player is None:
        return None

    trick = room.trick
    if player.seat != trick.current_seat:
        raise OutOfTurn()

    try:
        card = Card.parse(code)
    except ValueError:
        raise CardNotHeld() from None
    if not player.holds(card):
        raise CardNotHeld()

    player.hand.remove(card)
    trick.cards[player.seat] = card
    trick.current_index += 1
    return card


def rotate_trick(room: Room) -> str:
    """Set the completed trick aside and open a new one led by the next seat."""
    next_lead = next_seat(room.trick.lead_seat)
    room.completed.append(room.trick)
    room.trick = Trick(lead_seat=next_lead)
    logger.info(f"New trick in room {room.room_id}, lead {next_lead}")
    return next_lead
