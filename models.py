from enum import Enum
from dataclasses import dataclass, field
from threading import Lock
from typing import Dict, List, Optional, Tuple

SEATS = ('N', 'E', 'S', 'W')
RANKS = ('2', '3', '4', '5', '6', '7', '8', '9', 'T', 'J', 'Q', 'K', 'A')
SUITS = ('S', 'H', 'D', 'C')


class Phase(Enum):
    WAITING = 'waiting'
    PLAYING = 'playing'


def next_seat(seat: str) -> str:
    """Seat following ``seat`` clockwise: N -> E -> S -> W -> N"""
    return SEATS[(SEATS.index(seat) + 1) % len(SEATS)]


@dataclass(frozen=True)
class Card:
    rank: str
    suit: str

    def __post_init__(self):
        if self.rank not in RANKS or self.suit not in SUITS:
            raise ValueError(f"Unknown card: {self.rank}{self.suit}")

    @property
    def code(self) -> str:
        return self.rank + self.suit

    @classmethod
    def parse(cls, code: str) -> 'Card':
        if not isinstance(code, str) or len(code) != 2:
            raise ValueError(f"Unknown card: {code!r}")
        return cls(code[0].upper(), code[1].upper())

    def sort_key(self) -> Tuple[int, int]:
        # display order only: suit first, then rank low to high
        return SUITS.index(self.suit), RANKS.index(self.rank)

    def __str__(self):
        return self.code


@dataclass
class Player:
    sid: str
    name: str
    seat: str
    hand: List[Card] = field(default_factory=list)

    def holds(self, card: Card) -> bool:
        return card in self.hand


@dataclass
class Trick:
    lead_seat: str
    cards: Dict[str, Optional[Card]] = field(default_factory=lambda: {s: None for s in SEATS})
    order: Tuple[str, ...] = SEATS
    current_index: int = 0

    @property
    def current_seat(self) -> Optional[str]:
        if self.is_complete():
            return None
        return self.order[self.current_index]

    def is_complete(self) -> bool:
        return self.current_index >= len(self.order)

    def played_cards(self) -> List[Card]:
        return [c for c in self.cards.values() if c is not None]

    def to_dict(self):
        return {
            'leadSeat': self.lead_seat,
            'cards': {s: (c.code if c else None) for s, c in self.cards.items()},
            'order': list(self.order),
            'currentIndex': self.current_index,
        }


@dataclass
class Room:
    room_id: str
    seats: Dict[str, Optional[str]] = field(default_factory=lambda: {s: None for s in SEATS})
    players: Dict[str, Player] = field(default_factory=dict)
    phase: Phase = Phase.WAITING
    trick: Optional[Trick] = None
    completed: List[Trick] = field(default_factory=list)
    lock: Lock = field(default_factory=Lock, repr=False, compare=False)

    def is_full(self) -> bool:
        return all(self.seats.values())

    def is_empty(self) -> bool:
        return not any(self.seats.values())

    def occupied_count(self) -> int:
        return sum(1 for sid in self.seats.values() if sid)

    def add_player(self, sid: str, name: str) -> Optional[str]:
        """Seat ``sid`` in the first free seat (N, E, S, W). None when full."""
        for seat in SEATS:
            if self.seats[seat] is None:
                self.seats[seat] = sid
                self.players[sid] = Player(sid, name, seat)
                return seat
        return None

    def remove_player(self, sid: str) -> Optional[str]:
        """Drop ``sid`` and abandon any deal in progress. Returns the freed seat."""
        player = self.players.pop(sid, None)
        if player is None:
            return None
        self.seats[player.seat] = None
        self.phase = Phase.WAITING
        self.trick = None
        self.completed = []
        return player.seat

    def player_at(self, seat: str) -> Optional[Player]:
        sid = self.seats.get(seat)
        return self.players.get(sid) if sid else None

    def get_players_info(self):
        return {sid: {'name': p.name, 'seat': p.seat} for sid, p in self.players.items()}

    def public_state(self):
        return {
            'seats': dict(self.seats),
            'players': self.get_players_info(),
            'phase': self.phase.value,
        }

    def private_state(self, sid: str):
        """Public state plus the board and the hand of ``sid`` only."""
        player = self.players[sid]
        state = self.public_state()
        state.update({
            'trick': self.trick.to_dict() if self.trick else None,
            'yourSeat': player.seat,
            'yourHand': [c.code for c in player.hand],
        })
        return state
