import pytest

from models import SEATS, Card, Phase, Room, Trick, next_seat


def test_card_code_and_parse():
    card = Card.parse("TD")
    assert card == Card("T", "D")
    assert card.code == "TD"
    assert str(card) == "TD"
    assert Card.parse("as") == Card("A", "S")


@pytest.mark.parametrize("code", ["", "A", "10S", "XS", "AX", None, 12])
def test_card_parse_rejects_garbage(code):
    with pytest.raises(ValueError):
        Card.parse(code)


def test_card_is_hashable_value():
    assert len({Card("A", "S"), Card.parse("AS")}) == 1


def test_sort_key_orders_by_suit_then_rank():
    cards = [Card.parse(c) for c in ["2H", "AS", "3S", "KC", "TD"]]
    assert [c.code for c in sorted(cards, key=Card.sort_key)] == ["3S", "AS", "2H", "TD", "KC"]


def test_next_seat_rotation():
    assert [next_seat(s) for s in SEATS] == ["E", "S", "W", "N"]


def test_trick_progress():
    trick = Trick(lead_seat="N")
    assert trick.current_seat == "N"
    assert trick.cards == {"N": None, "E": None, "S": None, "W": None}
    trick.cards["N"] = Card.parse("2C")
    trick.current_index = 1
    assert trick.current_seat == "E"
    assert trick.played_cards() == [Card.parse("2C")]
    trick.current_index = 4
    assert trick.is_complete()
    assert trick.current_seat is None


def test_trick_to_dict_uses_codes():
    trick = Trick(lead_seat="E")
    trick.cards["N"] = Card.parse("QH")
    trick.current_index = 1
    assert trick.to_dict() == {
        "leadSeat": "E",
        "cards": {"N": "QH", "E": None, "S": None, "W": None},
        "order": ["N", "E", "S", "W"],
        "currentIndex": 1,
    }


def test_add_player_fills_seats_in_order():
    room = Room("R")
    assert [room.add_player(f"s{i}", f"P{i}") for i in range(4)] == ["N", "E", "S", "W"]
    assert room.is_full()
    assert room.add_player("s5", "P5") is None
    assert "s5" not in room.players


def test_remove_player_frees_seat_and_resets(full_room):
    sid = full_room.seats["S"]
    assert full_room.remove_player(sid) == "S"
    assert full_room.seats["S"] is None
    assert sid not in full_room.players
    assert full_room.phase == Phase.WAITING
    assert full_room.trick is None
    assert full_room.occupied_count() == 3


def test_remove_unknown_player_is_noop(full_room):
    assert full_room.remove_player("nobody") is None
    assert full_room.phase == Phase.PLAYING


def test_public_state_has_no_hands(full_room):
    state = full_room.public_state()
    assert set(state) == {"seats", "players", "phase"}
    assert state["phase"] == "playing"
    for info in state["players"].values():
        assert set(info) == {"name", "seat"}


def test_private_state_only_own_hand(full_room):
    for sid, player in full_room.players.items():
        state = full_room.private_state(sid)
        assert state["yourSeat"] == player.seat
        assert state["yourHand"] == [c.code for c in player.hand]
        others = {c.code for p in full_room.players.values() if p is not player for c in p.hand}
        assert not others & set(state["yourHand"])
        assert state["trick"]["leadSeat"] == "N"
