import pytest

from cardroom.common.card import Card, Rank, Suit


def test_card_initialization():
    card = Card(Suit.HEARTS, Rank.EIGHT)
    assert card.suit == Suit.HEARTS
    assert card.rank == Rank.EIGHT


def test_card_repr():
    card = Card(Suit.HEARTS, Rank.EIGHT)
    assert repr(card) == "Card(Suit.HEARTS, Rank.EIGHT)"


def test_card_str():
    assert str(Card(Suit.HEARTS, Rank.EIGHT)) == "8♥"
    assert str(Card(Suit.SPADES, Rank.ACE)) == "A♠"
    assert str(Card(Suit.CLUBS, Rank.QUEEN)) == "Q♣"


def test_card_to_dict():
    assert Card(Suit.DIAMONDS, Rank.KING).to_dict() == {"suit": "♦", "rank": 13}


def test_invalid_suit():
    with pytest.raises(TypeError):
        Card("Z", Rank.EIGHT)


def test_invalid_rank():
    with pytest.raises(TypeError):
        Card(Suit.HEARTS, "invalid")


def test_plain_int_rank_is_rejected():
    with pytest.raises(TypeError):
        Card(Suit.HEARTS, 8)


def test_ranks_cover_one_to_thirteen():
    assert [int(rank) for rank in Rank] == list(range(1, 14))


def test_card_is_immutable():
    card = Card(Suit.HEARTS, Rank.EIGHT)
    with pytest.raises(AttributeError):
        card.rank = Rank.NINE


def test_card_equality_and_hash():
    card1 = Card(Suit.HEARTS, Rank.EIGHT)
    card2 = Card(Suit.HEARTS, Rank.EIGHT)
    card3 = Card(Suit.CLUBS, Rank.EIGHT)

    assert card1 == card2
    assert card1 != card3
    assert len({card1, card2, card3}) == 2
