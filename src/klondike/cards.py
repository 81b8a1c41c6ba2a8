# cards.py - compact integer card encoding (card = rank * 4 + suit)
from typing import Optional

DECK_SIZE = 52

ACE = 0
KING = 12

SPADE, CLUB, HEART, DIAMOND = 0, 1, 2, 3

# Smallest card value whose rank is King; a foundation is complete once its top is >= this.
KING_POSITION = KING * 4

RANK_TO_TEXT = ("A", "2", "3", "4", "5", "6", "7", "8", "9", "10", "J", "Q", "K")
SUIT_GLYPHS = ("♠", "♣", "♥", "♦")


def rank_of(card: int) -> int:
    return card // 4


def suit_of(card: int) -> int:
    return card % 4


def is_red(suit: int) -> bool:
    return (suit >> 1) == 1


def make_card(rank: int, suit: int) -> int:
    return rank * 4 + suit


def opposite_colors(suit_a: int, suit_b: int) -> bool:
    return (suit_a >> 1) != (suit_b >> 1)


def card_label(card: Optional[int]) -> str:
    """Short text form such as ``"10♥"``; ``"--"`` for an empty slot."""
    if card is None:
        return "--"
    return RANK_TO_TEXT[rank_of(card)] + SUIT_GLYPHS[suit_of(card)]
