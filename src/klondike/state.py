# state.py - the game-state aggregate every operation works on
from dataclasses import dataclass, field
from enum import IntEnum
from typing import ClassVar, Iterable, Iterator, List, Optional, Union

from klondike.cards import suit_of, rank_of, make_card

STOCK_CAPACITY = 24
TABLEAU_CAPACITY = 19
TABLEAU_PILES = 7
FOUNDATION_PILES = 4

# Pile identifiers used by the selection cursor
PILE_TABLEAU_LEFT = 0
PILE_TABLEAU_RIGHT = 6
PILE_TALON = 7
PILE_FOUNDATIONS = 8

# Returned by rules.can_move_to_foundations when no slot accepts the card
NO_FOUNDATION = FOUNDATION_PILES


class PileOverflowError(IndexError):
    """A fixed-capacity pile was asked to hold more cards than it can."""


class BoundedPile:
    """Ordered cards (bottom to top) with a hard capacity."""

    __slots__ = ("capacity", "_cards")

    def __init__(self, capacity: int, cards: Iterable[int] = ()):
        self.capacity = capacity
        self._cards: List[int] = []
        for c in cards:
            self.append(c)

    def append(self, card: int):
        if len(self._cards) >= self.capacity:
            raise PileOverflowError(f"pile capacity {self.capacity} exceeded")
        self._cards.append(card)

    def extend(self, cards: Iterable[int]):
        for c in cards:
            self.append(c)

    def pop(self, index: int = -1) -> int:
        return self._cards.pop(index)

    def truncate(self, length: int):
        del self._cards[max(0, length):]

    def clear(self):
        self._cards.clear()

    def tolist(self) -> List[int]:
        return list(self._cards)

    def __len__(self):
        return len(self._cards)

    def __getitem__(self, index):
        return self._cards[index]

    def __iter__(self) -> Iterator[int]:
        return iter(self._cards)

    def __eq__(self, other):
        if isinstance(other, BoundedPile):
            return self._cards == other._cards
        if isinstance(other, list):
            return self._cards == other
        return NotImplemented

    def __repr__(self):
        return f"BoundedPile({self.capacity}, {self._cards!r})"


@dataclass
class TableauPile:
    cards: BoundedPile = field(default_factory=lambda: BoundedPile(TABLEAU_CAPACITY))
    hidden_count: int = 0

    @property
    def count(self) -> int:
        return len(self.cards)

    @property
    def top(self) -> Optional[int]:
        return self.cards[-1] if len(self.cards) else None

    def face_up_cards(self) -> List[int]:
        return self.cards.tolist()[self.hidden_count:]

    def multiple_cards_showing(self) -> bool:
        return self.count - self.hidden_count > 1

    def reveal_top(self) -> bool:
        """Turn the top card face-up when every remaining card is hidden."""
        if self.hidden_count > 0 and self.count == self.hidden_count:
            self.hidden_count -= 1
            return True
        return False


class DrawMode(IntEnum):
    ONE = 0
    THREE = 1

    @property
    def label(self) -> str:
        return ("One Card", "Three Cards")[self]


# flips is saved in a single byte
MAX_FLIPS = 255


class FlipLimit(IntEnum):
    NO_LIMIT = 0
    ZERO = 1
    ONE = 2
    THREE = 3

    @property
    def label(self) -> str:
        return ("No Limit", "Zero", "One", "Three")[self]

    @property
    def max_flips(self) -> Optional[int]:
        return (None, 0, 1, 3)[self]

    def allows(self, flips: int) -> bool:
        limit = self.max_flips
        return limit is None or flips < limit


class ScoreDisplay(IntEnum):
    SHOW = 0
    HIDE = 1

    @property
    def label(self) -> str:
        return ("Show", "Hide")[self]


class Mode(IntEnum):
    SELECT_SOURCE = 0
    SELECT_DESTINATION = 1


@dataclass(frozen=True)
class SelectingSource:
    selection: int
    mode: ClassVar[Mode] = Mode.SELECT_SOURCE


@dataclass(frozen=True)
class SelectingDestination:
    source: int
    selection: int
    mode: ClassVar[Mode] = Mode.SELECT_DESTINATION


Cursor = Union[SelectingSource, SelectingDestination]


@dataclass
class GameState:
    stock: BoundedPile = field(default_factory=lambda: BoundedPile(STOCK_CAPACITY))
    talon: int = 0
    talon_showing: int = 0
    foundations: List[Optional[int]] = field(default_factory=lambda: [None] * FOUNDATION_PILES)
    tableau: List[TableauPile] = field(default_factory=lambda: [TableauPile() for _ in range(TABLEAU_PILES)])
    score: int = 0
    win: bool = False
    flips: int = 0
    draw_mode: DrawMode = DrawMode.ONE
    flip_limit: FlipLimit = FlipLimit.NO_LIMIT
    score_display: ScoreDisplay = ScoreDisplay.SHOW
    # The cursor is rebuilt after every deal and load, so it is not part of equality.
    cursor: Cursor = field(default_factory=lambda: SelectingSource(PILE_TALON), compare=False)

    @property
    def stock_count(self) -> int:
        return len(self.stock)

    @property
    def mode(self) -> Mode:
        return self.cursor.mode

    @property
    def selection(self) -> int:
        return self.cursor.selection

    def talon_window(self) -> List[int]:
        """Face-up talon cards, oldest first; the last one is playable."""
        end = min(self.talon + self.talon_showing + 1, self.stock_count)
        return self.stock.tolist()[self.talon:end]

    def all_cards(self) -> List[int]:
        """Every card accounted for, including those buried under foundation tops."""
        cards = self.stock.tolist()
        for pile in self.tableau:
            cards.extend(pile.cards)
        for top in self.foundations:
            if top is not None:
                cards.extend(make_card(r, suit_of(top)) for r in range(rank_of(top) + 1))
        return cards
