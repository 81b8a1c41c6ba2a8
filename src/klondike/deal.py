# deal.py - seeded shuffle and the initial Klondike layout
import logging
import time
from typing import Callable, List, Optional

from klondike.cards import DECK_SIZE
from klondike.state import (
    GameState, BoundedPile, TableauPile, DrawMode,
    STOCK_CAPACITY, TABLEAU_PILES, TABLEAU_CAPACITY, FOUNDATION_PILES,
)
from klondike import selection as S

logger = logging.getLogger(__name__)

DEAL_COST = 52


class Lcg:
    """31-bit linear congruential generator with rejection-sampled bounds.

    Kept bit-for-bit so that a given seed always produces the same deal.
    """

    MULTIPLIER = 214013
    INCREMENT = 2531011
    MASK = (1 << 31) - 1

    def __init__(self, seed: int):
        self.seed = int(seed) & self.MASK

    def next(self) -> int:
        self.seed = (self.seed * self.MULTIPLIER + self.INCREMENT) & self.MASK
        return self.seed

    def rnd(self, max_value: int) -> int:
        """Return a value in ``[0, max_value]`` from the top five bits of the state.

        Only 0..31 can come out of five bits, so any ``max_value`` of 31 or
        more never rejects; ``max_value`` must lie in 0..63.
        """
        if not 0 <= max_value <= 63:
            raise ValueError(f"rnd bound out of range: {max_value}")
        while True:
            v = self.next() >> 26
            if v <= max_value:
                return v


def shuffled_deck(rng: Lcg) -> List[int]:
    deck = list(range(DECK_SIZE))
    for i in range(DECK_SIZE - 1, 0, -1):
        j = rng.rnd(i)
        deck[i], deck[j] = deck[j], deck[i]
    return deck


def shuffle_and_deal(state: GameState, seed: Optional[int] = None,
                     clock: Callable[[], float] = time.time) -> GameState:
    """Deal a fresh game into ``state`` in place and charge the deal cost."""
    if seed is None:
        seed = int(clock())
    deck = shuffled_deck(Lcg(seed))

    state.stock = BoundedPile(STOCK_CAPACITY, deck[:STOCK_CAPACITY])
    state.talon = 0
    state.talon_showing = 2 if state.draw_mode == DrawMode.THREE else 0
    state.foundations = [None] * FOUNDATION_PILES

    tableau = []
    k = STOCK_CAPACITY
    for i in range(TABLEAU_PILES):
        tableau.append(TableauPile(BoundedPile(TABLEAU_CAPACITY, deck[k:k + i + 1]), hidden_count=i))
        k += i + 1
    state.tableau = tableau

    state.win = False
    state.score -= DEAL_COST
    state.flips = 0
    logger.debug("Dealt new game with seed %d", seed)
    S.select_talon(state)
    return state
