# rules.py - Klondike legality checks and move execution
#
# Piles are addressed by the cursor's identifiers: 0..6 tableau, 7 talon,
# 8 the foundations as a group. Every function takes the state explicitly.
import logging
from typing import Optional

from klondike.cards import rank_of, suit_of, opposite_colors, card_label, ACE, KING, KING_POSITION
from klondike.state import (
    GameState, DrawMode,
    PILE_TABLEAU_LEFT, PILE_TABLEAU_RIGHT, PILE_TALON,
    FOUNDATION_PILES, NO_FOUNDATION, MAX_FLIPS,
)

logger = logging.getLogger(__name__)

FOUNDATION_REWARD = 5


def is_tableau(pile: int) -> bool:
    return PILE_TABLEAU_LEFT <= pile <= PILE_TABLEAU_RIGHT


def clamp_talon_window(state: GameState):
    """Pull the talon window back inside the stock after cards leave it."""
    last = state.stock_count - 1
    state.talon_showing = min(state.talon_showing, 2)
    if state.talon + state.talon_showing > last:
        state.talon = max(0, min(state.talon, last))
        state.talon_showing = max(0, last - state.talon)


# ---------- Source card ----------
def source_card(state: GameState, source: int) -> Optional[int]:
    """The card that would move from ``source``, or None."""
    if source == PILE_TALON:
        i = state.talon + state.talon_showing
        if state.stock_count < state.talon_showing + 1 or i >= state.stock_count:
            return None
        return state.stock[i]
    if is_tableau(source):
        return state.tableau[source].top
    return None


def remove_source_card(state: GameState, source: int):
    if source == PILE_TALON:
        state.stock.pop(state.talon + state.talon_showing)
        if state.talon_showing > 0:
            state.talon_showing -= 1
        elif state.talon > 0:
            state.talon -= 1
        clamp_talon_window(state)
    elif is_tableau(source):
        pile = state.tableau[source]
        pile.cards.pop()
        pile.reveal_top()


# ---------- Tableau moves ----------
def tableau_rules_met(state: GameState, dest: int, src_rank: int, src_suit: int,
                      king_allowed_on_empty: bool) -> bool:
    pile = state.tableau[dest]
    if pile.count > 0:
        dest_card = pile.top
        return src_rank == rank_of(dest_card) - 1 and opposite_colors(src_suit, suit_of(dest_card))
    return src_rank == KING and king_allowed_on_empty


def can_move_single_card_to_tableau(state: GameState, source: int, dest: int) -> bool:
    if dest == source or not is_tableau(dest):
        return False
    card = source_card(state, source)
    if card is None:
        return False
    return tableau_rules_met(state, dest, rank_of(card), suit_of(card), True)


def can_move_pile_to_tableau(state: GameState, source: int, dest: int) -> bool:
    if dest == source or not is_tableau(dest) or not is_tableau(source):
        return False
    pile = state.tableau[source]
    if not pile.multiple_cards_showing():
        return False
    card = pile.cards[pile.hidden_count]
    return tableau_rules_met(state, dest, rank_of(card), suit_of(card), pile.hidden_count > 0)


def can_move_to_tableau(state: GameState, source: int, dest: int) -> bool:
    return can_move_single_card_to_tableau(state, source, dest) or can_move_pile_to_tableau(state, source, dest)


def move_to_tableau(state: GameState, source: int, dest: int) -> bool:
    """Move the single top card if that is legal, else the whole face-up run."""
    if can_move_single_card_to_tableau(state, source, dest):
        state.tableau[dest].cards.append(source_card(state, source))
        remove_source_card(state, source)
        return True
    if can_move_pile_to_tableau(state, source, dest):
        pile = state.tableau[source]
        state.tableau[dest].cards.extend(pile.face_up_cards())
        pile.cards.truncate(pile.hidden_count)
        pile.reveal_top()
        return True
    return False


# ---------- Foundation moves ----------
def can_move_to_foundations(state: GameState, source: int) -> int:
    """Index of the first foundation slot accepting the source card, else NO_FOUNDATION."""
    card = source_card(state, source)
    if card is None:
        return NO_FOUNDATION
    src_rank, src_suit = rank_of(card), suit_of(card)
    for i, top in enumerate(state.foundations):
        if top is None:
            if src_rank == ACE:
                return i
            continue
        if suit_of(top) == src_suit and src_rank == rank_of(top) + 1:
            return i
    return NO_FOUNDATION


def foundations_complete(state: GameState) -> bool:
    return all(top is not None and top >= KING_POSITION for top in state.foundations)


def move_to_foundation(state: GameState, source: int) -> bool:
    i = can_move_to_foundations(state, source)
    if i >= FOUNDATION_PILES:
        return False
    card = source_card(state, source)
    state.foundations[i] = card
    remove_source_card(state, source)
    state.score += FOUNDATION_REWARD
    logger.debug("%s to foundation %d", card_label(card), i)
    if not state.win and foundations_complete(state):
        state.win = True
        logger.debug("All foundations complete")
    return True


def automatically_move_to_foundations(state: GameState) -> int:
    """Sweep tableau tops onto the foundations, pass after pass, until a pass moves nothing."""
    moved = 0
    while True:
        success = False
        for i in range(PILE_TABLEAU_LEFT, PILE_TABLEAU_RIGHT + 1):
            if state.tableau[i].count > 0 and move_to_foundation(state, i):
                success = True
                moved += 1
        if not success:
            break
    logger.debug("Auto-sweep moved %d card(s)", moved)
    return moved


# ---------- Stock ----------
def deal_card_from_stock(state: GameState) -> bool:
    """Advance the talon window, or turn the talon back over at the end of the stock."""
    before = (state.talon, state.talon_showing, state.flips)
    if state.stock_count > state.talon_showing + 1:
        if state.talon + state.talon_showing + 1 == state.stock_count:
            if state.flip_limit.allows(state.flips):
                state.talon = 0
                state.flips = min(state.flips + 1, MAX_FLIPS)
                logger.debug("Talon turned over (flip %d)", state.flips)
            else:
                logger.debug("Re-deal declined: flip limit %s reached", state.flip_limit.label)
        else:
            state.talon += state.talon_showing + 1
        if state.draw_mode == DrawMode.THREE:
            state.talon_showing = max(0, min(2, state.stock_count - state.talon - 1))
    return (state.talon, state.talon_showing, state.flips) != before
