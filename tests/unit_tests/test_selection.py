from typing import Sequence

from klondike import selection as S
from klondike.cards import make_card, ACE, KING, SPADE, CLUB, HEART, DIAMOND
from klondike.state import (
    GameState, BoundedPile, TableauPile, SelectingSource, SelectingDestination, Mode,
    STOCK_CAPACITY, TABLEAU_CAPACITY, PILE_TALON, PILE_FOUNDATIONS,
)


def _board(piles: Sequence[Sequence[int]] = (), stock: Sequence[int] = (), **kwargs) -> GameState:
    state = GameState(**kwargs)
    for i, cards in enumerate(piles):
        state.tableau[i] = TableauPile(BoundedPile(TABLEAU_CAPACITY, cards), 0)
    state.stock = BoundedPile(STOCK_CAPACITY, stock)
    return state


AS = make_card(ACE, SPADE)
FIVE_H = make_card(4, HEART)
SIX_S = make_card(5, SPADE)
SIX_C = make_card(5, CLUB)
NINE_D = make_card(8, DIAMOND)
TEN_D = make_card(9, DIAMOND)


def test_talon_is_always_a_valid_source() -> None:
    assert S.source_pile_is_valid(_board(), PILE_TALON)


def test_tableau_source_needs_a_legal_move() -> None:
    state = _board(piles=[[FIVE_H], [SIX_S], [NINE_D], [AS]])
    assert S.source_pile_is_valid(state, 0)      # 5H onto 6S
    assert not S.source_pile_is_valid(state, 1)  # 6S has nowhere to go
    assert not S.source_pile_is_valid(state, 2)
    assert S.source_pile_is_valid(state, 3)      # ace to foundations
    assert not S.source_pile_is_valid(state, PILE_FOUNDATIONS)


def test_select_talon_with_stock() -> None:
    state = _board(piles=[[AS]], stock=[NINE_D], cursor=SelectingDestination(0, 3))
    S.select_talon(state)
    assert state.cursor == SelectingSource(PILE_TALON)


def test_select_talon_with_empty_stock_prefers_playable_pile() -> None:
    state = _board(piles=[[NINE_D], [SIX_S], [FIVE_H]])
    S.select_talon(state)
    assert state.cursor == SelectingSource(2)


def test_select_talon_with_nothing_playable_falls_back_to_talon() -> None:
    state = _board(piles=[[NINE_D], [SIX_S]])
    S.select_talon(state)
    assert state.cursor == SelectingSource(PILE_TALON)


def test_select_talon_ignored_after_win() -> None:
    state = _board(stock=[AS], win=True, cursor=SelectingSource(2))
    S.select_talon(state)
    assert state.cursor == SelectingSource(2)


def test_next_source_skips_invalid_and_wraps() -> None:
    state = _board(piles=[[FIVE_H], [SIX_S], [NINE_D], [AS]], stock=[TEN_D])
    state.cursor = SelectingSource(0)
    S.select_next_valid_pile(state)
    assert state.selection == 3
    S.select_next_valid_pile(state)
    assert state.selection == PILE_TALON
    S.select_next_valid_pile(state)
    assert state.selection == 0
    assert state.mode == Mode.SELECT_SOURCE


def test_next_source_reroutes_talon_when_stock_empty() -> None:
    state = _board(piles=[[FIVE_H], [SIX_S]], cursor=SelectingSource(0))
    S.select_next_valid_pile(state)
    # only the talon is left, and select_talon sends us back to pile 0
    assert state.cursor == SelectingSource(0)


def test_begin_move_starts_on_foundations_when_legal() -> None:
    state = _board(piles=[[AS]], cursor=SelectingSource(0))
    assert S.begin_move(state)
    assert state.cursor == SelectingDestination(0, PILE_FOUNDATIONS)


def test_begin_move_skips_to_first_tableau_destination() -> None:
    state = _board(piles=[[SIX_S], [NINE_D], [FIVE_H]], cursor=SelectingSource(2))
    assert S.begin_move(state)
    assert state.cursor == SelectingDestination(2, 0)


def test_begin_move_rejects_invalid_source() -> None:
    state = _board(piles=[[SIX_S]], cursor=SelectingSource(0))
    assert not S.begin_move(state)
    assert state.cursor == SelectingSource(0)


def test_destination_cycle_covers_tableau_and_foundations() -> None:
    # AS can go to the foundations; 5H-on-6S style moves are not involved
    state = _board(piles=[[AS]], cursor=SelectingDestination(0, PILE_FOUNDATIONS))
    S.select_next_valid_pile(state)
    assert state.cursor == SelectingDestination(0, PILE_FOUNDATIONS)


def test_destination_cycle_moves_between_valid_piles() -> None:
    state = _board(piles=[[SIX_S], [FIVE_H], [SIX_C]], cursor=SelectingDestination(1, 0))
    S.select_next_valid_pile(state)
    assert state.cursor == SelectingDestination(1, 2)
    S.select_next_valid_pile(state)
    assert state.cursor == SelectingDestination(1, 0)


def test_no_destination_aborts_to_source() -> None:
    state = _board(piles=[[SIX_S]], stock=[NINE_D], cursor=SelectingDestination(PILE_TALON, PILE_FOUNDATIONS))
    S.select_valid_pile(state)
    assert state.cursor == SelectingSource(PILE_TALON)


def test_complete_move_to_foundations_rehomes_cursor() -> None:
    state = _board(piles=[[AS]], stock=[NINE_D], cursor=SelectingDestination(0, PILE_FOUNDATIONS))
    assert S.complete_move(state)
    assert state.foundations[0] == AS
    assert state.cursor == SelectingSource(PILE_TALON)


def test_complete_move_to_tableau_revalidates_on_destination() -> None:
    state = _board(piles=[[SIX_S], [FIVE_H]], stock=[NINE_D], cursor=SelectingDestination(1, 0))
    assert S.complete_move(state)
    assert state.tableau[0].cards == [SIX_S, FIVE_H]
    # pile 0 can't go anywhere, nor pile 1 (empty): next valid source is the talon
    assert state.cursor == SelectingSource(PILE_TALON)


def test_selection_is_valid_matches_mode() -> None:
    state = _board(piles=[[SIX_S], [FIVE_H]], cursor=SelectingDestination(1, 0))
    assert S.selection_is_valid(state)
    state.cursor = SelectingSource(0)
    assert not S.selection_is_valid(state)


def test_king_destination_on_empty_pile() -> None:
    kh = make_card(KING, HEART)
    state = _board(piles=[[NINE_D, kh]], cursor=SelectingSource(0))
    assert S.begin_move(state)
    assert state.cursor == SelectingDestination(0, 1)
