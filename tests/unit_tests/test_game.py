import logging
import random

import pytest

from klondike import persistence as P
from klondike.cards import make_card, rank_of, KING
from klondike.deal import shuffle_and_deal
from klondike.game import KlondikeGame, score_text
from klondike.state import (
    GameState, BoundedPile, TableauPile, DrawMode, FlipLimit, ScoreDisplay,
    SelectingSource, SelectingDestination, Mode,
    STOCK_CAPACITY, TABLEAU_CAPACITY, PILE_TALON, PILE_FOUNDATIONS,
)


class MemoryStore:
    def __init__(self):
        self.records = {}

    def read(self, key, length):
        data = self.records.get(key)
        return None if data is None else data[:length]

    def write(self, key, data):
        self.records[key] = bytes(data)


def _dealt_game(seed: int = 20141018, **kwargs) -> KlondikeGame:
    return KlondikeGame(state=shuffle_and_deal(GameState(**kwargs), seed=seed))


def _near_win() -> GameState:
    state = GameState()
    state.foundations = [make_card(11, s) for s in range(4)]
    for s in range(4):
        state.tableau[s] = TableauPile(BoundedPile(TABLEAU_CAPACITY, [make_card(KING, s)]), 0)
    return state


def _foundation_occupancy(state: GameState) -> int:
    return sum(0 if top is None else rank_of(top) + 1 for top in state.foundations)


@pytest.mark.parametrize("score, text", [(-52, "-$52"), (0, "$0"), (15, "$15")])
def test_score_text(score: int, text: str) -> None:
    assert score_text(score) == text


def test_draw_advances_talon() -> None:
    game = _dealt_game()
    assert game.draw_or_cancel()
    assert game.state.talon == 1
    assert game.state.cursor == SelectingSource(PILE_TALON)


def test_draw_cancels_destination_selection_without_drawing() -> None:
    game = _dealt_game()
    game.state.cursor = SelectingDestination(PILE_TALON, 0)
    assert game.draw_or_cancel()
    assert game.state.talon == 0
    assert game.state.cursor == SelectingSource(PILE_TALON)


def test_select_then_complete_foundation_move() -> None:
    state = GameState()
    ace = make_card(0, 2)
    state.tableau[0] = TableauPile(BoundedPile(TABLEAU_CAPACITY, [make_card(6, 0), ace]), 1)
    state.stock = BoundedPile(STOCK_CAPACITY, [make_card(9, 3)])
    state.cursor = SelectingSource(0)
    game = KlondikeGame(state=state)

    assert game.select()
    assert state.cursor == SelectingDestination(0, PILE_FOUNDATIONS)
    assert game.select()
    assert state.foundations[0] == ace
    assert state.score == 5
    assert state.tableau[0].hidden_count == 0
    assert state.mode == Mode.SELECT_SOURCE


def test_select_on_invalid_source_changes_nothing() -> None:
    state = GameState()
    state.tableau[0] = TableauPile(BoundedPile(TABLEAU_CAPACITY, [make_card(5, 0)]), 0)
    state.cursor = SelectingSource(0)
    game = KlondikeGame(state=state)
    assert not game.select()
    assert state.cursor == SelectingSource(0)


def test_advance_reports_change() -> None:
    game = _dealt_game()
    before = game.state.cursor
    changed = game.advance_selection()
    assert changed == (game.state.cursor != before)


def test_auto_sweep_wins_and_alerts_once() -> None:
    alerts = []
    game = KlondikeGame(state=_near_win(), on_win=lambda: alerts.append(True))
    assert game.auto_sweep()
    assert game.state.win is True
    assert alerts == [True]

    assert not game.auto_sweep()
    assert not game.advance_selection()
    assert not game.select()
    assert not game.draw_or_cancel()
    assert alerts == [True]


def test_select_onto_last_foundation_wins_and_alerts_once() -> None:
    state = _near_win()
    for s in range(3):
        state.foundations[s] = make_card(KING, s)
        state.tableau[s] = TableauPile()
    state.cursor = SelectingSource(3)
    alerts = []
    game = KlondikeGame(state=state, on_win=lambda: alerts.append(True))

    assert game.select()
    assert state.cursor == SelectingDestination(3, PILE_FOUNDATIONS)
    assert alerts == []
    assert game.select()
    assert state.win is True
    assert state.foundations[3] == make_card(KING, 3)
    assert alerts == [True]
    assert not game.select()
    assert alerts == [True]


def test_auto_sweep_cancels_destination_selection() -> None:
    game = _dealt_game()
    game.state.cursor = SelectingDestination(PILE_TALON, PILE_FOUNDATIONS)
    assert game.auto_sweep()
    assert game.state.mode == Mode.SELECT_SOURCE


def test_commands_ignored_after_win() -> None:
    game = _dealt_game()
    game.state.win = True
    snapshot = P.encode_state(game.state), game.state.cursor
    for command in (game.advance_selection, game.select, game.draw_or_cancel, game.auto_sweep):
        assert command() is False
    assert (P.encode_state(game.state), game.state.cursor) == snapshot


def test_toggle_draw_mode() -> None:
    game = _dealt_game()
    game.state.talon = 22
    game.toggle_draw_mode()
    assert game.state.draw_mode == DrawMode.THREE
    assert game.state.talon_showing == 1
    game.toggle_draw_mode()
    assert game.state.draw_mode == DrawMode.ONE
    assert game.state.talon_showing == 0


def test_cycle_flip_limit() -> None:
    game = _dealt_game()
    seen = []
    for _ in range(4):
        game.cycle_flip_limit()
        seen.append(game.state.flip_limit)
    assert seen == [FlipLimit.ZERO, FlipLimit.ONE, FlipLimit.THREE, FlipLimit.NO_LIMIT]


def test_score_display_and_reset() -> None:
    game = _dealt_game()
    assert game.score_label == "-$52"
    game.cycle_score_display()
    assert game.state.score_display == ScoreDisplay.HIDE
    assert game.score_label is None
    game.cycle_score_display()
    game.reset_score()
    assert game.score_label == "$0"


def test_new_deal_costs_52() -> None:
    game = _dealt_game()
    game.new_deal(seed=8)
    assert game.state.score == -104


def test_start_resumes_saved_game() -> None:
    store = MemoryStore()
    first = _dealt_game(seed=11)
    first.draw_or_cancel()
    first.save(store)

    second = KlondikeGame()
    assert second.start(store) is True
    assert second.state == first.state


def test_start_without_save_deals_from_zero_score() -> None:
    game = KlondikeGame(clock=lambda: 1234)
    assert game.start(MemoryStore()) is False
    assert game.state.score == -52
    assert game.state == shuffle_and_deal(GameState(), seed=1234)


@pytest.mark.parametrize("seed", [1, 2, 3, 20141018])
@pytest.mark.parametrize("draw_mode", [DrawMode.ONE, DrawMode.THREE])
def test_random_play_keeps_invariants(seed: int, draw_mode: DrawMode) -> None:
    game = _dealt_game(seed=seed, draw_mode=draw_mode)
    rng = random.Random(seed)
    commands = [game.advance_selection, game.select, game.select, game.draw_or_cancel, game.auto_sweep]
    occupancy = _foundation_occupancy(game.state)
    for _ in range(600):
        rng.choice(commands)()
        state = game.state
        assert sorted(state.all_cards()) == list(range(52))
        now = _foundation_occupancy(state)
        assert now >= occupancy
        occupancy = now
        for pile in state.tableau:
            assert 0 <= pile.hidden_count <= pile.count <= TABLEAU_CAPACITY
            assert pile.count == 0 or pile.hidden_count < pile.count
        if state.stock_count:
            assert state.talon + state.talon_showing < state.stock_count
        assert state.win == all(top is not None and top >= 48 for top in state.foundations)


def test_start_and_win_log_at_debug(caplog) -> None:
    caplog.set_level(logging.DEBUG, logger="klondike.game")
    KlondikeGame(clock=lambda: 5).start(MemoryStore())
    KlondikeGame(state=_near_win()).auto_sweep()
    messages = {r.getMessage().split(";")[0].split(" with")[0]: r.levelno
                for r in caplog.records if r.name == "klondike.game"}
    assert messages == {"No usable saved game": logging.DEBUG, "Game won": logging.DEBUG}
