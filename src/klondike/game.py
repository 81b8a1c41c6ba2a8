# game.py - command surface for the input layer and the menu/settings layer
import logging
import time
from typing import Callable, Optional

from klondike import deal as D
from klondike import persistence as P
from klondike import rules as R
from klondike import selection as S
from klondike.state import GameState, DrawMode, FlipLimit, ScoreDisplay, Mode, SelectingSource

logger = logging.getLogger(__name__)


def score_text(score: int) -> str:
    return f"-${-score}" if score < 0 else f"${score}"


class KlondikeGame:
    """Owns one GameState and applies the four player commands to it.

    Every command returns True when the board or the cursor changed, and
    does nothing once the game is won. ``on_win`` is called exactly once,
    at the moment the last King reaches its foundation.
    """

    def __init__(self, state: Optional[GameState] = None,
                 on_win: Optional[Callable[[], None]] = None,
                 clock: Callable[[], float] = time.time):
        self.state = state if state is not None else GameState()
        self.on_win = on_win
        self.clock = clock

    # ---------- Lifecycle ----------
    def new_deal(self, seed: Optional[int] = None):
        D.shuffle_and_deal(self.state, seed=seed, clock=self.clock)

    def start(self, store: P.KeyValueStore, seed: Optional[int] = None) -> bool:
        """Resume the saved game, or deal a fresh one. Returns True if resumed."""
        loaded = P.load_game(store)
        if loaded is not None:
            self.state = loaded
            return True
        logger.debug("No usable saved game; dealing a new one")
        self.state = GameState()
        self.new_deal(seed)
        return False

    def save(self, store: P.KeyValueStore):
        P.save_game(self.state, store)

    # ---------- Commands ----------
    def _fingerprint(self):
        return P.encode_state(self.state), self.state.cursor

    def _run(self, command: Callable[[GameState], None]) -> bool:
        if self.state.win:
            return False
        before = self._fingerprint()
        command(self.state)
        if self.state.win:
            logger.debug("Game won with score %s", score_text(self.state.score))
            if self.on_win is not None:
                self.on_win()
        return self._fingerprint() != before

    def advance_selection(self) -> bool:
        return self._run(S.select_next_valid_pile)

    def select(self) -> bool:
        def _select(state: GameState):
            if state.mode == Mode.SELECT_SOURCE:
                S.begin_move(state)
            else:
                S.complete_move(state)
        return self._run(_select)

    def draw_or_cancel(self) -> bool:
        def _draw(state: GameState):
            if state.mode == Mode.SELECT_SOURCE:
                R.deal_card_from_stock(state)
            S.select_talon(state)
        return self._run(_draw)

    def auto_sweep(self) -> bool:
        def _sweep(state: GameState):
            R.automatically_move_to_foundations(state)
            state.cursor = SelectingSource(state.selection)
            S.select_valid_pile(state)
        return self._run(_sweep)

    # ---------- Settings ----------
    def toggle_draw_mode(self):
        state = self.state
        if state.draw_mode == DrawMode.ONE:
            state.draw_mode = DrawMode.THREE
            state.talon_showing = max(0, min(2, state.stock_count - state.talon - 1))
        else:
            state.draw_mode = DrawMode.ONE
            state.talon_showing = 0

    def cycle_flip_limit(self):
        self.state.flip_limit = FlipLimit((self.state.flip_limit + 1) % len(FlipLimit))

    def cycle_score_display(self):
        self.state.score_display = ScoreDisplay((self.state.score_display + 1) % len(ScoreDisplay))

    def reset_score(self):
        self.state.score = 0

    @property
    def score_label(self) -> Optional[str]:
        if self.state.score_display == ScoreDisplay.HIDE:
            return None
        return score_text(self.state.score)
