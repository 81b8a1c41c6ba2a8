# persistence.py - fixed 82-byte game record and the store it lives in
"""Binary save format.

    Offset  Bytes  Field
    ------  -----  -----
    0       1      stock_count
    1       1      talon
    2       4      foundation[0..3]   (255 = empty)
    6       7      tableau_count[0..6]
    13      7      hidden_count[0..6]
    20      <=52   stock cards, then each tableau pile bottom to top
    72      1      win
    73      1      draw setting
    74      1      flip-limit setting
    75      1      score setting
    76      1      flips
    77      1      talon_showing
    78      4      score (signed 32-bit, little-endian)

Existing saves depend on this layout byte for byte.
"""
import logging
import os
import struct
from typing import Optional, Protocol

from klondike.cards import DECK_SIZE
from klondike.state import (
    GameState, BoundedPile, TableauPile, DrawMode, FlipLimit, ScoreDisplay,
    STOCK_CAPACITY, TABLEAU_CAPACITY, TABLEAU_PILES, FOUNDATION_PILES,
)
from klondike import rules as R
from klondike import selection as S

logger = logging.getLogger(__name__)

STATE_SIZE = 82
STATE_KEY = 0

_OFF_STOCK_COUNT = 0
_OFF_TALON = 1
_OFF_FOUNDATIONS = 2
_OFF_TABLEAU_COUNT = 6
_OFF_HIDDEN_COUNT = 13
_OFF_CARDS = 20
_OFF_WIN = 72
_OFF_DRAW = 73
_OFF_FLIPLIMIT = 74
_OFF_SCORE_SETTING = 75
_OFF_FLIPS = 76
_OFF_TALON_SHOWING = 77
_OFF_SCORE = 78

_EMPTY_FOUNDATION = 255
_SCORE = struct.Struct("<i")
_INT32_MIN, _INT32_MAX = -(1 << 31), (1 << 31) - 1


class StateFormatError(ValueError):
    """A saved record is the right size but does not describe a valid game."""


class KeyValueStore(Protocol):
    def read(self, key: int, length: int) -> Optional[bytes]: ...

    def write(self, key: int, data: bytes) -> None: ...


class FileStore:
    """Byte store keeping one file per integer key inside ``directory``."""

    def __init__(self, directory: str):
        self.directory = directory

    def _path(self, key: int) -> str:
        return os.path.join(self.directory, f"state_{key}.bin")

    def read(self, key: int, length: int) -> Optional[bytes]:
        try:
            with open(self._path(key), "rb") as f:
                return f.read(length)
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.warning("Could not read saved game %s: %s", self._path(key), exc)
            return None

    def write(self, key: int, data: bytes) -> None:
        try:
            os.makedirs(self.directory, exist_ok=True)
            with open(self._path(key), "wb") as f:
                f.write(data)
        except OSError as exc:
            logger.warning("Could not write saved game %s: %s", self._path(key), exc)


def encode_state(state: GameState) -> bytes:
    buf = bytearray(STATE_SIZE)
    buf[_OFF_STOCK_COUNT] = state.stock_count
    buf[_OFF_TALON] = state.talon
    for i, top in enumerate(state.foundations):
        buf[_OFF_FOUNDATIONS + i] = _EMPTY_FOUNDATION if top is None else top
    b = _OFF_CARDS
    for card in state.stock:
        buf[b] = card
        b += 1
    for i, pile in enumerate(state.tableau):
        buf[_OFF_TABLEAU_COUNT + i] = pile.count
        buf[_OFF_HIDDEN_COUNT + i] = pile.hidden_count
        for card in pile.cards:
            buf[b] = card
            b += 1
    buf[_OFF_WIN] = 1 if state.win else 0
    buf[_OFF_DRAW] = int(state.draw_mode)
    buf[_OFF_FLIPLIMIT] = int(state.flip_limit)
    buf[_OFF_SCORE_SETTING] = int(state.score_display)
    buf[_OFF_FLIPS] = state.flips
    buf[_OFF_TALON_SHOWING] = state.talon_showing
    _SCORE.pack_into(buf, _OFF_SCORE, max(_INT32_MIN, min(_INT32_MAX, state.score)))
    return bytes(buf)


def _setting(enum_cls, raw: int, name: str):
    try:
        return enum_cls(raw)
    except ValueError:
        raise StateFormatError(f"unknown {name} setting {raw}") from None


def decode_state(data: bytes) -> GameState:
    """Rebuild a game from a saved record. The cursor is left at its default."""
    if len(data) < STATE_SIZE:
        raise StateFormatError(f"record is {len(data)} bytes, expected {STATE_SIZE}")

    stock_count = data[_OFF_STOCK_COUNT]
    if stock_count > STOCK_CAPACITY:
        raise StateFormatError(f"stock_count {stock_count} exceeds {STOCK_CAPACITY}")
    counts = [data[_OFF_TABLEAU_COUNT + i] for i in range(TABLEAU_PILES)]
    hidden = [data[_OFF_HIDDEN_COUNT + i] for i in range(TABLEAU_PILES)]
    for i in range(TABLEAU_PILES):
        if counts[i] > TABLEAU_CAPACITY or hidden[i] > counts[i] or (counts[i] and hidden[i] == counts[i]):
            raise StateFormatError(f"tableau pile {i} has count {counts[i]} and {hidden[i]} hidden")
    if _OFF_CARDS + stock_count + sum(counts) > _OFF_WIN:
        raise StateFormatError("card area overflows the record")

    state = GameState()
    b = _OFF_CARDS
    state.stock = BoundedPile(STOCK_CAPACITY, data[b:b + stock_count])
    b += stock_count
    tableau = []
    for i in range(TABLEAU_PILES):
        tableau.append(TableauPile(BoundedPile(TABLEAU_CAPACITY, data[b:b + counts[i]]), hidden[i]))
        b += counts[i]
    state.tableau = tableau

    foundations = []
    for i in range(FOUNDATION_PILES):
        raw = data[_OFF_FOUNDATIONS + i]
        foundations.append(None if raw == _EMPTY_FOUNDATION else raw)
    state.foundations = foundations

    state.talon = data[_OFF_TALON]
    state.talon_showing = data[_OFF_TALON_SHOWING]
    # older records can leave the window hanging past the end of the stock
    R.clamp_talon_window(state)

    state.win = data[_OFF_WIN] != 0
    state.draw_mode = _setting(DrawMode, data[_OFF_DRAW], "draw")
    state.flip_limit = _setting(FlipLimit, data[_OFF_FLIPLIMIT], "flip limit")
    state.score_display = _setting(ScoreDisplay, data[_OFF_SCORE_SETTING], "score")
    state.flips = data[_OFF_FLIPS]
    state.score = _SCORE.unpack_from(data, _OFF_SCORE)[0]

    cards = state.all_cards()
    if any(c >= DECK_SIZE for c in cards) or sorted(cards) != list(range(DECK_SIZE)):
        raise StateFormatError("record does not hold each of the 52 cards exactly once")
    return state


def save_game(state: GameState, store: KeyValueStore):
    store.write(STATE_KEY, encode_state(state))


def load_game(store: KeyValueStore) -> Optional[GameState]:
    """Return the saved game, or None when there is none or it cannot be used."""
    data = store.read(STATE_KEY, STATE_SIZE)
    if data is None:
        return None
    try:
        state = decode_state(data)
    except StateFormatError as exc:
        logger.warning("Ignoring saved game: %s", exc)
        return None
    S.select_talon(state)
    return state
