# render.py - read-only snapshot of the board for whatever draws it
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from klondike.state import GameState, Mode


class SlotKind(Enum):
    EMPTY = "empty"          # card outline only
    FACE_DOWN = "face_down"  # card back
    CUTOFF = "cutoff"        # draw nothing at all
    CARD = "card"


@dataclass(frozen=True)
class Slot:
    kind: SlotKind
    card: Optional[int] = None

    @classmethod
    def of(cls, card: Optional[int]) -> "Slot":
        return EMPTY if card is None else cls(SlotKind.CARD, card)


EMPTY = Slot(SlotKind.EMPTY)
FACE_DOWN = Slot(SlotKind.FACE_DOWN)
CUTOFF = Slot(SlotKind.CUTOFF)


@dataclass(frozen=True)
class TableauView:
    hidden_count: int
    bottom: Slot   # lowest face-up card (CUTOFF when the pile is empty)
    top: Slot      # highest face-up card, CUTOFF unless more than one is face-up


@dataclass(frozen=True)
class BoardView:
    stock: Slot
    talon: Tuple[Slot, ...]
    foundations: Tuple[Slot, ...]
    tableau: Tuple[TableauView, ...]
    selection: Optional[int]
    destination_mode: bool
    score_label: Optional[str]
    win: bool


def stock_slot(state: GameState) -> Slot:
    if state.stock_count == 0:
        return CUTOFF
    if state.talon + state.talon_showing < state.stock_count - 1:
        return FACE_DOWN
    return EMPTY


def talon_slots(state: GameState) -> Tuple[Slot, ...]:
    return tuple(Slot.of(card) for card in state.talon_window())


def tableau_view(state: GameState, index: int) -> TableauView:
    pile = state.tableau[index]
    if pile.count == 0:
        return TableauView(pile.hidden_count, CUTOFF, CUTOFF)
    bottom = Slot.of(pile.cards[pile.hidden_count])
    top = Slot.of(pile.top) if pile.multiple_cards_showing() else CUTOFF
    return TableauView(pile.hidden_count, bottom, top)


def board_view(state: GameState, score_label: Optional[str] = None) -> BoardView:
    return BoardView(
        stock=stock_slot(state),
        talon=talon_slots(state),
        foundations=tuple(Slot.of(top) for top in state.foundations),
        tableau=tuple(tableau_view(state, i) for i in range(len(state.tableau))),
        selection=None if state.win else state.selection,
        destination_mode=state.mode == Mode.SELECT_DESTINATION,
        score_label=score_label,
        win=state.win,
    )
