# selection.py - the pile-selection cursor
#
# Two modes: while selecting a source the cursor visits tableau piles 0..6 and
# the talon (7); while selecting a destination it visits 0..6 and the
# foundations group (8). Illegal piles are skipped.
from klondike import rules as R
from klondike.state import (
    GameState, Mode, SelectingSource, SelectingDestination,
    PILE_TABLEAU_LEFT, PILE_TABLEAU_RIGHT, PILE_TALON, PILE_FOUNDATIONS, NO_FOUNDATION,
)


def source_pile_is_valid(state: GameState, pile: int) -> bool:
    if pile == PILE_TALON:
        return True
    if R.can_move_to_foundations(state, pile) != NO_FOUNDATION:
        return True
    return any(R.can_move_to_tableau(state, pile, dest)
               for dest in range(PILE_TABLEAU_LEFT, PILE_TABLEAU_RIGHT + 1))


def destination_pile_is_valid(state: GameState, source: int, pile: int) -> bool:
    if pile == PILE_FOUNDATIONS:
        return R.can_move_to_foundations(state, source) != NO_FOUNDATION
    return R.can_move_to_tableau(state, source, pile)


def selection_is_valid(state: GameState) -> bool:
    cursor = state.cursor
    if cursor.mode == Mode.SELECT_SOURCE:
        return source_pile_is_valid(state, cursor.selection)
    return destination_pile_is_valid(state, cursor.source, cursor.selection)


def select_talon(state: GameState):
    """Home the cursor: the talon, or the first playable tableau pile once the stock is empty."""
    if state.win:
        return
    if state.stock_count < 1:
        for pile in range(PILE_TABLEAU_LEFT, PILE_TABLEAU_RIGHT + 1):
            if source_pile_is_valid(state, pile):
                state.cursor = SelectingSource(pile)
                return
    state.cursor = SelectingSource(PILE_TALON)


def _next_source(selection: int) -> int:
    selection += 1
    return PILE_TABLEAU_LEFT if selection >= PILE_FOUNDATIONS else selection


def _next_destination(selection: int) -> int:
    selection += 1
    if selection == PILE_TALON:
        selection = PILE_FOUNDATIONS
    if selection > PILE_FOUNDATIONS:
        selection = PILE_TABLEAU_LEFT
    return selection


def select_next_valid_pile(state: GameState):
    cursor = state.cursor
    if cursor.mode == Mode.SELECT_SOURCE:
        # the talon is always a valid source, so this terminates
        selection = cursor.selection
        while True:
            selection = _next_source(selection)
            if source_pile_is_valid(state, selection):
                state.cursor = SelectingSource(selection)
                if selection == PILE_TALON:
                    select_talon(state)
                return

    source = cursor.source
    selection = cursor.selection
    wrapped = None
    while True:
        selection = _next_destination(selection)
        if selection == wrapped:
            # a full lap found nowhere to put the card: abort the move
            state.cursor = SelectingSource(selection)
            select_talon(state)
            return
        if wrapped is None:
            wrapped = selection
        if destination_pile_is_valid(state, source, selection):
            state.cursor = SelectingDestination(source, selection)
            return


def select_valid_pile(state: GameState):
    if not selection_is_valid(state):
        select_next_valid_pile(state)


def begin_move(state: GameState) -> bool:
    """Capture the selected pile as the move source and look for a destination."""
    cursor = state.cursor
    if cursor.mode != Mode.SELECT_SOURCE or not source_pile_is_valid(state, cursor.selection):
        return False
    state.cursor = SelectingDestination(cursor.selection, PILE_FOUNDATIONS)
    select_valid_pile(state)
    return True


def complete_move(state: GameState) -> bool:
    """Perform the move onto the selected destination and return to source selection."""
    cursor = state.cursor
    if cursor.mode != Mode.SELECT_DESTINATION:
        return False
    if cursor.selection == PILE_FOUNDATIONS:
        moved = R.move_to_foundation(state, cursor.source)
        state.cursor = SelectingSource(cursor.selection)
        select_talon(state)
    else:
        moved = R.move_to_tableau(state, cursor.source, cursor.selection)
        state.cursor = SelectingSource(cursor.selection)
        select_valid_pile(state)
    return moved
