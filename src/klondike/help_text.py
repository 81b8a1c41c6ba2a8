"""Help and About text shown by the in-game overlay."""

HELP_TITLE = "Controls"
HELP_LINES = (
    "Up: select the next playable pile.",
    "Enter / Space: begin a move from the selected pile, or finish it on the selected destination.",
    "Down (tap): deal from the stock to the talon, or cancel a move in progress.",
    "Down (hold): send every playable tableau card to the foundations.",
    "",
    "D: draw one / three cards   F: flip limit   S: show or hide score",
    "Z: reset score   N: new deal   C: card size   H: help   A: about",
    "Esc: save and quit",
    "",
    "Only the lowest and highest face-up card of each tableau pile is drawn.",
    "Either the top card or the whole face-up run of a tableau pile can move;",
    "partial runs cannot. Cards on the foundations stay there.",
)

ABOUT_TITLE = "Klondike Solitaire"
ABOUT_LINES = (
    "Klondike for a four-command input scheme.",
    "Each deal costs $52; each card played to a foundation earns $5.",
    "Progress is saved on exit and restored on the next start.",
)
