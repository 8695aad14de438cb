"""
dg_commands.py

This module provides the parser for the commands a player types into the
terminal popup. A Lark grammar turns the raw text into a tree, which is then
walked into a small Command value the host can hand to the active game.

Accepted forms (case-insensitive):

    heads | tails | h | t                 optionally after "guess" / "flip"
    rock | paper | scissors | r | p | s   optionally after "play" / "throw"
    1..9 | a1..c3                         optionally after "cell" / "mark"
    help | ?
    quit | exit | q
"""

from dataclasses import dataclass
from typing import Any, Optional

from lark import Lark, Token, Tree
from lark.exceptions import LarkError

from dg_coin import CoinSide
from dg_hand import HandSign

command_grammar = r"""
    start: command
    ?command: coin_cmd | hand_cmd | cell_cmd | help_cmd | quit_cmd
    coin_cmd: ("guess" | "flip")? SIDE
    hand_cmd: ("play" | "throw")? SIGN
    cell_cmd: ("cell" | "mark")? (DIGIT | COORD)
    help_cmd: "help" | "?"
    quit_cmd: "quit" | "exit" | "q"
    SIDE: "heads" | "tails" | "h" | "t"
    SIGN: "rock" | "paper" | "scissors" | "r" | "p" | "s"
    DIGIT: /[1-9]/
    COORD: /[abc][123]/
    %import common.WS
    %ignore WS
"""

_SIDES = {"h": CoinSide.HEADS, "t": CoinSide.TAILS}
_SIGNS = {"r": HandSign.ROCK, "p": HandSign.PAPER, "s": HandSign.SCISSORS}

class CommandError(ValueError):
    """Raised for input that is not a recognised command."""

@dataclass(frozen=True)
class Command:
    """
    A parsed player command.

    Attributes:
        kind: One of "coin", "hand", "cell", "help" or "quit".
        value: The CoinSide, HandSign or 0-based cell index, when relevant.
    """
    kind: str
    value: Any = None

class CommandParser:
    """Parses player input with a Lark grammar."""
    def __init__(self):
        self.parser = Lark(command_grammar, start='start')

    def parse(self, text: str) -> Command:
        """
        Parses one line of player input.

        Args:
            text (str): The raw input line.

        Returns:
            Command: The recognised command.
        """
        clean = text.strip().lower()
        if not clean:
            raise CommandError("Empty command.")
        try:
            tree = self.parser.parse(clean)
        except LarkError as e:
            raise CommandError(f"Unrecognised command: {text.strip()!r}") from e
        return self._visit(tree.children[0])

    def _token(self, tree: Tree) -> Optional[Token]:
        """Returns the single meaningful token under a command rule, if any."""
        tokens = [child for child in tree.children if isinstance(child, Token)]
        return tokens[-1] if tokens else None

    def _visit(self, tree: Tree) -> Command:
        rule = tree.data.value if isinstance(tree.data, Token) else tree.data
        token = self._token(tree)
        if rule == 'coin_cmd':
            return Command('coin', _SIDES.get(token.value) or CoinSide(token.value))
        if rule == 'hand_cmd':
            return Command('hand', _SIGNS.get(token.value) or HandSign(token.value))
        if rule == 'cell_cmd':
            return Command('cell', cell_index(token.value))
        if rule == 'help_cmd':
            return Command('help')
        if rule == 'quit_cmd':
            return Command('quit')
        raise CommandError(f"Unhandled command rule '{rule}'.")

def cell_index(label: str) -> int:
    """
    Converts a cell label to a 0-based board index: "1".."9" count row by
    row, "a1".."c3" give column letter then row number.
    """
    if len(label) == 1 and label in "123456789":
        return int(label) - 1
    if len(label) == 2 and label[0] in "abc" and label[1] in "123":
        column = "abc".index(label[0])
        row = int(label[1]) - 1
        return row * 3 + column
    raise CommandError(f"Not a cell: {label!r}")
