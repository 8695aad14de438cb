"""
dg_cli.py

A terminal stand-in for the reminder popup: it runs a SessionController on an
asyncio loop, reads typed commands and prints each game's progress until a
game is won (exit code 0) or the player quits (exit code 1).

    dismissal-games [-v] [--seed N] [--speed FACTOR] [--game coin|hand|board]
"""

import argparse
import asyncio
import logging
import random
import sys
import threading
from typing import List, Optional

from dg_coin import CoinGuessGame
from dg_commands import CommandError, CommandParser
from dg_config import GameTimings
from dg_game import ControllerState, SessionController
from dg_hand import HandGame
from dg_scheduling import AsyncioScheduler
from dg_session import GameStatus, GameVariant, MiniGame
from dg_tictactoe import BoardGame

log = logging.getLogger("dismissal-games")

POLL_INTERVAL = 0.05

_LEVELS_BY_VERBOSE = {
    0: logging.WARNING,
    1: logging.INFO,
    2: logging.DEBUG,
}

_GAME_CHOICES = {
    "coin": GameVariant.COIN_GUESS,
    "hand": GameVariant.HAND_GAME,
    "board": GameVariant.BOARD_GAME,
}

HELP_TEXT = """Commands:
  heads / tails (h / t)            guess the coin
  rock / paper / scissors (r/p/s)  throw a hand
  1-9 or a1-c3                     mark a board cell
  help, quit"""


def setup_logging(verbose_count: int = 0) -> logging.Logger:
    """
    Configures the root logger from a -v count: default WARNING, -v INFO,
    -vv DEBUG. Calling it again does not add a second handler.
    """
    level = _LEVELS_BY_VERBOSE.get(verbose_count, logging.DEBUG)
    root = logging.getLogger()
    root.setLevel(level)
    if not any(getattr(h, "_dismissal_games_handler", False) for h in root.handlers):
        handler = logging.StreamHandler(stream=sys.stderr)
        handler._dismissal_games_handler = True  # type: ignore[attr-defined]
        handler.setFormatter(logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s", datefmt="%H:%M:%S"))
        root.addHandler(handler)
    if level > logging.DEBUG:
        logging.getLogger("asyncio").setLevel(logging.WARNING)
    return root


def describe(game: MiniGame) -> str:
    """Renders the state of a game as plain text."""
    if isinstance(game, CoinGuessGame):
        lines = [f"Heads or tails: {game.correct} right, {game.incorrect} wrong (two right to win)"]
        if game.last_round:
            r = game.last_round
            lines.append(f"It was {r.actual.value}. {'Correct!' if r.correct else 'Wrong!'}")
    elif isinstance(game, HandGame):
        lines = [f"Rock paper scissors: you {game.player_wins} - {game.opponent_wins} computer (first to two)"]
        if game.last_round:
            r = game.last_round
            lines.append(f"You threw {r.player_sign.value}, computer threw {r.opponent_sign.value}: {r.result.value}")
    elif isinstance(game, BoardGame):
        lines = ["Tic-tac-toe: you are X, complete a line to win (a draw loses)", str(game.board)]
    else:
        lines = [f"{game.variant.name}"]

    if game.status == GameStatus.PLAYER_WIN:
        lines.append("You win!")
    elif game.status == GameStatus.PLAYER_LOSS:
        lines.append("Draw! Try again..." if isinstance(game, BoardGame) and game.is_draw else "Try again...")
    return "\n".join(lines)


def _move_for(game: MiniGame, kind: str, value):
    """Returns the move to submit, or None if the command does not fit the game."""
    expected = {CoinGuessGame: "coin", HandGame: "hand", BoardGame: "cell"}
    for game_type, game_kind in expected.items():
        if isinstance(game, game_type):
            return value if kind == game_kind else None
    return None


def _resolve_future(future: asyncio.Future, result=None, error: Optional[BaseException] = None):
    if future.done():
        return
    if error is not None:
        future.set_exception(error)
    else:
        future.set_result(result)


async def _read_line(prompt: str) -> str:
    """
    Reads a line on a daemon thread. A thread blocked in input() must not
    keep the interpreter alive after Ctrl-C, which rules out the default
    executor: asyncio.run waits for it on shutdown.
    """
    loop = asyncio.get_running_loop()
    future = loop.create_future()

    def read():
        try:
            line = input(prompt)
        except Exception as e:
            outcome = {"error": e}
        else:
            outcome = {"result": line}
        try:
            loop.call_soon_threadsafe(lambda: _resolve_future(future, **outcome))
        except RuntimeError:
            log.debug("Event loop closed before input arrived")

    threading.Thread(target=read, name="dismissal-games-input", daemon=True).start()
    return await future


async def run_popup(controller_kwargs: dict) -> int:
    """Drives one controller until the attempt is won or the player quits."""
    won = asyncio.Event()
    controller = SessionController(on_attempt_won=won.set, scheduler=AsyncioScheduler(), **controller_kwargs)
    parser = CommandParser()
    shown_game, shown_rounds = None, -1

    try:
        while not won.is_set():
            game = controller.current_game
            if game is not shown_game:
                if controller.luck_percent:
                    print(f"\nLuck +{controller.luck_percent}%")
                shown_game, shown_rounds = game, -1
            rounds = len(game.session.rounds)
            if rounds != shown_rounds and not game.session.busy:
                print(describe(game))
                shown_rounds = rounds

            if controller.state != ControllerState.RUNNING or not game.accepts_input:
                await asyncio.sleep(POLL_INTERVAL)
                continue

            try:
                line = await _read_line("> ")
            except EOFError:
                return 1
            try:
                command = parser.parse(line)
            except CommandError as e:
                print(f"{e} Type 'help' for the list of commands.")
                continue

            if command.kind == "quit":
                return 1
            if command.kind == "help":
                print(HELP_TEXT)
                continue
            move = _move_for(game, command.kind, command.value)
            if move is None or not game.handle_input(move):
                print("That move is not available right now.")
        print("Reminder dismissed.")
        return 0
    finally:
        controller.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="dismissal-games", description="Win a mini-game to dismiss the reminder.")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="-v for info logs, -vv for debug")
    parser.add_argument("--seed", type=int, default=None, help="seed the random source for a reproducible session")
    parser.add_argument("--speed", type=float, default=1.0, help="multiply every pacing delay by this factor")
    parser.add_argument("--game", choices=sorted(_GAME_CHOICES), action="append",
                        help="restrict the games picked (repeatable)")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)
    try:
        timings = GameTimings().scaled(args.speed)
    except ValueError as e:
        log.error("%s", e)
        return 2
    controller_kwargs = {
        "rng": random.Random(args.seed),
        "timings": timings,
        "variants": [_GAME_CHOICES[name] for name in args.game] if args.game else None,
    }
    try:
        return asyncio.run(run_popup(controller_kwargs))
    except KeyboardInterrupt:
        return 1


if __name__ == "__main__":
    sys.exit(main())
