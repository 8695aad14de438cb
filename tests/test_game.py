"""
test_game.py

This script tests the SessionController, ensuring that it tracks the loss
streak across games, restarts after a loss, reports a win exactly once and
stays silent when torn down.
"""

import asyncio
import random

import pytest

from dg_coin import CoinGuessGame, CoinSide
from dg_config import GameTimings
from dg_game import ControllerState, SessionController
from dg_hand import HandGame
from dg_scheduling import AsyncioScheduler, ManualScheduler
from dg_session import GameStatus, GameVariant
from dg_tictactoe import BoardGame
from tests.helpers import ScriptedRandom

class WinCounter:
    def __init__(self):
        self.calls = 0

    def __call__(self):
        self.calls += 1

def make_controller(rng, variants=(GameVariant.COIN_GUESS,)):
    scheduler = ManualScheduler()
    won = WinCounter()
    controller = SessionController(won, rng=rng, scheduler=scheduler, timings=GameTimings(), variants=variants)
    return controller, scheduler, won

def lose_coin_game(controller, scheduler, rng):
    game = controller.current_game
    assert isinstance(game, CoinGuessGame)
    rng.push(0.999, 0.999)
    for _ in range(2):
        assert game.guess(CoinSide.HEADS)
        scheduler.advance(0.8)
    scheduler.run_until_idle()

def test_controller_starts_a_game_immediately():
    """Tests that building a controller starts the first game right away."""
    controller, _, won = make_controller(ScriptedRandom())
    assert controller.state == ControllerState.RUNNING
    assert isinstance(controller.current_game, CoinGuessGame)
    assert controller.loss_streak == 0
    assert controller.attempts == [GameVariant.COIN_GUESS]
    assert won.calls == 0

def test_game_variant_is_picked_at_random():
    """Tests that the first game is the variant drawn from the random source."""
    rng = ScriptedRandom(choices=[GameVariant.BOARD_GAME])
    controller, _, _ = make_controller(rng, variants=list(GameVariant))
    assert isinstance(controller.current_game, BoardGame)

def test_all_variants_get_picked():
    """Tests that every game variant comes up across seeds."""
    seen = set()
    for seed in range(40):
        controller, _, _ = make_controller(random.Random(seed), variants=None)
        seen.add(type(controller.current_game))
    assert seen == {CoinGuessGame, HandGame, BoardGame}

@pytest.mark.parametrize("losses", [1, 3, 6])
def test_consecutive_losses_build_the_streak(losses):
    """Tests that each loss raises the streak and starts an easier game."""
    rng = ScriptedRandom()
    controller, scheduler, won = make_controller(rng)
    first_game = controller.current_game
    for _ in range(losses):
        lose_coin_game(controller, scheduler, rng)

    assert controller.loss_streak == losses
    assert len(controller.attempts) == losses + 1
    assert controller.current_game is not first_game
    assert controller.current_game.loss_streak == losses
    assert controller.state == ControllerState.RUNNING
    assert won.calls == 0

def test_restart_waits_for_the_pause():
    """Tests that a new game starts only after the restart pause."""
    rng = ScriptedRandom(draws=[0.999, 0.999])
    controller, scheduler, _ = make_controller(rng)
    game = controller.current_game
    game.guess(CoinSide.HEADS)
    scheduler.advance(0.8)
    game.guess(CoinSide.HEADS)
    scheduler.advance(0.8)
    scheduler.advance(1.0)  # result shown, loss reported

    assert controller.loss_streak == 1
    assert controller.state == ControllerState.SELECTING
    assert controller.current_game is game
    assert not game.accepts_input

    scheduler.advance(0.5)
    assert controller.state == ControllerState.RUNNING
    assert controller.current_game is not game

def test_win_resets_streak_and_reports_once():
    """Tests that a win resets the streak and is reported exactly once."""
    rng = ScriptedRandom()
    controller, scheduler, won = make_controller(rng)
    lose_coin_game(controller, scheduler, rng)
    lose_coin_game(controller, scheduler, rng)
    assert controller.luck_percent == 20

    game = controller.current_game
    rng.push(0.0, 0.0)
    for _ in range(2):
        game.guess(CoinSide.TAILS)
        scheduler.advance(0.8)
    scheduler.run_until_idle()

    assert won.calls == 1
    assert controller.loss_streak == 0
    assert controller.state == ControllerState.ATTEMPT_WON
    assert controller.is_finished

    # A late or repeated signal changes nothing
    controller._on_game_finished(game, GameStatus.PLAYER_WIN)
    assert won.calls == 1

def test_stale_game_signal_is_ignored():
    """Tests that a result from a replaced game is ignored."""
    rng = ScriptedRandom()
    controller, scheduler, won = make_controller(rng)
    old_game = controller.current_game
    lose_coin_game(controller, scheduler, rng)

    controller._on_game_finished(old_game, GameStatus.PLAYER_WIN)
    assert won.calls == 0
    assert controller.loss_streak == 1

def test_close_is_neither_win_nor_loss():
    """Tests that closing the controller reports nothing and keeps the streak."""
    rng = ScriptedRandom(draws=[0.0, 0.0])
    controller, scheduler, won = make_controller(rng)
    game = controller.current_game
    game.guess(CoinSide.HEADS)
    scheduler.advance(0.8)
    game.guess(CoinSide.HEADS)

    controller.close()
    scheduler.run_until_idle()

    assert controller.state == ControllerState.CLOSED
    assert won.calls == 0
    assert controller.loss_streak == 0
    assert not game.accepts_input
    controller.close()

def test_close_during_restart_pause():
    """Tests that closing during the restart pause stops the next game."""
    rng = ScriptedRandom()
    controller, scheduler, _ = make_controller(rng)
    rng.push(0.999, 0.999)
    game = controller.current_game
    for _ in range(2):
        game.guess(CoinSide.HEADS)
        scheduler.advance(0.8)
    scheduler.advance(1.0)
    assert controller.state == ControllerState.SELECTING

    controller.close()
    scheduler.run_until_idle()
    assert controller.current_game is game
    assert len(controller.attempts) == 1

def test_empty_variant_list_is_rejected():
    """Tests that a controller needs at least one game variant."""
    with pytest.raises(ValueError, match="At least one game variant"):
        SessionController(WinCounter(), scheduler=ManualScheduler(), variants=[])

@pytest.mark.asyncio
async def test_win_on_asyncio_loop():
    """Tests that a game won on a real event loop dismisses the reminder."""
    won = asyncio.Event()
    controller = SessionController(
        won.set,
        rng=ScriptedRandom(draws=[0.0, 0.0]),
        scheduler=AsyncioScheduler(),
        timings=GameTimings.instant(),
        variants=[GameVariant.COIN_GUESS],
    )
    game = controller.current_game
    for _ in range(2):
        assert game.guess("heads")
        while game.session.busy:
            await asyncio.sleep(0)
    await asyncio.wait_for(won.wait(), timeout=1.0)
    assert controller.state == ControllerState.ATTEMPT_WON
