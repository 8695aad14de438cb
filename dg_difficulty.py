"""
dg_difficulty.py

This module provides the pity policy shared by every mini-game. A player who
keeps losing earns a bonus that shifts probability mass toward them; each game
interprets the bonus in its own way (a biased coin, a forced losing sign, a
less accurate board opponent).
"""

BONUS_PER_LOSS = 0.1
MAX_BONUS = 0.4

BASE_COIN_CHANCE = 0.5
BASE_OPTIMAL_CHANCE = 0.7
MIN_OPTIMAL_CHANCE = 0.3


def pity_bonus(loss_streak: int) -> float:
    """
    Maps a loss streak to the bonus granted to the player.

    Args:
        loss_streak (int): Number of consecutive games lost so far.

    Returns:
        float: A value in [0, 0.4], growing by 0.1 per loss.
    """
    if loss_streak < 0:
        raise ValueError(f"Loss streak cannot be negative, got {loss_streak}.")
    return min(loss_streak * BONUS_PER_LOSS, MAX_BONUS)


def coin_win_chance(loss_streak: int) -> float:
    """Probability that a coin guess comes up correct."""
    return BASE_COIN_CHANCE + pity_bonus(loss_streak)


def optimal_move_chance(loss_streak: int) -> float:
    """Probability that the board opponent plays its searched best move."""
    return max(MIN_OPTIMAL_CHANCE, BASE_OPTIMAL_CHANCE - pity_bonus(loss_streak))


def luck_percent(loss_streak: int) -> int:
    """The bonus as a whole percentage, e.g. for a "Luck +20%" badge."""
    if loss_streak < 0:
        raise ValueError(f"Loss streak cannot be negative, got {loss_streak}.")
    return min(loss_streak * 10, 40)
