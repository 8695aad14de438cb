"""
test_difficulty.py

Tests the pity policy shared by the games.
"""

import pytest

from dg_difficulty import coin_win_chance, luck_percent, optimal_move_chance, pity_bonus

def test_bonus_matches_formula():
    """The bonus grows by 0.1 per loss and caps at 0.4."""
    for streak in range(20):
        assert pity_bonus(streak) == min(streak * 0.1, 0.4)

def test_bonus_is_monotonic_and_capped():
    """Tests that the bonus never decreases and stops at 0.4."""
    values = [pity_bonus(streak) for streak in range(50)]
    assert values == sorted(values)
    assert values[0] == 0
    assert max(values) == pytest.approx(0.4)
    assert pity_bonus(4) == pytest.approx(0.4)
    assert pity_bonus(1000) == pytest.approx(0.4)

def test_negative_streak_is_rejected():
    """Tests that a negative streak raises ValueError."""
    with pytest.raises(ValueError, match="cannot be negative"):
        pity_bonus(-1)

@pytest.mark.parametrize("streak, expected", [(0, 0.5), (1, 0.6), (3, 0.8), (4, 0.9), (9, 0.9)])
def test_coin_win_chance(streak, expected):
    """Tests that the coin favours the player by the pity bonus."""
    assert coin_win_chance(streak) == pytest.approx(expected)

@pytest.mark.parametrize("streak, expected", [(0, 0.7), (1, 0.6), (2, 0.5), (4, 0.3), (7, 0.3)])
def test_optimal_move_chance(streak, expected):
    """Tests that the opponent plays optimally less often as the streak grows."""
    assert optimal_move_chance(streak) == pytest.approx(expected)

def test_luck_percent():
    """Tests that the luck badge shows the bonus as a whole percentage."""
    assert [luck_percent(s) for s in range(6)] == [0, 10, 20, 30, 40, 40]
