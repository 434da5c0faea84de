"""
Pet engine formulas.

Purpose
-------
Pure calculation functions shared by engines and services: stat clamping,
whole-interval time arithmetic, coin caps, and reward curves.

Design Notes
------------
- Pure functions only (no side effects)
- No config access (all parameters passed in)
- Deterministic and testable

Usage
-----
    from petengine.modules.shared.formulas import clamp, intervals_elapsed

    hunger = clamp(hunger - intervals_elapsed(last, now, 30), 0, 100)
"""

from __future__ import annotations

import math
from datetime import datetime


def clamp(value: int, minimum: int, maximum: int) -> int:
    """
    Clamp `value` into `[minimum, maximum]`.

    Example:
        >>> clamp(120, 0, 100)
        100
        >>> clamp(-5, 0, 100)
        0
    """
    return max(minimum, min(maximum, value))


def whole_minutes_between(start: datetime, end: datetime) -> int:
    """
    Whole minutes from `start` to `end`, floored. Negative spans give 0.

    Example:
        >>> from datetime import datetime, timedelta
        >>> t = datetime(2024, 1, 1)
        >>> whole_minutes_between(t, t + timedelta(seconds=119))
        1
    """
    seconds = (end - start).total_seconds()
    if seconds <= 0:
        return 0
    return int(seconds // 60)


def intervals_elapsed(start: datetime, end: datetime, interval_minutes: int) -> int:
    """
    Number of whole `interval_minutes` intervals between `start` and `end`.

    Example:
        >>> from datetime import datetime, timedelta
        >>> t = datetime(2024, 1, 1)
        >>> intervals_elapsed(t, t + timedelta(minutes=95), 30)
        3
    """
    if interval_minutes <= 0:
        raise ValueError("interval_minutes must be positive")
    return whole_minutes_between(start, end) // interval_minutes


def ceil_seconds(seconds: float) -> int:
    """
    Round a remaining duration up to whole seconds (never negative).

    Example:
        >>> ceil_seconds(12.1)
        13
    """
    return max(0, math.ceil(seconds))


def capped_credit(balance: int, amount: int, cap: int) -> int:
    """
    New balance after crediting `amount`, never above `cap`.

    A balance already above the cap is left unchanged rather than reduced.

    Example:
        >>> capped_credit(4990, 50, 5000)
        5000
    """
    if balance >= cap:
        return balance
    return min(balance + amount, cap)


def login_streak_reward(streak: int, base_coins: int, step_coins: int, bonus_cap: int) -> int:
    """
    Daily login reward for a streak length.

    Example:
        >>> login_streak_reward(3, 50, 10, 100)
        80
        >>> login_streak_reward(30, 50, 10, 100)
        150
    """
    return base_coins + min(streak * step_coins, bonus_cap)


def score_to_coins(score: int, max_score: int, min_coins: int, max_coins: int) -> int:
    """
    Linear mini-game payout, floored.

    Example:
        >>> score_to_coins(500, 1000, 20, 50)
        35
        >>> score_to_coins(1000, 1000, 20, 50)
        50
    """
    ratio = min(score / max_score, 1.0) if max_score > 0 else 0.0
    return math.floor(min_coins + (max_coins - min_coins) * ratio)
