"""
Price Structure

Support/resistance from clustered swing extremes, and Fibonacci
retracement/extension levels over the recent swing range.
"""

from typing import Optional, Sequence

import numpy as np

from technicals.schemas.indicators import (
    FibLevelMatch,
    FibLevelType,
    FibonacciLevels,
    SupportResistance,
)
from technicals.services.indicators.calculations import ArrayLike, to_array

MIN_BARS_FOR_LEVELS = 20
LEVELS_PER_SIDE = 3

RETRACEMENT_RATIOS = {
    "0.0": 0.0,
    "23.6": 0.236,
    "38.2": 0.382,
    "50.0": 0.5,
    "61.8": 0.618,
    "78.6": 0.786,
    "100.0": 1.0,
}

EXTENSION_RATIOS = {
    "127.2": 1.272,
    "161.8": 1.618,
    "200.0": 2.0,
    "261.8": 2.618,
}


# =============================================================================
# SUPPORT / RESISTANCE
# =============================================================================


def cluster_levels(levels: Sequence[float], tolerance: float = 0.02) -> list[float]:
    """
    Merge nearby price levels.

    Levels are walked in ascending order; a level within ``tolerance``
    (relative) of the previous one joins the running cluster, otherwise it
    starts a new one. Each cluster is reported as its mean.
    """
    if not levels:
        return []

    ordered = sorted(levels)
    clustered = []
    current = [ordered[0]]

    for prev, level in zip(ordered, ordered[1:]):
        if abs(level - prev) / prev <= tolerance:
            current.append(level)
        else:
            clustered.append(sum(current) / len(current))
            current = [level]

    clustered.append(sum(current) / len(current))
    return clustered


def _swing_points(values: np.ndarray, is_peak: bool) -> list[float]:
    points = []
    for i in range(2, len(values) - 2):
        neighbours = (values[i - 2], values[i - 1], values[i + 1], values[i + 2])
        if is_peak and all(values[i] > v for v in neighbours):
            points.append(float(values[i]))
        elif not is_peak and all(values[i] < v for v in neighbours):
            points.append(float(values[i]))
    return points


def support_resistance(
    highs: ArrayLike, lows: ArrayLike, tolerance: float = 0.02
) -> SupportResistance:
    """
    Find support and resistance levels using strict 5-bar local minima/maxima.

    Returns empty sets for fewer than 20 bars.
    """
    highs, lows = to_array(highs), to_array(lows)
    if len(highs) < MIN_BARS_FOR_LEVELS:
        return SupportResistance()

    resistance = cluster_levels(_swing_points(highs, is_peak=True), tolerance)
    support = cluster_levels(_swing_points(lows, is_peak=False), tolerance)

    return SupportResistance(
        support=support[-LEVELS_PER_SIDE:],
        resistance=resistance[-LEVELS_PER_SIDE:],
    )


# =============================================================================
# FIBONACCI
# =============================================================================


def fibonacci_levels(
    highs: ArrayLike, lows: ArrayLike, lookback: int = 50
) -> Optional[FibonacciLevels]:
    """Retracements measured from the swing high toward the swing low."""
    highs, lows = to_array(highs), to_array(lows)
    if len(highs) < lookback:
        return None

    swing_high = float(np.max(highs[-lookback:]))
    swing_low = float(np.min(lows[-lookback:]))
    if swing_high == swing_low:
        return None

    price_range = swing_high - swing_low
    retracements = {
        label: swing_high - price_range * ratio
        for label, ratio in RETRACEMENT_RATIOS.items()
    }
    # endpoints are pinned so they never drift by a rounding step
    retracements["0.0"] = swing_high
    retracements["100.0"] = swing_low

    extensions = {
        label: swing_high - price_range * ratio
        for label, ratio in EXTENSION_RATIOS.items()
    }

    return FibonacciLevels(
        swing_high=swing_high,
        swing_low=swing_low,
        range=price_range,
        retracements=retracements,
        extensions=extensions,
        lookback=lookback,
    )


def nearest_fib_level(
    price: float, fib: Optional[FibonacciLevels], tolerance: float = 0.01
) -> Optional[FibLevelMatch]:
    """Closest retracement/extension level within ``tolerance`` of price."""
    if fib is None or price <= 0:
        return None

    candidates = [
        (label, value, FibLevelType.RETRACEMENT)
        for label, value in fib.retracements.items()
    ] + [
        (label, value, FibLevelType.EXTENSION)
        for label, value in fib.extensions.items()
    ]

    nearest = None
    min_distance = float("inf")
    for label, value, level_type in candidates:
        distance = abs(price - value)
        if distance / price <= tolerance and distance < min_distance:
            min_distance = distance
            nearest = FibLevelMatch(
                level=f"{label}%",
                price=value,
                distance=distance / price * 100,
                type=level_type,
            )
    return nearest
