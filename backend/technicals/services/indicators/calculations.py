"""
Technical Indicator Calculations

Pure Python/NumPy implementations of the smoothing primitives, oscillators
and volatility/trend-strength measures. All math is deterministic.

Every calculator indexes from the end of the series backward and returns
None when the series is shorter than the window it needs.
"""

from typing import Optional, Sequence, Union

import numpy as np

from technicals.schemas.indicators import (
    AdxResult,
    BollingerResult,
    MacdResult,
    MfiResult,
    MfiSignal,
    OscillatorZone,
    SignalStrength,
    StochasticResult,
)

ArrayLike = Union[np.ndarray, Sequence[float]]

ADX_TRENDING = 25.0


def to_array(data: ArrayLike) -> np.ndarray:
    return np.asarray(data, dtype=float)


# =============================================================================
# SMOOTHING PRIMITIVES
# =============================================================================


def sma(data: ArrayLike, period: int) -> Optional[float]:
    """Simple Moving Average of the last ``period`` values."""
    values = to_array(data)
    if period <= 0 or len(values) < period:
        return None
    return float(np.mean(values[-period:]))


def ema(data: ArrayLike, period: int) -> Optional[float]:
    """
    Exponential Moving Average.

    Seeded with the SMA of the first ``period`` values, then carried forward
    over the rest of the series with ``k = 2 / (period + 1)``.
    """
    values = to_array(data)
    if period <= 0 or len(values) < period:
        return None

    k = 2 / (period + 1)
    result = float(np.mean(values[:period]))
    for value in values[period:]:
        result = float(value) * k + result * (1 - k)
    return result


def wilder_smooth(data: ArrayLike, period: int) -> Optional[float]:
    """
    Wilder's smoothing, reported as an average.

    Seed is the plain sum of the first ``period`` values; each later value
    updates ``s = s - s / period + value``. Returns ``s / period``.
    """
    values = to_array(data)
    if period <= 0 or len(values) < period:
        return None

    smoothed = float(np.sum(values[:period]))
    for value in values[period:]:
        smoothed = smoothed - (smoothed / period) + float(value)
    return smoothed / period


# =============================================================================
# MOMENTUM INDICATORS
# =============================================================================


def rsi(closes: ArrayLike, period: int = 14) -> Optional[float]:
    """Relative Strength Index (Wilder)."""
    closes = to_array(closes)
    if len(closes) < period + 1:
        return None

    deltas = np.diff(closes)
    gains = np.where(deltas > 0, deltas, 0.0)
    losses = np.where(deltas < 0, -deltas, 0.0)

    avg_gain = float(np.sum(gains[:period])) / period
    avg_loss = float(np.sum(losses[:period])) / period

    for i in range(period, len(deltas)):
        avg_gain = (avg_gain * (period - 1) + gains[i]) / period
        avg_loss = (avg_loss * (period - 1) + losses[i]) / period

    if avg_loss == 0:
        return 100.0
    rs = avg_gain / avg_loss
    return float(100 - (100 / (1 + rs)))


def _mfi_label(value: float) -> tuple[MfiSignal, SignalStrength]:
    if value >= 80:
        strength = SignalStrength.VERY_STRONG if value >= 90 else SignalStrength.STRONG
        return MfiSignal.OVERBOUGHT, strength
    if value <= 20:
        strength = SignalStrength.VERY_STRONG if value <= 10 else SignalStrength.STRONG
        return MfiSignal.OVERSOLD, strength
    if value >= 60:
        return MfiSignal.BULLISH, SignalStrength.MODERATE
    if value <= 40:
        return MfiSignal.BEARISH, SignalStrength.MODERATE
    return MfiSignal.NEUTRAL, SignalStrength.MODERATE


def mfi(
    highs: ArrayLike,
    lows: ArrayLike,
    closes: ArrayLike,
    volumes: ArrayLike,
    period: int = 14,
) -> Optional[MfiResult]:
    """
    Money Flow Index.

    Positive/negative money flow is summed over the last ``period`` price
    changes. Each sum is taken fresh over that window, so a side with no
    flow is exactly zero.
    """
    highs, lows, closes, volumes = map(to_array, (highs, lows, closes, volumes))
    if len(closes) < period + 1:
        return None

    typical_price = (highs + lows + closes) / 3
    raw_money_flow = typical_price * volumes

    def flow(i: int) -> tuple[float, float]:
        if typical_price[i] > typical_price[i - 1]:
            return float(raw_money_flow[i]), 0.0
        if typical_price[i] < typical_price[i - 1]:
            return 0.0, float(raw_money_flow[i])
        return 0.0, 0.0

    positive_flow = 0.0
    negative_flow = 0.0
    for i in range(len(closes) - period, len(closes)):
        pos, neg = flow(i)
        positive_flow += pos
        negative_flow += neg

    if negative_flow <= 0:
        value = 100.0
        money_flow_ratio = None
    else:
        money_flow_ratio = positive_flow / negative_flow
        value = 100 - (100 / (1 + money_flow_ratio))

    signal, strength = _mfi_label(value)
    return MfiResult(
        value=value,
        signal=signal,
        strength=strength,
        money_flow_ratio=money_flow_ratio,
    )


def _percent_k(
    highs: np.ndarray, lows: np.ndarray, closes: np.ndarray, end: int, period: int
) -> Optional[float]:
    start = end - period + 1
    highest_high = float(np.max(highs[start : end + 1]))
    lowest_low = float(np.min(lows[start : end + 1]))
    if highest_high == lowest_low:
        return None
    return (float(closes[end]) - lowest_low) / (highest_high - lowest_low) * 100


def stochastic(
    highs: ArrayLike,
    lows: ArrayLike,
    closes: ArrayLike,
    k_period: int = 14,
    d_period: int = 3,
) -> Optional[StochasticResult]:
    """
    Stochastic Oscillator.

    %D is the mean of the trailing ``d_period`` %K readings, each taken over
    its own ``k_period`` window. Flat windows carry no %K.
    """
    highs, lows, closes = map(to_array, (highs, lows, closes))
    n = len(closes)
    if n < k_period:
        return None

    k = _percent_k(highs, lows, closes, n - 1, k_period)
    if k is None:
        return None

    trailing = []
    for end in range(max(k_period - 1, n - d_period), n):
        value = _percent_k(highs, lows, closes, end, k_period)
        if value is not None:
            trailing.append(value)
    d = sum(trailing) / len(trailing) if trailing else k

    if k > 80:
        zone = OscillatorZone.OVERBOUGHT
    elif k < 20:
        zone = OscillatorZone.OVERSOLD
    else:
        zone = OscillatorZone.NEUTRAL

    return StochasticResult(k=k, d=d, signal=zone)


def macd(
    closes: ArrayLike,
    fast_period: int = 12,
    slow_period: int = 26,
    signal_period: int = 9,
) -> Optional[MacdResult]:
    """
    MACD (Moving Average Convergence Divergence).

    The signal line is the EMA of a MACD history in which every point is
    recomputed from the closes up to that bar, so each historical value
    matches what a fresh calculation at that bar would have produced.
    """
    closes = to_array(closes)
    if len(closes) < slow_period + signal_period:
        return None

    macd_line = ema(closes, fast_period) - ema(closes, slow_period)

    history = []
    for i in range(slow_period, len(closes)):
        prefix = closes[: i + 1]
        history.append(ema(prefix, fast_period) - ema(prefix, slow_period))

    signal_line = ema(history, signal_period)
    return MacdResult(
        macd=macd_line,
        signal=signal_line,
        histogram=macd_line - signal_line,
    )


# =============================================================================
# VOLATILITY INDICATORS
# =============================================================================


def true_range(highs: ArrayLike, lows: ArrayLike, closes: ArrayLike) -> np.ndarray:
    """True Range for every bar after the first (length n - 1)."""
    highs, lows, closes = map(to_array, (highs, lows, closes))
    if len(closes) < 2:
        return np.array([], dtype=float)

    prev_close = closes[:-1]
    return np.maximum(
        highs[1:] - lows[1:],
        np.maximum(np.abs(highs[1:] - prev_close), np.abs(lows[1:] - prev_close)),
    )


def atr(
    highs: ArrayLike, lows: ArrayLike, closes: ArrayLike, period: int = 14
) -> Optional[float]:
    """Average True Range: SMA of the trailing ``period`` true ranges."""
    if len(closes) < period + 1:
        return None
    return sma(true_range(highs, lows, closes), period)


def bollinger_bands(
    closes: ArrayLike, period: int = 20, std_dev: float = 2.0
) -> Optional[BollingerResult]:
    """Bollinger Bands with population standard deviation."""
    closes = to_array(closes)
    middle = sma(closes, period)
    if middle is None:
        return None

    std = float(np.sqrt(np.mean((closes[-period:] - middle) ** 2)))

    return BollingerResult(
        upper=middle + std_dev * std,
        middle=middle,
        lower=middle - std_dev * std,
        bandwidth=(std * std_dev * 2) / middle * 100,
    )


# =============================================================================
# TREND INDICATORS
# =============================================================================


def directional_movement(
    highs: ArrayLike, lows: ArrayLike
) -> tuple[np.ndarray, np.ndarray]:
    """+DM and -DM for every bar after the first."""
    highs, lows = to_array(highs), to_array(lows)
    up_move = highs[1:] - highs[:-1]
    down_move = lows[:-1] - lows[1:]

    plus_dm = np.where((up_move > down_move) & (up_move > 0), up_move, 0.0)
    minus_dm = np.where((down_move > up_move) & (down_move > 0), down_move, 0.0)
    return plus_dm, minus_dm


def _dx(plus_di: float, minus_di: float) -> float:
    di_sum = plus_di + minus_di
    if di_sum == 0:
        return 0.0
    return abs(plus_di - minus_di) / di_sum * 100


def _adx_strength(value: float) -> SignalStrength:
    if value >= 50:
        return SignalStrength.VERY_STRONG
    if value >= 25:
        return SignalStrength.STRONG
    if value >= 20:
        return SignalStrength.MODERATE
    return SignalStrength.WEAK


def adx(
    highs: ArrayLike, lows: ArrayLike, closes: ArrayLike, period: int = 14
) -> Optional[AdxResult]:
    """
    Average Directional Index.

    +DI/-DI come from Wilder-smoothing the whole series. Each DX point is
    rebuilt from its own ``period``-bar window, and ADX is the Wilder average
    of the trailing ``period`` DX values.
    """
    closes = to_array(closes)
    if len(closes) < period * 2:
        return None

    tr = true_range(highs, lows, closes)
    plus_dm, minus_dm = directional_movement(highs, lows)

    smooth_tr = wilder_smooth(tr, period)
    if not smooth_tr:
        return None

    plus_di = wilder_smooth(plus_dm, period) / smooth_tr * 100
    minus_di = wilder_smooth(minus_dm, period) / smooth_tr * 100

    dx_values = []
    for i in range(period, len(tr)):
        window_tr = wilder_smooth(tr[i - period : i], period)
        if not window_tr:
            continue
        window_plus = wilder_smooth(plus_dm[i - period : i], period) / window_tr * 100
        window_minus = wilder_smooth(minus_dm[i - period : i], period) / window_tr * 100
        dx_values.append(_dx(window_plus, window_minus))

    if not dx_values:
        return None

    if len(dx_values) >= period:
        adx_value = wilder_smooth(dx_values[-period:], period)
    else:
        adx_value = sum(dx_values) / len(dx_values)

    return AdxResult(
        adx=adx_value,
        plus_di=plus_di,
        minus_di=minus_di,
        strength=_adx_strength(adx_value),
        trending=adx_value >= ADX_TRENDING,
    )
