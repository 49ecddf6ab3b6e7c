"""
Pattern Detection Algorithms

Candlestick matchers over the most recent one to three bars, and the
Heikin-Ashi transform with its streak-based trend/reversal classifier.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from technicals.schemas.indicators import (
    CandleColor,
    CandlestickAnalysis,
    CandlestickPattern,
    Direction,
    HeikinAshiCandle,
    HeikinAshiReversal,
    HeikinAshiSignals,
    HeikinAshiTrend,
    HeikinAshiTrendLabel,
    SignalStrength,
    TrendLabel,
)
from technicals.services.indicators.calculations import ArrayLike, to_array

# Single candle geometry (fractions of range / multiples of body)
DOJI_BODY_RATIO = 0.1
DOJI_LONG_WICK_RATIO = 0.6
DOJI_SHORT_WICK_RATIO = 0.1
HAMMER_BODY_RATIO = 0.3
HAMMER_WICK_TO_BODY = 2.0

# Three candle geometry (multiples of the first or average body)
STAR_MIDDLE_BODY_RATIO = 0.3
STAR_THIRD_BODY_RATIO = 0.5
SOLDIERS_MIN_BODY_RATIO = 0.7

# Heikin-Ashi classifier
HA_STRONG_STREAK = 5
HA_TREND_STREAK = 3
HA_REVERSAL_MIN_PRIOR = 2
HA_CLEAN_WICK_RATIO = 0.2
HA_REVERSAL_WICK_RATIO = 0.5


@dataclass
class Candle:
    """A plain OHLC bar with the derived geometry the matchers need."""

    open: float
    high: float
    low: float
    close: float

    @property
    def body(self) -> float:
        return abs(self.close - self.open)

    @property
    def range(self) -> float:
        return self.high - self.low

    @property
    def upper_wick(self) -> float:
        return self.high - max(self.open, self.close)

    @property
    def lower_wick(self) -> float:
        return min(self.open, self.close) - self.low

    @property
    def is_bullish(self) -> bool:
        return self.close > self.open

    @property
    def midpoint(self) -> float:
        return (self.open + self.close) / 2


def _pattern(name: str, signal: Direction, strength: SignalStrength) -> CandlestickPattern:
    return CandlestickPattern(pattern=name, signal=signal, strength=strength)


# =============================================================================
# SINGLE CANDLE
# =============================================================================


def detect_doji(candle: Candle) -> Optional[CandlestickPattern]:
    """Body no more than 10% of range; dragonfly/gravestone by wick asymmetry."""
    if candle.range == 0 or candle.body / candle.range > DOJI_BODY_RATIO:
        return None

    long_wick = candle.range * DOJI_LONG_WICK_RATIO
    short_wick = candle.range * DOJI_SHORT_WICK_RATIO

    if candle.lower_wick > long_wick and candle.upper_wick < short_wick:
        return _pattern("Dragonfly Doji", Direction.BULLISH, SignalStrength.STRONG)
    if candle.upper_wick > long_wick and candle.lower_wick < short_wick:
        return _pattern("Gravestone Doji", Direction.BEARISH, SignalStrength.STRONG)
    return _pattern("Doji", Direction.NEUTRAL, SignalStrength.MODERATE)


def detect_hammer(candle: Candle, trend: TrendLabel) -> Optional[CandlestickPattern]:
    """Hammer after a downtrend, Hanging Man after an uptrend."""
    if candle.range == 0:
        return None

    body = candle.body
    if not (
        body / candle.range <= HAMMER_BODY_RATIO
        and candle.lower_wick > body * HAMMER_WICK_TO_BODY
        and candle.upper_wick < body
    ):
        return None

    if trend.is_down:
        return _pattern("Hammer", Direction.BULLISH, SignalStrength.STRONG)
    elif trend.is_up:
        return _pattern("Hanging Man", Direction.BEARISH, SignalStrength.MODERATE)
    return None


def detect_shooting_star(
    candle: Candle, trend: TrendLabel
) -> Optional[CandlestickPattern]:
    """Shooting Star after an uptrend, Inverted Hammer after a downtrend."""
    if candle.range == 0:
        return None

    body = candle.body
    if not (
        body / candle.range <= HAMMER_BODY_RATIO
        and candle.upper_wick > body * HAMMER_WICK_TO_BODY
        and candle.lower_wick < body
    ):
        return None

    if trend.is_up:
        return _pattern("Shooting Star", Direction.BEARISH, SignalStrength.STRONG)
    elif trend.is_down:
        return _pattern("Inverted Hammer", Direction.BULLISH, SignalStrength.MODERATE)
    return None


# =============================================================================
# TWO CANDLE
# =============================================================================


def detect_engulfing(prev: Candle, curr: Candle) -> Optional[CandlestickPattern]:
    """Opposite-colored candle whose strictly larger body engulfs the prior one."""
    if curr.body <= prev.body:
        return None

    if not prev.is_bullish and curr.is_bullish:
        if curr.open <= prev.close and curr.close > prev.open:
            return _pattern("Bullish Engulfing", Direction.BULLISH, SignalStrength.STRONG)
    elif prev.is_bullish and not curr.is_bullish:
        if curr.open >= prev.close and curr.close < prev.open:
            return _pattern("Bearish Engulfing", Direction.BEARISH, SignalStrength.STRONG)
    return None


def detect_piercing_dark_cloud(
    prev: Candle, curr: Candle
) -> Optional[CandlestickPattern]:
    """Gap beyond the prior extreme, then recovery through its midpoint."""
    if not prev.is_bullish and curr.is_bullish:
        if prev.midpoint < curr.close < prev.open and curr.open < prev.low:
            return _pattern("Piercing Line", Direction.BULLISH, SignalStrength.STRONG)
    elif prev.is_bullish and not curr.is_bullish:
        if prev.open < curr.close < prev.midpoint and curr.open > prev.high:
            return _pattern("Dark Cloud Cover", Direction.BEARISH, SignalStrength.STRONG)
    return None


# =============================================================================
# THREE CANDLE
# =============================================================================


def detect_star(first: Candle, middle: Candle, last: Candle) -> Optional[CandlestickPattern]:
    """Morning Star / Evening Star."""
    small_middle = middle.body < first.body * STAR_MIDDLE_BODY_RATIO
    strong_last = last.body > first.body * STAR_THIRD_BODY_RATIO
    if not (small_middle and strong_last):
        return None

    if not first.is_bullish and last.is_bullish:
        if last.close > first.midpoint and middle.high < first.close:
            return _pattern("Morning Star", Direction.BULLISH, SignalStrength.VERY_STRONG)
    elif first.is_bullish and not last.is_bullish:
        if last.close < first.midpoint and middle.low > first.close:
            return _pattern("Evening Star", Direction.BEARISH, SignalStrength.VERY_STRONG)
    return None


def detect_three_soldiers_crows(
    first: Candle, second: Candle, third: Candle
) -> Optional[CandlestickPattern]:
    """Three same-colored candles with advancing closes and healthy bodies."""
    candles = (first, second, third)
    avg_body = sum(c.body for c in candles) / 3
    if not all(c.body > avg_body * SOLDIERS_MIN_BODY_RATIO for c in candles):
        return None

    if all(c.is_bullish for c in candles):
        if first.close < second.close < third.close:
            return _pattern("Three White Soldiers", Direction.BULLISH, SignalStrength.STRONG)
    elif not any(c.is_bullish for c in candles):
        if first.close > second.close > third.close:
            return _pattern("Three Black Crows", Direction.BEARISH, SignalStrength.STRONG)
    return None


def candlestick_patterns(
    opens: ArrayLike,
    highs: ArrayLike,
    lows: ArrayLike,
    closes: ArrayLike,
    trend: TrendLabel = TrendLabel.UNKNOWN,
) -> Optional[CandlestickAnalysis]:
    """
    Run every matcher against the latest bars.

    Matches are ranked by strength (stable, so equal strengths keep detector
    order) and the strongest is reported as primary. Returns None when
    nothing matches or fewer than 2 bars are available.
    """
    opens, highs, lows, closes = map(to_array, (opens, highs, lows, closes))
    if len(closes) < 2:
        return None

    candles = [
        Candle(float(o), float(h), float(l), float(c))
        for o, h, l, c in zip(opens[-3:], highs[-3:], lows[-3:], closes[-3:])
    ]
    current, prev = candles[-1], candles[-2]

    found = [
        detect_doji(current),
        detect_hammer(current, trend),
        detect_shooting_star(current, trend),
        detect_engulfing(prev, current),
        detect_piercing_dark_cloud(prev, current),
    ]
    if len(candles) == 3:
        found.append(detect_star(*candles))
        found.append(detect_three_soldiers_crows(*candles))

    patterns = sorted(
        (p for p in found if p is not None),
        key=lambda p: p.strength.rank,
        reverse=True,
    )
    if not patterns:
        return None

    return CandlestickAnalysis(primary=patterns[0], patterns=patterns, count=len(patterns))


# =============================================================================
# HEIKIN-ASHI
# =============================================================================


def heikin_ashi(
    opens: ArrayLike,
    highs: ArrayLike,
    lows: ArrayLike,
    closes: ArrayLike,
    timestamps: Optional[Sequence[datetime]] = None,
    volumes: Optional[ArrayLike] = None,
) -> Optional[list[HeikinAshiCandle]]:
    """
    Heikin-Ashi synthetic candles.

    close = (O + H + L + C) / 4
    open  = (prev HA open + prev HA close) / 2, seeded with (O + C) / 2
    high  = max(H, HA open, HA close)
    low   = min(L, HA open, HA close)
    """
    opens, highs, lows, closes = map(to_array, (opens, highs, lows, closes))
    if len(closes) < 2:
        return None

    candles = []
    prev_open = prev_close = None
    for i in range(len(closes)):
        ha_close = float(opens[i] + highs[i] + lows[i] + closes[i]) / 4
        if prev_open is None:
            ha_open = float(opens[i] + closes[i]) / 2
        else:
            ha_open = (prev_open + prev_close) / 2
        ha_high = max(float(highs[i]), ha_open, ha_close)
        ha_low = min(float(lows[i]), ha_open, ha_close)

        candles.append(
            HeikinAshiCandle(
                timestamp=timestamps[i] if timestamps is not None else None,
                open=ha_open,
                high=ha_high,
                low=ha_low,
                close=ha_close,
                volume=float(volumes[i]) if volumes is not None else None,
                is_bullish=ha_close > ha_open,
                body=abs(ha_close - ha_open),
                upper_wick=ha_high - max(ha_open, ha_close),
                lower_wick=min(ha_open, ha_close) - ha_low,
            )
        )
        prev_open, prev_close = ha_open, ha_close

    return candles


def _streaks(candles: Sequence[HeikinAshiCandle]) -> tuple[int, int]:
    """Length of the current-color run and of the opposite run before it."""
    color = candles[-1].is_bullish
    active = 0
    preceding = 0
    for candle in reversed(candles):
        if candle.is_bullish == color:
            if preceding:
                break
            active += 1
        else:
            preceding += 1
    return active, preceding


def analyze_heikin_ashi_trend(
    candles: Optional[Sequence[HeikinAshiCandle]], lookback: int = 10
) -> Optional[HeikinAshiTrend]:
    """
    Classify the Heikin-Ashi trend from the streak ending at the last candle.

    The trailing wick is the lower wick of a green candle and the upper wick
    of a red one. A reversal fires on the first candle of a new color when
    at least two opposite candles preceded it and its trailing wick exceeds
    half its body.
    """
    if not candles or len(candles) < lookback:
        return None

    recent = list(candles)[-lookback:]
    current = recent[-1]
    streak, preceding = _streaks(recent)
    bullish = current.is_bullish
    trailing_wick = current.lower_wick if bullish else current.upper_wick

    total_wick = current.upper_wick + current.lower_wick
    body_to_wick = current.body / total_wick if total_wick > 0 else None

    if streak >= HA_STRONG_STREAK:
        trend = (
            HeikinAshiTrendLabel.STRONG_UPTREND
            if bullish
            else HeikinAshiTrendLabel.STRONG_DOWNTREND
        )
        strength, confidence = SignalStrength.VERY_STRONG, 9
    elif streak >= HA_TREND_STREAK:
        trend = HeikinAshiTrendLabel.UPTREND if bullish else HeikinAshiTrendLabel.DOWNTREND
        if trailing_wick < current.body * HA_CLEAN_WICK_RATIO:
            strength, confidence = SignalStrength.STRONG, 8
        else:
            strength, confidence = SignalStrength.MODERATE, 7
    else:
        trend = HeikinAshiTrendLabel.CONSOLIDATION
        strength, confidence = SignalStrength.WEAK, 4

    reversal = None
    if (
        streak == 1
        and preceding >= HA_REVERSAL_MIN_PRIOR
        and trailing_wick > current.body * HA_REVERSAL_WICK_RATIO
    ):
        if bullish:
            reversal = HeikinAshiReversal(
                type=Direction.BULLISH,
                signal="Potential reversal up - first green HA candle after red streak",
                confidence=6 + min(preceding, 3),
            )
        else:
            reversal = HeikinAshiReversal(
                type=Direction.BEARISH,
                signal="Potential reversal down - first red HA candle after green streak",
                confidence=6 + min(preceding, 3),
            )

    return HeikinAshiTrend(
        trend=trend,
        strength=strength,
        confidence=confidence,
        consecutive_bullish=streak if bullish else 0,
        consecutive_bearish=0 if bullish else streak,
        preceding_streak=preceding,
        body_to_wick_ratio=body_to_wick,
        current_color=CandleColor.GREEN if bullish else CandleColor.RED,
        reversal=reversal,
        signals=HeikinAshiSignals(
            strong_trend=streak >= HA_STRONG_STREAK,
            trend_continuation=streak >= HA_TREND_STREAK,
            indecision=streak <= 1 and preceding <= 1,
            possible_reversal=reversal is not None,
        ),
    )
