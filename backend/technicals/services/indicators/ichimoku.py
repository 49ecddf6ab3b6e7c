"""
Ichimoku Kinko Hyo

Five lines from rolling high/low midpoints, plus a signal ladder combining
price-vs-cloud position, the Tenkan/Kijun relation and cloud color.
"""

from typing import Optional

import numpy as np

from technicals.schemas.indicators import (
    CloudPosition,
    Direction,
    IchimokuCloud,
    IchimokuResult,
    IchimokuSignal,
)
from technicals.services.indicators.calculations import ArrayLike, to_array

TENKAN_PERIOD = 9
KIJUN_PERIOD = 26
SENKOU_B_PERIOD = 52
CHIKOU_OFFSET = 26
MAX_SIGNALS = 3


def _midpoint(highs: np.ndarray, lows: np.ndarray, period: int) -> float:
    return (float(np.max(highs[-period:])) + float(np.min(lows[-period:]))) / 2


def _signal_ladder(
    position: CloudPosition, tk_cross: Direction, color: Direction
) -> tuple[IchimokuSignal, int, str]:
    if position == CloudPosition.ABOVE_CLOUD:
        if tk_cross == Direction.BULLISH and color == Direction.BULLISH:
            return (
                IchimokuSignal.STRONG_BULLISH,
                9,
                "Strong uptrend: Price above bullish cloud with TK bullish",
            )
        if color == Direction.BULLISH:
            return IchimokuSignal.BULLISH, 7, "Uptrend: Price above bullish cloud"
        return IchimokuSignal.BULLISH, 6, "Price above cloud (support)"

    if position == CloudPosition.BELOW_CLOUD:
        if tk_cross == Direction.BEARISH and color == Direction.BEARISH:
            return (
                IchimokuSignal.STRONG_BEARISH,
                9,
                "Strong downtrend: Price below bearish cloud with TK bearish",
            )
        if color == Direction.BEARISH:
            return IchimokuSignal.BEARISH, 7, "Downtrend: Price below bearish cloud"
        return IchimokuSignal.BEARISH, 6, "Price below cloud (resistance)"

    return IchimokuSignal.NEUTRAL, 4, "Price in cloud (indecision/consolidation)"


def ichimoku(
    highs: ArrayLike, lows: ArrayLike, closes: ArrayLike
) -> Optional[IchimokuResult]:
    """
    Ichimoku Cloud for the last bar. Requires 52 bars.

    Spans are evaluated at the current bar (not displaced forward), and the
    Chikou span is the current close compared with the close 26 bars back.
    """
    highs, lows, closes = map(to_array, (highs, lows, closes))
    if len(closes) < SENKOU_B_PERIOD:
        return None

    price = float(closes[-1])

    tenkan_sen = _midpoint(highs, lows, TENKAN_PERIOD)
    kijun_sen = _midpoint(highs, lows, KIJUN_PERIOD)
    senkou_span_a = (tenkan_sen + kijun_sen) / 2
    senkou_span_b = _midpoint(highs, lows, SENKOU_B_PERIOD)
    chikou_span = price
    chikou_reference = float(closes[-1 - CHIKOU_OFFSET])

    cloud_top = max(senkou_span_a, senkou_span_b)
    cloud_bottom = min(senkou_span_a, senkou_span_b)
    thickness = cloud_top - cloud_bottom
    color = Direction.BULLISH if senkou_span_a > senkou_span_b else Direction.BEARISH

    if price > cloud_top:
        position = CloudPosition.ABOVE_CLOUD
    elif price < cloud_bottom:
        position = CloudPosition.BELOW_CLOUD
    else:
        position = CloudPosition.IN_CLOUD

    if tenkan_sen > kijun_sen:
        tk_cross = Direction.BULLISH
    elif tenkan_sen < kijun_sen:
        tk_cross = Direction.BEARISH
    else:
        tk_cross = Direction.NEUTRAL

    signal, confidence, headline = _signal_ladder(position, tk_cross, color)
    signals = [headline]

    if tk_cross == Direction.BULLISH and position != CloudPosition.BELOW_CLOUD:
        signals.append("TK Bullish Cross (buy signal)")
    elif tk_cross == Direction.BEARISH and position != CloudPosition.ABOVE_CLOUD:
        signals.append("TK Bearish Cross (sell signal)")

    if chikou_span > chikou_reference and position == CloudPosition.ABOVE_CLOUD:
        signals.append("Chikou confirms bullish (above price 26 bars ago)")
        confidence = min(10, confidence + 1)
    elif chikou_span < chikou_reference and position == CloudPosition.BELOW_CLOUD:
        signals.append("Chikou confirms bearish (below price 26 bars ago)")
        confidence = min(10, confidence + 1)

    return IchimokuResult(
        tenkan_sen=tenkan_sen,
        kijun_sen=kijun_sen,
        senkou_span_a=senkou_span_a,
        senkou_span_b=senkou_span_b,
        chikou_span=chikou_span,
        cloud=IchimokuCloud(
            top=cloud_top,
            bottom=cloud_bottom,
            thickness=thickness,
            color=color,
            thickness_percent=thickness / price * 100,
        ),
        price_position=position,
        tk_cross=tk_cross,
        signal=signal,
        confidence=confidence,
        signals=signals[:MAX_SIGNALS],
    )
