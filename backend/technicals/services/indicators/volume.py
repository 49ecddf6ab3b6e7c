"""
Volume Structure

On-Balance Volume and its divergence detector, Chaikin Money Flow and its
divergence detector, VWAP, the volume-at-price profile and unusual-volume
classification.
"""

import math
from typing import Optional, Sequence

import numpy as np

from technicals.schemas.indicators import (
    CmfResult,
    CmfSignal,
    Direction,
    DivergenceResult,
    ObvResult,
    ObvTrend,
    SignalStrength,
    ValueAreaPosition,
    VolumeAnalysis,
    VolumeLevel,
    VolumeProfileLevel,
    VolumeProfileResult,
)
from technicals.services.indicators.calculations import ArrayLike, to_array

DIVERGENCE_LOOKBACK = 20
OBV_TREND_WINDOW = 10
VALUE_AREA_SHARE = 0.70
POC_PROXIMITY = 0.002


# =============================================================================
# ON-BALANCE VOLUME
# =============================================================================


def _obv_trend(values: Sequence[float]) -> ObvTrend:
    if len(values) < OBV_TREND_WINDOW:
        return ObvTrend.UNKNOWN

    average = sum(values[-OBV_TREND_WINDOW:]) / OBV_TREND_WINDOW
    current = values[-1]

    if current > average * 1.05:
        return ObvTrend.STRONG_BULLISH
    if current > average:
        return ObvTrend.BULLISH
    if current < average * 0.95:
        return ObvTrend.STRONG_BEARISH
    if current < average:
        return ObvTrend.BEARISH
    return ObvTrend.NEUTRAL


def obv(closes: ArrayLike, volumes: ArrayLike) -> Optional[ObvResult]:
    """On-Balance Volume, starting from zero at the first bar."""
    closes, volumes = to_array(closes), to_array(volumes)
    if len(closes) < 2:
        return None

    running = 0.0
    values = [running]
    for i in range(1, len(closes)):
        if closes[i] > closes[i - 1]:
            running += float(volumes[i])
        elif closes[i] < closes[i - 1]:
            running -= float(volumes[i])
        values.append(running)

    return ObvResult(current=running, values=values, trend=_obv_trend(values))


def detect_obv_divergence(
    highs: ArrayLike,
    lows: ArrayLike,
    closes: ArrayLike,
    obv_values: Sequence[float],
) -> Optional[DivergenceResult]:
    """
    Compare the close with the 20-bar price extremes and OBV with its own
    extremes over the same window.
    """
    if len(closes) < DIVERGENCE_LOOKBACK or len(obv_values) < DIVERGENCE_LOOKBACK:
        return None

    price_high = float(np.max(to_array(highs)[-DIVERGENCE_LOOKBACK:]))
    price_low = float(np.min(to_array(lows)[-DIVERGENCE_LOOKBACK:]))
    current_price = float(to_array(closes)[-1])

    recent_obv = list(obv_values)[-DIVERGENCE_LOOKBACK:]
    obv_high = max(recent_obv)
    obv_low = min(recent_obv)
    current_obv = recent_obv[-1]

    if current_price >= price_high * 0.98 and current_obv < obv_high * 0.95:
        return DivergenceResult(
            type=Direction.BEARISH,
            strength=SignalStrength.STRONG,
            signal="Price making new highs but volume declining - potential reversal down",
            confidence=7,
        )
    if current_price <= price_low * 1.02 and current_obv > obv_low * 1.05:
        return DivergenceResult(
            type=Direction.BULLISH,
            strength=SignalStrength.STRONG,
            signal="Price making new lows but volume accumulating - potential reversal up",
            confidence=7,
        )
    if current_price > price_high * 0.95 and current_obv < obv_high * 0.98:
        return DivergenceResult(
            type=Direction.BEARISH,
            strength=SignalStrength.MODERATE,
            signal="Slight bearish divergence detected - watch for weakness",
            confidence=5,
        )
    if current_price < price_low * 1.05 and current_obv > obv_low * 1.02:
        return DivergenceResult(
            type=Direction.BULLISH,
            strength=SignalStrength.MODERATE,
            signal="Slight bullish divergence detected - watch for strength",
            confidence=5,
        )
    return None


# =============================================================================
# CHAIKIN MONEY FLOW
# =============================================================================


def _cmf_value(
    highs: np.ndarray,
    lows: np.ndarray,
    closes: np.ndarray,
    volumes: np.ndarray,
) -> Optional[float]:
    mfv_sum = 0.0
    volume_sum = 0.0
    for high, low, close, volume in zip(highs, lows, closes, volumes):
        price_range = high - low
        if price_range == 0:
            continue
        multiplier = ((close - low) - (high - close)) / price_range
        mfv_sum += multiplier * volume
        volume_sum += volume

    if volume_sum == 0:
        return None
    return float(mfv_sum / volume_sum)


def _cmf_description(value: float) -> str:
    if value > 0.25:
        return "Strong accumulation - institutions buying"
    if value > 0.15:
        return "Solid buying pressure"
    if value > 0.05:
        return "Moderate buying interest"
    if value > -0.05:
        return "Balanced trading - no clear pressure"
    if value > -0.15:
        return "Moderate selling pressure"
    if value > -0.25:
        return "Solid distribution - selling"
    return "Strong distribution - institutions selling"


def _cmf_label(value: float) -> tuple[CmfSignal, SignalStrength]:
    if value > 0.25:
        return CmfSignal.STRONG_BUY, SignalStrength.VERY_STRONG
    if value > 0.15:
        return CmfSignal.BUY, SignalStrength.STRONG
    if value > 0.05:
        return CmfSignal.BUY, SignalStrength.MODERATE
    if value < -0.25:
        return CmfSignal.STRONG_SELL, SignalStrength.VERY_STRONG
    if value < -0.15:
        return CmfSignal.SELL, SignalStrength.STRONG
    if value < -0.05:
        return CmfSignal.SELL, SignalStrength.MODERATE
    return CmfSignal.NEUTRAL, SignalStrength.WEAK


def cmf(
    highs: ArrayLike,
    lows: ArrayLike,
    closes: ArrayLike,
    volumes: ArrayLike,
    period: int = 21,
) -> Optional[CmfResult]:
    """
    Chaikin Money Flow over the last ``period`` bars.

    Bars with no range are skipped entirely, not counted as zero flow.
    """
    highs, lows, closes, volumes = map(to_array, (highs, lows, closes, volumes))
    if len(closes) < period:
        return None

    value = _cmf_value(
        highs[-period:], lows[-period:], closes[-period:], volumes[-period:]
    )
    if value is None:
        return None

    signal, strength = _cmf_label(value)
    return CmfResult(
        value=value,
        signal=signal,
        strength=strength,
        description=_cmf_description(value),
    )


def cmf_series(
    highs: ArrayLike,
    lows: ArrayLike,
    closes: ArrayLike,
    volumes: ArrayLike,
    period: int = 21,
) -> list[Optional[float]]:
    """CMF at every bar; None until a full window exists."""
    highs, lows, closes, volumes = map(to_array, (highs, lows, closes, volumes))
    history: list[Optional[float]] = []
    for end in range(1, len(closes) + 1):
        if end < period:
            history.append(None)
            continue
        start = end - period
        history.append(
            _cmf_value(
                highs[start:end], lows[start:end], closes[start:end], volumes[start:end]
            )
        )
    return history


def detect_cmf_divergence(
    highs: ArrayLike,
    lows: ArrayLike,
    closes: ArrayLike,
    cmf_history: Sequence[Optional[float]],
) -> Optional[DivergenceResult]:
    """CMF counterpart of the OBV divergence check (strong tier only)."""
    if len(closes) < DIVERGENCE_LOOKBACK:
        return None

    recent_cmf = [v for v in list(cmf_history)[-DIVERGENCE_LOOKBACK:] if v is not None]
    if not recent_cmf or cmf_history[-1] is None:
        return None

    price_high = float(np.max(to_array(highs)[-DIVERGENCE_LOOKBACK:]))
    price_low = float(np.min(to_array(lows)[-DIVERGENCE_LOOKBACK:]))
    current_price = float(to_array(closes)[-1])

    cmf_high = max(recent_cmf)
    cmf_low = min(recent_cmf)
    current_cmf = recent_cmf[-1]

    if current_price >= price_high * 0.98 and current_cmf < cmf_high * 0.9:
        return DivergenceResult(
            type=Direction.BEARISH,
            strength=SignalStrength.STRONG,
            signal="Price rising but buying pressure weakening - potential top",
            confidence=8,
        )
    if current_price <= price_low * 1.02 and current_cmf > cmf_low * 1.1:
        return DivergenceResult(
            type=Direction.BULLISH,
            strength=SignalStrength.STRONG,
            signal="Price falling but selling pressure easing - potential bottom",
            confidence=8,
        )
    return None


# =============================================================================
# VWAP / UNUSUAL VOLUME
# =============================================================================


def vwap(
    highs: ArrayLike, lows: ArrayLike, closes: ArrayLike, volumes: ArrayLike
) -> Optional[float]:
    """Volume Weighted Average Price over the whole series."""
    highs, lows, closes, volumes = map(to_array, (highs, lows, closes, volumes))
    total_volume = float(np.sum(volumes))
    if total_volume == 0:
        return None

    typical_price = (highs + lows + closes) / 3
    return float(np.sum(typical_price * volumes) / total_volume)


def detect_unusual_volume(
    current_volume: float, avg_volume: Optional[float]
) -> Optional[VolumeAnalysis]:
    """Classify the current volume against its average."""
    if not avg_volume or avg_volume <= 0:
        return None

    ratio = current_volume / avg_volume
    if ratio >= 3:
        return VolumeAnalysis(unusual=True, level=VolumeLevel.EXTREME, ratio=ratio)
    if ratio >= 2:
        return VolumeAnalysis(unusual=True, level=VolumeLevel.HIGH, ratio=ratio)
    if ratio >= 1.5:
        return VolumeAnalysis(unusual=True, level=VolumeLevel.MODERATE, ratio=ratio)
    return VolumeAnalysis(unusual=False, level=VolumeLevel.NORMAL, ratio=ratio)


# =============================================================================
# VOLUME PROFILE
# =============================================================================


def _bucket_index(price: float, min_price: float, bucket_size: float, buckets: int) -> int:
    index = math.floor((price - min_price) / bucket_size)
    return min(max(index, 0), buckets - 1)


def volume_profile(
    highs: ArrayLike,
    lows: ArrayLike,
    closes: ArrayLike,
    volumes: ArrayLike,
    lookback: int = 30,
    buckets: int = 50,
    current_price: Optional[float] = None,
) -> Optional[VolumeProfileResult]:
    """
    Volume-at-price histogram over the last ``lookback`` bars.

    Each bar's volume is split evenly across the fixed-width buckets its
    [low, high] range touches. The value area starts at the Point of Control
    and grows one bucket at a time toward the side holding more volume until
    it covers 70% of the total.
    """
    highs, lows, closes, volumes = map(to_array, (highs, lows, closes, volumes))
    if buckets <= 0 or len(closes) < lookback:
        return None

    highs, lows = highs[-lookback:], lows[-lookback:]
    closes, volumes = closes[-lookback:], volumes[-lookback:]

    min_price = float(np.min(lows))
    max_price = float(np.max(highs))
    if max_price == min_price:
        return None

    bucket_size = (max_price - min_price) / buckets
    profile = np.zeros(buckets)

    for high, low, close, volume in zip(highs, lows, closes, volumes):
        if volume == 0:
            continue
        if high == low:
            profile[_bucket_index(close, min_price, bucket_size, buckets)] += volume
            continue
        low_bucket = _bucket_index(low, min_price, bucket_size, buckets)
        high_bucket = _bucket_index(high, min_price, bucket_size, buckets)
        profile[low_bucket : high_bucket + 1] += volume / (high_bucket - low_bucket + 1)

    poc_index = int(np.argmax(profile))
    target_volume = float(np.sum(profile)) * VALUE_AREA_SHARE

    lower = upper = poc_index
    area_volume = float(profile[poc_index])
    last = buckets - 1
    while area_volume < target_volume and (lower > 0 or upper < last):
        lower_volume = profile[lower - 1] if lower > 0 else 0.0
        upper_volume = profile[upper + 1] if upper < last else 0.0
        if lower > 0 and (lower_volume >= upper_volume or upper == last):
            lower -= 1
            area_volume += lower_volume
        else:
            upper += 1
            area_volume += upper_volume

    midpoints = [min_price + i * bucket_size + bucket_size / 2 for i in range(buckets)]
    poc = midpoints[poc_index]
    val = midpoints[lower]
    vah = midpoints[upper]

    price = float(closes[-1]) if current_price is None else current_price
    if price > vah:
        position = ValueAreaPosition.ABOVE_VALUE_AREA
    elif price < val:
        position = ValueAreaPosition.BELOW_VALUE_AREA
    elif abs(price - poc) / poc < POC_PROXIMITY:
        position = ValueAreaPosition.AT_POC
    else:
        position = ValueAreaPosition.IN_VALUE_AREA

    distribution = [
        VolumeProfileLevel(
            price=midpoints[i],
            volume=float(profile[i]),
            is_poc=i == poc_index,
            is_value_area=lower <= i <= upper,
        )
        for i in range(buckets)
    ]

    return VolumeProfileResult(
        poc=poc,
        vah=vah,
        val=val,
        position=position,
        lookback=lookback,
        distribution=distribution,
    )
