"""
Snapshot Aggregator

Runs every indicator, level and pattern calculator over one bar series and
merges the results into a TechnicalSnapshot. A calculator that lacks data
(or fails) leaves its field empty; it never fails the whole snapshot.
"""

import logging
from typing import Callable, Optional, Sequence, TypeVar

import numpy as np

from technicals.core.config import Settings, get_settings
from technicals.schemas.indicators import MovingAverages, SupportResistance, TrendLabel
from technicals.schemas.market import OHLCV
from technicals.schemas.snapshot import TechnicalSnapshot
from technicals.services.indicators.calculations import (
    adx,
    atr,
    bollinger_bands,
    ema,
    macd,
    mfi,
    rsi,
    sma,
    stochastic,
)
from technicals.services.indicators.ichimoku import ichimoku
from technicals.services.indicators.levels import (
    fibonacci_levels,
    nearest_fib_level,
    support_resistance,
)
from technicals.services.indicators.volume import (
    cmf,
    cmf_series,
    detect_cmf_divergence,
    detect_obv_divergence,
    detect_unusual_volume,
    obv,
    volume_profile,
    vwap,
)
from technicals.services.scanner.patterns import (
    analyze_heikin_ashi_trend,
    candlestick_patterns,
    heikin_ashi,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _ohlcv_to_arrays(bars: Sequence[OHLCV]) -> tuple:
    """Convert OHLCV list to numpy arrays."""
    opens = np.array([b.open for b in bars], dtype=float)
    highs = np.array([b.high for b in bars], dtype=float)
    lows = np.array([b.low for b in bars], dtype=float)
    closes = np.array([b.close for b in bars], dtype=float)
    volumes = np.array([b.volume for b in bars], dtype=float)
    return opens, highs, lows, closes, volumes


def _safe(label: str, func: Callable[..., T], *args, **kwargs) -> Optional[T]:
    try:
        return func(*args, **kwargs)
    except (ArithmeticError, ValueError, IndexError) as e:
        logger.warning(f"{label} calculation failed, leaving it empty: {e}")
        return None


def detect_trend(
    price: float,
    sma20: Optional[float],
    sma50: Optional[float],
    sma200: Optional[float] = None,
) -> TrendLabel:
    """
    Trend label from the ordering of price and its moving averages.

    SMA200 only gates the "strong" labels, and only when it exists.
    """
    if sma20 is None or sma50 is None:
        return TrendLabel.UNKNOWN

    if price > sma20 > sma50:
        if sma200 is None or sma50 > sma200:
            return TrendLabel.STRONG_UPTREND
        return TrendLabel.UPTREND

    if price < sma20 < sma50:
        if sma200 is None or sma50 < sma200:
            return TrendLabel.STRONG_DOWNTREND
        return TrendLabel.DOWNTREND

    return TrendLabel.SIDEWAYS


def _cmf_divergence(
    highs: np.ndarray,
    lows: np.ndarray,
    closes: np.ndarray,
    volumes: np.ndarray,
    period: int,
):
    return detect_cmf_divergence(
        highs, lows, closes, cmf_series(highs, lows, closes, volumes, period)
    )


def _reference_volume(
    volumes: np.ndarray, avg_volume: Optional[float], window: int
) -> Optional[float]:
    if avg_volume is not None:
        return avg_volume
    prior = volumes[:-1][-window:]
    if len(prior) == 0:
        return None
    return float(np.mean(prior))


def compute_snapshot(
    bars: Sequence[OHLCV],
    current_price: Optional[float] = None,
    ticker: Optional[str] = None,
    avg_volume: Optional[float] = None,
    settings: Optional[Settings] = None,
) -> TechnicalSnapshot:
    """
    Compute the full technical snapshot for a bar series.

    Args:
        bars: OHLCV bars, oldest first (at least 2)
        current_price: Live price; the last close is used when omitted
        ticker: Tag copied onto the snapshot
        avg_volume: Reference volume for unusual-volume classification;
            defaults to the mean of the bars before the last one
        settings: Indicator windows; the process-wide settings by default

    Raises:
        ValueError: fewer than 2 bars, or a non-positive price
    """
    if len(bars) < 2:
        raise ValueError(f"Need at least 2 bars, got {len(bars)}")

    cfg = settings or get_settings()
    opens, highs, lows, closes, volumes = _ohlcv_to_arrays(bars)

    price = float(closes[-1]) if current_price is None else float(current_price)
    if price <= 0:
        raise ValueError(f"Price must be positive, got {price}")

    # Moving averages / trend
    moving_averages = MovingAverages(
        sma20=sma(closes, cfg.sma_short_period),
        sma50=sma(closes, cfg.sma_medium_period),
        sma200=sma(closes, cfg.sma_long_period),
        ema9=ema(closes, cfg.ema_fast_period),
        ema21=ema(closes, cfg.ema_slow_period),
    )
    trend = detect_trend(
        price, moving_averages.sma20, moving_averages.sma50, moving_averages.sma200
    )

    # Volume structure
    obv_result = _safe("OBV", obv, closes, volumes)
    obv_divergence = None
    if obv_result is not None:
        obv_divergence = _safe(
            "OBV divergence", detect_obv_divergence, highs, lows, closes, obv_result.values
        )

    cmf_divergence = _safe(
        "CMF divergence", _cmf_divergence, highs, lows, closes, volumes, cfg.cmf_period
    )

    reference_volume = _reference_volume(volumes, avg_volume, cfg.volume_average_window)

    # Price structure
    fibonacci = _safe("Fibonacci", fibonacci_levels, highs, lows, cfg.fibonacci_lookback)
    levels = _safe(
        "Support/resistance",
        support_resistance,
        highs,
        lows,
        cfg.support_resistance_tolerance,
    )

    # Patterns
    ha_candles = _safe(
        "Heikin-Ashi",
        heikin_ashi,
        opens,
        highs,
        lows,
        closes,
        [b.timestamp for b in bars],
        volumes,
    )

    snapshot = TechnicalSnapshot(
        ticker=ticker,
        timestamp=bars[-1].timestamp,
        price=price,
        bar_count=len(bars),
        moving_averages=moving_averages,
        rsi=_safe("RSI", rsi, closes, cfg.rsi_period),
        mfi=_safe("MFI", mfi, highs, lows, closes, volumes, cfg.mfi_period),
        macd=_safe(
            "MACD",
            macd,
            closes,
            cfg.macd_fast_period,
            cfg.macd_slow_period,
            cfg.macd_signal_period,
        ),
        stochastic=_safe(
            "Stochastic",
            stochastic,
            highs,
            lows,
            closes,
            cfg.stochastic_k_period,
            cfg.stochastic_d_period,
        ),
        bollinger_bands=_safe(
            "Bollinger", bollinger_bands, closes, cfg.bollinger_period, cfg.bollinger_std_dev
        ),
        vwap=_safe("VWAP", vwap, highs, lows, closes, volumes),
        obv=obv_result,
        obv_divergence=obv_divergence,
        cmf=_safe("CMF", cmf, highs, lows, closes, volumes, cfg.cmf_period),
        cmf_divergence=cmf_divergence,
        atr=_safe("ATR", atr, highs, lows, closes, cfg.atr_period),
        adx=_safe("ADX", adx, highs, lows, closes, cfg.adx_period),
        fibonacci=fibonacci,
        nearest_fib=_safe(
            "Nearest Fibonacci",
            nearest_fib_level,
            price,
            fibonacci,
            cfg.fibonacci_match_tolerance,
        ),
        support_resistance=levels or SupportResistance(),
        volume=_safe(
            "Unusual volume", detect_unusual_volume, float(volumes[-1]), reference_volume
        ),
        trend=trend,
        candlestick_patterns=_safe(
            "Candlestick", candlestick_patterns, opens, highs, lows, closes, trend
        ),
        volume_profile=_safe(
            "Volume profile",
            volume_profile,
            highs,
            lows,
            closes,
            volumes,
            cfg.volume_profile_lookback,
            cfg.volume_profile_buckets,
        ),
        heikin_ashi=_safe(
            "Heikin-Ashi trend",
            analyze_heikin_ashi_trend,
            ha_candles,
            cfg.heikin_ashi_lookback,
        ),
        ichimoku=_safe("Ichimoku", ichimoku, highs, lows, closes),
    )

    logger.debug(f"Snapshot for {ticker or 'series'}: {len(bars)} bars, trend={trend.value}")
    return snapshot
