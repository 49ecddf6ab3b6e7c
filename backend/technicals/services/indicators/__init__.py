"""
Indicator Engine

CONTRACT:
    Input:  bar arrays (opens, highs, lows, closes, volumes), oldest first
    Output: one immutable result model per indicator, or None

RESPONSIBILITIES:
    - Smoothing primitives (SMA, EMA, Wilder)
    - Oscillators (RSI, MFI, Stochastic, MACD, CMF)
    - Volatility and trend strength (ATR, Bollinger Bands, ADX)
    - Volume structure (OBV, VWAP, Volume Profile, divergences)
    - Price structure (support/resistance, Fibonacci)
    - Ichimoku cloud

PURE PYTHON - Uses NumPy for calculations.
All math is deterministic and reproducible.

The snapshot aggregator and the batch service live in
``technicals.services.indicators.snapshot`` and ``.service``.
"""

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
    true_range,
    wilder_smooth,
)
from technicals.services.indicators.ichimoku import ichimoku
from technicals.services.indicators.levels import (
    cluster_levels,
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

__all__ = [
    "adx",
    "atr",
    "bollinger_bands",
    "ema",
    "macd",
    "mfi",
    "rsi",
    "sma",
    "stochastic",
    "true_range",
    "wilder_smooth",
    "ichimoku",
    "cluster_levels",
    "fibonacci_levels",
    "nearest_fib_level",
    "support_resistance",
    "cmf",
    "cmf_series",
    "detect_cmf_divergence",
    "detect_obv_divergence",
    "detect_unusual_volume",
    "obv",
    "volume_profile",
    "vwap",
]
