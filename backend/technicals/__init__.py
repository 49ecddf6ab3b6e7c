"""
Technicals Engine

Deterministic technical indicators, price-structure levels and chart
patterns over an OHLCV bar series, merged into one TechnicalSnapshot.

    from technicals import compute_snapshot

    snapshot = compute_snapshot(bars, current_price=185.4, ticker="AAPL")

Every component is also callable on its own for callers that need a subset
of the snapshot.
"""

from technicals.schemas.snapshot import TechnicalSnapshot
from technicals.services.indicators import (
    adx,
    atr,
    bollinger_bands,
    cmf,
    detect_cmf_divergence,
    detect_obv_divergence,
    ema,
    fibonacci_levels,
    ichimoku,
    macd,
    mfi,
    obv,
    rsi,
    sma,
    stochastic,
    support_resistance,
    volume_profile,
    vwap,
)
from technicals.services.indicators.snapshot import compute_snapshot, detect_trend
from technicals.services.scanner import (
    analyze_heikin_ashi_trend,
    candlestick_patterns,
    detect_rsi_divergence,
    heikin_ashi,
)

__version__ = "0.1.0"

__all__ = [
    "TechnicalSnapshot",
    "compute_snapshot",
    "detect_trend",
    "adx",
    "atr",
    "bollinger_bands",
    "cmf",
    "detect_cmf_divergence",
    "detect_obv_divergence",
    "ema",
    "fibonacci_levels",
    "ichimoku",
    "macd",
    "mfi",
    "obv",
    "rsi",
    "sma",
    "stochastic",
    "support_resistance",
    "volume_profile",
    "vwap",
    "analyze_heikin_ashi_trend",
    "candlestick_patterns",
    "detect_rsi_divergence",
    "heikin_ashi",
]
