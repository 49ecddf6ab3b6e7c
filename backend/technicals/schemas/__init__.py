"""
Technicals Schema Contracts

This module defines the contracts between the engine and its callers.
These are the authoritative interfaces - all modules must conform to these schemas.
"""

from technicals.schemas.market import (
    BarSeries,
    MarketSnapshot,
    OHLCV,
    Timeframe,
)
from technicals.schemas.indicators import (
    AdxResult,
    BollingerResult,
    CandlestickAnalysis,
    CandlestickPattern,
    CmfResult,
    Direction,
    DivergenceResult,
    DivergenceScan,
    DivergenceScanEntry,
    DivergenceSummary,
    FibLevelMatch,
    FibonacciLevels,
    HeikinAshiCandle,
    HeikinAshiTrend,
    IchimokuResult,
    MacdResult,
    MfiResult,
    MovingAverages,
    ObvResult,
    RsiDivergence,
    SignalStrength,
    StochasticResult,
    SupportResistance,
    TrendLabel,
    VolumeAnalysis,
    VolumeProfileResult,
)
from technicals.schemas.snapshot import TechnicalSnapshot

__all__ = [
    # Market
    "BarSeries",
    "MarketSnapshot",
    "OHLCV",
    "Timeframe",
    # Indicators
    "AdxResult",
    "BollingerResult",
    "CandlestickAnalysis",
    "CandlestickPattern",
    "CmfResult",
    "Direction",
    "DivergenceResult",
    "DivergenceScan",
    "DivergenceScanEntry",
    "DivergenceSummary",
    "FibLevelMatch",
    "FibonacciLevels",
    "HeikinAshiCandle",
    "HeikinAshiTrend",
    "IchimokuResult",
    "MacdResult",
    "MfiResult",
    "MovingAverages",
    "ObvResult",
    "RsiDivergence",
    "SignalStrength",
    "StochasticResult",
    "SupportResistance",
    "TrendLabel",
    "VolumeAnalysis",
    "VolumeProfileResult",
    # Snapshot
    "TechnicalSnapshot",
]
