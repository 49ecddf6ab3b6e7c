"""
CONTRACT 3: Technical Snapshot

Input: bar series + current price
Output: TechnicalSnapshot

The aggregate read by downstream consumers (signal generator, regime
detector, UI). Constructed fresh on every aggregation, never mutated.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from technicals.schemas.indicators import (
    AdxResult,
    BollingerResult,
    CandlestickAnalysis,
    CmfResult,
    DivergenceResult,
    FibLevelMatch,
    FibonacciLevels,
    HeikinAshiTrend,
    IchimokuResult,
    MacdResult,
    MfiResult,
    MovingAverages,
    ObvResult,
    StochasticResult,
    SupportResistance,
    TrendLabel,
    VolumeAnalysis,
    VolumeProfileResult,
)


class TechnicalSnapshot(BaseModel):
    """
    Complete indicator set for one ticker at one point in time.
    Returned by: compute_snapshot / TechnicalService
    Consumed by: signal layer, regime detection, persistence, presentation

    Any indicator field may be None when the series is too short for it.
    """

    ticker: Optional[str] = None
    timestamp: Optional[datetime] = Field(
        default=None, description="Timestamp of the last bar"
    )
    price: float = Field(..., gt=0)
    bar_count: int = Field(..., ge=2)

    moving_averages: MovingAverages
    rsi: Optional[float] = Field(default=None, ge=0, le=100)
    mfi: Optional[MfiResult] = None
    macd: Optional[MacdResult] = None
    stochastic: Optional[StochasticResult] = None
    bollinger_bands: Optional[BollingerResult] = None
    vwap: Optional[float] = None
    obv: Optional[ObvResult] = None
    obv_divergence: Optional[DivergenceResult] = None
    cmf: Optional[CmfResult] = None
    cmf_divergence: Optional[DivergenceResult] = None
    atr: Optional[float] = Field(default=None, ge=0)
    adx: Optional[AdxResult] = None
    fibonacci: Optional[FibonacciLevels] = None
    nearest_fib: Optional[FibLevelMatch] = None
    support_resistance: SupportResistance
    volume: Optional[VolumeAnalysis] = None
    trend: TrendLabel
    candlestick_patterns: Optional[CandlestickAnalysis] = None
    volume_profile: Optional[VolumeProfileResult] = None
    heikin_ashi: Optional[HeikinAshiTrend] = None
    ichimoku: Optional[IchimokuResult] = None

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "ticker": "AAPL",
                "timestamp": "2024-02-02T00:00:00",
                "price": 186.4,
                "bar_count": 250,
                "moving_averages": {"sma20": 188.1, "sma50": 190.4, "ema9": 187.2},
                "rsi": 44.8,
                "trend": "downtrend",
                "support_resistance": {
                    "support": [180.2, 183.5],
                    "resistance": [194.9, 196.3],
                },
            }
        }
