"""
CONTRACT 2: Indicator Results

Input: bar arrays (see services/indicators)
Output: one result model per indicator

Every model is immutable. A calculator that lacks data returns None instead
of one of these, so a missing field always means "insufficient data".
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


# =============================================================================
# ENUMS
# =============================================================================


class SignalStrength(str, Enum):
    """Signal strength levels, totally ordered by ``rank``."""

    WEAK = "weak"
    MODERATE = "moderate"
    STRONG = "strong"
    VERY_STRONG = "very_strong"

    @property
    def rank(self) -> int:
        return _STRENGTH_RANK[self]


_STRENGTH_RANK = {
    SignalStrength.WEAK: 1,
    SignalStrength.MODERATE: 2,
    SignalStrength.STRONG: 3,
    SignalStrength.VERY_STRONG: 4,
}


class Direction(str, Enum):
    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


class TrendLabel(str, Enum):
    STRONG_UPTREND = "strong_uptrend"
    UPTREND = "uptrend"
    SIDEWAYS = "sideways"
    DOWNTREND = "downtrend"
    STRONG_DOWNTREND = "strong_downtrend"
    UNKNOWN = "unknown"

    @property
    def is_up(self) -> bool:
        return self in (TrendLabel.UPTREND, TrendLabel.STRONG_UPTREND)

    @property
    def is_down(self) -> bool:
        return self in (TrendLabel.DOWNTREND, TrendLabel.STRONG_DOWNTREND)


class OscillatorZone(str, Enum):
    OVERBOUGHT = "overbought"
    OVERSOLD = "oversold"
    NEUTRAL = "neutral"


class MfiSignal(str, Enum):
    OVERBOUGHT = "overbought"
    OVERSOLD = "oversold"
    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


class CmfSignal(str, Enum):
    STRONG_BUY = "strong_buy"
    BUY = "buy"
    NEUTRAL = "neutral"
    SELL = "sell"
    STRONG_SELL = "strong_sell"


class ObvTrend(str, Enum):
    STRONG_BULLISH = "strong_bullish"
    BULLISH = "bullish"
    NEUTRAL = "neutral"
    BEARISH = "bearish"
    STRONG_BEARISH = "strong_bearish"
    UNKNOWN = "unknown"


class VolumeLevel(str, Enum):
    EXTREME = "extreme"
    HIGH = "high"
    MODERATE = "moderate"
    NORMAL = "normal"


class ValueAreaPosition(str, Enum):
    ABOVE_VALUE_AREA = "above_value_area"
    BELOW_VALUE_AREA = "below_value_area"
    AT_POC = "at_poc"
    IN_VALUE_AREA = "in_value_area"


class FibLevelType(str, Enum):
    RETRACEMENT = "retracement"
    EXTENSION = "extension"


class HeikinAshiTrendLabel(str, Enum):
    STRONG_UPTREND = "strong_uptrend"
    UPTREND = "uptrend"
    CONSOLIDATION = "consolidation"
    DOWNTREND = "downtrend"
    STRONG_DOWNTREND = "strong_downtrend"


class CandleColor(str, Enum):
    GREEN = "green"
    RED = "red"


class CloudPosition(str, Enum):
    ABOVE_CLOUD = "above_cloud"
    IN_CLOUD = "in_cloud"
    BELOW_CLOUD = "below_cloud"


class IchimokuSignal(str, Enum):
    STRONG_BULLISH = "strong_bullish"
    BULLISH = "bullish"
    NEUTRAL = "neutral"
    BEARISH = "bearish"
    STRONG_BEARISH = "strong_bearish"


class _Result(BaseModel):
    """Base for immutable indicator results."""

    class Config:
        frozen = True


# =============================================================================
# OSCILLATORS
# =============================================================================


class MovingAverages(_Result):
    """Simple and exponential moving averages of closes."""

    sma20: Optional[float] = None
    sma50: Optional[float] = None
    sma200: Optional[float] = None
    ema9: Optional[float] = None
    ema21: Optional[float] = None


class MacdResult(_Result):
    """MACD indicator values."""

    macd: float
    signal: float
    histogram: float


class StochasticResult(_Result):
    """Stochastic oscillator values."""

    k: float = Field(..., ge=0, le=100)
    d: float = Field(..., ge=0, le=100)
    signal: OscillatorZone


class MfiResult(_Result):
    """Money Flow Index with its label."""

    value: float = Field(..., ge=0, le=100)
    signal: MfiSignal
    strength: SignalStrength
    money_flow_ratio: Optional[float] = Field(
        default=None, description="Absent when there was no negative flow"
    )


class CmfResult(_Result):
    """Chaikin Money Flow with its label."""

    value: float = Field(..., description="Between -1 (distribution) and 1 (accumulation)")
    signal: CmfSignal
    strength: SignalStrength
    description: str


# =============================================================================
# VOLATILITY / TREND STRENGTH
# =============================================================================


class BollingerResult(_Result):
    """Bollinger Bands values."""

    upper: float
    middle: float
    lower: float
    bandwidth: float = Field(..., ge=0, description="Band width as % of middle")


class AdxResult(_Result):
    """Average Directional Index with directional indicators."""

    adx: float = Field(..., ge=0, le=100)
    plus_di: float = Field(..., ge=0)
    minus_di: float = Field(..., ge=0)
    strength: SignalStrength
    trending: bool


# =============================================================================
# VOLUME STRUCTURE
# =============================================================================


class ObvResult(_Result):
    """On-Balance Volume running total and trend label."""

    current: float
    values: list[float]
    trend: ObvTrend


class DivergenceResult(_Result):
    """Price/indicator divergence over a fixed window."""

    type: Direction
    strength: SignalStrength
    signal: str
    confidence: int = Field(..., ge=1, le=10)


class VolumeProfileLevel(_Result):
    """Single bucket in the volume profile."""

    price: float
    volume: float = Field(..., ge=0)
    is_poc: bool = Field(..., description="Is Point of Control")
    is_value_area: bool


class VolumeProfileResult(_Result):
    """Volume-at-price histogram summary."""

    poc: float
    vah: float
    val: float
    position: ValueAreaPosition
    lookback: int
    distribution: list[VolumeProfileLevel]

    @property
    def total_volume(self) -> float:
        return sum(level.volume for level in self.distribution)


class VolumeAnalysis(_Result):
    """Current volume relative to its average."""

    unusual: bool
    level: VolumeLevel
    ratio: float = Field(..., ge=0)


# =============================================================================
# PRICE STRUCTURE
# =============================================================================


class SupportResistance(_Result):
    """Clustered support and resistance levels (ascending)."""

    support: list[float] = Field(default_factory=list)
    resistance: list[float] = Field(default_factory=list)


class FibonacciLevels(_Result):
    """Retracement and extension table for the recent swing."""

    swing_high: float
    swing_low: float
    range: float = Field(..., gt=0)
    retracements: dict[str, float]
    extensions: dict[str, float]
    lookback: int


class FibLevelMatch(_Result):
    """Fibonacci level closest to the current price."""

    level: str
    price: float
    distance: float = Field(..., ge=0, description="Distance in percent of price")
    type: FibLevelType


# =============================================================================
# PATTERNS
# =============================================================================


class CandlestickPattern(_Result):
    """Single matched candlestick pattern."""

    pattern: str
    signal: Direction
    strength: SignalStrength


class CandlestickAnalysis(_Result):
    """All matched patterns, strongest first."""

    primary: CandlestickPattern
    patterns: list[CandlestickPattern]
    count: int


class HeikinAshiCandle(_Result):
    """Synthetic Heikin-Ashi candle."""

    timestamp: Optional[datetime] = None
    open: float
    high: float
    low: float
    close: float
    volume: Optional[float] = None
    is_bullish: bool
    body: float
    upper_wick: float
    lower_wick: float


class HeikinAshiReversal(_Result):
    type: Direction
    signal: str
    confidence: int


class HeikinAshiSignals(_Result):
    strong_trend: bool
    trend_continuation: bool
    indecision: bool
    possible_reversal: bool


class HeikinAshiTrend(_Result):
    """Trend and reversal read of recent Heikin-Ashi candles."""

    trend: HeikinAshiTrendLabel
    strength: SignalStrength
    confidence: int
    consecutive_bullish: int
    consecutive_bearish: int
    preceding_streak: int = Field(
        ..., description="Length of the opposite-colored run before the current one"
    )
    body_to_wick_ratio: Optional[float] = Field(
        default=None, description="Absent when the current candle has no wicks"
    )
    current_color: CandleColor
    reversal: Optional[HeikinAshiReversal] = None
    signals: HeikinAshiSignals


class RsiSwingPoint(_Result):
    price: float
    rsi: float


class RsiDivergence(_Result):
    """RSI divergence between the two most recent swing points."""

    type: Direction
    confidence: int = Field(..., ge=0, le=10)
    older: RsiSwingPoint
    newer: RsiSwingPoint
    price_diff_percent: float
    rsi_diff: float
    bars_ago: int
    current_rsi: float
    signal: str
    description: str


class DivergenceScanEntry(_Result):
    ticker: str
    price: Optional[float] = None
    divergence: RsiDivergence


class DivergenceScan(_Result):
    """RSI divergences across a watchlist, highest confidence first."""

    total: int
    bullish: int
    bearish: int
    divergences: list[DivergenceScanEntry]
    timestamp: datetime


class DivergenceSetup(_Result):
    ticker: str
    type: Direction
    confidence: int
    signal: str


class DivergenceSummary(_Result):
    total: int
    bullish: int
    bearish: int
    high_confidence: int = Field(..., description="Confidence >= 7")
    medium_confidence: int = Field(..., description="Confidence 5-6")
    recent: int = Field(..., description="Newer swing within the last 3 bars")
    top_setups: list[DivergenceSetup]


# =============================================================================
# ICHIMOKU
# =============================================================================


class IchimokuCloud(_Result):
    top: float
    bottom: float
    thickness: float = Field(..., ge=0)
    color: Direction
    thickness_percent: float


class IchimokuResult(_Result):
    """Ichimoku Kinko Hyo lines and derived signal."""

    tenkan_sen: float
    kijun_sen: float
    senkou_span_a: float
    senkou_span_b: float
    chikou_span: float
    cloud: IchimokuCloud
    price_position: CloudPosition
    tk_cross: Direction
    signal: IchimokuSignal
    confidence: int = Field(..., ge=1, le=10)
    signals: list[str]
