"""
CONTRACT 1: Bar Series Input

Input: whatever the data-fetch collaborator supplies
Output: BarSeries / MarketSnapshot

The engine never fetches data. These models describe the bars it is handed:
an ordered, append-only sequence of OHLCV observations per ticker.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


# =============================================================================
# ENUMS
# =============================================================================


class Timeframe(str, Enum):
    M1 = "1m"
    M5 = "5m"
    M15 = "15m"
    M30 = "30m"
    H1 = "1h"
    H4 = "4h"
    D1 = "1d"
    W1 = "1w"


# =============================================================================
# BARS
# =============================================================================


class OHLCV(BaseModel):
    """Single candlestick data point."""

    timestamp: datetime
    open: float = Field(..., gt=0)
    high: float = Field(..., gt=0)
    low: float = Field(..., gt=0)
    close: float = Field(..., gt=0)
    volume: int = Field(..., ge=0)


class BarSeries(BaseModel):
    """Ordered bars for a single ticker (oldest first)."""

    symbol: str
    timeframe: Timeframe = Timeframe.D1
    bars: list[OHLCV]
    current_price: Optional[float] = Field(
        default=None,
        gt=0,
        description="Live price; falls back to the last close when omitted",
    )
    avg_volume: Optional[float] = Field(
        default=None,
        ge=0,
        description="Reference average volume for unusual-volume detection",
    )

    @property
    def last_price(self) -> float:
        if self.current_price is not None:
            return self.current_price
        return self.bars[-1].close


class MarketSnapshot(BaseModel):
    """
    Bars for every ticker in one refresh cycle.
    Supplied by: data-fetch collaborator
    Consumed by: TechnicalService
    """

    timestamp: datetime
    symbols: list[BarSeries]

    class Config:
        json_schema_extra = {
            "example": {
                "timestamp": "2024-02-04T10:30:00+05:30",
                "symbols": [
                    {
                        "symbol": "AAPL",
                        "timeframe": "1d",
                        "bars": [
                            {
                                "timestamp": "2024-02-02T00:00:00",
                                "open": 186.1,
                                "high": 187.3,
                                "low": 185.2,
                                "close": 185.9,
                                "volume": 54100000,
                            }
                        ],
                        "current_price": 186.4,
                    }
                ],
            }
        }
