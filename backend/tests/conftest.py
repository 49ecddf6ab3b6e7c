"""
Shared fixtures for the technicals test suite.
"""

from datetime import datetime, timedelta
from typing import Callable, Optional, Sequence

import numpy as np
import pytest

from technicals.schemas.market import OHLCV, BarSeries

START = datetime(2024, 1, 1)


def build_bars(
    closes: Sequence[float],
    volumes: Optional[Sequence[int]] = None,
    opens: Optional[Sequence[float]] = None,
    highs: Optional[Sequence[float]] = None,
    lows: Optional[Sequence[float]] = None,
) -> list[OHLCV]:
    """Daily bars; open/high/low default to the close."""
    n = len(closes)
    volumes = volumes if volumes is not None else [1_000_000] * n
    opens = opens if opens is not None else closes
    highs = highs if highs is not None else closes
    lows = lows if lows is not None else closes
    return [
        OHLCV(
            timestamp=START + timedelta(days=i),
            open=float(opens[i]),
            high=float(highs[i]),
            low=float(lows[i]),
            close=float(closes[i]),
            volume=int(volumes[i]),
        )
        for i in range(n)
    ]


@pytest.fixture
def make_bars() -> Callable[..., list[OHLCV]]:
    return build_bars


@pytest.fixture
def rising_bars() -> list[OHLCV]:
    """
    60 bars closing 100, 101, ... 159.

    open = close - 0.5, high = close + 0.5, low = close - 1.
    Volume is flat at 1M except the last bar at 3M.
    """
    closes = [100.0 + i for i in range(60)]
    volumes = [1_000_000] * 59 + [3_000_000]
    return build_bars(
        closes,
        volumes=volumes,
        opens=[c - 0.5 for c in closes],
        highs=[c + 0.5 for c in closes],
        lows=[c - 1.0 for c in closes],
    )


@pytest.fixture
def flat_bars() -> list[OHLCV]:
    """60 bars with every price at 100."""
    return build_bars([100.0] * 60)


@pytest.fixture
def random_walk_bars() -> list[OHLCV]:
    """Seeded random walk with realistic intrabar ranges."""
    rng = np.random.default_rng(42)
    n = 120
    closes = [100.0]
    for ret in rng.normal(0.001, 0.02, n - 1):
        closes.append(closes[-1] * (1 + ret))

    opens = [closes[0]] + closes[:-1]
    highs = [max(o, c) * (1 + abs(rng.normal(0, 0.005))) for o, c in zip(opens, closes)]
    lows = [min(o, c) * (1 - abs(rng.normal(0, 0.005))) for o, c in zip(opens, closes)]
    volumes = [int(max(100_000, v)) for v in rng.normal(1_000_000, 200_000, n)]
    return build_bars(closes, volumes=volumes, opens=opens, highs=highs, lows=lows)


@pytest.fixture
def arrays() -> Callable[[Sequence[OHLCV]], tuple]:
    """Split bars into (opens, highs, lows, closes, volumes) arrays."""

    def split(bars: Sequence[OHLCV]) -> tuple:
        return (
            np.array([b.open for b in bars]),
            np.array([b.high for b in bars]),
            np.array([b.low for b in bars]),
            np.array([b.close for b in bars]),
            np.array([b.volume for b in bars], dtype=float),
        )

    return split


@pytest.fixture
def series_factory() -> Callable[..., BarSeries]:
    def make(symbol: str, bars: list[OHLCV], **kwargs) -> BarSeries:
        return BarSeries(symbol=symbol, bars=bars, **kwargs)

    return make
