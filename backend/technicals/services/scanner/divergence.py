"""
RSI Divergence Scanner

Compares the two most recent price swings with the RSI readings at those
swings, for one ticker or across a whole watchlist.
"""

import logging
import math
from datetime import datetime
from typing import Mapping, Optional

from technicals.schemas.indicators import (
    Direction,
    DivergenceScan,
    DivergenceScanEntry,
    DivergenceSetup,
    DivergenceSummary,
    RsiDivergence,
    RsiSwingPoint,
)
from technicals.schemas.market import BarSeries
from technicals.services.indicators.calculations import ArrayLike, rsi, to_array

logger = logging.getLogger(__name__)

MIN_CLOSES = 30
RSI_PERIOD = 14
SWING_LOOKBACK = 20
HIGH_CONFIDENCE = 7
MEDIUM_CONFIDENCE = 5
RECENT_BARS = 3
TOP_SETUPS = 5


def _swings(points: list[tuple[float, float]]) -> tuple[list[int], list[int]]:
    """Indexes of strict 5-bar price lows and highs."""
    lows, highs = [], []
    for i in range(2, len(points) - 2):
        price = points[i][0]
        neighbours = [points[j][0] for j in (i - 2, i - 1, i + 1, i + 2)]
        if all(price < p for p in neighbours):
            lows.append(i)
        if all(price > p for p in neighbours):
            highs.append(i)
    return lows, highs


def divergence_confidence(price_diff_percent: float, rsi_diff: float) -> int:
    """Price move plus twice the RSI gap, capped at 10 and rounded half up."""
    return math.floor(min(10, abs(price_diff_percent) + rsi_diff * 2) + 0.5)


def _build(
    direction: Direction,
    points: list[tuple[float, float]],
    older: int,
    newer: int,
) -> RsiDivergence:
    old_price, old_rsi = points[older]
    new_price, new_rsi = points[newer]
    price_diff = (new_price - old_price) / old_price * 100
    rsi_diff = abs(new_rsi - old_rsi)
    confidence = divergence_confidence(price_diff, rsi_diff)
    bars_ago = len(points) - 1 - newer

    if direction == Direction.BULLISH:
        signal = "BULLISH REVERSAL LIKELY - Price weakness not confirmed by momentum"
        description = (
            f"Price made lower low ({old_price:.2f} -> {new_price:.2f}) "
            f"but RSI made higher low ({old_rsi:.1f} -> {new_rsi:.1f}). "
            f"{bars_ago} period(s) ago."
        )
    else:
        signal = "BEARISH REVERSAL LIKELY - Price strength not confirmed by momentum"
        description = (
            f"Price made higher high ({old_price:.2f} -> {new_price:.2f}) "
            f"but RSI made lower high ({old_rsi:.1f} -> {new_rsi:.1f}). "
            f"{bars_ago} period(s) ago."
        )

    return RsiDivergence(
        type=direction,
        confidence=confidence,
        older=RsiSwingPoint(price=old_price, rsi=old_rsi),
        newer=RsiSwingPoint(price=new_price, rsi=new_rsi),
        price_diff_percent=price_diff,
        rsi_diff=rsi_diff,
        bars_ago=bars_ago,
        current_rsi=points[-1][1],
        signal=signal,
        description=description,
    )


def detect_rsi_divergence(closes: ArrayLike) -> Optional[RsiDivergence]:
    """
    Detect a regular RSI divergence over the last 20 bars.

    Bullish: the newer swing low is lower in price but higher in RSI.
    Bearish: the newer swing high is higher in price but lower in RSI.
    When both are present the more confident one wins (bearish on a tie).
    """
    closes = to_array(closes)
    if len(closes) < MIN_CLOSES:
        return None

    points = []
    for i in range(RSI_PERIOD, len(closes)):
        value = rsi(closes[i - RSI_PERIOD : i + 1], RSI_PERIOD)
        points.append((float(closes[i]), value))

    if len(points) < SWING_LOOKBACK:
        return None

    recent = points[-SWING_LOOKBACK:]
    lows, highs = _swings(recent)

    bullish = None
    if len(lows) >= 2:
        older, newer = lows[-2:]
        if recent[newer][0] < recent[older][0] and recent[newer][1] > recent[older][1]:
            bullish = _build(Direction.BULLISH, recent, older, newer)

    bearish = None
    if len(highs) >= 2:
        older, newer = highs[-2:]
        if recent[newer][0] > recent[older][0] and recent[newer][1] < recent[older][1]:
            bearish = _build(Direction.BEARISH, recent, older, newer)

    if bullish and bearish:
        return bullish if bullish.confidence > bearish.confidence else bearish
    return bullish or bearish


def scan_divergences(series_by_ticker: Mapping[str, BarSeries]) -> DivergenceScan:
    """Run the RSI divergence detector over every ticker with enough history."""
    entries = []
    for ticker, series in series_by_ticker.items():
        if series is None or len(series.bars) < MIN_CLOSES:
            logger.debug(f"Skipping {ticker}: not enough bars for divergence scan")
            continue

        divergence = detect_rsi_divergence([bar.close for bar in series.bars])
        if divergence:
            entries.append(
                DivergenceScanEntry(
                    ticker=ticker,
                    price=series.last_price,
                    divergence=divergence,
                )
            )

    entries.sort(key=lambda e: e.divergence.confidence, reverse=True)
    bullish = sum(1 for e in entries if e.divergence.type == Direction.BULLISH)

    logger.info(
        f"Divergence scan: {len(entries)} found across {len(series_by_ticker)} tickers"
    )
    return DivergenceScan(
        total=len(entries),
        bullish=bullish,
        bearish=len(entries) - bullish,
        divergences=entries,
        timestamp=datetime.now(),
    )


def divergence_summary(scan: DivergenceScan) -> DivergenceSummary:
    confidences = [e.divergence.confidence for e in scan.divergences]
    return DivergenceSummary(
        total=len(scan.divergences),
        bullish=scan.bullish,
        bearish=scan.bearish,
        high_confidence=sum(1 for c in confidences if c >= HIGH_CONFIDENCE),
        medium_confidence=sum(
            1 for c in confidences if MEDIUM_CONFIDENCE <= c < HIGH_CONFIDENCE
        ),
        recent=sum(1 for e in scan.divergences if e.divergence.bars_ago <= RECENT_BARS),
        top_setups=[
            DivergenceSetup(
                ticker=e.ticker,
                type=e.divergence.type,
                confidence=e.divergence.confidence,
                signal=e.divergence.signal,
            )
            for e in scan.divergences[:TOP_SETUPS]
        ],
    )
