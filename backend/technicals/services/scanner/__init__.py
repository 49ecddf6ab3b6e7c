"""
Pattern Scanner

Candlestick and Heikin-Ashi pattern detection, and RSI divergence scanning
across a watchlist.
"""

from technicals.services.scanner.patterns import (
    analyze_heikin_ashi_trend,
    candlestick_patterns,
    heikin_ashi,
)
from technicals.services.scanner.divergence import (
    detect_rsi_divergence,
    divergence_summary,
    scan_divergences,
)

__all__ = [
    "analyze_heikin_ashi_trend",
    "candlestick_patterns",
    "heikin_ashi",
    "detect_rsi_divergence",
    "divergence_summary",
    "scan_divergences",
]
