"""
Unit tests for candlestick matchers and the Heikin-Ashi classifier.
"""

import pytest

from technicals.schemas.indicators import (
    CandleColor,
    Direction,
    HeikinAshiCandle,
    HeikinAshiTrendLabel,
    SignalStrength,
    TrendLabel,
)
from technicals.services.scanner import patterns
from technicals.services.scanner.patterns import (
    Candle,
    analyze_heikin_ashi_trend,
    candlestick_patterns,
    detect_doji,
    detect_engulfing,
    detect_piercing_dark_cloud,
    detect_shooting_star,
    detect_star,
    detect_three_soldiers_crows,
    heikin_ashi,
)


def ohlc(*candles: tuple) -> tuple[list, list, list, list]:
    """(open, high, low, close) tuples -> column lists."""
    return tuple(list(column) for column in zip(*candles))


def ha_candle(bullish: bool, body: float = 1.0, upper: float = 0.1, lower: float = 0.1):
    open_ = 100.0 if bullish else 100.0 + body
    close = open_ + body if bullish else open_ - body
    return HeikinAshiCandle(
        open=open_,
        high=max(open_, close) + upper,
        low=min(open_, close) - lower,
        close=close,
        is_bullish=bullish,
        body=body,
        upper_wick=upper,
        lower_wick=lower,
    )


class TestCandlestickPatterns:

    @pytest.mark.unit
    def test_bullish_engulfing_without_doji(self):
        opens, highs, lows, closes = ohlc(
            (105.0, 106.0, 99.0, 100.0),
            (99.5, 106.5, 99.0, 106.0),
        )
        result = candlestick_patterns(opens, highs, lows, closes, TrendLabel.DOWNTREND)

        assert result.count == 1
        assert result.primary.pattern == "Bullish Engulfing"
        assert result.primary.signal == Direction.BULLISH
        assert result.primary.strength == SignalStrength.STRONG
        assert all("Doji" not in p.pattern for p in result.patterns)

    @pytest.mark.unit
    def test_dragonfly_doji(self):
        pattern = detect_doji(Candle(open=100.0, high=100.1, low=98.0, close=100.05))
        assert pattern.pattern == "Dragonfly Doji"
        assert pattern.signal == Direction.BULLISH

    @pytest.mark.unit
    def test_zero_range_is_not_a_doji(self):
        assert detect_doji(Candle(open=100.0, high=100.0, low=100.0, close=100.0)) is None

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "trend,expected",
        [
            (TrendLabel.DOWNTREND, "Hammer"),
            (TrendLabel.STRONG_DOWNTREND, "Hammer"),
            (TrendLabel.UPTREND, "Hanging Man"),
        ],
    )
    def test_hammer_depends_on_trend(self, trend, expected):
        opens, highs, lows, closes = ohlc(
            (101.0, 101.2, 100.6, 100.8),
            (100.0, 100.6, 98.0, 100.5),
        )
        result = candlestick_patterns(opens, highs, lows, closes, trend)
        assert result.primary.pattern == expected

    @pytest.mark.unit
    def test_hammer_shape_without_trend_matches_nothing(self):
        opens, highs, lows, closes = ohlc(
            (101.0, 101.2, 100.6, 100.8),
            (100.0, 100.6, 98.0, 100.5),
        )
        assert candlestick_patterns(opens, highs, lows, closes, TrendLabel.SIDEWAYS) is None

    @pytest.mark.unit
    def test_strongest_pattern_is_primary(self):
        # morning star whose last two candles also form a bullish engulfing
        opens, highs, lows, closes = ohlc(
            (110.0, 111.0, 99.0, 100.0),
            (98.5, 99.0, 97.5, 98.0),
            (97.9, 107.5, 97.8, 107.0),
        )
        result = candlestick_patterns(opens, highs, lows, closes, TrendLabel.DOWNTREND)

        assert result.count == 2
        assert result.primary.pattern == "Morning Star"
        assert result.primary.strength == SignalStrength.VERY_STRONG
        assert [p.pattern for p in result.patterns] == ["Morning Star", "Bullish Engulfing"]

    @pytest.mark.unit
    def test_three_white_soldiers(self):
        opens, highs, lows, closes = ohlc(
            (100.0, 102.2, 99.8, 102.0),
            (102.0, 104.2, 101.8, 104.0),
            (104.0, 106.2, 103.8, 106.0),
        )
        result = candlestick_patterns(opens, highs, lows, closes, TrendLabel.UPTREND)
        assert result.primary.pattern == "Three White Soldiers"

    @pytest.mark.unit
    def test_single_bar_is_absent(self):
        assert candlestick_patterns([1.0], [1.0], [1.0], [1.0]) is None

    @pytest.mark.unit
    def test_soldier_body_threshold_is_tunable(self, monkeypatch):
        # bodies 1, 2, 3: the first is below 0.7 of the average body
        opens, highs, lows, closes = ohlc(
            (100.0, 101.1, 99.9, 101.0),
            (101.0, 103.1, 100.9, 103.0),
            (103.0, 106.1, 102.9, 106.0),
        )
        default = candlestick_patterns(opens, highs, lows, closes, TrendLabel.UPTREND)
        assert default is None or all(
            p.pattern != "Three White Soldiers" for p in default.patterns
        )

        monkeypatch.setattr(patterns, "SOLDIERS_MIN_BODY_RATIO", 0.4)
        relaxed = candlestick_patterns(opens, highs, lows, closes, TrendLabel.UPTREND)
        assert relaxed.primary.pattern == "Three White Soldiers"


class TestSingleDetectors:
    """Each matcher with one matching and one near-miss geometry."""

    @pytest.mark.unit
    def test_gravestone_doji(self):
        pattern = detect_doji(Candle(open=100.0, high=102.0, low=99.98, close=100.05))
        assert pattern.pattern == "Gravestone Doji"
        assert pattern.signal == Direction.BEARISH

    @pytest.mark.unit
    def test_gravestone_shape_with_wide_body_is_not_a_doji(self):
        assert detect_doji(Candle(open=100.0, high=102.0, low=99.98, close=100.5)) is None

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "trend,expected,signal",
        [
            (TrendLabel.UPTREND, "Shooting Star", Direction.BEARISH),
            (TrendLabel.STRONG_UPTREND, "Shooting Star", Direction.BEARISH),
            (TrendLabel.DOWNTREND, "Inverted Hammer", Direction.BULLISH),
        ],
    )
    def test_shooting_star_depends_on_trend(self, trend, expected, signal):
        candle = Candle(open=100.0, high=101.5, low=99.95, close=100.3)
        pattern = detect_shooting_star(candle, trend)

        assert pattern.pattern == expected
        assert pattern.signal == signal

    @pytest.mark.unit
    def test_shooting_star_shape_without_trend_is_absent(self):
        candle = Candle(open=100.0, high=101.5, low=99.95, close=100.3)
        assert detect_shooting_star(candle, TrendLabel.SIDEWAYS) is None

    @pytest.mark.unit
    def test_long_lower_wick_is_not_a_shooting_star(self):
        candle = Candle(open=100.0, high=101.5, low=99.6, close=100.3)
        assert detect_shooting_star(candle, TrendLabel.UPTREND) is None

    @pytest.mark.unit
    def test_bearish_engulfing(self):
        prev = Candle(open=100.0, high=102.2, low=99.8, close=102.0)
        curr = Candle(open=102.5, high=102.6, low=99.4, close=99.5)
        pattern = detect_engulfing(prev, curr)

        assert pattern.pattern == "Bearish Engulfing"
        assert pattern.signal == Direction.BEARISH

    @pytest.mark.unit
    def test_bearish_close_above_prior_open_does_not_engulf(self):
        prev = Candle(open=100.0, high=102.2, low=99.8, close=102.0)
        curr = Candle(open=103.0, high=103.1, low=100.4, close=100.5)
        assert detect_engulfing(prev, curr) is None

    @pytest.mark.unit
    def test_piercing_line(self):
        prev = Candle(open=105.0, high=105.5, low=99.5, close=100.0)
        curr = Candle(open=99.0, high=103.2, low=98.8, close=103.0)
        pattern = detect_piercing_dark_cloud(prev, curr)

        assert pattern.pattern == "Piercing Line"
        assert pattern.signal == Direction.BULLISH

    @pytest.mark.unit
    def test_recovery_short_of_midpoint_is_not_piercing(self):
        prev = Candle(open=105.0, high=105.5, low=99.5, close=100.0)
        curr = Candle(open=99.0, high=102.2, low=98.8, close=102.0)
        assert detect_piercing_dark_cloud(prev, curr) is None

    @pytest.mark.unit
    def test_dark_cloud_cover(self):
        prev = Candle(open=100.0, high=105.5, low=99.5, close=105.0)
        curr = Candle(open=106.0, high=106.2, low=101.8, close=102.0)
        pattern = detect_piercing_dark_cloud(prev, curr)

        assert pattern.pattern == "Dark Cloud Cover"
        assert pattern.signal == Direction.BEARISH

    @pytest.mark.unit
    def test_dark_cloud_needs_gap_above_prior_high(self):
        prev = Candle(open=100.0, high=105.5, low=99.5, close=105.0)
        curr = Candle(open=105.2, high=105.4, low=101.8, close=102.0)
        assert detect_piercing_dark_cloud(prev, curr) is None

    @pytest.mark.unit
    def test_evening_star(self):
        first = Candle(open=100.0, high=110.2, low=99.8, close=110.0)
        middle = Candle(open=111.0, high=112.0, low=110.5, close=111.5)
        last = Candle(open=110.0, high=110.2, low=102.8, close=103.0)
        pattern = detect_star(first, middle, last)

        assert pattern.pattern == "Evening Star"
        assert pattern.strength == SignalStrength.VERY_STRONG

    @pytest.mark.unit
    def test_evening_star_closing_above_midpoint_is_absent(self):
        first = Candle(open=100.0, high=110.2, low=99.8, close=110.0)
        middle = Candle(open=111.0, high=112.0, low=110.5, close=111.5)
        last = Candle(open=112.0, high=112.2, low=105.8, close=106.0)
        assert detect_star(first, middle, last) is None

    @pytest.mark.unit
    def test_three_black_crows(self):
        pattern = detect_three_soldiers_crows(
            Candle(open=106.0, high=106.2, low=103.8, close=104.0),
            Candle(open=104.0, high=104.2, low=101.8, close=102.0),
            Candle(open=102.0, high=102.2, low=99.8, close=100.0),
        )
        assert pattern.pattern == "Three Black Crows"
        assert pattern.signal == Direction.BEARISH

    @pytest.mark.unit
    def test_crows_need_falling_closes(self):
        pattern = detect_three_soldiers_crows(
            Candle(open=106.0, high=106.2, low=103.8, close=104.0),
            Candle(open=104.0, high=104.2, low=101.8, close=102.0),
            Candle(open=104.5, high=104.7, low=102.3, close=102.5),
        )
        assert pattern is None


class TestHeikinAshi:

    @pytest.mark.unit
    def test_transform(self):
        candles = heikin_ashi([10.0, 11.0], [12.0, 13.0], [9.0, 10.0], [11.0, 12.0])

        first, second = candles
        assert first.close == pytest.approx(10.5)
        assert first.open == pytest.approx(10.5)
        assert first.is_bullish is False

        assert second.close == pytest.approx(11.5)
        assert second.open == pytest.approx(10.5)
        assert second.high == pytest.approx(13.0)
        assert second.low == pytest.approx(10.0)
        assert second.is_bullish is True
        assert second.upper_wick == pytest.approx(1.5)
        assert second.lower_wick == pytest.approx(0.5)

    @pytest.mark.unit
    def test_transform_needs_two_bars(self):
        assert heikin_ashi([1.0], [1.0], [1.0], [1.0]) is None

    @pytest.mark.unit
    def test_strong_uptrend_streak(self):
        result = analyze_heikin_ashi_trend([ha_candle(True) for _ in range(10)])

        assert result.trend == HeikinAshiTrendLabel.STRONG_UPTREND
        assert result.strength == SignalStrength.VERY_STRONG
        assert result.confidence == 9
        assert result.consecutive_bullish == 10
        assert result.consecutive_bearish == 0
        assert result.current_color == CandleColor.GREEN
        assert result.signals.strong_trend is True
        assert result.reversal is None

    @pytest.mark.unit
    def test_clean_downtrend_is_strong(self):
        candles = [ha_candle(True)] * 7 + [ha_candle(False, upper=0.1)] * 3
        result = analyze_heikin_ashi_trend(candles)

        assert result.trend == HeikinAshiTrendLabel.DOWNTREND
        assert result.strength == SignalStrength.STRONG
        assert result.confidence == 8
        assert result.consecutive_bearish == 3
        assert result.preceding_streak == 7

    @pytest.mark.unit
    def test_bullish_reversal_after_red_streak(self):
        candles = (
            [ha_candle(True)] * 3
            + [ha_candle(False)] * 6
            + [ha_candle(True, body=1.0, lower=0.8)]
        )
        result = analyze_heikin_ashi_trend(candles)

        assert result.trend == HeikinAshiTrendLabel.CONSOLIDATION
        assert result.consecutive_bullish == 1
        assert result.preceding_streak == 6
        assert result.reversal.type == Direction.BULLISH
        assert result.reversal.confidence == 9
        assert result.signals.possible_reversal is True
        assert result.signals.indecision is False

    @pytest.mark.unit
    def test_no_reversal_with_small_trailing_wick(self):
        candles = [ha_candle(False)] * 9 + [ha_candle(True, lower=0.1)]
        result = analyze_heikin_ashi_trend(candles)
        assert result.reversal is None

    @pytest.mark.unit
    def test_bearish_reversal_after_green_streak(self):
        candles = (
            [ha_candle(False)]
            + [ha_candle(True)] * 8
            + [ha_candle(False, body=1.0, upper=0.8)]
        )
        result = analyze_heikin_ashi_trend(candles)

        assert result.current_color == CandleColor.RED
        assert result.consecutive_bearish == 1
        assert result.preceding_streak == 8
        assert result.reversal.type == Direction.BEARISH
        assert result.reversal.confidence == 9

    @pytest.mark.unit
    def test_no_bearish_reversal_after_single_green_candle(self):
        candles = (
            [ha_candle(False)] * 8
            + [ha_candle(True)]
            + [ha_candle(False, body=1.0, upper=0.8)]
        )
        result = analyze_heikin_ashi_trend(candles)

        assert result.preceding_streak == 1
        assert result.reversal is None

    @pytest.mark.unit
    def test_body_to_wick_ratio_absent_without_wicks(self):
        candles = [ha_candle(True, upper=0.0, lower=0.0)] * 10
        result = analyze_heikin_ashi_trend(candles)
        assert result.body_to_wick_ratio is None

    @pytest.mark.unit
    def test_needs_lookback_candles(self):
        assert analyze_heikin_ashi_trend([ha_candle(True)] * 9) is None
