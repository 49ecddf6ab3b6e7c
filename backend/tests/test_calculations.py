"""
Unit tests for the smoothing primitives, oscillators and volatility measures.
"""

import numpy as np
import pytest

from technicals.schemas.indicators import MfiSignal, OscillatorZone, SignalStrength
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


def money_flow_bars(positive: float, negative: float) -> tuple:
    """
    15 bars whose 14 typical-price moves alternate up/down, with volumes
    chosen so the up moves carry ``positive`` and the down moves
    ``negative`` raw money flow in total.
    """
    closes = np.array([101.0 if i % 2 else 100.0 for i in range(15)])
    volumes = np.ones(15)
    for i in range(1, 15):
        share = positive if i % 2 else negative
        volumes[i] = share / 7 / closes[i]
    return closes, closes, closes, volumes


class TestSmoothing:
    """SMA, EMA and Wilder smoothing."""

    @pytest.mark.unit
    def test_sma_uses_trailing_window(self):
        assert sma([1, 2, 3, 4, 5], 3) == pytest.approx(4.0)

    @pytest.mark.unit
    def test_sma_short_series_is_absent(self):
        assert sma([1, 2], 3) is None

    @pytest.mark.unit
    def test_ema_of_identical_values_is_that_value(self):
        assert ema([5.0] * 10, 10) == pytest.approx(5.0)

    @pytest.mark.unit
    def test_ema_seeds_with_sma_then_recurses(self):
        # seed mean(1, 2, 3) = 2, k = 0.5 -> 4 * 0.5 + 2 * 0.5
        assert ema([1, 2, 3], 3) == pytest.approx(2.0)
        assert ema([1, 2, 3, 4], 3) == pytest.approx(3.0)

    @pytest.mark.unit
    def test_ema_short_series_is_absent(self):
        assert ema([1.0] * 8, 9) is None

    @pytest.mark.unit
    def test_wilder_smooth_constant(self):
        assert wilder_smooth([2.0] * 5, 3) == pytest.approx(2.0)

    @pytest.mark.unit
    def test_wilder_smooth_short_series_is_absent(self):
        assert wilder_smooth([1.0, 2.0], 3) is None


class TestMomentum:
    """RSI, MFI, Stochastic, MACD."""

    @pytest.mark.unit
    def test_rsi_all_gains_is_100(self):
        assert rsi([100 + i for i in range(30)]) == 100.0

    @pytest.mark.unit
    def test_rsi_all_losses_is_0(self):
        assert rsi([100 - i for i in range(30)]) == pytest.approx(0.0)

    @pytest.mark.unit
    def test_rsi_needs_period_plus_one(self):
        assert rsi([100 + i for i in range(14)]) is None
        assert rsi([100 + i for i in range(15)]) is not None

    @pytest.mark.unit
    def test_rsi_bounded(self, random_walk_bars, arrays):
        _, _, _, closes, _ = arrays(random_walk_bars)
        value = rsi(closes)
        assert 0 <= value <= 100

    @pytest.mark.unit
    def test_rsi_constant_series_is_100(self):
        assert rsi([50.0] * 30) == 100.0

    @pytest.mark.unit
    def test_mfi_after_rally_then_selloff_is_oversold(self):
        rng = np.random.default_rng(7)
        closes = np.array([100.0 + i for i in range(15)] + [114.0 - i for i in range(1, 16)])
        volumes = rng.integers(100_000, 2_000_000, len(closes)).astype(float)

        result = mfi(closes + 0.5, closes - 0.5, closes, volumes)

        assert result.value == 0.0
        assert result.money_flow_ratio == 0.0
        assert result.signal == MfiSignal.OVERSOLD
        assert result.strength == SignalStrength.VERY_STRONG

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "positive,signal,strength",
        [
            (95, MfiSignal.OVERBOUGHT, SignalStrength.VERY_STRONG),
            (91, MfiSignal.OVERBOUGHT, SignalStrength.VERY_STRONG),
            (89, MfiSignal.OVERBOUGHT, SignalStrength.STRONG),
            (70, MfiSignal.BULLISH, SignalStrength.MODERATE),
            (50, MfiSignal.NEUTRAL, SignalStrength.MODERATE),
            (30, MfiSignal.BEARISH, SignalStrength.MODERATE),
            (15, MfiSignal.OVERSOLD, SignalStrength.STRONG),
            (11, MfiSignal.OVERSOLD, SignalStrength.STRONG),
            (9, MfiSignal.OVERSOLD, SignalStrength.VERY_STRONG),
        ],
    )
    def test_mfi_bands(self, positive, signal, strength):
        # MFI = 100 * positive / (positive + negative)
        highs, lows, closes, volumes = money_flow_bars(positive, 100 - positive)
        result = mfi(highs, lows, closes, volumes)

        assert result.value == pytest.approx(positive)
        assert result.signal == signal
        assert result.strength == strength

    @pytest.mark.unit
    def test_mfi_without_negative_flow(self, rising_bars, arrays):
        _, highs, lows, closes, volumes = arrays(rising_bars)
        result = mfi(highs, lows, closes, volumes)

        assert result.value == 100.0
        assert result.money_flow_ratio is None
        assert result.signal == MfiSignal.OVERBOUGHT
        assert result.strength == SignalStrength.VERY_STRONG

    @pytest.mark.unit
    def test_mfi_short_series_is_absent(self, rising_bars, arrays):
        _, highs, lows, closes, volumes = arrays(rising_bars[:14])
        assert mfi(highs, lows, closes, volumes) is None

    @pytest.mark.unit
    def test_mfi_bounded(self, random_walk_bars, arrays):
        _, highs, lows, closes, volumes = arrays(random_walk_bars)
        result = mfi(highs, lows, closes, volumes)
        assert 0 <= result.value <= 100
        assert result.money_flow_ratio >= 0

    @pytest.mark.unit
    def test_stochastic_close_near_high(self):
        closes = np.arange(1.0, 21.0)
        result = stochastic(closes + 1, closes - 1, closes)

        # window of 14: highest high 21, lowest low 6
        assert result.k == pytest.approx(14 / 15 * 100)
        assert result.d == pytest.approx(14 / 15 * 100)
        assert result.signal == OscillatorZone.OVERBOUGHT

    @pytest.mark.unit
    def test_stochastic_flat_window_is_absent(self):
        flat = [50.0] * 20
        assert stochastic(flat, flat, flat) is None

    @pytest.mark.unit
    def test_stochastic_short_series_is_absent(self):
        values = [1.0, 2.0, 3.0]
        assert stochastic(values, values, values) is None

    @pytest.mark.unit
    def test_macd_needs_slow_plus_signal(self):
        assert macd([100.0 + i for i in range(34)]) is None
        assert macd([100.0 + i for i in range(35)]) is not None

    @pytest.mark.unit
    def test_macd_constant_series_is_zero(self):
        result = macd([50.0] * 60)
        assert result.macd == pytest.approx(0.0)
        assert result.signal == pytest.approx(0.0)
        assert result.histogram == pytest.approx(0.0)

    @pytest.mark.unit
    def test_macd_positive_in_uptrend(self):
        result = macd([100.0 + i for i in range(60)])
        assert result.macd > 0
        assert result.histogram == pytest.approx(result.macd - result.signal)


class TestVolatility:
    """True range, ATR, Bollinger Bands, ADX."""

    @pytest.mark.unit
    def test_true_range_length(self, rising_bars, arrays):
        _, highs, lows, closes, _ = arrays(rising_bars)
        assert len(true_range(highs, lows, closes)) == len(closes) - 1

    @pytest.mark.unit
    def test_true_range_includes_gaps(self):
        # gap up: |high - prev close| beats high - low
        tr = true_range([10.0, 15.0], [9.0, 14.0], [10.0, 14.5])
        assert tr[0] == pytest.approx(5.0)

    @pytest.mark.unit
    def test_atr_single_bar_is_absent(self):
        assert atr([10.0], [9.0], [9.5]) is None

    @pytest.mark.unit
    def test_atr_constant_range(self):
        closes = [100.0] * 20
        highs = [101.0] * 20
        lows = [99.0] * 20
        assert atr(highs, lows, closes) == pytest.approx(2.0)

    @pytest.mark.unit
    def test_bollinger_uses_population_std(self):
        closes = np.arange(1.0, 21.0)
        result = bollinger_bands(closes)
        std = np.std(closes)

        assert result.middle == pytest.approx(10.5)
        assert result.upper - result.middle == pytest.approx(2 * std)
        assert result.middle - result.lower == pytest.approx(2 * std)
        assert result.bandwidth == pytest.approx(4 * std / 10.5 * 100)

    @pytest.mark.unit
    def test_bollinger_short_series_is_absent(self):
        assert bollinger_bands([1.0] * 19) is None

    @pytest.mark.unit
    def test_adx_short_series_is_absent(self, rising_bars, arrays):
        _, highs, lows, closes, _ = arrays(rising_bars[:27])
        assert adx(highs, lows, closes) is None

    @pytest.mark.unit
    def test_adx_steady_uptrend(self, rising_bars, arrays):
        _, highs, lows, closes, _ = arrays(rising_bars)
        result = adx(highs, lows, closes)

        assert result.trending is True
        assert result.plus_di > result.minus_di
        assert result.minus_di == pytest.approx(0.0)
        assert result.adx == pytest.approx(100.0)
        assert result.strength == SignalStrength.VERY_STRONG

    @pytest.mark.unit
    def test_adx_flat_series_is_absent(self, flat_bars, arrays):
        _, highs, lows, closes, _ = arrays(flat_bars)
        assert adx(highs, lows, closes) is None
