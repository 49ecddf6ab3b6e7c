"""
Engine Configuration

All settings loaded from environment variables (or a local .env file).
"""

from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Engine settings from environment variables."""

    # Application
    app_name: str = "Technicals Engine"
    app_version: str = "0.1.0"
    environment: str = "development"
    log_level: str = "INFO"

    # Moving averages
    sma_short_period: int = 20
    sma_medium_period: int = 50
    sma_long_period: int = 200
    ema_fast_period: int = 9
    ema_slow_period: int = 21

    # Oscillators
    rsi_period: int = 14
    mfi_period: int = 14
    stochastic_k_period: int = 14
    stochastic_d_period: int = 3
    macd_fast_period: int = 12
    macd_slow_period: int = 26
    macd_signal_period: int = 9
    cmf_period: int = 21

    # Volatility / trend strength
    atr_period: int = 14
    adx_period: int = 14
    bollinger_period: int = 20
    bollinger_std_dev: float = 2.0

    # Volume structure
    volume_profile_lookback: int = 30
    volume_profile_buckets: int = 50
    volume_average_window: int = 20

    # Price structure
    fibonacci_lookback: int = 50
    support_resistance_tolerance: float = 0.02
    fibonacci_match_tolerance: float = 0.01

    # Patterns
    heikin_ashi_lookback: int = 10

    # Snapshot cache
    snapshot_cache_ttl_seconds: float = 60.0
    enable_redis_cache: bool = False
    redis_url: str = "redis://localhost:6379"
    redis_key_prefix: Optional[str] = "technicals"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
