"""
Technical Analysis Service Implementation

Computes TechnicalSnapshots for every symbol in a refresh cycle.
Pure Python/NumPy calculations; the optional cache is the only I/O.
"""

import logging
from typing import Optional

from technicals.core.config import Settings, get_settings
from technicals.schemas.market import BarSeries, MarketSnapshot
from technicals.schemas.snapshot import TechnicalSnapshot
from technicals.services.base import InsufficientDataError
from technicals.services.cache.snapshot_cache import SnapshotCache, connect_redis
from technicals.services.indicators.interface import TechnicalServiceInterface
from technicals.services.indicators.snapshot import compute_snapshot

logger = logging.getLogger(__name__)


class TechnicalService(TechnicalServiceInterface):
    """
    Technical Analysis Service.

    A symbol that cannot be analysed is logged and left out of the batch
    result; the rest of the batch still completes.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        cache: Optional[SnapshotCache] = None,
    ):
        self.settings = settings or get_settings()
        self.cache = cache

    async def execute(
        self, input_data: MarketSnapshot
    ) -> dict[str, TechnicalSnapshot]:
        """Compute snapshots for all symbols in the batch."""
        input_data = await self.validate_input(input_data)
        results = {}

        for series in input_data.symbols:
            try:
                results[series.symbol] = await self.analyze_series(series)
            except (InsufficientDataError, ValueError) as e:
                # Log error but continue with other symbols
                logger.error(f"Skipping {series.symbol}: {e}")

        logger.info(
            f"{self.name}: {len(results)}/{len(input_data.symbols)} snapshots computed"
        )
        return results

    async def analyze_series(self, series: BarSeries) -> TechnicalSnapshot:
        """Compute (or fetch from cache) the snapshot for one symbol."""
        if len(series.bars) < 2:
            raise InsufficientDataError(
                self.name,
                f"Insufficient data for {series.symbol}",
                {"bars": len(series.bars), "required": 2},
            )

        if self.cache is not None:
            cached = await self.cache.get(series.symbol)
            if (
                cached is not None
                and cached.timestamp == series.bars[-1].timestamp
                and cached.price == series.last_price
                and cached.bar_count == len(series.bars)
            ):
                logger.debug(f"Cache hit for {series.symbol}")
                return cached

        snapshot = compute_snapshot(
            series.bars,
            current_price=series.last_price,
            ticker=series.symbol,
            avg_volume=series.avg_volume,
            settings=self.settings,
        )

        if self.cache is not None:
            await self.cache.set(series.symbol, snapshot)
        return snapshot

    async def health_check(self) -> bool:
        return True


# Singleton instance
_technical_service: Optional[TechnicalService] = None


def get_technical_service() -> TechnicalService:
    """Get technical service singleton."""
    global _technical_service
    if _technical_service is None:
        _technical_service = TechnicalService()
    return _technical_service


async def create_cached_service(settings: Optional[Settings] = None) -> TechnicalService:
    """
    Build a service with a snapshot cache, backed by Redis when
    ``enable_redis_cache`` is set and the server answers.
    """
    cfg = settings or get_settings()
    client = await connect_redis(cfg.redis_url) if cfg.enable_redis_cache else None
    cache = SnapshotCache(
        ttl_seconds=cfg.snapshot_cache_ttl_seconds,
        redis_client=client,
        key_prefix=cfg.redis_key_prefix,
    )
    return TechnicalService(settings=cfg, cache=cache)
