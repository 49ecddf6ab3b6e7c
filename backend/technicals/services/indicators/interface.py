"""
Technical Analysis Service Interface

Defines the contract for the batch snapshot layer.
"""

from abc import abstractmethod

from technicals.services.base import BaseService
from technicals.schemas.market import BarSeries, MarketSnapshot
from technicals.schemas.snapshot import TechnicalSnapshot


class TechnicalServiceInterface(BaseService[MarketSnapshot, dict[str, TechnicalSnapshot]]):
    """
    Technical Analysis Service Contract.

    INPUT: MarketSnapshot
        - symbols: List of BarSeries with OHLCV bars

    OUTPUT: dict[str, TechnicalSnapshot]
        - Key: symbol name
        - Value: Complete technical snapshot for that symbol
    """

    @property
    def name(self) -> str:
        return "TechnicalService"

    @abstractmethod
    async def execute(
        self, input_data: MarketSnapshot
    ) -> dict[str, TechnicalSnapshot]:
        """Compute snapshots for all symbols in the batch."""
        pass

    @abstractmethod
    async def analyze_series(self, series: BarSeries) -> TechnicalSnapshot:
        """
        Compute the snapshot for a single symbol.

        Args:
            series: Bars for the symbol, oldest first

        Returns:
            Complete technical snapshot

        Raises:
            InsufficientDataError: fewer than 2 bars
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Technical service is always healthy (pure computation)."""
        pass
