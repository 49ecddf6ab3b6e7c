"""
Compute a technical snapshot from a JSON file of bars.

The file holds either a list of OHLCV bars or a full BarSeries object.
Run with: python run_analysis.py bars.json --symbol AAPL
"""
import argparse
import asyncio
import json
import logging
import os
import sys
from typing import Optional

backend_dir = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, backend_dir)

# Load environment
from dotenv import load_dotenv
load_dotenv(os.path.join(backend_dir, ".env"))

from technicals.core.config import get_settings
from technicals.schemas.market import BarSeries
from technicals.services.base import ServiceError
from technicals.services.indicators.service import create_cached_service

logger = logging.getLogger("run_analysis")


def load_series(
    path: str,
    symbol: str,
    price: Optional[float] = None,
    avg_volume: Optional[float] = None,
) -> BarSeries:
    with open(path, encoding="utf-8") as f:
        payload = json.load(f)

    if isinstance(payload, list):
        payload = {"symbol": symbol, "bars": payload}
    if price is not None:
        payload["current_price"] = price
    if avg_volume is not None:
        payload["avg_volume"] = avg_volume
    payload.setdefault("symbol", symbol)
    return BarSeries.model_validate(payload)


async def main(args: argparse.Namespace) -> int:
    series = load_series(args.path, args.symbol, args.price, args.avg_volume)
    service = await create_cached_service(get_settings())

    try:
        snapshot = await service.analyze_series(series)
    except ServiceError as e:
        logger.error(str(e))
        return 1
    finally:
        if service.cache is not None:
            await service.cache.close()

    print(snapshot.model_dump_json(indent=2, exclude_none=args.compact))
    return 0


if __name__ == "__main__":
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    parser = argparse.ArgumentParser(description=settings.app_name)
    parser.add_argument("path", help="JSON file with bars (oldest first)")
    parser.add_argument("--symbol", default="UNKNOWN", help="Ticker to tag the snapshot with")
    parser.add_argument("--price", type=float, help="Live price (defaults to last close)")
    parser.add_argument("--avg-volume", type=float, help="Reference average volume")
    parser.add_argument(
        "--compact", action="store_true", help="Omit indicators with insufficient data"
    )

    sys.exit(asyncio.run(main(parser.parse_args())))
