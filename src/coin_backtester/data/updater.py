"""Fetch-and-append updates of stored price histories."""

from datetime import timedelta

from coin_backtester.core.coin import Coin
from coin_backtester.core.price_history import HistoricalPrice
from coin_backtester.data.price_cache import PriceCache
from coin_backtester.data.price_source import CcxtPriceSource
from coin_backtester.logging import get_logger

logger = get_logger(__name__)


def update_price_history(
    coin: Coin,
    cache: PriceCache | None = None,
    source: CcxtPriceSource | None = None,
) -> list[HistoricalPrice]:
    """
    Fetch prices newer than the stored history and append them.

    Without a stored history the full available history is fetched.

    Returns:
        The prices that were added
    """
    cache = cache or PriceCache()
    source = source or CcxtPriceSource()

    from_date = None
    if cache.exists(coin.symbol):
        from_date = cache.load(coin.symbol).end_date + timedelta(days=1)

    new_prices = source.get_historical_prices(coin.symbol, from_date=from_date)
    if new_prices:
        coin.set_price_history(cache.append(coin.symbol, new_prices))

    logger.info(
        "Price history updated",
        symbol=coin.symbol,
        added=len(new_prices),
        from_date=from_date.isoformat() if from_date else None,
    )
    return new_prices
