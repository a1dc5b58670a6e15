"""
Coin — A tradeable asset whose price history is resolved on first use.

Resolution order: local price cache, then the remote price source (the
fetched history is written back to the cache).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from coin_backtester.core.price_history import PriceHistory
from coin_backtester.exceptions import PriceHistoryLoadError, PriceSourceError
from coin_backtester.logging import get_logger

if TYPE_CHECKING:
    from coin_backtester.data.price_cache import PriceCache
    from coin_backtester.data.price_source import CcxtPriceSource

logger = get_logger(__name__)


@dataclass
class Coin:
    """Asset identified by ``symbol`` (e.g. "BTC")."""

    name: str
    symbol: str
    _price_history: PriceHistory | None = field(
        default=None, init=False, repr=False, compare=False,
    )

    def get_price_history(
        self,
        cache: PriceCache | None = None,
        source: CcxtPriceSource | None = None,
    ) -> PriceHistory:
        """Return the memoized price history, loading or fetching it once."""
        if self._price_history is not None:
            return self._price_history

        from coin_backtester.data.price_cache import PriceCache
        from coin_backtester.data.price_source import CcxtPriceSource

        cache = cache or PriceCache()

        if cache.exists(self.symbol):
            self._price_history = cache.load(self.symbol)
            return self._price_history

        logger.info("No cached price history, fetching", symbol=self.symbol)
        source = source or CcxtPriceSource()
        prices = source.get_historical_prices(self.symbol)
        if not prices:
            raise PriceSourceError(f"Price source returned no prices for {self.symbol}")

        self._price_history = PriceHistory(prices)
        try:
            cache.append(self.symbol, self._price_history.prices)
        except OSError as e:
            raise PriceHistoryLoadError(
                f"Could not store price history for {self.symbol} in {cache.data_dir}: {e}"
            ) from e
        return self._price_history

    def set_price_history(self, price_history: PriceHistory) -> None:
        """Pin an in-memory price history, bypassing the cache and source."""
        self._price_history = price_history


COINS: dict[str, Coin] = {
    "BITCOIN": Coin(name="Bitcoin", symbol="BTC"),
    "ETHEREUM": Coin(name="Ethereum", symbol="ETH"),
}
