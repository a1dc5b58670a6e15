"""
CcxtPriceSource — Daily closing prices from a ccxt exchange.

Only closed candles are returned: the candle for the current UTC day is still
open and is skipped.
"""

from datetime import date, datetime, time, timezone
from typing import Any

import ccxt
from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from coin_backtester.config import settings
from coin_backtester.core.price_history import HistoricalPrice, to_utc_date
from coin_backtester.exceptions import PriceSourceError
from coin_backtester.logging import get_logger

logger = get_logger(__name__)

TIMEFRAME = "1d"
DAY_MS = 24 * 60 * 60 * 1000
EARLIEST_DATE = date(2010, 1, 1)


def _log_retry(retry_state: RetryCallState) -> None:
    logger.warning(
        "Price source request failed, retrying",
        attempt=retry_state.attempt_number,
        error=str(retry_state.outcome.exception()) if retry_state.outcome else None,
    )


def _to_millis(day: date) -> int:
    return int(datetime.combine(day, time(), tzinfo=timezone.utc).timestamp() * 1000)


def _to_date(timestamp_ms: int) -> date:
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc).date()


class CcxtPriceSource:
    """
    Fetches daily closes for ``{symbol}/{quote_currency}`` markets.

    Args:
        exchange_id: ccxt exchange id (default: settings.exchange_id)
        quote_currency: Quote side of the market (default: settings.quote_currency)
        exchange: Preconfigured ccxt exchange instance, used as-is when given
        limit: Max candles per request (default: settings.fetch_limit)
    """

    def __init__(
        self,
        exchange_id: str | None = None,
        quote_currency: str | None = None,
        exchange: Any | None = None,
        limit: int | None = None,
    ) -> None:
        self.exchange_id = exchange_id or settings.exchange_id
        self.quote_currency = (quote_currency or settings.quote_currency).upper()
        self.limit = limit or settings.fetch_limit
        self._exchange = exchange

    @property
    def exchange(self) -> Any:
        if self._exchange is None:
            exchange_class = getattr(ccxt, self.exchange_id, None)
            if exchange_class is None:
                raise PriceSourceError(f"Exchange {self.exchange_id} not supported by ccxt")
            self._exchange = exchange_class({"enableRateLimit": True})
        return self._exchange

    def get_market(self, symbol: str) -> str:
        """
        Resolve a coin symbol to an exchange market.

        Raises:
            PriceSourceError: If the exchange does not list the market.
        """
        market = f"{symbol.upper()}/{self.quote_currency}"
        try:
            markets = self._load_markets()
        except ccxt.BaseError as e:
            raise PriceSourceError(f"Failed to load markets from {self.exchange_id}: {e}") from e

        if market not in markets:
            raise PriceSourceError(f"Market {market} not found on {self.exchange_id}")
        return market

    def get_historical_prices(
        self,
        symbol: str,
        from_date: Any | None = None,
        today: date | None = None,
    ) -> list[HistoricalPrice]:
        """
        Fetch closing prices from ``from_date`` (inclusive) through yesterday.

        Args:
            symbol: Coin symbol, e.g. "BTC"
            from_date: First day to fetch (default: as far back as the exchange goes)
            today: Current UTC day (default: now)

        Returns:
            Date-ascending prices, empty when from_date is today or later

        Raises:
            PriceSourceError: If the market is unknown or fetching fails.
        """
        today = today or datetime.now(timezone.utc).date()
        start = to_utc_date(from_date) if from_date is not None else EARLIEST_DATE

        if start >= today:
            logger.info("No closed candles to fetch", symbol=symbol, from_date=start.isoformat())
            return []

        market = self.get_market(symbol)
        since = _to_millis(start)
        end = _to_millis(today)
        by_date: dict[date, HistoricalPrice] = {}

        logger.info(
            "Fetching price history",
            market=market,
            exchange=self.exchange_id,
            from_date=start.isoformat(),
        )

        while since < end:
            try:
                candles = self._fetch_ohlcv(market, since)
            except ccxt.BaseError as e:
                raise PriceSourceError(f"Failed to fetch {market} candles: {e}") from e

            if not candles:
                break

            for timestamp, _open, _high, _low, close, *_ in candles:
                if since <= timestamp < end:
                    day = _to_date(timestamp)
                    by_date[day] = HistoricalPrice(date=day, price=close)

            next_since = candles[-1][0] + DAY_MS
            if next_since <= since:
                break
            since = next_since

        prices = [by_date[d] for d in sorted(by_date)]
        logger.info("Price history fetched", market=market, prices=len(prices))
        return prices

    @retry(
        retry=retry_if_exception_type(ccxt.NetworkError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        before_sleep=_log_retry,
        reraise=True,
    )
    def _load_markets(self) -> dict[str, Any]:
        return self.exchange.load_markets()

    @retry(
        retry=retry_if_exception_type(ccxt.NetworkError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        before_sleep=_log_retry,
        reraise=True,
    )
    def _fetch_ohlcv(self, market: str, since: int) -> list[list]:
        return self.exchange.fetch_ohlcv(market, TIMEFRAME, since=since, limit=self.limit)
