"""
PriceCache — CSV storage of daily closing prices, one file per coin symbol.

Files live at ``{data_dir}/{SYMBOL}.csv`` with the header ``date,closingPrice``
and ISO ``YYYY-MM-DD`` dates.
"""

from collections.abc import Iterable
from pathlib import Path

import pandas as pd

from coin_backtester.config import settings
from coin_backtester.core.price_history import HistoricalPrice, PriceHistory
from coin_backtester.exceptions import PriceHistoryLoadError
from coin_backtester.logging import LoggerMixin


class PriceCache(LoggerMixin):
    """Reads and writes price histories under ``data_dir``."""

    def __init__(self, data_dir: Path | str | None = None) -> None:
        self.data_dir = Path(data_dir) if data_dir is not None else Path(settings.data_dir)

    def get_path(self, symbol: str) -> Path:
        """Get the CSV path for a symbol."""
        return self.data_dir / f"{symbol.upper()}.csv"

    def exists(self, symbol: str) -> bool:
        return self.get_path(symbol).exists()

    def load(self, symbol: str) -> PriceHistory:
        """
        Load the stored history for a symbol.

        Raises:
            PriceHistoryLoadError: If the file is absent, empty or malformed.
        """
        path = self.get_path(symbol)
        if not path.exists():
            raise PriceHistoryLoadError(f"No stored price history for {symbol} at {path}")

        try:
            df = pd.read_csv(path, dtype={"date": str, "closingPrice": str})
            history = PriceHistory.from_dataframe(df)
        except (ValueError, TypeError, KeyError, ArithmeticError) as e:
            # pandas' EmptyDataError and ParserError are ValueErrors too
            raise PriceHistoryLoadError(f"Failed to load price history from {path}: {e}") from e

        self.logger.info(
            "Price history loaded",
            symbol=symbol,
            prices=len(history),
            start_date=history.start_date.isoformat(),
            end_date=history.end_date.isoformat(),
        )
        return history

    def save(self, symbol: str, history: PriceHistory) -> Path:
        """Write a full history, replacing any stored one."""
        path = self.get_path(symbol)
        path.parent.mkdir(parents=True, exist_ok=True)
        history.to_dataframe().to_csv(path, index=False)

        self.logger.info("Price history saved", symbol=symbol, prices=len(history), path=str(path))
        return path

    def append(self, symbol: str, prices: Iterable[HistoricalPrice]) -> PriceHistory:
        """
        Merge new prices into the stored history and rewrite the file.

        Stored prices win over new prices for the same date.

        Returns:
            The merged history
        """
        by_date = {p.date: p for p in (HistoricalPrice.coerce(p) for p in prices)}
        if self.exists(symbol):
            by_date.update({p.date: p for p in self.load(symbol)})

        merged = PriceHistory(by_date[d] for d in sorted(by_date))
        self.save(symbol, merged)
        return merged
