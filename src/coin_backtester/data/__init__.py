"""Price data collaborators: CSV cache, ccxt source, updater."""

from coin_backtester.data.price_cache import PriceCache
from coin_backtester.data.price_source import CcxtPriceSource
from coin_backtester.data.updater import update_price_history

__all__ = ["CcxtPriceSource", "PriceCache", "update_price_history"]
