"""Custom exceptions for price histories, strategies and parameter sweeps"""


class BacktesterError(Exception):
    """Base exception for all backtester errors"""

    pass


class EmptyHistoryError(BacktesterError, ValueError):
    """Raised when a price history is built from zero prices"""

    pass


class UnsortedHistoryError(BacktesterError, ValueError):
    """Raised when price history dates are not strictly ascending"""

    pass


class DateOutOfRangeError(BacktesterError, ValueError):
    """Raised when a requested range boundary has no exact price in the history"""

    pass


class ParameterRangeError(BacktesterError, ValueError):
    """Raised when a parameter value or sweep range falls outside its declared bounds"""

    pass


class InvalidParameterError(ParameterRangeError):
    """Raised when a strategy is constructed with a structurally invalid parameter"""

    pass


class UnsupportedProjectionError(BacktesterError, ValueError):
    """Raised when chart data is requested for an unsupported kind or parameter count"""

    pass


class PriceHistoryLoadError(BacktesterError):
    """Raised when a stored price history is absent, empty or malformed"""

    pass


class PriceSourceError(BacktesterError):
    """Raised when the remote price source cannot resolve a symbol or return prices"""

    pass
