"""
Common utilities and shared definitions.
Transaction types, currency helpers, ticker normalization and service errors.
"""

import logging
from enum import Enum
from typing import Optional, Tuple

logger = logging.getLogger(__name__)


UNCATEGORIZED_SECTOR = "Uncategorized"

# Currencies accepted for stocks, transactions and the base currency
SUPPORTED_CURRENCIES = ("GBP", "USD", "EUR", "JPY", "CHF", "CAD", "AUD")

CURRENCY_SYMBOLS = {
    "GBP": "£",
    "USD": "$",
    "EUR": "€",
    "JPY": "¥",
    "CHF": "Fr",
    "CAD": "C$",
    "AUD": "A$",
}


class TransactionType(str, Enum):
    """Direction of a transaction."""
    BUY = "BUY"
    SELL = "SELL"


class NotFoundError(LookupError):
    """Raised when a referenced stock, transaction, note or sector does not exist."""

    def __init__(self, entity: str, entity_id):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found: {entity_id}")


class BusinessRuleError(ValueError):
    """Raised when an operation would break a portfolio rule."""


class DuplicateTickerError(BusinessRuleError):
    """Raised when a ticker is already used by another stock."""

    def __init__(self, ticker: str):
        self.ticker = ticker
        super().__init__(f"You already have a stock with this ticker: {ticker}")


class StockHasTransactionsError(BusinessRuleError):
    """Raised when deleting a stock that still has transactions."""

    def __init__(self, ticker: str):
        self.ticker = ticker
        super().__init__(
            f"Cannot delete {ticker} while it has transactions. Delete the transactions first."
        )


def normalize_ticker(ticker: str) -> str:
    """
    Normalize a ticker for storage and comparison.

    Examples:
        " aapl " -> "AAPL"
        "vod.l" -> "VOD.L"
    """
    return ticker.strip().upper()


def get_currency_symbol(currency: Optional[str] = "GBP") -> str:
    """Get the display symbol for a currency code, falling back to the code itself."""
    if not currency:
        return ""
    return CURRENCY_SYMBOLS.get(currency, currency)


def format_currency(amount: float, currency: Optional[str] = "GBP") -> str:
    """
    Format an amount with its currency symbol and two decimals.

    Examples:
        format_currency(1234.5, "GBP") -> "£1,234.50"
        format_currency(-12, "USD") -> "-$12.00"
    """
    symbol = get_currency_symbol(currency)
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"


def resolve_fx_fields(
    currency: str,
    base_currency: str,
    exchange_rate: Optional[float],
    fx_fee: Optional[float]
) -> Tuple[float, float]:
    """
    Decide the exchange rate and FX fee to store for a transaction.

    A transaction in the base currency never carries a conversion: the rate is
    forced to 1 and the fee to 0. A foreign-currency transaction keeps the
    given values, defaulting to a rate of 1 and no fee.

    Returns:
        Tuple of (exchange_rate, fx_fee)
    """
    if currency == base_currency:
        return 1.0, 0.0
    return (exchange_rate or 1.0), (fx_fee or 0.0)
