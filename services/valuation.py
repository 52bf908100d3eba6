"""
Valuation engine for holdings, cost basis and sector allocation.

Every value is re-derived from the full transaction list on each call. The
functions are pure: no I/O, no caching, no validation. Records are read by
attribute, so SQLModel rows and plain dataclasses both work.

Average price is purchase-weighted over BUY transactions only; SELL
transactions reduce holdings but never the cost basis. Stock value is
mark-to-cost (holdings x average price), there is no live price feed.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from services.common import TransactionType, UNCATEGORIZED_SECTOR

logger = logging.getLogger(__name__)


@dataclass
class SectorAllocation:
    """Aggregate value of one sector and its share of the portfolio (0-100)."""
    value: float
    percentage: float


@dataclass
class StockPosition:
    """
    A stock together with its transactions.
    Holdings, average price and value are derived on access, never stored.
    """
    ticker: str
    name: str
    currency: str = "USD"
    sector: Optional[str] = None
    transactions: List[Any] = field(default_factory=list)
    stock_id: Optional[int] = None

    @property
    def holdings(self) -> float:
        return calculate_total_holdings(self.transactions)

    @property
    def average_price(self) -> float:
        return calculate_average_price(self.transactions)

    @property
    def value(self) -> float:
        return calculate_stock_value(self)


def _is_buy(transaction: Any) -> bool:
    return transaction.transaction_type == TransactionType.BUY


def _rate(transaction: Any) -> float:
    # A missing rate means the transaction is already in base currency
    rate = getattr(transaction, 'exchange_rate', None)
    return 1.0 if rate is None else rate


def calculate_transaction_total(transaction: Any) -> float:
    """
    Calculate the cash effect of a transaction in base currency.

    The amount is quantity x price converted with the exchange rate. A nonzero
    FX fee is added to the cost of a BUY and subtracted from the proceeds of
    a SELL.

    Args:
        transaction: Record with transaction_type, quantity, price and optional
            exchange_rate / fx_fee

    Returns:
        Total in base currency
    """
    base_amount = transaction.quantity * transaction.price
    converted_amount = base_amount * _rate(transaction)

    fx_fee = getattr(transaction, 'fx_fee', None)
    if fx_fee:
        if _is_buy(transaction):
            return converted_amount + fx_fee
        return converted_amount - fx_fee

    return converted_amount


def calculate_average_price(transactions: Iterable[Any]) -> float:
    """
    Calculate the purchase-weighted average price per share in base currency.

    Only BUY transactions count. Returns 0.0 when there are none.
    """
    buys = [tx for tx in transactions if _is_buy(tx)]
    if not buys:
        return 0.0

    total_cost = sum(tx.quantity * (tx.price * _rate(tx)) for tx in buys)
    total_quantity = sum(tx.quantity for tx in buys)

    return total_cost / total_quantity


def calculate_total_holdings(transactions: Iterable[Any]) -> float:
    """
    Calculate net shares held: BUY quantities minus SELL quantities.
    The result is not clamped and goes negative when sells exceed buys.
    """
    total = 0.0
    for tx in transactions:
        if _is_buy(tx):
            total += tx.quantity
        else:
            total -= tx.quantity
    return total


def calculate_stock_value(stock: Any) -> float:
    """Mark-to-cost value of a stock: holdings x average price."""
    transactions = list(stock.transactions)
    return calculate_total_holdings(transactions) * calculate_average_price(transactions)


def calculate_portfolio_value(stocks: Iterable[Any]) -> float:
    """Sum of stock values across the portfolio."""
    return sum(calculate_stock_value(stock) for stock in stocks)


def calculate_sector_breakdown(stocks: Iterable[Any]) -> Dict[str, SectorAllocation]:
    """
    Group stock values by sector name.

    Stocks without a sector fall into the "Uncategorized" bucket. Stocks with
    zero holdings (never bought or fully sold) are left out. Buckets keep the
    order in which their first stock appears. When the portfolio value is zero
    every percentage is 0.0.

    Args:
        stocks: Records with a `sector` name (or None) and `transactions`

    Returns:
        Mapping of sector name to SectorAllocation
    """
    values: Dict[str, float] = {}
    for stock in stocks:
        if calculate_total_holdings(stock.transactions) == 0:
            continue
        name = getattr(stock, 'sector', None) or UNCATEGORIZED_SECTOR
        values[name] = values.get(name, 0.0) + calculate_stock_value(stock)

    portfolio_value = sum(values.values())
    if not portfolio_value:
        logger.debug("Portfolio value is zero, sector percentages reported as 0")

    return {
        name: SectorAllocation(
            value=value,
            percentage=(value / portfolio_value) * 100 if portfolio_value else 0.0
        )
        for name, value in values.items()
    }
