"""
Services package for Tickerbook.
Provides core business logic separated from presentation and data layers.
"""

from services.common import (
    TransactionType,
    SUPPORTED_CURRENCIES,
    UNCATEGORIZED_SECTOR,
    NotFoundError,
    BusinessRuleError,
    DuplicateTickerError,
    StockHasTransactionsError,
    format_currency,
    get_currency_symbol,
    normalize_ticker,
    resolve_fx_fields,
)
from services.valuation import (
    SectorAllocation,
    StockPosition,
    calculate_transaction_total,
    calculate_average_price,
    calculate_total_holdings,
    calculate_stock_value,
    calculate_portfolio_value,
    calculate_sector_breakdown,
)
from services.portfolio import PortfolioService, PortfolioSummary
from services.stocks import StockService
from services.transactions import TransactionService
from services.notes import NoteService
from services.user import UserService

__all__ = [
    # Common utilities
    'TransactionType',
    'SUPPORTED_CURRENCIES',
    'UNCATEGORIZED_SECTOR',
    'NotFoundError',
    'BusinessRuleError',
    'DuplicateTickerError',
    'StockHasTransactionsError',
    'format_currency',
    'get_currency_symbol',
    'normalize_ticker',
    'resolve_fx_fields',
    # Valuation engine
    'SectorAllocation',
    'StockPosition',
    'calculate_transaction_total',
    'calculate_average_price',
    'calculate_total_holdings',
    'calculate_stock_value',
    'calculate_portfolio_value',
    'calculate_sector_breakdown',
    # Services
    'PortfolioService',
    'PortfolioSummary',
    'StockService',
    'TransactionService',
    'NoteService',
    'UserService',
]
