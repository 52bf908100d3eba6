"""
Portfolio service for holdings, cost basis, net worth and sector allocation.
Loads stocks and transactions through the repositories and hands them to the
valuation engine. All aggregate values are in the user's base currency.
"""

import logging
from typing import List, Dict, Optional
from dataclasses import dataclass, field

import pandas as pd

from config import get_settings
from models import Stock, Transaction
from repositories import (
    StockRepository,
    TransactionRepository,
    SectorRepository,
    UserPreferencesRepository,
)
from services.valuation import (
    SectorAllocation,
    StockPosition,
    calculate_portfolio_value,
    calculate_sector_breakdown,
)

logger = logging.getLogger(__name__)


POSITION_COLUMNS = ['ticker', 'name', 'sector', 'currency', 'holdings', 'average_price', 'value']


@dataclass
class PortfolioSummary:
    """Everything the dashboard shows, derived from the current transactions."""
    positions: List[StockPosition]
    total_value: float
    sector_breakdown: Dict[str, SectorAllocation]
    base_currency: str
    recent_transactions: List[Transaction] = field(default_factory=list)

    @property
    def stock_count(self) -> int:
        return len(self.positions)

    @property
    def transaction_count(self) -> int:
        return sum(len(p.transactions) for p in self.positions)


class PortfolioService:
    """
    Service for portfolio calculations.
    Values are mark-to-cost: holdings times purchase-weighted average price.
    """

    @staticmethod
    def get_base_currency() -> str:
        """Base currency from user preferences, falling back to settings."""
        prefs = UserPreferencesRepository.get()
        if prefs and prefs.default_currency:
            return prefs.default_currency
        return get_settings().default_currency

    @staticmethod
    def _build_position(stock: Stock, transactions: List[Transaction],
                        sector_names: Dict[int, str]) -> StockPosition:
        return StockPosition(
            ticker=stock.ticker,
            name=stock.name,
            currency=stock.currency,
            sector=sector_names.get(stock.sector_id) if stock.sector_id else None,
            transactions=transactions,
            stock_id=stock.id,
        )

    @staticmethod
    def get_stock_position(stock_id: int) -> Optional[StockPosition]:
        """
        Build the position for a single stock.

        Args:
            stock_id: Stock ID

        Returns:
            StockPosition, or None if the stock does not exist
        """
        stock = StockRepository.get_by_id(stock_id)
        if not stock:
            return None

        transactions = TransactionRepository.get_by_stock(stock_id)
        sector_names = SectorRepository.get_name_map()
        return PortfolioService._build_position(stock, transactions, sector_names)

    @staticmethod
    def get_positions() -> List[StockPosition]:
        """Build positions for every stock in the portfolio."""
        stocks = StockRepository.get_all()
        sector_names = SectorRepository.get_name_map()

        transactions_by_stock: Dict[int, List[Transaction]] = {}
        for tx in TransactionRepository.get_all():
            transactions_by_stock.setdefault(tx.stock_id, []).append(tx)

        positions = [
            PortfolioService._build_position(
                stock, transactions_by_stock.get(stock.id, []), sector_names
            )
            for stock in stocks
        ]
        logger.debug(f"Built {len(positions)} positions")
        return positions

    @staticmethod
    def get_summary(recent_limit: Optional[int] = None) -> PortfolioSummary:
        """
        Calculate portfolio value, sector breakdown and recent activity.

        Args:
            recent_limit: Number of recent transactions to include
                (default: recent_transactions_limit setting)

        Returns:
            PortfolioSummary in base currency
        """
        if recent_limit is None:
            recent_limit = get_settings().recent_transactions_limit

        positions = PortfolioService.get_positions()
        total_value = calculate_portfolio_value(positions)
        breakdown = calculate_sector_breakdown(positions)
        base_currency = PortfolioService.get_base_currency()

        logger.info(
            f"Portfolio summary: {len(positions)} stocks, value {total_value:.2f} {base_currency}"
        )

        return PortfolioSummary(
            positions=positions,
            total_value=total_value,
            sector_breakdown=breakdown,
            base_currency=base_currency,
            recent_transactions=TransactionRepository.get_recent(recent_limit),
        )

    @staticmethod
    def positions_dataframe(positions: List[StockPosition]) -> pd.DataFrame:
        """
        Tabulate positions for display, highest value first.

        Returns:
            DataFrame with POSITION_COLUMNS
        """
        rows = [
            {
                'ticker': p.ticker,
                'name': p.name,
                'sector': p.sector,
                'currency': p.currency,
                'holdings': p.holdings,
                'average_price': p.average_price,
                'value': p.value,
            }
            for p in positions
        ]
        df = pd.DataFrame(rows, columns=POSITION_COLUMNS)
        if df.empty:
            return df
        return df.sort_values('value', ascending=False).reset_index(drop=True)

    @staticmethod
    def sector_dataframe(breakdown: Dict[str, SectorAllocation]) -> pd.DataFrame:
        """Tabulate a sector breakdown, largest allocation first."""
        df = pd.DataFrame(
            [{'sector': name, 'value': a.value, 'percentage': a.percentage}
             for name, a in breakdown.items()],
            columns=['sector', 'value', 'percentage']
        )
        if df.empty:
            return df
        return df.sort_values('value', ascending=False).reset_index(drop=True)
