"""
Stock service: create, update and delete stocks and sectors with their rules.
Tickers are unique across the portfolio and a stock with transactions cannot
be deleted.
"""

import logging
from typing import Dict, List, Optional

from models import Sector, Stock
from repositories import (
    NoteRepository,
    SectorRepository,
    StockRepository,
    TransactionRepository,
)
from services.common import (
    DuplicateTickerError,
    NotFoundError,
    StockHasTransactionsError,
)
from services.validation import SectorForm, StockForm, StockWithNoteForm

logger = logging.getLogger(__name__)


class StockService:
    """Business rules for stocks and sectors."""

    @staticmethod
    def list_stocks() -> List[Stock]:
        return StockRepository.get_all()

    @staticmethod
    def get_stock(stock_id: int) -> Stock:
        """Return the stock or raise NotFoundError."""
        stock = StockRepository.get_by_id(stock_id)
        if not stock:
            raise NotFoundError("Stock", stock_id)
        return stock

    @staticmethod
    def _check_sector(sector_id: Optional[int]) -> None:
        if sector_id is not None and not SectorRepository.get_by_id(sector_id):
            raise NotFoundError("Sector", sector_id)

    @staticmethod
    def create_stock(form: StockForm, note_content: Optional[str] = None) -> Stock:
        """
        Create a stock, optionally with a research note attached.

        Args:
            form: Validated stock input
            note_content: Note text; a StockWithNoteForm supplies it itself

        Returns:
            Created Stock

        Raises:
            DuplicateTickerError: if the ticker is already in the portfolio
            NotFoundError: if the sector does not exist
        """
        if StockRepository.get_by_ticker(form.ticker):
            raise DuplicateTickerError(form.ticker)
        StockService._check_sector(form.sector_id)

        if note_content is None and isinstance(form, StockWithNoteForm):
            note_content = form.attached_note

        stock = StockRepository.add(
            ticker=form.ticker,
            name=form.name,
            currency=form.currency,
            sector_id=form.sector_id,
        )
        if note_content:
            NoteRepository.add(content=note_content, stock_id=stock.id)

        logger.info(f"Created stock {stock.ticker} (id={stock.id})")
        return stock

    @staticmethod
    def update_stock(stock_id: int, form: StockForm) -> Stock:
        """
        Update ticker, name, currency and sector of a stock.
        An absent sector_id in the form removes the sector assignment.

        Raises:
            NotFoundError: if the stock or sector does not exist
            DuplicateTickerError: if another stock already uses the ticker
        """
        stock = StockService.get_stock(stock_id)

        if form.ticker != stock.ticker:
            existing = StockRepository.get_by_ticker(form.ticker)
            if existing and existing.id != stock_id:
                raise DuplicateTickerError(form.ticker)
        StockService._check_sector(form.sector_id)

        updated = StockRepository.update(
            stock_id,
            ticker=form.ticker,
            name=form.name,
            currency=form.currency,
            sector_id=form.sector_id,
            clear_sector=form.sector_id is None,
        )
        logger.info(f"Updated stock {updated.ticker} (id={stock_id})")
        return updated

    @staticmethod
    def delete_stock(stock_id: int) -> None:
        """
        Delete a stock and its notes.

        Raises:
            NotFoundError: if the stock does not exist
            StockHasTransactionsError: if transactions still reference it
        """
        stock = StockService.get_stock(stock_id)
        if TransactionRepository.count_by_stock(stock_id):
            raise StockHasTransactionsError(stock.ticker)

        removed_notes = NoteRepository.delete_by_stock(stock_id)
        StockRepository.delete(stock_id)
        logger.info(f"Deleted stock {stock.ticker} (id={stock_id}) and {removed_notes} notes")

    @staticmethod
    def merge_duplicate_stocks() -> int:
        """
        Merge stocks that share a ticker (case-insensitive).
        The oldest row is kept; transactions and notes of the others move onto it.

        Returns:
            Number of stock rows removed
        """
        groups: Dict[str, List[Stock]] = {}
        for stock in sorted(StockRepository.get_all(), key=lambda s: (s.created_at, s.id)):
            groups.setdefault(stock.ticker.upper(), []).append(stock)

        removed = 0
        for ticker, duplicates in groups.items():
            if len(duplicates) <= 1:
                continue

            keep, rest = duplicates[0], duplicates[1:]
            rest_ids = [s.id for s in rest]
            moved_tx = TransactionRepository.reassign_stock(rest_ids, keep.id)
            moved_notes = NoteRepository.reassign_stock(rest_ids, keep.id)
            for stock_id in rest_ids:
                StockRepository.delete(stock_id)

            removed += len(rest)
            logger.info(
                f"Merged {len(rest)} duplicate {ticker} rows into {keep.id} "
                f"({moved_tx} transactions, {moved_notes} notes moved)"
            )
        return removed

    # ==================== Sectors ====================

    @staticmethod
    def list_sectors() -> List[Sector]:
        return SectorRepository.get_all()

    @staticmethod
    def create_sector(form: SectorForm) -> Sector:
        """Create a sector, returning the existing one if the name is taken."""
        existing = SectorRepository.get_by_name(form.name)
        if existing:
            return existing
        sector = SectorRepository.add(form.name)
        logger.info(f"Created sector {sector.name}")
        return sector

    @staticmethod
    def delete_sector(sector_id: int) -> int:
        """
        Delete a sector; its stocks become uncategorized.

        Returns:
            Number of stocks that lost the sector

        Raises:
            NotFoundError: if the sector does not exist
        """
        sector = SectorRepository.get_by_id(sector_id)
        if not sector:
            raise NotFoundError("Sector", sector_id)

        detached = StockRepository.clear_sector(sector_id)
        SectorRepository.delete(sector_id)
        logger.info(f"Deleted sector {sector.name}, {detached} stocks now uncategorized")
        return detached
