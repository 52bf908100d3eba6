"""
Stock Repository - data access layer for Stock model.
Optimized with optional session parameter for transaction reuse.
"""

from typing import Optional, List
from sqlalchemy import func
from sqlmodel import Session, select

from db_engine import get_engine
from models import Stock


class StockRepository:
    """Repository for Stock CRUD operations."""

    @staticmethod
    def add(
        ticker: str,
        name: str,
        currency: str = "USD",
        sector_id: Optional[int] = None,
        session: Optional[Session] = None
    ) -> Stock:
        """
        Add a new stock to the database.

        Args:
            ticker: Stock ticker (already normalized)
            name: Company name
            currency: Trading currency of the stock
            sector_id: Optional sector ID
            session: Optional existing session for transaction reuse

        Returns:
            Created Stock object
        """
        def _create_stock(sess: Session) -> Stock:
            stock = Stock(
                ticker=ticker,
                name=name,
                currency=currency,
                sector_id=sector_id
            )
            sess.add(stock)
            sess.commit()
            sess.refresh(stock)
            return stock

        if session is not None:
            return _create_stock(session)
        else:
            with Session(get_engine()) as session:
                return _create_stock(session)

    @staticmethod
    def get_all(session: Optional[Session] = None) -> List[Stock]:
        """
        Retrieve all stocks ordered by ticker.

        Args:
            session: Optional existing session for transaction reuse

        Returns:
            List of all Stock objects
        """
        def _get_all(sess: Session) -> List[Stock]:
            statement = select(Stock).order_by(Stock.ticker)
            return list(sess.exec(statement).all())

        if session is not None:
            return _get_all(session)
        else:
            with Session(get_engine()) as session:
                return _get_all(session)

    @staticmethod
    def get_by_id(stock_id: int, session: Optional[Session] = None) -> Optional[Stock]:
        """Retrieve a stock by its ID, or None if not found."""
        def _get_by_id(sess: Session) -> Optional[Stock]:
            return sess.get(Stock, stock_id)

        if session is not None:
            return _get_by_id(session)
        else:
            with Session(get_engine()) as session:
                return _get_by_id(session)

    @staticmethod
    def get_by_ticker(ticker: str, session: Optional[Session] = None) -> Optional[Stock]:
        """
        Retrieve a stock by ticker (case-insensitive).

        Args:
            ticker: Ticker to search for
            session: Optional existing session for transaction reuse

        Returns:
            Stock object or None if not found
        """
        def _get_by_ticker(sess: Session) -> Optional[Stock]:
            statement = select(Stock).where(func.upper(Stock.ticker) == ticker.upper())
            return sess.exec(statement).first()

        if session is not None:
            return _get_by_ticker(session)
        else:
            with Session(get_engine()) as session:
                return _get_by_ticker(session)

    @staticmethod
    def update(
        stock_id: int,
        ticker: Optional[str] = None,
        name: Optional[str] = None,
        currency: Optional[str] = None,
        sector_id: Optional[int] = None,
        clear_sector: bool = False,
        session: Optional[Session] = None
    ) -> Optional[Stock]:
        """
        Update an existing stock.
        Only updates fields that are provided (not None); pass clear_sector=True
        to remove the sector assignment.

        Returns:
            Updated Stock object or None if not found
        """
        def _update(sess: Session) -> Optional[Stock]:
            stock = sess.get(Stock, stock_id)
            if stock:
                if ticker is not None:
                    stock.ticker = ticker
                if name is not None:
                    stock.name = name
                if currency is not None:
                    stock.currency = currency
                if sector_id is not None or clear_sector:
                    stock.sector_id = sector_id
                sess.add(stock)
                sess.commit()
                sess.refresh(stock)
                return stock
            return None

        if session is not None:
            return _update(session)
        else:
            with Session(get_engine()) as session:
                return _update(session)

    @staticmethod
    def clear_sector(sector_id: int, session: Optional[Session] = None) -> int:
        """
        Remove a sector assignment from every stock in it.

        Returns:
            Number of stocks updated
        """
        def _clear(sess: Session) -> int:
            stocks = sess.exec(select(Stock).where(Stock.sector_id == sector_id)).all()
            for stock in stocks:
                stock.sector_id = None
                sess.add(stock)
            sess.commit()
            return len(stocks)

        if session is not None:
            return _clear(session)
        else:
            with Session(get_engine()) as session:
                return _clear(session)

    @staticmethod
    def delete(stock_id: int, session: Optional[Session] = None) -> bool:
        """
        Delete a stock by its ID.
        Callers must remove its transactions and notes first.

        Returns:
            True if deleted, False if not found
        """
        def _delete(sess: Session) -> bool:
            try:
                stock = sess.get(Stock, stock_id)
                if stock:
                    sess.delete(stock)
                    sess.commit()
                    return True
                return False
            except Exception as e:
                sess.rollback()
                raise e

        if session is not None:
            return _delete(session)
        else:
            with Session(get_engine()) as session:
                return _delete(session)
