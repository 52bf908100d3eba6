"""
Transaction Repository - data access layer for Transaction model.
Optimized with optional session parameter for transaction reuse.
"""

from typing import Optional, List
from datetime import date
from sqlmodel import Session, select

from db_engine import get_engine
from models import Transaction


class TransactionRepository:
    """Repository for Transaction CRUD operations."""

    @staticmethod
    def add(
        stock_id: int,
        transaction_date: date,
        transaction_type: str,
        quantity: float,
        price: float,
        currency: str,
        exchange_rate: float = 1.0,
        fx_fee: float = 0.0,
        session: Optional[Session] = None
    ) -> Transaction:
        """
        Add a new transaction to the database.

        Args:
            stock_id: Stock ID for the transaction
            transaction_date: Date of the transaction
            transaction_type: 'BUY' or 'SELL'
            quantity: Number of shares
            price: Price per share in the transaction currency
            currency: Transaction currency code
            exchange_rate: Multiplier from transaction currency to base currency
            fx_fee: Flat FX fee in base currency
            session: Optional existing session for transaction reuse

        Returns:
            Created Transaction object
        """
        def _create_transaction(sess: Session) -> Transaction:
            transaction = Transaction(
                stock_id=stock_id,
                transaction_date=transaction_date,
                transaction_type=transaction_type,
                quantity=quantity,
                price=price,
                currency=currency,
                exchange_rate=exchange_rate,
                fx_fee=fx_fee
            )
            sess.add(transaction)
            sess.commit()
            sess.refresh(transaction)
            return transaction

        if session is not None:
            return _create_transaction(session)
        else:
            with Session(get_engine()) as session:
                return _create_transaction(session)

    @staticmethod
    def get_by_stock(stock_id: int, session: Optional[Session] = None) -> List[Transaction]:
        """
        Retrieve all transactions for a specific stock, oldest first.

        Args:
            stock_id: Stock ID to look up
            session: Optional existing session for transaction reuse

        Returns:
            List of Transaction objects
        """
        def _get_by_stock(sess: Session) -> List[Transaction]:
            statement = (
                select(Transaction)
                .where(Transaction.stock_id == stock_id)
                .order_by(Transaction.transaction_date, Transaction.id)
            )
            return list(sess.exec(statement).all())

        if session is not None:
            return _get_by_stock(session)
        else:
            with Session(get_engine()) as session:
                return _get_by_stock(session)

    @staticmethod
    def get_all(session: Optional[Session] = None) -> List[Transaction]:
        """
        Retrieve all transactions, newest first.

        Args:
            session: Optional existing session for transaction reuse

        Returns:
            List of all Transaction objects
        """
        def _get_all(sess: Session) -> List[Transaction]:
            statement = select(Transaction).order_by(
                Transaction.transaction_date.desc(), Transaction.id.desc()
            )
            return list(sess.exec(statement).all())

        if session is not None:
            return _get_all(session)
        else:
            with Session(get_engine()) as session:
                return _get_all(session)

    @staticmethod
    def get_recent(limit: int, session: Optional[Session] = None) -> List[Transaction]:
        """Retrieve the most recent transactions by date."""
        def _get_recent(sess: Session) -> List[Transaction]:
            statement = select(Transaction).order_by(
                Transaction.transaction_date.desc(), Transaction.id.desc()
            ).limit(limit)
            return list(sess.exec(statement).all())

        if session is not None:
            return _get_recent(session)
        else:
            with Session(get_engine()) as session:
                return _get_recent(session)

    @staticmethod
    def get_by_id(transaction_id: int, session: Optional[Session] = None) -> Optional[Transaction]:
        """
        Retrieve a transaction by its ID.

        Args:
            transaction_id: Transaction ID to look up
            session: Optional existing session for transaction reuse

        Returns:
            Transaction object or None if not found
        """
        def _get_by_id(sess: Session) -> Optional[Transaction]:
            return sess.get(Transaction, transaction_id)

        if session is not None:
            return _get_by_id(session)
        else:
            with Session(get_engine()) as session:
                return _get_by_id(session)

    @staticmethod
    def count_by_stock(stock_id: int, session: Optional[Session] = None) -> int:
        """Count the transactions recorded against a stock."""
        return len(TransactionRepository.get_by_stock(stock_id, session=session))

    @staticmethod
    def update(
        transaction_id: int,
        stock_id: Optional[int] = None,
        transaction_date: Optional[date] = None,
        transaction_type: Optional[str] = None,
        quantity: Optional[float] = None,
        price: Optional[float] = None,
        currency: Optional[str] = None,
        exchange_rate: Optional[float] = None,
        fx_fee: Optional[float] = None,
        session: Optional[Session] = None
    ) -> Optional[Transaction]:
        """
        Update an existing transaction.
        Only updates fields that are provided (not None).

        Returns:
            Updated Transaction object or None if not found
        """
        def _update(sess: Session) -> Optional[Transaction]:
            transaction = sess.get(Transaction, transaction_id)
            if transaction:
                if stock_id is not None:
                    transaction.stock_id = stock_id
                if transaction_date is not None:
                    transaction.transaction_date = transaction_date
                if transaction_type is not None:
                    transaction.transaction_type = transaction_type
                if quantity is not None:
                    transaction.quantity = quantity
                if price is not None:
                    transaction.price = price
                if currency is not None:
                    transaction.currency = currency
                if exchange_rate is not None:
                    transaction.exchange_rate = exchange_rate
                if fx_fee is not None:
                    transaction.fx_fee = fx_fee
                sess.add(transaction)
                sess.commit()
                sess.refresh(transaction)
                return transaction
            return None

        if session is not None:
            return _update(session)
        else:
            with Session(get_engine()) as session:
                return _update(session)

    @staticmethod
    def reassign_stock(from_stock_ids: List[int], to_stock_id: int,
                       session: Optional[Session] = None) -> int:
        """
        Move every transaction of the given stocks onto another stock.

        Returns:
            Number of transactions moved
        """
        def _reassign(sess: Session) -> int:
            statement = select(Transaction).where(Transaction.stock_id.in_(from_stock_ids))
            transactions = sess.exec(statement).all()
            for tx in transactions:
                tx.stock_id = to_stock_id
                sess.add(tx)
            sess.commit()
            return len(transactions)

        if session is not None:
            return _reassign(session)
        else:
            with Session(get_engine()) as session:
                return _reassign(session)

    @staticmethod
    def delete(transaction_id: int, session: Optional[Session] = None) -> bool:
        """
        Delete a transaction by its ID.

        Args:
            transaction_id: Transaction ID to delete
            session: Optional existing session for transaction reuse

        Returns:
            True if successful, False otherwise
        """
        def _delete(sess: Session) -> bool:
            try:
                transaction = sess.get(Transaction, transaction_id)
                if transaction:
                    sess.delete(transaction)
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
