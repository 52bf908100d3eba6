"""
Transaction service: record, edit and remove BUY/SELL transactions.
Resolves currency, exchange rate and FX fee against the base currency before
anything is stored.
"""

import logging
from typing import List, Optional

from models import Stock, Transaction
from repositories import NoteRepository, StockRepository, TransactionRepository
from services.common import NotFoundError, resolve_fx_fields
from services.portfolio import PortfolioService
from services.validation import TransactionForm, TransactionWithNoteForm
from services.valuation import calculate_transaction_total

logger = logging.getLogger(__name__)


class TransactionService:
    """Business rules for transactions."""

    @staticmethod
    def list_transactions() -> List[Transaction]:
        """All transactions, newest first."""
        return TransactionRepository.get_all()

    @staticmethod
    def list_for_stock(stock_id: int) -> List[Transaction]:
        """Transactions of one stock, oldest first."""
        return TransactionRepository.get_by_stock(stock_id)

    @staticmethod
    def get_transaction(transaction_id: int) -> Transaction:
        """Return the transaction or raise NotFoundError."""
        transaction = TransactionRepository.get_by_id(transaction_id)
        if not transaction:
            raise NotFoundError("Transaction", transaction_id)
        return transaction

    @staticmethod
    def _get_stock(stock_id: int) -> Stock:
        stock = StockRepository.get_by_id(stock_id)
        if not stock:
            raise NotFoundError("Stock", stock_id)
        return stock

    @staticmethod
    def _resolve_currency(form: TransactionForm, stock: Stock, stored_currency: str):
        # Conversion follows the stock's currency when the form names none,
        # while the stored currency falls back to the record's own
        exchange_rate, fx_fee = resolve_fx_fields(
            form.currency or stock.currency,
            PortfolioService.get_base_currency(),
            form.exchange_rate,
            form.fx_fee,
        )
        return form.currency or stored_currency, exchange_rate, fx_fee

    @staticmethod
    def create_transaction(form: TransactionForm, note_content: Optional[str] = None) -> Transaction:
        """
        Record a transaction against an existing stock.

        The currency defaults to the stock's currency. In the base currency the
        exchange rate is stored as 1 and the FX fee as 0.

        Args:
            form: Validated transaction input
            note_content: Note text; a TransactionWithNoteForm supplies it itself

        Returns:
            Created Transaction

        Raises:
            NotFoundError: if the stock does not exist
        """
        stock = TransactionService._get_stock(form.stock_id)
        currency, exchange_rate, fx_fee = TransactionService._resolve_currency(form, stock, stock.currency)

        if note_content is None and isinstance(form, TransactionWithNoteForm):
            note_content = form.attached_note

        transaction = TransactionRepository.add(
            stock_id=stock.id,
            transaction_date=form.transaction_date,
            transaction_type=form.transaction_type.value,
            quantity=form.quantity,
            price=form.price,
            currency=currency,
            exchange_rate=exchange_rate,
            fx_fee=fx_fee,
        )
        if note_content:
            NoteRepository.add(content=note_content, stock_id=stock.id, transaction_id=transaction.id)

        logger.info(
            f"Recorded {transaction.transaction_type} {transaction.quantity} {stock.ticker} "
            f"@ {transaction.price} {currency} (total {calculate_transaction_total(transaction):.2f})"
        )
        return transaction

    @staticmethod
    def update_transaction(transaction_id: int, form: TransactionForm) -> Transaction:
        """
        Replace a transaction's fields, possibly moving it to another stock.
        Without a currency in the form the stored currency is kept, but the
        exchange rate and FX fee are resolved against the target stock's currency.

        Raises:
            NotFoundError: if the transaction or target stock does not exist
        """
        existing = TransactionService.get_transaction(transaction_id)
        stock = TransactionService._get_stock(form.stock_id)
        currency, exchange_rate, fx_fee = TransactionService._resolve_currency(form, stock, existing.currency)

        updated = TransactionRepository.update(
            transaction_id,
            stock_id=stock.id,
            transaction_date=form.transaction_date,
            transaction_type=form.transaction_type.value,
            quantity=form.quantity,
            price=form.price,
            currency=currency,
            exchange_rate=exchange_rate,
            fx_fee=fx_fee,
        )
        if existing.stock_id != stock.id:
            logger.info(f"Moved transaction {transaction_id} from stock {existing.stock_id} to {stock.id}")
        logger.info(f"Updated transaction {transaction_id}")
        return updated

    @staticmethod
    def delete_transaction(transaction_id: int) -> None:
        """
        Delete a transaction together with its notes.

        Raises:
            NotFoundError: if the transaction does not exist
        """
        TransactionService.get_transaction(transaction_id)
        removed_notes = NoteRepository.delete_by_transaction(transaction_id)
        TransactionRepository.delete(transaction_id)
        logger.info(f"Deleted transaction {transaction_id} and {removed_notes} notes")
