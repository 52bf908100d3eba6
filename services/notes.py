"""
Note service: free-text research notes linked to stocks and transactions.
"""

import logging
from typing import List

from models import Note
from repositories import NoteRepository, StockRepository, TransactionRepository
from services.common import NotFoundError
from services.validation import NoteForm

logger = logging.getLogger(__name__)


class NoteService:
    """Business rules for notes."""

    @staticmethod
    def list_notes() -> List[Note]:
        return NoteRepository.get_all()

    @staticmethod
    def notes_for_stock(stock_id: int) -> List[Note]:
        return NoteRepository.get_by_stock(stock_id)

    @staticmethod
    def notes_for_transaction(transaction_id: int) -> List[Note]:
        return NoteRepository.get_by_transaction(transaction_id)

    @staticmethod
    def get_note(note_id: int) -> Note:
        """Return the note or raise NotFoundError."""
        note = NoteRepository.get_by_id(note_id)
        if not note:
            raise NotFoundError("Note", note_id)
        return note

    @staticmethod
    def _check_links(form: NoteForm) -> None:
        if form.stock_id is not None and not StockRepository.get_by_id(form.stock_id):
            raise NotFoundError("Stock", form.stock_id)
        if form.transaction_id is not None and not TransactionRepository.get_by_id(form.transaction_id):
            raise NotFoundError("Transaction", form.transaction_id)

    @staticmethod
    def create_note(form: NoteForm) -> Note:
        """
        Create a note.

        Raises:
            NotFoundError: if a linked stock or transaction does not exist
        """
        NoteService._check_links(form)
        note = NoteRepository.add(
            content=form.content,
            stock_id=form.stock_id,
            transaction_id=form.transaction_id,
        )
        logger.info(f"Created note {note.id}")
        return note

    @staticmethod
    def update_note(note_id: int, form: NoteForm) -> Note:
        """
        Replace a note's content and links.

        Raises:
            NotFoundError: if the note or a linked record does not exist
        """
        NoteService.get_note(note_id)
        NoteService._check_links(form)
        note = NoteRepository.update(
            note_id,
            content=form.content,
            stock_id=form.stock_id,
            transaction_id=form.transaction_id,
        )
        logger.info(f"Updated note {note_id}")
        return note

    @staticmethod
    def delete_note(note_id: int) -> None:
        NoteService.get_note(note_id)
        NoteRepository.delete(note_id)
        logger.info(f"Deleted note {note_id}")
