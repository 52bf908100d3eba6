"""
Note Repository - data access layer for Note model.
Optimized with optional session parameter for transaction reuse.
"""

from typing import Optional, List
from datetime import datetime
from sqlmodel import Session, select

from db_engine import get_engine
from models import Note


class NoteRepository:
    """Repository for Note CRUD operations."""

    @staticmethod
    def add(
        content: str,
        stock_id: Optional[int] = None,
        transaction_id: Optional[int] = None,
        session: Optional[Session] = None
    ) -> Note:
        """
        Add a new note to the database.

        Args:
            content: Note text
            stock_id: Optional stock the note refers to
            transaction_id: Optional transaction the note refers to
            session: Optional existing session for transaction reuse

        Returns:
            Created Note object
        """
        def _create_note(sess: Session) -> Note:
            note = Note(
                content=content,
                stock_id=stock_id,
                transaction_id=transaction_id
            )
            sess.add(note)
            sess.commit()
            sess.refresh(note)
            return note

        if session is not None:
            return _create_note(session)
        else:
            with Session(get_engine()) as session:
                return _create_note(session)

    @staticmethod
    def get_all(session: Optional[Session] = None) -> List[Note]:
        """Retrieve all notes, newest first."""
        def _get_all(sess: Session) -> List[Note]:
            statement = select(Note).order_by(Note.created_at.desc(), Note.id.desc())
            return list(sess.exec(statement).all())

        if session is not None:
            return _get_all(session)
        else:
            with Session(get_engine()) as session:
                return _get_all(session)

    @staticmethod
    def get_by_id(note_id: int, session: Optional[Session] = None) -> Optional[Note]:
        """Retrieve a note by its ID, or None if not found."""
        def _get_by_id(sess: Session) -> Optional[Note]:
            return sess.get(Note, note_id)

        if session is not None:
            return _get_by_id(session)
        else:
            with Session(get_engine()) as session:
                return _get_by_id(session)

    @staticmethod
    def get_by_stock(stock_id: int, session: Optional[Session] = None) -> List[Note]:
        """Retrieve notes attached to a stock, newest first."""
        def _get_by_stock(sess: Session) -> List[Note]:
            statement = (
                select(Note)
                .where(Note.stock_id == stock_id)
                .order_by(Note.created_at.desc(), Note.id.desc())
            )
            return list(sess.exec(statement).all())

        if session is not None:
            return _get_by_stock(session)
        else:
            with Session(get_engine()) as session:
                return _get_by_stock(session)

    @staticmethod
    def get_by_transaction(transaction_id: int, session: Optional[Session] = None) -> List[Note]:
        """Retrieve notes attached to a transaction, newest first."""
        def _get_by_transaction(sess: Session) -> List[Note]:
            statement = (
                select(Note)
                .where(Note.transaction_id == transaction_id)
                .order_by(Note.created_at.desc(), Note.id.desc())
            )
            return list(sess.exec(statement).all())

        if session is not None:
            return _get_by_transaction(session)
        else:
            with Session(get_engine()) as session:
                return _get_by_transaction(session)

    @staticmethod
    def update(
        note_id: int,
        content: str,
        stock_id: Optional[int] = None,
        transaction_id: Optional[int] = None,
        session: Optional[Session] = None
    ) -> Optional[Note]:
        """
        Replace a note's content and links.
        Links are overwritten as given, so None detaches the note.

        Returns:
            Updated Note object or None if not found
        """
        def _update(sess: Session) -> Optional[Note]:
            note = sess.get(Note, note_id)
            if note:
                note.content = content
                note.stock_id = stock_id
                note.transaction_id = transaction_id
                note.updated_at = datetime.now()
                sess.add(note)
                sess.commit()
                sess.refresh(note)
                return note
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
        Move every note of the given stocks onto another stock.

        Returns:
            Number of notes moved
        """
        def _reassign(sess: Session) -> int:
            statement = select(Note).where(Note.stock_id.in_(from_stock_ids))
            notes = sess.exec(statement).all()
            for note in notes:
                note.stock_id = to_stock_id
                sess.add(note)
            sess.commit()
            return len(notes)

        if session is not None:
            return _reassign(session)
        else:
            with Session(get_engine()) as session:
                return _reassign(session)

    @staticmethod
    def delete(note_id: int, session: Optional[Session] = None) -> bool:
        """
        Delete a note by its ID.

        Returns:
            True if successful, False otherwise
        """
        def _delete(sess: Session) -> bool:
            try:
                note = sess.get(Note, note_id)
                if note:
                    sess.delete(note)
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

    @staticmethod
    def delete_by_stock(stock_id: int, session: Optional[Session] = None) -> int:
        """
        Delete all notes for a specific stock.

        Returns:
            Number of notes deleted
        """
        def _delete_by_stock(sess: Session) -> int:
            notes = sess.exec(select(Note).where(Note.stock_id == stock_id)).all()
            count = 0
            for note in notes:
                sess.delete(note)
                count += 1
            sess.commit()
            return count

        if session is not None:
            return _delete_by_stock(session)
        else:
            with Session(get_engine()) as session:
                return _delete_by_stock(session)

    @staticmethod
    def delete_by_transaction(transaction_id: int, session: Optional[Session] = None) -> int:
        """
        Delete all notes for a specific transaction.

        Returns:
            Number of notes deleted
        """
        def _delete_by_transaction(sess: Session) -> int:
            statement = select(Note).where(Note.transaction_id == transaction_id)
            notes = sess.exec(statement).all()
            count = 0
            for note in notes:
                sess.delete(note)
                count += 1
            sess.commit()
            return count

        if session is not None:
            return _delete_by_transaction(session)
        else:
            with Session(get_engine()) as session:
                return _delete_by_transaction(session)
