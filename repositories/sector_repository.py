"""
Sector Repository - data access layer for Sector model.
"""

from typing import Optional, List, Dict
from sqlalchemy import func
from sqlmodel import Session, select

from db_engine import get_engine
from models import Sector


class SectorRepository:
    """Repository for Sector CRUD operations."""

    @staticmethod
    def add(name: str, session: Optional[Session] = None) -> Sector:
        """Add a new sector to the database."""
        def _create_sector(sess: Session) -> Sector:
            sector = Sector(name=name)
            sess.add(sector)
            sess.commit()
            sess.refresh(sector)
            return sector

        if session is not None:
            return _create_sector(session)
        else:
            with Session(get_engine()) as session:
                return _create_sector(session)

    @staticmethod
    def get_or_create(name: str, session: Optional[Session] = None) -> Sector:
        """Return the sector with this name, creating it if missing."""
        existing = SectorRepository.get_by_name(name, session=session)
        if existing:
            return existing
        return SectorRepository.add(name, session=session)

    @staticmethod
    def get_all(session: Optional[Session] = None) -> List[Sector]:
        """Retrieve all sectors ordered by name."""
        def _get_all(sess: Session) -> List[Sector]:
            return list(sess.exec(select(Sector).order_by(Sector.name)).all())

        if session is not None:
            return _get_all(session)
        else:
            with Session(get_engine()) as session:
                return _get_all(session)

    @staticmethod
    def get_by_id(sector_id: int, session: Optional[Session] = None) -> Optional[Sector]:
        """Retrieve a sector by its ID."""
        def _get_by_id(sess: Session) -> Optional[Sector]:
            return sess.get(Sector, sector_id)

        if session is not None:
            return _get_by_id(session)
        else:
            with Session(get_engine()) as session:
                return _get_by_id(session)

    @staticmethod
    def get_by_name(name: str, session: Optional[Session] = None) -> Optional[Sector]:
        """Retrieve a sector by name (case-insensitive)."""
        def _get_by_name(sess: Session) -> Optional[Sector]:
            return sess.exec(select(Sector).where(func.lower(Sector.name) == name.lower())).first()

        if session is not None:
            return _get_by_name(session)
        else:
            with Session(get_engine()) as session:
                return _get_by_name(session)

    @staticmethod
    def get_name_map(session: Optional[Session] = None) -> Dict[int, str]:
        """Map sector IDs to names."""
        return {sector.id: sector.name for sector in SectorRepository.get_all(session=session)}

    @staticmethod
    def delete(sector_id: int, session: Optional[Session] = None) -> bool:
        """
        Delete a sector by its ID.
        Stocks must be detached from it first.

        Returns:
            True if successful, False otherwise
        """
        def _delete(sess: Session) -> bool:
            try:
                sector = sess.get(Sector, sector_id)
                if sector:
                    sess.delete(sector)
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
