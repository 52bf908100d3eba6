"""
UserPreferences Repository - data access layer for UserPreferences model.
"""

from typing import Optional
from sqlmodel import Session, select

from db_engine import get_engine
from models import UserPreferences


class UserPreferencesRepository:
    """Repository for UserPreferences CRUD operations."""

    @staticmethod
    def get() -> Optional[UserPreferences]:
        """Retrieve user preferences (singleton - only one record expected)."""
        with Session(get_engine()) as session:
            statement = select(UserPreferences)
            results = session.exec(statement)
            return results.first()

    @staticmethod
    def save_profile(name: str, email: str, default_currency: Optional[str] = None) -> UserPreferences:
        """Save or update the user's name, email and optionally base currency."""
        with Session(get_engine()) as session:
            prefs = session.exec(select(UserPreferences)).first()
            if prefs is None:
                prefs = UserPreferences()

            prefs.name = name
            prefs.email_address = email
            if default_currency is not None:
                prefs.default_currency = default_currency
            session.add(prefs)
            session.commit()
            session.refresh(prefs)
            return prefs

    @staticmethod
    def save_default_currency(default_currency: str) -> UserPreferences:
        """Save or update the user's base currency."""
        with Session(get_engine()) as session:
            statement = select(UserPreferences)
            results = session.exec(statement)
            prefs = results.first()

            if prefs:
                prefs.default_currency = default_currency
                session.add(prefs)
                session.commit()
                session.refresh(prefs)
                return prefs
            else:
                prefs = UserPreferences(default_currency=default_currency)
                session.add(prefs)
                session.commit()
                session.refresh(prefs)
                return prefs
