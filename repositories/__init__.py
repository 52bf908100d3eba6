"""
Repositories package for Tickerbook.
Provides data access layer for all database operations.
"""

from repositories.stock_repository import StockRepository
from repositories.transaction_repository import TransactionRepository
from repositories.note_repository import NoteRepository
from repositories.sector_repository import SectorRepository
from repositories.user_preferences_repository import UserPreferencesRepository

__all__ = [
    'StockRepository',
    'TransactionRepository',
    'NoteRepository',
    'SectorRepository',
    'UserPreferencesRepository',
]
