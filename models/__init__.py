"""
Database models for Tickerbook.
All SQLModel table definitions are centralized here.
"""

from models.sector import Sector
from models.stock import Stock
from models.transaction import Transaction
from models.note import Note
from models.user_preferences import UserPreferences

__all__ = [
    'Sector',
    'Stock',
    'Transaction',
    'Note',
    'UserPreferences',
]
