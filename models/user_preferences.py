"""
UserPreferences model - stores the user profile and base currency.
"""

from typing import Optional
from sqlmodel import SQLModel, Field


class UserPreferences(SQLModel, table=True):
    """Stores user profile and settings."""
    id: Optional[int] = Field(default=None, primary_key=True)
    name: Optional[str] = Field(default=None)
    email_address: Optional[str] = Field(default=None)
    default_currency: Optional[str] = Field(default="GBP")  # "GBP", "USD", "EUR", etc.
