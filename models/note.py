"""
Note model - free-text research note, optionally linked to a stock or transaction.
"""

from typing import Optional
from datetime import datetime
from sqlmodel import SQLModel, Field


class Note(SQLModel, table=True):
    """Research note attached to a stock and/or a transaction."""
    id: Optional[int] = Field(default=None, primary_key=True)
    content: str
    stock_id: Optional[int] = Field(default=None, foreign_key="stock.id", index=True)
    transaction_id: Optional[int] = Field(default=None, foreign_key="transaction.id", index=True)
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)
