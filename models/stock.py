"""
Stock model - represents a stock held in the portfolio.
"""

from typing import Optional
from datetime import datetime
from sqlmodel import SQLModel, Field


class Stock(SQLModel, table=True):
    """Represents a stock in the portfolio. Holdings and value are derived from transactions."""
    id: Optional[int] = Field(default=None, primary_key=True)
    ticker: str = Field(index=True)  # e.g., "AAPL", "VOD.L"; uniqueness enforced by StockService
    name: str = Field(index=True)  # e.g., "Apple Inc."
    currency: str = Field(default="USD")  # Trading currency of the stock
    sector_id: Optional[int] = Field(default=None, foreign_key="sector.id")
    created_at: datetime = Field(default_factory=datetime.now)
