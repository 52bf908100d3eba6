"""
Transaction model - represents a buy/sell transaction for a stock.
"""

from typing import Optional
from datetime import date, datetime
from sqlmodel import SQLModel, Field


class Transaction(SQLModel, table=True):
    """Represents a buy/sell transaction for a stock."""
    id: Optional[int] = Field(default=None, primary_key=True)
    stock_id: int = Field(foreign_key="stock.id", index=True)
    transaction_date: date = Field(index=True)
    transaction_type: str  # "BUY" or "SELL"
    quantity: float
    price: float  # Price per share in the transaction currency
    currency: str = Field(default="USD")
    exchange_rate: Optional[float] = Field(default=1.0)  # Transaction currency -> base currency
    fx_fee: Optional[float] = Field(default=0.0)  # Flat fee, already in base currency
    created_at: datetime = Field(default_factory=datetime.now)
