"""
Sector model - industry sector used for allocation breakdowns.
"""

from typing import Optional
from sqlmodel import SQLModel, Field


class Sector(SQLModel, table=True):
    """Industry sector a stock can be assigned to."""
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True, unique=True)  # e.g., "Technology"
