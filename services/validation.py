"""
Input validation for stocks, transactions, notes, sectors and the user profile.
Forms are pydantic models; invalid input raises pydantic.ValidationError before
anything reaches the repositories or the valuation engine.
"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from services.common import SUPPORTED_CURRENCIES, TransactionType, normalize_ticker

NOTE_MAX_LENGTH = 1000
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


def _check_currency(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    code = value.strip().upper()
    if code not in SUPPORTED_CURRENCIES:
        raise ValueError(f"Unsupported currency: {value}")
    return code


class NoteAttachment(BaseModel):
    """Optional note created together with a stock or transaction."""
    include_note: bool = False
    note_content: Optional[str] = Field(default=None, max_length=NOTE_MAX_LENGTH)

    @model_validator(mode='after')
    def require_note_content(self):
        if self.include_note and not (self.note_content and self.note_content.strip()):
            raise ValueError("Note content is required when including a note")
        return self

    @property
    def attached_note(self) -> Optional[str]:
        """The note text to store, or None when no note was requested."""
        return self.note_content if self.include_note else None


class StockForm(BaseModel):
    ticker: str = Field(min_length=1, max_length=10)
    name: str = Field(min_length=1, max_length=100)
    currency: str = "USD"
    sector_id: Optional[int] = None

    @field_validator('ticker', mode='before')
    @classmethod
    def normalize_ticker_value(cls, value):
        return normalize_ticker(value) if isinstance(value, str) else value

    @field_validator('name', mode='before')
    @classmethod
    def strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator('currency')
    @classmethod
    def validate_currency(cls, value):
        return _check_currency(value)


class StockWithNoteForm(StockForm, NoteAttachment):
    pass


class TransactionForm(BaseModel):
    """
    A BUY or SELL entry. The currency defaults to the stock's currency when
    omitted; exchange rate and FX fee only matter for foreign currencies.
    """
    stock_id: int
    transaction_type: TransactionType
    quantity: float = Field(gt=0)
    price: float = Field(gt=0)
    transaction_date: date
    currency: Optional[str] = None
    exchange_rate: Optional[float] = Field(default=None, gt=0)
    fx_fee: Optional[float] = Field(default=None, ge=0)

    @field_validator('transaction_type', mode='before')
    @classmethod
    def upper_transaction_type(cls, value):
        return value.upper() if isinstance(value, str) else value

    @field_validator('currency')
    @classmethod
    def validate_currency(cls, value):
        return _check_currency(value)


class TransactionWithNoteForm(TransactionForm, NoteAttachment):
    pass


class NoteForm(BaseModel):
    content: str = Field(min_length=1, max_length=NOTE_MAX_LENGTH)
    stock_id: Optional[int] = None
    transaction_id: Optional[int] = None

    @field_validator('content')
    @classmethod
    def content_not_blank(cls, value):
        if not value.strip():
            raise ValueError("Content is required")
        return value


class SectorForm(BaseModel):
    name: str = Field(min_length=1, max_length=100)

    @field_validator('name', mode='before')
    @classmethod
    def strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value


class UserProfileForm(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    email: str = Field(pattern=EMAIL_PATTERN)
    default_currency: str = "GBP"

    @field_validator('default_currency')
    @classmethod
    def validate_currency(cls, value):
        return _check_currency(value)
