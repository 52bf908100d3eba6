"""
Seed script for Tickerbook.
Creates the default user, the standard sectors and a small demo portfolio.
Safe to run repeatedly: existing sectors and stocks are left untouched.
"""

import logging
from datetime import date, timedelta

from config import get_settings
from db_engine import init_db
from repositories import SectorRepository, StockRepository
from services import (
    NoteService,
    StockService,
    TransactionService,
    UserService,
)
from services.validation import NoteForm, StockForm, TransactionForm

logger = logging.getLogger(__name__)


DEFAULT_SECTORS = [
    "Technology",
    "Healthcare",
    "Financial Services",
    "Consumer Goods",
    "Energy",
    "Utilities",
    "Real Estate",
    "Communication Services",
    "Materials",
    "Industrials",
]

# ticker, name, sector, currency, notes
SAMPLE_STOCKS = [
    ("AAPL", "Apple Inc.", "Technology", "USD",
     "Apple showing strong growth potential after recent product launch"),
    ("MSFT", "Microsoft Corporation", "Technology", "USD",
     "Microsoft cloud services continue to exceed expectations"),
    ("JPM", "JPMorgan Chase & Co.", "Financial Services", "USD", None),
    ("BARC", "Barclays PLC", "Financial Services", "GBP",
     "UK stock with no currency conversion needed as it trades in GBP"),
]

# ticker -> [(type, quantity, price, rate, fee, days ago)]
SAMPLE_TRANSACTIONS = {
    "AAPL": [("BUY", 10, 175.5, 1.25, 5.0, 28), ("BUY", 5, 180.25, 1.27, 4.5, 15),
             ("SELL", 3, 190.5, 1.26, 4.75, 4)],
    "MSFT": [("BUY", 10, 340.2, 1.25, 5.0, 25), ("BUY", 5, 345.8, 1.27, 4.5, 12)],
    "JPM": [("BUY", 10, 150.75, 1.25, 5.0, 21), ("BUY", 5, 155.3, 1.27, 4.5, 9)],
    "BARC": [("BUY", 10, 150.75, 1.0, 0.0, 20), ("BUY", 5, 155.3, 1.0, 0.0, 8),
             ("SELL", 3, 165.25, 1.0, 0.0, 2)],
}


def seed_sectors() -> dict:
    """Create the default sectors. Returns a name -> id map."""
    sectors = {name: SectorRepository.get_or_create(name).id for name in DEFAULT_SECTORS}
    print(f"Created or found {len(sectors)} sectors")
    return sectors


def seed_stocks(sector_ids: dict, today: date) -> int:
    """
    Create the sample stocks with their transactions and notes.

    Returns:
        Number of stocks created
    """
    created = 0
    for ticker, name, sector, currency, note in SAMPLE_STOCKS:
        if StockRepository.get_by_ticker(ticker):
            print(f"✓ {ticker} already exists, skipping.")
            continue

        stock = StockService.create_stock(
            StockForm(ticker=ticker, name=name, currency=currency, sector_id=sector_ids[sector])
        )
        for tx_type, quantity, price, rate, fee, days_ago in SAMPLE_TRANSACTIONS[ticker]:
            TransactionService.create_transaction(TransactionForm(
                stock_id=stock.id,
                transaction_type=tx_type,
                quantity=quantity,
                price=price,
                transaction_date=today - timedelta(days=days_ago),
                currency=currency,
                exchange_rate=rate,
                fx_fee=fee,
            ))
        if note:
            NoteService.create_note(NoteForm(content=note, stock_id=stock.id))
        created += 1

    print(f"Created {created} sample stocks")
    return created


def run_seed(today: date = None):
    """Seed the configured database."""
    print("=" * 60)
    print("Tickerbook Seed")
    print("=" * 60)

    init_db()
    user = UserService.get_current_user()
    print(f"Default user: {user.name} <{user.email_address}>")

    sector_ids = seed_sectors()
    seed_stocks(sector_ids, today or date.today())

    print("=" * 60)
    print("Seed complete!")
    print("=" * 60)


if __name__ == "__main__":
    logging.basicConfig(
        level=get_settings().log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    run_seed()
