"""Stock, transaction and note services against a temporary SQLite database."""

from __future__ import annotations

from datetime import date

import pytest

from repositories import NoteRepository, StockRepository, TransactionRepository
from services import (
    DuplicateTickerError,
    NoteService,
    NotFoundError,
    StockHasTransactionsError,
    StockService,
    TransactionService,
    UserService,
)
from services.validation import (
    NoteForm,
    SectorForm,
    StockForm,
    StockWithNoteForm,
    TransactionForm,
    TransactionWithNoteForm,
    UserProfileForm,
)


def add_stock(ticker="AAPL", name="Apple Inc.", currency="USD", sector_id=None):
    return StockService.create_stock(
        StockForm(ticker=ticker, name=name, currency=currency, sector_id=sector_id)
    )


def add_transaction(stock_id, transaction_type="BUY", quantity=10, price=100.0, **extra):
    return TransactionService.create_transaction(TransactionForm(
        stock_id=stock_id,
        transaction_type=transaction_type,
        quantity=quantity,
        price=price,
        transaction_date=extra.pop("transaction_date", date(2024, 5, 1)),
        **extra,
    ))


def test_create_stock_with_note(db):
    stock = StockService.create_stock(StockWithNoteForm(
        ticker="msft", name="Microsoft", include_note=True, note_content="Cloud growth"
    ))

    assert stock.ticker == "MSFT"
    notes = NoteService.notes_for_stock(stock.id)
    assert [n.content for n in notes] == ["Cloud growth"]


def test_duplicate_ticker_is_rejected(db):
    add_stock("AAPL")
    with pytest.raises(DuplicateTickerError):
        add_stock("aapl", name="Apple again")


def test_update_stock_to_taken_ticker_is_rejected(db):
    add_stock("AAPL")
    msft = add_stock("MSFT", name="Microsoft")

    with pytest.raises(DuplicateTickerError):
        StockService.update_stock(msft.id, StockForm(ticker="AAPL", name="Microsoft"))


def test_ticker_lookup_treats_underscore_literally(db):
    lookalike = add_stock("BRKXB", name="Lookalike Corp")

    brk_b = add_stock("BRK_B", name="Berkshire Hathaway")

    assert brk_b.id != lookalike.id
    assert StockRepository.get_by_ticker("brk_b").id == brk_b.id
    assert StockRepository.get_by_ticker("BRK%") is None


def test_sector_names_with_wildcards_are_distinct(db):
    consumer = StockService.create_sector(SectorForm(name="Consumer Goods"))

    discretionary = StockService.create_sector(SectorForm(name="Consumer_Goods"))

    assert discretionary.id != consumer.id
    assert sorted(s.name for s in StockService.list_sectors()) == ["Consumer Goods", "Consumer_Goods"]


def test_update_stock_clears_sector(db):
    sector = StockService.create_sector(SectorForm(name="Technology"))
    stock = add_stock(sector_id=sector.id)

    updated = StockService.update_stock(stock.id, StockForm(ticker="AAPL", name="Apple", currency="USD"))

    assert updated.sector_id is None
    assert updated.name == "Apple"


def test_create_stock_with_unknown_sector_fails(db):
    with pytest.raises(NotFoundError):
        add_stock(sector_id=999)


def test_delete_stock_with_transactions_is_blocked(db):
    stock = add_stock()
    tx = add_transaction(stock.id)
    NoteService.create_note(NoteForm(content="Thesis", stock_id=stock.id))

    with pytest.raises(StockHasTransactionsError):
        StockService.delete_stock(stock.id)

    TransactionService.delete_transaction(tx.id)
    StockService.delete_stock(stock.id)

    assert StockRepository.get_by_id(stock.id) is None
    assert NoteRepository.get_by_stock(stock.id) == []


def test_delete_missing_stock_raises(db):
    with pytest.raises(NotFoundError):
        StockService.delete_stock(42)


def test_transaction_in_base_currency_drops_rate_and_fee(db):
    stock = add_stock("BARC", name="Barclays", currency="GBP")

    tx = add_transaction(stock.id, currency="GBP", exchange_rate=1.4, fx_fee=3.0)

    assert tx.currency == "GBP"
    assert tx.exchange_rate == 1.0
    assert tx.fx_fee == 0.0


def test_foreign_transaction_keeps_rate_and_fee(db):
    stock = add_stock()

    tx = add_transaction(stock.id, quantity=8, price=320.75, currency="EUR", exchange_rate=1.10, fx_fee=12.5)

    assert (tx.currency, tx.exchange_rate, tx.fx_fee) == ("EUR", 1.10, 12.5)


def test_transaction_currency_defaults_to_stock_currency(db):
    stock = add_stock(currency="USD")

    tx = add_transaction(stock.id)

    assert tx.currency == "USD"
    assert tx.exchange_rate == 1.0
    assert tx.fx_fee == 0.0


def test_transaction_for_missing_stock_fails(db):
    with pytest.raises(NotFoundError):
        add_transaction(123)


def test_transaction_note_is_linked(db):
    stock = add_stock()
    tx = TransactionService.create_transaction(TransactionWithNoteForm(
        stock_id=stock.id,
        transaction_type="BUY",
        quantity=1,
        price=10.0,
        transaction_date=date(2024, 1, 2),
        include_note=True,
        note_content="Starter position",
    ))

    notes = NoteService.notes_for_transaction(tx.id)
    assert len(notes) == 1
    assert notes[0].stock_id == stock.id

    TransactionService.delete_transaction(tx.id)
    assert NoteService.notes_for_transaction(tx.id) == []


def test_update_transaction_moves_it_to_another_stock(db):
    aapl = add_stock("AAPL")
    msft = add_stock("MSFT", name="Microsoft")
    tx = add_transaction(aapl.id, currency="USD", exchange_rate=1.25)

    updated = TransactionService.update_transaction(tx.id, TransactionForm(
        stock_id=msft.id,
        transaction_type="SELL",
        quantity=2,
        price=300.0,
        transaction_date=date(2024, 6, 1),
    ))

    assert updated.stock_id == msft.id
    assert updated.transaction_type == "SELL"
    assert updated.currency == "USD"
    assert updated.exchange_rate == 1.0
    assert TransactionService.list_for_stock(aapl.id) == []


def test_moved_transaction_converts_by_target_stock_currency(db):
    aapl = add_stock("AAPL", currency="USD")
    barc = add_stock("BARC", name="Barclays", currency="GBP")
    tx = add_transaction(aapl.id, exchange_rate=1.4, fx_fee=2.0)
    assert (tx.currency, tx.exchange_rate, tx.fx_fee) == ("USD", 1.4, 2.0)

    updated = TransactionService.update_transaction(tx.id, TransactionForm(
        stock_id=barc.id,
        transaction_type="BUY",
        quantity=10,
        price=100.0,
        transaction_date=date(2024, 5, 1),
        exchange_rate=1.4,
        fx_fee=2.0,
    ))

    assert updated.stock_id == barc.id
    assert updated.currency == "USD"
    assert (updated.exchange_rate, updated.fx_fee) == (1.0, 0.0)


def test_list_transactions_newest_first(db):
    stock = add_stock()
    add_transaction(stock.id, transaction_date=date(2024, 1, 1))
    add_transaction(stock.id, transaction_date=date(2024, 3, 1))
    add_transaction(stock.id, transaction_date=date(2024, 2, 1))

    dates = [tx.transaction_date for tx in TransactionService.list_transactions()]
    assert dates == [date(2024, 3, 1), date(2024, 2, 1), date(2024, 1, 1)]


def test_merge_duplicate_stocks(db):
    keep = StockRepository.add(ticker="AAPL", name="Apple Inc.")
    duplicate = StockRepository.add(ticker="aapl", name="Apple duplicate")
    other = StockRepository.add(ticker="MSFT", name="Microsoft")
    TransactionRepository.add(duplicate.id, date(2024, 1, 1), "BUY", 5, 100.0, "USD")
    NoteRepository.add("Moved note", stock_id=duplicate.id)

    removed = StockService.merge_duplicate_stocks()

    assert removed == 1
    assert {s.id for s in StockService.list_stocks()} == {keep.id, other.id}
    assert len(TransactionService.list_for_stock(keep.id)) == 1
    assert [n.content for n in NoteService.notes_for_stock(keep.id)] == ["Moved note"]


def test_delete_sector_uncategorizes_stocks(db):
    sector = StockService.create_sector(SectorForm(name="Energy"))
    stock = add_stock("XOM", name="Exxon", sector_id=sector.id)

    assert StockService.create_sector(SectorForm(name="energy")).id == sector.id
    assert StockService.delete_sector(sector.id) == 1
    assert StockService.get_stock(stock.id).sector_id is None
    assert StockService.list_sectors() == []


def test_note_requires_existing_links(db):
    with pytest.raises(NotFoundError):
        NoteService.create_note(NoteForm(content="Orphan", stock_id=7))
    with pytest.raises(NotFoundError):
        NoteService.create_note(NoteForm(content="Orphan", transaction_id=7))


def test_note_update_and_delete(db):
    stock = add_stock()
    note = NoteService.create_note(NoteForm(content="First draft", stock_id=stock.id))

    updated = NoteService.update_note(note.id, NoteForm(content="Final", stock_id=None))
    assert updated.content == "Final"
    assert updated.stock_id is None

    NoteService.delete_note(note.id)
    with pytest.raises(NotFoundError):
        NoteService.get_note(note.id)


def test_user_profile_defaults_and_update(db):
    user = UserService.get_current_user()
    assert user.name == "Demo User"
    assert user.default_currency == "GBP"

    updated = UserService.update_profile(
        UserProfileForm(name="Ada", email="ada@example.com", default_currency="USD")
    )
    assert (updated.name, updated.email_address, updated.default_currency) == \
        ("Ada", "ada@example.com", "USD")
    assert UserService.get_current_user().id == user.id
