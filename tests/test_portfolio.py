from __future__ import annotations

from datetime import date

import pytest

from services import PortfolioService, StockService, TransactionService, UserService
from services.validation import SectorForm, StockForm, TransactionForm, UserProfileForm


def record(stock_id, transaction_type, quantity, price, day, **extra):
    return TransactionService.create_transaction(TransactionForm(
        stock_id=stock_id,
        transaction_type=transaction_type,
        quantity=quantity,
        price=price,
        transaction_date=date(2024, 1, day),
        **extra,
    ))


@pytest.fixture()
def portfolio(db):
    tech = StockService.create_sector(SectorForm(name="Technology"))
    aapl = StockService.create_stock(StockForm(ticker="AAPL", name="Apple", sector_id=tech.id))
    msft = StockService.create_stock(StockForm(ticker="MSFT", name="Microsoft", sector_id=tech.id))
    barc = StockService.create_stock(StockForm(ticker="BARC", name="Barclays", currency="GBP"))

    record(aapl.id, "BUY", 10, 100.0, 1)
    record(msft.id, "BUY", 5, 100.0, 2)
    record(barc.id, "BUY", 4, 75.0, 3)
    record(barc.id, "SELL", 1, 90.0, 4)
    return {"aapl": aapl, "msft": msft, "barc": barc}


def test_stock_position_for_single_stock(portfolio):
    position = PortfolioService.get_stock_position(portfolio["barc"].id)

    assert position.ticker == "BARC"
    assert position.sector is None
    assert position.holdings == 3
    assert position.average_price == pytest.approx(75.0)
    assert position.value == pytest.approx(225.0)


def test_missing_stock_has_no_position(db):
    assert PortfolioService.get_stock_position(404) is None


def test_summary_totals_and_sectors(portfolio):
    summary = PortfolioService.get_summary()

    assert summary.base_currency == "GBP"
    assert summary.stock_count == 3
    assert summary.transaction_count == 4
    assert summary.total_value == pytest.approx(1000.0 + 500.0 + 225.0)
    assert summary.sector_breakdown["Technology"].value == pytest.approx(1500.0)
    assert summary.sector_breakdown["Technology"].percentage == pytest.approx(1500.0 / 1725.0 * 100)
    assert summary.sector_breakdown["Uncategorized"].value == pytest.approx(225.0)


def test_summary_recent_transactions_limit(portfolio):
    summary = PortfolioService.get_summary(recent_limit=2)

    assert [tx.transaction_date for tx in summary.recent_transactions] == \
        [date(2024, 1, 4), date(2024, 1, 3)]


def test_foreign_purchase_value_in_base_currency(db):
    stock = StockService.create_stock(StockForm(ticker="SAP", name="SAP SE", currency="EUR"))
    record(stock.id, "BUY", 8, 320.75, 5, exchange_rate=1.10, fx_fee=12.5)

    position = PortfolioService.get_stock_position(stock.id)

    assert position.average_price == pytest.approx(320.75 * 1.10)
    assert position.value == pytest.approx(8 * 320.75 * 1.10)


def test_base_currency_follows_user_profile(db):
    assert PortfolioService.get_base_currency() == "GBP"
    UserService.update_profile(UserProfileForm(name="Ada", email="ada@example.com", default_currency="EUR"))
    assert PortfolioService.get_base_currency() == "EUR"


def test_positions_dataframe_sorted_by_value(portfolio):
    df = PortfolioService.positions_dataframe(PortfolioService.get_positions())

    assert list(df["ticker"]) == ["AAPL", "MSFT", "BARC"]
    assert df.loc[0, "value"] == pytest.approx(1000.0)


def test_empty_dataframes_keep_columns(db):
    positions_df = PortfolioService.positions_dataframe([])
    sector_df = PortfolioService.sector_dataframe({})

    assert positions_df.empty and "value" in positions_df.columns
    assert sector_df.empty and list(sector_df.columns) == ["sector", "value", "percentage"]


def test_zero_value_portfolio(db):
    StockService.create_stock(StockForm(ticker="NEW", name="Not bought yet"))

    summary = PortfolioService.get_summary()

    assert summary.total_value == 0
    assert summary.sector_breakdown == {}
