"""Valuation engine: holdings, cost basis, transaction totals and sector allocation."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from typing import Optional

import pytest

from models import Transaction
from services.valuation import (
    StockPosition,
    calculate_average_price,
    calculate_portfolio_value,
    calculate_sector_breakdown,
    calculate_stock_value,
    calculate_total_holdings,
    calculate_transaction_total,
)


def tx(transaction_type, quantity, price, currency="USD", exchange_rate=1.0, fx_fee=0.0):
    return Transaction(
        stock_id=1,
        transaction_date=date(2024, 5, 1),
        transaction_type=transaction_type,
        quantity=quantity,
        price=price,
        currency=currency,
        exchange_rate=exchange_rate,
        fx_fee=fx_fee,
    )


@dataclass
class PlainTransaction:
    transaction_type: str
    quantity: float
    price: float
    exchange_rate: Optional[float] = None
    fx_fee: Optional[float] = None


def position(ticker, transactions, sector=None):
    return StockPosition(ticker=ticker, name=ticker, sector=sector, transactions=transactions)


def test_empty_transactions_yield_zero():
    assert calculate_total_holdings([]) == 0
    assert calculate_average_price([]) == 0
    assert calculate_stock_value(position("NONE", [])) == 0


def test_only_sells_have_zero_average_price():
    sells = [tx("SELL", 3, 190.5), tx("SELL", 1, 200.0)]
    assert calculate_average_price(sells) == 0
    assert calculate_total_holdings(sells) == -4


def test_two_buys_average_and_holdings():
    transactions = [tx("BUY", 10, 175.5), tx("BUY", 5, 180.25)]

    assert calculate_total_holdings(transactions) == 15
    assert calculate_average_price(transactions) == pytest.approx(177.083333, rel=1e-6)


def test_sell_does_not_change_average_price():
    transactions = [tx("BUY", 10, 175.5), tx("SELL", 3, 190.5)]

    assert calculate_total_holdings(transactions) == 7
    assert calculate_average_price(transactions) == pytest.approx(175.5)
    assert calculate_stock_value(position("AAPL", transactions)) == pytest.approx(7 * 175.5)


def test_average_price_is_normalized_with_exchange_rate():
    transactions = [tx("BUY", 10, 100.0, "EUR", 1.1), tx("BUY", 10, 100.0, "EUR", 1.3)]
    assert calculate_average_price(transactions) == pytest.approx(120.0)


def test_average_price_ignores_fx_fee():
    transactions = [tx("BUY", 10, 100.0, "EUR", 1.0, fx_fee=50.0)]
    assert calculate_average_price(transactions) == pytest.approx(100.0)


def test_holdings_can_go_negative():
    transactions = [tx("BUY", 2, 10.0), tx("SELL", 5, 12.0)]

    assert calculate_total_holdings(transactions) == -3
    assert calculate_stock_value(position("SHORT", transactions)) == pytest.approx(-30.0)


def test_holdings_do_not_depend_on_order():
    transactions = [tx("SELL", 4, 1.0), tx("BUY", 10, 1.0), tx("SELL", 1, 1.0)]
    assert calculate_total_holdings(transactions) == calculate_total_holdings(transactions[::-1]) == 5


def test_foreign_buy_total_adds_fee():
    buy = tx("BUY", 8, 320.75, "EUR", 1.10, 12.50)
    assert calculate_transaction_total(buy) == pytest.approx(2835.10)


def test_foreign_sell_total_subtracts_fee():
    sell = tx("SELL", 3, 190.5, "USD", 1.26, 4.75)
    assert calculate_transaction_total(sell) == pytest.approx(3 * 190.5 * 1.26 - 4.75)


def test_missing_rate_behaves_like_rate_one():
    without_rate = PlainTransaction("BUY", 4, 25.0)
    with_rate = PlainTransaction("BUY", 4, 25.0, exchange_rate=1.0)

    assert calculate_transaction_total(without_rate) == calculate_transaction_total(with_rate) == 100.0
    assert calculate_average_price([without_rate]) == calculate_average_price([with_rate]) == 25.0


def test_zero_fee_leaves_total_unchanged():
    assert calculate_transaction_total(tx("SELL", 2, 50.0, fx_fee=0.0)) == pytest.approx(100.0)


def test_calculations_are_repeatable():
    transactions = [tx("BUY", 10, 175.5), tx("BUY", 5, 180.25), tx("SELL", 3, 190.5)]
    stock = position("AAPL", transactions)

    assert calculate_total_holdings(transactions) == calculate_total_holdings(transactions)
    assert calculate_average_price(transactions) == calculate_average_price(transactions)
    assert calculate_stock_value(stock) == calculate_stock_value(stock)
    assert [calculate_transaction_total(t) for t in transactions] == \
        [calculate_transaction_total(t) for t in transactions]


def test_nan_quantity_propagates():
    transactions = [tx("BUY", float("nan"), 10.0)]
    assert math.isnan(calculate_total_holdings(transactions))
    assert math.isnan(calculate_average_price(transactions))


def test_position_properties_match_functions():
    transactions = [tx("BUY", 10, 175.5), tx("SELL", 3, 190.5)]
    stock = position("AAPL", transactions)

    assert stock.holdings == 7
    assert stock.average_price == pytest.approx(175.5)
    assert stock.value == pytest.approx(calculate_stock_value(stock))


def test_sector_breakdown_percentages():
    stocks = [
        position("AAA", [tx("BUY", 10, 100.0)], sector="Technology"),
        position("BBB", [tx("BUY", 5, 100.0)], sector="Technology"),
        position("CCC", [tx("BUY", 3, 100.0)]),
    ]

    breakdown = calculate_sector_breakdown(stocks)

    assert list(breakdown) == ["Technology", "Uncategorized"]
    assert breakdown["Technology"].value == pytest.approx(1500.0)
    assert breakdown["Technology"].percentage == pytest.approx(83.3333, rel=1e-4)
    assert breakdown["Uncategorized"].value == pytest.approx(300.0)
    assert breakdown["Uncategorized"].percentage == pytest.approx(16.6667, rel=1e-4)
    assert calculate_portfolio_value(stocks) == pytest.approx(1800.0)


def test_zero_portfolio_reports_zero_percentages():
    stocks = [
        position("AAA", [], sector="Technology"),
        position("BBB", [tx("SELL", 2, 10.0)], sector="Energy"),
    ]

    breakdown = calculate_sector_breakdown(stocks)

    assert calculate_portfolio_value(stocks) == 0
    assert {name: a.percentage for name, a in breakdown.items()} == {"Energy": 0.0}


def test_stocks_without_holdings_form_no_sector():
    stocks = [
        position("AAA", [tx("BUY", 5, 10.0)], sector="Technology"),
        position("BBB", [tx("BUY", 5, 10.0), tx("SELL", 5, 12.0)], sector="Energy"),
        position("CCC", []),
    ]

    breakdown = calculate_sector_breakdown(stocks)

    assert list(breakdown) == ["Technology"]
    assert breakdown["Technology"].value == pytest.approx(50.0)
    assert breakdown["Technology"].percentage == pytest.approx(100.0)


def test_empty_portfolio_has_no_sectors():
    assert calculate_sector_breakdown([]) == {}
    assert calculate_portfolio_value([]) == 0
