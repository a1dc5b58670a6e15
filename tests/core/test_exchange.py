"""Tests for the Exchange fee model."""

from datetime import date
from decimal import Decimal

import pytest

from coin_backtester.core.exchange import EXCHANGES, Exchange, TradeType
from coin_backtester.core.price_history import HistoricalPrice

PRICE = HistoricalPrice(date=date(2014, 1, 1), price=Decimal("100"))


class TestExchangeBuy:

    def test_buy_with_fee(self):
        exchange = Exchange(name="Test", trading_fee_percentage=Decimal("0.5"))
        execution = exchange.buy(
            amount=Decimal("100"),
            historical_price=PRICE,
            initial_coin_amount=Decimal("0"),
            initial_cash_amount=Decimal("200"),
        )
        assert execution.trade.type == TradeType.BUY
        assert execution.trade.amount == Decimal("1")
        assert execution.new_coin_amount == Decimal("1")
        assert execution.new_cash_amount == Decimal("99.5")

    def test_buy_all_cash_never_goes_negative(self, coinbase_pro):
        execution = coinbase_pro.buy(
            amount=Decimal("200"),
            historical_price=PRICE,
            initial_coin_amount=Decimal("0"),
            initial_cash_amount=Decimal("200"),
        )
        assert execution.new_cash_amount >= 0
        assert execution.new_coin_amount < Decimal("2")

    def test_free_buy_spends_exact_amount(self, free_exchange):
        execution = free_exchange.buy(
            amount=Decimal("50"),
            historical_price=PRICE,
            initial_coin_amount=Decimal("1"),
            initial_cash_amount=Decimal("100"),
        )
        assert execution.new_coin_amount == Decimal("1.5")
        assert execution.new_cash_amount == Decimal("50")

    def test_trade_carries_price_and_date(self, free_exchange):
        execution = free_exchange.buy(Decimal("10"), PRICE, Decimal("0"), Decimal("10"))
        assert execution.trade.price == PRICE.price
        assert execution.trade.date == PRICE.date


class TestExchangeSell:

    def test_sell_with_fee(self):
        exchange = Exchange(name="Test", trading_fee_percentage=Decimal("0.5"))
        execution = exchange.sell(
            amount=Decimal("0.5"),
            historical_price=PRICE,
            initial_coin_amount=Decimal("1"),
            initial_cash_amount=Decimal("0"),
        )
        assert execution.trade.type == TradeType.SELL
        assert execution.trade.amount == Decimal("0.5")
        assert execution.new_coin_amount == Decimal("0.5")
        assert execution.new_cash_amount == Decimal("49.75")

    def test_free_buy_then_sell_returns_cash(self, free_exchange):
        bought = free_exchange.buy(Decimal("30"), PRICE, Decimal("0"), Decimal("100"))
        sold = free_exchange.sell(
            bought.trade.amount, PRICE, bought.new_coin_amount, bought.new_cash_amount,
        )
        assert sold.new_cash_amount == Decimal("100")
        assert sold.new_coin_amount == 0


class TestExchangeDefinitions:

    def test_predefined_exchanges(self):
        assert EXCHANGES["coinbase_pro"].trading_fee_percentage == Decimal("0.5")
        assert EXCHANGES["free"].trading_fee_percentage == 0

    def test_fee_is_coerced(self):
        assert Exchange(name="x", trading_fee_percentage=0.25).fee_fraction == Decimal("0.0025")

    def test_fee_out_of_range(self):
        with pytest.raises(ValueError):
            Exchange(name="x", trading_fee_percentage=101)
