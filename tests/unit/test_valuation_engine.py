"""
Unit Tests for Valuation Engine
"""

import pytest
from decimal import Decimal

from app.domain.models import Position
from app.domain.services.valuation_engine import ValuationEngine


@pytest.fixture
def engine():
    """Fixture for ValuationEngine"""
    return ValuationEngine()


@pytest.fixture
def position():
    return Position(id=1, name="Acme", ticker="ACME", sector="Industrials", quantity=10, buy_price=Decimal("100"))


class TestValuationEngine:
    """Test suite for Valuation Engine"""

    def test_compute_with_market_price(self, engine, position):
        record = engine.compute(position, Decimal("120"), Decimal("25"), "yahoo")

        assert record.investment_value == Decimal("1000")
        assert record.current_value == Decimal("1200")
        assert record.gain_loss == Decimal("200")
        assert record.pe_ratio == Decimal("25")
        assert record.price_source == "yahoo"

    def test_missing_price_falls_back_to_buy_price(self, engine, position):
        record = engine.compute(position, None, None, "yahoo")

        assert record.current_price == Decimal("100")
        assert record.gain_loss == Decimal("0")
        assert record.pe_ratio == Decimal("0")
        assert record.price_source == "buy_price"

    def test_negative_price_never_reaches_record(self, engine, position):
        record = engine.compute(position, Decimal("-5"), Decimal("-1"), "nse")

        assert record.current_price == position.buy_price
        assert record.pe_ratio == Decimal("0")

    def test_zero_price_is_a_real_price(self, engine, position):
        record = engine.compute(position, Decimal("0"), None, "nse")

        assert record.current_price == Decimal("0")
        assert record.gain_loss == Decimal("-1000")
        assert record.price_source == "nse"

    def test_portfolio_share_sums_to_hundred(self, engine):
        positions = [
            Position(id=i, name=f"P{i}", ticker=f"T{i}", sector="S", quantity=q, buy_price=Decimal(p))
            for i, (q, p) in enumerate([(3, "33.33"), (7, "101.10"), (11, "9.99")], start=1)
        ]
        records = engine.apply_portfolio_share(
            [engine.compute(p, p.buy_price, None, "x") for p in positions]
        )

        total = sum(r.portfolio_share_percent for r in records)
        assert abs(total - Decimal("100")) <= Decimal("0.02")
        assert all(r.portfolio_share_percent > 0 for r in records)

    def test_portfolio_share_zero_when_portfolio_worthless(self, engine, position):
        other = Position(id=2, name="B", ticker="B", sector="S", quantity=1, buy_price=Decimal("5"))
        records = engine.apply_portfolio_share([
            engine.compute(position, Decimal("0"), None, "x"),
            engine.compute(other, Decimal("0"), None, "x"),
        ])

        assert [r.portfolio_share_percent for r in records] == [Decimal("0"), Decimal("0")]

    def test_summarize_by_sector_keeps_first_seen_order(self, engine):
        a = Position(id=1, name="A", ticker="A", sector="Tech", quantity=2, buy_price=Decimal("10"))
        b = Position(id=2, name="B", ticker="B", sector="Energy", quantity=1, buy_price=Decimal("50"))
        c = Position(id=3, name="C", ticker="C", sector="Tech", quantity=4, buy_price=Decimal("5"))
        records = [
            engine.compute(a, Decimal("12"), None, "x"),
            engine.compute(b, Decimal("40"), None, "x"),
            engine.compute(c, Decimal("5"), None, "x"),
        ]

        summary = engine.summarize_by_sector(records)

        assert [s.sector for s in summary] == ["Tech", "Energy"]
        assert summary[0].investment_value == Decimal("40")
        assert summary[0].current_value == Decimal("44")
        assert summary[0].gain_loss == Decimal("4")
        assert summary[1].gain_loss == Decimal("-10")

    def test_totals(self, engine, position):
        totals = engine.totals([engine.compute(position, Decimal("90"), None, "x")])

        assert totals.investment_value == Decimal("1000")
        assert totals.current_value == Decimal("900")
        assert totals.gain_loss == Decimal("-100")


def test_position_rejects_non_positive_quantity():
    with pytest.raises(ValueError, match="quantity must be positive"):
        Position(id=1, name="A", ticker="A", sector="S", quantity=0, buy_price=Decimal("1"))


def test_position_rejects_non_positive_buy_price():
    with pytest.raises(ValueError, match="buy_price must be positive"):
        Position(id=1, name="A", ticker="A", sector="S", quantity=1, buy_price=Decimal("0"))
