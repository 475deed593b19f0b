"""
Tests for the sales ledger and annotated sales.
"""

import pytest

from ticketrecon.models import CandidateKind, parse_match_description
from ticketrecon.reconciliation import AnnotatedSale, PricingCandidateCache, SalesLedger
from ticketrecon.reconciliation.ledger import EXPORT_HEADER, NA


@pytest.fixture
def ledger(context, make_sale):
    """One sale of each kind, given out of order."""
    sales = [
        make_sale(3, 7000, seller_name="Kiosk A"),     # no match
        make_sale(1, 30000, seller_name="Kiosk A"),    # ambiguous
        make_sale(0, 6600, online=True),               # 1 x batch 1 after fee
        make_sale(2, 11000, seller_name="Kiosk B"),    # promo combo
    ]
    return SalesLedger.from_sales(sales, context)


class TestSalesLedger:
    """Test suite for the ledger."""

    def test_sorted_by_time(self, ledger):
        minutes = [s.sale.when.minute for s in ledger]
        assert minutes == [0, 1, 2, 3]

    def test_stable_for_equal_timestamps(self, context, make_sale):
        sales = [
            make_sale(5, 6000, sale_id="first"),
            make_sale(5, 6000, sale_id="second"),
        ]
        ledger = SalesLedger.from_sales(sales, context)
        assert [s.sale.sale_id for s in ledger] == ["first", "second"]

    def test_queries(self, ledger):
        assert len(ledger) == 4
        assert ledger.count(CandidateKind.PRECISE) == 2
        assert len(ledger.ambiguous()) == 1
        assert len(ledger.unresolved()) == 1
        assert len(ledger.unmatched()) == 1
        assert len(ledger.settled()) == 2

    def test_precise_sales_are_settled(self, ledger):
        online = ledger.sales[0]
        assert online.is_resolved
        assert online.decoding() == "1 x batch 1"

    def test_shared_cache(self, context, make_sale):
        cache = PricingCandidateCache(context)
        sales = [make_sale(i, 6000) for i in range(5)]
        SalesLedger.from_sales(sales, context, cache)
        assert cache.misses == 1
        assert cache.hits == 4

    def test_empty(self, context):
        ledger = SalesLedger.from_sales([], context)
        assert len(ledger) == 0
        assert ledger.export_rows() == []

    def test_export_rows(self, ledger):
        rows = ledger.export_rows()
        assert len(rows) == 4
        assert all(len(row) == len(EXPORT_HEADER) for row in rows)

        online, ambiguous, combo, unmatched = rows
        assert online[3] == "66.00"
        assert online[5] == NA
        assert online[-2:] == ["yes", "1 x batch 1"]
        assert ambiguous[-2:] == ["no", "6 x promotional batch or 5 x batch 1"]
        assert combo[-1] == "1 x promotional batch + 1 x batch 1"
        assert unmatched[-2:] == ["no", "no solution"]


class TestAnnotatedSale:
    """Resolution and narrowing rules."""

    def test_resolve_ambiguous(self, ledger):
        sp = ledger.unresolved()[0]
        match = sorted(sp.candidate.matches, key=lambda m: m.describe())[0]

        sp.resolve(match)

        assert sp.is_resolved
        assert not sp.is_pending
        assert sp.candidate.is_ambiguous
        assert ledger.unresolved() == []
        assert len(ledger.ambiguous()) == 1

    def test_resolve_twice_fails(self, ledger):
        sp = ledger.unresolved()[0]
        match = next(iter(sp.candidate.matches))
        sp.resolve(match)
        with pytest.raises(ValueError):
            sp.resolve(match)

    def test_resolve_with_foreign_match_fails(self, ledger):
        precise = ledger.sales[0]
        sp = ledger.unresolved()[0]
        with pytest.raises(ValueError):
            sp.resolve(precise.resolved)
        with pytest.raises(ValueError):
            precise.resolve(precise.resolved)

    def test_narrow_rules(self, context, make_sale):
        sp = AnnotatedSale(make_sale(0, 30000), PricingCandidateCache(context).get(30000))
        matches = sp.candidate.matches

        assert sp.narrow(matches) is False
        with pytest.raises(ValueError):
            sp.narrow(list(matches)[:1])
        with pytest.raises(ValueError):
            sp.narrow([])

    def test_settled_decoding_parses_back(self, ledger):
        for sp in ledger.settled():
            row = sp.export_row()
            assert parse_match_description(row[-1], ledger.context.catalog) == sp.resolved

    def test_to_dict(self, ledger):
        data = ledger.sales[0].to_dict()
        assert data["kind"] == "online"
        assert data["real_price_cents"] == 6000
        assert data["resolved"] is True
        assert data["tickets"] == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
