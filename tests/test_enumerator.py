"""
Tests for pricing candidate enumeration and the per-run cache.
"""

import pytest

from ticketrecon.models import (
    BatchCatalog,
    BatchNum,
    CandidateKind,
    Multiple,
    PromoCombo,
    SalesContext,
    TurnOfBatch,
)
from ticketrecon.reconciliation import PricingCandidateCache, enumerate_matches
from ticketrecon.reconciliation.enumerator import quantity_bound


@pytest.fixture
def catalog():
    """Promotional batch at 50.00, batch 1 at 60.00."""
    return BatchCatalog.from_prices([5000, 6000])


class TestEnumerateMatches:
    """Test suite for enumeration."""

    def test_single_ticket(self, catalog):
        matches = enumerate_matches(6000, catalog)
        assert len(matches) == 1
        (match,) = matches
        assert isinstance(match, Multiple)
        assert match.amount.batch.num == BatchNum.numbered(1)
        assert match.tickets() == 1

    def test_promo_combo(self, catalog):
        """Promotional + batch 1 is always a PromoCombo, never a TurnOfBatch (deliberate)."""
        matches = enumerate_matches(11000, catalog)
        assert len(matches) == 1
        (match,) = matches
        assert isinstance(match, PromoCombo)
        assert match.describe() == "1 x promotional batch + 1 x batch 1"
        assert not any(isinstance(m, TurnOfBatch) for m in matches)

    def test_promotional_multiple(self, catalog):
        (match,) = enumerate_matches(10000, catalog)
        assert match.describe() == "2 x promotional batch"

    def test_ambiguous_amount(self, catalog):
        """300.00 is either six promotional tickets or five batch 1 tickets."""
        matches = enumerate_matches(30000, catalog)
        assert {m.describe() for m in matches} == {"6 x promotional batch", "5 x batch 1"}

    def test_no_match(self, catalog):
        assert enumerate_matches(7000, catalog) == frozenset()

    def test_every_match_prices_exactly(self):
        catalog = BatchCatalog.from_prices([4000, 5000, 6000, 7500])
        for price in range(0, 60001, 500):
            for match in enumerate_matches(price, catalog):
                assert match.price() == price
                assert all(a.quantity >= 1 for a in match.amounts())

    def test_turn_of_batch(self):
        catalog = BatchCatalog.from_prices([4000, 5000, 6000, 6000])
        (match,) = enumerate_matches(11000, catalog)
        assert isinstance(match, TurnOfBatch)
        assert match.batch_after().num == BatchNum.numbered(2)

    def test_equal_prices_are_ambiguous(self):
        """Two batches at the same price can't be told apart by amount alone."""
        catalog = BatchCatalog.from_prices([4000, 5000, 6000, 6000])
        matches = enumerate_matches(6000, catalog)
        assert {m.describe() for m in matches} == {"1 x batch 2", "1 x batch 3"}

    def test_promo_limit(self, catalog):
        """Promotional tickets above the limit are not considered in combos."""
        unlimited = enumerate_matches(16000, catalog)
        assert "2 x promotional batch + 1 x batch 1" in {m.describe() for m in unlimited}

        limited = enumerate_matches(16000, catalog, promo_limit=1)
        assert all(not isinstance(m, PromoCombo) for m in limited)

    def test_deterministic(self, catalog):
        assert enumerate_matches(66000, catalog) == enumerate_matches(66000, catalog)

    def test_empty_catalog(self):
        assert enumerate_matches(6000, BatchCatalog.from_prices([])) == frozenset()

    def test_free_batch_does_not_explode(self):
        """A zero price is bounded by the worst-case quantity."""
        catalog = BatchCatalog.from_prices([0, 5000])
        matches = enumerate_matches(5000, catalog)
        assert Multiple in {type(m) for m in matches}
        assert all(m.tickets() <= 2 * quantity_bound(5000, catalog) for m in matches)

    def test_quantity_bound(self, catalog):
        assert quantity_bound(30000, catalog) == 7
        assert quantity_bound(100, BatchCatalog.from_prices([0, 0])) == 1


class TestPricingCandidateCache:
    """Test suite for the candidate cache."""

    @pytest.fixture
    def cache(self, context):
        return PricingCandidateCache(context)

    def test_memoises(self, cache):
        first = cache.get(30000)
        second = cache.get(30000)

        assert first is second
        assert first.kind == CandidateKind.AMBIGUOUS
        assert cache.misses == 1
        assert cache.hits == 1
        assert 30000 in cache
        assert len(cache) == 1

    def test_uses_context_promo_limit(self):
        context = SalesContext.from_config((11, 10), ["50", "60"], promo_limit=1)
        cache = PricingCandidateCache(context)
        assert cache.get(16000).is_no_match


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
