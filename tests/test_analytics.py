"""Tests for the PriceAnalytics facade."""

import pytest

from grocery_prices.analytics import PriceAnalytics
from grocery_prices.config import AnomalyConfig, InsightsConfig
from grocery_prices.models import Country, Severity


def _latest(snapshot) -> int:
    return max(p.timestamp for p in snapshot.purchases)


@pytest.fixture
def analytics(snapshot):
    """PriceAnalytics over the shared snapshot."""
    return PriceAnalytics(snapshot)


class TestBestPrices:
    """Tests for best price lookups."""

    def test_all_products(self, analytics):
        """Every priced product is present."""
        best = analytics.best_prices()

        assert sorted(best) == [10, 11, 12, 13]
        assert best[10].NL.store_id == 2

    def test_country_filter(self, analytics):
        """Only products priced in the chosen country."""
        best = analytics.best_prices(country=Country.ES)

        assert sorted(best) == [11, 12]

    def test_store_selection(self, analytics):
        """Purchases at other stores are ignored."""
        best = analytics.best_prices(store_ids=[1])

        assert sorted(best) == [10, 11]
        assert best[10].NL.unit_price == 12.00
        assert best[10].ES is None


class TestTrends:
    """Tests for ranked trends."""

    def test_ranked_by_magnitude(self, analytics):
        """Biggest change first."""
        trends = analytics.trends()

        assert [(t.product_id, t.store_id) for t in trends] == [(13, 2), (10, 1)]

    def test_limit(self, analytics):
        """Limit the number of rows."""
        assert len(analytics.trends(limit=1)) == 1

    def test_per_product(self, analytics):
        """Combining stores gives one trend per product."""
        trends = analytics.trends(per_store=False)

        assert sorted(t.product_id for t in trends) == [10, 11, 12, 13]
        assert all(t.store_id is None for t in trends)


class TestComparisons:
    """Tests for store comparisons."""

    def test_sorted_by_gap(self, analytics):
        """Biggest gap first, product id on a tie."""
        comparisons = analytics.comparisons()

        assert [c.product_id for c in comparisons] == [10, 11, 12]
        assert comparisons[0].percent_gap == pytest.approx(25.0)

    def test_min_gap(self, analytics):
        """Products below the minimum gap are left out."""
        comparisons = analytics.comparisons(min_gap_pct=21)

        assert [c.product_id for c in comparisons] == [10]

    def test_limit_keeps_gap(self, analytics):
        """Limiting entries does not change the gap."""
        comparisons = analytics.comparisons(limit=1)

        coffee = comparisons[0]
        assert len(coffee.entries) == 1
        assert coffee.store_count == 2
        assert coffee.percent_gap == pytest.approx(25.0)

    def test_configured_limit(self, snapshot):
        """Default entry limit comes from configuration."""
        analytics = PriceAnalytics(snapshot, insights=InsightsConfig(comparison_limit=1))

        assert all(len(c.entries) == 1 for c in analytics.comparisons())


class TestCheckPrice:
    """Tests for price checks."""

    def test_block(self, analytics):
        """A tenfold coffee price is blocked."""
        result = analytics.check_price(10, 100.00, 1)

        assert result.severity == Severity.BLOCK
        assert result.sample_count == 3

    def test_plausible(self, analytics):
        """A price near the mean passes."""
        assert analytics.check_price(10, 10.50, 1).severity == Severity.NONE

    def test_configured_min_samples(self, snapshot):
        """With a higher sample minimum the absolute check applies."""
        analytics = PriceAnalytics(snapshot, anomaly=AnomalyConfig(min_samples=5))

        result = analytics.check_price(10, 90.00, 1)

        assert result.mode == "absolute"
        assert result.severity == Severity.NONE


class TestOverviews:
    """Tests for the overview analyses."""

    def test_stale_uses_configured_window(self, snapshot):
        """Freshness window comes from configuration."""
        analytics = PriceAnalytics(snapshot, insights=InsightsConfig(stale_after_days=2))

        stale = analytics.stale_prices(now_ns=_latest(snapshot))

        assert [s.product_id for s in stale] == [12, 11]

    def test_stale_explicit_window(self, analytics):
        """An explicit window overrides configuration."""
        assert analytics.stale_prices(max_age_days=30, now_ns=_latest(analytics.snapshot)) == []

    def test_single_store(self, analytics):
        """Bananas have no second store."""
        assert [r.product_id for r in analytics.single_store_products()] == [13]

    def test_spending(self, analytics):
        """Spending covers every store."""
        assert len(analytics.spending()) == 4

    def test_volumes_configured_limit(self, snapshot):
        """List length comes from configuration."""
        analytics = PriceAnalytics(snapshot, insights=InsightsConfig(top_products_limit=1))

        volumes = analytics.volumes()

        assert [v.product_id for v in volumes.top] == [12]

    def test_dashboard(self, analytics):
        """Headline counts."""
        stats = analytics.dashboard()

        assert stats.purchase_count == 9
        assert stats.products_with_price == 4
