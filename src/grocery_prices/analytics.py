"""Analytics over a single snapshot of the purchase database."""

from .anomaly import PriceAnomalyGuard
from .best_price import resolve_best_prices
from .comparison import compare_stores
from .config import AnomalyConfig, InsightsConfig
from .insights import (
    dashboard_stats,
    product_volumes,
    single_store_products,
    spending_per_store,
    stale_prices,
)
from .models import (
    AnomalyCheck,
    BestPriceByCountry,
    CandidatePurchase,
    Country,
    DashboardStats,
    PriceTrend,
    ProductVolumes,
    SingleStoreProduct,
    StalePrice,
    StoreComparison,
    StoreSpending,
)
from .purchase_index import filter_by_stores
from .snapshot import Snapshot
from .trends import compute_trends, rank_trends


class PriceAnalytics:
    """Runs every price analysis against one snapshot.

    Each call recomputes from the snapshot; nothing is cached between calls.
    """

    def __init__(
        self,
        snapshot: Snapshot,
        anomaly: AnomalyConfig | None = None,
        insights: InsightsConfig | None = None,
    ):
        self.snapshot = snapshot
        self.guard = PriceAnomalyGuard(anomaly)
        self.insights = insights or InsightsConfig()

    def best_prices(
        self,
        country: Country | None = None,
        store_ids: list[int] | None = None,
    ) -> dict[int, BestPriceByCountry]:
        """Best current price per product and country.

        Args:
            country: Only keep products priced in this country
            store_ids: Only consider purchases at these stores
        """
        best = resolve_best_prices(
            filter_by_stores(self.snapshot.purchases, store_ids),
            self.snapshot.products,
            self.snapshot.stores,
        )
        if country is None:
            return best
        return {pid: entry for pid, entry in best.items() if entry.get(country) is not None}

    def trends(
        self,
        min_samples: int = 2,
        order: str = "magnitude",
        limit: int | None = None,
        per_store: bool = True,
        exclude_unchanged: bool = False,
    ) -> list[PriceTrend]:
        """Ranked price trends."""
        trends = compute_trends(
            self.snapshot.purchases,
            self.snapshot.products,
            self.snapshot.stores,
            min_samples=min_samples,
            per_store=per_store,
            exclude_unchanged=exclude_unchanged,
        )
        return rank_trends(trends, order=order, limit=limit)

    def comparisons(
        self,
        min_gap_pct: float = 0.0,
        limit: int | None = None,
    ) -> list[StoreComparison]:
        """Store rankings for products sold at two or more stores, biggest gap first."""
        if limit is None:
            limit = self.insights.comparison_limit or None
        comparisons = compare_stores(
            self.snapshot.purchases,
            self.snapshot.products,
            self.snapshot.stores,
            limit=limit,
            min_gap_pct=min_gap_pct,
        )
        return sorted(
            (c for c in comparisons.values() if c.worth_comparing or min_gap_pct <= 0),
            key=lambda c: (-(c.percent_gap or 0.0), c.product_id),
        )

    def check_price(self, product_id: int, price: float, quantity: float) -> AnomalyCheck:
        """Check a price being entered against the product's history."""
        candidate = CandidatePurchase(product_id=product_id, price=price, quantity=quantity)
        return self.guard.evaluate(
            candidate, self.snapshot.purchases_for(product_id), self.snapshot.products
        )

    def stale_prices(
        self,
        max_age_days: float | None = None,
        store_ids: list[int] | None = None,
        now_ns: int | None = None,
    ) -> list[StalePrice]:
        """Products whose latest price is outdated."""
        return stale_prices(
            self.snapshot.purchases,
            self.snapshot.products,
            self.snapshot.stores,
            now_ns=now_ns,
            max_age_days=(
                self.insights.stale_after_days if max_age_days is None else max_age_days
            ),
            store_ids=store_ids,
        )

    def single_store_products(self, store_ids: list[int] | None = None) -> list[SingleStoreProduct]:
        """Products without a second store to compare with."""
        return single_store_products(
            self.snapshot.purchases,
            self.snapshot.products,
            self.snapshot.stores,
            store_ids=store_ids,
        )

    def spending(self) -> list[StoreSpending]:
        """Spending per store."""
        return spending_per_store(self.snapshot.purchases, self.snapshot.stores)

    def volumes(self, limit: int | None = None) -> ProductVolumes:
        """Most and least purchased products."""
        return product_volumes(
            self.snapshot.purchases,
            self.snapshot.products,
            limit=self.insights.top_products_limit if limit is None else limit,
        )

    def dashboard(self) -> DashboardStats:
        """Headline counts."""
        return dashboard_stats(
            self.snapshot.purchases,
            self.snapshot.products,
            self.snapshot.stores,
            self.best_prices(),
        )
