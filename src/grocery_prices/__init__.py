"""Grocery Prices - Community price comparison and plausibility checks."""

from .analytics import PriceAnalytics
from .anomaly import PriceAnomalyGuard
from .best_price import current_store_prices, resolve_best_prices
from .comparison import compare_stores, percent_gap
from .config import AnomalyConfig, ConfigManager, InsightsConfig
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
    BestPriceInfo,
    CandidatePurchase,
    Country,
    DashboardStats,
    PriceTrend,
    Product,
    ProductVolume,
    ProductVolumes,
    Purchase,
    Severity,
    SingleStoreProduct,
    StalePrice,
    Store,
    StoreComparison,
    StorePriceEntry,
    StoreSpending,
    Unit,
)
from .output_formatter import OutputFormatter
from .purchase_index import PurchaseIndex, build_index, filter_by_stores, latest_purchase
from .snapshot import Snapshot, SnapshotError, load_snapshot
from .trends import compute_trends, rank_trends
from .units import UnknownUnitError, normalize

__version__ = "0.1.0"

__all__ = [
    "AnomalyCheck",
    "AnomalyConfig",
    "BestPriceByCountry",
    "BestPriceInfo",
    "build_index",
    "CandidatePurchase",
    "compare_stores",
    "compute_trends",
    "ConfigManager",
    "Country",
    "current_store_prices",
    "dashboard_stats",
    "DashboardStats",
    "filter_by_stores",
    "InsightsConfig",
    "latest_purchase",
    "load_snapshot",
    "normalize",
    "OutputFormatter",
    "percent_gap",
    "PriceAnalytics",
    "PriceAnomalyGuard",
    "PriceTrend",
    "Product",
    "product_volumes",
    "ProductVolume",
    "ProductVolumes",
    "Purchase",
    "PurchaseIndex",
    "rank_trends",
    "resolve_best_prices",
    "Severity",
    "single_store_products",
    "SingleStoreProduct",
    "Snapshot",
    "SnapshotError",
    "spending_per_store",
    "stale_prices",
    "StalePrice",
    "Store",
    "StoreComparison",
    "StorePriceEntry",
    "StoreSpending",
    "Unit",
    "UnknownUnitError",
]
