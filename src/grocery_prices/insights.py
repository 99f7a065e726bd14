"""Overview analyses: stale prices, single-store products, spending and volumes."""

import time
from collections import defaultdict
from collections.abc import Iterable, Mapping

from .models import (
    BestPriceByCountry,
    Country,
    DashboardStats,
    Product,
    ProductVolume,
    ProductVolumes,
    Purchase,
    SingleStoreProduct,
    StalePrice,
    Store,
    StoreSpending,
)
from .purchase_index import build_index, filter_by_stores, latest_purchase, lookup_tables

NANOSECONDS_PER_DAY = 24 * 60 * 60 * 1_000_000_000


def stale_prices(
    purchases: Iterable[Purchase],
    products: Iterable[Product],
    stores: Iterable[Store],
    now_ns: int | None = None,
    max_age_days: float = 14,
    store_ids: Iterable[int] | None = None,
) -> list[StalePrice]:
    """Products whose most recent purchase is older than ``max_age_days``.

    Args:
        purchases: Purchase snapshot
        products: Product snapshot
        stores: Store snapshot
        now_ns: Reference time in nanoseconds, defaults to the current time
        max_age_days: Freshness window in days
        store_ids: Optional store selection

    Returns:
        Stale products, oldest first
    """
    now_ns = time.time_ns() if now_ns is None else now_ns
    product_map, store_map = lookup_tables(products, stores)
    index = build_index(filter_by_stores(purchases, store_ids))

    stale: list[StalePrice] = []
    for product_id in index.product_ids:
        latest = latest_purchase(index.by_product[product_id])
        product = product_map.get(product_id)
        store = store_map.get(latest.store_id) if latest else None
        if latest is None or product is None or store is None:
            continue

        age_ns = now_ns - latest.timestamp
        if age_ns <= max_age_days * NANOSECONDS_PER_DAY:
            continue

        stale.append(
            StalePrice(
                product_id=product_id,
                product_name=product.display_name,
                store_id=store.id,
                store_name=store.display_name,
                country=store.country,
                last_timestamp=latest.timestamp,
                age_days=round(age_ns / NANOSECONDS_PER_DAY, 1),
            )
        )

    return sorted(stale, key=lambda entry: (entry.last_timestamp, entry.product_id))


def single_store_products(
    purchases: Iterable[Purchase],
    products: Iterable[Product],
    stores: Iterable[Store],
    store_ids: Iterable[int] | None = None,
) -> list[SingleStoreProduct]:
    """Products that have only ever been bought at one store."""
    product_map, store_map = lookup_tables(products, stores)
    index = build_index(filter_by_stores(purchases, store_ids))

    result: list[SingleStoreProduct] = []
    for product_id, group in index.by_product.items():
        if len(index.stores_for(product_id)) != 1:
            continue
        latest = latest_purchase(group)
        product = product_map.get(product_id)
        store = store_map.get(latest.store_id) if latest else None
        if latest is None or product is None or store is None:
            continue

        result.append(
            SingleStoreProduct(
                product_id=product_id,
                product_name=product.display_name,
                store_id=store.id,
                store_name=store.display_name,
                country=store.country,
                purchase_count=len(group),
                last_timestamp=latest.timestamp,
            )
        )

    return sorted(result, key=lambda entry: (entry.product_name.lower(), entry.product_id))


def spending_per_store(
    purchases: Iterable[Purchase],
    stores: Iterable[Store],
) -> list[StoreSpending]:
    """Total spent and number of purchases per store, biggest total first."""
    store_map = {store.id: store for store in stores}
    totals: dict[int, float] = defaultdict(float)
    counts: dict[int, int] = defaultdict(int)

    for purchase in purchases:
        if purchase.store_id not in store_map:
            continue
        totals[purchase.store_id] += purchase.price
        counts[purchase.store_id] += 1

    spending = [
        StoreSpending(
            store_id=store_id,
            store_name=store_map[store_id].display_name,
            country=store_map[store_id].country,
            total=round(total, 2),
            purchase_count=counts[store_id],
        )
        for store_id, total in totals.items()
    ]
    return sorted(spending, key=lambda entry: (-entry.total, entry.store_id))


def product_volumes(
    purchases: Iterable[Purchase],
    products: Iterable[Product],
    limit: int = 10,
) -> ProductVolumes:
    """Most and least purchased products by total quantity."""
    product_map = {product.id: product for product in products}
    totals: dict[int, float] = defaultdict(float)

    for purchase in purchases:
        if purchase.product_id in product_map:
            totals[purchase.product_id] += purchase.quantity

    volumes = [
        ProductVolume(
            product_id=product_id,
            product_name=product_map[product_id].display_name,
            unit=product_map[product_id].unit,
            total_quantity=total,
        )
        for product_id, total in totals.items()
    ]

    return ProductVolumes(
        top=sorted(volumes, key=lambda v: (-v.total_quantity, v.product_id))[:limit],
        bottom=sorted(volumes, key=lambda v: (v.total_quantity, v.product_id))[:limit],
    )


def dashboard_stats(
    purchases: Iterable[Purchase],
    products: Iterable[Product],
    stores: Iterable[Store],
    best_prices: Mapping[int, BestPriceByCountry],
) -> DashboardStats:
    """Headline counts for the overview page."""
    per_country = {
        country.value: sum(1 for entry in best_prices.values() if entry.get(country) is not None)
        for country in Country
    }
    return DashboardStats(
        purchase_count=len(list(purchases)),
        product_count=len(list(products)),
        store_count=len(list(stores)),
        products_with_price=sum(1 for entry in best_prices.values() if entry.countries),
        best_prices_per_country=per_country,
    )
