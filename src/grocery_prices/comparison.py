"""Store-by-store price comparison per product."""

from collections import defaultdict
from collections.abc import Iterable, Sequence

from .best_price import current_store_prices
from .models import Product, Purchase, Store, StoreComparison, StorePriceEntry
from .purchase_index import lookup_tables
from .units import normalize


def percent_gap(entries: Sequence[StorePriceEntry]) -> float | None:
    """Gap between the most and least expensive store, as % of the most expensive.

    Returns None when there is nothing to compare or the highest price is zero.
    """
    if not entries:
        return None
    prices = [entry.normalized_unit_price for entry in entries]
    highest = max(prices)
    if highest == 0:
        return None
    return (highest - min(prices)) / highest * 100


def compare_stores(
    purchases: Iterable[Purchase],
    products: Iterable[Product],
    stores: Iterable[Store],
    limit: int | None = None,
    min_gap_pct: float = 0.0,
) -> dict[int, StoreComparison]:
    """Rank the stores selling each product by their current unit price.

    Products priced at fewer than two stores are left out. Entries are
    ascending by normalized unit price, lowest store id first on a tie.

    Args:
        purchases: Purchase snapshot
        products: Product snapshot
        stores: Store snapshot
        limit: Keep only the cheapest ``limit`` stores per product
        min_gap_pct: Gap at or above which a product is worth comparing

    Returns:
        Mapping of product id to its store ranking
    """
    products = list(products)
    stores = list(stores)
    product_map, store_map = lookup_tables(products, stores)

    entries_by_product: dict[int, list[StorePriceEntry]] = defaultdict(list)
    for (product_id, store_id), purchase in current_store_prices(
        purchases, products, stores
    ).items():
        product = product_map[product_id]
        store = store_map[store_id]
        normalized, display_unit = normalize(purchase.unit_price, product.unit)  # type: ignore[arg-type]
        entries_by_product[product_id].append(
            StorePriceEntry(
                store_id=store_id,
                store_name=store.name,
                country=store.country,
                unit_price=purchase.unit_price,  # type: ignore[arg-type]
                normalized_unit_price=normalized,
                display_unit=display_unit,
                purchase_id=purchase.id,
                timestamp=purchase.timestamp,
            )
        )

    comparisons: dict[int, StoreComparison] = {}
    for product_id in sorted(entries_by_product):
        entries = entries_by_product[product_id]
        if len(entries) < 2:
            continue

        entries.sort(key=lambda entry: (entry.normalized_unit_price, entry.store_id))
        gap = percent_gap(entries)
        comparisons[product_id] = StoreComparison(
            product_id=product_id,
            product_name=product_map[product_id].display_name,
            entries=entries[:limit] if limit else entries,
            store_count=len(entries),
            percent_gap=gap,
            worth_comparing=gap is not None and gap > 0 and gap >= min_gap_pct,
        )

    return comparisons
