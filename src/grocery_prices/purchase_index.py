"""Grouping views over a purchase snapshot."""

import logging
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field

from .models import Country, Product, Purchase, Store

_LOGGER = logging.getLogger(__name__)


@dataclass
class PurchaseIndex:
    """Purchases grouped by product, by (product, store) and by (product, country).

    Buckets keep the input order; consumers sort as needed. The country
    grouping needs the purchase's store, so purchases pointing at an unknown
    store are left out of that grouping only.
    """

    by_product: dict[int, list[Purchase]] = field(default_factory=dict)
    by_product_store: dict[tuple[int, int], list[Purchase]] = field(default_factory=dict)
    by_product_country: dict[tuple[int, Country], list[Purchase]] = field(default_factory=dict)
    unjoined: list[Purchase] = field(default_factory=list)

    @property
    def product_ids(self) -> list[int]:
        """Products with at least one purchase, ascending."""
        return sorted(self.by_product)

    def stores_for(self, product_id: int) -> list[int]:
        """Stores with at least one purchase of a product, ascending."""
        return sorted(store_id for pid, store_id in self.by_product_store if pid == product_id)


def build_index(purchases: Iterable[Purchase], stores: Iterable[Store] = ()) -> PurchaseIndex:
    """Group purchases along every dimension in a single pass.

    Args:
        purchases: Purchase snapshot
        stores: Store snapshot, used to resolve each purchase's country

    Returns:
        A fresh PurchaseIndex
    """
    store_country = {store.id: store.country for store in stores}

    by_product: dict[int, list[Purchase]] = defaultdict(list)
    by_product_store: dict[tuple[int, int], list[Purchase]] = defaultdict(list)
    by_product_country: dict[tuple[int, Country], list[Purchase]] = defaultdict(list)
    unjoined: list[Purchase] = []

    for purchase in purchases:
        by_product[purchase.product_id].append(purchase)
        by_product_store[(purchase.product_id, purchase.store_id)].append(purchase)

        country = store_country.get(purchase.store_id)
        if country is None:
            unjoined.append(purchase)
            continue
        by_product_country[(purchase.product_id, country)].append(purchase)

    if unjoined:
        _LOGGER.debug("%d purchase(s) reference unknown stores", len(unjoined))

    return PurchaseIndex(
        by_product=dict(by_product),
        by_product_store=dict(by_product_store),
        by_product_country=dict(by_product_country),
        unjoined=unjoined,
    )


def purchase_order_key(purchase: Purchase) -> tuple[int, int]:
    """Chronological order; equal timestamps fall back to the purchase id."""
    return (purchase.timestamp, purchase.id)


def latest_purchase(purchases: Iterable[Purchase]) -> Purchase | None:
    """Most recent purchase; the highest id wins a timestamp tie."""
    return max(purchases, key=purchase_order_key, default=None)


def filter_by_stores(
    purchases: Iterable[Purchase],
    store_ids: Iterable[int] | None = None,
) -> list[Purchase]:
    """Keep purchases made at the selected stores.

    An empty or missing selection keeps every purchase.
    """
    selected = set(store_ids or ())
    if not selected:
        return list(purchases)
    return [purchase for purchase in purchases if purchase.store_id in selected]


def priced_purchases(purchases: Iterable[Purchase]) -> list[Purchase]:
    """Purchases that have a unit price (positive quantity)."""
    return [purchase for purchase in purchases if purchase.unit_price is not None]


def lookup_tables(
    products: Iterable[Product],
    stores: Iterable[Store],
) -> tuple[dict[int, Product], dict[int, Store]]:
    """Index reference data by id."""
    return {product.id: product for product in products}, {store.id: store for store in stores}
