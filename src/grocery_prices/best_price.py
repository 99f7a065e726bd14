"""Best current unit price per product per country."""

import logging
from collections import defaultdict
from collections.abc import Iterable

from .models import BestPriceByCountry, BestPriceInfo, Country, Product, Purchase, Store
from .purchase_index import build_index, latest_purchase, lookup_tables, priced_purchases
from .units import normalize

_LOGGER = logging.getLogger(__name__)


def current_store_prices(
    purchases: Iterable[Purchase],
    products: Iterable[Product],
    stores: Iterable[Store],
) -> dict[tuple[int, int], Purchase]:
    """Latest priced purchase for every joinable (product, store) pair.

    Args:
        purchases: Purchase snapshot
        products: Product snapshot
        stores: Store snapshot

    Returns:
        Mapping of (product id, store id) to the purchase holding the current price
    """
    product_map, store_map = lookup_tables(products, stores)
    index = build_index(priced_purchases(purchases), store_map.values())

    current: dict[tuple[int, int], Purchase] = {}
    skipped = 0
    for (product_id, store_id), group in index.by_product_store.items():
        if product_id not in product_map or store_id not in store_map:
            skipped += len(group)
            continue
        current[(product_id, store_id)] = latest_purchase(group)  # type: ignore[assignment]

    if skipped:
        _LOGGER.debug("Skipped %d purchase(s) with unknown product or store", skipped)
    return current


def resolve_best_prices(
    purchases: Iterable[Purchase],
    products: Iterable[Product],
    stores: Iterable[Store],
) -> dict[int, BestPriceByCountry]:
    """Find the cheapest store per product and country.

    The current price at a store is its most recent purchase (highest
    purchase id on a timestamp tie). Stores are compared on the normalized
    unit price and the lowest store id wins a price tie. The emitted unit
    price is the one actually observed, in the product's own unit.

    Products without a priced purchase in a country get no entry for it.

    Args:
        purchases: Purchase snapshot
        products: Product snapshot
        stores: Store snapshot

    Returns:
        Mapping of product id to its best price per country
    """
    products = list(products)
    stores = list(stores)
    product_map, store_map = lookup_tables(products, stores)
    current = current_store_prices(purchases, products, stores)

    candidates: dict[tuple[int, Country], list[tuple[float, int, Purchase]]] = defaultdict(list)
    for (product_id, store_id), purchase in current.items():
        product = product_map[product_id]
        store = store_map[store_id]
        normalized, _ = normalize(purchase.unit_price, product.unit)  # type: ignore[arg-type]
        candidates[(product_id, store.country)].append((normalized, store_id, purchase))

    best: dict[int, dict[str, BestPriceInfo]] = defaultdict(dict)
    for (product_id, country), options in sorted(
        candidates.items(), key=lambda item: (item[0][0], item[0][1].value)
    ):
        _, store_id, purchase = min(options, key=lambda option: (option[0], option[1]))
        product = product_map[product_id]
        info = BestPriceInfo(
            product_id=product_id,
            store_id=store_id,
            store_name=store_map[store_id].name,
            unit_price=purchase.unit_price,  # type: ignore[arg-type]
            unit=product.unit,
            purchase_id=purchase.id,
            timestamp=purchase.timestamp,
        )
        best[product_id][country.value] = info

    return {product_id: BestPriceByCountry(**infos) for product_id, infos in best.items()}
