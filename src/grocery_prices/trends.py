"""Price trends between the first and last recorded unit price."""

import logging
from collections.abc import Iterable

from .models import PriceTrend, Product, Purchase, Store
from .purchase_index import build_index, lookup_tables, priced_purchases, purchase_order_key

_LOGGER = logging.getLogger(__name__)

TREND_ORDERS = ("magnitude", "increase", "decrease", "name")


def compute_trends(
    purchases: Iterable[Purchase],
    products: Iterable[Product],
    stores: Iterable[Store],
    min_samples: int = 2,
    per_store: bool = True,
    exclude_unchanged: bool = False,
) -> list[PriceTrend]:
    """Compute the percentage change of the unit price per purchase group.

    Only the first and last purchase of a group count; anything in between
    is ignored. Groups whose first unit price is zero are skipped.

    Args:
        purchases: Purchase snapshot
        products: Product snapshot
        stores: Store snapshot
        min_samples: Minimum number of priced purchases in a group
        per_store: Group by (product, store); otherwise by product only
        exclude_unchanged: Drop groups without any change

    Returns:
        Trends ordered by product id, then store id
    """
    product_map, store_map = lookup_tables(products, stores)
    index = build_index(priced_purchases(purchases), store_map.values())

    groups: dict[tuple[int, int | None], list[Purchase]]
    if per_store:
        groups = dict(index.by_product_store)
    else:
        groups = {(product_id, None): group for product_id, group in index.by_product.items()}

    trends: list[PriceTrend] = []
    for (product_id, store_id), group in groups.items():
        product = product_map.get(product_id)
        if product is None:
            continue
        store = store_map.get(store_id) if store_id is not None else None
        if store_id is not None and store is None:
            continue
        if len(group) < min_samples:
            continue

        ordered = sorted(group, key=purchase_order_key)
        first, last = ordered[0], ordered[-1]
        first_price = first.unit_price
        last_price = last.unit_price
        if not first_price:
            _LOGGER.debug("Skipping trend for product %s: zero baseline price", product_id)
            continue

        change = (last_price - first_price) / first_price * 100  # type: ignore[operator]
        if exclude_unchanged and change == 0:
            continue

        trends.append(
            PriceTrend(
                product_id=product_id,
                product_name=product.display_name,
                store_id=store_id,
                store_name=store.name if store else None,
                first_unit_price=first_price,
                last_unit_price=last_price,  # type: ignore[arg-type]
                percent_change=change,
                sample_count=len(group),
                first_timestamp=first.timestamp,
                last_timestamp=last.timestamp,
            )
        )

    trends.sort(key=lambda trend: (trend.product_id, trend.store_id or 0))
    return trends


def rank_trends(
    trends: Iterable[PriceTrend],
    order: str = "magnitude",
    limit: int | None = None,
) -> list[PriceTrend]:
    """Order trends for display.

    Args:
        trends: Trends to order
        order: "magnitude", "increase", "decrease" or "name"
        limit: Optional maximum number of trends to return

    Returns:
        Ordered trends
    """
    if order not in TREND_ORDERS:
        raise ValueError(f"Unknown trend order '{order}', expected one of {', '.join(TREND_ORDERS)}")

    def tie_break(trend: PriceTrend) -> tuple[int, int]:
        return (trend.product_id, trend.store_id or 0)

    if order == "magnitude":
        ranked = sorted(trends, key=lambda t: (-abs(t.percent_change), tie_break(t)))
    elif order == "increase":
        ranked = sorted(trends, key=lambda t: (-t.percent_change, tie_break(t)))
    elif order == "decrease":
        ranked = sorted(trends, key=lambda t: (t.percent_change, tie_break(t)))
    else:
        ranked = sorted(trends, key=lambda t: (t.product_name.lower(), tie_break(t)))

    if limit is not None:
        return ranked[:limit]
    return ranked
