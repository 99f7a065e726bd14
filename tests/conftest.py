"""Shared test fixtures for Grocery Prices."""

import pytest

from grocery_prices.models import Country, Product, Purchase, Store, Unit
from grocery_prices.snapshot import Snapshot, save_snapshot

DAY_NS = 24 * 60 * 60 * 1_000_000_000
BASE_TS = 1_700_000_000 * 1_000_000_000


def ts(day: int) -> int:
    """Nanosecond timestamp ``day`` days after the base time."""
    return BASE_TS + day * DAY_NS


class PurchaseFactory:
    """Builds purchases with increasing ids."""

    def __init__(self):
        self.next_id = 1

    def __call__(
        self,
        product_id: int,
        store_id: int,
        price: float,
        quantity: float = 1.0,
        day: int = 0,
        purchase_id: int | None = None,
    ) -> Purchase:
        if purchase_id is None:
            purchase_id = self.next_id
        self.next_id = max(self.next_id, purchase_id) + 1
        return Purchase(
            id=purchase_id,
            product_id=product_id,
            store_id=store_id,
            receipt_description=f"item {product_id}",
            price=price,
            quantity=quantity,
            timestamp=ts(day),
        )


@pytest.fixture
def make_purchase():
    """Factory for purchases."""
    return PurchaseFactory()


@pytest.fixture
def stores():
    """Two Dutch stores and two Spanish stores."""
    return [
        Store(id=1, name="Albert Heijn", locality="Utrecht", country=Country.NL),
        Store(id=2, name="Jumbo", locality="Utrecht", country=Country.NL),
        Store(id=3, name="Mercadona", locality="Valencia", country=Country.ES),
        Store(id=4, name="Consum", locality="Valencia", country=Country.ES),
    ]


@pytest.fixture
def products():
    """Products across the different units."""
    return [
        Product(id=10, name="Coffee", brand="Douwe Egberts", unit=Unit.KILOGRAM),
        Product(id=11, name="Cheese", brand="n.v.t.", unit=Unit.GRAM),
        Product(id=12, name="Olive oil", brand="Carbonell", unit=Unit.MILLILITER),
        Product(id=13, name="Bananas", unit=Unit.PIECE),
        Product(id=14, name="Toilet paper", brand="Page", unit=Unit.ROLL),
    ]


@pytest.fixture
def purchases(make_purchase):
    """A small mixed snapshot of purchases."""
    return [
        # Coffee in NL: Jumbo is cheaper and more recent
        make_purchase(10, 1, 10.00, 1.0, day=0),
        make_purchase(10, 2, 9.00, 1.0, day=1),
        make_purchase(10, 1, 12.00, 1.0, day=5),
        # Cheese by the gram in NL and ES
        make_purchase(11, 1, 4.50, 300, day=2),
        make_purchase(11, 3, 3.00, 250, day=3),
        # Olive oil only in ES, two stores
        make_purchase(12, 3, 6.00, 750, day=1),
        make_purchase(12, 4, 5.00, 500, day=2),
        # Bananas only at one store
        make_purchase(13, 2, 1.20, 6, day=4),
        make_purchase(13, 2, 1.50, 6, day=6),
    ]


@pytest.fixture
def snapshot(stores, products, purchases):
    """Snapshot built from the shared fixtures."""
    return Snapshot(stores=stores, products=products, purchases=purchases)


@pytest.fixture
def snapshot_file(tmp_path, snapshot):
    """Snapshot written to a temporary JSON file."""
    path = tmp_path / "snapshot.json"
    save_snapshot(snapshot, path)
    return path
