"""Read-only snapshot of the store, product and purchase collections.

The records are owned by the remote data store; this module only reads an
exported snapshot so the analyses can run against it.
"""

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from .models import Product, Purchase, Store

_LOGGER = logging.getLogger(__name__)


class SnapshotError(Exception):
    """Raised when a snapshot cannot be read."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        super().__init__(f"Cannot read snapshot '{path}': {reason}")


class Snapshot(BaseModel):
    """The three entity collections at one point in time."""

    stores: list[Store] = Field(default_factory=list)
    products: list[Product] = Field(default_factory=list)
    purchases: list[Purchase] = Field(default_factory=list)

    def purchases_for(self, product_id: int) -> list[Purchase]:
        """All purchases of a product."""
        return [purchase for purchase in self.purchases if purchase.product_id == product_id]

    def get_product(self, product_id: int) -> Product | None:
        """Look up a product by id."""
        return next((product for product in self.products if product.id == product_id), None)


def load_snapshot(path: Path) -> Snapshot:
    """Load a snapshot from a JSON file.

    Args:
        path: JSON document with "stores", "products" and "purchases" lists

    Returns:
        The validated Snapshot

    Raises:
        SnapshotError: If the file is missing, malformed or fails validation
    """
    if not path.exists():
        raise SnapshotError(path, "file not found")

    try:
        with open(path) as f:
            data: Any = json.load(f)
    except json.JSONDecodeError as e:
        raise SnapshotError(path, f"invalid JSON ({e})") from e

    try:
        snapshot = Snapshot.model_validate(data)
    except ValidationError as e:
        raise SnapshotError(path, f"{e.error_count()} invalid record(s)\n{e}") from e

    _LOGGER.debug(
        "Loaded snapshot %s: %d stores, %d products, %d purchases",
        path,
        len(snapshot.stores),
        len(snapshot.products),
        len(snapshot.purchases),
    )
    return snapshot


def save_snapshot(snapshot: Snapshot, path: Path) -> None:
    """Write a snapshot as JSON."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        f.write(snapshot.model_dump_json(indent=2))
