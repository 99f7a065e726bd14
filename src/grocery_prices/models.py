"""Core data models for Grocery Prices."""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field

NOT_APPLICABLE_BRAND = "n.v.t."


class Country(str, Enum):
    """Countries a store can be located in."""

    NL = "NL"
    ES = "ES"


class Unit(str, Enum):
    """Standard units a product is sold in."""

    PIECE = "PIECE"
    METER = "METER"
    KILOGRAM = "KILOGRAM"
    GRAM = "GRAM"
    LITER = "LITER"
    MILLILITER = "MILLILITER"
    ROLL = "ROLL"
    TABLET = "TABLET"

    @classmethod
    def _missing_(cls, value):
        if not isinstance(value, str):
            return None
        key = value.strip().upper()
        key = _UNIT_ALIASES.get(key, key)
        for member in cls:
            if member.value == key:
                return member
        return None

    @property
    def label(self) -> str:
        """Short label used when printing prices per unit."""
        return _UNIT_LABELS[self]


# Dutch labels used by the purchase backend
_UNIT_ALIASES = {
    "STUK": "PIECE",
    "ROL": "ROLL",
}

_UNIT_LABELS = {
    Unit.PIECE: "piece",
    Unit.METER: "meter",
    Unit.KILOGRAM: "kg",
    Unit.GRAM: "gram",
    Unit.LITER: "liter",
    Unit.MILLILITER: "ml",
    Unit.ROLL: "roll",
    Unit.TABLET: "tablet",
}


def timestamp_to_datetime(timestamp: int) -> datetime:
    """Convert a nanosecond epoch timestamp to an aware UTC datetime."""
    return datetime.fromtimestamp(timestamp / 1_000_000_000, tz=timezone.utc)


class Store(BaseModel):
    """A store where purchases are made."""

    id: int
    name: str
    locality: str = ""
    country: Country

    @property
    def display_name(self) -> str:
        """Store name with its locality."""
        if not self.locality:
            return self.name
        return f"{self.name} ({self.locality})"


class Product(BaseModel):
    """A product that can be purchased."""

    id: int
    name: str
    brand: str = NOT_APPLICABLE_BRAND
    unit: Unit

    @property
    def display_name(self) -> str:
        """Product name with its brand, unless the brand does not apply."""
        brand = self.brand.strip()
        if not brand or brand.lower() == NOT_APPLICABLE_BRAND:
            return self.name
        return f"{self.name} ({brand})"


class Purchase(BaseModel):
    """A logged purchase of a product at a store."""

    id: int
    product_id: int
    store_id: int
    receipt_description: str = ""
    price: float = Field(ge=0, allow_inf_nan=False)
    quantity: float = Field(allow_inf_nan=False)
    timestamp: int

    @property
    def unit_price(self) -> float | None:
        """Price per unit, or None when the quantity is not positive."""
        if self.quantity <= 0:
            return None
        return self.price / self.quantity

    @property
    def purchased_at(self) -> datetime:
        """Purchase time as a datetime."""
        return timestamp_to_datetime(self.timestamp)


class BestPriceInfo(BaseModel):
    """Lowest current unit price for a product within one country."""

    product_id: int
    store_id: int
    store_name: str
    unit_price: float
    unit: Unit
    purchase_id: int
    timestamp: int


class BestPriceByCountry(BaseModel):
    """Best prices for one product, keyed by country."""

    NL: BestPriceInfo | None = None
    ES: BestPriceInfo | None = None

    def get(self, country: Country | str) -> BestPriceInfo | None:
        """Get the best price for a country."""
        return getattr(self, Country(country).value)

    @property
    def countries(self) -> list[Country]:
        """Countries that have a best price."""
        return [country for country in Country if self.get(country) is not None]


class PriceTrend(BaseModel):
    """Change between the first and last unit price of a purchase group."""

    product_id: int
    product_name: str
    store_id: int | None = None
    store_name: str | None = None
    first_unit_price: float
    last_unit_price: float
    percent_change: float
    sample_count: int
    first_timestamp: int
    last_timestamp: int

    @property
    def direction(self) -> str:
        """'up', 'down' or 'flat'."""
        if self.percent_change > 0:
            return "up"
        if self.percent_change < 0:
            return "down"
        return "flat"


class StorePriceEntry(BaseModel):
    """Current normalized unit price of a product at one store."""

    store_id: int
    store_name: str
    country: Country
    unit_price: float
    normalized_unit_price: float
    display_unit: Unit
    purchase_id: int
    timestamp: int


class StoreComparison(BaseModel):
    """Stores ranked by current price for one product."""

    product_id: int
    product_name: str
    entries: list[StorePriceEntry] = Field(default_factory=list)
    store_count: int = 0
    percent_gap: float | None = None
    worth_comparing: bool = False

    @property
    def cheapest_store_id(self) -> int | None:
        """Store with the lowest current price."""
        if not self.entries:
            return None
        return self.entries[0].store_id


class Severity(str, Enum):
    """Outcome of a price plausibility check."""

    NONE = "none"
    WARN = "warn"
    BLOCK = "block"


class CandidatePurchase(BaseModel):
    """A purchase being entered, before it is stored."""

    product_id: int
    price: float = Field(ge=0, allow_inf_nan=False)
    quantity: float = Field(gt=0, allow_inf_nan=False)

    @property
    def unit_price(self) -> float:
        """Price per unit of the candidate."""
        return self.price / self.quantity


class AnomalyCheck(BaseModel):
    """Result of checking a candidate price against history."""

    severity: Severity = Severity.NONE
    message: str = ""
    mode: str = "statistical"
    unit_price: float | None = None
    reference_price: float | None = None
    deviation_pct: float | None = None
    sample_count: int = 0

    @property
    def blocks_submission(self) -> bool:
        """Whether the entry form should refuse the purchase."""
        return self.severity == Severity.BLOCK


class StalePrice(BaseModel):
    """A product whose latest known price is older than the freshness window."""

    product_id: int
    product_name: str
    store_id: int
    store_name: str
    country: Country
    last_timestamp: int
    age_days: float


class SingleStoreProduct(BaseModel):
    """A product that has only been priced at one store."""

    product_id: int
    product_name: str
    store_id: int
    store_name: str
    country: Country
    purchase_count: int
    last_timestamp: int


class StoreSpending(BaseModel):
    """Total spent at a store."""

    store_id: int
    store_name: str
    country: Country
    total: float
    purchase_count: int


class ProductVolume(BaseModel):
    """Total purchased quantity of a product."""

    product_id: int
    product_name: str
    unit: Unit
    total_quantity: float


class ProductVolumes(BaseModel):
    """Most and least purchased products by quantity."""

    top: list[ProductVolume] = Field(default_factory=list)
    bottom: list[ProductVolume] = Field(default_factory=list)


class DashboardStats(BaseModel):
    """Headline counts for the snapshot."""

    purchase_count: int
    product_count: int
    store_count: int
    products_with_price: int
    best_prices_per_country: dict[str, int] = Field(default_factory=dict)
