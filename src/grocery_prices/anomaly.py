"""Plausibility check for a price that is being entered."""

import logging
from collections.abc import Iterable

from .config import AnomalyConfig
from .models import AnomalyCheck, CandidatePurchase, Product, Purchase, Severity
from .units import normalize

_LOGGER = logging.getLogger(__name__)


class PriceAnomalyGuard:
    """Flags candidate prices that look like typos or outliers.

    With enough history for the product the candidate's unit price is
    compared to the historical mean: above the block threshold it is
    refused, above the warn threshold it is flagged. With sparse history the
    price is compared to fixed per-unit ceilings and floors, which only ever
    warn.
    """

    def __init__(self, thresholds: AnomalyConfig | None = None):
        self.thresholds = thresholds or AnomalyConfig()

    def evaluate(
        self,
        candidate: CandidatePurchase,
        history: Iterable[Purchase],
        products: Iterable[Product] = (),
    ) -> AnomalyCheck:
        """Classify a candidate purchase.

        The caller guarantees a positive, finite price and quantity.

        Args:
            candidate: Purchase being entered
            history: Known purchases; only those of the same product are used
            products: Product snapshot, needed for the unit in sparse mode

        Returns:
            AnomalyCheck with severity and a human-readable message
        """
        unit_prices = [
            purchase.unit_price
            for purchase in history
            if purchase.product_id == candidate.product_id and purchase.unit_price is not None
        ]

        if len(unit_prices) >= self.thresholds.min_samples:
            mean = sum(unit_prices) / len(unit_prices)
            if mean > 0:
                return self._check_deviation(candidate.unit_price, mean, len(unit_prices))
            _LOGGER.debug(
                "Mean unit price of product %s is zero, using absolute thresholds",
                candidate.product_id,
            )

        product = next((p for p in products if p.id == candidate.product_id), None)
        if product is None:
            return AnomalyCheck(
                mode="absolute",
                unit_price=candidate.unit_price,
                sample_count=len(unit_prices),
            )
        return self._check_absolute(candidate.unit_price, product, len(unit_prices))

    def _check_deviation(self, unit_price: float, mean: float, samples: int) -> AnomalyCheck:
        """Compare a unit price with the historical mean."""
        deviation = abs(unit_price - mean) / mean * 100
        block = self.thresholds.block_deviation_pct
        warn = self.thresholds.warn_deviation_pct

        severity = Severity.NONE
        message = ""
        if deviation > block:
            severity = Severity.BLOCK
            message = (
                f"Unit price €{unit_price:.2f} deviates more than {block:g}% "
                f"from the average (€{mean:.2f})."
            )
        elif deviation > warn:
            severity = Severity.WARN
            message = (
                f"Unit price €{unit_price:.2f} deviates more than {warn:g}% "
                f"from the average (€{mean:.2f})."
            )

        return AnomalyCheck(
            severity=severity,
            message=message,
            mode="statistical",
            unit_price=unit_price,
            reference_price=mean,
            deviation_pct=deviation,
            sample_count=samples,
        )

    def _check_absolute(self, unit_price: float, product: Product, samples: int) -> AnomalyCheck:
        """Compare a unit price with the fixed ceiling and floor of its unit."""
        price, unit = normalize(unit_price, product.unit)
        ceiling = self.thresholds.ceilings.get(unit)
        floor = self.thresholds.floors.get(unit)

        severity = Severity.NONE
        message = ""
        reference = None
        if ceiling is not None and price > ceiling:
            severity = Severity.WARN
            reference = ceiling
            message = f"Price €{price:.2f} per {unit.label} looks unusually high. Is this correct?"
        elif floor is not None and 0 < price < floor:
            severity = Severity.WARN
            reference = floor
            message = f"Price €{price:.2f} per {unit.label} looks unusually low. Is this correct?"

        return AnomalyCheck(
            severity=severity,
            message=message,
            mode="absolute",
            unit_price=price,
            reference_price=reference,
            sample_count=samples,
        )
