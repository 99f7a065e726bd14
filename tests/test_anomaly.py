"""Tests for the price plausibility check."""

import pytest

from grocery_prices.anomaly import PriceAnomalyGuard
from grocery_prices.config import AnomalyConfig
from grocery_prices.models import CandidatePurchase, Severity, Unit


@pytest.fixture
def guard():
    """Guard with the default thresholds."""
    return PriceAnomalyGuard()


@pytest.fixture
def coffee_history(make_purchase):
    """Two coffee purchases averaging €2.00 per kg."""
    return [
        make_purchase(10, 1, 1.50, 1.0, day=1),
        make_purchase(10, 2, 2.50, 1.0, day=2),
    ]


class TestStatisticalMode:
    """Tests for the deviation check against the historical mean."""

    def test_block_above_200_percent(self, guard, coffee_history, products):
        """€6.01 against a €2.00 mean deviates 200.5%."""
        candidate = CandidatePurchase(product_id=10, price=6.01, quantity=1)

        result = guard.evaluate(candidate, coffee_history, products)

        assert result.severity == Severity.BLOCK
        assert result.blocks_submission is True
        assert result.mode == "statistical"
        assert result.reference_price == pytest.approx(2.00)
        assert result.deviation_pct == pytest.approx(200.5)
        assert "200%" in result.message

    def test_warn_above_50_percent(self, guard, coffee_history, products):
        """€3.01 against a €2.00 mean deviates 50.5%."""
        candidate = CandidatePurchase(product_id=10, price=3.01, quantity=1)

        result = guard.evaluate(candidate, coffee_history, products)

        assert result.severity == Severity.WARN
        assert result.blocks_submission is False
        assert "50%" in result.message

    def test_none_within_range(self, guard, coffee_history, products):
        """€2.50 against a €2.00 mean deviates 25%."""
        candidate = CandidatePurchase(product_id=10, price=2.50, quantity=1)

        result = guard.evaluate(candidate, coffee_history, products)

        assert result.severity == Severity.NONE
        assert result.message == ""
        assert result.deviation_pct == pytest.approx(25.0)

    def test_exactly_200_percent_warns(self, guard, coffee_history, products):
        """€6.00 against a €2.00 mean is exactly 200% and not blocked."""
        candidate = CandidatePurchase(product_id=10, price=6.00, quantity=1)

        result = guard.evaluate(candidate, coffee_history, products)

        assert result.deviation_pct == pytest.approx(200.0)
        assert result.severity == Severity.WARN

    def test_exactly_50_percent_is_none(self, guard, coffee_history, products):
        """€3.00 against a €2.00 mean is exactly 50% and passes."""
        candidate = CandidatePurchase(product_id=10, price=3.00, quantity=1)

        result = guard.evaluate(candidate, coffee_history, products)

        assert result.deviation_pct == pytest.approx(50.0)
        assert result.severity == Severity.NONE

    def test_low_price_deviation(self, guard, coffee_history, products):
        """Prices far below the mean are flagged too."""
        candidate = CandidatePurchase(product_id=10, price=0.90, quantity=1)

        result = guard.evaluate(candidate, coffee_history, products)

        assert result.severity == Severity.WARN

    def test_uses_unit_price(self, guard, coffee_history, products):
        """Quantity is taken into account."""
        candidate = CandidatePurchase(product_id=10, price=5.00, quantity=2.5)

        result = guard.evaluate(candidate, coffee_history, products)

        assert result.unit_price == pytest.approx(2.00)
        assert result.severity == Severity.NONE

    def test_only_same_product_counts(self, guard, coffee_history, products, make_purchase):
        """History of other products is ignored."""
        history = [*coffee_history, make_purchase(13, 1, 100.00, 1.0)]
        candidate = CandidatePurchase(product_id=10, price=2.00, quantity=1)

        result = guard.evaluate(candidate, history, products)

        assert result.sample_count == 2
        assert result.reference_price == pytest.approx(2.00)

    def test_mean_across_all_stores(self, guard, make_purchase, products):
        """The mean spans every store and point in time."""
        history = [
            make_purchase(10, 1, 1.00, day=1),
            make_purchase(10, 3, 2.00, day=2),
            make_purchase(10, 2, 3.00, day=3),
        ]
        candidate = CandidatePurchase(product_id=10, price=2.00, quantity=1)

        result = guard.evaluate(candidate, history, products)

        assert result.reference_price == pytest.approx(2.00)
        assert result.sample_count == 3

    def test_configurable_thresholds(self, coffee_history, products):
        """Thresholds come from configuration."""
        guard = PriceAnomalyGuard(AnomalyConfig(warn_deviation_pct=10, block_deviation_pct=20))
        candidate = CandidatePurchase(product_id=10, price=2.50, quantity=1)

        result = guard.evaluate(candidate, coffee_history, products)

        assert result.severity == Severity.BLOCK

    def test_zero_mean_falls_back_to_absolute(self, guard, make_purchase, products):
        """A zero mean cannot be a baseline."""
        history = [
            make_purchase(10, 1, 0.00, day=1),
            make_purchase(10, 2, 0.00, day=2),
        ]
        candidate = CandidatePurchase(product_id=10, price=50.00, quantity=1)

        result = guard.evaluate(candidate, history, products)

        assert result.mode == "absolute"
        assert result.severity == Severity.NONE


class TestAbsoluteMode:
    """Tests for the fixed ceiling and floor check."""

    @pytest.fixture
    def single_sample(self, make_purchase):
        return [make_purchase(10, 1, 10.00, 1.0)]

    def test_above_ceiling_warns(self, guard, single_sample, products):
        """€150/kg is above the €100/kg ceiling."""
        candidate = CandidatePurchase(product_id=10, price=150.00, quantity=1)

        result = guard.evaluate(candidate, single_sample, products)

        assert result.severity == Severity.WARN
        assert result.mode == "absolute"
        assert result.reference_price == 100.0
        assert "high" in result.message

    def test_within_range(self, guard, single_sample, products):
        """€50/kg is plausible."""
        candidate = CandidatePurchase(product_id=10, price=50.00, quantity=1)

        result = guard.evaluate(candidate, single_sample, products)

        assert result.severity == Severity.NONE

    def test_below_floor_warns(self, guard, single_sample, products):
        """€0.05/kg is below the €0.10/kg floor."""
        candidate = CandidatePurchase(product_id=10, price=0.05, quantity=1)

        result = guard.evaluate(candidate, single_sample, products)

        assert result.severity == Severity.WARN
        assert "low" in result.message

    def test_free_is_not_below_floor(self, guard, products):
        """A price of zero is not flagged as too low."""
        candidate = CandidatePurchase(product_id=10, price=0.00, quantity=1)

        result = guard.evaluate(candidate, [], products)

        assert result.severity == Severity.NONE

    def test_never_blocks(self, guard, products):
        """Sparse data only ever warns."""
        candidate = CandidatePurchase(product_id=10, price=100_000.00, quantity=1)

        result = guard.evaluate(candidate, [], products)

        assert result.severity == Severity.WARN
        assert result.blocks_submission is False

    def test_grams_normalized_to_kilograms(self, guard, products):
        """A gram price is checked per kg."""
        # €30 for 200 g is €150/kg
        candidate = CandidatePurchase(product_id=11, price=30.00, quantity=200)

        result = guard.evaluate(candidate, [], products)

        assert result.severity == Severity.WARN
        assert result.unit_price == pytest.approx(150.0)
        assert "per kg" in result.message

    def test_milliliters_normalized_to_liters(self, guard, products):
        """A milliliter price is checked per liter."""
        # €5 for 1000 ml is €5/liter
        candidate = CandidatePurchase(product_id=12, price=5.00, quantity=1000)

        result = guard.evaluate(candidate, [], products)

        assert result.severity == Severity.NONE
        assert result.unit_price == pytest.approx(5.0)

    @pytest.mark.parametrize(
        ("product_id", "price", "expected"),
        [
            (13, 51.00, Severity.WARN),
            (13, 0.04, Severity.WARN),
            (13, 0.05, Severity.NONE),
            (14, 26.00, Severity.WARN),
            (14, 0.09, Severity.WARN),
            (14, 1.00, Severity.NONE),
        ],
    )
    def test_per_unit_thresholds(self, guard, products, product_id, price, expected):
        """Pieces and rolls use their own ceilings and floors."""
        candidate = CandidatePurchase(product_id=product_id, price=price, quantity=1)

        assert guard.evaluate(candidate, [], products).severity == expected

    def test_configured_ceiling(self, products):
        """Ceilings can be overridden per unit."""
        config = AnomalyConfig()
        config.ceilings[Unit.KILOGRAM] = 40.0
        guard = PriceAnomalyGuard(config)
        candidate = CandidatePurchase(product_id=10, price=50.00, quantity=1)

        assert guard.evaluate(candidate, [], products).severity == Severity.WARN

    def test_unknown_product(self, guard, products):
        """Without a product there is no unit to check against."""
        candidate = CandidatePurchase(product_id=999, price=5000.00, quantity=1)

        result = guard.evaluate(candidate, [], products)

        assert result.severity == Severity.NONE
        assert result.mode == "absolute"

    def test_zero_quantity_history_not_counted(self, guard, make_purchase, products):
        """History without a unit price does not enable the statistical mode."""
        history = [
            make_purchase(10, 1, 10.00, 1.0),
            make_purchase(10, 1, 10.00, 0.0),
        ]
        candidate = CandidatePurchase(product_id=10, price=150.00, quantity=1)

        result = guard.evaluate(candidate, history, products)

        assert result.mode == "absolute"
        assert result.sample_count == 1
