"""CLI entry point for Grocery Prices."""

import logging
import math
from pathlib import Path
from typing import Annotated, NoReturn

import typer
from rich.console import Console
from rich.logging import RichHandler

from .analytics import PriceAnalytics
from .config import ConfigManager
from .models import Country, Severity
from .output_formatter import OutputFormatter
from .snapshot import Snapshot, SnapshotError, load_snapshot
from .trends import TREND_ORDERS

app = typer.Typer(
    name="prices",
    help="Community grocery price insights",
    no_args_is_help=True,
)

# Global state for formatter and config (set by callback)
formatter: OutputFormatter = OutputFormatter()
config: ConfigManager | None = None
snapshot_path: Path | None = None
snapshot: Snapshot | None = None


def get_config() -> ConfigManager:
    """Get or create ConfigManager instance."""
    global config
    if config is None:
        config = ConfigManager()
    return config


def get_snapshot() -> Snapshot:
    """Get or load the snapshot using config values."""
    global snapshot
    if snapshot is None:
        snapshot = load_snapshot(snapshot_path or get_config().data.snapshot_path)
    return snapshot


def get_analytics() -> PriceAnalytics:
    """Create a PriceAnalytics instance for the current snapshot."""
    cfg = get_config()
    return PriceAnalytics(get_snapshot(), anomaly=cfg.anomaly, insights=cfg.insights)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _exit_with_error(error: Exception) -> NoReturn:
    """Report a failed command and exit."""
    if isinstance(error, SnapshotError):
        formatter.error(str(error), error_code="SNAPSHOT_ERROR")
    else:
        formatter.error(str(error))
    raise typer.Exit(code=1)


@app.callback()
def main(
    json_output: Annotated[
        bool, typer.Option("--json", help="Output as JSON for programmatic use")
    ] = False,
    snapshot_file: Annotated[
        Path | None, typer.Option("--snapshot", help="Snapshot JSON file")
    ] = None,
    config_file: Annotated[
        Path | None, typer.Option("--config", help="Configuration TOML file")
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging")] = False,
) -> None:
    """Grocery Prices CLI - Compare what the community paid."""
    global formatter, config, snapshot_path, snapshot

    formatter = OutputFormatter(json_mode=json_output)
    _configure_logging(verbose)

    config = ConfigManager(config_path=config_file)

    # CLI --snapshot overrides config
    snapshot_path = snapshot_file
    snapshot = None


@app.command()
def best(
    country: Annotated[
        Country | None, typer.Option("--country", "-c", help="Only this country")
    ] = None,
    store: Annotated[
        list[int] | None, typer.Option("--store", "-s", help="Only these store IDs")
    ] = None,
) -> None:
    """Show the best current unit price per product and country."""
    try:
        analytics = get_analytics()
        products = {product.id: product for product in analytics.snapshot.products}
        best_prices = analytics.best_prices(country=country, store_ids=store)

        if not best_prices:
            formatter.warning("No prices known yet")
            return

        rows = []
        for product_id, by_country in best_prices.items():
            for entry_country in by_country.countries:
                if country is not None and entry_country != country:
                    continue
                info = by_country.get(entry_country)
                rows.append(
                    {
                        "product_id": product_id,
                        "product_name": products[product_id].display_name,
                        "country": entry_country.value,
                        **info.model_dump(mode="json", exclude={"product_id"}),  # type: ignore[union-attr]
                    }
                )
        rows.sort(key=lambda row: (row["country"], row["product_name"].lower()))

        output_data = {"success": True, "data": {"best_prices": rows}}
        formatter.output(output_data, f"Best prices for {len(best_prices)} products")
    except Exception as e:
        _exit_with_error(e)


@app.command()
def trends(
    min_samples: Annotated[
        int, typer.Option("--min-samples", "-m", help="Minimum purchases per group")
    ] = 2,
    order: Annotated[
        str, typer.Option("--order", "-o", help=f"Ordering: {', '.join(TREND_ORDERS)}")
    ] = "magnitude",
    limit: Annotated[int, typer.Option("--limit", "-l", help="Maximum rows")] = 10,
    per_product: Annotated[
        bool, typer.Option("--per-product", help="Combine all stores per product")
    ] = False,
    exclude_unchanged: Annotated[
        bool, typer.Option("--exclude-unchanged", help="Hide prices that did not change")
    ] = False,
) -> None:
    """Show how unit prices changed between the first and last purchase."""
    if order not in TREND_ORDERS:
        formatter.error(f"Unknown order '{order}'", error_code="INVALID_ORDER")
        raise typer.Exit(code=1)
    try:
        result = get_analytics().trends(
            min_samples=min_samples,
            order=order,
            limit=limit,
            per_store=not per_product,
            exclude_unchanged=exclude_unchanged,
        )

        if not result:
            formatter.warning("Not enough purchases to show price trends")
            return

        output_data = {
            "success": True,
            "data": {"trends": [trend.model_dump(mode="json") for trend in result]},
        }
        formatter.output(output_data, f"Price trends ({order})")
    except Exception as e:
        _exit_with_error(e)


@app.command()
def compare(
    min_gap: Annotated[
        float, typer.Option("--min-gap", "-g", help="Only products with at least this gap (%)")
    ] = 0.0,
    limit: Annotated[
        int | None, typer.Option("--limit", "-l", help="Stores shown per product")
    ] = None,
) -> None:
    """Rank stores by current unit price for products sold at several stores."""
    try:
        result = get_analytics().comparisons(min_gap_pct=min_gap, limit=limit)

        if not result:
            formatter.warning("No products with prices at two or more stores")
            return

        output_data = {
            "success": True,
            "data": {"comparisons": [comp.model_dump(mode="json") for comp in result]},
        }
        formatter.output(output_data, f"Store comparison for {len(result)} products")
    except Exception as e:
        _exit_with_error(e)


@app.command()
def check(
    product_id: Annotated[int, typer.Argument(help="Product ID")],
    price: Annotated[float, typer.Argument(help="Price paid")],
    quantity: Annotated[float, typer.Argument(help="Quantity in the product's unit")],
) -> None:
    """Check whether a price being entered looks plausible."""
    if not (math.isfinite(price) and math.isfinite(quantity)) or price < 0 or quantity <= 0:
        formatter.error(
            "Price must be a non-negative number and quantity a positive number",
            error_code="INVALID_INPUT",
        )
        raise typer.Exit(code=1)
    try:
        analytics = get_analytics()
        if analytics.snapshot.get_product(product_id) is None:
            formatter.error(f"Product with ID '{product_id}' not found", error_code="NOT_FOUND")
            raise typer.Exit(code=1)
        result = analytics.check_price(product_id, price, quantity)
    except typer.Exit:
        raise
    except Exception as e:
        _exit_with_error(e)

    output_data = {
        "success": True,
        "data": {
            "price_check": {
                **result.model_dump(mode="json"),
                "blocks_submission": result.blocks_submission,
            }
        },
    }
    formatter.output(output_data)
    if result.severity == Severity.BLOCK:
        raise typer.Exit(code=2)


@app.command()
def stale(
    days: Annotated[
        float | None, typer.Option("--days", "-d", help="Age in days before a price is stale")
    ] = None,
    store: Annotated[
        list[int] | None, typer.Option("--store", "-s", help="Only these store IDs")
    ] = None,
) -> None:
    """List products whose latest price is outdated."""
    try:
        result = get_analytics().stale_prices(max_age_days=days, store_ids=store)

        if not result:
            formatter.warning("All prices are up to date")
            return

        output_data = {
            "success": True,
            "data": {"stale": [row.model_dump(mode="json") for row in result]},
        }
        formatter.output(output_data)
    except Exception as e:
        _exit_with_error(e)


@app.command(name="single-store")
def single_store(
    store: Annotated[
        list[int] | None, typer.Option("--store", "-s", help="Only these store IDs")
    ] = None,
) -> None:
    """List products that have only been priced at one store."""
    try:
        result = get_analytics().single_store_products(store_ids=store)

        if not result:
            formatter.warning("Every product has a price comparison")
            return

        output_data = {
            "success": True,
            "data": {"single_store": [row.model_dump(mode="json") for row in result]},
        }
        formatter.output(output_data)
    except Exception as e:
        _exit_with_error(e)


@app.command()
def spending() -> None:
    """Show the total spent per store."""
    try:
        result = get_analytics().spending()

        if not result:
            formatter.warning("No purchases logged")
            return

        output_data = {
            "success": True,
            "data": {"spending": [row.model_dump(mode="json") for row in result]},
        }
        formatter.output(output_data)
    except Exception as e:
        _exit_with_error(e)


@app.command()
def top(
    limit: Annotated[
        int | None, typer.Option("--limit", "-l", help="Products per list")
    ] = None,
) -> None:
    """Show the most and least purchased products."""
    try:
        result = get_analytics().volumes(limit=limit)
        output_data = {"success": True, "data": {"volumes": result.model_dump(mode="json")}}
        formatter.output(output_data)
    except Exception as e:
        _exit_with_error(e)


@app.command()
def stats() -> None:
    """Show headline counts for the snapshot."""
    try:
        result = get_analytics().dashboard()
        output_data = {"success": True, "data": {"dashboard": result.model_dump(mode="json")}}
        formatter.output(output_data)
    except Exception as e:
        _exit_with_error(e)


if __name__ == "__main__":
    app()
