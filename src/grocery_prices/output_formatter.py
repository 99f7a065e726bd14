"""Output formatting for CLI and programmatic use."""

import json
from datetime import date, datetime
from enum import Enum
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .models import timestamp_to_datetime
from .units import format_unit_price


class JSONEncoder(json.JSONEncoder):
    """Custom JSON encoder for output."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, Enum):
            return obj.value
        if isinstance(obj, datetime):
            return obj.isoformat()
        if isinstance(obj, date):
            return obj.isoformat()
        return super().default(obj)


def _format_date(timestamp: int) -> str:
    return timestamp_to_datetime(timestamp).date().isoformat()


class OutputFormatter:
    """Formats output for both Rich terminal and JSON modes."""

    def __init__(self, json_mode: bool = False, console: Console | None = None):
        """Initialize formatter.

        Args:
            json_mode: If True, output JSON instead of Rich formatting
            console: Console to render to, a new one by default
        """
        self.json_mode = json_mode
        self.console = console or Console()

    def output(self, data: dict[str, Any], message: str = "") -> None:
        """Output data in appropriate format.

        Args:
            data: Data to output
            message: Optional message for Rich mode
        """
        if self.json_mode:
            self._output_json(data)
        else:
            self._output_rich(data, message)

    def _output_json(self, data: dict[str, Any]) -> None:
        """Output as JSON to stdout."""
        print(json.dumps(data, cls=JSONEncoder, indent=2))

    def _output_rich(self, data: dict[str, Any], message: str) -> None:
        """Output with Rich formatting."""
        if message:
            self.console.print(f"[green]✓[/green] {message}")

        payload = data.get("data", {})
        if "best_prices" in payload:
            self._render_best_prices(data)
        elif "trends" in payload:
            self._render_trends(data)
        elif "comparisons" in payload:
            self._render_comparisons(data)
        elif "price_check" in payload:
            self._render_price_check(data)
        elif "stale" in payload:
            self._render_stale(data)
        elif "single_store" in payload:
            self._render_single_store(data)
        elif "spending" in payload:
            self._render_spending(data)
        elif "volumes" in payload:
            self._render_volumes(data)
        elif "dashboard" in payload:
            self._render_dashboard(data)

    def _render_best_prices(self, data: dict) -> None:
        """Render best prices, one table per country."""
        rows = data["data"]["best_prices"]

        countries = sorted({row["country"] for row in rows})
        for country in countries:
            table = Table(title=f"Best Prices ({country})", show_header=True, header_style="bold cyan")
            table.add_column("Product", style="cyan")
            table.add_column("Store", style="green")
            table.add_column("Price", justify="right", style="magenta")

            for row in rows:
                if row["country"] != country:
                    continue
                table.add_row(
                    row["product_name"],
                    row["store_name"],
                    format_unit_price(row["unit_price"], row["unit"]),
                )
            self.console.print(table)

    def _render_trends(self, data: dict) -> None:
        """Render price trends."""
        trends = data["data"]["trends"]

        table = Table(title="Price Trends", show_header=True, header_style="bold")
        table.add_column("Product")
        table.add_column("Store")
        table.add_column("First", justify="right")
        table.add_column("Last", justify="right")
        table.add_column("Change", justify="right")
        table.add_column("Samples", justify="right")

        for trend in trends:
            change = trend["percent_change"]
            if change > 0:
                change_display = f"[red]▲ {change:.1f}%[/red]"
            elif change < 0:
                change_display = f"[green]▼ {change:.1f}%[/green]"
            else:
                change_display = "0.0%"
            table.add_row(
                trend["product_name"],
                trend.get("store_name") or "all",
                f"€{trend['first_unit_price']:.2f}",
                f"€{trend['last_unit_price']:.2f}",
                change_display,
                str(trend["sample_count"]),
            )

        self.console.print(table)

    def _render_comparisons(self, data: dict) -> None:
        """Render store rankings per product."""
        comparisons = data["data"]["comparisons"]

        for comp in comparisons:
            gap = comp.get("percent_gap")
            gap_display = f" (gap {gap:.1f}%)" if gap is not None else ""
            self.console.print(f"\n[bold]{comp['product_name']}[/bold]{gap_display}")

            table = Table(show_header=True, header_style="bold")
            table.add_column("Store")
            table.add_column("Country")
            table.add_column("Price", justify="right")
            table.add_column("Seen", justify="right")
            table.add_column("", justify="center")

            for position, entry in enumerate(comp["entries"]):
                marker = "[green](best)[/green]" if position == 0 else ""
                table.add_row(
                    entry["store_name"],
                    entry["country"],
                    f"€{entry['normalized_unit_price']:.2f} per {entry['display_unit'].lower()}",
                    _format_date(entry["timestamp"]),
                    marker,
                )
            self.console.print(table)

    def _render_price_check(self, data: dict) -> None:
        """Render the outcome of a price plausibility check."""
        check = data["data"]["price_check"]
        severity = check["severity"]

        if severity == "none":
            self.console.print("[green]✓ Price looks plausible[/green]")
            return

        color = "red" if severity == "block" else "yellow"
        title = "Blocked" if severity == "block" else "Warning"
        panel = Panel(check["message"], title=title, border_style=color)
        self.console.print(panel)

    def _render_stale(self, data: dict) -> None:
        """Render products with outdated prices."""
        rows = data["data"]["stale"]

        table = Table(title="Outdated Prices", show_header=True, header_style="bold")
        table.add_column("Product")
        table.add_column("Store")
        table.add_column("Last seen", justify="right")
        table.add_column("Age (days)", justify="right")

        for row in rows:
            table.add_row(
                row["product_name"],
                row["store_name"],
                _format_date(row["last_timestamp"]),
                f"{row['age_days']:.0f}",
            )
        self.console.print(table)

    def _render_single_store(self, data: dict) -> None:
        """Render products priced at only one store."""
        rows = data["data"]["single_store"]

        table = Table(title="Products Priced at One Store", show_header=True, header_style="bold")
        table.add_column("Product")
        table.add_column("Store")
        table.add_column("Country")
        table.add_column("Purchases", justify="right")

        for row in rows:
            table.add_row(
                row["product_name"],
                row["store_name"],
                row["country"],
                str(row["purchase_count"]),
            )
        self.console.print(table)

    def _render_spending(self, data: dict) -> None:
        """Render spending per store."""
        rows = data["data"]["spending"]

        table = Table(title="Spending per Store", show_header=True, header_style="bold")
        table.add_column("Store")
        table.add_column("Country")
        table.add_column("Total", justify="right")
        table.add_column("Purchases", justify="right")

        for row in rows:
            table.add_row(
                row["store_name"],
                row["country"],
                f"€{row['total']:.2f}",
                str(row["purchase_count"]),
            )
        self.console.print(table)

    def _render_volumes(self, data: dict) -> None:
        """Render most and least purchased products."""
        volumes = data["data"]["volumes"]

        for title, key in (("Most Purchased", "top"), ("Least Purchased", "bottom")):
            table = Table(title=title, show_header=True, header_style="bold")
            table.add_column("#", justify="right")
            table.add_column("Product")
            table.add_column("Quantity", justify="right")

            for rank, row in enumerate(volumes[key], start=1):
                table.add_row(
                    str(rank),
                    row["product_name"],
                    f"{row['total_quantity']:g} {row['unit'].lower()}",
                )
            self.console.print(table)

    def _render_dashboard(self, data: dict) -> None:
        """Render headline counts."""
        stats = data["data"]["dashboard"]

        per_country = ", ".join(
            f"{country}: {count}" for country, count in stats["best_prices_per_country"].items()
        )
        panel = Panel(
            f"""Purchases: {stats["purchase_count"]}
Stores: {stats["store_count"]}
Products with a price: {stats["products_with_price"]} / {stats["product_count"]}
Best prices per country: {per_country or "-"}""",
            title="Overview",
            border_style="cyan",
        )
        self.console.print(panel)

    def error(self, message: str, error_code: str | None = None) -> None:
        """Output error message.

        Args:
            message: Error message
            error_code: Optional error code
        """
        if self.json_mode:
            output = {"success": False, "error": message}
            if error_code:
                output["error_code"] = error_code
            print(json.dumps(output))
        else:
            self.console.print(f"[red]✗ Error:[/red] {message}")

    def warning(self, message: str) -> None:
        """Output warning message.

        Args:
            message: Warning message
        """
        if self.json_mode:
            print(json.dumps({"warning": message}))
        else:
            self.console.print(f"[yellow]⚠[/yellow] {message}")
