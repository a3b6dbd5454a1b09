from __future__ import annotations

from typing import Optional, Sequence

from rich import box
from rich.console import Console
from rich.table import Table

from store_service.domain.models import Store
from store_service.scatter_gather import ScatterGatherResult


def stores_table(stores: Sequence[Store], title: str = "Stores") -> Table:
    """
    Build a Rich table listing stores.
    """
    table = Table(title=title, box=box.SIMPLE_HEAVY, show_lines=False)
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Area", justify="right")
    table.add_column("Name", style="bold")
    table.add_column("Location")
    for store in stores:
        table.add_row(str(store.id), str(store.area_id), store.name, store.location)
    return table


def summary_table(result: ScatterGatherResult) -> Table:
    """
    Build a Rich table summarizing one scatter-gather invocation.
    """
    table = Table(title="Search summary", box=box.SIMPLE, show_header=False)
    table.add_column("Metric", style="dim")
    table.add_column("Value", justify="right")
    table.add_row("Queries dispatched", str(result.dispatched))
    table.add_row("Queries succeeded", str(result.succeeded))
    table.add_row("Queries failed", str(len(result.failures)))
    table.add_row("Timed out", "yes" if result.timed_out else "no")
    table.add_row("Records", str(len(result.records)))
    table.add_row("Duration", f"{result.duration_seconds * 1000:.1f} ms")
    return table


def failures_table(result: ScatterGatherResult) -> Optional[Table]:
    if not result.failures:
        return None
    table = Table(title="Failed queries", box=box.SIMPLE, style="red")
    table.add_column("Unit", justify="right")
    table.add_column("Spec")
    table.add_column("Error")
    for failure in result.failures:
        table.add_row(str(failure.index), repr(failure.spec), f"{failure.error_type}: {failure.error}")
    return table


def print_search_report(result: ScatterGatherResult, console: Optional[Console] = None) -> None:
    """
    Render the records, the failure report and the summary of a search.
    """
    console = console or Console()
    console.print(stores_table(result.records, title="Search results"))
    failures = failures_table(result)
    if failures is not None:
        console.print(failures)
    console.print(summary_table(result))


__all__ = ["failures_table", "print_search_report", "stores_table", "summary_table"]
