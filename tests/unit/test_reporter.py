from __future__ import annotations

from rich.console import Console

from store_service.domain.models import QuerySpec, Store
from store_service.reporter import failures_table, print_search_report
from store_service.scatter_gather import ScatterGatherResult, UnitFailure


def _result(**overrides) -> ScatterGatherResult:
    values = dict(
        records=[Store(id=1, area_id=0, name="Corner Mart", location="Downtown")],
        dispatched=2,
        duration_seconds=0.012,
    )
    values.update(overrides)
    return ScatterGatherResult(**values)


def test_report_lists_records_and_summary() -> None:
    console = Console(record=True, width=120)

    print_search_report(_result(), console=console)

    text = console.export_text()
    assert "Corner Mart" in text
    assert "Queries dispatched" in text
    assert "Failed queries" not in text


def test_report_includes_failures() -> None:
    failure = UnitFailure(
        index=1, spec=QuerySpec(area_id=1), error_type="CollaboratorError", error="read timeout"
    )
    console = Console(record=True, width=160)

    print_search_report(_result(failures=[failure]), console=console)

    text = console.export_text()
    assert "Failed queries" in text
    assert "CollaboratorError: read timeout" in text


def test_failures_table_absent_without_failures() -> None:
    assert failures_table(_result()) is None
