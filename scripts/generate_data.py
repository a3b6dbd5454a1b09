"""
Data generation and loading script for the store service.

Implements deterministic pseudo-random store generation, CSV emission, and
loading through the configured store repository in logged batches.
"""

from __future__ import annotations

import csv
import random
import sys
import tempfile
import time
import uuid
from pathlib import Path
from typing import Iterator, List

import typer

from store_service.config import get_settings
from store_service.domain.models import KeyStrategy, Store
from store_service.infrastructure.backend import open_repository
from store_service.infrastructure.repository import StoreRepository

app = typer.Typer(help="Generate synthetic stores and load them into Cassandra (CSV + batches).")

CSV_HEADER = ["id", "area_id", "name", "location"]

_NAME_PREFIXES = ["Corner", "City", "Fresh", "Daily", "Market", "Green", "Metro", "Sunrise"]
_NAME_SUFFIXES = ["Mart", "Grocer", "Shop", "Outlet", "Depot", "Express", "Store"]
_LOCATIONS = ["Downtown", "Uptown", "Suburbs", "Harbor", "Old Town", "Airport", "University"]


def _generate_rows_csv(
    csv_path: Path, rows: int, areas: int, batch_size: int, seed: int, strategy: KeyStrategy
) -> None:
    rng = random.Random(seed)

    with csv_path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(CSV_HEADER)

        buffer: list[list[str]] = []
        for i in range(rows):
            if strategy.uses_uuid:
                store_id = _seeded_uuid(rng)
            else:
                store_id = str(i + 1)
            name = f"{rng.choice(_NAME_PREFIXES)} {rng.choice(_NAME_SUFFIXES)} {i + 1}"
            buffer.append([store_id, str(i % areas), name, rng.choice(_LOCATIONS)])
            if len(buffer) >= batch_size:
                writer.writerows(buffer)
                buffer.clear()
        if buffer:
            writer.writerows(buffer)


def _seeded_uuid(rng: random.Random) -> str:
    return str(uuid.UUID(int=rng.getrandbits(128), version=4))


def _read_batches(csv_path: Path, batch_size: int) -> Iterator[List[Store]]:
    with csv_path.open("r", newline="", encoding="utf-8") as f:
        batch: List[Store] = []
        for row in csv.DictReader(f):
            batch.append(
                Store(
                    id=row["id"],
                    area_id=int(row["area_id"]),
                    name=row["name"],
                    location=row["location"],
                )
            )
            if len(batch) >= batch_size:
                yield batch
                batch = []
        if batch:
            yield batch


def _load_into_store(repository: StoreRepository, csv_path: Path, batch_size: int) -> int:
    loaded = 0
    for batch in _read_batches(csv_path, batch_size):
        loaded += len(repository.insert_batch(batch))
    return loaded


@app.command()
def main(
    rows: int = typer.Option(
        1_000,
        "--rows",
        "-r",
        help="Number of stores to generate.",
    ),
    areas: int = typer.Option(
        10,
        "--areas",
        min=1,
        help="Number of distinct areas the stores are spread across.",
    ),
    batch_size: int = typer.Option(
        100,
        "--batch-size",
        "-b",
        min=1,
        help="Rows per CSV write and per logged batch on load.",
    ),
    seed: int = typer.Option(
        42,
        "--seed",
        help="Deterministic RNG seed.",
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Optional CSV output path (if omitted, a temp file will be used).",
    ),
    no_load: bool = typer.Option(
        False,
        "--no-load",
        help="Only generate CSV; skip loading into the store.",
    ),
) -> None:
    """
    Generate synthetic stores and optionally load them through the repository.
    """
    settings = get_settings()
    strategy = KeyStrategy(settings.store_key_strategy)
    start = time.perf_counter()
    if output:
        csv_path = output
        csv_path.parent.mkdir(parents=True, exist_ok=True)
    else:
        tmpdir = Path(tempfile.mkdtemp(prefix="stores_csv_"))
        csv_path = tmpdir / "stores.csv"

    typer.echo(f"Generating {rows:,} stores across {areas} areas -> {csv_path} (seed={seed})")
    _generate_rows_csv(
        csv_path, rows=rows, areas=areas, batch_size=batch_size, seed=seed, strategy=strategy
    )
    gen_duration = time.perf_counter() - start
    typer.echo(f"CSV generation completed in {gen_duration:.2f}s")

    if no_load:
        typer.echo("Skipping load (no-load flag set).")
        return

    load_start = time.perf_counter()
    typer.echo(f"Loading CSV into the '{settings.store_backend}' backend in batches of {batch_size}...")
    with open_repository(settings) as repository:
        loaded = _load_into_store(repository, csv_path, batch_size)
    load_duration = time.perf_counter() - load_start
    typer.echo(f"Loaded {loaded:,} stores in {load_duration:.2f}s.")


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
