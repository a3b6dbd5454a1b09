from __future__ import annotations

import sys
from typing import List, Optional

import typer
import uvicorn

from store_service.api.app import create_app
from store_service.config import get_settings
from store_service.domain.models import search_specs
from store_service.errors import PartialFailureError
from store_service.infrastructure.backend import open_repository, seed_repository
from store_service.infrastructure.schema import bootstrap_schema
from store_service.infrastructure.session_factory import SessionManager, resolve_contact_points
from store_service.reporter import print_search_report
from store_service.scatter_gather import FAILURE_POLICIES, ScatterGatherExecutor
from store_service.utils.logging import configure_logging
from store_service.utils.profiler import profile_block

app = typer.Typer(help="Store service CLI.")


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    hosts = ",".join(resolve_contact_points(settings))
    typer.echo(
        f"Cassandra={settings.cassandra_username}@{hosts}:{settings.cassandra_port}"
        f"/{settings.cassandra_keyspace} | backend={settings.store_backend} "
        f"key_strategy={settings.store_key_strategy} | "
        f"api={settings.api_host}:{settings.api_port} | "
        f"search policy={settings.search_failure_policy} "
        f"max_workers={settings.search_max_workers} timeout={settings.search_timeout_seconds}"
    )


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address (default from settings)."),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Bind port (default from settings)."),
) -> None:
    """
    Run the HTTP API.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    uvicorn.run(
        create_app(settings),
        host=host or settings.api_host,
        port=port or settings.api_port,
        log_config=None,
    )


@app.command()
def bootstrap() -> None:
    """
    Create the keyspace and the stores table if they do not exist.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    with SessionManager(settings) as session:
        bootstrap_schema(session, settings)
    typer.echo(
        f"Keyspace '{settings.cassandra_keyspace}' and table 'stores' are ready "
        f"(key_strategy={settings.store_key_strategy})."
    )


@app.command()
def seed() -> None:
    """
    Write the demo stores (existing keys are skipped).
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    with profile_block("seed") as stats:
        with open_repository(settings.model_copy(update={"seed_on_startup": False})) as repository:
            written = seed_repository(repository)
    rss = stats.rss_delta_bytes
    typer.echo(
        f"Seeded {written} store(s) in {stats.duration_seconds:.2f}s"
        + (f" (rss delta {rss / 1024:.1f} KiB)." if rss is not None else ".")
    )


@app.command()
def search(
    area: List[int] = typer.Option(
        [],
        "--area",
        "-a",
        help="Area id to search; repeat for a concurrent multi-area search.",
    ),
    name: str = typer.Option("", "--name", "-n", help="Substring the store name must contain."),
    location: str = typer.Option(
        "", "--location", "-l", help="Substring the store location must contain."
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", "-t", help="Deadline in seconds (default from settings)."
    ),
    policy: Optional[str] = typer.Option(
        None,
        "--policy",
        help=f"Failure policy ({', '.join(FAILURE_POLICIES)}); default from settings.",
    ),
) -> None:
    """
    Run a scatter-gather search and print the merged results.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    try:
        executor = ScatterGatherExecutor(
            max_workers=settings.search_max_workers,
            timeout=timeout if timeout is not None else settings.search_timeout_seconds,
            failure_policy=policy or settings.search_failure_policy,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--policy") from exc

    specs = search_specs(area, name, location)
    with open_repository(settings) as repository:
        try:
            result = executor.execute(specs, repository.execute_query)
        except PartialFailureError as exc:
            if exc.result is not None:
                print_search_report(exc.result)
            typer.echo(f"Search failed: {exc.message}", err=True)
            raise typer.Exit(code=1)
    print_search_report(result)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
