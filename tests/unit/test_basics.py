import csv
import uuid
from pathlib import Path
from time import sleep

from typer.testing import CliRunner

from store_service import config
from store_service.domain.models import KeyStrategy
from store_service.infrastructure.memory import InMemoryStoreRepository
from store_service.utils import profiler
from scripts import generate_data


def test_settings_defaults(monkeypatch):
    for name in ("CASSANDRA_PORT", "CASSANDRA_KEYSPACE", "STORE_KEY_STRATEGY", "SEARCH_FAILURE_POLICY"):
        monkeypatch.delenv(name, raising=False)
    settings = config.Settings(_env_file=None)
    assert settings.cassandra_port == 9042
    assert settings.cassandra_keyspace == "store_management"
    assert settings.store_key_strategy == "int"
    assert settings.search_failure_policy == "tolerant"
    assert settings.default_page_size <= settings.max_page_size


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("CASSANDRA_HOSTS", "10.0.0.1,10.0.0.2")
    monkeypatch.setenv("SEARCH_TIMEOUT_SECONDS", "1.5")
    settings = config.Settings(_env_file=None)
    assert settings.contact_points() == ["10.0.0.1", "10.0.0.2"]
    assert settings.search_timeout_seconds == 1.5
    assert config.Settings(cassandra_hosts="auto").contact_points() == []


def test_profile_block_measures_time():
    with profiler.profile_block("sleep") as stats:
        sleep(0.05)
    assert stats.duration_seconds >= 0.05
    # rss may be None where the platform hides process memory
    if stats.rss_delta_bytes is not None:
        assert isinstance(stats.rss_delta_bytes, int)


def test_generate_data_writes_csv(tmp_path: Path):
    csv_path = tmp_path / "stores.csv"
    # Generate a tiny dataset without loading into a store
    generate_data._generate_rows_csv(
        csv_path, rows=5, areas=2, batch_size=2, seed=123, strategy=KeyStrategy.INT
    )
    assert csv_path.exists()
    with csv_path.open("r", newline="", encoding="utf-8") as f:
        rows = list(csv.reader(f))
    # header + 5 rows = 6 lines
    assert len(rows) == 6
    assert rows[0] == ["id", "area_id", "name", "location"]
    assert [row[1] for row in rows[1:]] == ["0", "1", "0", "1", "0"]


def test_generate_data_uuid_ids_are_deterministic(tmp_path: Path):
    first, second = tmp_path / "a.csv", tmp_path / "b.csv"
    for path in (first, second):
        generate_data._generate_rows_csv(
            path, rows=3, areas=1, batch_size=10, seed=7, strategy=KeyStrategy.UUID
        )
    assert first.read_text() == second.read_text()
    with first.open("r", newline="", encoding="utf-8") as f:
        uuid.UUID(next(csv.DictReader(f))["id"])


def test_generate_data_loads_in_batches(tmp_path: Path):
    csv_path = tmp_path / "stores.csv"
    generate_data._generate_rows_csv(
        csv_path, rows=7, areas=3, batch_size=3, seed=1, strategy=KeyStrategy.INT
    )
    repository = InMemoryStoreRepository(KeyStrategy.INT)

    loaded = generate_data._load_into_store(repository, csv_path, batch_size=3)

    assert loaded == 7
    assert len(repository) == 7


def test_generate_data_rejects_zero_areas(tmp_path: Path):
    runner = CliRunner()
    result = runner.invoke(
        generate_data.app, ["--areas", "0", "--no-load", "--output", str(tmp_path / "s.csv")]
    )
    assert result.exit_code == 2
    assert not (tmp_path / "s.csv").exists()


def test_profile_block_without_memory_tracking():
    with profiler.profile_block("timing only", track_memory=False) as stats:
        pass
    assert stats.start_rss_bytes is None
    assert stats.rss_delta_bytes is None
    assert stats.duration_seconds >= 0
