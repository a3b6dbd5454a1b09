"""
Cassandra session lifecycle for the store service.

`SessionManager` owns one cluster/session pair with explicit `open()` and
`close()` (also usable as a context manager). The HTTP lifespan, the CLI and
the data loader each create one and pass the session to the repository; there
is no module-level session.

Includes retry logic for transient connection failures using tenacity.
"""

from __future__ import annotations

import socket
import threading
from typing import List, Optional, Tuple

import psutil
from cassandra import ConsistencyLevel, OperationTimedOut
from cassandra.auth import PlainTextAuthProvider
from cassandra.cluster import EXEC_PROFILE_DEFAULT, Cluster, ExecutionProfile, NoHostAvailable, Session
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from store_service.config import Settings, get_settings
from store_service.utils.logging import get_logger

log = get_logger(__name__)


def resolve_host_ip() -> str:
    """
    Return the first non-loopback IPv4 address of this host, or "localhost".
    """
    try:
        interfaces = psutil.net_if_addrs()
    except (OSError, psutil.Error) as exc:
        log.warning("Error getting network interfaces: %s", exc)
        return "localhost"
    for addresses in interfaces.values():
        for address in addresses:
            if address.family == socket.AF_INET and not address.address.startswith("127."):
                return address.address
    return "localhost"


def resolve_contact_points(settings: Settings) -> List[str]:
    """Configured contact points, falling back to host IP auto-detection."""
    return settings.contact_points() or [resolve_host_ip()]


def build_cluster(settings: Settings) -> Cluster:
    """
    Build (but do not connect) a cluster from settings.

    Parameters
    ----------
    settings : Settings
        Connection parameters; consistency is looked up by name (e.g. QUORUM).
    """
    try:
        consistency = ConsistencyLevel.name_to_value[settings.cassandra_consistency.upper()]
    except KeyError:
        raise ValueError(
            f"Unknown consistency level '{settings.cassandra_consistency}'"
        ) from None

    profile = ExecutionProfile(
        consistency_level=consistency,
        request_timeout=settings.cassandra_request_timeout,
    )
    return Cluster(
        contact_points=resolve_contact_points(settings),
        port=settings.cassandra_port,
        auth_provider=PlainTextAuthProvider(
            username=settings.cassandra_username,
            password=settings.cassandra_password,
        ),
        execution_profiles={EXEC_PROFILE_DEFAULT: profile},
        connect_timeout=settings.cassandra_connect_timeout,
    )


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((NoHostAvailable, OperationTimedOut)),
    reraise=True,
)
def connect(settings: Settings) -> Tuple[Cluster, Session]:
    """
    Build a cluster and connect to it, with automatic retry.

    Retries up to 3 times with exponential backoff for transient connection
    errors. The driver shuts a cluster down when its first connect fails, so
    every attempt builds a fresh one.

    Raises
    ------
    cassandra.cluster.NoHostAvailable
        If no contact point is reachable after all retry attempts.
    """
    cluster = build_cluster(settings)
    log.info("Attempting to connect to Cassandra at %s", cluster.contact_points)
    try:
        return cluster, cluster.connect()
    except Exception:
        cluster.shutdown()
        raise


class SessionManager:
    """
    Process-scoped owner of the Cassandra cluster and session.

    Example
    -------
        with SessionManager(settings) as session:
            bootstrap_schema(session, settings)
            repository = CassandraStoreRepository(session, KeyStrategy.INT)
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or get_settings()
        self._lock = threading.Lock()
        self._cluster: Optional[Cluster] = None
        self._session: Optional[Session] = None

    @property
    def session(self) -> Session:
        if self._session is None:
            raise RuntimeError("SessionManager is not open")
        return self._session

    def open(self) -> Session:
        """Connect if needed and return the session (idempotent)."""
        with self._lock:
            if self._session is None:
                cluster, self._session = connect(self.settings)
                self._cluster = cluster
                log.info(
                    "Connected to Cassandra",
                    extra={"hosts": cluster.contact_points, "port": self.settings.cassandra_port},
                )
            return self._session

    def close(self) -> None:
        """
        Shut down the session and the cluster, releasing driver threads.
        """
        with self._lock:
            if self._session is not None:
                self._session.shutdown()
                self._session = None
            if self._cluster is not None:
                self._cluster.shutdown()
                self._cluster = None
                log.info("Cassandra session closed")

    def __enter__(self) -> Session:
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = [
    "SessionManager",
    "build_cluster",
    "connect",
    "resolve_contact_points",
    "resolve_host_ip",
]
