"""
Scatter-gather executor: run independent read queries concurrently and merge
their results.

Usage:
    from store_service.scatter_gather import ScatterGatherExecutor

    executor = ScatterGatherExecutor(failure_policy="tolerant")
    result = executor.execute(specs, repository.execute_query)
    print(len(result.records), result.failures)

Every spec gets its own unit of work (a thread-pool future). Units share no
mutable state: each outcome travels back through its future and the calling
thread is the only place where records are merged.

Failure policies:
- ``best_effort``: never raise; failed units are only reported in the result.
- ``tolerant``: raise `AllQueriesFailedError` when every unit failed.
- ``strict``: raise `PartialFailureError` when any unit failed or the
  deadline expired.
"""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, List, Literal, Optional, Sequence, TypeVar

from store_service.errors import AllQueriesFailedError, PartialFailureError
from store_service.utils.logging import get_logger
from store_service.utils.profiler import profile_block

log = get_logger(__name__)

S = TypeVar("S")
R = TypeVar("R")

FailurePolicy = Literal["best_effort", "tolerant", "strict"]
FAILURE_POLICIES = ("best_effort", "tolerant", "strict")


@dataclass(frozen=True)
class UnitFailure:
    """One failed unit of work."""

    index: int
    spec: Any
    error_type: str
    error: str

    def as_dict(self) -> Dict[str, Any]:
        return {"index": self.index, "error_type": self.error_type, "error": self.error}


@dataclass
class ScatterGatherResult(Generic[R]):
    """
    Merged outcome of one invocation.

    `records` holds the union of every successful unit's records; records from
    different specs are not deduplicated.
    """

    records: List[R] = field(default_factory=list)
    failures: List[UnitFailure] = field(default_factory=list)
    dispatched: int = 0
    timed_out: bool = False
    pending: int = 0
    duration_seconds: float = 0.0

    @property
    def succeeded(self) -> int:
        return self.dispatched - len(self.failures) - self.pending

    @property
    def partial(self) -> bool:
        return bool(self.failures) or self.timed_out


class ScatterGatherExecutor:
    """
    Fan a list of query specs out to a thread pool and gather the results.

    Parameters
    ----------
    max_workers : int, optional
        Upper bound on concurrently running units. Defaults to one worker per
        spec so that every unit runs in parallel.
    timeout : float, optional
        Default deadline in seconds. `None` waits for every unit.
    failure_policy : str
        One of ``best_effort``, ``tolerant`` or ``strict``.
    """

    def __init__(
        self,
        max_workers: Optional[int] = None,
        timeout: Optional[float] = None,
        failure_policy: FailurePolicy = "tolerant",
    ) -> None:
        if failure_policy not in FAILURE_POLICIES:
            raise ValueError(
                f"Unknown failure policy '{failure_policy}'. "
                f"Available: {', '.join(FAILURE_POLICIES)}"
            )
        if max_workers is not None and max_workers < 1:
            raise ValueError("max_workers must be a positive integer")
        self.max_workers = max_workers
        self.timeout = timeout
        self.failure_policy = failure_policy

    def _pool_size(self, unit_count: int) -> int:
        if self.max_workers is None:
            return unit_count
        return min(unit_count, self.max_workers)

    def execute(
        self,
        specs: Sequence[S],
        query_fn: Callable[[S], Sequence[R]],
        timeout: Optional[float] = None,
    ) -> ScatterGatherResult[R]:
        """
        Run `query_fn` once per spec concurrently and merge the results.

        Parameters
        ----------
        specs : Sequence
            Query specifications; one unit of work is dispatched per entry.
        query_fn : Callable
            Returns the records matching one spec, or raises.
        timeout : float, optional
            Deadline for this invocation; overrides the executor default.

        Returns
        -------
        ScatterGatherResult
            Records of all successful units plus the failure report.

        Raises
        ------
        AllQueriesFailedError
            Under the ``tolerant`` policy when every unit failed.
        PartialFailureError
            Under the ``strict`` policy when any unit failed or timed out.
        """
        specs = list(specs)
        if not specs:
            return ScatterGatherResult()

        deadline = timeout if timeout is not None else self.timeout
        result: ScatterGatherResult[R] = ScatterGatherResult(dispatched=len(specs))

        log.debug(
            "[SCATTER] dispatching %d unit(s)",
            len(specs),
            extra={"units": len(specs), "timeout": deadline},
        )
        with profile_block("scatter_gather", track_memory=False) as stats:
            pool = ThreadPoolExecutor(
                max_workers=self._pool_size(len(specs)),
                thread_name_prefix="scatter-gather",
            )
            futures: List[Future] = []
            not_done: set = set()
            try:
                for spec in specs:
                    futures.append(pool.submit(query_fn, spec))
                _, not_done = wait(futures, timeout=deadline)
            finally:
                # Outstanding units keep running; their results are discarded.
                pool.shutdown(wait=False)

            for index, (spec, future) in enumerate(zip(specs, futures)):
                if future in not_done:
                    continue
                self._collect(result, index, spec, future)

            if not_done:
                result.timed_out = True
                result.pending = len(not_done)
                log.warning(
                    "[GATHER TIMEOUT] %d unit(s) still running after %.3fs",
                    result.pending,
                    deadline,
                    extra={"pending": result.pending, "timeout": deadline},
                )

        result.duration_seconds = stats.duration_seconds
        log.info(
            "[GATHER COMPLETE] %d record(s) from %d/%d unit(s)",
            len(result.records),
            result.succeeded,
            result.dispatched,
            extra={
                "records": len(result.records),
                "dispatched": result.dispatched,
                "failed": len(result.failures),
                "timed_out": result.timed_out,
                "duration": round(result.duration_seconds, 4),
            },
        )
        self._apply_policy(result)
        return result

    @staticmethod
    def _collect(result: ScatterGatherResult, index: int, spec: Any, future: Future) -> None:
        exc = future.exception()
        if exc is None:
            result.records.extend(future.result() or [])
            return
        failure = UnitFailure(
            index=index,
            spec=spec,
            error_type=type(exc).__name__,
            error=str(exc),
        )
        result.failures.append(failure)
        log.warning(
            "[UNIT FAILED] unit %d: %s",
            index,
            failure.error,
            extra={"unit": index, "error_type": failure.error_type},
        )

    def _apply_policy(self, result: ScatterGatherResult) -> None:
        if self.failure_policy == "best_effort" or not result.partial:
            return
        if self.failure_policy == "strict":
            raise PartialFailureError(
                f"{len(result.failures)} of {result.dispatched} queries failed"
                + (f", {result.pending} timed out" if result.timed_out else ""),
                result=result,
            )
        if result.failures and len(result.failures) == result.dispatched:
            raise AllQueriesFailedError(
                f"all {result.dispatched} queries failed: {result.failures[0].error}",
                result=result,
            )


__all__ = [
    "FAILURE_POLICIES",
    "FailurePolicy",
    "ScatterGatherExecutor",
    "ScatterGatherResult",
    "UnitFailure",
]
