"""Request scheduling for enrichment lookups.

Enrichment is an independent map over records. The scheduler bounds how
many records are enriched at once, spaces consecutive calls to the same
external host, and turns timeouts and failures into ``None`` plus an
audit event.
"""

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import asdict, dataclass
from typing import Any, TypeVar

from pubreconcile.audit.logger import AuditLogger

__all__ = ["SchedulingPolicy", "RequestScheduler"]

T = TypeVar("T")
R = TypeVar("R")


@dataclass(frozen=True)
class SchedulingPolicy:
    """Concurrency and pacing limits for external calls.

    Attributes
    ----------
    max_concurrency : int
        Records enriched concurrently (default: 4).
    request_delay_seconds : float
        Minimum spacing between consecutive calls to one host (default: 0.5).
    request_timeout_seconds : float
        Per-call timeout (default: 10).
    """

    max_concurrency: int = 4
    request_delay_seconds: float = 0.5
    request_timeout_seconds: float = 10.0

    def __post_init__(self) -> None:
        """Validate limits."""
        if self.max_concurrency < 1:
            raise ValueError(f"max_concurrency must be >= 1, got {self.max_concurrency}")
        if self.request_delay_seconds < 0:
            raise ValueError(
                f"request_delay_seconds must be >= 0, got {self.request_delay_seconds}"
            )
        if self.request_timeout_seconds <= 0:
            raise ValueError(
                f"request_timeout_seconds must be > 0, got {self.request_timeout_seconds}"
            )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


class RequestScheduler:
    """Bounded-concurrency, per-host-paced executor for lookups.

    Parameters
    ----------
    policy : SchedulingPolicy | None, optional
        Limits. Defaults to ``SchedulingPolicy()``.
    logger : AuditLogger | None, optional
        Receives ``enrichment_lookup_failed`` events.
    """

    def __init__(
        self,
        policy: SchedulingPolicy | None = None,
        logger: AuditLogger | None = None,
    ) -> None:
        self.policy = policy or SchedulingPolicy()
        self.logger = logger
        self._next_slot: dict[str, float] = {}
        self._host_locks: dict[str, asyncio.Lock] = {}
        self.calls = 0
        self.failures = 0

    async def _wait_for_slot(self, host: str) -> None:
        lock = self._host_locks.setdefault(host, asyncio.Lock())
        loop = asyncio.get_running_loop()
        async with lock:
            now = loop.time()
            slot = max(now, self._next_slot.get(host, now))
            self._next_slot[host] = slot + self.policy.request_delay_seconds
        if slot > now:
            await asyncio.sleep(slot - now)

    async def call(
        self,
        host: str,
        operation: str,
        func: Callable[..., Awaitable[R]],
        *args: Any,
        rid: str | None = None,
    ) -> R | None:
        """Run one external call under the pacing and timeout policy.

        Parameters
        ----------
        host : str
            External host or service name used for pacing.
        operation : str
            Operation name for audit events.
        func : Callable[..., Awaitable[R]]
            Coroutine function to call.
        *args : Any
            Positional arguments for ``func``.
        rid : str | None, optional
            Label of the record being enriched.

        Returns
        -------
        R | None
            Result, or None if the call failed or timed out.
        """
        await self._wait_for_slot(host)
        self.calls += 1
        try:
            return await asyncio.wait_for(func(*args), timeout=self.policy.request_timeout_seconds)
        except TimeoutError:
            message = f"TimeoutError: no response within {self.policy.request_timeout_seconds}s"
        except Exception as e:
            message = f"{type(e).__name__}: {e}"

        self.failures += 1
        if self.logger:
            self.logger.lookup_failed(host, operation, message, rid=rid)
        return None

    async def map_ordered(
        self,
        func: Callable[[T], Awaitable[R]],
        items: Sequence[T],
    ) -> list[R]:
        """Apply ``func`` to every item with bounded concurrency.

        Results keep the order of ``items``.
        """
        semaphore = asyncio.Semaphore(self.policy.max_concurrency)

        async def run(item: T) -> R:
            async with semaphore:
                return await func(item)

        return list(await asyncio.gather(*(run(item) for item in items)))
