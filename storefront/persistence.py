"""Fire-and-forget persistence on a single background worker.

Engines keep their in-memory state authoritative and hand serialized
snapshots to a :class:`BackgroundPersister`. The worker has exactly one
thread, so jobs run in submission order and the last write submitted is
the last write stored.
"""

from concurrent import futures
from typing import Any, Callable, Optional

import structlog

from .errors import PersistenceError
from .storage import Storage

logger = structlog.get_logger()


def _resolved(result: Any) -> futures.Future:
    future: futures.Future = futures.Future()
    future.set_result(result)
    return future


class BackgroundPersister:
    """Runs storage reads and writes off the caller's path."""

    def __init__(self, storage: Storage, name: str = "storefront") -> None:
        self._storage = storage
        self._executor = futures.ThreadPoolExecutor(
            max_workers=1, thread_name_prefix=f"{name}-persist"
        )
        self._closed = False
        self.log = logger.bind(component="persistence", persister=name)

    @property
    def storage(self) -> Storage:
        return self._storage

    @property
    def closed(self) -> bool:
        return self._closed

    def submit(self, fn: Callable[..., Any], *args: Any) -> futures.Future:
        """Queue a job on the persistence worker.

        Once the persister is closed the job is not run and the returned
        future is already resolved to False.
        """
        if self._closed:
            self.log.warning(
                "job_skipped", job=getattr(fn, "__name__", repr(fn)), reason="persister closed"
            )
            return _resolved(False)
        return self._executor.submit(fn, *args)

    def load(self, key: str) -> Optional[str]:
        """Read a key synchronously. Intended for jobs already on the worker."""
        try:
            return self._storage.get_item(key)
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(key, e) from e

    def save(self, key: str, payload: str) -> futures.Future:
        """Queue a write. Failures are logged and never reach the caller."""
        if self._closed:
            self.log.warning("persist_skipped", key=key, reason="persister closed")
            return _resolved(False)
        return self._executor.submit(self._write, key, payload)

    def _write(self, key: str, payload: str) -> bool:
        try:
            self._storage.set_item(key, payload)
        except Exception as e:
            self.log.error("persist_failed", key=key, error=str(e))
            return False
        self.log.debug("persisted", key=key, size=len(payload))
        return True

    def flush(self, timeout: Optional[float] = None) -> None:
        """Block until every job queued so far has run."""
        if self._closed:
            return
        self._executor.submit(lambda: None).result(timeout=timeout)

    def close(self) -> None:
        """Drain pending jobs and stop the worker."""
        if self._closed:
            return
        self._closed = True
        self._executor.shutdown(wait=True)
        self.log.debug("persister_closed")
