# docmirror Task Scheduler
# Bounded worker pool with exactly-once completion notifications

import logging
import os
from collections.abc import Callable, Hashable
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class OperationKind(str, Enum):
    """Kinds of operations submitted to the scheduler."""

    MIRROR_TO_APP = "mirror_to_app"
    MIRROR_TO_EXTERNAL = "mirror_to_external"
    CREATE_CATEGORY = "create_category"
    GET_CATEGORIES = "get_categories"
    COPY_TO_CONTAINER = "copy_to_container"


class MirrorCallback(Protocol):
    """Receiver of operation notifications. Exactly one call per operation."""

    def on_complete(self, key: Hashable, result: Any) -> None:
        ...

    def on_failure(self, key: Hashable, error: BaseException) -> None:
        ...


@dataclass
class Operation:
    """A unit of work tagged with a caller-supplied key."""

    key: Hashable
    kind: OperationKind
    body: Callable[[], Any]
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass
class OperationOutcome:
    """Tagged result of one operation."""

    key: Hashable
    kind: OperationKind
    success: bool
    result: Any = None
    error: BaseException | None = None


def default_worker_count() -> int:
    """Worker pool size matching host parallelism."""
    return os.cpu_count() or 1


class TaskScheduler:
    """
    Fixed-size worker pool executing operations off the caller's thread.

    Each submitted operation runs once. Its outcome is delivered to the
    callback exactly once, as either on_complete or on_failure, and the
    returned future resolves to the same OperationOutcome. Operations are
    never retried, de-duplicated or cancelled, and nothing is ordered
    across operations.
    """

    def __init__(self, max_workers: int | None = None):
        """
        Initialize scheduler.

        Args:
            max_workers: Pool size. Defaults to the host's CPU count.
        """
        self.max_workers = max_workers or default_worker_count()
        self._executor = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="docmirror")

    def submit(self, operation: Operation, callback: MirrorCallback) -> "Future[OperationOutcome]":
        """
        Submit an operation for asynchronous execution.

        Args:
            operation: Operation to run.
            callback: Receiver of the single notification.

        Returns:
            Future resolving to the operation's outcome. It never raises
            the operation's exception.
        """
        logger.debug("Submitting %s [%s] %s", operation.kind.value, operation.key, operation.payload)
        return self._executor.submit(self._run, operation, callback)

    def _run(self, operation: Operation, callback: MirrorCallback) -> OperationOutcome:
        try:
            result = operation.body()
        except Exception as e:
            logger.error("%s [%s] failed: %s", operation.kind.value, operation.key, e)
            outcome = OperationOutcome(key=operation.key, kind=operation.kind, success=False, error=e)
        else:
            logger.debug("%s [%s] finished", operation.kind.value, operation.key)
            outcome = OperationOutcome(key=operation.key, kind=operation.kind, success=True, result=result)

        _notify(callback, outcome)
        return outcome

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting operations, optionally waiting for running ones."""
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "TaskScheduler":
        return self

    def __exit__(self, *exc_info) -> None:
        self.shutdown(wait=True)


def _notify(callback: MirrorCallback, outcome: OperationOutcome) -> None:
    """Deliver one notification; a failing callback is logged, not retried."""
    try:
        if outcome.success:
            callback.on_complete(outcome.key, outcome.result)
        else:
            callback.on_failure(outcome.key, outcome.error)
    except Exception:
        logger.exception("Callback for %s [%s] raised", outcome.kind.value, outcome.key)
