"""Order-preserving fan-out over a thread pool.

Each call is wrapped so that an exception becomes the caller's sentinel
instead of propagating: one failing branch never aborts its siblings, and
nothing is cancelled once submitted.
"""
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Sequence, TypeVar

from ..logger import get_logger
from ..monitoring.metrics import record_fanout_failure

logger = get_logger(__name__)

T = TypeVar("T")


def fan_out(
    calls: Sequence[Callable[[], T]],
    default: T = None,
    max_workers: int = 20,
    operation: str = "fan_out",
) -> List[T]:
    """Run zero-argument callables concurrently and join on all of them.

    Args:
        calls: Callables to run, e.g. ``[lambda: client.get_quote("LLY"), ...]``
        default: Value substituted for a call that raised
        max_workers: Thread pool width (clamped to [1, len(calls)])
        operation: Label used in logs and the failure counter

    Returns:
        Results in the same order as ``calls``, regardless of completion order.

    Example:
        >>> fan_out([lambda: 1, lambda: 1 / 0, lambda: 3], default=None)
        [1, None, 3]
    """
    if not calls:
        return []

    def _guarded(index: int, call: Callable[[], T]) -> T:
        try:
            return call()
        except Exception as e:
            logger.warning("%s: task %d failed: %s", operation, index, e)
            record_fanout_failure(operation, type(e).__name__)
            return default

    workers = max(1, min(int(max_workers), len(calls)))
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [pool.submit(_guarded, i, c) for i, c in enumerate(calls)]
        return [f.result() for f in futures]
