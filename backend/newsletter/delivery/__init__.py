"""Issue delivery queue and background worker."""

from .queue import ClaimedTask, abandon, claim_one, count_pending, release
from .worker import ExecutionOutcome, try_execute_task, worker_loop

__all__ = [
    "ClaimedTask",
    "ExecutionOutcome",
    "abandon",
    "claim_one",
    "count_pending",
    "release",
    "try_execute_task",
    "worker_loop",
]
