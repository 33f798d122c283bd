"""
Background tasks for RQ (Redis Queue).

Run worker: rq worker -u $REDIS_URL
"""

from __future__ import annotations
import logging
import os
from typing import Optional

from redis import Redis
from rq import Queue

from app.services.payment_service import reconcile_pending_donations
from app.utils.cache import REDIS_URL

logger = logging.getLogger(__name__)


def use_task_queue() -> bool:
    return os.getenv("USE_TASK_QUEUE", "0") == "1"


def run_pending_sweep() -> dict:
    """Job body: one reconciliation pass over pending donations."""
    return reconcile_pending_donations()


def enqueue_pending_sweep() -> Optional[str]:
    """
    Put a sweep on the default queue. Returns the job id, or None when the
    queue is disabled or unreachable (the caller then runs it inline).
    """
    if not use_task_queue():
        return None
    try:
        conn = Redis.from_url(REDIS_URL, decode_responses=False)
        q = Queue("default", connection=conn)
        job = q.enqueue(run_pending_sweep, job_timeout="5m")
        logger.info("[tasks] pending sweep queued job=%s", job.id)
        return job.id
    except Exception as e:
        logger.warning("[tasks] RQ enqueue failed (%s), running inline", e)
        return None
