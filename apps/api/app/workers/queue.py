from __future__ import annotations

import logging
from typing import Any

from redis import Redis
from rq import Queue, Retry

from app.core.config import get_settings

logger = logging.getLogger(__name__)

ANALYSIS_QUEUE_NAME = "analyses"


def _get_queue() -> Queue:
    settings = get_settings()
    return Queue(ANALYSIS_QUEUE_NAME, connection=Redis.from_url(settings.redis_url))


def _run_inline(job_name: str, *args: Any, **kwargs: Any) -> None:
    from app.workers import jobs

    getattr(jobs, job_name)(*args, **kwargs)


def enqueue_job(job_name: str, *args: Any, **kwargs: Any) -> str:
    """Dispatch a job from ``app.workers.jobs``.

    ``QUEUE_MODE=inline`` runs it in the calling thread. In ``redis`` mode the
    job goes to rq, falling back to inline execution if the queue is
    unreachable.
    """
    settings = get_settings()
    if settings.queue_mode == "inline":
        _run_inline(job_name, *args, **kwargs)
        return f"inline-{job_name}"

    try:
        retry = None
        if settings.queue_retry_max > 0:
            retry = Retry(max=settings.queue_retry_max, interval=settings.queue_retry_interval_seconds)
        job = _get_queue().enqueue(f"app.workers.jobs.{job_name}", *args, retry=retry, **kwargs)
    except Exception:  # pragma: no cover - redis outage
        logger.exception("redis_enqueue_failed_falling_back_inline", extra={"job_name": job_name})
        _run_inline(job_name, *args, **kwargs)
        return f"fallback-inline-{job_name}"

    logger.info("enqueued_job", extra={"job_name": job_name, "job_id": job.id})
    return job.id
