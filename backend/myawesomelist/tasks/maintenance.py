"""
Maintenance Tasks - Scheduled housekeeping jobs.

These tasks are designed to run periodically via Celery Beat.
"""

import asyncio
import logging
from typing import Any, Dict

from celery import shared_task

from myawesomelist.config import settings
from myawesomelist.core.tracing import TracingContext
from myawesomelist.services.awesome import Awesome
from myawesomelist.utils.datetime import utc_now

logger = logging.getLogger(__name__)


async def run_embedding_sweep() -> Dict[str, Any]:
    """Build the container, run one sweep, and tear everything down."""
    awesome = await Awesome.create(settings)
    try:
        summary = await awesome.embedding_sweep().run()
    finally:
        await awesome.close()
    return summary.to_dict()


@shared_task(
    name="myawesomelist.tasks.maintenance.refresh_stale_embeddings",
    bind=True,
    queue="maintenance",
)
def refresh_stale_embeddings(self) -> Dict[str, Any]:
    """
    Backfill missing and refresh expired project embeddings.

    Runs via Celery Beat every EMBEDDING_SWEEP_INTERVAL. Per-project
    failures are counted in the summary; only a failure to run the sweep
    at all marks the task as failed.

    Returns:
        Dict with stale/embedded/failed counts and timestamp.
    """
    TracingContext.set(
        correlation_id=self.request.id or TracingContext.generate_correlation_id(),
        task_name="refresh_stale_embeddings",
    )
    try:
        summary = asyncio.run(run_embedding_sweep())
        logger.info(f"Embedding sweep completed: {summary}")
        return {
            "status": "success",
            **summary,
            "executed_at": utc_now().isoformat(),
        }
    except Exception as e:
        logger.error(f"Embedding sweep failed: {e}", exc_info=True)
        return {
            "status": "failed",
            "error": str(e),
            "executed_at": utc_now().isoformat(),
        }
    finally:
        TracingContext.clear()
