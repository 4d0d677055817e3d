"""Celery application: the embedding sweep worker and its Beat schedule."""

from celery import Celery

from myawesomelist.config import settings

celery_app = Celery(
    "myawesomelist",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["myawesomelist.tasks.maintenance"],
)

celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    task_default_queue="maintenance",
)

celery_app.conf.beat_schedule = {
    "refresh-stale-embeddings": {
        "task": "myawesomelist.tasks.maintenance.refresh_stale_embeddings",
        "schedule": settings.EMBEDDING_SWEEP_INTERVAL.total_seconds(),
    },
}
