"""
Celery Worker Configuration
Redis is both broker and result backend for the order ledger export.

Run a worker from the project root:
    celery -A tableside.celery_worker worker --loglevel=info
"""

from celery import Celery

from tableside.core.config import get_settings

settings = get_settings()

celery_app = Celery(
    'tableside_worker',
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=['tableside.tasks']
)

celery_app.conf.update(
    # Order payloads are plain dicts
    task_serializer='json',
    accept_content=['json'],
    result_serializer='json',
    enable_utc=True,

    # One ledger writer at a time holds the file lock anyway
    worker_prefetch_multiplier=1,
    task_acks_late=True,

    broker_connection_retry_on_startup=True,
)


if __name__ == '__main__':
    celery_app.start()
