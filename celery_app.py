"""Celery application factory for background announcement dispatch."""
from __future__ import annotations

import os
from celery import Celery

DEFAULT_BROKER_URL = os.getenv("CELERY_BROKER_URL", os.getenv("REDIS_URL", "redis://localhost:6379/0"))
DEFAULT_BACKEND_URL = os.getenv("CELERY_RESULT_BACKEND", DEFAULT_BROKER_URL)
DISPATCH_QUEUE = os.getenv("ANNOUNCEMENT_QUEUE", "announcements")


def create_celery_app() -> Celery:
    """Create and configure the Celery app for the project."""
    celery_app = Celery(
        "announcement_dispatch",
        broker=DEFAULT_BROKER_URL,
        backend=DEFAULT_BACKEND_URL,
        include=["announcements.tasks"],
    )

    celery_app.conf.update(
        task_serializer="json",
        result_serializer="json",
        accept_content=["json"],
        timezone=os.getenv("CELERY_TIMEZONE", "UTC"),
        enable_utc=True,
        task_default_queue=DISPATCH_QUEUE,
        task_routes={"announcements.tasks.dispatch_announcement": {"queue": DISPATCH_QUEUE}},
        worker_prefetch_multiplier=1,
        result_expires=int(os.getenv("CELERY_RESULT_EXPIRES", "86400")),
    )

    return celery_app


celery_app = create_celery_app()
