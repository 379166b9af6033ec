from __future__ import annotations

import logging
from typing import Any, Dict

from celery import shared_task

from .models import AnnouncementRecord
from .runtime import get_dispatcher

LOGGER = logging.getLogger(__name__)


@shared_task(name="announcements.tasks.dispatch_announcement")
def dispatch_announcement(payload: Dict[str, Any]) -> Dict[str, Any]:
    record = AnnouncementRecord.from_event(payload)
    LOGGER.info("Dispatching announcement %s from queue", record.id)
    result = get_dispatcher().dispatch(record)
    return result.to_dict()
