from __future__ import annotations

import logging
from concurrent import futures
from typing import Any, Callable, Iterable, List, Optional, Sequence

from .config import ANNOUNCEMENT_TOPIC, ANNOUNCEMENT_TYPE, CLICK_ACTION, SMS_PREFIX, Settings
from .models import AnnouncementRecord, DispatchResult, JobOutcome, PushJob, Recipient, SmsJob
from .recipients import UserStore, collect_recipients

LOGGER = logging.getLogger(__name__)


def build_push_job(record: AnnouncementRecord, topic: str = ANNOUNCEMENT_TOPIC) -> PushJob:
    return PushJob(
        title=record.resolved_title,
        body=record.resolved_body,
        topic=topic,
        data={
            "type": ANNOUNCEMENT_TYPE,
            "announcementId": record.id,
            "senderName": record.resolved_sender_name,
            "click_action": CLICK_ACTION,
        },
    )


def build_sms_body(record: AnnouncementRecord) -> str:
    return f"{SMS_PREFIX} {record.resolved_title}: {record.resolved_body}"


def build_sms_jobs(record: AnnouncementRecord, recipients: Iterable[Recipient]) -> List[SmsJob]:
    body = build_sms_body(record)
    return [
        SmsJob(to=recipient.phone_number, body=body, user_id=recipient.user_id)
        for recipient in recipients
        if recipient.phone_number
    ]


def scatter_gather(jobs: Sequence[Any], send: Callable[[Any], Any], max_workers: Optional[int] = None) -> List[JobOutcome]:
    """Run ``send`` for every job concurrently and wait for all of them.

    A failing job is captured in its own outcome; it never cancels or
    raises across its siblings. Outcomes keep the order of ``jobs``.
    Without ``max_workers`` every job gets its own thread, so all of them
    are in flight at once.
    """
    if not jobs:
        return []

    outcomes: List[JobOutcome] = []
    with futures.ThreadPoolExecutor(max_workers=min(max_workers or len(jobs), len(jobs))) as ex:
        fut_list = [ex.submit(send, job) for job in jobs]
        for job, fut in zip(jobs, fut_list):
            try:
                outcomes.append(JobOutcome(job=job, ok=True, result=fut.result()))
            except Exception as exc:
                outcomes.append(JobOutcome(job=job, ok=False, error=exc))
    return outcomes


class Dispatcher:
    """Fans an announcement out to the push topic and the SMS roster."""

    def __init__(
        self,
        push_sender,
        user_store: UserStore,
        sms_sender=None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.push_sender = push_sender
        self.user_store = user_store
        self.sms_sender = sms_sender
        self.settings = settings or Settings()

    @property
    def sms_enabled(self) -> bool:
        return self.settings.sms.enabled and self.sms_sender is not None

    def dispatch(self, record: AnnouncementRecord) -> DispatchResult:
        result = DispatchResult(sms_enabled=self.sms_enabled)
        self._send_push(record, result)
        self._send_sms(record, result)
        LOGGER.info(
            "Announcement %s dispatched: push_sent=%s sms %d/%d delivered",
            record.id,
            result.push_sent,
            result.sms_succeeded,
            result.sms_attempted,
        )
        return result

    def _send_push(self, record: AnnouncementRecord, result: DispatchResult) -> None:
        job = build_push_job(record, self.settings.topic)
        try:
            result.push_message_id = self.push_sender.send(job)
            result.push_sent = True
        except Exception:
            LOGGER.exception("Error sending push notification for announcement %s", record.id)

    def _send_sms(self, record: AnnouncementRecord, result: DispatchResult) -> None:
        if not self.sms_enabled:
            LOGGER.info("SMS sending skipped: Twilio credentials not provided.")
            return

        try:
            recipients = collect_recipients(self.user_store.list_users())
        except Exception as exc:
            LOGGER.exception("Error loading users for SMS notifications")
            result.sms_error = str(exc) or exc.__class__.__name__
            return

        jobs = build_sms_jobs(record, recipients)
        outcomes = scatter_gather(jobs, self.sms_sender.send, self.settings.sms_max_workers)
        for outcome in outcomes:
            if not outcome.ok:
                LOGGER.error("Failed SMS to %s: %s", outcome.job.to, outcome.error, exc_info=outcome.error)

        result.sms_attempted = len(jobs)
        result.sms_succeeded = sum(1 for outcome in outcomes if outcome.ok)
        result.sms_failed = result.sms_attempted - result.sms_succeeded
        LOGGER.info("Sent SMS notifications to %d of %d users.", result.sms_succeeded, result.sms_attempted)
