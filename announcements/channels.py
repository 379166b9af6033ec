from __future__ import annotations

import logging
from typing import Any, Optional

from firebase_admin import messaging
from twilio.rest import Client

from .config import ANDROID_CHANNEL_ID, SmsSettings
from .models import PushJob, SmsJob

LOGGER = logging.getLogger(__name__)


def build_fcm_message(job: PushJob) -> messaging.Message:
    """Translate a push job into an FCM topic message."""
    return messaging.Message(
        notification=messaging.Notification(title=job.title, body=job.body),
        android=messaging.AndroidConfig(
            priority="high",
            notification=messaging.AndroidNotification(
                channel_id=ANDROID_CHANNEL_ID,
                priority="high",
                default_sound=True,
                default_vibrate_timings=True,
            ),
        ),
        apns=messaging.APNSConfig(
            payload=messaging.APNSPayload(
                aps=messaging.Aps(content_available=True, sound="default", badge=1),
            ),
        ),
        data=dict(job.data),
        topic=job.topic,
    )


class FirebasePushSender:
    """Sends push jobs through the Firebase Admin messaging API."""

    def __init__(self, app: Optional[Any] = None) -> None:
        self._app = app

    def send(self, job: PushJob) -> str:
        message_id = messaging.send(build_fcm_message(job), app=self._app)
        LOGGER.info("Push notification '%s' sent to topic %s (%s)", job.title, job.topic, message_id)
        return message_id


class TwilioSmsSender:
    """Sends SMS jobs through the Twilio REST API."""

    def __init__(self, settings: SmsSettings, client: Optional[Client] = None) -> None:
        if not settings.enabled:
            raise ValueError("TwilioSmsSender requires enabled SMS settings")
        self.from_number = settings.from_number
        self._client = client or Client(settings.account_sid, settings.auth_token)

    def send(self, job: SmsJob) -> str:
        message = self._client.messages.create(body=job.body, from_=self.from_number, to=job.to)
        LOGGER.info("Sent SMS to %s (%s)", job.to, message.sid)
        return message.sid
