import threading

import pytest

from announcements.config import Settings, SmsSettings
from announcements.service import Dispatcher


class FakePushSender:
    def __init__(self, fail=False):
        self.fail = fail
        self.jobs = []

    def send(self, job):
        self.jobs.append(job)
        if self.fail:
            raise RuntimeError("fcm unavailable")
        return "projects/demo/messages/1"


class FakeSmsSender:
    def __init__(self, failing_numbers=()):
        self.failing_numbers = set(failing_numbers)
        self.jobs = []
        self._lock = threading.Lock()

    def send(self, job):
        with self._lock:
            self.jobs.append(job)
        if job.to in self.failing_numbers:
            raise RuntimeError(f"twilio rejected {job.to}")
        return f"SM{len(self.jobs)}"


class FakeUserStore:
    def __init__(self, users=None, error=None):
        self.users = users or []
        self.error = error
        self.calls = 0

    def list_users(self):
        self.calls += 1
        if self.error:
            raise self.error
        return list(self.users)


SMS_ON = Settings(sms=SmsSettings.from_values("AC123", "token", "+15550000000"))
SMS_OFF = Settings()


@pytest.fixture
def push_sender():
    return FakePushSender()


@pytest.fixture
def sms_sender():
    return FakeSmsSender()


@pytest.fixture
def make_dispatcher(push_sender, sms_sender):
    def _make(users=None, settings=SMS_ON, store=None, push=None, sms=None):
        return Dispatcher(
            push_sender=push or push_sender,
            user_store=store or FakeUserStore(users),
            sms_sender=sms or sms_sender,
            settings=settings,
        )

    return _make
