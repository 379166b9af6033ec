import pytest

from announcements.models import AnnouncementRecord, InvalidEventError, Recipient
from announcements.service import build_push_job, build_sms_body, build_sms_jobs


def test_push_job_uses_defaults_for_missing_fields():
    job = build_push_job(AnnouncementRecord(id="a1"))
    assert job.title == "New Announcement"
    assert job.body == ""
    assert job.topic == "announcements"
    assert job.data["senderName"] == "Admin"
    assert job.data["type"] == "announcement"
    assert job.data["announcementId"] == "a1"


def test_push_job_copies_record_fields():
    record = AnnouncementRecord(id="a2", title="Exam Notice", body="Exams start Monday", sender_name="Registrar")
    job = build_push_job(record, topic="campus")
    assert (job.title, job.body, job.topic) == ("Exam Notice", "Exams start Monday", "campus")
    assert job.data == {
        "type": "announcement",
        "announcementId": "a2",
        "senderName": "Registrar",
        "click_action": "FLUTTER_NOTIFICATION_CLICK",
    }


def test_empty_strings_fall_back_to_defaults():
    record = AnnouncementRecord(id="a3", title="", body="", sender_name="")
    job = build_push_job(record)
    assert job.title == "New Announcement"
    assert job.data["senderName"] == "Admin"


def test_sms_body_template():
    record = AnnouncementRecord(id="a4", title="Exam Notice", body="Exams start Monday")
    assert build_sms_body(record) == "[UMAT Announcement] Exam Notice: Exams start Monday"


def test_sms_jobs_one_per_phone_number_without_dedup():
    record = AnnouncementRecord(id="a5", title="Hi")
    recipients = [
        Recipient("u1", "+15551110000"),
        Recipient("u2", "+15551110000"),
        Recipient("u3", None),
        Recipient("u4", ""),
    ]
    jobs = build_sms_jobs(record, recipients)
    assert [job.to for job in jobs] == ["+15551110000", "+15551110000"]
    assert all(job.body == "[UMAT Announcement] Hi: " for job in jobs)


@pytest.mark.parametrize(
    "payload",
    [
        {"announcementId": "x1", "data": {"title": "T", "body": "B", "senderName": "S"}},
        {"params": {"announcementId": "x1"}, "data": {"title": "T", "body": "B", "senderName": "S"}},
        {
            "value": {
                "name": "projects/p/databases/(default)/documents/announcements/x1",
                "fields": {
                    "title": {"stringValue": "T"},
                    "body": {"stringValue": "B"},
                    "senderName": {"stringValue": "S"},
                },
            }
        },
    ],
)
def test_record_from_event_shapes(payload):
    record = AnnouncementRecord.from_event(payload)
    assert record == AnnouncementRecord(id="x1", title="T", body="B", sender_name="S")


def test_record_from_event_without_data_uses_defaults():
    record = AnnouncementRecord.from_event({"announcementId": "x2"})
    assert record.resolved_title == "New Announcement"
    assert record.resolved_body == ""
    assert record.resolved_sender_name == "Admin"


@pytest.mark.parametrize("payload", [None, [], {"data": {"title": "no id"}}, {"announcementId": "x", "data": "nope"}])
def test_record_from_event_rejects_bad_payloads(payload):
    with pytest.raises(InvalidEventError):
        AnnouncementRecord.from_event(payload)


def test_non_string_fields_are_coerced_to_text():
    record = AnnouncementRecord.from_event({"announcementId": 42, "data": {"title": 2024, "body": 3.5, "senderName": True}})

    job = build_push_job(record)

    assert record.id == "42"
    assert (job.title, job.body) == ("2024", "3.5")
    assert job.data["senderName"] == "True"
    assert all(isinstance(value, str) for value in job.data.values())
