# app.py
from flask import Flask, request, jsonify
import logging
import os

from announcements.config import Settings
from announcements.models import AnnouncementRecord, InvalidEventError
from announcements import runtime

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
LOGGER = logging.getLogger(__name__)

app = Flask(__name__)

SETTINGS = Settings.from_env()


def get_dispatcher():
    return runtime.get_dispatcher(SETTINGS)


def enqueue_dispatch(payload: dict):
    from celery_app import celery_app  # noqa: F401  binds shared tasks to the app
    from announcements.tasks import dispatch_announcement

    return dispatch_announcement.delay(payload)


@app.get("/healthz")
def healthz():
    return {"ok": True, "sms_enabled": SETTINGS.sms.enabled}, 200


@app.post("/events/announcements")
def announcement_created():
    payload = request.get_json(silent=True)
    try:
        record = AnnouncementRecord.from_event(payload)
    except InvalidEventError as exc:
        LOGGER.warning("Rejected announcement event: %s", exc)
        return jsonify({"ok": False, "error": str(exc)}), 400

    if SETTINGS.async_dispatch:
        try:
            task = enqueue_dispatch(payload)
        except Exception as exc:
            LOGGER.exception("Failed to queue announcement %s", record.id)
            return jsonify({"ok": True, "queued": False, "error": str(exc) or exc.__class__.__name__}), 200
        LOGGER.info("Queued announcement %s as task %s", record.id, task.id)
        return jsonify({"ok": True, "queued": True, "task_id": task.id}), 200

    result = get_dispatcher().dispatch(record)
    return jsonify({"ok": True, "announcementId": record.id, **result.to_dict()}), 200


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", "8080")), debug=os.getenv("FLASK_ENV") != "production")
