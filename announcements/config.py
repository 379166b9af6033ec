"""Configuration defaults and environment-derived settings for announcement dispatch."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

DEFAULT_TITLE = "New Announcement"
DEFAULT_BODY = ""
DEFAULT_SENDER_NAME = "Admin"

ANNOUNCEMENT_TOPIC = "announcements"
ANNOUNCEMENT_TYPE = "announcement"
ANDROID_CHANNEL_ID = "announcements"
CLICK_ACTION = "FLUTTER_NOTIFICATION_CLICK"
SMS_PREFIX = "[UMAT Announcement]"

VALID_USER_STORES = {"firestore", "sql"}
FALSEY = {"", "0", "false", "no", "off"}


class ConfigurationError(ValueError):
    """Raised when environment configuration is inconsistent."""


@dataclass(frozen=True, slots=True)
class SmsSettings:
    account_sid: str = ""
    auth_token: str = ""
    from_number: str = ""
    enabled: bool = False

    @classmethod
    def from_values(cls, account_sid: Optional[str], auth_token: Optional[str], from_number: Optional[str]) -> "SmsSettings":
        sid = (account_sid or "").strip()
        token = (auth_token or "").strip()
        sender = (from_number or "").strip()
        enabled = bool(sid and token)
        if enabled and not sender:
            raise ConfigurationError(
                "TWILIO_ACCOUNT_SID and TWILIO_AUTH_TOKEN are set but TWILIO_FROM_NUMBER is missing"
            )
        return cls(account_sid=sid, auth_token=token, from_number=sender, enabled=enabled)


@dataclass(frozen=True, slots=True)
class Settings:
    sms: SmsSettings = field(default_factory=SmsSettings)
    topic: str = ANNOUNCEMENT_TOPIC
    sms_max_workers: Optional[int] = None
    user_store: str = "firestore"
    users_collection: str = "users"
    database_url: Optional[str] = None
    firebase_credentials: Optional[str] = None
    async_dispatch: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ

        sms = SmsSettings.from_values(
            env.get("TWILIO_ACCOUNT_SID"),
            env.get("TWILIO_AUTH_TOKEN"),
            env.get("TWILIO_FROM_NUMBER") or env.get("TWILIO_PHONE_NUMBER"),
        )

        max_workers = None
        raw_workers = (env.get("SMS_MAX_WORKERS") or "").strip()
        if raw_workers:
            try:
                max_workers = int(raw_workers)
            except ValueError as exc:
                raise ConfigurationError("SMS_MAX_WORKERS must be an integer") from exc
            if max_workers < 1:
                raise ConfigurationError("SMS_MAX_WORKERS must be at least 1")

        user_store = env.get("USER_STORE", "firestore").strip().lower()
        if user_store not in VALID_USER_STORES:
            raise ConfigurationError(f"USER_STORE must be one of {sorted(VALID_USER_STORES)}")
        database_url = env.get("DATABASE_URL") or env.get("SQLALCHEMY_DATABASE_URI")
        if user_store == "sql" and not database_url:
            raise ConfigurationError("USER_STORE=sql requires DATABASE_URL")

        return cls(
            sms=sms,
            topic=env.get("ANNOUNCEMENT_TOPIC") or ANNOUNCEMENT_TOPIC,
            sms_max_workers=max_workers,
            user_store=user_store,
            users_collection=env.get("USERS_COLLECTION") or "users",
            database_url=database_url,
            firebase_credentials=env.get("FIREBASE_CREDENTIALS") or None,
            async_dispatch=env.get("ASYNC_DISPATCH", "").strip().lower() not in FALSEY,
        )
