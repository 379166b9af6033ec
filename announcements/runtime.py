"""Process-wide setup: Firebase admin app and the dispatcher built on top of it."""
from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Optional

import firebase_admin
from firebase_admin import credentials as fb_credentials

from .channels import FirebasePushSender, TwilioSmsSender
from .config import ConfigurationError, Settings
from .recipients import FirestoreUserStore, SqlUserStore, UserStore
from .service import Dispatcher

LOGGER = logging.getLogger(__name__)

_LOCK = threading.Lock()
_DISPATCHER: Optional[Dispatcher] = None


def initialize_firebase(credentials_path: Optional[str] = None) -> firebase_admin.App:
    """Initialize the default Firebase app once; later calls return it."""
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    if credentials_path:
        if not Path(credentials_path).exists():
            raise ConfigurationError(f"FIREBASE_CREDENTIALS file not found: {credentials_path}")
        app = firebase_admin.initialize_app(fb_credentials.Certificate(credentials_path))
    else:
        app = firebase_admin.initialize_app()
    LOGGER.info("Firebase admin app initialized")
    return app


def build_user_store(settings: Settings) -> UserStore:
    if settings.user_store == "sql":
        return SqlUserStore(settings.database_url)
    return FirestoreUserStore(collection=settings.users_collection)


def build_dispatcher(settings: Optional[Settings] = None) -> Dispatcher:
    settings = settings or Settings.from_env()
    firebase_app = initialize_firebase(settings.firebase_credentials)

    sms_sender = TwilioSmsSender(settings.sms) if settings.sms.enabled else None
    if sms_sender is None:
        LOGGER.info("SMS channel disabled: Twilio credentials not configured")

    return Dispatcher(
        push_sender=FirebasePushSender(firebase_app),
        user_store=build_user_store(settings),
        sms_sender=sms_sender,
        settings=settings,
    )


def get_dispatcher(settings: Optional[Settings] = None) -> Dispatcher:
    global _DISPATCHER
    with _LOCK:
        if _DISPATCHER is None:
            _DISPATCHER = build_dispatcher(settings)
        return _DISPATCHER
