from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Protocol

from firebase_admin import firestore
from sqlalchemy import Column, String, create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from .models import Recipient

LOGGER = logging.getLogger(__name__)

PHONE_FIELDS = ("phoneNumber", "phone_number")

Base = declarative_base()


class UserModel(Base):
    __tablename__ = "users"
    id = Column(String(128), primary_key=True)
    display_name = Column(String(120))
    phone_number = Column(String(32))


class UserStore(Protocol):
    def list_users(self) -> Iterable[Dict[str, Any]]:
        ...


class FirestoreUserStore:
    """Reads the user roster from a Firestore collection."""

    def __init__(self, client: Optional[Any] = None, collection: str = "users") -> None:
        self._client = client
        self.collection = collection

    def _firestore(self):
        if self._client is None:
            self._client = firestore.client()
        return self._client

    def list_users(self) -> List[Dict[str, Any]]:
        users: List[Dict[str, Any]] = []
        for doc in self._firestore().collection(self.collection).stream():
            data = doc.to_dict() or {}
            data.setdefault("id", doc.id)
            users.append(data)
        LOGGER.debug("Loaded %d users from Firestore collection %s", len(users), self.collection)
        return users


class SqlUserStore:
    """Reads the user roster from a SQL ``users`` table."""

    def __init__(self, database_url: str, *, create_tables: bool = False) -> None:
        engine_kwargs: Dict[str, Any] = {"future": True}
        if str(database_url).startswith("sqlite"):
            engine_kwargs["connect_args"] = {"check_same_thread": False}
        else:
            engine_kwargs["pool_pre_ping"] = True
        self.engine = create_engine(database_url, **engine_kwargs)
        self.SessionLocal = sessionmaker(bind=self.engine, autoflush=False, expire_on_commit=False, future=True)
        if create_tables:
            Base.metadata.create_all(bind=self.engine)

    def list_users(self) -> List[Dict[str, Any]]:
        with self.SessionLocal() as session:
            rows = session.query(UserModel).order_by(UserModel.id).all()
            return [
                {"id": row.id, "display_name": row.display_name, "phone_number": row.phone_number}
                for row in rows
            ]


def _phone_of(user: Dict[str, Any], phone_field: Optional[str]) -> str:
    fields = (phone_field,) if phone_field else PHONE_FIELDS
    for key in fields:
        value = user.get(key)
        if value:
            return str(value).strip()
    return ""


def collect_recipients(users: Iterable[Dict[str, Any]], phone_field: Optional[str] = None) -> List[Recipient]:
    """Keep users that have a non-empty phone number. Duplicates are preserved."""
    recipients: List[Recipient] = []
    for user in users:
        if not isinstance(user, dict):
            continue
        phone = _phone_of(user, phone_field)
        if not phone:
            continue
        recipients.append(Recipient(user_id=str(user.get("id") or user.get("uid") or ""), phone_number=phone))
    return recipients
