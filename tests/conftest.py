"""Pytest fixtures shared by the reminder engine tests."""

from __future__ import annotations

import threading
from collections.abc import Callable, Generator
from datetime import time

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from packtrack.db import models  # noqa: F401  # Imported for side effects
from packtrack.db.base import Base
from packtrack.db.models import (
    Animal,
    Pack,
    PushSubscription,
    Reminder,
    TaskLog,
    TaskType,
    User,
    pack_members,
)
from packtrack.services.push_transport import DeliveryResult, DeliveryTarget


@pytest.fixture(scope="session")
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db_session(db_engine) -> Generator[Session, None, None]:
    TestingSessionLocal = sessionmaker(
        autocommit=False, autoflush=False, bind=db_engine, expire_on_commit=False
    )
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.rollback()
        for table in (TaskLog, Reminder, PushSubscription, Animal):
            db.query(table).delete()
        db.execute(pack_members.delete())
        for table in (Pack, TaskType, User):
            db.query(table).delete()
        db.commit()
        db.close()


class FakeTransport:
    """PushTransport double that answers from a per-endpoint script."""

    def __init__(self, outcomes: dict[str, DeliveryResult | Exception] | None = None) -> None:
        self.outcomes = outcomes or {}
        self.sent: list[tuple[str, bytes]] = []
        self._lock = threading.Lock()

    def send(self, target: DeliveryTarget, payload: bytes) -> DeliveryResult:
        with self._lock:
            self.sent.append((target.endpoint, payload))
        outcome = self.outcomes.get(target.endpoint, DeliveryResult(accepted=True, status_code=201))
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture()
def make_transport() -> type[FakeTransport]:
    return FakeTransport


@pytest.fixture()
def make_user(db_session) -> Callable[..., User]:
    counter = {"n": 0}

    def _make(name: str | None = None) -> User:
        counter["n"] += 1
        user = User(email=f"member{counter['n']}@example.com", name=name or f"Member {counter['n']}")
        db_session.add(user)
        db_session.commit()
        return user

    return _make


@pytest.fixture()
def make_subscription(db_session) -> Callable[..., PushSubscription]:
    def _make(user: User, endpoint: str) -> PushSubscription:
        subscription = PushSubscription(
            user_id=user.id, endpoint=endpoint, p256dh_key="p256dh-key", auth_token="auth-secret"
        )
        db_session.add(subscription)
        db_session.commit()
        return subscription

    return _make


@pytest.fixture()
def task_type(db_session) -> TaskType:
    feeding = TaskType(key="feeding", name="Feeding")
    db_session.add(feeding)
    db_session.commit()
    return feeding


@pytest.fixture()
def owner(make_user) -> User:
    return make_user("Owner")


@pytest.fixture()
def pack(db_session, owner) -> Pack:
    pack = Pack(name="Home")
    pack.members.append(owner)
    db_session.add(pack)
    db_session.commit()
    return pack


@pytest.fixture()
def animal(db_session, pack) -> Animal:
    rex = Animal(pack_id=pack.id, name="Rex")
    db_session.add(rex)
    db_session.commit()
    return rex


@pytest.fixture()
def reminder_fields(animal, task_type, owner) -> Callable[..., dict]:
    def _fields(**overrides) -> dict:
        fields = {
            "animal_id": animal.id,
            "task_type_id": task_type.id,
            "created_by": owner.id,
            "title": "Feed Rex",
            "frequency": "daily",
            "time_of_day": time(9, 0),
        }
        fields.update(overrides)
        return fields

    return _fields
