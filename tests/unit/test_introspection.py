"""Tests for ORM metadata helpers used by change auditing."""

import json
from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from app.infrastructure.persistence.introspection import (
    describe_fields,
    resolve_record_id,
    resolve_table_name,
    serialize_record,
    snapshot,
)
from app.infrastructure.persistence.models import AuditLog, Role, User, UserRole


class _OtherBase(DeclarativeBase):
    pass


class Widget(_OtherBase):
    """Mapped on a separate metadata so it never reaches the app's tables."""

    __tablename__ = "widgets"
    __audit_exclude__ = ("secret",)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    label: Mapped[str] = mapped_column(String(20))
    secret: Mapped[str] = mapped_column(String(20))
    _internal: Mapped[str] = mapped_column("internal", String(20))
    seen_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))


class Color(Enum):
    RED = "red"


class NotMapped:
    def __init__(self, id=None):
        self.id = id


def test_resolve_table_name() -> None:
    assert resolve_table_name(User) == "users"
    assert resolve_table_name(UserRole) == "user_roles"
    assert resolve_table_name(AuditLog) == "audit_logs"
    assert resolve_table_name(NotMapped) == ""
    assert resolve_table_name(None) == ""


def test_describe_fields_skips_secrets_and_soft_delete_marker() -> None:
    assert describe_fields(User) == [
        "id",
        "username",
        "email",
        "nickname",
        "status",
        "created_at",
        "updated_at",
    ]
    assert "deleted_at" not in describe_fields(Role)
    assert "permissions" not in describe_fields(Role)


def test_describe_fields_honours_audit_exclude_and_private_names() -> None:
    assert describe_fields(Widget) == ["id", "label", "seen_at"]


def test_describe_fields_unmapped_is_empty() -> None:
    assert describe_fields(NotMapped) == []


def test_snapshot_reads_loaded_values_only() -> None:
    user = User(username="alice", email="a@example.com", password="hash", status=1)
    data = snapshot(user)
    assert data["username"] == "alice"
    assert data["id"] is None
    assert "password" not in data


def test_serialize_record_formats_datetimes_as_utc_iso() -> None:
    widget = Widget(id=3, label="w", secret="s", seen_at=datetime(2024, 5, 1, 12, 30))
    data = json.loads(serialize_record(widget))
    assert data == {"id": 3, "label": "w", "seen_at": "2024-05-01T12:30:00+00:00"}


def test_serialize_record_converts_aware_datetimes_to_utc() -> None:
    from datetime import timedelta

    plus_two = timezone(timedelta(hours=2))
    widget = Widget(id=3, label="w", seen_at=datetime(2024, 5, 1, 14, 0, tzinfo=plus_two))
    assert json.loads(serialize_record(widget))["seen_at"] == "2024-05-01T12:00:00+00:00"


def test_serialize_record_handles_enums() -> None:
    widget = Widget(id=1, label=Color.RED)
    assert json.loads(serialize_record(widget))["label"] == "red"


def test_serialize_record_list_is_json_array() -> None:
    rows = [Widget(id=1, label="a"), Widget(id=2, label="b")]
    data = json.loads(serialize_record(rows, Widget))
    assert [row["label"] for row in data] == ["a", "b"]


def test_serialize_record_none_and_failures_are_empty() -> None:
    assert serialize_record(None) == ""
    assert serialize_record(Widget(id=1, label=object())) == ""


def test_serialize_record_keeps_unicode() -> None:
    widget = Widget(id=1, label="café")
    assert "café" in serialize_record(widget)


def test_resolve_record_id_prefers_primary_key() -> None:
    assert resolve_record_id(Widget, Widget(id=7, label="x"), (99,)) == 7


def test_resolve_record_id_falls_back_to_params() -> None:
    assert resolve_record_id(Widget, None, (0, "x", True, 12, 13)) == 12
    assert resolve_record_id(Widget, Widget(label="x"), (5,)) == 5


def test_resolve_record_id_plain_id_attribute() -> None:
    assert resolve_record_id(NotMapped, NotMapped(id=4)) == 4


def test_resolve_record_id_unknown_is_zero() -> None:
    assert resolve_record_id(Widget, None) == 0
    assert resolve_record_id(Widget, [Widget(id=1)]) == 0
    assert resolve_record_id(NotMapped, NotMapped(id=-3)) == 0
