"""ORM metadata helpers for change auditing.

Everything here reads static mapper metadata (sqlalchemy.inspect on the
class) and plain instance attributes. Nothing triggers a lazy load, so the
helpers are safe on async sessions and on detached instances.
"""

import json
from datetime import date, datetime
from enum import Enum
from typing import Any

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.exc import NoInspectionAvailable

from app.shared.utils.datetime import ensure_utc

# Never written into audit snapshots.
EXCLUDED_FIELDS = frozenset({"password", "hashed_password", "deleted_at"})


def _mapper(model: Any):
    try:
        return sa_inspect(model)
    except NoInspectionAvailable:
        return None


def resolve_table_name(model: Any) -> str:
    """Return the mapped table name of a model class, or "" when unmapped."""
    mapper = _mapper(model)
    if mapper is None:
        return ""
    table = getattr(mapper, "local_table", None)
    return getattr(table, "name", "") or ""


def describe_fields(model: Any) -> list[str]:
    """Return the auditable attribute names of a model in column order.

    Skips private names, credential fields, the soft-delete marker and any
    names in the model's __audit_exclude__. Relationships are never included.
    """
    mapper = _mapper(model)
    if mapper is None:
        return []
    excluded = EXCLUDED_FIELDS | frozenset(getattr(model, "__audit_exclude__", ()))
    names: list[str] = []
    for column in mapper.local_table.columns:
        prop = mapper.get_property_by_column(column)
        key = prop.key
        if key.startswith("_") or key in excluded:
            continue
        names.append(key)
    return names


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return ensure_utc(value).isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def snapshot(record: Any, model: Any | None = None) -> dict[str, Any]:
    """Return {field: value} for the auditable fields of one record."""
    fields = describe_fields(model if model is not None else type(record))
    return {name: vars(record).get(name) for name in fields}


def serialize_record(target: Any, model: Any | None = None) -> str:
    """Serialize a record (or list of records) to JSON text.

    Returns "" for None or on any serialization failure.
    """
    if target is None:
        return ""
    try:
        if isinstance(target, (list, tuple)):
            payload: Any = [snapshot(item, model) for item in target]
        else:
            payload = snapshot(target, model)
        return json.dumps(payload, default=_json_default, ensure_ascii=False)
    except Exception:
        return ""


def _positive_int(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        return 0
    return value if value > 0 else 0


def resolve_record_id(model: Any, target: Any, params: tuple[Any, ...] = ()) -> int:
    """Return the id of the row a write touches, or 0 when it cannot be determined.

    First match wins: the mapped primary key on the in-memory record, then the
    first positive int among the statement params, then a plain `id` attribute.
    """
    record = target if target is not None and not isinstance(target, (list, tuple)) else None
    mapper = _mapper(model)
    if record is not None and mapper is not None and len(mapper.primary_key) == 1:
        pk_key = mapper.get_property_by_column(mapper.primary_key[0]).key
        found = _positive_int(vars(record).get(pk_key))
        if found:
            return found
    for value in params:
        found = _positive_int(value)
        if found:
            return found
    if record is not None:
        loaded = getattr(record, "__dict__", None)
        value = loaded.get("id") if loaded is not None else getattr(record, "id", None)
        return _positive_int(value)
    return 0
