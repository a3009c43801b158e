"""
Activity trail writer.

A session-wide ``after_flush`` listener turns every INSERT / UPDATE / DELETE
of a tracked table into one ``user_activity_history`` row, inside the same
transaction as the change itself. Endpoints only have to tag the session with
the acting user (``set_actor``); nothing else in the codebase writes activity.

Detail blob:
  INSERT / DELETE  -> {"record": {<column>: <value>, ...}}
  UPDATE           -> {<changed column>: {"old": ..., "new": ...}, ...}
"""
from __future__ import annotations

import enum
from datetime import date, datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import event, inspect
from sqlalchemy.orm import Session

from juridico.core.logger import logger
from juridico.db.models import (
    ActivityAction,
    ActivityRecord,
    Process,
    UserProfile,
    UserRoleGrant,
)

TRACKED_MODELS = (Process, UserProfile, UserRoleGrant)

# Bookkeeping columns never count as a change on their own.
_IGNORED_COLUMNS = {"created_at", "updated_at"}

_ACTOR_KEY = "actor_id"


def set_actor(db: Session, user_id: Optional[UUID]) -> None:
    """Attribute every change flushed through ``db`` to ``user_id``."""
    db.info[_ACTOR_KEY] = user_id


def get_actor(db: Session) -> Optional[UUID]:
    return db.info.get(_ACTOR_KEY)


def _jsonable(value: Any) -> Any:
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    return value


def _snapshot(obj) -> Dict[str, Any]:
    mapper = inspect(obj).mapper
    return {
        attr.key: _jsonable(getattr(obj, attr.key))
        for attr in mapper.column_attrs
    }


def _changes(obj) -> Dict[str, Any]:
    state = inspect(obj)
    changed: Dict[str, Any] = {}
    for attr in state.mapper.column_attrs:
        if attr.key in _IGNORED_COLUMNS:
            continue
        history = state.attrs[attr.key].history
        if not history.has_changes():
            continue
        old = history.deleted[0] if history.deleted else None
        new = history.added[0] if history.added else None
        if old == new:
            continue
        changed[attr.key] = {"old": _jsonable(old), "new": _jsonable(new)}
    return changed


def _entity_id(obj) -> str:
    identity = inspect(obj).identity
    if identity:
        return ",".join(str(part) for part in identity)
    return str(getattr(obj, "id", ""))


def collect_activity(session: Session) -> List[Dict[str, Any]]:
    """Build activity rows for the objects of the flush in progress."""
    actor = get_actor(session)
    rows: List[Dict[str, Any]] = []

    for obj in session.new:
        if isinstance(obj, TRACKED_MODELS):
            rows.append({
                "action": ActivityAction.insert.value,
                "entity": obj,
                "details": {"record": _snapshot(obj)},
            })

    for obj in session.dirty:
        if isinstance(obj, TRACKED_MODELS) and session.is_modified(obj):
            changes = _changes(obj)
            if changes:
                rows.append({
                    "action": ActivityAction.update.value,
                    "entity": obj,
                    "details": changes,
                })

    for obj in session.deleted:
        if isinstance(obj, TRACKED_MODELS):
            rows.append({
                "action": ActivityAction.delete.value,
                "entity": obj,
                "details": {"record": _snapshot(obj)},
            })

    return [
        {
            "user_id": actor,
            "action": row["action"],
            "entity_type": row["entity"].__tablename__,
            "entity_id": _entity_id(row["entity"]),
            "details": row["details"],
        }
        for row in rows
    ]


@event.listens_for(Session, "after_flush")
def _record_activity(session: Session, flush_context) -> None:
    rows = collect_activity(session)
    if not rows:
        return
    # Core insert: the ORM unit of work is closed for new objects at this point.
    session.connection().execute(ActivityRecord.__table__.insert(), rows)
    logger.debug(f"Recorded {len(rows)} activity entr{'y' if len(rows) == 1 else 'ies'}")
