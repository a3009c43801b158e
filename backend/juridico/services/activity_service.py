"""
Activity log (read side)

Turns raw ``user_activity_history`` rows into display entries: a label
derived from (action, entity type, detail blob) plus best-effort names for
the process and the acting user. A lookup that fails or finds nothing only
degrades the entry to a placeholder; the listing itself never fails on it.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Union
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from juridico.core.config import settings
from juridico.core.logger import logger
from juridico.core.session import AuthSession
from juridico.db.models import ActivityRecord, Process
from juridico.services import user_directory

PROCESS_ENTITY = "processos"
PLACEHOLDER = "-"


# ============================================================================
# Detail shapes
# ============================================================================

@dataclass(frozen=True)
class ProcessCreated:
    pass


@dataclass(frozen=True)
class ProcessDeleted:
    pass


@dataclass(frozen=True)
class ProcessUpdated:
    changed_fields: Tuple[str, ...] = ()


@dataclass(frozen=True)
class GenericChange:
    action: str = ""


ActivityShape = Union[ProcessCreated, ProcessDeleted, ProcessUpdated, GenericChange]


def _as_dict(details: Any) -> Dict[str, Any]:
    if isinstance(details, str):
        try:
            details = json.loads(details)
        except ValueError:
            return {}
    return details if isinstance(details, dict) else {}


def parse_activity(action: str, entity_type: Optional[str], details: Any) -> ActivityShape:
    if entity_type == PROCESS_ENTITY:
        if action == "INSERT":
            return ProcessCreated()
        if action == "DELETE":
            return ProcessDeleted()
        if action == "UPDATE":
            blob = _as_dict(details)
            return ProcessUpdated(tuple(key for key, value in blob.items() if value))
    return GenericChange(action or "")


_GENERATED_LABELS = (
    ("resumo", "Generated Summary"),
    ("defesa", "Generated Defense"),
    ("analise_defesa", "Generated Analysis"),
)

_GENERIC_LABELS = {
    "INSERT": "Created",
    "UPDATE": "Updated",
    "DELETE": "Deleted",
}


def describe_activity(action: str, entity_type: Optional[str], details: Any) -> str:
    shape = parse_activity(action, entity_type, details)
    if isinstance(shape, ProcessCreated):
        return "Created Process"
    if isinstance(shape, ProcessDeleted):
        return "Deleted Process"
    if isinstance(shape, ProcessUpdated):
        for field_name, label in _GENERATED_LABELS:
            if field_name in shape.changed_fields:
                return label
        return "Updated Process"
    return _GENERIC_LABELS.get(shape.action, shape.action)


# ============================================================================
# Enrichment lookups
# ============================================================================

def _process_id(entity_id: Optional[str]) -> Optional[int]:
    try:
        return int(entity_id)
    except (TypeError, ValueError):
        return None


def _lookup_processes(db: Session, ids: List[int]) -> Dict[int, Dict[str, Any]]:
    if not ids:
        return {}
    try:
        rows = (
            db.query(Process.id, Process.titulo, Process.numero_processo, Process.user_id)
            .filter(Process.id.in_(ids))
            .all()
        )
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning(f"Activity process lookup failed: {e}")
        return {}
    return {
        row.id: {"titulo": row.titulo, "numero_processo": row.numero_processo, "user_id": row.user_id}
        for row in rows
    }


def _lookup_names(db: Session, user_ids: List[UUID]) -> Dict[UUID, Optional[str]]:
    try:
        return user_directory.profile_names(db, user_ids)
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning(f"Activity profile lookup failed: {e}")
        return {}


def _lookup_emails(db: Session, viewer: AuthSession, user_ids: List[UUID]) -> Dict[UUID, Optional[str]]:
    if not viewer.is_admin or not user_ids:
        return {}
    try:
        return {m["user_id"]: m["email"] for m in user_directory.emails_for_ids(db, viewer, user_ids)}
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning(f"Activity email lookup failed: {e}")
        return {}


def process_display_name(process: Optional[Dict[str, Any]]) -> str:
    if not process:
        return PLACEHOLDER
    return process.get("titulo") or process.get("numero_processo") or PLACEHOLDER


def user_display_name(
    user_id: Optional[UUID],
    names: Dict[UUID, Optional[str]],
    emails: Dict[UUID, Optional[str]],
) -> str:
    if user_id is None:
        return PLACEHOLDER
    return names.get(user_id) or emails.get(user_id) or f"{str(user_id)[:8]}..."


# ============================================================================
# Listing
# ============================================================================

def list_recent(db: Session, viewer: AuthSession, limit: Optional[int] = None) -> List[Dict[str, Any]]:
    """Most recent entries first, each enriched for display."""
    limit = limit or settings.ACTIVITY_DEFAULT_LIMIT
    records = (
        db.query(ActivityRecord)
        .order_by(ActivityRecord.created_at.desc())
        .limit(limit)
        .all()
    )
    if not records:
        return []

    process_ids = {
        pid
        for pid in (_process_id(r.entity_id) for r in records if r.entity_type == PROCESS_ENTITY)
        if pid is not None
    }
    processes = _lookup_processes(db, sorted(process_ids))

    def process_for(record: ActivityRecord) -> Optional[Dict[str, Any]]:
        if record.entity_type != PROCESS_ENTITY:
            return None
        pid = _process_id(record.entity_id)
        return processes.get(pid) if pid is not None else None

    actors: Dict[UUID, Optional[UUID]] = {}
    for record in records:
        process = process_for(record)
        actors[record.id] = record.user_id or (process or {}).get("user_id")

    user_ids = sorted({uid for uid in actors.values() if uid is not None}, key=str)
    names = _lookup_names(db, user_ids)
    emails = _lookup_emails(db, viewer, user_ids)

    entries = []
    for record in records:
        process = process_for(record)
        entries.append({
            "id": record.id,
            "action": record.action,
            "description": describe_activity(record.action, record.entity_type, record.details),
            "entity_type": record.entity_type,
            "entity_id": record.entity_id,
            "process_name": process_display_name(process) if record.entity_type == PROCESS_ENTITY else PLACEHOLDER,
            "user_display": user_display_name(actors[record.id], names, emails),
            "created_at": record.created_at,
        })
    return entries
