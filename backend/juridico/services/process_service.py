"""
Process repository

CRUD over ``processos`` scoped by ownership, share grants and the admin role.
Invisible rows are reported as not found, never as forbidden, so callers
cannot probe for ids they have no access to.
"""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from juridico.core.logger import logger
from juridico.core.session import AuthSession
from juridico.db import policies
from juridico.db.models import Process, ProcessShare, ProcessStatus
from juridico.utils.exceptions import ForbiddenError, ProcessNotFoundError, ValidationError

SCOPE_MINE = "mine"
SCOPE_USER = "user"
SCOPE_SHARED = "shared"
SCOPES = (SCOPE_MINE, SCOPE_USER, SCOPE_SHARED)

# Fields a caller may write through update_process
UPDATABLE_FIELDS = (
    "titulo",
    "numero_processo",
    "descricao",
    "status",
    "empresas_envolvidas",
    "etiquetas",
    "resumo",
    "defesa",
)

_ALL = "all"


def _commit(db: Session, what: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to {what}: {str(e)}")
        raise


def _newest_first(query):
    return query.order_by(Process.created_at.desc(), Process.id.desc())


# ============================================================================
# Reads
# ============================================================================

def get_process(db: Session, session: AuthSession, process_id: int) -> Process:
    process = db.query(Process).filter(Process.id == process_id).first()
    if process is None or not policies.can_view_process(db, process, session.user_id, session.is_admin):
        raise ProcessNotFoundError(process_id)
    return process


def list_processes(
    db: Session,
    session: AuthSession,
    scope: str = SCOPE_MINE,
    target_user_id: Optional[UUID] = None,
) -> List[Process]:
    """
    scope="mine"   -> processes the caller owns
    scope="user"   -> processes owned by ``target_user_id`` (admin only)
    scope="shared" -> processes other users shared with the caller
    """
    if scope == SCOPE_MINE:
        query = db.query(Process).filter(Process.user_id == session.user_id)
    elif scope == SCOPE_USER:
        if not session.is_admin:
            raise ForbiddenError("Only administrators can list another user's processes")
        if target_user_id is None:
            raise ValidationError("user_id is required for scope=user")
        query = db.query(Process).filter(Process.user_id == target_user_id)
    elif scope == SCOPE_SHARED:
        query = (
            db.query(Process)
            .join(ProcessShare, ProcessShare.processo_id == Process.id)
            .filter(ProcessShare.shared_with_user_id == session.user_id)
        )
    else:
        raise ValidationError(f"Unknown scope '{scope}'. Use one of: {', '.join(SCOPES)}")

    return _newest_first(query).all()


def _is_unset(value: Optional[str]) -> bool:
    return value is None or value == "" or value == _ALL


def filter_processes(
    processes: Iterable[Process],
    q: Optional[str] = None,
    status: Optional[str] = None,
    empresa: Optional[str] = None,
    etiqueta: Optional[str] = None,
) -> List[Process]:
    """
    Narrow an already fetched list. ``q`` matches title or case number
    (case-insensitive substring), ``status`` must match exactly, and
    ``empresa`` / ``etiqueta`` must be among the process tags. Empty or
    "all" disables a filter. Input order is preserved.
    """
    needle = (q or "").strip().lower()
    result = []
    for process in processes:
        if needle:
            titulo = (process.titulo or "").lower()
            numero = (process.numero_processo or "").lower()
            if needle not in titulo and needle not in numero:
                continue
        if not _is_unset(status):
            current = getattr(process.status, "value", process.status)
            if current != status:
                continue
        if not _is_unset(empresa) and empresa not in (process.empresas_envolvidas or []):
            continue
        if not _is_unset(etiqueta) and etiqueta not in (process.etiquetas or []):
            continue
        result.append(process)
    return result


# ============================================================================
# Writes
# ============================================================================

def create_process(
    db: Session,
    fields: Dict[str, Any],
    owner_id: UUID,
    file_refs: Optional[List[str]] = None,
) -> Process:
    """Persist a new process owned by ``owner_id``. File refs are stored as given."""
    process = Process(
        titulo=fields.get("titulo"),
        numero_processo=fields.get("numero_processo"),
        descricao=fields.get("descricao"),
        status=fields.get("status") or ProcessStatus.in_progress,
        empresas_envolvidas=list(fields.get("empresas_envolvidas") or []),
        etiquetas=list(fields.get("etiquetas") or []),
        arquivos_url=list(file_refs or []),
        user_id=owner_id,
    )
    db.add(process)
    _commit(db, "create process")
    db.refresh(process)
    logger.info(f"Process {process.id} created by {owner_id} with {len(process.arquivos_url)} files")
    return process


def update_process(
    db: Session,
    session: AuthSession,
    process_id: int,
    partial: Dict[str, Any],
) -> Process:
    """
    Write the given fields. Owner, admin and share recipients may update;
    concurrent updates are last-write-wins.
    """
    process = get_process(db, session, process_id)

    changed = []
    for key, value in partial.items():
        if key not in UPDATABLE_FIELDS:
            continue
        if key == "status" and value is None:
            continue
        if key in ("empresas_envolvidas", "etiquetas"):
            value = list(value or [])
        setattr(process, key, value)
        changed.append(key)

    if changed:
        _commit(db, f"update process {process_id}")
        db.refresh(process)
        logger.info(f"Process {process_id} updated by {session.user_id}: {', '.join(changed)}")
    return process


def delete_process(db: Session, session: AuthSession, process_id: int) -> None:
    """Owner only. Shares, defense history and analyses go with it (FK cascade)."""
    process = get_process(db, session, process_id)
    if not policies.can_delete_process(process, session.user_id):
        raise ForbiddenError("Only the owner can delete a process")

    db.delete(process)
    _commit(db, f"delete process {process_id}")
    logger.info(f"Process {process_id} deleted by {session.user_id}")
