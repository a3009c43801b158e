"""
Sharing registry

Grants read/write visibility of a process to another registered user.
Uniqueness of (process, recipient) is enforced by the database constraint;
the insert runs inside a SAVEPOINT so a duplicate leaves nothing behind.
"""
from __future__ import annotations

from typing import Dict, List
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from juridico.core.logger import logger
from juridico.core.session import AuthSession
from juridico.db import policies
from juridico.db.models import Process, ProcessShare
from juridico.services import user_directory
from juridico.services.process_service import get_process
from juridico.utils.exceptions import (
    AlreadySharedError,
    ForbiddenError,
    RecipientNotFoundError,
    SelfShareForbiddenError,
)

EMAIL_NOT_FOUND = "Email não encontrado"


def _managed_process(db: Session, session: AuthSession, process_id: int) -> Process:
    process = get_process(db, session, process_id)
    if not policies.can_manage_shares(process, session.user_id, session.is_admin):
        raise ForbiddenError("Only the owner or an administrator can manage sharing")
    return process


def share(db: Session, session: AuthSession, process_id: int, recipient_email: str) -> ProcessShare:
    process = _managed_process(db, session, process_id)

    recipient_id = user_directory.user_id_for_email(db, recipient_email)
    if recipient_id is None:
        raise RecipientNotFoundError(recipient_email)
    if recipient_id == process.user_id:
        raise SelfShareForbiddenError()

    grant = ProcessShare(
        processo_id=process.id,
        shared_by_user_id=session.user_id,
        shared_with_user_id=recipient_id,
    )
    try:
        with db.begin_nested():
            db.add(grant)
    except IntegrityError:
        logger.info(f"Process {process_id} already shared with {recipient_id}")
        raise AlreadySharedError()
    db.commit()
    db.refresh(grant)

    logger.info(f"Process {process_id} shared with {recipient_id} by {session.user_id}")
    return grant


def unshare(db: Session, session: AuthSession, process_id: int, grant_id: UUID) -> None:
    """Removing a grant that no longer exists is a success."""
    _managed_process(db, session, process_id)

    grant = (
        db.query(ProcessShare)
        .filter(ProcessShare.id == grant_id, ProcessShare.processo_id == process_id)
        .first()
    )
    if grant is None:
        logger.info(f"Grant {grant_id} on process {process_id} already gone")
        return

    db.delete(grant)
    db.commit()
    logger.info(f"Grant {grant_id} on process {process_id} removed by {session.user_id}")


def list_shares(db: Session, session: AuthSession, process_id: int) -> List[Dict]:
    """Grants of a visible process, oldest first, with recipient emails resolved."""
    get_process(db, session, process_id)

    grants = (
        db.query(ProcessShare)
        .filter(ProcessShare.processo_id == process_id)
        .order_by(ProcessShare.created_at.asc())
        .all()
    )
    if not grants:
        return []

    emails = user_directory.email_map(db, [g.shared_with_user_id for g in grants])

    return [
        {
            "id": grant.id,
            "shared_with_user_id": grant.shared_with_user_id,
            "recipient_email": emails.get(grant.shared_with_user_id) or EMAIL_NOT_FOUND,
            "shared_at": grant.created_at,
        }
        for grant in grants
    ]
