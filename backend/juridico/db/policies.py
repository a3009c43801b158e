"""
Row-level access rules.

Every read or write of a process goes through these checks:
  * the owner sees and edits their own rows;
  * an admin sees and edits every row;
  * a share recipient sees and edits the shared row (deletion stays owner-only).
"""
from uuid import UUID

from sqlalchemy.orm import Session

from juridico.db.models import Process, ProcessShare, UserRole, UserRoleGrant


def is_admin(db: Session, user_id: UUID) -> bool:
    return (
        db.query(UserRoleGrant.id)
        .filter(UserRoleGrant.user_id == user_id, UserRoleGrant.role == UserRole.admin)
        .first()
        is not None
    )


def process_shared_with_user(db: Session, process_id: int, user_id: UUID) -> bool:
    return (
        db.query(ProcessShare.id)
        .filter(
            ProcessShare.processo_id == process_id,
            ProcessShare.shared_with_user_id == user_id,
        )
        .first()
        is not None
    )


def can_view_process(db: Session, process: Process, user_id: UUID, admin: bool) -> bool:
    if admin or process.user_id == user_id:
        return True
    return process_shared_with_user(db, process.id, user_id)


def can_manage_shares(process: Process, user_id: UUID, admin: bool) -> bool:
    return admin or process.user_id == user_id


def can_delete_process(process: Process, user_id: UUID) -> bool:
    return process.user_id == user_id
