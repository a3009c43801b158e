"""
User directory & provisioning

Privileged lookups between user ids and emails, and the admin-side account
management (create, list, delete). Emails are only ever exposed by id to
administrators; resolving an email to an id is open to any signed-in user
because sharing needs it.
"""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from juridico.core.config import settings
from juridico.core.logger import logger
from juridico.core.security import get_password_hash
from juridico.core.session import AuthSession
from juridico.db.models import User, UserProfile, UserRole, UserRoleGrant
from juridico.services.auth_service import normalize_email
from juridico.utils.exceptions import (
    EmailAlreadyRegisteredError,
    ForbiddenError,
    UserNotFoundError,
    ValidationError,
)


def _require_admin(session: AuthSession) -> None:
    if not session.is_admin:
        raise ForbiddenError("Administrator access required")


def _unique(values: Iterable) -> list:
    seen = []
    for value in values:
        if value and value not in seen:
            seen.append(value)
    return seen


# ============================================================================
# Lookups
# ============================================================================

def email_map(db: Session, user_ids: Iterable[UUID]) -> Dict[UUID, Optional[str]]:
    """Unprivileged id -> email map for server-side use; callers decide what to expose."""
    ids = _unique(user_ids)
    if not ids:
        return {}
    return dict(db.query(User.id, User.email).filter(User.id.in_(ids)).all())


def emails_for_ids(db: Session, session: AuthSession, user_ids: Iterable[UUID]) -> List[Dict]:
    """Admin only. One mapping per unique id; unknown ids map to ``None``."""
    _require_admin(session)
    ids = _unique(user_ids)
    found = email_map(db, ids)
    return [{"user_id": user_id, "email": found.get(user_id)} for user_id in ids]


def users_for_emails(db: Session, emails: Iterable[str]) -> List[Dict]:
    """Case-insensitive; unknown emails are left out of the result."""
    wanted = _unique(normalize_email(e) for e in emails)
    if not wanted:
        return []
    rows = db.query(User.id, User.email).filter(func.lower(User.email).in_(wanted)).all()
    return [{"user_id": user_id, "email": email} for user_id, email in rows]


def user_id_for_email(db: Session, email: str) -> Optional[UUID]:
    matches = users_for_emails(db, [email])
    return matches[0]["user_id"] if matches else None


def profile_names(db: Session, user_ids: Iterable[UUID]) -> Dict[UUID, Optional[str]]:
    ids = _unique(user_ids)
    if not ids:
        return {}
    return dict(
        db.query(UserProfile.user_id, UserProfile.nome)
        .filter(UserProfile.user_id.in_(ids))
        .all()
    )


# ============================================================================
# Provisioning
# ============================================================================

def _create_account(
    db: Session,
    email: str,
    password: str,
    role: UserRole = UserRole.user,
    nome: Optional[str] = None,
) -> User:
    email = normalize_email(email)
    if db.query(User.id).filter(func.lower(User.email) == email).first():
        raise EmailAlreadyRegisteredError()

    user = User(email=email, password_hash=get_password_hash(password), is_active=True)
    user.profile = UserProfile(nome=(nome or "").strip() or email.split("@")[0])
    user.roles.append(UserRoleGrant(role=UserRole(role)))
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise EmailAlreadyRegisteredError()
    db.refresh(user)
    return user


def provision_user(
    db: Session,
    session: AuthSession,
    email: str,
    password: str,
    role: UserRole = UserRole.user,
    nome: Optional[str] = None,
) -> User:
    """Admin only. Creates the account, its profile and its role row."""
    _require_admin(session)
    user = _create_account(db, email, password, role, nome)
    logger.info(f"User {user.id} ({user.email}) provisioned as {UserRole(role).value} by {session.user_id}")
    return user


def _role_of(user: User) -> UserRole:
    roles = {grant.role for grant in user.roles}
    return UserRole.admin if UserRole.admin in roles else UserRole.user


def list_users(db: Session, session: AuthSession) -> List[Dict]:
    """Admin only. Every account with its display name and effective role, newest first."""
    _require_admin(session)
    users = db.query(User).order_by(User.created_at.desc()).all()
    return [
        {
            "user_id": user.id,
            "email": user.email,
            "nome": user.profile.nome if user.profile else None,
            "role": _role_of(user),
            "created_at": user.created_at,
        }
        for user in users
    ]


def delete_user(db: Session, session: AuthSession, user_id: UUID) -> None:
    """Admin only. Removes the account and everything it owns."""
    _require_admin(session)
    if user_id == session.user_id:
        raise ValidationError("Administrators cannot delete their own account")

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise UserNotFoundError(user_id)

    # Tracked rows go through the ORM so the activity trail sees each delete;
    # the remaining dependents are left to ON DELETE CASCADE.
    for process in list(user.processes):
        db.delete(process)
    for grant in list(user.roles):
        db.delete(grant)
    if user.profile is not None:
        db.delete(user.profile)
    db.delete(user)
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to delete user {user_id}: {str(e)}")
        raise
    logger.info(f"User {user_id} deleted by {session.user_id}")


def ensure_bootstrap_admin(db: Session) -> Optional[User]:
    """
    Create the first administrator from settings when no account with that
    email exists yet. Returns the new user, or ``None`` when nothing was done.
    """
    email = normalize_email(settings.BOOTSTRAP_ADMIN_EMAIL)
    password = settings.BOOTSTRAP_ADMIN_PASSWORD
    if not email or not password:
        return None
    if db.query(User.id).filter(func.lower(User.email) == email).first():
        return None

    user = _create_account(db, email, password, UserRole.admin)
    logger.info(f"Bootstrap administrator {email} created")
    return user
