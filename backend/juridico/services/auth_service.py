"""
Auth service

Drives ``AuthSession`` through its states for the two ways a session comes
to exist: an explicit sign-in and the restore of a token sent with a request.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional, Tuple
from uuid import UUID

import jwt
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from juridico.core.logger import logger
from juridico.core.security import create_access_token, decode_access_token, verify_password
from juridico.core.session import AuthSession, Identity
from juridico.db import policies
from juridico.db.models import AuthSessionRecord, User
from juridico.utils.exceptions import InvalidCredentialsError


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def resolve_role(db: Session, user_id: UUID) -> bool:
    """
    True when the user holds the admin role. A failed lookup counts as
    "not admin"; the failure is logged, never raised.
    """
    try:
        return policies.is_admin(db, user_id)
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning(f"Role lookup failed for user {user_id}: {e}")
        return False


def _parse_uuid(value) -> Optional[UUID]:
    try:
        return UUID(str(value))
    except (TypeError, ValueError):
        return None


def sign_in(db: Session, email: str, password: str) -> Tuple[str, AuthSession]:
    session = AuthSession()
    generation = session.begin()

    email = normalize_email(email)
    user = db.query(User).filter(User.email == email).first()
    if not user or not user.is_active or not verify_password(password, user.password_hash):
        session.failed(generation)
        logger.info(f"Sign-in rejected for {email}")
        raise InvalidCredentialsError()

    record = AuthSessionRecord(user_id=user.id)
    db.add(record)
    user.last_login_at = datetime.utcnow()
    db.commit()
    db.refresh(record)

    session.session_established(Identity(user.id, user.email, record.id), generation)
    session.role_resolved(resolve_role(db, user.id), generation)

    token = create_access_token(data={"sub": str(user.id), "sid": str(record.id)})
    logger.info(f"User {user.id} signed in (session {record.id})")
    return token, session


def restore_session(db: Session, token: Optional[str]) -> AuthSession:
    """
    Rebuild the session a bearer token stands for. Returns an ANONYMOUS
    session for a missing, invalid, expired or revoked token.
    """
    session = AuthSession()
    generation = session.begin()

    if not token:
        session.failed(generation)
        return session

    try:
        payload = decode_access_token(token)
    except jwt.PyJWTError:
        session.failed(generation)
        return session

    user_id = _parse_uuid(payload.get("sub"))
    session_id = _parse_uuid(payload.get("sid"))
    if user_id is None or session_id is None:
        session.failed(generation)
        return session

    record = db.query(AuthSessionRecord).filter(AuthSessionRecord.id == session_id).first()
    if record is None or record.revoked_at is not None or record.user_id != user_id:
        session.failed(generation)
        return session

    user = db.query(User).filter(User.id == user_id).first()
    if user is None or not user.is_active:
        session.failed(generation)
        return session

    session.session_established(Identity(user.id, user.email, record.id), generation)
    session.role_resolved(resolve_role(db, user.id), generation)
    return session


def sign_out(db: Session, session: AuthSession) -> None:
    """Revoke the server-side session. Always succeeds."""
    identity = session.identity
    if identity is not None and identity.session_id is not None:
        record = (
            db.query(AuthSessionRecord)
            .filter(AuthSessionRecord.id == identity.session_id)
            .first()
        )
        if record is not None and record.revoked_at is None:
            record.revoked_at = datetime.utcnow()
            db.commit()
            logger.info(f"Session {record.id} revoked")
    session.signed_out()
