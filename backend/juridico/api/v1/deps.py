# juridico/api/v1/deps.py

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from juridico.core.session import AuthSession
from juridico.db.activity_hooks import set_actor
from juridico.db.database import get_db
from juridico.db.models import User
from juridico.services import auth_service
from juridico.services.ai_gateway import AIGateway, get_ai_gateway
from juridico.services.storage_service import StorageService, get_storage_service
from juridico.utils.exceptions import AuthError, ForbiddenError

security = HTTPBearer(auto_error=False)

# ============================================================================
# Session Dependencies
# ============================================================================

def get_auth_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> AuthSession:
    """
    Restore the session behind the bearer token. Changes flushed through
    this request's DB session are attributed to the signed-in user.
    """
    token = credentials.credentials if credentials else None
    session = auth_service.restore_session(db, token)
    if not session.is_authenticated:
        raise AuthError("Invalid or expired session")

    set_actor(db, session.user_id)
    return session


def get_current_user(
    session: AuthSession = Depends(get_auth_session),
    db: Session = Depends(get_db),
) -> User:
    user = db.query(User).filter(User.id == session.user_id).first()
    if user is None:
        raise AuthError("User not found")
    return user


def require_admin(session: AuthSession = Depends(get_auth_session)) -> AuthSession:
    if not session.is_admin:
        raise ForbiddenError("Administrator access required")
    return session


# ============================================================================
# Service Dependencies (overridden in tests)
# ============================================================================

def get_gateway() -> AIGateway:
    return get_ai_gateway()


def get_storage() -> StorageService:
    return get_storage_service()
