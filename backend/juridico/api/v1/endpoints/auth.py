"""
Authentication endpoints
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from juridico.api.v1.deps import get_auth_session
from juridico.core.session import AuthSession
from juridico.db import schemas
from juridico.db.database import get_db
from juridico.services import auth_service

router = APIRouter()


def _session_out(session: AuthSession) -> schemas.SessionOut:
    identity = session.identity
    return schemas.SessionOut(
        identity=schemas.IdentityOut(user_id=identity.user_id, email=identity.email),
        is_admin=session.is_admin,
        state=session.state.value,
    )


@router.post("/login", response_model=schemas.TokenResponse)
def login(form_data: schemas.UserLogin, db: Session = Depends(get_db)):
    """Sign in with email and password. Email is matched case-insensitively."""
    token, session = auth_service.sign_in(db, form_data.email, form_data.password)
    return schemas.TokenResponse(access_token=token, session=_session_out(session))


@router.get("/me", response_model=schemas.SessionOut)
def me(session: AuthSession = Depends(get_auth_session)):
    return _session_out(session)


@router.post("/logout", response_model=schemas.MessageResponse)
def logout(
    session: AuthSession = Depends(get_auth_session),
    db: Session = Depends(get_db),
):
    """Revoke the current session; the token stops working immediately."""
    auth_service.sign_out(db, session)
    return {"message": "Logged out successfully"}
