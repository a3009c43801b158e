"""
Admin console endpoints
"""
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from juridico.api.v1.deps import require_admin
from juridico.core.config import settings
from juridico.core.session import AuthSession
from juridico.db import schemas
from juridico.db.database import get_db
from juridico.services import activity_service, user_directory

router = APIRouter()

# ============================================================================
# Activity
# ============================================================================

@router.get("/activity", response_model=List[schemas.ActivityEntry])
def recent_activity(
    limit: int = Query(settings.ACTIVITY_DEFAULT_LIMIT, ge=1, le=500),
    session: AuthSession = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Most recent changes across processes, profiles and roles."""
    return activity_service.list_recent(db, session, limit=limit)


# ============================================================================
# Users
# ============================================================================

@router.get("/users", response_model=List[schemas.AdminUserResponse])
def list_users(
    session: AuthSession = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return user_directory.list_users(db, session)


@router.post("/users", response_model=schemas.AdminUserResponse, status_code=201)
def create_user(
    payload: schemas.AdminUserCreate,
    session: AuthSession = Depends(require_admin),
    db: Session = Depends(get_db),
):
    user = user_directory.provision_user(
        db, session, payload.email, payload.password, role=payload.role, nome=payload.nome
    )
    return {
        "user_id": user.id,
        "email": user.email,
        "nome": user.profile.nome if user.profile else None,
        "role": payload.role,
        "created_at": user.created_at,
    }


@router.delete("/users/{user_id}", status_code=204)
def delete_user(
    user_id: UUID,
    session: AuthSession = Depends(require_admin),
    db: Session = Depends(get_db),
):
    user_directory.delete_user(db, session, user_id)
