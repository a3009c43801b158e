"""
Sharing endpoints (mounted under /processes)
"""
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from juridico.api.v1.deps import get_auth_session
from juridico.core.session import AuthSession
from juridico.db import schemas
from juridico.db.database import get_db
from juridico.services import sharing_service

router = APIRouter()


@router.get("/{process_id}/shares", response_model=List[schemas.ShareResponse])
def list_shares(
    process_id: int,
    session: AuthSession = Depends(get_auth_session),
    db: Session = Depends(get_db),
):
    return sharing_service.list_shares(db, session, process_id)


@router.post("/{process_id}/shares", response_model=schemas.ShareResponse, status_code=201)
def share_process(
    process_id: int,
    payload: schemas.ShareCreate,
    session: AuthSession = Depends(get_auth_session),
    db: Session = Depends(get_db),
):
    """
    Grant a registered user access to the process.
    404 unknown recipient, 400 recipient is the owner, 409 already shared.
    """
    grant = sharing_service.share(db, session, process_id, payload.recipient_email)
    return {
        "id": grant.id,
        "shared_with_user_id": grant.shared_with_user_id,
        "recipient_email": payload.recipient_email.lower(),
        "shared_at": grant.created_at,
    }


@router.delete("/{process_id}/shares/{grant_id}", status_code=204)
def unshare_process(
    process_id: int,
    grant_id: UUID,
    session: AuthSession = Depends(get_auth_session),
    db: Session = Depends(get_db),
):
    sharing_service.unshare(db, session, process_id, grant_id)
