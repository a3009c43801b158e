"""
User directory lookups
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from juridico.api.v1.deps import get_auth_session
from juridico.core.session import AuthSession
from juridico.db import schemas
from juridico.db.database import get_db
from juridico.services import user_directory
from juridico.utils.exceptions import ValidationError

router = APIRouter()


@router.post("/lookup", response_model=schemas.DirectoryLookupResponse)
def lookup(
    payload: schemas.DirectoryLookupRequest,
    session: AuthSession = Depends(get_auth_session),
    db: Session = Depends(get_db),
):
    """
    ``user_ids``    -> emails (administrators only)
    ``user_emails`` -> ids (any signed-in user; unknown emails are omitted)
    """
    if payload.user_ids:
        mappings = user_directory.emails_for_ids(db, session, payload.user_ids)
    elif payload.user_emails:
        mappings = user_directory.users_for_emails(db, payload.user_emails)
    else:
        raise ValidationError("Provide user_ids or user_emails")
    return {"mappings": mappings}
