"""
Prompt suggestion endpoints
"""
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from juridico.api.v1.deps import get_auth_session
from juridico.core.session import AuthSession
from juridico.db import schemas
from juridico.db.database import get_db
from juridico.services import chat_service

router = APIRouter()


@router.get("/", response_model=List[schemas.SuggestionResponse])
def list_suggestions(
    session: AuthSession = Depends(get_auth_session),
    db: Session = Depends(get_db),
):
    return chat_service.list_suggestions(db, session)


@router.post("/", response_model=schemas.SuggestionResponse, status_code=201)
def add_suggestion(
    payload: schemas.SuggestionCreate,
    session: AuthSession = Depends(get_auth_session),
    db: Session = Depends(get_db),
):
    return chat_service.add_suggestion(db, session, payload.prompt_text)


@router.delete("/{suggestion_id}", status_code=204)
def delete_suggestion(
    suggestion_id: int,
    session: AuthSession = Depends(get_auth_session),
    db: Session = Depends(get_db),
):
    chat_service.delete_suggestion(db, session, suggestion_id)
