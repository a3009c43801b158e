"""
Process chat endpoints
"""
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from juridico.api.v1.deps import get_auth_session, get_gateway
from juridico.core.session import AuthSession
from juridico.db import schemas
from juridico.db.database import get_db
from juridico.services import chat_service
from juridico.services.ai_gateway import AIGateway

router = APIRouter()


@router.post("/processes/{process_id}/chat/sessions", response_model=schemas.ChatSessionResponse, status_code=201)
def open_session(
    process_id: int,
    payload: schemas.ChatSessionCreate,
    session: AuthSession = Depends(get_auth_session),
    db: Session = Depends(get_db),
):
    return chat_service.create_session(db, session, process_id, payload.nome)


@router.get("/processes/{process_id}/chat/sessions", response_model=List[schemas.ChatSessionResponse])
def list_sessions(
    process_id: int,
    session: AuthSession = Depends(get_auth_session),
    db: Session = Depends(get_db),
):
    return chat_service.list_sessions(db, session, process_id)


@router.post("/chat/sessions/{session_id}/messages", response_model=schemas.ChatExchange)
def ask(
    session_id: int,
    payload: schemas.ChatQuestion,
    session: AuthSession = Depends(get_auth_session),
    db: Session = Depends(get_db),
    gateway: AIGateway = Depends(get_gateway),
):
    """Ask a question; blocks until the workflow answers."""
    return chat_service.ask(db, session, gateway, session_id, payload.pergunta, payload.arquivo)


@router.get("/chat/sessions/{session_id}/messages", response_model=List[schemas.ChatExchange])
def list_messages(
    session_id: int,
    session: AuthSession = Depends(get_auth_session),
    db: Session = Depends(get_db),
):
    return chat_service.list_messages(db, session, session_id)
