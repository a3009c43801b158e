"""
Process chat

Question/answer sessions about one process. The question is stored before
the workflow is asked, so a failed call still leaves the question on record
(without an answer).
"""
from __future__ import annotations

from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from juridico.core.logger import logger
from juridico.core.session import AuthSession
from juridico.db.models import ChatMessage, ChatResponse, ChatSession, PromptSuggestion
from juridico.services.ai_gateway import AIGateway
from juridico.services.process_service import get_process
from juridico.utils.exceptions import NotFoundError


def create_session(db: Session, session: AuthSession, process_id: int, nome: Optional[str] = None) -> ChatSession:
    process = get_process(db, session, process_id)
    chat = ChatSession(processo_id=process.id, user_uuid=session.user_id, nome=nome)
    db.add(chat)
    db.commit()
    db.refresh(chat)
    logger.info(f"Chat session {chat.id} opened on process {process.id}")
    return chat


def list_sessions(db: Session, session: AuthSession, process_id: int) -> List[ChatSession]:
    get_process(db, session, process_id)
    return (
        db.query(ChatSession)
        .filter(ChatSession.processo_id == process_id, ChatSession.user_uuid == session.user_id)
        .order_by(ChatSession.created_at.desc(), ChatSession.id.desc())
        .all()
    )


def _own_session(db: Session, session: AuthSession, session_id: int) -> ChatSession:
    chat = (
        db.query(ChatSession)
        .filter(ChatSession.id == session_id, ChatSession.user_uuid == session.user_id)
        .first()
    )
    if chat is None:
        raise NotFoundError(f"Chat session {session_id} not found")
    # the process may have been unshared since the session was opened
    get_process(db, session, chat.processo_id)
    return chat


def _exchange(message: ChatMessage) -> Dict:
    answer = message.responses[-1].resposta if message.responses else None
    return {
        "message_id": message.id,
        "pergunta": message.pergunta,
        "arquivo": message.arquivo,
        "resposta": answer,
        "created_at": message.created_at,
    }


def ask(
    db: Session,
    session: AuthSession,
    gateway: AIGateway,
    session_id: int,
    pergunta: str,
    arquivo: Optional[str] = None,
) -> Dict:
    chat = _own_session(db, session, session_id)

    message = ChatMessage(session_id=chat.id, pergunta=pergunta, arquivo=arquivo)
    db.add(message)
    db.commit()
    db.refresh(message)

    answer = gateway.ask(chat.processo_id, chat.id, pergunta)

    db.add(ChatResponse(id_pergunta=message.id, resposta=answer))
    db.commit()
    db.refresh(message)
    return _exchange(message)


def list_messages(db: Session, session: AuthSession, session_id: int) -> List[Dict]:
    chat = _own_session(db, session, session_id)
    return [_exchange(message) for message in chat.messages]


# ============================================================================
# Prompt suggestions
# ============================================================================

def list_suggestions(db: Session, session: AuthSession) -> List[PromptSuggestion]:
    return (
        db.query(PromptSuggestion)
        .filter(PromptSuggestion.user_id == session.user_id)
        .order_by(PromptSuggestion.created_at.desc(), PromptSuggestion.id.desc())
        .all()
    )


def add_suggestion(db: Session, session: AuthSession, prompt_text: str) -> PromptSuggestion:
    suggestion = PromptSuggestion(user_id=session.user_id, prompt_text=prompt_text.strip())
    db.add(suggestion)
    db.commit()
    db.refresh(suggestion)
    return suggestion


def delete_suggestion(db: Session, session: AuthSession, suggestion_id: int) -> None:
    suggestion = (
        db.query(PromptSuggestion)
        .filter(PromptSuggestion.id == suggestion_id, PromptSuggestion.user_id == session.user_id)
        .first()
    )
    if suggestion is None:
        raise NotFoundError(f"Suggestion {suggestion_id} not found")
    db.delete(suggestion)
    db.commit()
