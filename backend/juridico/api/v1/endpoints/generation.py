"""
AI generation endpoints (mounted under /processes)

Each call blocks until the workflow answers; the client shows a pending
state meanwhile.
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from juridico.api.v1.deps import get_auth_session, get_gateway
from juridico.core.session import AuthSession
from juridico.db import schemas
from juridico.db.database import get_db
from juridico.services import generation_service
from juridico.services.ai_gateway import AIGateway, GenerationAction

router = APIRouter()


def _response(result: generation_service.GenerationResult) -> schemas.GenerationResponse:
    return schemas.GenerationResponse(
        process_id=result.process_id,
        action=result.action.value,
        text=result.text,
        persisted=result.persisted,
        versao=result.versao,
    )


@router.post("/{process_id}/ai/summary", response_model=schemas.GenerationResponse)
def generate_summary(
    process_id: int,
    session: AuthSession = Depends(get_auth_session),
    db: Session = Depends(get_db),
    gateway: AIGateway = Depends(get_gateway),
):
    """Generate the case summary and store it on the process."""
    result = generation_service.generate(
        db, session, gateway, process_id, GenerationAction.create_summary
    )
    return _response(result)


@router.post("/{process_id}/ai/defense", response_model=schemas.GenerationResponse)
def generate_defense(
    process_id: int,
    session: AuthSession = Depends(get_auth_session),
    db: Session = Depends(get_db),
    gateway: AIGateway = Depends(get_gateway),
):
    """Generate a defense, store it on the process and add it to the history."""
    result = generation_service.generate(
        db, session, gateway, process_id, GenerationAction.create_defense
    )
    return _response(result)


@router.post("/{process_id}/ai/analysis", response_model=schemas.GenerationResponse)
def analyze_defense(
    process_id: int,
    persist: bool = Query(False, description="Save (defense, analysis) as a new analysis version"),
    session: AuthSession = Depends(get_auth_session),
    db: Session = Depends(get_db),
    gateway: AIGateway = Depends(get_gateway),
):
    """Analyze the current defense. The result is returned only unless persist=true."""
    result = generation_service.generate(
        db, session, gateway, process_id, GenerationAction.analyze_defense, persist=persist
    )
    return _response(result)
