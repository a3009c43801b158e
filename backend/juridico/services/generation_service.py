"""
Generation service

Runs one AI action against a process and applies its side effects:

  createSummary   -> text stored on ``processos.resumo``
  createDefense   -> text stored on ``processos.defesa`` + defense snapshot
  analisarDefesa  -> text returned only; with ``persist=True`` an analysis
                     snapshot of (current defense, analysis) is appended

If the workflow call fails nothing is written.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from juridico.core.logger import logger
from juridico.core.session import AuthSession
from juridico.services import version_service
from juridico.services.ai_gateway import AIGateway, GenerationAction
from juridico.services.process_service import get_process
from juridico.utils.exceptions import ValidationError


@dataclass
class GenerationResult:
    process_id: int
    action: GenerationAction
    text: str
    persisted: bool
    versao: Optional[int] = None


def generate(
    db: Session,
    session: AuthSession,
    gateway: AIGateway,
    process_id: int,
    action: GenerationAction,
    persist: bool = False,
) -> GenerationResult:
    action = GenerationAction(action)
    process = get_process(db, session, process_id)

    if action is GenerationAction.analyze_defense and persist and not process.defesa:
        raise ValidationError("Generate a defense before saving an analysis")

    text = gateway.invoke(process.id, action)

    result = GenerationResult(process_id=process.id, action=action, text=text, persisted=False)
    try:
        if action is GenerationAction.create_summary:
            process.resumo = text
            result.persisted = True
        elif action is GenerationAction.create_defense:
            process.defesa = text
            snapshot = version_service.append_defense(db, process.id, session.user_id, text)
            result.persisted = True
            result.versao = snapshot.versao
        elif persist:
            snapshot = version_service.append_analysis(
                db, process.id, session.user_id, process.defesa, text
            )
            result.persisted = True
            result.versao = snapshot.versao

        if result.persisted:
            db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to store {action.value} result for process {process_id}: {str(e)}")
        raise

    logger.info(
        f"{action.value} for process {process_id} done "
        f"({len(text)} chars, persisted={result.persisted})"
    )
    return result
