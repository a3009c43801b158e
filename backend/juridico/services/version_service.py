"""
Defense history & analysis snapshots

Append-only, per-process numbered versions. The number is computed as
``max(versao) + 1`` inside a SAVEPOINT; when two writers race for the same
number the unique constraint rejects one of them, which then retries with a
fresh number.
"""
from __future__ import annotations

from typing import List, Type, Union
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from juridico.core.logger import logger
from juridico.db.models import DefenseAnalysis, DefenseHistory

MAX_ATTEMPTS = 5

Snapshot = Union[DefenseHistory, DefenseAnalysis]


def next_version(db: Session, model: Type[Snapshot], process_id: int) -> int:
    current = db.query(func.max(model.versao)).filter(model.processo_id == process_id).scalar()
    return (current or 0) + 1


def _append(db: Session, model: Type[Snapshot], process_id: int, **values) -> Snapshot:
    last_error = None
    for attempt in range(1, MAX_ATTEMPTS + 1):
        try:
            with db.begin_nested():
                row = model(
                    processo_id=process_id,
                    versao=next_version(db, model, process_id),
                    **values,
                )
                db.add(row)
            return row
        except IntegrityError as e:
            last_error = e
            logger.warning(
                f"Version collision on {model.__tablename__} for process {process_id} "
                f"(attempt {attempt}/{MAX_ATTEMPTS})"
            )
    raise last_error


def append_defense(db: Session, process_id: int, user_id: UUID, conteudo: str) -> DefenseHistory:
    """Stage a new defense snapshot; the caller commits."""
    return _append(db, DefenseHistory, process_id, user_id=user_id, conteudo=conteudo)


def append_analysis(
    db: Session,
    process_id: int,
    user_id: UUID,
    defesa_analisada: str,
    conteudo_analise: str,
) -> DefenseAnalysis:
    """Stage a new (defense, analysis) snapshot; the caller commits."""
    return _append(
        db,
        DefenseAnalysis,
        process_id,
        user_id=user_id,
        defesa_analisada=defesa_analisada,
        conteudo_analise=conteudo_analise,
    )


def list_defense_history(db: Session, process_id: int) -> List[DefenseHistory]:
    return (
        db.query(DefenseHistory)
        .filter(DefenseHistory.processo_id == process_id)
        .order_by(DefenseHistory.versao.desc())
        .all()
    )


def list_analyses(db: Session, process_id: int) -> List[DefenseAnalysis]:
    return (
        db.query(DefenseAnalysis)
        .filter(DefenseAnalysis.processo_id == process_id)
        .order_by(DefenseAnalysis.versao.desc())
        .all()
    )
