"""
Process endpoints
"""
import io
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, Query, UploadFile
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from juridico.api.v1.deps import get_auth_session, get_gateway, get_storage
from juridico.core.config import settings
from juridico.core.logger import logger
from juridico.core.session import AuthSession
from juridico.db import schemas
from juridico.db.database import get_db
from juridico.db.models import ProcessStatus
from juridico.services import process_service, version_service
from juridico.services.ai_gateway import AIGateway
from juridico.services.storage_service import StorageService
from juridico.utils.exceptions import ValidationError

router = APIRouter()

# ============================================================================
# List & Filter Endpoints
# ============================================================================

@router.get("/", response_model=List[schemas.ProcessResponse])
def list_processes(
    scope: str = Query(process_service.SCOPE_MINE, description="mine | user | shared"),
    user_id: Optional[UUID] = Query(None, description="Owner to list (scope=user, admin only)"),
    q: Optional[str] = Query(None, description="Search in title or case number"),
    status: Optional[str] = Query(None, description="Filter by status ('all' for any)"),
    empresa: Optional[str] = Query(None, description="Filter by involved company"),
    etiqueta: Optional[str] = Query(None, description="Filter by label"),
    session: AuthSession = Depends(get_auth_session),
    db: Session = Depends(get_db),
):
    """
    Processes visible in the requested scope, newest first, narrowed by the
    optional filters.
    """
    processes = process_service.list_processes(db, session, scope=scope, target_user_id=user_id)
    return process_service.filter_processes(
        processes, q=q, status=status, empresa=empresa, etiqueta=etiqueta
    )


@router.get("/companies", response_model=schemas.CompaniesResponse)
def list_companies(session: AuthSession = Depends(get_auth_session)):
    """Company tags offered on the process form"""
    return {"companies": settings.available_companies_list}


# ============================================================================
# Create (multipart: fields + files)
# ============================================================================

def _notify_files(gateway: AIGateway, process_id: int, files) -> None:
    gateway.notify_files(process_id, files)


@router.post("/", response_model=schemas.ProcessResponse, status_code=201)
def create_process(
    background_tasks: BackgroundTasks,
    titulo: Optional[str] = Form(None),
    numero_processo: Optional[str] = Form(None),
    descricao: Optional[str] = Form(None),
    status: ProcessStatus = Form(ProcessStatus.in_progress),
    empresas_envolvidas: List[str] = Form([]),
    etiquetas: List[str] = Form([]),
    files: List[UploadFile] = File([]),
    session: AuthSession = Depends(get_auth_session),
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage),
    gateway: AIGateway = Depends(get_gateway),
):
    """
    Upload the attached files one by one, then create the process with their
    URLs. The first failing upload aborts the request and names the file; no
    process is created in that case. Once created, the files are handed to
    the AI workflow in the background.
    """
    try:
        fields = schemas.ProcessCreate(
            titulo=titulo,
            numero_processo=numero_processo,
            descricao=descricao,
            status=status,
            empresas_envolvidas=empresas_envolvidas,
            etiquetas=etiquetas,
        )
    except PydanticValidationError as e:
        raise ValidationError(str(e))

    urls = []
    payloads = []
    for upload in files:
        content = upload.file.read()
        content_type = upload.content_type or "application/octet-stream"
        urls.append(
            storage.upload_file(
                session.user_id,
                upload.filename,
                io.BytesIO(content),
                content_type=content_type,
                size=len(content),
            )
        )
        payloads.append((upload.filename, content, content_type))

    process = process_service.create_process(db, fields.model_dump(), session.user_id, urls)

    if payloads:
        background_tasks.add_task(_notify_files, gateway, process.id, payloads)
        logger.info(f"Queued file webhook for process {process.id} ({len(payloads)} files)")

    return process


# ============================================================================
# Single-process Endpoints
# ============================================================================

@router.get("/{process_id}", response_model=schemas.ProcessResponse)
def get_process(
    process_id: int,
    session: AuthSession = Depends(get_auth_session),
    db: Session = Depends(get_db),
):
    return process_service.get_process(db, session, process_id)


@router.patch("/{process_id}", response_model=schemas.ProcessResponse)
def update_process(
    process_id: int,
    payload: schemas.ProcessUpdate,
    session: AuthSession = Depends(get_auth_session),
    db: Session = Depends(get_db),
):
    """Partial update; fields left out of the body are untouched."""
    return process_service.update_process(
        db, session, process_id, payload.model_dump(exclude_unset=True)
    )


@router.delete("/{process_id}", status_code=204)
def delete_process(
    process_id: int,
    session: AuthSession = Depends(get_auth_session),
    db: Session = Depends(get_db),
):
    process_service.delete_process(db, session, process_id)


# ============================================================================
# Version history
# ============================================================================

@router.get("/{process_id}/defense-history", response_model=List[schemas.DefenseHistoryResponse])
def list_defense_history(
    process_id: int,
    session: AuthSession = Depends(get_auth_session),
    db: Session = Depends(get_db),
):
    process_service.get_process(db, session, process_id)
    return version_service.list_defense_history(db, process_id)


@router.get("/{process_id}/analyses", response_model=List[schemas.DefenseAnalysisResponse])
def list_analyses(
    process_id: int,
    session: AuthSession = Depends(get_auth_session),
    db: Session = Depends(get_db),
):
    process_service.get_process(db, session, process_id)
    return version_service.list_analyses(db, process_id)
