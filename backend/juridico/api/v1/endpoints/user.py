"""
Per-user UI state
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from juridico.api.v1.deps import get_current_user
from juridico.db import schemas
from juridico.db.database import get_db
from juridico.db.models import User
from juridico.services import route_memory

router = APIRouter()


@router.put("/last-path", response_model=schemas.LandingResponse)
def save_last_path(
    payload: schemas.LastPathUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    route_memory.save_last_path(db, current_user, payload.path)
    return {"path": payload.path, "saved_path": payload.path}


@router.get("/landing", response_model=schemas.LandingResponse)
def landing(
    current: str = Query("/", description="Path the client is on"),
    current_user: User = Depends(get_current_user),
):
    """Where to send the user after a fresh load of ``current``."""
    saved = route_memory.get_last_path(current_user)
    return {"path": route_memory.resolve_landing_path(saved, current), "saved_path": saved}
