"""
Health and readiness checks
"""
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from juridico.core.config import settings
from juridico.core.logger import logger
from juridico.db.database import get_db

router = APIRouter()


def _check_database(db: Session) -> tuple[str, str]:
    """Returns (status, detail). Status is 'ok' or 'error'."""
    try:
        db.execute(text("SELECT 1"))
        return "ok", "Database reachable"
    except SQLAlchemyError as e:
        return "error", f"Database: {str(e)}"


@router.get("/")
def health():
    return {"status": "healthy", "version": settings.APP_VERSION}


@router.get("/ready")
def readiness(db: Session = Depends(get_db)):
    db_status, db_detail = _check_database(db)
    if db_status != "ok":
        logger.warning(f"Readiness check failed: {db_detail}")
    return {
        "status": "ready" if db_status == "ok" else "degraded",
        "checks": {"database": {"status": db_status, "detail": db_detail}},
    }
