"""
Database Module

Contains SQLAlchemy models, Pydantic schemas, access policies and the
activity-trail flush hooks.
"""

from juridico.db.database import Base, engine, SessionLocal, get_db
from juridico.db import models, schemas, policies, activity_hooks

__all__ = [
    'Base',
    'engine',
    'SessionLocal',
    'get_db',
    'models',
    'schemas',
    'policies',
    'activity_hooks',
]
