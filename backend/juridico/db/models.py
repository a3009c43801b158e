"""
SQLAlchemy ORM Models

Table and column names follow the Portuguese schema the web client and the
AI workflow already read (``processos``, ``titulo``, ``resumo`` ...).
"""

from __future__ import annotations

import enum
import uuid
from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Enum as SQLEnum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    TIMESTAMP,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import relationship

from juridico.db.database import Base

JSONType = JSON().with_variant(JSONB(), "postgresql")


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]

# ============================================================================
# Enums
# ============================================================================

class UserRole(str, enum.Enum):
    """User roles"""
    admin = "admin"
    user = "user"


class ProcessStatus(str, enum.Enum):
    """Process status enum"""
    in_progress = "Em andamento"
    concluded = "Concluido"


class ActivityAction(str, enum.Enum):
    insert = "INSERT"
    update = "UPDATE"
    delete = "DELETE"


# ============================================================================
# Users
# ============================================================================

class User(Base):
    """Authenticated account"""
    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # Authentication
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True, server_default="1")

    # Timestamps
    created_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow)
    updated_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
    last_login_at = Column(TIMESTAMP, nullable=True)

    # Client-side UI state (e.g. last visited route)
    preferences = Column(JSONType, nullable=False, default=dict)

    # Relationships
    profile = relationship("UserProfile", back_populates="user", uselist=False, cascade="all, delete-orphan", passive_deletes=True)
    roles = relationship("UserRoleGrant", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
    sessions = relationship("AuthSessionRecord", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
    processes = relationship("Process", back_populates="owner", cascade="all, delete-orphan", passive_deletes=True)
    suggestions = relationship("PromptSuggestion", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)


class UserProfile(Base):
    """Display data for a user"""
    __tablename__ = "user_profiles"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    nome = Column(String(255), nullable=True)
    created_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow)
    updated_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="profile")


class UserRoleGrant(Base):
    """Role row; a user without an ``admin`` row is a regular user."""
    __tablename__ = "user_roles"
    __table_args__ = (
        UniqueConstraint("user_id", "role", name="uq_user_roles_user_role"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(SQLEnum(UserRole, name="app_role", values_callable=_enum_values), nullable=False)
    created_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow)

    user = relationship("User", back_populates="roles")


class AuthSessionRecord(Base):
    """Server-side half of an access token; sign-out revokes it."""
    __tablename__ = "auth_sessions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow)
    revoked_at = Column(TIMESTAMP, nullable=True)

    user = relationship("User", back_populates="sessions")


# ============================================================================
# Processes
# ============================================================================

class Process(Base):
    """Legal case ("processo")"""
    __tablename__ = "processos"
    __table_args__ = (
        Index("ix_processos_user_created", "user_id", "created_at"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)

    titulo = Column(String(500), nullable=True)
    numero_processo = Column(String(100), nullable=True)
    descricao = Column(Text, nullable=True)
    status = Column(
        SQLEnum(ProcessStatus, name="process_status", values_callable=_enum_values),
        nullable=False,
        default=ProcessStatus.in_progress,
    )
    empresas_envolvidas = Column(JSONType, nullable=False, default=list)
    etiquetas = Column(JSONType, nullable=False, default=list)

    # AI-generated text
    resumo = Column(Text, nullable=True)
    defesa = Column(Text, nullable=True)

    arquivos_url = Column(JSONType, nullable=False, default=list)

    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    created_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow)
    updated_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    owner = relationship("User", back_populates="processes")
    shares = relationship("ProcessShare", back_populates="process", cascade="all, delete-orphan", passive_deletes=True)
    defense_history = relationship("DefenseHistory", back_populates="process", cascade="all, delete-orphan", passive_deletes=True)
    analyses = relationship("DefenseAnalysis", back_populates="process", cascade="all, delete-orphan", passive_deletes=True)
    chat_sessions = relationship("ChatSession", back_populates="process", cascade="all, delete-orphan", passive_deletes=True)


class ProcessShare(Base):
    """Read grant of a process to a user who does not own it."""
    __tablename__ = "processo_compartilhamentos"
    __table_args__ = (
        UniqueConstraint("processo_id", "shared_with_user_id", name="uq_compartilhamento_processo_usuario"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    processo_id = Column(Integer, ForeignKey("processos.id", ondelete="CASCADE"), nullable=False, index=True)
    shared_by_user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    shared_with_user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow)

    process = relationship("Process", back_populates="shares")


class DefenseHistory(Base):
    """Immutable snapshot of a generated defense."""
    __tablename__ = "defesa_historico"
    __table_args__ = (
        UniqueConstraint("processo_id", "versao", name="uq_defesa_historico_versao"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    processo_id = Column(Integer, ForeignKey("processos.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    versao = Column(Integer, nullable=False)
    conteudo = Column(Text, nullable=False)
    created_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow)

    process = relationship("Process", back_populates="defense_history")


class DefenseAnalysis(Base):
    """Immutable snapshot of a defense together with its analysis."""
    __tablename__ = "analise_defesa"
    __table_args__ = (
        UniqueConstraint("processo_id", "versao", name="uq_analise_defesa_versao"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    processo_id = Column(Integer, ForeignKey("processos.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    versao = Column(Integer, nullable=False)
    defesa_analisada = Column(Text, nullable=False)
    conteudo_analise = Column(Text, nullable=False)
    created_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow)

    process = relationship("Process", back_populates="analyses")


# ============================================================================
# Activity trail
# ============================================================================

class ActivityRecord(Base):
    """
    Append-only audit entry. Written by the flush hooks in
    ``juridico.db.activity_hooks``; no foreign keys so entries outlive
    the rows they describe.
    """
    __tablename__ = "user_activity_history"
    __table_args__ = (
        Index("ix_user_activity_history_created", "created_at"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), nullable=True)
    action = Column(String(10), nullable=False)
    entity_type = Column(String(64), nullable=True)
    entity_id = Column(String(64), nullable=True)
    details = Column(JSONType, nullable=True)
    created_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow)


# ============================================================================
# Chat & prompt suggestions
# ============================================================================

class ChatSession(Base):
    __tablename__ = "chat_sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    processo_id = Column(Integer, ForeignKey("processos.id", ondelete="CASCADE"), nullable=False, index=True)
    user_uuid = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    nome = Column(String(255), nullable=True)
    created_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow)

    process = relationship("Process", back_populates="chat_sessions")
    messages = relationship(
        "ChatMessage",
        back_populates="session",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ChatMessage.id",
    )


class ChatMessage(Base):
    """A question asked in a chat session"""
    __tablename__ = "chat_mensagens"

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_id = Column(Integer, ForeignKey("chat_sessions.id", ondelete="CASCADE"), nullable=False, index=True)
    pergunta = Column(Text, nullable=False)
    arquivo = Column(String(1024), nullable=True)
    created_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow)

    session = relationship("ChatSession", back_populates="messages")
    responses = relationship("ChatResponse", back_populates="message", cascade="all, delete-orphan", passive_deletes=True)


class ChatResponse(Base):
    """The workflow's answer to a chat question"""
    __tablename__ = "chat_respostas"

    id = Column(Integer, primary_key=True, autoincrement=True)
    id_pergunta = Column(Integer, ForeignKey("chat_mensagens.id", ondelete="CASCADE"), nullable=False, index=True)
    resposta = Column(Text, nullable=False)
    created_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow)

    message = relationship("ChatMessage", back_populates="responses")


class PromptSuggestion(Base):
    __tablename__ = "sugestoes_prompts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    prompt_text = Column(Text, nullable=False)
    created_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow)
    updated_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="suggestions")
