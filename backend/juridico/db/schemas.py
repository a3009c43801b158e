"""
Pydantic validation schemas
"""
from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, List, Dict, Any
from datetime import datetime
from uuid import UUID

from juridico.db.models import ProcessStatus, UserRole

# ============================================================================
# Auth Schemas
# ============================================================================

class UserLogin(BaseModel):
    """Login schema"""
    email: EmailStr
    password: str = Field(..., min_length=1)


class IdentityOut(BaseModel):
    user_id: UUID
    email: str


class SessionOut(BaseModel):
    """What the client needs to render: who is signed in and whether they are admin."""
    identity: IdentityOut
    is_admin: bool
    state: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    session: SessionOut


# ============================================================================
# Process Schemas
# ============================================================================

def _clean_tags(values: Optional[List[str]]) -> List[str]:
    if not values:
        return []
    seen: List[str] = []
    for value in values:
        value = (value or "").strip()
        if value and value not in seen:
            seen.append(value)
    return seen


class ProcessBase(BaseModel):
    titulo: Optional[str] = Field(None, max_length=500)
    numero_processo: Optional[str] = Field(None, max_length=100)
    descricao: Optional[str] = None
    status: ProcessStatus = ProcessStatus.in_progress
    empresas_envolvidas: List[str] = Field(default_factory=list)
    etiquetas: List[str] = Field(default_factory=list)

    @field_validator("empresas_envolvidas", "etiquetas", mode="before")
    @classmethod
    def clean_tags(cls, v):
        return _clean_tags(v)


class ProcessCreate(ProcessBase):
    pass


class ProcessUpdate(BaseModel):
    """Partial update; only fields that are sent are written."""
    titulo: Optional[str] = Field(None, max_length=500)
    numero_processo: Optional[str] = Field(None, max_length=100)
    descricao: Optional[str] = None
    status: Optional[ProcessStatus] = None
    empresas_envolvidas: Optional[List[str]] = None
    etiquetas: Optional[List[str]] = None
    resumo: Optional[str] = None
    defesa: Optional[str] = None

    @field_validator("empresas_envolvidas", "etiquetas", mode="before")
    @classmethod
    def clean_tags(cls, v):
        if v is None:
            return None
        return _clean_tags(v)


class ProcessResponse(ProcessBase):
    id: int
    resumo: Optional[str] = None
    defesa: Optional[str] = None
    arquivos_url: List[str] = Field(default_factory=list)
    user_id: UUID
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# ============================================================================
# Sharing Schemas
# ============================================================================

class ShareCreate(BaseModel):
    recipient_email: EmailStr


class ShareResponse(BaseModel):
    id: UUID
    shared_with_user_id: UUID
    recipient_email: str
    shared_at: datetime


# ============================================================================
# AI generation Schemas
# ============================================================================

class GenerationResponse(BaseModel):
    process_id: int
    action: str
    text: str
    persisted: bool
    versao: Optional[int] = None


class DefenseHistoryResponse(BaseModel):
    id: int
    processo_id: int
    user_id: UUID
    versao: int
    conteudo: str
    created_at: datetime

    class Config:
        from_attributes = True


class DefenseAnalysisResponse(BaseModel):
    id: int
    processo_id: int
    user_id: UUID
    versao: int
    defesa_analisada: str
    conteudo_analise: str
    created_at: datetime

    class Config:
        from_attributes = True


# ============================================================================
# Activity / Admin Schemas
# ============================================================================

class ActivityEntry(BaseModel):
    id: UUID
    action: str
    description: str
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
    process_name: str
    user_display: str
    created_at: datetime


class AdminUserCreate(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=100)
    role: UserRole = UserRole.user
    nome: Optional[str] = Field(None, max_length=255)


class AdminUserResponse(BaseModel):
    user_id: UUID
    email: Optional[str] = None
    nome: Optional[str] = None
    role: UserRole
    created_at: datetime


class DirectoryLookupRequest(BaseModel):
    user_ids: Optional[List[UUID]] = None
    user_emails: Optional[List[str]] = None


class UserEmailMapping(BaseModel):
    user_id: UUID
    email: Optional[str] = None


class DirectoryLookupResponse(BaseModel):
    mappings: List[UserEmailMapping]


# ============================================================================
# Chat & suggestion Schemas
# ============================================================================

class ChatSessionCreate(BaseModel):
    nome: Optional[str] = Field(None, max_length=255)


class ChatSessionResponse(BaseModel):
    id: int
    processo_id: int
    user_uuid: UUID
    nome: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class ChatQuestion(BaseModel):
    pergunta: str = Field(..., min_length=1)
    arquivo: Optional[str] = None


class ChatExchange(BaseModel):
    message_id: int
    pergunta: str
    arquivo: Optional[str] = None
    resposta: Optional[str] = None
    created_at: datetime


class SuggestionCreate(BaseModel):
    prompt_text: str = Field(..., min_length=1)


class SuggestionResponse(BaseModel):
    id: int
    prompt_text: str
    created_at: datetime

    class Config:
        from_attributes = True


# ============================================================================
# Route memory Schemas
# ============================================================================

class LastPathUpdate(BaseModel):
    path: str = Field(..., min_length=1, max_length=2048)


class LandingResponse(BaseModel):
    path: str
    saved_path: Optional[str] = None


class CompaniesResponse(BaseModel):
    companies: List[str]


class MessageResponse(BaseModel):
    message: str
    details: Optional[Dict[str, Any]] = None
