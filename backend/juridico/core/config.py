# juridico/core/config.py
"""
Application configuration using Pydantic Settings
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List
import json
from pydantic import field_validator


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables
    """

    # Application
    APP_NAME: str = "Juridico AI"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str

    # JWT Authentication
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440  # 24 hours

    # AWS / object storage
    AWS_ACCESS_KEY_ID: str = ""
    AWS_SECRET_ACCESS_KEY: str = ""
    AWS_REGION: str = "sa-east-1"
    STORAGE_BUCKET_NAME: str = "arquivos"
    STORAGE_PUBLIC_BASE_URL: str = ""  # blank -> virtual-hosted S3 URL
    STORAGE_CACHE_CONTROL: str = "max-age=3600"

    # Uploads above the threshold go through a multipart transfer.
    # S3 rejects non-final parts smaller than 5 MiB.
    UPLOAD_RESUMABLE_THRESHOLD_BYTES: int = 6 * 1024 * 1024
    UPLOAD_CHUNK_SIZE_BYTES: int = 5 * 1024 * 1024
    UPLOAD_RETRY_DELAYS_SECONDS: str = "0,1,3,5,10"

    # External AI workflow (n8n webhooks)
    AI_CHAT_WEBHOOK_URL: str = "https://webhooks-n8n.iainfinity.app/webhook/azulpack_chat_ia"
    AI_FILE_WEBHOOK_URL: str = "https://webhooks-n8n.iainfinity.app/webhook/azulpack_file"
    AI_WEBHOOK_TIMEOUT_SECONDS: float = 600.0
    AI_FILE_WEBHOOK_TIMEOUT_SECONDS: float = 120.0

    @field_validator(
        "AI_CHAT_WEBHOOK_URL", "AI_FILE_WEBHOOK_URL", "STORAGE_PUBLIC_BASE_URL", mode="before"
    )
    @classmethod
    def strip_urls(cls, v: str) -> str:
        if isinstance(v, str):
            return v.strip()
        return v

    # Admin console
    ACTIVITY_DEFAULT_LIMIT: int = 50
    BOOTSTRAP_ADMIN_EMAIL: str = ""
    BOOTSTRAP_ADMIN_PASSWORD: str = ""

    # Company tags offered on the process form
    AVAILABLE_COMPANIES: str = (
        '["Azul Pack Bags", "Azul Pack Films", "Azul Pack Tech Agro", "Azul Pack Tech Ground"]'
    )

    # CORS
    CORS_ORIGINS: str = '["http://localhost:5173", "http://localhost:3000"]'

    # Pydantic v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from string to list"""
        try:
            if isinstance(self.CORS_ORIGINS, str):
                return json.loads(self.CORS_ORIGINS)
            return self.CORS_ORIGINS
        except json.JSONDecodeError:
            return ["http://localhost:5173"]

    @property
    def available_companies_list(self) -> List[str]:
        try:
            return list(json.loads(self.AVAILABLE_COMPANIES))
        except json.JSONDecodeError:
            return [part.strip() for part in self.AVAILABLE_COMPANIES.split(",") if part.strip()]

    @property
    def upload_retry_delays(self) -> List[float]:
        """
        Parse the comma-separated retry schedule.
        Example env:
          UPLOAD_RETRY_DELAYS_SECONDS=0,1,3,5,10
        """
        delays: List[float] = []
        for part in (self.UPLOAD_RETRY_DELAYS_SECONDS or "").split(","):
            part = part.strip()
            if not part:
                continue
            try:
                delays.append(max(0.0, float(part)))
            except ValueError:
                continue
        return delays or [0.0]


# Create settings instance
settings = Settings()
