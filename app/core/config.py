# app/core/config.py
import os
from typing import ClassVar, List
from pydantic import BaseModel, Field

def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}

def _data_dir() -> str:
    return os.path.abspath(os.getenv("DATA_DIR", "./data"))

def _default_database_url() -> str:
    data_dir = _data_dir()
    os.makedirs(data_dir, exist_ok=True)
    return os.getenv("DATABASE_URL", f"sqlite:///{os.path.join(data_dir, 'coa.db')}")

def _default_storage_dir() -> str:
    data_dir = _data_dir()
    return os.path.abspath(os.getenv("STORAGE_DIR", os.path.join(data_dir, "storage")))

class Settings(BaseModel):
    # Constante (não vira campo Pydantic)
    DATA_DIR: ClassVar[str] = _data_dir()

    DATABASE_URL: str = Field(default_factory=_default_database_url)
    STORAGE_DIR: str = Field(default_factory=_default_storage_dir)
    SECRET_KEY: str = Field(default_factory=lambda: os.getenv("SECRET_KEY", "CHANGE_ME_SUPER_SECRET"))
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default_factory=lambda: int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30")))
    REFRESH_TOKEN_EXPIRE_DAYS: int = Field(default_factory=lambda: int(os.getenv("REFRESH_TOKEN_EXPIRE_DAYS", "7")))

    # URLs públicas (landing de evento /e/<slug>, certificado /cert/<qr_id>)
    PUBLIC_BASE_URL: str = Field(default_factory=lambda: os.getenv("PUBLIC_BASE_URL", "http://localhost:3000"))
    CORS_ORIGINS: List[str] = Field(default_factory=lambda: [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()])

    SIGNED_URL_TTL_SECONDS: int = Field(default_factory=lambda: int(os.getenv("SIGNED_URL_TTL_SECONDS", "600")))
    QR_ID_LENGTH: int = Field(default_factory=lambda: int(os.getenv("QR_ID_LENGTH", "10")))
    EVENT_SLUG_SUFFIX_LENGTH: int = Field(default_factory=lambda: int(os.getenv("EVENT_SLUG_SUFFIX_LENGTH", "6")))
    DEFAULT_REJECTION_REASON: str = Field(
        default_factory=lambda: os.getenv("DEFAULT_REJECTION_REASON", "Request could not be verified.")
    )
    ENFORCE_EVENT_WINDOW: bool = Field(default_factory=lambda: _env_bool("ENFORCE_EVENT_WINDOW"))

    RUN_MIGRATIONS_ON_STARTUP: bool = Field(default_factory=lambda: _env_bool("RUN_MIGRATIONS_ON_STARTUP", "true"))
    OWNER_EMAIL: str | None = Field(default_factory=lambda: os.getenv("OWNER_EMAIL") or None)
    OWNER_PASSWORD: str | None = Field(default_factory=lambda: os.getenv("OWNER_PASSWORD") or None)

    LOG_LEVEL: str = Field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

settings = Settings()
