from pydantic_settings import BaseSettings
from typing import List, Any, Optional
import json
from pathlib import Path


def parse_cors_origins(v: Any) -> List[str]:
    """Parse CORS origins from string or list"""
    if isinstance(v, list):
        return v
    if isinstance(v, str):
        # Try JSON parsing first
        if v.startswith('['):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                pass
        # Fall back to comma-separated
        return [origin.strip() for origin in v.split(',') if origin.strip()]
    return []


def parse_extensions(v: Any) -> List[str]:
    """Parse archive extensions from string or list"""
    if isinstance(v, list):
        return v
    if isinstance(v, str):
        return [ext.strip().lower() for ext in v.split(',') if ext.strip()]
    return []


class Settings(BaseSettings):
    """Application settings - all configurable via environment variables"""

    # ==========================================
    # Application
    # ==========================================
    APP_NAME: str = "ShareXConnect"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    SECRET_KEY: str
    API_VERSION: str = "v1"

    # Server Configuration
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 8000

    # ==========================================
    # Database
    # ==========================================
    DATABASE_URL: str
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800  # 30 minutes
    DB_ECHO: bool = False

    # ==========================================
    # Security
    # ==========================================
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440  # 24 hours
    REFRESH_TOKEN_EXPIRE_DAYS: int = 30
    BCRYPT_ROUNDS: int = 12  # 4 for tests, 12 for prod

    # ==========================================
    # CORS (stored as comma-separated string, parsed to list)
    # ==========================================
    CORS_ORIGINS_STR: str = "http://localhost:3000,http://localhost:5000,http://127.0.0.1:3000,http://127.0.0.1:5000"

    @property
    def CORS_ORIGINS(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        return parse_cors_origins(self.CORS_ORIGINS_STR)

    # ==========================================
    # File Upload
    # ==========================================
    MAX_UPLOAD_SIZE: int = 52428800  # 50MB
    ARCHIVE_EXTENSIONS_STR: str = ".zip,.rar"

    @property
    def ARCHIVE_EXTENSIONS(self) -> List[str]:
        """File extensions flagged as archives on upload"""
        return parse_extensions(self.ARCHIVE_EXTENSIONS_STR)

    # ==========================================
    # Collaboration
    # ==========================================
    # When False a user may hold only one PENDING request per project
    ALLOW_DUPLICATE_PENDING_REQUESTS: bool = False
    # When True join requests honour the project's collaboration settings:
    # owners, existing collaborators and closed projects are refused, and
    # projects that skip approval admit the requester at once
    ENFORCE_COLLABORATION_SETTINGS: bool = True
    DEFAULT_INVITATION_MESSAGE: str = "You've been invited to collaborate on this project"
    DEFAULT_BRANCH_NAME: str = "feature-branch"

    # ==========================================
    # Logging
    # ==========================================
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env that aren't defined in Settings

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._base_dir = Path(__file__).resolve().parent.parent.parent
        if self.LOG_FILE:
            Path(self.LOG_FILE).parent.mkdir(exist_ok=True, parents=True)

    @property
    def BASE_DIR(self) -> Path:
        return self._base_dir

    def is_dev_mode(self) -> bool:
        """Check if running in development mode"""
        return self.ENVIRONMENT == "development" or self.DEBUG

    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    def is_archive(self, file_name: str) -> bool:
        """Whether an uploaded file name looks like an archive bundle"""
        lowered = (file_name or "").lower()
        return any(lowered.endswith(ext) for ext in self.ARCHIVE_EXTENSIONS)


# Create settings instance
settings = Settings()
