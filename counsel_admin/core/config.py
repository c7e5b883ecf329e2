from typing import List, Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # FastAPI Configuration
    PROJECT_NAME: str = "Counsel Admin API"
    VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"

    # Server Configuration
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Admin session configuration
    SESSION_SECRET_KEY: str = Field(
        ...,
        description="Secret key for signing admin session tokens (min 32 chars)",
    )
    SESSION_ALGORITHM: str = "HS256"
    SESSION_DURATION_HOURS: int = Field(
        default=8, description="Admin session lifetime in hours"
    )

    @field_validator("SESSION_SECRET_KEY")
    @classmethod
    def validate_session_secret_key(cls, v: str) -> str:
        """Validate session secret key has minimum length for security."""
        if len(v) < 32:
            raise ValueError(
                "SESSION_SECRET_KEY must be at least 32 characters long. "
                'Generate a secure key with: python -c "import secrets; print(secrets.token_hex(32))"'
            )
        return v

    # Admin credentials (checked by the default auth provider)
    ADMIN_EMAIL: Optional[str] = None
    ADMIN_PASSWORD_HASH: Optional[str] = Field(
        default=None, description="bcrypt hash of the admin password"
    )

    # Document store (PostgreSQL in production, SQLite for tests)
    DATABASE_URL: Optional[str] = None  # Full connection URL (for local dev)
    DATABASE_NAME: str = "counsel_admin"
    DATABASE_USER: str = "postgres"
    DATABASE_PASSWORD: str = ""
    DATABASE_HOST: str = "localhost"
    DATABASE_PORT: int = 5432

    # Connection Pool Settings
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800  # 30 minutes
    DB_ECHO: bool = False  # SQL query logging

    # Collections
    LAWYERS_COLLECTION: str = "lawyers_details"
    TRANSACTIONS_COLLECTION: str = "transactions"
    BLOG_POSTS_COLLECTION: str = "blogPosts"

    # Pagination
    DEFAULT_PAGE_SIZE: int = Field(default=10, ge=1)
    MAX_PAGE_SIZE: int = Field(default=100, ge=1)

    # Google Cloud Storage Configuration
    GCP_PROJECT_ID: Optional[str] = None
    GOOGLE_APPLICATION_CREDENTIALS: Optional[str] = None  # Path to service account file
    GCS_BUCKET_NAME: str = "counsel-admin-media"
    BLOB_PUBLIC_BASE_URL: str = "https://storage.googleapis.com"

    # Blog configuration
    BLOG_IMAGE_PREFIX: str = "blog-images"
    MAX_BLOG_TAGS: int = 3
    DEFAULT_AUTHOR_NAME: str = "Admin"
    MAX_IMAGE_SIZE: int = 10 * 1024 * 1024  # 10MB in bytes
    UPLOAD_CHUNK_SIZE: int = 256 * 1024  # GCS requires multiples of 256KB
    ALLOWED_IMAGE_TYPES: List[str] = [
        "image/jpeg",
        "image/png",
        "image/gif",
        "image/webp",
    ]

    @field_validator("ALLOWED_IMAGE_TYPES", mode="before")
    @classmethod
    def parse_allowed_image_types(cls, v):
        """Parse ALLOWED_IMAGE_TYPES from comma-separated string or JSON array."""
        if isinstance(v, str) and not v.startswith("["):
            return [x.strip() for x in v.split(",") if x.strip()]
        return v

    @field_validator("UPLOAD_CHUNK_SIZE")
    @classmethod
    def validate_upload_chunk_size(cls, v: int) -> int:
        """Resumable uploads need chunks that are multiples of 256KB."""
        if v <= 0 or v % (256 * 1024) != 0:
            raise ValueError("UPLOAD_CHUNK_SIZE must be a positive multiple of 262144")
        return v

    # CORS Settings
    # The dashboard front end runs on port 3000 in development.
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]
    PRODUCTION_CORS_ORIGINS: Optional[str] = None
    CORS_CREDENTIALS: bool = True
    CORS_METHODS: List[str] = ["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"]
    CORS_HEADERS: List[str] = [
        "Authorization",
        "Content-Type",
        "X-Requested-With",
        "Accept",
        "Origin",
        "Cache-Control",
    ]

    # Trusted hosts (production only)
    ALLOWED_HOST_PATTERNS: List[str] = ["localhost", "127.0.0.1", "*.run.app"]
    FRONTEND_DOMAIN: Optional[str] = None

    # Logging Configuration
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "text"  # json or text

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    @property
    def resolved_cors_origins(self) -> List[str]:
        """Get CORS origins based on environment and configuration."""
        import json

        # In production, do NOT start with localhost defaults
        origins = [] if self.is_production else list(self.CORS_ORIGINS)

        if self.PRODUCTION_CORS_ORIGINS:
            try:
                if self.PRODUCTION_CORS_ORIGINS.startswith("["):
                    origins.extend(json.loads(self.PRODUCTION_CORS_ORIGINS))
                else:
                    origins.extend(
                        origin.strip()
                        for origin in self.PRODUCTION_CORS_ORIGINS.split(",")
                    )
            except (json.JSONDecodeError, ValueError):
                origins.append(self.PRODUCTION_CORS_ORIGINS)

        # Remove duplicates while preserving order
        seen = set()
        unique_origins = []
        for origin in origins:
            if origin and origin not in seen:
                seen.add(origin)
                unique_origins.append(origin)

        return unique_origins

    @property
    def database_url(self) -> str:
        """Connection URL for the document store database."""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+asyncpg://{self.DATABASE_USER}:{self.DATABASE_PASSWORD}"
            f"@{self.DATABASE_HOST}:{self.DATABASE_PORT}/{self.DATABASE_NAME}"
        )

    @property
    def is_development(self) -> bool:
        """Check if the application is running in development mode."""
        return self.ENVIRONMENT.lower() in ["development", "dev", "local"]

    @property
    def is_production(self) -> bool:
        """Check if the application is running in production mode."""
        return self.ENVIRONMENT.lower() in ["production", "prod"]


# Global settings instance
settings = Settings()
