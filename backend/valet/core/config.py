"""
Application settings, loaded from environment variables and .env files.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── Database ──────────────────────────────
    POSTGRES_USER: str = "valet_user"
    POSTGRES_PASSWORD: str = "valet_pass"
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "valet_db"

    @property
    def DATABASE_URL(self) -> str:
        """Async URL for app runtime (asyncpg)."""
        return f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    @property
    def DATABASE_URL_SYNC(self) -> str:
        """Sync URL for Alembic migrations (psycopg2)."""
        return f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    # ── Redis / Celery ────────────────────────
    CELERY_BROKER_URL: str = "redis://localhost:6379/0"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/1"

    # ── LLM defaults ──────────────────────────
    DEFAULT_MODEL: str = "claude-sonnet-4-5-20250929"
    LLM_MAX_TOKENS: int = 4096
    WEB_SEARCH_MAX_USES: int = 5
    WEB_FETCH_MAX_USES: int = 5
    WEB_FETCH_MAX_CONTENT_TOKENS: int = 25000

    # ── LangSmith Tracing ────────────────────
    LANGSMITH_API_KEY: str = ""
    LANGSMITH_ENDPOINT: str = "https://api.smith.langchain.com"
    LANGSMITH_PROJECT: str = "valet"
    LANGSMITH_TRACING: bool = False

    # ── Sessions ──────────────────────────────
    SESSION_COOKIE_NAME: str = "__session"
    SESSION_TTL_SECONDS: int = 60 * 60 * 24 * 7

    @property
    def SESSION_COOKIE_SECURE(self) -> bool:
        return self.APP_ENV == "production"

    # ── Provider key encryption (Fernet key, urlsafe base64) ──
    ENCRYPTION_KEY: str = ""

    # ── Application ───────────────────────────
    APP_ENV: str = "development"
    CORS_ORIGINS: list[str] = ["http://localhost:5173"]
    MAX_OPEN_TABS: int = 8
    RUN_STREAM_POLL_INTERVAL: float = 0.5

    model_config = {"env_file": ["../.env", ".env"], "extra": "ignore"}


settings = Settings()
