"""Application configuration with environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Environment
    ENV: str = "dev"

    # App Version (format: a.bc.de - major.feature.patch)
    VERSION: str = "0.01.00"

    # Database
    DATABASE_URL: str

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000"

    # Shared secret for service-to-service calls (web app -> this API)
    INTERNAL_SECRET: str = ""

    # Error Tracking (optional, set in production)
    SENTRY_DSN: str = ""

    # AI provider
    AI_PROVIDER: str = "openai"
    OPENAI_API_KEY: str = ""
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"
    ASSISTANT_MODEL: str = "gpt-4o"
    ASSISTANT_TEMPERATURE: float = 0.3
    ASSISTANT_MAX_TOKENS: int = 2000
    MODERATION_MODEL: str = "omni-moderation-latest"
    EMBEDDING_MODEL: str = "text-embedding-3-large"
    EMBEDDING_DIMENSIONS: int = 1536
    AI_REQUEST_TIMEOUT_SECONDS: float = 60.0

    # Knowledge base retrieval
    KNOWLEDGE_MATCH_THRESHOLD: float = 0.7
    KNOWLEDGE_MATCH_COUNT: int = 3
    KNOWLEDGE_PREVIEW_MATCH_COUNT: int = 5
    KNOWLEDGE_INDEX_BACKEND: str = "postgres"  # postgres (pgvector RPC) or scan
    KNOWLEDGE_CHUNK_SIZE: int = 5000
    KNOWLEDGE_CHUNK_OVERLAP: int = 1500

    # Ticket pipeline
    AI_PIPELINE_INLINE: bool = True  # Also run right after the trigger request
    PIPELINE_RUN_TIMEOUT_SECONDS: float = 300.0

    # Worker
    WORKER_POLL_INTERVAL: int = 10
    WORKER_BATCH_SIZE: int = 10

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS_ORIGINS into a list."""
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()
