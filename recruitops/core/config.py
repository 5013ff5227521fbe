"""
Settings for the dashboard, read from the environment or a .env file.

Every collaborator (databases, ATS client, LLM client, auth) takes its
values from one Settings instance; tests build their own.
"""

from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # PostgreSQL
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "recruitops"
    postgres_password: str = "password"
    postgres_db: str = "recruitops"
    # Full SQLAlchemy URL, overrides the postgres_* parts when set
    database_url: Optional[str] = None

    # MongoDB (ATS snapshots, match run log)
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_db: str = "recruitops_docs"

    # Recruitee ATS
    recruitee_api_key: str = ""
    recruitee_company_id: str = ""
    recruitee_base_url: str = "https://api.recruitee.com"
    recruitee_timeout_seconds: float = 30.0
    recruitee_page_size: int = 100
    recruitee_max_pages: int = 50

    # OpenAI-compatible LLM
    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-4o-mini"
    openai_temperature: float = 0.3
    openai_timeout_seconds: float = 60.0

    # Silver medalist matching
    match_batch_size: int = 50
    match_min_score: int = 40
    match_fallback_score: int = 50

    # ATS snapshot cache
    snapshot_ttl_minutes: int = 5

    # JWT Auth
    jwt_secret_key: str = "change-this-secret"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 1440

    # App
    log_level: str = "INFO"
    debug: bool = False

    @property
    def sqlalchemy_url(self) -> str:
        """Construct the relational database connection URL"""
        if self.database_url:
            return self.database_url
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    # Pydantic v2 config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
