"""Configuration models."""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


class PostgresConfig(BaseModel):
    """Postgres configuration."""

    host: str = Field("localhost", description="Database host")
    port: int = Field(5432, description="Database port")
    database: str = Field("sarnews", description="Database name")
    user: str = Field("sarnews", description="Database user")
    password: Optional[str] = Field(None, description="Database password")
    password_env: Optional[str] = Field(None, description="Environment variable for password")
    connect_timeout: int = Field(10, description="Seconds to wait for a connection", ge=1)
    pool_min_size: int = Field(1, description="Connections kept open", ge=0)
    pool_max_size: int = Field(10, description="Upper bound on pooled connections", ge=1)


class RefreshConfig(BaseModel):
    """Refresh cycle and throttle settings."""

    cooldown_minutes: int = Field(10, description="Minimum minutes between automatic refreshes", ge=0)
    fetch_timeout: float = Field(10.0, description="Per-source fetch timeout in seconds", gt=0)
    user_agent: str = Field("SarawakNews/1.0", description="User-Agent sent to feeds")
    max_errors_in_response: int = Field(10, description="Error strings returned to callers", ge=0)


class TranslationConfig(BaseModel):
    """Translation backfill settings."""

    provider: str = Field("mymemory", description="Translation provider (mymemory, openai, mock)")
    batch_size: int = Field(100, description="Articles per backfill batch", ge=1, le=1000)
    delay_seconds: float = Field(0.5, description="Pause between articles", ge=0.0)
    timeout: float = Field(15.0, description="Per-call translation timeout in seconds", gt=0)
    targets: List[str] = Field(default_factory=lambda: ["zh", "ms"], description="Target languages")
    model: str = Field("gpt-4o-mini", description="Model name for LLM providers")
    api_key_env: Optional[str] = Field(None, description="Environment variable for API key")
    api_key: Optional[str] = Field(None, description="API key (prefer api_key_env)")
    base_url: Optional[str] = Field(None, description="Base URL override")

    @field_validator("provider")
    @classmethod
    def validate_provider(cls, v: str) -> str:
        if v not in ("mymemory", "openai", "mock"):
            raise ValueError(f"Unknown translation provider: {v}")
        return v

    @field_validator("targets")
    @classmethod
    def validate_targets(cls, v: List[str]) -> List[str]:
        """Only the two title columns exist in storage."""
        unknown = [lang for lang in v if lang not in ("zh", "ms")]
        if unknown:
            raise ValueError(f"Unsupported target languages: {unknown}")
        return v


class ApiConfig(BaseModel):
    """HTTP trigger surface settings."""

    host: str = Field("127.0.0.1", description="Bind address")
    port: int = Field(8000, description="Bind port")
    cron_secret_env: str = Field("CRON_SECRET", description="Environment variable holding the cron secret")
    admin_token_env: str = Field("ADMIN_TOKEN", description="Environment variable holding the admin token")


class ClassifierConfig(BaseModel):
    """Overrides for the keyword tables."""

    default_region: str = Field("sarawak", description="Sub-region when no locality matches")
    regional_keywords: Optional[List[str]] = Field(None, description="Replaces the regional keyword list")
    category_keywords: Optional[Dict[str, List[str]]] = Field(None, description="Replaces the category table")
    region_keywords: Optional[Dict[str, List[str]]] = Field(None, description="Replaces the locality table")


class ConfigModel(BaseModel):
    """Main configuration model."""

    postgres: PostgresConfig = Field(default_factory=PostgresConfig)
    refresh: RefreshConfig = Field(default_factory=RefreshConfig)
    translation: TranslationConfig = Field(default_factory=TranslationConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)
    classifier: ClassifierConfig = Field(default_factory=ClassifierConfig)
