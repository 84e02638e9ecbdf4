"""Configuration module using pydantic-settings for environment validation."""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.exceptions import ConfigurationError


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Every setting has a local-development default.
    Use a .env file to point the engine at real stores.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ============================================
    # Application Settings
    # ============================================
    APP_NAME: str = Field(default="Legal Citation Engine", description="Application name")
    APP_VERSION: str = Field(default="0.1.0", description="Application version")
    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Deployment environment",
    )
    DEBUG: bool = Field(default=False, description="Debug mode flag")
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    # ============================================
    # Neo4j Citation Graph
    # ============================================
    NEO4J_URI: str = Field(
        default="bolt://localhost:7687",
        description="Neo4j connection URI",
        min_length=1,
    )
    NEO4J_USER: str = Field(default="neo4j", description="Neo4j user name")
    NEO4J_PASSWORD: str = Field(default="", description="Neo4j password")
    NEO4J_DATABASE: str = Field(default="neo4j", description="Neo4j database name")
    NEO4J_MAX_POOL_SIZE: int = Field(
        default=50,
        description="Maximum number of pooled Neo4j connections",
        ge=1,
        le=500,
    )
    NEO4J_CONNECTION_TIMEOUT: float = Field(
        default=30.0,
        description="Neo4j connection timeout in seconds",
        gt=0,
    )

    # ============================================
    # Qdrant Search Index
    # ============================================
    QDRANT_URL: str = Field(
        default="http://localhost:6333",
        description="Qdrant server URL",
        min_length=1,
    )
    QDRANT_API_KEY: Optional[str] = Field(
        default=None,
        description="Qdrant API key for authentication",
    )
    QDRANT_TIMEOUT: int = Field(
        default=30,
        description="Qdrant request timeout in seconds",
        ge=1,
    )
    ARTICLES_INDEX: str = Field(
        default="articles",
        description="Search index collection holding article documents",
    )
    CASES_INDEX: str = Field(
        default="cases",
        description="Search index collection holding case documents",
    )
    SEARCH_PAGE_SIZE: int = Field(
        default=10,
        description="Number of documents fetched per search index scroll page",
        ge=1,
        le=1000,
    )

    # ============================================
    # Query Settings
    # ============================================
    DEFAULT_PAGE_LIMIT: int = Field(
        default=10,
        description="Default page size for citation queries",
        ge=0,
        le=1000,
    )

    @field_validator("NEO4J_URI")
    @classmethod
    def validate_neo4j_uri(cls, v: str) -> str:
        """Ensure the URI uses a scheme the Neo4j driver understands."""
        schemes = ("bolt://", "bolt+s://", "bolt+ssc://", "neo4j://", "neo4j+s://", "neo4j+ssc://")
        if not v.startswith(schemes):
            raise ValueError(
                f"NEO4J_URI must start with one of {', '.join(schemes)}"
            )
        return v

    @field_validator("QDRANT_URL")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Basic URL validation."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(
                "URL must start with http:// or https://"
            )
        return v


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses lru_cache to ensure settings are loaded only once.

    Returns:
        Settings: Application settings instance.

    Raises:
        ConfigurationError: If an environment variable holds an invalid value.
    """
    try:
        return Settings()
    except ValidationError as e:
        raise ConfigurationError(
            message="Invalid settings",
            details={"errors": e.errors(include_url=False)},
        ) from e
