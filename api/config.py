"""Application configuration via environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # App
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"

    # CORS
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:8000",
    ]

    # Azure Blob Storage: one container per entity kind
    azure_storage_account: str = "oikosstorage"
    azure_blog_container: str = "blogs"
    azure_project_container: str = "projects"

    # Local development (Azurite); takes precedence over the managed identity
    azure_storage_connection_string: str = ""

    # Azure User-Assigned Managed Identity
    managed_identity_client_id: str = ""

    # Admin credential store: username -> "pbkdf2_sha256$<iter>$<salt>$<hex>"
    admin_users: dict[str, str] = {}

    # Session tokens (HS256 JWT)
    session_secret: str = ""
    session_ttl_minutes: int = 120

    model_config = {"env_file": ".env", "extra": "ignore"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
