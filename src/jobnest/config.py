"""
JobNest Configuration Module.

Handles all application settings and environment configuration.
Uses pydantic-settings for validation and type safety.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEV_JWT_SECRET = "demo-jwt-secret-for-development-only"


class SupabaseSettings(BaseSettings):
    """Supabase configuration (Auth endpoint + users table)."""

    model_config = SettingsConfigDict(env_prefix="SUPABASE_")

    url: str = Field(default="", description="Supabase project URL")
    anon_key: str = Field(default="demo-anon-key", description="Supabase anonymous key (sent as apikey to Auth)")
    service_role_key: str = Field(default="demo-service-role-key", description="Supabase service role key")
    users_table: str = Field(default="users", description="Table holding canonical user records")
    timeout_seconds: float = Field(default=8.0, description="HTTP timeout when calling Supabase Auth")


class GoogleSettings(BaseSettings):
    """Google Sign-In configuration."""

    model_config = SettingsConfigDict(env_prefix="GOOGLE_")

    client_id: str = Field(default="", description="OAuth client ID expected as the ID token audience")
    clock_skew_seconds: int = Field(default=10, description="Tolerated clock skew when checking iat/exp")


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_env: Literal["development", "staging", "production"] = "development"
    app_debug: bool = False
    app_log_level: str = "INFO"

    cors_allow_origins: list[str] = Field(default_factory=lambda: ["*"])

    # Session tokens
    auth_jwt_secret: str = Field(default=DEV_JWT_SECRET, description="Secret used to sign session tokens")
    auth_jwt_algorithm: str = "HS256"
    auth_session_ttl_seconds: int = Field(default=7 * 24 * 3600, ge=60)
    auth_token_issuer: str = "jobnest"

    # Identity store
    identity_store: Literal["supabase", "memory"] = Field(
        default="supabase",
        description="Backend for canonical user records. 'memory' is process-local (local dev/tests).",
    )
    identity_max_resolve_attempts: int = Field(
        default=3,
        ge=1,
        description="Lookup/create rounds before a contended identity is reported as a store failure.",
    )

    # Nested settings
    supabase: SupabaseSettings = Field(default_factory=SupabaseSettings)
    google: GoogleSettings = Field(default_factory=GoogleSettings)

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.app_env == "production"

    @property
    def uses_dev_jwt_secret(self) -> bool:
        return self.auth_jwt_secret == DEV_JWT_SECRET


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
