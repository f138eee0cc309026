"""
Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )
    
    # ==========================================================================
    # Environment
    # ==========================================================================
    
    environment: str = "development"
    log_level: str = "INFO"
    
    # ==========================================================================
    # API Server
    # ==========================================================================
    
    host: str = Field(default="0.0.0.0", validation_alias=AliasChoices("HOST", "host"))
    port: int = Field(default=5000, validation_alias=AliasChoices("PORT", "port"))
    cors_origins: str = "http://localhost:3000"
    
    # ==========================================================================
    # Document Store
    # ==========================================================================
    
    # Realtime database endpoint, e.g. https://my-app.firebaseio.com
    # Empty means the in-memory store is used.
    database_url: str = ""
    database_auth: str = ""
    
    # ==========================================================================
    # Identity Verifier
    # ==========================================================================
    
    # "firebase" (ID tokens from the identity platform) or "shared_secret"
    identity_verifier: str = "firebase"
    
    # Service account file; only its project_id is read here
    google_application_credentials: str = ""
    firebase_project_id: str = ""
    firebase_jwks_url: str = (
        "https://www.googleapis.com/service_accounts/v1/jwk/"
        "securetoken@system.gserviceaccount.com"
    )
    
    jwt_secret_key: str = "dev-jwt-secret-change-in-production"
    jwt_algorithm: str = "HS256"
    
    # ==========================================================================
    # Optional Services
    # ==========================================================================
    
    sentry_dsn: str = ""
    
    # ==========================================================================
    # Helpers
    # ==========================================================================
    
    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]
    
    @property
    def is_production(self) -> bool:
        return self.environment == "production"
    
    @property
    def use_realtime_database(self) -> bool:
        """Whether a remote database endpoint is configured."""
        return bool(self.database_url)
    
    def resolve_project_id(self) -> str:
        """
        Project id the ID tokens must be issued for.
        
        Falls back to the project_id field of the service account file
        named by GOOGLE_APPLICATION_CREDENTIALS.
        """
        if self.firebase_project_id:
            return self.firebase_project_id
        if not self.google_application_credentials:
            return ""
        data = json.loads(Path(self.google_application_credentials).read_text(encoding="utf-8"))
        return data.get("project_id", "")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
