"""
Configuration Management for Condo Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Storage location, the bootstrap administrator and password hashing cost
are all set in one place and validated at startup.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Where and under which keys the ledger is stored."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_STORAGE_",
        extra="ignore"
    )

    backend: str = Field(
        default="file",
        pattern="^(file|memory)$",
        description="Storage backend for the dataset document"
    )
    data_file: Path = Field(
        default=Path("condo_ledger.json"),
        description="JSON file used by the file backend"
    )
    dataset_key: str = Field(
        default="condo_ledger_db",
        min_length=1,
        description="Key the dataset document is stored under"
    )
    session_key: str = Field(
        default="condo_ledger_session",
        min_length=1,
        description="Key the session marker is stored under"
    )

    # Owner of record for condominiums saved before ownership existed
    legacy_owner_email: str = Field(
        default="owner@condo-ledger.local",
        description="Email of the user synthesized for ownerless condominiums"
    )

    @field_validator('legacy_owner_email')
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class AdminSettings(BaseSettings):
    """
    Bootstrap administrator.

    The administrator sees every condominium but owns none. Its verifier
    is derived once from `password` (or given directly as `password_hash`)
    and checked exactly like any user's. With neither set, administrator
    login is disabled.
    """

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_ADMIN_",
        extra="ignore"
    )

    email: str = Field(
        default="admin@condo-ledger.local",
        description="Administrator login email"
    )
    password: Optional[SecretStr] = Field(
        default=None,
        description="Administrator password (hashed at startup)"
    )
    password_hash: Optional[str] = Field(
        default=None,
        description="Precomputed administrator verifier (pbkdf2_sha256$...)"
    )

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()

    @property
    def enabled(self) -> bool:
        """Is administrator login possible at all?"""
        return bool(self.password_hash) or bool(
            self.password and self.password.get_secret_value()
        )


class SecuritySettings(BaseSettings):
    """Password hashing and password policy."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_SECURITY_",
        extra="ignore"
    )

    pbkdf2_iterations: int = Field(
        default=600_000,
        ge=1_000,
        description="PBKDF2-SHA256 iterations for new password verifiers"
    )
    min_password_length: int = Field(
        default=4,
        ge=1,
        le=128,
        description="Minimum accepted password length"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Minimum level for local logs"
    )

    @field_validator('log_level', mode='before')
    @classmethod
    def upper_log_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access. Sections can be passed in
    explicitly, which is how tests run with a memory backend and cheap hashing.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    storage: StorageSettings = Field(default_factory=StorageSettings)
    admin: AdminSettings = Field(default_factory=AdminSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    app: AppSettings = Field(default_factory=AppSettings)


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    sections = {
        "storage": StorageSettings,
        "admin": AdminSettings,
        "security": SecuritySettings,
        "app": AppSettings,
    }

    for name, settings_class in sections.items():
        try:
            settings_class()
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
