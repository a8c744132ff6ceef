"""Pydantic models for parsing the config.yaml configuration file.

This module contains Pydantic models that correspond to the structure of config.yaml.
These models handle validation and type conversion of the YAML configuration data.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, computed_field


class CORSConfig(BaseModel):
    """CORS configuration for the application."""

    origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:3001"]
    )
    allow_credentials: bool = True
    allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "DELETE", "OPTIONS"]
    )
    allow_headers: list[str] = Field(default=["*"])


class LoggingConfig(BaseModel):
    """Logging configuration model."""

    level: str = Field(default="INFO", description="Logging level")
    format: Literal["json", "plain"] = Field(default="json", description="Log format")
    file: str = Field(default="logs/app.log", description="Log file path")
    max_size_mb: int = Field(default=10, description="Maximum log file size in MB")
    backup_count: int = Field(
        default=5, description="Number of backup log files to keep"
    )


class DatabaseConfig(BaseModel):
    """Database configuration model."""

    url: str = Field(
        default="sqlite:///./userhub.db",
        description="Database connection URL",
    )
    pool_size: int = Field(default=20, description="Connection pool size")
    max_overflow: int = Field(default=10, description="Maximum pool overflow")
    pool_timeout: int = Field(default=30, description="Pool timeout in seconds")
    pool_recycle: int = Field(default=1800, description="Pool recycle time in seconds")
    echo: bool = Field(default=False, description="Echo SQL statements")

    @computed_field
    @property
    def is_sqlite(self) -> bool:
        """Whether the configured URL points at SQLite."""
        return self.url.startswith("sqlite")


class CacheConfig(BaseModel):
    """Read-through cache configuration for directory listings."""

    snapshot_ttl_seconds: int = Field(
        default=300, description="TTL of the unpaged live-user snapshot"
    )
    page_ttl_seconds: int = Field(
        default=180, description="TTL of paged/filtered listing results"
    )
    max_entries: int = Field(
        default=1024, description="Upper bound on cached entries (LRU beyond it)"
    )
    paged_invalidation: Literal["generation", "ttl"] = Field(
        default="generation",
        description=(
            "'generation' embeds a directory version in paged keys so writes make "
            "old pages unreachable; 'ttl' lets paged keys go stale until expiry"
        ),
    )


class UploadConfig(BaseModel):
    """Avatar upload configuration."""

    root_dir: str = Field(default=".", description="Filesystem root for stored files")
    static_mount: str = Field(
        default="uploads", description="Directory under root_dir served at /<mount>"
    )
    avatars_folder: str = Field(
        default="uploads/avatars", description="Folder (relative to root) for avatars"
    )
    allowed_extensions: list[str] = Field(
        default_factory=lambda: [".png", ".jpg", ".jpeg", ".webp"],
        description="Accepted avatar file extensions",
    )
    max_avatar_bytes: int = Field(
        default=5_242_880, description="Maximum avatar size in bytes"
    )


class JWTConfig(BaseModel):
    """JWT issuance and validation configuration."""

    secret: str | None = Field(default=None, description="HMAC signing secret")
    issuer: str = Field(default="userhub", description="Issuer (iss) claim")
    audience: str = Field(default="userhub-api", description="Audience (aud) claim")
    algorithm: Literal["HS256", "HS384", "HS512"] = Field(
        default="HS256", description="Signing algorithm"
    )
    access_token_minutes: int = Field(
        default=60, description="Lifetime of issued access tokens"
    )
    clock_skew: int = Field(default=60, description="Clock skew tolerance in seconds")


class UsersConfig(BaseModel):
    """User directory policy."""

    default_role: int = Field(
        default=1, description="Role code assigned when a request omits one"
    )
    admin_roles: list[int] = Field(
        default_factory=lambda: [2],
        description="Role codes allowed to use administrative endpoints",
    )
    bcrypt_rounds: int = Field(
        default=12, ge=4, le=20, description="bcrypt cost factor for password hashes"
    )


class AppConfig(BaseModel):
    """Application configuration model."""

    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Application environment"
    )
    host: str = Field(default="localhost", description="Application host")
    port: int = Field(default=8000, description="Application port")
    cors: CORSConfig = Field(
        default_factory=CORSConfig, description="CORS configuration"
    )

    @property
    def base_url(self) -> str:
        """Construct the base URL from host and port."""
        scheme = "https" if self.environment == "production" else "http"
        return f"{scheme}://{self.host}:{self.port}"


class ConfigData(BaseModel):
    """Root configuration model that matches the config.yaml structure."""

    app: AppConfig = Field(
        default_factory=AppConfig, description="Application configuration"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig, description="Database configuration"
    )
    cache: CacheConfig = Field(
        default_factory=CacheConfig, description="Directory cache configuration"
    )
    uploads: UploadConfig = Field(
        default_factory=UploadConfig, description="Upload configuration"
    )
    jwt: JWTConfig = Field(
        default_factory=JWTConfig, description="JWT configuration"
    )
    users: UsersConfig = Field(
        default_factory=UsersConfig, description="User directory policy"
    )
