"""
Centralized configuration management for the Patient Manager
"""

import os
from typing import Optional, Dict, Any, List
from dataclasses import dataclass, field
from functools import lru_cache
import logging

from sqlalchemy.engine import URL, make_url

logger = logging.getLogger(__name__)

ENVIRONMENTS = ("development", "production", "test")


def _default_database_url() -> str:
    """Build the database URL from DATABASE_URL or the individual DB_* variables"""
    explicit = os.getenv("DATABASE_URL")
    if explicit:
        return explicit

    return URL.create(
        "postgresql+asyncpg",
        username=os.getenv("DB_USER", "postgres"),
        password=os.getenv("DB_PASSWORD") or None,
        host=os.getenv("DB_HOST", "localhost"),
        port=int(os.getenv("DB_PORT", "5432")),
        database=os.getenv("DB_NAME", "patient_management"),
    ).render_as_string(hide_password=False)


@dataclass
class DatabaseConfig:
    """Database configuration settings"""
    url: str = field(default_factory=_default_database_url)
    pool_size: int = field(default_factory=lambda: int(os.getenv("DB_POOL_SIZE", "10")))
    max_overflow: int = field(default_factory=lambda: int(os.getenv("DB_MAX_OVERFLOW", "5")))
    pool_timeout: int = field(default_factory=lambda: int(os.getenv("DB_POOL_TIMEOUT", "30")))
    echo: bool = field(default_factory=lambda: os.getenv("DB_ECHO", "false").lower() == "true")

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    def masked_url(self) -> str:
        return make_url(self.url).render_as_string(hide_password=True)


@dataclass
class SecurityConfig:
    """CORS settings for the browser and terminal clients"""
    cors_origins: List[str] = field(
        default_factory=lambda: os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")
    )
    cors_allow_credentials: bool = field(
        default_factory=lambda: os.getenv("CORS_ALLOW_CREDENTIALS", "true").lower() == "true"
    )


@dataclass
class LoggingConfig:
    """Logging configuration settings"""
    level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    format: str = field(default_factory=lambda: os.getenv("LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"))

    # File logging
    log_file: Optional[str] = field(default_factory=lambda: os.getenv("LOG_FILE"))
    max_file_size: int = field(default_factory=lambda: int(os.getenv("LOG_MAX_FILE_SIZE", "10485760")))  # 10MB
    backup_count: int = field(default_factory=lambda: int(os.getenv("LOG_BACKUP_COUNT", "5")))


@dataclass
class ClientConfig:
    """Settings for the API gateway and dashboard"""
    api_url: str = field(default_factory=lambda: os.getenv("PATIENT_API_URL", "http://localhost:5000/api"))
    timeout_seconds: float = field(default_factory=lambda: float(os.getenv("PATIENT_API_TIMEOUT", "10")))
    search_debounce_ms: int = field(default_factory=lambda: int(os.getenv("SEARCH_DEBOUNCE_MS", "300")))
    toast_duration_ms: int = field(default_factory=lambda: int(os.getenv("TOAST_DURATION_MS", "4000")))


@dataclass
class ApplicationConfig:
    """Main application configuration"""
    # Basic app settings
    app_name: str = field(default_factory=lambda: os.getenv("APP_NAME", "Patient Management API"))
    app_version: str = field(default_factory=lambda: os.getenv("APP_VERSION", "1.0.0"))
    environment: str = field(default_factory=lambda: os.getenv("ENVIRONMENT", "development"))

    # Server settings
    host: str = field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "5000")))

    # Component configurations
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    security: SecurityConfig = field(default_factory=SecurityConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    client: ClientConfig = field(default_factory=ClientConfig)

    def __post_init__(self):
        """Validate configuration after initialization"""
        self.validate()

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    def validate(self):
        """Validate configuration settings"""
        errors = []

        if not self.database.url:
            errors.append("Database URL is required")
        if self.database.pool_size < 1:
            errors.append("Database pool size must be at least 1")

        if self.environment.lower() not in ENVIRONMENTS:
            errors.append(f"Environment must be one of: {', '.join(ENVIRONMENTS)}")
        if not (1 <= self.port <= 65535):
            errors.append("Port must be between 1 and 65535")

        if not (300 <= self.client.search_debounce_ms <= 500):
            errors.append("Search debounce must be between 300 and 500 milliseconds")
        if self.client.toast_duration_ms <= 0:
            errors.append("Toast duration must be positive")
        if self.client.timeout_seconds <= 0:
            errors.append("API timeout must be positive")

        if errors:
            raise ValueError(f"Configuration validation failed: {'; '.join(errors)}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary (for logging/debugging)"""
        config_dict = {}
        for field_name, field_value in self.__dict__.items():
            if hasattr(field_value, '__dict__'):
                config_dict[field_name] = field_value.__dict__.copy()
                # Mask sensitive values
                if field_name == 'database':
                    config_dict[field_name]['url'] = field_value.masked_url()
            else:
                config_dict[field_name] = field_value
        return config_dict


@lru_cache(maxsize=1)
def get_config() -> ApplicationConfig:
    """
    Get application configuration singleton.
    Uses LRU cache to ensure same instance is returned.
    """
    config = ApplicationConfig()
    logger.info(f"Configuration loaded for environment: {config.environment}")
    return config


def load_config_from_file(file_path: str) -> ApplicationConfig:
    """
    Load configuration from a JSON file.

    Nested sections map onto SECTION_KEY environment variables, except the
    database section whose keys use the DB_ prefix the pool settings read.
    """
    import json

    prefixes = {"database": "DB"}

    try:
        with open(file_path, 'r') as f:
            config_data = json.load(f)

        # Override environment variables with file values
        for key, value in config_data.items():
            if isinstance(value, dict):
                prefix = prefixes.get(key, key.upper())
                for sub_key, sub_value in value.items():
                    if key == "database" and sub_key == "url":
                        os.environ["DATABASE_URL"] = str(sub_value)
                    else:
                        os.environ[f"{prefix}_{sub_key.upper()}"] = str(sub_value)
            else:
                os.environ[key.upper()] = str(value)

        # Clear cached config and reload
        get_config.cache_clear()
        return get_config()

    except FileNotFoundError:
        logger.error(f"Configuration file not found: {file_path}")
        raise
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in configuration file: {e}")
        raise


# Convenience functions for common config access patterns
def get_database_config() -> DatabaseConfig:
    """Get database configuration"""
    return get_config().database


def get_client_config() -> ClientConfig:
    """Get API client configuration"""
    return get_config().client
