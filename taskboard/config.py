#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
TaskBoard - Configuration
Service settings with per-environment overrides

Version: 1.0.0
"""

import logging
from pathlib import Path
from typing import Annotated, List, Optional

import pytz
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from taskboard.utils.logger import setup_logger


class TaskboardSettings(BaseSettings):
    """TaskBoard service settings"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ===== GENERAL =====

    APP_NAME: str = Field(
        default="TaskBoard",
        description="Application name"
    )

    VERSION: str = Field(
        default="1.0.0",
        description="Service version"
    )

    ENVIRONMENT: str = Field(
        default="development",
        description="Runtime environment (development/production/testing/staging)"
    )

    DEBUG: bool = Field(
        default=True,
        description="Debug mode"
    )

    # ===== NETWORK =====

    HOST: str = Field(
        default="0.0.0.0",
        description="Bind host"
    )

    PORT: int = Field(
        default=8000,
        description="Bind port"
    )

    ALLOWED_ORIGINS: Annotated[List[str], NoDecode] = Field(
        default=["*"],
        description="CORS origins"
    )

    # ===== PATHS =====

    DATA_DIR: Path = Field(
        default=Path("data"),
        description="Directory holding the todo document file"
    )

    LOGS_DIR: Path = Field(
        default=Path("logs"),
        description="Directory for log files"
    )

    TODOS_FILE: str = Field(
        default="todos.json",
        description="Document file name inside DATA_DIR"
    )

    # ===== LOGGING =====

    LOG_LEVEL: str = Field(
        default="INFO",
        description="Log level (DEBUG/INFO/WARNING/ERROR/CRITICAL)"
    )

    LOG_FORMAT: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log record format"
    )

    LOG_DATE_FORMAT: str = Field(
        default="%Y-%m-%d %H:%M:%S",
        description="Log date format"
    )

    LOG_FILE_MAX_BYTES: int = Field(
        default=10_000_000,
        description="Rotate the log file after this many bytes"
    )

    LOG_BACKUP_COUNT: int = Field(
        default=5,
        description="Rotated log files to keep"
    )

    # ===== CALENDAR =====

    TIMEZONE: str = Field(
        default="UTC",
        description="Local timezone for day/week/month boundaries"
    )

    WEEK_START: int = Field(
        default=6,
        description="First day of the week as a Python weekday (0=Monday, 6=Sunday)"
    )

    # ===== API =====

    DOCS_URL: Optional[str] = Field(
        default="/docs",
        description="OpenAPI docs URL (None disables)"
    )

    EXPORT_FORMATS: Annotated[List[str], NoDecode] = Field(
        default=["json", "csv"],
        description="Supported export formats"
    )

    # ===== VALIDATORS =====

    @field_validator('ENVIRONMENT')
    @classmethod
    def validate_environment(cls, v):
        allowed_envs = ['development', 'production', 'testing', 'staging']
        if v.lower() not in allowed_envs:
            raise ValueError(f"ENVIRONMENT must be one of {allowed_envs}")
        return v.lower()

    @field_validator('LOG_LEVEL')
    @classmethod
    def validate_log_level(cls, v):
        allowed_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in allowed_levels:
            raise ValueError(f"LOG_LEVEL must be one of {allowed_levels}")
        return v.upper()

    @field_validator('PORT')
    @classmethod
    def validate_port(cls, v):
        if not 1 <= v <= 65535:
            raise ValueError("PORT must be between 1 and 65535")
        return v

    @field_validator('TIMEZONE')
    @classmethod
    def validate_timezone(cls, v):
        try:
            pytz.timezone(v)
        except pytz.UnknownTimeZoneError:
            raise ValueError(f"Unknown TIMEZONE: {v}")
        return v

    @field_validator('WEEK_START')
    @classmethod
    def validate_week_start(cls, v):
        if not 0 <= v <= 6:
            raise ValueError("WEEK_START must be between 0 (Monday) and 6 (Sunday)")
        return v

    @field_validator('ALLOWED_ORIGINS', 'EXPORT_FORMATS', mode='before')
    @classmethod
    def split_comma_separated(cls, v):
        if isinstance(v, str):
            return [item.strip() for item in v.split(',') if item.strip()]
        return v

    @field_validator('EXPORT_FORMATS')
    @classmethod
    def validate_export_formats(cls, v):
        return [fmt.lower() for fmt in v]

    @model_validator(mode='after')
    def validate_production_settings(self):
        if self.ENVIRONMENT == 'production':
            # No debug and no public API docs in production
            self.DEBUG = False
            self.DOCS_URL = None
        return self

    # ===== HELPERS =====

    @property
    def is_testing(self) -> bool:
        return self.ENVIRONMENT == "testing"

    @property
    def todos_path(self) -> Path:
        return self.DATA_DIR / self.TODOS_FILE

    @property
    def tz(self):
        return pytz.timezone(self.TIMEZONE)

    def get_full_url(self, path: str = "") -> str:
        return f"http://{self.HOST}:{self.PORT}/{path.lstrip('/')}"

    def setup_logging(self) -> None:
        """Configure console and rotating file logging"""
        setup_logger(
            log_file=str(self.LOGS_DIR / "taskboard.log"),
            level=self.LOG_LEVEL,
            fmt=self.LOG_FORMAT,
            datefmt=self.LOG_DATE_FORMAT,
            max_bytes=self.LOG_FILE_MAX_BYTES,
            backup_count=self.LOG_BACKUP_COUNT,
        )

        if not self.DEBUG:
            logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


settings = TaskboardSettings()

# ===== CONSTANTS =====

DEFAULT_PRIORITY = "medium"


def init_settings() -> TaskboardSettings:
    """Set up logging and data directories for the configured environment"""
    settings.setup_logging()
    settings.DATA_DIR.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(__name__)
    logger.info(f"✅ Settings initialized for {settings.ENVIRONMENT} environment")
    logger.info(f"📁 Data file: {settings.todos_path}")
    logger.info(f"🌐 Service URL: {settings.get_full_url()}")

    return settings
