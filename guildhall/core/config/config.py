"""
Static configuration for Guildhall.

Every setting is a class attribute on ``Config``, read from the environment
(a ``.env`` file is honoured) when this module is imported. Bad values never
crash the import: each parser logs a warning, records it in the load report
and keeps the default. Only a missing ``DATABASE_URL`` in production is
fatal.

Settings
--------
Database
    DATABASE_URL (required), DATABASE_POOL_SIZE, DATABASE_MAX_OVERFLOW,
    DATABASE_POOL_RECYCLE, DATABASE_POOL_TIMEOUT,
    DATABASE_STATEMENT_TIMEOUT_MS, DATABASE_ECHO
Runtime
    ENVIRONMENT (development | testing | staging | production), TESTING,
    DEBUG, LOG_LEVEL, LOG_JSON, LOG_COLORS, LOGS_DIR
Roster limits
    TEAM_MIN_MEMBERS, TEAM_MAX_MEMBERS, TEAM_DEFAULT_MAX_MEMBERS,
    EVENT_MIN_SLOTS, EVENT_MAX_SLOTS

``reload_safe_configs()`` re-reads the log level, debug flag and roster
limits at runtime; database settings need a restart.
"""

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

load_dotenv()

_TRUE_WORDS = frozenset({"1", "true", "yes", "on"})
_FALSE_WORDS = frozenset({"0", "false", "no", "off"})
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Environment(Enum):
    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"

    @classmethod
    def from_string(cls, value: str) -> "Environment":
        """
        Case-insensitive lookup; unknown names mean development.

        >>> Environment.from_string("Staging")
        <Environment.STAGING: 'staging'>
        """
        for member in cls:
            if member.value == value.strip().lower():
                return member
        # Structured logging is not set up yet at import time
        logging.warning(f"Unknown ENVIRONMENT '{value}', falling back to development")
        return cls.DEVELOPMENT


@dataclass
class _LoadReport:
    """Where each setting came from on the last load, plus rejected values."""

    sources: Dict[str, str] = field(default_factory=dict)
    rejected: Dict[str, str] = field(default_factory=dict)
    loaded_at: Optional[str] = None

    def note(self, key: str, from_env: bool) -> None:
        self.sources[key] = "env" if from_env else "default"

    def reject(self, key: str, reason: str) -> None:
        self.rejected[key] = reason
        self.sources[key] = "default"
        logging.warning(reason)

    @property
    def defaults(self) -> List[str]:
        return sorted(k for k, v in self.sources.items() if v == "default")

    def get_summary(self) -> Dict[str, Any]:
        return {
            "settings": len(self.sources),
            "from_environment": len(self.sources) - len(self.defaults),
            "defaults_used": self.defaults,
            "rejected": len(self.rejected),
            "loaded_at": self.loaded_at,
        }


class Config:
    """
    Process-wide settings. Never instantiated.

    >>> if Config.is_production():
    ...     logger.info("Config loaded", extra=Config.get_config_summary())
    """

    _report: _LoadReport = _LoadReport()
    _validated: bool = False

    # Database
    DATABASE_URL: str = ""
    DATABASE_POOL_SIZE: int = 10
    DATABASE_MAX_OVERFLOW: int = 10
    DATABASE_POOL_RECYCLE: int = 1800
    DATABASE_POOL_TIMEOUT: int = 30
    DATABASE_STATEMENT_TIMEOUT_MS: int = 30_000
    DATABASE_ECHO: bool = False

    # Runtime
    ENVIRONMENT: str = Environment.DEVELOPMENT.value
    TESTING: bool = False
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    LOG_JSON: Optional[bool] = None  # None: JSON only in production
    LOG_COLORS: bool = True
    LOGS_DIR: Path = Path(__file__).resolve().parents[3] / "logs"

    SERVICE_NAME: str = "Guildhall"
    SERVICE_VERSION: str = "1.0.0"

    # Roster limits
    TEAM_MIN_MEMBERS: int = 2
    TEAM_MAX_MEMBERS: int = 20
    TEAM_DEFAULT_MAX_MEMBERS: int = 5
    EVENT_MIN_SLOTS: int = 1
    EVENT_MAX_SLOTS: int = 100

    # =========================================================================
    # Parsers
    # =========================================================================

    @classmethod
    def _safe_int(
        cls,
        key: str,
        default: int,
        min_val: Optional[int] = None,
        max_val: Optional[int] = None,
    ) -> int:
        """
        Integer setting with inclusive bounds.

        Anything unparsable or out of bounds yields ``default`` and is
        recorded in the load report.
        """
        raw = os.getenv(key)
        if raw is None:
            cls._report.note(key, from_env=False)
            return default

        try:
            value = int(raw.strip())
        except ValueError:
            cls._report.reject(key, f"{key}={raw!r} is not an integer; keeping {default}")
            return default

        if min_val is not None and value < min_val:
            cls._report.reject(key, f"{key}={value} is below {min_val}; keeping {default}")
            return default
        if max_val is not None and value > max_val:
            cls._report.reject(key, f"{key}={value} is above {max_val}; keeping {default}")
            return default

        cls._report.note(key, from_env=True)
        return value

    @classmethod
    def _safe_bool(cls, key: str, default: bool) -> bool:
        """Accepts 1/0, true/false, yes/no and on/off in any case."""
        raw = os.getenv(key)
        if raw is None:
            cls._report.note(key, from_env=False)
            return default

        word = raw.strip().lower()
        if word in _TRUE_WORDS:
            cls._report.note(key, from_env=True)
            return True
        if word in _FALSE_WORDS:
            cls._report.note(key, from_env=True)
            return False

        cls._report.reject(key, f"{key}={raw!r} is not a boolean; keeping {default}")
        return default

    @classmethod
    def _safe_optional_bool(cls, key: str) -> Optional[bool]:
        if os.getenv(key) is None:
            cls._report.note(key, from_env=False)
            return None
        return cls._safe_bool(key, False)

    @classmethod
    def _safe_str(cls, key: str, default: str, required: bool = False) -> str:
        value = os.getenv(key)
        cls._report.note(key, from_env=value is not None)
        if value is None:
            value = default
        if required and not value:
            cls._report.reject(key, f"{key} is required but not set")
        return value

    # =========================================================================
    # Loading
    # =========================================================================

    @classmethod
    def load(cls) -> None:
        """Read every setting from the environment. Tests call this after patching it."""
        cls._report = _LoadReport()

        cls.DATABASE_URL = cls._safe_str("DATABASE_URL", "", required=True)
        cls.DATABASE_POOL_SIZE = cls._safe_int("DATABASE_POOL_SIZE", 10, min_val=1, max_val=200)
        cls.DATABASE_MAX_OVERFLOW = cls._safe_int(
            "DATABASE_MAX_OVERFLOW", 10, min_val=0, max_val=200
        )
        cls.DATABASE_POOL_RECYCLE = cls._safe_int("DATABASE_POOL_RECYCLE", 1800, min_val=60)
        cls.DATABASE_POOL_TIMEOUT = cls._safe_int(
            "DATABASE_POOL_TIMEOUT", 30, min_val=1, max_val=600
        )
        cls.DATABASE_STATEMENT_TIMEOUT_MS = cls._safe_int(
            "DATABASE_STATEMENT_TIMEOUT_MS", 30_000, min_val=100
        )
        cls.DATABASE_ECHO = cls._safe_bool("DATABASE_ECHO", False)

        cls.ENVIRONMENT = Environment.from_string(cls._safe_str("ENVIRONMENT", "development")).value
        cls.TESTING = cls._safe_bool("TESTING", False)
        cls.DEBUG = cls._safe_bool("DEBUG", False)
        cls.LOG_LEVEL = cls._safe_str("LOG_LEVEL", "INFO")
        cls.LOG_JSON = cls._safe_optional_bool("LOG_JSON")
        cls.LOG_COLORS = cls._safe_bool("LOG_COLORS", True)
        if os.getenv("LOGS_DIR"):
            cls.LOGS_DIR = Path(os.environ["LOGS_DIR"])

        cls._load_roster_limits(team_default=5, event_max=100, reload_bounds=True)
        cls._report.loaded_at = datetime.now(timezone.utc).isoformat()

    @classmethod
    def _load_roster_limits(cls, team_default: int, event_max: int, reload_bounds: bool) -> None:
        if reload_bounds:
            cls.TEAM_MIN_MEMBERS = cls._safe_int("TEAM_MIN_MEMBERS", 2, min_val=1)
            cls.TEAM_MAX_MEMBERS = cls._safe_int(
                "TEAM_MAX_MEMBERS", 20, min_val=cls.TEAM_MIN_MEMBERS
            )
            cls.EVENT_MIN_SLOTS = cls._safe_int("EVENT_MIN_SLOTS", 1, min_val=1)

        cls.TEAM_DEFAULT_MAX_MEMBERS = cls._safe_int(
            "TEAM_DEFAULT_MAX_MEMBERS",
            team_default,
            min_val=cls.TEAM_MIN_MEMBERS,
            max_val=cls.TEAM_MAX_MEMBERS,
        )
        cls.EVENT_MAX_SLOTS = cls._safe_int(
            "EVENT_MAX_SLOTS", event_max, min_val=cls.EVENT_MIN_SLOTS
        )

    @classmethod
    def validate(cls) -> None:
        """
        Load once and sanity-check the result.

        Outside production, problems are logged and the process carries on so
        that tooling and tests can import the package without a database.

        Raises:
            ValueError: DATABASE_URL is missing and ENVIRONMENT is production
        """
        if cls._validated:
            return

        logger = logging.getLogger(__name__)
        cls.load()

        if cls.LOG_LEVEL.upper() not in _LOG_LEVELS:
            logger.warning(f"LOG_LEVEL '{cls.LOG_LEVEL}' is not a logging level; using INFO")
            cls.LOG_LEVEL = "INFO"
        cls.LOGS_DIR.mkdir(parents=True, exist_ok=True)

        if not cls.DATABASE_URL:
            if cls.is_production():
                logger.error("DATABASE_URL is not set in production")
                raise ValueError("DATABASE_URL environment variable is required")
            logger.warning("DATABASE_URL is not set; DatabaseService will refuse to start")

        if cls.is_production():
            if "localhost" in cls.DATABASE_URL or "127.0.0.1" in cls.DATABASE_URL:
                logger.warning("Production is pointed at a local database")
            if cls.DEBUG:
                logger.warning("DEBUG is enabled in production")

        cls._validated = True
        logger.info(f"Configuration loaded: {cls._report.get_summary()}")
        if cls._report.rejected:
            logger.warning(f"Rejected configuration values: {cls._report.rejected}")

    @classmethod
    def reload_safe_configs(cls) -> None:
        """Re-read the log level, debug flag and roster sizes; the rest needs a restart."""
        logger = logging.getLogger(__name__)

        cls.LOG_LEVEL = cls._safe_str("LOG_LEVEL", cls.LOG_LEVEL)
        cls.DEBUG = cls._safe_bool("DEBUG", cls.DEBUG)
        cls._load_roster_limits(
            team_default=cls.TEAM_DEFAULT_MAX_MEMBERS,
            event_max=cls.EVENT_MAX_SLOTS,
            reload_bounds=False,
        )

        logger.info(
            "Reloaded runtime-safe configuration",
            extra={
                "log_level": cls.LOG_LEVEL,
                "team_default_max_members": cls.TEAM_DEFAULT_MAX_MEMBERS,
                "event_max_slots": cls.EVENT_MAX_SLOTS,
            },
        )

    # =========================================================================
    # Environment checks
    # =========================================================================

    @classmethod
    def is_production(cls) -> bool:
        return cls.ENVIRONMENT == Environment.PRODUCTION.value

    @classmethod
    def is_staging(cls) -> bool:
        return cls.ENVIRONMENT == Environment.STAGING.value

    @classmethod
    def is_development(cls) -> bool:
        return cls.ENVIRONMENT == Environment.DEVELOPMENT.value

    @classmethod
    def is_testing(cls) -> bool:
        return cls.TESTING or cls.ENVIRONMENT == Environment.TESTING.value

    # =========================================================================
    # Introspection
    # =========================================================================

    @classmethod
    def get_load_report(cls) -> Dict[str, Any]:
        return cls._report.get_summary()

    @classmethod
    def get_config_summary(cls) -> Dict[str, Any]:
        """Settings safe to log; the database URL is reduced to a flag."""
        return {
            "service_version": cls.SERVICE_VERSION,
            "environment": cls.ENVIRONMENT,
            "testing": cls.TESTING,
            "debug": cls.DEBUG,
            "log_level": cls.LOG_LEVEL,
            "database_url_set": bool(cls.DATABASE_URL),
            "database_pool_size": cls.DATABASE_POOL_SIZE,
            "database_max_overflow": cls.DATABASE_MAX_OVERFLOW,
            "team_max_members": cls.TEAM_MAX_MEMBERS,
            "event_max_slots": cls.EVENT_MAX_SLOTS,
        }


Config.validate()
