"""
Configuration for the order service.

Values come from environment variables (optionally via a .env file). The
runtime mode (ENVIRONMENT) decides where ledger credentials are read from:
inline GOOGLE_CREDENTIALS JSON in production, a local file otherwise.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

from orderdesk.errors import ConfigurationError

logger = logging.getLogger(__name__)

PRODUCTION = "production"
SUMMARY_SOURCES = ("store", "ledger")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}")


@dataclass
class Settings:
    """Recognized configuration options."""

    environment: str = "development"
    host: str = "0.0.0.0"
    port: int = 3000

    # Storage
    storage_backend: str = "sqlalchemy"
    database_url: str = "sqlite:///orders.db"
    use_alembic: bool = False

    # Outbound mail
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_pass: str = ""
    smtp_tls_verify: bool = True
    company_email: str = ""

    # Ledger (Google Sheets)
    google_credentials: Optional[str] = None
    google_credentials_file: str = "credentials.json"
    google_sheet_id: str = ""
    ledger_summary_source: str = "store"

    # Logging / HTTP
    log_level: str = "INFO"
    log_file: Optional[str] = "project.log"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == PRODUCTION

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> "Settings":
        """Build settings from the process environment."""
        if load_env_file:
            load_dotenv()

        summary_source = os.getenv("LEDGER_SUMMARY_SOURCE", "store").strip().lower()
        if summary_source not in SUMMARY_SOURCES:
            logger.warning("Unknown LEDGER_SUMMARY_SOURCE %r, using 'store'", summary_source)
            summary_source = "store"

        origins = os.getenv("CORS_ORIGINS", "*")

        return cls(
            environment=os.getenv("ENVIRONMENT", "development"),
            host=os.getenv("HOST", "0.0.0.0"),
            port=_env_int("PORT", 3000),
            storage_backend=os.getenv("STORAGE_BACKEND", "sqlalchemy").strip().lower(),
            database_url=os.getenv("DATABASE_URL", "sqlite:///orders.db"),
            use_alembic=_env_bool("USE_ALEMBIC", False),
            smtp_host=os.getenv("SMTP_HOST", ""),
            smtp_port=_env_int("SMTP_PORT", 587),
            smtp_user=os.getenv("SMTP_USER", ""),
            smtp_pass=os.getenv("SMTP_PASS", ""),
            smtp_tls_verify=_env_bool("SMTP_TLS_VERIFY", True),
            company_email=os.getenv("COMPANY_EMAIL", ""),
            google_credentials=os.getenv("GOOGLE_CREDENTIALS") or None,
            google_credentials_file=os.getenv("GOOGLE_CREDENTIALS_FILE", "credentials.json"),
            google_sheet_id=os.getenv("GOOGLE_SHEET_ID", ""),
            ledger_summary_source=summary_source,
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            log_file=os.getenv("LOG_FILE", "project.log") or None,
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
        )

    def load_google_credentials(self) -> Optional[Dict[str, Any]]:
        """
        Return the service-account info dict, or None when not configured.

        Production reads the inline GOOGLE_CREDENTIALS value; other modes read
        GOOGLE_CREDENTIALS_FILE. Escaped "\\n" sequences in the private key are
        turned into real newlines.

        Raises:
            ConfigurationError: credentials are present but not valid JSON or
                lack a private key.
        """
        if self.is_production:
            raw = self.google_credentials
            source = "GOOGLE_CREDENTIALS"
        else:
            raw = None
            source = self.google_credentials_file
            if self.google_credentials_file and os.path.exists(self.google_credentials_file):
                with open(self.google_credentials_file, "r", encoding="utf-8") as handle:
                    raw = handle.read()

        if not raw:
            return None

        try:
            info = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"{source} is not valid JSON: {e}")

        if not isinstance(info, dict) or not info.get("private_key"):
            raise ConfigurationError(f"{source} has no private_key")

        info["private_key"] = info["private_key"].replace("\\n", "\n")
        return info
