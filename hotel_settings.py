"""Hotel backend configuration.

This module is safe to commit.

Everything deployment specific is read from environment variables:
- HOTEL_DATA_DIR (optional; otherwise ./data, or /tmp/data in production)
- PORT
- SMTP_HOST, SMTP_PORT, SMTP_USER, SMTP_PASS, MAIL_FROM
- CORS_ORIGINS (comma separated, "*" allows any origin)
"""

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple


DEFAULT_PORT = 3000
DEFAULT_SMTP_PORT = 587
DEFAULT_MAIL_FROM = '"Kaskady Hotel" <no-reply@hotelkaskady.sk>'

# Serverless hosts only allow writes under /tmp.
EPHEMERAL_DATA_DIR = os.path.join("/tmp", "data")
LOCAL_DATA_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "data")


def _env(environ: Mapping[str, str], key: str, default: str = "") -> str:
    return str(environ.get(key, default) or default).strip()


def _safe_int(value, default=0):
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _is_production(environ: Mapping[str, str]) -> bool:
    if _env(environ, "VERCEL"):
        return True
    env_name = _env(environ, "APP_ENV") or _env(environ, "FLASK_ENV")
    return env_name.lower() == "production"


def resolve_data_dir(environ: Mapping[str, str]) -> str:
    explicit = _env(environ, "HOTEL_DATA_DIR")
    if explicit:
        return explicit
    return EPHEMERAL_DATA_DIR if _is_production(environ) else LOCAL_DATA_DIR


@dataclass(frozen=True)
class SmtpSettings:
    host: str = ""
    port: int = DEFAULT_SMTP_PORT
    user: str = ""
    password: str = ""
    sender: str = DEFAULT_MAIL_FROM

    @property
    def enabled(self) -> bool:
        """Real delivery needs at least a host and a login."""
        return bool(self.host and self.user)


@dataclass(frozen=True)
class Settings:
    data_dir: str
    port: int = DEFAULT_PORT
    smtp: SmtpSettings = field(default_factory=SmtpSettings)
    cors_origins: Tuple[str, ...] = ("*",)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        environ = os.environ if environ is None else environ

        origins = tuple(
            origin.strip()
            for origin in _env(environ, "CORS_ORIGINS", "*").split(",")
            if origin.strip()
        )

        return cls(
            data_dir=resolve_data_dir(environ),
            port=_safe_int(_env(environ, "PORT"), DEFAULT_PORT),
            smtp=SmtpSettings(
                host=_env(environ, "SMTP_HOST"),
                port=_safe_int(_env(environ, "SMTP_PORT"), DEFAULT_SMTP_PORT),
                user=_env(environ, "SMTP_USER"),
                password=_env(environ, "SMTP_PASS"),
                sender=_env(environ, "MAIL_FROM", DEFAULT_MAIL_FROM),
            ),
            cors_origins=origins or ("*",),
        )
