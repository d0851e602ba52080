# blockip/core/config.py

from __future__ import annotations

import logging
import sys
import warnings
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

_WEAK_CONTROL_TOKENS = frozenset({
    "change-me-block-ip-control-token",
    "change-me",
    "",
})


class AmazonSettings(BaseModel):
    """Credentials and region used to reach Amazon SQS."""

    model_config = ConfigDict(frozen=True)

    access_key_id: Optional[str] = None
    access_key_secret: Optional[str] = None
    region: Optional[str] = None

    @property
    def is_configured(self) -> bool:
        return bool((self.access_key_id or "").strip())


class Settings(BaseSettings):
    PROJECT_NAME: str = "Block IP Notifier"
    PROJECT_VERSION: str = "1.0.0"

    # ── Amazon SQS ──
    AWS_ACCESS_KEY_ID: Optional[str] = None
    AWS_ACCESS_KEY_SECRET: Optional[str] = None
    AWS_REGION: Optional[str] = None
    SQS_CONNECT_TIMEOUT: float = 10.0
    SQS_READ_TIMEOUT: float = 15.0
    SQS_MAX_ATTEMPTS: int = 3

    BLOCK_IP_ENABLED: bool = True

    # ── HTTP front-end ──
    BLOCK_IP_CONTROL_TOKEN: Optional[str] = None
    port: int = 8090

    # ── Environment mode  (development | production) ──
    APP_ENV: str = "development"
    DEBUG: bool = False

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # ── helpers ──
    @property
    def is_production(self) -> bool:
        return self.APP_ENV.lower().strip() == "production"

    @property
    def amazon(self) -> AmazonSettings:
        return AmazonSettings(
            access_key_id=self.AWS_ACCESS_KEY_ID,
            access_key_secret=self.AWS_ACCESS_KEY_SECRET,
            region=self.AWS_REGION,
        )

    # ── Startup validation ──
    def validate_security(self) -> None:
        """
        Enforce secure-by-default rules for the HTTP front-end.
        In production → hard fail (SystemExit) for a weak control token.
        In development → warning only.
        """
        errors: list[str] = []
        warns: list[str] = []

        token = (self.BLOCK_IP_CONTROL_TOKEN or "").strip()
        if token.lower() in _WEAK_CONTROL_TOKENS or len(token) < 16:
            msg = "BLOCK_IP_CONTROL_TOKEN is weak/default. Generate one: openssl rand -hex 32"
            (errors if self.is_production else warns).append(msg)

        if self.BLOCK_IP_ENABLED and not self.amazon.is_configured:
            warns.append("AWS_ACCESS_KEY_ID is not set. Block-IP notifications will be dropped.")

        for w in warns:
            logger.warning("[SECURITY] %s", w)
            warnings.warn(f"[SECURITY] {w}", stacklevel=2)

        if errors:
            for e in errors:
                logger.error("[SECURITY-FATAL] %s", e)
            print("\n".join(f"FATAL: {e}" for e in errors), file=sys.stderr)
            raise SystemExit(
                f"Startup blocked: {len(errors)} security violation(s) in production mode. "
                "Fix the issues above or set APP_ENV=development."
            )
