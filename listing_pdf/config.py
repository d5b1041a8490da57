"""Settings read from the environment (and a local .env file)."""

import os
import secrets
import sys
from dataclasses import dataclass, field

from dotenv import load_dotenv
from loguru import logger

DEFAULT_QR_SERVICE = "https://api.qrserver.com/v1/create-qr-code/"

WHOLESALE_MODES = ("omit", "placeholder")

# Values that must never be used as the nonce key.
PLACEHOLDER_SECRETS = ("", "change-me")


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _secret_from_env() -> str:
    secret = os.getenv("LISTING_PDF_SECRET", "").strip()
    if secret in PLACEHOLDER_SECRETS:
        logger.warning(
            "LISTING_PDF_SECRET is not set; using a random per-process key, "
            "download links will stop working on restart"
        )
        return secrets.token_hex(32)
    return secret


@dataclass(frozen=True)
class Settings:
    secret_key: str = field(default_factory=lambda: secrets.token_hex(32))
    source_path: str = ""  # JSON export used by the web app and CLI
    qr_service_url: str = DEFAULT_QR_SERVICE
    qr_size: int = 150
    qr_timeout: float = 10.0
    embed_qr: bool = True
    verify_images: bool = False
    image_check_timeout: float = 5.0
    wholesale_mode: str = "omit"
    nonce_lifetime: int = 86400  # seconds
    log_level: str = "INFO"

    def __post_init__(self):
        if self.secret_key in PLACEHOLDER_SECRETS:
            raise ValueError("secret_key must be set to a private value")

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        wholesale_mode = os.getenv("LISTING_PDF_WHOLESALE_MODE", "omit").lower()
        if wholesale_mode not in WHOLESALE_MODES:
            raise ValueError(
                f"LISTING_PDF_WHOLESALE_MODE must be one of {WHOLESALE_MODES}, got {wholesale_mode!r}"
            )
        return cls(
            secret_key=_secret_from_env(),
            source_path=os.getenv("LISTING_PDF_SOURCE", ""),
            qr_service_url=os.getenv("LISTING_PDF_QR_SERVICE", DEFAULT_QR_SERVICE),
            qr_size=int(os.getenv("LISTING_PDF_QR_SIZE", "150")),
            qr_timeout=float(os.getenv("LISTING_PDF_QR_TIMEOUT", "10")),
            embed_qr=_env_bool("LISTING_PDF_EMBED_QR", True),
            verify_images=_env_bool("LISTING_PDF_VERIFY_IMAGES", False),
            wholesale_mode=wholesale_mode,
            nonce_lifetime=int(os.getenv("LISTING_PDF_NONCE_LIFETIME", "86400")),
            log_level=os.getenv("LISTING_PDF_LOG_LEVEL", "INFO").upper(),
        )


def configure_logging(level: str = "INFO") -> None:
    """Replace loguru's default sink with a stderr sink at the given level."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level:<8} | {message}",
    )
