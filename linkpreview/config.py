"""
Configuration management for the Link Preview service.
Handles environment variables and resolver settings.
"""
import os
from typing import Tuple
from dotenv import load_dotenv

load_dotenv()


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_11_1) AppleWebKit/601.2.4 "
    "(KHTML, like Gecko) Version/9.0.1 Safari/601.2.4 "
    "facebookexternalhit/1.1 Facebot Twitterbot/1.0"
)


def _split_hosts(raw: str) -> Tuple[str, ...]:
    """Parse a comma-separated host list into lowercase hostnames."""
    return tuple(h.strip().lower() for h in raw.split(",") if h.strip())


class Config:
    """Application configuration loaded from environment variables."""

    # Server settings
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8000"))
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = os.getenv("LOG_FORMAT", "json")  # json or console

    # Request settings
    REQUEST_TIMEOUT: int = int(os.getenv("REQUEST_TIMEOUT", "30"))
    USER_AGENT: str = os.getenv("USER_AGENT", DEFAULT_USER_AGENT)

    # Resolver settings
    # Marketplaces that embed a landing image blob in a data-a-state script
    LANDING_IMAGE_HOSTS: Tuple[str, ...] = _split_hosts(
        os.getenv("LANDING_IMAGE_HOSTS", "www.amazon.com")
    )
    # Scheme for protocol-relative URLs when the page URL is unknown
    DEFAULT_URL_SCHEME: str = os.getenv("DEFAULT_URL_SCHEME", "https")


config = Config()
