"""Runtime configuration for the storefront (replaceable during tests/runtime)."""
import logging
import os
from typing import NamedTuple, Optional


class Settings(NamedTuple):
    services_url: str
    request_timeout: Optional[float]
    session_secret: str
    confirm_timeout: Optional[float]
    profile_user_id: int
    log_level: str


def _optional_float(value: Optional[str]) -> Optional[float]:
    if value is None or value.strip() == "":
        return None
    return float(value)


def load_settings() -> Settings:
    return Settings(
        services_url=os.getenv("STOREFRONT_SERVICES_URL", "http://localhost:8900").rstrip("/"),
        request_timeout=_optional_float(os.getenv("STOREFRONT_TIMEOUT")),
        session_secret=os.getenv("STOREFRONT_SESSION_SECRET", "dev-secret"),
        confirm_timeout=_optional_float(os.getenv("STOREFRONT_CONFIRM_TIMEOUT")),
        profile_user_id=int(os.getenv("STOREFRONT_PROFILE_USER_ID", "1")),
        log_level=os.getenv("STOREFRONT_LOG_LEVEL", "INFO").upper(),
    )


state = load_settings()


def configure(**overrides) -> Settings:
    """Replace individual settings, e.g. ``configure(services_url=...)`` in tests."""
    global state
    state = state._replace(**overrides)
    return state


def get_settings() -> Settings:
    return state


def configure_logging(level: Optional[str] = None):
    logging.basicConfig(
        level=level or state.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
