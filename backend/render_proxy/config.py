from pydantic_settings import BaseSettings
from functools import lru_cache
import os


class Settings(BaseSettings):
    # Render defaults
    viewport_width: int = 1280
    viewport_height: int = 800
    page_load_timeout: int = 15000  # milliseconds
    settle_delay: int = 2000  # milliseconds, after network idle
    render_timeout: int = 60  # seconds, whole request
    blocked_resource_types: list[str] = ["script"]
    # Inline scripts in caller HTML would keep mutating the page being measured
    java_script_enabled: bool = False

    # Extraction tuning
    max_depth: int = 8
    min_visible_size: int = 2  # pixels, compared after rounding
    text_max: int = 2000

    # Fetch / proxy
    fetch_timeout: float = 20.0  # seconds
    user_agent: str = "Mozilla/5.0 (compatible; Figma-Proxy/1.0)"

    log_level: str = "INFO"
    port: int = 3000

    class Config:
        # Look for .env in the repo root (two levels up from backend/render_proxy/)
        # In production, env vars are injected directly; .env is optional
        _env_path = os.path.join(os.path.dirname(__file__), "..", "..", ".env")
        env_file = _env_path if os.path.exists(_env_path) else None
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache()
def get_settings():
    return Settings()
