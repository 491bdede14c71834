import logging
from logging.config import dictConfig

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Upstream
    chess_api_base_url: str = "https://api.chess.com/pub"
    news_feed_url: str = "https://www.chess.com/rss/news"
    news_proxy_url: str = "https://api.allorigins.win/get?url="
    user_agent: str = "chess-dashboard/1.0"
    request_timeout_ms: int = 8000

    # Player lookup
    # 스탯 조회 실패 시 전체 검색을 중단할지 여부
    stats_required: bool = True
    recent_games_limit: int = 5

    # Search sessions
    session_limit: int = 1000
    session_ttl_seconds: int = 3600

    # Display
    display_timezone: str = "UTC"

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("chess_api_base_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def upper_log_level(cls, value: str) -> str:
        return value.upper()

    @property
    def request_timeout(self) -> float:
        return self.request_timeout_ms / 1000


settings = Settings()


def configure_logging():
    """애플리케이션 로깅 설정"""
    dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "level": settings.log_level,
            },
        },
        "root": {
            "handlers": ["console"],
            "level": settings.log_level,
        },
        "loggers": {
            "httpx": {"level": "WARNING"},
        },
    })
    logging.getLogger(__name__).debug("Logging configured at %s", settings.log_level)
