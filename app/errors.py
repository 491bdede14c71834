import logging
from fastapi import Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

HINT_CONNECTION = "Check your internet connection and try again."
HINT_RETRY = "The server may be busy. Please try again in a few moments."
HINT_DEFAULT = "Check if the name is correct and try again."


class PlayerLookupError(Exception):
    """플레이어 검색 오류의 기본 클래스"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Error searching player"
    hint = HINT_DEFAULT

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class PlayerNotFound(PlayerLookupError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Player not found"


class LookupTimeout(PlayerLookupError):
    status_code = status.HTTP_504_GATEWAY_TIMEOUT
    default_message = "Request took too long. Please try again."
    hint = HINT_RETRY


class LookupConnectionError(PlayerLookupError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "Connection problem. Check your internet connection."
    hint = HINT_CONNECTION


class UnknownLookupError(PlayerLookupError):
    pass


class EmptyUsername(PlayerLookupError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Enter a Chess.com username"


async def lookup_exception_handler(request: Request, exc: PlayerLookupError):
    """검색 오류를 JSON 응답으로 변환"""
    logger.warning("Lookup failed: %s (Status: %s)", exc.message, exc.status_code)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "hint": exc.hint},
    )
