"""
화면 상태 (Idle / Loading / Failed / Ready) 와 검색 세션
"""
import itertools
import logging
import time
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

from cachetools import TTLCache

from app.config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Idle:
    kind = "idle"


@dataclass(frozen=True)
class Loading:
    username: str = ""
    kind = "loading"


@dataclass(frozen=True)
class Failed:
    message: str
    hint: str = ""
    kind = "failed"


@dataclass(frozen=True)
class Ready:
    data: Any
    kind = "ready"

    @property
    def is_empty(self) -> bool:
        if self.data is None:
            return True
        try:
            return len(self.data) == 0
        except TypeError:
            return False


ViewState = Union[Idle, Loading, Failed, Ready]


class SearchSession:
    """한 방문자의 검색 상태. 가장 최근 검색만 화면 상태를 바꿀 수 있다"""

    def __init__(self):
        self._tokens = itertools.count(1)
        self._current_token = 0
        self.state: ViewState = Idle()

    @property
    def current_token(self) -> int:
        return self._current_token

    def begin(self, username: str) -> int:
        self._current_token = next(self._tokens)
        self.state = Loading(username=username)
        return self._current_token

    def commit(self, token: int, state: ViewState) -> bool:
        if token != self._current_token:
            logger.info("Discarding stale lookup result (token %s, current %s)", token, self._current_token)
            return False
        self.state = state
        return True

    def clear(self):
        # 진행 중인 검색 결과도 무효화
        self._current_token = next(self._tokens)
        self.state = Idle()


class SessionRegistry:
    """쿠키 id -> 검색 세션. 개수와 유휴 시간에 상한이 있다"""

    def __init__(self, maxsize: Optional[int] = None, ttl: Optional[float] = None, timer: Callable[[], float] = time.monotonic):
        self._sessions: TTLCache = TTLCache(
            maxsize=settings.session_limit if maxsize is None else maxsize,
            ttl=settings.session_ttl_seconds if ttl is None else ttl,
            timer=timer,
        )

    def get(self, session_id: Optional[str]) -> Optional[SearchSession]:
        if not session_id:
            return None
        session = self._sessions.get(session_id)
        if session is not None:
            # 접근할 때마다 만료 시간 갱신
            self._sessions[session_id] = session
        return session

    def create(self) -> tuple:
        session_id = uuid.uuid4().hex
        session = SearchSession()
        self._sessions[session_id] = session
        return session_id, session

    def get_or_create(self, session_id: Optional[str]) -> tuple:
        session = self.get(session_id)
        if session is not None:
            return session_id, session
        return self.create()

    def __len__(self):
        return len(self._sessions)
