import asyncio
import logging
import httpx
from typing import Optional, Dict, Any, List, Type, TypeVar
from urllib.parse import quote
from pydantic import BaseModel, ValidationError
from app.config import settings
from app.errors import (
    LookupConnectionError,
    LookupTimeout,
    PlayerNotFound,
    UnknownLookupError,
)
from app.models.chess_models import (
    ArchiveGames,
    ArchiveIndex,
    ProxyEnvelope,
    StreamerFlag,
    StreamerList,
    TwitchLink,
)

logger = logging.getLogger(__name__)

EnvelopeT = TypeVar("EnvelopeT", bound=BaseModel)


def normalize_username(username: str) -> str:
    """검색어 정규화 (공백 제거 + 소문자)"""
    return username.strip().lower()


class ChessAPIService:
    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = settings.chess_api_base_url
        self.timeout = settings.request_timeout
        self.headers = {
            "User-Agent": settings.user_agent,
            "Accept": "application/json",
        }
        # 테스트에서는 MockTransport 주입
        self.transport = transport

    def player_url(self, username: str, *path: str) -> str:
        segments = [self.base_url, "player", quote(normalize_username(username), safe="")]
        segments.extend(path)
        return "/".join(segments)

    async def fetch_json(self, url: str) -> Any:
        """GET 요청 후 JSON 반환, 실패 시 분류된 검색 오류 발생

        timeout 은 연결부터 본문 수신까지 요청 전체에 적용된다.
        """
        async with httpx.AsyncClient(
            transport=self.transport,
            timeout=self.timeout,
            headers=self.headers,
            follow_redirects=True,
        ) as client:
            try:
                return await asyncio.wait_for(self._get_json(client, url), self.timeout)

            except (asyncio.TimeoutError, httpx.TimeoutException) as e:
                logger.warning("Request timed out: %s", url)
                raise LookupTimeout() from e
            except httpx.HTTPStatusError as e:
                status_code = e.response.status_code
                logger.info("HTTP %s from %s", status_code, url)
                if status_code == 404:
                    raise PlayerNotFound() from e
                raise UnknownLookupError(f"HTTP error! status: {status_code}") from e
            except httpx.TransportError as e:
                logger.warning("Connection failed for %s: %s", url, e)
                raise LookupConnectionError() from e
            except ValueError as e:
                logger.warning("Invalid JSON from %s: %s", url, e)
                raise UnknownLookupError(f"Invalid response: {e}") from e

    @staticmethod
    async def _get_json(client: httpx.AsyncClient, url: str) -> Any:
        response = await client.get(url)
        response.raise_for_status()
        return response.json()

    async def fetch_object(self, url: str) -> Dict[str, Any]:
        """JSON 객체 응답만 허용"""
        data = await self.fetch_json(url)
        if not isinstance(data, dict):
            logger.warning("Expected a JSON object from %s, got %s", url, type(data).__name__)
            raise UnknownLookupError(f"Unexpected response format from {url}")
        return data

    async def fetch_envelope(self, url: str, model: Type[EnvelopeT]) -> EnvelopeT:
        """응답 봉투를 모델로 검증, 형식이 다르면 UnknownLookupError"""
        data = await self.fetch_json(url)
        try:
            return model.model_validate(data)
        except ValidationError as e:
            logger.warning("Unexpected %s payload from %s: %s", model.__name__, url, e)
            raise UnknownLookupError(f"Unexpected response format from {url}") from e

    async def get_profile(self, username: str) -> Dict[str, Any]:
        """플레이어 프로필 조회"""
        return await self.fetch_object(self.player_url(username))

    async def get_stats(self, username: str) -> Dict[str, Any]:
        """플레이어 스탯 조회"""
        return await self.fetch_object(self.player_url(username, "stats"))

    async def get_archives(self, username: str) -> List[str]:
        """월별 게임 아카이브 목록 조회 (오래된 순)"""
        index = await self.fetch_envelope(self.player_url(username, "games", "archives"), ArchiveIndex)
        return index.archives or []

    async def get_archive_games(self, archive_url: str) -> List[Dict[str, Any]]:
        """아카이브 한 달치 게임 조회"""
        archive = await self.fetch_envelope(archive_url, ArchiveGames)
        return archive.games or []

    async def get_is_streamer(self, username: str) -> bool:
        flag = await self.fetch_envelope(self.player_url(username, "is-streamer"), StreamerFlag)
        return bool(flag.is_streamer)

    async def get_twitch_url(self, username: str) -> Optional[str]:
        link = await self.fetch_envelope(self.player_url(username, "twitch"), TwitchLink)
        return link.twitch_url or None

    async def get_leaderboards(self) -> Dict[str, Any]:
        """리더보드 조회"""
        return await self.fetch_object(f"{self.base_url}/leaderboards")

    async def get_streamers(self) -> List[Dict[str, Any]]:
        """스트리머 목록 조회"""
        listing = await self.fetch_envelope(f"{self.base_url}/streamers", StreamerList)
        return listing.streamers or []

    async def get_news_feed(self) -> str:
        """프록시를 통해 뉴스 RSS 원문 조회"""
        url = f"{settings.news_proxy_url}{quote(settings.news_feed_url, safe='')}"
        envelope = await self.fetch_envelope(url, ProxyEnvelope)
        return envelope.contents
