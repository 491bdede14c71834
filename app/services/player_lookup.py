import logging
from typing import Optional, Dict, Any, List
from pydantic import ValidationError
from app.config import settings
from app.errors import EmptyUsername, PlayerLookupError, UnknownLookupError
from app.models.chess_models import AggregatedProfile, Game, PlayerProfile, PlayerStats
from app.services.chess_api import ChessAPIService, normalize_username

logger = logging.getLogger(__name__)


class PlayerLookupService:
    def __init__(self, api: Optional[ChessAPIService] = None, stats_required: Optional[bool] = None):
        self.api = api or ChessAPIService()
        self.stats_required = settings.stats_required if stats_required is None else stats_required
        self.games_limit = settings.recent_games_limit

    async def lookup(self, username: str) -> AggregatedProfile:
        """프로필 + 스탯 + 최근 게임 + 스트리머 정보를 하나로 합친다"""
        username = normalize_username(username)
        if not username:
            raise EmptyUsername()

        logger.info("Looking up player %s", username)

        # 1. 프로필 (필수)
        profile_data = await self.api.get_profile(username)

        # 2. 스탯
        stats_data = await self._fetch_stats(username)

        # 3. 최근 게임
        games = await self._fetch_recent_games(username)

        # 4. 스트리머 정보 (실패해도 무시)
        streaming = await self._fetch_streaming_info(username)

        # 트위치 링크는 스트리머 확인을 거친 경우에만 붙인다
        merged = {key: value for key, value in profile_data.items() if key != "twitch_url"}
        merged.update(streaming)

        try:
            profile = PlayerProfile(**merged)
            stats = PlayerStats(**stats_data) if stats_data is not None else None
        except (TypeError, ValidationError) as e:
            raise UnknownLookupError(f"Unexpected response format: {e}") from e

        parsed_games = []
        for game in games:
            try:
                parsed_games.append(Game(**game))
            except (TypeError, ValidationError) as e:
                logger.warning("Skipping malformed game for %s: %s", username, e)

        logger.info("Lookup for %s finished: %d games, streamer=%s", username, len(parsed_games), profile.is_streamer)
        return AggregatedProfile(profile=profile, stats=stats, games=parsed_games)

    async def _fetch_stats(self, username: str) -> Optional[Dict[str, Any]]:
        if self.stats_required:
            return await self.api.get_stats(username)
        try:
            return await self.api.get_stats(username)
        except PlayerLookupError as e:
            logger.info("Stats unavailable for %s: %s", username, e.message)
            return None

    async def _fetch_recent_games(self, username: str) -> List[Dict[str, Any]]:
        """가장 최근 아카이브만 조회해서 마지막 N게임을 최신순으로"""
        archives = await self.api.get_archives(username)
        if not archives:
            return []

        games = await self.api.get_archive_games(archives[-1])
        if self.games_limit <= 0:
            return []
        return list(reversed(games[-self.games_limit:]))

    async def _fetch_streaming_info(self, username: str) -> Dict[str, Any]:
        """스트리머인 경우에만 트위치 링크 조회, 실패는 로그만 남긴다"""
        try:
            is_streamer = await self.api.get_is_streamer(username)
        except PlayerLookupError as e:
            logger.info("Could not fetch streamer info for %s: %s", username, e.message)
            return {}

        if not is_streamer:
            return {}

        try:
            twitch_url = await self.api.get_twitch_url(username)
        except PlayerLookupError as e:
            logger.info("Could not fetch Twitch info for %s: %s", username, e.message)
            return {}

        return {"twitch_url": twitch_url} if twitch_url else {}
