import logging
import xml.etree.ElementTree as ET
from typing import Optional, List, Dict, Any
from pydantic import ValidationError
from app.errors import PlayerLookupError
from app.models.chess_models import Leaderboards, LeaderboardEntry, NewsArticle, Streamer
from app.services.chess_api import ChessAPIService
from app.services.view_state import Failed, Ready, ViewState

logger = logging.getLogger(__name__)

LEADERBOARD_CATEGORIES = {
    "blitz": "live_blitz",
    "rapid": "live_rapid",
    "bullet": "live_bullet",
}
LEADERBOARD_SIZE = 3
NEWS_LIMIT = 3
STREAMERS_VISIBLE = 9


def select_top_players(data: Dict[str, Any], size: int = LEADERBOARD_SIZE) -> Leaderboards:
    """카테고리별 상위 N명"""
    boards = {}
    for category, key in LEADERBOARD_CATEGORIES.items():
        boards[category] = [LeaderboardEntry(**player) for player in (data.get(key) or [])[:size]]
    return Leaderboards(**boards)


def select_live_streamers(streamers: List[Dict[str, Any]]) -> List[Streamer]:
    """방송 중인 스트리머만"""
    return [
        Streamer(
            username=streamer["username"],
            avatar=streamer.get("avatar"),
            title=streamer.get("title"),
            is_live=True,
            viewers=streamer.get("viewer_count") or None,
            twitch_url=streamer.get("twitch_url"),
        )
        for streamer in streamers
        if streamer.get("is_live")
    ]


def visible_streamers(streamers: List[Streamer], show_all: bool, limit: int = STREAMERS_VISIBLE) -> List[Streamer]:
    return streamers if show_all else streamers[:limit]


def _child_text(item: ET.Element, tag: str) -> str:
    child = item.find(tag)
    if child is None:
        return ""
    return "".join(child.itertext()).strip()


def parse_news(xml_text: str, limit: int = NEWS_LIMIT) -> List[NewsArticle]:
    """RSS XML에서 item 요소를 문서 순서대로 최대 limit개 추출"""
    root = ET.fromstring(xml_text)
    items = list(root.iter("item"))[:limit]
    return [
        NewsArticle(
            title=_child_text(item, "title"),
            link=_child_text(item, "link"),
            pub_date=_child_text(item, "pubDate"),
            description=_child_text(item, "description"),
        )
        for item in items
    ]


async def load_leaderboards(api: Optional[ChessAPIService] = None) -> ViewState:
    api = api or ChessAPIService()
    try:
        data = await api.get_leaderboards()
        return Ready(select_top_players(data))
    except (PlayerLookupError, ValidationError, TypeError) as e:
        logger.error("Error fetching leaderboards: %s", e)
        return Failed("Leaderboard unavailable")


async def load_live_streamers(api: Optional[ChessAPIService] = None) -> ViewState:
    api = api or ChessAPIService()
    try:
        streamers = await api.get_streamers()
        return Ready(select_live_streamers(streamers))
    except (PlayerLookupError, ValidationError, KeyError, TypeError) as e:
        logger.error("Error fetching streamers: %s", e)
        return Failed("Streamers unavailable")


async def load_news(api: Optional[ChessAPIService] = None) -> ViewState:
    api = api or ChessAPIService()
    try:
        contents = await api.get_news_feed()
        return Ready(parse_news(contents))
    except (PlayerLookupError, ET.ParseError) as e:
        logger.error("Error loading news feed: %s", e)
        return Failed("News unavailable")
