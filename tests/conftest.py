from typing import Any, Dict, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from app.api.chess_routes import get_chess_api, get_sessions
from app.main import app
from app.services.chess_api import ChessAPIService
from app.services.view_state import SessionRegistry

BASE = "https://api.chess.com/pub"
ARCHIVES = [
    f"{BASE}/player/magnuscarlsen/games/2024/03",
    f"{BASE}/player/magnuscarlsen/games/2024/04",
    f"{BASE}/player/magnuscarlsen/games/2024/05",
]


def make_game(index: int, white: str = "MagnusCarlsen", black: str = "Hikaru", white_result: str = "win", black_result: str = "resigned") -> Dict[str, Any]:
    return {
        "url": f"https://www.chess.com/game/live/{1000 + index}",
        "pgn": "",
        "time_control": "180",
        "end_time": 1714500000 + index * 600,
        "rated": True,
        "time_class": "blitz",
        "rules": "chess",
        "white": {"rating": 3200 + index, "result": white_result, "username": white},
        "black": {"rating": 3100 + index, "result": black_result, "username": black},
    }


def build_rss(count: int) -> str:
    items = "".join(
        f"""
        <item>
            <title>Headline {i}</title>
            <link>https://www.chess.com/news/view/headline-{i}</link>
            <pubDate>Mon, 0{i} Apr 2024 10:00:00 +0000</pubDate>
            <description><![CDATA[<p>Story <b>{i}</b> body</p>]]></description>
        </item>"""
        for i in range(1, count + 1)
    )
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0"><channel><title>Chess.com News</title>{items}
</channel></rss>"""


def leaderboard_players(prefix: str, count: int = 5) -> List[Dict[str, Any]]:
    return [
        {
            "player_id": i,
            "username": f"{prefix}{i}",
            "score": 3300 - i * 10,
            "rank": i,
            "title": "GM",
            "country": "https://api.chess.com/pub/country/NO",
            "avatar": f"https://images.chess.com/{prefix}{i}.png",
        }
        for i in range(1, count + 1)
    ]


class FakeChessAPI:
    """업스트림 Chess.com API 대역 (경로 -> 응답)"""

    def __init__(self):
        self.routes: Dict[str, Any] = {}
        self.requests: List[httpx.URL] = []

    def add(self, path: str, payload: Any = None, status: int = 200, exc: Optional[type] = None, text: Optional[str] = None):
        self.routes[path] = {"payload": payload, "status": status, "exc": exc, "text": text}

    @property
    def paths(self) -> List[str]:
        return [url.path for url in self.requests]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request.url)
        key = "news" if request.url.host == "api.allorigins.win" else request.url.path
        route = self.routes.get(key)
        if route is None:
            return httpx.Response(404, json={"code": 0, "message": "not found"})
        if route["exc"] is not None:
            raise route["exc"]("simulated failure", request=request)
        if route["text"] is not None:
            return httpx.Response(route["status"], text=route["text"])
        return httpx.Response(route["status"], json=route["payload"])

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def fake_api() -> FakeChessAPI:
    fake = FakeChessAPI()
    fake.add("/pub/player/magnuscarlsen", {
        "avatar": "https://images.chess.com/magnus.png",
        "player_id": 3889224,
        "url": "https://www.chess.com/member/MagnusCarlsen",
        "name": "Magnus Carlsen",
        "username": "magnuscarlsen",
        "title": "GM",
        "followers": 1234567,
        "country": "https://api.chess.com/pub/country/NO",
        "last_online": 1714600000,
        "joined": 1277843670,
        "status": "premium",
        "is_streamer": True,
        "verified": False,
        "league": "Legend",
    })
    fake.add("/pub/player/magnuscarlsen/stats", {
        "chess_blitz": {
            "last": {"rating": 3250, "date": 1714600000, "rd": 50},
            "best": {"rating": 3401, "date": 1690000000, "game": "https://www.chess.com/game/live/1"},
            "record": {"win": 1500, "loss": 200, "draw": 300},
        },
        "chess_bullet": {
            "last": {"rating": 3300, "date": 1714600000, "rd": 60},
        },
        "tactics": {
            "highest": {"rating": 3500, "date": 1600000000},
            "lowest": {"rating": 400, "date": 1500000000},
        },
        "fide": 2830,
    })
    fake.add("/pub/player/magnuscarlsen/games/archives", {"archives": ARCHIVES})
    fake.add("/pub/player/magnuscarlsen/games/2024/03", {"games": [make_game(100)]})
    fake.add("/pub/player/magnuscarlsen/games/2024/04", {"games": [make_game(200)]})
    fake.add("/pub/player/magnuscarlsen/games/2024/05", {
        "games": [make_game(i) for i in range(1, 8)],
    })
    fake.add("/pub/player/magnuscarlsen/is-streamer", {"is_streamer": True})
    fake.add("/pub/player/magnuscarlsen/twitch", {"twitch_url": "https://twitch.tv/magnuscarlsen"})

    fake.add("/pub/leaderboards", {
        "live_blitz": leaderboard_players("blitzer"),
        "live_rapid": leaderboard_players("rapider"),
        "live_bullet": leaderboard_players("bulleter"),
        "daily": leaderboard_players("daily"),
    })
    fake.add("/pub/streamers", {"streamers": [
        {"username": "LiveOne", "avatar": None, "twitch_url": "https://twitch.tv/liveone", "is_live": True, "viewer_count": 120},
        {"username": "Offline", "twitch_url": "https://twitch.tv/offline", "is_live": False},
        {"username": "LiveTwo", "twitch_url": "https://twitch.tv/livetwo", "is_live": True, "viewer_count": 0},
    ]})
    fake.add("news", {"contents": build_rss(5), "status": {"http_code": 200}})
    return fake


@pytest.fixture
def game_factory():
    """make_game(index, white=..., black=...) -> 게임 JSON"""
    return make_game


@pytest.fixture
def rss_builder():
    """build_rss(count) -> item count개짜리 RSS 문서"""
    return build_rss


@pytest.fixture
def api(fake_api: FakeChessAPI) -> ChessAPIService:
    return ChessAPIService(transport=fake_api.transport())


@pytest.fixture
def client(api: ChessAPIService):
    registry = SessionRegistry()
    app.dependency_overrides[get_chess_api] = lambda: api
    app.dependency_overrides[get_sessions] = lambda: registry

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
