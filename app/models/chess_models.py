from pydantic import BaseModel, Field, computed_field
from typing import Any, Dict, List, Optional
from bs4 import BeautifulSoup
from app.utils.display_utils import country_code, flag_url


class PlayerSearchRequest(BaseModel):
    username: str


class PlayerProfile(BaseModel):
    username: str
    title: Optional[str] = None
    name: Optional[str] = None
    avatar: Optional[str] = None
    country: Optional[str] = None
    url: Optional[str] = None
    followers: int = 0
    joined: int = 0
    last_online: int = 0
    is_streamer: bool = False
    twitch_url: Optional[str] = None

    @property
    def country_code(self) -> Optional[str]:
        return country_code(self.country)

    @property
    def flag_url(self) -> str:
        return flag_url(self.country)

    @property
    def member_url(self) -> str:
        return f"https://www.chess.com/member/{self.username}"


class RatingSnapshot(BaseModel):
    rating: int
    date: Optional[int] = None


class Record(BaseModel):
    win: int = 0
    loss: int = 0
    draw: int = 0


class TimeControlStats(BaseModel):
    last: Optional[RatingSnapshot] = None
    best: Optional[RatingSnapshot] = None
    record: Optional[Record] = None


class PuzzleStats(BaseModel):
    highest: Optional[RatingSnapshot] = None
    lowest: Optional[RatingSnapshot] = None


class PlayerStats(BaseModel):
    chess_rapid: Optional[TimeControlStats] = None
    chess_blitz: Optional[TimeControlStats] = None
    chess_bullet: Optional[TimeControlStats] = None
    tactics: Optional[PuzzleStats] = None

    def for_mode(self, mode: str) -> Optional[TimeControlStats]:
        """rapid / blitz / bullet 모드별 스탯"""
        return getattr(self, f"chess_{mode}", None)


class GamePlayer(BaseModel):
    username: str
    rating: Optional[int] = None
    result: str = ""


class Game(BaseModel):
    url: str
    end_time: int
    time_class: str = ""
    time_control: Optional[str] = None
    rated: Optional[bool] = None
    rules: Optional[str] = None
    white: GamePlayer
    black: GamePlayer

    def side_of(self, username: str) -> GamePlayer:
        """해당 유저가 플레이한 쪽 (흰색 아이디가 일치하지 않으면 흑)"""
        if self.white.username.lower() == username.lower():
            return self.white
        return self.black

    def opponent_of(self, username: str) -> GamePlayer:
        if self.white.username.lower() == username.lower():
            return self.black
        return self.white

    @property
    def game_id(self) -> str:
        return self.url.rstrip("/").split("/")[-1]


class AggregatedProfile(BaseModel):
    profile: PlayerProfile
    stats: Optional[PlayerStats] = None
    games: List[Game] = Field(default_factory=list)


class Streamer(BaseModel):
    username: str
    avatar: Optional[str] = None
    title: Optional[str] = None
    is_live: bool = False
    viewers: Optional[int] = None
    twitch_url: Optional[str] = None


class LeaderboardEntry(BaseModel):
    username: str
    score: int
    rank: int
    title: Optional[str] = None
    name: Optional[str] = None
    country: Optional[str] = None
    avatar: Optional[str] = None
    url: Optional[str] = None
    win_count: Optional[int] = None
    loss_count: Optional[int] = None
    draw_count: Optional[int] = None


class Leaderboards(BaseModel):
    blitz: List[LeaderboardEntry] = Field(default_factory=list)
    rapid: List[LeaderboardEntry] = Field(default_factory=list)
    bullet: List[LeaderboardEntry] = Field(default_factory=list)

    def for_category(self, category: str) -> List[LeaderboardEntry]:
        return getattr(self, category, [])


class NewsArticle(BaseModel):
    title: str = ""
    link: str = ""
    pub_date: str = ""
    description: str = ""

    @computed_field
    @property
    def summary(self) -> str:
        """HTML 설명을 일반 텍스트로 변환"""
        if not self.description:
            return ""
        return BeautifulSoup(self.description, "html.parser").get_text(" ", strip=True)


# 업스트림 응답 봉투 (형식 검증용)
class ArchiveIndex(BaseModel):
    archives: Optional[List[str]] = None


class ArchiveGames(BaseModel):
    games: Optional[List[Dict[str, Any]]] = None


class StreamerFlag(BaseModel):
    is_streamer: Optional[bool] = None


class TwitchLink(BaseModel):
    twitch_url: Optional[str] = None


class StreamerList(BaseModel):
    streamers: Optional[List[Dict[str, Any]]] = None


class ProxyEnvelope(BaseModel):
    contents: str
