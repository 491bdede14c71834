"""
UI 표시용 유틸리티 함수들
"""
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Optional
from zoneinfo import ZoneInfo
from app.config import settings

LOSS_RESULTS = {'checkmated', 'resigned', 'timeout', 'abandoned', 'lose'}


def result_of(game, username: str) -> str:
    """유저가 둔 쪽의 결과 태그 (흰색 아이디 대소문자 무시 비교)"""
    return game.side_of(username).result


def result_color(result: str) -> str:
    """결과에 따른 색상 분류"""
    if result == 'win':
        return "success"
    elif result in LOSS_RESULTS:
        return "failure"
    else:
        return "neutral"


def result_text(result: str) -> str:
    """결과 태그를 표시용 문구로 변환"""
    text_map = {
        'win': 'Win',
        'checkmated': 'Checkmated',
        'resigned': 'Resigned',
        'timeout': 'Timeout',
        'abandoned': 'Game abandoned',
        'lose': 'Loss'
    }
    return text_map.get(result, 'Draw')


def time_class_label(time_class: str) -> str:
    label_map = {
        'rapid': 'Rapid',
        'blitz': 'Blitz',
        'bullet': 'Bullet'
    }
    return label_map.get(time_class, time_class)


def format_number(value: int) -> str:
    """천 단위 구분 (pt-BR: 1.234.567)"""
    return f"{value:,}".replace(",", ".")


def format_rating(rating: Optional[int]) -> str:
    return format_number(rating) if rating else "N/A"


def _display_tz():
    if settings.display_timezone.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(settings.display_timezone)


def format_date(timestamp: int) -> str:
    """epoch 초 -> dd/mm/yyyy"""
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).astimezone(_display_tz()).strftime("%d/%m/%Y")


def format_datetime(timestamp: int) -> str:
    """epoch 초 -> dd/mm/yyyy HH:MM"""
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).astimezone(_display_tz()).strftime("%d/%m/%Y %H:%M")


def format_pub_date(pub_date: str) -> str:
    """RSS pubDate (RFC 822) -> dd/mm/yyyy"""
    if not pub_date:
        return ""
    try:
        published = parsedate_to_datetime(pub_date)
    except (TypeError, ValueError):
        return pub_date
    if published.tzinfo is None:
        published = published.replace(tzinfo=timezone.utc)
    return published.astimezone(_display_tz()).strftime("%d/%m/%Y")


def country_code(country_url: Optional[str]) -> Optional[str]:
    """국가 URL에서 국가 코드 추출 (예: .../country/US -> US)"""
    if not country_url:
        return None
    return country_url.rstrip("/").split("/")[-1] or None


def flag_url(country_url: Optional[str]) -> str:
    code = country_code(country_url)
    return f"https://flagcdn.com/w40/{code.lower()}.png" if code else ""


def game_link(game) -> str:
    return f"https://www.chess.com/game/live/{game.game_id}"


def get_rank_color(rank: int) -> str:
    """순위에 따른 테두리 색상 반환"""
    if rank == 1:
        return "#EAB308"  # 금색
    elif rank == 2:
        return "#9CA3AF"  # 은색
    else:
        return "#B45309"  # 동색
