import asyncio
import logging
from pathlib import Path
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.templating import Jinja2Templates
from fastapi.responses import HTMLResponse, RedirectResponse
from app.errors import PlayerLookupError
from app.models.chess_models import AggregatedProfile, PlayerSearchRequest
from app.services.chess_api import ChessAPIService
from app.services.player_lookup import PlayerLookupService
from app.services.view_state import Failed, Idle, Ready, SessionRegistry, ViewState
from app.services.widgets import (
    LEADERBOARD_CATEGORIES,
    load_leaderboards,
    load_live_streamers,
    load_news,
    visible_streamers,
)
from app.utils.display_utils import (
    flag_url,
    format_date,
    format_datetime,
    format_number,
    format_pub_date,
    format_rating,
    game_link,
    get_rank_color,
    result_color,
    result_of,
    result_text,
    time_class_label,
)

logger = logging.getLogger(__name__)

router = APIRouter()
templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))

SESSION_COOKIE = "dashboard_session"
DEFAULT_CATEGORY = "blitz"

DISPLAY_HELPERS = {
    "flag_url": flag_url,
    "format_date": format_date,
    "format_datetime": format_datetime,
    "format_number": format_number,
    "format_pub_date": format_pub_date,
    "format_rating": format_rating,
    "game_link": game_link,
    "get_rank_color": get_rank_color,
    "result_color": result_color,
    "result_of": result_of,
    "result_text": result_text,
    "time_class_label": time_class_label,
}

chess_service = ChessAPIService()
session_registry = SessionRegistry()


def get_chess_api() -> ChessAPIService:
    return chess_service


def get_lookup_service(api: ChessAPIService = Depends(get_chess_api)) -> PlayerLookupService:
    return PlayerLookupService(api)


def get_sessions() -> SessionRegistry:
    return session_registry


async def render_dashboard(
    request: Request,
    api: ChessAPIService,
    search_state: ViewState,
    category: str = DEFAULT_CATEGORY,
    show_all: bool = False,
    status_code: int = 200,
) -> HTMLResponse:
    """대시보드 (리더보드 + 뉴스 + 스트리머 + 검색) 렌더링"""
    if category not in LEADERBOARD_CATEGORIES:
        category = DEFAULT_CATEGORY

    leaderboard, news, streamers = await asyncio.gather(
        load_leaderboards(api),
        load_news(api),
        load_live_streamers(api),
    )

    live = streamers.data if isinstance(streamers, Ready) else []
    return templates.TemplateResponse(request, "index.html", {
        "search": search_state,
        "leaderboard": leaderboard,
        "categories": list(LEADERBOARD_CATEGORIES),
        "active_category": category,
        "news": news,
        "streamers": streamers,
        "visible_streamers": visible_streamers(live, show_all),
        "show_all": show_all,
        **DISPLAY_HELPERS,
    }, status_code=status_code)


@router.get("/player/{username}", response_class=HTMLResponse)
async def player_profile(
    request: Request,
    username: str,
    api: ChessAPIService = Depends(get_chess_api),
    lookup_service: PlayerLookupService = Depends(get_lookup_service),
    registry: SessionRegistry = Depends(get_sessions),
):
    """플레이어 프로필 페이지"""
    session_id, session = registry.get_or_create(request.cookies.get(SESSION_COOKIE))
    token = session.begin(username)
    status_code = 200

    try:
        result = await lookup_service.lookup(username)
        state = Ready(result)
    except PlayerLookupError as e:
        state = Failed(e.message, e.hint)
        status_code = e.status_code

    if not session.commit(token, state):
        # 더 최근 검색이 있으면 그 상태를 그대로 보여준다
        logger.info("Lookup for %s superseded by a newer search", username)
        state = session.state
        status_code = 200

    if isinstance(state, Ready):
        response = templates.TemplateResponse(request, "player_profile.html", {
            "search": state,
            "result": state.data,
            **DISPLAY_HELPERS,
        })
    else:
        response = await render_dashboard(request, api, state, status_code=status_code)

    response.set_cookie(SESSION_COOKIE, session_id, httponly=True, samesite="lax")
    return response


@router.post("/player/clear")
async def clear_player(request: Request, registry: SessionRegistry = Depends(get_sessions)):
    """검색 결과 닫기"""
    session = registry.get(request.cookies.get(SESSION_COOKIE))
    if session is not None:
        session.clear()
    return RedirectResponse(url="/", status_code=303)


@router.post("/api/player/search", response_model=AggregatedProfile)
async def search_player(
    request: PlayerSearchRequest,
    lookup_service: PlayerLookupService = Depends(get_lookup_service),
):
    """플레이어 검색 API"""
    return await lookup_service.lookup(request.username)


@router.get("/api/player/{username}", response_model=AggregatedProfile)
async def get_player(username: str, lookup_service: PlayerLookupService = Depends(get_lookup_service)):
    """플레이어 통합 정보 조회 API"""
    return await lookup_service.lookup(username)


@router.get("/api/leaderboards")
async def get_leaderboards(api: ChessAPIService = Depends(get_chess_api)):
    """카테고리별 상위 3명"""
    state = await load_leaderboards(api)
    if isinstance(state, Failed):
        raise HTTPException(status_code=503, detail=state.message)
    return state.data


@router.get("/api/streamers")
async def get_streamers(show_all: bool = False, api: ChessAPIService = Depends(get_chess_api)):
    """방송 중인 스트리머 목록"""
    state = await load_live_streamers(api)
    if isinstance(state, Failed):
        raise HTTPException(status_code=503, detail=state.message)
    return {
        "total": len(state.data),
        "streamers": visible_streamers(state.data, show_all),
    }


@router.get("/api/news")
async def get_news(api: ChessAPIService = Depends(get_chess_api)):
    """최신 뉴스 3건"""
    state = await load_news(api)
    if isinstance(state, Failed):
        raise HTTPException(status_code=503, detail=state.message)
    return {"articles": state.data}


def current_search_state(request: Request, registry: SessionRegistry) -> ViewState:
    session = registry.get(request.cookies.get(SESSION_COOKIE))
    return session.state if session is not None else Idle()
