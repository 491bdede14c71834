import logging
from pathlib import Path
from urllib.parse import quote
from fastapi import Depends, FastAPI, Request, Form
from fastapi.staticfiles import StaticFiles
from fastapi.responses import HTMLResponse, RedirectResponse
from app.api.chess_routes import (
    get_chess_api,
    get_sessions,
    current_search_state,
    render_dashboard,
    router as chess_router,
)
from app.config import configure_logging
from app.errors import PlayerLookupError, lookup_exception_handler
from app.services.chess_api import ChessAPIService
from app.services.view_state import SessionRegistry

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Chess Dashboard", version="1.0.0")
app.add_exception_handler(PlayerLookupError, lookup_exception_handler)

@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info("%s %s", request.method, request.url)
    response = await call_next(request)
    logger.info("Response: %s", response.status_code)
    return response

# Static files
app.mount("/static", StaticFiles(directory=str(Path(__file__).resolve().parent / "static")), name="static")

# Include routers
app.include_router(chess_router)

@app.get("/", response_class=HTMLResponse)
async def home(
    request: Request,
    category: str = "blitz",
    show_all: bool = False,
    api: ChessAPIService = Depends(get_chess_api),
    registry: SessionRegistry = Depends(get_sessions),
):
    return await render_dashboard(
        request,
        api,
        current_search_state(request, registry),
        category=category,
        show_all=show_all,
    )

@app.post("/search")
async def search_player(username: str = Form("")):
    """플레이어 검색 폼 처리"""
    username = username.strip()
    if not username:
        return RedirectResponse(url="/", status_code=303)
    return RedirectResponse(url=f"/player/{quote(username, safe='')}", status_code=303)

@app.get("/health")
async def health_check():
    return {"status": "healthy"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
