"""
Campfire - API Routes
======================
Thin controllers: validate the request, delegate to ``SearchSession``,
return its result.  No business logic lives here.

    GET /api/aisearch/{search}  → ``SearchResponse`` JSON
    GET /health                 → liveness + index state
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Path, Request

from campfire.src.core.models import SearchResponse
from campfire.src.core.search_session import SearchSession

router = APIRouter()


def get_search_session(request: Request) -> SearchSession:
    """The process-wide session created in the application lifespan."""
    return request.app.state.search_session


@router.get("/api/aisearch/{search}", response_model=SearchResponse, tags=["search"])
async def ai_search(search: str = Path(..., min_length=1, max_length=500), session: SearchSession = Depends(get_search_session)) -> SearchResponse:
    return await session.search(search)


@router.get("/health", tags=["ops"])
async def health(session: SearchSession = Depends(get_search_session)) -> dict[str, str]:
    return {"status": "ok", "index_state": session.index_state.value}
