"""User library routes: saved papers and recent searches."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Query, Response, status

from paperlens import container
from paperlens.api.schemas import (
    IsSavedResponse,
    PaperResponse,
    RecentSearchRequest,
    RecentSearchResponse,
    SavedPaperResponse,
    SavePaperRequest,
)
from paperlens.application.services import LibraryService
from paperlens.utils.logging_config import LogFiles, Logger

router = APIRouter()


def _get_library_service() -> LibraryService:
    return container.get_library_service()


@router.get("/users/{user_id}/saved-papers", response_model=List[PaperResponse])
async def list_saved_papers(user_id: int):
    papers = _get_library_service().saved_papers(user_id)
    return [PaperResponse.from_domain(p) for p in papers]


@router.post(
    "/users/{user_id}/saved-papers",
    response_model=SavedPaperResponse,
    status_code=status.HTTP_201_CREATED,
)
async def save_paper(user_id: int, body: SavePaperRequest):
    saved = _get_library_service().save_paper(user_id, body.paper_id)
    Logger.info(f"saved user_id={user_id} paper_id={body.paper_id}", file=LogFiles.LIBRARY)
    return SavedPaperResponse.from_domain(saved)


@router.get("/users/{user_id}/saved-papers/{paper_id}", response_model=IsSavedResponse)
async def is_paper_saved(user_id: int, paper_id: int):
    return IsSavedResponse(is_saved=_get_library_service().is_saved(user_id, paper_id))


@router.delete(
    "/users/{user_id}/saved-papers/{paper_id}", status_code=status.HTTP_204_NO_CONTENT
)
async def remove_saved_paper(user_id: int, paper_id: int):
    removed = _get_library_service().remove_saved_paper(user_id, paper_id)
    Logger.info(
        f"unsaved user_id={user_id} paper_id={paper_id} removed={removed}", file=LogFiles.LIBRARY
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/users/{user_id}/recent-searches", response_model=List[RecentSearchResponse])
async def list_recent_searches(user_id: int, limit: Optional[int] = Query(None, ge=1)):
    searches = _get_library_service().recent_searches(user_id, limit=limit)
    return [RecentSearchResponse.from_domain(s) for s in searches]


@router.post(
    "/users/{user_id}/recent-searches",
    response_model=RecentSearchResponse,
    status_code=status.HTTP_201_CREATED,
)
async def record_recent_search(user_id: int, body: RecentSearchRequest):
    search = _get_library_service().record_search(user_id, body.query, body.filters)
    return RecentSearchResponse.from_domain(search)


@router.delete("/users/{user_id}/recent-searches", status_code=status.HTTP_204_NO_CONTENT)
async def clear_recent_searches(user_id: int):
    _get_library_service().clear_searches(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
