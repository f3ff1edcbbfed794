"""Catalog content API: show and episode writes feeding the index queue."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response, status

from app.api.v1.dependencies import get_content_service
from app.application.dtos.content import EpisodeCreate, ShowCreate
from app.application.use_cases.content import ContentService
from app.core.limiter import limit_writes
from app.schemas.content import (
    EpisodeCreateRequest,
    EpisodeResponse,
    EpisodeUpdateRequest,
    ShowCreateRequest,
    ShowResponse,
    ShowUpdateRequest,
)

router = APIRouter()

ContentDep = Annotated[ContentService, Depends(get_content_service)]


@router.post("/shows", response_model=ShowResponse, status_code=status.HTTP_201_CREATED)
@limit_writes
async def create_show(request: Request, body: ShowCreateRequest, content: ContentDep):
    return await content.create_show(ShowCreate(**body.model_dump()))


@router.get("/shows/{show_id}", response_model=ShowResponse)
async def get_show(show_id: str, content: ContentDep):
    return await content.get_show(show_id)


@router.patch("/shows/{show_id}", response_model=ShowResponse)
@limit_writes
async def update_show(request: Request, show_id: str, body: ShowUpdateRequest, content: ContentDep):
    """Apply only the fields present in the body."""
    return await content.update_show(show_id, body.model_dump(exclude_unset=True))


@router.delete("/shows/{show_id}", status_code=status.HTTP_204_NO_CONTENT)
@limit_writes
async def delete_show(request: Request, show_id: str, content: ContentDep) -> Response:
    """Delete the show; its episodes are removed with it and de-indexed."""
    await content.delete_show(show_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/episodes", response_model=EpisodeResponse, status_code=status.HTTP_201_CREATED)
@limit_writes
async def create_episode(request: Request, body: EpisodeCreateRequest, content: ContentDep):
    return await content.create_episode(EpisodeCreate(**body.model_dump()))


@router.get("/episodes/{episode_id}", response_model=EpisodeResponse)
async def get_episode(episode_id: str, content: ContentDep):
    return await content.get_episode(episode_id)


@router.patch("/episodes/{episode_id}", response_model=EpisodeResponse)
@limit_writes
async def update_episode(request: Request, episode_id: str, body: EpisodeUpdateRequest, content: ContentDep):
    return await content.update_episode(episode_id, body.model_dump(exclude_unset=True))


@router.delete("/episodes/{episode_id}", status_code=status.HTTP_204_NO_CONTENT)
@limit_writes
async def delete_episode(request: Request, episode_id: str, content: ContentDep) -> Response:
    await content.delete_episode(episode_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
