"""FastAPI endpoints for obituaries, condolences and tributes."""

import json

from fastapi import APIRouter, Query
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from memorials.api.schemas import (
    CreateObituaryRequest,
    CreateTributeRequest,
    IdResponse,
    StatusResponse,
    SubmitCondolenceRequest,
    UpdateCondolenceRequest,
    UpdateObituaryRequest,
    UpdateTributeRequest,
)
from memorials.condolence.condolence import Condolence
from memorials.condolence.moderation import DeleteCondolence, UpdateCondolence
from memorials.condolence.submission import SubmitCondolence
from memorials.obituary.management import CreateObituary, DeleteObituary, UpdateObituary
from memorials.obituary.obituary import Obituary
from memorials.tribute.management import ApproveTribute, CreateTribute, DeleteTribute, UpdateTribute
from memorials.tribute.tribute import Tribute

obituary_router = APIRouter(prefix="/obituaries", tags=["obituaries"])
condolence_router = APIRouter(prefix="/condolences", tags=["condolences"])
tribute_router = APIRouter(prefix="/tributes", tags=["tributes"])


def obituary_view(obituary: Obituary) -> dict:
    return {**obituary.to_dict(), "full_name": obituary.full_name}


def tribute_view(tribute: Tribute) -> dict:
    return {**tribute.to_dict(), "photos": tribute.photo_list(), "videos": tribute.video_list()}


def paginated(result, page: int, limit: int, key: str, view) -> dict:
    return {
        key: [view(item) for item in result.items],
        "page": page,
        "limit": limit,
        "total": result.total,
        "has_next": result.has_next,
    }


def _json_list(values) -> str | None:
    return json.dumps(values) if values is not None else None


# --- Obituary endpoints ---


@obituary_router.get("/recent")
async def recent_obituaries() -> list[dict]:
    return [obituary_view(o) for o in current_domain.repository_for(Obituary).recent()]


@obituary_router.get("/search")
async def search_obituaries(q: str = Query(..., min_length=1)) -> list[dict]:
    return [obituary_view(o) for o in current_domain.repository_for(Obituary).search(q)]


@obituary_router.get("")
async def list_obituaries(page: int = Query(1, ge=1), limit: int = Query(10, ge=1, le=100)) -> dict:
    result = current_domain.repository_for(Obituary).published_page(page, limit)
    return paginated(result, page, limit, "obituaries", obituary_view)


@obituary_router.get("/{slug_or_id}")
async def get_obituary(slug_or_id: str) -> dict:
    return obituary_view(current_domain.repository_for(Obituary).published_by_slug_or_id(slug_or_id))


@obituary_router.post("", status_code=201, response_model=IdResponse)
async def create_obituary(body: CreateObituaryRequest) -> IdResponse:
    command = CreateObituary(**body.model_dump(exclude_none=True))
    result = current_domain.process(command, asynchronous=False)
    return IdResponse(id=result)


@obituary_router.put("/{obituary_id}", response_model=StatusResponse)
async def update_obituary(obituary_id: str, body: UpdateObituaryRequest) -> StatusResponse:
    command = UpdateObituary(obituary_id=obituary_id, **body.model_dump(exclude_none=True))
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@obituary_router.delete("/{obituary_id}", response_model=StatusResponse)
async def delete_obituary(obituary_id: str) -> StatusResponse:
    current_domain.process(DeleteObituary(obituary_id=obituary_id), asynchronous=False)
    return StatusResponse()


# --- Condolence endpoints ---


@condolence_router.get("")
async def list_condolences(page: int = Query(1, ge=1), limit: int = Query(20, ge=1, le=100)) -> dict:
    result = current_domain.repository_for(Condolence).page(page, limit)
    return paginated(result, page, limit, "condolences", lambda c: c.to_dict())


@condolence_router.get("/obituary/slug/{slug}")
async def condolences_for_obituary_slug(slug: str, include_private: bool = False) -> list[dict]:
    obituary = current_domain.repository_for(Obituary).by_slug(slug)
    if obituary is None:
        raise ObjectNotFoundError(f"Obituary `{slug}` not found")
    condolences = current_domain.repository_for(Condolence).for_obituary(str(obituary.id), include_private)
    return [c.to_dict() for c in condolences]


@condolence_router.get("/obituary/{obituary_id}")
async def condolences_for_obituary(obituary_id: str, include_private: bool = False) -> list[dict]:
    condolences = current_domain.repository_for(Condolence).for_obituary(obituary_id, include_private)
    return [c.to_dict() for c in condolences]


@condolence_router.get("/stats/{obituary_id}")
async def condolence_stats(obituary_id: str) -> dict:
    return current_domain.repository_for(Condolence).stats(obituary_id)


@condolence_router.post("", status_code=201, response_model=IdResponse)
async def submit_condolence(body: SubmitCondolenceRequest) -> IdResponse:
    command = SubmitCondolence(**body.model_dump(exclude_none=True))
    result = current_domain.process(command, asynchronous=False)
    return IdResponse(id=result)


@condolence_router.put("/{condolence_id}", response_model=StatusResponse)
async def update_condolence(condolence_id: str, body: UpdateCondolenceRequest) -> StatusResponse:
    command = UpdateCondolence(condolence_id=condolence_id, **body.model_dump(exclude_none=True))
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@condolence_router.delete("/{condolence_id}", response_model=StatusResponse)
async def delete_condolence(condolence_id: str) -> StatusResponse:
    current_domain.process(DeleteCondolence(condolence_id=condolence_id), asynchronous=False)
    return StatusResponse()


# --- Tribute endpoints ---


@tribute_router.get("/obituary/{obituary_id}")
async def tributes_for_obituary(obituary_id: str) -> list[dict]:
    return [tribute_view(t) for t in current_domain.repository_for(Tribute).approved_for_obituary(obituary_id)]


@tribute_router.post("", status_code=201, response_model=IdResponse)
async def create_tribute(body: CreateTributeRequest) -> IdResponse:
    command = CreateTribute(
        obituary_id=body.obituary_id,
        name=body.name,
        email=body.email,
        message=body.message,
        photos=_json_list(body.photos),
        videos=_json_list(body.videos),
    )
    result = current_domain.process(command, asynchronous=False)
    return IdResponse(id=result)


@tribute_router.put("/{tribute_id}", response_model=StatusResponse)
async def update_tribute(tribute_id: str, body: UpdateTributeRequest) -> StatusResponse:
    command = UpdateTribute(
        tribute_id=tribute_id,
        name=body.name,
        email=body.email,
        message=body.message,
        photos=_json_list(body.photos),
        videos=_json_list(body.videos),
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@tribute_router.patch("/{tribute_id}/approve", response_model=StatusResponse)
async def approve_tribute(tribute_id: str) -> StatusResponse:
    current_domain.process(ApproveTribute(tribute_id=tribute_id), asynchronous=False)
    return StatusResponse()


@tribute_router.delete("/{tribute_id}", response_model=StatusResponse)
async def delete_tribute(tribute_id: str) -> StatusResponse:
    current_domain.process(DeleteTribute(tribute_id=tribute_id), asynchronous=False)
    return StatusResponse()
