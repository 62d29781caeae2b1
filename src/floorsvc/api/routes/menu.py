from __future__ import annotations

import hashlib

from fastapi import APIRouter, Header, Response

from floorsvc.application.dto.responses import MenuResponse
from floorsvc.application.use_cases.get_menu import GetMenu
from floorsvc.infrastructure.cache.cache_store import RedisCacheStore
from floorsvc.infrastructure.db.repositories.menu_repo import SqlAlchemyMenuRepository

router = APIRouter(tags=["menu"])


def _get_menu_use_case() -> GetMenu:
    return GetMenu(
        repository=SqlAlchemyMenuRepository(),
        cache=RedisCacheStore(),
        ttl_seconds=300,
    )


def _etag(payload: MenuResponse) -> str:
    digest = hashlib.sha256(payload.model_dump_json().encode("utf-8")).hexdigest()
    return f'"menu-{digest[:16]}"'


@router.get("/v1/menu", response_model=MenuResponse)
def get_menu(
    response: Response,
    if_none_match: str | None = Header(default=None, alias="If-None-Match"),
) -> MenuResponse | Response:
    payload = _get_menu_use_case().execute()

    etag = _etag(payload)
    if if_none_match == etag:
        return Response(status_code=304, headers={"ETag": etag})

    response.headers["ETag"] = etag
    return payload
