from __future__ import annotations

import logging

from pydantic import ValidationError

from floorsvc.application.dto.responses import MenuResponse
from floorsvc.application.mappers.menu_mapper import to_menu_response
from floorsvc.application.ports.cache import CacheStore
from floorsvc.application.ports.repositories import MenuRepository
from floorsvc.domain.common.errors import EmptyResultError

logger = logging.getLogger(__name__)

MENU_CACHE_KEY = "menu:items"


class NoMenuItemsError(EmptyResultError):
    code = "NO_MENU_ITEMS"


class GetMenu:
    def __init__(
        self,
        repository: MenuRepository,
        cache: CacheStore,
        ttl_seconds: int = 300,
    ) -> None:
        self._repository = repository
        self._cache = cache
        self._ttl_seconds = ttl_seconds

    def _cache_get(self, key: str) -> str | None:
        try:
            return self._cache.get(key)
        except Exception:
            logger.warning("menu_cache_unavailable", exc_info=True)
            return None

    def _cache_set(self, key: str, value: str) -> None:
        try:
            self._cache.set(key, value, ttl_seconds=self._ttl_seconds)
        except Exception:
            logger.warning("menu_cache_unavailable", exc_info=True)

    def execute(self) -> MenuResponse:
        payload = self._cache_get(MENU_CACHE_KEY)
        if payload:
            try:
                return MenuResponse.model_validate_json(payload)
            except ValidationError:
                logger.warning("menu_cache_corrupt")

        items = self._repository.list_items()
        if not items:
            raise NoMenuItemsError("no menu items found")

        response = to_menu_response(items)
        self._cache_set(MENU_CACHE_KEY, response.model_dump_json())
        return response
