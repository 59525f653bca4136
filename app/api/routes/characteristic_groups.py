"""Characteristic group endpoints."""

from app.api.deps import get_characteristic_group_service
from app.api.routes.taxonomy import build_taxonomy_router

router = build_taxonomy_router(get_characteristic_group_service)
