"""Product category endpoints."""

from app.api.deps import get_category_service
from app.api.routes.taxonomy import build_taxonomy_router

router = build_taxonomy_router(get_category_service)
