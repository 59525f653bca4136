"""FastAPI dependencies for dependency injection.

Provides:
- Request-scoped database session
- Taxonomy cache
- Admin gate for mutating routes
- Taxonomy services bound to the session and cache
"""

from typing import Annotated, AsyncGenerator

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.infra.cache import TTLCache, get_cache
from app.infra.database import get_db_session
from app.infra.logging import get_logger
from app.services.category_service import CategoryService
from app.services.characteristic_group_service import CharacteristicGroupService

logger = get_logger(__name__)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get a database session for the current request."""
    async with get_db_session() as session:
        yield session


async def get_taxonomy_cache() -> TTLCache:
    """Get the process-wide taxonomy cache."""
    return get_cache()


# Type aliases for cleaner annotations
DbSession = Annotated[AsyncSession, Depends(get_db)]
Cache = Annotated[TTLCache, Depends(get_taxonomy_cache)]


def require_admin(
    x_admin_token: Annotated[str | None, Header(alias="X-Admin-Token")] = None,
) -> bool:
    """Gate mutating routes behind the shared admin token.

    With no token configured the gate is open in dev and closed elsewhere.

    Raises:
        HTTPException: 403 if the token is missing or wrong
    """
    if not settings.admin_api_token:
        if settings.environment == "dev":
            return True
        logger.warning("Rejected mutation: admin token not configured", environment=settings.environment)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access is not configured",
        )

    if x_admin_token != settings.admin_api_token:
        logger.warning("Rejected mutation: bad admin token", has_token=bool(x_admin_token))
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid admin token",
        )
    return True


AdminRequest = Annotated[bool, Depends(require_admin)]


async def get_category_service(db: DbSession, cache: Cache) -> CategoryService:
    return CategoryService(db, cache=cache)


async def get_characteristic_group_service(
    db: DbSession,
    cache: Cache,
) -> CharacteristicGroupService:
    return CharacteristicGroupService(db, cache=cache)
