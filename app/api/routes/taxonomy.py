"""Taxonomy endpoints, built once and mounted for each taxonomy.

Listing goes through the process cache; every mutation runs in one
transaction and invalidates that taxonomy's cache keys.
"""

from collections.abc import Callable
from typing import Any

from fastapi import APIRouter, Depends, Query, status

from app.api.deps import AdminRequest, Cache
from app.config import settings
from app.infra.logging import get_logger
from app.schemas.common import ErrorResponse
from app.schemas.taxonomy import (
    DeletePreviewResponse,
    DeleteResponse,
    NodeCreate,
    NodeResponse,
    NodeUpdate,
    TreeResponse,
)
from app.services.taxonomy_service import TaxonomyService

logger = get_logger(__name__)

ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    422: {"model": ErrorResponse},
}


def build_taxonomy_router(service_dependency: Callable[..., Any]) -> APIRouter:
    """Create the CRUD router for the taxonomy served by ``service_dependency``."""
    router = APIRouter(responses=ERROR_RESPONSES)

    @router.get("", response_model=TreeResponse, summary="List active nodes as a tree")
    async def list_nodes(
        cache: Cache,
        service: TaxonomyService = Depends(service_dependency),
        flat: bool = Query(default=False, description="Return the ordered flat list"),
        nocache: bool = Query(default=False, description="Bypass the listing cache"),
    ) -> TreeResponse:
        async def load() -> dict[str, Any]:
            tree = await service.list_tree()
            nodes = tree.flat if flat else tree.roots
            return {
                "success": True,
                "flat": flat,
                "data": [node.as_dict() for node in nodes],
                "total": len(tree),
            }

        if nocache:
            payload = await load()
        else:
            keys, namespace = service.cache_keys, service.cache_namespace
            key = keys.flat(namespace) if flat else keys.tree(namespace)
            payload = await cache.remember(key, settings.cache_ttl_seconds, load)

        return TreeResponse.model_validate(payload)

    @router.get("/{node_id}", response_model=NodeResponse)
    async def get_node(
        node_id: int,
        service: TaxonomyService = Depends(service_dependency),
    ) -> NodeResponse:
        return NodeResponse.model_validate(await service.get(node_id))

    @router.post("", response_model=NodeResponse, status_code=status.HTTP_201_CREATED)
    async def create_node(
        body: NodeCreate,
        _: AdminRequest,
        service: TaxonomyService = Depends(service_dependency),
    ) -> NodeResponse:
        node = await service.create(
            name=body.name,
            description=body.description,
            parent_id=body.parent_id,
            is_active=body.is_active,
            sort_order=body.sort_order,
        )
        return NodeResponse.model_validate(node)

    @router.api_route("/{node_id}", methods=["PATCH", "PUT"], response_model=NodeResponse)
    async def update_node(
        node_id: int,
        body: NodeUpdate,
        _: AdminRequest,
        service: TaxonomyService = Depends(service_dependency),
    ) -> NodeResponse:
        node = await service.update(node_id, body.changes())
        return NodeResponse.model_validate(node)

    @router.delete("/{node_id}", response_model=DeleteResponse)
    async def delete_node(
        node_id: int,
        _: AdminRequest,
        service: TaxonomyService = Depends(service_dependency),
        force: bool = Query(default=False, description="Cascade over children and leaf data"),
    ) -> DeleteResponse:
        result = await service.delete(node_id, force=force)

        message = f'{service.label} "{result.name}" deleted'
        if force and len(result.deleted_ids) > 1:
            message += f" with {len(result.deleted_ids) - 1} descendant(s)"
        if result.detached_references:
            message += f"; {result.detached_references} reference(s) detached"

        return DeleteResponse(
            id=result.id,
            name=result.name,
            force=result.force,
            deleted_ids=result.deleted_ids,
            children_count=result.children_count,
            detached_references=result.detached_references,
            deleted_values=result.deleted_values,
            message=message,
        )

    @router.get("/{node_id}/delete-preview", response_model=DeletePreviewResponse)
    async def delete_preview(
        node_id: int,
        service: TaxonomyService = Depends(service_dependency),
    ) -> DeletePreviewResponse:
        return DeletePreviewResponse.model_validate(await service.delete_preview(node_id))

    return router
