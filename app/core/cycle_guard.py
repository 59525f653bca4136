"""Ancestry checks that keep each taxonomy a forest.

Both walks keep a visited set, so they terminate even when the stored
parent links are already corrupt and contain a loop.
"""

from collections import deque
from collections.abc import Iterable, Mapping

from app.config import settings


def would_create_cycle(
    node_id: int,
    proposed_parent_id: int | None,
    parents: Mapping[int, int | None],
    max_depth: int | None = None,
) -> bool:
    """Return True if making ``proposed_parent_id`` the parent of ``node_id`` loops.

    Walks upward from the proposed parent through ``parents`` (node id to
    parent id). Reaching ``node_id`` means the proposed parent is one of its
    descendants. Once the ascent passes ``max_depth`` the answer is settled
    by a descendant search from ``node_id`` instead.

    Args:
        node_id: Node being reparented
        proposed_parent_id: New parent; None (move to root) never loops
        parents: Parent link of every node in the taxonomy
        max_depth: Ascent length before switching to the descendant search,
            defaults to ``settings.taxonomy_max_depth``
    """
    if proposed_parent_id is None:
        return False
    if proposed_parent_id == node_id:
        return True

    max_depth = settings.taxonomy_max_depth if max_depth is None else max_depth
    visited: set[int] = set()
    current: int | None = proposed_parent_id
    steps = 0

    while current is not None:
        if current == node_id:
            return True
        if current in visited:
            # Pre-existing loop that does not pass through node_id
            return False
        visited.add(current)

        steps += 1
        if steps > max_depth:
            return proposed_parent_id in descendant_ids(node_id, children_map(parents))
        current = parents.get(current)

    return False


def children_map(parents: Mapping[int, int | None]) -> dict[int, list[int]]:
    """Invert a parent map into parent id -> sorted child ids."""
    result: dict[int, list[int]] = {}
    for child_id, parent_id in parents.items():
        if parent_id is not None and parent_id != child_id:
            result.setdefault(parent_id, []).append(child_id)
    for ids in result.values():
        ids.sort()
    return result


def descendant_ids(root_id: int, children_of: Mapping[int, Iterable[int]]) -> list[int]:
    """All descendants of ``root_id`` (excluding itself) in breadth-first order.

    Uses a worklist instead of recursion, so deep or looping data cannot
    exhaust the call stack. ``root_id`` never appears in the result even if
    a corrupt link points back to it.
    """
    seen: set[int] = {root_id}
    ordered: list[int] = []
    queue: deque[int] = deque([root_id])

    while queue:
        current = queue.popleft()
        for child_id in children_of.get(current, ()):
            if child_id in seen:
                continue
            seen.add(child_id)
            ordered.append(child_id)
            queue.append(child_id)

    return ordered
