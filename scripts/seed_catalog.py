#!/usr/bin/env python
"""Seed a local database with a demo catalog taxonomy.

This script:
1. Creates the taxonomy tables if they do not exist
2. Inserts a small category tree and characteristic group tree
3. Prints either tree as the API would list it

Usage:
    # Seed the configured database (DB_URL or DB_* env vars)
    python scripts/seed_catalog.py --seed

    # Seed a throwaway SQLite file
    DB_URL=sqlite+aiosqlite:///./catalog.db python scripts/seed_catalog.py --seed

    # Show the current trees
    python scripts/seed_catalog.py --show categories
    python scripts/seed_catalog.py --show characteristic-groups
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.core.errors import ConflictError
from app.infra.database import close_db_engine, create_schema, get_db_session
from app.infra.logging import get_logger, setup_logging
from app.services.category_service import CategoryService
from app.services.characteristic_group_service import CharacteristicGroupService
from app.services.taxonomy_service import TaxonomyService

setup_logging()
logger = get_logger(__name__)


# name -> children
DEMO_CATEGORIES = {
    "Electronics": {
        "Phones": {"Smartphones": {}, "Feature phones": {}},
        "Laptops": {},
        "Audio": {"Headphones": {}, "Speakers": {}},
    },
    "Home": {"Kitchen": {}, "Lighting": {}},
}

DEMO_GROUPS = {
    "Dimensions": {"Length": {}, "Width": {}, "Height": {}},
    "Display": {"Panel": {}, "Resolution": {}},
    "Power": {},
}

SERVICES: dict[str, type[TaxonomyService]] = {
    "categories": CategoryService,
    "characteristic-groups": CharacteristicGroupService,
}


async def seed_tree(
    service: TaxonomyService,
    tree: dict[str, dict],
    parent_id: int | None = None,
) -> int:
    """Create ``tree`` below ``parent_id``, skipping names that already exist.

    Returns:
        Number of nodes created
    """
    created = 0
    pending = [(name, children, parent_id) for name, children in tree.items()]

    while pending:
        name, children, parent = pending.pop(0)
        try:
            node = await service.create(name, parent_id=parent)
            created += 1
        except ConflictError:
            logger.info("Node already exists, reusing", name=name, parent_id=parent)
            existing = await service.list_tree()
            node = next(
                n for n in existing.flat if n.name == name and n.parent_id == parent
            )
        pending.extend((child, grandchildren, node.id) for child, grandchildren in children.items())

    return created


async def seed() -> int:
    await create_schema()

    async with get_db_session() as session:
        categories = await seed_tree(CategoryService(session), DEMO_CATEGORIES)
        groups = await seed_tree(CharacteristicGroupService(session), DEMO_GROUPS)

    print(f"Created {categories} categories and {groups} characteristic groups")
    return 0


async def show(kind: str) -> int:
    async with get_db_session() as session:
        tree = await SERVICES[kind](session).list_tree()

    if not tree.flat:
        print(f"No {kind} found")
    for node in tree.flat:
        print(f"{'  ' * node.level}- {node.name} (id={node.id})")
    print(f"\nTotal: {len(tree)}")
    return 0


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Seed and inspect the catalog taxonomy",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--seed",
        action="store_true",
        help="Create tables and insert the demo taxonomies",
    )
    parser.add_argument(
        "--show",
        choices=sorted(SERVICES),
        help="Print one taxonomy as an indented tree",
    )
    return parser.parse_args()


async def main() -> int:
    """Main entry point."""
    args = parse_args()
    if not args.seed and not args.show:
        print("Error: use --seed and/or --show")
        return 1

    try:
        if args.seed:
            await seed()
        if args.show:
            await show(args.show)
    finally:
        await close_db_engine()
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
