#!/usr/bin/env python3
"""
Recompute the stored equipment, food and total cost of every wedding.

Useful after bulk edits made directly in the database. This is a utility
script, not a test.
"""

import asyncio
import os
import sys

from dotenv import load_dotenv

# Add the project root to the Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))


async def recalculate_all() -> int:
    from sqlalchemy import select

    from wedding_planner.db.async_session import get_async_db_manager, shutdown_async_database
    from wedding_planner.models.wedding import Wedding
    from wedding_planner.services.costing import CostingService

    manager = await get_async_db_manager()
    updated, failed = 0, 0

    try:
        async for db in manager.get_async_session():
            wedding_ids = (await db.execute(select(Wedding.wedding_id).order_by(Wedding.wedding_id))).scalars().all()
            print(f"Recalculating costs for {len(wedding_ids)} weddings...")

            for wedding_id in wedding_ids:
                try:
                    costs = await CostingService.update_wedding_costs(db, wedding_id)
                    await db.commit()
                    updated += 1
                    print(f"  wedding {wedding_id}: total_cost={costs.total_cost}")
                except Exception as e:
                    await db.rollback()
                    failed += 1
                    print(f"  wedding {wedding_id}: failed ({e})")
    finally:
        await shutdown_async_database()

    print(f"Done. Updated: {updated}, failed: {failed}")
    return 1 if failed else 0


if __name__ == "__main__":
    load_dotenv(override=True)
    sys.exit(asyncio.run(recalculate_all()))
