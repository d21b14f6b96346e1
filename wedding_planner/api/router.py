"""API router configuration.

This module configures the main API router and includes all endpoint routers
for the different areas of the wedding planner.
"""

from fastapi import APIRouter

from wedding_planner.api.endpoints import (
    couples,
    dietary_restrictions,
    guests,
    health,
    ingredients,
    inventory,
    menu_items,
    packages,
    reports,
    tables,
    weddings
)

api_router = APIRouter()

# Include all API routers
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(menu_items.router, prefix="/menu-items", tags=["menu-items"])
api_router.include_router(packages.router, prefix="/packages", tags=["packages"])
api_router.include_router(ingredients.router, prefix="/ingredients", tags=["ingredients"])
api_router.include_router(couples.router, prefix="/couples", tags=["couples"])
api_router.include_router(weddings.router, prefix="/weddings", tags=["weddings"])
api_router.include_router(guests.router, prefix="/guests", tags=["guests"])
api_router.include_router(tables.router, prefix="/tables", tags=["tables"])
api_router.include_router(dietary_restrictions.router, prefix="/dietary-restrictions", tags=["dietary-restrictions"])
api_router.include_router(inventory.router, prefix="/inventory", tags=["inventory"])
api_router.include_router(reports.router, prefix="/reports", tags=["reports"])
