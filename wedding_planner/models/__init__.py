"""Database models."""

# Import all models here to ensure they're recognized by SQLAlchemy
from wedding_planner.models.couple import Couple
from wedding_planner.models.dietary_restriction import DietaryRestriction
from wedding_planner.models.guest import Guest
from wedding_planner.models.ingredient import Ingredient
from wedding_planner.models.inventory import InventoryAllocation, InventoryItem
from wedding_planner.models.menu_item import MenuItem, Recipe
from wedding_planner.models.package import Package, PackageMenuItem, TablePackage
from wedding_planner.models.seating_table import SeatingTable
from wedding_planner.models.wedding import Wedding

__all__ = [
    "Couple",
    "Wedding",
    "Guest",
    "DietaryRestriction",
    "SeatingTable",
    "Ingredient",
    "MenuItem",
    "Recipe",
    "Package",
    "PackageMenuItem",
    "TablePackage",
    "InventoryItem",
    "InventoryAllocation",
]
