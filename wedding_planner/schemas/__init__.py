"""Pydantic schemas for request and response validation."""

# Envelope
from .base import ApiResponse

# Menu item schemas
from .menu_item import (
    RecipeLineInput,
    MenuItemCreate,
    MenuItemUpdate,
    RecipeLineResponse,
    MenuItemResponse
)

# Package schemas
from .package import (
    PackageItemInput,
    PackageCreate,
    PackageUpdate,
    PackageMenuItemResponse,
    PackageResponse,
    PackageAssignmentCreate,
    PackageAssignmentResponse
)

# Ingredient schemas
from .ingredient import (
    IngredientCreate,
    IngredientUpdate,
    IngredientRestock,
    IngredientMenuUsage,
    IngredientResponse
)

# Wedding and couple schemas
from .couple import CoupleCreate, CoupleUpdate, CoupleResponse
from .wedding import WeddingCreate, WeddingUpdate, WeddingResponse, WeddingCosts
from .guest import GuestCreate, GuestUpdate, GuestResponse

# Seating schemas
from .seating import GuestTableCreate, GuestAssignment, SeatingTableUpdate, SeatingTableResponse

# Dietary restriction schemas
from .dietary_restriction import (
    DietaryRestrictionCreate,
    DietaryRestrictionUpdate,
    DietaryRestrictionResponse,
    AffectedGuest,
    AffectedMenuItem
)

# Inventory schemas
from .inventory import (
    InventoryItemCreate,
    InventoryItemUpdate,
    InventoryItemResponse,
    AllocationCreate,
    AllocationUpdate,
    AllocationResponse
)

# Report schemas
from .report import ReportPeriod, FinancialReport, PackageTypeRevenue, PreviousPeriod
