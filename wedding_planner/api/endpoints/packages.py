from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from wedding_planner.db.async_session import get_async_db
from wedding_planner.schemas.base import ApiResponse
from wedding_planner.schemas.package import PackageCreate, PackageUpdate, PackageAssignmentCreate
from wedding_planner.services.package import AsyncPackageService

router = APIRouter()


@router.get("/", response_model=ApiResponse)
@router.get("", response_model=ApiResponse)
async def list_packages(
    wedding_id: Optional[int] = Query(None, description="Count usage only within this wedding"),
    db: AsyncSession = Depends(get_async_db)
):
    """Get packages with their menu items; stored costs are re-synced on read."""
    return ApiResponse.listing(await AsyncPackageService.get_packages(db, wedding_id))


# Assignment routes are declared before /{package_id} so they are matched first.

@router.post("/assign", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def assign_package(assignment: PackageAssignmentCreate, db: AsyncSession = Depends(get_async_db)):
    """
    Assign a package to a seating table.

    Ingredient stock is deducted and the wedding's costs recomputed; failures
    of either are logged and do not undo the assignment.
    """
    result = await AsyncPackageService.assign_package(db, assignment)
    return ApiResponse.ok(result, "Package assigned to table successfully")


@router.delete("/assign/{table_id}/{package_id}", response_model=ApiResponse)
async def unassign_package(table_id: int, package_id: int, db: AsyncSession = Depends(get_async_db)):
    """Remove a package from a table and restore the ingredient stock it consumed."""
    await AsyncPackageService.unassign_package(db, table_id, package_id)
    return ApiResponse.ok(message="Package removed from table successfully")


@router.get("/wedding/{wedding_id}/assignments", response_model=ApiResponse)
async def list_wedding_assignments(wedding_id: int, db: AsyncSession = Depends(get_async_db)):
    return ApiResponse.listing(await AsyncPackageService.get_wedding_assignments(db, wedding_id))


@router.get("/{package_id}", response_model=ApiResponse)
async def get_package(package_id: int, db: AsyncSession = Depends(get_async_db)):
    return ApiResponse.ok(await AsyncPackageService.get_package(db, package_id))


@router.post("/", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
@router.post("", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def create_package(package_data: PackageCreate, db: AsyncSession = Depends(get_async_db)):
    """Create a package; its unit cost is computed from the menu items before commit."""
    package = await AsyncPackageService.create_package(db, package_data)
    return ApiResponse.ok(package, "Package created successfully")


@router.put("/{package_id}", response_model=ApiResponse)
async def update_package(
    package_id: int,
    package_data: PackageUpdate,
    db: AsyncSession = Depends(get_async_db)
):
    package = await AsyncPackageService.update_package(db, package_id, package_data)
    return ApiResponse.ok(package, "Package updated successfully")


@router.delete("/{package_id}", response_model=ApiResponse)
async def delete_package(package_id: int, db: AsyncSession = Depends(get_async_db)):
    await AsyncPackageService.delete_package(db, package_id)
    return ApiResponse.ok(message="Package deleted successfully")
