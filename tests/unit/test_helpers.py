"""
Unit tests for pure helpers: makeable quantity, package item normalization,
report periods, table ordering, settings and service logging.
"""

import logging
from datetime import date
from decimal import Decimal
from types import SimpleNamespace

import pytest

from wedding_planner.core.config import Settings
from wedding_planner.schemas.base import ApiResponse
from wedding_planner.schemas.package import PackageItemInput, PackageCreate
from wedding_planner.schemas.report import ReportPeriod
from wedding_planner.services.async_error_handler import AsyncServiceError
from wedding_planner.services.menu_item import makeable_quantity
from wedding_planner.services.package import normalize_package_items
from wedding_planner.services.report import period_range, previous_value
from wedding_planner.services.seating import table_sort_key
from wedding_planner.utils.logger import ServiceLogger, SUCCESS


def recipe_line(quantity_needed, stock):
    return SimpleNamespace(
        quantity_needed=Decimal(quantity_needed),
        ingredient=SimpleNamespace(stock_quantity=Decimal(stock))
    )


class TestMakeableQuantity:

    def test_limited_by_scarcest_ingredient(self):
        lines = [recipe_line("3", "10"), recipe_line("0.5", "1.2")]
        assert makeable_quantity(lines) == 2

    def test_zero_quantity_lines_are_ignored(self):
        assert makeable_quantity([recipe_line("0", "1"), recipe_line("2", "9")]) == 4

    def test_no_usable_lines_is_none(self):
        assert makeable_quantity([]) is None
        assert makeable_quantity([recipe_line("0", "5")]) is None

    def test_empty_stock_makes_nothing(self):
        assert makeable_quantity([recipe_line("1", "0")]) == 0


def test_normalize_package_items_merges_ids_and_entries():
    entries = [1, PackageItemInput(menu_item_id=2, quantity=3), 1]
    assert normalize_package_items(entries) == {1: 2, 2: 3}


def test_package_create_accepts_mixed_item_entries_and_alias():
    package = PackageCreate.model_validate({
        "package_name": "Gold",
        "package_type": "premium",
        "package_price": "250.00",
        "menu_item_ids": [4, {"menu_item_id": 5, "quantity": 2}]
    })
    assert package.selling_price == Decimal("250.00")
    assert normalize_package_items(package.menu_item_ids) == {4: 1, 5: 2}


class TestReportPeriods:

    def test_month_range_is_half_open(self):
        assert period_range(ReportPeriod.MONTH, "2025-02") == (date(2025, 2, 1), date(2025, 3, 1))

    def test_december_rolls_into_next_year(self):
        assert period_range(ReportPeriod.MONTH, "2025-12") == (date(2025, 12, 1), date(2026, 1, 1))

    def test_year_range(self):
        assert period_range(ReportPeriod.YEAR, "2024") == (date(2024, 1, 1), date(2025, 1, 1))

    def test_missing_value_means_all_time(self):
        assert period_range(ReportPeriod.MONTH, None) is None

    @pytest.mark.parametrize("value", ["2025-13", "June", "2025"])
    def test_invalid_month_is_400(self, value):
        with pytest.raises(AsyncServiceError) as exc_info:
            period_range(ReportPeriod.MONTH, value)
        assert exc_info.value.status_code == 400

    def test_previous_value(self):
        assert previous_value(ReportPeriod.MONTH, "2025-01") == "2024-12"
        assert previous_value(ReportPeriod.MONTH, "2025-10") == "2025-09"
        assert previous_value(ReportPeriod.YEAR, "2025") == "2024"
        assert previous_value(ReportPeriod.YEAR, None) is None


def test_couple_table_sorts_first_then_numeric_order():
    tables = [
        SimpleNamespace(table_category="guest", table_number="10"),
        SimpleNamespace(table_category="guest", table_number="2"),
        SimpleNamespace(table_category="couple", table_number="C"),
    ]
    ordered = [t.table_number for t in sorted(tables, key=table_sort_key)]
    assert ordered == ["C", "2", "10"]


def test_api_response_omits_empty_fields():
    assert ApiResponse.ok({"id": 1}).model_dump() == {"success": True, "data": {"id": 1}}
    assert ApiResponse.listing([1, 2]).model_dump() == {"success": True, "data": [1, 2], "count": 2}
    assert ApiResponse.failure("Package not found").model_dump() == {"success": False, "error": "Package not found"}


def test_async_database_url_conversion():
    production = Settings(ENVIRONMENT="production", DATABASE_URL="postgres://u:p@db:5432/weddings")
    assert production.async_database_url == "postgresql+asyncpg://u:p@db:5432/weddings"

    local = Settings(ENVIRONMENT="development", LOCAL_DATABASE_URL="sqlite:///./weddings.db")
    assert local.async_database_url == "sqlite+aiosqlite:///./weddings.db"


def test_service_logger_success_uses_its_own_level(caplog):
    logger = ServiceLogger("PACKAGE")

    with caplog.at_level(logging.DEBUG, logger="wedding_planner"):
        logger.success("Assigned package", "ASSIGN", table_id=3, package_ids=[1, 2])

    record = caplog.records[-1]
    assert record.levelno == SUCCESS
    assert record.levelname == "SUCCESS"
    assert record.getMessage() == "[PACKAGE/ASSIGN] Assigned package | table_id=3, package_ids=[1,2]"
