"""
Unit tests for service error handling utilities.
"""

from unittest.mock import AsyncMock

import pytest
from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError, OperationalError

from wedding_planner.services.async_error_handler import (
    AsyncErrorHandler,
    AsyncServiceError,
    handle_async_db_errors,
    async_transaction_rollback,
    bad_request,
    not_found,
    conflict,
    reject_null_fields
)


def test_error_handler_sqlalchemy_classification():
    """Test SQLAlchemy error classification."""
    integrity_error = IntegrityError("statement", "params", Exception("orig"))
    assert AsyncErrorHandler.classify_error(integrity_error)['status_code'] == 409

    operational_error = OperationalError("statement", "params", Exception("orig"))
    assert AsyncErrorHandler.classify_error(operational_error)['status_code'] == 503


def test_error_handler_unknown_error_is_500():
    info = AsyncErrorHandler.classify_error(ValueError("nope"))
    assert info['status_code'] == 500
    assert info['detail'] == 'An unexpected error occurred'


def test_error_helpers_set_status_and_message():
    assert bad_request("Bad input", "field x").status_code == 400
    assert bad_request("Bad input", "field x").message == "field x"
    assert not_found("Package not found").detail == "Package not found"
    assert conflict("In use").status_code == 409


def test_reject_null_fields_allows_nullable_columns():
    reject_null_fields({"menu_name": "Dal", "restriction_id": None}, "restriction_id")

    with pytest.raises(AsyncServiceError) as exc_info:
        reject_null_fields({"unit": None, "stock_quantity": None, "re_order_level": 4})

    assert exc_info.value.status_code == 400
    assert exc_info.value.error == "Missing or invalid fields: stock_quantity, unit"


async def test_decorator_passes_http_errors_through():
    @handle_async_db_errors("fetch thing")
    async def operation():
        raise not_found("Thing not found")

    with pytest.raises(AsyncServiceError) as exc_info:
        await operation()

    assert exc_info.value.status_code == 404
    assert exc_info.value.detail == "Thing not found"


async def test_decorator_converts_unexpected_errors_to_500():
    @handle_async_db_errors("create package")
    async def operation():
        raise RuntimeError("connection reset")

    with pytest.raises(AsyncServiceError) as exc_info:
        await operation()

    assert exc_info.value.status_code == 500
    assert exc_info.value.error == "Failed to create package"
    assert exc_info.value.message == "connection reset"


async def test_decorator_keeps_plain_http_exceptions():
    @handle_async_db_errors("fetch thing")
    async def operation():
        raise HTTPException(status_code=403, detail="Forbidden")

    with pytest.raises(HTTPException) as exc_info:
        await operation()

    assert exc_info.value.status_code == 403


async def test_transaction_commits_on_success():
    session = AsyncMock()

    async with async_transaction_rollback(session):
        pass

    session.commit.assert_awaited_once()
    session.rollback.assert_not_awaited()


async def test_transaction_rolls_back_and_reraises():
    session = AsyncMock()

    with pytest.raises(ValueError):
        async with async_transaction_rollback(session):
            raise ValueError("bad write")

    session.rollback.assert_awaited_once()
    session.commit.assert_not_awaited()
