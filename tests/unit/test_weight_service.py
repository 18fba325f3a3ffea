"""
Unit tests for AsyncWeightService.

The gateway is mocked so each test can assert exactly which persistence
calls a submission reaches.
"""

from datetime import date
from unittest.mock import AsyncMock

import pytest

from app.schemas.weight import WeightEntrySubmission
from app.services.async_weight import AsyncWeightService
from app.services.async_weight_history import GatewayResult
from app.services.weight_validation import WeightEntryError, WeightErrorKind

VALID = {"weight": 70.5, "height": 175, "bmi": 23.0, "date": "2025-08-01"}


def make_gateway(date_of_birth=date(1990, 1, 1), upsert_result=None):
    gateway = AsyncMock()
    gateway.fetch_date_of_birth.return_value = date_of_birth
    gateway.upsert_entry.return_value = upsert_result or GatewayResult(
        success=True, message="Weight entry added successfully"
    )
    return gateway


def make_service(gateway, today=date(2025, 8, 1)):
    return AsyncWeightService(gateway, today=lambda: today)


class TestAddWeightEntry:

    @pytest.mark.asyncio
    async def test_valid_submission_is_stored_with_derived_age(self):
        gateway = make_gateway()
        service = make_service(gateway)

        saved = await service.add_weight_entry(1, WeightEntrySubmission(**VALID))

        assert saved.age == 35
        assert saved.message == "Weight entry added successfully"
        gateway.fetch_date_of_birth.assert_awaited_once_with(1)
        gateway.upsert_entry.assert_awaited_once_with(1, date(2025, 8, 1), 70.5, 175.0, 35, 23.0)

    @pytest.mark.asyncio
    async def test_missing_fields_never_reach_gateway(self):
        gateway = make_gateway()
        service = make_service(gateway)

        with pytest.raises(WeightEntryError) as exc_info:
            await service.add_weight_entry(1, WeightEntrySubmission(weight=70.5, height=175))

        assert exc_info.value.kind == WeightErrorKind.MISSING_REQUIRED_FIELDS
        assert exc_info.value.status_code == 400
        gateway.fetch_date_of_birth.assert_not_awaited()
        gateway.upsert_entry.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_user(self):
        gateway = make_gateway(date_of_birth=None)
        service = make_service(gateway)

        with pytest.raises(WeightEntryError) as exc_info:
            await service.add_weight_entry(99, WeightEntrySubmission(**VALID))

        assert exc_info.value.kind == WeightErrorKind.USER_NOT_FOUND
        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "User not found."
        gateway.upsert_entry.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_user_checked_before_ranges(self):
        gateway = make_gateway(date_of_birth=None)
        service = make_service(gateway)

        with pytest.raises(WeightEntryError) as exc_info:
            await service.add_weight_entry(99, WeightEntrySubmission(**{**VALID, "weight": -3}))

        assert exc_info.value.kind == WeightErrorKind.USER_NOT_FOUND

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "field, value, kind",
        [
            ("weight", 0, WeightErrorKind.INVALID_WEIGHT),
            ("weight", 1000.5, WeightErrorKind.INVALID_WEIGHT),
            ("height", -175, WeightErrorKind.INVALID_HEIGHT),
            ("height", 301, WeightErrorKind.INVALID_HEIGHT),
            ("bmi", 0, WeightErrorKind.INVALID_BMI),
            ("bmi", 100.1, WeightErrorKind.INVALID_BMI),
            ("date", "2025-13-01", WeightErrorKind.INVALID_DATE_FORMAT),
            ("date", "2025-08-02", WeightErrorKind.FUTURE_DATE_NOT_ALLOWED),
        ],
    )
    async def test_invalid_values_never_reach_upsert(self, field, value, kind):
        gateway = make_gateway()
        service = make_service(gateway)

        with pytest.raises(WeightEntryError) as exc_info:
            await service.add_weight_entry(1, WeightEntrySubmission(**{**VALID, field: value}))

        assert exc_info.value.kind == kind
        assert exc_info.value.status_code == 400
        gateway.upsert_entry.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "today, expected_age",
        [(date(2025, 3, 14), 34), (date(2025, 3, 15), 35), (date(2025, 3, 16), 35)],
    )
    async def test_age_around_birthday(self, today, expected_age):
        gateway = make_gateway(date_of_birth=date(1990, 3, 15))
        service = make_service(gateway, today=today)

        saved = await service.add_weight_entry(1, WeightEntrySubmission(**{**VALID, "date": "2025-03-01"}))

        assert saved.age == expected_age

    @pytest.mark.asyncio
    async def test_leap_day_birthday(self):
        gateway = make_gateway(date_of_birth=date(1992, 2, 29))
        service = make_service(gateway, today=date(2025, 8, 1))

        saved = await service.add_weight_entry(1, WeightEntrySubmission(**VALID))

        assert saved.age == 33

    @pytest.mark.asyncio
    async def test_numeric_strings_are_accepted(self):
        gateway = make_gateway()
        service = make_service(gateway)

        await service.add_weight_entry(
            1, WeightEntrySubmission(weight="70.5", height="175", bmi="23", date="2025-07-01")
        )

        gateway.upsert_entry.assert_awaited_once_with(1, date(2025, 7, 1), 70.5, 175.0, 35, 23.0)

    @pytest.mark.asyncio
    async def test_client_bmi_is_stored_as_submitted(self):
        # 70.5 kg at 175 cm is a BMI of about 23.0; the submitted value is not
        # reconciled with weight and height.
        gateway = make_gateway()
        service = make_service(gateway)

        await service.add_weight_entry(1, WeightEntrySubmission(**{**VALID, "bmi": 40.0}))

        stored_bmi = gateway.upsert_entry.await_args.args[5]
        assert stored_bmi == 40.0

    @pytest.mark.asyncio
    async def test_store_rejection(self):
        gateway = make_gateway(upsert_result=GatewayResult(success=False, error="Database error"))
        service = make_service(gateway)

        with pytest.raises(WeightEntryError) as exc_info:
            await service.add_weight_entry(1, WeightEntrySubmission(**VALID))

        assert exc_info.value.kind == WeightErrorKind.WEIGHT_ENTRY_FAILED
        assert exc_info.value.message == "Database error"
        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_gateway_exceptions_propagate(self):
        gateway = make_gateway()
        gateway.fetch_date_of_birth.side_effect = RuntimeError("Connection failed")
        service = make_service(gateway)

        with pytest.raises(RuntimeError):
            await service.add_weight_entry(1, WeightEntrySubmission(**VALID))


class TestReads:

    @pytest.mark.asyncio
    async def test_history_passes_through(self):
        gateway = make_gateway()
        gateway.fetch_history.return_value = ["first", "second"]
        service = make_service(gateway)

        assert await service.get_weight_history(7) == ["first", "second"]
        gateway.fetch_history.assert_awaited_once_with(7)

    @pytest.mark.asyncio
    async def test_latest_passes_through(self):
        gateway = make_gateway()
        gateway.fetch_latest_entry.return_value = None
        service = make_service(gateway)

        assert await service.get_latest_entry(7) is None
