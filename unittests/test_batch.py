import asyncio
from typing import Any

import pytest

from pvtree import BatchValidationFailure, UndefinedObjectError, custom, validator


class TestBatchValidation:
    def test_batch_validate(self, user_validator, user_data):
        batch_result = user_validator.batch_validate(
            user_data(), user_data(username=""), user_data(profile={"name": "test", "age": 16})
        )
        assert batch_result.success is False
        assert [result.success for result in batch_result.results] == [True, False, False]
        assert batch_result.failed_indices == [1, 2]
        assert batch_result.total == 3
        assert batch_result.num_fails == 2
        assert batch_result.num_succeeds == 1
        assert batch_result.results[1].results == {
            "items": [{"field": "username", "message": "must not be empty", "valid": False, "value": ""}]
        }
        assert batch_result.results[2].results == {
            "nested": {"profile": {"items": [{"field": "age", "message": "too young", "valid": False, "value": 16}]}}
        }

    def test_batch_validate_success(self, user_validator, user_data):
        batch_result = user_validator.batch_validate(user_data(), user_data(username="other"))
        assert batch_result.success is True
        assert batch_result.to_dict() == {"success": True, "results": [{"success": True}, {"success": True}]}

    def test_batch_validate_without_data(self, user_validator):
        batch_result = user_validator.batch_validate()
        assert batch_result.success is True
        assert batch_result.results == []

    def test_batch_validate_throw(self, user_validator, user_data):
        user_validator.batch_validate_throw(user_data(), user_data())
        with pytest.raises(BatchValidationFailure) as error_info:
            user_validator.batch_validate_throw(user_data(), user_data(email="wrong@mail.com"))
        assert [result.success for result in error_info.value.results] == [True, False]

    def test_undefined_instance(self, user_validator, user_data):
        with pytest.raises(UndefinedObjectError):
            user_validator.batch_validate(user_data(), None)

    async def test_batch_validate_async(self, user_validator, user_data):
        data = [user_data(), user_data(username=""), user_data(email="wrong@mail.com")]
        batch_result = await user_validator.batch_validate_async(*data)
        assert batch_result == user_validator.batch_validate(*data)
        assert batch_result.failed_indices == [1, 2]

    async def test_batch_validate_async_concurrent(self, user_validator, user_data):
        data = [user_data(), user_data(username=""), user_data(profile={"name": "test", "age": 105})]
        batch_result = await user_validator.batch_validate_async(*data, concurrent=True)
        assert batch_result == await user_validator.clone().batch_validate_async(*data)
        assert not user_validator.is_bound
        assert user_validator.items["username"].valid is None

    async def test_concurrent_instances_do_not_share_state(self):
        async def _slow_positive(value: int) -> bool:
            await asyncio.sleep(0.01 * value)
            return value > 0

        number_validator = validator(items={"number": custom().add(_slow_positive, "not positive")})
        data: list[Any] = [{"number": 3}, {"number": -1}, {"number": 1}]
        batch_result = await number_validator.batch_validate_async(*data, concurrent=True)
        assert [result.success for result in batch_result.results] == [True, False, True]
        assert batch_result.results[1].results == {
            "items": [{"field": "number", "message": "not positive", "valid": False, "value": -1}]
        }

    async def test_batch_validate_throw_async(self, user_validator, user_data):
        with pytest.raises(BatchValidationFailure) as error_info:
            await user_validator.batch_validate_throw_async(user_data(username=""), user_data())
        assert len(error_info.value.results) == 2
        assert "1 of 2" in str(error_info.value)
