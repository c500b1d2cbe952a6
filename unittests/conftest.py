from typing import Any, Callable, Iterator

import pytest

from pvtree import Validator, custom, number, reset_default_options, string, validator

EMAILS = ["example@mail.com"]


@pytest.fixture(autouse=True)
def _restore_default_options() -> Iterator[None]:
    yield
    reset_default_options()


def _build_user_validator(**options: Any) -> Validator[Any]:
    profile_validator = validator(
        id="profile",
        items={
            "name": string().not_empty(),
            "age": number().required().min(18, "too young").max(100, "too old"),
        },
    )
    return validator(
        id="user",
        items={
            "email": string().required().email().on_error(lambda value: value not in EMAILS, "unexpected email"),
            "username": string().not_empty().alphanumeric(),
        },
        nested={"profile": profile_validator},
        **options,
    )


@pytest.fixture
def user_validator_factory() -> Callable[..., Validator[Any]]:
    """Creates a fresh user validator with a nested profile validator on every call"""
    return _build_user_validator


@pytest.fixture
def user_validator() -> Validator[Any]:
    return _build_user_validator()


@pytest.fixture
def flat_user_validator() -> Validator[Any]:
    """The profile is validated as a single field with two error conditions"""
    return validator(
        id="validator",
        items={
            "email": string().required().email().on_error(lambda value: value not in EMAILS, "unexpected email"),
            "username": string().not_empty().alphanumeric(),
            "profile": custom()
            .on_error(lambda value: value["age"] < 18, "too young")
            .on_error(lambda value: value["age"] > 100, "too old"),
        },
    )


def make_user(**changes: Any) -> dict[str, Any]:
    user: dict[str, Any] = {
        "email": "example@mail.com",
        "username": "testuser",
        "profile": {"name": "test", "age": 25},
    }
    user.update(changes)
    return user


@pytest.fixture
def user_data() -> Callable[..., dict[str, Any]]:
    return make_user
