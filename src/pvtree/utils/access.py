"""
Contains functions to read and write single fields of the objects under validation. Mappings are accessed by key,
every other object by attribute.
"""
from collections.abc import Mapping, MutableMapping
from typing import Any, Optional, TypeVar, overload

from typeguard import TypeCheckError, check_type

AttrT = TypeVar("AttrT")


def read_field(obj: Any, key: str) -> Any:
    """
    Returns the value of `key` in `obj`. Missing keys and attributes are reported as `None` (undefined).
    """
    if obj is None:
        return None
    if isinstance(obj, Mapping):
        return obj.get(key)
    return getattr(obj, key, None)


def write_field(obj: Any, key: str, value: Any) -> None:
    """
    Sets `key` of `obj` to `value`. Immutable objects (e.g. frozen dataclasses) raise their own error.
    """
    if isinstance(obj, MutableMapping):
        obj[key] = value
    else:
        setattr(obj, key, value)


def optional_field(obj: Any, attribute_path: str, attribute_type: type[AttrT]) -> Optional[AttrT]:
    """
    Tries to query the `obj` with the provided `attribute_path`. If it is not existent, `None` will be returned.
    If the attribute is found, the type will be checked and TypeError will be raised if the type doesn't match the
    value.
    """
    try:
        return required_field(obj, attribute_path, attribute_type)
    except AttributeError:
        return None


@overload
def required_field(obj: Any, attribute_path: str, attribute_type: type[AttrT]) -> AttrT:
    ...


@overload
def required_field(obj: Any, attribute_path: str, attribute_type: Any) -> Any:
    ...


def required_field(obj: Any, attribute_path: str, attribute_type: Any) -> Any:
    """
    Tries to query the `obj` with the provided dotted `attribute_path`. If it is not existent,
    an AttributeError will be raised.
    If the attribute is found, the type will be checked and TypeError will be raised if the type doesn't match the
    value.
    """
    current_obj: Any = obj
    splitted_path = attribute_path.split(".")
    for index, attr_name in enumerate(splitted_path):
        if isinstance(current_obj, Mapping) and attr_name in current_obj:
            current_obj = current_obj[attr_name]
        elif not isinstance(current_obj, Mapping) and hasattr(current_obj, attr_name):
            current_obj = getattr(current_obj, attr_name)
        else:
            current_path = ".".join(splitted_path[0 : index + 1])
            raise AttributeError(f"{current_path}: Not found")
    try:
        check_type(current_obj, attribute_type)
    except TypeCheckError as error:
        raise TypeError(f"{attribute_path}: {error}") from error
    return current_obj
