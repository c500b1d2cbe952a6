"""
Contains the types used in the validation framework
"""
from typing import Any, Awaitable, Callable, Protocol, TypeAlias, TypeVar


class LoggingSink(Protocol):
    """
    A protocol for the logging side channel of a validator. `verbose` is the `dev` option of the calling validator.
    """

    def info(self, source_id: str, verbose: bool, *items: Any) -> None:
        ...

    def warn(self, source_id: str, verbose: bool, *items: Any) -> None:
        ...

    def error(self, source_id: str, verbose: bool, *items: Any) -> None:
        ...


DataT = TypeVar("DataT")
Getter: TypeAlias = Callable[[], Any]
SyncRuleFunction: TypeAlias = Callable[..., bool]
AsyncRuleFunction: TypeAlias = Callable[..., Awaitable[bool]]
RuleFunction: TypeAlias = SyncRuleFunction | AsyncRuleFunction
ChangeCallback: TypeAlias = Callable[[Any], None]
