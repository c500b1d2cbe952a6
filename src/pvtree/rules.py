"""
Contains the rules a validator applies to its fields. A field is configured with an ordered chain of rules:

```
email = string().required().email().on_error(lambda value: value not in allowed, "unexpected email")
```

Every builder method returns a new `RuleChain`, so chains can be shared between validators. Rule functions take
either `(value)` or `(value, ctx)` where `ctx` is a `RuleContext`. They may be coroutine functions, but then only the
asynchronous entry points of the validator can run them.
"""
import dataclasses
import inspect
import re
from typing import TYPE_CHECKING, Any, Awaitable, Iterable, Iterator, Optional

from typeguard import TypeCheckError, check_type

from .types import RuleFunction
from .utils.access import optional_field

if TYPE_CHECKING:
    from .validator import Validator

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


@dataclasses.dataclass(frozen=True)
class RuleContext:
    """
    Passed as second argument to rule functions which accept two arguments.
    """

    field: str
    container: Any
    context: Any
    validator: "Validator[Any]"

    def lookup(self, attribute_path: str, attribute_type: Any = Any) -> Any:
        """
        Returns another field of the object under validation (dotted paths are supported) or `None` if it doesn't
        exist.
        """
        return optional_field(self.container, attribute_path, attribute_type)


def _accepts_context(func: Optional[RuleFunction]) -> bool:
    """
    True if `func` takes a second positional argument without default (or `*args`) to receive the `RuleContext`.
    """
    if func is None:
        return False
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        return False
    required_positional = 0
    for parameter in signature.parameters.values():
        if parameter.kind == inspect.Parameter.VAR_POSITIONAL:
            return True
        if (
            parameter.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
            and parameter.default is inspect.Parameter.empty
        ):
            required_positional += 1
    return required_positional >= 2


def _call(func: RuleFunction, with_context: bool, value: Any, ctx: RuleContext) -> Any:
    if with_context:
        return func(value, ctx)
    return func(value)


@dataclasses.dataclass(frozen=True)
class Override:
    """
    An error condition attached to a rule. `error` returns True if the value is invalid.
    """

    error: RuleFunction
    message: str
    with_context: bool = dataclasses.field(init=False, compare=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, "with_context", _accepts_context(self.error))

    def matches(self, value: Any, ctx: RuleContext) -> Any:
        return _call(self.error, self.with_context, value, ctx)


@dataclasses.dataclass(frozen=True)
class Rule:
    """
    A single rule. `test` returns True if the value is valid. If the rule has overrides, they decide about the
    failure instead of `test`: the first override (in declaration order) whose `error` returns True wins.
    """

    test: Optional[RuleFunction]
    message: str
    overrides: tuple[Override, ...] = ()
    with_context: bool = dataclasses.field(init=False, compare=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, "with_context", _accepts_context(self.test))

    def check(self, value: Any, ctx: RuleContext) -> Optional[str]:
        """Returns the error message if the value fails this rule, otherwise None"""
        if self.overrides:
            for override in self.overrides:
                if _ensure_sync(override.error, override.matches(value, ctx)):
                    return override.message
            return None
        if self.test is None or _ensure_sync(self.test, _call(self.test, self.with_context, value, ctx)):
            return None
        return self.message

    async def check_async(self, value: Any, ctx: RuleContext) -> Optional[str]:
        """Same as `check` but awaits the results of asynchronous rule functions"""
        if self.overrides:
            for override in self.overrides:
                if await _resolve(override.matches(value, ctx)):
                    return override.message
            return None
        if self.test is None or await _resolve(_call(self.test, self.with_context, value, ctx)):
            return None
        return self.message


def _ensure_sync(func: RuleFunction, result: Any) -> bool:
    if inspect.isawaitable(result):
        if inspect.iscoroutine(result):
            result.close()
        raise TypeError(
            f"{getattr(func, '__name__', func)} is asynchronous and can only be used with the asynchronous "
            "validation functions"
        )
    return bool(result)


async def _resolve(result: Any | Awaitable[Any]) -> bool:
    if inspect.isawaitable(result):
        result = await result
    return bool(result)


class RuleChain:
    """
    An immutable, ordered chain of rules for one field.
    """

    def __init__(self, rules: Iterable[Rule] = ()):
        self.rules: tuple[Rule, ...] = tuple(rules)

    def __iter__(self) -> Iterator[Rule]:
        return iter(self.rules)

    def __len__(self) -> int:
        return len(self.rules)

    def __eq__(self, other):
        return isinstance(other, RuleChain) and self.rules == other.rules

    def __hash__(self):
        return hash(self.rules)

    def __repr__(self):
        return f"RuleChain({[rule.message for rule in self.rules]})"

    def add(self, test: RuleFunction, message: str) -> "RuleChain":
        """Appends a rule. `test` returns True if the value is valid."""
        return RuleChain((*self.rules, Rule(test, message)))

    def on_error(self, error: RuleFunction, message: str) -> "RuleChain":
        """
        Attaches an error condition to the last rule of the chain. From now on the rule fails if any of its error
        conditions returns True; its own test is not used anymore. On an empty chain a new rule is started.
        """
        override = Override(error, message)
        if not self.rules:
            return RuleChain((Rule(None, message, (override,)),))
        *head, last = self.rules
        return RuleChain((*head, dataclasses.replace(last, overrides=(*last.overrides, override))))

    def required(self, message: str = "required") -> "RuleChain":
        return self.add(lambda value: value is not None, message)

    def not_empty(self, message: str = "must not be empty") -> "RuleChain":
        return self.add(lambda value: value is not None and len(value) > 0, message)

    def email(self, message: str = "invalid email") -> "RuleChain":
        return self.add(lambda value: value is None or _EMAIL_PATTERN.match(value) is not None, message)

    def alphanumeric(self, message: str = "must be alphanumeric") -> "RuleChain":
        return self.add(lambda value: value is None or value.isalnum(), message)

    def matches(self, pattern: str | re.Pattern[str], message: Optional[str] = None) -> "RuleChain":
        compiled = re.compile(pattern)
        return self.add(
            lambda value: value is None or compiled.fullmatch(value) is not None,
            message or f"must match {compiled.pattern}",
        )

    def min(self, bound: Any, message: Optional[str] = None) -> "RuleChain":
        return self.add(lambda value: value is None or value >= bound, message or f"must be at least {bound}")

    def max(self, bound: Any, message: Optional[str] = None) -> "RuleChain":
        return self.add(lambda value: value is None or value <= bound, message or f"must be at most {bound}")

    def one_of(self, values: Iterable[Any], message: Optional[str] = None) -> "RuleChain":
        allowed = tuple(values)
        return self.add(lambda value: value is None or value in allowed, message or f"must be one of {allowed}")


def is_type(expected_type: Any, message: Optional[str] = None) -> RuleChain:
    """
    Starts a chain with a rule which checks the type of the value using typeguard.
    """

    def _check_type(value: Any) -> bool:
        try:
            check_type(value, expected_type)
        except TypeCheckError:
            return False
        return True

    return RuleChain().add(_check_type, message or f"must be of type {expected_type}")


def string(message: str = "must be a string") -> RuleChain:
    """Starts a chain for an optional string field. Use `.required()` to reject `None`."""
    return is_type(Optional[str], message)


def number(message: str = "must be a number") -> RuleChain:
    """Starts a chain for an optional int or float field. Booleans are rejected."""
    return is_type(Optional[int | float], message).add(lambda value: not isinstance(value, bool), message)


def custom() -> RuleChain:
    """Starts an empty chain, usually continued with `on_error` or `add`."""
    return RuleChain()
