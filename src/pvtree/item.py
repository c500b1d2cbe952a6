"""
Contains the ValidatorItem which runs the rule chain of a single field.
"""
import asyncio
from typing import TYPE_CHECKING, Any, Callable, Generic, Optional

from .rules import Rule, RuleContext
from .types import DataT

if TYPE_CHECKING:
    from .validator import Validator


class ValidatorItem(Generic[DataT]):
    """
    Holds the rules of one field and the outcome of the last run. `valid` and `message` are `None` until the item
    has been validated (or imported) and after `reset`.
    The accessors `get`, `set` and `container` get bound by the owning validator.
    """

    def __init__(
        self,
        name: str,
        rules: tuple[Rule, ...],
        validator: "Validator[DataT]",
        get: Callable[[], Any],
        set: Callable[[Any], None],  # pylint: disable=redefined-builtin
        container: Callable[[], DataT],
    ):
        self.name = name
        self.rules = rules
        self.validator = validator
        self.get = get
        self.set = set
        self.container = container
        self.valid: Optional[bool] = None
        self.message: Optional[str] = None

    def __repr__(self):
        return f"ValidatorItem({self.name}, valid={self.valid}, message={self.message!r})"

    def _context(self) -> RuleContext:
        return RuleContext(
            field=self.name, container=self.container(), context=self.validator.context, validator=self.validator
        )

    def _record(self, message: Optional[str]) -> bool:
        self.valid = message is None
        self.message = message
        return self.valid

    def validate(self) -> bool:
        """
        Applies the rules in declaration order. The first failing rule sets the message, the remaining rules are
        skipped.
        """
        value = self.get()
        ctx = self._context()
        for rule in self.rules:
            message = rule.check(value, ctx)
            if message is not None:
                return self._record(message)
        return self._record(None)

    async def _apply_rules_async(self) -> Optional[str]:
        value = self.get()
        ctx = self._context()
        for rule in self.rules:
            message = await rule.check_async(value, ctx)
            if message is not None:
                return message
        return None

    async def validate_async(self) -> bool:
        """
        Same as `validate` but awaits asynchronous rule functions. If the validator defines a `rule_timeout`
        an `asyncio.TimeoutError` is raised when the rules of this field take longer.
        """
        timeout = self.validator.options.rule_timeout
        if timeout is None:
            message = await self._apply_rules_async()
        else:
            message = await asyncio.wait_for(self._apply_rules_async(), timeout)
        return self._record(message)

    def reset(self) -> None:
        """Forgets the outcome of the last run. The value of the field is untouched."""
        self.valid = None
        self.message = None
