"""
Contains the Validator, a tree of validators mirroring the shape of the object to validate. Every validator owns
the rule chains of its simple fields (`items`) and one child validator per nested object (`nested`):

```
profile_validator = validator(items={"age": number().min(18, "too young").max(100, "too old")})
user_validator = validator(
    id="user",
    items={"username": string().not_empty().alphanumeric()},
    nested={"profile": profile_validator},
)
user_validator.validate({"username": "testuser", "profile": {"age": 25}})
```

A validator instance holds the outcome of its last run. It can be reused for many objects (see the batch
functions) but must not be used by several callers at the same time.
"""
import asyncio
from typing import Any, Awaitable, Generic, Iterable, Iterator, Mapping, Optional

from frozendict import frozendict

from .analysis import BatchValidationInfo, ValidationInfo
from .errors import (
    BatchValidationFailure,
    ConfigurationError,
    UndefinedObjectError,
    ValidationFailure,
    ValidatorNotReadyError,
)
from .item import ValidatorItem
from .logger import default_sink
from .options import ResultsType, ValidatorOptions, default_options
from .report import PARSERS, SERIALIZERS, ErrorReport, build_report
from .rules import Rule, RuleChain
from .types import ChangeCallback, DataT, Getter, LoggingSink
from .utils.access import read_field, write_field

RulesConfig = RuleChain | Rule | Iterable[Rule]


def _as_rules(rules: RulesConfig) -> tuple[Rule, ...]:
    if isinstance(rules, Rule):
        return (rules,)
    return tuple(rules)


def _constant(value: Any) -> Getter:
    return lambda: value


async def _gather_or_cancel(coroutines: Iterable[Awaitable[Any]]) -> None:
    """
    Runs the coroutines as tasks. On the first exception (or if the caller gets cancelled) the tasks which are still
    pending are cancelled and awaited before the exception is re-raised, so no rule writes into a validator after the
    validation has been aborted.
    """
    tasks = [asyncio.ensure_future(coroutine) for coroutine in coroutines]
    if not tasks:
        return
    try:
        _, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
    except asyncio.CancelledError:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
    for task in pending:
        task.cancel()
    await asyncio.gather(*pending, return_exceptions=True)
    errors = [task.exception() for task in tasks if not task.cancelled() and task.exception() is not None]
    if errors:
        raise errors[0]  # type: ignore[misc]


# pylint: disable=too-many-instance-attributes,too-many-public-methods
class Validator(Generic[DataT]):
    """
    Validates an object of type `DataT` and, through its nested validators, the objects it contains.
    """

    def __init__(self):
        self._id: str = type(self).__name__
        self._options: ValidatorOptions = default_options()
        self._getter: Optional[Getter] = None
        self._parent: Optional["Validator[Any]"] = None
        self._rules: dict[str, tuple[Rule, ...]] = {}
        self._items: dict[str, ValidatorItem[DataT]] = {}
        self._nested: dict[str, "Validator[Any]"] = {}
        self._sink: LoggingSink = default_sink
        self.context: Any = None
        self.on_change_event: Optional[ChangeCallback] = None

    def __repr__(self):
        return f"{type(self).__name__}({self._id}, items={list(self._items)}, nested={list(self._nested)})"

    @property
    def id(self) -> str:  # pylint: disable=invalid-name
        return self._id

    @property
    def options(self) -> ValidatorOptions:
        return self._options

    @property
    def items(self) -> frozendict[str, ValidatorItem[DataT]]:
        return frozendict(self._items)

    @property
    def nested(self) -> frozendict[str, "Validator[Any]"]:
        return frozendict(self._nested)

    @property
    def is_bound(self) -> bool:
        """True if an accessor is set for this validator and (for nested validators) for all of its parents"""
        if self._getter is None:
            return False
        return self._parent is None or self._parent.is_bound

    # ---------------------------------------------------------------- configuration

    def configure(
        self,
        *,
        id: Optional[str] = None,  # pylint: disable=redefined-builtin
        items: Optional[Mapping[str, RulesConfig]] = None,
        nested: Optional[Mapping[str, Optional["Validator[Any]"]]] = None,
    ) -> "Validator[DataT]":
        """
        Declares the rule chains of the simple fields and the validators of the nested objects. Passing `items`
        replaces all previously declared fields. Nested validators get rebound to the corresponding field of this
        validator's object and receive a copy of this validator's options.
        """
        if self.is_bound and self._resolve() is None:
            raise ConfigurationError(
                f"{self._id}: The object is undefined! A validator can not be configured for an undefined object."
            )
        if id is not None:
            self._id = id
        if items is not None:
            self._rules = {key: _as_rules(rules) for key, rules in items.items()}
            self._items = {key: self._create_item(key, rules) for key, rules in self._rules.items()}
        if nested is not None:
            for key, child in nested.items():
                if child is None:
                    continue
                child._attach(self, key)  # pylint: disable=protected-access
                self._nested[key] = child
        return self

    def _create_item(self, key: str, rules: tuple[Rule, ...]) -> ValidatorItem[DataT]:
        return ValidatorItem(
            name=key,
            rules=rules,
            validator=self,
            get=lambda: read_field(self._resolve(), key),
            set=lambda value: write_field(self._resolve(), key, value),
            container=self._resolve,
        )

    def _attach(self, parent: "Validator[Any]", key: str) -> None:
        self._parent = parent
        self._getter = lambda: read_field(parent._resolve(), key)  # pylint: disable=protected-access
        self._options = parent.options

    def bind(self, getter: Getter) -> "Validator[DataT]":
        """
        Sets the accessor returning the object to validate. Nested validators are bound through their parent.
        """
        if self._parent is not None:
            raise ConfigurationError(f"{self._id}: A nested validator is bound through its parent validator")
        self._getter = getter
        return self

    init = bind

    def with_options(self, **changes: Any) -> "Validator[DataT]":
        """Changes the options of this validator only. Nested validators keep the copy they got on configuration."""
        self._options = self._options.replace(**changes)
        return self

    def with_context(self, context: Any) -> "Validator[DataT]":
        """Sets a payload which rule functions can access through `RuleContext.context`"""
        self.context = context
        return self

    def with_logger(self, sink: LoggingSink) -> "Validator[DataT]":
        self._sink = sink
        return self

    def on_change(self, callback: ChangeCallback) -> "Validator[DataT]":
        """Registers a hook for callers; it is invoked by `notify_change` only."""
        self.on_change_event = callback
        return self

    def notify_change(self) -> None:
        if self.on_change_event is not None:
            self.on_change_event(self._resolve())

    def clone(self) -> "Validator[DataT]":
        """
        Returns an unbound validator with the same configuration (rules, nested validators, options, context and
        hooks) but without any field state.
        """
        twin = type(self)()
        twin._options = self._options
        twin._sink = self._sink
        twin.context = self.context
        twin.on_change_event = self.on_change_event
        return twin.configure(
            id=self._id,
            items=self._rules,
            nested={key: child.clone() for key, child in self._nested.items()},
        )

    # ---------------------------------------------------------------- execution

    def _ready(self) -> None:
        if not self.is_bound:
            raise ValidatorNotReadyError(
                f"{self._id}: The validator is not ready! No accessor is bound, use `.bind(getter)` to set one."
            )

    def _resolve(self) -> Any:
        self._ready()
        assert self._getter is not None
        return self._getter()

    def _walk(self) -> Iterator["Validator[Any]"]:
        yield self
        for child in self._nested.values():
            yield from child._walk()  # pylint: disable=protected-access

    def _check_defined(self) -> None:
        if self._resolve() is None:
            raise UndefinedObjectError(self._id)

    def all_good(self) -> bool:
        """True if every field of this validator (nested validators excluded) passed its last run"""
        return all(item.valid for item in self._items.values())

    def apply_all(self) -> None:
        """Runs the fields of this validator (nested validators excluded)"""
        for item in self._items.values():
            item.validate()

    async def apply_all_async(self) -> None:
        await _gather_or_cancel(item.validate_async() for item in self._items.values())

    def reset(self) -> None:
        """Clears the outcome of all fields of this tree and its nested validators"""
        for tree in self._walk():
            for item in tree._items.values():  # pylint: disable=protected-access
                item.reset()

    def validate(self, data: Optional[DataT] = None) -> bool:
        """
        Validates the bound object (or `data`, which gets bound first) and all nested objects.
        Raises `ValidatorNotReadyError` if nothing is bound and `UndefinedObjectError` if an object is `None`.
        A nested validator is bound through its parent, so it only accepts the call without `data`; that validates
        the nested object (and its descendants) of the object currently bound to the parent.
        """
        if data is not None:
            self.bind(_constant(data))
        self._ready()
        validators = list(self._walk())
        for tree in validators:
            tree._check_defined()  # pylint: disable=protected-access
            tree.apply_all()
        is_valid = all(tree.all_good() for tree in validators)
        self._info(f"validation result of {self._id}:", is_valid)
        return is_valid

    async def validate_async(self, data: Optional[DataT] = None) -> bool:
        """
        Same as `validate`, but all validators of the tree and all fields of a tree run concurrently.
        If one of them raises, the others are cancelled before the exception propagates.
        """
        if data is not None:
            self.bind(_constant(data))
        self._ready()
        validators = list(self._walk())

        async def _apply(tree: "Validator[Any]") -> None:
            tree._check_defined()  # pylint: disable=protected-access
            await tree.apply_all_async()

        await _gather_or_cancel(_apply(tree) for tree in validators)
        is_valid = all(tree.all_good() for tree in validators)
        self._info(f"validation result of {self._id}:", is_valid)
        return is_valid

    def report(self) -> ErrorReport:
        """The error report of the current state in its canonical form"""
        return build_report(self)

    def generate_errors(self, results_type: Optional[ResultsType | str] = None) -> dict[str, Any]:
        """
        Encodes the error report of the current state. `results_type` defaults to the option of this validator.
        """
        return SERIALIZERS[ResultsType(results_type or self._options.results_type)](self.report())

    def _failure_info(self) -> ValidationInfo:
        report = self.report()
        results = SERIALIZERS[self._options.results_type](report)
        self._info(results)
        return ValidationInfo(success=False, results=results, report=report)

    def validate_info(self, data: Optional[DataT] = None) -> ValidationInfo:
        if self.validate(data):
            return ValidationInfo(success=True)
        return self._failure_info()

    async def validate_info_async(self, data: Optional[DataT] = None) -> ValidationInfo:
        if await self.validate_async(data):
            return ValidationInfo(success=True)
        return self._failure_info()

    def validate_throw(self, data: Optional[DataT] = None) -> None:
        """Raises a `ValidationFailure` carrying the error report if the validation fails"""
        info = self.validate_info(data)
        if not info.success:
            assert info.results is not None
            raise ValidationFailure(info.results)

    async def validate_throw_async(self, data: Optional[DataT] = None) -> None:
        info = await self.validate_info_async(data)
        if not info.success:
            assert info.results is not None
            raise ValidationFailure(info.results)

    # ---------------------------------------------------------------- batch validation

    def batch_validate(self, *data: DataT) -> BatchValidationInfo:
        """
        Validates every data instance with this validator, one after another. All instances are evaluated.
        """
        return BatchValidationInfo([self.bind(_constant(instance)).validate_info() for instance in data])

    async def batch_validate_async(self, *data: DataT, concurrent: bool = False) -> BatchValidationInfo:
        """
        Validates every data instance one after another using this validator. With `concurrent=True` every
        instance is validated by its own clone of this validator and all instances run at the same time; the
        field state of this validator is not touched then.
        """
        if concurrent:
            results = await asyncio.gather(
                *(self.clone().bind(_constant(instance)).validate_info_async() for instance in data)
            )
            return BatchValidationInfo(list(results))
        results = []
        for instance in data:
            results.append(await self.bind(_constant(instance)).validate_info_async())
        return BatchValidationInfo(results)

    def batch_validate_throw(self, *data: DataT) -> None:
        batch_result = self.batch_validate(*data)
        if not batch_result.success:
            raise BatchValidationFailure(batch_result.results)

    async def batch_validate_throw_async(self, *data: DataT, concurrent: bool = False) -> None:
        batch_result = await self.batch_validate_async(*data, concurrent=concurrent)
        if not batch_result.success:
            raise BatchValidationFailure(batch_result.results)

    # ---------------------------------------------------------------- import

    def import_report(self, results: dict[str, Any] | ErrorReport) -> None:
        """
        Restores the field states from an error report. Dicts must use the encoding configured in the options of
        this validator. Values are written back into the bound object; if nothing is bound only `valid` and
        `message` are restored. Fields and nested validators unknown to this validator are ignored.
        """
        report = results if isinstance(results, ErrorReport) else PARSERS[self._options.results_type](results)
        self._replay(report)

    def _replay(self, report: ErrorReport) -> None:
        if self._items:
            writable = self.is_bound and self._resolve() is not None
            for entry in report.items:
                item = self._items.get(entry.field)
                if item is None:
                    self._warn(f"Unknown validator item '{entry.field}' in {self._id}! It will be ignored!")
                    continue
                item.valid = entry.valid
                item.message = entry.message
                if writable:
                    item.set(entry.value)
                else:
                    self._warn(
                        f"The value of '{entry.field}' will be ignored because no object is bound. "
                        "Use `.bind(getter)` to pass the object the changes should be written to."
                    )
        elif report.items:
            self._warn(f"No simple fields found in {self._id}! The items of the report will be ignored!")

        if self._nested:
            for key, child_report in report.nested.items():
                child = self._nested.get(key)
                if child is None:
                    self._warn(f"'{key}' is an unknown nested validator in {self._id}! It will be ignored!")
                    continue
                child._replay(child_report)  # pylint: disable=protected-access
        elif report.nested:
            self._warn(f"No nested validator exists in {self._id}! The nested results of the report will be ignored!")

    # ---------------------------------------------------------------- logging

    def _info(self, *items: Any) -> None:
        self._sink.info(self._id, self._options.dev, *items)

    def _warn(self, *items: Any) -> None:
        self._sink.warn(self._id, self._options.dev, *items)


def validator(
    id: Optional[str] = None,  # pylint: disable=redefined-builtin
    items: Optional[Mapping[str, RulesConfig]] = None,
    nested: Optional[Mapping[str, Optional[Validator[Any]]]] = None,
    **options: Any,
) -> Validator[Any]:
    """
    Creates and configures a validator. Keyword arguments besides `id`, `items` and `nested` are options.
    """
    instance: Validator[Any] = Validator()
    if options:
        instance.with_options(**options)
    return instance.configure(id=id, items=items, nested=nested)

