"""
Contains the error report of a validator tree. Internally a report is an `ErrorReport`; the two dict encodings
("object" and "array") are produced and read by the pure functions `to_object`, `to_array`, `from_object` and
`from_array`. Both encodings carry the same information:

```
object: {"items": [{"field", "message", "valid", "value"}], "nested": {"profile": {...}}}
array:  {"items": [{"field", "message", "valid", "value"}], "nested": [{"field": "profile", "result": {...}}]}
```

Keys without content are omitted, i.e. an empty dict is the report of a valid object.
"""
import dataclasses
from typing import TYPE_CHECKING, Any, Callable, Optional, TypedDict

from frozendict import frozendict
from typeguard import CollectionCheckStrategy, TypeCheckError, check_type

from .errors import ReportShapeError
from .options import ResultsType

if TYPE_CHECKING:
    from .validator import Validator


class _FieldErrorBase(TypedDict):
    field: str


class FieldErrorDict(_FieldErrorBase, total=False):
    """A failing field in both encodings"""

    message: Optional[str]
    valid: bool
    value: Any


class NestedEntryDict(TypedDict):
    """A nested report in the array encoding"""

    field: str
    result: dict[str, Any]


@dataclasses.dataclass(frozen=True)
class FieldError:
    field: str
    message: Optional[str]
    value: Any = None
    valid: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"field": self.field, "message": self.message, "valid": self.valid, "value": self.value}


@dataclasses.dataclass(frozen=True)
class ErrorReport:
    """
    The canonical report: the failing fields of one validator and the non-empty reports of its nested validators.
    """

    items: tuple[FieldError, ...] = ()
    nested: frozendict[str, "ErrorReport"] = dataclasses.field(default_factory=frozendict)

    @property
    def is_empty(self) -> bool:
        return not self.items and not self.nested

    def fields(self) -> set[tuple[str, ...]]:
        """Returns the paths of all failing fields, e.g. `{("email",), ("profile", "age")}`"""
        paths = {(item.field,) for item in self.items}
        for key, report in self.nested.items():
            paths.update((key, *path) for path in report.fields())
        return paths


def build_report(validator: "Validator[Any]") -> ErrorReport:
    """
    Collects the failing fields of `validator` and its nested validators. Values are read from the bound object at
    the time of the call, not at the time of the validation.
    """
    items = tuple(
        FieldError(field=item.name, message=item.message, value=item.get())
        for item in validator.items.values()
        if item.valid is False
    )
    nested = {}
    for key, child in validator.nested.items():
        child_report = build_report(child)
        if not child_report.is_empty:
            nested[key] = child_report
    return ErrorReport(items=items, nested=frozendict(nested))


def to_object(report: ErrorReport) -> dict[str, Any]:
    result: dict[str, Any] = {}
    if report.items:
        result["items"] = [item.to_dict() for item in report.items]
    if report.nested:
        result["nested"] = {key: to_object(child) for key, child in report.nested.items()}
    return result


def to_array(report: ErrorReport) -> dict[str, Any]:
    result: dict[str, Any] = {}
    if report.items:
        result["items"] = [item.to_dict() for item in report.items]
    if report.nested:
        result["nested"] = [{"field": key, "result": to_array(child)} for key, child in report.nested.items()]
    return result


def _check(value: Any, expected_type: Any, path: str) -> None:
    try:
        check_type(value, expected_type, collection_check_strategy=CollectionCheckStrategy.ALL_ITEMS)
    except TypeCheckError as error:
        raise ReportShapeError(f"{path}: {error}") from error


def _parse_items(results: dict[str, Any], path: str) -> tuple[FieldError, ...]:
    items = results.get("items", [])
    _check(items, list[FieldErrorDict], f"{path}.items")
    return tuple(
        FieldError(
            field=item["field"],
            message=item.get("message"),
            value=item.get("value"),
            valid=item.get("valid", False),
        )
        for item in items
    )


def from_object(results: dict[str, Any], path: str = "results") -> ErrorReport:
    """
    Reads a report in the object encoding. A report in the array encoding raises a `ReportShapeError`.
    """
    _check(results, dict[str, Any], path)
    nested = results.get("nested", {})
    if isinstance(nested, list):
        raise ReportShapeError(f"{path}.nested: Found the array encoding but expected the object encoding")
    _check(nested, dict[str, dict[str, Any]], f"{path}.nested")
    return ErrorReport(
        items=_parse_items(results, path),
        nested=frozendict({key: from_object(child, f"{path}.nested.{key}") for key, child in nested.items()}),
    )


def from_array(results: dict[str, Any], path: str = "results") -> ErrorReport:
    """
    Reads a report in the array encoding. A report in the object encoding raises a `ReportShapeError`.
    """
    _check(results, dict[str, Any], path)
    nested = results.get("nested", [])
    if isinstance(nested, dict):
        raise ReportShapeError(f"{path}.nested: Found the object encoding but expected the array encoding")
    _check(nested, list[NestedEntryDict], f"{path}.nested")
    return ErrorReport(
        items=_parse_items(results, path),
        nested=frozendict(
            {entry["field"]: from_array(entry["result"], f"{path}.nested.{entry['field']}") for entry in nested}
        ),
    )


SERIALIZERS: dict[ResultsType, Callable[[ErrorReport], dict[str, Any]]] = {
    ResultsType.OBJECT: to_object,
    ResultsType.ARRAY: to_array,
}
PARSERS: dict[ResultsType, Callable[[dict[str, Any]], ErrorReport]] = {
    ResultsType.OBJECT: from_object,
    ResultsType.ARRAY: from_array,
}
