"""
Contains the options of a validator and the process-wide defaults every new validator starts from.
"""
import dataclasses
from enum import Enum
from typing import Any, Optional


class ResultsType(str, Enum):
    """
    Selects the encoding of error reports.
    """

    OBJECT = "object"  #: nested reports keyed by field name
    ARRAY = "array"  #: nested reports as a list of `{"field", "result"}` pairs


@dataclasses.dataclass(frozen=True)
class ValidatorOptions:
    """
    Options of a single validator. Instances are immutable, use `replace` to derive changed copies.
    """

    results_type: ResultsType = ResultsType.OBJECT
    dev: bool = False
    rule_timeout: Optional[float] = None
    """Seconds a single field may take in the asynchronous path. `None` means no limit."""

    def __post_init__(self):
        object.__setattr__(self, "results_type", ResultsType(self.results_type))

    def replace(self, **changes: Any) -> "ValidatorOptions":
        return dataclasses.replace(self, **changes)


_defaults = ValidatorOptions()


def default_options() -> ValidatorOptions:
    """The options new validators get a copy of"""
    return _defaults


def set_default_options(**changes: Any) -> ValidatorOptions:
    """
    Changes the process-wide defaults. Validators created before the call keep their own copy.
    """
    global _defaults  # pylint: disable=global-statement
    _defaults = _defaults.replace(**changes)
    return _defaults


def reset_default_options() -> ValidatorOptions:
    global _defaults  # pylint: disable=global-statement
    _defaults = ValidatorOptions()
    return _defaults
