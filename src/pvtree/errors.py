"""
Contains the exceptions of the validation framework. Failing fields are never raised, they are recorded as data.
Only the `*_throw*` entry points turn them into a `ValidationFailure` or `BatchValidationFailure`.
"""
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .analysis import ValidationInfo


class PvTreeError(Exception):
    """Base class of all exceptions raised by this package"""


class ConfigurationError(PvTreeError):
    """Raised if a validator gets configured against an object which is currently undefined"""


class ValidatorNotReadyError(PvTreeError):
    """Raised if a validation is started before an accessor was bound"""


class UndefinedObjectError(PvTreeError):
    """
    Raised if the accessor of a validator (or of one of its nested validators) resolves to `None`.
    """

    def __init__(self, validator_id: str):
        super().__init__(f"{validator_id}: The object to validate is undefined")
        self.validator_id = validator_id


class ReportShapeError(PvTreeError, TypeError):
    """Raised if an error report does not match the encoding it is read with"""


class ValidationFailure(PvTreeError):
    """
    Carries the error report of a failed validation.
    """

    def __init__(self, results: dict[str, Any]):
        super().__init__(f"Validation failed: {results}")
        self.results = results


class BatchValidationFailure(PvTreeError):
    """
    Carries the outcomes of a batch validation in which at least one data instance failed.
    """

    def __init__(self, results: "list[ValidationInfo]"):
        num_fails = sum(1 for result in results if not result.success)
        super().__init__(f"Batch validation failed for {num_fails} of {len(results)} data instances")
        self.results = results
