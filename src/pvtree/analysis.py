"""
Contains the outcomes returned by `validate_info` and the batch validation functions
"""
import dataclasses
from typing import Any, Optional

from .report import ErrorReport


@dataclasses.dataclass(frozen=True)
class ValidationInfo:
    """
    The outcome of a single validation. `results` holds the encoded error report and is only set on failure.
    """

    success: bool
    results: Optional[dict[str, Any]] = None
    report: Optional[ErrorReport] = dataclasses.field(default=None, compare=False, repr=False)
    """The canonical form of `results`, e.g. to encode it differently afterwards"""

    def to_dict(self) -> dict[str, Any]:
        if self.success:
            return {"success": True}
        return {"success": False, "results": self.results}


class BatchValidationInfo:
    """
    The outcome of a batch validation. `results` has one entry per data instance, in input order. The summary
    properties are calculated only if you use them.
    """

    def __init__(self, results: list[ValidationInfo]):
        self.results = results
        self.success = all(result.success for result in results)
        self._failed_indices: Optional[list[int]] = None

    def __repr__(self):
        return f"BatchValidationInfo(success={self.success}, total={self.total}, num_fails={self.num_fails})"

    def __eq__(self, other):
        return isinstance(other, BatchValidationInfo) and self.results == other.results

    __hash__ = None  # type: ignore[assignment]

    @property
    def failed_indices(self) -> list[int]:
        """Positions of the data instances which failed the validation"""
        if self._failed_indices is None:
            self._failed_indices = [index for index, result in enumerate(self.results) if not result.success]
        return self._failed_indices

    @property
    def total(self) -> int:
        """Number of all validated data instances"""
        return len(self.results)

    @property
    def num_fails(self) -> int:
        """Number of negatively validated data instances (equivalent to `len(self.failed_indices)`)"""
        return len(self.failed_indices)

    @property
    def num_succeeds(self) -> int:
        """Number of positively validated data instances"""
        return self.total - self.num_fails

    def to_dict(self) -> dict[str, Any]:
        return {"success": self.success, "results": [result.to_dict() for result in self.results]}
