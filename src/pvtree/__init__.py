"""
This package enables you to validate deeply nested objects with composable validator trees. Each validator holds
the rule chains of an object's fields and one nested validator per sub-object. Failing validations are reported in
one of two equivalent encodings which can be imported again to restore the state of a validator tree.
"""

from .analysis import BatchValidationInfo, ValidationInfo
from .errors import (
    BatchValidationFailure,
    ConfigurationError,
    PvTreeError,
    ReportShapeError,
    UndefinedObjectError,
    ValidationFailure,
    ValidatorNotReadyError,
)
from .item import ValidatorItem
from .logger import StdLoggingSink
from .options import ResultsType, ValidatorOptions, default_options, reset_default_options, set_default_options
from .report import ErrorReport, FieldError, build_report, from_array, from_object, to_array, to_object
from .rules import Override, Rule, RuleChain, RuleContext, custom, is_type, number, string
from .validator import Validator, validator
