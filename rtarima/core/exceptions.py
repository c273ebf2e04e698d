'''
Custom exception and warning classes for rtarima.

Every error raised by the package derives from :class:`RTArimaError`, so callers
can catch the whole family in one clause while still being able to handle the
specific conditions (singular normal equations, unfitted models, bad input
series) individually. Errors carry a ``context`` dictionary which is rendered
into the message together with the location that raised it.
'''

from typing import Any, Dict, Optional, Tuple, Union
import inspect
import warnings
from pathlib import Path

import numpy as np


def _format_message(message: str,
                    details: Optional[str],
                    context: Optional[Dict[str, Any]],
                    frame: Any) -> str:
    full_message = message
    if details:
        full_message += f"\n\nDetails: {details}"

    if context:
        context_str = "\n".join(f"  {k}: {v}" for k, v in context.items())
        full_message += f"\n\nContext:\n{context_str}"

    if frame:
        caller_info = inspect.getframeinfo(frame)
        full_message += f"\n\nLocation: {Path(caller_info.filename).name}:{caller_info.lineno}"
    return full_message


def _merge_context(context: Optional[Dict[str, Any]], entries: Dict[str, Any]) -> Dict[str, Any]:
    """Add the labelled entries that are set to a copy of ``context``.

    Large arrays are summarized by their shape.
    """
    merged = dict(context or {})
    for label, value in entries.items():
        if value is None or (isinstance(value, str) and not value):
            continue
        if isinstance(value, np.ndarray) and value.size > 10:
            value = f"Array with shape {value.shape}"
        merged[label] = value
    return merged


class RTArimaError(Exception):
    """Base exception class for all rtarima errors.

    Attributes:
        message: The error message
        details: Additional details about the error
        context: Dictionary containing contextual information about the error
    """

    def __init__(self,
                 message: str,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details
        self.context = context or {}

        frame = inspect.currentframe()
        try:
            # Walk past the constructors of subclasses to the raising site
            caller = frame.f_back if frame else None
            while caller is not None and caller.f_code.co_name == "__init__":
                caller = caller.f_back
            full_message = _format_message(message, details, self.context, caller)
        finally:
            del frame

        super().__init__(full_message)


class ParameterError(RTArimaError):
    """Exception raised for invalid model orders, horizons or options.

    Attributes:
        param_name: Name of the offending parameter
        param_value: The rejected value
        constraint: The constraint the value violates
    """

    def __init__(self,
                 message: str,
                 param_name: Optional[str] = None,
                 param_value: Optional[Any] = None,
                 constraint: Optional[str] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.param_name = param_name
        self.param_value = param_value
        self.constraint = constraint
        super().__init__(message, details, _merge_context(context, {
            "Parameter": param_name, "Value": param_value, "Constraint": constraint}))


class DataError(RTArimaError):
    """Exception raised for an unusable input series.

    Raised when a series is not one-dimensional, contains missing or
    infinite values, or is too short for the requested operation.

    Attributes:
        data_name: Name of the offending input
        issue: What is wrong with it
        index: Position of the problem, when known
    """

    def __init__(self,
                 message: str,
                 data_name: Optional[str] = None,
                 issue: Optional[str] = None,
                 index: Optional[Union[int, Tuple[int, ...], str]] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.data_name = data_name
        self.issue = issue
        self.index = index
        super().__init__(message, details, _merge_context(context, {
            "Data": data_name, "Issue": issue, "Index": index}))


class InvalidSampleSizeError(DataError):
    """Exception raised when a sample size is not positive."""

    def __init__(self,
                 message: str,
                 sample_size: Optional[int] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.sample_size = sample_size
        super().__init__(message, issue="non-positive sample size", details=details,
                         context=_merge_context(context, {"Sample Size": sample_size}))


class NumericError(RTArimaError):
    """Exception raised when a computation cannot produce a usable result.

    Attributes:
        operation: The computation that failed
        values: The inputs involved
        error_type: Short failure category such as ``"singular"``
    """

    def __init__(self,
                 message: str,
                 operation: Optional[str] = None,
                 values: Optional[Any] = None,
                 error_type: Optional[str] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.operation = operation
        self.values = values
        self.error_type = error_type
        super().__init__(message, details, _merge_context(context, {
            "Operation": operation, "Values": values, "Error Type": error_type}))


class SingularMatrixError(NumericError):
    """Exception raised when a linear system has a near-zero pivot.

    Attributes:
        pivot: Magnitude of the pivot that fell below the tolerance
        column: Column index at which elimination failed
        tolerance: The tolerance the pivot was compared against
    """

    def __init__(self,
                 message: str,
                 pivot: Optional[float] = None,
                 column: Optional[int] = None,
                 tolerance: Optional[float] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.pivot = pivot
        self.column = column
        self.tolerance = tolerance
        super().__init__(message, operation="gaussian elimination", error_type="singular",
                         details=details, context=_merge_context(context, {
                             "Pivot": pivot, "Column": column, "Tolerance": tolerance}))


class NonStationaryError(DataError):
    """Exception raised when a preprocessed series fails the stationarity check.

    Attributes:
        autocorrelation: Lag-1 autocorrelation of the processed series
        threshold: The stationarity threshold that was applied
    """

    def __init__(self,
                 message: str,
                 autocorrelation: Optional[float] = None,
                 threshold: Optional[float] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.autocorrelation = autocorrelation
        self.threshold = threshold
        super().__init__(message, issue="non-stationary", details=details,
                         context=_merge_context(context, {
                             "Lag-1 Autocorrelation": autocorrelation, "Threshold": threshold}))


class NotFittedError(RTArimaError):
    """Raised when forecasting or inspecting a model before ``fit``."""

    def __init__(self,
                 message: str,
                 model_type: Optional[str] = None,
                 operation: Optional[str] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.model_type = model_type
        self.operation = operation
        super().__init__(message, details, _merge_context(context, {
            "Model Type": model_type, "Operation": operation}))


class ConfigurationError(RTArimaError):
    """Exception raised for an unknown or invalid configuration setting.

    Attributes:
        config_file: Configuration file involved, if any
        setting: ``section.option`` key
        value: The rejected value
        issue: What is wrong with it
    """

    def __init__(self,
                 message: str,
                 config_file: Optional[Union[str, Path]] = None,
                 setting: Optional[str] = None,
                 value: Optional[Any] = None,
                 issue: Optional[str] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.config_file = config_file
        self.setting = setting
        self.value = value
        self.issue = issue
        super().__init__(message, details, _merge_context(context, {
            "Config File": str(config_file) if config_file else None,
            "Setting": setting, "Value": value, "Issue": issue}))


class RTArimaWarning(UserWarning):
    """Base warning class for all rtarima warnings."""

    def __init__(self,
                 message: str,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details
        self.context = context or {}
        super().__init__(_format_message(message, details, self.context, None))


class NumericWarning(RTArimaWarning):
    """Warning for numerical issues that do not prevent computation.

    Attributes:
        operation: Computation that produced the warning
        issue: What was detected
        value: The value concerned
    """

    def __init__(self,
                 message: str,
                 operation: Optional[str] = None,
                 issue: Optional[str] = None,
                 value: Optional[Any] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.operation = operation
        self.issue = issue
        self.value = value
        super().__init__(message, details, _merge_context(context, {
            "Operation": operation, "Issue": issue, "Value": value}))


def raise_parameter_error(message: str,
                          param_name: Optional[str] = None,
                          param_value: Optional[Any] = None,
                          constraint: Optional[str] = None,
                          details: Optional[str] = None,
                          context: Optional[Dict[str, Any]] = None) -> None:
    """Raise a ParameterError built from the given fields."""
    raise ParameterError(message, param_name, param_value, constraint, details, context)


def raise_data_error(message: str,
                     data_name: Optional[str] = None,
                     issue: Optional[str] = None,
                     index: Optional[Union[int, Tuple[int, ...], str]] = None,
                     details: Optional[str] = None,
                     context: Optional[Dict[str, Any]] = None) -> None:
    """Raise a DataError built from the given fields."""
    raise DataError(message, data_name, issue, index, details, context)


def warn_numeric(message: str,
                 operation: Optional[str] = None,
                 issue: Optional[str] = None,
                 value: Optional[Any] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
    """Issue a NumericWarning attributed to the caller of the warning function.

    Args:
        message: The warning message
        operation: Computation that produced the warning
        issue: What was detected
        value: The value concerned
        details: Additional details
        context: Extra context entries
    """
    warnings.warn(
        NumericWarning(message, operation, issue, value, details, context),
        stacklevel=3
    )
