"""Errors raised by the treemap visualization layer.

Nothing here recovers locally: errors propagate to the caller, and the
`reports` views translate them into HTTP responses.
"""

from __future__ import annotations


class VisualizationError(ValueError):
    """Base class for treemap visualization failures."""


class NoMetricAvailableError(VisualizationError):
    """Raised when the displayed columns contain no metric to graph."""

    def __init__(self, *, columns: tuple[str, ...]) -> None:
        """Initialize the error.

        Args:
            columns: The displayed columns that were inspected.
        """

        super().__init__(f"No metric available to graph in columns {list(columns)!r}.")
        self.columns = columns


class InvalidRequestParametersError(VisualizationError):
    """Raised when `period` or `date` is missing or cannot be parsed."""

    def __init__(self, *, parameter: str, value: object, reason: str | None = None) -> None:
        """Initialize the error.

        Args:
            parameter: Name of the offending request parameter.
            value: Raw value received for the parameter (None when missing).
            reason: Optional extra detail appended to the message.
        """

        if value is None or value == "":
            message = f"Invalid request parameters: {parameter!r} is required."
        else:
            message = f"Invalid request parameters: {parameter}={value!r}."
        if reason:
            message = f"{message} {reason}"
        super().__init__(message)
        self.parameter = parameter
        self.value = value
