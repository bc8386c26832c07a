# errors.py
"""Exceptions raised by the shift calendar."""


class ShiftValidationError(ValueError):
    """Raised when a shift record, date key or period id is not valid."""


class InvalidSelection(ValueError):
    """Raised when more periods are selected for comparison than allowed."""


class ExportFailed(RuntimeError):
    """Raised when the PDF document could not be written."""


__all__ = ["ShiftValidationError", "InvalidSelection", "ExportFailed"]
