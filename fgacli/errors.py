"""Error types shared across the command line tool."""

from __future__ import annotations


class CliError(Exception):
    """Base class for errors raised by the tool."""

    base_message = "cli error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message if message is not None else self.base_message)


class ValidationError(CliError):
    """Input failed validation."""

    base_message = "validation error"


class InvalidFormatError(CliError):
    """A format name was not recognised."""

    base_message = "invalid format"


class StoreNotFoundError(CliError):
    """The requested store does not exist."""

    base_message = "store not found"


class AuthorizationModelNotFoundError(CliError):
    """The requested authorization model does not exist."""

    base_message = "authorization model not found"


class ModelInputMissingError(CliError):
    """No model was given where one is required."""

    base_message = "model input not provided"


class RequiredCsvHeaderMissingError(CliError):
    """A CSV tuple file lacks a mandatory column."""

    base_message = "csv header missing"


def validation_error(op: str, details: str) -> ValidationError:
    """Build a validation error naming the operation and what went wrong."""
    return ValidationError(f"{ValidationError.base_message} - {op}: {details}")


def missing_required_csv_header_error(header_name: str) -> RequiredCsvHeaderMissingError:
    """Build the error for a CSV file that lacks ``header_name``."""
    return RequiredCsvHeaderMissingError(
        f'{RequiredCsvHeaderMissingError.base_message} ("{header_name}")'
    )