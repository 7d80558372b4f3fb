"""Exception types raised by Deltalytix."""

from typing import Optional


class DeltalytixError(Exception):
    """Base class for all Deltalytix errors."""


class IngestionError(DeltalytixError):
    """Raised when imported trade data cannot be parsed or validated.

    Attributes:
        row: 1-based data row number the error refers to, if any.
    """

    def __init__(self, message: str, row: Optional[int] = None):
        self.row = row
        if row is not None:
            message = f"Row {row}: {message}"
        super().__init__(message)


class DataStoreError(DeltalytixError):
    """Raised when the data store cannot serve a request."""


class AccountNotFoundError(DeltalytixError):
    """Raised when an account number is not known to the data store."""

    def __init__(self, account_number: str):
        self.account_number = account_number
        super().__init__(f"Account '{account_number}' not found")


class AgentError(DeltalytixError):
    """Raised when an AI agent cannot produce an answer."""
