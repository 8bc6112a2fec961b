"""Exception hierarchy for the Customer.io integration."""
from __future__ import annotations
from typing import Any, Optional


class CustomerIoError(Exception):
    """Base class for every error raised by this package."""


class CredentialsError(CustomerIoError):
    """Credentials are missing or malformed."""


class NodeParameterError(CustomerIoError):
    """A required node parameter was not supplied."""

    def __init__(self, name: str, index: int):
        self.name = name
        self.index = index
        super().__init__(f'Missing required parameter "{name}" for item {index}')


class NodeOperationError(CustomerIoError):
    """An operation could not be carried out with the given parameters."""


class CustomerIoApiError(CustomerIoError):
    """A Customer.io API call failed (HTTP error status or transport failure)."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        payload: Any = None,
    ):
        self.status_code = status_code
        self.payload = payload
        super().__init__(f"Customer.io API error: {message}")


class ConfigurationError(CustomerIoError):
    """An environment setting could not be parsed."""
