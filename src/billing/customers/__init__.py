"""Customer directory factory.

Provides get_directory() / set_directory() to swap implementations:
- HttpCustomerDirectory against CUSTOMER_SERVICE_URL by default
- FakeCustomerDirectory for development and testing
"""

import os

from billing.customers.http_adapter import HttpCustomerDirectory
from billing.customers.port import CustomerDirectory

DEFAULT_CUSTOMER_SERVICE_URL = "http://customer-service:8084"

_current_directory: CustomerDirectory | None = None


def get_directory() -> CustomerDirectory:
    """Return the current customer directory."""
    global _current_directory
    if _current_directory is None:
        _current_directory = HttpCustomerDirectory(
            os.environ.get("CUSTOMER_SERVICE_URL", DEFAULT_CUSTOMER_SERVICE_URL)
        )
    return _current_directory


def set_directory(directory: CustomerDirectory) -> None:
    """Override the active customer directory (useful for tests)."""
    global _current_directory
    _current_directory = directory


def reset_directory() -> None:
    """Reset to the default directory."""
    global _current_directory
    _current_directory = None
