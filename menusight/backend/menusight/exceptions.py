"""
Domain exceptions for MenuSight.

Routers translate these into HTTP errors; services raise them and never
swallow them.
"""
from typing import Any, Dict, Optional


class MenuSightError(Exception):
    """Base class for console errors. Carries a user-facing message."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class BackofficeError(MenuSightError):
    """
    A call to the back-office REST API failed.

    status_code is the HTTP status returned by the back office, or None when
    the request never got a response (connection error, timeout).
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404


class PropagationError(MenuSightError):
    """Every pair in a propagation batch failed."""

    def __init__(self, message: str, result: Any):
        self.result = result
        super().__init__(message)


class DuplicateUsageError(MenuSightError):
    """An ingredient usage equivalent to an existing record was submitted."""

    def __init__(self, message: str, existing: Dict[str, Any]):
        self.existing = existing
        super().__init__(message)


class InvalidParentError(MenuSightError):
    """A category assignment cannot be placed under the requested parent."""

    def __init__(self, message: str, node_id: Optional[str] = None, parent_id: Optional[str] = None):
        self.node_id = node_id
        self.parent_id = parent_id
        super().__init__(message)


class NotFoundError(MenuSightError):
    """A record the console looked up is not among what the back office returned."""
