"""
Catalog Errors

Every error carries a code and an HTTP status. StoreUnavailable ends the
request; nothing retries it. Admin-style endpoints render errors with
``to_response()`` as ``{success: false, error}``.
"""

from typing import Optional


class CatalogError(Exception):
    """Base exception for catalog engine failures."""

    code = "catalog_error"
    http_status = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_response(self) -> dict:
        return {"success": False, "error": self.message}


class StoreUnavailable(CatalogError):
    """The backing store could not be reached, rejected us, or timed out."""

    code = "store_unavailable"
    http_status = 500

    def __init__(self, message: str, operation: Optional[str] = None):
        super().__init__(message)
        self.operation = operation


class ValidationError(CatalogError):
    """A required request field is missing or malformed."""

    code = "validation_error"
    http_status = 400


class NotFound(CatalogError):
    """The requested row does not exist or is not visible."""

    code = "not_found"
    http_status = 404
