"""
Error taxonomy for the SWIFT code registry.

Every registry error carries the HTTP status it maps to, so the app-level
exception handler can answer with ``{"message": ...}`` without knowing the
concrete type.
"""


class SwiftRegistryError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(SwiftRegistryError):
    """Missing, blank or contradictory input fields."""
    status_code = 400


class InvalidCodeError(ValidationError):
    """A SWIFT code too short to carry an 8-character prefix."""


class ImportFileError(ValidationError):
    """An import spreadsheet that cannot be read or lacks required columns."""


class ConflictError(SwiftRegistryError):
    status_code = 409


class DuplicateCodeError(ConflictError):
    pass


class PrefixConflictError(ConflictError):
    """A second headquarters claiming an already owned prefix."""


class NotFoundError(SwiftRegistryError):
    status_code = 404


class StoreError(SwiftRegistryError):
    status_code = 500

    def __init__(self, message: str = "Internal Server Error"):
        super().__init__(message)
