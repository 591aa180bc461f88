"""
Exceptions
==========

Exception hierarchy for the explanatory note pipeline.

Generation stages raise only for programmer errors (malformed mapping
configuration, unknown schema versions). Data-shape problems in form data
are logged and never raised. The XSD validator never raises; it reports
every failure through ``ValidationResult``.
"""

from typing import List, Optional


class PZError(Exception):
    """Base class for all pipeline errors."""
    pass


class MappingError(PZError):
    """Raised when a mapping rule or mapping table is malformed."""

    def __init__(self, message: str, json_path: Optional[str] = None):
        self.json_path = json_path
        if json_path:
            message = f"{json_path}: {message}"
        super().__init__(message)


class SchemaStructureError(PZError):
    """Raised when a JSON form schema is missing mandatory properties."""
    pass


class UnsupportedSchemaVersionError(PZError):
    """Raised when a schema version has no namespace or XSD registered."""

    def __init__(self, version: str, supported: List[str]):
        self.version = version
        self.supported = list(supported)
        super().__init__(
            f"Unsupported schema version: {version}. "
            f"Supported versions: {', '.join(self.supported)}"
        )


class MissingRequiredFieldsError(PZError):
    """Raised in strict mode when required form fields are absent."""

    def __init__(self, missing: List[str]):
        self.missing = list(missing)
        super().__init__(f"Required fields missing: {', '.join(self.missing)}")


class GenerationError(PZError):
    """Raised when XML generation cannot complete."""
    pass
