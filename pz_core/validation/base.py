"""
Base Validation Classes
=======================

Result container and abstract base class for XML validators. The result's
``to_dict()`` shape ``{valid, errors, schemaVersion}`` is the boundary
contract consumed by storage and UI callers.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)


class ErrorType:
    """Error categories reported in ``ValidationResult.errors``."""

    INPUT = "input_error"
    SCHEMA = "schema_error"
    XML_PARSE = "xml_parse_error"
    VALIDATION = "validation_error"
    VALIDATOR = "validator_error"

    ALL = (INPUT, SCHEMA, XML_PARSE, VALIDATION, VALIDATOR)


@dataclass
class ValidationResult:
    """
    Container for validation results.

    Attributes:
        valid: Whether validation passed
        errors: List of error dictionaries with keys:
            - type: One of the ``ErrorType`` values
            - message: Error description
            - line: Line number (optional)
            - column: Column number (optional)
            - level: Library severity, lower-case (optional)
            - path: Element path of the offending node (optional)
            - stack: Traceback for validator faults (optional)
        schema_version: Version the document was validated against
    """
    valid: bool = True
    errors: List[Dict[str, Any]] = field(default_factory=list)
    schema_version: Optional[str] = None

    def add_error(self,
                  error_type: str,
                  message: str,
                  line: Optional[int] = None,
                  column: Optional[int] = None,
                  level: Optional[str] = None,
                  path: Optional[str] = None,
                  stack: Optional[str] = None) -> None:
        """
        Add an error to the result and mark it invalid.

        Optional keys are only included when set.
        """
        error: Dict[str, Any] = {
            'type': error_type,
            'message': message,
            'line': line,
            'column': column,
        }
        if level is not None:
            error['level'] = level
        if path is not None:
            error['path'] = path
        if stack is not None:
            error['stack'] = stack

        self.errors.append(error)
        self.valid = False

    def merge(self, other: 'ValidationResult') -> None:
        """Merge another result into this one."""
        self.errors.extend(other.errors)
        if not other.valid:
            self.valid = False

    @property
    def error_count(self) -> int:
        return len(self.errors)

    def get_errors_by_type(self) -> Dict[str, int]:
        """Get error counts by type."""
        by_type: Dict[str, int] = {}
        for error in self.errors:
            error_type = error['type']
            by_type[error_type] = by_type.get(error_type, 0) + 1
        return by_type

    def summary(self) -> str:
        """Generate a text summary of validation results."""
        version = self.schema_version or "unknown"
        if self.valid:
            return f"Validation PASSED ({version}) - No errors found"

        lines = [
            f"Validation FAILED ({version}) - {self.error_count} error(s)",
            "",
            "Errors by type:",
        ]

        for error_type, count in sorted(self.get_errors_by_type().items(), key=lambda x: -x[1]):
            lines.append(f"  {error_type}: {count}")

        lines.extend(["", "Errors:"])
        for error in self.errors:
            location = f"line {error['line']}" if error.get('line') else "-"
            lines.append(f"  [{error['type']}] {location}: {error['message']}")

        return "\n".join(lines)

    def to_dict(self) -> dict:
        return {
            'valid': self.valid,
            'errors': [dict(error) for error in self.errors],
            'schemaVersion': self.schema_version,
        }


class BaseValidator(ABC):
    """
    Abstract base class for validators.

    Subclasses implement ``validate`` over XML text; file validation is
    built on top of it.
    """

    @abstractmethod
    def validate(self, xml_text: Any, schema_version: Any) -> ValidationResult:
        """
        Validate XML text against a schema version.

        Must never raise; every failure is reported in the result.
        """
        pass

    def validate_file(self, file_path: Path, schema_version: Any, encoding: str = "utf-8") -> ValidationResult:
        """
        Validate an XML file on disk.

        A read failure is reported as an input error.
        """
        try:
            with open(file_path, 'r', encoding=encoding) as f:
                xml_text = f.read()
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Could not read {file_path}: {e}")
            result = ValidationResult(valid=False, schema_version=schema_version or None)
            result.add_error(ErrorType.INPUT, f"Could not read XML file {file_path}: {e}")
            return result

        return self.validate(xml_text, schema_version)

    @property
    def schema_type(self) -> str:
        """Return the type of schema this validator uses (e.g., 'XSD')."""
        return "Unknown"
