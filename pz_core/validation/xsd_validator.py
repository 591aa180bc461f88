"""
XSD Validator
=============

Validates generated explanatory note XML against the ministry XSD for its
schema version.

Each call walks the same stages and may stop early at any of them:

    input check -> schema load -> schema parse -> xml parse -> validate

Every outcome, including internal faults, is returned as a
``ValidationResult``; ``validate`` never raises.
"""

from pathlib import Path
from typing import Any, Optional
import logging
import traceback

from lxml import etree

from pz_core.cache import VersionCache
from pz_core.config.settings import SchemaConfig
from pz_core.exceptions import UnsupportedSchemaVersionError
from pz_core.validation.base import BaseValidator, ErrorType, ValidationResult
from pz_core.xml.utils import create_safe_parser, parse_xml_text

logger = logging.getLogger(__name__)


def _syntax_error_position(error: etree.XMLSyntaxError):
    """(line, column) of a syntax error, if lxml reported one."""
    line = getattr(error, 'lineno', None)
    position = getattr(error, 'position', None)
    column = position[1] if position and len(position) > 1 else None
    return line, column


class XSDValidator(BaseValidator):
    """
    XSD validator with a per-version schema text cache.

    Example:
        validator = XSDValidator()
        result = validator.validate(xml_text, "01.05")
        if not result.valid:
            print(result.summary())
    """

    def __init__(self, schema_config: Optional[SchemaConfig] = None):
        self.schema_config = schema_config or SchemaConfig()
        self._xsd_cache: VersionCache[str] = VersionCache("xsd")

    @property
    def schema_type(self) -> str:
        return "XSD"

    @property
    def supported_versions(self):
        return self.schema_config.supported_versions

    def schema_path(self, schema_version: str) -> Path:
        """
        Resolve the XSD file for a version.

        Raises:
            UnsupportedSchemaVersionError: If no XSD is registered for the version
        """
        path = self.schema_config.xsd_path(schema_version)
        if path is None:
            raise UnsupportedSchemaVersionError(schema_version, self.supported_versions)
        return path

    def _read_xsd(self, schema_version: str) -> str:
        path = self.schema_path(schema_version)
        with open(path, 'r', encoding='utf-8') as f:
            text = f.read()
        logger.info(f"Loaded XSD for schema {schema_version} from {path}")
        return text

    def load_schema_text(self, schema_version: str) -> str:
        """Return the XSD text for a version, reading it from disk once."""
        return self._xsd_cache.get_or_load(schema_version, self._read_xsd)

    def clear_cache(self, schema_version: Optional[str] = None) -> None:
        self._xsd_cache.clear(schema_version)

    def validate(self, xml_text: Any, schema_version: Any) -> ValidationResult:
        if not isinstance(schema_version, str) or not schema_version:
            result = ValidationResult(valid=False, schema_version=None)
            result.add_error(ErrorType.INPUT, "Schema version is required and must be a string")
            return result

        result = ValidationResult(schema_version=schema_version)

        if not isinstance(xml_text, str) or not xml_text.strip():
            result.add_error(ErrorType.INPUT, "XML content is required and must be a non-empty string")
            return result

        try:
            return self._validate(xml_text, schema_version, result)
        except Exception as e:
            logger.error(f"Validator fault for schema {schema_version}: {e}")
            result.add_error(ErrorType.VALIDATOR, f"Validation failed: {e}",
                             stack=traceback.format_exc())
            return result

    def _validate(self, xml_text: str, schema_version: str,
                  result: ValidationResult) -> ValidationResult:
        # Schema load
        try:
            xsd_text = self.load_schema_text(schema_version)
        except UnsupportedSchemaVersionError as e:
            result.add_error(ErrorType.VALIDATOR, str(e))
            return result
        except OSError as e:
            logger.error(f"Could not read XSD for schema {schema_version}: {e}")
            result.add_error(ErrorType.SCHEMA, f"Could not read XSD for schema {schema_version}: {e}")
            return result

        # Schema parse
        try:
            xsd_doc = etree.fromstring(
                xsd_text.encode("utf-8"),
                create_safe_parser(),
                base_url=str(self.schema_path(schema_version)),
            )
            schema = etree.XMLSchema(xsd_doc)
        except etree.XMLSyntaxError as e:
            line, column = _syntax_error_position(e)
            result.add_error(ErrorType.SCHEMA, f"XSD parse error: {e}", line=line, column=column)
            return result
        except etree.XMLSchemaParseError as e:
            last = e.error_log.last_error
            result.add_error(
                ErrorType.SCHEMA,
                f"XSD parse error: {e}",
                line=last.line if last is not None else None,
                column=last.column if last is not None else None,
            )
            return result

        # XML parse
        try:
            document = parse_xml_text(xml_text)
        except etree.XMLSyntaxError as e:
            line, column = _syntax_error_position(e)
            logger.error(f"Generated XML is not well-formed (line {line}, column {column}): {e}")
            result.add_error(ErrorType.XML_PARSE, f"XML parse error: {e}", line=line, column=column)
            return result

        # Validate
        if schema.validate(document):
            logger.debug(f"XML is valid against schema {schema_version}")
            return result

        for entry in schema.error_log:
            result.add_error(
                ErrorType.VALIDATION,
                entry.message,
                line=entry.line,
                column=entry.column,
                level=entry.level_name.lower(),
                path=entry.path,
            )

        logger.info(f"XML failed validation against schema {schema_version}: "
                    f"{result.error_count} error(s)")
        return result


_global_validator: Optional[XSDValidator] = None


def get_validator() -> XSDValidator:
    """Get or create the global validator instance."""
    global _global_validator
    if _global_validator is None:
        _global_validator = XSDValidator()
    return _global_validator


def reset_validator() -> None:
    global _global_validator
    _global_validator = None


def validate(xml_text: Any, schema_version: Any) -> ValidationResult:
    """Validate XML text with the global validator."""
    return get_validator().validate(xml_text, schema_version)
