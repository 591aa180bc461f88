"""
Validation Framework
====================

Validation of generated XML against the ministry XSDs, and field-level
checks for form data.

Components:
- ValidationResult: Container for validation results
- BaseValidator: Abstract base class for validators
- XSDValidator: XSD validation with a per-version schema cache
- Field validators: INN, OGRN, SNILS, KPP, cadastral number and others
"""

from pz_core.validation.fields import (
    FieldCheck,
    FIELD_VALIDATORS,
    validate_field,
    validate_inn,
    validate_ogrn,
    validate_snils,
    validate_kpp,
    validate_cadastral_number,
    validate_xml_id,
    validate_year,
    validate_phone,
    validate_email,
    validate_decimal,
    validate_integer,
)

from pz_core.validation.base import (
    BaseValidator,
    ErrorType,
    ValidationResult,
)

from pz_core.validation.xsd_validator import (
    XSDValidator,
    get_validator,
    reset_validator,
    validate,
)

__all__ = [
    # Field checks
    "FieldCheck",
    "FIELD_VALIDATORS",
    "validate_field",
    "validate_inn",
    "validate_ogrn",
    "validate_snils",
    "validate_kpp",
    "validate_cadastral_number",
    "validate_xml_id",
    "validate_year",
    "validate_phone",
    "validate_email",
    "validate_decimal",
    "validate_integer",
    # Base classes
    "BaseValidator",
    "ErrorType",
    "ValidationResult",
    # XSD validation
    "XSDValidator",
    "get_validator",
    "reset_validator",
    "validate",
]
