"""
Field Validators
================

Format and checksum validators for Russian identifiers and typed form
fields (INN, OGRN/OGRNIP, SNILS, KPP, cadastral numbers, xs:ID, years,
phones, emails, decimals and integers).

Every validator returns a ``FieldCheck``; none of them raise. Form schemas
refer to validators by the names in ``FIELD_VALIDATORS``.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional
import re

_WHITESPACE = re.compile(r"\s")
_SNILS_SEPARATORS = re.compile(r"[\s-]")
_PHONE_SEPARATORS = re.compile(r"[\s()-]")

_INN_FORMAT = re.compile(r"^(\d{10}|\d{12})$")
_OGRN_FORMAT = re.compile(r"^(\d{13}|\d{15})$")
_SNILS_FORMAT = re.compile(r"^\d{11}$")
_KPP_FORMAT = re.compile(r"^\d{4}[\dA-Z]{2}\d{3}$")
_CADASTRAL_FORMAT = re.compile(r"^\d{2}:\d{2}:\d{6,7}:\d+$")
_XML_ID_FORMAT = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_.-]*$")
_EMAIL_FORMAT = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_PHONE_FORMATS = (
    re.compile(r"^\+7\d{10}$"),
    re.compile(r"^8\d{10}$"),
    re.compile(r"^7\d{10}$"),
)

_INN10_WEIGHTS = (2, 4, 10, 3, 5, 9, 4, 6, 8)
_INN11_WEIGHTS = (7, 2, 4, 10, 3, 5, 9, 4, 6, 8)
_INN12_WEIGHTS = (3, 7, 2, 4, 10, 3, 5, 9, 4, 6, 8)

# Subject-of-federation codes accepted in cadastral numbers
CADASTRAL_REGIONS = frozenset(
    [f"{code:02d}" for code in range(1, 80)] + ["83", "86", "87", "89", "91", "92"]
)

# SNILS numbers below 001-001-998 were never issued
_SNILS_MIN_NUMBER = 1001998


@dataclass
class FieldCheck:
    """Outcome of a single field validation."""

    valid: bool
    error: Optional[str] = None

    def to_dict(self) -> dict:
        return {"valid": self.valid, "error": self.error}


OK = FieldCheck(True)


def _fail(message: str) -> FieldCheck:
    return FieldCheck(False, message)


def _weighted_check_digit(digits: str, weights) -> int:
    total = sum(int(d) * w for d, w in zip(digits, weights))
    return total % 11 % 10


def validate_inn(inn: Any) -> FieldCheck:
    """
    Validate an INN: 10 digits for organisations, 12 for individuals,
    including the control digits.
    """
    if not inn:
        return _fail("INN must not be empty")

    cleaned = _WHITESPACE.sub("", str(inn))
    if not _INN_FORMAT.match(cleaned):
        return _fail("INN must have 10 (organisation) or 12 (individual) digits")

    if len(cleaned) == 10:
        if _weighted_check_digit(cleaned[:9], _INN10_WEIGHTS) != int(cleaned[9]):
            return _fail("Invalid INN checksum")
    else:
        if _weighted_check_digit(cleaned[:10], _INN11_WEIGHTS) != int(cleaned[10]):
            return _fail("Invalid INN checksum (11th digit)")
        if _weighted_check_digit(cleaned[:11], _INN12_WEIGHTS) != int(cleaned[11]):
            return _fail("Invalid INN checksum (12th digit)")

    return OK


def validate_ogrn(ogrn: Any) -> FieldCheck:
    """Validate an OGRN (13 digits) or OGRNIP (15 digits) with its check digit."""
    if not ogrn:
        return _fail("OGRN must not be empty")

    cleaned = _WHITESPACE.sub("", str(ogrn))
    if not _OGRN_FORMAT.match(cleaned):
        return _fail("OGRN must have 13 (organisation) or 15 (sole proprietor) digits")

    divisor = 11 if len(cleaned) == 13 else 13
    expected = int(cleaned[:-1]) % divisor % 10
    if expected != int(cleaned[-1]):
        label = "OGRN" if len(cleaned) == 13 else "OGRNIP"
        return _fail(f"Invalid {label} checksum")

    return OK


def validate_snils(snils: Any) -> FieldCheck:
    """Validate a SNILS in ``XXX-XXX-XXX YY`` or plain 11-digit form."""
    if not snils:
        return _fail("SNILS must not be empty")

    cleaned = _SNILS_SEPARATORS.sub("", str(snils))
    if not _SNILS_FORMAT.match(cleaned):
        return _fail("SNILS must have 11 digits (format: XXX-XXX-XXX YY)")

    number = cleaned[:9]
    checksum = int(cleaned[9:])
    if int(number) < _SNILS_MIN_NUMBER:
        return _fail("SNILS number is out of the issued range")

    total = sum(int(d) * (9 - i) for i, d in enumerate(number))
    if total < 100:
        expected = total
    elif total in (100, 101):
        expected = 0
    else:
        expected = total % 101
        if expected == 100:
            expected = 0

    if expected != checksum:
        return _fail("Invalid SNILS checksum")
    return OK


def validate_kpp(kpp: Any) -> FieldCheck:
    """Validate a KPP: 4 digits, 2 digits or capital letters, 3 digits."""
    if not kpp:
        return _fail("KPP must not be empty")
    if not _KPP_FORMAT.match(_WHITESPACE.sub("", str(kpp))):
        return _fail("KPP must have 9 characters (format: NNNNPPNNN)")
    return OK


def validate_cadastral_number(cadastral: Any) -> FieldCheck:
    """Validate a land plot cadastral number ``AA:BB:CCCCCCC:DD``."""
    if not cadastral:
        return _fail("Cadastral number must not be empty")

    text = str(cadastral).strip()
    if not _CADASTRAL_FORMAT.match(text):
        return _fail("Invalid cadastral number format (expected: XX:YY:ZZZZZZZ:KKK)")

    region = text[:2]
    if region not in CADASTRAL_REGIONS:
        return _fail(f"Invalid region code: {region}")
    return OK


def validate_xml_id(value: Any) -> FieldCheck:
    """Validate an ``xs:ID`` value."""
    if not value:
        return _fail("ID must not be empty")
    if not _XML_ID_FORMAT.match(str(value)):
        return _fail('ID must start with a letter or "_" and contain only letters, digits, "_", "-", "."')
    return OK


def validate_year(year: Any) -> FieldCheck:
    """Validate a four-digit year between 1900 and 2100."""
    try:
        year_num = int(str(year).strip())
    except (TypeError, ValueError):
        return _fail("Year must be a number")

    if year_num < 1900 or year_num > 2100:
        return _fail("Year must be between 1900 and 2100")
    return OK


def validate_phone(phone: Any) -> FieldCheck:
    """Validate a Russian phone: +7XXXXXXXXXX, 8XXXXXXXXXX or 7XXXXXXXXXX."""
    if not phone:
        return _fail("Phone must not be empty")

    cleaned = _PHONE_SEPARATORS.sub("", str(phone))
    if not any(pattern.match(cleaned) for pattern in _PHONE_FORMATS):
        return _fail("Invalid phone format (expected: +7XXXXXXXXXX or 8XXXXXXXXXX)")
    return OK


def validate_email(email: Any) -> FieldCheck:
    if not email:
        return _fail("Email must not be empty")
    if not _EMAIL_FORMAT.match(str(email)):
        return _fail("Invalid email format")
    return OK


def _to_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        return float(str(value).strip().replace(",", "."))
    except (TypeError, ValueError):
        return None


def validate_decimal(value: Any, precision: int = 2,
                     minimum: Optional[float] = None,
                     maximum: Optional[float] = None) -> FieldCheck:
    """Validate a decimal number with at most ``precision`` fraction digits."""
    number = _to_float(value)
    if number is None or number != number:
        return _fail("Value must be a number")

    if minimum is not None and number < minimum:
        return _fail(f"Value must not be less than {minimum}")
    if maximum is not None and number > maximum:
        return _fail(f"Value must not be greater than {maximum}")

    text = str(value).strip().replace(",", ".")
    if "." in text and "e" not in text.lower():
        fraction = text.split(".", 1)[1].rstrip("0")
        if len(fraction) > precision:
            return _fail(f"At most {precision} digits after the decimal point")
    return OK


def validate_integer(value: Any, minimum: Optional[int] = None,
                     maximum: Optional[int] = None) -> FieldCheck:
    if isinstance(value, bool):
        return _fail("Value must be an integer")
    if isinstance(value, float):
        if not value.is_integer():
            return _fail("Value must be an integer")
        number = int(value)
    else:
        try:
            number = int(str(value).strip())
        except (TypeError, ValueError):
            return _fail("Value must be an integer")

    if minimum is not None and number < minimum:
        return _fail(f"Value must not be less than {minimum}")
    if maximum is not None and number > maximum:
        return _fail(f"Value must not be greater than {maximum}")
    return OK


FIELD_VALIDATORS: Dict[str, Callable[[Any], FieldCheck]] = {
    "inn": validate_inn,
    "ogrn": validate_ogrn,
    "snils": validate_snils,
    "kpp": validate_kpp,
    "cadastralNumber": validate_cadastral_number,
    "xmlId": validate_xml_id,
    "year": validate_year,
    "phone": validate_phone,
    "email": validate_email,
    "decimal": validate_decimal,
    "integer": validate_integer,
}


def validate_field(validator_name: str, value: Any) -> FieldCheck:
    """
    Run a named validator.

    Raises:
        KeyError: If no validator is registered under ``validator_name``
    """
    return FIELD_VALIDATORS[validator_name](value)
