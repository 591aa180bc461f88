"""
Value Transformers
==================

Pure, side-effect-free value transforms referenced by name from mapping
rules. The set of transformers is closed: ``TransformerKind`` enumerates
every supported transform and ``apply_transformer`` dispatches over it.
"""

from datetime import date, datetime
from enum import Enum
from typing import Any, Optional
import logging
import re

logger = logging.getLogger(__name__)

_LEADING_FLOAT = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")
_NON_DIGITS = re.compile(r"\D")
_BR_TAG = re.compile(r"<br\s*/?>", re.IGNORECASE)
_P_CLOSE_TAG = re.compile(r"</p>", re.IGNORECASE)
_ANY_TAG = re.compile(r"<[^>]+>")
_EXCESS_NEWLINES = re.compile(r"\n{3,}")

# Accepted textual date layouts besides ISO 8601
_DATE_FORMATS = ("%d.%m.%Y", "%Y/%m/%d", "%d/%m/%Y")


class TransformerKind(str, Enum):
    """Supported value transformers, named as in mapping files."""

    FORMAT_DATE = "formatDate"
    FORMAT_DECIMAL = "formatDecimal"
    NORMALIZE_PHONE = "normalizePhone"
    RICHTEXT_TO_PLAINTEXT = "richtextToPlaintext"

    @classmethod
    def names(cls):
        return [kind.value for kind in cls]


def _parse_date_string(text: str) -> Optional[date]:
    text = text.strip()
    if not text:
        return None

    iso = text[:-1] + "+00:00" if text.endswith("Z") else text
    try:
        parsed = datetime.fromisoformat(iso)
        return parsed.date()
    except ValueError:
        pass

    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def format_date(value: Any) -> str:
    """
    Format a date-like value as ``YYYY-MM-DD``.

    Accepts ``date``/``datetime`` objects, ISO 8601 strings (with or without
    a time part) and ``DD.MM.YYYY``. Returns "" for falsy or unparsable input.

    Example:
        >>> format_date("2025-03-01T10:15:00Z")
        '2025-03-01'
        >>> format_date("01.03.2025")
        '2025-03-01'
    """
    if not value:
        return ""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()

    parsed = _parse_date_string(str(value))
    if parsed is None:
        logger.warning(f"Could not parse date value: {value!r}")
        return ""
    return parsed.isoformat()


def format_decimal(value: Any) -> str:
    """
    Format a number with exactly two decimals.

    Strings are parsed by their leading numeric prefix and a decimal comma
    is accepted. Returns "" when nothing numeric can be read.

    Example:
        >>> format_decimal("1234,5")
        '1234.50'
        >>> format_decimal("abc")
        ''
    """
    if value is None or isinstance(value, bool):
        return ""
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip().replace(" ", "").replace(",", ".")
        match = _LEADING_FLOAT.match(text)
        if not match:
            return ""
        number = float(match.group(0))

    if number != number or number in (float("inf"), float("-inf")):
        return ""
    return f"{number:.2f}"


def normalize_phone(value: Any) -> str:
    """
    Normalize a Russian phone number to ``+7 (XXX) XXX-XX-XX``.

    Eleven-digit numbers starting with 7, or with the domestic trunk
    prefix 8, are reformatted. Anything else is returned unchanged.

    Example:
        >>> normalize_phone("8 (999) 123-45-67")
        '+7 (999) 123-45-67'
        >>> normalize_phone("12345")
        '12345'
    """
    if not value:
        return ""
    text = str(value)
    digits = _NON_DIGITS.sub("", text)
    if len(digits) == 11 and digits[0] in ("7", "8"):
        return f"+7 ({digits[1:4]}) {digits[4:7]}-{digits[7:9]}-{digits[9:]}"
    return text


def richtext_to_plaintext(value: Any) -> str:
    """
    Convert rich-text HTML from the form editor into plain text.

    Line breaks and paragraph ends become newlines, remaining tags are
    removed and the basic entities are decoded with ``&amp;`` last, so a
    literal ``&amp;lt;`` stays ``&lt;`` instead of turning into ``<``.

    Example:
        >>> richtext_to_plaintext("<p>A &amp; B</p><p>C</p>")
        'A & B\\nC'
    """
    if not value or not isinstance(value, str):
        return ""

    text = _BR_TAG.sub("\n", value)
    text = _P_CLOSE_TAG.sub("\n", text)
    text = _ANY_TAG.sub("", text)
    text = (text
            .replace("&nbsp;", " ")
            .replace("&lt;", "<")
            .replace("&gt;", ">")
            .replace("&amp;", "&"))
    text = _EXCESS_NEWLINES.sub("\n\n", text)
    return text.strip()


def apply_transformer(kind: Optional[TransformerKind], value: Any) -> Any:
    """
    Apply a transformer to a value; None means identity.

    Raises:
        ValueError: If ``kind`` is not a TransformerKind member
    """
    if kind is None:
        return value
    if kind is TransformerKind.FORMAT_DATE:
        return format_date(value)
    if kind is TransformerKind.FORMAT_DECIMAL:
        return format_decimal(value)
    if kind is TransformerKind.NORMALIZE_PHONE:
        return normalize_phone(value)
    if kind is TransformerKind.RICHTEXT_TO_PLAINTEXT:
        return richtext_to_plaintext(value)
    raise ValueError(f"Unknown transformer: {kind!r}")
