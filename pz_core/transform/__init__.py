"""
Value Transformation
====================

Pure value transforms applied by mapping rules before values are written
into the XML tree.
"""

from pz_core.transform.values import (
    TransformerKind,
    apply_transformer,
    format_date,
    format_decimal,
    normalize_phone,
    richtext_to_plaintext,
)

__all__ = [
    "TransformerKind",
    "apply_transformer",
    "format_date",
    "format_decimal",
    "normalize_phone",
    "richtext_to_plaintext",
]
