"""
Schema Mapping Module
=====================

Mapping rules (JSON path -> XML path), the per-version mapping loader with
its built-in fallback, and the JSON form schema reader.
"""

from pz_core.mapping.rules import (
    MappingRule,
    SchemaMapping,
)

from pz_core.mapping.loader import (
    MappingLoader,
    default_rules,
    get_loader,
    reset_loader,
    load_mapping,
)

from pz_core.mapping.form_schema import (
    FormSchema,
    FormSection,
    FormField,
    derive_field_type,
    load_form_schema,
    clear_form_cache,
)

__all__ = [
    "MappingRule",
    "SchemaMapping",
    "MappingLoader",
    "default_rules",
    "get_loader",
    "reset_loader",
    "load_mapping",
    "FormSchema",
    "FormSection",
    "FormField",
    "derive_field_type",
    "load_form_schema",
    "clear_form_cache",
]
