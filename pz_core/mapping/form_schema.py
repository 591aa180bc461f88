"""
Form Schema
===========

Reads the form half of the per-version JSON schema: sections, field
definitions and required fields. Also checks form data against required
fields and named field validators before XML generation.

Unlike mapping loading, form schema loading is strict: a structurally
broken schema raises ``SchemaStructureError`` because no form can be
rendered from it.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import logging

from pz_core.cache import VersionCache
from pz_core.config.settings import SchemaConfig
from pz_core.exceptions import SchemaStructureError
from pz_core.mapping.loader import read_schema_document
from pz_core.validation.fields import FIELD_VALIDATORS
from pz_core.xml.paths import get_path, is_empty_value

logger = logging.getLogger(__name__)

# maxLength above which a text field is rendered as a textarea
TEXTAREA_MIN_LENGTH = 500


@dataclass
class FormField:
    """A single form field parsed from a schema property."""

    id: str
    label: str
    type: str
    required: bool = False
    default: Any = ""
    validation: Optional[str] = None
    pattern: Optional[str] = None
    format: Optional[str] = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    enum: Optional[List[Any]] = None
    properties: Optional[Dict[str, Any]] = None
    field_type: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "label": self.label,
            "type": self.type,
            "required": self.required,
            "default": self.default,
            "validation": self.validation,
            "pattern": self.pattern,
            "format": self.format,
            "minLength": self.min_length,
            "maxLength": self.max_length,
            "minimum": self.minimum,
            "maximum": self.maximum,
            "enum": self.enum,
            "fieldType": self.field_type,
        }


@dataclass
class FormSection:
    """A top-level object property of the form schema."""

    id: str
    title: str
    description: str = ""
    properties: Dict[str, Any] = field(default_factory=dict)
    required: List[str] = field(default_factory=list)


def derive_field_type(definition: dict) -> str:
    """
    Determine the widget type for a field definition.

    Order matters: rich text wins over everything, enums become selects,
    long strings become textareas.
    """
    if definition.get("fieldType") == "richtext":
        return "richtext"
    if isinstance(definition.get("enum"), list):
        return "select"

    json_type = definition.get("type")
    if json_type == "object":
        return "object"
    if json_type == "array":
        return "array"
    if json_type == "boolean":
        return "checkbox"
    if definition.get("format") == "email":
        return "email"
    if json_type in ("number", "integer"):
        return "number"
    if definition.get("format") == "date":
        return "date"
    max_length = definition.get("maxLength")
    if max_length and max_length > TEXTAREA_MIN_LENGTH:
        return "textarea"
    return "text"


def parse_field(key: str, definition: dict, required_fields: Optional[List[str]] = None) -> FormField:
    required = required_fields if isinstance(required_fields, list) else []
    return FormField(
        id=key,
        label=definition.get("title") or key,
        type=derive_field_type(definition),
        required=key in required,
        default=definition.get("default", ""),
        validation=definition.get("validation"),
        pattern=definition.get("pattern"),
        format=definition.get("format"),
        min_length=definition.get("minLength"),
        max_length=definition.get("maxLength"),
        minimum=definition.get("minimum"),
        maximum=definition.get("maximum"),
        enum=definition.get("enum"),
        properties=definition.get("properties"),
        field_type=definition.get("fieldType"),
    )


class FormSchema:
    """
    Parsed JSON form schema for one schema version.

    Example:
        schema = FormSchema.load("01.05")
        for section in schema.get_sections():
            for form_field in schema.get_fields(section):
                print(section.id, form_field.id, form_field.type)
    """

    def __init__(self, document: dict):
        self.validate_structure(document)
        self.document = document
        self.version: str = document["version"]
        self.title: str = document.get("title", "")

    @staticmethod
    def validate_structure(document: Any) -> None:
        """
        Check mandatory schema properties.

        Raises:
            SchemaStructureError: If the document is not a usable form schema
        """
        if not isinstance(document, dict):
            raise SchemaStructureError("Schema must be an object")
        if not document.get("$schema"):
            raise SchemaStructureError("Schema must have $schema property")
        if not document.get("version"):
            raise SchemaStructureError("Schema must have version property")
        if not isinstance(document.get("properties"), dict):
            raise SchemaStructureError("Schema must have properties object")

    @classmethod
    def load(cls, version: str, schema_config: Optional[SchemaConfig] = None) -> 'FormSchema':
        """
        Load the form schema for a version.

        Raises:
            SchemaStructureError: If the file is missing, unreadable or malformed
        """
        if not version:
            raise SchemaStructureError("Schema version is required")
        schema_config = schema_config or SchemaConfig()
        path = schema_config.mapping_file(version)
        try:
            document = read_schema_document(path)
        except (OSError, ValueError) as e:
            raise SchemaStructureError(f"Failed to load schema {version}: {e}")
        schema = cls(document)
        logger.info(f"Schema structure validated: version {schema.version}")
        return schema

    @property
    def properties(self) -> Dict[str, Any]:
        return self.document["properties"]

    def get_sections(self) -> List[FormSection]:
        sections = []
        for key, value in self.properties.items():
            if isinstance(value, dict) and value.get("type") == "object":
                sections.append(FormSection(
                    id=key,
                    title=value.get("title") or key,
                    description=value.get("description", ""),
                    properties=value.get("properties") or {},
                    required=value.get("required") or [],
                ))
        return sections

    def get_section(self, section_id: str) -> Optional[FormSection]:
        for section in self.get_sections():
            if section.id == section_id:
                return section
        return None

    def get_fields(self, section: FormSection) -> List[FormField]:
        return [
            parse_field(key, definition, section.required)
            for key, definition in section.properties.items()
            if isinstance(definition, dict)
        ]

    def get_required_fields(self) -> List[str]:
        """Dotted paths of required fields, including nested object fields."""
        required = []
        for section_key, section in self.properties.items():
            if not isinstance(section, dict):
                continue
            for field_key in section.get("required") or []:
                required.append(f"{section_key}.{field_key}")

            for field_key, definition in (section.get("properties") or {}).items():
                if isinstance(definition, dict) and definition.get("type") == "object":
                    for nested_key in definition.get("required") or []:
                        required.append(f"{section_key}.{field_key}.{nested_key}")
        return required

    def _validated_fields(self):
        """Yield (dotted path, validator name) for fields carrying a validator."""
        for section_key, section in self.properties.items():
            if not isinstance(section, dict):
                continue
            for field_key, definition in (section.get("properties") or {}).items():
                if not isinstance(definition, dict):
                    continue
                if definition.get("validation"):
                    yield f"{section_key}.{field_key}", definition["validation"]
                for nested_key, nested in (definition.get("properties") or {}).items():
                    if isinstance(nested, dict) and nested.get("validation"):
                        yield f"{section_key}.{field_key}.{nested_key}", nested["validation"]

    def _array_item_rules(self):
        """Yield (dotted path, item definition) for arrays of objects."""
        for section_key, section in self.properties.items():
            if not isinstance(section, dict):
                continue
            for field_key, definition in (section.get("properties") or {}).items():
                if not isinstance(definition, dict) or definition.get("type") != "array":
                    continue
                items = definition.get("items")
                if isinstance(items, dict) and items.get("properties"):
                    yield f"{section_key}.{field_key}", items

    def _check_value(self, path: str, validator_name: str,
                     value: Any) -> Optional[Dict[str, str]]:
        validator = FIELD_VALIDATORS.get(validator_name)
        if validator is None:
            logger.warning(f"Unknown field validator '{validator_name}' for {path}")
            return None
        check = validator(value)
        if check.valid:
            return None
        return {"path": path, "type": validator_name, "message": check.error}

    def _validate_items(self, path: str, items: dict, value: Any) -> List[Dict[str, str]]:
        """Check each object of a repeated field; paths carry the item index."""
        errors: List[Dict[str, str]] = []
        if not isinstance(value, (list, tuple)):
            return errors

        for index, item in enumerate(value):
            item_path = f"{path}.{index}"
            if not isinstance(item, dict):
                errors.append({"path": item_path, "type": "type", "message": "Item must be an object"})
                continue

            for key in items.get("required") or []:
                if is_empty_value(item.get(key)):
                    errors.append({"path": f"{item_path}.{key}", "type": "required",
                                   "message": "Required field is empty"})

            for key, definition in items["properties"].items():
                if not isinstance(definition, dict) or not definition.get("validation"):
                    continue
                if is_empty_value(item.get(key)):
                    continue
                error = self._check_value(f"{item_path}.{key}", definition["validation"], item[key])
                if error:
                    errors.append(error)
        return errors

    def validate_data(self, form_data: dict) -> List[Dict[str, str]]:
        """
        Check form data against required fields and field validators.

        Objects inside repeated fields are checked one by one and reported
        with their index, e.g. ``documentation.signers.1.FirstName``.

        Returns:
            List of ``{"path", "type", "message"}`` dicts (empty if valid)
        """
        errors = []

        for path in self.get_required_fields():
            if is_empty_value(get_path(form_data, path)):
                errors.append({"path": path, "type": "required", "message": "Required field is empty"})

        for path, validator_name in self._validated_fields():
            value = get_path(form_data, path)
            if is_empty_value(value):
                continue
            error = self._check_value(path, validator_name, value)
            if error:
                errors.append(error)

        for path, items in self._array_item_rules():
            errors.extend(self._validate_items(path, items, get_path(form_data, path)))

        return errors


_form_cache: VersionCache[FormSchema] = VersionCache("form-schema")


def load_form_schema(version: str, schema_config: Optional[SchemaConfig] = None) -> FormSchema:
    """Load a form schema through the process-wide cache."""
    return _form_cache.get_or_load(version, lambda v: FormSchema.load(v, schema_config))


def clear_form_cache(version: Optional[str] = None) -> None:
    _form_cache.clear(version)
