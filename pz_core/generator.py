"""
XML Generator
=============

Facade tying the pipeline stages together for one schema version:

    mapping loader -> tree builder -> serializer

Usage:
    from pz_core.generator import XMLGenerator

    generator = XMLGenerator()
    xml_text = generator.generate(form_data, "01.05")
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional
import logging

from pz_core.config.settings import PipelineConfig, get_config
from pz_core.exceptions import (
    GenerationError,
    MissingRequiredFieldsError,
    UnsupportedSchemaVersionError,
)
from pz_core.mapping.loader import MappingLoader
from pz_core.xml.serializer import XMLSerializer
from pz_core.xml.tree_builder import TreeBuilder

logger = logging.getLogger(__name__)

# Placeholder content for a document that has not been filled in yet
PLACEHOLDER_DATA = {
    "generalInfo": {
        "documentNumber": "Не указан",
        "projectName": "Новый документ",
    },
    "contractor": {"name": "Не указано"},
    "designer": {"name": "Не указано"},
}


@dataclass
class GenerationResult:
    """Generated XML plus what the build had to skip."""

    xml: str
    schema_version: str
    namespace: str
    missing_required: List[str] = field(default_factory=list)
    used_default_mapping: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'xml': self.xml,
            'schemaVersion': self.schema_version,
            'namespace': self.namespace,
            'missingRequired': list(self.missing_required),
            'usedDefaultMapping': self.used_default_mapping,
        }


class XMLGenerator:
    """
    Generates explanatory note XML from form data.

    Missing required fields are logged and reported in the result. With
    ``generation.strict_required`` enabled they raise instead.

    Example:
        generator = XMLGenerator()
        result = generator.generate_result(form_data, "01.05")
        if result.missing_required:
            print("Missing:", ", ".join(result.missing_required))
        Path("note.xml").write_text(result.xml, encoding="utf-8")
    """

    def __init__(self, config: Optional[PipelineConfig] = None,
                 loader: Optional[MappingLoader] = None):
        self.config = config or get_config()
        self.loader = loader or MappingLoader(self.config.schema)
        self.builder = TreeBuilder()
        self.serializer = XMLSerializer(indent=self.config.generation.indent)

    @property
    def supported_versions(self) -> List[str]:
        return sorted(self.config.schema.namespaces.keys())

    def resolve_version(self, schema_version: Optional[str]) -> str:
        """
        Return the version to generate for, defaulting from configuration.

        Raises:
            UnsupportedSchemaVersionError: If the version has no namespace
        """
        version = schema_version or self.config.schema.default_version
        if version not in self.config.schema.namespaces:
            raise UnsupportedSchemaVersionError(version, self.supported_versions)
        return version

    def generate(self, form_data: dict, schema_version: Optional[str] = None) -> str:
        return self.generate_result(form_data, schema_version).xml

    def generate_result(self, form_data: dict,
                        schema_version: Optional[str] = None) -> GenerationResult:
        """
        Generate XML and report missing required fields.

        Raises:
            GenerationError: If form data is not an object
            UnsupportedSchemaVersionError: If the version has no namespace
            MissingRequiredFieldsError: In strict mode, if required fields are empty
        """
        if not isinstance(form_data, dict):
            raise GenerationError(
                f"Form data must be an object, got {type(form_data).__name__}"
            )

        version = self.resolve_version(schema_version)
        mapping = self.loader.load_mapping(version)

        build = self.builder.build_result(form_data, mapping)
        if build.missing_required and self.config.generation.strict_required:
            raise MissingRequiredFieldsError(build.missing_required)

        xml_text = self.serializer.serialize(build.tree, mapping.namespace, version)
        logger.info(
            f"Generated XML for schema {version}: {len(xml_text)} chars, "
            f"{build.rules_applied} fields"
        )

        return GenerationResult(
            xml=xml_text,
            schema_version=version,
            namespace=mapping.namespace,
            missing_required=build.missing_required,
            used_default_mapping=mapping.is_default,
        )

    def minimal_xml(self, schema_version: Optional[str] = None) -> str:
        """
        Generate a placeholder document containing only the minimum fields.

        Uses the built-in default mapping regardless of the mapping file.
        """
        version = self.resolve_version(schema_version)
        mapping = self.loader.default_mapping(version)

        data = {section: dict(values) for section, values in PLACEHOLDER_DATA.items()}
        data["generalInfo"]["documentDate"] = date.today()

        tree = self.builder.build(data, mapping)
        return self.serializer.serialize(tree, mapping.namespace, version)


def generate_xml(form_data: dict, schema_version: Optional[str] = None) -> str:
    """Generate XML with a generator built from the global configuration."""
    return XMLGenerator().generate(form_data, schema_version)
