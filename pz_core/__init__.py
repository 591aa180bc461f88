"""
PZ Core Library
===============

XML generation, validation and mapping for Russian Ministry of
Construction explanatory notes ("ПЗ"), schema versions 01.03 to 01.05.

Architecture
------------

    pz_core/
    ├── mapping/       - Mapping rules, mapping loader, JSON form schema
    ├── transform/     - Value transformers (dates, decimals, phones, rich text)
    ├── xml/           - Path resolver, tree builder, serializer, XML helpers
    ├── validation/    - XSD validation and field validators
    ├── config/        - Configuration management
    ├── schemas/       - Bundled JSON schemas and ministry XSDs
    ├── generator.py   - Generation facade
    └── pipeline.py    - Document generate/validate/export pipeline

Usage
-----

    from pz_core import XMLGenerator, XSDValidator

    generator = XMLGenerator()
    xml_text = generator.generate(form_data, "01.05")

    result = XSDValidator().validate(xml_text, "01.05")
    if not result.valid:
        print(result.summary())

"""

__version__ = "1.0.0"
__author__ = "PZ Editor Team"

from pz_core.exceptions import (
    PZError,
    MappingError,
    SchemaStructureError,
    UnsupportedSchemaVersionError,
    MissingRequiredFieldsError,
    GenerationError,
)

from pz_core.config.settings import (
    PipelineConfig,
    SchemaConfig,
    GenerationConfig,
    ExportConfig,
    load_config,
    save_config,
    get_config,
    set_config,
)

from pz_core.mapping import (
    MappingRule,
    SchemaMapping,
    MappingLoader,
    load_mapping,
    FormSchema,
    load_form_schema,
)

from pz_core.transform import (
    TransformerKind,
    apply_transformer,
)

from pz_core.xml import (
    TreeBuilder,
    XMLSerializer,
    AttributedValue,
)

from pz_core.validation import (
    ValidationResult,
    ErrorType,
    XSDValidator,
    validate,
    validate_field,
)

from pz_core.generator import (
    XMLGenerator,
    GenerationResult,
    generate_xml,
)

from pz_core.pipeline import (
    Document,
    ExplanatoryNotePipeline,
    PipelineResult,
)

__all__ = [
    # Version info
    "__version__",
    # Errors
    "PZError",
    "MappingError",
    "SchemaStructureError",
    "UnsupportedSchemaVersionError",
    "MissingRequiredFieldsError",
    "GenerationError",
    # Config
    "PipelineConfig",
    "SchemaConfig",
    "GenerationConfig",
    "ExportConfig",
    "load_config",
    "save_config",
    "get_config",
    "set_config",
    # Mapping
    "MappingRule",
    "SchemaMapping",
    "MappingLoader",
    "load_mapping",
    "FormSchema",
    "load_form_schema",
    # Transform
    "TransformerKind",
    "apply_transformer",
    # XML
    "TreeBuilder",
    "XMLSerializer",
    "AttributedValue",
    # Validation
    "ValidationResult",
    "ErrorType",
    "XSDValidator",
    "validate",
    "validate_field",
    # Generation
    "XMLGenerator",
    "GenerationResult",
    "generate_xml",
    # Pipeline
    "Document",
    "ExplanatoryNotePipeline",
    "PipelineResult",
]
