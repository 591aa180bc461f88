#!/usr/bin/env python3
"""
Explanatory Note XML REST API

FastAPI service exposing the pz_core pipeline to the editor UI:

- Listing supported schema versions and their form sections
- Generating XML from form data
- Validating XML against the ministry XSDs
- Checking form data against field rules before generation

API Flow:
1. GET /api/v1/schemas/{version} - Fetch sections and fields to render the form
2. POST /api/v1/form/validate - Check identifiers and required fields
3. POST /api/v1/generate - Generate XML (optionally validated in the same call)
4. POST /api/v1/validate - Re-validate edited XML

Usage:
    # Start the API server
    uvicorn pz_editor.api:app --host 0.0.0.0 --port 8000

    # Or programmatically
    from pz_editor.api import create_app
    app = create_app()
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
import logging

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field

from pz_core import __version__
from pz_core.config.settings import PipelineConfig, get_config, validate_config
from pz_core.exceptions import (
    GenerationError,
    MissingRequiredFieldsError,
    SchemaStructureError,
    UnsupportedSchemaVersionError,
)
from pz_core.generator import XMLGenerator
from pz_core.mapping.form_schema import FormSchema, load_form_schema
from pz_core.validation.xsd_validator import XSDValidator

logger = logging.getLogger(__name__)


# ============================================================================
# REQUEST MODELS
# ============================================================================

class GenerateRequest(BaseModel):
    """Form data to turn into XML."""
    model_config = ConfigDict(populate_by_name=True)

    form_data: Dict[str, Any] = Field(default_factory=dict, alias="formData")
    schema_version: Optional[str] = Field(default=None, alias="schemaVersion",
                                          description="Defaults to the configured version")
    run_validation: bool = Field(default=True, alias="validate",
                                 description="Validate the generated XML against the XSD")


class ValidateRequest(BaseModel):
    """XML text to validate. Bad input is reported in the result, not rejected."""
    model_config = ConfigDict(populate_by_name=True)

    xml_content: Any = Field(default=None, alias="xmlContent")
    schema_version: Any = Field(default=None, alias="schemaVersion")


class FormValidateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    form_data: Dict[str, Any] = Field(default_factory=dict, alias="formData")
    schema_version: Optional[str] = Field(default=None, alias="schemaVersion")


def describe_schema(schema: FormSchema) -> Dict[str, Any]:
    """Sections and fields of a form schema, as the UI renders them."""
    return {
        "version": schema.version,
        "title": schema.title,
        "sections": [
            {
                "id": section.id,
                "title": section.title,
                "description": section.description,
                "fields": [f.to_dict() for f in schema.get_fields(section)],
            }
            for section in schema.get_sections()
        ],
        "requiredFields": schema.get_required_fields(),
    }


# ============================================================================
# APPLICATION
# ============================================================================

def create_app(config: Optional[PipelineConfig] = None) -> FastAPI:
    """Create and configure the FastAPI application."""

    config = config or get_config()
    generator = XMLGenerator(config)
    validator = XSDValidator(config.schema)

    app = FastAPI(
        title="Explanatory Note XML API",
        description="""
REST API for generating and validating Ministry of Construction
explanatory note XML (schema versions 01.03, 01.04, 01.05).

## Workflow

1. **Form**: `GET /api/v1/schemas/{version}` - Sections and fields
2. **Check**: `POST /api/v1/form/validate` - Field-level checks
3. **Generate**: `POST /api/v1/generate` - XML from form data
4. **Validate**: `POST /api/v1/validate` - XSD validation with line-level errors

Validation is advisory: invalid XML is still returned to the caller.
        """,
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def resolve_version(version: Optional[str]) -> str:
        return version or config.schema.default_version

    def get_form_schema(version: str) -> FormSchema:
        if version not in config.schema.supported_versions:
            raise HTTPException(status_code=404, detail=f"Unknown schema version: {version}")
        try:
            return load_form_schema(version, config.schema)
        except SchemaStructureError as e:
            raise HTTPException(status_code=404, detail=str(e))

    # ========================================================================
    # SCHEMA ENDPOINTS
    # ========================================================================

    @app.get("/api/v1/schemas", tags=["Schemas"])
    async def list_schemas():
        """List supported schema versions."""
        return {
            "versions": config.schema.supported_versions,
            "default": config.schema.default_version,
            "namespaces": {
                version: config.schema.namespaces.get(version)
                for version in config.schema.supported_versions
            },
        }

    @app.get("/api/v1/schemas/{version}", tags=["Schemas"])
    async def get_schema(version: str):
        """Get form sections and fields for a schema version."""
        return describe_schema(get_form_schema(version))

    # ========================================================================
    # GENERATION & VALIDATION ENDPOINTS
    # ========================================================================

    @app.post("/api/v1/generate", tags=["Generation"])
    async def generate(request: GenerateRequest):
        """
        Generate XML from form data.

        Returns the XML even when it fails validation.
        """
        try:
            result = generator.generate_result(request.form_data,
                                               resolve_version(request.schema_version))
        except UnsupportedSchemaVersionError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except MissingRequiredFieldsError as e:
            raise HTTPException(status_code=400, detail={"message": str(e), "missing": e.missing})
        except GenerationError as e:
            raise HTTPException(status_code=400, detail=str(e))

        response: Dict[str, Any] = {
            "xml": result.xml,
            "schemaVersion": result.schema_version,
            "missingRequired": result.missing_required,
        }
        if request.run_validation:
            response["validation"] = validator.validate(result.xml, result.schema_version).to_dict()
        return response

    @app.post("/api/v1/validate", tags=["Validation"])
    async def validate_xml(request: ValidateRequest):
        """Validate XML against the XSD for a schema version."""
        return validator.validate(request.xml_content, request.schema_version).to_dict()

    @app.post("/api/v1/form/validate", tags=["Validation"])
    async def validate_form(request: FormValidateRequest):
        """Check form data against required fields and field validators."""
        version = resolve_version(request.schema_version)
        errors: List[Dict[str, str]] = get_form_schema(version).validate_data(request.form_data)
        return {
            "valid": not errors,
            "errors": errors,
            "schemaVersion": version,
        }

    # ========================================================================
    # SYSTEM ENDPOINTS
    # ========================================================================

    @app.get("/api/v1/health", tags=["System"])
    async def health_check():
        """Health check; degraded when schema assets are missing."""
        problems = validate_config(config)
        return {
            "status": "degraded" if problems else "healthy",
            "problems": problems,
            "timestamp": datetime.now().isoformat(),
        }

    @app.get("/api/v1/info", tags=["System"])
    async def get_info():
        """Get API configuration and capabilities."""
        return {
            "name": "pz-xml",
            "version": __version__,
            "config": {
                "default_schema_version": config.schema.default_version,
                "supported_versions": config.schema.supported_versions,
                "strict_required": config.generation.strict_required,
            },
            "capabilities": {
                "generation": True,
                "xsd_validation": True,
                "form_validation": True,
            },
        }

    logger.info(f"API created (default schema {config.schema.default_version})")
    return app


# Create default app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
