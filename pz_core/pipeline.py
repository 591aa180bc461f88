"""
Document Pipeline
=================

Runs a stored document through generation and validation, writes the
outcome back onto the document and exports it to disk.

Persistence is the caller's job: the pipeline only reads ``content`` and
sets ``xml_content``, ``is_valid`` and ``updated_at``.
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional
import logging

from pz_core.config.settings import PipelineConfig, get_config
from pz_core.exceptions import GenerationError
from pz_core.generator import XMLGenerator
from pz_core.validation.base import ValidationResult
from pz_core.validation.xsd_validator import XSDValidator

logger = logging.getLogger(__name__)


@dataclass
class Document:
    """
    An explanatory note as held by the document store.

    Attributes:
        id: Store identifier
        title: Display title
        schema_version: Schema version the content was authored for
        content: Form data
        xml_content: Last generated XML (None until processed)
        is_valid: Result of the last validation (None until processed)
        updated_at: Time of the last write-back
    """
    id: str
    title: str = ""
    schema_version: str = "01.05"
    content: Dict[str, Any] = field(default_factory=dict)
    xml_content: Optional[str] = None
    is_valid: Optional[bool] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'title': self.title,
            'schema_version': self.schema_version,
            'content': self.content,
            'xml_content': self.xml_content,
            'is_valid': self.is_valid,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Document':
        updated_at = data.get('updated_at')
        if isinstance(updated_at, str):
            updated_at = datetime.fromisoformat(updated_at)
        return cls(
            id=str(data['id']),
            title=data.get('title', ""),
            schema_version=data.get('schema_version', "01.05"),
            content=data.get('content') or {},
            xml_content=data.get('xml_content'),
            is_valid=data.get('is_valid'),
            updated_at=updated_at,
        )


@dataclass
class PipelineResult:
    """Outcome of processing one document."""

    document_id: str
    xml: str
    missing_required: List[str] = field(default_factory=list)
    validation: Optional[ValidationResult] = None

    @property
    def is_valid(self) -> Optional[bool]:
        return self.validation.valid if self.validation else None

    def to_dict(self) -> dict:
        return {
            'documentId': self.document_id,
            'xml': self.xml,
            'missingRequired': list(self.missing_required),
            'validation': self.validation.to_dict() if self.validation else None,
        }


class ExplanatoryNotePipeline:
    """
    Generate, validate and export explanatory note documents.

    Example:
        pipeline = ExplanatoryNotePipeline()
        result = pipeline.process(document)
        if result.is_valid:
            pipeline.export(document)
        else:
            print(result.validation.summary())
    """

    def __init__(self, config: Optional[PipelineConfig] = None,
                 generator: Optional[XMLGenerator] = None,
                 validator: Optional[XSDValidator] = None):
        self.config = config or get_config()
        self.generator = generator or XMLGenerator(self.config)
        self.validator = validator or XSDValidator(self.config.schema)

    def process(self, document: Document, validate: bool = True) -> PipelineResult:
        """
        Generate XML for a document and write the outcome back onto it.

        Invalid XML is still stored on the document; validation is advisory.
        """
        generated = self.generator.generate_result(document.content, document.schema_version)
        result = PipelineResult(
            document_id=document.id,
            xml=generated.xml,
            missing_required=generated.missing_required,
        )

        if validate:
            result.validation = self.validator.validate(generated.xml, generated.schema_version)
            if not result.validation.valid:
                logger.warning(
                    f"Document {document.id} failed validation: "
                    f"{result.validation.error_count} error(s)"
                )

        document.xml_content = generated.xml
        document.is_valid = result.is_valid
        document.updated_at = datetime.now()

        logger.info(f"Processed document {document.id} (schema {generated.schema_version})")
        return result

    def export_path(self, document: Document, output_dir: Optional[Path] = None) -> Path:
        directory = Path(output_dir) if output_dir else Path(self.config.export.output_dir)
        return directory / self.config.export.file_pattern.format(
            document_id=document.id,
            schema_version=document.schema_version,
        )

    def export(self, document: Document, output_dir: Optional[Path] = None,
               require_valid: bool = False) -> Path:
        """
        Write the document's XML to a file.

        Raises:
            GenerationError: If the document has no XML yet, or if
                ``require_valid`` is set and the document is not valid
        """
        if not document.xml_content:
            raise GenerationError(f"Document {document.id} has no generated XML")

        if document.is_valid is False:
            if require_valid:
                raise GenerationError(f"Document {document.id} is not valid; export refused")
            logger.warning(f"Exporting document {document.id} that failed validation")

        path = self.export_path(document, output_dir)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding=self.config.export.encoding) as f:
            f.write(document.xml_content)

        logger.info(f"Exported document {document.id} to {path}")
        return path
