"""
XSD Validator Tests

Run with: pytest tests/test_xsd_validator.py -v
"""

import shutil

import pytest

from pz_core.config.settings import PACKAGE_SCHEMAS_DIR, SchemaConfig
from pz_core.generator import XMLGenerator
from pz_core.validation import ErrorType, ValidationResult, XSDValidator, validate

NS_05 = "http://minstroyrf.gov.ru/schemas/explanatorynote/01.05"

SCHEMA_VIOLATING_XML = f"""<?xml version="1.0" encoding="UTF-8"?>
<ExplanatoryNote xmlns="{NS_05}" SchemaVersion="01.05">
  <GeneralInfo>
    <DocNumber>ПЗ-1</DocNumber>
  </GeneralInfo>
  <ObjectInfo>
    <ObjectName>Дом</ObjectName>
    <ObjectType>Spaceship</ObjectType>
  </ObjectInfo>
</ExplanatoryNote>
"""


@pytest.fixture
def validator():
    return XSDValidator()


@pytest.fixture
def valid_xml(form_data, config):
    return XMLGenerator(config).generate(form_data, "01.05")


class TestInputCheck:
    """Tests for the input stage."""

    @pytest.mark.parametrize("xml_text", ["", "   ", None, 42])
    def test_bad_xml_input(self, validator, xml_text):
        """Empty or non-string XML is an input error."""
        result = validator.validate(xml_text, "01.05")
        assert not result.valid
        assert [e["type"] for e in result.errors] == [ErrorType.INPUT]
        assert result.schema_version == "01.05"

    @pytest.mark.parametrize("version", ["", None, 1.05])
    def test_bad_version_input(self, validator, valid_xml, version):
        """A missing or non-string version is an input error."""
        result = validator.validate(valid_xml, version)
        assert not result.valid
        assert result.errors[0]["type"] == ErrorType.INPUT
        assert result.schema_version is None

    def test_boundary_shape(self, validator):
        """to_dict renders the {valid, errors, schemaVersion} contract."""
        data = validator.validate("", "01.05").to_dict()
        assert data["valid"] is False
        assert data["schemaVersion"] == "01.05"
        assert data["errors"][0]["type"] == "input_error"
        assert {"type", "message", "line", "column"} <= set(data["errors"][0])


class TestSchemaResolution:
    """Tests for version to XSD resolution."""

    def test_unsupported_version(self, validator, valid_xml):
        """An unregistered version names the supported ones."""
        result = validator.validate(valid_xml, "99.99")
        assert not result.valid
        assert result.errors[0]["type"] == ErrorType.VALIDATOR
        assert result.errors[0]["message"] == (
            "Unsupported schema version: 99.99. Supported versions: 01.03, 01.04, 01.05"
        )

    def test_01_04_shares_01_05_xsd(self, validator):
        """01.04 resolves to the 01.05 XSD file."""
        assert validator.schema_path("01.04") == validator.schema_path("01.05")

    def test_missing_xsd_file(self, tmp_path, valid_xml):
        """A registered version whose XSD is gone reports a schema error."""
        shutil.copytree(PACKAGE_SCHEMAS_DIR / "json", tmp_path / "json")
        validator = XSDValidator(SchemaConfig(schemas_dir=str(tmp_path)))
        result = validator.validate(valid_xml, "01.05")
        assert result.errors[0]["type"] == ErrorType.SCHEMA

    def test_broken_xsd(self, tmp_path, valid_xml):
        """An unparsable XSD is a schema error."""
        xsd_dir = tmp_path / "ministry" / "pz-01.05"
        xsd_dir.mkdir(parents=True)
        (xsd_dir / "explanatorynote-01-05.xsd").write_text("<xs:schema", encoding="utf-8")
        validator = XSDValidator(SchemaConfig(schemas_dir=str(tmp_path)))
        result = validator.validate(valid_xml, "01.05")
        assert not result.valid
        assert result.errors[0]["type"] == ErrorType.SCHEMA

    def test_xsd_text_is_cached(self, tmp_path, valid_xml):
        """XSD text is read once until the cache is cleared."""
        shutil.copytree(PACKAGE_SCHEMAS_DIR / "ministry", tmp_path / "ministry")
        validator = XSDValidator(SchemaConfig(schemas_dir=str(tmp_path)))
        assert validator.validate(valid_xml, "01.05").valid

        shutil.rmtree(tmp_path / "ministry")
        assert validator.validate(valid_xml, "01.05").valid

        validator.clear_cache()
        assert validator.validate(valid_xml, "01.05").errors[0]["type"] == ErrorType.SCHEMA


class TestValidation:
    """Tests for parsing and schema validation."""

    def test_valid_document(self, validator, valid_xml):
        """Generated XML for the sample form is valid."""
        result = validator.validate(valid_xml, "01.05")
        assert result.valid, result.summary()
        assert result.errors == []

    def test_malformed_xml(self, validator):
        """A parse error carries its line and column."""
        result = validator.validate("<ExplanatoryNote><Open></ExplanatoryNote>", "01.05")
        assert not result.valid
        error = result.errors[0]
        assert error["type"] == ErrorType.XML_PARSE
        assert error["line"] == 1
        assert error["column"] is not None

    def test_schema_violations_listed(self, validator):
        """Each violation has a line, a level and a message."""
        result = validator.validate(SCHEMA_VIOLATING_XML, "01.05")
        assert not result.valid
        assert len(result.errors) >= 1
        assert all(e["type"] == ErrorType.VALIDATION for e in result.errors)
        first = result.errors[0]
        assert first["line"] > 1
        assert first["level"] == "error"
        assert first["message"]

    def test_every_violation_reported(self, validator):
        """Missing DocDate and the bad ObjectType are both reported."""
        result = validator.validate(SCHEMA_VIOLATING_XML, "01.05")
        messages = " ".join(e["message"] for e in result.errors)
        assert "DocDate" in messages
        assert "Spaceship" in messages or "ObjectType" in messages

    def test_01_03_document(self, validator, form_data, config):
        """01.03 XML validates against the conclusion XSD."""
        xml_text = XMLGenerator(config).generate(form_data, "01.03")
        result = validator.validate(xml_text, "01.03")
        assert result.valid, result.summary()

    def test_namespace_mismatch(self, validator, valid_xml):
        """A 01.05 document does not validate against the 01.03 XSD."""
        assert not validator.validate(valid_xml, "01.03").valid

    def test_internal_fault_reported(self, validator, valid_xml, monkeypatch):
        """Unexpected exceptions become validator errors with a stack."""
        def explode(version):
            raise RuntimeError("boom")

        monkeypatch.setattr(validator, "load_schema_text", explode)
        result = validator.validate(valid_xml, "01.05")
        assert not result.valid
        assert result.errors[0]["type"] == ErrorType.VALIDATOR
        assert "boom" in result.errors[0]["message"]
        assert "RuntimeError" in result.errors[0]["stack"]

    def test_module_level_validate(self, valid_xml):
        """The module-level validate uses the shared validator."""
        assert validate(valid_xml, "01.05").valid


class TestValidateFile:
    """Tests for file validation."""

    def test_validate_file(self, validator, valid_xml, tmp_path):
        """A file on disk validates like text."""
        path = tmp_path / "note.xml"
        path.write_text(valid_xml, encoding="utf-8")
        assert validator.validate_file(path, "01.05").valid

    def test_missing_file(self, validator, tmp_path):
        """A missing file is an input error."""
        result = validator.validate_file(tmp_path / "missing.xml", "01.05")
        assert not result.valid
        assert result.errors[0]["type"] == ErrorType.INPUT


class TestValidationResult:
    """Tests for the result container."""

    def test_add_error_marks_invalid(self):
        """add_error records the entry and flips valid."""
        result = ValidationResult(schema_version="01.05")
        assert result.valid
        result.add_error(ErrorType.VALIDATION, "bad", line=3, column=7, level="error")
        assert not result.valid
        assert result.errors == [{
            "type": "validation_error", "message": "bad", "line": 3, "column": 7, "level": "error",
        }]

    def test_merge_and_counts(self):
        """Merging carries errors over; counts group them by type."""
        first = ValidationResult()
        second = ValidationResult()
        second.add_error(ErrorType.VALIDATION, "a")
        second.add_error(ErrorType.VALIDATION, "b")
        first.merge(second)
        assert not first.valid
        assert first.get_errors_by_type() == {"validation_error": 2}

    def test_summary(self):
        """The summary says PASSED or FAILED with error types."""
        result = ValidationResult(schema_version="01.05")
        assert "PASSED" in result.summary()
        result.add_error(ErrorType.XML_PARSE, "broken", line=2)
        summary = result.summary()
        assert "FAILED" in summary
        assert "xml_parse_error" in summary
