"""
REST API Tests

Run with: pytest tests/test_api.py -v
"""

import pytest
from fastapi.testclient import TestClient

from pz_core.config.settings import PipelineConfig
from pz_editor.api import create_app


@pytest.fixture
def client():
    return TestClient(create_app(PipelineConfig()))


class TestSystemEndpoints:
    """Tests for health and info."""

    def test_health(self, client):
        """Health reports healthy with the bundled schemas."""
        response = client.get("/api/v1/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["problems"] == []
        assert "timestamp" in data

    def test_health_degraded(self, tmp_path):
        """Missing schema assets make the service degraded."""
        config = PipelineConfig()
        config.schema.schemas_dir = str(tmp_path)
        data = TestClient(create_app(config)).get("/api/v1/health").json()
        assert data["status"] == "degraded"
        assert data["problems"]

    def test_info(self, client):
        """Info exposes name, default version and capabilities."""
        data = client.get("/api/v1/info").json()
        assert data["name"] == "pz-xml"
        assert data["config"]["default_schema_version"] == "01.05"
        assert data["capabilities"]["xsd_validation"] is True


class TestSchemaEndpoints:
    """Tests for schema listing and form description."""

    def test_list_schemas(self, client):
        """All registered versions are listed with namespaces."""
        data = client.get("/api/v1/schemas").json()
        assert data["versions"] == ["01.03", "01.04", "01.05"]
        assert data["default"] == "01.05"
        assert data["namespaces"]["01.03"].endswith("/01.03")

    def test_get_schema(self, client):
        """A known version returns its sections and required fields."""
        response = client.get("/api/v1/schemas/01.05")
        assert response.status_code == 200
        data = response.json()
        assert data["version"] == "01.05"
        assert [s["id"] for s in data["sections"]][0] == "generalInfo"
        assert "generalInfo.documentNumber" in data["requiredFields"]

    def test_unknown_schema(self, client):
        """An unknown version is a 404."""
        assert client.get("/api/v1/schemas/99.99").status_code == 404


class TestGenerateEndpoint:
    """Tests for POST /api/v1/generate."""

    def test_generate_and_validate(self, client, form_data):
        """Generation returns XML plus the validation result."""
        response = client.post("/api/v1/generate", json={
            "formData": form_data, "schemaVersion": "01.05",
        })
        assert response.status_code == 200
        data = response.json()
        assert data["xml"].startswith('<?xml version="1.0" encoding="UTF-8"?>')
        assert data["schemaVersion"] == "01.05"
        assert data["missingRequired"] == []
        assert data["validation"]["valid"] is True

    def test_generate_without_validation(self, client, form_data):
        """With validate false no validation block is returned."""
        data = client.post("/api/v1/generate", json={
            "formData": form_data, "validate": False,
        }).json()
        assert "validation" not in data
        assert data["schemaVersion"] == "01.05"

    def test_invalid_xml_still_returned(self, client, form_data):
        """Invalid XML is returned together with the failed validation."""
        del form_data["generalInfo"]["documentDate"]
        data = client.post("/api/v1/generate", json={"formData": form_data}).json()
        assert data["xml"]
        assert data["missingRequired"] == ["generalInfo.documentDate"]
        assert data["validation"]["valid"] is False

    def test_unknown_version(self, client, form_data):
        """An unknown schema version is a 400."""
        response = client.post("/api/v1/generate", json={
            "formData": form_data, "schemaVersion": "99.99",
        })
        assert response.status_code == 400
        assert "99.99" in response.json()["detail"]

    def test_strict_mode(self, form_data):
        """Strict mode rejects missing required fields with their paths."""
        config = PipelineConfig()
        config.generation.strict_required = True
        del form_data["designer"]["name"]
        response = TestClient(create_app(config)).post("/api/v1/generate", json={"formData": form_data})
        assert response.status_code == 400
        assert response.json()["detail"]["missing"] == ["designer.name"]


class TestValidateEndpoint:
    """Tests for POST /api/v1/validate."""

    def test_valid_xml(self, client, form_data):
        """Generated XML validates through the endpoint."""
        xml_text = client.post("/api/v1/generate", json={"formData": form_data}).json()["xml"]
        data = client.post("/api/v1/validate", json={
            "xmlContent": xml_text, "schemaVersion": "01.05",
        }).json()
        assert data == {"valid": True, "errors": [], "schemaVersion": "01.05"}

    def test_empty_content_reported_not_rejected(self, client):
        """Empty content is an input error in a 200 response."""
        response = client.post("/api/v1/validate", json={"xmlContent": "", "schemaVersion": "01.05"})
        assert response.status_code == 200
        data = response.json()
        assert data["valid"] is False
        assert data["errors"][0]["type"] == "input_error"

    def test_missing_version(self, client):
        """A missing version yields an invalid result without a version."""
        data = client.post("/api/v1/validate", json={"xmlContent": "<a/>"}).json()
        assert data["valid"] is False
        assert data["schemaVersion"] is None

    def test_malformed_xml(self, client):
        """Malformed XML is reported as a parse error."""
        data = client.post("/api/v1/validate", json={
            "xmlContent": "<ExplanatoryNote>", "schemaVersion": "01.05",
        }).json()
        assert data["errors"][0]["type"] == "xml_parse_error"


class TestFormValidateEndpoint:
    """Tests for POST /api/v1/form/validate."""

    def test_valid_form(self, client, form_data):
        """The sample form passes form validation."""
        data = client.post("/api/v1/form/validate", json={"formData": form_data}).json()
        assert data == {"valid": True, "errors": [], "schemaVersion": "01.05"}

    def test_problems_listed(self, client, form_data):
        """Required and checksum problems are listed by path."""
        form_data["contractor"]["inn"] = "7707083890"
        del form_data["generalInfo"]["projectName"]
        data = client.post("/api/v1/form/validate", json={"formData": form_data}).json()
        assert data["valid"] is False
        assert {"path": "generalInfo.projectName", "type": "required",
                "message": "Required field is empty"} in data["errors"]
        assert any(e["path"] == "contractor.inn" and e["type"] == "inn" for e in data["errors"])

    def test_unknown_version(self, client, form_data):
        """Form validation for an unknown version is a 404."""
        response = client.post("/api/v1/form/validate", json={
            "formData": form_data, "schemaVersion": "99.99",
        })
        assert response.status_code == 404

    def test_signer_problems_listed(self, client, form_data):
        """Problems inside repeated signers are reported with their index."""
        form_data["documentation"]["signers"][1]["FirstName"] = ""
        data = client.post("/api/v1/form/validate", json={"formData": form_data}).json()
        assert data["valid"] is False
        assert [e["path"] for e in data["errors"]] == ["documentation.signers.1.FirstName"]
