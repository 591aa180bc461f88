"""
Mapping Rule and Loader Tests

Run with: pytest tests/test_mapping_loader.py -v
"""

import json
import logging

import pytest

from pz_core.config.settings import SchemaConfig
from pz_core.exceptions import MappingError
from pz_core.mapping import MappingLoader, MappingRule, SchemaMapping, default_rules
from pz_core.transform import TransformerKind


@pytest.fixture
def schema_dir(tmp_path):
    """Schema directory with an empty json/ folder for custom mapping files."""
    (tmp_path / "json").mkdir()
    return tmp_path


def write_mapping(schema_dir, version, document):
    path = schema_dir / "json" / f"pz-{version}-schema.json"
    path.write_text(json.dumps(document, ensure_ascii=False), encoding="utf-8")
    return path


class TestMappingRule:
    """Tests for MappingRule.from_dict."""

    def test_full_rule(self):
        """All rule keys are parsed."""
        rule = MappingRule.from_dict("objectInfo.totalArea", {
            "xmlPath": "ExplanatoryNote/ObjectInfo/TotalArea",
            "required": True,
            "transformer": "formatDecimal",
            "unit": "м2",
            "unitCode": "055",
        })
        assert rule.transformer is TransformerKind.FORMAT_DECIMAL
        assert rule.required
        assert rule.has_unit
        assert rule.unit_attributes() == {"unit": "м2", "unitCode": "055"}
        assert rule.xml_segments == ["ExplanatoryNote", "ObjectInfo", "TotalArea"]

    def test_unknown_transformer_rejected(self):
        """Transformer names form a closed set."""
        with pytest.raises(MappingError, match="unknown transformer"):
            MappingRule.from_dict("a.b", {"xmlPath": "A/B", "transformer": "toUpper"})

    def test_missing_xml_path_rejected(self):
        """xmlPath is mandatory."""
        with pytest.raises(MappingError, match="xmlPath"):
            MappingRule.from_dict("a.b", {"required": True})

    @pytest.mark.parametrize("unit_keys", [{"unit": "м2"}, {"unitCode": "055"}])
    def test_half_unit_rejected(self, unit_keys):
        """unit and unitCode are only accepted as a pair."""
        with pytest.raises(MappingError, match="unit and unitCode"):
            MappingRule.from_dict("a.b", dict({"xmlPath": "A/B"}, **unit_keys))

    def test_bad_enum_mapping_rejected(self):
        """enumMapping must be an object."""
        with pytest.raises(MappingError, match="enumMapping"):
            MappingRule.from_dict("a.b", {"xmlPath": "A/B", "enumMapping": ["x"]})

    def test_round_trip_dict(self):
        """to_dict produces what from_dict reads."""
        data = {"xmlPath": "A/B", "required": False, "isArray": True}
        assert MappingRule.from_dict("a.b", data).to_dict() == data


class TestSchemaMapping:
    """Tests for the strict-tree check."""

    def test_leaf_branch_conflict(self):
        """A leaf may not also be used as a branch."""
        rules = [
            MappingRule("a", "Root/Node"),
            MappingRule("b", "Root/Node/Child"),
        ]
        with pytest.raises(MappingError, match="descends through leaf"):
            SchemaMapping("01.05", "urn:test", rules)

    def test_shared_prefix_allowed(self):
        """Rules may share branch nodes."""
        rules = [
            MappingRule("a", "Root/Group/First"),
            MappingRule("b", "Root/Group/Second"),
        ]
        mapping = SchemaMapping("01.05", "urn:test", rules)
        assert len(mapping) == 2
        assert mapping.get_rule("b").xml_path == "Root/Group/Second"

    def test_default_rules_form_a_tree(self):
        """The built-in rules pass the strict-tree check."""
        mapping = SchemaMapping("01.05", "urn:test", default_rules())
        assert mapping.required_paths == [
            "generalInfo.documentNumber",
            "generalInfo.documentDate",
            "generalInfo.projectName",
            "objectInfo.objectType",
            "contractor.name",
            "designer.name",
        ]


class TestMappingLoader:
    """Tests for MappingLoader."""

    def test_loads_bundled_mapping(self):
        """The bundled 01.05 mapping keeps declaration order."""
        mapping = MappingLoader().load_mapping("01.05")
        assert not mapping.is_default
        assert mapping.namespace == "http://minstroyrf.gov.ru/schemas/explanatorynote/01.05"
        paths = [rule.json_path for rule in mapping]
        assert paths[0] == "generalInfo.documentNumber"
        assert paths.index("objectInfo.totalArea") < paths.index("objectInfo.buildingVolume")
        assert mapping.get_rule("documentation.usedNorms").is_array

    @pytest.mark.parametrize("version", ["01.03", "01.04", "01.05"])
    def test_all_bundled_versions_load(self, version):
        """Every bundled mapping file loads without fallback."""
        mapping = MappingLoader().load_mapping(version)
        assert not mapping.is_default
        assert mapping.namespace.endswith(version)

    def test_missing_file_falls_back(self, schema_dir, caplog):
        """A missing mapping file falls back to the default with a warning."""
        loader = MappingLoader(SchemaConfig(schemas_dir=str(schema_dir)))
        with caplog.at_level(logging.WARNING):
            mapping = loader.load_mapping("01.05")
        assert mapping.is_default
        assert len(mapping) == 6
        assert "Falling back to default mapping" in caplog.text

    def test_invalid_json_falls_back(self, schema_dir):
        """Broken JSON falls back to the default rules."""
        (schema_dir / "json" / "pz-01.05-schema.json").write_text("{not json", encoding="utf-8")
        loader = MappingLoader(SchemaConfig(schemas_dir=str(schema_dir)))
        assert loader.load_mapping("01.05").is_default

    def test_missing_xml_mapping_key_falls_back(self, schema_dir):
        """A file without xmlMapping falls back."""
        write_mapping(schema_dir, "01.05", {"version": "01.05", "properties": {}})
        loader = MappingLoader(SchemaConfig(schemas_dir=str(schema_dir)))
        assert loader.load_mapping("01.05").is_default

    def test_malformed_rule_falls_back(self, schema_dir):
        """A malformed rule falls back instead of raising."""
        write_mapping(schema_dir, "01.05", {
            "xmlMapping": {"mappings": {"a.b": {"xmlPath": "A/B", "transformer": "nope"}}},
        })
        loader = MappingLoader(SchemaConfig(schemas_dir=str(schema_dir)))
        assert loader.load_mapping("01.05").is_default

    def test_namespace_defaults_from_config(self, schema_dir):
        """Without xmlMapping.namespace the configured namespace is used."""
        write_mapping(schema_dir, "01.05", {
            "xmlMapping": {"mappings": {"a.b": {"xmlPath": "ExplanatoryNote/A/B"}}},
        })
        loader = MappingLoader(SchemaConfig(schemas_dir=str(schema_dir)))
        mapping = loader.load_mapping("01.05")
        assert not mapping.is_default
        assert mapping.namespace == "http://minstroyrf.gov.ru/schemas/explanatorynote/01.05"

    def test_mapping_is_cached(self, schema_dir):
        """The file is read once; clear_cache forces a reload."""
        path = write_mapping(schema_dir, "01.05", {
            "xmlMapping": {"mappings": {"a.b": {"xmlPath": "ExplanatoryNote/A/B"}}},
        })
        loader = MappingLoader(SchemaConfig(schemas_dir=str(schema_dir)))
        first = loader.load_mapping("01.05")

        path.unlink()
        assert loader.load_mapping("01.05") is first

        loader.clear_cache()
        assert loader.load_mapping("01.05").is_default
