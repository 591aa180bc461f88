"""
Mapping Rules
=============

Declarative rules translating one form-data path into one XML location.

A mapping file stores rules as a JSON object keyed by dotted JSON path:

    "xmlMapping": {
        "namespace": "http://minstroyrf.gov.ru/schemas/explanatorynote/01.05",
        "mappings": {
            "generalInfo.documentDate": {
                "xmlPath": "ExplanatoryNote/GeneralInfo/DocDate",
                "required": true,
                "transformer": "formatDate"
            }
        }
    }

Rule order is the declaration order of the JSON object; XSD sequences
depend on it.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import logging

from pz_core.exceptions import MappingError
from pz_core.transform.values import TransformerKind

logger = logging.getLogger(__name__)

_RULE_KEYS = {"xmlPath", "required", "transformer", "enumMapping", "unit", "unitCode", "isArray"}


@dataclass
class MappingRule:
    """A single JSON path -> XML path instruction."""

    json_path: str
    xml_path: str
    required: bool = False
    transformer: Optional[TransformerKind] = None
    enum_mapping: Dict[str, Any] = field(default_factory=dict)
    unit: Optional[str] = None
    unit_code: Optional[str] = None
    is_array: bool = False

    @property
    def has_unit(self) -> bool:
        return bool(self.unit and self.unit_code)

    @property
    def xml_segments(self) -> List[str]:
        return [part for part in self.xml_path.split("/") if part]

    def unit_attributes(self) -> Dict[str, str]:
        """Attributes carried by unit-attributed leaves: both or none."""
        if not self.has_unit:
            return {}
        return {"unit": self.unit, "unitCode": self.unit_code}

    def to_dict(self) -> dict:
        """Convert to the mapping-file representation (without jsonPath)."""
        data: Dict[str, Any] = {"xmlPath": self.xml_path, "required": self.required}
        if self.transformer is not None:
            data["transformer"] = self.transformer.value
        if self.enum_mapping:
            data["enumMapping"] = dict(self.enum_mapping)
        if self.unit:
            data["unit"] = self.unit
        if self.unit_code:
            data["unitCode"] = self.unit_code
        if self.is_array:
            data["isArray"] = True
        return data

    @classmethod
    def from_dict(cls, json_path: str, data: dict) -> 'MappingRule':
        """
        Create a rule from its mapping-file representation.

        Raises:
            MappingError: If the rule is malformed
        """
        if not json_path or not isinstance(json_path, str):
            raise MappingError("jsonPath must be a non-empty string")
        if not isinstance(data, dict):
            raise MappingError("rule must be an object", json_path)

        xml_path = data.get("xmlPath")
        if not xml_path or not isinstance(xml_path, str):
            raise MappingError("xmlPath is required", json_path)

        unknown = set(data) - _RULE_KEYS
        if unknown:
            logger.debug(f"Ignoring unknown rule keys for {json_path}: {sorted(unknown)}")

        transformer = None
        transformer_name = data.get("transformer")
        if transformer_name:
            try:
                transformer = TransformerKind(transformer_name)
            except ValueError:
                raise MappingError(
                    f"unknown transformer '{transformer_name}' "
                    f"(expected one of: {', '.join(TransformerKind.names())})",
                    json_path,
                )

        enum_mapping = data.get("enumMapping") or {}
        if not isinstance(enum_mapping, dict):
            raise MappingError("enumMapping must be an object", json_path)

        unit = data.get("unit") or None
        unit_code = data.get("unitCode") or None
        if bool(unit) != bool(unit_code):
            raise MappingError("unit and unitCode must be given together", json_path)

        return cls(
            json_path=json_path,
            xml_path=xml_path,
            required=bool(data.get("required", False)),
            transformer=transformer,
            enum_mapping=enum_mapping,
            unit=unit,
            unit_code=unit_code,
            is_array=bool(data.get("isArray", False)),
        )


@dataclass
class SchemaMapping:
    """
    Ordered rule table for one schema version.

    The xmlPath segments of all rules must form a strict tree: no rule may
    target a node that another rule uses as a branch.
    """

    version: str
    namespace: str
    rules: List[MappingRule] = field(default_factory=list)
    is_default: bool = False

    def __post_init__(self):
        self.check_tree()

    def check_tree(self) -> None:
        """
        Verify that no leaf path is a strict prefix of another path.

        Raises:
            MappingError: On a leaf/branch conflict
        """
        leaves = {}
        for rule in self.rules:
            segments = tuple(rule.xml_segments)
            if not segments:
                raise MappingError("xmlPath has no segments", rule.json_path)
            leaves.setdefault(segments, rule)

        for segments, rule in leaves.items():
            for depth in range(1, len(segments)):
                prefix = segments[:depth]
                if prefix in leaves:
                    other = leaves[prefix]
                    raise MappingError(
                        f"xmlPath {rule.xml_path} descends through leaf "
                        f"{other.xml_path} (mapped from {other.json_path})",
                        rule.json_path,
                    )

    @property
    def required_paths(self) -> List[str]:
        return [rule.json_path for rule in self.rules if rule.required]

    def get_rule(self, json_path: str) -> Optional[MappingRule]:
        for rule in self.rules:
            if rule.json_path == json_path:
                return rule
        return None

    def __len__(self) -> int:
        return len(self.rules)

    def __iter__(self):
        return iter(self.rules)

    def to_dict(self) -> dict:
        return {
            "namespace": self.namespace,
            "mappings": {rule.json_path: rule.to_dict() for rule in self.rules},
        }

    @classmethod
    def from_dict(cls, version: str, data: dict, default_namespace: str) -> 'SchemaMapping':
        """
        Build a mapping from an ``xmlMapping`` object.

        Raises:
            MappingError: If ``mappings`` is missing or any rule is malformed
        """
        if not isinstance(data, dict):
            raise MappingError("xmlMapping must be an object")
        mappings = data.get("mappings")
        if not isinstance(mappings, dict):
            raise MappingError("xmlMapping.mappings must be an object")

        rules = [MappingRule.from_dict(json_path, rule) for json_path, rule in mappings.items()]
        namespace = data.get("namespace") or default_namespace
        return cls(version=version, namespace=namespace, rules=rules)
