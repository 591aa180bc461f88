"""
Tree Builder
============

Builds the intermediate XML tree from form data and a schema mapping.

The tree is a nested insertion-ordered dict keyed by element name. A node
value is a nested dict, a scalar, an ``AttributedValue`` (value plus XML
attributes) or a list of those for repeated elements. Sibling order follows
rule declaration order, so later rules add siblings under nodes created by
earlier rules.

Building is best-effort: absent values are skipped and missing required
fields are only recorded and logged. Objects inside repeated fields lose their
empty values and any key that is not an XML element name.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List
import logging
import re

from pz_core.mapping.rules import MappingRule, SchemaMapping
from pz_core.transform.values import apply_transformer
from pz_core.xml.paths import get_path, is_empty_value, set_path

logger = logging.getLogger(__name__)

XML_PATH_SEP = "/"

# Element names accepted for keys of repeated objects (no prefixes)
_XML_NAME = re.compile(r"^[^\W\d][\w.\-]*$")


@dataclass
class AttributedValue:
    """Leaf value carrying XML attributes (e.g. unit/unitCode)."""

    value: Any
    attributes: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"value": self.value, "attributes": dict(self.attributes)}


@dataclass
class BuildResult:
    """Tree plus bookkeeping from a single build."""

    tree: Dict[str, Any]
    missing_required: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    rules_applied: int = 0


class TreeBuilder:
    """
    Turns form data into an intermediate XML tree.

    Example:
        builder = TreeBuilder()
        result = builder.build_result(form_data, mapping)
        if result.missing_required:
            print("Missing:", result.missing_required)
        tree = result.tree
    """

    def build(self, form_data: dict, mapping: SchemaMapping) -> Dict[str, Any]:
        """Build and return only the tree."""
        return self.build_result(form_data, mapping).tree

    def build_result(self, form_data: dict, mapping: SchemaMapping) -> BuildResult:
        result = BuildResult(tree={})

        for rule in mapping.rules:
            value = get_path(form_data, rule.json_path)

            if is_empty_value(value):
                if rule.required:
                    logger.warning(f"Required field missing: {rule.json_path}")
                    result.missing_required.append(rule.json_path)
                continue

            if rule.is_array:
                if self._write_array(result.tree, rule, value):
                    result.rules_applied += 1
                else:
                    result.skipped.append(rule.json_path)
                continue

            self._write_scalar(result.tree, rule, value)
            result.rules_applied += 1

        logger.debug(
            f"Built XML tree for schema {mapping.version}: "
            f"{result.rules_applied} rules applied, "
            f"{len(result.missing_required)} required missing"
        )
        return result

    def _leaf(self, rule: MappingRule, value: Any) -> Any:
        if rule.has_unit:
            return AttributedValue(value=value, attributes=rule.unit_attributes())
        return value

    def _write_scalar(self, tree: dict, rule: MappingRule, value: Any) -> None:
        transformed = apply_transformer(rule.transformer, value)

        if rule.enum_mapping:
            key = _enum_key(transformed)
            if key is not None and key in rule.enum_mapping:
                transformed = rule.enum_mapping[key]

        set_path(tree, rule.xml_path, self._leaf(rule, transformed), sep=XML_PATH_SEP)

    def _write_array(self, tree: dict, rule: MappingRule, value: Any) -> bool:
        """Append one element per item; returns False when nothing was written."""
        if not isinstance(value, (list, tuple)):
            logger.warning(
                f"Expected a list for repeated field {rule.json_path}, "
                f"got {type(value).__name__}; skipping"
            )
            return False
        if not value:
            return False

        for item in value:
            if isinstance(item, dict):
                item = _clean_item(item, rule.json_path)
            transformed = apply_transformer(rule.transformer, item)
            set_path(tree, rule.xml_path, self._leaf(rule, transformed),
                     sep=XML_PATH_SEP, append=True)
        return True


def _clean_item(item: dict, json_path: str) -> dict:
    """
    Copy a repeated object without empty values or keys that are not
    element names. Nested objects and lists are cleaned the same way.
    """
    cleaned = {}
    for key, value in item.items():
        if not isinstance(key, str) or not _XML_NAME.match(key) or key.lower().startswith("xml"):
            logger.warning(f"Skipping key {key!r} in {json_path}: not a valid XML element name")
            continue
        if is_empty_value(value):
            continue
        if isinstance(value, dict):
            value = _clean_item(value, json_path)
        elif isinstance(value, (list, tuple)):
            value = [
                _clean_item(v, json_path) if isinstance(v, dict) else v
                for v in value if not is_empty_value(v)
            ]
        cleaned[key] = value
    return cleaned


def _enum_key(value: Any):
    """Enum tokens are JSON object keys, so scalars are matched as strings."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return None


def build_tree(form_data: dict, mapping: SchemaMapping) -> Dict[str, Any]:
    """Build an intermediate tree with a fresh builder."""
    return TreeBuilder().build(form_data, mapping)
