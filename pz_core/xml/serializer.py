"""
XML Serializer
==============

Renders the intermediate tree as indented, escaped, namespace-qualified
explanatory note XML.

Output layout:

    <?xml version="1.0" encoding="UTF-8"?>
    <ExplanatoryNote xmlns="<ns>" xmlns:xsi="..." xsi:schemaLocation="<ns> explanatorynote-01-05.xsd" SchemaVersion="01.05">
      <GeneralInfo>
        <DocNumber>PZ-001</DocNumber>
      </GeneralInfo>
      <ObjectInfo>
        <TotalArea unit="m2" unitCode="055">1250.00</TotalArea>
      </ObjectInfo>
    </ExplanatoryNote>

The output is a pure function of its inputs; generating twice from the
same tree yields identical text.
"""

from typing import Any, Dict, List
import logging

from pz_core.xml.tree_builder import AttributedValue
from pz_core.xml.utils import XSI_NAMESPACE, escape_xml, schema_location

logger = logging.getLogger(__name__)

ROOT_ELEMENT = "ExplanatoryNote"
XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'


def format_scalar(value: Any) -> str:
    """Render a leaf value as text before escaping."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def format_attributes(attributes: Dict[str, Any]) -> str:
    return "".join(
        f' {name}="{escape_xml(format_scalar(value))}"'
        for name, value in attributes.items()
    )


class XMLSerializer:
    """
    Serializes intermediate trees to XML text.

    Example:
        serializer = XMLSerializer(indent=2)
        xml_text = serializer.serialize(tree, namespace, "01.05")
    """

    def __init__(self, indent: int = 2):
        self.indent = indent

    def serialize(self, tree: Dict[str, Any], namespace: str, schema_version: str) -> str:
        body = tree
        root = tree.get(ROOT_ELEMENT) if isinstance(tree, dict) else None
        if isinstance(root, dict):
            extra = [key for key in tree if key != ROOT_ELEMENT]
            if extra:
                logger.warning(f"Ignoring nodes outside {ROOT_ELEMENT}: {extra}")
            body = root

        root_open = (
            f'<{ROOT_ELEMENT} xmlns="{escape_xml(namespace)}"'
            f' xmlns:xsi="{XSI_NAMESPACE}"'
            f' xsi:schemaLocation="{escape_xml(schema_location(namespace, schema_version))}"'
            f' SchemaVersion="{escape_xml(schema_version)}">'
        )

        lines = [XML_DECLARATION, root_open]
        self._render_children(body, 1, lines)
        lines.append(f"</{ROOT_ELEMENT}>")
        return "\n".join(lines) + "\n"

    def _pad(self, depth: int) -> str:
        return " " * (self.indent * depth)

    def _render_children(self, node: Dict[str, Any], depth: int, lines: List[str]) -> None:
        for name, value in node.items():
            self._render_node(name, value, depth, lines)

    def _render_node(self, name: str, value: Any, depth: int, lines: List[str]) -> None:
        pad = self._pad(depth)

        if isinstance(value, (list, tuple)):
            for item in value:
                self._render_node(name, item, depth, lines)
        elif isinstance(value, AttributedValue):
            lines.append(
                f"{pad}<{name}{format_attributes(value.attributes)}>"
                f"{escape_xml(format_scalar(value.value))}</{name}>"
            )
        elif isinstance(value, dict):
            if not value:
                lines.append(f"{pad}<{name}/>")
                return
            lines.append(f"{pad}<{name}>")
            self._render_children(value, depth + 1, lines)
            lines.append(f"{pad}</{name}>")
        else:
            lines.append(f"{pad}<{name}>{escape_xml(format_scalar(value))}</{name}>")


def serialize_tree(tree: Dict[str, Any], namespace: str, schema_version: str,
                   indent: int = 2) -> str:
    """Serialize a tree with a one-off serializer."""
    return XMLSerializer(indent=indent).serialize(tree, namespace, schema_version)
