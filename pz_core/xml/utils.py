"""
XML Utility Functions
=====================

Small helpers shared by the serializer, the validator and tests: escaping,
tag names and schema-location formatting.
"""

from typing import Any, Dict, List
import logging

from lxml import etree

logger = logging.getLogger(__name__)

XSI_NAMESPACE = "http://www.w3.org/2001/XMLSchema-instance"

# Ampersand first so produced entities are not escaped twice
_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&apos;"),
)


def escape_xml(text: Any) -> str:
    """
    Escape the five XML special characters.

    Non-string values are converted with ``str``; None becomes "".

    Example:
        >>> escape_xml('A & "B" <C>')
        'A &amp; &quot;B&quot; &lt;C&gt;'
    """
    if text is None:
        return ""
    result = str(text)
    for char, entity in _ESCAPES:
        result = result.replace(char, entity)
    return result


def schema_file_name(version: str) -> str:
    """Return the XSD file name advertised for a schema version."""
    return f"explanatorynote-{version.replace('.', '-')}.xsd"


def schema_location(namespace: str, version: str) -> str:
    """Build the ``xsi:schemaLocation`` value for a namespace and version."""
    return f"{namespace} {schema_file_name(version)}"


def local_name(element: Any) -> str:
    """
    Extract local name from element tag, stripping any namespace prefix.

    Example:
        >>> elem = etree.Element("{http://minstroyrf.gov.ru/x}DocDate")
        >>> local_name(elem)
        'DocDate'
    """
    tag = element.tag
    if not isinstance(tag, str):
        return ""
    if tag.startswith("{"):
        return tag.split("}", 1)[1]
    return tag


def find_elements_by_local_name(root: Any, name: str) -> List[Any]:
    """Find all elements with a given local name (ignoring namespace)."""
    return [elem for elem in root.iter() if local_name(elem) == name]


def get_element_path(element: Any) -> str:
    """
    Get XPath-like path to an element using local names.

    Returns:
        Path string like "/ExplanatoryNote/UsedNorms/UsedNorm[2]"
    """
    parts = []
    current = element

    while current is not None:
        name = local_name(current)
        parent = current.getparent()

        if parent is not None:
            siblings = [s for s in parent if local_name(s) == name]
            if len(siblings) > 1:
                parts.append(f"{name}[{siblings.index(current) + 1}]")
            else:
                parts.append(name)
        else:
            parts.append(name)

        current = parent

    return "/" + "/".join(reversed(parts))


def create_safe_parser() -> etree.XMLParser:
    """Parser with entity expansion and network access disabled."""
    return etree.XMLParser(
        resolve_entities=False,
        no_network=True,
        huge_tree=False,
        remove_blank_text=False,
    )


def parse_xml_text(xml_text: str) -> etree._Element:
    """
    Parse XML text (which may carry an encoding declaration).

    lxml rejects unicode input with an encoding declaration, so the text is
    encoded to UTF-8 bytes first.

    Raises:
        etree.XMLSyntaxError: If the text is not well-formed
    """
    return etree.fromstring(xml_text.encode("utf-8"), create_safe_parser())


def element_to_dict(element: Any) -> Dict[str, Any]:
    """
    Convert an element to a nested dict keyed by local names.

    Repeated children become lists, attributed leaves become
    ``{"value": ..., "attributes": {...}}``. Used to inspect generated XML.
    """
    children = list(element)
    if not children:
        text = element.text or ""
        if element.attrib:
            return {"value": text, "attributes": dict(element.attrib)}
        return text  # type: ignore[return-value]

    result: Dict[str, Any] = {}
    for child in children:
        if not isinstance(child.tag, str):
            continue
        name = local_name(child)
        value = element_to_dict(child)
        if name in result:
            if not isinstance(result[name], list):
                result[name] = [result[name]]
            result[name].append(value)
        else:
            result[name] = value
    return result
