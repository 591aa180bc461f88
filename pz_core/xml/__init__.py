"""
XML Processing
==============

Path resolution, intermediate tree building, serialization and shared
XML helpers.
"""

from pz_core.xml.paths import (
    get_path,
    set_path,
    split_path,
    is_empty_value,
)

from pz_core.xml.utils import (
    escape_xml,
    local_name,
    find_elements_by_local_name,
    get_element_path,
    parse_xml_text,
    element_to_dict,
    schema_location,
    XSI_NAMESPACE,
)

from pz_core.xml.tree_builder import (
    AttributedValue,
    BuildResult,
    TreeBuilder,
    build_tree,
)

from pz_core.xml.serializer import (
    XMLSerializer,
    serialize_tree,
    ROOT_ELEMENT,
)

__all__ = [
    "get_path",
    "set_path",
    "split_path",
    "is_empty_value",
    "escape_xml",
    "local_name",
    "find_elements_by_local_name",
    "get_element_path",
    "parse_xml_text",
    "element_to_dict",
    "schema_location",
    "XSI_NAMESPACE",
    "AttributedValue",
    "BuildResult",
    "TreeBuilder",
    "build_tree",
    "XMLSerializer",
    "serialize_tree",
    "ROOT_ELEMENT",
]
