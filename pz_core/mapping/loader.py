"""
Mapping Loader
==============

Loads the ``xmlMapping`` table from the per-version JSON schema file and
caches it for the process lifetime.

Loading is lenient: any failure (missing file, invalid JSON, missing
``xmlMapping`` key, malformed rule) logs a warning and falls back to a
built-in minimal mapping, so generation never fails merely because a
mapping file is absent.
"""

from pathlib import Path
from typing import Optional
import json
import logging

from pz_core.cache import VersionCache
from pz_core.config.settings import SchemaConfig
from pz_core.exceptions import MappingError
from pz_core.mapping.rules import MappingRule, SchemaMapping
from pz_core.transform.values import TransformerKind

logger = logging.getLogger(__name__)


def default_rules():
    """Minimum required fields used when no mapping file can be loaded."""
    return [
        MappingRule("generalInfo.documentNumber", "ExplanatoryNote/GeneralInfo/DocNumber", required=True),
        MappingRule("generalInfo.documentDate", "ExplanatoryNote/GeneralInfo/DocDate", required=True,
                    transformer=TransformerKind.FORMAT_DATE),
        MappingRule("generalInfo.projectName", "ExplanatoryNote/ObjectInfo/ObjectName", required=True),
        MappingRule("objectInfo.objectType", "ExplanatoryNote/ObjectInfo/ObjectType", required=True),
        MappingRule("contractor.name", "ExplanatoryNote/Participants/Contractor/OrganizationName",
                    required=True),
        MappingRule("designer.name", "ExplanatoryNote/Participants/Designer/OrganizationName",
                    required=True),
    ]


def read_schema_document(path: Path) -> dict:
    """
    Read a JSON schema document from disk.

    Raises:
        FileNotFoundError: If the file does not exist
        json.JSONDecodeError: If the file is not valid JSON
    """
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


class MappingLoader:
    """
    Per-version mapping loader with a process-lifetime cache.

    Example:
        loader = MappingLoader(SchemaConfig())
        mapping = loader.load_mapping("01.05")
        for rule in mapping:
            print(rule.json_path, "->", rule.xml_path)
    """

    def __init__(self, schema_config: Optional[SchemaConfig] = None):
        self.schema_config = schema_config or SchemaConfig()
        self._cache: VersionCache[SchemaMapping] = VersionCache("mapping")

    def namespace_for(self, version: str) -> str:
        namespace = self.schema_config.namespaces.get(version)
        if namespace is None:
            # Same convention as the registered versions
            base = next(iter(self.schema_config.namespaces.values()), "").rsplit("/", 1)[0]
            namespace = f"{base}/{version}"
        return namespace

    def default_mapping(self, version: str) -> SchemaMapping:
        return SchemaMapping(
            version=version,
            namespace=self.namespace_for(version),
            rules=default_rules(),
            is_default=True,
        )

    def load_mapping(self, version: str) -> SchemaMapping:
        """Return the mapping for ``version``, loading it on first use."""
        return self._cache.get_or_load(version, self._load)

    def _load(self, version: str) -> SchemaMapping:
        path = self.schema_config.mapping_file(version)
        try:
            document = read_schema_document(path)
            if not isinstance(document, dict) or "xmlMapping" not in document:
                raise MappingError(f"No xmlMapping found in {path.name}")
            mapping = SchemaMapping.from_dict(
                version, document["xmlMapping"], self.namespace_for(version)
            )
        except (OSError, ValueError, MappingError) as e:
            logger.warning(
                f"Could not load mapping for schema {version} from {path}: {e}. "
                f"Falling back to default mapping"
            )
            return self.default_mapping(version)

        logger.info(f"Loaded xmlMapping for schema {version} ({len(mapping)} rules)")
        return mapping

    def clear_cache(self, version: Optional[str] = None) -> None:
        self._cache.clear(version)


_global_loader: Optional[MappingLoader] = None


def get_loader() -> MappingLoader:
    """Get or create the global mapping loader instance."""
    global _global_loader
    if _global_loader is None:
        _global_loader = MappingLoader()
    return _global_loader


def reset_loader() -> None:
    """Reset the global loader (drops all cached mappings)."""
    global _global_loader
    _global_loader = None


def load_mapping(version: str) -> SchemaMapping:
    """Load a mapping through the global loader."""
    return get_loader().load_mapping(version)
