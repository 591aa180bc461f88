"""
Configuration Settings
======================

Configuration dataclasses for the explanatory note pipeline.
"""

from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Optional, List, Dict, Any
import json
import logging
import os

import yaml

logger = logging.getLogger(__name__)

# Bundled schema assets live next to the package sources
PACKAGE_SCHEMAS_DIR = Path(__file__).resolve().parent.parent / "schemas"

NAMESPACE_BASE = "http://minstroyrf.gov.ru/schemas/explanatorynote"


@dataclass
class SchemaConfig:
    """Schema asset locations and version registry."""

    schemas_dir: str = str(PACKAGE_SCHEMAS_DIR)
    json_subdir: str = "json"
    xsd_subdir: str = "ministry"
    default_version: str = "01.05"
    namespaces: Dict[str, str] = field(default_factory=lambda: {
        '01.03': f"{NAMESPACE_BASE}/01.03",
        '01.04': f"{NAMESPACE_BASE}/01.04",
        '01.05': f"{NAMESPACE_BASE}/01.05",
    })
    # 01.04 shares the 01.05 XSD during the transitional period
    xsd_files: Dict[str, str] = field(default_factory=lambda: {
        '01.03': "expertise-01.03/conclusion-01-03.xsd",
        '01.04': "pz-01.05/explanatorynote-01-05.xsd",
        '01.05': "pz-01.05/explanatorynote-01-05.xsd",
    })

    @property
    def json_dir(self) -> Path:
        return Path(self.schemas_dir) / self.json_subdir

    @property
    def xsd_dir(self) -> Path:
        return Path(self.schemas_dir) / self.xsd_subdir

    @property
    def supported_versions(self) -> List[str]:
        return sorted(self.xsd_files.keys())

    def mapping_file(self, version: str) -> Path:
        return self.json_dir / f"pz-{version}-schema.json"

    def xsd_path(self, version: str) -> Optional[Path]:
        relative = self.xsd_files.get(version)
        if relative is None:
            return None
        return self.xsd_dir / relative


@dataclass
class GenerationConfig:
    """XML generation options."""

    indent: int = 2
    # Lenient by default: missing required fields are only logged
    strict_required: bool = False


@dataclass
class ExportConfig:
    """Export-related configuration."""

    output_dir: str = "output"
    encoding: str = "utf-8"
    file_pattern: str = "{document_id}.xml"


@dataclass
class PipelineConfig:
    """
    Complete pipeline configuration.

    Example:
        config = PipelineConfig()
        config.generation.strict_required = True
        save_config(config, Path("pz-config.yaml"))
    """

    schema: SchemaConfig = field(default_factory=SchemaConfig)
    generation: GenerationConfig = field(default_factory=GenerationConfig)
    export: ExportConfig = field(default_factory=ExportConfig)

    log_level: str = "INFO"

    # Custom extensions
    custom: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'schema': asdict(self.schema),
            'generation': asdict(self.generation),
            'export': asdict(self.export),
            'log_level': self.log_level,
            'custom': self.custom,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'PipelineConfig':
        """Create from dictionary."""
        config = cls()

        if 'schema' in data:
            config.schema = SchemaConfig(**data['schema'])
        if 'generation' in data:
            config.generation = GenerationConfig(**data['generation'])
        if 'export' in data:
            config.export = ExportConfig(**data['export'])

        if 'log_level' in data:
            config.log_level = data['log_level']
        if 'custom' in data:
            config.custom = data['custom']

        return config

    @classmethod
    def from_env(cls) -> 'PipelineConfig':
        """
        Create configuration from environment variables.

        Environment variable naming:
        - PZXML_SCHEMAS_DIR
        - PZXML_DEFAULT_VERSION
        - PZXML_OUTPUT_DIR
        - PZXML_STRICT_REQUIRED
        - PZXML_LOG_LEVEL
        """
        config = cls()

        if env_schemas := os.environ.get("PZXML_SCHEMAS_DIR"):
            config.schema.schemas_dir = env_schemas
        if env_version := os.environ.get("PZXML_DEFAULT_VERSION"):
            config.schema.default_version = env_version
        if env_output := os.environ.get("PZXML_OUTPUT_DIR"):
            config.export.output_dir = env_output
        if env_strict := os.environ.get("PZXML_STRICT_REQUIRED"):
            config.generation.strict_required = env_strict.lower() in ("true", "1", "yes")
        if env_level := os.environ.get("PZXML_LOG_LEVEL"):
            config.log_level = env_level.upper()

        return config


def load_config(config_path: Path) -> PipelineConfig:
    """
    Load configuration from file.

    Supports JSON and YAML formats based on file extension.

    Args:
        config_path: Path to config file

    Returns:
        PipelineConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If file format is not supported
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    suffix = config_path.suffix.lower()

    with open(config_path, 'r', encoding='utf-8') as f:
        if suffix in ['.yaml', '.yml']:
            data = yaml.safe_load(f) or {}
        elif suffix == '.json':
            data = json.load(f)
        else:
            raise ValueError(f"Unsupported config format: {suffix}")

    logger.info(f"Loaded configuration from {config_path}")
    return PipelineConfig.from_dict(data)


def save_config(config: PipelineConfig, config_path: Path) -> None:
    """
    Save configuration to file.

    Supports JSON and YAML formats based on file extension.

    Raises:
        ValueError: If file format is not supported
    """
    suffix = config_path.suffix.lower()
    data = config.to_dict()

    if suffix not in ['.yaml', '.yml', '.json']:
        raise ValueError(f"Unsupported config format: {suffix}")

    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, 'w', encoding='utf-8') as f:
        if suffix == '.json':
            json.dump(data, f, indent=2, ensure_ascii=False)
        else:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False, allow_unicode=True)

    logger.info(f"Saved configuration to {config_path}")


def validate_config(config: PipelineConfig) -> List[str]:
    """
    Validate configuration and return list of errors.

    Returns:
        List of error messages (empty if valid)
    """
    errors = []

    if config.schema.default_version not in config.schema.xsd_files:
        errors.append(f"Default schema version has no XSD: {config.schema.default_version}")

    for version in config.schema.xsd_files:
        if version not in config.schema.namespaces:
            errors.append(f"Schema version {version} has no namespace")

    if not config.schema.json_dir.is_dir():
        errors.append(f"Mapping directory not found: {config.schema.json_dir}")

    for version in config.schema.supported_versions:
        xsd_path = config.schema.xsd_path(version)
        if xsd_path is not None and not xsd_path.exists():
            errors.append(f"XSD file not found for {version}: {xsd_path}")

    if config.generation.indent < 0:
        errors.append("Indent must not be negative")

    if config.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        errors.append(f"Unknown log level: {config.log_level}")

    return errors


def get_default_config() -> PipelineConfig:
    """Get default configuration."""
    return PipelineConfig()


_global_config: Optional[PipelineConfig] = None


def get_config() -> PipelineConfig:
    """
    Get the global configuration instance.

    Returns the cached configuration or creates a new one from environment.
    """
    global _global_config
    if _global_config is None:
        _global_config = PipelineConfig.from_env()
    return _global_config


def set_config(config: PipelineConfig) -> None:
    """Set the global configuration instance."""
    global _global_config
    _global_config = config


def reset_config() -> None:
    """Reset the global configuration to default."""
    global _global_config
    _global_config = None
