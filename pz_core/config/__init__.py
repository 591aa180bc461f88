"""
Configuration Management
========================

Configuration utilities for the explanatory note pipeline.
"""

from pz_core.config.settings import (
    PipelineConfig,
    SchemaConfig,
    GenerationConfig,
    ExportConfig,
    load_config,
    save_config,
    validate_config,
    get_config,
    set_config,
    reset_config,
    get_default_config,
)

__all__ = [
    "PipelineConfig",
    "SchemaConfig",
    "GenerationConfig",
    "ExportConfig",
    "load_config",
    "save_config",
    "validate_config",
    "get_config",
    "set_config",
    "reset_config",
    "get_default_config",
]
