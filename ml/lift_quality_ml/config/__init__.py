"""
Configuration module for the Weight Lifting Quality Report.
"""

from .settings import (
    CONFIG,
    CLASSES,
    MODEL_NAMES,
    Config,
    DataConfig,
    ValidationConfig,
    ModelSpec,
    ModelsConfig,
    OutputConfig,
    get_config,
    set_models,
    set_seed,
)

__all__ = [
    'CONFIG',
    'CLASSES',
    'MODEL_NAMES',
    'Config',
    'DataConfig',
    'ValidationConfig',
    'ModelSpec',
    'ModelsConfig',
    'OutputConfig',
    'get_config',
    'set_models',
    'set_seed',
]
