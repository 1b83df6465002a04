"""
Models module for the Weight Lifting Quality Report.
"""

from .classifiers import (
    MODEL_BUILDERS,
    available_models,
    create_model,
    param_grid,
    describe_model,
)

__all__ = [
    'MODEL_BUILDERS',
    'available_models',
    'create_model',
    'param_grid',
    'describe_model',
]
