"""
Training module for the Weight Lifting Quality Report.
"""

from .trainer import (
    Trainer,
    TrainedModel,
    train_models,
)

__all__ = [
    'Trainer',
    'TrainedModel',
    'train_models',
]
