"""
Utility modules for the Weight Lifting Quality Report.
"""

from .logging_utils import (
    setup_logging,
    get_logger,
    TrainingLogger,
)

__all__ = [
    'setup_logging',
    'get_logger',
    'TrainingLogger',
]
