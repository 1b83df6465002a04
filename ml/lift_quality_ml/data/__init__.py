"""
Data module for the Weight Lifting Quality Report.
"""

from .loading import (
    load_dataset,
    load_raw_data,
    label_series,
)

from .validate_data import (
    DataValidator,
    validate_dataset,
    ValidationResult,
    FileValidation,
)

from .preprocessing import (
    FeatureFilter,
    PCASummary,
    drop_bookkeeping_columns,
    missing_value_summary,
    drop_missing_columns,
    near_zero_variance,
    correlation_matrix,
    highly_correlated_pairs,
    pca_summary,
)

from .dataset import (
    DatasetSplit,
    split_dataset,
    class_distribution,
    stratification_report,
)

__all__ = [
    # Loading
    'load_dataset',
    'load_raw_data',
    'label_series',

    # Validation
    'DataValidator',
    'validate_dataset',
    'ValidationResult',
    'FileValidation',

    # Preprocessing
    'FeatureFilter',
    'PCASummary',
    'drop_bookkeeping_columns',
    'missing_value_summary',
    'drop_missing_columns',
    'near_zero_variance',
    'correlation_matrix',
    'highly_correlated_pairs',
    'pca_summary',

    # Partitioning
    'DatasetSplit',
    'split_dataset',
    'class_distribution',
    'stratification_report',
]
